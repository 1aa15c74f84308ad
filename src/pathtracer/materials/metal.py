"""Metal (specular reflective) material implementation.

Metals mirror the incoming direction about the normal:

    R = I - 2(I . N)N

and perturb the result by ``fuzz * random_in_unit_sphere()``. A perturbed
direction that ends up at or below the surface is absorbed, which is how a
rough metal loses grazing reflections.

Example:
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter, rng = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal, rng
    >>> # )
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from pathtracer.core.sampling import random_in_unit_sphere
from pathtracer.core.vector import normalize, reflect, vec3
from pathtracer.materials.material import MaterialKind, validate_albedo


@dataclass(frozen=True)
class Metal:
    """Host-side description of a metal material.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: The surface roughness. 0 is a perfect mirror; values above 1
            are clamped to 1.
    """

    albedo: Sequence[float]
    fuzz: float = 0.0

    kind: ClassVar[MaterialKind] = MaterialKind.METAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))
        if not math.isfinite(self.fuzz) or self.fuzz < 0.0:
            raise ValueError(f"Fuzz = {self.fuzz} must be a finite value >= 0.")
        object.__setattr__(self, "fuzz", min(float(self.fuzz), 1.0))

    def packed(self) -> tuple[int, tuple[float, float, float], float, float]:
        """Return (kind, albedo, fuzz, ior) for device storage."""
        return int(self.kind), self.albedo, self.fuzz, 1.0


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    rng: ti.u32,
):
    """Compute the scattered direction for a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The surface roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal, facing against the incoming ray.
        rng: The current generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, rng) where:
        - scattered_direction: The fuzzed reflection (not normalized).
        - attenuation: The color attenuation (equals albedo).
        - did_scatter: 1 if the direction leaves the surface, 0 if absorbed.
        - rng: The advanced generator state.
    """
    reflected = reflect(normalize(incident_direction), normal)

    offset, state = random_in_unit_sphere(rng)
    scattered_direction = reflected + fuzz * offset

    did_scatter = 0
    if tm.dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter, state
