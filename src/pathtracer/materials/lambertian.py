"""Lambertian (ideal diffuse) material implementation.

Diffuse surfaces scatter toward ``normal + random_unit_vector()``. Points
drawn uniformly on the unit sphere and offset by the normal are distributed
proportionally to cos(theta) around the normal, the Lambertian
distribution, so the attenuation is simply the albedo.

Example:
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, rng = scatter_lambertian(albedo, normal, rng)
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

import taichi as ti

from pathtracer.core.sampling import random_unit_vector
from pathtracer.core.vector import near_zero, vec3
from pathtracer.materials.material import MaterialKind, validate_albedo


@dataclass(frozen=True)
class Lambertian:
    """Host-side description of a diffuse material.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: Sequence[float]

    kind: ClassVar[MaterialKind] = MaterialKind.LAMBERTIAN

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))

    def packed(self) -> tuple[int, tuple[float, float, float], float, float]:
        """Return (kind, albedo, fuzz, ior) for device storage."""
        return int(self.kind), self.albedo, 0.0, 1.0


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, rng: ti.u32):
    """Sample a scattered ray direction for a Lambertian surface.

    Diffuse surfaces always scatter. If the random unit vector almost exactly
    cancels the normal, the normal itself is used to avoid a zero-length
    direction.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The surface normal at the hit point (unit length).
        rng: The current generator state.

    Returns:
        A tuple (scattered_direction, attenuation, rng) where the direction
        is not normalized and the attenuation equals the albedo.
    """
    unit, state = random_unit_vector(rng)
    scattered_direction = normal + unit

    if near_zero(scattered_direction):
        scattered_direction = normal

    return scattered_direction, albedo, state
