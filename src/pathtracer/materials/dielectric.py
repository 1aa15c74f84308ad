"""Dielectric (glass/water) material implementation.

Dielectrics never absorb light; at every hit they either reflect or refract.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when (n1 / n2) * sin(theta1) > 1
    - Schlick's approximation for the Fresnel reflectance

Outside the total internal reflection regime the choice between reflection
and refraction is made with one uniform draw against the Schlick
reflectance, so glass is correct in expectation over many samples without
tracing both branches.

Example:
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, rng = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face, rng
    >>> # )
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from pathtracer.core.sampling import random_float
from pathtracer.core.vector import normalize, reflect, refract, schlick_reflectance, vec3
from pathtracer.materials.material import MaterialKind, validate_positive


@dataclass(frozen=True)
class Dielectric:
    """Host-side description of a dielectric material.

    Attributes:
        ior: Index of refraction (> 0). Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    ior: float = 1.5

    kind: ClassVar[MaterialKind] = MaterialKind.DIELECTRIC

    def __post_init__(self) -> None:
        object.__setattr__(self, "ior", validate_positive("Index of refraction", self.ior))

    def packed(self) -> tuple[int, tuple[float, float, float], float, float]:
        """Return (kind, albedo, fuzz, ior) for device storage."""
        return int(self.kind), (1.0, 1.0, 1.0), 0.0, self.ior


@ti.func
def refraction_ratio(ior: ti.f64, front_face: ti.i32) -> ti.f64:
    """Ratio n_incident / n_transmitted for a ray hitting the surface.

    Entering from outside (front_face=1) goes from air into the material;
    otherwise the ray leaves the material.
    """
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def cannot_refract(ratio: ti.f64, cos_theta: ti.f64) -> ti.i32:
    """Total internal reflection test: ratio * sin(theta) > 1."""
    sin_theta = ti.sqrt(tm.max(0.0, 1.0 - cos_theta * cos_theta))
    return ratio * sin_theta > 1.0


@ti.func
def fresnel_reflectance(ratio: ti.f64, cos_theta: ti.f64) -> ti.f64:
    """Probability of reflection at the boundary.

    An index-matched boundary (ratio == 1) is optically invisible and never
    reflects; otherwise this is Schlick's approximation.
    """
    reflectance = 0.0
    if ratio != 1.0:
        reflectance = schlick_reflectance(cos_theta, ratio)
    return reflectance


@ti.func
def scatter_dielectric(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    rng: ti.u32,
):
    """Compute the scattered direction for a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal, facing against the incoming ray.
        front_face: 1 if the ray hits the outside of the surface,
            0 if it is inside the material hitting from within.
        rng: The current generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, rng) where:
        - scattered_direction: The reflected or refracted direction (unit length).
        - attenuation: White; clear glass absorbs nothing.
        - rng: The advanced generator state.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    ratio = refraction_ratio(ior, front_face)
    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)

    state = rng
    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract(ratio, cos_theta):
        scattered_direction = reflect(unit_direction, normal)
    else:
        u, state = random_float(state)
        if u < fresnel_reflectance(ratio, cos_theta):
            scattered_direction = reflect(unit_direction, normal)
        else:
            scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, attenuation, state
