"""Material variants shared by the scene storage and the integrator.

On the host, materials are described by small frozen dataclasses
(Lambertian, Metal, Dielectric). On the device they collapse into a single
tagged Material struct: ``kind`` selects the scattering behaviour, and only
the parameters relevant to that kind are meaningful.
"""

import math
from collections.abc import Sequence
from enum import IntEnum

import taichi as ti

from pathtracer.core.vector import vec3


class MaterialKind(IntEnum):
    """Enumeration of supported material kinds.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


@ti.dataclass
class Material:
    """Tagged material record used inside kernels.

    Attributes:
        kind: The MaterialKind value.
        albedo: Reflectance color (Lambertian and Metal).
        fuzz: Roughness of the reflection in [0, 1] (Metal).
        ior: Index of refraction (Dielectric).
    """

    kind: ti.i32
    albedo: vec3
    fuzz: ti.f64
    ior: ti.f64


def validate_albedo(albedo: Sequence[float]) -> tuple[float, float, float]:
    """Check an RGB albedo and return it as a float tuple.

    Raises:
        ValueError: If albedo does not have three components, or any
            component is outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if not 0.0 <= component <= 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return (float(albedo[0]), float(albedo[1]), float(albedo[2]))


def validate_positive(name: str, value: float) -> float:
    """Check that a scalar parameter is finite and strictly positive.

    Raises:
        ValueError: If value is not finite or not > 0.
    """
    if not math.isfinite(value) or value <= 0.0:
        raise ValueError(f"{name} must be a finite positive number, got {value}")
    return float(value)
