"""Materials module for scattering models.

Components:
    material: MaterialKind enum, the tagged device Material struct and
        parameter validation
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like refraction and reflection (Schlick Fresnel)

Each material provides a host-side frozen dataclass, validated on
construction, and a Taichi scatter function that takes and returns the
random generator state.
"""

from .dielectric import (
    Dielectric,
    cannot_refract,
    fresnel_reflectance,
    refraction_ratio,
    scatter_dielectric,
)
from .lambertian import Lambertian, scatter_lambertian
from .material import Material, MaterialKind, validate_albedo, validate_positive
from .metal import Metal, scatter_metal

__all__ = [
    "MaterialKind",
    "Material",
    "validate_albedo",
    "validate_positive",
    # Lambertian
    "Lambertian",
    "scatter_lambertian",
    # Metal
    "Metal",
    "scatter_metal",
    # Dielectric
    "Dielectric",
    "scatter_dielectric",
    "refraction_ratio",
    "cannot_refract",
    "fresnel_reflectance",
]
