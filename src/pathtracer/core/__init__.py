"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    vector: Double-precision vec3 type and vector algebra
    ray: Ray data structure
    sampling: Seedable random stream and sampling distributions
    integrator: Depth-bounded path tracing (ray_color) and the render loop
    progressive: Progressive accumulation wrapper around the integrator

All compute-intensive operations use Taichi kernels.
"""

from .ray import Ray, make_ray, ray_at
from .sampling import (
    random_float,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_range,
    random_unit_vector,
    seed_rng,
)
from .vector import (
    NEAR_ZERO_EPSILON,
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    normalize,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: integrator and progressive are NOT imported here because they declare
# Taichi fields. Import them directly once Taichi has been initialised.

__all__ = [
    "vec3",
    "NEAR_ZERO_EPSILON",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "near_zero",
    "reflect",
    "refract",
    "schlick_reflectance",
    "Ray",
    "ray_at",
    "make_ray",
    "seed_rng",
    "random_float",
    "random_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
]
