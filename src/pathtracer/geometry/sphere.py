"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the
intersection routine used by the scene aggregate.

Substituting the ray ``o + t d`` into ``|p - c|^2 = r^2`` gives a quadratic
in t. With ``oc = o - c`` the half-b form is:

    a      = d . d
    half_b = oc . d
    c      = oc . oc - r^2
    disc   = half_b^2 - a c

and the roots are ``(-half_b -/+ sqrt(disc)) / a``. The smaller root is
tested first, so the first root inside the interval is the nearest surface
point. Tangent rays (disc == 0) are reported as misses.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel:
    >>> # rec = hit_sphere(origin, direction, Sphere(center=c, radius=0.5), 0.001, 1e9)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import make_ray, ray_at
from pathtracer.core.vector import length_squared, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive).
    """

    center: vec3
    radius: ti.f64


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The unit surface normal, always oriented against the
            incoming ray. Only valid if hit == 1.
        front_face: 1 if the ray arrived from the outward-normal side of the
            surface, 0 if it arrived from inside. Only valid if hit == 1.
        object_id: Index of the scene object that was hit, used to look up
            its material. -1 when not set.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32
    object_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        object_id=-1,
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Test for ray-sphere intersection within the open interval (t_min, t_max).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Lower bound of accepted t values (excludes self-intersection).
        t_max: Upper bound of accepted t values (closest hit found so far).

    Returns:
        A HitRecord for the nearest root strictly inside (t_min, t_max).
        Check the hit field to determine if an intersection occurred.
    """
    oc = ray_origin - sphere.center
    a = length_squared(ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = length_squared(oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Nearer root first; fall back to the farther one
        t = (-half_b - sqrt_d) / a
        valid = t_min < t and t < t_max
        if not valid:
            t = (-half_b + sqrt_d) / a
            valid = t_min < t and t < t_max

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_at(make_ray(ray_origin, ray_direction), t)

            # Unit length because |hit_point - center| == radius
            outward_normal = (hit_point - sphere.center) / sphere.radius

            if tm.dot(ray_direction, outward_normal) < 0.0:
                is_front_face = 1
                hit_normal = outward_normal
            else:
                # Ray is inside the sphere, hitting the back face
                is_front_face = 0
                hit_normal = -outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
        object_id=-1,
    )

