"""Ray data structure for the path tracer.

A ray is an origin and a direction; points along it are ``origin + t *
direction``. The direction is not required to be unit length: camera rays
and scattered rays keep whatever length their construction produced.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.ray import Ray, ray_at, vec3
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> ray_at(ray, 2.5)  # (0, 0, -2.5)
"""

import taichi as ti

from pathtracer.core.vector import vec3


@ti.dataclass
class Ray:
    """Half-line starting at origin.

    Attributes:
        origin: Start point.
        direction: Direction, any nonzero length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Point at parameter t, i.e. origin + t * direction.

    t is measured in multiples of the direction vector, so it is a distance
    only when the direction has unit length.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi kernel."""
    return Ray(origin=origin, direction=direction)
