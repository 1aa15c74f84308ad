"""Double-precision 3-vector type and vector algebra for Taichi kernels.

All helpers are Taichi functions (@ti.func) and operate on ``vec3``, a
3-component vector of f64. Arithmetic (add, sub, negate, scalar multiply
and divide, componentwise product) comes from Taichi's vector type itself.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.vector import vec3, reflect
    >>> # Use within a Taichi kernel:
    >>> # mirrored = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors (x, y, z: f64)
vec3 = ti.types.vector(3, ti.f64)

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared length of a vector.

    Prefer this over length() when only comparing magnitudes, as it avoids
    the square root.

    Args:
        v: The input vector.

    Returns:
        The squared Euclidean length of the vector.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The zero vector has no direction; normalising it is a caller error.
    The check below only runs when Taichi is initialised with debug=True.

    Args:
        v: The input vector (must not be zero-length).

    Returns:
        A unit vector in the same direction as v.
    """
    assert length_squared(v) > 0.0, "cannot normalize a zero-length vector"
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the right-handed cross product a x b."""
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to detect degenerate scatter directions.

    Args:
        v: The vector to check.

    Returns:
        1 if all components are below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, normal: vec3) -> vec3:
    """Reflect a vector about a normal: v - 2 (v . n) n.

    Args:
        v: The incoming direction (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The mirrored direction.
    """
    return v - 2.0 * tm.dot(v, normal) * normal


@ti.func
def refract(uv: vec3, normal: vec3, etai_over_etat: ti.f64) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The refracted ray is split into the component perpendicular to the
    normal, which scales by the index ratio, and the parallel component,
    which restores unit length.

    Only meaningful when the incidence angle is within the critical angle;
    callers must test for total internal reflection first.

    Args:
        uv: The incoming direction (unit length).
        normal: The surface normal, facing against uv (unit length).
        etai_over_etat: Ratio of refractive indices n_incident / n_transmitted.

    Returns:
        The refracted direction (unit length).
    """
    cos_theta = tm.min(-tm.dot(uv, normal), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f64, ref_idx: ti.f64) -> ti.f64:
    """Approximate Fresnel reflectance with Schlick's polynomial.

    R(cos) = r0 + (1 - r0) (1 - cos)^5 with r0 = ((1 - ref_idx) / (1 + ref_idx))^2

    Args:
        cosine: Cosine of the incidence angle.
        ref_idx: Ratio of refractive indices.

    Returns:
        The probability that the boundary reflects rather than transmits.
    """
    r0 = ((1.0 - ref_idx) / (1.0 + ref_idx)) ** 2
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)
