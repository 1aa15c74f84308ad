"""Seedable random stream and derived sampling distributions.

Taichi's built-in ``ti.random`` keeps one hidden state per thread, so the
values a pixel receives depend on thread scheduling. The path tracer instead
threads an explicit 32-bit generator state through every function that draws
random numbers: each call takes the current state and returns the drawn value
together with the advanced state. Every (seed, pixel, sample) triple gets its
own sub-stream from seed_rng(), which makes renders reproducible under
parallel execution.

Generator:
    - seed_rng(): Wang-hash chain of seed, pixel index and sample index
    - random_float(): xorshift32 step, top 24 bits mapped to [0, 1)

Distributions:
    - random_range(): uniform scalar in [lo, hi)
    - random_in_unit_sphere(): uniform point inside the unit ball
    - random_unit_vector(): uniform direction on the unit sphere
    - random_in_unit_disk(): uniform point inside the unit disk (z = 0)

Example:
    >>> # Within a Taichi kernel:
    >>> # rng = seed_rng(seed, pixel_index, sample_index)
    >>> # u, rng = random_float(rng)
    >>> # direction, rng = random_unit_vector(rng)
"""

import taichi as ti

from pathtracer.core.vector import length_squared, normalize, vec3

# Rejection sampling attempts before giving up (acceptance rate is > 50%)
MAX_REJECTION_ATTEMPTS = 100

# Maps a 24-bit integer onto [0, 1)
_FLOAT_SCALE = 1.0 / 16777216.0

# Substituted for an all-zero state, which xorshift cannot leave
_NONZERO_STATE = 0x6D2B79F5


@ti.func
def _wang_hash(key: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer (Thomas Wang's integer hash)."""
    h = (key ^ ti.cast(61, ti.u32)) ^ (key >> ti.cast(16, ti.u32))
    h = h * ti.cast(9, ti.u32)
    h = h ^ (h >> ti.cast(4, ti.u32))
    h = h * ti.cast(0x27D4EB2D, ti.u32)
    h = h ^ (h >> ti.cast(15, ti.u32))
    return h


@ti.func
def seed_rng(seed: ti.u32, pixel_index: ti.u32, sample_index: ti.u32) -> ti.u32:
    """Derive the generator state for one pixel sample.

    Args:
        seed: The render seed.
        pixel_index: Linear pixel index (j * width + i).
        sample_index: Index of the sample within the pixel.

    Returns:
        A nonzero generator state.
    """
    state = _wang_hash(seed)
    state = _wang_hash(state ^ pixel_index)
    state = _wang_hash(state ^ sample_index)
    if state == ti.cast(0, ti.u32):
        state = ti.cast(_NONZERO_STATE, ti.u32)
    return state


@ti.func
def random_float(rng: ti.u32):
    """Draw a uniform value in [0, 1).

    Args:
        rng: The current generator state.

    Returns:
        A tuple (value, rng) with the drawn value and the advanced state.
    """
    state = rng
    state = state ^ (state << ti.cast(13, ti.u32))
    state = state ^ (state >> ti.cast(17, ti.u32))
    state = state ^ (state << ti.cast(5, ti.u32))
    value = ti.cast(state >> ti.cast(8, ti.u32), ti.f64) * _FLOAT_SCALE
    return value, state


@ti.func
def random_range(lo: ti.f64, hi: ti.f64, rng: ti.u32):
    """Draw a uniform value in [lo, hi).

    Returns:
        A tuple (value, rng).
    """
    u, state = random_float(rng)
    return lo + (hi - lo) * u, state


@ti.func
def random_in_unit_sphere(rng: ti.u32):
    """Generate a random point inside the unit sphere.

    Uses rejection sampling from the enclosing cube.

    Args:
        rng: The current generator state.

    Returns:
        A tuple (point, rng) where point has length < 1.
    """
    state = rng
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, state = random_range(-1.0, 1.0, state)
            y, state = random_range(-1.0, 1.0, state)
            z, state = random_range(-1.0, 1.0, state)
            p = vec3(x, y, z)
            len_sq = length_squared(p)
            if len_sq > 0.0 and len_sq < 1.0:
                found = True
    return p, state


@ti.func
def random_unit_vector(rng: ti.u32):
    """Generate a random unit vector uniformly distributed on the sphere.

    Added to a surface normal, it yields the cosine-weighted direction
    distribution used for diffuse scattering.

    Returns:
        A tuple (direction, rng).
    """
    p, state = random_in_unit_sphere(rng)
    return normalize(p), state


@ti.func
def random_in_unit_disk(rng: ti.u32):
    """Generate a random point inside the unit disk in the xy-plane.

    Used to sample the camera lens for depth of field.

    Returns:
        A tuple (point, rng) where point is (x, y, 0) with x^2 + y^2 < 1.
    """
    state = rng
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, state = random_range(-1.0, 1.0, state)
            y, state = random_range(-1.0, 1.0, state)
            p = vec3(x, y, 0.0)
            if length_squared(p) < 1.0:
                found = True
    return p, state
