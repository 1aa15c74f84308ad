"""Path tracing integrator: depth-bounded ray_color and the render loop.

A camera ray is followed through the scene. At every hit the material
decides whether the path continues and how much of each color channel
survives the bounce; the running product of those factors (the throughput)
multiplies the sky color once the path escapes. Paths that are absorbed or
still bouncing when the depth budget runs out contribute black.

Samples are accumulated per pixel as a running average, so rendering can be
resumed at any time and an image rendered in several calls is identical to
one rendered in a single call.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>> from pathtracer.core.integrator import render_image, setup_render_target
    >>> from pathtracer.scene.builders import create_random_scene, default_camera
    >>> from pathtracer.scene.world import World
    >>>
    >>> create_random_scene(World(), seed=123456)
    >>> setup_camera(default_camera(16.0 / 9.0))
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=100, max_depth=50, seed=123456)
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.thin_lens import get_ray_jittered
from pathtracer.config import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, MAX_SEED
from pathtracer.core.sampling import seed_rng
from pathtracer.core.vector import normalize, vec3
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.dielectric import scatter_dielectric
from pathtracer.materials.lambertian import scatter_lambertian
from pathtracer.materials.material import Material, MaterialKind
from pathtracer.materials.metal import scatter_metal
from pathtracer.scene.world import hit_world, load_material

# =============================================================================
# Constants
# =============================================================================

# Minimum t for a valid hit (excludes the surface a ray starts on)
T_MIN = 1e-3
T_MAX = math.inf

# Sky gradient endpoints: y = -1 gives white, y = +1 gives blue
SKY_BOTTOM_COLOR = vec3(1.0, 1.0, 1.0)
SKY_TOP_COLOR = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color accumulation buffer (preallocated to max size)
_color_buffer = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel; also the sample index used to seed the next sample
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Result slots for single-ray kernels
_traced_color = ti.Vector.field(3, dtype=ti.f64, shape=())
_traced_state = ti.field(dtype=ti.u32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT to avoid Taichi kernel
    recompilation.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def _check_seed(seed: int) -> None:
    if not 0 <= seed <= MAX_SEED:
        raise ValueError(f"seed must be in [0, {MAX_SEED}], got {seed}")


# =============================================================================
# Background and Material Dispatch
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky color seen along a direction that escapes the scene.

    Linear blend from SKY_BOTTOM_COLOR to SKY_TOP_COLOR on 0.5 * (y + 1) of the
    unit direction.
    """
    unit_direction = normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * SKY_BOTTOM_COLOR + a * SKY_TOP_COLOR


@ti.func
def scatter_material(material: Material, incident_direction: vec3, rec: HitRecord, rng: ti.u32):
    """Dispatch to the scattering function of the hit material.

    Args:
        material: The material of the hit object.
        incident_direction: The incoming ray direction.
        rec: The hit record (normal faces against the incoming ray).
        rng: The current generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, rng) where:
        - scattered_direction: The new ray direction.
        - attenuation: The color attenuation for this bounce.
        - did_scatter: 1 if the path continues, 0 if absorbed.
        - rng: The advanced generator state.
    """
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    state = rng

    if material.kind == int(MaterialKind.LAMBERTIAN):
        scattered_direction, attenuation, state = scatter_lambertian(material.albedo, rec.normal, state)
        did_scatter = 1

    elif material.kind == int(MaterialKind.METAL):
        scattered_direction, attenuation, did_scatter, state = scatter_metal(
            material.albedo, material.fuzz, incident_direction, rec.normal, state
        )

    elif material.kind == int(MaterialKind.DIELECTRIC):
        scattered_direction, attenuation, state = scatter_dielectric(
            material.ior, incident_direction, rec.normal, rec.front_face, state
        )
        did_scatter = 1

    return scattered_direction, attenuation, did_scatter, state


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32, rng: ti.u32):
    """Estimate the color carried back along a ray.

    Follows the path for at most max_depth bounces. Each bounce starts from
    the previous hit point with the scattered direction; T_MIN keeps the new
    ray from hitting the surface it leaves.

    Args:
        origin: The ray origin.
        direction: The ray direction (need not be normalized).
        max_depth: Remaining bounce budget. 0 returns black.
        rng: The current generator state.

    Returns:
        A tuple (color, rng).
    """
    ray_origin = origin
    ray_direction = direction
    throughput = vec3(1.0, 1.0, 1.0)
    color = vec3(0.0, 0.0, 0.0)
    state = rng

    # Active flag for path continuation (no break in ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = hit_world(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background_color(ray_direction)
                active = 0
            else:
                material = load_material(rec.object_id)
                scattered_direction, attenuation, did_scatter, state = scatter_material(
                    material, ray_direction, rec, state
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = rec.point
                    ray_direction = scattered_direction

    return color, state


@ti.func
def render_sample_impl(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
    sample_index: ti.i32,
) -> vec3:
    """Render one sample of one pixel.

    The random stream is derived from (seed, pixel, sample_index) only, so
    the result does not depend on the order in which samples are computed.

    Returns:
        The sample color with NaN, infinite and negative components set to 0.
    """
    pixel_index = pixel_j * width + pixel_i
    rng = seed_rng(ti.cast(seed, ti.u32), ti.cast(pixel_index, ti.u32), ti.cast(sample_index, ti.u32))

    origin, direction, state = get_ray_jittered(pixel_i, pixel_j, width, height, rng)
    color, state = ray_color(origin, direction, max_depth, state)

    for c in ti.static(range(3)):
        if tm.isnan(color[c]):
            color[c] = 0.0
        if tm.isinf(color[c]):
            color[c] = 0.0
        if color[c] < 0.0:
            color[c] = 0.0

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32, seed: ti.i32):
    """Render one sample per pixel and fold it into the running average."""
    for i, j in ti.ndrange(width, height):
        n = _sample_count[i, j]
        color = render_sample_impl(i, j, width, height, max_depth, seed, n)

        # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        _sample_count[i, j] = n + 1
        _color_buffer[i, j] += (color - _color_buffer[i, j]) / ti.cast(n + 1, ti.f64)


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
    sample_index: ti.i32,
) -> vec3:
    """Render a single sample for a specific pixel without accumulating it."""
    result = vec3(0.0, 0.0, 0.0)
    # Single-iteration outer loop keeps the bounce loop serial
    for _ in range(1):
        result = render_sample_impl(pixel_i, pixel_j, width, height, max_depth, seed, sample_index)
    return result


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32, rng: ti.u32):
    """Trace one ray and store the color and final generator state."""
    for _ in range(1):
        color, state = ray_color(origin, direction, max_depth, rng)
        _traced_color[None] = color
        _traced_state[None] = state


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    rng_state: int = 1,
) -> tuple[tuple[float, float, float], int]:
    """Compute ray_color for a single ray from Python.

    The scene must have been built beforehand; no camera or render target is
    needed.

    Args:
        origin: The ray origin.
        direction: The ray direction (need not be normalized).
        max_depth: Bounce budget. 0 returns black.
        rng_state: Generator state to start from, in [1, 2**32).
            xorshift never leaves state 0, so 0 is rejected.

    Returns:
        A tuple ((R, G, B), rng_state) with the advanced generator state.

    Raises:
        ValueError: If max_depth is negative or rng_state is out of range.
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")
    if not 0 < rng_state < 2**32:
        raise ValueError(f"rng_state must be in [1, 2**32), got {rng_state}")

    _trace_single_ray(vec3(*origin), vec3(*direction), max_depth, rng_state)
    color = _traced_color[None]
    return (float(color[0]), float(color[1]), float(color[2])), int(_traced_state[None])


def render_sample(
    pixel_i: int,
    pixel_j: int,
    *,
    max_depth: int = 50,
    seed: int = 0,
    sample_index: int = 0,
) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        max_depth: Bounce budget per path.
        seed: Seed of the random stream.
        sample_index: Index of the sample within the pixel.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If seed is outside [0, MAX_SEED].
    """
    _check_render_target_initialized()
    _check_seed(seed)

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, max_depth, seed, sample_index)

    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1, max_depth: int = 50, seed: int = 0) -> None:
    """Render the image with the specified number of samples per pixel.

    Progressively accumulates samples into the color buffer. Can be called
    multiple times to add more samples; the result equals a single call
    with the total number of samples.

    Args:
        num_samples: Number of samples to render per pixel.
        max_depth: Bounce budget per path.
        seed: Seed of the random stream.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If num_samples or max_depth is negative, or seed is
            outside [0, MAX_SEED].
    """
    _check_render_target_initialized()
    _check_seed(seed)
    if num_samples < 0:
        raise ValueError(f"num_samples must be >= 0, got {num_samples}")
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")

    width, height = get_image_dimensions()

    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth, seed)


def get_total_samples() -> int:
    """Get the number of samples per pixel accumulated so far.

    Every pixel receives one sample per pass, so pixel (0, 0) is
    representative.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_image_numpy() -> npt.NDArray[np.float64]:
    """Get the averaged linear image as a NumPy array.

    The array shape is (height, width, 3) with dtype float64, top row first.
    Values are not clamped or gamma corrected.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (Taichi uses bottom-left origin, images use top-left)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float64)
