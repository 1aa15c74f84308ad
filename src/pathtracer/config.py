"""Render configuration and backend initialisation.

The rendering core keeps no hidden global parameters: image size, sample
count, recursion depth and the random seed travel together in a
RenderConfig that is handed to the render entry points.

Example:
    >>> from pathtracer.config import RenderConfig, init_backend
    >>> init_backend("cpu")
    >>> config = RenderConfig(width=400, height=225, samples_per_pixel=100)
    >>> config.aspect_ratio
    1.7777777777777777
"""

from dataclasses import dataclass

import taichi as ti

# Defaults of the reference render
DEFAULT_ASPECT_RATIO = 16.0 / 9.0
DEFAULT_WIDTH = 400
DEFAULT_HEIGHT = int(DEFAULT_WIDTH / DEFAULT_ASPECT_RATIO)
DEFAULT_SAMPLES_PER_PIXEL = 100
DEFAULT_MAX_DEPTH = 50
DEFAULT_SEED = 123456

# Render target is preallocated to this size to avoid kernel recompilation
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Seeds are passed to kernels as i32
MAX_SEED = 2**31 - 1

_ARCHS = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
}


@dataclass
class RenderConfig:
    """Parameters of one render invocation.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of random samples averaged per pixel.
        max_depth: Maximum number of bounces per path. Paths still bouncing
            when the budget runs out contribute black.
        seed: Seed of the random stream. Two renders with the same seed,
            scene, camera and configuration produce identical images.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_depth: int = DEFAULT_MAX_DEPTH
    seed: int = DEFAULT_SEED

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel < 0:
            raise ValueError(f"samples_per_pixel must be >= 0, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if not 0 <= self.seed <= MAX_SEED:
            raise ValueError(f"seed must be in [0, {MAX_SEED}], got {self.seed}")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height


def init_backend(arch: str = "cpu", *, debug: bool = False) -> None:
    """Initialise Taichi for rendering in double precision.

    Must be called before importing modules that declare Taichi fields
    (camera, scene storage, integrator).

    Args:
        arch: Backend name: "cpu", "gpu", "cuda" or "vulkan".
        debug: Enable Taichi debug mode, which turns on device-side
            assertions such as the zero-length normalisation check.

    Raises:
        ValueError: If the backend name is unknown.
    """
    if arch not in _ARCHS:
        raise ValueError(f"Unknown backend: {arch!r} (expected one of {sorted(_ARCHS)})")
    ti.init(arch=_ARCHS[arch], default_fp=ti.f64, debug=debug)
