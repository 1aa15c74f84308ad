"""Config-driven front end to the integrator's render target.

ProgressiveRenderer adds samples in batches, reporting after each batch
through a callback or a generator, and can start over with reset().

Because every sample is seeded from (seed, pixel, sample index), stopping
and resuming never changes the result: rendering 10 then 90 samples gives
the same image as rendering 100 at once.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>> from pathtracer.config import RenderConfig
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>> from pathtracer.scene.builders import create_random_scene, default_camera
    >>> from pathtracer.scene.world import World
    >>>
    >>> config = RenderConfig(width=400, height=225, samples_per_pixel=100)
    >>> create_random_scene(World(), seed=config.seed)
    >>> setup_camera(default_camera(config.aspect_ratio))
    >>> renderer = ProgressiveRenderer(config)
    >>> renderer.render()  # Render config.samples_per_pixel SPP
    >>> image = renderer.get_image_numpy()
"""

from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from pathtracer.config import RenderConfig
from pathtracer.core.integrator import (
    clear_render_target,
    get_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)

# Called as callback(samples_so_far, samples_when_done)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """Accumulates samples for the scene and camera currently loaded.

    The renderer delegates to the global integrator buffers (which are
    Taichi fields), so only one renderer should be active at a time.

    Attributes:
        config: The render configuration (size, depth, seed).
    """

    def __init__(self, config: RenderConfig | None = None) -> None:
        """Initialize the progressive renderer and clear the render target.

        Args:
            config: Render configuration. Defaults to RenderConfig().
        """
        self.config = config if config is not None else RenderConfig()
        setup_render_target(self.config.width, self.config.height)

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulator for a fresh render with the same config."""
        clear_render_target()

    def render(
        self,
        num_samples: int | None = None,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Add samples to the image, calling back after every batch.

        Repeated calls keep refining the same image until reset() is called.

        Args:
            num_samples: Number of samples to add. Defaults to
                config.samples_per_pixel.
            batch_size: Number of samples to render before each callback.
            callback: Receives (samples_so_far, samples_when_done) after each
                batch.

        Raises:
            ValueError: If batch_size is not positive.

        Example:
            >>> renderer.render(64, batch_size=16, callback=lambda n, total: print(n, total))
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int | None = None,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Generator form of render(): yields after each batch.

        Args:
            num_samples: Number of samples to add. Defaults to
                config.samples_per_pixel.
            batch_size: Number of samples to render before each yield.

        Yields:
            (samples_so_far, samples_when_done).

        Raises:
            ValueError: If batch_size is not positive.

        Example:
            >>> for done, total in renderer.render_progressive(100, batch_size=25):
            ...     if done >= 50:
            ...         break
        """
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if num_samples is None:
            num_samples = self.config.samples_per_pixel
        if num_samples <= 0:
            return

        goal = self.sample_count + num_samples
        for start in range(0, num_samples, batch_size):
            render_image(
                min(batch_size, num_samples - start),
                max_depth=self.config.max_depth,
                seed=self.config.seed,
            )
            yield self.sample_count, goal

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the averaged linear image, shape (height, width, 3), top row first."""
        return get_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected 8-bit image, shape (height, width, 3)."""
        from pathtracer.preview.export import image_to_uint8

        return image_to_uint8(self.get_image_numpy())

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer({self.width}x{self.height}, "
            f"spp={self.sample_count}, seed={self.config.seed})"
        )
