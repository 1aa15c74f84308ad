"""Matplotlib-based preview display for rendered images.

Example:
    >>> from pathtracer.preview.display import show_preview
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(config)
    >>> renderer.render()
    >>> show_preview(renderer.get_image_numpy(), samples=renderer.sample_count)
"""

import numpy as np
import numpy.typing as npt

# Averaged colors are encoded with gamma 2 (square root) for display
DISPLAY_GAMMA = 2.0

# Upper clamp before quantization, so 1.0 maps to 255 and not 256
MAX_DISPLAY_VALUE = 0.999


def apply_gamma(
    image: npt.NDArray[np.floating],
    gamma: float = DISPLAY_GAMMA,
) -> npt.NDArray[np.float64]:
    """Apply gamma correction for display.

    Negative values are clamped to 0 before encoding.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value (default 2, a square root).

    Returns:
        Gamma corrected image (values above 1 are kept).
    """
    image = np.maximum(np.asarray(image, dtype=np.float64), 0.0)

    if gamma == 1.0:
        return image
    if gamma == 2.0:
        return np.sqrt(image)

    return np.power(image, 1.0 / gamma)


def process_image_for_display(
    image: npt.NDArray[np.floating],
    gamma: float = DISPLAY_GAMMA,
) -> npt.NDArray[np.float64]:
    """Gamma-encode a linear image and clamp it to [0, MAX_DISPLAY_VALUE]."""
    return np.clip(apply_gamma(image, gamma), 0.0, MAX_DISPLAY_VALUE)


def show_preview(
    image: npt.NDArray[np.floating],
    *,
    samples: int | None = None,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display a linear image as a Matplotlib figure.

    Args:
        image: Linear image array of shape (H, W, 3), top row first.
        samples: Samples per pixel, shown in the default title.
        title: Custom title.
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(image)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = "Render Preview"
        if samples is not None:
            title += f" - {samples} SPP"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
