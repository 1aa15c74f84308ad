"""Image export utilities for rendered images.

Averaged linear colors are converted to 8-bit values by gamma 2 encoding
(square root), clamping to [0, 0.999] and scaling by 256.

Supported formats:
    - PPM (plain-text P3, one "r g b" line per pixel, top row first)
    - PNG (8-bit via Pillow)

Example:
    >>> from pathtracer.preview.export import save_png, save_ppm
    >>>
    >>> image = renderer.get_image_numpy()
    >>> save_ppm(image, "output.ppm")
    >>> save_png(image, "output.png")
"""

from os import PathLike
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathtracer.preview.display import process_image_for_display


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to uint8 for display/export.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    processed = process_image_for_display(image)
    return (256.0 * processed).astype(np.uint8)


def write_ppm(image: npt.NDArray[np.floating], stream: TextIO) -> None:
    """Write a linear image to a text stream as a plain PPM (P3).

    Args:
        image: Linear image array of shape (H, W, 3), top row first.
        stream: Writable text stream.

    Raises:
        ValueError: If the image is not of shape (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")

    height, width, _ = image.shape
    pixels = image_to_uint8(image)

    stream.write(f"P3\n{width} {height}\n255\n")
    for row in pixels:
        for r, g, b in row:
            stream.write(f"{r} {g} {b}\n")


def save_ppm(image: npt.NDArray[np.floating], filepath: str | PathLike[str]) -> None:
    """Save a linear image as a plain PPM file."""
    with open(filepath, "w", encoding="ascii") as f:
        write_ppm(image, f)


def save_png(image: npt.NDArray[np.floating], filepath: str | PathLike[str]) -> None:
    """Save a linear image as an 8-bit PNG file."""
    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(filepath)

