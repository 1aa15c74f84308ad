"""Preview module for output and visualization.

Components:
    display: Gamma encoding and Matplotlib-based preview
    export: PPM and PNG export, 8-bit conversion

Example:
    >>> from pathtracer.preview import save_ppm, show_preview
    >>> image = renderer.get_image_numpy()
    >>> save_ppm(image, "output.ppm")
    >>> show_preview(image, samples=renderer.sample_count)
"""

from pathtracer.preview.display import (
    DISPLAY_GAMMA,
    MAX_DISPLAY_VALUE,
    apply_gamma,
    process_image_for_display,
    show_preview,
)
from pathtracer.preview.export import (
    image_to_uint8,
    save_png,
    save_ppm,
    write_ppm,
)

__all__ = [
    # Display functions
    "DISPLAY_GAMMA",
    "MAX_DISPLAY_VALUE",
    "apply_gamma",
    "process_image_for_display",
    "show_preview",
    # Export functions
    "image_to_uint8",
    "write_ppm",
    "save_ppm",
    "save_png",
]
