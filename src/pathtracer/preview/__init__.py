"""Preview module for image output.

Components:
    display: Averaging, gamma 2 correction and 8-bit quantization
    export: Plain-text PPM (P3) and PNG export

Example:
    >>> from src.pathtracer.preview import write_ppm
    >>> write_ppm(renderer.render_rows(), sys.stdout, width, height)
"""

from .display import apply_gamma, average_samples, quantize, to_display_rgb
from .export import (
    format_ppm_header,
    format_ppm_row,
    load_png,
    save_png_from_array,
    save_ppm,
    write_ppm,
)

__all__ = [
    # Display conversion
    "average_samples",
    "apply_gamma",
    "quantize",
    "to_display_rgb",
    # Export functions
    "format_ppm_header",
    "format_ppm_row",
    "write_ppm",
    "save_ppm",
    "save_png_from_array",
    "load_png",
]
