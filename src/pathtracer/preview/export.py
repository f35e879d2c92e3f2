"""Image export utilities for rendered images.

Supported formats:
    - PPM P3 (plain text), written row by row as rows arrive
    - PNG (8-bit via Pillow)

The PPM layout is the header ``P3\\n{width} {height}\\n255\\n`` followed by one
``r g b`` line per pixel, rows top to bottom.

Example:
    >>> import sys
    >>> from src.pathtracer.preview.export import write_ppm
    >>> renderer = ScanlineRenderer(scene, camera, settings)
    >>> write_ppm(renderer.render_rows(), sys.stdout, settings.width, settings.height)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Largest value of a channel in the PPM output
PPM_MAX_VALUE = 255


def format_ppm_header(width: int, height: int) -> str:
    """Format the plain-text PPM header."""
    return f"P3\n{width} {height}\n{PPM_MAX_VALUE}\n"


def format_ppm_row(row: npt.NDArray[np.uint8]) -> str:
    """Format one image row as PPM text, one ``r g b`` line per pixel.

    Args:
        row: Array of shape (W, 3) with 8-bit colors.

    Returns:
        The row text, terminated by a newline.
    """
    return "".join(f"{int(r)} {int(g)} {int(b)}\n" for r, g, b in row)


def write_ppm(
    rows: Iterable[tuple[int, npt.NDArray[np.uint8]]],
    stream: TextIO,
    width: int,
    height: int,
) -> int:
    """Stream rows into a plain-text PPM image.

    Rows must arrive in order, top row first, as produced by
    ``ScanlineRenderer.render_rows``.

    Args:
        rows: Iterable of (row_index, row) pairs.
        stream: Text stream to write to.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The number of rows written.

    Raises:
        ValueError: If a row arrives out of order or has the wrong width,
            or if the number of rows does not match the height.
    """
    stream.write(format_ppm_header(width, height))

    written = 0
    for row_index, row in rows:
        if row_index != written:
            raise ValueError(f"Expected row {written}, got row {row_index}")
        if len(row) != width:
            raise ValueError(f"Row {row_index} has {len(row)} pixels, expected {width}")
        stream.write(format_ppm_row(row))
        written += 1

    if written != height:
        raise ValueError(f"Wrote {written} rows, expected {height}")
    return written


def save_ppm(image: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save an 8-bit image array of shape (H, W, 3) as a plain-text PPM file."""
    height, width = image.shape[:2]
    with open(filepath, "w", encoding="ascii") as f:
        write_ppm(enumerate(image), f, width, height)


def save_png_from_array(image: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save an 8-bit image array of shape (H, W, 3) as a PNG file.

    Args:
        image: Display-ready image, row 0 at the top.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array is not an (H, W, 3) uint8 image.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {image.dtype}")

    pil_image = PILImage.fromarray(image)
    pil_image.save(filepath)


def load_png(filepath: str) -> npt.NDArray[np.uint8]:
    """Load a PNG file into an (H, W, 3) uint8 array."""
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.uint8)
