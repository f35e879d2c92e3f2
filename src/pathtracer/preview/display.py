"""Linear radiance to display color conversion.

A pixel's radiance estimate is the sum of its camera samples. For display it
is averaged, gamma corrected with gamma 2 (a square root), clamped and
quantized to 8 bits:

    c_out = int(256 * clamp(sqrt(sum / n), 0, 0.999))

The 0.999 clamp keeps full-intensity channels at 255 instead of 256.

Example:
    >>> import numpy as np
    >>> from src.pathtracer.preview.display import to_display_rgb
    >>> to_display_rgb(np.array([4.0, 1.0, 0.0]), samples=4)
    array([255, 128,   0], dtype=uint8)
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

# Gamma 2: display value = linear ** (1 / DISPLAY_GAMMA)
DISPLAY_GAMMA = 2.0

# Upper clamp before scaling to [0, 256)
MAX_INTENSITY = 0.999


def average_samples(
    color_sum: npt.NDArray[np.floating],
    samples: int,
) -> npt.NDArray[np.float64]:
    """Divide accumulated radiance by the number of samples.

    Raises:
        ValueError: If samples is not positive.
    """
    if samples <= 0:
        raise ValueError(f"samples must be positive, got {samples}")
    return np.asarray(color_sum, dtype=np.float64) / samples


def apply_gamma(
    image: npt.NDArray[np.floating],
    gamma: float = DISPLAY_GAMMA,
) -> npt.NDArray[np.float64]:
    """Apply gamma correction: c^(1/gamma). Negative inputs map to 0."""
    image = np.maximum(np.asarray(image, dtype=np.float64), 0.0)
    if gamma == 2.0:
        return np.sqrt(image)
    return np.power(image, 1.0 / gamma)


def quantize(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Clamp to [0, 0.999] and scale to integers in [0, 255]."""
    clamped = np.clip(image, 0.0, MAX_INTENSITY)
    return (256.0 * clamped).astype(np.uint8)


def to_display_rgb(
    color_sum: npt.NDArray[np.floating],
    samples: int,
) -> npt.NDArray[np.uint8]:
    """Convert summed linear radiance to 8-bit display colors.

    Works on a single color, a row or a whole image; the last axis holds
    the RGB channels.

    Args:
        color_sum: Sum of the camera samples of each pixel.
        samples: Number of samples that were summed.

    Returns:
        Array of the same shape with dtype uint8.
    """
    return quantize(apply_gamma(average_samples(color_sum, samples)))
