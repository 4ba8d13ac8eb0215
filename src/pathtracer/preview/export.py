"""Image export utilities for rendered images.

This module turns accumulated sample sums into 8-bit pixels and writes them
as ASCII PPM (P3) files.

Conversion per channel:
    1. Divide the sum by the sample count.
    2. Gamma correct with gamma 2 (square root).
    3. Clamp to [0, 0.999], multiply by 256 and truncate.

Example:
    >>> from pathtracer.preview.export import save_ppm
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(300, 200)
    >>> renderer.render(100)
    >>> save_ppm(renderer, "output.ppm")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from pathtracer.core.progressive import ProgressiveRenderer

# Quantization bounds; 0.999 * 256 truncates to 255
CLAMP_MIN = 0.0
CLAMP_MAX = 0.999
QUANTIZE_SCALE = 256.0

PPM_MAX_VALUE = 255


def gamma_correct(
    accumulated: npt.NDArray[np.floating[npt.NBitBase]],
    samples: int,
) -> npt.NDArray[np.float64]:
    """Average accumulated sums and apply gamma 2 correction.

    Args:
        accumulated: Per-pixel color sums of any shape ending in 3.
        samples: Number of samples that went into each sum.

    Returns:
        sqrt(accumulated / samples) as float64.

    Raises:
        ValueError: If samples is not positive.
    """
    if samples <= 0:
        raise ValueError(f"samples must be positive, got {samples}")

    scaled = accumulated.astype(np.float64) / float(samples)
    # Negative sums cannot come from the estimator; keep sqrt real anyway
    return np.sqrt(np.maximum(scaled, 0.0))


def quantize(image: npt.NDArray[np.floating[npt.NBitBase]]) -> npt.NDArray[np.int64]:
    """Clamp to [0, 0.999], scale by 256 and truncate to integers in [0, 255]."""
    clamped = np.clip(image, CLAMP_MIN, CLAMP_MAX)
    return np.trunc(clamped * QUANTIZE_SCALE).astype(np.int64)


def to_pixels(
    accumulated: npt.NDArray[np.floating[npt.NBitBase]],
    samples: int,
) -> npt.NDArray[np.int64]:
    """Convert accumulated sums to 8-bit pixel values."""
    return quantize(gamma_correct(accumulated, samples))


def format_ppm(pixels: npt.NDArray[np.integer[npt.NBitBase]]) -> str:
    """Format pixels as an ASCII PPM (P3) document.

    Args:
        pixels: Integer array of shape (height, width, 3), top row first.

    Returns:
        The full PPM text: header lines "P3", "<width> <height>", "255",
        then one "r g b" line per pixel, rows top to bottom and columns left
        to right. Every line ends in a newline.

    Raises:
        ValueError: If pixels is not a (height, width, 3) array.
    """
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected pixels of shape (height, width, 3), got {pixels.shape}")

    height, width, _ = pixels.shape
    lines = ["P3", f"{width} {height}", str(PPM_MAX_VALUE)]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def write_ppm(pixels: npt.NDArray[np.integer[npt.NBitBase]], stream: TextIO) -> None:
    """Write pixels as ASCII PPM to an open text stream (e.g. sys.stdout)."""
    stream.write(format_ppm(pixels))


def save_ppm(renderer: ProgressiveRenderer, filepath: str) -> None:
    """Save the renderer's current image as an ASCII PPM file.

    Example:
        >>> renderer = ProgressiveRenderer(300, 200)
        >>> renderer.render(100)
        >>> save_ppm(renderer, "output.ppm")
    """
    pixels = renderer.get_pixels()
    with open(filepath, "w", encoding="ascii") as f:
        write_ppm(pixels, f)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
