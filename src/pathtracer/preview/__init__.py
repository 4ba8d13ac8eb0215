"""Preview module for image output.

Components:
    export: Gamma correction, quantization and ASCII PPM export

Example:
    >>> from pathtracer.preview import save_ppm
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(300, 200)
    >>> renderer.render(100)
    >>> save_ppm(renderer, "output.ppm")
"""

from pathtracer.preview.export import (
    compute_rmse,
    format_ppm,
    gamma_correct,
    quantize,
    save_ppm,
    to_pixels,
    write_ppm,
)

__all__ = [
    "gamma_correct",
    "quantize",
    "to_pixels",
    "format_ppm",
    "write_ppm",
    "save_ppm",
    "compute_rmse",
]
