"""Progressive renderer for iterative sample accumulation.

This module provides a convenient wrapper around the core integrator that supports:
- Progressive rendering that refines over time
- Batch rendering (multiple SPP in one call)
- Progress callbacks for status output
- Easy reset and re-render functionality

The ProgressiveRenderer class encapsulates the render target state and provides
a clean interface for batch rendering workflows.

Example:
    >>> from pathtracer import init_taichi
    >>> init_taichi()
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>> from pathtracer.scene.random_spheres import create_random_spheres_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=1)
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(300, 200)
    >>> renderer.render(100)  # Render 100 SPP
    >>> pixels = renderer.get_pixels()
"""

from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from pathtracer.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_accumulated_image_numpy,
    get_total_samples,
    render_image,
    set_max_depth,
    setup_render_target,
)
from pathtracer.preview.export import gamma_correct, save_ppm, to_pixels

# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer keeps its own width, height and bounce limit and delegates
    to the global integrator buffers (which are Taichi fields).

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum number of bounces per path.
    """

    def __init__(self, width: int, height: int, max_depth: int = MAX_DEPTH) -> None:
        """Initialize the progressive renderer.

        Args:
            width: Image width in pixels (2 to 2048).
            height: Image height in pixels (2 to 2048).
            max_depth: Maximum number of bounces per path.

        Raises:
            ValueError: If dimensions are out of range or max_depth is negative.
        """
        setup_render_target(width, height, max_depth)
        self._width = width
        self._height = height
        self._max_depth = max_depth

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def max_depth(self) -> int:
        """Get the bounce limit."""
        return self._max_depth

    @max_depth.setter
    def max_depth(self, value: int) -> None:
        set_max_depth(value)
        self._max_depth = value

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Reset the accumulator for a new render.

        Clears the color buffer and sample count without changing the image
        dimensions.
        """
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset accumulator.

        Raises:
            ValueError: If dimensions are out of range.
        """
        setup_render_target(width, height, self._max_depth)
        self._width = width
        self._height = height

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Accumulates the specified number of samples into the existing buffer.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples", file=sys.stderr)
            >>> renderer.render(100, batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is not positive.
        """
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_accumulated_numpy(self) -> npt.NDArray[np.float64]:
        """Get the per-pixel sample sums, shape (height, width, 3), top row first."""
        return get_accumulated_image_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the gamma-corrected image in [0, inf), shape (height, width, 3).

        Raises:
            RuntimeError: If no samples have been rendered yet.
        """
        return gamma_correct(self.get_accumulated_numpy(), self._require_samples())

    def get_pixels(self) -> npt.NDArray[np.int64]:
        """Get the final 8-bit pixel values, shape (height, width, 3).

        Raises:
            RuntimeError: If no samples have been rendered yet.
        """
        return to_pixels(self.get_accumulated_numpy(), self._require_samples())

    def save_ppm(self, filepath: str) -> None:
        """Write the current image as an ASCII PPM file."""
        save_ppm(self, filepath)

    def _require_samples(self) -> int:
        samples = self.sample_count
        if samples == 0:
            raise RuntimeError("No samples rendered yet. Call render() first.")
        return samples

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth}, samples={self.sample_count})"
        )
