"""Progressive renderer for iterative sample accumulation.

A thin stateful wrapper around the integrator's render target. Samples are
added one pass at a time, so the image can be inspected, saved, or shown
while it converges.

Example:
    >>> from pathtracer.core.settings import init_backend
    >>> init_backend("cpu")
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>> from pathtracer.scene.random_spheres import create_random_spheres_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(400, 225, max_bounces=50)
    >>> renderer.render(100)
    >>> renderer.save_image("random_spheres.png")
"""

import logging
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from pathtracer.core.integrator import (
    clear_render_target,
    get_image_numpy,
    get_image_rgb8,
    get_total_samples,
    render_image,
    setup_render_target,
)
from pathtracer.core.settings import DEFAULT_MAX_BOUNCES

logger = logging.getLogger(__name__)

# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer owns the width, height and bounce budget; the pixel sums
    themselves live in the integrator's Taichi fields, so only one renderer
    is meaningful at a time.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_bounces: Bounce budget of every traced path.
    """

    def __init__(self, width: int, height: int, max_bounces: int = DEFAULT_MAX_BOUNCES) -> None:
        """Initialize the progressive renderer.

        Raises:
            ValueError: If dimensions are invalid or max_bounces is not positive.
        """
        if max_bounces <= 0:
            raise ValueError(f"max_bounces must be positive, got {max_bounces}")
        self._width = width
        self._height = height
        self._max_bounces = max_bounces
        setup_render_target(width, height)
        logger.debug("Render target set up: %dx%d, max_bounces=%d", width, height, max_bounces)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def max_bounces(self) -> int:
        return self._max_bounces

    @property
    def sample_count(self) -> int:
        """Current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulated samples, keeping the image dimensions."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset the accumulator."""
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Add ``num_samples`` samples per pixel to the image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback called after each batch with
                (current_total_samples, target_total_samples).
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples in batches, yielding progress after each batch.

        Yields:
            Tuple of (current_total_samples, target_total_samples).
        """
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target_samples = self.sample_count + num_samples
        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self._max_bounces)
            remaining -= batch
            logger.debug("Rendered %d/%d samples per pixel", self.sample_count, target_samples)
            yield (self.sample_count, target_samples)

        logger.info("Finished %d samples per pixel", self.sample_count)

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Mean linear colour per pixel, shape (height, width, 3), top row first."""
        return get_image_numpy()

    def get_image_rgb8(self) -> npt.NDArray[np.uint8]:
        """Gamma-corrected 8-bit image, shape (height, width, 3)."""
        return get_image_rgb8()

    def save_image(self, filepath: str | Path) -> None:
        """Save the current image as a PNG file."""
        from pathtracer.preview.export import save_png_from_array

        save_png_from_array(self.get_image_rgb8(), filepath)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"max_bounces={self.max_bounces}, samples={self.sample_count})"
        )
