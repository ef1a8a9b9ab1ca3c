"""Image export utilities for rendered images.

Images are written as 8-bit RGB PNG files through Pillow. Linear colour
is converted with the same gamma-2 encoding used everywhere else in the
renderer (see ``pathtracer.core.color.linear_to_rgb8``).

Example:
    >>> from pathtracer.preview.export import save_png
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100)
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathtracer.core.color import linear_to_rgb8

if TYPE_CHECKING:
    from pathtracer.core.progressive import ProgressiveRenderer

logger = logging.getLogger(__name__)


def save_png(renderer: ProgressiveRenderer, filepath: str | Path) -> None:
    """Save the renderer's current image as a PNG file."""
    save_png_from_array(renderer.get_image_rgb8(), filepath)


def save_png_from_array(image: npt.NDArray[np.generic], filepath: str | Path) -> None:
    """Save an image array as a PNG file.

    Args:
        image: Array of shape (H, W, 3), row 0 at the top. uint8 arrays are
            written as they are; float arrays are treated as mean linear
            colour and gamma-encoded first.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array is not of shape (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    if image.dtype != np.uint8:
        image = linear_to_rgb8(image.astype(np.float64), samples=1)

    PILImage.fromarray(np.ascontiguousarray(image), mode="RGB").save(filepath)
    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filepath)

