"""Linear RGB colours, the sky background and display conversion.

Colours are ``vec3`` values holding linear light. During accumulation a
component may exceed 1; only the final conversion to 8-bit channels clamps.

Display conversion (per channel):
    channel = floor(256 * clamp(sqrt(sum / samples), 0, 0.999))

The square root is a gamma-2 approximation. NaN samples map to 0 and +Inf
to 255, so numeric blow-ups never reach the encoder as garbage bytes.

Example:
    >>> from pathtracer.core.color import to_rgb8
    >>> to_rgb8((1.0, 0.25, 0.0), samples=1)
    (255, 128, 0)
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti

from pathtracer.core.vector import unit_vec, vec3

# Colour constants as plain tuples (Python side) ...
WHITE_RGB = (1.0, 1.0, 1.0)
BLACK_RGB = (0.0, 0.0, 0.0)
SKY_BLUE_RGB = (0.5, 0.7, 1.0)

# ... and as Taichi vectors for use inside kernels
WHITE = vec3(*WHITE_RGB)
BLACK = vec3(*BLACK_RGB)
SKY_BLUE = vec3(*SKY_BLUE_RGB)

# Upper clamp applied after the square root, keeps 256 * c below 256
MAX_INTENSITY = 0.999


@ti.func
def background_color(direction: vec3) -> vec3:
    """Colour seen by a ray that escapes the scene.

    Blends linearly from white (looking straight down) to sky blue
    (looking straight up) using t = 0.5 * (unit_direction.y + 1).

    Args:
        direction: Direction of the escaping ray (any non-zero length).

    Returns:
        The background radiance for that direction.
    """
    unit_direction = unit_vec(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * WHITE + t * SKY_BLUE


def linear_to_rgb8(
    color_sum: npt.ArrayLike,
    samples: int = 1,
) -> npt.NDArray[np.uint8]:
    """Convert accumulated linear colour to gamma-corrected 8-bit channels.

    Args:
        color_sum: Array of linear colour sums, any shape (usually (..., 3)).
        samples: Number of samples that were summed into ``color_sum``.

    Returns:
        A uint8 array of the same shape.

    Raises:
        ValueError: If ``samples`` is not positive.
    """
    if samples <= 0:
        raise ValueError(f"samples must be positive, got {samples}")

    scaled = np.asarray(color_sum, dtype=np.float64) / float(samples)
    with np.errstate(invalid="ignore"):
        gamma = np.sqrt(scaled)
    gamma = np.nan_to_num(gamma, nan=0.0, posinf=MAX_INTENSITY, neginf=0.0)
    gamma = np.clip(gamma, 0.0, MAX_INTENSITY)
    return np.floor(256.0 * gamma).astype(np.uint8)


def to_rgb8(color: Sequence[float], samples: int = 1) -> tuple[int, int, int]:
    """Convert one accumulated colour to an (r, g, b) triple of ints in [0, 255]."""
    r, g, b = linear_to_rgb8(np.asarray(color[:3], dtype=np.float64), samples).tolist()
    return int(r), int(g), int(b)


def lerp_background(direction: Sequence[float]) -> tuple[float, float, float]:
    """Python-side twin of ``background_color`` for tests and previews."""
    d = np.asarray(direction, dtype=np.float64)
    unit_direction = d / np.linalg.norm(d)
    t = 0.5 * (unit_direction[1] + 1.0)
    c = (1.0 - t) * np.asarray(WHITE_RGB) + t * np.asarray(SKY_BLUE_RGB)
    return float(c[0]), float(c[1]), float(c[2])
