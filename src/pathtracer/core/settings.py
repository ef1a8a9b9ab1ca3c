"""Render configuration and Taichi backend initialization.

``RenderSettings`` groups the knobs of a render invocation. Its defaults
reproduce the classic "final scene" render: a 16:9 image 1280 pixels wide,
500 samples per pixel and at most 50 bounces per path.

Example:
    >>> from pathtracer.core.settings import RenderSettings, init_backend
    >>> settings = RenderSettings(width=320, height=180, samples_per_pixel=16)
    >>> init_backend(settings.arch, seed=settings.seed)
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

import taichi as ti

# Maximum supported image dimensions (render buffers are preallocated)
MAX_IMAGE_WIDTH = 1280
MAX_IMAGE_HEIGHT = 1280

DEFAULT_ASPECT_RATIO = 16.0 / 9.0
DEFAULT_WIDTH = 1280
DEFAULT_HEIGHT = round(DEFAULT_WIDTH / DEFAULT_ASPECT_RATIO)
DEFAULT_SAMPLES_PER_PIXEL = 500
DEFAULT_MAX_BOUNCES = 50

_ARCHES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
}


@dataclass
class RenderSettings:
    """Configuration for a render invocation.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered paths averaged per pixel.
        max_bounces: Bounce budget of each path.
        seed: Seed of the per-thread random generators.
        arch: Taichi backend name ("cpu", "gpu", "cuda", "vulkan", "metal").
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_bounces: int = DEFAULT_MAX_BOUNCES
    seed: int = 0
    arch: str = "cpu"

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_bounces <= 0:
            raise ValueError(f"max_bounces must be positive, got {self.max_bounces}")
        if self.arch not in _ARCHES:
            raise ValueError(f"Unknown arch {self.arch!r}, expected one of {sorted(_ARCHES)}")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RenderSettings:
        """Build settings from a mapping such as a parsed JSON document.

        Raises:
            ValueError: If the mapping contains unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown render settings: {sorted(unknown)}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        """Export the settings as a plain dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


def init_backend(arch: str = "cpu", seed: int = 0) -> None:
    """Initialize Taichi for double-precision rendering.

    Every Taichi thread draws from its own random generator; ``seed`` fixes
    the seeding of all of them, so renders are reproducible per backend.

    Args:
        arch: Taichi backend name.
        seed: Random seed handed to ``ti.init``.

    Raises:
        ValueError: If ``arch`` is not a known backend name.
    """
    if arch not in _ARCHES:
        raise ValueError(f"Unknown arch {arch!r}, expected one of {sorted(_ARCHES)}")
    ti.init(arch=_ARCHES[arch], default_fp=ti.f64, random_seed=seed)
