"""Preview module: image output."""

from .export import save_png, save_png_from_array

__all__ = ["save_png", "save_png_from_array"]
