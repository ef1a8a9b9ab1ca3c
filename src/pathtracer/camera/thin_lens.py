"""Thin-lens camera model with depth of field.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport is placed on the plane of perfect focus, ``focus_dist`` in
front of the eye. Rays start at a random point of the lens disk (radius
``aperture / 2``) and aim at the viewport point, so geometry at the focus
distance stays sharp while nearer and farther geometry blurs. An aperture
of 0 degenerates to a pinhole camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera
    >>>
    >>> camera = ThinLensCamera(
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=0.1,
    ...     focus_dist=10.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.core.vector import random_in_unit_disk, real, vec3

# Minimum norm of w and (vup x w) for a usable basis
_DEGENERATE_EPSILON = 1e-12


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens (depth of field) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 gives a pinhole camera.
        focus_dist: Distance from the eye to the plane of perfect focus.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0

    @property
    def lens_radius(self) -> float:
        """Radius of the lens disk."""
        return self.aperture / 2.0


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f64, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f64, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f64, shape=())  # Backward (opposite view)

# Focus-plane viewport
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f64, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f64, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f64, shape=())

_lens_radius = ti.field(dtype=ti.f64, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def _validate(camera: ThinLensCamera) -> None:
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"vfov must be in (0, 180) degrees, got {camera.vfov}")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio must be positive, got {camera.aspect_ratio}")
    if camera.aperture < 0.0:
        raise ValueError(f"aperture must be non-negative, got {camera.aperture}")
    if camera.focus_dist <= 0.0:
        raise ValueError(f"focus_dist must be positive, got {camera.focus_dist}")


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the camera's orthonormal basis and the focus-plane viewport and
    stores them in Taichi fields. Must be called before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If a parameter is out of range, lookfrom equals lookat,
            or vup is parallel to the view direction.
    """
    _validate(camera)

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w_norm = np.linalg.norm(w)
    if w_norm < _DEGENERATE_EPSILON:
        raise ValueError("lookfrom and lookat must be distinct points")
    w = w / w_norm

    u = np.cross(vup, w)
    u_norm = np.linalg.norm(u)
    if u_norm < _DEGENERATE_EPSILON:
        raise ValueError("vup must not be parallel to the view direction")
    u = u / u_norm

    v = np.cross(w, u)

    focus_dist = camera.focus_dist
    horizontal = focus_dist * viewport_width * u
    vertical = focus_dist * viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - focus_dist * w

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.lens_radius


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(s: real, t: real) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    The origin is offset by a random lens sample in the (u, v) plane and
    the direction aims at the focus-plane point, so the direction is not
    normalized.

    Args:
        s: Horizontal coordinate, roughly in [0, 1].
        t: Vertical coordinate, roughly in [0, 1].

    Returns:
        A world-space Ray.
    """
    rd = _lens_radius[None] * random_in_unit_disk()
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    target = (
        _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]
    )
    return Ray(origin=origin, direction=target - origin)


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a ray with a random sub-pixel offset for anti-aliasing.

    Pixel (0, 0) is the bottom-left pixel. Coordinates are normalized by
    ``width - 1`` and ``height - 1`` so the last pixel centre lands on the
    viewport edge.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A jittered camera Ray.
    """
    s = (ti.cast(pixel_i, real) + ti.random(real)) / ti.cast(ti.max(width - 1, 1), real)
    t = (ti.cast(pixel_j, real) + ti.random(real)) / ti.cast(ti.max(height - 1, 1), real)
    return get_ray(s, t)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        (as tuples) and lens_radius.
    """

    def _tuple(f) -> tuple[float, float, float]:
        vec = f[None]
        return (float(vec[0]), float(vec[1]), float(vec[2]))

    return {
        "origin": _tuple(_camera_origin),
        "u": _tuple(_camera_u),
        "v": _tuple(_camera_v),
        "w": _tuple(_camera_w),
        "horizontal": _tuple(_viewport_horizontal),
        "vertical": _tuple(_viewport_vertical),
        "lower_left": _tuple(_lower_left_corner),
        "lens_radius": float(_lens_radius[None]),
    }
