"""Path tracing integrator for Monte Carlo light transport.

This module implements the main rendering kernels: a depth-limited path
tracer without Russian roulette, the render target it accumulates into,
and Python-callable entry points for single pixels and single paths.

Each path is an explicit loop over a small state machine:

    ACTIVE --no hit--------------> ESCAPED    (throughput * sky colour)
    ACTIVE --material absorbs----> ABSORBED   (black)
    ACTIVE --bounce budget spent-> EXHAUSTED  (black)
    ACTIVE --material scatters---> ACTIVE     (throughput *= attenuation)

Secondary rays only accept hits beyond ``RAY_T_MIN`` so that a bounce does
not re-hit the surface it starts on.

Parallelism comes from the outermost kernel loop over pixels. Each Taichi
thread has its own random generator, and pixels are written by exactly one
thread per pass, so no locking is involved.

Example:
    >>> from pathtracer.core.settings import init_backend
    >>> init_backend("cpu")
    >>> from pathtracer.core.integrator import render_image, setup_render_target
    >>> from pathtracer.scene.random_spheres import create_random_spheres_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(320, 180)
    >>> render_image(num_samples=16)
"""

from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti

from pathtracer.camera.thin_lens import ThinLensCamera, get_ray_jittered, setup_camera
from pathtracer.core.color import background_color, linear_to_rgb8
from pathtracer.core.ray import RAY_T_MAX, RAY_T_MIN, Ray, make_interval
from pathtracer.core.settings import DEFAULT_MAX_BOUNCES, MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH
from pathtracer.core.vector import vec3
from pathtracer.materials.registry import scatter
from pathtracer.scene.intersection import get_primitive_count, intersect_scene
from pathtracer.scene.manager import SceneManager, get_active_scene


class PathState(IntEnum):
    """States of a single path."""

    ACTIVE = 0
    ESCAPED = 1
    ABSORBED = 2
    EXHAUSTED = 3


_ACTIVE = int(PathState.ACTIVE)
_ESCAPED = int(PathState.ESCAPED)
_ABSORBED = int(PathState.ABSORBED)
_EXHAUSTED = int(PathState.EXHAUSTED)


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_path(ray: Ray, max_bounces: ti.i32):
    """Follow one light path backwards from ``ray`` through the scene.

    Args:
        ray: The starting ray (usually a camera ray).
        max_bounces: Number of scattering events allowed.

    Returns:
        A tuple of (color, bounces_used, final_state) where color is the
        linear radiance carried back along the path and final_state is a
        PathState value other than ACTIVE.
    """
    origin = ray.origin
    direction = ray.direction

    # Product of all attenuations along the path so far
    throughput = vec3(1.0, 1.0, 1.0)
    color = vec3(0.0, 0.0, 0.0)

    remaining = max_bounces
    state = _ACTIVE

    while state == _ACTIVE:
        if remaining <= 0:
            state = _EXHAUSTED
        else:
            current = Ray(origin=origin, direction=direction)
            rec = intersect_scene(current, make_interval(RAY_T_MIN, RAY_T_MAX))

            if rec.hit == 0:
                color = throughput * background_color(direction)
                state = _ESCAPED
            else:
                scattered, attenuation, did_scatter = scatter(current, rec)
                if did_scatter == 0:
                    state = _ABSORBED
                else:
                    throughput *= attenuation
                    origin = scattered.origin
                    direction = scattered.direction
                    remaining -= 1

    return color, max_bounces - remaining, state


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Linear colour sums (preallocated to max size)
_color_sum = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Samples accumulated into every pixel of _color_sum
_samples_taken = ti.field(dtype=ti.i32, shape=())

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Scratch outputs of the single-pixel and single-path kernels
_pixel_sum = ti.Vector.field(3, dtype=ti.f64, shape=())
_path_color = ti.Vector.field(3, dtype=ti.f64, shape=())
_path_bounces = ti.field(dtype=ti.i32, shape=())
_path_state = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_sum.fill(0.0)
    _samples_taken[None] = 0


def release_render_target() -> None:
    """Forget the active render target; rendering raises until the next setup."""
    clear_render_target()
    _image_width[None] = 0
    _image_height[None] = 0
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return int(_samples_taken[None])


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_bounces: ti.i32):
    for i, j in ti.ndrange(width, height):
        ray = get_ray_jittered(i, j, width, height)
        color, _bounces, _state = trace_path(ray, max_bounces)
        _color_sum[i, j] += color


@ti.kernel
def _render_pixel_samples(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    sample_count: ti.i32,
    max_bounces: ti.i32,
):
    for sample in range(sample_count):
        ray = get_ray_jittered(pixel_i, pixel_j, width, height)
        color, _bounces, _state = trace_path(ray, max_bounces)
        _pixel_sum[None] += color


@ti.kernel
def _trace_single_path(origin: vec3, direction: vec3, max_bounces: ti.i32):
    color, bounces, state = trace_path(Ray(origin=origin, direction=direction), max_bounces)
    _path_color[None] = color
    _path_bounces[None] = bounces
    _path_state[None] = state


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(num_samples: int = 1, max_bounces: int = DEFAULT_MAX_BOUNCES) -> None:
    """Accumulate ``num_samples`` more samples into every pixel.

    Can be called repeatedly to refine the image.

    Args:
        num_samples: Number of samples to render per pixel.
        max_bounces: Bounce budget of every path.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    for _ in range(num_samples):
        _render_one_spp(width, height, max_bounces)
        _samples_taken[None] += 1


def render_pixel(
    scene: SceneManager,
    camera: ThinLensCamera,
    pixel_i: int,
    pixel_j: int,
    width: int,
    height: int,
    sample_count: int,
    max_bounces: int = DEFAULT_MAX_BOUNCES,
) -> tuple[float, float, float]:
    """Estimate the linear colour of one pixel.

    Averages ``sample_count`` jittered camera paths. The result is still
    linear light; pass it to ``to_rgb8`` for display values.

    Args:
        scene: The scene being rendered; must be the active scene.
        camera: Camera configuration, uploaded before sampling.
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        sample_count: Number of paths to average.
        max_bounces: Bounce budget of every path.

    Returns:
        Mean (R, G, B) linear colour.

    Raises:
        ValueError: If sample_count is not positive.
        RuntimeError: If ``scene`` is not the most recently cleared
            SceneManager or its primitives are no longer on the device.
    """
    if sample_count <= 0:
        raise ValueError(f"sample_count must be positive, got {sample_count}")
    if scene is not get_active_scene() or len(scene.primitives) != get_primitive_count():
        raise RuntimeError("The given scene is not the active scene")

    setup_camera(camera)
    _pixel_sum[None] = [0.0, 0.0, 0.0]
    _render_pixel_samples(pixel_i, pixel_j, width, height, sample_count, max_bounces)

    total = _pixel_sum[None]
    return (
        float(total[0]) / sample_count,
        float(total[1]) / sample_count,
        float(total[2]) / sample_count,
    )


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_bounces: int = DEFAULT_MAX_BOUNCES,
) -> tuple[tuple[float, float, float], int, PathState]:
    """Trace a single path through the active scene.

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        max_bounces: Bounce budget.

    Returns:
        A tuple of (color, bounces_used, final_state).
    """
    _trace_single_path(vec3(*origin), vec3(*direction), max_bounces)
    c = _path_color[None]
    color = (float(c[0]), float(c[1]), float(c[2]))
    return color, int(_path_bounces[None]), PathState(int(_path_state[None]))


def get_image_numpy() -> npt.NDArray[np.float64]:
    """Get the mean linear colour of every pixel.

    The array shape is (height, width, 3) with row 0 at the top of the
    image. Values are not clamped.

    Raises:
        RuntimeError: If render target has not been set up or no samples
            have been rendered.
    """
    samples = get_total_samples()
    if samples == 0:
        raise RuntimeError("No samples rendered yet. Call render_image() first.")

    width, height = get_image_dimensions()
    image = _color_sum.to_numpy()[:width, :height, :] / samples

    # (width, height, 3) with bottom-left origin -> (height, width, 3) top-left origin
    image = np.transpose(image, (1, 0, 2))
    return np.flipud(image)


def get_image_rgb8() -> npt.NDArray[np.uint8]:
    """Get the rendered image as gamma-corrected 8-bit RGB, shape (height, width, 3)."""
    return linear_to_rgb8(get_image_numpy(), samples=1)
