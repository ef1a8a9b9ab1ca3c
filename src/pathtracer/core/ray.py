"""Ray and interval value types.

A ray is an origin plus a direction; the direction is *not* normalized.
Camera rays and scattered rays keep whatever length their construction
gives them, and the sphere intersection accounts for it through the
quadratic ``a`` coefficient.

An interval bounds the ray parameter ``t`` accepted by a hit test. The
scene scan narrows ``t_max`` to the nearest hit found so far.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def point() -> vec3:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -2.0))
    ...     return ray_at(ray, 2.5)  # (0, 0, -5)
"""

import taichi as ti

from pathtracer.core.vector import real, vec3

# Lower bound for secondary rays, keeps a bounce from re-hitting its own surface
RAY_T_MIN = 0.001

# Stand-in for +infinity as the upper bound of a fresh interval
RAY_T_MAX = 1e300


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Its length is
            meaningful and is never normalized implicitly.
    """

    origin: vec3
    direction: vec3


@ti.dataclass
class Interval:
    """Open range (t_min, t_max) of valid hit distances along a ray."""

    t_min: real
    t_max: real


@ti.func
def ray_at(ray: Ray, t: real) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Negative values lie behind the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


@ti.func
def make_interval(t_min: real, t_max: real) -> Interval:
    """Create an interval of accepted ray parameters."""
    return Interval(t_min=t_min, t_max=t_max)


@ti.func
def surrounds(interval: Interval, t: real) -> ti.i32:
    """Return 1 if ``t`` lies strictly inside the interval."""
    result = 0
    if interval.t_min < t and t < interval.t_max:
        result = 1
    return result
