"""Sphere primitive and ray-sphere intersection.

The intersection solves |O + tD - C|^2 = r^2 for t with the half-b form of
the quadratic formula:

    a      = D . D
    half_b = (O - C) . D
    c      = |O - C|^2 - r^2
    disc   = half_b^2 - a*c

The nearer root ``(-half_b - sqrt(disc)) / a`` is tried first, then the
farther one, so the closest valid intersection wins.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from pathtracer.core.ray import Interval, Ray, ray_at, surrounds
from pathtracer.core.vector import dot, length_squared, real, vec3
from pathtracer.geometry.hittable import HitRecord, make_hit_record, miss_record


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material_id: Unified material id shared with other primitives.
    """

    center: vec3
    radius: real
    material_id: ti.i32


@ti.func
def hit_sphere(sphere: Sphere, ray: Ray, interval: Interval) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        sphere: The sphere to test.
        ray: The ray; its direction need not be normalized.
        interval: Open range of accepted ray parameters.

    Returns:
        A HitRecord whose ``t`` lies strictly inside ``interval``, or a
        miss record (hit == 0).
    """
    oc = ray.origin - sphere.center
    a = length_squared(ray.direction)
    half_b = dot(oc, ray.direction)
    c = length_squared(oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    result = miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = surrounds(interval, root)
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = surrounds(interval, root)

        if valid:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius
            result = make_hit_record(
                root, point, outward_normal, ray.direction, sphere.material_id
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: real, material_id: ti.i32) -> Sphere:
    """Create a sphere from center, radius and material id."""
    return Sphere(center=center, radius=radius, material_id=material_id)
