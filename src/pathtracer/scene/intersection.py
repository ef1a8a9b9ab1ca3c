"""Scene-level primitive storage and nearest-hit queries.

The scene is an ordered list of primitives. Each entry of the primitive
table records its kind and an index into that kind's parameter storage
(structure-of-arrays Taichi fields). Spheres are the only kind today.

``intersect_scene`` tests every primitive in insertion order against an
interval whose upper bound shrinks to the nearest hit found so far, so the
record it returns is the nearest one overall. There is no spatial
acceleration; a query costs O(number of primitives).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    0
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from pathtracer.core.ray import Interval, Ray, make_interval
from pathtracer.geometry.hittable import HitRecord, PrimitiveKind, miss_record
from pathtracer.geometry.sphere import Sphere, hit_sphere

# Maximum number of primitives supported in the scene
MAX_PRIMITIVES = 2048
MAX_SPHERES = 2048

# Primitive table, in insertion order
primitive_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
primitive_indices = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
num_primitives = ti.field(dtype=ti.i32, shape=())

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive counts to zero. The actual field data is not
    cleared but will be overwritten when new primitives are added.
    """
    num_primitives[None] = 0
    num_spheres[None] = 0


def _append_primitive(kind: PrimitiveKind, kind_index: int) -> int:
    idx = num_primitives[None]
    if idx >= MAX_PRIMITIVES:
        raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")
    primitive_kinds[idx] = int(kind)
    primitive_indices[idx] = kind_index
    num_primitives[None] = idx + 1
    return idx


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere in the sphere storage.

    Raises:
        RuntimeError: If the maximum number of spheres or primitives is
            exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    _append_primitive(PrimitiveKind.SPHERE, idx)
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_primitive_count() -> int:
    """Get the number of primitives of any kind in the scene."""
    return int(num_primitives[None])


@ti.func
def get_sphere(sphere_idx: ti.i32) -> Sphere:
    """Load a sphere from the structure-of-arrays storage."""
    return Sphere(
        center=sphere_centers[sphere_idx],
        radius=sphere_radii[sphere_idx],
        material_id=sphere_material_ids[sphere_idx],
    )


@ti.func
def hit_primitive(prim_idx: ti.i32, ray: Ray, interval: Interval) -> HitRecord:
    """Dispatch a hit test to the primitive stored at ``prim_idx``."""
    result = miss_record()
    kind = primitive_kinds[prim_idx]
    if kind == int(PrimitiveKind.SPHERE):
        result = hit_sphere(get_sphere(primitive_indices[prim_idx]), ray, interval)
    return result


@ti.func
def intersect_scene(ray: Ray, interval: Interval) -> HitRecord:
    """Find the nearest primitive hit by ``ray`` within ``interval``.

    Args:
        ray: The ray to trace.
        interval: Open range of accepted ray parameters.

    Returns:
        The HitRecord of the nearest intersection, or a miss record if no
        primitive is hit.
    """
    closest_t = interval.t_max
    result = miss_record()

    for i in range(num_primitives[None]):
        rec = hit_primitive(i, ray, make_interval(interval.t_min, closest_t))
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result
