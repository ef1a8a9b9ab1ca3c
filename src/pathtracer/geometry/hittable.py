"""Hit records and the primitive kinds of the intersection protocol.

Every primitive answers the same question: does this ray hit you for some
``t`` strictly inside an interval, and if so where? The answer is a
``HitRecord``. Records carry the id of the primitive's material rather
than the material itself; the id indexes the material tables owned by the
scene.

Normals stored in a record always oppose the incoming ray. The geometric
(outward) normal is flipped when the ray hits from inside, and
``front_face`` records which case occurred.

Adding a new shape means adding a ``PrimitiveKind`` value, a ``hit_*``
function returning a ``HitRecord`` and a branch in the scene scan.
"""

from enum import IntEnum

import taichi as ti

from pathtracer.core.vector import dot, real, vec3

# Material id stored in a miss record
NO_MATERIAL = -1


class PrimitiveKind(IntEnum):
    """Enumeration of primitive shapes known to the scene scan."""

    SPHERE = 0


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        t: Ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal, oriented against the incoming ray.
        front_face: 1 if the ray arrived from outside the surface, else 0.
        material_id: Unified material id of the hit primitive
            (``NO_MATERIAL`` on a miss).
    """

    hit: ti.i32
    t: real
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_hit_record(
    t: real,
    point: vec3,
    outward_normal: vec3,
    ray_direction: vec3,
    material_id: ti.i32,
) -> HitRecord:
    """Build a hit record, orienting the normal against the ray.

    Args:
        t: Ray parameter of the intersection.
        point: The intersection point.
        outward_normal: Unit normal pointing out of the primitive.
        ray_direction: Direction of the incoming ray.
        material_id: Material id of the primitive.

    Returns:
        A HitRecord with hit == 1.
    """
    front_face = 1
    normal = outward_normal
    if dot(ray_direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return HitRecord(
        hit=1,
        t=t,
        point=point,
        normal=normal,
        front_face=front_face,
        material_id=material_id,
    )


@ti.func
def miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=NO_MATERIAL,
    )
