"""Geometry module: hit records and shape primitives.

Intersection routines are Taichi functions returning a HitRecord whose
``hit`` flag is 0 on a miss.
"""

from .hittable import NO_MATERIAL, HitRecord, PrimitiveKind, make_hit_record, miss_record
from .sphere import Sphere, hit_sphere, make_sphere

__all__ = [
    "HitRecord",
    "PrimitiveKind",
    "NO_MATERIAL",
    "make_hit_record",
    "miss_record",
    "Sphere",
    "hit_sphere",
    "make_sphere",
]
