"""Scene module: primitive storage, scene building and demo scenes.

Components:
    intersection: Primitive tables and nearest-hit queries
    manager: SceneManager coordinating primitives and materials
    random_spheres: The random spheres demo scene
"""

from .intersection import (
    MAX_PRIMITIVES,
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_primitive_count,
    get_sphere_count,
    intersect_scene,
)
from .manager import MaterialInfo, SceneManager, SphereInfo
from .random_spheres import create_random_spheres_scene, default_camera

__all__ = [
    "MAX_PRIMITIVES",
    "MAX_SPHERES",
    "add_sphere",
    "clear_scene",
    "get_primitive_count",
    "get_sphere_count",
    "intersect_scene",
    "SceneManager",
    "MaterialInfo",
    "SphereInfo",
    "create_random_spheres_scene",
    "default_camera",
]
