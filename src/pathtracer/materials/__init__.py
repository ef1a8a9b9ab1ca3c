"""Materials module: how rays scatter at a surface.

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection perturbed by fuzz
    dielectric: Glass-like refraction with Schlick reflectance
    registry: Unified material ids and scatter dispatch
"""

from .dielectric import (
    DielectricMaterial,
    add_dielectric_material,
    get_dielectric_material_count,
    scatter_dielectric,
    schlick_reflectance,
)
from .lambertian import (
    LambertianMaterial,
    add_lambertian_material,
    get_lambertian_material_count,
    scatter_lambertian,
)
from .metal import MetalMaterial, add_metal_material, get_metal_material_count, scatter_metal
from .registry import MaterialType, clear_materials, get_material_count, register_material, scatter

__all__ = [
    "LambertianMaterial",
    "scatter_lambertian",
    "add_lambertian_material",
    "get_lambertian_material_count",
    "MetalMaterial",
    "scatter_metal",
    "add_metal_material",
    "get_metal_material_count",
    "DielectricMaterial",
    "scatter_dielectric",
    "schlick_reflectance",
    "add_dielectric_material",
    "get_dielectric_material_count",
    "MaterialType",
    "register_material",
    "clear_materials",
    "get_material_count",
    "scatter",
]
