"""Unified material ids and scatter dispatch.

Each material variant keeps its parameters in its own table (see the
``lambertian``, ``metal`` and ``dielectric`` modules). A unified material id
maps to a ``(material_type, type_index)`` pair so that primitives can share
any material by id, and ``scatter`` dispatches on the type.

The scatter contract is the same for all variants:

    scatter(ray_in, rec) -> (scattered_ray, attenuation, did_scatter)

where ``did_scatter == 0`` means the ray was absorbed and contributes no
light.
"""

from enum import IntEnum

import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.core.vector import vec3
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.dielectric import (
    clear_dielectric_materials,
    scatter_dielectric_by_id,
)
from pathtracer.materials.lambertian import (
    clear_lambertian_materials,
    scatter_lambertian_by_id,
)
from pathtracer.materials.metal import (
    clear_metal_materials,
    scatter_metal_by_id,
)


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 2048

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def check_material_capacity() -> None:
    """Raise RuntimeError if every unified material id is taken.

    Called before a variant table is written so a full id table never
    leaves an unreferenced entry behind.
    """
    if num_materials[None] >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")


def register_material(material_type: MaterialType, type_index: int) -> int:
    """Assign a unified material id to a type-local material.

    Args:
        material_type: The variant the material belongs to.
        type_index: Index of the material in its variant's table.

    Returns:
        The new unified material id.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    check_material_capacity()
    material_id = num_materials[None]

    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


def clear_materials() -> None:
    """Clear the unified id table and every variant table."""
    clear_lambertian_materials()
    clear_metal_materials()
    clear_dielectric_materials()
    num_materials[None] = 0


def get_material_count() -> int:
    """Get the number of registered materials."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Returns:
        The material type as an integer (see MaterialType enum), or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the index into the type-specific table for a material ID."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@ti.func
def scatter(ray_in: Ray, rec: HitRecord):
    """Scatter ``ray_in`` off the material referenced by ``rec``.

    An unknown material id absorbs the ray.

    Args:
        ray_in: The incoming ray.
        rec: The hit record of the intersection.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter).
    """
    mat_type = get_material_type(rec.material_id)
    type_index = get_material_type_index(rec.material_id)

    scattered = Ray(origin=rec.point, direction=rec.normal)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered, attenuation = scatter_lambertian_by_id(type_index, rec)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        scattered, attenuation, did_scatter = scatter_metal_by_id(type_index, ray_in, rec)

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered, attenuation = scatter_dielectric_by_id(type_index, ray_in, rec)
        did_scatter = 1

    return scattered, attenuation, did_scatter
