"""Lambertian (ideal diffuse) material implementation.

A diffuse surface scatters every incoming ray. The outgoing direction is the
surface normal plus a random unit vector, which distributes directions
proportionally to cos(theta) around the normal. Attenuation is the albedo.

When the random unit vector almost cancels the normal on some axis the sum
is treated as degenerate and the bare normal is used instead.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # scattered, attenuation = scatter_lambertian(albedo, rec)
"""

import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.core.vector import near_zero, random_unit_vector, vec3
from pathtracer.geometry.hittable import HitRecord


@ti.dataclass
class LambertianMaterial:
    """Lambertian (ideal diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: vec3


@ti.func
def scatter_lambertian(albedo: vec3, rec: HitRecord):
    """Scatter a ray off a diffuse surface.

    Diffuse surfaces never absorb a ray outright; energy loss is carried by
    the albedo.

    Args:
        albedo: The diffuse reflectance color (RGB).
        rec: The hit record of the intersection.

    Returns:
        A tuple of (scattered_ray, attenuation).
    """
    scatter_direction = rec.normal + random_unit_vector()

    # Catch degenerate scatter directions
    if near_zero(scatter_direction):
        scatter_direction = rec.normal

    scattered = Ray(origin=rec.point, direction=scatter_direction)
    return scattered, albedo


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 1024

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component should be in [0, 1] for energy conservation.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, rec: HitRecord):
    """Scatter off the Lambertian material stored at ``material_idx``.

    Returns:
        A tuple of (scattered_ray, attenuation).
    """
    return scatter_lambertian(get_lambertian_albedo(material_idx), rec)
