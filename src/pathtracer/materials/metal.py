"""Metal (specular reflective) material implementation.

A metal mirrors the normalized incoming direction about the surface normal
and then perturbs it by ``fuzz`` times a random point in the unit ball.
Perfect mirrors have fuzz 0; fuzz is capped at 1.

When the perturbed direction ends up at or below the surface the ray is
absorbed, which darkens rough metals at grazing angles.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # scattered, attenuation, did_scatter = scatter_metal(albedo, fuzz, ray_in, rec)
"""

import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.core.vector import dot, random_in_unit_sphere, real, reflect, unit_vec, vec3
from pathtracer.geometry.hittable import HitRecord

# Fuzz values above this are clamped
MAX_FUZZ = 1.0


@ti.dataclass
class MetalMaterial:
    """Metal (specular reflective) material properties.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: Radius of the reflection perturbation in [0, 1].
            0 = perfect mirror, 1 = maximum fuzziness.
    """

    albedo: vec3
    fuzz: real


@ti.func
def scatter_metal(albedo: vec3, fuzz: real, ray_in: Ray, rec: HitRecord):
    """Reflect a ray off a (possibly rough) metal surface.

    The scattered ray is returned even when it is absorbed so callers can
    inspect the direction; ``did_scatter`` tells the two cases apart.

    Args:
        albedo: The reflective color (RGB).
        fuzz: Perturbation radius in [0, 1].
        ray_in: The incoming ray.
        rec: The hit record of the intersection.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter) where
        did_scatter is 0 when the perturbed reflection points into the
        surface (dot with the normal <= 0).
    """
    reflected = reflect(unit_vec(ray_in.direction), rec.normal)
    direction = reflected + fuzz * random_in_unit_sphere()
    scattered = Ray(origin=rec.point, direction=direction)

    did_scatter = 0
    if dot(direction, rec.normal) > 0.0:
        did_scatter = 1

    return scattered, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 1024

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f64, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
            Each component should be in [0, 1].
        fuzz: The reflection perturbation radius. Default is 0 (perfect
            mirror). Values above 1 are clamped to 1.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
        ValueError: If fuzz is negative.
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    if fuzz < 0.0:
        raise ValueError(f"Fuzz = {fuzz} is negative. Fuzz must be in [0, 1].")

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    metal_fuzzes[idx] = min(fuzz, MAX_FUZZ)
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> real:
    """Get the (already clamped) fuzz for a metal material by index."""
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord):
    """Scatter off the metal material stored at ``material_idx``.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter).
    """
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, ray_in, rec)
