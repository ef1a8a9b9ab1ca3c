"""Dielectric (glass/water) material implementation.

This module implements the dielectric BSDF, which models transparent materials
like glass and water with refraction and Fresnel reflectance.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when sin(theta_t) > 1

The material randomly chooses between reflection and refraction based on
the Fresnel reflectance probability, which increases at grazing angles.
Dielectrics never absorb: attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # scattered, attenuation = scatter_dielectric(refraction_index, ray_in, rec)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray
from pathtracer.core.vector import dot, real, reflect, refract, unit_vec, vec3
from pathtracer.geometry.hittable import HitRecord


@ti.dataclass
class DielectricMaterial:
    """Dielectric (glass/water) material properties.

    Attributes:
        refraction_index: Index of refraction. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    refraction_index: real


@ti.func
def schlick_reflectance(cosine: real, refraction_index: real) -> real:
    """Compute Fresnel reflectance using Schlick's approximation.

    The r0 term is symmetric in the index and its reciprocal, so either the
    material index or the refraction ratio may be passed.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        refraction_index: Index of refraction (or ratio of indices).

    Returns:
        The approximate Fresnel reflectance coefficient.
    """
    r0 = (1.0 - refraction_index) / (1.0 + refraction_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def cannot_refract(refraction_ratio: real, cos_theta: real) -> ti.i32:
    """Return 1 if Snell's law has no solution (total internal reflection)."""
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    result = 0
    if refraction_ratio * sin_theta > 1.0:
        result = 1
    return result


@ti.func
def scatter_dielectric(refraction_index: real, ray_in: Ray, rec: HitRecord):
    """Reflect or refract a ray at a dielectric boundary.

    The refraction ratio is 1/index when entering the material (front face)
    and index when leaving it. Total internal reflection forces a mirror
    bounce; otherwise the ray reflects with the Schlick probability and
    refracts the rest of the time. An index of exactly 1 is no boundary at
    all and always refracts, i.e. continues straight on.

    Args:
        refraction_index: Index of refraction of the material.
        ray_in: The incoming ray.
        rec: The hit record of the intersection.

    Returns:
        A tuple of (scattered_ray, attenuation).
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    refraction_ratio = refraction_index
    if rec.front_face == 1:
        refraction_ratio = 1.0 / refraction_index

    unit_direction = unit_vec(ray_in.direction)
    cos_theta = tm.min(-dot(unit_direction, rec.normal), 1.0)

    must_reflect = cannot_refract(refraction_ratio, cos_theta)
    if not must_reflect and refraction_index != 1.0:
        if ti.random(real) < schlick_reflectance(cos_theta, refraction_index):
            must_reflect = 1

    direction = vec3(0.0, 0.0, 0.0)
    if must_reflect:
        direction = reflect(unit_direction, rec.normal)
    else:
        direction = refract(unit_direction, rec.normal, refraction_ratio)

    scattered = Ray(origin=rec.point, direction=direction)
    return scattered, attenuation


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 1024

# Storage for dielectric material properties
dielectric_indices = ti.field(dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(refraction_index: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        refraction_index: Index of refraction. Default is 1.5 (typical
            glass). Values below 1 model e.g. air bubbles in water.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the index is not positive.
    """
    if refraction_index <= 0.0:
        raise ValueError(
            f"Index of refraction = {refraction_index} is not positive."
        )

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_indices[idx] = refraction_index
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_index(material_idx: ti.i32) -> real:
    """Get the index of refraction for a dielectric material by index."""
    return dielectric_indices[material_idx]


@ti.func
def scatter_dielectric_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord):
    """Scatter off the dielectric material stored at ``material_idx``.

    Returns:
        A tuple of (scattered_ray, attenuation).
    """
    return scatter_dielectric(get_dielectric_index(material_idx), ray_in, rec)
