"""Scene manager coordinating primitives and materials.

The SceneManager is the Python-side front door to the scene tables. It
creates materials (each call returns a unified material id), adds
primitives that reference those ids, and mirrors everything it uploads in
plain dataclasses so a scene can be inspected and serialized.

Materials are created up front and may be shared by any number of
primitives.

Example:
    >>> from pathtracer.core.settings import init_backend
    >>> init_backend("cpu")
    >>> from pathtracer.scene.manager import SceneManager, SphereInfo
    >>> scene = SceneManager()
    >>> ground = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
    >>> scene.add(SphereInfo(center=(0.0, -1000.0, 0.0), radius=1000.0, material_id=ground))
    0
    >>> scene.add_dielectric_sphere((0.0, 1.0, 0.0), 1.0, refraction_index=1.5)
    (1, 1)
"""

import logging
from dataclasses import dataclass
from typing import Any

from pathtracer.materials.dielectric import add_dielectric_material
from pathtracer.materials.lambertian import add_lambertian_material
from pathtracer.materials.metal import MAX_FUZZ, add_metal_material
from pathtracer.materials.registry import (
    MAX_MATERIALS,
    MaterialType,
    check_material_capacity,
    clear_materials,
    get_material_count,
    register_material,
)
from pathtracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_primitive_count,
    get_sphere_count,
)

logger = logging.getLogger(__name__)

# Manager whose contents are loaded in the device tables
_active_scene: "SceneManager | None" = None


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The variant of the material.
        type_index: The index within the variant's table.
        params: The material parameters as stored (fuzz already clamped).
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """A sphere primitive: center, radius and the id of its material."""

    center: tuple[float, float, float]
    radius: float
    material_id: int


def _as_vec3(values: Any, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def get_active_scene() -> "SceneManager | None":
    """The manager that most recently cleared the device tables, if any."""
    return _active_scene


class SceneManager:
    """Scene-building API over the global primitive and material tables.

    Constructing a SceneManager clears the tables, so the most recently
    constructed (or cleared) manager is the active scene.

    Attributes:
        materials: MaterialInfo of every material, indexed by material id.
        primitives: Every primitive in insertion order.
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.primitives: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every primitive and material."""
        global _active_scene

        clear_scene()
        clear_materials()
        self.materials.clear()
        self.primitives.clear()
        _active_scene = self

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register(self, material_type: MaterialType, type_index: int, params: dict[str, Any]) -> int:
        material_id = register_material(material_type, type_index)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug("Material %d: %s %s", material_id, material_type.name.lower(), params)
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a diffuse material and return its material id.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
            RuntimeError: If a material table is full.
        """
        albedo = _as_vec3(albedo, "albedo")
        check_material_capacity()
        type_index = add_lambertian_material(albedo)
        return self._register(MaterialType.LAMBERTIAN, type_index, {"albedo": albedo})

    def add_metal_material(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Add a metal material and return its material id.

        Fuzz values above 1 are clamped to 1.

        Raises:
            ValueError: If any albedo component is outside [0, 1] or fuzz is
                negative.
            RuntimeError: If a material table is full.
        """
        albedo = _as_vec3(albedo, "albedo")
        check_material_capacity()
        type_index = add_metal_material(albedo, fuzz)
        params = {"albedo": albedo, "fuzz": min(float(fuzz), MAX_FUZZ)}
        return self._register(MaterialType.METAL, type_index, params)

    def add_dielectric_material(self, refraction_index: float = 1.5) -> int:
        """Add a dielectric material and return its material id.

        Raises:
            ValueError: If the refraction index is not positive.
            RuntimeError: If a material table is full.
        """
        check_material_capacity()
        type_index = add_dielectric_material(refraction_index)
        params = {"refraction_index": float(refraction_index)}
        return self._register(MaterialType.DIELECTRIC, type_index, params)

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add(self, primitive: SphereInfo) -> int:
        """Append a primitive to the scene.

        Args:
            primitive: The primitive to add.

        Returns:
            The index of the primitive in the scene (insertion order).

        Raises:
            TypeError: If the primitive kind is not supported.
            ValueError: If the radius is not positive or the material id is
                unknown.
            RuntimeError: If the primitive table is full.
        """
        if not isinstance(primitive, SphereInfo):
            raise TypeError(f"Unsupported primitive: {type(primitive).__name__}")

        center = _as_vec3(primitive.center, "center")
        if primitive.radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {primitive.radius}")
        if not 0 <= primitive.material_id < len(self.materials):
            raise ValueError(f"Invalid material_id: {primitive.material_id}")

        add_sphere(center, float(primitive.radius), primitive.material_id)
        self.primitives.append(
            SphereInfo(center=center, radius=float(primitive.radius), material_id=primitive.material_id)
        )
        return len(self.primitives) - 1

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere referencing an existing material.

        Returns:
            The index of the sphere in the scene.
        """
        return self.add(SphereInfo(center=center, radius=radius, material_id=material_id))

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        refraction_index: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(refraction_index)
        return self.add_sphere(center, radius, material_id), material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    @property
    def spheres(self) -> list[SphereInfo]:
        return [p for p in self.primitives if isinstance(p, SphereInfo)]

    def get_sphere_count(self) -> int:
        """Get the number of spheres loaded on the device."""
        return get_sphere_count()

    def get_primitive_count(self) -> int:
        """Get the number of primitives loaded on the device."""
        return get_primitive_count()

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a JSON-compatible dictionary."""
        materials = []
        for mat in self.materials:
            entry: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                entry[key] = list(value) if isinstance(value, tuple) else value
            materials.append(entry)

        spheres = [
            {
                "center": list(sphere.center),
                "radius": sphere.radius,
                "material_id": sphere.material_id,
            }
            for sphere in self.spheres
        ]
        return {"materials": materials, "spheres": spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Replace the scene with the contents of a dictionary.

        Args:
            data: Dictionary with 'materials' and 'spheres' keys, as produced
                by ``to_dict``.

        Raises:
            ValueError: If a material type is unknown or any parameter is
                invalid.
        """
        self.clear()

        for mat_config in data.get("materials", []):
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                self.add_lambertian_material(mat_config.get("albedo", [0.5, 0.5, 0.5]))
            elif mat_type == "metal":
                self.add_metal_material(
                    mat_config.get("albedo", [0.8, 0.8, 0.8]),
                    mat_config.get("fuzz", 0.0),
                )
            elif mat_type == "dielectric":
                self.add_dielectric_material(mat_config.get("refraction_index", 1.5))
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in data.get("spheres", []):
            self.add_sphere(
                sphere_config.get("center", [0.0, 0.0, 0.0]),
                sphere_config.get("radius", 1.0),
                sphere_config.get("material_id", 0),
            )

        logger.info(
            "Loaded scene: %d materials, %d primitives",
            len(self.materials),
            len(self.primitives),
        )
