"""Random spheres scene configuration.

The classic "many small spheres" demo scene:

- A huge grey Lambertian sphere acting as the ground plane.
- A 22 x 22 grid of small spheres (radius 0.2) jittered inside their grid
  cells. Each picks a material at random: 80% diffuse with a product of
  two random colours, 15% metal with albedo in [0.5, 1) and fuzz in
  [0, 0.5), 5% glass.
- Three large spheres (radius 1) in the middle: glass, brown diffuse and a
  polished metal.

Small spheres that would overlap the big metal sphere's neighbourhood are
skipped.

Example:
    >>> from pathtracer.core.settings import init_backend
    >>> init_backend("cpu")
    >>> from pathtracer.scene.random_spheres import create_random_spheres_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>> scene, camera = create_random_spheres_scene(seed=7)
    >>> setup_camera(camera)
"""

import logging

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.core.settings import DEFAULT_ASPECT_RATIO
from pathtracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Small spheres are placed for grid cells in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_RADIUS = 0.2
JITTER = 0.9

# Small spheres closer than CLEARANCE to this point are skipped
CLEARANCE_POINT = (4.0, 0.2, 0.0)
CLEARANCE = 0.9

DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.15
GLASS_INDEX = 1.5

BIG_RADIUS = 1.0
GLASS_CENTER = (0.0, 1.0, 0.0)
DIFFUSE_CENTER = (-4.0, 1.0, 0.0)
DIFFUSE_ALBEDO = (0.4, 0.2, 0.1)
METAL_CENTER = (4.0, 1.0, 0.0)
METAL_ALBEDO = (0.7, 0.6, 0.5)

# Camera
LOOKFROM = (13.0, 2.0, 3.0)
LOOKAT = (0.0, 0.0, 0.0)
VUP = (0.0, 1.0, 0.0)
VFOV = 20.0
APERTURE = 0.1
FOCUS_DIST = 10.0


def default_camera(aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> ThinLensCamera:
    """Camera framing the random spheres scene with a slight depth of field."""
    return ThinLensCamera(
        lookfrom=LOOKFROM,
        lookat=LOOKAT,
        vup=VUP,
        vfov=VFOV,
        aspect_ratio=aspect_ratio,
        aperture=APERTURE,
        focus_dist=FOCUS_DIST,
    )


def _add_small_spheres(scene: SceneManager, rng: np.random.Generator) -> None:
    clearance_point = np.array(CLEARANCE_POINT)

    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose_mat = rng.random()
            center = np.array(
                [a + JITTER * rng.random(), SMALL_RADIUS, b + JITTER * rng.random()]
            )
            if np.linalg.norm(center - clearance_point) < CLEARANCE:
                continue

            center_tuple = (float(center[0]), float(center[1]), float(center[2]))
            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = rng.random(3) * rng.random(3)
                scene.add_lambertian_sphere(center_tuple, SMALL_RADIUS, tuple(albedo.tolist()))
            elif choose_mat < DIFFUSE_PROBABILITY + METAL_PROBABILITY:
                albedo = rng.uniform(0.5, 1.0, size=3)
                fuzz = 0.5 * rng.random()
                scene.add_metal_sphere(center_tuple, SMALL_RADIUS, tuple(albedo.tolist()), fuzz)
            else:
                scene.add_dielectric_sphere(center_tuple, SMALL_RADIUS, GLASS_INDEX)


def create_random_spheres_scene(
    seed: int | None = None,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Build the random spheres scene.

    Args:
        seed: Seed for the scene layout. None draws fresh entropy, so every
            call produces a different arrangement.
        aspect_ratio: Aspect ratio of the returned camera.

    Returns:
        Tuple of (scene, camera). The camera still has to be uploaded with
        ``setup_camera``.
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)
    _add_small_spheres(scene, rng)

    scene.add_dielectric_sphere(GLASS_CENTER, BIG_RADIUS, GLASS_INDEX)
    scene.add_lambertian_sphere(DIFFUSE_CENTER, BIG_RADIUS, DIFFUSE_ALBEDO)
    scene.add_metal_sphere(METAL_CENTER, BIG_RADIUS, METAL_ALBEDO, 0.0)

    logger.info(
        "Random spheres scene: %d spheres, %d materials",
        len(scene.primitives),
        scene.get_material_count(),
    )
    return scene, default_camera(aspect_ratio)
