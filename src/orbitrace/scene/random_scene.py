"""Procedural "random spheres" scene.

A large grey ground sphere, a 22 x 22 grid of small spheres with randomly
chosen materials jittered inside their cells, and three large feature spheres
(glass, diffuse brown, polished metal) side by side at the center.

Small sphere materials are chosen with these probabilities:

    - 80% diffuse, albedo = random color * random color
    - 15% metal, albedo in [0.5, 1), fuzz in [0.5, 1)
    - 5% glass, IOR 1.5

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.orbitrace.scene.random_scene import create_random_scene
    >>> scene = create_random_scene(np.random.default_rng(7))
    >>> scene.get_sphere_count() > 4
    True
"""

import logging

import numpy as np

from src.orbitrace.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Ground sphere
GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Small sphere grid: cells a, b in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_RADIUS = 0.2
CELL_JITTER = 0.9

# Small spheres closer than this to KEEP_CLEAR_POINT are skipped so the metal
# feature sphere stays unobstructed
KEEP_CLEAR_POINT = np.array([4.0, 0.2, 0.0])
KEEP_CLEAR_DISTANCE = 0.9

# Material choice thresholds for small spheres
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95

GLASS_IOR = 1.5

# Feature spheres
FEATURE_RADIUS = 1.0
GLASS_SPHERE_CENTER = (0.0, 1.0, 0.0)
DIFFUSE_SPHERE_CENTER = (-4.0, 1.0, 0.0)
DIFFUSE_SPHERE_ALBEDO = (0.4, 0.2, 0.1)
METAL_SPHERE_CENTER = (4.0, 1.0, 0.0)
METAL_SPHERE_ALBEDO = (0.7, 0.6, 0.5)


def _random_color(rng: np.random.Generator, low: float = 0.0, high: float = 1.0):
    values = rng.uniform(low, high, size=3)
    return (float(values[0]), float(values[1]), float(values[2]))


def create_random_scene(rng: np.random.Generator | None = None) -> SceneManager:
    """Build the random spheres scene.

    All glass spheres share one dielectric material; every diffuse and metal
    small sphere gets its own material.

    Args:
        rng: Random generator for sphere placement and material choice. A
            freshly seeded generator is used when omitted.

    Returns:
        The populated SceneManager.
    """
    if rng is None:
        rng = np.random.default_rng()

    scene = SceneManager()

    ground = scene.add_lambertian_material(GROUND_ALBEDO)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground)

    glass = scene.add_dielectric_material(GLASS_IOR)

    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose_mat = rng.random()
            center = np.array(
                [
                    a + CELL_JITTER * rng.random(),
                    SMALL_RADIUS,
                    b + CELL_JITTER * rng.random(),
                ]
            )

            if np.linalg.norm(center - KEEP_CLEAR_POINT) <= KEEP_CLEAR_DISTANCE:
                continue

            center_tuple = (float(center[0]), float(center[1]), float(center[2]))
            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = tuple(
                    float(x) for x in np.multiply(_random_color(rng), _random_color(rng))
                )
                scene.add_lambertian_sphere(center_tuple, SMALL_RADIUS, albedo)
            elif choose_mat < METAL_PROBABILITY:
                albedo = _random_color(rng, 0.5, 1.0)
                fuzz = float(rng.uniform(0.5, 1.0))
                scene.add_metal_sphere(center_tuple, SMALL_RADIUS, albedo, fuzz)
            else:
                scene.add_sphere(center_tuple, SMALL_RADIUS, glass)

    scene.add_sphere(GLASS_SPHERE_CENTER, FEATURE_RADIUS, glass)
    scene.add_lambertian_sphere(DIFFUSE_SPHERE_CENTER, FEATURE_RADIUS, DIFFUSE_SPHERE_ALBEDO)
    scene.add_metal_sphere(METAL_SPHERE_CENTER, FEATURE_RADIUS, METAL_SPHERE_ALBEDO, 0.0)

    counts = scene.count_materials_by_type()
    logger.info(
        "Built random scene: %d spheres, %d materials (%s)",
        scene.get_sphere_count(),
        scene.get_material_count(),
        ", ".join(f"{t.name.lower()}={n}" for t, n in counts.items()),
    )
    return scene
