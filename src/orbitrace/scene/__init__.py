"""Scene module for sphere storage, scene building and ray-scene queries.

Components:
    intersection: Sphere list storage and closest-hit intersection
    manager: Scene builder with a unified material ID space
    random_scene: The procedural random spheres scene

Scene data is organized for efficient parallel access:
    - Structure-of-Arrays layout for sphere data
    - Spheres reference shared materials by ID
    - Read-only during rendering
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .random_scene import create_random_scene

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Random scene
    "create_random_scene",
]
