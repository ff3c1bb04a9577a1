"""Core rendering module.

Components:
    ray: Ray data structure and vector helpers
    sampler: Per-pixel random streams and geometric sampling
    integrator: Material dispatch and ray color estimation
    renderer: Parallel frame renderer producing 8-bit images
    animation: Orbit animation loop writing frames to disk

All compute-intensive operations use Taichi kernels for GPU acceleration.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .sampler import (
    MAX_STREAMS,
    new_seed,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    seed_streams,
)

# Note: integrator, renderer and animation are NOT imported here to avoid circular imports.
# Import directly from src.orbitrace.core.renderer or src.orbitrace.core.animation when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "MAX_STREAMS",
    "seed_streams",
    "new_seed",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
]
