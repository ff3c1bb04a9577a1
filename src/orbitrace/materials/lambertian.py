"""Lambertian (ideal diffuse) material implementation.

A diffuse surface scatters an incoming ray in the direction of the surface
normal plus a random unit vector. Offsetting a uniform point on the unit
sphere by the normal yields a cosine-weighted distribution over the
hemisphere, so the attenuation is simply the albedo and no PDF weighting is
needed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.orbitrace.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation = scatter_lambertian(albedo, normal, stream)
"""

import taichi as ti
import taichi.math as tm

from src.orbitrace.core.ray import near_zero
from src.orbitrace.core.sampler import random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class LambertianMaterial:
    """Lambertian (ideal diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: vec3


@ti.func
def scatter_lambertian_toward(albedo: vec3, normal: vec3, unit_offset: vec3):
    """Scatter about the normal using a given unit offset.

    This is the deterministic core of scatter_lambertian. If the offset
    nearly cancels the normal, the scattered direction would be degenerate,
    so the normal itself is used instead.

    Args:
        albedo: The diffuse reflectance color.
        normal: The surface normal at the hit point (unit, facing the ray).
        unit_offset: A unit vector, normally drawn uniformly on the sphere.

    Returns:
        A tuple of (scattered_direction, attenuation). The direction is not
        normalized.
    """
    scattered_direction = normal + unit_offset

    if near_zero(scattered_direction):
        scattered_direction = normal

    return scattered_direction, albedo


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, stream: ti.i32):
    """Sample a scattered direction for a Lambertian surface.

    Diffuse surfaces always scatter; they never absorb a path outright.

    Args:
        albedo: The diffuse reflectance color.
        normal: The surface normal at the hit point (unit, facing the ray).
        stream: Random stream owned by the calling thread.

    Returns:
        A tuple of (scattered_direction, attenuation) where attenuation equals
        the albedo.
    """
    return scatter_lambertian_toward(albedo, normal, random_unit_vector(stream))


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 1024

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials."""
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

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]
