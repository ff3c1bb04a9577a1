"""Metal (specular reflective) material implementation.

Metals reflect the incident ray about the surface normal:

    R = I - 2(I . N)N

For fuzzy metals the reflected direction is perturbed by a random point in the
unit sphere scaled by the fuzz factor. A perturbed direction that ends up at or
below the surface is absorbed, which keeps grazing fuzzy reflections from
adding energy.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.orbitrace.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal, stream
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.orbitrace.core.ray import normalize, reflect
from src.orbitrace.core.sampler import random_in_unit_sphere

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class MetalMaterial:
    """Metal (specular reflective) material properties.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: Roughness in [0, 1]. 0 = perfect mirror, 1 = maximum fuzz.
    """

    albedo: vec3
    fuzz: ti.f32


@ti.func
def scatter_metal_perturbed(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    perturbation: vec3,
):
    """Reflect about the normal and perturb by a given offset.

    This is the deterministic core of scatter_metal.

    Args:
        albedo: The reflective color.
        fuzz: Roughness in [0, 1].
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit, facing the ray).
        perturbation: Offset added to the mirror direction after scaling by
            fuzz, normally a random point in the unit sphere.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is 0 when dot(scattered_direction, normal) <= 0.
    """
    reflected = reflect(normalize(incident_direction), normal)
    scattered_direction = reflected + fuzz * perturbation

    did_scatter = 1
    if tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0

    return scattered_direction, albedo, did_scatter


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Compute the scattered ray direction for a metal surface.

    Args:
        albedo: The reflective color.
        fuzz: Roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit, facing the ray).
        stream: Random stream owned by the calling thread.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is 0 if the ray was absorbed.
    """
    return scatter_metal_perturbed(
        albedo, fuzz, incident_direction, normal, random_in_unit_sphere(stream)
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 512

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials."""
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
            Each component should be in [0, 1].
        fuzz: Roughness. Default is 0 (perfect mirror). Values above 1 are
            clamped to 1.

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
    fuzz = min(fuzz, 1.0)

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzzes[idx] = fuzz
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
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    """Get the fuzz factor for a metal material by index."""
    return metal_fuzzes[material_idx]
