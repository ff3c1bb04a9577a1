"""Dielectric (glass/water) material implementation.

Dielectrics split incoming light between reflection and refraction:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for the reflection probability
    - Total internal reflection when the refracted sine would exceed 1

Each scatter event picks one branch at random, weighted by the Schlick
reflectance, so glass reflects more strongly at grazing angles. Glass does not
tint light; its attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.orbitrace.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face, stream
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.orbitrace.core.ray import (
    normalize,
    reflect,
    refract,
    schlick_reflectance,
)
from src.orbitrace.core.sampler import random_f32

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class DielectricMaterial:
    """Dielectric (glass/water) material properties.

    Attributes:
        ior: Index of refraction. Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    ior: ti.f32


@ti.func
def refraction_ratio(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio of refractive indices across the surface.

    Entering the material (front face) gives 1/ior, leaving it gives ior.
    """
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def incidence_angle(unit_direction: vec3, normal: vec3):
    """Cosine and sine of the angle between the ray and the normal.

    Returns:
        Tuple of (cos_theta, sin_theta) with cos_theta clamped to 1.
    """
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return cos_theta, sin_theta


@ti.func
def scatter_dielectric_with_sample(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    sample: ti.f32,
):
    """Scatter through a dielectric surface using a given uniform sample.

    This is the deterministic core of scatter_dielectric. The ray reflects
    when total internal reflection occurs (ratio * sin_theta > 1) or when
    sample is below the Schlick reflectance; otherwise it refracts.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit, facing the ray).
        front_face: 1 if the ray hits the outside of the surface.
        sample: A uniform value in [0, 1).

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). The
        attenuation is white and did_scatter is always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    ratio = refraction_ratio(ior, front_face)
    unit_direction = normalize(incident_direction)
    cos_theta, sin_theta = incidence_angle(unit_direction, normal)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if ratio * sin_theta > 1.0:
        # Total internal reflection
        scattered_direction = reflect(unit_direction, normal)
    elif sample < schlick_reflectance(cos_theta, ratio):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, attenuation, 1


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    stream: ti.i32,
):
    """Compute the scattered ray direction for a dielectric surface.

    Draws one uniform sample per call; total internal reflection ignores it.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit, facing the ray).
        front_face: 1 if the ray hits the outside of the surface.
        stream: Random stream owned by the calling thread.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    return scatter_dielectric_with_sample(
        ior, incident_direction, normal, front_face, random_f32(stream)
    )


@ti.func
def will_reflect(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Check whether total internal reflection forces a reflection.

    Returns:
        1 if refraction_ratio * sin_theta > 1, 0 otherwise.
    """
    ratio = refraction_ratio(ior, front_face)
    _, sin_theta = incidence_angle(normalize(incident_direction), normal)
    return 1 if ratio * sin_theta > 1.0 else 0


@ti.func
def fresnel_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Schlick reflectance for a ray hitting a dielectric surface."""
    ratio = refraction_ratio(ior, front_face)
    cos_theta, _ = incidence_angle(normalize(incident_direction), normal)
    return schlick_reflectance(cos_theta, ratio)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be >= 1.0.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is less than 1.0.
    """
    if ior < 1.0:
        raise ValueError(
            f"Index of refraction = {ior} is less than 1.0. "
            "IOR must be >= 1.0 for physically meaningful materials."
        )

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    """Get the IOR for a dielectric material by index."""
    return dielectric_iors[material_idx]
