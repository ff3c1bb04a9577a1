"""Ray color estimation for the sphere scene.

A ray is followed through the scene until it escapes, is absorbed, or runs out
of bounces:

    - escapes: the sky gradient, weighted by every attenuation collected so far
    - absorbed by a surface: black
    - bounce limit reached: black

Each hit multiplies the running throughput by the material's attenuation and
continues with the scattered ray. This is the recursive formulation
color = attenuation * ray_color(scattered, depth - 1) unrolled into a loop,
since Taichi functions cannot recurse.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.orbitrace.core.integrator import trace_ray
    >>> # With an empty scene every ray sees the sky
    >>> trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=50, seed=1)
    (0.5, 0.7, 1.0)
"""

import taichi as ti
import taichi.math as tm

from src.orbitrace.core.ray import normalize
from src.orbitrace.core.sampler import seed_streams
from src.orbitrace.materials.dielectric import get_dielectric_ior, scatter_dielectric
from src.orbitrace.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from src.orbitrace.materials.metal import get_metal_albedo, get_metal_fuzz, scatter_metal
from src.orbitrace.scene.intersection import SceneHitRecord, intersect_scene
from src.orbitrace.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum ray bounces (path length)
MAX_DEPTH = 50

# Accepted hit interval; t_min keeps scattered rays from re-hitting their own
# surface through floating point error
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints: white at the horizon, blue straight up
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


@ti.dataclass
class ScatterRecord:
    """Outcome of a ray interacting with a material.

    Attributes:
        did_scatter: 1 if a scattered ray was produced, 0 if absorbed.
        attenuation: Color the scattered light is multiplied by.
        origin: Origin of the scattered ray (the hit point).
        direction: Direction of the scattered ray (not normalized).
    """

    did_scatter: ti.i32
    attenuation: vec3
    origin: vec3
    direction: vec3


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    rec: SceneHitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Dispatch to the scattering function of the hit material.

    Args:
        material_id: The unified material ID.
        incident_direction: Direction of the incoming ray (any length).
        rec: The hit record at the surface.
        stream: Random stream owned by the calling thread.

    Returns:
        A ScatterRecord. Unknown material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation = scatter_lambertian(albedo, rec.normal, stream)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter = scatter_metal(
            albedo, fuzz, incident_direction, rec.normal, stream
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            ior, incident_direction, rec.normal, rec.front_face, stream
        )

    return ScatterRecord(
        did_scatter=did_scatter,
        attenuation=attenuation,
        origin=rec.point,
        direction=scattered_direction,
    )


# =============================================================================
# Ray Color
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background color for a ray that escapes the scene.

    Blends linearly from white to light blue with the height of the unit
    direction.
    """
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32, stream: ti.i32) -> vec3:
    """Estimate the light arriving along a ray.

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        max_depth: Maximum number of surface interactions. Zero or less
            returns black without testing the scene.
        stream: Random stream owned by the calling thread.

    Returns:
        The estimated color (linear, unbounded above).
    """
    ray_origin = origin
    ray_direction = direction
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * sky_color(ray_direction)
                active = 0
            else:
                scattered = scatter_material(rec.material_id, ray_direction, rec, stream)
                if scattered.did_scatter == 0:
                    active = 0
                else:
                    throughput *= scattered.attenuation
                    ray_origin = scattered.origin
                    ray_direction = scattered.direction

    return color


# =============================================================================
# Host Entry Points
# =============================================================================


@ti.kernel
def _trace_ray_kernel(
    ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32, depth: ti.i32
) -> vec3:
    return ray_color(vec3(ox, oy, oz), vec3(dx, dy, dz), depth, 0)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Trace a single ray against the current scene from Python.

    Intended for testing and debugging; frames are rendered by
    FrameRenderer. Uses random stream 0, seeded with ``seed``.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z).
        depth: Maximum number of bounces.
        seed: Seed for the random stream.

    Returns:
        Tuple of (R, G, B) color values.
    """
    seed_streams(seed, 1)
    color = _trace_ray_kernel(*origin, *direction, depth)
    return (float(color[0]), float(color[1]), float(color[2]))
