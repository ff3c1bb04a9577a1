"""Per-stream random number generation for Monte Carlo sampling.

Every random draw made while tracing goes through a *stream*: a 32-bit PCG
state stored in a Taichi field. The frame renderer gives each pixel its own
stream, so a pixel's samples only ever touch the state owned by the thread
computing that pixel. No generator is shared between threads, and seeding the
streams with the same value reproduces a frame exactly.

The generator is the PCG-RXS-M-XS 32-bit permutation over an LCG state, the
same construction GPU path tracers commonly use for per-pixel hashing.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.orbitrace.core.sampler import seed_streams, random_f32
    >>> seed_streams(1234, count=16)
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     return random_f32(0)
"""

import numpy as np
import taichi as ti

from src.orbitrace.core.ray import length_squared, normalize, vec3

# One stream per pixel of the largest supported image
MAX_STREAMS = 2048 * 2048

# LCG multiplier/increment and the RXS-M-XS output multiplier
_PCG_MULTIPLIER = 747796405
_PCG_INCREMENT = 2891336453
_PCG_OUTPUT_MULTIPLIER = 277803737

# 2^-24: maps the top 24 bits of a draw onto [0, 1)
_INV_2_POW_24 = 1.0 / 16777216.0

# Rejection sampling cap, matches the sampling loops elsewhere in the package
_MAX_REJECTION_TRIES = 100

_stream_states = ti.field(dtype=ti.u32, shape=MAX_STREAMS)


@ti.func
def _lcg_step(state: ti.u32) -> ti.u32:
    return state * ti.u32(_PCG_MULTIPLIER) + ti.u32(_PCG_INCREMENT)


@ti.func
def _permute(state: ti.u32) -> ti.u32:
    shift = (state >> ti.u32(28)) + ti.u32(4)
    word = ((state >> shift) ^ state) * ti.u32(_PCG_OUTPUT_MULTIPLIER)
    return (word >> ti.u32(22)) ^ word


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value with one PCG step followed by the output permutation.

    Args:
        value: Input word.

    Returns:
        A well-mixed 32-bit word.
    """
    return _permute(_lcg_step(value))


@ti.kernel
def _seed_streams_kernel(seed: ti.u32, count: ti.i32):
    seed_hash = pcg_hash(seed)
    for k in range(count):
        _stream_states[k] = pcg_hash(ti.cast(k, ti.u32) ^ seed_hash)


def seed_streams(seed: int, count: int) -> None:
    """Initialize the first ``count`` random streams from a seed.

    Stream k is seeded with hash(k xor hash(seed)), so streams are
    decorrelated from each other and fully determined by the seed.

    Args:
        seed: Any integer; only the low 32 bits are used.
        count: Number of streams to initialize (one per pixel when rendering).

    Raises:
        ValueError: If count is negative or exceeds MAX_STREAMS.
    """
    if count < 0 or count > MAX_STREAMS:
        raise ValueError(f"Stream count {count} must be in [0, {MAX_STREAMS}]")
    _seed_streams_kernel(seed & 0xFFFFFFFF, count)


def new_seed() -> int:
    """Draw a fresh 32-bit seed from the operating system's entropy."""
    return int(np.random.default_rng().integers(0, 2**32))


def get_stream_state(stream: int) -> int:
    """Read the raw state of a stream (for debugging and tests)."""
    return int(_stream_states[stream])


# =============================================================================
# Uniform Draws
# =============================================================================


@ti.func
def random_f32(stream: ti.i32) -> ti.f32:
    """Draw a uniform float in [0, 1) from a stream and advance it.

    Args:
        stream: Index of the stream owned by the calling thread.

    Returns:
        A uniformly distributed value in [0, 1).
    """
    state = _stream_states[stream]
    _stream_states[stream] = _lcg_step(state)
    word = _permute(_lcg_step(state))
    return ti.cast(word >> ti.u32(8), ti.f32) * _INV_2_POW_24


@ti.func
def random_range(stream: ti.i32, lo: ti.f32, hi: ti.f32) -> ti.f32:
    """Draw a uniform float in [lo, hi)."""
    return lo + (hi - lo) * random_f32(stream)


@ti.func
def pixel_stream(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32) -> ti.i32:
    """Map a pixel to its stream index (row-major from the bottom row)."""
    return pixel_j * width + pixel_i


# =============================================================================
# Geometric Sampling
# =============================================================================


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling on the enclosing cube.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(_MAX_REJECTION_TRIES):
        if not found:
            candidate = vec3(
                random_range(stream, -1.0, 1.0),
                random_range(stream, -1.0, 1.0),
                random_range(stream, -1.0, 1.0),
            )
            if length_squared(candidate) < 1.0:
                p = candidate
                found = True
    return p


@ti.func
def random_unit_vector(stream: ti.i32) -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    Candidates too close to the origin are rejected as well, so normalizing
    never divides by (nearly) zero.
    """
    p = vec3(1.0, 0.0, 0.0)
    found = False
    for _ in range(_MAX_REJECTION_TRIES):
        if not found:
            candidate = vec3(
                random_range(stream, -1.0, 1.0),
                random_range(stream, -1.0, 1.0),
                random_range(stream, -1.0, 1.0),
            )
            lensq = length_squared(candidate)
            if 1e-20 < lensq < 1.0:
                p = normalize(candidate)
                found = True
    return p


@ti.func
def random_in_unit_disk(stream: ti.i32) -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used by the thin-lens camera to pick a point on the aperture.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(_MAX_REJECTION_TRIES):
        if not found:
            candidate = vec3(
                random_range(stream, -1.0, 1.0),
                random_range(stream, -1.0, 1.0),
                0.0,
            )
            if candidate.x * candidate.x + candidate.y * candidate.y < 1.0:
                p = candidate
                found = True
    return p
