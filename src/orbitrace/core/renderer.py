"""Parallel frame renderer.

Renders one frame of the current scene through the current camera into an
8-bit RGB image. All pixels are computed in a single Taichi parallel loop.
Each pixel draws every random number it needs from its own stream, so no
state is shared between threads and a frame rendered twice with the same
seed is bit-for-bit identical.

Per pixel (i, j), with j = 0 the bottom row:

    for each sample:
        s = (i + r) / (width - 1), t = (j + r') / (height - 1)
        color += ray_color(camera ray through (s, t))
    c = sqrt(color / samples)          # gamma 2
    value = int(256 * clamp(c, 0, 0.999))

The output array is ordered top row first, matching image files.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.orbitrace.camera.thin_lens import ThinLensCamera, setup_camera
    >>> from src.orbitrace.core.renderer import FrameRenderer, RenderSettings
    >>> from src.orbitrace.scene.random_scene import create_random_scene
    >>>
    >>> create_random_scene()
    >>> setup_camera(ThinLensCamera((13, 2, 3), (0, 0, 0), (0, 1, 0), 20.0, 1.5, 0.1, 10.0))
    >>> renderer = FrameRenderer(RenderSettings(width=300, height=200, samples_per_pixel=10))
    >>> pixels = renderer.render(seed=42)  # uint8 array of shape (200, 300, 3)
"""

import logging
import time
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.orbitrace.camera.thin_lens import get_ray, is_camera_initialized
from src.orbitrace.core.integrator import MAX_DEPTH, ray_color
from src.orbitrace.core.sampler import new_seed, pixel_stream, random_f32, seed_streams

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum supported image dimensions (one random stream per pixel)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Largest channel value before quantization; keeps 256 * c below 256
MAX_CHANNEL = 0.999


@dataclass
class RenderSettings:
    """Image size and sampling parameters for a frame.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of bounces per sample. 0 renders black.

    Raises:
        ValueError: If any value is out of range.
    """

    width: int = 1200
    height: int = 800
    samples_per_pixel: int = 500
    max_depth: int = MAX_DEPTH

    def __post_init__(self):
        if not 1 <= self.width <= MAX_IMAGE_WIDTH:
            raise ValueError(f"Image width must be in [1, {MAX_IMAGE_WIDTH}], got {self.width}")
        if not 1 <= self.height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image height must be in [1, {MAX_IMAGE_HEIGHT}], got {self.height}"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"Samples per pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"Max depth must be non-negative, got {self.max_depth}")

    @classmethod
    def from_aspect_ratio(
        cls,
        width: int,
        aspect_ratio: float,
        samples_per_pixel: int = 500,
        max_depth: int = MAX_DEPTH,
    ) -> "RenderSettings":
        """Derive the height from the width and an aspect ratio (truncating)."""
        if aspect_ratio <= 0.0:
            raise ValueError(f"Aspect ratio must be positive, got {aspect_ratio}")
        return cls(
            width=width,
            height=int(width / aspect_ratio),
            samples_per_pixel=samples_per_pixel,
            max_depth=max_depth,
        )

    @property
    def pixel_count(self) -> int:
        """Number of pixels (and random streams) in a frame."""
        return self.width * self.height


# =============================================================================
# Per-pixel Estimate
# =============================================================================


@ti.func
def _pixel_color(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Average samples for one pixel and quantize to 8-bit channel values."""
    stream = pixel_stream(pixel_i, pixel_j, width)

    # A single-pixel axis would divide by zero
    s_scale = 1.0 / ti.cast(ti.max(width - 1, 1), ti.f32)
    t_scale = 1.0 / ti.cast(ti.max(height - 1, 1), ti.f32)

    color = vec3(0.0, 0.0, 0.0)
    for _ in range(samples_per_pixel):
        s = (ti.cast(pixel_i, ti.f32) + random_f32(stream)) * s_scale
        t = (ti.cast(pixel_j, ti.f32) + random_f32(stream)) * t_scale
        ray = get_ray(s, t, stream)
        sample = ray_color(ray.origin, ray.direction, max_depth, stream)

        # Check for NaN/Inf and replace with zero
        for c in ti.static(range(3)):
            if tm.isnan(sample[c]) or tm.isinf(sample[c]):
                sample[c] = 0.0

        color += sample

    scale = 1.0 / ti.cast(samples_per_pixel, ti.f32)
    corrected = ti.sqrt(color * scale)

    quantized = ti.Vector([0, 0, 0], dt=ti.i32)
    for c in ti.static(range(3)):
        quantized[c] = ti.cast(256.0 * tm.clamp(corrected[c], 0.0, MAX_CHANNEL), ti.i32)
    return quantized


@ti.kernel
def _render_frame_kernel(
    image: ti.types.ndarray(dtype=ti.u8, ndim=3),
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    for i, j in ti.ndrange(width, height):
        color = _pixel_color(i, j, width, height, samples_per_pixel, max_depth)
        for c in ti.static(range(3)):
            image[height - 1 - j, i, c] = ti.cast(color[c], ti.u8)


@ti.kernel
def _render_pixel_kernel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
) -> ti.types.vector(3, ti.i32):
    return _pixel_color(pixel_i, pixel_j, width, height, samples_per_pixel, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


class FrameRenderer:
    """Renders frames of the current scene and camera.

    The scene (SceneManager) and camera (setup_camera) are global state and
    must be prepared before calling render.

    Attributes:
        settings: The image size and sampling parameters.
        last_seed: Seed used by the most recent render, or None.
    """

    def __init__(self, settings: RenderSettings | None = None) -> None:
        self.settings = settings if settings is not None else RenderSettings()
        self.last_seed: int | None = None

    def _prepare(self, seed: int | None) -> int:
        if not is_camera_initialized():
            raise RuntimeError("Camera not set up. Call setup_camera() first.")
        if seed is None:
            seed = new_seed()
        seed_streams(seed, self.settings.pixel_count)
        self.last_seed = seed
        return seed

    def render(self, seed: int | None = None) -> npt.NDArray[np.uint8]:
        """Render a full frame.

        Args:
            seed: Seed for the per-pixel random streams. A fresh seed is drawn
                when omitted; it is kept in last_seed.

        Returns:
            Array of shape (height, width, 3) with dtype uint8, top row first.

        Raises:
            RuntimeError: If the camera has not been set up.
        """
        settings = self.settings
        seed = self._prepare(seed)

        # Row 0 is the top of the image
        image = np.zeros((settings.height, settings.width, 3), dtype=np.uint8)
        start = time.perf_counter()
        _render_frame_kernel(
            image,
            settings.width,
            settings.height,
            settings.samples_per_pixel,
            settings.max_depth,
        )
        logger.debug(
            "Rendered %dx%d frame at %d spp (seed %d) in %.2fs",
            settings.width,
            settings.height,
            settings.samples_per_pixel,
            seed,
            time.perf_counter() - start,
        )

        return image

    def render_pixel(self, pixel_i: int, pixel_j: int, seed: int) -> tuple[int, int, int]:
        """Render a single pixel exactly as render would with the same seed.

        Args:
            pixel_i: Column, 0 = left.
            pixel_j: Row, 0 = bottom (image row height - 1 - pixel_j).
            seed: Seed for the random streams.

        Returns:
            Tuple of (R, G, B) values in [0, 255].

        Raises:
            ValueError: If the pixel lies outside the image.
            RuntimeError: If the camera has not been set up.
        """
        settings = self.settings
        if not (0 <= pixel_i < settings.width and 0 <= pixel_j < settings.height):
            raise ValueError(
                f"Pixel ({pixel_i}, {pixel_j}) is outside the "
                f"{settings.width}x{settings.height} image"
            )
        self._prepare(seed)
        color = _render_pixel_kernel(
            pixel_i,
            pixel_j,
            settings.width,
            settings.height,
            settings.samples_per_pixel,
            settings.max_depth,
        )
        return (int(color[0]), int(color[1]), int(color[2]))
