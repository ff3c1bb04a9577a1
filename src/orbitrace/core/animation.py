"""Turntable animation: render the scene from every point of the orbit.

The scene is built once. Frames are then rendered strictly one after another;
each frame is written to disk before the next one starts, so an interrupted
run leaves a contiguous prefix of complete files.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.orbitrace.camera.orbit import OrbitConfig
    >>> from src.orbitrace.core.animation import render_animation
    >>> from src.orbitrace.core.renderer import RenderSettings
    >>> paths = render_animation(
    ...     RenderSettings(width=300, height=200, samples_per_pixel=20),
    ...     OrbitConfig(frames=36),
    ...     output_dir="out",
    ... )
"""

import logging
import time
from collections.abc import Callable, Iterable
from pathlib import Path

import numpy as np

from src.orbitrace.camera.orbit import OrbitConfig, orbit_camera
from src.orbitrace.camera.thin_lens import setup_camera
from src.orbitrace.core.renderer import FrameRenderer, RenderSettings
from src.orbitrace.output.export import ImageFormat, save_frame
from src.orbitrace.scene.manager import SceneManager
from src.orbitrace.scene.random_scene import create_random_scene

logger = logging.getLogger(__name__)

# Callback receives (frames_done, frames_total, path_of_latest_frame)
FrameCallback = Callable[[int, int, Path], None]


def frame_seed(seed: int | None, frame: int) -> int | None:
    """Seed for one frame's random streams, derived from the run seed."""
    if seed is None:
        return None
    return (seed + frame) & 0xFFFFFFFF


def render_animation(
    settings: RenderSettings,
    orbit: OrbitConfig,
    output_dir: str | Path = "out",
    fmt: ImageFormat = "ppm",
    seed: int | None = None,
    frames: Iterable[int] | None = None,
    progress: FrameCallback | None = None,
    scene: SceneManager | None = None,
) -> list[Path]:
    """Render and save the frames of the orbit animation.

    Args:
        settings: Image size and sampling parameters.
        orbit: Camera orbit parameters.
        output_dir: Directory the frames are written to.
        fmt: Output format, "ppm" or "png".
        seed: Seed for scene layout and per-frame sampling. Each run draws
            fresh randomness when omitted.
        frames: Frame indices to render. Defaults to every frame of the orbit.
        progress: Optional callback invoked after each frame is saved.
        scene: A scene that is already built. The random spheres scene is
            created when omitted.

    Returns:
        Paths of the written frames, in render order.

    Raises:
        OSError: If a frame cannot be written; earlier frames stay on disk.
    """
    if scene is None:
        rng = np.random.default_rng(seed)
        scene = create_random_scene(rng)

    frame_list = list(frames) if frames is not None else list(range(orbit.frames))
    renderer = FrameRenderer(settings)
    paths: list[Path] = []

    logger.info(
        "Rendering %d frames at %dx%d, %d spp, depth %d into %s",
        len(frame_list),
        settings.width,
        settings.height,
        settings.samples_per_pixel,
        settings.max_depth,
        output_dir,
    )

    for done, frame in enumerate(frame_list, start=1):
        start = time.perf_counter()
        logger.info("Frame %d started", frame)

        setup_camera(orbit_camera(frame, orbit))
        pixels = renderer.render(seed=frame_seed(seed, frame))
        path = save_frame(pixels, output_dir, frame, fmt)
        paths.append(path)

        logger.info("Frame %d saved to %s in %.2fs", frame, path, time.perf_counter() - start)
        if progress is not None:
            progress(done, len(frame_list), path)

    return paths
