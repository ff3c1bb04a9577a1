#!/usr/bin/env python3
"""Render the random spheres scene as a turntable animation.

The camera circles the scene once over the requested number of frames and
every frame is written to the output directory as frame_NNN.ppm (or .png).

Usage:
    python -m examples.render_orbit [options]

Options:
    --width WIDTH       Image width in pixels (default: 1200)
    --aspect RATIO      Width / height (default: 1.5)
    --samples SAMPLES   Samples per pixel (default: 500)
    --depth DEPTH       Maximum bounces per sample (default: 50)
    --frames FRAMES     Frames in one revolution (default: 180)
    --start START       First frame to render (default: 0)
    --end END           Stop before this frame (default: FRAMES)
    --output DIR        Output directory (default: out)
    --format FORMAT     ppm or png (default: ppm)
    --seed SEED         Seed for a reproducible run
    --arch ARCH         gpu or cpu (default: gpu, falls back to cpu)
    --quiet             Suppress progress output
    --verbose           Enable debug logging

Example:
    python -m examples.render_orbit --width 300 --samples 20 --frames 36 --format png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random spheres scene from an orbiting camera.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1200,
        help="Image width in pixels (default: 1200)",
    )
    parser.add_argument(
        "--aspect",
        type=float,
        default=3.0 / 2.0,
        help="Aspect ratio, width / height (default: 1.5)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=500,
        help="Number of samples per pixel (default: 500)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=50,
        help="Maximum bounces per sample (default: 50)",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=180,
        help="Frames in one revolution (default: 180)",
    )
    parser.add_argument(
        "--start",
        type=int,
        default=0,
        help="First frame to render (default: 0)",
    )
    parser.add_argument(
        "--end",
        type=int,
        default=None,
        help="Stop before this frame (default: the frame count)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="out",
        help="Output directory (default: out)",
    )
    parser.add_argument(
        "--format",
        choices=["ppm", "png"],
        default="ppm",
        help="Image format (default: ppm)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for scene layout and sampling (default: random)",
    )
    parser.add_argument(
        "--arch",
        choices=["gpu", "cpu"],
        default="gpu",
        help="Taichi backend (default: gpu, falls back to cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def render_orbit(
    width: int = 1200,
    aspect_ratio: float = 3.0 / 2.0,
    samples: int = 500,
    depth: int = 50,
    frames: int = 180,
    start: int = 0,
    end: int | None = None,
    output_dir: str = "out",
    fmt: str = "ppm",
    seed: int | None = None,
    quiet: bool = False,
) -> list[Path]:
    """Render the orbit animation and save every frame.

    Returns:
        Paths of the saved frames.
    """
    # Lazy imports to allow Taichi initialization first
    from src.orbitrace.camera.orbit import OrbitConfig
    from src.orbitrace.core.animation import render_animation
    from src.orbitrace.core.renderer import RenderSettings

    settings = RenderSettings.from_aspect_ratio(width, aspect_ratio, samples, depth)
    orbit = OrbitConfig(frames=frames, aspect_ratio=aspect_ratio)
    frame_range = range(start, frames if end is None else end)

    if not quiet:
        print(
            f"Rendering {len(frame_range)} frames ({settings.width}x{settings.height}, "
            f"{samples} spp) into {output_dir}/..."
        )

    start_time = time.time()

    def progress_callback(done: int, total: int, path: Path) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            per_frame = elapsed / done if done > 0 else 0
            print(
                f"\r  Progress: {done}/{total} frames "
                f"({done / total * 100:.1f}%) - {per_frame:.1f}s/frame - {path.name}",
                end="",
                flush=True,
            )

    paths = render_animation(
        settings,
        orbit,
        output_dir=output_dir,
        fmt=fmt,
        seed=seed,
        frames=frame_range,
        progress=progress_callback,
    )

    if not quiet:
        print()  # Newline after progress
        print(f"Saved {len(paths)} frames to: {Path(output_dir).absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return paths


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize Taichi
    # Use GPU if requested and available, fall back to CPU
    if args.arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
            if not args.quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            if not args.quiet:
                print("Using CPU backend")
    else:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_orbit(
            width=args.width,
            aspect_ratio=args.aspect,
            samples=args.samples,
            depth=args.depth,
            frames=args.frames,
            start=args.start,
            end=args.end,
            output_dir=args.output,
            fmt=args.format,
            seed=args.seed,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
