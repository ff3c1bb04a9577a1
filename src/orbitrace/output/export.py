"""Frame export to image files.

Supported formats:
    - PPM (plain-text P3, 8-bit)
    - PNG (8-bit RGB via Pillow)

Frames are written as ``frame_NNN.<ext>`` inside the output directory, with
the frame number zero-padded to three digits.

Example:
    >>> from src.orbitrace.output.export import save_frame
    >>> path = save_frame(pixels, "out", frame=7)  # out/frame_007.ppm
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

ImageFormat = Literal["ppm", "png"]

SUPPORTED_FORMATS: tuple[str, ...] = ("ppm", "png")

# Largest channel value written to PPM headers
PPM_MAX_VALUE = 255


def _check_pixels(pixels: npt.NDArray[np.uint8]) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) RGB array, got shape {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {pixels.dtype}")


def frame_path(directory: str | Path, frame: int, ext: str = "ppm") -> Path:
    """Path of a frame file: ``directory/frame_NNN.ext``."""
    return Path(directory) / f"frame_{frame:03d}.{ext}"


def encode_ppm(pixels: npt.NDArray[np.uint8]) -> str:
    """Encode an image as plain-text PPM (P3).

    The header is ``P3``, ``width height`` and the maximum value, each on
    its own line, followed by one ``r g b`` line per pixel, top row first.

    Args:
        pixels: Array of shape (H, W, 3) with dtype uint8.

    Returns:
        The PPM file contents.
    """
    _check_pixels(pixels)
    height, width, _ = pixels.shape
    lines = ["P3", f"{width} {height}", str(PPM_MAX_VALUE)]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def write_ppm(filepath: str | Path, pixels: npt.NDArray[np.uint8]) -> None:
    """Write an image to a plain-text PPM file."""
    Path(filepath).write_text(encode_ppm(pixels), encoding="ascii")


def save_png(filepath: str | Path, pixels: npt.NDArray[np.uint8]) -> None:
    """Write an image to a PNG file.

    Args:
        filepath: Output file path (should end in .png).
        pixels: Array of shape (H, W, 3) with dtype uint8.
    """
    _check_pixels(pixels)
    pil_image = PILImage.fromarray(pixels, mode="RGB")
    pil_image.save(filepath)


def save_frame(
    pixels: npt.NDArray[np.uint8],
    directory: str | Path,
    frame: int,
    fmt: ImageFormat = "ppm",
) -> Path:
    """Save one animation frame, creating the output directory if needed.

    Args:
        pixels: Array of shape (H, W, 3) with dtype uint8.
        directory: Output directory.
        frame: Frame number used in the file name.
        fmt: "ppm" or "png".

    Returns:
        Path of the written file.

    Raises:
        ValueError: If the format is not supported or pixels are malformed.
        OSError: If the directory or file cannot be written.
    """
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported image format {fmt!r}, expected one of {SUPPORTED_FORMATS}")

    Path(directory).mkdir(parents=True, exist_ok=True)
    path = frame_path(directory, frame, fmt)
    if fmt == "png":
        save_png(path, pixels)
    else:
        write_ppm(path, pixels)
    return path


def load_image(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Read a PPM or PNG file back into an (H, W, 3) uint8 array."""
    with PILImage.open(filepath) as image:
        return np.asarray(image.convert("RGB"), dtype=np.uint8)
