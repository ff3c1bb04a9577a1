"""Output module for writing rendered frames to disk.

Components:
    export: PPM and PNG writers and frame file naming
"""

from .export import (
    SUPPORTED_FORMATS,
    encode_ppm,
    frame_path,
    load_image,
    save_frame,
    save_png,
    write_ppm,
)

__all__ = [
    "SUPPORTED_FORMATS",
    "encode_ppm",
    "frame_path",
    "load_image",
    "save_frame",
    "save_png",
    "write_ppm",
]
