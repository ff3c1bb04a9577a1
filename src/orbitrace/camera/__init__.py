"""Camera module for view and ray generation.

Components:
    thin_lens: Look-at camera with a thin lens for depth of field
    orbit: Turntable camera path used by the animation

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .orbit import OrbitConfig, orbit_angle, orbit_camera
from .thin_lens import (
    ThinLensCamera,
    get_camera_info,
    get_ray,
    is_camera_initialized,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "get_ray",
    "get_camera_info",
    "is_camera_initialized",
    "OrbitConfig",
    "orbit_angle",
    "orbit_camera",
]
