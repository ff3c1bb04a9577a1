"""Camera path for the turntable animation.

The camera circles the look-at point at a fixed height, completing one full
revolution over the animation:

    angle = frame * 2 * pi / frames
    lookfrom = (radius * cos(angle), height, radius * sin(angle))

Frame 0 sits on the +x axis and the last frame stops one step short of a full
turn, so the sequence loops seamlessly.
"""

import math
from dataclasses import dataclass

from src.orbitrace.camera.thin_lens import ThinLensCamera


@dataclass
class OrbitConfig:
    """Parameters of the orbiting camera.

    Attributes:
        frames: Number of frames in one revolution.
        radius: Horizontal distance from the look-at point.
        height: Camera height above the ground plane.
        lookat: Point the camera keeps in view.
        vup: Up direction.
        vfov: Vertical field of view in degrees.
        aperture: Lens diameter.
        focus_dist: Distance to the plane of perfect focus.
        aspect_ratio: Image width divided by height.
    """

    frames: int = 180
    radius: float = 13.0
    height: float = 2.0
    lookat: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 20.0
    aperture: float = 0.1
    focus_dist: float = 10.0
    aspect_ratio: float = 3.0 / 2.0

    def __post_init__(self):
        if self.frames <= 0:
            raise ValueError(f"Frame count must be positive, got {self.frames}")
        if self.radius <= 0.0:
            raise ValueError(f"Orbit radius must be positive, got {self.radius}")


def orbit_angle(frame: int, frames: int) -> float:
    """Angle in radians of the camera at a frame."""
    return frame * 2.0 * math.pi / frames


def orbit_camera(frame: int, config: OrbitConfig) -> ThinLensCamera:
    """Build the camera for one frame of the orbit.

    Args:
        frame: Frame index; any integer is accepted and wraps around.
        config: Orbit parameters.

    Returns:
        A ThinLensCamera positioned on the orbit circle.
    """
    angle = orbit_angle(frame, config.frames)
    lookfrom = (
        config.radius * math.cos(angle),
        config.height,
        config.radius * math.sin(angle),
    )
    return ThinLensCamera(
        lookfrom=lookfrom,
        lookat=config.lookat,
        vup=config.vup,
        vfov=config.vfov,
        aspect_ratio=config.aspect_ratio,
        aperture=config.aperture,
        focus_dist=config.focus_dist,
    )
