"""Unit tests for the thin-lens camera and the orbit path.

Tests cover:
- Camera setup and orthonormal basis computation
- Viewport placement on the focus plane
- Lens sampling (pinhole when aperture is zero)
- Validation of degenerate configurations
- Orbit camera positions
"""

import math

import numpy as np
import pytest
import taichi as ti


def _generate_rays(s, t, count=256, seed=0):
    """Generate ``count`` rays through (s, t), one per stream."""
    from src.orbitrace.camera.thin_lens import get_ray
    from src.orbitrace.core.sampler import seed_streams

    seed_streams(seed, count)
    origins = ti.Vector.field(3, dtype=ti.f32, shape=count)
    directions = ti.Vector.field(3, dtype=ti.f32, shape=count)

    @ti.kernel
    def generate():
        for k in range(count):
            ray = get_ray(s, t, k)
            origins[k] = ray.origin
            directions[k] = ray.direction

    generate()
    return origins.to_numpy(), directions.to_numpy()


class TestCameraSetup:
    """Tests for camera setup and basis computation."""

    def test_orthonormal_basis(self):
        """Test that u, v, w form an orthonormal basis."""
        from src.orbitrace.camera.thin_lens import ThinLensCamera, get_camera_info, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(13.0, 2.0, 3.0),
                lookat=(0.0, 0.0, 0.0),
                vup=(0.0, 1.0, 0.0),
                vfov=20.0,
                aspect_ratio=1.5,
                aperture=0.1,
                focus_dist=10.0,
            )
        )

        info = get_camera_info()
        u, v, w = (np.array(info[name]) for name in ("u", "v", "w"))

        assert abs(np.dot(u, v)) < 1e-6
        assert abs(np.dot(u, w)) < 1e-6
        assert abs(np.dot(v, w)) < 1e-6
        for vec in (u, v, w):
            assert abs(np.linalg.norm(vec) - 1.0) < 1e-6
        # w points from lookat back toward the camera
        expected_w = np.array([13.0, 2.0, 3.0]) / math.sqrt(13.0**2 + 2.0**2 + 3.0**2)
        np.testing.assert_allclose(w, expected_w, atol=1e-6)
        assert abs(info["lens_radius"][0] - 0.05) < 1e-7

    def test_viewport_on_unit_focus_plane(self):
        """Test the viewport of a 90 degree camera at focus distance 1."""
        from src.orbitrace.camera.thin_lens import ThinLensCamera, get_camera_info, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vup=(0.0, 1.0, 0.0),
                vfov=90.0,
                aspect_ratio=1.0,
            )
        )

        info = get_camera_info()
        np.testing.assert_allclose(info["lower_left"], (-1.0, -1.0, -1.0), atol=1e-6)
        np.testing.assert_allclose(info["horizontal"], (2.0, 0.0, 0.0), atol=1e-6)
        np.testing.assert_allclose(info["vertical"], (0.0, 2.0, 0.0), atol=1e-6)

    def test_viewport_scales_with_focus_distance(self):
        """Test the viewport moves out to the focus plane and grows with it."""
        from src.orbitrace.camera.thin_lens import ThinLensCamera, get_camera_info, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vup=(0.0, 1.0, 0.0),
                vfov=90.0,
                aspect_ratio=2.0,
                aperture=0.5,
                focus_dist=10.0,
            )
        )

        info = get_camera_info()
        np.testing.assert_allclose(info["lower_left"], (-20.0, -10.0, -10.0), atol=1e-4)
        np.testing.assert_allclose(info["horizontal"], (40.0, 0.0, 0.0), atol=1e-4)
        np.testing.assert_allclose(info["vertical"], (0.0, 20.0, 0.0), atol=1e-4)

    def test_setup_marks_camera_initialized(self):
        """Test is_camera_initialized after setup_camera."""
        from src.orbitrace.camera.thin_lens import (
            ThinLensCamera,
            is_camera_initialized,
            setup_camera,
        )

        setup_camera(ThinLensCamera((0.0, 0.0, 1.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 45.0, 1.0))
        assert is_camera_initialized()


class TestCameraValidation:
    """Tests for rejected camera configurations."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"lookat": (1.0, 2.0, 3.0)},  # Same as lookfrom
            {"vup": (-1.0, -2.0, -3.0)},  # Parallel to the view direction
            {"vfov": 0.0},
            {"vfov": 180.0},
            {"aspect_ratio": 0.0},
            {"aperture": -0.1},
            {"focus_dist": 0.0},
        ],
    )
    def test_invalid_camera_rejected(self, overrides):
        """Test degenerate or out-of-range parameters raise ValueError."""
        from src.orbitrace.camera.thin_lens import ThinLensCamera, setup_camera

        params = {
            "lookfrom": (1.0, 2.0, 3.0),
            "lookat": (0.0, 0.0, 0.0),
            "vup": (0.0, 1.0, 0.0),
            "vfov": 40.0,
            "aspect_ratio": 1.5,
            "aperture": 0.1,
            "focus_dist": 5.0,
        }
        params.update(overrides)

        with pytest.raises(ValueError):
            setup_camera(ThinLensCamera(**params))


class TestRayGeneration:
    """Tests for get_ray."""

    def test_zero_aperture_origin_is_lookfrom(self):
        """Test a pinhole camera emits every ray from exactly lookfrom."""
        from src.orbitrace.camera.thin_lens import ThinLensCamera, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(13.0, 2.0, 3.0),
                lookat=(0.0, 0.0, 0.0),
                vup=(0.0, 1.0, 0.0),
                vfov=20.0,
                aspect_ratio=1.5,
                aperture=0.0,
                focus_dist=10.0,
            )
        )

        origins, _ = _generate_rays(0.3, 0.7)
        assert np.all(origins == np.array([13.0, 2.0, 3.0], dtype=np.float32))

    def test_center_ray_points_at_lookat(self):
        """Test the ray through the image center aims at lookat."""
        from src.orbitrace.camera.thin_lens import ThinLensCamera, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 5.0),
                lookat=(0.0, 0.0, 0.0),
                vup=(0.0, 1.0, 0.0),
                vfov=40.0,
                aspect_ratio=1.5,
                focus_dist=5.0,
            )
        )

        _, directions = _generate_rays(0.5, 0.5, count=1)
        # Unnormalized: length equals the focus distance
        np.testing.assert_allclose(directions[0], (0.0, 0.0, -5.0), atol=1e-5)

    def test_corner_rays(self):
        """Test s, t = 0 is the lower left and s, t = 1 the upper right."""
        from src.orbitrace.camera.thin_lens import ThinLensCamera, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vup=(0.0, 1.0, 0.0),
                vfov=90.0,
                aspect_ratio=1.0,
            )
        )

        _, lower_left = _generate_rays(0.0, 0.0, count=1)
        _, upper_right = _generate_rays(1.0, 1.0, count=1)
        np.testing.assert_allclose(lower_left[0], (-1.0, -1.0, -1.0), atol=1e-6)
        np.testing.assert_allclose(upper_right[0], (1.0, 1.0, -1.0), atol=1e-6)

    def test_lens_origins_lie_on_disk(self):
        """Test origins spread over a disk of radius aperture / 2 facing the view."""
        from src.orbitrace.camera.thin_lens import ThinLensCamera, get_camera_info, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(13.0, 2.0, 3.0),
                lookat=(0.0, 0.0, 0.0),
                vup=(0.0, 1.0, 0.0),
                vfov=20.0,
                aspect_ratio=1.5,
                aperture=2.0,
                focus_dist=10.0,
            )
        )
        w = np.array(get_camera_info()["w"])

        origins, _ = _generate_rays(0.5, 0.5, count=1024, seed=3)
        offsets = origins - np.array([13.0, 2.0, 3.0])

        distances = np.linalg.norm(offsets, axis=1)
        assert distances.max() < 1.0 + 1e-5
        assert distances.max() > 0.5
        # Offsets stay in the lens plane
        assert np.abs(offsets @ w).max() < 1e-4

    def test_rays_converge_on_focus_plane(self):
        """Test every lens sample aims at the same point on the focus plane."""
        from src.orbitrace.camera.thin_lens import ThinLensCamera, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vup=(0.0, 1.0, 0.0),
                vfov=90.0,
                aspect_ratio=1.0,
                aperture=1.0,
                focus_dist=4.0,
            )
        )

        origins, directions = _generate_rays(0.25, 0.75, count=256, seed=5)
        targets = origins + directions
        # lower_left (-4, -4, -4) + 0.25 * (8, 0, 0) + 0.75 * (0, 8, 0)
        np.testing.assert_allclose(targets, np.tile([-2.0, 2.0, -4.0], (256, 1)), atol=1e-5)
        assert len(np.unique(origins[:, 0])) > 1


class TestOrbit:
    """Tests for the orbit camera path."""

    def test_defaults(self):
        """Test OrbitConfig defaults describe the standard animation."""
        from src.orbitrace.camera.orbit import OrbitConfig

        config = OrbitConfig()
        assert config.frames == 180
        assert config.radius == 13.0
        assert config.height == 2.0
        assert config.vfov == 20.0
        assert config.aperture == 0.1
        assert config.focus_dist == 10.0
        assert config.aspect_ratio == 1.5

    def test_first_frame_on_positive_x(self):
        """Test frame 0 places the camera at (radius, height, 0)."""
        from src.orbitrace.camera.orbit import OrbitConfig, orbit_camera

        camera = orbit_camera(0, OrbitConfig())
        np.testing.assert_allclose(camera.lookfrom, (13.0, 2.0, 0.0), atol=1e-12)
        assert camera.lookat == (0.0, 0.0, 0.0)
        assert camera.aperture == 0.1
        assert camera.focus_dist == 10.0

    def test_quarter_turn(self):
        """Test a quarter of the frames moves the camera a quarter turn."""
        from src.orbitrace.camera.orbit import OrbitConfig, orbit_camera

        camera = orbit_camera(45, OrbitConfig(frames=180))
        np.testing.assert_allclose(camera.lookfrom, (0.0, 2.0, 13.0), atol=1e-9)

    def test_orbit_wraps(self):
        """Test frame N equals frame 0 for an N-frame orbit."""
        from src.orbitrace.camera.orbit import OrbitConfig, orbit_camera

        config = OrbitConfig(frames=36)
        np.testing.assert_allclose(
            orbit_camera(36, config).lookfrom, orbit_camera(0, config).lookfrom, atol=1e-9
        )

    def test_constant_distance_and_height(self):
        """Test every frame keeps the orbit radius and height."""
        from src.orbitrace.camera.orbit import OrbitConfig, orbit_camera

        config = OrbitConfig(frames=12, radius=5.0, height=1.0)
        for frame in range(12):
            x, y, z = orbit_camera(frame, config).lookfrom
            assert abs(math.hypot(x, z) - 5.0) < 1e-9
            assert y == 1.0

    @pytest.mark.parametrize("overrides", [{"frames": 0}, {"radius": 0.0}])
    def test_invalid_orbit_rejected(self, overrides):
        """Test non-positive frame counts and radii raise ValueError."""
        from src.orbitrace.camera.orbit import OrbitConfig

        with pytest.raises(ValueError):
            OrbitConfig(**overrides)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
