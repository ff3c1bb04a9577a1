"""Pytest configuration for orbitrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before each test.

    This ensures tests are isolated from each other.
    """
    # Import here to avoid circular imports and ensure Taichi is initialized
    from src.orbitrace.materials.dielectric import clear_dielectric_materials
    from src.orbitrace.materials.lambertian import clear_lambertian_materials
    from src.orbitrace.materials.metal import clear_metal_materials
    from src.orbitrace.scene.intersection import clear_scene
    from src.orbitrace.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()

    # Clear everything before test
    _clear_all()

    yield

    # Clear everything after test
    _clear_all()


@pytest.fixture
def default_camera():
    """The camera at the start of the orbit, set up for rendering."""
    from src.orbitrace.camera.orbit import OrbitConfig, orbit_camera
    from src.orbitrace.camera.thin_lens import setup_camera

    camera = orbit_camera(0, OrbitConfig())
    setup_camera(camera)
    return camera
