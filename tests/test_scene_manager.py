"""Unit tests for the scene manager.

Tests cover:
- Unified material IDs across the per-type registries
- Shared materials between spheres
- Validation of material IDs and parameters
- Scene config export
"""

import pytest
import taichi as ti


class TestMaterialRegistration:
    """Tests for unified material IDs."""

    def test_material_ids_are_sequential_across_types(self):
        """Test IDs count up regardless of the material type."""
        from src.orbitrace.scene.manager import SceneManager

        scene = SceneManager()
        assert scene.add_lambertian_material((0.5, 0.5, 0.5)) == 0
        assert scene.add_metal_material((0.8, 0.8, 0.8), 0.2) == 1
        assert scene.add_dielectric_material(1.5) == 2
        assert scene.add_lambertian_material((0.1, 0.2, 0.3)) == 3
        assert scene.get_material_count() == 4

    def test_material_info_records_type_and_index(self):
        """Test MaterialInfo maps IDs to the type-local registry slot."""
        from src.orbitrace.scene.manager import MaterialType, SceneManager

        scene = SceneManager()
        scene.add_lambertian_material((0.5, 0.5, 0.5))
        scene.add_metal_material((0.8, 0.8, 0.8))
        second_lambertian = scene.add_lambertian_material((0.1, 0.1, 0.1))

        info = scene.materials[second_lambertian]
        assert info.material_type == MaterialType.LAMBERTIAN
        assert info.type_index == 1

    def test_device_lookup_matches_host(self):
        """Test get_material_type and get_material_type_index in a kernel."""
        from src.orbitrace.scene.manager import (
            MaterialType,
            SceneManager,
            get_material_type,
            get_material_type_index,
        )

        scene = SceneManager()
        scene.add_lambertian_material((0.5, 0.5, 0.5))
        scene.add_dielectric_material(1.5)
        metal = scene.add_metal_material((0.8, 0.8, 0.8))

        types = ti.field(dtype=ti.i32, shape=2)
        indices = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            types[0] = get_material_type(metal)
            indices[0] = get_material_type_index(metal)
            types[1] = get_material_type(57)
            indices[1] = get_material_type_index(57)

        test_kernel()
        assert types[0] == int(MaterialType.METAL)
        assert indices[0] == 0
        # Unknown IDs map to -1
        assert types[1] == -1
        assert indices[1] == -1

    def test_metal_fuzz_clamped_in_info(self):
        """Test the recorded fuzz reflects clamping."""
        from src.orbitrace.scene.manager import SceneManager

        scene = SceneManager()
        mat = scene.add_metal_material((0.5, 0.5, 0.5), 2.0)
        assert scene.materials[mat].params["fuzz"] == 1.0

    def test_invalid_parameters_propagate(self):
        """Test registry validation errors reach the caller."""
        from src.orbitrace.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError):
            scene.add_lambertian_material((1.5, 0.0, 0.0))
        with pytest.raises(ValueError):
            scene.add_metal_material((0.5, 0.5, 0.5), -1.0)
        with pytest.raises(ValueError):
            scene.add_dielectric_material(0.5)
        assert scene.get_material_count() == 0


class TestSphereManagement:
    """Tests for adding spheres through the manager."""

    def test_spheres_share_material(self):
        """Test several spheres can reference one material."""
        from src.orbitrace.scene.manager import SceneManager

        scene = SceneManager()
        glass = scene.add_dielectric_material(1.5)
        scene.add_sphere((0.0, 1.0, 0.0), 1.0, glass)
        scene.add_sphere((0.0, 1.0, 3.0), 1.0, glass)

        assert scene.get_sphere_count() == 2
        assert scene.get_material_count() == 1
        assert all(info.material_id == glass for info in scene.spheres)

    def test_invalid_material_id_rejected(self):
        """Test spheres must reference a registered material."""
        from src.orbitrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_material((0.5, 0.5, 0.5))
        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 0.0, 0.0), 1.0, 1)
        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 0.0, 0.0), 1.0, -1)

    def test_convenience_methods(self):
        """Test add_*_sphere create a material and a sphere together."""
        from src.orbitrace.scene.manager import MaterialType, SceneManager

        scene = SceneManager()
        s0, m0 = scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.7, 0.3, 0.3))
        s1, m1 = scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), 0.3)
        s2, m2 = scene.add_dielectric_sphere((-1.0, 0.0, -1.0), 0.5, 1.5)

        assert (s0, s1, s2) == (0, 1, 2)
        assert (m0, m1, m2) == (0, 1, 2)
        counts = scene.count_materials_by_type()
        assert counts[MaterialType.LAMBERTIAN] == 1
        assert counts[MaterialType.METAL] == 1
        assert counts[MaterialType.DIELECTRIC] == 1

    def test_new_manager_clears_previous_scene(self):
        """Test constructing a SceneManager resets the global scene."""
        from src.orbitrace.scene.manager import SceneManager

        first = SceneManager()
        first.add_lambertian_sphere((0.0, 0.0, 0.0), 1.0, (0.5, 0.5, 0.5))

        second = SceneManager()
        assert second.get_sphere_count() == 0
        assert second.get_material_count() == 0

    def test_clear(self):
        """Test clear removes spheres and materials."""
        from src.orbitrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, 0.0), 1.0, (0.5, 0.5, 0.5))
        scene.clear()

        assert scene.get_sphere_count() == 0
        assert scene.get_material_count() == 0
        assert scene.spheres == []
        assert scene.materials == []


class TestSceneConfig:
    """Tests for to_config."""

    def test_config_describes_scene(self):
        """Test the exported config lists materials and spheres in order."""
        from src.orbitrace.scene.manager import SceneManager

        scene = SceneManager()
        ground = scene.add_lambertian_material((0.5, 0.5, 0.5))
        scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, ground)
        scene.add_metal_sphere((4.0, 1.0, 0.0), 1.0, (0.7, 0.6, 0.5), 0.0)
        scene.add_dielectric_sphere((0.0, 1.0, 0.0), 1.0, 1.5)
        config = scene.to_config()

        assert config.materials == [
            {"type": "lambertian", "albedo": (0.5, 0.5, 0.5)},
            {"type": "metal", "albedo": (0.7, 0.6, 0.5), "fuzz": 0.0},
            {"type": "dielectric", "ior": 1.5},
        ]
        assert config.spheres[0] == {
            "center": (0.0, -1000.0, 0.0),
            "radius": 1000.0,
            "material_id": 0,
        }
        assert [s["material_id"] for s in config.spheres] == [0, 1, 2]

    def test_empty_scene(self):
        """Test an empty scene exports empty lists."""
        from src.orbitrace.scene.manager import SceneManager

        config = SceneManager().to_config()
        assert config.materials == []
        assert config.spheres == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
