"""Tests for the Scene snapshot builder."""

import pytest


class TestSceneMaterials:
    """Tests for material registration."""

    def test_same_instance_registered_once(self):
        """Test a material shared by many spheres gets one ID."""
        from src.pathtracer.materials import Lambertian
        from src.pathtracer.scene.manager import Scene

        scene = Scene()
        ground = Lambertian((0.5, 0.5, 0.5))
        scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, ground)
        scene.add_sphere((0.0, 1.0, 0.0), 1.0, ground)

        assert scene.get_material_count() == 1
        assert scene.spheres[0].material_id == scene.spheres[1].material_id

    def test_equal_values_are_distinct_materials(self):
        """Test two equal-valued instances get separate IDs."""
        from src.pathtracer.materials import Metal
        from src.pathtracer.scene.manager import Scene

        scene = Scene()
        a = scene.add_material(Metal((0.7, 0.6, 0.5), 0.0))
        b = scene.add_material(Metal((0.7, 0.6, 0.5), 0.0))
        assert a != b
        assert scene.get_material_count() == 2

    def test_get_material(self):
        """Test lookup returns the registered instance."""
        from src.pathtracer.materials import Dielectric
        from src.pathtracer.scene.manager import Scene

        scene = Scene()
        glass = Dielectric(1.5)
        material_id = scene.add_material(glass)
        assert scene.get_material(material_id) is glass
        with pytest.raises(ValueError):
            scene.get_material(material_id + 1)
        with pytest.raises(ValueError):
            scene.get_material(-1)

    def test_unsupported_material_rejected(self):
        """Test only the three material kinds are accepted."""
        from src.pathtracer.scene.manager import Scene

        scene = Scene()
        with pytest.raises(TypeError):
            scene.add_sphere((0.0, 0.0, 0.0), 1.0, "chrome")
        assert scene.get_sphere_count() == 0


class TestSceneSpheres:
    """Tests for sphere insertion."""

    def test_add_sphere_returns_index(self):
        """Test spheres are numbered in insertion order."""
        from src.pathtracer.materials import Lambertian
        from src.pathtracer.scene.manager import Scene

        scene = Scene()
        mat = Lambertian((0.1, 0.2, 0.5))
        assert scene.add_sphere((0, 0, -1), 0.5, mat) == 0
        assert scene.add_sphere((1, 0, -1), 0.5, mat) == 1
        info = scene.spheres[1]
        assert info.center == (1.0, 0.0, -1.0)
        assert info.radius == 0.5

    def test_zero_radius_rejected(self):
        """Test that a degenerate sphere raises ValueError."""
        from src.pathtracer.materials import Lambertian
        from src.pathtracer.scene.manager import Scene

        scene = Scene()
        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 0.0, 0.0), 0.0, Lambertian((0.5, 0.5, 0.5)))

    def test_negative_radius_allowed(self):
        """Test hollow spheres keep their negative radius."""
        from src.pathtracer.materials import Dielectric
        from src.pathtracer.scene.manager import Scene

        scene = Scene()
        scene.add_sphere((0.0, 0.0, -1.0), -0.4, Dielectric(1.5))
        assert scene.spheres[0].radius == -0.4

    def test_malformed_center_rejected(self):
        """Test a center must have three components."""
        from src.pathtracer.materials import Lambertian
        from src.pathtracer.scene.manager import Scene

        scene = Scene()
        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 0.0), 1.0, Lambertian((0.5, 0.5, 0.5)))

    def test_upload_writes_fields(self):
        """Test upload fills both the sphere and material tables."""
        from src.pathtracer.materials import Dielectric, Lambertian
        from src.pathtracer.materials.material import get_material_count
        from src.pathtracer.scene.intersection import (
            get_sphere_count,
            sphere_material_ids,
            sphere_radii,
        )
        from src.pathtracer.scene.manager import Scene

        scene = Scene()
        ground = Lambertian((0.5, 0.5, 0.5))
        scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, ground)
        scene.add_sphere((0.0, 1.0, 0.0), 1.0, Dielectric(1.5))
        scene.add_sphere((4.0, 1.0, 0.0), 1.0, ground)
        scene.upload()

        assert get_sphere_count() == 3
        assert get_material_count() == 2
        assert sphere_material_ids[0] == 0
        assert sphere_material_ids[1] == 1
        assert sphere_material_ids[2] == 0
        assert abs(sphere_radii[0] - 1000.0) < 1e-3

    def test_repr(self):
        """Test the summary shows both counts."""
        from src.pathtracer.materials import Lambertian
        from src.pathtracer.scene.manager import Scene

        scene = Scene()
        scene.add_sphere((0.0, 0.0, 0.0), 1.0, Lambertian((0.5, 0.5, 0.5)))
        assert repr(scene) == "Scene(spheres=1, materials=1)"

    def test_snapshot_is_independent(self):
        """Test spheres added after a snapshot stay out of the copy."""
        from src.pathtracer.materials import Lambertian
        from src.pathtracer.scene.manager import Scene

        scene = Scene()
        ground = Lambertian((0.5, 0.5, 0.5))
        scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, ground)
        copy = scene.snapshot()
        scene.add_sphere((0.0, 1.0, 0.0), 1.0, Lambertian((0.1, 0.2, 0.3)))

        assert copy.get_sphere_count() == 1
        assert copy.get_material_count() == 1
        assert copy.add_material(ground) == 0
        assert scene.get_sphere_count() == 2
