"""Tests for the material table and scattering dispatch."""

import pytest
import taichi as ti

# Samples drawn per dispatch test
N_SAMPLES = 500


class TestMaterialTable:
    """Tests for uploading materials."""

    def test_material_type_of(self):
        """Test each description maps to its kind."""
        from src.pathtracer.materials import Dielectric, Lambertian, Metal
        from src.pathtracer.materials.material import MaterialType, material_type_of

        assert material_type_of(Lambertian((0.5, 0.5, 0.5))) == MaterialType.LAMBERTIAN
        assert material_type_of(Metal((0.5, 0.5, 0.5), 0.1)) == MaterialType.METAL
        assert material_type_of(Dielectric(1.5)) == MaterialType.DIELECTRIC

    def test_unsupported_material_rejected(self):
        """Test that arbitrary objects are not materials."""
        from src.pathtracer.materials.material import material_type_of, upload_materials

        with pytest.raises(TypeError):
            material_type_of("glass")
        with pytest.raises(TypeError):
            upload_materials([object()])

    def test_upload_sets_count_and_columns(self):
        """Test uploaded parameters land in the table by index."""
        from src.pathtracer.materials import Dielectric, Lambertian, Metal
        from src.pathtracer.materials.material import (
            MaterialType,
            get_material_count,
            material_attenuations,
            material_fuzz,
            material_iors,
            material_kinds,
            upload_materials,
        )

        upload_materials([
            Lambertian((0.1, 0.2, 0.3)),
            Metal((0.7, 0.6, 0.5), fuzz=0.25),
            Dielectric(1.33),
        ])

        assert get_material_count() == 3
        assert material_kinds[0] == int(MaterialType.LAMBERTIAN)
        assert material_kinds[1] == int(MaterialType.METAL)
        assert material_kinds[2] == int(MaterialType.DIELECTRIC)
        assert abs(material_attenuations[0][1] - 0.2) < 1e-6
        assert abs(material_attenuations[1][0] - 0.7) < 1e-6
        assert abs(material_attenuations[2][2] - 1.0) < 1e-6
        assert abs(material_fuzz[1] - 0.25) < 1e-6
        assert abs(material_iors[2] - 1.33) < 1e-6

    def test_upload_too_many_rejected(self):
        """Test the table capacity is enforced."""
        from src.pathtracer.materials import Lambertian
        from src.pathtracer.materials.material import MAX_MATERIALS, upload_materials

        mat = Lambertian((0.5, 0.5, 0.5))
        with pytest.raises(RuntimeError):
            upload_materials([mat] * (MAX_MATERIALS + 1))

    def test_clear_materials(self):
        """Test clearing resets the count."""
        from src.pathtracer.materials import Lambertian
        from src.pathtracer.materials.material import (
            clear_materials,
            get_material_count,
            upload_materials,
        )

        upload_materials([Lambertian((0.5, 0.5, 0.5))])
        clear_materials()
        assert get_material_count() == 0


class TestScatterDispatch:
    """Tests for the scatter dispatch function."""

    def test_get_attenuation(self):
        """Test attenuation is the albedo, or white for glass."""
        from src.pathtracer.materials import Dielectric, Lambertian
        from src.pathtracer.materials.material import get_attenuation, upload_materials

        upload_materials([Lambertian((0.8, 0.3, 0.3)), Dielectric(1.5)])
        result = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = get_attenuation(0)
            result[1] = get_attenuation(1)

        test_kernel()
        assert abs(result[0][0] - 0.8) < 1e-6
        assert abs(result[0][1] - 0.3) < 1e-6
        assert abs(result[1][0] - 1.0) < 1e-6
        assert abs(result[1][2] - 1.0) < 1e-6

    def test_lambertian_always_scatters(self):
        """Test diffuse surfaces scatter into the normal's hemisphere."""
        from src.pathtracer.core.sampler import seed_state
        from src.pathtracer.materials import Lambertian
        from src.pathtracer.materials.material import scatter, upload_materials

        upload_materials([Lambertian((0.5, 0.5, 0.5))])
        cosines = ti.field(dtype=ti.f32, shape=N_SAMPLES)
        flags = ti.field(dtype=ti.i32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            incident = ti.math.vec3(0.0, -1.0, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            for i in range(N_SAMPLES):
                state = seed_state(ti.cast(31, ti.u32), 0, i, 0)
                direction, did_scatter, next_state = scatter(0, incident, normal, 1, state)
                cosines[i] = ti.math.dot(direction, normal)
                flags[i] = did_scatter

        test_kernel()
        assert (flags.to_numpy() == 1).all()
        assert (cosines.to_numpy() >= -1e-6).all()

    def test_metal_mirror(self):
        """Test a zero-fuzz metal reflects about the normal."""
        from src.pathtracer.core.sampler import seed_state
        from src.pathtracer.materials import Lambertian, Metal
        from src.pathtracer.materials.material import scatter, upload_materials

        upload_materials([Lambertian((0.5, 0.5, 0.5)), Metal((0.9, 0.9, 0.9))])
        result = ti.Vector.field(3, dtype=ti.f32, shape=())
        flag = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.vec3(1.0, -1.0, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            for i in range(1):
                state = seed_state(ti.cast(32, ti.u32), 0, i, 0)
                direction, did_scatter, next_state = scatter(1, incident, normal, 1, state)
                result[None] = direction
                flag[None] = did_scatter

        test_kernel()
        s = 2.0**-0.5
        assert abs(result[None][0] - s) < 1e-5
        assert abs(result[None][1] - s) < 1e-5
        assert flag[None] == 1

    def test_dielectric_always_scatters(self):
        """Test glass never absorbs, whether it reflects or refracts."""
        from src.pathtracer.core.sampler import seed_state
        from src.pathtracer.materials import Dielectric
        from src.pathtracer.materials.material import scatter, upload_materials

        upload_materials([Dielectric(1.5)])
        flags = ti.field(dtype=ti.i32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            incident = ti.math.vec3(1.0, -0.3, 0.2)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            for i in range(N_SAMPLES):
                state = seed_state(ti.cast(33, ti.u32), 0, i, 0)
                front_face = i % 2
                direction, did_scatter, next_state = scatter(
                    0, incident, normal, front_face, state
                )
                flags[i] = did_scatter

        test_kernel()
        assert (flags.to_numpy() == 1).all()
