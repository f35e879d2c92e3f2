"""Unit tests for the Lambertian material module.

Tests cover:
- Host-side validation and identity semantics
- Scattered directions stay in the normal's hemisphere
- Diffuse scattering never absorbs
- Determinism for a fixed generator state
"""

import pytest
import taichi as ti

# Samples drawn per scattering test
N_SAMPLES = 1000


class TestLambertianDescription:
    """Tests for the host-side Lambertian description."""

    def test_albedo_stored_as_floats(self):
        """Test albedo is normalized to a float tuple."""
        from src.pathtracer.materials.lambertian import Lambertian

        mat = Lambertian((1, 0, 0.5))
        assert mat.albedo == (1.0, 0.0, 0.5)
        assert mat.attenuation == (1.0, 0.0, 0.5)

    @pytest.mark.parametrize("albedo", [(1.2, 0.5, 0.5), (0.5, -0.1, 0.5), (0.5, 0.5)])
    def test_invalid_albedo_rejected(self, albedo):
        """Test albedo outside [0, 1]^3 raises ValueError."""
        from src.pathtracer.materials.lambertian import Lambertian

        with pytest.raises(ValueError):
            Lambertian(albedo)

    def test_compares_by_identity(self):
        """Test two equal-valued instances are distinct materials."""
        from src.pathtracer.materials.lambertian import Lambertian

        a = Lambertian((0.5, 0.5, 0.5))
        b = Lambertian((0.5, 0.5, 0.5))
        assert a == a
        assert a != b

    def test_is_immutable(self):
        """Test the description cannot be modified."""
        import dataclasses

        from src.pathtracer.materials.lambertian import Lambertian

        mat = Lambertian((0.5, 0.5, 0.5))
        with pytest.raises(dataclasses.FrozenInstanceError):
            mat.albedo = (0.1, 0.1, 0.1)


class TestLambertianScatter:
    """Tests for scatter_lambertian."""

    def test_scatter_in_normal_hemisphere(self):
        """Test scattered directions never point below the surface."""
        from src.pathtracer.core.sampler import seed_state
        from src.pathtracer.materials.lambertian import scatter_lambertian

        cosines = ti.field(dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            for i in range(N_SAMPLES):
                state = seed_state(ti.cast(1, ti.u32), 0, i, 0)
                direction, _ = scatter_lambertian(normal, state)
                cosines[i] = ti.math.dot(direction, normal)

        test_kernel()
        arr = cosines.to_numpy()
        assert (arr >= -1e-6).all()
        # normal + unit vector: cosine-weighted, mean of dot(d, n) is 1
        assert abs(arr.mean() - 1.0) < 0.08

    def test_scatter_directions_vary(self):
        """Test different generator states give different directions."""
        from src.pathtracer.core.sampler import seed_state
        from src.pathtracer.materials.lambertian import scatter_lambertian

        directions = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            normal = ti.math.vec3(0.0, 0.0, 1.0)
            for i in range(2):
                d, _ = scatter_lambertian(normal, seed_state(ti.cast(1, ti.u32), 0, i, 0))
                directions[i] = d

        test_kernel()
        arr = directions.to_numpy()
        assert abs(arr[0] - arr[1]).max() > 1e-4

    def test_scatter_is_deterministic(self):
        """Test the same generator state reproduces the direction."""
        from src.pathtracer.core.sampler import seed_state
        from src.pathtracer.materials.lambertian import scatter_lambertian

        directions = ti.Vector.field(3, dtype=ti.f32, shape=2)
        states = ti.field(dtype=ti.u32, shape=2)

        @ti.kernel
        def test_kernel():
            normal = ti.math.vec3(1.0, 0.0, 0.0)
            for i in range(2):
                d, s = scatter_lambertian(normal, seed_state(ti.cast(8, ti.u32), 2, 3, 4))
                directions[i] = d
                states[i] = s

        test_kernel()
        arr = directions.to_numpy()
        assert (arr[0] == arr[1]).all()
        assert states[0] == states[1]
