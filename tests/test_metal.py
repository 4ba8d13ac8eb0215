"""Unit tests for the metal material module.

Tests cover:
- Perfect mirror reflection (fuzz = 0)
- Fuzzy reflection bounds
- Absorption of rays scattered below the surface
- Material registry operations, fuzz clamping and validation
"""

import math

import pytest
import taichi as ti

N_SAMPLES = 1000


class TestMetalScatter:
    """Tests for scatter_metal."""

    def test_mirror_at_normal_incidence(self):
        """Test a mirror sends a ray along -normal straight back."""
        from pathtracer.materials.metal import scatter_metal, vec3

        direction = ti.Vector.field(3, dtype=ti.f64, shape=())
        attenuation = ti.Vector.field(3, dtype=ti.f64, shape=())
        did_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            d, att, scattered = scatter_metal(
                vec3(0.9, 0.8, 0.7), 0.0, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            direction[None] = d
            attenuation[None] = att
            did_scatter[None] = scattered

        test_kernel()
        assert list(direction[None]) == pytest.approx([0.0, 1.0, 0.0])
        assert list(attenuation[None]) == pytest.approx([0.9, 0.8, 0.7])
        assert did_scatter[None] == 1

    def test_mirror_reflection_angle(self):
        """Test a mirror reflects the normalized incident direction."""
        from pathtracer.materials.metal import scatter_metal, vec3

        direction = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            d, _, _ = scatter_metal(
                vec3(1.0, 1.0, 1.0), 0.0, vec3(3.0, -3.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            direction[None] = d

        test_kernel()
        s = 1.0 / math.sqrt(2.0)
        assert list(direction[None]) == pytest.approx([s, s, 0.0])

    def test_fuzz_bounds_perturbation(self):
        """Test fuzzy reflections stay within fuzz of the mirror direction."""
        from pathtracer.materials.metal import scatter_metal, vec3

        offsets = ti.field(dtype=ti.f64, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                d, _, _ = scatter_metal(
                    vec3(1.0, 1.0, 1.0), 0.3, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                offsets[i] = (d - vec3(0.0, 1.0, 0.0)).norm()

        test_kernel()
        o = offsets.to_numpy()
        assert o.max() < 0.3
        assert o.max() > 0.0

    def test_grazing_fuzzy_rays_can_be_absorbed(self):
        """Test scattered rays below the surface report did_scatter = 0."""
        from pathtracer.materials.metal import scatter_metal, vec3

        flags = ti.field(dtype=ti.i32, shape=N_SAMPLES)
        cosines = ti.field(dtype=ti.f64, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                n = vec3(0.0, 1.0, 0.0)
                # Nearly tangent incidence with large fuzz
                d, _, s = scatter_metal(vec3(1.0, 1.0, 1.0), 1.0, vec3(1.0, -0.01, 0.0), n)
                flags[i] = s
                cosines[i] = d.dot(n)

        test_kernel()
        f = flags.to_numpy()
        c = cosines.to_numpy()
        assert (f == 0).any()
        assert (f == 1).any()
        assert (c[f == 0] <= 0.0).all()
        assert (c[f == 1] > 0.0).all()


class TestMetalRegistry:
    """Tests for the metal material registry."""

    def test_add_and_get_material(self):
        """Test adding a material stores albedo and fuzz."""
        from pathtracer.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
            get_metal_material_count,
        )

        albedo = ti.Vector.field(3, dtype=ti.f64, shape=())
        fuzz = ti.field(dtype=ti.f64, shape=())

        idx = add_metal_material((0.7, 0.6, 0.5), 0.25)

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            albedo[None] = get_metal_albedo(mat_idx)
            fuzz[None] = get_metal_fuzz(mat_idx)

        test_kernel(idx)
        assert get_metal_material_count() == 1
        assert list(albedo[None]) == pytest.approx([0.7, 0.6, 0.5])
        assert fuzz[None] == pytest.approx(0.25)

    @pytest.mark.parametrize(("given", "stored"), [(1.7, 1.0), (-0.2, 0.0), (0.5, 0.5)])
    def test_fuzz_is_clamped(self, given, stored):
        """Test fuzz outside [0, 1] is clamped rather than rejected."""
        from pathtracer.materials.metal import add_metal_material, metal_fuzzes

        idx = add_metal_material((0.5, 0.5, 0.5), given)
        assert metal_fuzzes[idx] == pytest.approx(stored)

    def test_scatter_by_id(self):
        """Test scatter_metal_by_id uses the registered parameters."""
        from pathtracer.materials.metal import add_metal_material, scatter_metal_by_id, vec3

        idx = add_metal_material((0.2, 0.4, 0.6), 0.0)
        direction = ti.Vector.field(3, dtype=ti.f64, shape=())
        attenuation = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            d, att, _ = scatter_metal_by_id(mat_idx, vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0))
            direction[None] = d
            attenuation[None] = att

        test_kernel(idx)
        assert list(direction[None]) == pytest.approx([0.0, 0.0, 1.0])
        assert list(attenuation[None]) == pytest.approx([0.2, 0.4, 0.6])

    def test_albedo_validation(self):
        from pathtracer.materials.metal import add_metal_material

        with pytest.raises(ValueError):
            add_metal_material((0.5, 1.5, 0.5), 0.0)
