"""Unit tests for the dielectric (glass) material module.

Tests cover:
- Pass-through for an index of refraction of 1
- Total internal reflection from inside a dense medium
- Schlick reflection probability
- White attenuation and unit scattered directions
- Material registry operations and validation
"""

import math

import pytest
import taichi as ti

N_SAMPLES = 2000


def _scatter_many(ior, incident, normal, front_face, n=N_SAMPLES):
    """Scatter n rays and return (directions, attenuations, flags) arrays."""
    from pathtracer.materials.dielectric import scatter_dielectric, vec3

    dirs = ti.Vector.field(3, dtype=ti.f64, shape=n)
    atts = ti.Vector.field(3, dtype=ti.f64, shape=n)
    flags = ti.field(dtype=ti.i32, shape=n)

    @ti.kernel
    def test_kernel(ior_: ti.f64, d: vec3, nrm: vec3, ff: ti.i32):
        for i in range(n):
            sd, att, s = scatter_dielectric(ior_, d, nrm, ff)
            dirs[i] = sd
            atts[i] = att
            flags[i] = s

    test_kernel(ior, vec3(*incident), vec3(*normal), front_face)
    return dirs.to_numpy(), atts.to_numpy(), flags.to_numpy()


class TestDielectricScatter:
    """Tests for scatter_dielectric."""

    def test_ior_one_passes_straight_through(self):
        """Test a material with ior 1 does not bend a near-normal ray."""
        d = (0.3, -1.0, 0.0)
        norm = math.sqrt(0.3**2 + 1.0)
        dirs, _, _ = _scatter_many(1.0, d, (0.0, 1.0, 0.0), 1, n=16)

        for row in dirs:
            assert list(row) == pytest.approx([0.3 / norm, -1.0 / norm, 0.0], abs=1e-9)

    def test_attenuation_white_and_always_scatters(self):
        """Test glass never tints or absorbs."""
        _, atts, flags = _scatter_many(1.5, (1.0, -1.0, 0.0), (0.0, 1.0, 0.0), 1)

        assert (atts == 1.0).all()
        assert (flags == 1).all()

    def test_scattered_directions_are_unit_length(self):
        """Test reflected and refracted directions are both normalized."""
        dirs, _, _ = _scatter_many(1.5, (2.0, -1.0, 0.5), (0.0, 1.0, 0.0), 1)

        lengths = (dirs**2).sum(axis=1) ** 0.5
        assert abs(lengths - 1.0).max() < 1e-9

    def test_total_internal_reflection(self):
        """Test a steep ray inside glass always reflects."""
        # 60 degrees from the normal, beyond the ~41.8 degree critical angle
        incident = (math.sin(math.radians(60)), -math.cos(math.radians(60)), 0.0)
        dirs, _, _ = _scatter_many(1.5, incident, (0.0, 1.0, 0.0), 0)

        # Reflection flips the y component, keeps x
        assert (dirs[:, 1] > 0.0).all()
        assert dirs[:, 0] == pytest.approx([incident[0]] * len(dirs))

    def test_reflection_probability_matches_schlick(self):
        """Test the reflected fraction outside glass tracks Schlick's value."""
        incident = (math.sin(math.radians(80)), -math.cos(math.radians(80)), 0.0)
        dirs, _, _ = _scatter_many(1.5, incident, (0.0, 1.0, 0.0), 1)

        cosine = math.cos(math.radians(80))
        r0 = ((1.0 - 1.0 / 1.5) / (1.0 + 1.0 / 1.5)) ** 2
        expected = r0 + (1.0 - r0) * (1.0 - cosine) ** 5

        reflected = (dirs[:, 1] > 0.0).mean()
        assert abs(reflected - expected) < 0.05


class TestDielectricRegistry:
    """Tests for the dielectric material registry."""

    def test_add_and_get_material(self):
        from pathtracer.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_ior,
            get_dielectric_material_count,
        )

        result = ti.field(dtype=ti.f64, shape=())
        idx = add_dielectric_material(1.33)

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            result[None] = get_dielectric_ior(mat_idx)

        test_kernel(idx)
        assert get_dielectric_material_count() == 1
        assert result[None] == pytest.approx(1.33)

    def test_default_ior_is_glass(self):
        from pathtracer.materials.dielectric import add_dielectric_material, dielectric_iors

        idx = add_dielectric_material()
        assert dielectric_iors[idx] == pytest.approx(1.5)

    def test_scatter_by_id(self):
        """Test scatter_dielectric_by_id reads the registered IOR."""
        from pathtracer.materials.dielectric import (
            add_dielectric_material,
            scatter_dielectric_by_id,
            vec3,
        )

        idx = add_dielectric_material(1.0)
        direction = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            # Normal incidence never reflects with ior 1
            d, _, _ = scatter_dielectric_by_id(
                mat_idx, vec3(0.0, 0.0, -2.0), vec3(0.0, 0.0, 1.0), 1
            )
            direction[None] = d

        test_kernel(idx)
        assert list(direction[None]) == pytest.approx([0.0, 0.0, -1.0])

    def test_ior_validation_below_one(self):
        from pathtracer.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError, match="less than 1.0"):
            add_dielectric_material(0.9)
