"""Unit tests for the random spheres scene factory.

Tests cover:
- Fixed geometry (ground, feature spheres) and camera
- Grid sphere placement rules and material mix
- Seed reproducibility
- Render settings defaults
"""

import math

import pytest


class TestRandomSpheresScene:
    """Tests for create_random_spheres_scene."""

    def test_ground_is_first(self):
        from pathtracer.scene.manager import MaterialType
        from pathtracer.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=1)
        ground = scene.spheres[0]

        assert ground.center == (0.0, -1000.0, -1.0)
        assert ground.radius == 1000.0
        info = scene.get_material_info(ground.material_id)
        assert info.material_type == MaterialType.LAMBERTIAN
        assert info.params["albedo"] == (0.5, 0.5, 0.5)

    def test_feature_spheres_are_last(self):
        from pathtracer.scene.manager import MaterialType
        from pathtracer.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=1)
        glass, brown, metal = scene.spheres[-3:]

        assert (glass.center, glass.radius) == ((0.0, 1.0, 0.0), 1.0)
        assert scene.get_material_info(glass.material_id).params == {"ior": 1.5}

        assert brown.center == (-4.0, 1.0, 0.0)
        brown_info = scene.get_material_info(brown.material_id)
        assert brown_info.material_type == MaterialType.LAMBERTIAN
        assert brown_info.params["albedo"] == (0.4, 0.2, 0.1)

        assert metal.center == (4.0, 1.0, 0.0)
        assert scene.get_material_info(metal.material_id).params == {
            "albedo": (0.7, 0.6, 0.5),
            "fuzz": 0.0,
        }

    def test_grid_sphere_placement(self):
        """Test grid spheres sit at y = 0.2 inside their cell and clear the metal sphere."""
        from pathtracer.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=3)
        grid = scene.spheres[1:-3]

        # At most one sphere per cell of the 22 x 22 grid
        assert 0 < len(grid) <= 22 * 22
        for sphere in grid:
            x, y, z = sphere.center
            assert sphere.radius == 0.2
            assert y == 0.2
            assert -11.0 <= x < 10.9
            assert -11.0 <= z < 10.9
            assert math.dist(sphere.center, (4.0, 0.2, 0.0)) > 0.9

    def test_grid_material_mix(self):
        """Test the grid uses all three materials with diffuse most common."""
        from pathtracer.scene.manager import MaterialType
        from pathtracer.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=5)
        types = [
            scene.get_material_info(s.material_id).material_type for s in scene.spheres[1:-3]
        ]
        counts = {t: types.count(t) for t in MaterialType}

        assert counts[MaterialType.LAMBERTIAN] > counts[MaterialType.METAL]
        assert counts[MaterialType.METAL] > 0
        assert counts[MaterialType.DIELECTRIC] > 0

    def test_grid_material_parameters_in_range(self):
        from pathtracer.scene.manager import MaterialType
        from pathtracer.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=11)
        for sphere in scene.spheres[1:-3]:
            info = scene.get_material_info(sphere.material_id)
            if info.material_type == MaterialType.METAL:
                assert all(0.5 <= c < 1.0 for c in info.params["albedo"])
                assert 0.0 <= info.params["fuzz"] < 0.5
            elif info.material_type == MaterialType.LAMBERTIAN:
                assert all(0.0 <= c < 1.0 for c in info.params["albedo"])
            else:
                assert info.params["ior"] == 1.5

    def test_seed_reproducibility(self):
        from pathtracer.scene.random_spheres import create_random_spheres_scene

        def snapshot(scene):
            return [
                (s.center, s.radius, scene.get_material_info(s.material_id).params)
                for s in scene.spheres
            ]

        first, _ = create_random_spheres_scene(seed=42)
        first_spheres = snapshot(first)
        second, _ = create_random_spheres_scene(seed=42)
        assert snapshot(second) == first_spheres

        other, _ = create_random_spheres_scene(seed=43)
        assert snapshot(other) != first_spheres

    def test_camera(self):
        from pathtracer.scene.random_spheres import create_random_spheres_scene

        _, camera = create_random_spheres_scene(seed=0)

        assert camera.lookfrom == (13.0, 2.0, 3.0)
        assert camera.lookat == (0.0, 0.0, 0.0)
        assert camera.vup == (0.0, 1.0, 0.0)
        assert camera.vfov == 20.0
        assert camera.aspect_ratio == pytest.approx(1.5)
        assert camera.aperture == 0.1
        assert camera.focus_dist == 10.0

    def test_params_shrink_grid(self):
        from pathtracer.scene.random_spheres import RandomSpheresParams, create_random_spheres_scene

        params = RandomSpheresParams(grid_extent=2, aperture=0.0, aspect_ratio=2.0)
        scene, camera = create_random_spheres_scene(seed=0, params=params)

        assert scene.get_sphere_count() <= 1 + 16 + 3
        assert camera.aperture == 0.0
        assert camera.aspect_ratio == 2.0

    def test_scene_fits_in_capacity(self):
        """Test the full-size scene stays within sphere and material limits."""
        from pathtracer.scene.intersection import MAX_SPHERES
        from pathtracer.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=123)
        assert scene.get_sphere_count() <= MAX_SPHERES
        assert scene.get_material_count() == scene.get_sphere_count()


class TestRenderSettings:
    """Tests for RenderSettings."""

    def test_defaults(self):
        from pathtracer.scene.random_spheres import RenderSettings

        settings = RenderSettings()
        assert (settings.width, settings.height) == (1200, 800)
        assert settings.samples_per_pixel == 500
        assert settings.max_depth == 50

    def test_from_width(self):
        from pathtracer.scene.random_spheres import RenderSettings

        settings = RenderSettings.from_width(400, samples_per_pixel=10)
        assert (settings.width, settings.height) == (400, 266)
        assert settings.samples_per_pixel == 10
