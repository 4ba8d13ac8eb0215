"""Random spheres scene configuration.

This module provides a factory for the "final render" scene: a huge diffuse
ground sphere, a grid of small randomly placed spheres with random materials,
and three large feature spheres (glass, diffuse brown, polished metal), viewed
by a thin-lens camera with a shallow depth of field.

Scene randomness is drawn on the host from a seeded numpy Generator, so the
same seed always builds the same scene.

Example:
    >>> from pathtracer import init_taichi
    >>> init_taichi()
    >>> from pathtracer.scene.random_spheres import create_random_spheres_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=42)
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

from dataclasses import dataclass

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.scene.manager import SceneManager

# =============================================================================
# Render and Scene Parameters
# =============================================================================


@dataclass
class RenderSettings:
    """Image and sampling settings for the random spheres render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of samples accumulated per pixel.
        max_depth: Maximum number of bounces per path.
    """

    width: int = 1200
    height: int = 800
    samples_per_pixel: int = 500
    max_depth: int = 50

    @classmethod
    def from_width(cls, width: int, aspect_ratio: float = 3.0 / 2.0, **kwargs) -> "RenderSettings":
        """Build settings whose height is derived from width and aspect ratio."""
        return cls(width=width, height=int(width / aspect_ratio), **kwargs)


@dataclass
class RandomSpheresParams:
    """Parameters for configuring the random spheres scene.

    Attributes:
        aspect_ratio: Camera aspect ratio (width / height). Default 3:2.
        grid_extent: Small spheres are placed for a, b in [-grid_extent, grid_extent).
        small_radius: Radius of the grid spheres.
        aperture: Camera lens diameter.
        focus_dist: Camera focus distance.

    Example:
        >>> params = RandomSpheresParams(grid_extent=3, aperture=0.0)
        >>> scene, camera = create_random_spheres_scene(seed=0, params=params)
    """

    aspect_ratio: float = 3.0 / 2.0
    grid_extent: int = 11
    small_radius: float = 0.2
    aperture: float = 0.1
    focus_dist: float = 10.0


# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, -1.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Grid spheres too close to this point would overlap the metal feature sphere
CLEARANCE_POINT = np.array([4.0, 0.2, 0.0])
CLEARANCE_DISTANCE = 0.9

# Material choice thresholds: below DIFFUSE is Lambertian, below METAL is metal,
# the rest is glass
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95

GLASS_IOR = 1.5

FEATURE_RADIUS = 1.0
FEATURE_GLASS_CENTER = (0.0, 1.0, 0.0)
FEATURE_DIFFUSE_CENTER = (-4.0, 1.0, 0.0)
FEATURE_DIFFUSE_ALBEDO = (0.4, 0.2, 0.1)
FEATURE_METAL_CENTER = (4.0, 1.0, 0.0)
FEATURE_METAL_ALBEDO = (0.7, 0.6, 0.5)

CAMERA_LOOKFROM = (13.0, 2.0, 3.0)
CAMERA_LOOKAT = (0.0, 0.0, 0.0)
CAMERA_VUP = (0.0, 1.0, 0.0)
CAMERA_VFOV = 20.0


# =============================================================================
# Random Spheres Factory
# =============================================================================


def _as_tuple(v: np.ndarray) -> tuple[float, float, float]:
    return (float(v[0]), float(v[1]), float(v[2]))


def _add_grid_spheres(
    scene: SceneManager,
    rng: np.random.Generator,
    params: RandomSpheresParams,
) -> None:
    """Scatter small spheres over the ground grid."""
    for a in range(-params.grid_extent, params.grid_extent):
        for b in range(-params.grid_extent, params.grid_extent):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random()])

            if np.linalg.norm(center - CLEARANCE_POINT) <= CLEARANCE_DISTANCE:
                continue

            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = rng.random(3) * rng.random(3)
                scene.add_lambertian_sphere(
                    _as_tuple(center), params.small_radius, _as_tuple(albedo)
                )
            elif choose_mat < METAL_PROBABILITY:
                albedo = rng.uniform(0.5, 1.0, size=3)
                fuzz = float(rng.uniform(0.0, 0.5))
                scene.add_metal_sphere(
                    _as_tuple(center), params.small_radius, _as_tuple(albedo), fuzz
                )
            else:
                scene.add_dielectric_sphere(_as_tuple(center), params.small_radius, GLASS_IOR)


def create_random_spheres_scene(
    seed: int | None = None,
    params: RandomSpheresParams | None = None,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random spheres scene.

    Builds, in this order:
    - A ground sphere (gray diffuse) of radius 1000 below the origin
    - A grid of small spheres: 80% diffuse, 15% metal, 5% glass
    - Three feature spheres of radius 1: glass, brown diffuse, polished metal

    Args:
        seed: Seed for the scene's random layout. None draws fresh entropy.
        params: Optional RandomSpheresParams. If None, uses the defaults.

    Returns:
        A tuple of (SceneManager, ThinLensCamera). The camera still has to be
        passed to setup_camera() before rendering.

    Example:
        >>> scene, camera = create_random_spheres_scene(seed=7)
        >>> scene.get_sphere_count() > 4
        True
    """
    if params is None:
        params = RandomSpheresParams()

    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)

    _add_grid_spheres(scene, rng, params)

    scene.add_dielectric_sphere(FEATURE_GLASS_CENTER, FEATURE_RADIUS, GLASS_IOR)
    scene.add_lambertian_sphere(FEATURE_DIFFUSE_CENTER, FEATURE_RADIUS, FEATURE_DIFFUSE_ALBEDO)
    scene.add_metal_sphere(FEATURE_METAL_CENTER, FEATURE_RADIUS, FEATURE_METAL_ALBEDO, 0.0)

    camera = ThinLensCamera(
        lookfrom=CAMERA_LOOKFROM,
        lookat=CAMERA_LOOKAT,
        vup=CAMERA_VUP,
        vfov=CAMERA_VFOV,
        aspect_ratio=params.aspect_ratio,
        aperture=params.aperture,
        focus_dist=params.focus_dist,
    )

    return scene, camera
