"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector utilities and random sampling
    integrator: Path tracing estimator, render target and render kernels
    progressive: Batched sample accumulation with progress reporting

The core module evaluates the per-pixel color estimator: camera ray
generation, nearest-hit queries against the scene, material scattering and
the sky gradient for escaped rays, accumulated over many samples per pixel.

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    clamp,
    cross,
    degrees_to_radians,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_range,
    random_real,
    random_unit_vector,
    random_vec3,
    random_vec3_range,
    ray_at,
    real,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: integrator and progressive are NOT imported here because they declare
# Taichi fields at import time. Import them directly once Taichi is initialized:
#   from pathtracer.core.progressive import ProgressiveRenderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "real",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_real",
    "random_range",
    "random_vec3",
    "random_vec3_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    "degrees_to_radians",
    "clamp",
]
