"""Materials module for surface scattering.

This module implements the material models used by the path tracer:

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with fuzz
    dielectric: Glass-like materials with refraction and Schlick reflectance

Each material provides:
    - scatter_<type>(): Sample a scattered direction from material parameters
    - scatter_<type>_by_id(): Same, looking the parameters up in the registry
    - add_<type>_material() / clear_<type>_materials(): Registry management

Scatter functions return (scattered_direction, attenuation, did_scatter);
did_scatter == 0 means the ray was absorbed.

All scattering computations are Taichi functions.
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_ior,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    add_metal_material,
    clamp_fuzz,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clamp_fuzz",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ior",
]
