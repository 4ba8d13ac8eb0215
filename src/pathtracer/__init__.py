"""Taichi-based Monte Carlo path tracer for sphere scenes.

This package renders a static scene of spheres with diffuse, metallic and
dielectric materials, with support for:
- Thin-lens camera with depth of field
- Per-pixel multi-sample estimation evaluated in parallel across pixels
- Gamma-corrected ASCII PPM output

Subpackages:
    core: Rays, vector utilities, the path integrator and progressive rendering
    geometry: Sphere primitive and intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Scene storage, material registry and the random-spheres scene
    camera: Thin-lens camera ray generation
    preview: Gamma correction, quantization and PPM export

Modules that declare Taichi fields must be imported after Taichi has been
initialized, e.g. with init_taichi().
"""

import taichi as ti

__version__ = "0.1.0"


def init_taichi(arch=None, random_seed: int = 0) -> None:
    """Initialize Taichi for double precision rendering.

    Args:
        arch: Taichi backend (e.g. ti.cpu, ti.gpu). Defaults to ti.cpu.
        random_seed: Seed for the per-thread random generators used in kernels.
    """
    ti.init(
        arch=ti.cpu if arch is None else arch,
        default_fp=ti.f64,
        random_seed=random_seed,
    )


def _current_arch():
    return ti.lang.impl.current_cfg().arch


def init_render_backend(use_gpu: bool = True, random_seed: int = 0) -> str:
    """Initialize Taichi on CUDA when requested and available, else on the CPU.

    CUDA is the only GPU backend tried. Metal and OpenGL kernels cannot use
    f64, and Vulkan support for it depends on the driver.

    Args:
        use_gpu: Try the CUDA backend first.
        random_seed: Seed for the per-thread random generators used in kernels.

    Returns:
        "GPU" or "CPU", naming the backend actually in use.
    """
    if not use_gpu:
        init_taichi(arch=ti.cpu, random_seed=random_seed)
        return "CPU"

    try:
        init_taichi(arch=ti.cuda, random_seed=random_seed)
    except Exception:
        init_taichi(arch=ti.cpu, random_seed=random_seed)

    # ti.init falls back to the CPU by itself when CUDA is missing
    return "GPU" if _current_arch() == ti.cuda else "CPU"
