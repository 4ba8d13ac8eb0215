"""Path tracing integrator for Monte Carlo light transport.

This module implements the per-sample color estimator and the rendering
kernels. A camera ray is bounced through the scene, each bounce asking the
hit material to scatter it, until the ray escapes to the sky, is absorbed,
or the depth budget runs out.

The estimator is the loop form of

    color(ray, depth) = 0                                   if depth == 0
                      = attenuation * color(scattered, depth - 1)  on scatter
                      = 0                                   on absorption
                      = sky(ray)                            on a miss

where the attenuations along a path are multiplied into a throughput.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric) by material ID
    - Sky gradient from white to light blue for escaped rays
    - Per-pixel sample sums accumulated in a write-disjoint framebuffer
    - Self-intersection avoidance with a t_min of 0.001

Example:
    >>> from pathtracer import init_taichi
    >>> init_taichi()
    >>> from pathtracer.core.integrator import render_image, setup_render_target
    >>> from pathtracer.scene.random_spheres import create_random_spheres_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=7)
    >>> setup_camera(camera)
    >>> setup_render_target(300, 200)
    >>> render_image(num_samples=10)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.thin_lens import get_ray_jittered
from pathtracer.core.ray import normalize, real, vec3
from pathtracer.materials.dielectric import scatter_dielectric_by_id
from pathtracer.materials.lambertian import scatter_lambertian_by_id
from pathtracer.materials.metal import scatter_metal_by_id
from pathtracer.scene.intersection import intersect_scene
from pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum ray bounces (path length)
MAX_DEPTH = 50

# t_min and t_max for ray intersection; t_min skips the surface just left
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints (horizon to zenith)
SKY_WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Bounce limit used by the render kernels
_max_depth = ti.field(dtype=ti.i32, shape=())

# Sum of color samples per pixel, indexed [i, j] with j = 0 the bottom row
_color_buffer = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int, max_depth: int = MAX_DEPTH) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and bounce limit and clears the buffers.
    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT.

    Args:
        width: Image width in pixels (2 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (2 to MAX_IMAGE_HEIGHT).
        max_depth: Maximum number of bounces per path.

    Raises:
        ValueError: If dimensions are out of range or max_depth is negative.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    # Pixel coordinates are divided by (size - 1)
    if width < 2 or height < 2:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 2x2")

    _image_width[None] = width
    _image_height[None] = height
    set_max_depth(max_depth)
    _render_target_initialized[None] = 1

    clear_render_target()


def set_max_depth(max_depth: int) -> None:
    """Set the bounce limit used by render_image() and render_sample().

    Raises:
        ValueError: If max_depth is negative.
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")
    _max_depth[None] = max_depth


def get_max_depth() -> int:
    """Get the current bounce limit."""
    return int(_max_depth[None])


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the scattering function of the hit material.

    Unknown material IDs absorb the ray.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal (unit length, facing against the ray).
        front_face: 1 if hit front face, 0 if back face.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background color for a ray that escapes the scene.

    Blends linearly from white at t = 0 to light blue at t = 1 where
    t = 0.5 * (normalize(direction).y + 1).
    """
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_WHITE + t * SKY_BLUE


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Estimate the color carried back along a ray.

    Follows the ray for at most max_depth bounces. A path that is still
    bouncing when the budget runs out contributes black, as does an absorbed
    path; an escaped path contributes the throughput times the sky color.

    Args:
        origin: The ray origin.
        direction: The ray direction (any non-zero length).
        max_depth: Maximum number of bounces. 0 always returns black.

    Returns:
        The estimated color (RGB) for this ray.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction

    # Taichi doesn't support break in ti.func loops
    active = 1

    for _ in range(max_depth):
        if active == 1:
            hit_record = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if hit_record.hit == 0:
                color = throughput * sky_color(ray_direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    hit_record.material_id,
                    ray_direction,
                    hit_record.normal,
                    hit_record.front_face,
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = hit_record.point
                    ray_direction = scattered_direction

    return color


@ti.func
def render_sample_impl(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Render a single jittered camera sample for a pixel."""
    ray = get_ray_jittered(pixel_i, pixel_j, width, height)
    return ray_color(ray.origin, ray.direction, max_depth)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Add one sample to every pixel.

    The outermost loop is parallel; iteration (i, j) only touches cell
    (i, j) of the buffers.
    """
    for i, j in ti.ndrange(width, height):
        color = render_sample_impl(i, j, width, height, max_depth)

        # Drop non-finite samples
        for c in ti.static(range(3)):
            if tm.isnan(color[c]) or tm.isinf(color[c]):
                color[c] = 0.0

        _color_buffer[i, j] += color
        _sample_count[i, j] += 1


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Render a single sample for a specific pixel."""
    return render_sample_impl(pixel_i, pixel_j, width, height, max_depth)


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Evaluate ray_color() for one ray."""
    return ray_color(origin, direction, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Estimate the color along a single ray against the current scene.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z), need not be normalized.
        max_depth: Maximum number of bounces.

    Returns:
        Tuple of (R, G, B) color values.
    """
    color = _trace_single_ray(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_depth,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(pixel_i: int, pixel_j: int) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, get_max_depth())

    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1) -> None:
    """Add num_samples samples to every pixel of the render target.

    Can be called repeatedly to refine the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    max_depth = get_max_depth()

    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth)


def get_total_samples() -> int:
    """Get the number of samples rendered per pixel so far.

    Reads pixel (0, 0); render_image() keeps every pixel at the same count.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_accumulated_image_numpy() -> npt.NDArray[np.float64]:
    """Get the accumulated (unnormalized) sample sums as a NumPy array.

    The array shape is (height, width, 3), row 0 is the top of the image and
    column 0 the left edge, i.e. the row-major order of the output image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    # Buffer row 0 is the bottom of the image
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float64)


def get_sample_count_numpy() -> npt.NDArray[np.int32]:
    """Get per-pixel sample counts as a (height, width) array in image order.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    counts = _sample_count.to_numpy()[:width, :height]
    return np.ascontiguousarray(np.flipud(counts.T))
