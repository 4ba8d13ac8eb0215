#!/usr/bin/env python3
"""Render the random spheres scene to an ASCII PPM image.

This script builds the random spheres scene, sets up the thin-lens camera and
renders with progressive refinement. The image goes to stdout by default so
it can be redirected to a file; progress and timing go to stderr.

Usage:
    python -m examples.render_random_spheres [options] > image.ppm

Options:
    --width WIDTH         Image width in pixels (default: 1200)
    --height HEIGHT       Image height in pixels (default: width / 1.5)
    --samples SAMPLES     Number of samples per pixel (default: 500)
    --max-depth DEPTH     Maximum bounces per path (default: 50)
    --seed SEED           Seed for the scene layout and sampling (default: 0)
    --output OUTPUT       Output file path, "-" for stdout (default: -)
    --batch-size SIZE     Samples per progress update (default: 10)
    --cpu                 Force the CPU backend
    --quiet               Suppress progress output

Example:
    python -m examples.render_random_spheres --width 300 --samples 20 > spheres.ppm
"""

from __future__ import annotations

import argparse
import sys
import time


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random spheres scene as an ASCII PPM image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1200,
        help="Image width in pixels (default: 1200)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: width / 1.5)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=500,
        help="Number of samples per pixel (default: 500)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum bounces per path (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the scene layout and sampling (default: 0)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help='Output file path, "-" for stdout (default: -)',
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_random_spheres(
    width: int = 1200,
    height: int | None = None,
    num_samples: int = 500,
    max_depth: int = 50,
    seed: int = 0,
    output_path: str = "-",
    batch_size: int = 10,
    quiet: bool = False,
) -> float:
    """Render the random spheres scene and write it as PPM.

    Args:
        width: Image width in pixels.
        height: Image height in pixels. None derives it from the 3:2 aspect ratio.
        num_samples: Number of samples per pixel.
        max_depth: Maximum bounces per path.
        seed: Seed for the scene layout.
        output_path: Output file path, or "-" for stdout.
        batch_size: Number of samples to render between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Elapsed render time in seconds.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.camera.thin_lens import setup_camera
    from pathtracer.core.progressive import ProgressiveRenderer
    from pathtracer.preview.export import save_ppm, write_ppm
    from pathtracer.scene.random_spheres import (
        RandomSpheresParams,
        RenderSettings,
        create_random_spheres_scene,
    )

    if height is None:
        settings = RenderSettings.from_width(
            width, samples_per_pixel=num_samples, max_depth=max_depth
        )
    else:
        settings = RenderSettings(width, height, num_samples, max_depth)

    if not quiet:
        print(
            f"Creating random spheres scene ({settings.width}x{settings.height})...",
            file=sys.stderr,
        )

    params = RandomSpheresParams(aspect_ratio=settings.width / settings.height)
    scene, camera = create_random_spheres_scene(seed=seed, params=params)
    setup_camera(camera)

    renderer = ProgressiveRenderer(settings.width, settings.height, settings.max_depth)

    if not quiet:
        print(
            f"Rendering {scene.get_sphere_count()} spheres at "
            f"{settings.samples_per_pixel} samples per pixel...",
            file=sys.stderr,
        )

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                file=sys.stderr,
                flush=True,
            )

    renderer.render(
        num_samples=settings.samples_per_pixel,
        batch_size=batch_size,
        callback=progress_callback,
    )

    if output_path == "-":
        write_ppm(renderer.get_pixels(), sys.stdout)
        sys.stdout.flush()
    else:
        save_ppm(renderer, output_path)

    elapsed = time.time() - start_time

    print("\nDone", file=sys.stderr)
    print(f"{int(elapsed)} sec", file=sys.stderr)

    return elapsed


def main() -> int:
    """Main entry point."""
    args = parse_args()

    from pathtracer import init_render_backend

    backend = init_render_backend(use_gpu=not args.cpu, random_seed=args.seed)
    if not args.quiet:
        print(f"Using {backend} backend", file=sys.stderr)

    try:
        render_random_spheres(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            output_path=args.output,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
