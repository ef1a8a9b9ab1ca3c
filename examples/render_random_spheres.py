#!/usr/bin/env python3
"""Render the random spheres scene.

Builds the scene, sets up the thin-lens camera and renders with
progressive refinement, printing progress along the way.

Usage:
    python examples/render_random_spheres.py [options]

Options:
    --width WIDTH         Image width in pixels (default: 1280)
    --height HEIGHT       Image height in pixels (default: width * 9 / 16)
    --samples SAMPLES     Number of samples per pixel (default: 500)
    --max-bounces N       Bounce budget per path (default: 50)
    --seed SEED           Seed for the scene layout and the renderer
    --arch ARCH           Taichi backend (default: cpu)
    --output OUTPUT       Output file path (default: random_spheres.png)
    --batch-size SIZE     Samples per progress update (default: 10)
    --quiet               Suppress progress output
    --verbose             Enable debug logging

Example:
    python examples/render_random_spheres.py --width 400 --samples 50 --output ray.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from pathtracer.core.settings import (
    DEFAULT_ASPECT_RATIO,
    DEFAULT_MAX_BOUNCES,
    DEFAULT_SAMPLES_PER_PIXEL,
    DEFAULT_WIDTH,
    RenderSettings,
    init_backend,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH, help="Image width in pixels")
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: width / aspect ratio)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES_PER_PIXEL,
        help="Number of samples per pixel",
    )
    parser.add_argument(
        "--max-bounces",
        type=int,
        default=DEFAULT_MAX_BOUNCES,
        help="Bounce budget per path",
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("--arch", type=str, default="cpu", help="Taichi backend")
    parser.add_argument(
        "--output",
        type=str,
        default="random_spheres.png",
        help="Output file path",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def render_random_spheres(
    settings: RenderSettings,
    output_path: str = "random_spheres.png",
    batch_size: int = 10,
    quiet: bool = False,
) -> Path:
    """Render the random spheres scene and save it as a PNG.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports so Taichi is initialized before any field is declared
    from pathtracer.camera.thin_lens import setup_camera
    from pathtracer.core.progressive import ProgressiveRenderer
    from pathtracer.preview.export import save_png
    from pathtracer.scene.random_spheres import create_random_spheres_scene

    if not quiet:
        print(f"Creating random spheres scene ({settings.width}x{settings.height})...")

    scene, camera = create_random_spheres_scene(
        seed=settings.seed, aspect_ratio=settings.aspect_ratio
    )
    setup_camera(camera)

    renderer = ProgressiveRenderer(settings.width, settings.height, settings.max_bounces)

    if not quiet:
        print(
            f"Rendering {len(scene.primitives)} spheres at "
            f"{settings.samples_per_pixel} samples per pixel..."
        )

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    renderer.render(
        num_samples=settings.samples_per_pixel,
        batch_size=batch_size,
        callback=progress_callback,
    )

    if not quiet:
        print()

    output_file = Path(output_path)
    save_png(renderer, output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        height = args.height if args.height is not None else round(args.width / DEFAULT_ASPECT_RATIO)
        settings = RenderSettings(
            width=args.width,
            height=height,
            samples_per_pixel=args.samples,
            max_bounces=args.max_bounces,
            seed=args.seed,
            arch=args.arch,
        )
        init_backend(settings.arch, seed=settings.seed)
        render_random_spheres(
            settings,
            output_path=args.output,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
