#!/usr/bin/env python3
"""Render the random sphere field.

Builds the classic final scene (ground, 22x22 grid of small spheres, three
feature spheres), frames it with the default depth-of-field camera and
renders it progressively.

Usage:
    python -m examples.render_random_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: width / (16/9))
    --samples SAMPLES   Number of samples per pixel (default: 100)
    --depth DEPTH       Maximum bounces per path (default: 50)
    --seed SEED         Seed for the scene and the sample stream (default: 123456)
    --output OUTPUT     Output file, .ppm or .png; "-" writes PPM to stdout
                        (default: random_scene.ppm)
    --arch ARCH         Taichi backend: cpu, gpu, cuda or vulkan (default: cpu)
    --batch-size SIZE   Samples per progress update (default: 10)
    --quiet             Suppress progress output

Example:
    python -m examples.render_random_scene --width 200 --samples 20 --output out.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from pathtracer.config import (
    DEFAULT_ASPECT_RATIO,
    DEFAULT_MAX_DEPTH,
    DEFAULT_SAMPLES_PER_PIXEL,
    DEFAULT_SEED,
    DEFAULT_WIDTH,
    RenderConfig,
    init_backend,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random sphere field.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: width / (16/9))",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES_PER_PIXEL,
        help=f"Number of samples per pixel (default: {DEFAULT_SAMPLES_PER_PIXEL})",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum bounces per path (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help=f"Seed for the scene and the sample stream (default: {DEFAULT_SEED})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="random_scene.ppm",
        help='Output file, .ppm or .png; "-" writes PPM to stdout (default: random_scene.ppm)',
    )
    parser.add_argument(
        "--arch",
        type=str,
        default="cpu",
        choices=["cpu", "gpu", "cuda", "vulkan"],
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_random_scene(
    config: RenderConfig,
    output_path: str = "random_scene.ppm",
    batch_size: int = 10,
    quiet: bool = False,
) -> Path | None:
    """Render the random scene and write the image.

    Args:
        config: Render configuration.
        output_path: Output file path (.ppm or .png), or "-" for PPM on stdout.
        batch_size: Number of samples to render between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file, or None when writing to stdout.

    Raises:
        ValueError: If the output extension is not supported.
    """
    # Lazy imports: these modules declare Taichi fields
    from pathtracer.camera.thin_lens import setup_camera
    from pathtracer.core.progressive import ProgressiveRenderer
    from pathtracer.preview.export import save_png, save_ppm, write_ppm
    from pathtracer.scene.builders import create_random_scene, default_camera
    from pathtracer.scene.world import World

    to_stdout = output_path == "-"
    output_file = None if to_stdout else Path(output_path)
    if output_file is not None and output_file.suffix.lower() not in (".ppm", ".png"):
        raise ValueError(f"Unsupported output format: {output_file.suffix!r} (use .ppm or .png)")

    # Keep stdout clean when it carries the image
    log = sys.stderr if to_stdout else sys.stdout

    if not quiet:
        print(f"Creating random scene (seed {config.seed})...", file=log)

    world = create_random_scene(World(), seed=config.seed)
    setup_camera(default_camera(config.aspect_ratio))

    renderer = ProgressiveRenderer(config)

    if not quiet:
        print(
            f"Rendering {len(world)} spheres at {config.width}x{config.height}, "
            f"{config.samples_per_pixel} samples per pixel...",
            file=log,
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
                flush=True,
                file=log,
            )

    renderer.render(batch_size=batch_size, callback=progress_callback)

    if not quiet:
        print(file=log)

    image = renderer.get_image_numpy()
    if output_file is None:
        write_ppm(image, sys.stdout)
    elif output_file.suffix.lower() == ".png":
        save_png(image, output_file)
    else:
        save_ppm(image, output_file)

    total_time = time.time() - start_time
    if not quiet:
        if output_file is not None:
            print(f"Saved to: {output_file.absolute()}", file=log)
        print(f"Total time: {total_time:.2f}s", file=log)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        height = args.height if args.height is not None else int(args.width / DEFAULT_ASPECT_RATIO)
        config = RenderConfig(
            width=args.width,
            height=height,
            samples_per_pixel=args.samples,
            max_depth=args.depth,
            seed=args.seed,
        )
        init_backend(args.arch)
        render_random_scene(
            config,
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
