#!/usr/bin/env python3
"""Render the procedural "many spheres" scene.

The image is written as plain-text PPM (P3) to stdout by default, rows
streaming out as they finish, or to a file. A ``.png`` output path is saved
through Pillow instead. Progress and timing go to stderr.

Streamed PPM is not rolled back: if a scanline fails, the rows before it have
already been written and the output is truncated.

Usage:
    python -m examples.render_random_scene [options] > image.ppm

Options:
    --width WIDTH               Image width in pixels (default: 400)
    --aspect-ratio RATIO        Width / height (default: 1.5)
    --samples-per-axis N        Supersampling grid size, N*N samples per pixel (default: 4)
    --workers N                 Scanlines rendered concurrently (default: CPU count)
    --seed SEED                 Seed of the sample streams (default: 0)
    --scene-seed SEED           Seed of the sphere placement (default: random)
    --output PATH               Output file, "-" for stdout (default: -); streamed
                                PPM is truncated if the render fails
    --arch {cpu,gpu}            Taichi backend (default: cpu)
    --quiet                     Suppress progress output

Example:
    python -m examples.render_random_scene --width 300 --samples-per-axis 3 -o spheres.png
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the procedural many-spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=1.5,
        help="Image width divided by height (default: 1.5)",
    )
    parser.add_argument(
        "--samples-per-axis",
        type=int,
        default=4,
        help="Supersampling grid size; each pixel takes N*N samples (default: 4)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=os.cpu_count() or 1,
        help="Number of scanlines rendered concurrently (default: CPU count)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed of the per-sample random streams (default: 0)",
    )
    parser.add_argument(
        "--scene-seed",
        type=int,
        default=None,
        help="Seed of the sphere placement (default: a new scene every run)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default="-",
        help=(
            'Output path; ".png" saves a PNG, "-" writes PPM to stdout (default: -). '
            "PPM rows stream out as they finish, so a failed render leaves the "
            "output truncated"
        ),
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_random_scene(
    width: int = 400,
    aspect_ratio: float = 1.5,
    samples_per_axis: int = 4,
    workers: int = 1,
    seed: int = 0,
    scene_seed: int | None = None,
    output_path: str = "-",
    quiet: bool = False,
) -> Path | None:
    """Render the procedural scene and write the image.

    Taichi must be initialized before calling this function.

    Args:
        width: Image width in pixels.
        aspect_ratio: Image width divided by height.
        samples_per_axis: Supersampling grid size (>= 2).
        workers: Maximum number of scanlines rendered concurrently.
        seed: Seed of the per-sample random streams.
        scene_seed: Seed of the sphere placement, None for a random scene.
        output_path: ".png" file, any other file for PPM, or "-" for stdout.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file, or None when writing to stdout.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.core.scheduler import RenderSettings, ScanlineRenderer
    from src.pathtracer.preview.export import save_png_from_array, write_ppm
    from src.pathtracer.scene.random_scene import RandomSceneParams, create_random_scene

    settings = RenderSettings.from_aspect_ratio(
        width,
        aspect_ratio,
        upscaling=samples_per_axis,
        workers=workers,
        seed=seed,
    )
    scene, camera = create_random_scene(
        RandomSceneParams(seed=scene_seed, aspect_ratio=aspect_ratio)
    )

    if not quiet:
        print(
            f"Rendering {scene.get_sphere_count()} spheres at "
            f"{settings.width}x{settings.height}, {settings.samples_per_pixel} samples "
            f"per pixel, {workers} workers",
            file=sys.stderr,
        )

    renderer = ScanlineRenderer(scene, camera, settings)
    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            remaining = total_rows - rows_done
            progress_pct = rows_done / total_rows * 100.0
            print(f"{remaining} lines remaining, {progress_pct:.2f}%", file=sys.stderr)

    output_file = None
    if output_path == "-":
        rows = renderer.render_rows(progress_callback)
        write_ppm(rows, sys.stdout, settings.width, settings.height)
        sys.stdout.flush()
    elif output_path.lower().endswith(".png"):
        output_file = Path(output_path)
        save_png_from_array(renderer.render(progress_callback), str(output_file))
    else:
        output_file = Path(output_path)
        rows = renderer.render_rows(progress_callback)
        with open(output_file, "w", encoding="ascii") as f:
            write_ppm(rows, f, settings.width, settings.height)

    total_time = time.time() - start_time
    if not quiet:
        if output_file is not None:
            print(f"Saved to: {output_file.absolute()}", file=sys.stderr)
        print(f"Elapsed: {total_time:.2f}s", file=sys.stderr)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.workers < 1:
        print(f"Error: --workers must be at least 1, got {args.workers}", file=sys.stderr)
        return 2

    arch = ti.gpu if args.arch == "gpu" else ti.cpu
    ti.init(arch=arch, cpu_max_num_threads=args.workers)

    try:
        render_random_scene(
            width=args.width,
            aspect_ratio=args.aspect_ratio,
            samples_per_axis=args.samples_per_axis,
            workers=args.workers,
            seed=args.seed,
            scene_seed=args.scene_seed,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
