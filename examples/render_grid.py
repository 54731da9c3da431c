#!/usr/bin/env python3
"""Render a city-like grid of stacked boxes.

Large grids exercise the bounding volume tree: most boxes are either culled
against the view frustum or rejected early during occlusion queries.

Usage:
    python -m examples.render_grid [options]

Options:
    --size N            Boxes along each side of the grid (default: 8)
    --seed SEED         Random seed for box heights (default: 7)
    --width WIDTH       Image width in pixels (default: 1000)
    --height HEIGHT     Image height in pixels (default: 700)
    --output OUTPUT     Output file path (default: grid.png)
    --preview           Show the result in a Matplotlib window
    --quiet             Suppress progress output
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np
import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Render a grid of stacked boxes.")
    parser.add_argument("--size", type=int, default=8, help="Boxes along each side (default: 8)")
    parser.add_argument("--seed", type=int, default=7, help="Random seed (default: 7)")
    parser.add_argument("--width", type=int, default=1000, help="Image width (default: 1000)")
    parser.add_argument("--height", type=int, default=700, help="Image height (default: 700)")
    parser.add_argument("--output", type=str, default="grid.png", help="Output file path")
    parser.add_argument("--preview", action="store_true", help="Show a Matplotlib preview")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def build_grid(size: int, seed: int):
    """Build a size x size grid of towers made of one to three boxes."""
    from linecast.geometry.box import BoxOutline
    from linecast.scene.scene import SceneBuilder

    rng = np.random.default_rng(seed)
    builder = SceneBuilder()
    offset = (size - 1) / 2.0

    for i in range(size):
        for j in range(size):
            x = (i - offset) * 1.5
            z = (j - offset) * 1.5
            base = 0.0
            for _ in range(int(rng.integers(1, 4))):
                half = rng.uniform(0.3, 0.6)
                height = rng.uniform(0.2, 0.8)
                builder.add(BoxOutline((x, base + height, z), (half, height, half)))
                base += 2.0 * height

    return builder.build()


def main() -> int:
    """Main entry point."""
    args = parse_args()
    if not args.quiet:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    ti.init(arch=ti.cpu, default_fp=ti.f64)

    from linecast.camera.camera import Camera
    from linecast.preview.export import save_png

    try:
        scene = build_grid(args.size, args.seed)
        extent = 1.5 * args.size
        camera = (
            Camera(resolution=0.004)
            .look_at((extent, 0.8 * extent, extent), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
            .perspective(np.radians(35.0), args.width / args.height, 0.5, 6.0 * extent)
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    start_time = time.time()
    polylines = scene.render(camera)
    if not args.quiet:
        print(f"{len(scene)} boxes -> {len(polylines)} polylines in {time.time() - start_time:.2f}s")

    output_file = Path(args.output)
    save_png(polylines, str(output_file), width=args.width, height=args.height)
    if not args.quiet:
        print(f"Saved to: {output_file.absolute()}")

    if args.preview:
        from linecast.preview.display import show_preview

        show_preview(polylines)

    return 0


if __name__ == "__main__":
    sys.exit(main())
