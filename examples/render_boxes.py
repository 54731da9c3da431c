#!/usr/bin/env python3
"""Render a small still life of boxes and a sphere as hidden-line art.

This script demonstrates end-to-end rendering with linecast: it builds a
scene (or loads one from JSON), sets up the camera, renders the visible
polylines and saves them as a PNG.

Usage:
    python -m examples.render_boxes [options]

Options:
    --width WIDTH       Image width in pixels (default: 800)
    --height HEIGHT     Image height in pixels (default: 800)
    --resolution RES    NDC sampling resolution (default: 0.005)
    --scene FILE        Load the scene from a JSON scene config
    --camera FILE       Load the camera from a JSON camera config
    --output OUTPUT     Output file path (default: boxes.png)
    --preview           Show the result in a Matplotlib window
    --quiet             Suppress progress output

Example:
    python -m examples.render_boxes --resolution 0.01 --preview
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render boxes and a sphere as hidden-line art.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=800,
        help="Image width in pixels (default: 800)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=800,
        help="Image height in pixels (default: 800)",
    )
    parser.add_argument(
        "--resolution",
        type=float,
        default=0.005,
        help="NDC sampling resolution (default: 0.005)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="Load the scene from a JSON scene config",
    )
    parser.add_argument(
        "--camera",
        type=str,
        default=None,
        help="Load the camera from a JSON camera config",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="boxes.png",
        help="Output file path (default: boxes.png)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the result in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def default_scene_config():
    """Three boxes on a slab with a banded sphere on top."""
    from linecast.scene.config import SceneConfig

    return SceneConfig(
        boxes=[
            {"center": [0.0, -0.6, 0.0], "half_extents": [2.0, 0.1, 1.5]},
            {"center": [-1.0, 0.0, 0.3], "half_extents": [0.5, 0.5, 0.5]},
            {"center": [0.9, 0.2, -0.4], "half_extents": [0.4, 0.7, 0.4]},
            {"center": [0.1, -0.3, 0.9], "half_extents": [0.3, 0.2, 0.3]},
        ],
        spheres=[
            {"center": [-1.0, 0.95, 0.3], "radius": 0.45, "lat_angle": 15.0},
        ],
    )


def render_boxes(
    width: int = 800,
    height: int = 800,
    resolution: float = 0.005,
    scene_path: str | None = None,
    camera_path: str | None = None,
    output_path: str = "boxes.png",
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        resolution: Maximum NDC distance between visibility samples.
        scene_path: Optional JSON scene config to load.
        camera_path: Optional JSON camera config to load.
        output_path: Output file path (PNG).
        preview: If True, show the polylines in a Matplotlib window.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from linecast.camera.config import CameraConfig
    from linecast.preview.export import save_png
    from linecast.scene.config import build_scene, scene_config_from_dict

    if scene_path is not None:
        scene_config = scene_config_from_dict(json.loads(Path(scene_path).read_text()))
    else:
        scene_config = default_scene_config()
    scene = build_scene(scene_config)

    if camera_path is not None:
        camera_config = CameraConfig.from_dict(json.loads(Path(camera_path).read_text()))
    else:
        camera_config = CameraConfig(eye=(4.0, 3.0, 5.0), target=(0.0, 0.0, 0.0), vfov=40.0)
    camera_config.aspect = width / height
    camera_config.resolution = resolution
    camera = camera_config.to_camera()

    if not quiet:
        print(f"Rendering {len(scene)} shapes at resolution {resolution}...")

    start_time = time.time()
    polylines = scene.render(camera)
    elapsed = time.time() - start_time

    if not quiet:
        print(f"  {len(polylines)} polylines in {elapsed:.2f}s")

    output_file = Path(output_path)
    save_png(polylines, str(output_file), width=width, height=height)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")

    if preview:
        from linecast.preview.display import show_preview

        show_preview(polylines, title=output_file.name)

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Float64 kernels keep the occlusion tolerance meaningful
    ti.init(arch=ti.cpu, default_fp=ti.f64)

    try:
        render_boxes(
            width=args.width,
            height=args.height,
            resolution=args.resolution,
            scene_path=args.scene,
            camera_path=args.camera,
            output_path=args.output,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
