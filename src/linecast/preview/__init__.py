"""Preview and output utilities for rendered polylines.

Components:
    export: NDC to device conversion and PNG export via Pillow
    display: Matplotlib preview window (requires the 'preview' extra)
"""

from .display import path_bounds, show_preview
from .export import ndc_to_device, render_paths_image, save_png

__all__ = [
    "ndc_to_device",
    "render_paths_image",
    "save_png",
    "path_bounds",
    "show_preview",
]
