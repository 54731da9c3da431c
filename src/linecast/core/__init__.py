"""Core module for rays, paths, and adaptive rendering.

Components:
    ray: Ray dataclass and the float64 Taichi vector type
    path: Path types and the visible-path accumulator state machine
    adaptive: Resolution-adaptive rendering of 3D paths into NDC polylines

Rendering a path works in three steps:
    1. Clip the path to the camera frustum
    2. Sample every clipped segment at the camera's screen resolution
    3. Join runs of visible samples into polylines
"""

from .adaptive import VisibilityTest, render_path, render_segment_adaptive, subdivide_segment
from .path import Path, PathAccumulator, PathState, RenderPath
from .ray import Ray, Vector3Like, as_vec3, vec3

__all__ = [
    "Ray",
    "Vector3Like",
    "as_vec3",
    "vec3",
    "Path",
    "RenderPath",
    "PathState",
    "PathAccumulator",
    "VisibilityTest",
    "subdivide_segment",
    "render_segment_adaptive",
    "render_path",
]
