"""Camera module for projection and frustum clipping.

Components:
    camera: Immutable camera with look-at, perspective and orthographic
        transforms
    frustum: View frustum planes and line segment clipping
    config: Declarative camera configuration with dict round-tripping

Coordinates follow OpenGL conventions. Normalized device coordinates
(NDC) span [-1, 1] on every axis:
    x in [-1, 1]: left to right
    y in [-1, 1]: bottom to top
    z in [-1, 1]: near plane to far plane
"""

from .camera import (
    DEFAULT_RESOLUTION,
    Camera,
    get_camera_basis,
    look_at_matrix,
    orthographic_matrix,
    perspective_matrix,
)
from .config import CameraConfig
from .frustum import (
    ClipInvariantError,
    ClipKind,
    ClipResult,
    Frustum,
    FrustumPlane,
    plane_segment_intersection,
)

__all__ = [
    "Camera",
    "DEFAULT_RESOLUTION",
    "get_camera_basis",
    "look_at_matrix",
    "perspective_matrix",
    "orthographic_matrix",
    "CameraConfig",
    "Frustum",
    "FrustumPlane",
    "ClipKind",
    "ClipResult",
    "ClipInvariantError",
    "plane_segment_intersection",
]
