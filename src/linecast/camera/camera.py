"""Perspective and orthographic cameras.

A camera converts between world space and normalized device coordinates
(NDC) and owns the frustum derived from its transforms. It is built with a
chain of methods, each returning a new camera:

    >>> import math
    >>> from linecast.camera.camera import Camera
    >>> camera = (
    ...     Camera()
    ...     .look_at((0.0, 0.0, 5.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
    ...     .perspective(math.pi / 2, 4.0 / 3.0, 1.0, 10.0)
    ...     .set_resolution(0.01)
    ... )
    >>> camera.project((0.0, 0.0, 0.0))
    array([0., 0.])

Conventions follow OpenGL: the view transform is right-handed with the camera
looking down its -z axis, and NDC spans [-1, 1] on every axis with the near
plane at z = -1 and the far plane at z = +1.

The camera builds its orthonormal basis (u, v, w) from the look-at
parameters:
- w: points from target toward eye (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from linecast.camera.frustum import BOUNDARY_EPSILON, ClipInvariantError, ClipKind, ClipResult, Frustum
from linecast.core.path import Path
from linecast.core.ray import Vector3Like, as_vec3
from linecast.geometry.aabb import AABB, BoxPlaneTest, box_plane_test

# Default maximum NDC distance between adjacent samples of a segment
DEFAULT_RESOLUTION = 0.01


# =============================================================================
# Transform Construction
# =============================================================================


def get_camera_basis(
    eye: Vector3Like, target: Vector3Like, up: Vector3Like
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Compute the camera's orthonormal basis.

    Returns:
        A tuple (u, v, w) of right, up and backward unit vectors.

    Raises:
        ValueError: If eye and target coincide or up is parallel to the
            view direction.
    """
    eye = as_vec3(eye)
    target = as_vec3(target)
    up = as_vec3(up)

    # w points from target toward eye (backward)
    w = eye - target
    w_norm = np.linalg.norm(w)
    if w_norm == 0.0:
        raise ValueError("Camera eye and target coincide")
    w = w / w_norm

    # u points right (perpendicular to w and up)
    u = np.cross(up, w)
    u_norm = np.linalg.norm(u)
    if u_norm < 1e-12:
        raise ValueError(f"Up vector {up.tolist()} is parallel to the view direction")
    u = u / u_norm

    # v points up in the camera's frame
    v = np.cross(w, u)

    return u, v, w


def look_at_matrix(eye: Vector3Like, target: Vector3Like, up: Vector3Like) -> npt.NDArray[np.float64]:
    """Right-handed view matrix mapping world space to camera space."""
    u, v, w = get_camera_basis(eye, target, up)
    eye = as_vec3(eye)
    view = np.eye(4)
    view[0, :3] = u
    view[1, :3] = v
    view[2, :3] = w
    view[:3, 3] = -view[:3, :3] @ eye
    return view


def perspective_matrix(fov: float, aspect: float, near: float, far: float) -> npt.NDArray[np.float64]:
    """OpenGL-style perspective projection.

    Args:
        fov: Vertical field of view in radians, in (0, pi).
        aspect: Width divided by height of the view.
        near: Distance to the near plane (positive).
        far: Distance to the far plane (greater than near).

    Raises:
        ValueError: If any parameter is out of range.
    """
    if not 0.0 < fov < math.pi:
        raise ValueError(f"Field of view must be in (0, pi) radians, got {fov}")
    if aspect <= 0.0:
        raise ValueError(f"Aspect ratio must be positive, got {aspect}")
    if not 0.0 < near < far:
        raise ValueError(f"Expected 0 < near < far, got near={near}, far={far}")

    f = 1.0 / math.tan(fov / 2.0)
    proj = np.zeros((4, 4))
    proj[0, 0] = f / aspect
    proj[1, 1] = f
    proj[2, 2] = (far + near) / (near - far)
    proj[2, 3] = 2.0 * far * near / (near - far)
    proj[3, 2] = -1.0
    return proj


def orthographic_matrix(
    half_width: float, half_height: float, near: float, far: float
) -> npt.NDArray[np.float64]:
    """OpenGL-style orthographic projection of a centered box.

    Args:
        half_width: Half the width of the view volume.
        half_height: Half the height of the view volume.
        near: Camera-space distance to the near plane (may be negative).
        far: Camera-space distance to the far plane.

    Raises:
        ValueError: If the half extents are not positive or near == far.
    """
    if half_width <= 0.0 or half_height <= 0.0:
        raise ValueError(f"Half extents must be positive, got {half_width} x {half_height}")
    if near == far:
        raise ValueError(f"Near and far planes coincide at {near}")

    proj = np.eye(4)
    proj[0, 0] = 1.0 / half_width
    proj[1, 1] = 1.0 / half_height
    proj[2, 2] = -2.0 / (far - near)
    proj[2, 3] = -(far + near) / (far - near)
    return proj


def _frozen_matrix(m: npt.ArrayLike | None) -> npt.NDArray[np.float64]:
    arr = np.eye(4) if m is None else np.array(m, dtype=np.float64)
    if arr.shape != (4, 4):
        raise ValueError(f"Expected a 4x4 matrix, got shape {arr.shape}")
    arr.flags.writeable = False
    return arr


# =============================================================================
# Camera
# =============================================================================


class Camera:
    """An immutable camera: view and projection transforms plus resolution.

    The frustum and the inverse clip matrix are derived whenever a camera is
    constructed, so they always match the transforms they came from.

    Attributes:
        view: World to camera space transform (4x4, read-only).
        projection: Camera space to clip space transform (4x4, read-only).
        clip_matrix: ``projection @ view``.
        frustum: Frustum of ``clip_matrix``.
        resolution: Maximum NDC distance between adjacent samples of a
            rendered segment.
    """

    __slots__ = ("_view", "_projection", "_clip", "_inverse_clip", "_frustum", "_resolution")

    def __init__(
        self,
        view: npt.ArrayLike | None = None,
        projection: npt.ArrayLike | None = None,
        resolution: float = DEFAULT_RESOLUTION,
    ) -> None:
        if resolution <= 0.0:
            raise ValueError(f"Resolution must be positive, got {resolution}")

        self._view = _frozen_matrix(view)
        self._projection = _frozen_matrix(projection)
        self._clip = _frozen_matrix(self._projection @ self._view)
        try:
            self._inverse_clip = _frozen_matrix(np.linalg.inv(self._clip))
        except np.linalg.LinAlgError as exc:
            raise ValueError("View-projection matrix is singular") from exc
        self._frustum = Frustum.from_clip_matrix(self._clip)
        self._resolution = float(resolution)

    def __repr__(self) -> str:
        return f"Camera(eye={self.eye.tolist()}, resolution={self._resolution})"

    # -------------------------------------------------------------------------
    # Builders
    # -------------------------------------------------------------------------

    def look_at(self, eye: Vector3Like, target: Vector3Like, up: Vector3Like) -> Camera:
        """Return a camera at ``eye`` looking toward ``target``."""
        return Camera(look_at_matrix(eye, target, up), self._projection, self._resolution)

    def perspective(self, fov: float, aspect: float, near: float, far: float) -> Camera:
        """Return a camera with a perspective projection (fov in radians)."""
        return Camera(self._view, perspective_matrix(fov, aspect, near, far), self._resolution)

    def ortho(self, half_width: float, half_height: float, near: float, far: float) -> Camera:
        """Return a camera with an orthographic projection."""
        return Camera(
            self._view, orthographic_matrix(half_width, half_height, near, far), self._resolution
        )

    def set_resolution(self, resolution: float) -> Camera:
        """Return a camera with a different sampling resolution."""
        return Camera(self._view, self._projection, resolution)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def view(self) -> npt.NDArray[np.float64]:
        return self._view

    @property
    def projection(self) -> npt.NDArray[np.float64]:
        return self._projection

    @property
    def clip_matrix(self) -> npt.NDArray[np.float64]:
        return self._clip

    @property
    def frustum(self) -> Frustum:
        return self._frustum

    @property
    def resolution(self) -> float:
        return self._resolution

    @property
    def eye(self) -> npt.NDArray[np.float64]:
        """Camera position in world space."""
        rotation = self._view[:3, :3]
        return -rotation.T @ self._view[:3, 3]

    # -------------------------------------------------------------------------
    # Projection
    # -------------------------------------------------------------------------

    def project_3d(self, world_point: Vector3Like) -> npt.NDArray[np.float64]:
        """Project a world point to NDC (x, y, z)."""
        h = self._clip @ np.append(as_vec3(world_point), 1.0)
        with np.errstate(divide="ignore", invalid="ignore"):
            return h[:3] / h[3]

    def project(self, world_point: Vector3Like) -> npt.NDArray[np.float64]:
        """Project a world point to NDC (x, y), discarding depth."""
        return self.project_3d(world_point)[:2]

    def unproject(self, ndc_point: Vector3Like) -> npt.NDArray[np.float64]:
        """Map an NDC point back to the world point it was projected from."""
        h = self._inverse_clip @ np.append(as_vec3(ndc_point), 1.0)
        with np.errstate(divide="ignore", invalid="ignore"):
            return h[:3] / h[3]

    def unproject_points(self, ndc_points: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Unproject an (n, 3) array of NDC points."""
        ndc = np.asarray(ndc_points, dtype=np.float64).reshape(-1, 3)
        h = np.column_stack([ndc, np.ones(len(ndc))]) @ self._inverse_clip.T
        with np.errstate(divide="ignore", invalid="ignore"):
            return h[:, :3] / h[:, 3:]

    # -------------------------------------------------------------------------
    # Visibility and clipping
    # -------------------------------------------------------------------------

    def is_point_visible(self, world_point: Vector3Like) -> bool:
        """Return True if the point lies within the view frustum."""
        return self._frustum.is_point_in(world_point)

    def is_aabb_visible(self, aabb: AABB) -> bool:
        """Approximate frustum test for a box.

        The box is rejected only when it lies entirely outside one of the
        six planes. Boxes straddling a plane count as visible, so a box can be
        accepted without any part of it being visible; later clipping and
        occlusion tests remain exact.
        """
        return all(box_plane_test(aabb, plane) is not BoxPlaneTest.OUTSIDE for plane in self._frustum.planes)

    def clip_path(self, path: Sequence[Vector3Like]) -> list[Path]:
        """Clip a polyline against the frustum.

        Returns:
            The maximal sub-paths of ``path`` that lie inside the frustum,
            each with at least two points.

        Raises:
            ClipInvariantError: If per-segment clip results cannot be
                stitched (a logic or tolerance defect).
        """
        points = [as_vec3(p) for p in path]
        sub_paths: list[Path] = []
        current: Path = []

        for p0, p1 in zip(points, points[1:]):
            result = self._frustum.clip_line(p0, p1)
            kind = result.kind

            if kind is ClipKind.OUTSIDE:
                if current:
                    raise ClipInvariantError(
                        f"Segment {p0.tolist()} -> {p1.tolist()} is outside the frustum "
                        "while a clipped path is open"
                    )
            elif kind is ClipKind.PREFIX and _is_degenerate(result):
                # Leaves the frustum right at p0: close the open path there
                if current:
                    sub_paths.append(current)
                    current = []
            elif kind is ClipKind.INSIDE or kind is ClipKind.PREFIX:
                if not current:
                    current.append(result.start)
                current.append(result.end)
                if kind is ClipKind.PREFIX:
                    sub_paths.append(current)
                    current = []
            else:
                if current:
                    raise ClipInvariantError(
                        f"Segment {p0.tolist()} -> {p1.tolist()} enters the frustum "
                        f"({kind.name}) while a clipped path is open"
                    )
                if kind is ClipKind.SUFFIX:
                    # Entering right at p1 leaves nothing to draw yet
                    if not _is_degenerate(result):
                        current = [result.start, result.end]
                else:
                    sub_paths.append([result.start, result.end])

        if current:
            sub_paths.append(current)
        return sub_paths


def _is_degenerate(result: ClipResult) -> bool:
    """Return True if a partial clip kept only a single boundary point."""
    return bool(np.linalg.norm(result.end - result.start) < BOUNDARY_EPSILON)
