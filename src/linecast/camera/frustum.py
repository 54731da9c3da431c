"""View frustum planes and line segment clipping.

The frustum is the convex region bounded by the six planes of a clip matrix
(the combined view-projection transform). Its planes are extracted directly
from the matrix rows (Gribb/Hartmann), in the fixed order:

    Left, Right, Bottom, Top, Near, Far

All planes face into the frustum: a point p is inside iff
``dot(n, p) + d >= 0`` for every plane ``(n, d)``.

Clipping a segment against the frustum yields one of five outcomes (see
``ClipKind``). Convexity guarantees a segment whose endpoints are both inside
is entirely inside, and a segment that enters and leaves does so at exactly
two boundary points.

Example:
    >>> import numpy as np
    >>> from linecast.camera.frustum import Frustum
    >>> frustum = Frustum.from_clip_matrix(np.eye(4))
    >>> frustum.is_point_in((0.0, 0.0, 0.0))
    True
    >>> frustum.clip_line((-5.0, 0.0, 0.0), (5.0, 0.0, 0.0)).kind
    <ClipKind.INFIX: 5>
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum

import numpy as np
import numpy.typing as npt

from linecast.core.ray import Vector3Like, as_vec3

log = logging.getLogger(__name__)

# Segments whose direction is closer than this (cosine) to a plane are parallel
PARALLEL_EPSILON = 1e-5

# Tolerance for deciding that a crossing point lies on the frustum boundary
BOUNDARY_EPSILON = 1e-5

# Boundary crossings closer than this are the same point (an edge or corner)
_COINCIDENT_DISTANCE = BOUNDARY_EPSILON


class ClipInvariantError(RuntimeError):
    """A clipping result that frustum convexity should make impossible.

    Raised for more than two on-frustum crossings of a segment with both
    endpoints outside, or a clip classification that does not fit the
    current path being stitched. Either indicates a geometry or tolerance
    defect, not bad input.
    """


class FrustumPlane(IntEnum):
    """Index of each plane in ``Frustum.planes``."""

    LEFT = 0
    RIGHT = 1
    BOTTOM = 2
    TOP = 3
    NEAR = 4
    FAR = 5


class ClipKind(Enum):
    """Classification of a line segment against a frustum.

    Attributes:
        OUTSIDE: The segment is completely outside.
        INSIDE: Both endpoints (and so the whole segment) are inside.
        PREFIX: The first endpoint is inside, the second outside.
        SUFFIX: The first endpoint is outside, the second inside.
        INFIX: Both endpoints are outside, but the segment passes through.
    """

    OUTSIDE = 1
    INSIDE = 2
    PREFIX = 3
    SUFFIX = 4
    INFIX = 5


@dataclass(frozen=True, eq=False)
class ClipResult:
    """Result from clipping a line segment against a ``Frustum``.

    Attributes:
        kind: The classification.
        start: First endpoint of the clipped segment (None when OUTSIDE).
        end: Second endpoint of the clipped segment (None when OUTSIDE).
    """

    kind: ClipKind
    start: npt.NDArray[np.float64] | None = None
    end: npt.NDArray[np.float64] | None = None

    @property
    def is_partial(self) -> bool:
        """True if only part of the segment is inside."""
        return self.kind in (ClipKind.PREFIX, ClipKind.SUFFIX, ClipKind.INFIX)


def plane_segment_intersection(
    plane: npt.NDArray[np.float64],
    p0: npt.NDArray[np.float64],
    p1: npt.NDArray[np.float64],
) -> float | None:
    """Return t such that ``p0 + (p1 - p0) * t`` lies on the plane.

    The value is not restricted to [0, 1]. Segments of zero length, or whose
    direction is (nearly) parallel to the plane, have no crossing.
    """
    v = p1 - p0
    v_norm = float(np.linalg.norm(v))
    if v_norm == 0.0:
        return None
    n = plane[:3]
    v_dot_n = float(v @ n)
    if abs(v_dot_n) / v_norm < PARALLEL_EPSILON:
        return None
    return -(float(plane[3]) + float(p0 @ n)) / v_dot_n


class Frustum:
    """The six planes bounding the region visible through a clip matrix.

    Attributes:
        planes: Read-only (6, 4) array of ``(nx, ny, nz, d)`` rows with unit
            normals, ordered as ``FrustumPlane``.
    """

    __slots__ = ("planes",)

    def __init__(self, planes: npt.ArrayLike) -> None:
        arr = np.array(planes, dtype=np.float64)
        if arr.shape != (6, 4):
            raise ValueError(f"Expected (6, 4) plane array, got shape {arr.shape}")
        arr.flags.writeable = False
        self.planes = arr

    @classmethod
    def from_clip_matrix(cls, m: npt.ArrayLike) -> Frustum:
        """Compute the frustum planes of a clip matrix.

        Args:
            m: 4x4 matrix mapping world points (column vectors) to clip space.

        Returns:
            A frustum whose planes face inward, in the order
            Left, Right, Bottom, Top, Near, Far.
        """
        m = np.asarray(m, dtype=np.float64)
        planes = np.array(
            [
                m[3] + m[0],
                m[3] - m[0],
                m[3] + m[1],
                m[3] - m[1],
                m[3] + m[2],
                m[3] - m[2],
            ]
        )
        planes /= np.linalg.norm(planes[:, :3], axis=1, keepdims=True)
        return cls(planes)

    def plane(self, which: FrustumPlane) -> npt.NDArray[np.float64]:
        """Return one frustum plane."""
        return self.planes[int(which)]

    def signed_distances(self, point: Vector3Like) -> npt.NDArray[np.float64]:
        """Signed distance of a point to each plane (positive is inside)."""
        p = as_vec3(point)
        return self.planes[:, :3] @ p + self.planes[:, 3]

    def is_point_in(self, point: Vector3Like) -> bool:
        """Return True iff the point lies within the frustum."""
        return bool(np.all(self.signed_distances(point) >= 0.0))

    def is_point_in_or_on(self, point: Vector3Like, eps: float = BOUNDARY_EPSILON) -> bool:
        """Return True iff the point lies within or on (up to eps) the frustum."""
        return bool(np.all(self.signed_distances(point) >= -eps))

    def clip_line(self, p0: Vector3Like, p1: Vector3Like) -> ClipResult:
        """Clip a 3D line segment against the frustum.

        Raises:
            ClipInvariantError: If a segment with both endpoints outside
                crosses the frustum boundary at more than two points.
        """
        a = as_vec3(p0)
        b = as_vec3(p1)
        in0 = self.is_point_in(a)
        in1 = self.is_point_in(b)

        # Frustums are convex, so if both points are inside we're done.
        if in0 and in1:
            return ClipResult(ClipKind.INSIDE, a, b)

        crossings = sorted(
            t
            for t in (plane_segment_intersection(plane, a, b) for plane in self.planes)
            if t is not None and 0.0 <= t <= 1.0
        )
        v = b - a

        if in0:
            if not crossings:
                log.debug("No crossing found for prefix segment %s -> %s, keeping end point", a, b)
            t = crossings[0] if crossings else 1.0
            return ClipResult(ClipKind.PREFIX, a, a + v * t)

        if in1:
            if not crossings:
                log.debug("No crossing found for suffix segment %s -> %s, keeping start point", a, b)
            t = crossings[-1] if crossings else 0.0
            return ClipResult(ClipKind.SUFFIX, a + v * t, b)

        # Both endpoints outside: keep the crossings that lie on the frustum
        on_frustum: list[float] = []
        for t in crossings:
            point = a + v * t
            if on_frustum and np.linalg.norm(point - (a + v * on_frustum[-1])) < _COINCIDENT_DISTANCE:
                continue
            if self.is_point_in_or_on(point, BOUNDARY_EPSILON):
                on_frustum.append(t)

        if len(on_frustum) < 2:
            return ClipResult(ClipKind.OUTSIDE)
        if len(on_frustum) == 2:
            return ClipResult(ClipKind.INFIX, a + v * on_frustum[0], a + v * on_frustum[1])
        raise ClipInvariantError(
            f"Segment {a.tolist()} -> {b.tolist()} crosses the frustum boundary "
            f"{len(on_frustum)} times (t = {on_frustum})"
        )
