"""Axis-aligned bounding boxes.

Bounding boxes are the bounding volume of the scene's spatial index. They
support the two queries the renderer needs:

- ray time of impact, for best-first occlusion search
- classification against a plane, for frustum culling

Example:
    >>> from linecast.geometry.aabb import AABB
    >>> box = AABB.from_half_extents((0, 0, 0), (1, 1, 1))
    >>> box.plane_test((0.0, 1.0, 0.0, -2.0))
    <BoxPlaneTest.OUTSIDE: 3>
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

import numpy as np
import numpy.typing as npt

from linecast.core.ray import Ray, Vector3Like, as_vec3

# Direction components smaller than this are treated as parallel to a slab
_PARALLEL_EPS = 1e-12


class BoxPlaneTest(Enum):
    """Position of a box relative to an oriented plane."""

    INSIDE = 1
    INTERSECTS = 2
    OUTSIDE = 3


@dataclass(frozen=True, eq=False)
class AABB:
    """An axis-aligned bounding box.

    Attributes:
        mins: Minimum corner (read-only float64 array).
        maxs: Maximum corner (read-only float64 array).
    """

    mins: npt.NDArray[np.float64]
    maxs: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        mins = as_vec3(self.mins).copy()
        maxs = as_vec3(self.maxs).copy()
        if np.any(mins > maxs):
            raise ValueError(f"AABB mins {mins} exceed maxs {maxs}")
        mins.flags.writeable = False
        maxs.flags.writeable = False
        object.__setattr__(self, "mins", mins)
        object.__setattr__(self, "maxs", maxs)

    @classmethod
    def from_half_extents(cls, center: Vector3Like, half_extents: Vector3Like) -> AABB:
        """Create a box from its center and (non-negative) half extents."""
        c = as_vec3(center)
        he = as_vec3(half_extents)
        if np.any(he < 0.0):
            raise ValueError(f"Half extents must be non-negative, got {he}")
        return cls(mins=c - he, maxs=c + he)

    @classmethod
    def from_extents(cls, a: Vector3Like, b: Vector3Like) -> AABB:
        """Create the smallest box containing two corner points."""
        pa = as_vec3(a)
        pb = as_vec3(b)
        return cls(mins=np.minimum(pa, pb), maxs=np.maximum(pa, pb))

    @classmethod
    def union(cls, boxes: Iterable[AABB]) -> AABB:
        """Create the smallest box containing every box in ``boxes``.

        Raises:
            ValueError: If ``boxes`` is empty.
        """
        boxes = list(boxes)
        if not boxes:
            raise ValueError("Cannot take the union of zero boxes")
        mins = np.min([b.mins for b in boxes], axis=0)
        maxs = np.max([b.maxs for b in boxes], axis=0)
        return cls(mins=mins, maxs=maxs)

    @property
    def center(self) -> npt.NDArray[np.float64]:
        return (self.mins + self.maxs) * 0.5

    @property
    def half_extents(self) -> npt.NDArray[np.float64]:
        return (self.maxs - self.mins) * 0.5

    def merged(self, other: AABB) -> AABB:
        """Return the union of this box and ``other``."""
        return AABB(mins=np.minimum(self.mins, other.mins), maxs=np.maximum(self.maxs, other.maxs))

    def contains_point(self, point: Vector3Like) -> bool:
        p = as_vec3(point)
        return bool(np.all(p >= self.mins) and np.all(p <= self.maxs))

    def toi_with_ray(self, ray: Ray, max_toi: float, solid: bool = True) -> float | None:
        """Compute the time of impact of a ray with this box (slab test).

        Args:
            ray: The ray to cast.
            max_toi: Hits beyond this time of impact are ignored.
            solid: If True, a ray starting inside the box hits at t = 0.
                Otherwise it hits where it leaves the box.

        Returns:
            The time of impact, or None if the ray misses within ``max_toi``.
        """
        entry = -math.inf
        exit_ = math.inf
        for axis in range(3):
            o = float(ray.origin[axis])
            d = float(ray.direction[axis])
            lo = float(self.mins[axis])
            hi = float(self.maxs[axis])
            if abs(d) < _PARALLEL_EPS:
                # Parallel to this slab: either always inside it or never
                if o < lo or o > hi:
                    return None
                continue
            inv = 1.0 / d
            t1 = (lo - o) * inv
            t2 = (hi - o) * inv
            if t1 > t2:
                t1, t2 = t2, t1
            entry = max(entry, t1)
            exit_ = min(exit_, t2)
            if entry > exit_:
                return None

        if exit_ < 0.0:
            return None
        if entry >= 0.0:
            toi = entry
        else:
            toi = 0.0 if solid else exit_
        return toi if toi <= max_toi else None

    def toi_with_rays(
        self,
        origins: npt.ArrayLike,
        directions: npt.ArrayLike,
        max_tois: npt.ArrayLike,
    ) -> npt.NDArray[np.float64]:
        """Solid slab test for many rays at once.

        Args:
            origins: (n, 3) ray origins.
            directions: (n, 3) ray directions.
            max_tois: (n,) per-ray limits.

        Returns:
            An (n,) array of times of impact, ``inf`` where a ray misses.
        """
        o = np.asarray(origins, dtype=np.float64).reshape(-1, 3)
        d = np.asarray(directions, dtype=np.float64).reshape(-1, 3)
        entry = np.full(len(o), -np.inf)
        exit_ = np.full(len(o), np.inf)
        hit = np.ones(len(o), dtype=bool)

        for axis in range(3):
            oa = o[:, axis]
            da = d[:, axis]
            lo = self.mins[axis]
            hi = self.maxs[axis]
            parallel = np.abs(da) < _PARALLEL_EPS
            hit &= ~(parallel & ((oa < lo) | (oa > hi)))
            with np.errstate(divide="ignore", invalid="ignore"):
                t1 = (lo - oa) / da
                t2 = (hi - oa) / da
            entry = np.maximum(entry, np.where(parallel, -np.inf, np.minimum(t1, t2)))
            exit_ = np.minimum(exit_, np.where(parallel, np.inf, np.maximum(t1, t2)))

        toi = np.maximum(entry, 0.0)
        hit &= (entry <= exit_) & (exit_ >= 0.0) & (toi <= np.asarray(max_tois, dtype=np.float64))
        return np.where(hit, toi, np.inf)

    def plane_test(self, plane: npt.ArrayLike) -> BoxPlaneTest:
        """Classify this box against an oriented plane (see ``box_plane_test``)."""
        return box_plane_test(self, plane)


def box_plane_test(aabb: AABB, plane: npt.ArrayLike) -> BoxPlaneTest:
    """Return the position of ``aabb`` relative to ``plane``.

    The plane is ``(nx, ny, nz, d)`` with a unit normal. The box is INSIDE
    when it lies completely on the side the normal faces, OUTSIDE when it
    lies completely on the other side, and INTERSECTS otherwise.
    """
    p = np.asarray(plane, dtype=np.float64)
    n = p[:3]
    r = float(np.abs(n) @ aabb.half_extents)
    s = float(n @ aabb.center) + float(p[3])

    if s < -r:
        return BoxPlaneTest.OUTSIDE
    if s > r:
        return BoxPlaneTest.INSIDE
    return BoxPlaneTest.INTERSECTS
