"""Box shape drawn as the outline of its twelve edges.

The box is ray cast as a solid, axis-aligned box using the slab method inside
a Taichi function. Because the edges lie on the box surface, an edge point is
hit at (almost exactly) its own distance when it is visible and strictly
earlier when a face of the box is in front of it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from linecast.core.ray import Ray
    >>> from linecast.geometry.box import BoxOutline
    >>> box = BoxOutline((0, 0, 0), (0.5, 0.5, 0.5))
    >>> box.intersect(Ray.through((0, 0, 5), (0, 0, 0)), 10.0)
    4.5
    >>> len(box.paths())
    12
"""

import numpy as np
import taichi as ti

from linecast.core.path import Path
from linecast.core.ray import Ray, Vector3Like, batch_arrays, kernel_vector, vec3
from linecast.geometry.aabb import AABB

# Corner index pairs (bit 2 = x, bit 1 = y, bit 0 = z) forming the edges
_EDGES = (
    (0, 1), (0, 2), (1, 3), (2, 3),
    (4, 5), (4, 6), (5, 7), (6, 7),
    (0, 4), (1, 5), (2, 6), (3, 7),
)


@ti.func
def hit_box(ray_origin: vec3, ray_direction: vec3, lo: vec3, hi: vec3, t_max: ti.f64) -> ti.f64:
    """Time of impact of a ray with a solid axis-aligned box.

    Each axis contributes an entry/exit interval; the ray hits the box when
    the intersection of the three intervals is non-empty and not behind the
    origin. A ray that starts inside the box hits it at t = 0.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        lo: Minimum corner of the box.
        hi: Maximum corner of the box.
        t_max: Maximum time of impact to consider a valid hit.

    Returns:
        The time of impact in [0, t_max], or -1 if the ray misses.
    """
    entry = ti.cast(-1e300, ti.f64)
    exit_ = ti.cast(1e300, ti.f64)
    inside_slabs = 1

    for axis in ti.static(range(3)):
        o = ray_origin[axis]
        d = ray_direction[axis]
        if ti.abs(d) < 1e-12:
            # Parallel to this slab: the origin must already lie within it
            if o < lo[axis] or o > hi[axis]:
                inside_slabs = 0
        else:
            t1 = (lo[axis] - o) / d
            t2 = (hi[axis] - o) / d
            entry = ti.max(entry, ti.min(t1, t2))
            exit_ = ti.min(exit_, ti.max(t1, t2))

    result = ti.cast(-1.0, ti.f64)
    if inside_slabs == 1 and entry <= exit_ and exit_ >= 0.0:
        toi = ti.max(entry, 0.0)
        if toi <= t_max:
            result = toi

    return result


@ti.kernel
def _box_toi(
    origin: ti.types.ndarray(dtype=ti.f64, ndim=1),
    direction: ti.types.ndarray(dtype=ti.f64, ndim=1),
    lo: ti.types.ndarray(dtype=ti.f64, ndim=1),
    hi: ti.types.ndarray(dtype=ti.f64, ndim=1),
    t_max: ti.f64,
) -> ti.f64:
    """Python-callable entry point for ``hit_box``."""
    return hit_box(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        vec3(lo[0], lo[1], lo[2]),
        vec3(hi[0], hi[1], hi[2]),
        t_max,
    )


@ti.kernel
def _box_toi_batch(
    origins: ti.types.ndarray(dtype=ti.f64, ndim=2),
    directions: ti.types.ndarray(dtype=ti.f64, ndim=2),
    lo: ti.types.ndarray(dtype=ti.f64, ndim=1),
    hi: ti.types.ndarray(dtype=ti.f64, ndim=1),
    t_max: ti.types.ndarray(dtype=ti.f64, ndim=1),
    out: ti.types.ndarray(dtype=ti.f64, ndim=1),
):
    """Cast one ray per row of ``origins``; misses are written as -1."""
    for i in range(origins.shape[0]):
        out[i] = hit_box(
            vec3(origins[i, 0], origins[i, 1], origins[i, 2]),
            vec3(directions[i, 0], directions[i, 1], directions[i, 2]),
            vec3(lo[0], lo[1], lo[2]),
            vec3(hi[0], hi[1], hi[2]),
            t_max[i],
        )


class BoxOutline:
    """Axis-aligned box with paths on all of its edges.

    Attributes:
        center: The center of the box.
        half_extents: Half the box size along each axis.
    """

    def __init__(self, center: Vector3Like, half_extents: Vector3Like) -> None:
        self._aabb = AABB.from_half_extents(center, half_extents)
        self._lo = kernel_vector(self._aabb.mins)
        self._hi = kernel_vector(self._aabb.maxs)

    @classmethod
    def from_extents(cls, a: Vector3Like, b: Vector3Like) -> "BoxOutline":
        """Create the box spanning two opposite corners."""
        aabb = AABB.from_extents(a, b)
        return cls(aabb.center, aabb.half_extents)

    def __repr__(self) -> str:
        return f"BoxOutline(center={tuple(self.center.tolist())}, half_extents={tuple(self.half_extents.tolist())})"

    @property
    def name(self) -> str:
        c = self.center
        return f"Box ({c[0]:g}, {c[1]:g}, {c[2]:g})"

    @property
    def center(self) -> np.ndarray:
        return self._aabb.center

    @property
    def half_extents(self) -> np.ndarray:
        return self._aabb.half_extents

    def corners(self) -> list[np.ndarray]:
        """Return the eight corners, x varying slowest and z fastest."""
        c = self.center
        he = self.half_extents
        return [
            c + np.array([i, j, k]) * he
            for i in (-1.0, 1.0)
            for j in (-1.0, 1.0)
            for k in (-1.0, 1.0)
        ]

    def intersect(self, ray: Ray, max_toi: float) -> float | None:
        t = _box_toi(
            kernel_vector(ray.origin),
            kernel_vector(ray.direction),
            self._lo,
            self._hi,
            float(max_toi),
        )
        return None if t < 0.0 else float(t)

    def intersect_many(
        self, origins: np.ndarray, directions: np.ndarray, max_tois: np.ndarray
    ) -> np.ndarray:
        """Ray cast many rays in one kernel launch.

        Returns:
            An (n,) array of times of impact, ``inf`` where a ray misses.
        """
        origins, directions, max_tois = batch_arrays(origins, directions, max_tois)
        out = np.empty(len(origins), dtype=np.float64)
        if len(out):
            _box_toi_batch(origins, directions, self._lo, self._hi, max_tois, out)
        return np.where(out < 0.0, np.inf, out)

    def paths(self) -> list[Path]:
        corners = self.corners()
        return [[corners[a], corners[b]] for a, b in _EDGES]

    def bounding_box(self) -> AABB:
        return self._aabb
