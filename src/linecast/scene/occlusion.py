"""Point occlusion queries against a bounding volume tree.

A point on a shape is visible when nothing lies between it and the camera.
The test casts a ray through the point's screen position, from the near
plane toward the far plane, and asks whether any shape is hit noticeably
before the point itself:

    origin = unproject(x, y, -1)          (on the near plane)
    far    = unproject(x, y, +1)          (on the far plane)
    direction = normalize(far - origin)
    target_toi = dot(point - origin, direction)

Hits within ``OCCLUSION_EPSILON`` of ``target_toi`` are the point's own
shape and do not count as occluders.

The tree is searched best-first, ordered by ray time of impact with the
bounding boxes, and the search exits as soon as an occluder is found.
Subtrees whose box is first hit at or after the point are never expanded.

``occluded_mask`` answers the same question for all samples of a segment
in one depth-first walk, so each candidate shape is ray cast with a single
Taichi kernel launch per segment instead of once per sample.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
import numpy.typing as npt

from linecast.core.ray import Ray, Vector3Like, as_vec3
from linecast.scene.bvh import BestFirstVisitStatus, BoundingVolumeTree, BVTNode

if TYPE_CHECKING:
    from linecast.camera.camera import Camera

# Hits closer to the target than this do not occlude it
OCCLUSION_EPSILON = 1e-5


@dataclass(frozen=True)
class OcclusionQuery:
    """A ray from the camera toward a point.

    Attributes:
        ray: Unit-direction ray starting on the near plane.
        target_toi: Time of impact at which the ray reaches the point.
        max_toi: Time of impact at which the ray reaches the far plane.
    """

    ray: Ray
    target_toi: float
    max_toi: float

    @classmethod
    def from_camera(
        cls,
        camera: Camera,
        point: Vector3Like,
        ndc: Vector3Like | None = None,
    ) -> OcclusionQuery:
        """Build the query for ``point`` as seen by ``camera``.

        Args:
            camera: The camera the point is viewed from.
            point: World-space point to test.
            ndc: The point's NDC position, if already known.
        """
        p = as_vec3(point)
        ndc_point = camera.project_3d(p) if ndc is None else as_vec3(ndc)

        origin = camera.unproject((ndc_point[0], ndc_point[1], -1.0))
        far = camera.unproject((ndc_point[0], ndc_point[1], 1.0))
        ray = Ray.through(origin, far)
        return cls(
            ray=ray,
            target_toi=float((p - origin) @ ray.direction),
            max_toi=float(np.linalg.norm(far - origin)),
        )


class OcclusionVisitor:
    """Best-first visitor that finds an occluder in front of the target.

    The search result is True when the target is occluded and False when
    the nearest hit is the target itself.
    """

    def __init__(self, query: OcclusionQuery) -> None:
        self.query = query
        self._cutoff = query.target_toi - OCCLUSION_EPSILON

    def visit(self, best_cost: float, node: BVTNode[Any]) -> BestFirstVisitStatus[bool]:
        ray = self.query.ray
        rough_toi = node.aabb.toi_with_ray(ray, self.query.max_toi, solid=True)

        # Nothing in this subtree can be hit before the target
        if rough_toi is None or rough_toi >= self._cutoff:
            return BestFirstVisitStatus.stop()

        if node.is_leaf and rough_toi < best_cost:
            # rough_toi is a lower bound for every hit inside the box
            t = node.shape.intersect(ray, self.query.max_toi)
            if t is not None:
                if t < self._cutoff:
                    return BestFirstVisitStatus.exit_early(True)
                return BestFirstVisitStatus.continue_with(t, False)

        return BestFirstVisitStatus.continue_with(rough_toi)


def is_point_occluded(
    tree: BoundingVolumeTree[Any],
    camera: Camera,
    point: Vector3Like,
    ndc: Vector3Like | None = None,
) -> bool:
    """Return True if a shape in ``tree`` hides ``point`` from ``camera``.

    An empty tree never occludes.
    """
    if tree.root is None:
        return False
    query = OcclusionQuery.from_camera(camera, point, ndc)
    return bool(tree.best_first_search(OcclusionVisitor(query)))


def is_point_visible(
    tree: BoundingVolumeTree[Any],
    camera: Camera,
    point: Vector3Like,
    ndc: Vector3Like | None = None,
) -> bool:
    """Return True if ``point`` is not occluded by any shape in ``tree``."""
    return not is_point_occluded(tree, camera, point, ndc)


def occluded_mask(
    tree: BoundingVolumeTree[Any],
    camera: Camera,
    points: npt.ArrayLike,
    ndc: npt.ArrayLike | None = None,
) -> npt.NDArray[np.bool_]:
    """Occlusion test for many points at once.

    Gives the same answers as calling ``is_point_occluded`` per point, but
    walks the tree once with the set of rays still undecided at each node,
    and ray casts each candidate shape with a single batched call.

    Args:
        tree: The scene's bounding volume tree.
        camera: The camera the points are viewed from.
        points: (n, 3) world-space points.
        ndc: The points' (n, 3) NDC positions, if already known.

    Returns:
        An (n,) boolean array, True where a point is hidden.
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    n = len(points)
    occluded = np.zeros(n, dtype=bool)
    if tree.root is None or n == 0:
        return occluded

    if ndc is None:
        ndc_points = np.array([camera.project_3d(p) for p in points])
    else:
        ndc_points = np.asarray(ndc, dtype=np.float64).reshape(-1, 3)
    origins = camera.unproject_points(np.column_stack([ndc_points[:, :2], np.full(n, -1.0)]))
    fars = camera.unproject_points(np.column_stack([ndc_points[:, :2], np.full(n, 1.0)]))
    max_tois = np.linalg.norm(fars - origins, axis=1)
    directions = (fars - origins) / max_tois[:, np.newaxis]
    cutoffs = np.einsum("ij,ij->i", points - origins, directions) - OCCLUSION_EPSILON

    stack = [(tree.root, np.arange(n))]
    while stack:
        node, active = stack.pop()
        active = active[~occluded[active]]
        if len(active) == 0:
            continue

        rough_tois = node.aabb.toi_with_rays(origins[active], directions[active], max_tois[active])
        active = active[rough_tois < cutoffs[active]]
        if len(active) == 0:
            continue

        if node.is_leaf:
            tois = _intersect_many(node.shape, origins[active], directions[active], max_tois[active])
            occluded[active[tois < cutoffs[active]]] = True
        else:
            stack.extend((child, active) for child in reversed(node.children()))

    return occluded


def _intersect_many(
    shape: Any,
    origins: npt.NDArray[np.float64],
    directions: npt.NDArray[np.float64],
    max_tois: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    # Shapes without a batched ray cast are cast one ray at a time
    intersect_many = getattr(shape, "intersect_many", None)
    if intersect_many is not None:
        return intersect_many(origins, directions, max_tois)
    tois = [
        shape.intersect(Ray(origin=o, direction=d), float(t))
        for o, d, t in zip(origins, directions, max_tois)
    ]
    return np.array([math.inf if t is None else t for t in tois], dtype=np.float64)


class OcclusionTest:
    """Visibility predicate for the adaptive renderer.

    Called with one sample it runs a best-first query; ``many`` decides all
    samples of a segment in one batched pass.
    """

    def __init__(self, tree: BoundingVolumeTree[Any], camera: Camera) -> None:
        self.tree = tree
        self.camera = camera

    def __call__(self, world: npt.NDArray[np.float64], ndc: npt.NDArray[np.float64]) -> bool:
        return not is_point_occluded(self.tree, self.camera, world, ndc)

    def many(self, world: npt.NDArray[np.float64], ndc: npt.NDArray[np.float64]) -> npt.NDArray[np.bool_]:
        return ~occluded_mask(self.tree, self.camera, world, ndc)
