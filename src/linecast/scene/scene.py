"""Scene container and renderer.

A ``Scene`` owns a fixed set of shapes and the bounding volume tree built
over them. Rendering walks the tree, culls subtrees whose bounding box lies
outside the camera frustum, and renders every path of each remaining shape
through the adaptive path renderer, with the tree doubling as the occlusion
structure.

Example:
    >>> import math
    >>> from linecast.camera.camera import Camera
    >>> from linecast.geometry.box import BoxOutline
    >>> from linecast.scene.scene import SceneBuilder
    >>> scene = SceneBuilder().add(BoxOutline((0, 0, 0), (0.5, 0.5, 0.5))).build()
    >>> camera = (
    ...     Camera()
    ...     .look_at((0, 0, 5), (0, 0, 0), (0, 1, 0))
    ...     .perspective(math.pi / 2, 1.0, 1.0, 10.0)
    ... )
    >>> len(scene.render(camera))
    4
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from linecast.core import adaptive
from linecast.core.path import RenderPath
from linecast.core.ray import Vector3Like
from linecast.scene.bvh import BoundingVolumeTree, BVTNode, VisitStatus
from linecast.scene.occlusion import OcclusionTest, is_point_occluded

if TYPE_CHECKING:
    from linecast.camera.camera import Camera
    from linecast.geometry.shape import Shape

log = logging.getLogger(__name__)


class Scene:
    """A collection of shapes that can be rendered.

    The scene is read-only after construction, so one scene can be rendered
    from any number of cameras.
    """

    def __init__(self, shapes: Iterable[Shape]) -> None:
        self._shapes: tuple[Shape, ...] = tuple(shapes)
        self._tree: BoundingVolumeTree[Shape] = BoundingVolumeTree(
            [(shape, shape.bounding_box()) for shape in self._shapes]
        )
        log.debug("Created scene with %d shapes (tree depth %d)", len(self._shapes), self._tree.depth)

    def __len__(self) -> int:
        return len(self._shapes)

    def __repr__(self) -> str:
        return f"Scene({len(self._shapes)} shapes)"

    @property
    def shapes(self) -> tuple[Shape, ...]:
        return self._shapes

    @property
    def tree(self) -> BoundingVolumeTree[Shape]:
        return self._tree

    def is_point_visible(
        self, camera: Camera, point: Vector3Like, ndc: Vector3Like | None = None
    ) -> bool:
        """Return True if no shape hides ``point`` from ``camera``."""
        return not is_point_occluded(self._tree, camera, point, ndc)

    def render_path(self, path: Sequence[Vector3Like], camera: Camera) -> list[RenderPath]:
        """Render one 3D path into its visible NDC polylines."""
        return adaptive.render_path(camera, path, OcclusionTest(self._tree, camera))

    def render(self, camera: Camera) -> list[RenderPath]:
        """Render every shape visible from ``camera``.

        Returns:
            Visible polylines in NDC, in tree order.
        """
        collector = _VisiblePathCollector(self, camera)
        self._tree.visit(collector)
        log.debug(
            "Rendered %d paths from %d shapes into %d polylines",
            collector.path_count,
            collector.shape_count,
            len(collector.rendered_paths),
        )
        return collector.rendered_paths


class _VisiblePathCollector:
    """Tree visitor rendering the paths of every shape inside the frustum."""

    def __init__(self, scene: Scene, camera: Camera) -> None:
        self.scene = scene
        self.camera = camera
        self.rendered_paths: list[RenderPath] = []
        self.shape_count = 0
        self.path_count = 0

    def visit(self, node: BVTNode[Shape]) -> VisitStatus:
        if not self.camera.is_aabb_visible(node.aabb):
            return VisitStatus.STOP
        if node.shape is not None:
            self.shape_count += 1
            for path in node.shape.paths():
                self.path_count += 1
                self.rendered_paths.extend(self.scene.render_path(path, self.camera))
        return VisitStatus.CONTINUE


class SceneBuilder:
    """Convenience class for incrementally building a scene.

    Example:
        >>> scene = SceneBuilder().add(box).add(sphere).build()
    """

    def __init__(self) -> None:
        self._shapes: list[Shape] = []

    def add(self, shape: Shape) -> SceneBuilder:
        """Add a shape and return the builder for chaining."""
        self._shapes.append(shape)
        return self

    def build(self) -> Scene:
        return Scene(self._shapes)
