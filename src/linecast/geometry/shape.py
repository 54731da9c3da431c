"""The shape capability consumed by the scene.

A shape is anything that can be ray cast, owns a set of 3D polylines lying on
its surface, and reports a bounding box. The scene never inspects a shape
beyond these methods, so user-defined geometry only has to satisfy the
``Shape`` protocol.

Rendering is only guaranteed to be correct when the points of a shape's
paths lie on the geometry that ``intersect`` reports, within the occlusion
tolerance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from linecast.core.path import Path
    from linecast.core.ray import Ray
    from linecast.geometry.aabb import AABB


@runtime_checkable
class Shape(Protocol):
    """Renderable 3D object with a collection of paths on its surface."""

    @property
    def name(self) -> str:
        """Human-readable label used in logs and diagnostics."""
        ...

    def intersect(self, ray: Ray, max_toi: float) -> float | None:
        """Ray cast against the true geometry (not the bounding box).

        Returns:
            The time of impact in [0, max_toi], or None for a miss.
        """
        ...

    def paths(self) -> list[Path]:
        """Return the 3D polylines on the shape's surface to render."""
        ...

    def bounding_box(self) -> AABB:
        """Return a box enclosing the shape."""
        ...
