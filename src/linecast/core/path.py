"""Path types and the visible-path accumulator.

A ``Path`` is an ordered list of 3D points on a shape. A ``RenderPath`` is the
renderer's output unit: an (n, 2) array of NDC points with n >= 2.

``PathAccumulator`` rebuilds maximal visible runs from a stream of sample
points, each tagged visible or not. It is a three-state machine:

    state       visible   ->  next state   effect
    EMPTY       yes           STARTED      open a path with the point
    EMPTY       no            EMPTY        -
    STARTED     yes           CONTINUING   append the point
    STARTED     no            EMPTY        drop the single dangling point
    CONTINUING  yes           CONTINUING   replace the last point (or append
                                           after a pinned point)
    CONTINUING  no            EMPTY        emit the accumulated path

Samples of one straight 3D segment are collinear on screen, so extending a
run only needs to move its end point. The point where two segments of a
polyline meet is a real vertex; ``pin`` marks it so the next visible sample
is appended after it instead of replacing it.
"""

from __future__ import annotations

from enum import Enum

import numpy as np
import numpy.typing as npt

# Ordered 3D points on a shape surface
Path = list[npt.NDArray[np.float64]]

# (n, 2) array of NDC points, n >= 2
RenderPath = npt.NDArray[np.float64]


class PathState(Enum):
    """State of the path currently being accumulated."""

    EMPTY = 0
    STARTED = 1
    CONTINUING = 2


class PathAccumulator:
    """Accumulate visible samples into finished render paths."""

    def __init__(self) -> None:
        self._state = PathState.EMPTY
        self._points: list[npt.NDArray[np.float64]] = []
        self._pinned = False

    @property
    def state(self) -> PathState:
        return self._state

    @property
    def points(self) -> list[npt.NDArray[np.float64]]:
        """Points of the open path (a copy)."""
        return list(self._points)

    def pin(self) -> None:
        """Keep the current last point as a vertex of the open path."""
        self._pinned = True

    def push(self, point: npt.ArrayLike, visible: bool) -> RenderPath | None:
        """Feed one sample point.

        Args:
            point: The sample's 2D NDC position.
            visible: Whether the sample passed the occlusion test.

        Returns:
            The finished path if this sample ended a drawable run, else None.
        """
        p = np.asarray(point, dtype=np.float64)
        finished = None

        if self._state is PathState.EMPTY:
            if visible:
                self._points = [p]
                self._state = PathState.STARTED
        elif self._state is PathState.STARTED:
            if visible:
                self._points.append(p)
                self._state = PathState.CONTINUING
            else:
                self._reset()
        else:
            if visible:
                if self._pinned:
                    self._points.append(p)
                else:
                    self._points[-1] = p
            else:
                finished = np.array(self._points)
                self._reset()

        self._pinned = False
        return finished

    def flush(self) -> RenderPath | None:
        """End the open path.

        Returns:
            The open path if it has at least two points, else None. A single
            STARTED point is discarded.
        """
        finished = np.array(self._points) if self._state is PathState.CONTINUING else None
        self._reset()
        return finished

    def _reset(self) -> None:
        self._state = PathState.EMPTY
        self._points = []
        self._pinned = False
