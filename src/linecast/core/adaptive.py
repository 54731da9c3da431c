"""Resolution-adaptive rendering of 3D paths into visible 2D polylines.

Each straight segment of a path is sampled densely enough that adjacent
samples are at most ``camera.resolution`` apart on screen. Sampling happens
in NDC, so spacing is uniform on screen even under perspective, and the
samples are unprojected back to world space for the visibility test.

Visibility of every sample is decided by a caller-supplied predicate
``is_visible(world_point, ndc_point)``; runs of visible samples become
``RenderPath`` polylines through a ``PathAccumulator``. A predicate that
also has a ``many(world_points, ndc_points)`` method is asked once per
segment for all of its samples.

Example:
    >>> from linecast.core.adaptive import render_path
    >>> polylines = render_path(camera, [(0, 0, 0), (1, 0, 0), (1, 1, 0)],
    ...                         lambda world, ndc: True)
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from linecast.core.path import PathAccumulator, RenderPath
from linecast.core.ray import Vector3Like

if TYPE_CHECKING:
    from linecast.camera.camera import Camera

# is_visible(world_point, ndc_point) -> bool
VisibilityTest = Callable[[npt.NDArray[np.float64], npt.NDArray[np.float64]], bool]


def subdivide_segment(
    camera: Camera, p0: Vector3Like, p1: Vector3Like
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Sample a segment at the camera's screen resolution.

    If the projected segment is longer than the resolution r, it is split
    into ``ceil(L / r)`` equal steps in NDC (``ceil(L / r) + 1`` samples).
    Otherwise only the two endpoints are returned.

    Args:
        camera: Camera defining the projection and resolution.
        p0: Start of the segment in world space.
        p1: End of the segment in world space.

    Returns:
        A tuple (ndc, world) of (n, 3) arrays holding each sample in NDC and
        in world space.
    """
    ndc0 = camera.project_3d(p0)
    ndc1 = camera.project_3d(p1)
    length = float(np.linalg.norm(ndc1[:2] - ndc0[:2]))

    if length > camera.resolution:
        steps = math.ceil(length / camera.resolution)
        s = np.linspace(0.0, 1.0, steps + 1)[:, np.newaxis]
        ndc = ndc0 + (ndc1 - ndc0) * s
    else:
        ndc = np.array([ndc0, ndc1])

    world = np.array([camera.unproject(p) for p in ndc])
    return ndc, world


def render_segment_adaptive(
    camera: Camera,
    p0: Vector3Like,
    p1: Vector3Like,
    is_visible: VisibilityTest,
    accumulator: PathAccumulator,
    skip_first: bool = False,
) -> list[RenderPath]:
    """Render one segment, continuing the accumulator's open path.

    The accumulator's current last point is pinned, so a path that runs
    through the start of this segment keeps it as a vertex.

    Args:
        camera: Camera to render with.
        p0: Start of the segment in world space.
        p1: End of the segment in world space.
        is_visible: Visibility predicate for a sample.
        accumulator: Holds the path carried over from previous segments.
        skip_first: Skip the first sample, which duplicates the last
            sample of the previous segment.

    Returns:
        Polylines finished while rendering this segment. Any open path is
        left in the accumulator.
    """
    accumulator.pin()
    ndc, world = subdivide_segment(camera, p0, p1)

    start = 1 if skip_first else 0
    many = getattr(is_visible, "many", None)
    if many is not None:
        visible = many(world[start:], ndc[start:])
    else:
        visible = [is_visible(world[j], ndc[j]) for j in range(start, len(ndc))]

    finished: list[RenderPath] = []
    for j, sample_visible in zip(range(start, len(ndc)), visible):
        path = accumulator.push(ndc[j, :2], bool(sample_visible))
        if path is not None:
            finished.append(path)
    return finished


def render_path(
    camera: Camera, path: Sequence[Vector3Like], is_visible: VisibilityTest
) -> list[RenderPath]:
    """Render a 3D polyline into visible NDC polylines.

    The path is first clipped to the camera frustum. Every clipped sub-path
    is then sampled segment by segment through one accumulator, so visible
    runs continue across segment joins.
    """
    rendered: list[RenderPath] = []
    for sub_path in camera.clip_path(path):
        accumulator = PathAccumulator()
        for i, (p0, p1) in enumerate(zip(sub_path, sub_path[1:])):
            rendered.extend(
                render_segment_adaptive(camera, p0, p1, is_visible, accumulator, skip_first=i > 0)
            )
        finished = accumulator.flush()
        if finished is not None:
            rendered.append(finished)
    return rendered
