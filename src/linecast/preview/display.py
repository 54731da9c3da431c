"""Matplotlib-based preview display for rendered polylines.

Matplotlib is an optional dependency (the ``preview`` extra) and is only
imported when a preview is shown.

Example:
    >>> from linecast.preview.display import show_preview
    >>> show_preview(scene.render(camera), title="Boxes")
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from linecast.core.path import RenderPath


def path_bounds(paths: Sequence[RenderPath]) -> tuple[float, float, float, float]:
    """Return (x_min, x_max, y_min, y_max) of all paths, or the NDC square.

    Args:
        paths: Polylines in NDC.
    """
    if not paths:
        return (-1.0, 1.0, -1.0, 1.0)
    points = np.concatenate([np.asarray(p, dtype=np.float64) for p in paths])
    x_min, y_min = points.min(axis=0)
    x_max, y_max = points.max(axis=0)
    return (float(x_min), float(x_max), float(y_min), float(y_max))


def show_preview(
    paths: Sequence[RenderPath],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    line_width: float = 1.0,
    color: str = "black",
    fit: bool = False,
    block: bool = True,
) -> None:
    """Display polylines in a Matplotlib figure.

    Args:
        paths: Polylines in NDC.
        title: Custom title (default shows the polyline count).
        figsize: Figure size in inches (width, height).
        line_width: Line width in points.
        color: Line color.
        fit: Zoom to the polylines instead of showing the full NDC square.
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    for path in paths:
        points = np.asarray(path, dtype=np.float64)
        ax.plot(points[:, 0], points[:, 1], color=color, linewidth=line_width)

    x_min, x_max, y_min, y_max = path_bounds(paths) if fit else (-1.0, 1.0, -1.0, 1.0)
    ax.set_xlim(x_min, x_max)
    ax.set_ylim(y_min, y_max)
    ax.set_aspect("equal")
    ax.axis("off")

    ax.set_title(title if title is not None else f"{len(paths)} polylines")

    plt.tight_layout()
    plt.show(block=block)
