"""Device-space conversion and image export for rendered polylines.

Rendered paths are in NDC, with x and y in [-1, 1] and y pointing up. Image
devices put the origin at the top-left with y pointing down, so conversion
flips y:

    x_device = (x + 1) / 2 * width
    y_device = (1 - y) / 2 * height

Supported formats:
    - PNG (8-bit grayscale or RGB via Pillow)

Example:
    >>> from linecast.preview.export import save_png
    >>> polylines = scene.render(camera)
    >>> save_png(polylines, "output.png", width=800, height=800)
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage
from PIL import ImageDraw

from linecast.core.path import RenderPath

Color = int | tuple[int, int, int]


def ndc_to_device(path: npt.ArrayLike, width: float, height: float) -> npt.NDArray[np.float64]:
    """Convert an (n, 2) NDC polyline to device coordinates.

    Args:
        path: Points in NDC.
        width: Device width (pixels, points, ...).
        height: Device height.

    Returns:
        An (n, 2) array of device coordinates with y pointing down.

    Raises:
        ValueError: If the path is not an (n, 2) array.
    """
    points = np.asarray(path, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 2:
        raise ValueError(f"Expected an (n, 2) path, got shape {points.shape}")

    device = np.empty_like(points)
    device[:, 0] = (points[:, 0] + 1.0) * 0.5 * width
    device[:, 1] = (1.0 - points[:, 1]) * 0.5 * height
    return device


def render_paths_image(
    paths: Sequence[RenderPath],
    width: int,
    height: int,
    *,
    line_width: int = 1,
    foreground: Color = 0,
    background: Color = 255,
) -> PILImage.Image:
    """Draw polylines into a new Pillow image.

    The image is grayscale ("L") when both colors are ints, otherwise RGB.

    Args:
        paths: Polylines in NDC.
        width: Image width in pixels.
        height: Image height in pixels.
        line_width: Stroke width in pixels.
        foreground: Line color.
        background: Fill color.

    Returns:
        The drawn image.

    Raises:
        ValueError: If the image size or line width is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")
    if line_width <= 0:
        raise ValueError(f"Line width must be positive, got {line_width}")

    mode = "L" if isinstance(foreground, int) and isinstance(background, int) else "RGB"
    if mode == "RGB":
        foreground = _as_rgb(foreground)
        background = _as_rgb(background)

    image = PILImage.new(mode, (width, height), background)
    draw = ImageDraw.Draw(image)
    for path in paths:
        device = ndc_to_device(path, width, height)
        draw.line([tuple(p) for p in device.tolist()], fill=foreground, width=line_width)
    return image


def _as_rgb(color: Color) -> tuple[int, int, int]:
    if isinstance(color, int):
        return (color, color, color)
    return color


def save_png(
    paths: Sequence[RenderPath],
    filepath: str,
    *,
    width: int = 800,
    height: int = 800,
    line_width: int = 1,
    foreground: Color = 0,
    background: Color = 255,
) -> None:
    """Save polylines as a PNG file.

    Args:
        paths: Polylines in NDC.
        filepath: Output file path (should end in .png).
        width: Image width in pixels.
        height: Image height in pixels.
        line_width: Stroke width in pixels.
        foreground: Line color.
        background: Fill color.
    """
    image = render_paths_image(
        paths,
        width,
        height,
        line_width=line_width,
        foreground=foreground,
        background=background,
    )
    image.save(filepath)
