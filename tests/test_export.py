"""Unit tests for image export and preview.

Tests cover:
- NDC to device coordinate conversion
- Drawing polylines into grayscale and RGB images
- Saving PNG files
- Preview bounds and the Matplotlib preview window
"""

import numpy as np
import pytest


class TestNdcToDevice:
    """Tests for device coordinate conversion."""

    def test_corners_and_center(self):
        """Test that y is flipped and the origin moves to the top-left."""
        from linecast.preview.export import ndc_to_device

        device = ndc_to_device([[-1.0, 1.0], [1.0, -1.0], [0.0, 0.0]], 200, 100)

        np.testing.assert_allclose(device, [[0.0, 0.0], [200.0, 100.0], [100.0, 50.0]])

    def test_bad_shape_raises(self):
        """Test that only (n, 2) paths are accepted."""
        from linecast.preview.export import ndc_to_device

        with pytest.raises(ValueError):
            ndc_to_device([[0.0, 0.0, 0.0]], 100, 100)
        with pytest.raises(ValueError):
            ndc_to_device([0.0, 0.0], 100, 100)


class TestRenderImage:
    """Tests for drawing polylines with Pillow."""

    def test_grayscale_line(self):
        """Test a horizontal line through the middle of the image."""
        from linecast.preview.export import render_paths_image

        image = render_paths_image([np.array([[-1.0, 0.0], [1.0, 0.0]])], 100, 100)

        assert image.mode == "L"
        assert image.size == (100, 100)
        assert image.getpixel((50, 50)) == 0
        assert image.getpixel((0, 0)) == 255

    def test_rgb_colors(self):
        """Test that tuple colors select an RGB image."""
        from linecast.preview.export import render_paths_image

        image = render_paths_image(
            [np.array([[0.0, -1.0], [0.0, 1.0]])],
            64,
            32,
            foreground=(255, 0, 0),
            background=(0, 0, 0),
        )

        assert image.mode == "RGB"
        assert image.getpixel((32, 16)) == (255, 0, 0)
        assert image.getpixel((0, 0)) == (0, 0, 0)

    def test_empty_paths(self):
        """Test that no paths gives a blank image."""
        from linecast.preview.export import render_paths_image

        image = render_paths_image([], 10, 10)

        assert image.getextrema() == (255, 255)

    def test_invalid_arguments_raise(self):
        """Test image size and line width validation."""
        from linecast.preview.export import render_paths_image

        with pytest.raises(ValueError):
            render_paths_image([], 0, 10)
        with pytest.raises(ValueError):
            render_paths_image([], 10, 10, line_width=0)

    def test_save_png(self, tmp_path):
        """Test writing a PNG file."""
        from PIL import Image

        from linecast.preview.export import save_png

        filepath = tmp_path / "lines.png"
        save_png([np.array([[-0.5, -0.5], [0.5, 0.5]])], str(filepath), width=40, height=30)

        with Image.open(filepath) as image:
            assert image.format == "PNG"
            assert image.size == (40, 30)


class TestPreview:
    """Tests for the Matplotlib preview."""

    def test_path_bounds(self):
        """Test the bounding rectangle of several paths."""
        from linecast.preview.display import path_bounds

        paths = [np.array([[-0.5, 0.0], [0.25, 0.5]]), np.array([[0.0, -0.75], [0.5, 0.0]])]

        assert path_bounds(paths) == (-0.5, 0.5, -0.75, 0.5)
        assert path_bounds([]) == (-1.0, 1.0, -1.0, 1.0)

    def test_show_preview(self, monkeypatch):
        """Test that each path becomes one line in the figure."""
        matplotlib = pytest.importorskip("matplotlib")
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from linecast.preview.display import show_preview

        shown = []
        monkeypatch.setattr(plt, "show", lambda block=True: shown.append(block))

        paths = [np.array([[-0.5, 0.0], [0.5, 0.0]]), np.array([[0.0, -0.5], [0.0, 0.5]])]
        show_preview(paths, block=False)

        ax = plt.gcf().axes[0]
        assert len(ax.lines) == 2
        assert ax.get_title() == "2 polylines"
        assert ax.get_xlim() == (-1.0, 1.0)
        assert shown == [False]
        plt.close("all")
