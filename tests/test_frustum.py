"""Unit tests for frustum planes and segment clipping.

Tests cover:
- Plane extraction from a clip matrix
- Point containment with and without tolerance
- Plane/segment intersection, including degenerate segments
- All five clip classifications, including edge and corner crossings
"""

import numpy as np
import pytest


def _box_frustum():
    """Frustum of the orthographic box [-2, 2]^3."""
    from linecast.camera.camera import Camera

    return Camera().ortho(2.0, 2.0, -2.0, 2.0).frustum


class TestPlanes:
    """Tests for plane extraction."""

    def test_identity_clip_matrix_planes(self):
        """Test plane order and orientation for the NDC cube."""
        from linecast.camera.frustum import Frustum, FrustumPlane

        frustum = Frustum.from_clip_matrix(np.eye(4))

        np.testing.assert_allclose(frustum.plane(FrustumPlane.LEFT), [1.0, 0.0, 0.0, 1.0])
        np.testing.assert_allclose(frustum.plane(FrustumPlane.RIGHT), [-1.0, 0.0, 0.0, 1.0])
        np.testing.assert_allclose(frustum.plane(FrustumPlane.BOTTOM), [0.0, 1.0, 0.0, 1.0])
        np.testing.assert_allclose(frustum.plane(FrustumPlane.TOP), [0.0, -1.0, 0.0, 1.0])
        np.testing.assert_allclose(frustum.plane(FrustumPlane.NEAR), [0.0, 0.0, 1.0, 1.0])
        np.testing.assert_allclose(frustum.plane(FrustumPlane.FAR), [0.0, 0.0, -1.0, 1.0])

    def test_normals_are_unit_length(self):
        """Test that extracted planes are normalized."""
        norms = np.linalg.norm(_box_frustum().planes[:, :3], axis=1)

        np.testing.assert_allclose(norms, np.ones(6))

    def test_planes_are_read_only(self):
        """Test that the plane array cannot be modified."""
        frustum = _box_frustum()

        with pytest.raises(ValueError):
            frustum.planes[0, 0] = 0.0

    def test_wrong_plane_shape_raises(self):
        """Test that a frustum needs exactly six planes."""
        from linecast.camera.frustum import Frustum

        with pytest.raises(ValueError):
            Frustum(np.zeros((5, 4)))


class TestContainment:
    """Tests for point containment."""

    def test_inside_outside_boundary(self):
        """Test strict containment with boundary points counted as inside."""
        frustum = _box_frustum()

        assert frustum.is_point_in((0.0, 0.0, 0.0))
        assert frustum.is_point_in((2.0, 2.0, 2.0))
        assert not frustum.is_point_in((2.5, 0.0, 0.0))
        assert not frustum.is_point_in((0.0, 0.0, -3.0))

    def test_tolerance(self):
        """Test that points just outside count as on the frustum."""
        frustum = _box_frustum()

        assert not frustum.is_point_in((2.000001, 0.0, 0.0))
        assert frustum.is_point_in_or_on((2.000001, 0.0, 0.0))
        assert not frustum.is_point_in_or_on((2.001, 0.0, 0.0))

    def test_signed_distances(self):
        """Test per-plane signed distances."""
        distances = _box_frustum().signed_distances((1.0, 0.0, 0.0))

        np.testing.assert_allclose(distances, [3.0, 1.0, 2.0, 2.0, 2.0, 2.0])


class TestPlaneSegmentIntersection:
    """Tests for the plane/segment intersection parameter."""

    def test_crossing(self):
        """Test the parameter where a segment crosses a plane."""
        from linecast.camera.frustum import plane_segment_intersection

        plane = np.array([1.0, 0.0, 0.0, 1.0])
        t = plane_segment_intersection(plane, np.array([-5.0, 0.0, 0.0]), np.array([5.0, 0.0, 0.0]))

        assert t == pytest.approx(0.4)

    def test_parameter_is_not_range_limited(self):
        """Test that crossings outside [0, 1] are still reported."""
        from linecast.camera.frustum import plane_segment_intersection

        plane = np.array([1.0, 0.0, 0.0, 1.0])
        t = plane_segment_intersection(plane, np.array([1.0, 0.0, 0.0]), np.array([2.0, 0.0, 0.0]))

        assert t == pytest.approx(-2.0)

    def test_parallel_segment(self):
        """Test that a segment parallel to the plane has no crossing."""
        from linecast.camera.frustum import plane_segment_intersection

        plane = np.array([1.0, 0.0, 0.0, 1.0])
        t = plane_segment_intersection(plane, np.array([0.0, -5.0, 0.0]), np.array([0.0, 5.0, 0.0]))

        assert t is None

    def test_zero_length_segment(self):
        """Test that a degenerate segment has no crossing."""
        from linecast.camera.frustum import plane_segment_intersection

        plane = np.array([1.0, 0.0, 0.0, 1.0])
        p = np.array([-1.0, 0.0, 0.0])

        assert plane_segment_intersection(plane, p, p.copy()) is None


class TestClipLine:
    """Tests for segment classification and clipping."""

    def test_inside(self):
        """Test a segment with both endpoints inside."""
        from linecast.camera.frustum import ClipKind

        result = _box_frustum().clip_line((-1.0, 0.0, 0.0), (1.0, 0.0, 0.0))

        assert result.kind is ClipKind.INSIDE
        assert not result.is_partial
        np.testing.assert_allclose(result.start, [-1.0, 0.0, 0.0])
        np.testing.assert_allclose(result.end, [1.0, 0.0, 0.0])

    def test_outside(self):
        """Test a segment entirely outside."""
        from linecast.camera.frustum import ClipKind

        result = _box_frustum().clip_line((5.0, 0.0, 0.0), (6.0, 0.0, 0.0))

        assert result.kind is ClipKind.OUTSIDE
        assert result.start is None
        assert result.end is None

    def test_infix(self):
        """Test a segment passing through with both endpoints outside."""
        from linecast.camera.frustum import ClipKind

        result = _box_frustum().clip_line((-5.0, 0.0, 0.0), (5.0, 0.0, 0.0))

        assert result.kind is ClipKind.INFIX
        assert result.is_partial
        np.testing.assert_allclose(result.start, [-2.0, 0.0, 0.0])
        np.testing.assert_allclose(result.end, [2.0, 0.0, 0.0])

    def test_prefix(self):
        """Test a segment leaving the frustum."""
        from linecast.camera.frustum import ClipKind

        result = _box_frustum().clip_line((0.0, 0.0, 0.0), (5.0, 0.0, 0.0))

        assert result.kind is ClipKind.PREFIX
        np.testing.assert_allclose(result.start, [0.0, 0.0, 0.0])
        np.testing.assert_allclose(result.end, [2.0, 0.0, 0.0])

    def test_suffix(self):
        """Test a segment entering the frustum."""
        from linecast.camera.frustum import ClipKind

        result = _box_frustum().clip_line((5.0, 0.0, 0.0), (0.0, 0.0, 0.0))

        assert result.kind is ClipKind.SUFFIX
        np.testing.assert_allclose(result.start, [2.0, 0.0, 0.0])
        np.testing.assert_allclose(result.end, [0.0, 0.0, 0.0])

    def test_outside_beside_frustum(self):
        """Test a segment crossing plane extensions but not the frustum."""
        from linecast.camera.frustum import ClipKind

        result = _box_frustum().clip_line((-5.0, 3.0, 0.0), (5.0, 3.0, 0.0))

        assert result.kind is ClipKind.OUTSIDE

    def test_infix_through_corners(self):
        """Test that crossings shared by two planes are counted once."""
        from linecast.camera.frustum import ClipKind

        result = _box_frustum().clip_line((-3.0, -3.0, 0.0), (3.0, 3.0, 0.0))

        assert result.kind is ClipKind.INFIX
        np.testing.assert_allclose(result.start, [-2.0, -2.0, 0.0], atol=1e-9)
        np.testing.assert_allclose(result.end, [2.0, 2.0, 0.0], atol=1e-9)

    def test_touching_a_corner_is_outside(self):
        """Test that a segment grazing a single corner is not drawn."""
        from linecast.camera.frustum import ClipKind

        result = _box_frustum().clip_line((-4.0, 0.0, 0.0), (0.0, 4.0, 0.0))

        assert result.kind is ClipKind.OUTSIDE

    def test_more_than_two_crossings_raise(self, monkeypatch):
        """Test that impossible crossing counts are reported as errors."""
        from linecast.camera.frustum import ClipInvariantError, Frustum

        frustum = _box_frustum()
        # Accept every crossing so three distinct plane hits survive
        monkeypatch.setattr(Frustum, "is_point_in_or_on", lambda self, point, eps=0.0: True)

        with pytest.raises(ClipInvariantError, match="3 times"):
            frustum.clip_line((-5.0, -3.5, 0.0), (5.0, 0.5, 0.0))
