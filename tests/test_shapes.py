"""Unit tests for the box and sphere shapes.

Tests cover:
- Taichi ray casts (hits, misses, max_toi, origin inside)
- Generated paths (edge count, latitude circles, meridians)
- Bounding boxes, names and parameter validation
- Conformance to the Shape protocol
- Batched ray casts through the kernel entry points
"""

import math

import numpy as np
import pytest


class TestBoxOutline:
    """Tests for the box outline shape."""

    def test_ray_hits_front_face(self):
        """Test that a ray toward the box hits its near face."""
        from linecast.core.ray import Ray
        from linecast.geometry.box import BoxOutline

        box = BoxOutline((0.0, 0.0, 0.0), (0.5, 0.5, 0.5))
        t = box.intersect(Ray.through((0.0, 0.0, 5.0), (0.0, 0.0, 0.0)), 10.0)

        assert t == pytest.approx(4.5)

    def test_ray_misses(self):
        """Test rays beside, away from and short of the box."""
        from linecast.core.ray import Ray
        from linecast.geometry.box import BoxOutline

        box = BoxOutline((0.0, 0.0, 0.0), (0.5, 0.5, 0.5))

        assert box.intersect(Ray.through((2.0, 0.0, 5.0), (2.0, 0.0, 0.0)), 10.0) is None
        assert box.intersect(Ray.through((0.0, 0.0, 5.0), (0.0, 0.0, 6.0)), 10.0) is None
        assert box.intersect(Ray.through((0.0, 0.0, 5.0), (0.0, 0.0, 0.0)), 4.0) is None

    def test_origin_inside_is_immediate_hit(self):
        """Test that the box is solid."""
        from linecast.core.ray import Ray
        from linecast.geometry.box import BoxOutline

        box = BoxOutline((0.0, 0.0, 0.0), (0.5, 0.5, 0.5))
        t = box.intersect(Ray.through((0.1, 0.0, 0.0), (1.0, 1.0, 1.0)), 10.0)

        assert t == 0.0

    def test_oblique_hit_matches_bounding_box(self):
        """Test that the kernel agrees with the Python slab test."""
        from linecast.core.ray import Ray
        from linecast.geometry.box import BoxOutline

        box = BoxOutline((1.0, -0.5, 0.25), (0.5, 1.0, 0.75))
        ray = Ray.through((4.0, 3.0, 5.0), (1.2, -0.3, 0.1))

        expected = box.bounding_box().toi_with_ray(ray, 100.0)
        assert expected is not None
        assert box.intersect(ray, 100.0) == pytest.approx(expected)

    def test_twelve_unit_edges(self):
        """Test that a unit cube has twelve edges of length one."""
        from linecast.geometry.box import BoxOutline

        paths = BoxOutline((0.0, 0.0, 0.0), (0.5, 0.5, 0.5)).paths()

        assert len(paths) == 12
        for path in paths:
            assert len(path) == 2
            assert np.linalg.norm(path[1] - path[0]) == pytest.approx(1.0)

    def test_edges_use_every_corner_three_times(self):
        """Test that each corner is shared by exactly three edges."""
        from linecast.geometry.box import BoxOutline

        box = BoxOutline((0.0, 0.0, 0.0), (1.0, 2.0, 3.0))
        corners = [tuple(c) for c in box.corners()]
        counts = {corner: 0 for corner in corners}
        for path in box.paths():
            for point in path:
                counts[tuple(point)] += 1

        assert len(counts) == 8
        assert set(counts.values()) == {3}

    def test_from_extents(self):
        """Test building a box from two opposite corners."""
        from linecast.geometry.box import BoxOutline

        box = BoxOutline.from_extents((1.0, 2.0, 3.0), (0.0, 0.0, 0.0))

        np.testing.assert_allclose(box.center, [0.5, 1.0, 1.5])
        np.testing.assert_allclose(box.half_extents, [0.5, 1.0, 1.5])

    def test_bounding_box_and_name(self):
        """Test the reported bounds and display name."""
        from linecast.geometry.box import BoxOutline

        box = BoxOutline((1.0, 2.0, 3.0), (0.5, 0.5, 0.5))

        np.testing.assert_allclose(box.bounding_box().mins, [0.5, 1.5, 2.5])
        np.testing.assert_allclose(box.bounding_box().maxs, [1.5, 2.5, 3.5])
        assert box.name == "Box (1, 2, 3)"

    def test_negative_size_raises(self):
        """Test that negative half extents are rejected."""
        from linecast.geometry.box import BoxOutline

        with pytest.raises(ValueError):
            BoxOutline((0.0, 0.0, 0.0), (0.5, -0.5, 0.5))


class TestSphere:
    """Tests for the latitude/longitude sphere."""

    def test_ray_hits_shrunken_ball(self):
        """Test that ray casts use the slightly smaller ball."""
        from linecast.core.ray import Ray
        from linecast.geometry.sphere import INTERSECT_SCALE, Sphere

        sphere = Sphere((0.0, 0.0, 0.0), 1.0)
        t = sphere.intersect(Ray.through((0.0, 0.0, 5.0), (0.0, 0.0, 0.0)), 10.0)

        assert t == pytest.approx(5.0 - INTERSECT_SCALE)

    def test_ray_misses(self):
        """Test rays beside and short of the sphere."""
        from linecast.core.ray import Ray
        from linecast.geometry.sphere import Sphere

        sphere = Sphere((0.0, 0.0, 0.0), 1.0)

        assert sphere.intersect(Ray.through((2.0, 0.0, 5.0), (2.0, 0.0, 0.0)), 10.0) is None
        assert sphere.intersect(Ray.through((0.0, 0.0, 5.0), (0.0, 0.0, 6.0)), 10.0) is None
        assert sphere.intersect(Ray.through((0.0, 0.0, 5.0), (0.0, 0.0, 0.0)), 3.0) is None

    def test_origin_inside_is_immediate_hit(self):
        """Test that the sphere is solid."""
        from linecast.core.ray import Ray
        from linecast.geometry.sphere import Sphere

        sphere = Sphere((0.0, 0.0, 0.0), 1.0)

        assert sphere.intersect(Ray.through((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)), 10.0) == 0.0

    def test_surface_point_is_not_hit_before_itself(self):
        """Test that a point on the drawn surface is reached before the ball."""
        from linecast.core.ray import Ray
        from linecast.geometry.sphere import Sphere

        sphere = Sphere((0.0, 0.0, 0.0), 1.0)
        ray = Ray.through((0.0, 0.0, 5.0), (0.0, 0.0, 0.0))

        # The surface point (0, 0, 1) is at t = 4
        assert sphere.intersect(ray, 10.0) > 4.0

    def test_latitude_paths(self):
        """Test the equator and latitude circles on both hemispheres."""
        from linecast.geometry.sphere import CIRCLE_SEGMENTS, Sphere

        sphere = Sphere((1.0, 2.0, 3.0), 2.0, lat_angle=math.pi / 4)
        paths = sphere.paths()

        assert len(paths) == 3
        heights = sorted(round(float(path[0][1]) - 2.0, 9) for path in paths)
        assert heights == pytest.approx([-math.sqrt(2.0), 0.0, math.sqrt(2.0)])
        for path in paths:
            assert len(path) == CIRCLE_SEGMENTS + 1
            np.testing.assert_allclose(path[0], path[-1], atol=1e-12)
            distances = [np.linalg.norm(p - sphere.center) for p in path]
            np.testing.assert_allclose(distances, 2.0)

    def test_longitude_paths(self):
        """Test meridians running from pole to pole."""
        from linecast.geometry.sphere import CIRCLE_SEGMENTS, Sphere

        sphere = Sphere((0.0, 0.0, 0.0), 1.0, long_angle=math.pi / 2)
        paths = sphere.paths()

        assert len(paths) == 4
        for path in paths:
            assert len(path) == CIRCLE_SEGMENTS // 2 + 1
            np.testing.assert_allclose(path[0], [0.0, -1.0, 0.0], atol=1e-12)
            np.testing.assert_allclose(path[-1], [0.0, 1.0, 0.0], atol=1e-12)

    def test_no_angles_no_paths(self):
        """Test that a sphere without line spacing draws nothing."""
        from linecast.geometry.sphere import Sphere

        assert Sphere((0.0, 0.0, 0.0), 1.0).paths() == []

    def test_bounding_box_and_name(self):
        """Test the reported bounds and display name."""
        from linecast.geometry.sphere import Sphere

        sphere = Sphere((1.0, 0.0, -1.0), 0.5)

        np.testing.assert_allclose(sphere.bounding_box().mins, [0.5, -0.5, -1.5])
        np.testing.assert_allclose(sphere.bounding_box().maxs, [1.5, 0.5, -0.5])
        assert sphere.name == "Sphere"

    @pytest.mark.parametrize(
        "radius,lat_angle,long_angle",
        [(0.0, None, None), (-1.0, None, None), (1.0, 0.0, None), (1.0, None, -0.5)],
    )
    def test_invalid_parameters_raise(self, radius, lat_angle, long_angle):
        """Test that sizes and line spacings must be positive."""
        from linecast.geometry.sphere import Sphere

        with pytest.raises(ValueError):
            Sphere((0.0, 0.0, 0.0), radius, lat_angle=lat_angle, long_angle=long_angle)


class TestShapeProtocol:
    """Tests for the Shape protocol."""

    def test_bundled_shapes_are_shapes(self):
        """Test that the bundled primitives satisfy the protocol."""
        from linecast.geometry.box import BoxOutline
        from linecast.geometry.shape import Shape
        from linecast.geometry.sphere import Sphere

        assert isinstance(BoxOutline((0.0, 0.0, 0.0), (1.0, 1.0, 1.0)), Shape)
        assert isinstance(Sphere((0.0, 0.0, 0.0), 1.0), Shape)

    def test_plain_object_is_not_a_shape(self):
        """Test that objects without the methods are rejected."""
        from linecast.geometry.shape import Shape

        assert not isinstance(object(), Shape)


class TestKernelEntryPoints:
    """Tests for the Taichi kernels behind the shape ray casts."""

    def test_kernel_modules_compile(self):
        """Test that the kernel annotations are real Taichi types."""
        import linecast.geometry.box as box
        import linecast.geometry.sphere as sphere

        for module in (box, sphere):
            assert "annotations" not in vars(module)

    def test_box_kernel(self):
        """Test the box kernel with float64 ndarray arguments."""
        from linecast.geometry.box import _box_toi

        t = _box_toi(
            np.array([0.0, 0.0, 5.0]),
            np.array([0.0, 0.0, -1.0]),
            np.array([-0.5, -0.5, -0.5]),
            np.array([0.5, 0.5, 0.5]),
            10.0,
        )

        assert t == pytest.approx(4.5)

    def test_sphere_kernel(self):
        """Test the sphere kernel with float64 ndarray arguments."""
        from linecast.geometry.sphere import _sphere_toi

        t = _sphere_toi(
            np.array([0.0, 0.0, 5.0]),
            np.array([0.0, 0.0, -1.0]),
            np.array([0.0, 0.0, 0.0]),
            1.0,
            10.0,
        )

        assert t == pytest.approx(4.0)
        assert _sphere_toi(
            np.array([3.0, 0.0, 5.0]),
            np.array([0.0, 0.0, -1.0]),
            np.array([0.0, 0.0, 0.0]),
            1.0,
            10.0,
        ) < 0.0

    @pytest.mark.parametrize("kind", ["box", "sphere"])
    def test_intersect_many_matches_intersect(self, kind):
        """Test that one batched launch agrees with per-ray casts."""
        from linecast.core.ray import Ray
        from linecast.geometry.box import BoxOutline
        from linecast.geometry.sphere import Sphere

        if kind == "box":
            shape = BoxOutline((0.0, 0.0, 0.0), (0.5, 1.0, 0.75))
        else:
            shape = Sphere((0.0, 0.0, 0.0), 1.0)
        rays = [
            Ray.through((0.0, 0.0, 5.0), (0.0, 0.0, 0.0)),
            Ray.through((0.3, 0.2, 5.0), (0.0, 0.0, 0.0)),
            Ray.through((4.0, 3.0, 5.0), (0.1, -0.2, 0.0)),
            Ray.through((3.0, 0.0, 5.0), (3.0, 0.0, 0.0)),
            Ray.through((0.0, 0.0, 0.0), (1.0, 1.0, 1.0)),
        ]

        tois = shape.intersect_many(
            np.array([r.origin for r in rays]), np.array([r.direction for r in rays]), 20.0
        )

        assert tois.shape == (len(rays),)
        for ray, toi in zip(rays, tois):
            expected = shape.intersect(ray, 20.0)
            if expected is None:
                assert toi == np.inf
            else:
                assert toi == pytest.approx(expected)

    def test_intersect_many_with_no_rays(self):
        """Test that an empty batch launches nothing."""
        from linecast.geometry.box import BoxOutline

        tois = BoxOutline((0.0, 0.0, 0.0), (0.5, 0.5, 0.5)).intersect_many(
            np.empty((0, 3)), np.empty((0, 3)), np.empty(0)
        )

        assert tois.shape == (0,)
