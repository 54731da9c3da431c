"""Geometry module for bounding boxes and line-art shapes.

Components:
    aabb: Axis-aligned bounding boxes (ray time of impact, plane tests)
    shape: The Shape protocol every renderable object satisfies
    box: Box drawn as its twelve edges
    sphere: Sphere drawn as latitude and longitude circles

Shape ray casts are Taichi functions (@ti.func) wrapped by float64 kernels.
A shape reports the time of impact of a ray, or None on a miss:
    t = shape.intersect(ray, max_toi)
"""

from .aabb import AABB, BoxPlaneTest, box_plane_test
from .box import BoxOutline, hit_box
from .shape import Shape
from .sphere import Ball, Sphere, hit_sphere

__all__ = [
    "AABB",
    "BoxPlaneTest",
    "box_plane_test",
    "Shape",
    "BoxOutline",
    "hit_box",
    "Sphere",
    "Ball",
    "hit_sphere",
]
