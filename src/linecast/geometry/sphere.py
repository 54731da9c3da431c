"""Sphere shape with latitude/longitude line paths.

The sphere's lines are circles on its surface: the equator and latitude
circles at multiples of ``lat_angle`` around the y-axis, and meridians every
``long_angle``. Ray casting uses the robust quadratic formula from Ray
Tracing Gems (Chapter 7) inside a Taichi function, so it avoids catastrophic
cancellation when b^2 is nearly equal to 4ac.

The ball used for ray casting is slightly smaller than the drawn sphere.
A line drawn exactly on the surface then never hides itself through
round-off, while the far side of the sphere is still hidden by the near side.

Example:
    >>> import math
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from linecast.core.ray import Ray
    >>> from linecast.geometry.sphere import Sphere
    >>> sphere = Sphere((0, 0, 0), 1.0, lat_angle=math.pi / 8)
    >>> round(sphere.intersect(Ray.through((0, 0, 5), (0, 0, 0)), 10.0), 6)
    4.01
"""

import math

import numpy as np
import taichi as ti
import taichi.math as tm

from linecast.core.path import Path
from linecast.core.ray import Ray, Vector3Like, as_vec3, batch_arrays, kernel_vector, vec3
from linecast.geometry.aabb import AABB

# Number of segments used for each latitude circle or meridian
CIRCLE_SEGMENTS = 100

# Ray casts use a ball of radius INTERSECT_SCALE * radius
INTERSECT_SCALE = 0.99


@ti.dataclass
class Ball:
    """A solid ball defined by center point and radius.

    Attributes:
        center: The center point of the ball (vec3).
        radius: The radius of the ball (positive float).
    """

    center: vec3
    radius: ti.f64


@ti.func
def _solve_quadratic_robust(h: ti.f64, a: ti.f64, c: ti.f64, sqrt_d: ti.f64):
    """Solve a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = ti.cast(0.0, ti.f64)
    t1 = ti.cast(0.0, ti.f64)

    if ti.abs(q) < 1e-10:
        # Fall back to the standard formula when q vanishes
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, ball: Ball, t_max: ti.f64) -> ti.f64:
    """Time of impact of a ray with a solid ball.

    The ray-ball intersection is found by solving:
        |ray_origin + t * ray_direction - center|^2 = radius^2

    A ray that starts inside the ball hits it immediately (t = 0).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        ball: The ball to test intersection against.
        t_max: Maximum time of impact to consider a valid hit.

    Returns:
        The time of impact in [0, t_max], or -1 if the ray misses.
    """
    oc = ray_origin - ball.center

    # Half-b formulation: a*t^2 + 2*h*t + c = 0
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - ball.radius * ball.radius

    result = ti.cast(-1.0, ti.f64)

    if c <= 0.0:
        result = ti.cast(0.0, ti.f64)
    else:
        discriminant = h * h - a * c
        if discriminant >= 0.0:
            t0, _ = _solve_quadratic_robust(h, a, c, ti.sqrt(discriminant))
            # Origin is outside, so both roots share a sign; t0 is the entry
            if t0 >= 0.0 and t0 <= t_max:
                result = t0

    return result


@ti.kernel
def _sphere_toi(
    origin: ti.types.ndarray(dtype=ti.f64, ndim=1),
    direction: ti.types.ndarray(dtype=ti.f64, ndim=1),
    center: ti.types.ndarray(dtype=ti.f64, ndim=1),
    radius: ti.f64,
    t_max: ti.f64,
) -> ti.f64:
    """Python-callable entry point for ``hit_sphere``."""
    ball = Ball(center=vec3(center[0], center[1], center[2]), radius=radius)
    return hit_sphere(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        ball,
        t_max,
    )


@ti.kernel
def _sphere_toi_batch(
    origins: ti.types.ndarray(dtype=ti.f64, ndim=2),
    directions: ti.types.ndarray(dtype=ti.f64, ndim=2),
    center: ti.types.ndarray(dtype=ti.f64, ndim=1),
    radius: ti.f64,
    t_max: ti.types.ndarray(dtype=ti.f64, ndim=1),
    out: ti.types.ndarray(dtype=ti.f64, ndim=1),
):
    """Cast one ray per row of ``origins``; misses are written as -1."""
    for i in range(origins.shape[0]):
        ball = Ball(center=vec3(center[0], center[1], center[2]), radius=radius)
        out[i] = hit_sphere(
            vec3(origins[i, 0], origins[i, 1], origins[i, 2]),
            vec3(directions[i, 0], directions[i, 1], directions[i, 2]),
            ball,
            t_max[i],
        )


class Sphere:
    """Sphere with latitude and longitude lines oriented around the y-axis.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the drawn lines.
        lat_angle: Angle spacing (radians) between latitude circles, or None
            to draw no latitude lines.
        long_angle: Angle spacing (radians) between meridians, or None to
            draw no meridians.
    """

    def __init__(
        self,
        center: Vector3Like,
        radius: float,
        lat_angle: float | None = None,
        long_angle: float | None = None,
    ) -> None:
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        for label, angle in (("lat_angle", lat_angle), ("long_angle", long_angle)):
            if angle is not None and angle <= 0.0:
                raise ValueError(f"{label} must be positive, got {angle}")

        self._center = as_vec3(center).copy()
        self._center.flags.writeable = False
        self._radius = float(radius)
        self._lat_angle = lat_angle
        self._long_angle = long_angle
        self._aabb = AABB.from_half_extents(self._center, (self._radius,) * 3)

    def __repr__(self) -> str:
        c = self._center
        return f"Sphere(center=({c[0]:g}, {c[1]:g}, {c[2]:g}), radius={self._radius:g})"

    @property
    def name(self) -> str:
        return "Sphere"

    @property
    def center(self) -> np.ndarray:
        return self._center

    @property
    def radius(self) -> float:
        return self._radius

    @property
    def lat_angle(self) -> float | None:
        return self._lat_angle

    @property
    def long_angle(self) -> float | None:
        return self._long_angle

    def intersect(self, ray: Ray, max_toi: float) -> float | None:
        t = _sphere_toi(
            kernel_vector(ray.origin),
            kernel_vector(ray.direction),
            kernel_vector(self._center),
            self._radius * INTERSECT_SCALE,
            float(max_toi),
        )
        return None if t < 0.0 else float(t)

    def intersect_many(
        self, origins: np.ndarray, directions: np.ndarray, max_tois: np.ndarray
    ) -> np.ndarray:
        """Ray cast many rays in one kernel launch.

        Returns:
            An (n,) array of times of impact, ``inf`` where a ray misses.
        """
        origins, directions, max_tois = batch_arrays(origins, directions, max_tois)
        out = np.empty(len(origins), dtype=np.float64)
        if len(out):
            _sphere_toi_batch(
                origins, directions, kernel_vector(self._center), self._radius * INTERSECT_SCALE, max_tois, out
            )
        return np.where(out < 0.0, np.inf, out)

    def latitude_path(self, angle: float) -> Path:
        """Return the closed circle at latitude ``angle`` (radians)."""
        theta = np.linspace(0.0, math.tau, CIRCLE_SEGMENTS + 1)
        radius_to_axis = math.cos(angle) * self._radius
        y = math.sin(angle) * self._radius
        offsets = np.stack(
            [radius_to_axis * np.sin(theta), np.full_like(theta, y), radius_to_axis * np.cos(theta)],
            axis=1,
        )
        return list(self._center + offsets)

    def longitude_path(self, angle: float) -> Path:
        """Return the pole-to-pole meridian at longitude ``angle`` (radians)."""
        phi = np.linspace(-math.pi / 2.0, math.pi / 2.0, CIRCLE_SEGMENTS // 2 + 1)
        ring = np.cos(phi) * self._radius
        offsets = np.stack(
            [ring * math.sin(angle), np.sin(phi) * self._radius, ring * math.cos(angle)],
            axis=1,
        )
        return list(self._center + offsets)

    def paths(self) -> list[Path]:
        paths: list[Path] = []
        if self._lat_angle is not None:
            paths.append(self.latitude_path(0.0))
            rising = self._lat_angle
            while rising < math.pi / 2.0:
                paths.append(self.latitude_path(rising))
                paths.append(self.latitude_path(-rising))
                rising += self._lat_angle
        if self._long_angle is not None:
            around = 0.0
            # Tolerance keeps a divisor of tau from drawing the first meridian twice
            while around < math.tau - 1e-9:
                paths.append(self.longitude_path(around))
                around += self._long_angle
        return paths

    def bounding_box(self) -> AABB:
        return self._aabb
