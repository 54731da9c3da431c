"""Ray data structure and vector utilities.

This module provides the Python-side Ray dataclass used by the spatial index
and occlusion queries, plus the Taichi vector type and helpers shared by the
primitive intersection kernels in ``linecast.geometry``.

Python-side vectors are float64 NumPy arrays of shape (3,). Kernel-side
vectors use ``vec3``, a float64 Taichi vector, so that occlusion decisions
made with a 1e-5 tolerance are not dominated by single-precision error.

Example:
    >>> import numpy as np
    >>> from linecast.core.ray import Ray
    >>> ray = Ray.through((0.0, 0.0, 5.0), (0.0, 0.0, 0.0))
    >>> ray.point_at(5.0)
    array([0., 0., 0.])
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti

# Type alias for 3D vectors inside Taichi kernels
vec3 = ti.types.vector(3, ti.f64)

# Anything convertible to a float64 3-vector
Vector3Like = Sequence[float] | npt.NDArray[np.float64]


def as_vec3(value: Vector3Like) -> npt.NDArray[np.float64]:
    """Convert a 3-sequence to a float64 NumPy vector.

    Raises:
        ValueError: If the value does not have exactly three components.
    """
    arr = np.asarray(value, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {arr.shape}")
    return arr


@dataclass(frozen=True)
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray. ``Ray.through`` produces unit
            directions, which makes time of impact equal to distance.
    """

    origin: npt.NDArray[np.float64]
    direction: npt.NDArray[np.float64]

    @classmethod
    def through(cls, origin: Vector3Like, target: Vector3Like) -> Ray:
        """Create a unit-direction ray from ``origin`` toward ``target``.

        Raises:
            ValueError: If origin and target coincide.
        """
        o = as_vec3(origin)
        d = as_vec3(target) - o
        norm = float(np.linalg.norm(d))
        if norm == 0.0:
            raise ValueError("Ray origin and target coincide")
        return cls(origin=o, direction=d / norm)

    def point_at(self, t: float) -> npt.NDArray[np.float64]:
        """Compute the point along the ray at parameter t."""
        return self.origin + t * self.direction


# =============================================================================
# Kernel-side helpers
# =============================================================================


def kernel_vector(value: Vector3Like) -> npt.NDArray[np.float64]:
    """Pack a vector as a contiguous float64 array for an ndarray kernel argument."""
    return np.ascontiguousarray(value, dtype=np.float64)


def batch_arrays(
    origins: npt.ArrayLike, directions: npt.ArrayLike, max_tois: npt.ArrayLike
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Pack a batch of rays as contiguous float64 kernel arguments.

    Returns:
        (n, 3) origins, (n, 3) directions and (n,) limits. A scalar limit is
        broadcast to every ray.
    """
    o = np.ascontiguousarray(origins, dtype=np.float64).reshape(-1, 3)
    d = np.ascontiguousarray(directions, dtype=np.float64).reshape(-1, 3)
    if o.shape != d.shape:
        raise ValueError(f"Got {len(o)} ray origins but {len(d)} directions")
    t = np.ascontiguousarray(np.broadcast_to(np.asarray(max_tois, dtype=np.float64), (len(o),)))
    return o, d, t
