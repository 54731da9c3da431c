"""Declarative camera configuration.

``CameraConfig`` holds the parameters of a look-at camera and its projection
as plain values, so a camera can be described in a dict (or JSON document)
and rebuilt later.

Example:
    >>> from linecast.camera.config import CameraConfig
    >>> config = CameraConfig(eye=(3.0, 2.0, 4.0), vfov=60.0)
    >>> camera = config.to_camera()
    >>> CameraConfig.from_dict(config.to_dict()) == config
    True
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Literal

from linecast.camera.camera import DEFAULT_RESOLUTION, Camera

ProjectionType = Literal["perspective", "orthographic"]

_PROJECTIONS = ("perspective", "orthographic")


@dataclass
class CameraConfig:
    """Configuration for a camera.

    Attributes:
        eye: Camera position in world space (x, y, z).
        target: Point the camera is looking at (x, y, z).
        up: Up direction vector for camera orientation.
        projection: "perspective" or "orthographic".
        vfov: Vertical field of view in degrees (perspective only).
        aspect: Width divided by height of the view (perspective only).
        half_width: Half the view width (orthographic only).
        half_height: Half the view height (orthographic only).
        near: Near plane distance.
        far: Far plane distance.
        resolution: Maximum NDC distance between adjacent samples.
    """

    eye: tuple[float, float, float] = (0.0, 0.0, 5.0)
    target: tuple[float, float, float] = (0.0, 0.0, 0.0)
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    projection: ProjectionType = "perspective"
    vfov: float = 90.0
    aspect: float = 1.0
    half_width: float = 1.0
    half_height: float = 1.0
    near: float = 0.1
    far: float = 100.0
    resolution: float = DEFAULT_RESOLUTION

    def to_camera(self) -> Camera:
        """Build the camera described by this configuration.

        Raises:
            ValueError: If the projection type is unknown or any parameter
                is out of range.
        """
        camera = Camera(resolution=self.resolution).look_at(self.eye, self.target, self.up)
        if self.projection == "perspective":
            return camera.perspective(math.radians(self.vfov), self.aspect, self.near, self.far)
        if self.projection == "orthographic":
            return camera.ortho(self.half_width, self.half_height, self.near, self.far)
        raise ValueError(f"Unknown projection type: {self.projection}")

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration to a dictionary (for JSON serialization)."""
        data = asdict(self)
        for key in ("eye", "target", "up"):
            data[key] = list(data[key])
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CameraConfig:
        """Load a configuration from a dictionary.

        Missing keys take their default values.

        Raises:
            ValueError: If the dictionary has unknown keys, a vector that
                is not three numbers, or an unknown projection type.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown camera config keys: {sorted(unknown)}")

        projection = data.get("projection", "perspective")
        if projection not in _PROJECTIONS:
            raise ValueError(f"Unknown projection type: {projection}")

        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key in ("eye", "target", "up"):
                if len(value) != 3:
                    raise ValueError(f"Camera {key} must have three components, got {value}")
                kwargs[key] = (float(value[0]), float(value[1]), float(value[2]))
            elif key == "projection":
                kwargs[key] = value
            else:
                kwargs[key] = float(value)
        return cls(**kwargs)
