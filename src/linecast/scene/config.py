"""Scene configuration and serialization.

A ``SceneConfig`` lists the boxes and spheres of a scene as plain dicts, so
scenes can be stored as JSON and rebuilt with ``build_scene``.

Box entries:
    {"center": [x, y, z], "half_extents": [hx, hy, hz]}

Sphere entries (angles in degrees, optional):
    {"center": [x, y, z], "radius": r, "lat_angle": 22.5, "long_angle": 45.0}

Example:
    >>> from linecast.scene.config import SceneConfig, build_scene
    >>> config = SceneConfig(boxes=[{"center": [0, 0, 0], "half_extents": [0.5, 0.5, 0.5]}])
    >>> scene = build_scene(config)
    >>> len(scene)
    1
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from linecast.geometry.box import BoxOutline
from linecast.geometry.sphere import Sphere
from linecast.scene.scene import Scene, SceneBuilder


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        boxes: List of box configurations.
        spheres: List of sphere configurations.
    """

    boxes: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _vector(data: dict[str, Any], key: str, default: list[float]) -> tuple[float, float, float]:
    values = data.get(key, default)
    if len(values) != 3:
        raise ValueError(f"'{key}' must have three components, got {values}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _angle(data: dict[str, Any], key: str) -> float | None:
    value = data.get(key)
    return None if value is None else math.radians(value)


def build_scene(config: SceneConfig) -> Scene:
    """Build a scene from a configuration object.

    Raises:
        ValueError: If the configuration contains invalid data.
    """
    builder = SceneBuilder()

    for box_config in config.boxes:
        center = _vector(box_config, "center", [0.0, 0.0, 0.0])
        half_extents = _vector(box_config, "half_extents", [0.5, 0.5, 0.5])
        builder.add(BoxOutline(center, half_extents))

    for sphere_config in config.spheres:
        center = _vector(sphere_config, "center", [0.0, 0.0, 0.0])
        radius = sphere_config.get("radius", 1.0)
        builder.add(
            Sphere(
                center,
                radius,
                lat_angle=_angle(sphere_config, "lat_angle"),
                long_angle=_angle(sphere_config, "long_angle"),
            )
        )

    return builder.build()


def scene_to_config(scene: Scene) -> SceneConfig:
    """Export a scene of boxes and spheres to a configuration object.

    Raises:
        ValueError: If the scene holds a shape type with no configuration.
    """
    config = SceneConfig()
    for shape in scene.shapes:
        if isinstance(shape, BoxOutline):
            config.boxes.append(
                {
                    "center": shape.center.tolist(),
                    "half_extents": shape.half_extents.tolist(),
                }
            )
        elif isinstance(shape, Sphere):
            sphere_config: dict[str, Any] = {
                "center": shape.center.tolist(),
                "radius": shape.radius,
            }
            if shape.lat_angle is not None:
                sphere_config["lat_angle"] = math.degrees(shape.lat_angle)
            if shape.long_angle is not None:
                sphere_config["long_angle"] = math.degrees(shape.long_angle)
            config.spheres.append(sphere_config)
        else:
            raise ValueError(f"Cannot serialize shape: {shape!r}")
    return config


def scene_config_to_dict(config: SceneConfig) -> dict[str, Any]:
    """Export a configuration to a dictionary (for JSON serialization)."""
    return {
        "boxes": config.boxes,
        "spheres": config.spheres,
    }


def scene_config_from_dict(data: dict[str, Any]) -> SceneConfig:
    """Load a configuration from a dictionary.

    Args:
        data: Dictionary with 'boxes' and 'spheres' keys.

    Raises:
        ValueError: If the dictionary has keys other than 'boxes' and
            'spheres'.
    """
    unknown = set(data) - {"boxes", "spheres"}
    if unknown:
        raise ValueError(f"Unknown scene config keys: {sorted(unknown)}")
    return SceneConfig(
        boxes=list(data.get("boxes", [])),
        spheres=list(data.get("spheres", [])),
    )
