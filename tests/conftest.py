"""Pytest configuration for linecast tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import math

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Shape ray casts run as float64 kernels, so the default float type is
    f64. Using session scope prevents multiple ti.init() calls which can
    cause segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture
def head_on_camera():
    """Perspective camera on the +z axis looking at the origin."""
    from linecast.camera.camera import Camera

    return (
        Camera()
        .look_at((0.0, 0.0, 5.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        .perspective(math.pi / 2, 1.0, 1.0, 10.0)
        .set_resolution(0.01)
    )


@pytest.fixture
def three_quarter_camera():
    """Perspective camera seeing three faces of a box at the origin."""
    from linecast.camera.camera import Camera

    return (
        Camera()
        .look_at((3.0, 2.0, 4.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        .perspective(math.pi / 4, 1.0, 0.1, 20.0)
        .set_resolution(0.01)
    )


@pytest.fixture
def ortho_camera():
    """Orthographic camera with identity view and a half extent of 2."""
    from linecast.camera.camera import Camera

    return Camera().ortho(2.0, 2.0, -2.0, 2.0)
