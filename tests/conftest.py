"""Pytest configuration for ribtrace tests.

This module provides shared fixtures for all test modules: the reference
and default scenes, small render settings, and a non-interactive
Matplotlib backend so preview code never opens a window.
"""

import matplotlib
import pytest

matplotlib.use("Agg")


@pytest.fixture
def reference_scene():
    """Single red sphere scene with its square camera."""
    from src.ribtrace.scene.default_scene import create_reference_scene

    return create_reference_scene()


@pytest.fixture
def default_scene():
    """Built-in demonstration scene with its 16:9 camera."""
    from src.ribtrace.scene.default_scene import create_default_scene

    return create_default_scene()


@pytest.fixture
def reference_settings():
    """Settings of the pinned 10x10 reference render."""
    from src.ribtrace.core.settings import RenderSettings

    return RenderSettings(width=10, height=10, samples=1, seed=42, threads=1)


@pytest.fixture
def small_settings():
    """Small 16x9 render that is quick enough for multi-process tests."""
    from src.ribtrace.core.settings import RenderSettings

    return RenderSettings(width=16, height=9, samples=1, seed=12345, threads=1)


@pytest.fixture
def flat_patch():
    """Bilinear NURBS patch spanning [-1, 1] x [-1, 1] in the z = -2 plane."""
    from src.ribtrace.core.vector import Vec3
    from src.ribtrace.geometry.nurbs import NurbsSurface

    control_points = [
        [Vec3(-1.0, -1.0, -2.0), Vec3(-1.0, 1.0, -2.0)],
        [Vec3(1.0, -1.0, -2.0), Vec3(1.0, 1.0, -2.0)],
    ]
    weights = [[1.0, 1.0], [1.0, 1.0]]
    return NurbsSurface(control_points, weights, [0, 0, 1, 1], [0, 0, 1, 1], 1, 1)
