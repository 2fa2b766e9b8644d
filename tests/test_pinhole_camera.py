"""Unit tests for the pinhole camera.

Tests cover:
- Orthonormal basis construction
- Ray generation through the image plane
- Field of view and aspect ratio
- Immutability and with_changes
"""

import math

import pytest


def _camera(**overrides):
    from src.ribtrace.camera.pinhole import Camera
    from src.ribtrace.core.vector import Vec3

    params = {
        "position": Vec3(0.0, 0.0, 2.0),
        "target": Vec3(0.0, 0.0, -1.0),
        "vup": Vec3(0.0, 1.0, 0.0),
        "fov": 45.0,
        "aspect_ratio": 16.0 / 9.0,
    }
    params.update(overrides)
    return Camera(**params)


class TestCameraBasis:
    """Tests for the derived orthonormal basis."""

    def test_basis_vectors(self):
        """Test forward, right and up for a camera looking down -z."""
        from src.ribtrace.core.vector import Vec3

        camera = _camera()
        assert camera.forward == Vec3(0.0, 0.0, -1.0)
        assert camera.right == Vec3(1.0, 0.0, 0.0)
        assert camera.up == Vec3(0.0, 1.0, 0.0)

    def test_basis_is_orthonormal_for_oblique_view(self):
        """Test an arbitrary view direction."""
        from src.ribtrace.core.vector import Vec3

        camera = _camera(position=Vec3(3.0, 2.0, 1.0), target=Vec3(-1.0, 0.0, -4.0))
        for a, b in ((camera.forward, camera.right), (camera.right, camera.up), (camera.up, camera.forward)):
            assert abs(a.dot(b)) < 1e-12
        for v in (camera.forward, camera.right, camera.up):
            assert math.isclose(v.length(), 1.0, rel_tol=1e-12)

    def test_image_plane_spans(self):
        """Test that the plane spans 2 tan(fov / 2) vertically and aspect times that across."""
        camera = _camera(fov=90.0, aspect_ratio=2.0)
        assert math.isclose(camera.vertical.length(), 2.0)
        assert math.isclose(camera.horizontal.length(), 4.0)


class TestCameraRays:
    """Tests for get_ray."""

    def test_centre_ray_looks_at_target(self):
        """Test that (0.5, 0.5) points along the view direction."""
        camera = _camera()
        ray = camera.get_ray(0.5, 0.5)

        assert ray.origin == camera.position
        assert math.isclose(ray.direction.z, -1.0, rel_tol=1e-12)
        assert abs(ray.direction.x) < 1e-12
        assert abs(ray.direction.y) < 1e-12

    def test_corner_orientation(self):
        """Test that u grows to the right and v grows upward."""
        camera = _camera()
        lower_left = camera.get_ray(0.0, 0.0).direction
        upper_right = camera.get_ray(1.0, 1.0).direction

        assert lower_left.x < 0.0 and lower_left.y < 0.0
        assert upper_right.x > 0.0 and upper_right.y > 0.0

    def test_vertical_field_of_view(self):
        """Test the angle between the top and bottom edge rays."""
        camera = _camera(fov=60.0, aspect_ratio=1.0)
        top = camera.get_ray(0.5, 1.0).direction
        bottom = camera.get_ray(0.5, 0.0).direction
        angle = math.degrees(math.acos(top.dot(bottom)))
        assert math.isclose(angle, 60.0, rel_tol=1e-9)

    def test_rays_are_unit_length(self):
        """Test that generated directions are normalized."""
        camera = _camera()
        for u, v in ((0.0, 0.0), (0.25, 0.75), (1.0, 0.5)):
            assert math.isclose(camera.get_ray(u, v).direction.length(), 1.0, rel_tol=1e-12)


class TestCameraImmutability:
    """Tests for the frozen camera."""

    def test_fields_cannot_be_assigned(self):
        """Test that the camera is frozen."""
        from dataclasses import FrozenInstanceError

        camera = _camera()
        with pytest.raises(FrozenInstanceError):
            camera.fov = 90.0  # type: ignore[misc]

    def test_with_changes_recomputes_basis(self):
        """Test that a changed copy has a new image plane and the original is untouched."""
        camera = _camera()
        wide = camera.with_changes(fov=90.0)

        assert camera.fov == 45.0
        assert wide.fov == 90.0
        assert wide.vertical.length() > camera.vertical.length()
        assert wide.position == camera.position
