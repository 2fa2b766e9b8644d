"""Unit tests for the Plane primitive."""

import math


class TestPlane:
    """Tests for ray-plane intersection."""

    def test_normal_is_normalized(self):
        """Test that the stored normal has unit length."""
        from src.ribtrace.core.vector import Vec3
        from src.ribtrace.geometry.plane import Plane

        plane = Plane(point=Vec3(0.0, 0.0, 0.0), normal=Vec3(0.0, 2.0, 0.0))
        assert plane.normal == Vec3(0.0, 1.0, 0.0)

    def test_hit_from_above(self):
        """Test a downward ray against the default floor."""
        from src.ribtrace.core.ray import Ray
        from src.ribtrace.core.vector import Vec3
        from src.ribtrace.geometry.plane import Plane

        floor = Plane(point=Vec3(0.0, -0.5, 0.0), normal=Vec3(0.0, 1.0, 0.0))
        hit = floor.intersect(Ray(Vec3(0.0, 1.0, 0.0), Vec3(0.0, -1.0, 0.0)), 0.001, 100.0)

        assert hit is not None
        assert hit.t == 1.5
        assert hit.normal == Vec3(0.0, 1.0, 0.0)
        assert hit.front_face

    def test_hit_from_below_flips_normal(self):
        """Test that the normal faces a ray arriving from the back side."""
        from src.ribtrace.core.ray import Ray
        from src.ribtrace.core.vector import Vec3
        from src.ribtrace.geometry.plane import Plane

        floor = Plane(point=Vec3(0.0, -0.5, 0.0), normal=Vec3(0.0, 1.0, 0.0))
        hit = floor.intersect(Ray(Vec3(0.0, -2.0, 0.0), Vec3(0.0, 1.0, 0.0)), 0.001, 100.0)

        assert hit is not None
        assert hit.t == 1.5
        assert hit.normal == Vec3(0.0, -1.0, 0.0)
        assert not hit.front_face

    def test_parallel_ray_misses(self):
        """Test that rays parallel to the plane never hit."""
        from src.ribtrace.core.ray import Ray
        from src.ribtrace.core.vector import Vec3
        from src.ribtrace.geometry.plane import Plane

        floor = Plane(point=Vec3(0.0, -0.5, 0.0), normal=Vec3(0.0, 1.0, 0.0))
        assert floor.intersect(Ray(Vec3(0.0, 1.0, 0.0), Vec3(1.0, 0.0, 0.0)), 0.001, 100.0) is None

    def test_plane_behind_ray_misses(self):
        """Test that a negative t is rejected."""
        from src.ribtrace.core.ray import Ray
        from src.ribtrace.core.vector import Vec3
        from src.ribtrace.geometry.plane import Plane

        floor = Plane(point=Vec3(0.0, -0.5, 0.0), normal=Vec3(0.0, 1.0, 0.0))
        assert floor.intersect(Ray(Vec3(0.0, 1.0, 0.0), Vec3(0.0, 1.0, 0.0)), 0.001, 100.0) is None

    def test_oblique_hit_distance(self):
        """Test that t is measured along the unit direction."""
        from src.ribtrace.core.ray import Ray
        from src.ribtrace.core.vector import Vec3
        from src.ribtrace.geometry.plane import Plane

        floor = Plane(point=Vec3(0.0, 0.0, 0.0), normal=Vec3(0.0, 1.0, 0.0))
        hit = floor.intersect(Ray(Vec3(0.0, 1.0, 0.0), Vec3(1.0, -1.0, 0.0)), 0.001, 100.0)
        assert math.isclose(hit.t, math.sqrt(2.0))
        assert abs(hit.point.y) < 1e-12
