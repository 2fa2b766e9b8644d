"""Unit tests for Vec3.

Tests cover:
- Arithmetic operators
- Dot and cross products
- Normalization, including the zero vector
- Reflection
"""

import math

import pytest


class TestVec3Arithmetic:
    """Tests for operators."""

    def test_add_and_subtract(self):
        """Test component-wise addition and subtraction."""
        from src.ribtrace.core.vector import Vec3

        a = Vec3(1.0, 2.0, 3.0)
        b = Vec3(4.0, 5.0, 6.0)
        assert a + b == Vec3(5.0, 7.0, 9.0)
        assert b - a == Vec3(3.0, 3.0, 3.0)

    def test_scale_both_sides(self):
        """Test that scalar multiplication works from either side."""
        from src.ribtrace.core.vector import Vec3

        v = Vec3(1.0, -2.0, 0.5)
        assert v * 2.0 == Vec3(2.0, -4.0, 1.0)
        assert 2.0 * v == Vec3(2.0, -4.0, 1.0)
        assert v / 2.0 == Vec3(0.5, -1.0, 0.25)

    def test_negate(self):
        """Test unary minus."""
        from src.ribtrace.core.vector import Vec3

        assert -Vec3(1.0, -2.0, 3.0) == Vec3(-1.0, 2.0, -3.0)

    def test_vectors_are_immutable(self):
        """Test that components cannot be reassigned."""
        from dataclasses import FrozenInstanceError

        from src.ribtrace.core.vector import Vec3

        v = Vec3(1.0, 2.0, 3.0)
        with pytest.raises(FrozenInstanceError):
            v.x = 5.0  # type: ignore[misc]

    def test_from_sequence_requires_three_values(self):
        """Test building from a sequence and rejecting short ones."""
        from src.ribtrace.core.vector import Vec3

        assert Vec3.from_sequence([1, 2, 3]) == Vec3(1.0, 2.0, 3.0)
        with pytest.raises(ValueError):
            Vec3.from_sequence([1.0, 2.0])


class TestVec3Products:
    """Tests for dot and cross products."""

    def test_dot(self):
        """Test dot product."""
        from src.ribtrace.core.vector import Vec3

        assert Vec3(1.0, 2.0, 3.0).dot(Vec3(4.0, -5.0, 6.0)) == 12.0

    def test_cross_is_right_handed(self):
        """Test that x cross y is z."""
        from src.ribtrace.core.vector import Vec3

        assert Vec3(1.0, 0.0, 0.0).cross(Vec3(0.0, 1.0, 0.0)) == Vec3(0.0, 0.0, 1.0)

    def test_cross_is_perpendicular(self):
        """Test that the cross product is perpendicular to both inputs."""
        from src.ribtrace.core.vector import Vec3

        a = Vec3(1.0, 2.0, 3.0)
        b = Vec3(-2.0, 0.5, 4.0)
        c = a.cross(b)
        assert abs(c.dot(a)) < 1e-12
        assert abs(c.dot(b)) < 1e-12


class TestVec3Normalization:
    """Tests for length and normalize."""

    def test_length(self):
        """Test Euclidean length."""
        from src.ribtrace.core.vector import Vec3

        assert Vec3(3.0, 4.0, 0.0).length() == 5.0
        assert Vec3(3.0, 4.0, 0.0).length_squared() == 25.0

    def test_normalize_gives_unit_length(self):
        """Test normalization of a non-zero vector."""
        from src.ribtrace.core.vector import Vec3

        n = Vec3(1.0, 2.0, -2.0).normalize()
        assert math.isclose(n.length(), 1.0, rel_tol=1e-12)
        assert math.isclose(n.x, 1.0 / 3.0, rel_tol=1e-12)

    def test_normalize_zero_vector_is_zero(self):
        """Test that normalizing the zero vector returns the zero vector."""
        from src.ribtrace.core.vector import Vec3

        assert Vec3(0.0, 0.0, 0.0).normalize() == Vec3(0.0, 0.0, 0.0)


class TestVec3Reflect:
    """Tests for reflection about a normal."""

    def test_reflect_off_floor(self):
        """Test that a downward ray bounces upward off a horizontal surface."""
        from src.ribtrace.core.vector import Vec3

        incoming = Vec3(1.0, -1.0, 0.0)
        assert incoming.reflect(Vec3(0.0, 1.0, 0.0)) == Vec3(1.0, 1.0, 0.0)

    def test_reflect_preserves_length(self):
        """Test that reflection about a unit normal preserves length."""
        from src.ribtrace.core.vector import Vec3

        v = Vec3(0.3, -0.4, 0.5)
        n = Vec3(1.0, 1.0, 0.0).normalize()
        assert math.isclose(v.reflect(n).length(), v.length(), rel_tol=1e-12)
