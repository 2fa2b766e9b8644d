"""Unit tests for Matrix4.

Tests cover:
- Column-major layout (translation in elements 12-14)
- Point versus direction transforms
- Composition order: world-frame translate, local-frame rotate and scale
- Rotation about principal and arbitrary axes
"""

import math

import pytest


def _close(a, b, tol=1e-12):
    return abs(a.x - b.x) < tol and abs(a.y - b.y) < tol and abs(a.z - b.z) < tol


class TestMatrixLayout:
    """Tests for construction and storage."""

    def test_identity_leaves_points_unchanged(self):
        """Test identity transform."""
        from src.ribtrace.core.transform import Matrix4
        from src.ribtrace.core.vector import Vec3

        p = Vec3(1.5, -2.0, 3.25)
        assert Matrix4.identity().transform_point(p) == p

    def test_translation_is_column_major(self):
        """Test that translation lives in elements 12, 13 and 14."""
        from src.ribtrace.core.transform import Matrix4

        m = Matrix4.translation(1.0, 2.0, 3.0)
        assert m.m[12:15] == (1.0, 2.0, 3.0)

    def test_wrong_element_count_rejected(self):
        """Test that a matrix needs exactly 16 elements."""
        from src.ribtrace.core.transform import Matrix4

        with pytest.raises(ValueError):
            Matrix4([1.0] * 15)

    def test_operations_return_new_matrices(self):
        """Test that composing does not modify the original matrix."""
        from src.ribtrace.core.transform import Matrix4

        base = Matrix4.identity()
        moved = base.translate(1.0, 0.0, 0.0)
        assert base == Matrix4.identity()
        assert moved != base


class TestMatrixTransforms:
    """Tests for applying transforms."""

    def test_direction_ignores_translation(self):
        """Test that directions are not translated."""
        from src.ribtrace.core.transform import Matrix4
        from src.ribtrace.core.vector import Vec3

        m = Matrix4.translation(5.0, 5.0, 5.0)
        assert m.transform_direction(Vec3(0.0, 0.0, -1.0)) == Vec3(0.0, 0.0, -1.0)
        assert m.transform_point(Vec3(0.0, 0.0, -1.0)) == Vec3(5.0, 5.0, 4.0)

    def test_scale_after_translate_acts_first(self):
        """Test that scale post-multiplies and so acts before the translation."""
        from src.ribtrace.core.transform import Matrix4
        from src.ribtrace.core.vector import Vec3

        m = Matrix4.identity().translate(1.0, 0.0, 0.0).scale(2.0, 2.0, 2.0)
        assert m.transform_point(Vec3(1.0, 0.0, 0.0)) == Vec3(3.0, 0.0, 0.0)

    def test_translate_adds_to_translation_elements(self):
        """Test that translate adds onto elements 12-14 and leaves the basis alone."""
        from src.ribtrace.core.transform import Matrix4

        rotated = Matrix4.identity().rotate_y(0.7)
        moved = rotated.translate(1.0, 2.0, 3.0)
        assert moved.m[:12] == rotated.m[:12]
        assert moved.m[12:15] == (1.0, 2.0, 3.0)
        assert moved.translate(1.0, 0.0, 0.0).m[12:15] == (2.0, 2.0, 3.0)

    def test_translate_after_rotate_moves_in_world_axes(self):
        """Test that a rotation composed earlier does not turn a later translation."""
        from src.ribtrace.core.transform import Matrix4
        from src.ribtrace.core.vector import Vec3

        m = Matrix4.identity().rotate_y(math.pi / 2.0).translate(1.0, 0.0, 0.0)
        assert m.transform_point(Vec3(0.0, 0.0, 0.0)) == Vec3(1.0, 0.0, 0.0)
        assert _close(m.transform_point(Vec3(1.0, 0.0, 0.0)), Vec3(1.0, 0.0, -1.0))

    def test_scale_after_rotate_is_local(self):
        """Test that scale stretches the rotated frame's own axes."""
        from src.ribtrace.core.transform import Matrix4
        from src.ribtrace.core.vector import Vec3

        m = Matrix4.identity().rotate_z(math.pi / 2.0).scale(2.0, 1.0, 1.0)
        assert _close(m.transform_point(Vec3(1.0, 0.0, 0.0)), Vec3(0.0, 2.0, 0.0))
        assert _close(m.transform_point(Vec3(0.0, 1.0, 0.0)), Vec3(-1.0, 0.0, 0.0))

    def test_rotate_z_quarter_turn(self):
        """Test a right-handed 90 degree rotation about Z."""
        from src.ribtrace.core.transform import Matrix4
        from src.ribtrace.core.vector import Vec3

        m = Matrix4.identity().rotate_z(math.pi / 2.0)
        assert _close(m.transform_point(Vec3(1.0, 0.0, 0.0)), Vec3(0.0, 1.0, 0.0))

    def test_rotate_x_quarter_turn(self):
        """Test a right-handed 90 degree rotation about X."""
        from src.ribtrace.core.transform import Matrix4
        from src.ribtrace.core.vector import Vec3

        m = Matrix4.identity().rotate_x(math.pi / 2.0)
        assert _close(m.transform_point(Vec3(0.0, 1.0, 0.0)), Vec3(0.0, 0.0, 1.0))

    def test_rotate_arbitrary_axis(self):
        """Test that 120 degrees about (1, 1, 1) cycles the coordinate axes."""
        from src.ribtrace.core.transform import Matrix4
        from src.ribtrace.core.vector import Vec3

        m = Matrix4.identity().rotate(2.0 * math.pi / 3.0, Vec3(1.0, 1.0, 1.0))
        assert _close(m.transform_point(Vec3(1.0, 0.0, 0.0)), Vec3(0.0, 1.0, 0.0))
        assert _close(m.transform_point(Vec3(0.0, 1.0, 0.0)), Vec3(0.0, 0.0, 1.0))

    def test_rotate_about_zero_axis_is_identity(self):
        """Test that a zero axis gives no rotation."""
        from src.ribtrace.core.transform import Matrix4
        from src.ribtrace.core.vector import Vec3

        m = Matrix4.identity().rotate(1.0, Vec3(0.0, 0.0, 0.0))
        assert m == Matrix4.identity()

    def test_multiply_operator(self):
        """Test that @ composes like multiply."""
        from src.ribtrace.core.transform import Matrix4

        a = Matrix4.translation(1.0, 2.0, 3.0)
        b = Matrix4.scaling(2.0, 3.0, 4.0)
        assert a @ b == a.multiply(b)

    def test_copy_is_equal_and_independent(self):
        """Test that a copy compares equal but is a distinct object."""
        from src.ribtrace.core.transform import Matrix4

        m = Matrix4.translation(1.0, 2.0, 3.0).rotate_y(0.5)
        c = m.copy()
        assert c == m
        assert c is not m
