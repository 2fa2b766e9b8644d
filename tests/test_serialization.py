"""Unit tests for scene and camera serialization.

Tests cover:
- Round trips of every primitive type
- Reuse of the serialized NURBS mesh
- Errors for unknown tags and malformed payloads
"""

import json

import pytest


class TestPrimitiveSerialization:
    """Tests for per-primitive encoding."""

    def test_sphere_round_trip(self):
        """Test that a sphere survives encoding unchanged."""
        from src.ribtrace.core.color import Color
        from src.ribtrace.core.vector import Vec3
        from src.ribtrace.geometry.primitive import Material
        from src.ribtrace.geometry.sphere import Sphere
        from src.ribtrace.scene.serialization import deserialize_primitive, serialize_primitive

        sphere = Sphere(Vec3(1.0, 2.0, 3.0), 0.75, Material(Color(0.1, 0.2, 0.3), reflectivity=0.4))
        data = serialize_primitive(sphere)

        assert data["type"] == "sphere"
        assert deserialize_primitive(data) == sphere

    def test_triangle_round_trip(self):
        """Test that a triangle keeps its vertices and normal."""
        from src.ribtrace.core.vector import Vec3
        from src.ribtrace.geometry.triangle import Triangle
        from src.ribtrace.scene.serialization import deserialize_primitive, serialize_primitive

        tri = Triangle(Vec3(0.0, 0.0, 0.0), Vec3(1.0, 0.0, 0.0), Vec3(0.0, 1.0, 0.0))
        rebuilt = deserialize_primitive(serialize_primitive(tri))
        assert rebuilt == tri
        assert rebuilt.normal == tri.normal

    def test_plane_round_trip(self):
        """Test that an axis-aligned plane is rebuilt exactly."""
        from src.ribtrace.core.vector import Vec3
        from src.ribtrace.geometry.plane import Plane
        from src.ribtrace.scene.serialization import deserialize_primitive, serialize_primitive

        plane = Plane(Vec3(0.0, -0.5, 0.0), Vec3(0.0, 1.0, 0.0))
        assert deserialize_primitive(serialize_primitive(plane)) == plane

    def test_nurbs_mesh_is_reused(self, flat_patch, monkeypatch):
        """Test that the rebuilt surface takes the serialized mesh without tessellating."""
        from src.ribtrace.geometry.nurbs import NurbsSurface
        from src.ribtrace.scene.serialization import deserialize_primitive, serialize_primitive

        data = json.loads(json.dumps(serialize_primitive(flat_patch)))

        def fail(self):
            raise AssertionError("surface was tessellated again")

        monkeypatch.setattr(NurbsSurface, "tessellate", fail)
        rebuilt = deserialize_primitive(data)

        assert isinstance(rebuilt, NurbsSurface)
        assert rebuilt.mesh == flat_patch.mesh
        assert rebuilt.bounding_box == flat_patch.bounding_box
        assert rebuilt.strategy is flat_patch.strategy

    def test_payload_is_plain_data(self, flat_patch):
        """Test that payloads survive a JSON round trip unchanged."""
        from src.ribtrace.scene.serialization import serialize_primitive

        data = serialize_primitive(flat_patch)
        assert json.loads(json.dumps(data)) == data

    def test_unknown_type_rejected(self):
        """Test that an unknown tag raises SceneSerializationError."""
        from src.ribtrace.errors import SceneSerializationError
        from src.ribtrace.scene.serialization import deserialize_primitive

        with pytest.raises(SceneSerializationError, match="cone"):
            deserialize_primitive({"type": "cone"})

    def test_missing_field_rejected(self):
        """Test that a truncated payload raises SceneSerializationError."""
        from src.ribtrace.errors import SceneSerializationError
        from src.ribtrace.scene.serialization import deserialize_primitive

        with pytest.raises(SceneSerializationError):
            deserialize_primitive({"type": "sphere", "center": [0.0, 0.0, 0.0]})

    def test_unsupported_primitive_rejected(self):
        """Test that unknown primitive classes cannot be encoded."""
        from src.ribtrace.errors import SceneSerializationError
        from src.ribtrace.geometry.primitive import Material
        from src.ribtrace.scene.serialization import serialize_primitive

        class Blob:
            material = Material()

            def intersect(self, ray, t_min, t_max):
                return None

        with pytest.raises(SceneSerializationError):
            serialize_primitive(Blob())


class TestSceneSerialization:
    """Tests for whole-scene and camera encoding."""

    def test_default_scene_round_trip(self, default_scene):
        """Test that objects, lights and background survive in order."""
        from src.ribtrace.scene.serialization import deserialize_scene, serialize_scene

        scene, _ = default_scene
        rebuilt = deserialize_scene(serialize_scene(scene))

        assert rebuilt.objects == scene.objects
        assert rebuilt.lights == scene.lights
        assert rebuilt.background == scene.background

    def test_malformed_scene_rejected(self):
        """Test that a scene without lights is refused."""
        from src.ribtrace.errors import SceneSerializationError
        from src.ribtrace.scene.serialization import deserialize_scene

        with pytest.raises(SceneSerializationError):
            deserialize_scene({"objects": [], "background": [0.0, 0.0, 0.0]})

    def test_camera_round_trip(self, default_scene):
        """Test that the camera and its derived basis are rebuilt."""
        from src.ribtrace.scene.serialization import deserialize_camera, serialize_camera

        _, camera = default_scene
        rebuilt = deserialize_camera(serialize_camera(camera))

        assert rebuilt == camera
        assert rebuilt.lower_left == camera.lower_left
        assert rebuilt.get_ray(0.3, 0.7).direction == camera.get_ray(0.3, 0.7).direction

    def test_malformed_camera_rejected(self):
        """Test that a camera without a position is refused."""
        from src.ribtrace.errors import SceneSerializationError
        from src.ribtrace.scene.serialization import deserialize_camera

        with pytest.raises(SceneSerializationError):
            deserialize_camera({"target": [0.0, 0.0, -1.0]})
