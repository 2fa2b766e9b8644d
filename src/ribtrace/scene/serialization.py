"""Plain-data (de)serialization of scenes and cameras.

Worker processes receive the scene as nested dicts, lists, floats and
strings only. The format is self-describing: every primitive carries a
``type`` tag. NURBS surfaces carry their control grid together with the
bounding box and the full tessellated mesh, and the rebuilt surface reuses
that mesh verbatim instead of tessellating again, so every process
intersects exactly the same triangles.

Example:
    >>> from src.ribtrace.scene.default_scene import create_default_scene
    >>> from src.ribtrace.scene.serialization import deserialize_scene, serialize_scene
    >>> scene, camera = create_default_scene()
    >>> data = serialize_scene(scene)
    >>> [obj["type"] for obj in data["objects"]]
    ['sphere', 'sphere', 'sphere', 'sphere', 'plane']
    >>> len(deserialize_scene(data).objects)
    5
"""

from __future__ import annotations

from typing import Any

from src.ribtrace.camera.pinhole import Camera
from src.ribtrace.core.color import Color
from src.ribtrace.core.vector import Vec3
from src.ribtrace.errors import SceneSerializationError
from src.ribtrace.geometry.aabb import AABB
from src.ribtrace.geometry.nurbs import NurbsSurface
from src.ribtrace.geometry.plane import Plane
from src.ribtrace.geometry.primitive import Material, Primitive
from src.ribtrace.geometry.sphere import Sphere
from src.ribtrace.geometry.triangle import Triangle
from src.ribtrace.scene.scene import Light, Scene

# Type alias for serialized payloads
Payload = dict[str, Any]


# =============================================================================
# Value helpers
# =============================================================================


def _vec(v: Vec3) -> list[float]:
    return [v.x, v.y, v.z]


def _to_vec(data: Any) -> Vec3:
    return Vec3.from_sequence(data)


def _color(c: Color) -> list[float]:
    return [c.r, c.g, c.b]


def serialize_material(material: Material) -> Payload:
    return {
        "color": _color(material.color),
        "ambient": material.ambient,
        "diffuse": material.diffuse,
        "specular": material.specular,
        "shininess": material.shininess,
        "reflectivity": material.reflectivity,
    }


def deserialize_material(data: Payload) -> Material:
    return Material(
        color=Color.from_sequence(data["color"]),
        ambient=float(data["ambient"]),
        diffuse=float(data["diffuse"]),
        specular=float(data["specular"]),
        shininess=float(data["shininess"]),
        reflectivity=float(data["reflectivity"]),
    )


# =============================================================================
# Primitives
# =============================================================================


def serialize_primitive(primitive: Primitive) -> Payload:
    """Convert one primitive to a tagged dict.

    Raises:
        SceneSerializationError: If the primitive type is not supported.
    """
    material = serialize_material(primitive.material)

    if isinstance(primitive, Sphere):
        return {
            "type": "sphere",
            "center": _vec(primitive.center),
            "radius": primitive.radius,
            "material": material,
        }
    if isinstance(primitive, Plane):
        return {
            "type": "plane",
            "point": _vec(primitive.point),
            "normal": _vec(primitive.normal),
            "material": material,
        }
    if isinstance(primitive, Triangle):
        return {
            "type": "triangle",
            "v0": _vec(primitive.v0),
            "v1": _vec(primitive.v1),
            "v2": _vec(primitive.v2),
            "material": material,
        }
    if isinstance(primitive, NurbsSurface):
        box = primitive.bounding_box
        return {
            "type": "nurbs",
            "control_points": [[_vec(p) for p in row] for row in primitive.control_points],
            "weights": [list(row) for row in primitive.weights],
            "u_knots": list(primitive.u_knots),
            "v_knots": list(primitive.v_knots),
            "u_degree": primitive.u_degree,
            "v_degree": primitive.v_degree,
            "strategy": primitive.strategy.value,
            "bounding_box": {"min": _vec(box.minimum), "max": _vec(box.maximum)},
            "mesh": [[_vec(tri.v0), _vec(tri.v1), _vec(tri.v2)] for tri in primitive.mesh],
            "material": material,
        }
    raise SceneSerializationError(f"Cannot serialize primitive of type {type(primitive).__name__}")


def _build_nurbs(data: Payload, material: Material) -> NurbsSurface:
    box = data["bounding_box"]
    mesh = [
        Triangle(_to_vec(v0), _to_vec(v1), _to_vec(v2), material) for v0, v1, v2 in data["mesh"]
    ]
    return NurbsSurface(
        control_points=[[_to_vec(p) for p in row] for row in data["control_points"]],
        weights=data["weights"],
        u_knots=data["u_knots"],
        v_knots=data["v_knots"],
        u_degree=data["u_degree"],
        v_degree=data["v_degree"],
        material=material,
        strategy=data["strategy"],
        bounding_box=AABB(_to_vec(box["min"]), _to_vec(box["max"])),
        mesh=mesh,
    )


def deserialize_primitive(data: Payload) -> Primitive:
    """Rebuild a primitive from a tagged dict.

    Raises:
        SceneSerializationError: If the type tag is unknown or the payload
            is malformed.
    """
    kind = data.get("type") if isinstance(data, dict) else None
    if kind not in ("sphere", "plane", "triangle", "nurbs"):
        raise SceneSerializationError(f"Unknown primitive type: {kind!r}")

    try:
        material = deserialize_material(data["material"])
        if kind == "sphere":
            return Sphere(_to_vec(data["center"]), float(data["radius"]), material)
        if kind == "plane":
            return Plane(_to_vec(data["point"]), _to_vec(data["normal"]), material)
        if kind == "triangle":
            return Triangle(
                _to_vec(data["v0"]), _to_vec(data["v1"]), _to_vec(data["v2"]), material
            )
        return _build_nurbs(data, material)
    except (KeyError, TypeError, ValueError) as exc:
        raise SceneSerializationError(f"Malformed {kind} payload: {exc}") from exc


# =============================================================================
# Scene and camera
# =============================================================================


def serialize_scene(scene: Scene) -> Payload:
    """Convert a scene to nested plain data."""
    return {
        "background": _color(scene.background),
        "objects": [serialize_primitive(obj) for obj in scene.objects],
        "lights": [
            {
                "position": _vec(light.position),
                "color": _color(light.color),
                "intensity": light.intensity,
            }
            for light in scene.lights
        ],
    }


def deserialize_scene(data: Payload) -> Scene:
    """Rebuild a scene, preserving object and light order.

    Raises:
        SceneSerializationError: If the payload is malformed.
    """
    try:
        objects = data["objects"]
        lights = [
            Light(
                position=_to_vec(light["position"]),
                color=Color.from_sequence(light["color"]),
                intensity=float(light["intensity"]),
            )
            for light in data["lights"]
        ]
        background = Color.from_sequence(data["background"])
    except (KeyError, TypeError, ValueError) as exc:
        raise SceneSerializationError(f"Malformed scene payload: {exc}") from exc

    return Scene(
        objects=[deserialize_primitive(obj) for obj in objects],
        lights=lights,
        background=background,
    )


def serialize_camera(camera: Camera) -> Payload:
    return {
        "position": _vec(camera.position),
        "target": _vec(camera.target),
        "vup": _vec(camera.vup),
        "fov": camera.fov,
        "aspect_ratio": camera.aspect_ratio,
    }


def deserialize_camera(data: Payload) -> Camera:
    """Rebuild a camera; the derived basis is recomputed.

    Raises:
        SceneSerializationError: If the payload is malformed.
    """
    try:
        return Camera(
            position=_to_vec(data["position"]),
            target=_to_vec(data["target"]),
            vup=_to_vec(data["vup"]),
            fov=float(data["fov"]),
            aspect_ratio=float(data["aspect_ratio"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise SceneSerializationError(f"Malformed camera payload: {exc}") from exc
