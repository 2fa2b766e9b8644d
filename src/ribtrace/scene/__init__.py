"""Scene module for scene description and loading.

Components:
    scene: Scene container holding primitives, lights and background
    serialization: Plain-data copies of scenes and cameras for workers
    default_scene: Built-in demonstration and reference scenes
    rib_parser: RenderMan Interface Bytestream scene parser
"""

from .default_scene import create_default_camera, create_default_scene, create_reference_scene
from .rib_parser import RibParser
from .scene import Light, Scene
from .serialization import (
    deserialize_camera,
    deserialize_scene,
    serialize_camera,
    serialize_scene,
)

__all__ = [
    "Scene",
    "Light",
    "serialize_scene",
    "deserialize_scene",
    "serialize_camera",
    "deserialize_camera",
    "create_default_scene",
    "create_default_camera",
    "create_reference_scene",
    "RibParser",
]
