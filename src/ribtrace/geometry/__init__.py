"""Geometry module for shape primitives.

Components:
    primitive: Materials, hit records and the Primitive protocol
    sphere: Sphere primitive with ray-sphere intersection
    plane: Infinite plane primitive
    triangle: Triangle primitive (Moller-Trumbore)
    aabb: Axis-Aligned Bounding Box utilities
    nurbs: NURBS surface evaluation, tessellation and intersection

Ray-object intersection follows the pattern:
    hit = primitive.intersect(ray, t_min, t_max)  # HitRecord or None
"""

from .aabb import AABB
from .nurbs import IntersectionStrategy, NurbsSurface, compute_basis_functions, find_knot_span
from .plane import Plane
from .primitive import HitRecord, Material, Primitive, make_hit
from .sphere import Sphere
from .triangle import Triangle

__all__ = [
    "Material",
    "HitRecord",
    "Primitive",
    "make_hit",
    "Sphere",
    "Plane",
    "Triangle",
    "AABB",
    "NurbsSurface",
    "IntersectionStrategy",
    "find_knot_span",
    "compute_basis_functions",
]
