"""RenderMan Interface Bytestream (RIB) scene parser.

Reads the subset of RIB needed to describe scenes for this renderer:

- Transform stack: AttributeBegin/End, TransformBegin/End, Translate,
  Rotate (any axis), Scale, ConcatTransform, Identity. Translate moves
  along world axes; Rotate and Scale act in the local frame
- Appearance: Color and the "plastic", "metal" and "matte" Surface presets
- Geometry: Sphere, Polygon (fan triangulated) and NuPatch
- Lights: "pointlight" and "distantlight"
- Format and Projection are recorded on the parser

Statements may span several lines; a statement ends when its brackets
balance. Lines starting with ``#`` are comments.

Example:
    >>> from src.ribtrace.scene.rib_parser import RibParser
    >>> parser = RibParser()
    >>> scene = parser.parse_string('''
    ... WorldBegin
    ...   LightSource "pointlight" 1 "intensity" [0.8]
    ...   Translate 0 0 -3
    ...   Color [0.8 0.2 0.2]
    ...   Surface "plastic"
    ...   Sphere 1 -1 1 360
    ... WorldEnd
    ... ''')
    >>> len(scene.objects), len(scene.lights)
    (1, 1)
"""

from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import replace

from src.ribtrace.core.color import WHITE, Color
from src.ribtrace.core.transform import Matrix4
from src.ribtrace.core.vector import Vec3
from src.ribtrace.errors import NurbsConstructionError, RibParseError
from src.ribtrace.geometry.nurbs import NurbsSurface
from src.ribtrace.geometry.primitive import Material
from src.ribtrace.geometry.sphere import Sphere
from src.ribtrace.geometry.triangle import Triangle
from src.ribtrace.scene.scene import Light, Scene

logger = logging.getLogger(__name__)

# =============================================================================
# Parser Constants
# =============================================================================

DEFAULT_BACKGROUND = Color(0.1, 0.1, 0.2)
DEFAULT_COLOR = Color(0.5, 0.5, 0.5)
DISTANT_LIGHT_POSITION = Vec3(10.0, 10.0, 10.0)

# (ambient, diffuse, specular, shininess, reflectivity)
SURFACE_PRESETS: dict[str, tuple[float, float, float, float, float]] = {
    "plastic": (0.1, 0.7, 0.2, 32.0, 0.0),
    "metal": (0.05, 0.3, 0.9, 128.0, 0.8),
    "matte": (0.2, 0.8, 0.0, 1.0, 0.0),
}

# Structural commands with no effect on the scene
IGNORED_COMMANDS = frozenset(
    {"WorldBegin", "WorldEnd", "FrameBegin", "FrameEnd", "Display"}
)

_TOKEN_PATTERN = re.compile(r'"([^"]*)"|\[([^\]]*)\]|([^\s"\[\]]+)')


class Quoted(str):
    """A token that appeared in double quotes (a string or parameter name)."""


# A token is a bare word, a quoted string or the items of a bracketed array
Token = str | list[str]


# =============================================================================
# Lexing
# =============================================================================


def strip_comments(text: str) -> list[str]:
    """Return the non-blank lines of a document with comment lines removed."""
    lines = []
    for raw in text.splitlines():
        line = raw.strip()
        if line and not line.startswith("#"):
            lines.append(line)
    return lines


def join_statements(lines: list[str]) -> list[str]:
    """Join lines into statements whose square brackets balance."""
    statements: list[str] = []
    current: list[str] = []
    depth = 0
    for line in lines:
        current.append(line)
        depth += line.count("[") - line.count("]")
        if depth <= 0:
            statements.append(" ".join(current))
            current = []
            depth = 0
    if current:
        statements.append(" ".join(current))
    return statements


def tokenize(statement: str) -> list[Token]:
    """Split a statement into bare words, Quoted strings and array item lists.

    Example:
        >>> tokenize('Color [0.8 0.2 0.2]')
        ['Color', ['0.8', '0.2', '0.2']]
    """
    tokens: list[Token] = []
    for match in _TOKEN_PATTERN.finditer(statement):
        quoted, array, word = match.groups()
        if quoted is not None:
            tokens.append(Quoted(quoted))
        elif array is not None:
            tokens.append([item.strip('"') for item in array.split()])
        else:
            tokens.append(word)
    return tokens


def _floats(values: list[str], command: str) -> list[float]:
    try:
        return [float(v) for v in values]
    except ValueError as exc:
        raise RibParseError(f"{command}: invalid number ({exc})") from exc


def _int(value: Token, command: str) -> int:
    if isinstance(value, list):
        raise RibParseError(f"{command}: expected an integer, got an array")
    try:
        return int(value)
    except ValueError as exc:
        raise RibParseError(f"{command}: invalid integer {value!r}") from exc


def _flatten(args: list[Token]) -> list[str]:
    values: list[str] = []
    for arg in args:
        if isinstance(arg, list):
            values.extend(arg)
        else:
            values.append(arg)
    return values


def _parameters(args: list[Token]) -> dict[str, list[str]]:
    """Collect the ``"name" value`` pairs of a parameter list.

    Positional arguments before the first quoted name are skipped.
    """
    params: dict[str, list[str]] = {}
    i = 0
    while i < len(args):
        name = args[i]
        if isinstance(name, Quoted) and i + 1 < len(args):
            value = args[i + 1]
            params[str(name)] = value if isinstance(value, list) else [value]
            i += 2
        else:
            i += 1
    return params


# =============================================================================
# Parser
# =============================================================================


class RibParser:
    """Builds a Scene from RIB text.

    Attributes:
        scene: The scene being built.
        transform_stack: Current transformation matrices; the first entry
            is never popped.
        current_color: Color given to new primitives.
        current_material: Material template for new primitives.
        image_format: (width, height, pixel aspect) from a Format command.
        field_of_view: Field of view from a perspective Projection.
    """

    def __init__(self) -> None:
        self.scene = Scene(background=DEFAULT_BACKGROUND)
        self.transform_stack: list[Matrix4] = [Matrix4.identity()]
        self.current_color = DEFAULT_COLOR
        self.current_material = Material(color=DEFAULT_COLOR)
        self.image_format: tuple[int, int, float] | None = None
        self.field_of_view: float | None = None

        self._handlers = {
            "AttributeBegin": self._push,
            "AttributeEnd": self._pop,
            "TransformBegin": self._push,
            "TransformEnd": self._pop,
            "Identity": self._identity,
            "Translate": self._translate,
            "Rotate": self._rotate,
            "Scale": self._scale,
            "ConcatTransform": self._concat_transform,
            "Color": self._color,
            "Surface": self._surface,
            "Sphere": self._sphere,
            "Polygon": self._polygon,
            "NuPatch": self._nu_patch,
            "LightSource": self._light_source,
            "Format": self._format,
            "Projection": self._projection,
        }

    # =========================================================================
    # Entry points
    # =========================================================================

    def parse(self, path: str | os.PathLike[str]) -> Scene:
        """Parse a RIB file.

        Raises:
            OSError: If the file cannot be read.
            RibParseError: If the file is malformed.
        """
        with open(path, encoding="utf-8") as f:
            return self.parse_string(f.read())

    def parse_string(self, text: str) -> Scene:
        """Parse RIB text and return the scene built so far."""
        for statement in join_statements(strip_comments(text)):
            self.parse_statement(statement)
        return self.scene

    def parse_statement(self, statement: str) -> None:
        """Execute one statement."""
        tokens = tokenize(statement)
        if not tokens:
            return
        command, args = tokens[0], tokens[1:]
        if isinstance(command, list):
            raise RibParseError(f"Statement starts with an array: {statement!r}")
        if command in IGNORED_COMMANDS:
            return
        handler = self._handlers.get(command)
        if handler is None:
            logger.warning("Unknown RIB command: %s", command)
            return
        handler(args)

    # =========================================================================
    # Transform stack
    # =========================================================================

    @property
    def current_transform(self) -> Matrix4:
        return self.transform_stack[-1]

    def _set_transform(self, matrix: Matrix4) -> None:
        self.transform_stack[-1] = matrix

    def _push(self, args: list[Token]) -> None:
        self.transform_stack.append(self.current_transform)

    def _pop(self, args: list[Token]) -> None:
        if len(self.transform_stack) > 1:
            self.transform_stack.pop()

    def _identity(self, args: list[Token]) -> None:
        self._set_transform(Matrix4.identity())

    def _translate(self, args: list[Token]) -> None:
        x, y, z = self._numbers(args, 3, "Translate")
        self._set_transform(self.current_transform.translate(x, y, z))

    def _rotate(self, args: list[Token]) -> None:
        angle, x, y, z = self._numbers(args, 4, "Rotate")
        self._set_transform(self.current_transform.rotate(math.radians(angle), Vec3(x, y, z)))

    def _scale(self, args: list[Token]) -> None:
        sx, sy, sz = self._numbers(args, 3, "Scale")
        self._set_transform(self.current_transform.scale(sx, sy, sz))

    def _concat_transform(self, args: list[Token]) -> None:
        elements = self._numbers(args, 16, "ConcatTransform")
        self._set_transform(self.current_transform.multiply(Matrix4.from_elements(elements)))

    @staticmethod
    def _numbers(args: list[Token], count: int, command: str) -> list[float]:
        values = _floats(_flatten(args), command)
        if len(values) < count:
            raise RibParseError(f"{command}: expected {count} numbers, got {len(values)}")
        return values[:count]

    # =========================================================================
    # Appearance
    # =========================================================================

    def _color(self, args: list[Token]) -> None:
        r, g, b = self._numbers(args, 3, "Color")
        self.current_color = Color(r, g, b)
        self.current_material = replace(self.current_material, color=self.current_color)

    def _surface(self, args: list[Token]) -> None:
        if not args or isinstance(args[0], list):
            return
        preset = SURFACE_PRESETS.get(str(args[0]))
        if preset is None:
            logger.debug("Surface %r not supported, keeping current material", args[0])
            return
        ambient, diffuse, specular, shininess, reflectivity = preset
        self.current_material = Material(
            self.current_color, ambient, diffuse, specular, shininess, reflectivity
        )

    def _material(self) -> Material:
        return replace(self.current_material, color=self.current_color)

    # =========================================================================
    # Geometry
    # =========================================================================

    def _sphere(self, args: list[Token]) -> None:
        if not args:
            raise RibParseError("Sphere: missing radius")
        radius = _floats(_flatten(args[:1]), "Sphere")[0]
        center = self.current_transform.transform_point(Vec3())
        self.scene.add(Sphere(center, radius, self._material()))

    def _polygon(self, args: list[Token]) -> None:
        points = _parameters(args).get("P")
        if points is None:
            logger.warning("Polygon without \"P\" parameter skipped")
            return
        coords = _floats(points, "Polygon")
        transform = self.current_transform
        vertices = [
            transform.transform_point(Vec3(coords[i], coords[i + 1], coords[i + 2]))
            for i in range(0, len(coords) - 2, 3)
        ]
        if len(vertices) < 3:
            logger.warning("Polygon with %d vertices skipped", len(vertices))
            return
        material = self._material()
        for i in range(1, len(vertices) - 1):
            self.scene.add(Triangle(vertices[0], vertices[i], vertices[i + 1], material))

    def _nu_patch(self, args: list[Token]) -> None:
        """NuPatch nu uorder uknot umin umax nv vorder vknot vmin vmax "P"|"Pw" [...]."""
        if len(args) < 10:
            raise RibParseError(f"NuPatch: expected 10 positional arguments, got {len(args)}")

        nu = _int(args[0], "NuPatch")
        u_order = _int(args[1], "NuPatch")
        u_knots = _floats(_flatten(args[2:3]), "NuPatch")
        _floats(_flatten(args[3:5]), "NuPatch")
        nv = _int(args[5], "NuPatch")
        v_order = _int(args[6], "NuPatch")
        v_knots = _floats(_flatten(args[7:8]), "NuPatch")
        _floats(_flatten(args[8:10]), "NuPatch")

        params = _parameters(args[10:])
        if "Pw" in params:
            stride = 4
            data = _floats(params["Pw"], "NuPatch")
        elif "P" in params:
            stride = 3
            data = _floats(params["P"], "NuPatch")
        else:
            logger.warning("NuPatch without control points skipped")
            return

        expected = nu * nv * stride
        if nu < 1 or nv < 1 or len(data) < expected:
            logger.warning(
                "NuPatch control points insufficient: expected %d values, got %d",
                expected,
                len(data),
            )
            return

        transform = self.current_transform
        control_points: list[list[Vec3]] = []
        weights: list[list[float]] = []
        for i in range(nu):
            row_points = []
            row_weights = []
            for j in range(nv):
                k = (i * nv + j) * stride
                w = data[k + 3] if stride == 4 else 1.0
                if stride == 4 and w != 0.0:
                    point = Vec3(data[k] / w, data[k + 1] / w, data[k + 2] / w)
                else:
                    point = Vec3(data[k], data[k + 1], data[k + 2])
                row_points.append(transform.transform_point(point))
                row_weights.append(w)
            control_points.append(row_points)
            weights.append(row_weights)

        try:
            surface = NurbsSurface(
                control_points,
                weights,
                u_knots,
                v_knots,
                u_order - 1,
                v_order - 1,
                self._material(),
            )
        except NurbsConstructionError as exc:
            raise RibParseError(f"NuPatch: {exc}") from exc

        self.scene.add(surface)
        logger.info(
            "Added NURBS surface: %dx%d control points, degrees (%d, %d)",
            nu,
            nv,
            u_order - 1,
            v_order - 1,
        )

    # =========================================================================
    # Lights and options
    # =========================================================================

    def _light_source(self, args: list[Token]) -> None:
        if not args or isinstance(args[0], list):
            raise RibParseError("LightSource: missing shader name")
        kind = str(args[0])
        params = _parameters(args[1:])

        intensity = 1.0
        if "intensity" in params:
            intensity = _floats(params["intensity"], "LightSource")[0]
        color = WHITE
        if "lightcolor" in params:
            color = Color.from_sequence(_floats(params["lightcolor"], "LightSource"))

        if kind == "distantlight":
            position = DISTANT_LIGHT_POSITION
        elif kind == "pointlight":
            position = self.current_transform.transform_point(Vec3())
        else:
            logger.warning("Unsupported light source %r skipped", kind)
            return
        self.scene.add_light(Light(position, color, intensity))

    def _format(self, args: list[Token]) -> None:
        values = _floats(_flatten(args), "Format")
        if len(values) < 2:
            raise RibParseError(f"Format: expected width and height, got {len(values)} numbers")
        aspect = values[2] if len(values) > 2 else 1.0
        self.image_format = (int(values[0]), int(values[1]), aspect)

    def _projection(self, args: list[Token]) -> None:
        if not args or str(args[0]) != "perspective":
            return
        fov = _parameters(args[1:]).get("fov")
        if fov:
            self.field_of_view = _floats(fov, "Projection")[0]
