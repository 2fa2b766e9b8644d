"""Exception types raised by the renderer.

Numeric degeneracy (parallel rays, zero-length normals, vanishing weight
sums) is never reported through these classes; it is resolved locally with
epsilon thresholds. The exceptions below cover the failures that must stop
the caller: invalid scene construction, malformed scene files, broken
serialization payloads and failed render workers.
"""


class RibtraceError(Exception):
    """Base class for all renderer errors."""


class NurbsConstructionError(RibtraceError, ValueError):
    """A NURBS control grid, weight grid or knot vector is inconsistent."""


class SceneSerializationError(RibtraceError, ValueError):
    """A scene or camera payload cannot be encoded or decoded."""


class RibParseError(RibtraceError, ValueError):
    """A RIB scene description contains a malformed statement."""


class RenderError(RibtraceError, RuntimeError):
    """A render could not be completed.

    Raised by the tile scheduler when any worker reports a failure. The
    render is aborted as a whole; partial images are never returned.
    """
