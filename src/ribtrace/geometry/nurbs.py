"""NURBS surface primitive.

A NURBS (non-uniform rational B-spline) surface is defined by a rectangular
grid of weighted control points, a knot vector per parametric direction and
a polynomial degree per direction. A point on the surface is the rational
combination

    S(u, v) = sum_ij N_i,p(u) N_j,q(v) w_ij P_ij / sum_ij N_i,p(u) N_j,q(v) w_ij

where N_i,p are the B-spline basis functions given by the Cox-de Boor
recursion. Only the (p+1) x (q+1) basis functions that are non-zero on the
knot span containing (u, v) are evaluated.

Ray intersection has three strategies:

- Tessellation (default): the surface is sampled once, at construction, on
  a fixed 15 x 15 parameter grid and split into two triangles per grid cell.
  A ray is first tested against the bounding box of the control points and
  then against every triangle of the mesh; the nearest hit wins. The mesh
  never changes after construction, which keeps results identical wherever
  the surface is rebuilt.
- Newton-Raphson: refines (u, v, t) until the surface point and the ray
  point coincide, using finite-difference partial derivatives and a 3x3
  Jacobian solved by Cramer's rule.
- Sampling: takes the closest dense surface sample lying near the ray.

Example:
    >>> from src.ribtrace.core.vector import Vec3
    >>> from src.ribtrace.geometry.nurbs import NurbsSurface
    >>> patch = NurbsSurface(
    ...     control_points=[
    ...         [Vec3(0, 0, 0), Vec3(0, 1, 0)],
    ...         [Vec3(1, 0, 0), Vec3(1, 1, 0)],
    ...     ],
    ...     weights=[[1.0, 1.0], [1.0, 1.0]],
    ...     u_knots=[0.0, 0.0, 1.0, 1.0],
    ...     v_knots=[0.0, 0.0, 1.0, 1.0],
    ...     u_degree=1,
    ...     v_degree=1,
    ... )
    >>> patch.evaluate_point(0.5, 0.5)
    Vec3(x=0.5, y=0.5, z=0.0)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from enum import Enum
from functools import cached_property

from src.ribtrace.core.ray import Ray
from src.ribtrace.core.vector import UNIT_Y, Vec3
from src.ribtrace.errors import NurbsConstructionError
from src.ribtrace.geometry.aabb import AABB
from src.ribtrace.geometry.primitive import HitRecord, Material, make_hit
from src.ribtrace.geometry.triangle import Triangle

logger = logging.getLogger(__name__)

# =============================================================================
# Numerical Constants
# =============================================================================

# Samples per parametric direction for the tessellated mesh
TESSELLATION_RESOLUTION = 15

# Weight sums below this evaluate to the origin
WEIGHT_EPSILON = 1e-10

# Finite-difference step for partial derivatives
DERIVATIVE_EPSILON = 1e-6

# Cross products shorter than this fall back to UNIT_Y
NORMAL_EPSILON = 1e-10

# Newton-Raphson iteration limits
NEWTON_MAX_ITERATIONS = 20
NEWTON_TOLERANCE = 1e-6
NEWTON_DETERMINANT_EPSILON = 1e-12

# Samples per parametric direction for the sampling strategy
SAMPLING_RESOLUTION = 32


class IntersectionStrategy(str, Enum):
    """How a NURBS surface answers ray queries."""

    TESSELLATION = "tessellation"
    NEWTON = "newton"
    SAMPLING = "sampling"


# =============================================================================
# B-spline Basis Evaluation
# =============================================================================


def find_knot_span(n: int, degree: int, u: float, knots: Sequence[float]) -> int:
    """Find the knot span index containing parameter u.

    Binary search for i such that knots[i] <= u < knots[i + 1]. Parameters
    at or beyond the end of the domain map to the last non-empty span.

    Args:
        n: Index of the last control point (control point count - 1).
        degree: Polynomial degree.
        u: Parameter value, expected inside [knots[degree], knots[n + 1]].
        knots: Knot vector of length n + degree + 2.

    Returns:
        The span index, in [degree, n].
    """
    if u >= knots[n + 1]:
        # Walk back over repeated end knots to the last non-empty span
        span = n
        while span > degree and knots[span] >= knots[n + 1]:
            span -= 1
        return span
    if u <= knots[degree]:
        span = degree
        while span < n and knots[span + 1] <= u:
            span += 1
        return span

    low = degree
    high = n + 1
    mid = (low + high) // 2
    while u < knots[mid] or u >= knots[mid + 1]:
        if u < knots[mid]:
            high = mid
        else:
            low = mid
        mid = (low + high) // 2
    return mid


def compute_basis_functions(
    span: int, u: float, degree: int, knots: Sequence[float]
) -> list[float]:
    """Compute the non-vanishing B-spline basis functions at u.

    Evaluates the Cox-de Boor recursion bottom-up (triangular table), so
    each lower-degree value is computed once.

    Args:
        span: Knot span index from find_knot_span.
        u: Parameter value.
        degree: Polynomial degree.
        knots: Knot vector.

    Returns:
        The degree + 1 values N[span - degree .. span], which sum to 1.
    """
    basis = [0.0] * (degree + 1)
    left = [0.0] * (degree + 1)
    right = [0.0] * (degree + 1)
    basis[0] = 1.0

    for j in range(1, degree + 1):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = 0.0
        for r in range(j):
            denom = right[r + 1] + left[j - r]
            temp = basis[r] / denom if denom != 0.0 else 0.0
            basis[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        basis[j] = saved

    return basis


def _finite_difference(curve: Callable[[float], Vec3], x: float) -> Vec3:
    """Derivative of a parametric curve on [0, 1] at x."""
    eps = DERIVATIVE_EPSILON
    if x - eps >= 0.0 and x + eps <= 1.0:
        return (curve(x + eps) - curve(x - eps)) * (1.0 / (2.0 * eps))
    if x + eps <= 1.0:
        return (curve(x + eps) - curve(x)) * (1.0 / eps)
    return (curve(x) - curve(x - eps)) * (1.0 / eps)


# =============================================================================
# NURBS Surface
# =============================================================================


class NurbsSurface:
    """A rational B-spline surface.

    Attributes:
        control_points: Grid of control points indexed [u][v].
        weights: Grid of weights with the same shape.
        u_knots: Knot vector in the u direction.
        v_knots: Knot vector in the v direction.
        u_degree: Polynomial degree in u.
        v_degree: Polynomial degree in v.
        material: Surface material.
        strategy: Intersection strategy used by intersect().
        bounding_box: Box around all control points.
        mesh: Tessellated triangles, two per parameter-grid cell.
    """

    def __init__(
        self,
        control_points: Sequence[Sequence[Vec3]],
        weights: Sequence[Sequence[float]],
        u_knots: Sequence[float],
        v_knots: Sequence[float],
        u_degree: int,
        v_degree: int,
        material: Material | None = None,
        strategy: IntersectionStrategy | str = IntersectionStrategy.TESSELLATION,
        *,
        bounding_box: AABB | None = None,
        mesh: Sequence[Triangle] | None = None,
    ) -> None:
        """Create and tessellate a NURBS surface.

        Args:
            control_points: u_count rows of v_count control points.
            weights: Weights with the same shape as control_points.
            u_knots: Knot vector of length u_count + u_degree + 1.
            v_knots: Knot vector of length v_count + v_degree + 1.
            u_degree: Degree in u (>= 0, < u_count).
            v_degree: Degree in v (>= 0, < v_count).
            material: Surface material. Defaults to Material().
            strategy: Intersection strategy.
            bounding_box: Precomputed bounding box. Computed from the
                control points when omitted.
            mesh: Precomputed tessellation, reused verbatim when a surface
                is rebuilt from serialized data. Computed when omitted.

        Raises:
            NurbsConstructionError: If the grid, weights, degrees or knot
                vectors are inconsistent.
        """
        self.control_points: tuple[tuple[Vec3, ...], ...] = tuple(
            tuple(row) for row in control_points
        )
        self.weights: tuple[tuple[float, ...], ...] = tuple(
            tuple(float(w) for w in row) for row in weights
        )
        self.u_knots: tuple[float, ...] = tuple(float(k) for k in u_knots)
        self.v_knots: tuple[float, ...] = tuple(float(k) for k in v_knots)
        self.u_degree = int(u_degree)
        self.v_degree = int(v_degree)
        self.material = material if material is not None else Material()
        self.strategy = IntersectionStrategy(strategy)

        self._validate()

        self.u_count = len(self.control_points)
        self.v_count = len(self.control_points[0])

        if bounding_box is None:
            bounding_box = AABB.from_points(p for row in self.control_points for p in row)
        self.bounding_box = bounding_box

        if mesh is None:
            mesh = self.tessellate()
        elif len(mesh) != 2 * (TESSELLATION_RESOLUTION - 1) ** 2:
            raise NurbsConstructionError(
                f"Precomputed mesh has {len(mesh)} triangles, expected "
                f"{2 * (TESSELLATION_RESOLUTION - 1) ** 2}"
            )
        self.mesh: tuple[Triangle, ...] = tuple(mesh)

    def _validate(self) -> None:
        """Check the control grid against the knot vectors and degrees."""
        cp = self.control_points
        if not cp or not cp[0]:
            raise NurbsConstructionError("Control point grid is empty")
        u_count = len(cp)
        v_count = len(cp[0])
        if any(len(row) != v_count for row in cp):
            raise NurbsConstructionError("Control point grid is not rectangular")
        if len(self.weights) != u_count or any(len(row) != v_count for row in self.weights):
            raise NurbsConstructionError(
                f"Weight grid shape does not match control grid ({u_count}x{v_count})"
            )

        for name, degree, count, knots in (
            ("u", self.u_degree, u_count, self.u_knots),
            ("v", self.v_degree, v_count, self.v_knots),
        ):
            if degree < 0:
                raise NurbsConstructionError(f"{name} degree must be >= 0, got {degree}")
            if degree >= count:
                raise NurbsConstructionError(
                    f"{name} degree {degree} needs at least {degree + 1} control points, "
                    f"got {count}"
                )
            expected = count + degree + 1
            if len(knots) != expected:
                raise NurbsConstructionError(
                    f"{name} knot vector has {len(knots)} entries, expected {expected} "
                    f"({count} control points, degree {degree})"
                )
            if any(knots[i] > knots[i + 1] for i in range(len(knots) - 1)):
                raise NurbsConstructionError(f"{name} knot vector is not non-decreasing")
            if knots[count] <= knots[degree]:
                raise NurbsConstructionError(f"{name} knot vector has an empty domain")

    # =========================================================================
    # Evaluation
    # =========================================================================

    def evaluate_point(self, u: float, v: float) -> Vec3:
        """Evaluate the surface point at normalized parameters (u, v).

        Args:
            u: Parameter in [0, 1] (clamped), mapped onto the u knot domain.
            v: Parameter in [0, 1] (clamped), mapped onto the v knot domain.

        Returns:
            The surface point, or the origin if the weight sum is negligible.
        """
        u = max(0.0, min(1.0, u))
        v = max(0.0, min(1.0, v))

        p = self.u_degree
        q = self.v_degree
        u_lo = self.u_knots[p]
        u_hi = self.u_knots[self.u_count]
        v_lo = self.v_knots[q]
        v_hi = self.v_knots[self.v_count]
        uk = u_lo + u * (u_hi - u_lo)
        vk = v_lo + v * (v_hi - v_lo)

        span_u = find_knot_span(self.u_count - 1, p, uk, self.u_knots)
        span_v = find_knot_span(self.v_count - 1, q, vk, self.v_knots)
        basis_u = compute_basis_functions(span_u, uk, p, self.u_knots)
        basis_v = compute_basis_functions(span_v, vk, q, self.v_knots)

        x = y = z = 0.0
        weight_sum = 0.0
        for i in range(p + 1):
            ui = span_u - p + i
            row = self.control_points[ui]
            weight_row = self.weights[ui]
            nu = basis_u[i]
            for j in range(q + 1):
                vj = span_v - q + j
                w = nu * basis_v[j] * weight_row[vj]
                point = row[vj]
                x += point.x * w
                y += point.y * w
                z += point.z * w
                weight_sum += w

        if abs(weight_sum) < WEIGHT_EPSILON:
            return Vec3()
        return Vec3(x / weight_sum, y / weight_sum, z / weight_sum)

    def partial_derivatives(self, u: float, v: float) -> tuple[Vec3, Vec3]:
        """Estimate dS/du and dS/dv with finite differences.

        Central differences are used where both neighbours lie in [0, 1];
        at the parameter boundary a one-sided difference is used instead.
        """
        return (
            _finite_difference(lambda s: self.evaluate_point(s, v), u),
            _finite_difference(lambda s: self.evaluate_point(u, s), v),
        )

    def compute_normal(self, u: float, v: float) -> Vec3:
        """Compute the unit surface normal at (u, v).

        Returns:
            normalize(dS/du x dS/dv), or (0, 1, 0) where the partials are
            parallel or vanish.
        """
        du, dv = self.partial_derivatives(u, v)
        n = du.cross(dv)
        if n.length() < NORMAL_EPSILON:
            return UNIT_Y
        return n.normalize()

    # =========================================================================
    # Tessellation
    # =========================================================================

    @staticmethod
    def grid_parameter(index: int) -> float:
        """Parameter value of tessellation grid line `index`."""
        return index / (TESSELLATION_RESOLUTION - 1)

    def tessellate(self) -> tuple[Triangle, ...]:
        """Sample the surface on the fixed grid and triangulate it.

        Each cell (i, j) yields (p00, p10, p11) followed by (p00, p11, p01),
        so triangle 2k and 2k + 1 both belong to cell k = i * (res - 1) + j.
        """
        res = TESSELLATION_RESOLUTION
        samples = [
            [self.evaluate_point(self.grid_parameter(i), self.grid_parameter(j)) for j in range(res)]
            for i in range(res)
        ]

        triangles: list[Triangle] = []
        for i in range(res - 1):
            for j in range(res - 1):
                p00 = samples[i][j]
                p10 = samples[i + 1][j]
                p11 = samples[i + 1][j + 1]
                p01 = samples[i][j + 1]
                triangles.append(Triangle(p00, p10, p11, self.material))
                triangles.append(Triangle(p00, p11, p01, self.material))

        logger.debug(
            "Tessellated %dx%d NURBS patch into %d triangles",
            self.u_count,
            self.v_count,
            len(triangles),
        )
        return tuple(triangles)

    def triangle_parameters(self, index: int) -> tuple[tuple[float, float], ...]:
        """Return the (u, v) parameters of the three vertices of mesh[index]."""
        cell, half = divmod(index, 2)
        i, j = divmod(cell, TESSELLATION_RESOLUTION - 1)
        u0 = self.grid_parameter(i)
        u1 = self.grid_parameter(i + 1)
        v0 = self.grid_parameter(j)
        v1 = self.grid_parameter(j + 1)
        if half == 0:
            return ((u0, v0), (u1, v0), (u1, v1))
        return ((u0, v0), (u1, v1), (u0, v1))

    # =========================================================================
    # Intersection
    # =========================================================================

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        """Intersect the surface using the configured strategy."""
        if self.strategy is IntersectionStrategy.NEWTON:
            return self.intersect_newton(ray, t_min, t_max)
        if self.strategy is IntersectionStrategy.SAMPLING:
            return self.intersect_sampled(ray, t_min, t_max)
        return self.intersect_tessellated(ray, t_min, t_max)

    def _nearest_mesh_hit(
        self, ray: Ray, t_min: float, t_max: float
    ) -> tuple[int, HitRecord] | None:
        """Nearest triangle hit as (mesh index, hit), later triangles winning ties."""
        if not self.bounding_box.hit(ray, t_min, t_max):
            return None

        best: tuple[int, HitRecord] | None = None
        closest = t_max
        for index, triangle in enumerate(self.mesh):
            hit = triangle.intersect(ray, t_min, closest)
            if hit is not None:
                best = (index, hit)
                closest = hit.t
        return best

    def intersect_tessellated(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        """Bounding-box cull, then nearest hit over the tessellated mesh."""
        found = self._nearest_mesh_hit(ray, t_min, t_max)
        if found is None:
            return None
        return found[1]

    def intersect_newton(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        """Solve S(u, v) = O + t D for (u, v, t) with Newton-Raphson.

        The initial guess comes from the tessellated mesh hit when there is
        one, otherwise from the parameter centre and the distance at which
        the ray enters the bounding box.

        Returns:
            The converged hit, or None when the iteration does not converge,
            the Jacobian is singular or the solution lies out of range.
        """
        entry = self.bounding_box.entry_distance(ray, t_min, t_max)
        if entry is None:
            return None

        found = self._nearest_mesh_hit(ray, t_min, t_max)
        if found is not None:
            index, mesh_hit = found
            weights = self.mesh[index].barycentric(mesh_hit.point)
            params = self.triangle_parameters(index)
            u = sum(w * p[0] for w, p in zip(weights, params))
            v = sum(w * p[1] for w, p in zip(weights, params))
            t = mesh_hit.t
        else:
            u, v, t = 0.5, 0.5, entry

        neg_d = -ray.direction
        converged = False
        for _ in range(NEWTON_MAX_ITERATIONS):
            residual = self.evaluate_point(u, v) - ray.at(t)
            if residual.length() < NEWTON_TOLERANCE:
                converged = True
                break

            su, sv = self.partial_derivatives(u, v)
            det = su.dot(sv.cross(neg_d))
            if abs(det) < NEWTON_DETERMINANT_EPSILON:
                return None

            # Cramer's rule for [su sv -D] * delta = -residual
            rhs = -residual
            inv_det = 1.0 / det
            du = rhs.dot(sv.cross(neg_d)) * inv_det
            dv = su.dot(rhs.cross(neg_d)) * inv_det
            dt = su.dot(sv.cross(rhs)) * inv_det

            u = max(0.0, min(1.0, u + du))
            v = max(0.0, min(1.0, v + dv))
            t += dt

        if not converged:
            converged = (self.evaluate_point(u, v) - ray.at(t)).length() < NEWTON_TOLERANCE
        if not converged or t < t_min or t > t_max:
            return None

        return make_hit(ray, t, self.compute_normal(u, v), self.material)

    @cached_property
    def sample_points(self) -> tuple[tuple[float, float, Vec3], ...]:
        """Dense (u, v, point) samples used by the sampling strategy."""
        res = SAMPLING_RESOLUTION
        return tuple(
            (i / (res - 1), j / (res - 1), self.evaluate_point(i / (res - 1), j / (res - 1)))
            for i in range(res)
            for j in range(res)
        )

    def intersect_sampled(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        """Closest-approach search over dense surface samples.

        A sample counts as hit when its perpendicular distance to the ray
        is below the sample spacing (box diagonal / resolution); the sample
        with the smallest in-range t wins.
        """
        if not self.bounding_box.hit(ray, t_min, t_max):
            return None

        threshold = self.bounding_box.diagonal() / (SAMPLING_RESOLUTION - 1)
        best: tuple[float, float, float] | None = None
        for u, v, point in self.sample_points:
            t = (point - ray.origin).dot(ray.direction)
            if t < t_min or t > t_max:
                continue
            if (ray.at(t) - point).length() >= threshold:
                continue
            if best is None or t < best[0]:
                best = (t, u, v)

        if best is None:
            return None
        t, u, v = best
        return make_hit(ray, t, self.compute_normal(u, v), self.material)

    def __repr__(self) -> str:
        return (
            f"NurbsSurface({self.u_count}x{self.v_count}, degrees=({self.u_degree}, "
            f"{self.v_degree}), strategy={self.strategy.value})"
        )
