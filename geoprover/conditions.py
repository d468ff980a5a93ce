"""Symbolic condition templates, one per construction kind.

Every template is a :class:`~geoprover.polynomials.SymbolicPolynomial` over
role labels (``"0"`` for the constructed point itself, ``"A"``, ``"O1"``,
...).  Templates never depend on concrete points, so each one is built on
first use and cached for the lifetime of the process; callers must treat the
returned objects as read-only (they are immutable values anyway).  A
concurrent host would only need a one-time initialisation guard around the
``lru_cache`` fill.

Composite conditions (angle rays) are assembled from the tangent templates
with polynomial arithmetic rather than hand-written coefficients, so that the
same template serves every instance of the construction.
"""

from __future__ import annotations

from fractions import Fraction
from functools import lru_cache
from typing import List, NamedTuple, Sequence, Tuple

from .polynomials import SymbolicPolynomial, sym

ORIGIN = "0"

Coords = Tuple[SymbolicPolynomial, SymbolicPolynomial]


class AngleTangent(NamedTuple):
    """Tangent of an oriented angle as ``numerator / denominator``."""

    numerator: SymbolicPolynomial
    denominator: SymbolicPolynomial


def _pt(label: str) -> Coords:
    return sym(label, "x"), sym(label, "y")


def _sub(p: Coords, q: Coords) -> Coords:
    return p[0] - q[0], p[1] - q[1]


def _cross(u: Coords, v: Coords) -> SymbolicPolynomial:
    return u[0] * v[1] - u[1] * v[0]


def _dot(u: Coords, v: Coords) -> SymbolicPolynomial:
    return u[0] * v[0] + u[1] * v[1]


def _square_distance(p: Coords, q: Coords) -> SymbolicPolynomial:
    d = _sub(p, q)
    return _dot(d, d)


def _collinear(p: Coords, q: Coords, r: Coords) -> SymbolicPolynomial:
    return _cross(_sub(q, p), _sub(r, p))


# ----------------------------------------------------------------------
# Relations between points (statements and set memberships)


@lru_cache(maxsize=None)
def collinear(a: str, b: str, c: str) -> SymbolicPolynomial:
    """``(xB - xA)(yC - yA) - (yB - yA)(xC - xA)``."""

    return _collinear(_pt(a), _pt(b), _pt(c))


@lru_cache(maxsize=None)
def identical_points(a: str, b: str) -> SymbolicPolynomial:
    return _square_distance(_pt(a), _pt(b))


@lru_cache(maxsize=None)
def parallel(a: str, b: str, c: str, d: str) -> SymbolicPolynomial:
    return _cross(_sub(_pt(b), _pt(a)), _sub(_pt(d), _pt(c)))


@lru_cache(maxsize=None)
def perpendicular(a: str, b: str, c: str, d: str) -> SymbolicPolynomial:
    return _dot(_sub(_pt(b), _pt(a)), _sub(_pt(d), _pt(c)))


@lru_cache(maxsize=None)
def congruent_segments(a: str, b: str, c: str, d: str) -> SymbolicPolynomial:
    return _square_distance(_pt(a), _pt(b)) - _square_distance(_pt(c), _pt(d))


@lru_cache(maxsize=None)
def equidistant(p: str, a: str, b: str) -> SymbolicPolynomial:
    """Point ``p`` is equally far from ``a`` and ``b``."""

    return _square_distance(_pt(p), _pt(a)) - _square_distance(_pt(p), _pt(b))


@lru_cache(maxsize=None)
def on_circle(p: str, center: str, through: str) -> SymbolicPolynomial:
    return _square_distance(_pt(p), _pt(center)) - _square_distance(_pt(through), _pt(center))


@lru_cache(maxsize=None)
def on_circle_with_diameter(p: str, a: str, b: str) -> SymbolicPolynomial:
    return _dot(_sub(_pt(p), _pt(a)), _sub(_pt(p), _pt(b)))


def _determinant(rows: Sequence[Sequence[SymbolicPolynomial]]) -> SymbolicPolynomial:
    if len(rows) == 1:
        return rows[0][0]
    total = SymbolicPolynomial()
    for column, entry in enumerate(rows[0]):
        if entry.is_zero():
            continue
        minor = [row[:column] + row[column + 1:] for row in rows[1:]]
        term = entry * _determinant(minor)
        total = total + term if column % 2 == 0 else total - term
    return total


@lru_cache(maxsize=None)
def concyclic(a: str, b: str, c: str, d: str) -> SymbolicPolynomial:
    """Vanishing of ``det[x^2 + y^2, x, y, 1]`` over the four points."""

    one = SymbolicPolynomial.constant(1)
    rows: List[List[SymbolicPolynomial]] = []
    for label in (a, b, c, d):
        x, y = _pt(label)
        rows.append([x * x + y * y, x, y, one])
    return _determinant(rows)


# ----------------------------------------------------------------------
# Self-conditional points (separate x and y conditions)


@lru_cache(maxsize=None)
def midpoint() -> Tuple[SymbolicPolynomial, SymbolicPolynomial]:
    """``2*x0 - xA - xB`` and ``2*y0 - yA - yB``."""

    o, a, b = _pt(ORIGIN), _pt("A"), _pt("B")
    return o[0] * 2 - a[0] - b[0], o[1] * 2 - a[1] - b[1]


@lru_cache(maxsize=None)
def translation() -> Tuple[SymbolicPolynomial, SymbolicPolynomial]:
    """Image of ``P`` under the translation by vector ``AB``."""

    o, p, a, b = _pt(ORIGIN), _pt("P"), _pt("A"), _pt("B")
    return o[0] - p[0] - b[0] + a[0], o[1] - p[1] - b[1] + a[1]


@lru_cache(maxsize=None)
def central_symmetry() -> Tuple[SymbolicPolynomial, SymbolicPolynomial]:
    o, p, c = _pt(ORIGIN), _pt("P"), _pt("O")
    return o[0] + p[0] - c[0] * 2, o[1] + p[1] - c[1] * 2


@lru_cache(maxsize=None)
def rotation_90() -> Tuple[SymbolicPolynomial, SymbolicPolynomial]:
    """Counter-clockwise quarter turn of ``P`` around ``O``."""

    o, p, c = _pt(ORIGIN), _pt("P"), _pt("O")
    return o[0] - c[0] + p[1] - c[1], o[1] - c[1] - p[0] + c[0]


@lru_cache(maxsize=None)
def reflection() -> Tuple[SymbolicPolynomial, SymbolicPolynomial]:
    """Mirror image of ``P`` in line ``AB``: midpoint on the line, chord perpendicular to it."""

    o, p, a, b = _pt(ORIGIN), _pt("P"), _pt("A"), _pt("B")
    half = Fraction(1, 2)
    middle = ((o[0] + p[0]) * half, (o[1] + p[1]) * half)
    return _collinear(a, b, middle), _dot(_sub(o, p), _sub(b, a))


@lru_cache(maxsize=None)
def tangent_of_60_deg() -> Tuple[SymbolicPolynomial, SymbolicPolynomial]:
    """Parametric point ``T`` of a 60 degree angle: ``xT^2 - 3`` and ``yT``."""

    o = _pt(ORIGIN)
    return o[0] * o[0] - 3, o[1]


# ----------------------------------------------------------------------
# Area-method quantities


@lru_cache(maxsize=None)
def signed_area(a: str, b: str, c: str) -> SymbolicPolynomial:
    return collinear(a, b, c) * Fraction(1, 2)


@lru_cache(maxsize=None)
def pythagoras_difference(a: str, b: str, c: str) -> SymbolicPolynomial:
    """``|AB|^2 + |CB|^2 - |AC|^2``."""

    pa, pb, pc = _pt(a), _pt(b), _pt(c)
    return _square_distance(pa, pb) + _square_distance(pc, pb) - _square_distance(pa, pc)


# ----------------------------------------------------------------------
# Angles


@lru_cache(maxsize=None)
def angle_tangent(a: str, o: str, b: str) -> AngleTangent:
    """Tangent of the oriented angle from ray ``OA`` to ray ``OB``."""

    ray_a = _sub(_pt(a), _pt(o))
    ray_b = _sub(_pt(b), _pt(o))
    return AngleTangent(_cross(ray_a, ray_b), _dot(ray_a, ray_b))


def tangent_of_sum(first: AngleTangent, second: AngleTangent) -> AngleTangent:
    n1, d1 = first
    n2, d2 = second
    return AngleTangent(n1 * d2 + n2 * d1, d1 * d2 - n1 * n2)


@lru_cache(maxsize=None)
def tangent_of_sum_of_three(
    a1: str, o1: str, b1: str, a2: str, o2: str, b2: str, a3: str, o3: str, b3: str
) -> AngleTangent:
    partial = tangent_of_sum(angle_tangent(a1, o1, b1), angle_tangent(a2, o2, b2))
    return tangent_of_sum(partial, angle_tangent(a3, o3, b3))


@lru_cache(maxsize=None)
def angle_ray() -> SymbolicPolynomial:
    """Ray ``O0`` with oriented angle ``A O 0`` equal to ``A1 O1 B1``."""

    ray = angle_tangent("A", "O", ORIGIN)
    given = angle_tangent("A1", "O1", "B1")
    return ray.numerator * given.denominator - ray.denominator * given.numerator


@lru_cache(maxsize=None)
def angle_ray_to_60() -> SymbolicPolynomial:
    """Ray ``O0`` completing ``A1O1B1 + A2O2B2`` to 60 degrees.

    ``tan(sum) = xT`` with ``T`` the parametric point satisfying ``xT^2 = 3``.
    """

    tangent = tangent_of_sum_of_three("A1", "O1", "B1", "A2", "O2", "B2", "A", "O", ORIGIN)
    return tangent.numerator - tangent.denominator * sym("T", "x")


@lru_cache(maxsize=None)
def zero() -> SymbolicPolynomial:
    return SymbolicPolynomial()


__all__ = [
    "AngleTangent",
    "ORIGIN",
    "angle_ray",
    "angle_ray_to_60",
    "angle_tangent",
    "central_symmetry",
    "collinear",
    "concyclic",
    "congruent_segments",
    "equidistant",
    "identical_points",
    "midpoint",
    "on_circle",
    "on_circle_with_diameter",
    "parallel",
    "perpendicular",
    "pythagoras_difference",
    "reflection",
    "rotation_90",
    "signed_area",
    "tangent_of_60_deg",
    "tangent_of_sum",
    "tangent_of_sum_of_three",
    "translation",
    "zero",
]
