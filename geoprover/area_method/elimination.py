"""Elimination lemmas for points given as affine combinations of earlier points.

A supported point ``Y`` is written ``Y = sum(w_i * P_i)`` with weights summing
to one.  Signed areas and Pythagoras differences with ``Y`` at an end are
affine in ``Y``, so they become the weighted sums of the same quantity at
the ``P_i``.  With ``Y`` at the vertex of a Pythagoras difference:

    P_AYC = sum(w_i * P_A Pi C) - sum_{i<j}(w_i * w_j * P_Pi Pj Pi)

Quarter turns and perpendicular lines use a point on the perpendicular to a
line instead, see :class:`TRatioDefinition`.
"""

from __future__ import annotations

import fractions
import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

from ..protocol import ConstructionProtocol, ConstructionStep, Point
from .expressions import (
    ONE,
    AMExpression,
    AdditiveInverse,
    BasicNumber,
    Difference,
    Fraction,
    GeometricQuantity,
    PointElimination,
    Product,
    PythagorasDifference,
    SegmentRatio,
    SignedArea,
    Sum,
    UnknownStatement,
    uniformize_atom,
)

logger = logging.getLogger(__name__)

Weights = List[Tuple[str, AMExpression]]


@dataclass
class AffineDefinition:
    point: str
    weights: Weights
    denominators: List[AMExpression] = field(default_factory=list)
    parameter: Optional[SegmentRatio] = None
    description: str = ""


@dataclass
class TRatioDefinition:
    """Point ``Y = P + r * rot90(V - U)`` on the perpendicular to ``UV`` through ``P``.

    With ``U == P`` the ratio is the usual ``r = 4 * S_PVY / P_PVP``.
    """

    point: str
    base: str
    u: str
    v: str
    ratio: AMExpression = ONE
    denominators: List[AMExpression] = field(default_factory=list)
    parameter: Optional[SegmentRatio] = None
    description: str = ""


Definition = Union[AffineDefinition, TRatioDefinition]


def _merge(weights: Sequence[Tuple[str, object]]) -> Weights:
    merged: Dict[str, AMExpression] = {}
    for label, weight in weights:
        value = weight if isinstance(weight, AMExpression) else BasicNumber(weight)
        merged[label] = Sum(merged[label], value) if label in merged else value
    return list(merged.items())


def _total(parts: Sequence[AMExpression]) -> AMExpression:
    result = parts[-1]
    for part in reversed(parts[:-1]):
        result = Sum(part, result)
    return result


class AreaMethodContext:
    """Definitions of the constructed points in construction order."""

    def __init__(self) -> None:
        self.free_points: List[str] = []
        self.order: List[str] = []
        self.definitions: Dict[str, Definition] = {}
        self.unsupported: Dict[str, str] = {}
        self.used: List[str] = []
        self._parameters: Set[GeometricQuantity] = set()

    @classmethod
    def from_protocol(cls, protocol: ConstructionProtocol) -> "AreaMethodContext":
        context = cls()
        for step in protocol:
            if not isinstance(step, Point):
                continue
            if step.kind == "free_point":
                context.free_points.append(step.label)
                continue
            try:
                definition = context._define(step, protocol)
            except UnknownStatement as exc:
                logger.info("No elimination lemma for %s: %s", step.label, exc)
                context.unsupported[step.label] = str(exc)
                context.order.append(step.label)
                continue
            context._add(definition)
        return context

    def _add(self, definition: Definition) -> None:
        self.definitions[definition.point] = definition
        self.order.append(definition.point)
        if definition.parameter is not None:
            self._parameters.add(uniformize_atom(definition.parameter)[1])

    # ------------------------------------------------------------------
    # Definitions per construction kind

    def _define(self, step: Point, protocol: ConstructionProtocol) -> Definition:
        data = step.data
        kind = step.kind
        label = step.label
        if kind == "midpoint":
            half = fractions.Fraction(1, 2)
            return AffineDefinition(label, _merge([(data["a"], half), (data["b"], half)]), description=step.describe())
        if kind == "translated_point":
            weights = _merge([(data["point"], 1), (data["b"], 1), (data["a"], -1)])
            return AffineDefinition(label, weights, description=step.describe())
        if kind == "centrally_symmetric_point":
            return AffineDefinition(label, _merge([(data["center"], 2), (data["point"], -1)]), description=step.describe())
        if kind == "rotated_point_90":
            center = data["center"]
            return TRatioDefinition(label, center, center, data["point"], description=step.describe())
        if kind == "foot_point":
            p, a, b = data["point"], data["a"], data["b"]
            base = PythagorasDifference(a, b, a)
            ratio = Fraction(PythagorasDifference(p, a, b), base)
            weights = _merge([(a, Difference(ONE, ratio)), (b, ratio)])
            return AffineDefinition(label, weights, [base], description=step.describe())
        if kind == "intersection_point":
            u, v = self._line(data["first"], protocol)
            p, q = self._line(data["second"], protocol)
            denominator = Difference(SignedArea(p, u, v), SignedArea(q, u, v))
            weights = _merge([
                (q, Fraction(SignedArea(p, u, v), denominator)),
                (p, Fraction(AdditiveInverse(SignedArea(q, u, v)), denominator)),
            ])
            return AffineDefinition(label, weights, [denominator], description=step.describe())
        if kind == "random_point_on_line":
            u, v = self._line(data["line"], protocol)
            ratio = SegmentRatio(u, label, u, v)
            weights = _merge([(u, Difference(ONE, ratio)), (v, ratio)])
            return AffineDefinition(label, weights, parameter=ratio, description=step.describe())
        raise UnknownStatement(f"{kind} is not an affine construction")

    def _line(self, label: str, protocol: ConstructionProtocol) -> Tuple[str, str]:
        """Two points spanning the line ``label``, adding a virtual point where needed."""

        step: Optional[ConstructionStep] = protocol.get(label)
        if step is None:
            raise UnknownStatement(f"unknown line {label}")
        if step.kind == "line_through_two_points":
            return step.data["a"], step.data["b"]
        if step.kind == "parallel_line":
            a, b = self._line(step.data["line"], protocol)
            through = step.data["point"]
            virtual = f"{through}[{label}]"
            if virtual not in self.definitions:
                weights = _merge([(through, 1), (b, 1), (a, -1)])
                self._add(AffineDefinition(virtual, weights, description=f"Second point of line {label}"))
            return through, virtual
        if step.kind == "perpendicular_line":
            a, b = self._line(step.data["line"], protocol)
            through = step.data["point"]
            virtual = f"{through}[{label}]"
            if virtual not in self.definitions:
                self._add(TRatioDefinition(virtual, through, a, b, description=f"Second point of line {label}"))
            return through, virtual
        raise UnknownStatement(f"line {label} ({step.kind}) is not given by two points")

    # ------------------------------------------------------------------
    # Elimination

    def is_parameter(self, atom: GeometricQuantity) -> bool:
        if not isinstance(atom, SegmentRatio):
            return False
        return uniformize_atom(atom)[1] in self._parameters

    def mentions(self, expr: AMExpression, point: str) -> bool:
        if isinstance(expr, GeometricQuantity):
            return point in expr.labels and not self.is_parameter(expr)
        if isinstance(expr, PointElimination) and expr.point == point:
            return True
        return any(self.mentions(child, point) for child in expr.children())

    def eliminate_atom(self, atom: GeometricQuantity, point: str) -> AMExpression:
        if point in self.unsupported:
            raise UnknownStatement(f"cannot eliminate {point}: {self.unsupported[point]}")
        definition = self.definitions.get(point)
        if definition is None:
            raise UnknownStatement(f"{point} is not a constructed point")
        if point not in self.used:
            self.used.append(point)
        if isinstance(definition, TRatioDefinition):
            return self._eliminate_tratio(atom, point, definition)
        weights = definition.weights

        if isinstance(atom, SignedArea):
            labels = atom.labels
            if labels.count(point) > 1:
                return BasicNumber(0)
            shift = labels.index(point) + 1
            a, b, _ = labels[shift:] + labels[:shift]
            return _total([Product(w, SignedArea(a, b, p)) for p, w in weights])

        if isinstance(atom, PythagorasDifference):
            a, b, c = atom.labels
            if b == point:
                if a == point or c == point:
                    return BasicNumber(0)
                return self._vertex(a, c, weights)
            if a == point and c == point:
                return self._vertex(b, b, weights)
            if c == point:
                return _total([Product(w, PythagorasDifference(a, b, p)) for p, w in weights])
            return _total([Product(w, PythagorasDifference(c, b, p)) for p, w in weights])

        raise UnknownStatement(f"no elimination lemma for {atom} with respect to {point}")

    @staticmethod
    def _vertex(a: str, c: str, weights: Weights) -> AMExpression:
        parts: List[AMExpression] = [Product(w, PythagorasDifference(a, p, c)) for p, w in weights]
        for (p, wp), (q, wq) in combinations(weights, 2):
            parts.append(AdditiveInverse(Product(Product(wp, wq), PythagorasDifference(p, q, p))))
        return _total(parts)

    def _eliminate_tratio(self, atom: GeometricQuantity, point: str, definition: TRatioDefinition) -> AMExpression:
        """Lemmas for ``Y = P + r * rot90(V - U)``:

            S_ABY = S_ABP - r/4 * (P_AUV - P_BUV)
            P_ABY = P_ABP + 4r * (S_UVA - S_UVB)
            P_AYB = P_APB - 4r * (S_UVA + S_UVB - 2 * S_UVP) + r^2 * P_UVU
        """

        p, u, v, r = definition.base, definition.u, definition.v, definition.ratio

        if isinstance(atom, SignedArea):
            labels = atom.labels
            if labels.count(point) > 1:
                return BasicNumber(0)
            shift = labels.index(point) + 1
            a, b, _ = labels[shift:] + labels[:shift]
            offset = Difference(PythagorasDifference(a, u, v), PythagorasDifference(b, u, v))
            return Difference(SignedArea(a, b, p), Product(Product(BasicNumber(fractions.Fraction(1, 4)), r), offset))

        if isinstance(atom, PythagorasDifference):
            a, b, c = atom.labels
            if b == point:
                if a == point or c == point:
                    return BasicNumber(0)
                return self._tratio_vertex(a, c, definition)
            if a == point and c == point:
                return self._tratio_vertex(b, b, definition)
            end = a if c == point else c
            offset = Difference(SignedArea(u, v, end), SignedArea(u, v, b))
            return Sum(PythagorasDifference(end, b, p), Product(Product(BasicNumber(4), r), offset))

        raise UnknownStatement(f"no elimination lemma for {atom} with respect to {point}")

    @staticmethod
    def _tratio_vertex(a: str, c: str, definition: TRatioDefinition) -> AMExpression:
        p, u, v, r = definition.base, definition.u, definition.v, definition.ratio
        areas = Difference(
            Sum(SignedArea(u, v, a), SignedArea(u, v, c)),
            Product(BasicNumber(2), SignedArea(u, v, p)),
        )
        return Sum(
            Difference(PythagorasDifference(a, p, c), Product(Product(BasicNumber(4), r), areas)),
            Product(Product(r, r), PythagorasDifference(u, v, u)),
        )

    def denominators(self, point: str) -> List[AMExpression]:
        """Lemma denominators introduced by eliminating ``point``."""

        definition = self.definitions.get(point)
        return list(definition.denominators) if definition is not None else []


__all__ = ["AffineDefinition", "AreaMethodContext", "TRatioDefinition"]
