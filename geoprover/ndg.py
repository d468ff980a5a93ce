"""Readable explanations for non-degeneracy polynomials.

A position checker hypothesises that a few points sit in a degenerate
configuration (coincide, are collinear, span parallel lines, ...).  It states
the hypothesis as a theorem statement over copies of those points in a small
auxiliary protocol, instantiates it, and compares the result with the NDG
polynomial up to a scalar factor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .logging_utils import apply_debug_logging
from .polynomials import Polynomial
from .protocol import ConstructionProtocol, Point, make_step
from .transform import Transformer

logger = logging.getLogger(__name__)


@dataclass
class NDGCondition:
    polynomial: Polynomial
    explanations: Dict[Tuple[str, ...], str] = field(default_factory=dict)

    def add_explanation(self, points: Sequence[str], text: str) -> None:
        self.explanations[tuple(points)] = text

    @property
    def is_explained(self) -> bool:
        return bool(self.explanations)

    @property
    def best_explanation(self) -> Optional[str]:
        return next(iter(self.explanations.values()), None)

    def __str__(self) -> str:
        return self.best_explanation or f"{self.polynomial} != 0"


class PositionChecker:
    """Base class: one family of degenerate configurations over ``arity`` points."""

    arity = 0

    def __init__(self, protocol: ConstructionProtocol) -> None:
        self.u_index = protocol.u_index
        self.x_index = protocol.x_index
        self.aux = ConstructionProtocol(u_index=self.u_index, x_index=self.x_index)

    def reset_aux_protocol(self) -> None:
        self.aux.clear(self.u_index, self.x_index)

    def _matches(self, ndg: NDGCondition, points: Sequence[Point], kind: str, data: Dict[str, str]) -> bool:
        self.reset_aux_protocol()
        for point in points:
            self.aux.add_seed(point)
        self.aux.set_statement(make_step(f"ndg:{kind}", kind, data))
        return any(ndg.polynomial.structural_match(p) for p in Transformer(self.aux).statement_polynomials())

    def check_positions(self, ndg: NDGCondition, points: Sequence[Point]) -> bool:
        raise NotImplementedError


class IdenticalPointsChecker(PositionChecker):
    arity = 2

    def check_positions(self, ndg, points):
        a, b = (p.label for p in points)
        if self._matches(ndg, points, "identical_points", {"A": a, "B": b}):
            ndg.add_explanation((a, b), f"Points {a} and {b} are not identical.")
            return True
        return False


class CollinearPointsChecker(PositionChecker):
    arity = 3

    def check_positions(self, ndg, points):
        a, b, c = (p.label for p in points)
        if self._matches(ndg, points, "collinear_points", {"A": a, "B": b, "C": c}):
            ndg.add_explanation((a, b, c), f"Points {a}, {b} and {c} are not collinear.")
            return True
        return False


class _VertexChecker(PositionChecker):
    arity = 3
    kind = ""
    text = ""

    def check_positions(self, ndg, points):
        labels = [p.label for p in points]
        for vertex in labels:
            p, q = [label for label in labels if label != vertex]
            if self._matches(ndg, points, self.kind, {"A": vertex, "B": p, "C": vertex, "D": q}):
                ndg.add_explanation((vertex, p, q), self.text.format(v=vertex, p=p, q=q))
                return True
        return False


class PerpendicularRaysChecker(_VertexChecker):
    kind = "perpendicular_lines"
    text = "Lines {v}{p} and {v}{q} are not perpendicular."


class EqualSegmentsChecker(_VertexChecker):
    kind = "congruent_segments"
    text = "Segments {v}{p} and {v}{q} are not of equal length."


def _pairings(labels: Sequence[str]) -> List[Tuple[str, str, str, str]]:
    a, b, c, d = labels
    return [(a, b, c, d), (a, c, b, d), (a, d, b, c)]


class _TwoLinesChecker(PositionChecker):
    arity = 4
    kind = ""
    text = ""

    def check_positions(self, ndg, points):
        for a, b, c, d in _pairings([p.label for p in points]):
            if self._matches(ndg, points, self.kind, {"A": a, "B": b, "C": c, "D": d}):
                ndg.add_explanation((a, b, c, d), self.text.format(a=a, b=b, c=c, d=d))
                return True
        return False


class ParallelLinesChecker(_TwoLinesChecker):
    kind = "parallel_lines"
    text = "Lines {a}{b} and {c}{d} are not parallel."


class PerpendicularLinesChecker(_TwoLinesChecker):
    kind = "perpendicular_lines"
    text = "Lines {a}{b} and {c}{d} are not perpendicular."


class ConcyclicPointsChecker(PositionChecker):
    arity = 4

    def check_positions(self, ndg, points):
        a, b, c, d = (p.label for p in points)
        if self._matches(ndg, points, "concyclic_points", {"A": a, "B": b, "C": c, "D": d}):
            ndg.add_explanation((a, b, c, d), f"Points {a}, {b}, {c} and {d} are not concyclic.")
            return True
        return False


CATALOGUE = (
    IdenticalPointsChecker,
    CollinearPointsChecker,
    PerpendicularRaysChecker,
    EqualSegmentsChecker,
    ParallelLinesChecker,
    PerpendicularLinesChecker,
    ConcyclicPointsChecker,
)


class NDGDeriver:
    def __init__(self, protocol: ConstructionProtocol, max_points: int = 8) -> None:
        self.protocol = protocol
        self.max_points = max_points
        self.checkers = [checker(protocol) for checker in CATALOGUE]

    def candidate_points(self, polynomial: Polynomial) -> List[Point]:
        used = polynomial.variables()
        return [
            point
            for point in self.protocol.points()
            if point.has_coordinates and (point.x in used or point.y in used)
        ]

    def explain(self, ndg: NDGCondition) -> bool:
        points = self.candidate_points(ndg.polynomial)
        if len(points) > self.max_points:
            logger.warning(
                "NDG %s involves %d points (limit %d), not explained", ndg.polynomial, len(points), self.max_points
            )
            return False
        for checker in self.checkers:
            for chosen in combinations(points, checker.arity):
                if checker.check_positions(ndg, chosen):
                    return True
        return False

    def explain_all(self, polynomials: Iterable[Polynomial]) -> List[NDGCondition]:
        conditions: List[NDGCondition] = []
        for polynomial in polynomials:
            if polynomial.is_constant():
                continue
            if any(existing.polynomial.structural_match(polynomial) for existing in conditions):
                continue
            ndg = NDGCondition(polynomial)
            if not self.explain(ndg):
                logger.warning("No readable explanation for NDG condition %s != 0", polynomial)
            conditions.append(ndg)
        return conditions


apply_debug_logging(globals(), logger=logger, skip=["NDGCondition"])
