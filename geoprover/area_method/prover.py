"""Decide a statement by eliminating constructed points from area expressions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .. import conditions as cond
from ..config import ProverConfig, get_prover_config
from ..logging_utils import apply_debug_logging
from ..polynomials import Polynomial, Variable
from ..protocol import ConstructionProtocol, ConstructionStep, Point
from ..transform import Transformer
from .elimination import AreaMethodContext
from .expressions import (
    ZERO,
    AMExpression,
    Difference,
    Fraction,
    GeometricQuantity,
    PythagorasDifference,
    SegmentRatio,
    SignedArea,
    SumOfProducts,
    UnknownStatement,
    eliminate,
    reduce_to_right_associative_form,
    reduce_to_single_fraction,
    simplify,
    to_sum_of_products,
)

logger = logging.getLogger(__name__)


@dataclass
class AreaStatement:
    """Equality ``lhs = rhs`` between area-method expressions."""

    lhs: AMExpression
    rhs: AMExpression = ZERO

    def expression(self) -> AMExpression:
        return self.lhs if self.rhs == ZERO else Difference(self.lhs, self.rhs)


def statement_expression(statement: ConstructionStep) -> AMExpression:
    """Area expression that vanishes exactly when ``statement`` holds."""

    d = statement.data
    if statement.kind == "true":
        return ZERO
    if statement.kind == "collinear_points":
        return SignedArea(d["A"], d["B"], d["C"])
    if statement.kind == "parallel_lines":
        return Difference(SignedArea(d["A"], d["C"], d["D"]), SignedArea(d["B"], d["C"], d["D"]))
    if statement.kind == "perpendicular_lines":
        return Difference(
            PythagorasDifference(d["A"], d["C"], d["D"]), PythagorasDifference(d["B"], d["C"], d["D"])
        )
    if statement.kind == "congruent_segments":
        return Difference(
            PythagorasDifference(d["A"], d["B"], d["A"]), PythagorasDifference(d["C"], d["D"], d["C"])
        )
    raise UnknownStatement(f"statement {statement.kind} has no area-method form")


@dataclass
class AreaProof:
    holds: bool
    normal_form: SumOfProducts
    polynomial: Optional[Polynomial] = None
    trace: List[Tuple[str, AMExpression]] = field(default_factory=list)
    ndg_polynomials: List[Polynomial] = field(default_factory=list)


class AreaMethodProver:
    def __init__(
        self,
        protocol: ConstructionProtocol,
        config: Optional[ProverConfig] = None,
        statement: Optional[AreaStatement] = None,
    ) -> None:
        self.protocol = protocol
        self.config = config or get_prover_config()
        self.statement = statement
        self.context = AreaMethodContext.from_protocol(protocol)
        self._ratio_variables: Dict[GeometricQuantity, Variable] = {}

    def _initial_expression(self) -> AMExpression:
        if self.statement is not None:
            expr = self.statement.expression()
        elif self.protocol.statement is not None:
            expr = statement_expression(self.protocol.statement)
        else:
            raise UnknownStatement("protocol has no theorem statement")
        unknown = sorted(label for label in expr.points() if label not in self.protocol)
        if unknown:
            raise UnknownStatement(f"statement uses unknown point(s) {', '.join(unknown)}")
        return expr

    def eliminate_constructed(
        self, expr: AMExpression, trace: Optional[List[Tuple[str, AMExpression]]] = None, before: Optional[str] = None
    ) -> AMExpression:
        """Eliminate constructed points in reverse order, simplifying after each step.

        With ``before`` only the points constructed earlier than it are visited.
        """

        order = self.context.order
        if before is not None:
            order = order[: order.index(before)]
        expr = simplify(expr, self.config.max_simplify_steps)
        for label in reversed(order):
            if not self.context.mentions(expr, label):
                continue
            expr = simplify(eliminate(expr, label, self.context), self.config.max_simplify_steps)
            logger.debug("Eliminated %s: %s", label, expr)
            if trace is not None:
                trace.append((label, expr))
        return expr

    def normal_form(self, expr: AMExpression) -> SumOfProducts:
        single = reduce_to_single_fraction(expr)
        numerator = single.numerator if isinstance(single, Fraction) else single
        return to_sum_of_products(reduce_to_right_associative_form(numerator))

    # ------------------------------------------------------------------
    # Coordinates

    def _ensure_coordinates(self) -> None:
        if all(point.has_coordinates for point in self.protocol.points()):
            return
        Transformer(
            self.protocol,
            use_best_instantiation=self.config.use_best_instantiation,
            align_base_points=self.config.align_base_points,
        ).transform_all()

    def _atom_polynomial(self, atom: GeometricQuantity) -> Polynomial:
        if isinstance(atom, SegmentRatio):
            if not self.context.is_parameter(atom):
                raise UnknownStatement(f"ratio {atom} is not a free parameter")
            if atom not in self._ratio_variables:
                self._ratio_variables[atom] = self.protocol.next_u()
            return Polynomial.variable(self._ratio_variables[atom])
        template = cond.signed_area if isinstance(atom, SignedArea) else cond.pythagoras_difference
        roles = ("A", "B", "C")
        coordinates = {}
        for role, label in zip(roles, atom.labels):
            point = self.protocol.get(label)
            if not isinstance(point, Point) or label not in self.context.free_points:
                raise UnknownStatement(f"{label} is still present after elimination")
            coordinates[role] = point.coordinates
        return template(*roles).instantiate(coordinates)

    def to_polynomial(self, form: SumOfProducts) -> Polynomial:
        self._ensure_coordinates()
        total = Polynomial()
        for term in form.terms:
            product = Polynomial.constant(term.coefficient)
            for atom in term.atoms:
                product = product * self._atom_polynomial(atom)
            total = total + product
        return total

    # ------------------------------------------------------------------

    def ndg_polynomials(self) -> List[Polynomial]:
        found: List[Polynomial] = []
        position = 0
        # Eliminating a denominator can use further points and their lemmas.
        while position < len(self.context.used):
            point = self.context.used[position]
            position += 1
            for denominator in self.context.denominators(point):
                expr = self.eliminate_constructed(denominator, before=point)
                polynomial = self.to_polynomial(self.normal_form(expr))
                if not polynomial.is_constant():
                    found.append(polynomial)
        return found

    def prove(self) -> AreaProof:
        trace: List[Tuple[str, AMExpression]] = []
        expr = self.eliminate_constructed(self._initial_expression(), trace)
        form = self.normal_form(expr)
        logger.info("Area method normal form has %d term(s)", len(form.terms))
        polynomial = None
        holds = form.is_zero()
        if not holds:
            polynomial = self.to_polynomial(form)
            holds = polynomial.is_zero()
        return AreaProof(holds, form, polynomial, trace, self.ndg_polynomials())


apply_debug_logging(globals(), logger=logger)
