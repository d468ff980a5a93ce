"""Wu-style triangulation and successive pseudo-division."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from .logging_utils import apply_debug_logging
from .polynomials import Polynomial, Variable

logger = logging.getLogger(__name__)


class EliminationLimitExceeded(RuntimeError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"intermediate polynomial has {size} terms (limit {limit})")
        self.size = size
        self.limit = limit


@dataclass
class TriangularEntry:
    variable: Variable
    polynomial: Polynomial
    source: str

    @property
    def initial(self) -> Polynomial:
        return self.polynomial.coefficient(self.variable, self.polynomial.degree(self.variable))


@dataclass
class TriangularSystem:
    """Ascending chain ordered by dependent variable index, plus parameter-only leftovers."""

    entries: List[TriangularEntry] = field(default_factory=list)
    residual: List[Polynomial] = field(default_factory=list)

    def initials(self) -> List[Polynomial]:
        return [entry.initial for entry in self.entries]

    def variables(self) -> List[Variable]:
        return [entry.variable for entry in self.entries]

    def is_inconsistent(self) -> bool:
        return any(polynomial.is_constant() for polynomial in self.residual)

    def __len__(self) -> int:
        return len(self.entries)


def _dependent(polynomial: Polynomial) -> List[Variable]:
    return [v for v in polynomial.variables() if isinstance(v, Variable) and not v.is_free]


def _guard(polynomial: Polynomial, max_terms: int) -> Polynomial:
    if len(polynomial) > max_terms:
        raise EliminationLimitExceeded(len(polynomial), max_terms)
    return polynomial


def triangulate(polynomials: Iterable[Tuple[Polynomial, str]], max_terms: int = 20000) -> TriangularSystem:
    """Bring the hypotheses to triangular form, eliminating from the highest ``x`` index down.

    For each variable the polynomial of lowest degree in it (fewest terms on a
    tie, earliest on a further tie) becomes the pivot and the others are
    replaced by their pseudo-remainders until only the pivot mentions the
    variable.
    """

    pending = [(p, source) for p, source in polynomials if not p.is_zero()]
    variables = sorted({v for p, _ in pending for v in _dependent(p)}, key=lambda v: v.index, reverse=True)
    chain: List[TriangularEntry] = []

    for variable in variables:
        while True:
            holders = [item for item in pending if item[0].degree(variable) > 0]
            if not holders:
                break
            pivot = min(holders, key=lambda item: (item[0].degree(variable), len(item[0])))
            if len(holders) == 1:
                chain.append(TriangularEntry(variable, pivot[0], pivot[1]))
                pending = [item for item in pending if item is not pivot]
                break
            reduced = []
            for item in pending:
                if item is pivot or item[0].degree(variable) == 0:
                    reduced.append(item)
                    continue
                remainder = _guard(item[0].pseudo_remainder(pivot[0], variable), max_terms)
                if not remainder.is_zero():
                    reduced.append((remainder, item[1]))
            pending = reduced
        logger.debug("Eliminated %s, %d polynomial(s) left", variable, len(pending))

    chain.reverse()
    triangular = TriangularSystem(chain, [p for p, _ in pending])
    if triangular.residual:
        logger.info("Triangulation left %d parameter-only polynomial(s)", len(triangular.residual))
    return triangular


def reduce_statement(statement: Polynomial, triangular: TriangularSystem, max_terms: int = 20000) -> Polynomial:
    """Successive pseudo-remainder of ``statement`` by the chain, highest variable first."""

    remainder = statement
    for entry in reversed(triangular.entries):
        if remainder.is_zero():
            break
        if remainder.degree(entry.variable) == 0:
            continue
        remainder = _guard(remainder.pseudo_remainder(entry.polynomial, entry.variable), max_terms)
    return remainder


apply_debug_logging(globals(), logger=logger)
