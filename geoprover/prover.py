"""Prover façade: runs one proving method and reports a verdict with its NDG conditions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .area_method.expressions import UnknownStatement
from .area_method.prover import AreaMethodProver, AreaStatement
from .config import ProverConfig, get_prover_config
from .ndg import NDGCondition, NDGDeriver
from .polynomials import Polynomial, Variable
from .protocol import ConstructionError, ConstructionProtocol
from .transform import Transformer
from .validate import Entry, build_protocol, format_diagnostics
from .witness import find_counterexample
from .wu import EliminationLimitExceeded, reduce_statement, triangulate

logger = logging.getLogger(__name__)


class Verdict(Enum):
    HOLDS = "holds"
    HOLDS_UNDER_NDG = "holds under NDG conditions"
    DOES_NOT_HOLD = "does not hold"
    INCONCLUSIVE = "inconclusive"


@dataclass
class ProofResult:
    verdict: Verdict
    method: str
    ndg_conditions: List[NDGCondition] = field(default_factory=list)
    remainder: Optional[Polynomial] = None
    counterexample: Optional[Dict[Variable, int]] = None
    diagnostics: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def proved(self) -> bool:
        return self.verdict in (Verdict.HOLDS, Verdict.HOLDS_UNDER_NDG)

    def summary(self) -> str:
        lines = [f"{self.method}: {self.verdict.value}"]
        lines.extend(f"  provided that {condition}" for condition in self.ndg_conditions)
        if self.remainder is not None and not self.remainder.is_zero():
            lines.append(f"  remainder: {self.remainder}")
        lines.extend(f"  note: {note}" for note in self.notes)
        return "\n".join(lines)


def _holds(method: str, ndg_conditions: List[NDGCondition]) -> ProofResult:
    verdict = Verdict.HOLDS_UNDER_NDG if ndg_conditions else Verdict.HOLDS
    return ProofResult(verdict, method, ndg_conditions)


def _does_not_hold(method: str, remainder: Polynomial, config: ProverConfig) -> ProofResult:
    witness = find_counterexample(
        remainder, seed=config.counterexample_seed, attempts=config.counterexample_attempts
    )
    return ProofResult(Verdict.DOES_NOT_HOLD, method, remainder=remainder, counterexample=witness)


def prove_wu(protocol: ConstructionProtocol, config: ProverConfig) -> ProofResult:
    transformer = Transformer(
        protocol,
        use_best_instantiation=config.use_best_instantiation,
        align_base_points=config.align_base_points,
    )
    system = transformer.transform_all()
    statements = transformer.statement_polynomials()
    if not statements:
        return ProofResult(Verdict.INCONCLUSIVE, "wu", notes=["protocol has no theorem statement"])

    try:
        triangular = triangulate(system, config.max_terms)
        remainders = [reduce_statement(s, triangular, config.max_terms) for s in statements]
    except EliminationLimitExceeded as exc:
        logger.warning("Wu elimination stopped: %s", exc)
        return ProofResult(Verdict.INCONCLUSIVE, "wu", notes=[str(exc)])

    if triangular.is_inconsistent():
        return ProofResult(Verdict.INCONCLUSIVE, "wu", notes=["construction hypotheses are contradictory"])

    for remainder in remainders:
        if remainder.is_zero():
            continue
        if remainder.leading_variable() is not None:
            return ProofResult(
                Verdict.INCONCLUSIVE,
                "wu",
                remainder=remainder,
                notes=["remainder still depends on constructed coordinates"],
            )
        return _does_not_hold("wu", remainder, config)

    deriver = NDGDeriver(protocol, config.max_ndg_points)
    candidates = triangular.initials() + [p for p, _ in transformer.rename_conditions]
    result = _holds("wu", deriver.explain_all(candidates))
    result.remainder = Polynomial()
    if triangular.residual:
        result.notes.append(f"{len(triangular.residual)} parameter constraint(s) left by triangulation")
    return result


def prove_area(
    protocol: ConstructionProtocol, config: ProverConfig, statement: Optional[AreaStatement] = None
) -> ProofResult:
    try:
        proof = AreaMethodProver(protocol, config, statement).prove()
    except UnknownStatement as exc:
        logger.info("Area method is inconclusive: %s", exc)
        return ProofResult(Verdict.INCONCLUSIVE, "area", notes=[str(exc)])
    if not proof.holds:
        return _does_not_hold("area", proof.polynomial, config)
    deriver = NDGDeriver(protocol, config.max_ndg_points)
    return _holds("area", deriver.explain_all(proof.ndg_polynomials))


def prove(
    protocol: ConstructionProtocol,
    method: str = "wu",
    config: Optional[ProverConfig] = None,
    statement: Optional[AreaStatement] = None,
) -> ProofResult:
    """Decide the protocol's statement with ``method`` (``"wu"`` or ``"area"``).

    ``statement`` overrides the protocol statement for the area method.
    """

    config = config or get_prover_config()
    logger.info("Proving with %s method over %d construction steps", method, len(protocol))
    if method == "wu":
        if statement is not None:
            raise ValueError("explicit area statements need method='area'")
        return prove_wu(protocol, config)
    if method == "area":
        return prove_area(protocol, config, statement)
    raise ValueError(f"unknown proving method {method!r}")


def prove_entries(
    entries: Iterable[Entry],
    statement: Optional[Tuple[str, Mapping[str, str]]] = None,
    method: str = "wu",
    config: Optional[ProverConfig] = None,
) -> ProofResult:
    """Build the protocol from ``(label, kind, data)`` entries and prove it."""

    protocol, diagnostics = build_protocol(entries, statement)
    if diagnostics:
        return _rejected(method, diagnostics)
    return prove(protocol, method, config)


def _rejected(method: str, diagnostics: List[ConstructionError]) -> ProofResult:
    logger.warning("Protocol has %d rejected step(s)", len(diagnostics))
    return ProofResult(
        Verdict.INCONCLUSIVE,
        method,
        diagnostics=format_diagnostics(diagnostics),
        notes=["construction protocol is invalid"],
    )


__all__ = ["ProofResult", "Verdict", "prove", "prove_area", "prove_entries", "prove_wu"]
