import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from .protocol import ConstructionError, ConstructionProtocol, StepCheck, make_step

logger = logging.getLogger(__name__)

Entry = Tuple[str, str, Mapping[str, str]]


def build_protocol(
    entries: Iterable[Entry],
    statement: Optional[Tuple[str, Mapping[str, str]]] = None,
) -> Tuple[ConstructionProtocol, List[ConstructionError]]:
    """Append ``(label, kind, data)`` entries in order, collecting every rejected step.

    A rejected step is reported and skipped; steps that depend on it are then
    reported as well, so one pass lists every problem of a faulty protocol.
    """

    protocol = ConstructionProtocol()
    diagnostics: List[ConstructionError] = []
    for label, kind, data in entries:
        try:
            protocol.append(make_step(label, kind, dict(data)))
        except ConstructionError as exc:
            logger.warning("Rejected step %s (%s): %s", label, kind, exc)
            diagnostics.append(exc)
    if statement is not None:
        kind, data = statement
        try:
            protocol.set_statement(make_step("statement", kind, dict(data)))
        except ConstructionError as exc:
            logger.warning("Rejected statement %s: %s", kind, exc)
            diagnostics.append(exc)
    return protocol, diagnostics


def validate_protocol(protocol: ConstructionProtocol) -> List[Tuple[str, StepCheck]]:
    failures = []
    for step in protocol:
        check = protocol.validate(step)
        if not check.ok:
            failures.append((step.label, check))
    if protocol.statement is not None:
        check = protocol.validate(protocol.statement)
        if not check.ok:
            failures.append((protocol.statement.label, check))
    return failures


def format_diagnostics(diagnostics: Sequence[ConstructionError]) -> List[str]:
    return [f"[{exc.label} {exc.kind}] {exc}" for exc in diagnostics]
