"""Instantiation pass: turns a construction protocol into a polynomial system.

Each point receives coordinate variables (``u`` for free coordinates, ``x``
for dependent ones) and its condition templates are instantiated with the
coordinates of the points playing each role.  A condition of the shape
``a*v + b`` where ``b == -a*w`` for a variable ``w`` already in use does not
enter the system: the point's coordinate ``v`` is simply renamed to ``w`` and
``a`` (when not constant) is recorded as a renaming condition.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, cast

from .kinds import POINT, STATEMENT, Alternatives, Condition
from .polynomials import MissingRoleError, Polynomial, Variable, var
from .protocol import ConstructionProtocol, ConstructionStep, Point, PointState

logger = logging.getLogger(__name__)


class TransformError(RuntimeError):
    """A generator point has no coordinates when its dependent is transformed."""

    def __init__(self, message: str, *, label: Optional[str] = None, generator: Optional[str] = None) -> None:
        super().__init__(message)
        self.label = label
        self.generator = generator


class PolynomialSystem:
    """Ordered hypothesis polynomials, each tagged with the label that produced it."""

    def __init__(self) -> None:
        self.entries: List[Tuple[Polynomial, str]] = []

    def add(self, polynomial: Polynomial, source: str) -> None:
        self.entries.append((polynomial, source))

    def truncate(self, size: int) -> None:
        del self.entries[size:]

    def polynomials(self) -> List[Polynomial]:
        return [polynomial for polynomial, _ in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Tuple[Polynomial, str]]:
        return iter(self.entries)


@dataclass(frozen=True)
class _Snapshot:
    x: Optional[Variable]
    y: Optional[Variable]
    state: PointState
    u_index: int
    x_index: int
    system_size: int
    renames: int


class Transformer:
    def __init__(
        self,
        protocol: ConstructionProtocol,
        system: Optional[PolynomialSystem] = None,
        *,
        use_best_instantiation: bool = True,
        align_base_points: bool = False,
    ) -> None:
        self.protocol = protocol
        self.system = system if system is not None else PolynomialSystem()
        self.use_best_instantiation = use_best_instantiation
        self.align_base_points = align_base_points
        self.rename_conditions: List[Tuple[Polynomial, str]] = []

    # ------------------------------------------------------------------
    # Coordinates

    def _assign_coordinates(self, point: Point) -> None:
        free = point.spec.free_coordinates
        if free == 2:
            point.x = self.protocol.next_u()
            base = self._aligned_y(point)
            point.y = base if base is not None else self.protocol.next_u()
        elif free == 1:
            point.x = self.protocol.next_u()
            point.y = self.protocol.next_x()
        else:
            point.x = self.protocol.next_x()
            point.y = self.protocol.next_x()
        point.state = PointState.UNCHANGED

    def _aligned_y(self, point: Point) -> Optional[Variable]:
        """With aligned base points the second free point shares the first one's ``y``."""

        if not self.align_base_points:
            return None
        free_points = [p for p in self.protocol.points() if p.kind == "free_point"]
        if len(free_points) >= 2 and free_points[1] is point and free_points[0].y is not None:
            return free_points[0].y
        return None

    def _coordinates(self, step: ConstructionStep, condition: Condition) -> Dict[str, Tuple[Variable, Variable]]:
        mapping: Dict[str, Tuple[Variable, Variable]] = {}
        for role, label in condition.roles.items():
            target = step if label == step.label else self.protocol.get(label)
            if not isinstance(target, Point) or not target.has_coordinates:
                raise TransformError(
                    f"generator {label} of {step.label} has no coordinates",
                    label=step.label,
                    generator=label,
                )
            mapping[role] = target.coordinates
        return mapping

    def _require_generators(self, step: ConstructionStep, alternative: Sequence[Condition]) -> None:
        for condition in alternative:
            for label in condition.roles.values():
                if label == step.label:
                    continue
                target = self.protocol.get(label)
                if not isinstance(target, Point) or not target.has_coordinates:
                    raise TransformError(
                        f"generator {label} of {step.label} has no coordinates",
                        label=step.label,
                        generator=label,
                    )

    # ------------------------------------------------------------------
    # Renaming

    def _try_rename(self, point: Point, polynomial: Polynomial) -> Optional[Tuple[Variable, Variable]]:
        """Rename a dependent coordinate of ``point`` pinned by ``polynomial`` to a known variable."""

        for coord in ("x", "y"):
            own = getattr(point, coord)
            if own is None or own.is_free or polynomial.degree(own) != 1:
                continue
            a = polynomial.coefficient(own, 1)
            if own in a.variables():
                continue
            b = polynomial.coefficient(own, 0)
            for target in sorted(b.variables(), key=lambda v: v.sort_key()):
                if target == own or target in a.variables():
                    continue
                if (a * var(target) + b).is_zero():
                    setattr(point, coord, target)
                    point.state = PointState.RENAMED
                    if not a.is_constant():
                        self.rename_conditions.append((a, point.label))
                    logger.debug("Renamed %s of %s: %s -> %s", coord, point.label, own, target)
                    return own, target
        return None

    def _propagate_rename(self, renaming: Tuple[Variable, Variable], system_start: int, renames_start: int) -> None:
        # Conditions of the same step added before the renaming still use the old variable.
        mapping = dict([renaming])
        kept = []
        for polynomial, source in self.system.entries[system_start:]:
            renamed = polynomial.rename(mapping)
            if not renamed.is_zero():
                kept.append((renamed, source))
        self.system.entries[system_start:] = kept
        self.rename_conditions[renames_start:] = [
            (polynomial.rename(mapping), source) for polynomial, source in self.rename_conditions[renames_start:]
        ]

    # ------------------------------------------------------------------
    # Transformation

    def alternatives(self, step: ConstructionStep) -> Alternatives:
        conditions = step.spec.conditions
        return conditions(step, self.protocol) if conditions is not None else []

    def transform(self, step: ConstructionStep, alternative: Optional[Sequence[Condition]] = None) -> List[Polynomial]:
        """Instantiate the conditions of ``step`` and add them to the system.

        Lines and circles contribute nothing by themselves; their conditions
        are instantiated when a point is constructed on them.
        """

        if step.category == STATEMENT:
            raise TransformError(f"{step.label} is a statement, use statement_polynomials()", label=step.label)
        if step.category != POINT:
            return []
        point = cast(Point, step)
        if alternative is None:
            options = self.alternatives(point)
            if not options and point.spec.conditions is not None:
                raise TransformError(f"no usable generators for {point.label}", label=point.label)
            alternative = options[0] if options else []
        self._require_generators(point, alternative)

        self._assign_coordinates(point)
        system_start = len(self.system)
        renames_start = len(self.rename_conditions)
        for condition in alternative:
            try:
                polynomial = condition.template.instantiate(self._coordinates(point, condition))
            except MissingRoleError as exc:
                raise TransformError(str(exc), label=point.label) from exc
            if polynomial.is_zero():
                continue
            renaming = self._try_rename(point, polynomial)
            if renaming is not None:
                self._propagate_rename(renaming, system_start, renames_start)
                continue
            self.system.add(polynomial, point.label)
        added = [polynomial for polynomial, _ in self.system.entries[system_start:]]
        if added and point.state is PointState.UNCHANGED:
            point.state = PointState.MODIFIED
        logger.debug("Transformed %s: %d polynomial(s), state %s", point.label, len(added), point.state.value)
        return added

    def transform_all(self) -> PolynomialSystem:
        logger.info("Transforming protocol with %d steps", len(self.protocol))
        for step in self.protocol:
            if isinstance(step, Point) and step.has_coordinates:
                continue
            alternative = None
            if isinstance(step, Point) and self.use_best_instantiation:
                options = self.alternatives(step)
                if len(options) > 1:
                    best = self.find_best_instantiation(step, options)
                    alternative = options[best if best is not None else 0]
            self.transform(step, alternative)
        return self.system

    def statement_polynomials(self) -> List[Polynomial]:
        statement = self.protocol.statement
        if statement is None:
            return []
        polynomials = []
        for alternative in statement.spec.conditions(statement, self.protocol)[:1]:
            self._require_generators(statement, alternative)
            for condition in alternative:
                polynomials.append(condition.template.instantiate(self._coordinates(statement, condition)))
        return polynomials

    # ------------------------------------------------------------------
    # Speculative search

    def _snapshot(self, point: Point) -> _Snapshot:
        return _Snapshot(
            point.x,
            point.y,
            point.state,
            self.protocol.u_index,
            self.protocol.x_index,
            len(self.system),
            len(self.rename_conditions),
        )

    def _restore(self, point: Point, snapshot: _Snapshot) -> None:
        point.x = snapshot.x
        point.y = snapshot.y
        point.state = snapshot.state
        self.protocol.u_index = snapshot.u_index
        self.protocol.x_index = snapshot.x_index
        self.system.truncate(snapshot.system_size)
        del self.rename_conditions[snapshot.renames:]

    @contextmanager
    def _speculative(self, point: Point) -> Iterator[_Snapshot]:
        snapshot = self._snapshot(point)
        try:
            yield snapshot
        finally:
            self._restore(point, snapshot)

    def find_best_instantiation(
        self, point: Point, candidates: Optional[Alternatives] = None
    ) -> Optional[int]:
        """Index of the first candidate whose transformation renames a coordinate.

        Every trial runs inside a transaction that is always rolled back, so
        the protocol, the system and the point look exactly as before the
        call whatever the outcome; the caller commits by transforming with
        the returned candidate.
        """

        options = candidates if candidates is not None else self.alternatives(point)
        for position, alternative in enumerate(options):
            with self._speculative(point):
                point.x = point.y = None
                try:
                    self.transform(point, alternative)
                except TransformError:
                    logger.debug("Candidate %d for %s has untransformed generators", position, point.label)
                    continue
                if point.state is PointState.RENAMED:
                    logger.debug("Candidate %d renames a coordinate of %s", position, point.label)
                    return position
        return None


__all__ = ["PolynomialSystem", "TransformError", "Transformer"]
