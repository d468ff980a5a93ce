"""Construction protocol: the ordered, validated dependency graph of a figure."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from .kinds import POINT, STATEMENT, KindSpec, accepts, get_kind
from .polynomials import Variable

logger = logging.getLogger(__name__)


class PointState(Enum):
    UNCHANGED = "unchanged"
    RENAMED = "renamed"
    MODIFIED = "modified"


class ConstructionError(ValueError):
    """A step could not be added to a protocol."""

    def __init__(
        self,
        message: str,
        *,
        label: Optional[str] = None,
        kind: Optional[str] = None,
        dependency: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.label = label
        self.kind = kind
        self.dependency = dependency


class OrderViolation(ConstructionError):
    """A dependency is missing or was not constructed strictly earlier."""


class InvalidConstruction(ConstructionError):
    """The step is malformed: unknown kind, duplicate label, wrong role category."""


@dataclass
class StepCheck:
    ok: bool
    message: str = ""
    dependency: Optional[str] = None
    order: bool = False

    def error(self, step: "ConstructionStep") -> ConstructionError:
        cls = OrderViolation if self.order else InvalidConstruction
        return cls(self.message, label=step.label, kind=step.kind, dependency=self.dependency)


@dataclass(eq=False)
class ConstructionStep:
    label: str
    kind: str
    data: Dict[str, str] = field(default_factory=dict)
    index: int = -1
    members: List[str] = field(default_factory=list)

    @property
    def spec(self) -> KindSpec:
        return get_kind(self.kind)

    @property
    def category(self) -> str:
        return self.spec.category

    def dependencies(self) -> List[str]:
        seen: List[str] = []
        for role in self.spec.role_names:
            label = self.data[role]
            if label not in seen:
                seen.append(label)
        return seen

    def describe(self) -> str:
        return self.spec.description.format(label=self.label, **self.data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.label!r}, {self.kind!r}, index={self.index})"


@dataclass(eq=False)
class Point(ConstructionStep):
    x: Optional[Variable] = None
    y: Optional[Variable] = None
    state: PointState = PointState.UNCHANGED

    @property
    def has_coordinates(self) -> bool:
        return self.x is not None and self.y is not None

    @property
    def coordinates(self):
        return self.x, self.y

    def copy(self) -> "Point":
        """Detached copy: same label and coordinates, its own mutable state."""

        return Point(
            self.label,
            self.kind,
            dict(self.data),
            index=self.index,
            x=self.x,
            y=self.y,
            state=self.state,
        )


def make_step(label: str, kind: str, data: Optional[Dict[str, str]] = None) -> ConstructionStep:
    """Build a step of ``kind`` after checking its payload carries every role."""

    try:
        spec = get_kind(kind)
    except KeyError as exc:
        raise InvalidConstruction(str(exc.args[0]), label=label, kind=kind) from None
    payload = dict(data or {})
    missing = [role for role in spec.role_names if role not in payload]
    if missing:
        raise InvalidConstruction(
            f"{kind} {label} is missing role(s) {', '.join(missing)}", label=label, kind=kind
        )
    extra = [key for key in payload if key not in spec.role_names]
    if extra:
        raise InvalidConstruction(
            f"{kind} {label} does not take role(s) {', '.join(extra)}", label=label, kind=kind
        )
    cls = Point if spec.category == POINT else ConstructionStep
    return cls(label, kind, payload)


class ConstructionProtocol:
    """Ordered steps with O(1) lookup by label and the u/x variable counters."""

    def __init__(self, u_index: int = 1, x_index: int = 1) -> None:
        self._steps: List[ConstructionStep] = []
        self._by_label: Dict[str, ConstructionStep] = {}
        self.statement: Optional[ConstructionStep] = None
        self.u_index = u_index
        self.x_index = x_index

    # ------------------------------------------------------------------
    # Access

    @property
    def steps(self) -> List[ConstructionStep]:
        return list(self._steps)

    def points(self) -> List[Point]:
        return [step for step in self._steps if isinstance(step, Point)]

    def get(self, label: str) -> Optional[ConstructionStep]:
        return self._by_label.get(label)

    def __contains__(self, label: object) -> bool:
        return label in self._by_label

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[ConstructionStep]:
        return iter(self._steps)

    # ------------------------------------------------------------------
    # Variables

    def next_u(self) -> Variable:
        variable = Variable("u", self.u_index)
        self.u_index += 1
        return variable

    def next_x(self) -> Variable:
        variable = Variable("x", self.x_index)
        self.x_index += 1
        return variable

    # ------------------------------------------------------------------
    # Validation

    def _check(self, step: ConstructionStep, before: int) -> StepCheck:
        spec = step.spec
        for role, expected in spec.roles:
            label = step.data[role]
            target = self._by_label.get(label)
            if target is None:
                return StepCheck(False, f"{step.label} references unknown object {label}", label, order=True)
            if target.index >= before:
                return StepCheck(
                    False,
                    f"{step.label} references {label} which is constructed at index {target.index}, "
                    f"not before {before}",
                    label,
                    order=True,
                )
            if not accepts(expected, target.category):
                return StepCheck(
                    False,
                    f"role {role} of {step.label} expects a {expected}, {label} is a {target.category}",
                    label,
                )
        distinct = [step.data[role] for role in spec.distinct]
        if len(set(distinct)) != len(distinct):
            return StepCheck(False, f"{step.label} needs distinct {', '.join(distinct)}")
        if spec.check is not None:
            message = spec.check(step, self)
            if message:
                return StepCheck(False, message)
        return StepCheck(True)

    def validate(self, step: ConstructionStep) -> StepCheck:
        """Re-check dependencies of ``step`` against its own (or the next) index."""

        before = step.index if step.index >= 0 else len(self._steps)
        return self._check(step, before)

    # ------------------------------------------------------------------
    # Mutation

    def append(self, step: ConstructionStep) -> int:
        """Append ``step`` and return its index; the graph is unchanged on failure."""

        if step.category == STATEMENT:
            self.set_statement(step)
            return step.index
        if step.label in self._by_label:
            raise InvalidConstruction(
                f"label {step.label} is already used", label=step.label, kind=step.kind
            )
        check = self._check(step, len(self._steps))
        if not check.ok:
            raise check.error(step)

        step.index = len(self._steps)
        step.members = [step.data[role] for role in step.spec.members]
        self._steps.append(step)
        self._by_label[step.label] = step
        for role in step.spec.on_sets:
            owner = self._by_label[step.data[role]]
            if step.label not in owner.members:
                owner.members.append(step.label)
        logger.debug("Appended %s at index %d", step.label, step.index)
        return step.index

    def add_seed(self, point: Point) -> Point:
        """Register a detached point copy without dependency checks (auxiliary protocols)."""

        seed = point.copy()
        seed.index = len(self._steps)
        self._steps.append(seed)
        self._by_label[seed.label] = seed
        return seed

    def set_statement(self, step: ConstructionStep) -> None:
        if step.category != STATEMENT:
            raise InvalidConstruction(
                f"{step.kind} is not a theorem statement", label=step.label, kind=step.kind
            )
        check = self._check(step, len(self._steps))
        if not check.ok:
            raise check.error(step)
        step.index = len(self._steps)
        self.statement = step

    def clear(self, u_index: int = 1, x_index: int = 1) -> None:
        self._steps.clear()
        self._by_label.clear()
        self.statement = None
        self.u_index = u_index
        self.x_index = x_index


__all__ = [
    "ConstructionError",
    "ConstructionProtocol",
    "ConstructionStep",
    "InvalidConstruction",
    "OrderViolation",
    "Point",
    "PointState",
    "StepCheck",
    "make_step",
]
