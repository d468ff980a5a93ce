"""Registry of construction kinds.

A construction step is a tagged variant ``(kind, data)``; everything that
differs between kinds lives in the :class:`KindSpec` registered for it:
the roles of its payload, which condition templates describe it, how points
lying on it are constrained (for lines and circles), extra validity checks
and the human-readable description.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import TYPE_CHECKING, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from . import conditions as cond
from .conditions import ORIGIN
from .polynomials import SymbolicPolynomial

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .protocol import ConstructionProtocol, ConstructionStep

POINT = "point"
LINE = "line"
CIRCLE = "circle"
STATEMENT = "statement"
SET = "set"  # role accepting a line or a circle


class Condition(NamedTuple):
    """A template together with the protocol label bound to each of its roles."""

    template: SymbolicPolynomial
    roles: Dict[str, str]


Alternatives = List[List[Condition]]
ConditionsFn = Callable[["ConstructionStep", "ConstructionProtocol"], Alternatives]
MembershipFn = Callable[["ConstructionStep", str, "ConstructionProtocol", int], List[Condition]]
CheckFn = Callable[["ConstructionStep", "ConstructionProtocol"], Optional[str]]


@dataclass(frozen=True)
class KindSpec:
    name: str
    category: str
    roles: Tuple[Tuple[str, str], ...]
    description: str
    free_coordinates: int = 0
    members: Tuple[str, ...] = ()
    on_sets: Tuple[str, ...] = ()
    distinct: Tuple[str, ...] = ()
    conditions: Optional[ConditionsFn] = None
    membership: Optional[MembershipFn] = None
    check: Optional[CheckFn] = None

    @property
    def role_names(self) -> Tuple[str, ...]:
        return tuple(role for role, _ in self.roles)


KINDS: Dict[str, KindSpec] = {}


def register(spec: KindSpec) -> KindSpec:
    KINDS[spec.name] = spec
    return spec


def get_kind(name: str) -> KindSpec:
    try:
        return KINDS[name]
    except KeyError:
        raise KeyError(f"unknown construction kind {name!r}") from None


# ----------------------------------------------------------------------
# Helpers


def _preceding_members(set_step: "ConstructionStep", protocol: "ConstructionProtocol", before: int) -> List[str]:
    found = []
    for label in set_step.members:
        member = protocol.get(label)
        if member is not None and 0 <= member.index < before:
            found.append(label)
    return found


def _member_pairs(set_step: "ConstructionStep", protocol: "ConstructionProtocol", before: int) -> List[Tuple[str, str]]:
    return list(combinations(_preceding_members(set_step, protocol, before), 2))


def _own(step: "ConstructionStep", **roles: str) -> Dict[str, str]:
    mapping = {ORIGIN: step.label}
    mapping.update({role: step.data[key] for role, key in roles.items()})
    return mapping


def _self_conditional(template_fn: Callable[[], Tuple[SymbolicPolynomial, SymbolicPolynomial]], **roles: str) -> ConditionsFn:
    def conditions(step, protocol):
        x_cond, y_cond = template_fn()
        mapping = _own(step, **roles)
        return [[Condition(x_cond, mapping), Condition(y_cond, dict(mapping))]]

    return conditions


def _on_set(role: str) -> ConditionsFn:
    def conditions(step, protocol):
        owner = protocol.get(step.data[role])
        spec = get_kind(owner.kind)
        return [[c] for c in spec.membership(owner, step.label, protocol, step.index)]

    return conditions


def _intersection(step, protocol) -> Alternatives:
    first = protocol.get(step.data["first"])
    second = protocol.get(step.data["second"])
    first_options = get_kind(first.kind).membership(first, step.label, protocol, step.index)
    second_options = get_kind(second.kind).membership(second, step.label, protocol, step.index)
    return [[c1, c2] for c1 in first_options for c2 in second_options]


def _foot(step, protocol) -> Alternatives:
    mapping = _own(step, P="point", A="a", B="b")
    return [[
        Condition(cond.collinear(ORIGIN, "A", "B"), mapping),
        Condition(cond.perpendicular("P", ORIGIN, "A", "B"), dict(mapping)),
    ]]


def _circle_center(step, protocol) -> Alternatives:
    mapping = _own(step, A="a", B="b", C="c")
    return [[
        Condition(cond.equidistant(ORIGIN, "A", "B"), mapping),
        Condition(cond.equidistant(ORIGIN, "A", "C"), dict(mapping)),
    ]]


def _statement(template_fn: Callable[..., SymbolicPolynomial], *roles: str) -> ConditionsFn:
    def conditions(step, protocol):
        mapping = {role: step.data[role] for role in roles}
        return [[Condition(template_fn(*roles), mapping)]]

    return conditions


def _true_statement(step, protocol) -> Alternatives:
    return [[Condition(cond.zero(), {})]]


# ----------------------------------------------------------------------
# Set memberships: how a point labelled ``point`` is bound to a line/circle


def _through_two_points(set_step, point, protocol, before) -> List[Condition]:
    return [
        Condition(cond.collinear(ORIGIN, "A", "B"), {ORIGIN: point, "A": a, "B": b})
        for a, b in _member_pairs(set_step, protocol, before)
    ]


def _directed_through(template: SymbolicPolynomial) -> MembershipFn:
    def membership(set_step, point, protocol, before):
        base = protocol.get(set_step.data["line"])
        options = []
        for through in _preceding_members(set_step, protocol, before):
            for a, b in _member_pairs(base, protocol, set_step.index):
                options.append(Condition(template, {ORIGIN: point, "P": through, "A": a, "B": b}))
        return options

    return membership


def _perpendicular_bisector(set_step, point, protocol, before) -> List[Condition]:
    roles = {ORIGIN: point, "A": set_step.data["a"], "B": set_step.data["b"]}
    return [Condition(cond.equidistant(ORIGIN, "A", "B"), roles)]


def _angle_ray_membership(set_step, point, protocol, before) -> List[Condition]:
    data = set_step.data
    roles = {ORIGIN: point, "A": data["a"], "O": data["vertex"], "A1": data["a1"], "O1": data["o1"], "B1": data["b1"]}
    return [Condition(cond.angle_ray(), roles)]


def _angle_ray_to_60_membership(set_step, point, protocol, before) -> List[Condition]:
    data = set_step.data
    roles = {
        ORIGIN: point,
        "A": data["a"],
        "O": data["vertex"],
        "A1": data["a1"],
        "O1": data["o1"],
        "B1": data["b1"],
        "A2": data["a2"],
        "O2": data["o2"],
        "B2": data["b2"],
        "T": data["angle"],
    }
    return [Condition(cond.angle_ray_to_60(), roles)]


def _circle_through(set_step, point, protocol, before) -> List[Condition]:
    center = set_step.data["center"]
    return [
        Condition(cond.on_circle(ORIGIN, "O", "A"), {ORIGIN: point, "O": center, "A": through})
        for through in _preceding_members(set_step, protocol, before)
    ]


def _circle_with_diameter(set_step, point, protocol, before) -> List[Condition]:
    roles = {ORIGIN: point, "A": set_step.data["a"], "B": set_step.data["b"]}
    return [Condition(cond.on_circle_with_diameter(ORIGIN, "A", "B"), roles)]


def _circumscribed(set_step, point, protocol, before) -> List[Condition]:
    members = _preceding_members(set_step, protocol, before)
    return [
        Condition(cond.concyclic("A", "B", "C", ORIGIN), {ORIGIN: point, "A": a, "B": b, "C": c})
        for a, b, c in combinations(members, 3)
    ]


# ----------------------------------------------------------------------
# Extra validity checks


def _base_line_has_two_points(step, protocol) -> Optional[str]:
    base = protocol.get(step.data["line"])
    if base is None:
        return None
    if len(_preceding_members(base, protocol, len(protocol))) < 2:
        return f"base line {base.label} of {step.label} needs two known points"
    return None


def _angle_parameter(step, protocol) -> Optional[str]:
    parameter = protocol.get(step.data["angle"])
    if parameter is not None and parameter.kind != "angle_of_60_deg":
        return f"{step.label} needs a 60 degree angle parameter, got {parameter.kind}"
    return None


# ----------------------------------------------------------------------
# Registry


register(KindSpec("free_point", POINT, (), "Free point {label}", free_coordinates=2))
register(KindSpec(
    "midpoint", POINT, (("a", POINT), ("b", POINT)),
    "Midpoint {label} of segment {a}{b}",
    distinct=("a", "b"),
    conditions=_self_conditional(cond.midpoint, A="a", B="b"),
))
register(KindSpec(
    "random_point_on_line", POINT, (("line", LINE),),
    "Random point {label} from line {line}",
    free_coordinates=1, on_sets=("line",), conditions=_on_set("line"),
))
register(KindSpec(
    "random_point_on_circle", POINT, (("circle", CIRCLE),),
    "Random point {label} from circle {circle}",
    free_coordinates=1, on_sets=("circle",), conditions=_on_set("circle"),
))
register(KindSpec(
    "intersection_point", POINT, (("first", SET), ("second", SET)),
    "Intersection point {label} of {first} and {second}",
    on_sets=("first", "second"), distinct=("first", "second"), conditions=_intersection,
))
register(KindSpec(
    "foot_point", POINT, (("point", POINT), ("a", POINT), ("b", POINT)),
    "Foot {label} of perpendicular from {point} to line {a}{b}",
    distinct=("a", "b"), conditions=_foot,
))
register(KindSpec(
    "translated_point", POINT, (("point", POINT), ("a", POINT), ("b", POINT)),
    "Point {label} as image of {point} under translation by vector {a}{b}",
    conditions=_self_conditional(cond.translation, P="point", A="a", B="b"),
))
register(KindSpec(
    "rotated_point_90", POINT, (("point", POINT), ("center", POINT)),
    "Point {label} as image of {point} under rotation by 90 degrees around {center}",
    conditions=_self_conditional(cond.rotation_90, P="point", O="center"),
))
register(KindSpec(
    "centrally_symmetric_point", POINT, (("point", POINT), ("center", POINT)),
    "Point {label} symmetric to {point} with respect to {center}",
    conditions=_self_conditional(cond.central_symmetry, P="point", O="center"),
))
register(KindSpec(
    "reflected_point", POINT, (("point", POINT), ("a", POINT), ("b", POINT)),
    "Point {label} as reflection of {point} in line {a}{b}",
    distinct=("a", "b"),
    conditions=_self_conditional(cond.reflection, P="point", A="a", B="b"),
))
register(KindSpec(
    "circle_center", POINT, (("a", POINT), ("b", POINT), ("c", POINT)),
    "Center {label} of circle through {a}, {b} and {c}",
    distinct=("a", "b", "c"), conditions=_circle_center,
))
register(KindSpec(
    "angle_of_60_deg", POINT, (),
    "Parametric point {label} of angle of 60 degrees",
    conditions=_self_conditional(cond.tangent_of_60_deg),
))

register(KindSpec(
    "line_through_two_points", LINE, (("a", POINT), ("b", POINT)),
    "Line {label} through points {a} and {b}",
    members=("a", "b"), distinct=("a", "b"), membership=_through_two_points,
))
register(KindSpec(
    "parallel_line", LINE, (("point", POINT), ("line", LINE)),
    "Line {label} through point {point} parallel with line {line}",
    members=("point",), membership=_directed_through(cond.parallel("P", ORIGIN, "A", "B")),
    check=_base_line_has_two_points,
))
register(KindSpec(
    "perpendicular_line", LINE, (("point", POINT), ("line", LINE)),
    "Line {label} through point {point} perpendicular to line {line}",
    members=("point",), membership=_directed_through(cond.perpendicular("P", ORIGIN, "A", "B")),
    check=_base_line_has_two_points,
))
register(KindSpec(
    "perpendicular_bisector", LINE, (("a", POINT), ("b", POINT)),
    "Perpendicular bisector {label} of segment {a}{b}",
    distinct=("a", "b"), membership=_perpendicular_bisector,
))
register(KindSpec(
    "angle_ray", LINE,
    (("a", POINT), ("vertex", POINT), ("a1", POINT), ("o1", POINT), ("b1", POINT)),
    "Angle ray {label} from {vertex} making with ray {vertex}{a} the angle {a1}{o1}{b1}",
    members=("vertex",), distinct=("a", "vertex"), membership=_angle_ray_membership,
))
register(KindSpec(
    "angle_ray_to_60", LINE,
    (
        ("a", POINT), ("vertex", POINT),
        ("a1", POINT), ("o1", POINT), ("b1", POINT),
        ("a2", POINT), ("o2", POINT), ("b2", POINT),
        ("angle", POINT),
    ),
    "Angle ray {label} from {vertex} completing angles {a1}{o1}{b1} and {a2}{o2}{b2} "
    "to 60 degrees from ray {vertex}{a}",
    members=("vertex",), distinct=("a", "vertex"), membership=_angle_ray_to_60_membership,
    check=_angle_parameter,
))

register(KindSpec(
    "circle_with_center_and_point", CIRCLE, (("center", POINT), ("through", POINT)),
    "Circle {label} with center {center} and through point {through}",
    members=("through",), distinct=("center", "through"), membership=_circle_through,
))
register(KindSpec(
    "circle_with_diameter", CIRCLE, (("a", POINT), ("b", POINT)),
    "Circle {label} with diameter {a}{b}",
    members=("a", "b"), distinct=("a", "b"), membership=_circle_with_diameter,
))
register(KindSpec(
    "circumscribed_circle", CIRCLE, (("a", POINT), ("b", POINT), ("c", POINT)),
    "Circle {label} through points {a}, {b} and {c}",
    members=("a", "b", "c"), distinct=("a", "b", "c"), membership=_circumscribed,
))

register(KindSpec("true", STATEMENT, (), "True", conditions=_true_statement))
register(KindSpec(
    "identical_points", STATEMENT, (("A", POINT), ("B", POINT)),
    "Points {A} and {B} are identical",
    conditions=_statement(cond.identical_points, "A", "B"),
))
register(KindSpec(
    "collinear_points", STATEMENT, (("A", POINT), ("B", POINT), ("C", POINT)),
    "Points {A}, {B} and {C} are collinear",
    conditions=_statement(cond.collinear, "A", "B", "C"),
))
register(KindSpec(
    "parallel_lines", STATEMENT, (("A", POINT), ("B", POINT), ("C", POINT), ("D", POINT)),
    "Lines {A}{B} and {C}{D} are parallel",
    conditions=_statement(cond.parallel, "A", "B", "C", "D"),
))
register(KindSpec(
    "perpendicular_lines", STATEMENT, (("A", POINT), ("B", POINT), ("C", POINT), ("D", POINT)),
    "Lines {A}{B} and {C}{D} are perpendicular",
    conditions=_statement(cond.perpendicular, "A", "B", "C", "D"),
))
register(KindSpec(
    "congruent_segments", STATEMENT, (("A", POINT), ("B", POINT), ("C", POINT), ("D", POINT)),
    "Segments {A}{B} and {C}{D} have equal length",
    conditions=_statement(cond.congruent_segments, "A", "B", "C", "D"),
))
register(KindSpec(
    "concyclic_points", STATEMENT, (("A", POINT), ("B", POINT), ("C", POINT), ("D", POINT)),
    "Points {A}, {B}, {C} and {D} are concyclic",
    conditions=_statement(cond.concyclic, "A", "B", "C", "D"),
))


def accepts(expected: str, category: str) -> bool:
    if expected == SET:
        return category in (LINE, CIRCLE)
    return expected == category


def point_kinds() -> Sequence[str]:
    return [name for name, spec in KINDS.items() if spec.category == POINT]
