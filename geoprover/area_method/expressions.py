"""Area-method expressions and their rewriting rules.

Expressions are immutable trees of frozen dataclasses.  Equality is
syntactic: ``Sum(a, b)`` and ``Sum(b, a)`` are different trees.  The
rewriting functions are pure, each returns a new tree.

Geometric atoms:

* ``SignedArea(A, B, C)``, written ``S_ABC``;
* ``PythagorasDifference(A, B, C)``, ``P_ABC = AB^2 + CB^2 - AC^2``;
* ``SegmentRatio(A, B, C, D)``, the ratio of parallel directed segments
  ``AB / CD``.
"""

from __future__ import annotations

import fractions
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

Number = Union[int, fractions.Fraction]


class UnknownStatement(Exception):
    """No rewriting or elimination rule covers the expression or construction."""


class AMExpression:
    def children(self) -> Tuple["AMExpression", ...]:
        return ()

    def rebuild(self, children: Sequence["AMExpression"]) -> "AMExpression":
        return self

    def is_zero(self) -> bool:
        return False

    def is_one(self) -> bool:
        return False

    def points(self) -> FrozenSet[str]:
        found = set()
        for child in self.children():
            found.update(child.points())
        return frozenset(found)

    def size(self) -> int:
        return 1 + sum(child.size() for child in self.children())

    def replace(self, mapping: Mapping[str, str]) -> "AMExpression":
        """Relabel points; the shape of the tree is kept."""

        return self.rebuild([child.replace(mapping) for child in self.children()])

    def simplify_in_one_step(self) -> "AMExpression":
        return simplify_in_one_step(self)

    def __add__(self, other: object) -> "AMExpression":
        return Sum(self, _wrap(other))

    def __radd__(self, other: object) -> "AMExpression":
        return Sum(_wrap(other), self)

    def __sub__(self, other: object) -> "AMExpression":
        return Difference(self, _wrap(other))

    def __rsub__(self, other: object) -> "AMExpression":
        return Difference(_wrap(other), self)

    def __mul__(self, other: object) -> "AMExpression":
        return Product(self, _wrap(other))

    def __rmul__(self, other: object) -> "AMExpression":
        return Product(_wrap(other), self)

    def __truediv__(self, other: object) -> "AMExpression":
        return Fraction(self, _wrap(other))

    def __rtruediv__(self, other: object) -> "AMExpression":
        return Fraction(_wrap(other), self)

    def __neg__(self) -> "AMExpression":
        return AdditiveInverse(self)


def _wrap(value: object) -> AMExpression:
    if isinstance(value, AMExpression):
        return value
    if isinstance(value, (int, fractions.Fraction)):
        return BasicNumber(value)
    raise TypeError(f"cannot combine area-method expression with {type(value).__name__}")


@dataclass(frozen=True)
class BasicNumber(AMExpression):
    value: fractions.Fraction

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", fractions.Fraction(self.value))

    def is_zero(self) -> bool:
        return self.value == 0

    def is_one(self) -> bool:
        return self.value == 1

    def __str__(self) -> str:
        return str(self.value) if self.value >= 0 else f"({self.value})"


ZERO = BasicNumber(0)
ONE = BasicNumber(1)
MINUS_ONE = BasicNumber(-1)


class GeometricQuantity(AMExpression):
    prefix = ""

    @property
    def labels(self) -> Tuple[str, ...]:
        raise NotImplementedError

    def points(self) -> FrozenSet[str]:
        return frozenset(self.labels)

    def replace(self, mapping: Mapping[str, str]) -> "AMExpression":
        return type(self)(*(mapping.get(label, label) for label in self.labels))

    def __str__(self) -> str:
        return f"{self.prefix}[{','.join(self.labels)}]"


@dataclass(frozen=True)
class SignedArea(GeometricQuantity):
    a: str
    b: str
    c: str
    prefix = "S"

    @property
    def labels(self) -> Tuple[str, ...]:
        return (self.a, self.b, self.c)


@dataclass(frozen=True)
class PythagorasDifference(GeometricQuantity):
    a: str
    b: str
    c: str
    prefix = "P"

    @property
    def labels(self) -> Tuple[str, ...]:
        return (self.a, self.b, self.c)


@dataclass(frozen=True)
class SegmentRatio(GeometricQuantity):
    a: str
    b: str
    c: str
    d: str
    prefix = "R"

    @property
    def labels(self) -> Tuple[str, ...]:
        return (self.a, self.b, self.c, self.d)


@dataclass(frozen=True)
class Sum(AMExpression):
    left: AMExpression
    right: AMExpression

    def children(self):
        return (self.left, self.right)

    def rebuild(self, children):
        return Sum(*children)

    def __str__(self) -> str:
        return f"({self.left} + {self.right})"


@dataclass(frozen=True)
class Difference(AMExpression):
    left: AMExpression
    right: AMExpression

    def children(self):
        return (self.left, self.right)

    def rebuild(self, children):
        return Difference(*children)

    def __str__(self) -> str:
        return f"({self.left} - {self.right})"


@dataclass(frozen=True)
class Product(AMExpression):
    left: AMExpression
    right: AMExpression

    def children(self):
        return (self.left, self.right)

    def rebuild(self, children):
        return Product(*children)

    def __str__(self) -> str:
        return f"{self.left}*{self.right}"


@dataclass(frozen=True)
class Fraction(AMExpression):
    numerator: AMExpression
    denominator: AMExpression

    def children(self):
        return (self.numerator, self.denominator)

    def rebuild(self, children):
        return Fraction(*children)

    def __str__(self) -> str:
        return f"({self.numerator})/({self.denominator})"


@dataclass(frozen=True)
class AdditiveInverse(AMExpression):
    expr: AMExpression

    def children(self):
        return (self.expr,)

    def rebuild(self, children):
        return AdditiveInverse(children[0])

    def __str__(self) -> str:
        return f"-{self.expr}"


@dataclass(frozen=True)
class PointElimination(AMExpression):
    """Deferred elimination of ``point`` from ``expr``."""

    expr: AMExpression
    point: str

    def children(self):
        return (self.expr,)

    def rebuild(self, children):
        return PointElimination(children[0], self.point)

    def replace(self, mapping):
        return PointElimination(self.expr.replace(mapping), mapping.get(self.point, self.point))

    def __str__(self) -> str:
        return f"elim[{self.point}]({self.expr})"


# ----------------------------------------------------------------------
# One-step simplification


def _simplify_atom(atom: GeometricQuantity) -> AMExpression:
    if isinstance(atom, SignedArea):
        return ZERO if len(set(atom.labels)) < 3 else atom
    if isinstance(atom, PythagorasDifference):
        return ZERO if atom.a == atom.b or atom.b == atom.c else atom
    if isinstance(atom, SegmentRatio):
        if atom.c == atom.d:
            raise ZeroDivisionError(f"segment ratio {atom} has an empty denominator")
        if atom.a == atom.b:
            return ZERO
        if (atom.a, atom.b) == (atom.c, atom.d):
            return ONE
        if (atom.a, atom.b) == (atom.d, atom.c):
            return MINUS_ONE
    return atom


def _simplify_inverse(a: AMExpression) -> AMExpression:
    if isinstance(a, AdditiveInverse):
        return a.expr
    if isinstance(a, BasicNumber):
        return BasicNumber(-a.value)
    return AdditiveInverse(a)


def _simplify_sum(a: AMExpression, b: AMExpression) -> AMExpression:
    if a.is_zero():
        return b
    if b.is_zero():
        return a
    if isinstance(a, BasicNumber) and isinstance(b, BasicNumber):
        return BasicNumber(a.value + b.value)
    if isinstance(b, AdditiveInverse):
        return Difference(a, b.expr)
    if isinstance(a, AdditiveInverse):
        return Difference(b, a.expr)
    if isinstance(a, Fraction) and isinstance(b, Fraction) and a.denominator == b.denominator:
        return Fraction(Sum(a.numerator, b.numerator), a.denominator)
    return Sum(a, b)


def _simplify_difference(a: AMExpression, b: AMExpression) -> AMExpression:
    if b.is_zero():
        return a
    if a.is_zero():
        return AdditiveInverse(b)
    if isinstance(a, BasicNumber) and isinstance(b, BasicNumber):
        return BasicNumber(a.value - b.value)
    if a == b:
        return ZERO
    if isinstance(b, AdditiveInverse):
        return Sum(a, b.expr)
    if isinstance(a, Fraction) and isinstance(b, Fraction) and a.denominator == b.denominator:
        return Fraction(Difference(a.numerator, b.numerator), a.denominator)
    return Difference(a, b)


def _simplify_product(a: AMExpression, b: AMExpression) -> AMExpression:
    if a.is_zero() or b.is_zero():
        return ZERO
    if a.is_one():
        return b
    if b.is_one():
        return a
    if isinstance(a, BasicNumber) and isinstance(b, BasicNumber):
        return BasicNumber(a.value * b.value)
    if a == MINUS_ONE:
        return AdditiveInverse(b)
    if b == MINUS_ONE:
        return AdditiveInverse(a)
    if isinstance(a, AdditiveInverse) and isinstance(b, AdditiveInverse):
        return Product(a.expr, b.expr)
    if isinstance(a, Fraction) and isinstance(b, Fraction):
        return Fraction(Product(a.numerator, b.numerator), Product(a.denominator, b.denominator))
    if isinstance(a, Fraction):
        return Fraction(Product(a.numerator, b), a.denominator)
    if isinstance(b, Fraction):
        return Fraction(Product(a, b.numerator), b.denominator)
    return Product(a, b)


def _simplify_fraction(n: AMExpression, d: AMExpression) -> AMExpression:
    if d.is_zero():
        raise ZeroDivisionError(f"fraction {n} / 0")
    if n.is_zero():
        return ZERO
    if d.is_one():
        return n
    if isinstance(n, BasicNumber) and isinstance(d, BasicNumber):
        return BasicNumber(n.value / d.value)
    if n == d:
        return ONE
    if d == MINUS_ONE:
        return AdditiveInverse(n)
    if isinstance(n, Fraction) and isinstance(d, Fraction):
        return Fraction(Product(n.numerator, d.denominator), Product(n.denominator, d.numerator))
    if isinstance(n, Fraction):
        return Fraction(n.numerator, Product(n.denominator, d))
    if isinstance(d, Fraction):
        return Fraction(Product(n, d.denominator), d.numerator)
    return Fraction(n, d)


def simplify_in_one_step(expr: AMExpression) -> AMExpression:
    """One bottom-up rewriting pass: children first, then the node's own rule."""

    if isinstance(expr, BasicNumber):
        return expr
    if isinstance(expr, GeometricQuantity):
        return _simplify_atom(expr)
    if isinstance(expr, AdditiveInverse):
        return _simplify_inverse(simplify_in_one_step(expr.expr))
    if isinstance(expr, Sum):
        return _simplify_sum(simplify_in_one_step(expr.left), simplify_in_one_step(expr.right))
    if isinstance(expr, Difference):
        return _simplify_difference(simplify_in_one_step(expr.left), simplify_in_one_step(expr.right))
    if isinstance(expr, Product):
        return _simplify_product(simplify_in_one_step(expr.left), simplify_in_one_step(expr.right))
    if isinstance(expr, Fraction):
        return _simplify_fraction(simplify_in_one_step(expr.numerator), simplify_in_one_step(expr.denominator))
    if isinstance(expr, PointElimination):
        return PointElimination(simplify_in_one_step(expr.expr), expr.point)
    raise UnknownStatement(f"no rewriting rule for {type(expr).__name__}")


def simplify(expr: AMExpression, max_steps: int = 500) -> AMExpression:
    """Apply :func:`simplify_in_one_step` until the tree stops changing."""

    for _ in range(max_steps):
        following = simplify_in_one_step(expr)
        if following == expr:
            return expr
        expr = following
    logger.warning("Simplification stopped after %d steps (size %d)", max_steps, expr.size())
    return expr


# ----------------------------------------------------------------------
# Normal forms


def _times(x: Optional[AMExpression], y: Optional[AMExpression]) -> Optional[AMExpression]:
    if x is None:
        return y
    if y is None:
        return x
    return Product(x, y)


def _split(expr: AMExpression) -> Tuple[AMExpression, Optional[AMExpression]]:
    """``(numerator, denominator)`` with ``None`` standing for a unit denominator."""

    if isinstance(expr, Fraction):
        nn, nd = _split(expr.numerator)
        dn, dd = _split(expr.denominator)
        return _times(nn, dd), _times(nd, dn)
    if isinstance(expr, (Sum, Difference)):
        combine = type(expr)
        n1, d1 = _split(expr.left)
        n2, d2 = _split(expr.right)
        if d1 == d2:
            return combine(n1, n2), d1
        return combine(_times(n1, d2), _times(n2, d1)), _times(d1, d2)
    if isinstance(expr, Product):
        n1, d1 = _split(expr.left)
        n2, d2 = _split(expr.right)
        return Product(n1, n2), _times(d1, d2)
    if isinstance(expr, AdditiveInverse):
        n, d = _split(expr.expr)
        return AdditiveInverse(n), d
    return expr, None


def reduce_to_single_fraction(expr: AMExpression) -> AMExpression:
    numerator, denominator = _split(expr)
    if denominator is None or denominator.is_one():
        return numerator
    return Fraction(numerator, denominator)


def _flatten(cls: type, expr: AMExpression) -> List[AMExpression]:
    parts = []
    while isinstance(expr, cls):
        parts.append(expr.left)
        expr = expr.right
    parts.append(expr)
    return parts


def _fold(cls: type, parts: Sequence[AMExpression]) -> AMExpression:
    result = parts[-1]
    for part in reversed(parts[:-1]):
        result = cls(part, result)
    return result


def reduce_to_right_associative_form(expr: AMExpression) -> AMExpression:
    """Sums of products, right-associated, with differences as ``a + (-1)*b``."""

    if isinstance(expr, Difference):
        return reduce_to_right_associative_form(Sum(expr.left, Product(MINUS_ONE, expr.right)))
    if isinstance(expr, AdditiveInverse):
        return reduce_to_right_associative_form(Product(MINUS_ONE, expr.expr))
    if isinstance(expr, (Sum, Product)):
        cls = type(expr)
        left = reduce_to_right_associative_form(expr.left)
        right = reduce_to_right_associative_form(expr.right)
        return _fold(cls, _flatten(cls, left) + _flatten(cls, right))
    if isinstance(expr, (Fraction, PointElimination)):
        return expr.rebuild([reduce_to_right_associative_form(child) for child in expr.children()])
    return expr


def _atom_key(atom: GeometricQuantity) -> Tuple:
    return (atom.prefix, atom.labels)


def uniformize_atom(atom: GeometricQuantity) -> Tuple[fractions.Fraction, Optional[GeometricQuantity]]:
    """Canonical orientation of an atom as ``(factor, atom)``.

    ``atom`` is ``None`` when the quantity is the constant ``factor``.
    """

    if isinstance(atom, SignedArea):
        labels = atom.labels
        if len(set(labels)) < 3:
            return fractions.Fraction(0), None
        start = labels.index(min(labels))
        first, second, third = labels[start:] + labels[:start]
        if second < third:
            return fractions.Fraction(1), SignedArea(first, second, third)
        return fractions.Fraction(-1), SignedArea(first, third, second)
    if isinstance(atom, PythagorasDifference):
        if atom.a == atom.b or atom.b == atom.c:
            return fractions.Fraction(0), None
        if atom.a == atom.c and atom.b < atom.a:
            # P_ABA = P_BAB = 2*AB^2
            return fractions.Fraction(1), PythagorasDifference(atom.b, atom.a, atom.b)
        if atom.a > atom.c:
            return fractions.Fraction(1), PythagorasDifference(atom.c, atom.b, atom.a)
        return fractions.Fraction(1), atom
    if isinstance(atom, SegmentRatio):
        if atom.c == atom.d:
            raise ZeroDivisionError(f"segment ratio {atom} has an empty denominator")
        if atom.a == atom.b:
            return fractions.Fraction(0), None
        sign = 1
        a, b, c, d = atom.labels
        if a > b:
            a, b, sign = b, a, -sign
        if c > d:
            c, d, sign = d, c, -sign
        if (a, b) == (c, d):
            return fractions.Fraction(sign), None
        return fractions.Fraction(sign), SegmentRatio(a, b, c, d)
    raise UnknownStatement(f"unknown geometric quantity {atom!r}")


def uniformize(expr: AMExpression) -> AMExpression:
    if isinstance(expr, GeometricQuantity):
        factor, atom = uniformize_atom(expr)
        if atom is None:
            return BasicNumber(factor)
        return atom if factor == 1 else AdditiveInverse(atom)
    return expr.rebuild([uniformize(child) for child in expr.children()])


@dataclass(frozen=True)
class ProductTerm:
    coefficient: fractions.Fraction
    atoms: Tuple[GeometricQuantity, ...]

    def to_expression(self) -> AMExpression:
        factors: List[AMExpression] = list(self.atoms)
        if self.coefficient != 1 or not factors:
            factors.insert(0, BasicNumber(self.coefficient))
        return _fold(Product, factors)


@dataclass(frozen=True)
class SumOfProducts:
    """Expanded canonical form: sorted product terms with merged coefficients."""

    terms: Tuple[ProductTerm, ...] = ()

    @classmethod
    def from_mapping(cls, mapping: Mapping[Tuple[GeometricQuantity, ...], fractions.Fraction]) -> "SumOfProducts":
        keys = sorted((atoms for atoms, value in mapping.items() if value), key=lambda atoms: [_atom_key(a) for a in atoms])
        return cls(tuple(ProductTerm(mapping[atoms], atoms) for atoms in keys))

    @classmethod
    def constant(cls, value: Number) -> "SumOfProducts":
        return cls.from_mapping({(): fractions.Fraction(value)})

    @classmethod
    def atom(cls, quantity: GeometricQuantity) -> "SumOfProducts":
        factor, canonical = uniformize_atom(quantity)
        if canonical is None:
            return cls.constant(factor)
        return cls.from_mapping({(canonical,): factor})

    def as_mapping(self) -> Dict[Tuple[GeometricQuantity, ...], fractions.Fraction]:
        return {term.atoms: term.coefficient for term in self.terms}

    def is_zero(self) -> bool:
        return not self.terms

    def is_constant(self) -> bool:
        return all(not term.atoms for term in self.terms)

    def constant_value(self) -> fractions.Fraction:
        return self.as_mapping().get((), fractions.Fraction(0))

    def scale(self, factor: Number) -> "SumOfProducts":
        return SumOfProducts.from_mapping({atoms: value * factor for atoms, value in self.as_mapping().items()})

    def __add__(self, other: "SumOfProducts") -> "SumOfProducts":
        merged = self.as_mapping()
        for term in other.terms:
            merged[term.atoms] = merged.get(term.atoms, fractions.Fraction(0)) + term.coefficient
        return SumOfProducts.from_mapping(merged)

    def __neg__(self) -> "SumOfProducts":
        return self.scale(-1)

    def __sub__(self, other: "SumOfProducts") -> "SumOfProducts":
        return self + (-other)

    def __mul__(self, other: "SumOfProducts") -> "SumOfProducts":
        product: Dict[Tuple[GeometricQuantity, ...], fractions.Fraction] = {}
        for mine in self.terms:
            for theirs in other.terms:
                atoms = tuple(sorted(mine.atoms + theirs.atoms, key=_atom_key))
                product[atoms] = product.get(atoms, fractions.Fraction(0)) + mine.coefficient * theirs.coefficient
        return SumOfProducts.from_mapping(product)

    def points(self) -> FrozenSet[str]:
        return frozenset(label for term in self.terms for atom in term.atoms for label in atom.labels)

    def to_expression(self) -> AMExpression:
        if not self.terms:
            return ZERO
        return _fold(Sum, [term.to_expression() for term in self.terms])

    def __str__(self) -> str:
        return str(self.to_expression())


def to_sum_of_products(expr: AMExpression) -> SumOfProducts:
    if isinstance(expr, BasicNumber):
        return SumOfProducts.constant(expr.value)
    if isinstance(expr, GeometricQuantity):
        return SumOfProducts.atom(expr)
    if isinstance(expr, Sum):
        return to_sum_of_products(expr.left) + to_sum_of_products(expr.right)
    if isinstance(expr, Difference):
        return to_sum_of_products(expr.left) - to_sum_of_products(expr.right)
    if isinstance(expr, AdditiveInverse):
        return -to_sum_of_products(expr.expr)
    if isinstance(expr, Product):
        return to_sum_of_products(expr.left) * to_sum_of_products(expr.right)
    if isinstance(expr, Fraction):
        denominator = to_sum_of_products(expr.denominator)
        if not denominator.is_constant():
            raise ValueError(f"denominator {expr.denominator} is not constant, reduce to a single fraction first")
        value = denominator.constant_value()
        if value == 0:
            raise ZeroDivisionError(f"fraction {expr} has a zero denominator")
        return to_sum_of_products(expr.numerator).scale(1 / value)
    if isinstance(expr, PointElimination):
        raise UnknownStatement(f"pending elimination of {expr.point} has no expanded form")
    raise UnknownStatement(f"no normal form for {type(expr).__name__}")


# ----------------------------------------------------------------------
# Elimination


def eliminate(expr: AMExpression, point: str, context) -> AMExpression:
    """Replace every atom mentioning ``point`` by its value over the generators of ``point``.

    ``context`` supplies ``eliminate_atom(atom, point)`` and
    ``is_parameter(atom)``; parameter atoms are left untouched.
    """

    if isinstance(expr, GeometricQuantity):
        if point in expr.labels and not context.is_parameter(expr):
            return context.eliminate_atom(expr, point)
        return expr
    if isinstance(expr, PointElimination):
        return eliminate(eliminate(expr.expr, expr.point, context), point, context)
    if isinstance(expr, BasicNumber):
        return expr
    return expr.rebuild([eliminate(child, point, context) for child in expr.children()])


__all__ = [
    "AMExpression",
    "AdditiveInverse",
    "BasicNumber",
    "Difference",
    "Fraction",
    "GeometricQuantity",
    "MINUS_ONE",
    "ONE",
    "PointElimination",
    "Product",
    "ProductTerm",
    "PythagorasDifference",
    "SegmentRatio",
    "SignedArea",
    "Sum",
    "SumOfProducts",
    "UnknownStatement",
    "ZERO",
    "eliminate",
    "reduce_to_right_associative_form",
    "reduce_to_single_fraction",
    "simplify",
    "simplify_in_one_step",
    "to_sum_of_products",
    "uniformize",
    "uniformize_atom",
]
