"""Exact polynomial arithmetic for the algebraic provers.

Two families of unknowns are used throughout: free parameters (``u``
variables, assigned to base points) and dependent coordinates (``x``
variables, constrained by the condition polynomial of the point that owns
them).  Condition templates are written over :class:`SymbolicVariable`
placeholders keyed by a role label and turned into concrete polynomials by
:meth:`SymbolicPolynomial.instantiate`.

Polynomials are value objects: every operation returns a new instance and
the term map of an existing polynomial is never modified.  Coefficients are
:class:`fractions.Fraction` so that a proof never depends on rounding.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import (
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    Union,
)

Number = Union[int, Fraction]


class MissingRoleError(KeyError):
    """Raised when an instantiation mapping does not cover a template label."""

    def __init__(self, labels: Sequence[str]) -> None:
        self.labels = tuple(labels)
        super().__init__(f"no point mapped to role label(s): {', '.join(self.labels)}")


@dataclass(frozen=True)
class Variable:
    """Concrete unknown: ``u<index>`` (free) or ``x<index>`` (dependent)."""

    kind: str
    index: int

    def __post_init__(self) -> None:
        if self.kind not in ("u", "x"):
            raise ValueError(f"variable kind must be 'u' or 'x', got {self.kind!r}")

    @property
    def is_free(self) -> bool:
        return self.kind == "u"

    def sort_key(self) -> Tuple:
        return (0 if self.kind == "u" else 1, self.index, "")

    def __str__(self) -> str:
        return f"{self.kind}{self.index}"


@dataclass(frozen=True)
class SymbolicVariable:
    """Placeholder for the ``x`` or ``y`` coordinate of a role label."""

    label: str
    coord: str

    def __post_init__(self) -> None:
        if self.coord not in ("x", "y"):
            raise ValueError(f"coordinate must be 'x' or 'y', got {self.coord!r}")

    @property
    def is_free(self) -> bool:
        return False

    def sort_key(self) -> Tuple:
        return (2, self.label, self.coord)

    def __str__(self) -> str:
        return f"{self.coord}{self.label}"


AnyVariable = Union[Variable, SymbolicVariable]


@dataclass(frozen=True)
class Monomial:
    """Power product stored as a canonical, sorted tuple of ``(variable, exponent)``."""

    powers: Tuple[Tuple[AnyVariable, int], ...] = ()

    @classmethod
    def of(cls, mapping: Mapping[AnyVariable, int]) -> "Monomial":
        items = []
        for variable, exponent in mapping.items():
            if exponent < 0:
                raise ValueError(f"negative exponent for {variable}: {exponent}")
            if exponent:
                items.append((variable, int(exponent)))
        items.sort(key=lambda item: item[0].sort_key())
        return cls(tuple(items))

    @classmethod
    def unit(cls) -> "Monomial":
        return cls(())

    def as_dict(self) -> Dict[AnyVariable, int]:
        return dict(self.powers)

    def degree(self, variable: AnyVariable) -> int:
        for candidate, exponent in self.powers:
            if candidate == variable:
                return exponent
        return 0

    def total_degree(self) -> int:
        return sum(exponent for _, exponent in self.powers)

    def variables(self) -> FrozenSet[AnyVariable]:
        return frozenset(variable for variable, _ in self.powers)

    def is_unit(self) -> bool:
        return not self.powers

    def without(self, variable: AnyVariable) -> "Monomial":
        return Monomial(tuple(item for item in self.powers if item[0] != variable))

    def __mul__(self, other: "Monomial") -> "Monomial":
        merged = self.as_dict()
        for variable, exponent in other.powers:
            merged[variable] = merged.get(variable, 0) + exponent
        return Monomial.of(merged)

    def sort_key(self) -> Tuple:
        return tuple((variable.sort_key(), exponent) for variable, exponent in self.powers)

    def __str__(self) -> str:
        if not self.powers:
            return "1"
        parts = []
        for variable, exponent in self.powers:
            parts.append(str(variable) if exponent == 1 else f"{variable}^{exponent}")
        return "*".join(parts)


class Term(NamedTuple):
    monomial: Monomial
    coefficient: Fraction


def _lex_key(monomial: Monomial, ordered: Sequence[AnyVariable]) -> Tuple[int, ...]:
    return tuple(monomial.degree(variable) for variable in ordered)


class Polynomial:
    """Immutable sparse polynomial with exact rational coefficients."""

    __slots__ = ("_terms", "_hash")

    def __init__(self, terms: Optional[Mapping[Monomial, Number]] = None) -> None:
        cleaned: Dict[Monomial, Fraction] = {}
        if terms:
            for monomial, coefficient in terms.items():
                value = Fraction(coefficient)
                if value:
                    cleaned[monomial] = value
        self._terms = cleaned
        self._hash: Optional[int] = None

    # ------------------------------------------------------------------
    # Construction helpers

    @classmethod
    def constant(cls, value: Number) -> "Polynomial":
        return cls({Monomial.unit(): value})

    @classmethod
    def variable(cls, variable: AnyVariable, coefficient: Number = 1) -> "Polynomial":
        return cls({Monomial.of({variable: 1}): coefficient})

    def _new(self, terms: Mapping[Monomial, Number]) -> "Polynomial":
        return type(self)(terms)

    # ------------------------------------------------------------------
    # Inspection

    def __len__(self) -> int:
        return len(self._terms)

    def terms(self) -> List[Term]:
        """Return the terms ordered from the leading monomial downwards."""

        ordered = self._ordered_variables()
        monomials = sorted(self._terms, key=lambda m: _lex_key(m, ordered), reverse=True)
        return [Term(monomial, self._terms[monomial]) for monomial in monomials]

    def __iter__(self) -> Iterator[Term]:
        return iter(self.terms())

    def is_zero(self) -> bool:
        return not self._terms

    def is_constant(self) -> bool:
        return all(monomial.is_unit() for monomial in self._terms)

    def constant_term(self) -> Fraction:
        return self._terms.get(Monomial.unit(), Fraction(0))

    def variables(self) -> FrozenSet[AnyVariable]:
        found = set()
        for monomial in self._terms:
            found.update(monomial.variables())
        return frozenset(found)

    def _ordered_variables(self) -> List[AnyVariable]:
        return sorted(self.variables(), key=lambda variable: variable.sort_key())

    def degree(self, variable: AnyVariable) -> int:
        return max((monomial.degree(variable) for monomial in self._terms), default=0)

    def total_degree(self) -> int:
        return max((monomial.total_degree() for monomial in self._terms), default=0)

    def coefficient(self, variable: AnyVariable, degree: int) -> "Polynomial":
        """Coefficient of ``variable**degree`` as a polynomial free of ``variable``."""

        picked: Dict[Monomial, Fraction] = {}
        for monomial, coefficient in self._terms.items():
            if monomial.degree(variable) == degree:
                picked[monomial.without(variable)] = coefficient
        return self._new(picked)

    def leading_variable(self) -> Optional[Variable]:
        """Dependent variable with the highest index, or ``None`` for parameter-only polynomials."""

        dependent = [v for v in self.variables() if isinstance(v, Variable) and not v.is_free]
        if not dependent:
            return None
        return max(dependent, key=lambda variable: variable.index)

    def leading_monomial(self) -> Optional[Monomial]:
        """Leading monomial in lexicographic order, free variables first."""

        if not self._terms:
            return None
        ordered = self._ordered_variables()
        return max(self._terms, key=lambda m: _lex_key(m, ordered))

    def leading_coefficient(self) -> Fraction:
        monomial = self.leading_monomial()
        return self._terms[monomial] if monomial is not None else Fraction(0)

    # ------------------------------------------------------------------
    # Arithmetic

    def add(self, other: "Polynomial") -> "Polynomial":
        merged = dict(self._terms)
        for monomial, coefficient in other._terms.items():
            merged[monomial] = merged.get(monomial, Fraction(0)) + coefficient
        return self._new(merged)

    def subtract(self, other: "Polynomial") -> "Polynomial":
        merged = dict(self._terms)
        for monomial, coefficient in other._terms.items():
            merged[monomial] = merged.get(monomial, Fraction(0)) - coefficient
        return self._new(merged)

    def scale(self, factor: Number) -> "Polynomial":
        factor = Fraction(factor)
        return self._new({m: c * factor for m, c in self._terms.items()})

    def negate(self) -> "Polynomial":
        return self.scale(-1)

    def multiply_by_monomial(self, monomial: Monomial, coefficient: Number = 1) -> "Polynomial":
        coefficient = Fraction(coefficient)
        return self._new({m * monomial: c * coefficient for m, c in self._terms.items()})

    def multiply(self, other: "Polynomial") -> "Polynomial":
        product: Dict[Monomial, Fraction] = {}
        for m1, c1 in self._terms.items():
            for m2, c2 in other._terms.items():
                key = m1 * m2
                product[key] = product.get(key, Fraction(0)) + c1 * c2
        return self._new(product)

    def power(self, exponent: int) -> "Polynomial":
        if exponent < 0:
            raise ValueError("negative powers are not polynomials")
        result = self._new({Monomial.unit(): 1})
        for _ in range(exponent):
            result = result.multiply(self)
        return result

    def __add__(self, other: object) -> "Polynomial":
        return self.add(_coerce(other))

    def __radd__(self, other: object) -> "Polynomial":
        return _coerce(other, like=self).add(self)

    def __sub__(self, other: object) -> "Polynomial":
        return self.subtract(_coerce(other))

    def __rsub__(self, other: object) -> "Polynomial":
        return _coerce(other, like=self).subtract(self)

    def __mul__(self, other: object) -> "Polynomial":
        if isinstance(other, (int, Fraction)):
            return self.scale(other)
        return self.multiply(_coerce(other))

    def __rmul__(self, other: object) -> "Polynomial":
        return self.__mul__(other)

    def __neg__(self) -> "Polynomial":
        return self.negate()

    def __pow__(self, exponent: int) -> "Polynomial":
        return self.power(exponent)

    # ------------------------------------------------------------------
    # Substitution and division

    def substitute_variable(self, variable: AnyVariable, replacement: "Polynomial") -> "Polynomial":
        """Replace every occurrence of ``variable`` by ``replacement``."""

        if variable not in self.variables():
            return self
        result = self._new({})
        powers: Dict[int, Polynomial] = {0: replacement._new({Monomial.unit(): 1})}
        for monomial, coefficient in self._terms.items():
            exponent = monomial.degree(variable)
            if exponent not in powers:
                powers[exponent] = replacement.power(exponent)
            rest = self._new({monomial.without(variable): coefficient})
            result = result.add(rest.multiply(powers[exponent]))
        return result

    def rename(self, mapping: Mapping[AnyVariable, AnyVariable]) -> "Polynomial":
        renamed: Dict[Monomial, Fraction] = {}
        for monomial, coefficient in self._terms.items():
            powers: Dict[AnyVariable, int] = {}
            for variable, exponent in monomial.powers:
                target = mapping.get(variable, variable)
                powers[target] = powers.get(target, 0) + exponent
            key = Monomial.of(powers)
            renamed[key] = renamed.get(key, Fraction(0)) + coefficient
        return self._new(renamed)

    def pseudo_remainder(self, divisor: "Polynomial", variable: AnyVariable) -> "Polynomial":
        """Pseudo-remainder of ``self`` by ``divisor`` with respect to ``variable``."""

        divisor_degree = divisor.degree(variable)
        if divisor_degree == 0:
            raise ValueError(f"divisor does not contain {variable}")
        initial = divisor.coefficient(variable, divisor_degree)
        remainder: Polynomial = self
        while not remainder.is_zero() and remainder.degree(variable) >= divisor_degree:
            degree = remainder.degree(variable)
            lead = remainder.coefficient(variable, degree)
            shift = Monomial.of({variable: degree - divisor_degree})
            remainder = remainder.multiply(initial).subtract(
                lead.multiply(divisor).multiply_by_monomial(shift)
            )
        return remainder

    def evaluate(self, values: Mapping[AnyVariable, Number]) -> Fraction:
        total = Fraction(0)
        for monomial, coefficient in self._terms.items():
            value = coefficient
            for variable, exponent in monomial.powers:
                value *= Fraction(values[variable]) ** exponent
            total += value
        return total

    # ------------------------------------------------------------------
    # Matching

    def structural_match(self, other: "Polynomial") -> bool:
        """Return ``True`` when ``other`` equals ``k * self`` for a nonzero scalar ``k``."""

        if self.is_zero() or other.is_zero():
            return self.is_zero() and other.is_zero()
        if len(self) != len(other) or set(self._terms) != set(other._terms):
            return False
        lead = self.leading_monomial()
        mine = self._terms[lead]
        theirs = other._terms[lead]
        for monomial, coefficient in self._terms.items():
            if coefficient / mine != other._terms[monomial] / theirs:
                return False
        return True

    # ------------------------------------------------------------------
    # Value semantics

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (int, Fraction)):
            other = Polynomial.constant(other)
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self._terms == other._terms

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._terms.items()))
        return self._hash

    def __str__(self) -> str:
        if not self._terms:
            return "0"
        pieces: List[str] = []
        for monomial, coefficient in self.terms():
            sign = "-" if coefficient < 0 else "+"
            magnitude = abs(coefficient)
            if monomial.is_unit():
                body = str(magnitude)
            elif magnitude == 1:
                body = str(monomial)
            else:
                body = f"{magnitude}*{monomial}"
            pieces.append(f"{sign} {body}")
        text = " ".join(pieces)
        return text[2:] if text.startswith("+ ") else "-" + text[2:]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class SymbolicPolynomial(Polynomial):
    """Condition template over role-label placeholders."""

    __slots__ = ()

    @classmethod
    def coordinate(cls, label: str, coord: str) -> "SymbolicPolynomial":
        return cls.variable(SymbolicVariable(label, coord))

    def labels(self) -> FrozenSet[str]:
        return frozenset(v.label for v in self.variables() if isinstance(v, SymbolicVariable))

    def instantiate(self, coordinates: Mapping[str, Tuple[Variable, Variable]]) -> Polynomial:
        """Replace placeholders by the ``(x, y)`` variables mapped to each role label."""

        missing = sorted(self.labels() - set(coordinates))
        if missing:
            raise MissingRoleError(missing)
        renaming: Dict[AnyVariable, AnyVariable] = {}
        for variable in self.variables():
            if isinstance(variable, SymbolicVariable):
                x, y = coordinates[variable.label]
                renaming[variable] = x if variable.coord == "x" else y
        return Polynomial(self.rename(renaming)._terms)


def _coerce(value: object, like: Optional[Polynomial] = None) -> Polynomial:
    if isinstance(value, Polynomial):
        return value
    if isinstance(value, (int, Fraction)):
        cls = type(like) if like is not None else Polynomial
        return cls.constant(value)
    raise TypeError(f"cannot combine polynomial with {type(value).__name__}")


def const(value: Number) -> Polynomial:
    return Polynomial.constant(value)


def var(variable: Variable) -> Polynomial:
    return Polynomial.variable(variable)


def sym(label: str, coord: str) -> SymbolicPolynomial:
    return SymbolicPolynomial.coordinate(label, coord)


def polynomial_sum(polynomials: Iterable[Polynomial]) -> Polynomial:
    total: Optional[Polynomial] = None
    for polynomial in polynomials:
        total = polynomial if total is None else total.add(polynomial)
    return total if total is not None else Polynomial()


__all__ = [
    "AnyVariable",
    "Monomial",
    "MissingRoleError",
    "Polynomial",
    "SymbolicPolynomial",
    "SymbolicVariable",
    "Term",
    "Variable",
    "const",
    "polynomial_sum",
    "sym",
    "var",
]
