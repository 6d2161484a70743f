"""Variables and linear combinations.

A Variable is a lightweight handle to a slot of a constraint system; it never
holds a witness (constants excepted). A LinearCombination is an affine form
``Σ coefficient_i · value(variable_i)`` over the native field, with constants
carried as a coefficient on the ONE variable.

Example:
    x = cs.allocate(lambda: 3)
    lc = LinearCombination.from_variable(cs.field, x) * 2 + 1   # 2x + 1
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple, Union

import galois

from primitives.field import to_field


class VariableKind(Enum):
    """Kind of slot a Variable refers to."""
    ONE = "one"            # implicit constant 1 (instance column 0)
    CONSTANT = "constant"  # fixed value, no slot
    INSTANCE = "instance"  # public input
    WITNESS = "witness"    # private auxiliary variable


@dataclass(frozen=True)
class Variable:
    """Handle to a constraint-system slot.

    Attributes:
        kind: Which slot family the variable lives in
        index: Position within its family (instance indices start at 1)
        owner: Identity of the constraint system that allocated it
        value: Fixed value, only for CONSTANT variables
    """
    kind: VariableKind
    index: int = 0
    owner: Optional[int] = None
    value: Optional[int] = None

    @property
    def is_constant(self) -> bool:
        return self.kind in (VariableKind.ONE, VariableKind.CONSTANT)


ONE = Variable(VariableKind.ONE)

Coefficient = Union[int, galois.FieldArray]
LinearCombinationLike = Union["LinearCombination", Variable, int, galois.FieldArray]


class LinearCombination:
    """Insertion-ordered mapping from Variable to native-field coefficient."""

    __slots__ = ("field", "terms")

    # Field elements on the left of an operator defer to our reflected methods
    __array_ufunc__ = None

    def __init__(self, field: type, terms=()):
        self.field = field
        self.terms: Dict[Variable, galois.FieldArray] = {}
        for var, coeff in terms:
            self._add_term(var, coeff)

    # --- Construction ---

    @classmethod
    def zero(cls, field: type) -> "LinearCombination":
        return cls(field)

    @classmethod
    def constant(cls, field: type, value: Coefficient) -> "LinearCombination":
        return cls(field, [(ONE, value)])

    @classmethod
    def from_variable(cls, field: type, var: Variable) -> "LinearCombination":
        return cls(field, [(var, 1)])

    @classmethod
    def coerce(cls, field: type, value: LinearCombinationLike) -> "LinearCombination":
        """Turn a Variable, int or field element into a LinearCombination."""
        if isinstance(value, LinearCombination):
            return value
        if isinstance(value, Variable):
            return cls.from_variable(field, value)
        return cls.constant(field, value)

    def copy(self) -> "LinearCombination":
        lc = LinearCombination(self.field)
        lc.terms = dict(self.terms)
        return lc

    def _add_term(self, var: Variable, coeff: Coefficient) -> None:
        coeff = to_field(self.field, coeff)
        if var.kind is VariableKind.CONSTANT:
            coeff = coeff * to_field(self.field, var.value)
            var = ONE
        total = self.terms.get(var, self.field(0)) + coeff
        if total == 0:
            self.terms.pop(var, None)
        else:
            self.terms[var] = total

    # --- Inspection ---

    @property
    def is_constant(self) -> bool:
        """True if the combination refers to no allocated variable."""
        return all(var.kind is VariableKind.ONE for var in self.terms)

    @property
    def constant_value(self) -> galois.FieldArray:
        """Coefficient of ONE (the constant part)."""
        return self.terms.get(ONE, self.field(0))

    def variables(self) -> Iterator[Variable]:
        return iter(self.terms)

    def shape(self) -> Tuple[Tuple[str, int, int], ...]:
        """Owner-independent description, for comparing circuits across systems."""
        return tuple((var.kind.value, var.index, int(c)) for var, c in self.terms.items())

    def __iter__(self) -> Iterator[Tuple[Variable, galois.FieldArray]]:
        return iter(self.terms.items())

    def __len__(self) -> int:
        return len(self.terms)

    def __eq__(self, other) -> bool:
        if not isinstance(other, LinearCombination):
            return NotImplemented
        return (
            self.field is other.field
            and {v: int(c) for v, c in self.terms.items()}
            == {v: int(c) for v, c in other.terms.items()}
        )

    __hash__ = None

    def __repr__(self) -> str:
        parts = []
        for var, coeff in self.terms.items():
            if var.kind is VariableKind.ONE:
                parts.append(f"{int(coeff)}")
            else:
                parts.append(f"{int(coeff)}*{var.kind.value[0]}{var.index}")
        return "LC(" + (" + ".join(parts) or "0") + ")"

    # --- Arithmetic ---

    def __add__(self, other: LinearCombinationLike) -> "LinearCombination":
        other = LinearCombination.coerce(self.field, other)
        result = self.copy()
        for var, coeff in other.terms.items():
            result._add_term(var, coeff)
        return result

    __radd__ = __add__

    def __neg__(self) -> "LinearCombination":
        return self * -1

    def __sub__(self, other: LinearCombinationLike) -> "LinearCombination":
        return self + (-LinearCombination.coerce(self.field, other))

    def __rsub__(self, other: LinearCombinationLike) -> "LinearCombination":
        return LinearCombination.coerce(self.field, other) - self

    def __mul__(self, scalar: Coefficient) -> "LinearCombination":
        if isinstance(scalar, (LinearCombination, Variable)):
            return NotImplemented
        scalar = to_field(self.field, scalar)
        result = LinearCombination(self.field)
        if scalar == 0:
            return result
        result.terms = {var: coeff * scalar for var, coeff in self.terms.items()}
        return result

    __rmul__ = __mul__
