"""Native field element gadget.

FpVar wraps a linear combination over the constraint system's own field.
Additions and scalar multiplications are free; a product of two non-constant
values costs one constraint, as do square and inverse. is_zero/is_eq follow the
usual inverse-or-zero construction:

    x · inv = 1 - z
    x · z   = 0

which forces z = 1 exactly when x = 0.
"""

from typing import Callable, List, Optional, Union

import galois

from constraints import ConstraintSystem, DivisionByZero, LinearCombination
from primitives.field import field_bits, field_modulus, to_field
from .boolean import Boolean
from .uint import pack_bits

Operand = Union["FpVar", int]


class FpVar:
    """Element of the native field inside a constraint system."""

    def __init__(self, cs: ConstraintSystem, lc: LinearCombination):
        self.cs = cs
        self.lc = lc

    # --- Construction ---

    @classmethod
    def alloc(cls, cs: ConstraintSystem, value_fn: Callable[[], object]) -> "FpVar":
        return cls(cs, cs.lc(cs.allocate(value_fn)))

    @classmethod
    def alloc_input(cls, cs: ConstraintSystem, value_fn: Callable[[], object]) -> "FpVar":
        return cls(cs, cs.lc(cs.allocate_input(value_fn)))

    @classmethod
    def constant(cls, cs: ConstraintSystem, value) -> "FpVar":
        return cls(cs, cs.lc(to_field(cs.field, value)))

    @property
    def is_constant(self) -> bool:
        return self.lc.is_constant

    def value(self) -> Optional[galois.FieldArray]:
        if self.is_constant:
            return self.lc.constant_value
        return self.cs.eval(self.lc)

    def __repr__(self) -> str:
        return f"FpVar({self.lc})"

    def _coerce(self, other: Operand) -> "FpVar":
        if isinstance(other, FpVar):
            return other
        return FpVar.constant(self.cs, other)

    # --- Arithmetic ---

    def __add__(self, other: Operand) -> "FpVar":
        return FpVar(self.cs, self.lc + self._coerce(other).lc)

    __radd__ = __add__

    def __sub__(self, other: Operand) -> "FpVar":
        return FpVar(self.cs, self.lc - self._coerce(other).lc)

    def __rsub__(self, other: Operand) -> "FpVar":
        return self._coerce(other) - self

    def __neg__(self) -> "FpVar":
        return FpVar(self.cs, -self.lc)

    def __mul__(self, other: Operand) -> "FpVar":
        other = self._coerce(other)
        if other.is_constant:
            return FpVar(self.cs, self.lc * other.lc.constant_value)
        if self.is_constant:
            return FpVar(self.cs, other.lc * self.lc.constant_value)
        cs = self.cs
        product = cs.allocate(lambda: _mul(self.value(), other.value()))
        cs.enforce(self.lc, other.lc, product, label="mul")
        return FpVar(cs, cs.lc(product))

    __rmul__ = __mul__

    def square(self) -> "FpVar":
        return self * self

    def inverse(self) -> "FpVar":
        """Multiplicative inverse; proving fails with DivisionByZero on zero."""
        if self.is_constant:
            if self.lc.constant_value == 0:
                raise DivisionByZero("Inverse of constant zero")
            return FpVar.constant(self.cs, self.lc.constant_value ** -1)
        cs = self.cs

        def witness():
            v = self.value()
            if v is not None and v == 0:
                raise DivisionByZero("Inverse of zero")
            return None if v is None else v ** -1

        inv = cs.allocate(witness)
        cs.enforce(self.lc, inv, 1, label="inverse")
        return FpVar(cs, cs.lc(inv))

    # --- Comparison ---

    def is_zero(self) -> Boolean:
        if self.is_constant:
            return Boolean.constant(self.lc.constant_value == 0, self.cs)
        cs = self.cs
        inv = cs.allocate(lambda: _inverse_or_zero(self.value()))
        z = cs.lc(cs.allocate(lambda: _is_zero(self.value())))
        cs.enforce(self.lc, inv, 1 - z, label="is_zero inverse")
        cs.enforce(self.lc, z, 0, label="is_zero flag")
        return Boolean(cs, z)

    def is_eq(self, other: Operand) -> Boolean:
        return (self - other).is_zero()

    def is_neq(self, other: Operand) -> Boolean:
        return self.is_eq(other).not_()

    def enforce_equal(self, other: Operand) -> None:
        self.cs.enforce(self.lc, 1, self._coerce(other).lc, label="fp equality")

    @staticmethod
    def conditional_select(cond: Boolean, a: "FpVar", b: "FpVar") -> "FpVar":
        """Return ``a`` if cond else ``b`` (one constraint unless cond is constant)."""
        if cond.is_constant:
            return a if cond.constant_value else b
        cs = cond.cs
        result = cs.lc(cs.allocate(lambda: a.value() if cond.value() else b.value()))
        cs.enforce(cond.lc, a.lc - b.lc, result - b.lc, label="select")
        return FpVar(cs, result)

    def to_bits_le(self) -> List[Boolean]:
        """Canonical little-endian bit decomposition (value <= p - 1 enforced)."""
        cs = self.cs
        n = field_bits(cs.field)
        bits = [
            Boolean.alloc(cs, lambda i=i: _bit_of(self.value(), i)) for i in range(n)
        ]
        cs.enforce(pack_bits(cs, bits), 1, self.lc, label="to bits")
        Boolean.enforce_smaller_or_equal_than_le(bits, field_modulus(cs.field) - 1)
        return bits


def _mul(a, b):
    return None if a is None or b is None else a * b


def _inverse_or_zero(v):
    if v is None:
        return None
    return v ** -1 if v != 0 else 0


def _is_zero(v):
    return None if v is None else int(v == 0)


def _bit_of(v, i: int) -> Optional[int]:
    return None if v is None else (int(v) >> i) & 1
