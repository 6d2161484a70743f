"""Range checks and fixed-width unsigned integers built from Booleans.

range_check() is the primitive the non-native gadget relies on: a value whose
bits were checked this way equals an integer in [0, 2^num_bits) in every
satisfying assignment, provided num_bits is below the native field capacity.
"""

from typing import List, Optional, Sequence, Tuple

from constraints import ConstraintSystem, LinearCombination, Unsatisfiable
from constraints.variable import LinearCombinationLike
from primitives.field import field_capacity
from primitives.limbs import bits_le, ceil_log2
from .boolean import Boolean


def _bit_of(value, i: int) -> Optional[int]:
    return None if value is None else (int(value) >> i) & 1


def pack_bits(cs: ConstraintSystem, bits: Sequence[Boolean]) -> LinearCombination:
    """``Σ 2^i · bits[i]`` as a linear combination."""
    acc = cs.lc(0)
    for i, bit in enumerate(bits):
        acc = acc + bit.to_lc(cs) * (1 << i)
    return acc


def range_check(cs: ConstraintSystem, value: LinearCombinationLike, num_bits: int) -> List[Boolean]:
    """Decompose ``value`` into num_bits little-endian bits and pin the packing.

    Args:
        cs: Constraint system
        value: Variable or linear combination to check
        num_bits: Bit width; must be below the native field capacity

    Returns:
        The bits, least significant first

    Raises:
        ValueError: If num_bits is not below the field capacity
        Unsatisfiable: If value is a constant outside the range
    """
    if num_bits >= field_capacity(cs.field):
        raise ValueError(
            f"Cannot range check {num_bits} bits in a field of capacity {field_capacity(cs.field)}"
        )
    lc = cs.lc(value)
    if lc.is_constant:
        constant = int(lc.constant_value)
        if constant >> num_bits:
            raise Unsatisfiable(f"Constant {constant} does not fit in {num_bits} bits")
        return [Boolean.constant(b, cs) for b in bits_le(constant, num_bits)]

    bits = [Boolean.alloc(cs, lambda i=i: _bit_of(cs.eval(lc), i)) for i in range(num_bits)]
    cs.enforce(pack_bits(cs, bits), 1, lc, label=f"range check {num_bits}")
    return bits


class UInt:
    """Unsigned integer of fixed width, stored as little-endian Booleans."""

    def __init__(self, bits: Sequence[Boolean]):
        self.bits = list(bits)

    @property
    def width(self) -> int:
        return len(self.bits)

    @property
    def cs(self) -> Optional[ConstraintSystem]:
        for bit in self.bits:
            if bit.cs is not None:
                return bit.cs
        return None

    @property
    def is_constant(self) -> bool:
        return all(bit.is_constant for bit in self.bits)

    # --- Construction ---

    @classmethod
    def constant(cls, value: int, width: int, cs: Optional[ConstraintSystem] = None) -> "UInt":
        assert 0 <= value < (1 << width), f"{value} does not fit in {width} bits"
        return cls([Boolean.constant(b, cs) for b in bits_le(value, width)])

    @classmethod
    def alloc(cls, cs: ConstraintSystem, width: int, value_fn) -> "UInt":
        """Allocate width witness bits holding value_fn() mod 2^width."""
        def bit(i):
            value = value_fn()
            return None if value is None else (int(value) >> i) & 1
        return cls([Boolean.alloc(cs, lambda i=i: bit(i)) for i in range(width)])

    def to_lc(self, cs: ConstraintSystem) -> LinearCombination:
        return pack_bits(cs, self.bits)

    def value(self) -> Optional[int]:
        acc = 0
        for i, bit in enumerate(self.bits):
            v = bit.value()
            if v is None:
                return None
            acc |= int(v) << i
        return acc

    def __repr__(self) -> str:
        return f"UInt{self.width}({self.value()})"

    # --- Bitwise ---

    def _zip(self, other: "UInt") -> List[Tuple[Boolean, Boolean]]:
        assert self.width == other.width, f"Width mismatch: {self.width} vs {other.width}"
        return list(zip(self.bits, other.bits))

    def xor(self, other: "UInt") -> "UInt":
        return UInt([a.xor(b) for a, b in self._zip(other)])

    def and_(self, other: "UInt") -> "UInt":
        return UInt([a.and_(b) for a, b in self._zip(other)])

    def or_(self, other: "UInt") -> "UInt":
        return UInt([a.or_(b) for a, b in self._zip(other)])

    def not_(self) -> "UInt":
        return UInt([a.not_() for a in self.bits])

    def rotr(self, by: int) -> "UInt":
        by %= self.width
        return UInt(self.bits[by:] + self.bits[:by])

    def shr(self, by: int) -> "UInt":
        by = min(by, self.width)
        return UInt(self.bits[by:] + [Boolean.constant(False, self.cs)] * by)

    __xor__ = xor
    __and__ = and_
    __or__ = or_
    __invert__ = not_

    # --- Arithmetic ---

    def add_with_carry(self, other: "UInt") -> Tuple["UInt", Boolean]:
        """Return (self + other mod 2^width, carry out)."""
        assert self.width == other.width, f"Width mismatch: {self.width} vs {other.width}"
        cs = self.cs or other.cs
        if cs is None:
            total = self.value() + other.value()
            return (
                UInt.constant(total % (1 << self.width), self.width),
                Boolean.constant(total >> self.width),
            )
        bits = range_check(cs, self.to_lc(cs) + other.to_lc(cs), self.width + 1)
        return UInt(bits[:self.width]), bits[self.width]

    def wrapping_add(self, *others: "UInt") -> "UInt":
        """Sum of self and others modulo 2^width."""
        operands = (self,) + others
        assert all(op.width == self.width for op in operands), "Width mismatch"
        cs = next((op.cs for op in operands if op.cs is not None), None)
        if cs is None:
            total = sum(op.value() for op in operands)
            return UInt.constant(total % (1 << self.width), self.width)
        total = cs.lc(0)
        for op in operands:
            total = total + op.to_lc(cs)
        bits = range_check(cs, total, self.width + ceil_log2(len(operands)))
        return UInt(bits[:self.width])

    # --- Comparison ---

    def enforce_equal(self, other: "UInt") -> None:
        for a, b in self._zip(other):
            a.enforce_equal(b)

    @staticmethod
    def conditional_select(cond: Boolean, a: "UInt", b: "UInt") -> "UInt":
        return UInt([Boolean.conditional_select(cond, x, y) for x, y in a._zip(b)])
