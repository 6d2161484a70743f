"""Boolean gadget: constant or allocated bits.

An allocated Boolean is a linear combination constrained to {0, 1}; negation
is free (``1 - b``), and the binary operations cost one constraint each.
Constant operands are folded away without touching the constraint system, so
mixing constants and allocated bits never changes the circuit for a given
choice of constants.
"""

from typing import Callable, List, Optional, Sequence

from constraints import ConstraintSystem, LinearCombination, Unsatisfiable


def _bit(value) -> Optional[int]:
    return None if value is None else int(bool(value))


class Boolean:
    """A bit inside a constraint system, or a constant bit.

    Attributes:
        cs: Owning constraint system (None for constants created without one)
        lc: Linear combination holding the bit (None for constants)
        constant_value: The bit, for constants
    """

    def __init__(
        self,
        cs: Optional[ConstraintSystem],
        lc: Optional[LinearCombination] = None,
        constant_value: Optional[bool] = None,
    ):
        assert (lc is None) != (constant_value is None), "Boolean is either allocated or constant"
        self.cs = cs
        self.lc = lc
        self.constant_value = constant_value

    # --- Construction ---

    @classmethod
    def constant(cls, value: bool, cs: Optional[ConstraintSystem] = None) -> "Boolean":
        return cls(cs, constant_value=bool(value))

    @classmethod
    def alloc(cls, cs: ConstraintSystem, value_fn: Callable[[], object]) -> "Boolean":
        """Allocate a witness bit and enforce ``b · (1 - b) = 0``."""
        var = cs.allocate(lambda: _bit(value_fn()))
        lc = cs.lc(var)
        cs.enforce(lc, 1 - lc, 0, label="boolean")
        return cls(cs, lc)

    @property
    def is_constant(self) -> bool:
        return self.constant_value is not None

    def to_lc(self, cs: ConstraintSystem) -> LinearCombination:
        """The bit as a linear combination over ``cs``'s field."""
        if self.is_constant:
            return cs.lc(int(self.constant_value))
        return self.lc

    def value(self) -> Optional[bool]:
        """The bit's value, or None in setup mode."""
        if self.is_constant:
            return self.constant_value
        v = self.cs.eval(self.lc)
        return None if v is None else int(v) == 1

    def __repr__(self) -> str:
        if self.is_constant:
            return f"Boolean({self.constant_value})"
        return f"Boolean({self.lc})"

    # --- Logic ---

    def not_(self) -> "Boolean":
        if self.is_constant:
            return Boolean.constant(not self.constant_value, self.cs)
        return Boolean(self.cs, 1 - self.lc)

    def and_(self, other: "Boolean") -> "Boolean":
        if self.is_constant:
            return other if self.constant_value else self
        if other.is_constant:
            return self if other.constant_value else other
        cs = self.cs
        result = cs.allocate(lambda: _and(self.value(), other.value()))
        cs.enforce(self.lc, other.lc, result, label="and")
        return Boolean(cs, cs.lc(result))

    def or_(self, other: "Boolean") -> "Boolean":
        if self.is_constant:
            return self if self.constant_value else other
        if other.is_constant:
            return other if other.constant_value else self
        cs = self.cs
        result = cs.lc(cs.allocate(lambda: _or(self.value(), other.value())))
        # a·b = a + b - (a ∨ b)
        cs.enforce(self.lc, other.lc, self.lc + other.lc - result, label="or")
        return Boolean(cs, result)

    def xor(self, other: "Boolean") -> "Boolean":
        if self.is_constant:
            return other.not_() if self.constant_value else other
        if other.is_constant:
            return self.not_() if other.constant_value else self
        cs = self.cs
        result = cs.lc(cs.allocate(lambda: _xor(self.value(), other.value())))
        # 2a·b = a + b - (a ⊕ b)
        cs.enforce(self.lc * 2, other.lc, self.lc + other.lc - result, label="xor")
        return Boolean(cs, result)

    __invert__ = not_
    __and__ = and_
    __or__ = or_
    __xor__ = xor

    @staticmethod
    def kary_and(bits: Sequence["Boolean"]) -> "Boolean":
        assert len(bits) > 0, "kary_and of no bits"
        acc = bits[0]
        for bit in bits[1:]:
            acc = acc.and_(bit)
        return acc

    @staticmethod
    def kary_or(bits: Sequence["Boolean"]) -> "Boolean":
        assert len(bits) > 0, "kary_or of no bits"
        acc = bits[0]
        for bit in bits[1:]:
            acc = acc.or_(bit)
        return acc

    # --- Enforcement ---

    def enforce_equal(self, other: "Boolean") -> None:
        """Constrain both bits to be equal.

        Raises:
            Unsatisfiable: If both are constants with different values
        """
        cs = self.cs or other.cs
        if self.is_constant and other.is_constant:
            if self.constant_value != other.constant_value:
                raise Unsatisfiable("Constant booleans differ")
            return
        cs.enforce(self.to_lc(cs), 1, other.to_lc(cs), label="boolean equality")

    @staticmethod
    def enforce_kary_nand(bits: Sequence["Boolean"]) -> None:
        """Constrain at least one of ``bits`` to be false."""
        Boolean.kary_and(bits).enforce_equal(Boolean.constant(False))

    @staticmethod
    def conditional_select(cond: "Boolean", a: "Boolean", b: "Boolean") -> "Boolean":
        """Return ``a`` if cond else ``b``."""
        if cond.is_constant:
            return a if cond.constant_value else b
        if a.is_constant and b.is_constant:
            if a.constant_value == b.constant_value:
                return a
            return cond if a.constant_value else cond.not_()
        cs = cond.cs
        a_lc, b_lc = a.to_lc(cs), b.to_lc(cs)
        result = cs.lc(
            cs.allocate(lambda: a.value() if cond.value() else b.value())
        )
        # cond·(a - b) = result - b
        cs.enforce(cond.lc, a_lc - b_lc, result - b_lc, label="select")
        return Boolean(cs, result)

    @staticmethod
    def enforce_smaller_or_equal_than_le(bits: Sequence["Boolean"], element: int) -> List["Boolean"]:
        """Constrain the little-endian bit vector to encode a value <= element.

        Walks the constant from its most significant bit tracking whether the
        prefix of ``bits`` seen so far equals the prefix of ``element``. Where
        the constant has a zero and the prefixes are equal, the bit must be
        zero.

        Returns:
            The trailing run of bits aligned with the constant's low ones
        """
        element_bits = element.bit_length()
        bits = list(bits)
        if len(bits) > element_bits:
            Boolean.kary_or(bits[element_bits:]).enforce_equal(Boolean.constant(False))
            bits = bits[:element_bits]
        if len(bits) < element_bits:
            # Fewer bits than the constant: the value is already smaller
            return []

        last_run = Boolean.constant(True)
        current_run: List[Boolean] = []
        for i in reversed(range(element_bits)):
            if (element >> i) & 1:
                current_run.append(bits[i])
            else:
                if current_run:
                    current_run.append(last_run)
                    last_run = Boolean.kary_and(current_run)
                    current_run = []
                Boolean.enforce_kary_nand([last_run, bits[i]])
        return current_run


def _and(a: Optional[bool], b: Optional[bool]) -> Optional[int]:
    return None if a is None or b is None else int(a and b)


def _or(a: Optional[bool], b: Optional[bool]) -> Optional[int]:
    return None if a is None or b is None else int(a or b)


def _xor(a: Optional[bool], b: Optional[bool]) -> Optional[int]:
    return None if a is None or b is None else int(a != b)
