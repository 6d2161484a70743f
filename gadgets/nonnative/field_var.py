"""Non-native field element gadget.

A NonNativeFieldVar holds a value of a target field F_t inside a constraint
system over a different native field F_n, as a little-endian vector of limbs:

    value ≡ Σ limb_i · 2^(i·W)   (mod p_t)

Each limb is a linear combination whose integer value is known to lie in
[0, limb_bounds[i]]. The representation is in one of two states:

- fresh: allocated, reduced or constant. Limbs are range checked to W bits
  (the top limb to the modulus' remaining bits) and the value is < p_t, so
  the representation is canonical.
- composed: the result of add/sub/negate/mul. Limbs may exceed W bits; the
  integer sum may exceed p_t. Reduction is deferred.

The spare headroom of a representation is its surfeit (see params.py).
Additions and negations cost one bit of surfeit each and no constraints;
multiplication costs about W + log2(limbs) bits and one constraint per product
limb. reduce() restores a fresh representation.

Example:
    params = get_params(MERSENNE61_MODULUS, BN254_FR, limb_width=32)
    x = NonNativeFieldVar.alloc(cs, params, 5)
    y = NonNativeFieldVar.alloc(cs, params, 7)
    z = x.mul(y).reduce()      # z.value() == 35
"""

import logging
from functools import cache, cached_property
from typing import Callable, List, Optional, Sequence, Tuple, Union

from constraints import (
    ConstraintSystem,
    DivisionByZero,
    LinearCombination,
    ReductionRequired,
    Unsatisfiable,
)
from primitives.limbs import convolve, from_limbs, limb_widths, to_limbs, zero_multiple_limbs
from ..boolean import Boolean
from ..fp import FpVar
from ..uint import range_check
from .carry import enforce_equal_when_carried
from .params import NonNativeParams

logger = logging.getLogger(__name__)

Operand = Union["NonNativeFieldVar", int]


def _limb_of(value: Optional[int], index: int, width: int) -> Optional[int]:
    if value is None:
        return None
    return (value >> (index * width)) & ((1 << width) - 1)


class NonNativeFieldVar:
    """Target-field element emulated with native-field limbs.

    Attributes:
        cs: Constraint system the limbs live in
        params: Limb layout and bounds
        limbs: Little-endian limbs as linear combinations
        limb_bounds: Inclusive upper bound on each limb's integer value
        is_fresh: True when canonical (range checked and < p_t)
    """

    def __init__(
        self,
        cs: ConstraintSystem,
        params: NonNativeParams,
        limbs: Sequence[LinearCombination],
        limb_bounds: Sequence[int],
        is_fresh: bool,
        bits: Optional[List[Boolean]] = None,
    ):
        assert len(limbs) == len(limb_bounds), "One bound per limb"
        self.cs = cs
        self.params = params
        self.limbs = list(limbs)
        self.limb_bounds = list(limb_bounds)
        self.is_fresh = is_fresh
        self._bits = bits

    # --- Construction ---

    @classmethod
    def alloc(
        cls,
        cs: ConstraintSystem,
        params: NonNativeParams,
        value: Union[int, Callable[[], Optional[int]]],
    ) -> "NonNativeFieldVar":
        """Allocate a fresh witness.

        Args:
            cs: Constraint system
            params: Limb layout
            value: Target-field value, or a zero-argument provider of it (only
                called in proving mode). Reduced mod p_t.

        Returns:
            Fresh NonNativeFieldVar
        """
        value_fn = value if callable(value) else (lambda: value)
        with cs.namespace("nonnative alloc"):
            return cls._alloc_canonical(cs, params, cache(lambda: _mod(value_fn(), params)))

    @classmethod
    def _alloc_canonical(
        cls,
        cs: ConstraintSystem,
        params: NonNativeParams,
        value_fn: Callable[[], Optional[int]],
    ) -> "NonNativeFieldVar":
        limbs = []
        bits: List[Boolean] = []
        for i, width in enumerate(params.widths):
            var = cs.allocate(lambda i=i: _limb_of(value_fn(), i, params.limb_width))
            bits.extend(range_check(cs, var, width))
            limbs.append(cs.lc(var))
        Boolean.enforce_smaller_or_equal_than_le(bits, params.target_modulus - 1)
        return cls(cs, params, limbs, _fresh_bounds(params), is_fresh=True, bits=bits)

    @classmethod
    def constant(cls, cs: ConstraintSystem, params: NonNativeParams, value: int) -> "NonNativeFieldVar":
        """Canonical constant; emits no constraints."""
        value %= params.target_modulus
        limbs = [cs.lc(limb) for limb in to_limbs(value, params.limb_width, params.num_limbs)]
        return cls(cs, params, limbs, _fresh_bounds(params), is_fresh=True)

    # --- Inspection ---

    @property
    def num_limbs(self) -> int:
        return len(self.limbs)

    @property
    def is_constant(self) -> bool:
        return all(limb.is_constant for limb in self.limbs)

    @property
    def word_bits(self) -> int:
        """Bit bound shared by every limb."""
        return max(self.limb_bounds).bit_length()

    @property
    def surfeit(self) -> int:
        """Spare bits before the representation can no longer be reduced."""
        return self.params.surfeit(self.word_bits)

    def raw_value(self) -> Optional[int]:
        """Unreduced integer Σ limb_i · 2^(i·W), or None in setup mode."""
        limbs = []
        for limb in self.limbs:
            if limb.is_constant:
                limbs.append(int(limb.constant_value))
                continue
            v = self.cs.eval(limb)
            if v is None:
                return None
            limbs.append(int(v))
        return from_limbs(limbs, self.params.limb_width)

    def value(self) -> Optional[int]:
        """Represented target-field value, or None in setup mode."""
        raw = self.raw_value()
        return None if raw is None else raw % self.params.target_modulus

    def __repr__(self) -> str:
        state = "fresh" if self.is_fresh else "composed"
        return f"NonNativeFieldVar({self.value()}, {self.num_limbs} limbs, {state}, surfeit={self.surfeit})"

    # --- Helpers ---

    def _coerce(self, other: Operand) -> "NonNativeFieldVar":
        if isinstance(other, NonNativeFieldVar):
            if other.params != self.params:
                raise ValueError("Operands use different non-native parameters")
            return other
        return NonNativeFieldVar.constant(self.cs, self.params, other)

    def _composed(self, limbs, bounds, op: str) -> "NonNativeFieldVar":
        result = NonNativeFieldVar(self.cs, self.params, limbs, bounds, is_fresh=False)
        if result.surfeit < 1:
            raise ReductionRequired(
                f"{op} would leave surfeit {result.surfeit} ({result.word_bits}-bit limbs, "
                f"at most {self.params.max_word_bits}); reduce the operands first"
            )
        return result

    def _require_fresh(self, op: str) -> None:
        if not self.is_fresh:
            raise ReductionRequired(f"{op} needs a reduced operand; call reduce() first")

    # --- Arithmetic ---

    def add(self, other: Operand) -> "NonNativeFieldVar":
        """Limb-wise sum; carries are absorbed into the limb bounds."""
        other = self._coerce(other)
        n = max(self.num_limbs, other.num_limbs)
        a, a_bounds = _padded(self, n)
        b, b_bounds = _padded(other, n)
        limbs = [x + y for x, y in zip(a, b)]
        bounds = [x + y for x, y in zip(a_bounds, b_bounds)]
        return self._composed(limbs, bounds, "add")

    def negate(self) -> "NonNativeFieldVar":
        """``C - self`` for a limb vector C ≡ 0 (mod p_t) dominating every limb."""
        params = self.params
        pad_bits = max(self.word_bits, params.limb_width)
        n = max(self.num_limbs, params.num_limbs)
        zero = zero_multiple_limbs(params.target_modulus, params.limb_width, n, pad_bits)
        a, _ = _padded(self, n)
        limbs = [c - x for c, x in zip(zero, a)]
        return self._composed(limbs, zero, "negate")

    def sub(self, other: Operand) -> "NonNativeFieldVar":
        return self.add(self._coerce(other).negate())

    def mul(self, other: Operand) -> "NonNativeFieldVar":
        """Schoolbook product without carries.

        The 2n - 1 product limbs z_k are allocated as witnesses and tied to the
        operands by evaluating both limb polynomials at x = 0, 1, ..., 2n - 2:

            (Σ a_i x^i) · (Σ b_j x^j) = Σ z_k x^k

        Agreement at that many points makes the polynomials equal, and the limb
        bounds keep every coefficient below p_n, so z_k is the exact integer
        convolution. Constant operands need no constraints.
        """
        other = self._coerce(other)
        cs = self.cs
        bounds = convolve(self.limb_bounds, other.limb_bounds)
        # Check capacity before emitting anything
        self._composed([cs.lc(0)] * len(bounds), bounds, "mul")

        if self.is_constant or other.is_constant:
            const, var = (self, other) if self.is_constant else (other, self)
            limbs = [cs.lc(0) for _ in bounds]
            for i, c in enumerate(const.limbs):
                for j, x in enumerate(var.limbs):
                    limbs[i + j] = limbs[i + j] + x * c.constant_value
            return self._composed(limbs, bounds, "mul")

        @cache
        def product():
            a, b = self._limb_values(), other._limb_values()
            return None if a is None or b is None else convolve(a, b)

        with cs.namespace("nonnative mul"):
            limbs = [
                cs.lc(cs.allocate(lambda k=k: None if product() is None else product()[k]))
                for k in range(len(bounds))
            ]
            for x in range(len(bounds)):
                cs.enforce(
                    _evaluate_at(cs, self.limbs, x),
                    _evaluate_at(cs, other.limbs, x),
                    _evaluate_at(cs, limbs, x),
                    label=f"product at {x}",
                )
        return self._composed(limbs, bounds, "mul")

    def square(self) -> "NonNativeFieldVar":
        return self.mul(self)

    def inverse(self) -> "NonNativeFieldVar":
        """Fresh inverse, checked by ``reduce(self · inv) == 1``.

        Raises:
            DivisionByZero: In proving mode, if the value is zero
            ReductionRequired: If self has too little surfeit to multiply
        """
        p = self.params.target_modulus

        def witness():
            v = self.value()
            if v is None:
                return None
            if v == 0:
                raise DivisionByZero("Inverse of zero in the target field")
            return pow(v, -1, p)

        inv = NonNativeFieldVar.alloc(self.cs, self.params, witness)
        one = NonNativeFieldVar.constant(self.cs, self.params, 1)
        self.mul(inv).reduce().enforce_equal(one)
        return inv

    __add__ = add
    __radd__ = add
    __sub__ = sub
    __mul__ = mul
    __rmul__ = mul
    __neg__ = negate

    def __rsub__(self, other: Operand) -> "NonNativeFieldVar":
        return self._coerce(other).sub(self)

    # --- Reduction ---

    def _limb_values(self) -> Optional[List[int]]:
        values = []
        for limb in self.limbs:
            v = limb.constant_value if limb.is_constant else self.cs.eval(limb)
            if v is None:
                return None
            values.append(int(v))
        return values

    @cached_property
    def _reduction_witness(self) -> Optional[Tuple[int, int]]:
        """(quotient, remainder) of the raw integer by p_t; computed once."""
        raw = self.raw_value()
        return None if raw is None else divmod(raw, self.params.target_modulus)

    def reduce(self) -> "NonNativeFieldVar":
        """Return a fresh representation of the same target value.

        Allocates a canonical remainder r and a range-checked quotient q, then
        enforces ``self = q · p_t + r`` over the integers with a carry chain.
        Fresh inputs are returned unchanged.
        """
        if self.is_fresh:
            return self
        cs, params = self.cs, self.params
        width = params.limb_width
        logger.debug(
            "Reducing %d limbs of %d bits (surfeit %d)", self.num_limbs, self.word_bits, self.surfeit
        )

        def witness(part: int) -> Optional[int]:
            qr = self._reduction_witness
            return None if qr is None else qr[part]

        with cs.namespace("nonnative reduce"):
            remainder = NonNativeFieldVar._alloc_canonical(cs, params, lambda: witness(1))

            quotient_bound = from_limbs(self.limb_bounds, width) // params.target_modulus
            quotient_widths = limb_widths(quotient_bound.bit_length(), width)
            quotient = []
            for i, qw in enumerate(quotient_widths):
                var = cs.allocate(lambda i=i: _limb_of(witness(0), i, width))
                range_check(cs, var, qw)
                quotient.append(cs.lc(var))
            quotient_bounds = [(1 << qw) - 1 for qw in quotient_widths]

            # q · p_t + r, limb by limb
            modulus_limbs = params.modulus_limbs
            n = max(len(quotient) + len(modulus_limbs) - 1, remainder.num_limbs)
            right = [cs.lc(0) for _ in range(n)]
            for i, q in enumerate(quotient):
                for j, p in enumerate(modulus_limbs):
                    right[i + j] = right[i + j] + q * p
            right_bounds = convolve(quotient_bounds, modulus_limbs) + [0] * n
            right_bounds = right_bounds[:n]
            for k, (r, rb) in enumerate(zip(remainder.limbs, remainder.limb_bounds)):
                right[k] = right[k] + r
                right_bounds[k] += rb

            enforce_equal_when_carried(cs, params, self.limbs, self.limb_bounds, right, right_bounds)
        return remainder

    # --- Comparison and selection (fresh operands only) ---

    def enforce_equal(self, other: Operand) -> None:
        """Constrain two fresh values to be equal, limb by limb.

        Raises:
            ReductionRequired: If either operand is not fresh
            Unsatisfiable: If both are constants with different values
        """
        other = self._coerce(other)
        self._require_fresh("enforce_equal")
        other._require_fresh("enforce_equal")
        if self.is_constant and other.is_constant:
            if self._limb_values() != other._limb_values():
                raise Unsatisfiable("Constant non-native values differ")
            return
        with self.cs.namespace("nonnative equality"):
            for a, b in zip(self.limbs, other.limbs):
                self.cs.enforce(a, 1, b, label="limb equality")

    def is_eq(self, other: Operand) -> Boolean:
        """Boolean that is true iff both fresh values are equal."""
        other = self._coerce(other)
        self._require_fresh("is_eq")
        other._require_fresh("is_eq")
        return Boolean.kary_and([
            FpVar(self.cs, a).is_eq(FpVar(self.cs, b)) for a, b in zip(self.limbs, other.limbs)
        ])

    @staticmethod
    def conditional_select(
        cond: Boolean, a: "NonNativeFieldVar", b: "NonNativeFieldVar"
    ) -> "NonNativeFieldVar":
        """Return ``a`` if cond else ``b``; both must be fresh."""
        b = a._coerce(b)
        a._require_fresh("conditional_select")
        b._require_fresh("conditional_select")
        if cond.is_constant:
            return a if cond.constant_value else b
        limbs = [
            FpVar.conditional_select(cond, FpVar(a.cs, x), FpVar(a.cs, y)).lc
            for x, y in zip(a.limbs, b.limbs)
        ]
        bounds = [max(x, y) for x, y in zip(a.limb_bounds, b.limb_bounds)]
        return NonNativeFieldVar(a.cs, a.params, limbs, bounds, is_fresh=True)

    def to_bits_le(self) -> List[Boolean]:
        """Canonical little-endian bits of a fresh value (target_bits of them)."""
        self._require_fresh("to_bits_le")
        if self._bits is None:
            bits: List[Boolean] = []
            for limb, width in zip(self.limbs, self.params.widths):
                bits.extend(range_check(self.cs, limb, width))
            self._bits = bits
        return list(self._bits)


def _mod(value, params: NonNativeParams) -> Optional[int]:
    return None if value is None else int(value) % params.target_modulus


def _fresh_bounds(params: NonNativeParams) -> List[int]:
    return [(1 << w) - 1 for w in params.widths]


def _padded(x: NonNativeFieldVar, n: int) -> Tuple[List[LinearCombination], List[int]]:
    pad = n - x.num_limbs
    return x.limbs + [x.cs.lc(0)] * pad, x.limb_bounds + [0] * pad


def _evaluate_at(cs: ConstraintSystem, limbs: Sequence[LinearCombination], x: int) -> LinearCombination:
    """``Σ limbs[i] · x^i`` with x a small public constant."""
    acc = cs.lc(0)
    for i, limb in enumerate(limbs):
        acc = acc + limb * (x ** i)
    return acc
