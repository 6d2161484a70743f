"""Parameters for emulating a target field inside a native field.

A target value is split into ``num_limbs`` limbs of ``limb_width`` bits (the
top limb narrower when the modulus is not a multiple of the width). Unreduced
limbs may grow past the width; how far they may grow is bounded by the native
field:

    capacity      = bits(p_n) - 1        integers below 2^capacity are < p_n
    max_word_bits = capacity - 3         limbs of this many bits can still be
                                         reduced: the carry chain checking
                                         a = q·p_t + r keeps every term
                                         (|difference| + |carry in| +
                                         |carry out|·2^width) below p_n / 2

A limb vector whose limbs are below 2^word_bits has
``surfeit = max_word_bits + 1 - word_bits``; every operation must leave it
positive.

Parameters are valid when the product of two freshly reduced values can itself
be reduced. Its limbs are below n·2^(2W), and the quotient-times-modulus side of
the reduction identity adds one more bit:

    2W + bits(n) + 1 <= max_word_bits
"""

from dataclasses import dataclass
from functools import cached_property
from typing import List, Optional

from primitives.field import field_modulus
from primitives.limbs import limb_widths, to_limbs

DEFAULT_MAX_LIMB_WIDTH = 64


@dataclass(frozen=True)
class NonNativeParams:
    """Limb layout for one (target modulus, native modulus) pair.

    Attributes:
        target_modulus: p_t, the emulated field's modulus
        native_modulus: p_n, the constraint system's field modulus
        limb_width: W, bits per limb
    """
    target_modulus: int
    native_modulus: int
    limb_width: int

    def __post_init__(self) -> None:
        if self.target_modulus < 3:
            raise ValueError(f"Target modulus must be at least 3, got {self.target_modulus}")
        if self.limb_width < 1:
            raise ValueError(f"Limb width must be positive, got {self.limb_width}")
        need = 2 * self.limb_width + self.num_limbs.bit_length() + 1
        if need > self.max_word_bits:
            raise ValueError(
                f"Limb width {self.limb_width} too large for a {self.native_bits}-bit native field: "
                f"products need {need} bits, at most {self.max_word_bits} are available"
            )

    @property
    def target_bits(self) -> int:
        return self.target_modulus.bit_length()

    @property
    def native_bits(self) -> int:
        return self.native_modulus.bit_length()

    @property
    def capacity(self) -> int:
        return self.native_bits - 1

    @property
    def max_word_bits(self) -> int:
        """Largest limb bit-width that reduce() can still handle."""
        return self.capacity - 3

    @cached_property
    def widths(self) -> List[int]:
        """Bit width of each canonical limb, least significant first."""
        return limb_widths(self.target_bits, self.limb_width)

    @property
    def num_limbs(self) -> int:
        return len(self.widths)

    @property
    def top_limb_width(self) -> int:
        return self.widths[-1]

    @cached_property
    def modulus_limbs(self) -> List[int]:
        return to_limbs(self.target_modulus, self.limb_width, self.num_limbs)

    @property
    def fresh_surfeit(self) -> int:
        """Surfeit of a freshly allocated or reduced value (the maximum)."""
        return self.surfeit(self.limb_width)

    def surfeit(self, word_bits: int) -> int:
        return self.max_word_bits + 1 - word_bits


def get_params(
    target_modulus: int,
    native_modulus,
    limb_width: Optional[int] = None,
) -> NonNativeParams:
    """Build parameters, choosing a limb width when none is given.

    The default is the widest multiple of 8 up to DEFAULT_MAX_LIMB_WIDTH that
    leaves room to reduce a product of two fresh values.

    Args:
        target_modulus: Modulus of the emulated field
        native_modulus: Modulus of the constraint system's field, or the galois
            field class itself
        limb_width: Optional explicit limb width

    Returns:
        NonNativeParams

    Raises:
        ValueError: If no valid limb width exists or the given one is too large
    """
    if not isinstance(native_modulus, int):
        native_modulus = field_modulus(native_modulus)
    if limb_width is not None:
        return NonNativeParams(target_modulus, native_modulus, limb_width)
    for width in range(DEFAULT_MAX_LIMB_WIDTH, 0, -8):
        try:
            return NonNativeParams(target_modulus, native_modulus, width)
        except ValueError:
            continue
    raise ValueError(
        f"No limb width fits a {target_modulus.bit_length()}-bit target "
        f"in a {native_modulus.bit_length()}-bit native field"
    )
