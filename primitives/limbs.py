"""Big-integer limb arithmetic for non-native witness computation.

Pure functions on Python ints. Gadgets call these off-circuit to derive
witness values (limb decompositions, quotients, carries) and to compute the
static bounds that decide how constraints are laid out. Nothing here touches a
constraint system.
"""

from typing import List, Sequence


def ceil_log2(n: int) -> int:
    """Smallest k with 2^k >= n (0 for n <= 1)."""
    assert n >= 0, "ceil_log2 of a negative number"
    return (n - 1).bit_length() if n > 1 else 0


def limb_widths(total_bits: int, limb_width: int) -> List[int]:
    """Widths of the limbs covering ``total_bits`` bits.

    All limbs are ``limb_width`` bits wide except the top one, which holds only
    the remaining bits.

    Example:
        limb_widths(61, 32) == [32, 29]
    """
    assert limb_width > 0, "Limb width must be positive"
    if total_bits <= 0:
        return []
    full, rest = divmod(total_bits, limb_width)
    return [limb_width] * full + ([rest] if rest else [])


def to_limbs(value: int, limb_width: int, num_limbs: int) -> List[int]:
    """Little-endian limb decomposition of a non-negative integer.

    Raises:
        ValueError: If value is negative or does not fit in num_limbs limbs
    """
    if value < 0:
        raise ValueError(f"Cannot decompose negative value {value}")
    mask = (1 << limb_width) - 1
    limbs = [(value >> (i * limb_width)) & mask for i in range(num_limbs)]
    if value >> (num_limbs * limb_width):
        raise ValueError(
            f"Value of {value.bit_length()} bits does not fit in "
            f"{num_limbs} limbs of {limb_width} bits"
        )
    return limbs


def from_limbs(limbs: Sequence[int], limb_width: int) -> int:
    """Recompose ``Σ limb_i · 2^(i·limb_width)``; limbs may exceed the width."""
    acc = 0
    for limb in reversed(limbs):
        acc = (acc << limb_width) + int(limb)
    return acc


def bits_le(value: int, num_bits: int) -> List[bool]:
    """Little-endian bits of ``value`` (only the low num_bits are kept)."""
    return [bool((value >> i) & 1) for i in range(num_bits)]


def convolve(a: Sequence[int], b: Sequence[int]) -> List[int]:
    """Schoolbook product of two limb vectors without carry propagation."""
    if not a or not b:
        return []
    out = [0] * (len(a) + len(b) - 1)
    for i, x in enumerate(a):
        for j, y in enumerate(b):
            out[i + j] += x * y
    return out


def zero_multiple_limbs(
    modulus: int, limb_width: int, num_limbs: int, pad_bits: int
) -> List[int]:
    """Unnormalized limbs of a multiple of ``modulus`` with every limb >= 2^pad_bits.

    Subtracting a limb vector whose limbs are all below 2^pad_bits from the
    result keeps every limb positive while preserving the value modulo
    ``modulus``. Built as ``pad + (-pad mod modulus)``, where pad has every limb
    equal to 2^pad_bits; each returned limb is below 2^pad_bits + 2^limb_width.

    Args:
        modulus: Target modulus
        limb_width: Bits per limb position
        num_limbs: Number of limbs; must cover the modulus
        pad_bits: log2 of the per-limb floor

    Returns:
        List of num_limbs ints summing (with limb weights) to 0 mod modulus
    """
    pad = [1 << pad_bits] * num_limbs
    correction = (-from_limbs(pad, limb_width)) % modulus
    correction_limbs = to_limbs(correction, limb_width, num_limbs)
    return [p + c for p, c in zip(pad, correction_limbs)]


def weighted_bound(limb_bounds: Sequence[int], limb_width: int) -> int:
    """Upper bound on ``Σ x_i · 2^(i·W)`` given per-limb upper bounds."""
    return from_limbs(limb_bounds, limb_width)
