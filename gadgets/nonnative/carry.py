"""Integer equality of two limb vectors via a grouped carry chain.

Given limb vectors ``left`` and ``right`` (same limb width W, non-negative
limbs with known upper bounds), enforce

    Σ left_i · 2^(i·W) == Σ right_i · 2^(i·W)

over the integers, even though constraints only hold modulo p_n. The limb
differences are packed into groups as wide as the native field allows; each
group's difference plus the incoming carry must be an exact multiple of the
group's weight, with the outgoing carry allocated as a witness and range
checked. The last group must close with no carry.

Every term of every carry constraint is bounded well below p_n / 2, so each
constraint holding mod p_n implies it holds over the integers, and the carries
telescope into the full identity.
"""

from typing import List, Optional, Sequence, Tuple

from constraints import ConstraintSystem, LinearCombination
from primitives.field import to_signed
from ..uint import range_check
from .params import NonNativeParams


def _carry_witness(total, shift: int, offset: int) -> Optional[int]:
    if total is None:
        return None
    return (to_signed(total) >> shift) + offset


def group_limbs(
    bounds: Sequence[int], limb_width: int, safe_bits: int
) -> List[Tuple[int, int, int, int]]:
    """Split limb positions into groups checked by one carry constraint each.

    Args:
        bounds: Upper bound on |difference| at each limb position
        limb_width: W
        safe_bits: Bit budget for a group's |difference| plus incoming carry

    Returns:
        (start, count, carry_in_bound, carry_out_bits) per group; the last
        group's carry_out_bits is unused

    Raises:
        ValueError: If a single limb already exceeds the budget
    """
    groups = []
    start = 0
    carry_in = 0
    while start < len(bounds):
        count = 1
        group_bound = bounds[start]
        if (group_bound + carry_in).bit_length() > safe_bits:
            raise ValueError(
                f"Limb {start} needs {(group_bound + carry_in).bit_length()} bits, "
                f"only {safe_bits} are safe"
            )
        while start + count < len(bounds) and (count + 1) * limb_width <= safe_bits:
            widened = group_bound + (bounds[start + count] << (count * limb_width))
            if (widened + carry_in).bit_length() > safe_bits:
                break
            group_bound = widened
            count += 1
        carry_bits = max(0, (group_bound + carry_in).bit_length() - count * limb_width)
        groups.append((start, count, carry_in, carry_bits))
        carry_in = 1 << carry_bits
        start += count
    return groups


def enforce_equal_when_carried(
    cs: ConstraintSystem,
    params: NonNativeParams,
    left: Sequence[LinearCombination],
    left_bounds: Sequence[int],
    right: Sequence[LinearCombination],
    right_bounds: Sequence[int],
) -> None:
    """Enforce that two bounded limb vectors encode the same integer."""
    width = params.limb_width
    n = max(len(left), len(right))
    left = list(left) + [cs.lc(0)] * (n - len(left))
    right = list(right) + [cs.lc(0)] * (n - len(right))
    left_bounds = list(left_bounds) + [0] * (n - len(left_bounds))
    right_bounds = list(right_bounds) + [0] * (n - len(right_bounds))

    diffs = [l - r for l, r in zip(left, right)]
    bounds = [max(lb, rb) for lb, rb in zip(left_bounds, right_bounds)]
    groups = group_limbs(bounds, width, params.max_word_bits + 1)

    carry: Optional[LinearCombination] = None
    for g, (start, count, _, carry_bits) in enumerate(groups):
        total = cs.lc(0)
        for i in range(count):
            total = total + diffs[start + i] * (1 << (i * width))
        if carry is not None:
            total = total + carry

        if g == len(groups) - 1:
            cs.enforce(total, 1, 0, label="carry final")
            break

        shift = count * width
        offset = 1 << carry_bits
        shifted = cs.allocate(
            lambda total=total, shift=shift, offset=offset: _carry_witness(cs.eval(total), shift, offset)
        )
        range_check(cs, shifted, carry_bits + 1)
        carry = cs.lc(shifted) - offset
        cs.enforce(total, 1, carry * (1 << shift), label=f"carry {g}")
