"""Tests for pure limb arithmetic."""

import pytest

from primitives.field import MERSENNE61_MODULUS, SECP256K1_BASE_MODULUS
from primitives.limbs import (
    bits_le,
    ceil_log2,
    convolve,
    from_limbs,
    limb_widths,
    to_limbs,
    zero_multiple_limbs,
)


class TestLimbWidths:
    """Tests for limb width layout."""

    def test_top_limb_is_narrower(self) -> None:
        assert limb_widths(61, 32) == [32, 29]

    def test_exact_multiple(self) -> None:
        assert limb_widths(64, 32) == [32, 32]

    def test_single_limb(self) -> None:
        assert limb_widths(20, 64) == [20]

    def test_zero_bits(self) -> None:
        assert limb_widths(0, 32) == []


class TestDecomposition:
    """Tests for to_limbs/from_limbs."""

    def test_known_decomposition(self) -> None:
        assert to_limbs(MERSENNE61_MODULUS, 32, 2) == [(1 << 32) - 1, (1 << 29) - 1]

    def test_recompose(self, rng) -> None:
        for _ in range(20):
            v = rng.randrange(SECP256K1_BASE_MODULUS)
            assert from_limbs(to_limbs(v, 64, 4), 64) == v

    def test_from_limbs_accepts_oversized_limbs(self) -> None:
        # 2^32 in limb 0 carries into limb 1
        assert from_limbs([1 << 32, 1], 32) == 2 << 32

    def test_value_too_large_raises(self) -> None:
        with pytest.raises(ValueError, match="does not fit"):
            to_limbs(1 << 64, 32, 2)

    def test_negative_raises(self) -> None:
        with pytest.raises(ValueError):
            to_limbs(-1, 32, 2)


def test_bits_le() -> None:
    assert bits_le(6, 4) == [False, True, True, False]


def test_ceil_log2() -> None:
    assert [ceil_log2(n) for n in (0, 1, 2, 3, 4, 5, 8, 9)] == [0, 0, 1, 2, 2, 3, 3, 4]


def test_convolve_matches_integer_product() -> None:
    a, b = [3, 1], [2, 5]
    assert convolve(a, b) == [6, 17, 5]
    assert from_limbs(convolve(a, b), 8) == from_limbs(a, 8) * from_limbs(b, 8)
    assert convolve([], [1]) == []


@pytest.mark.parametrize("pad_bits", [32, 33, 64, 100])
def test_zero_multiple_limbs(pad_bits: int) -> None:
    limbs = zero_multiple_limbs(MERSENNE61_MODULUS, 32, 3, pad_bits)
    assert from_limbs(limbs, 32) % MERSENNE61_MODULUS == 0
    for limb in limbs:
        assert (1 << pad_bits) <= limb < (1 << pad_bits) + (1 << 32)
