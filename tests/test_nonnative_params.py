"""Tests for non-native limb parameters and carry grouping."""

import pytest

from gadgets.nonnative import DEFAULT_MAX_LIMB_WIDTH, NonNativeParams, get_params, group_limbs
from primitives.field import (
    BLS12_377_FR,
    BN254_FR,
    BN254_FR_MODULUS,
    ED25519_BASE_MODULUS,
    MERSENNE61_MODULUS,
    SECP256K1_BASE_MODULUS,
)


class TestGetParams:
    """Tests for limb width selection."""

    def test_explicit_width(self) -> None:
        params = get_params(MERSENNE61_MODULUS, BN254_FR, limb_width=32)
        assert params.native_modulus == BN254_FR_MODULUS
        assert params.widths == [32, 29]
        assert params.num_limbs == 2
        assert params.top_limb_width == 29
        assert params.modulus_limbs == [(1 << 32) - 1, (1 << 29) - 1]

    @pytest.mark.parametrize(
        "target,native,width,limbs",
        [
            (SECP256K1_BASE_MODULUS, BN254_FR, 64, 4),
            (ED25519_BASE_MODULUS, BLS12_377_FR, 64, 4),
            (MERSENNE61_MODULUS, BN254_FR, 64, 1),
            (SECP256K1_BASE_MODULUS, MERSENNE61_MODULUS, 24, 11),
        ],
    )
    def test_default_width(self, target: int, native, width: int, limbs: int) -> None:
        params = get_params(target, native)
        assert params.limb_width == width
        assert params.num_limbs == limbs
        assert width % 8 == 0 and width <= DEFAULT_MAX_LIMB_WIDTH

    def test_native_modulus_as_int_or_field(self) -> None:
        assert get_params(SECP256K1_BASE_MODULUS, BN254_FR) == get_params(
            SECP256K1_BASE_MODULUS, BN254_FR_MODULUS
        )

    def test_width_too_large(self) -> None:
        with pytest.raises(ValueError, match="too large"):
            get_params(SECP256K1_BASE_MODULUS, BN254_FR, limb_width=128)

    def test_no_width_fits(self) -> None:
        with pytest.raises(ValueError, match="No limb width"):
            get_params(SECP256K1_BASE_MODULUS, 127)

    @pytest.mark.parametrize("target", [0, 1, 2])
    def test_tiny_target_rejected(self, target: int) -> None:
        with pytest.raises(ValueError):
            NonNativeParams(target, BN254_FR_MODULUS, 8)


class TestSurfeit:
    """Tests for the headroom accounting."""

    def test_bn254_bounds(self) -> None:
        params = get_params(SECP256K1_BASE_MODULUS, BN254_FR)
        assert params.capacity == 253
        assert params.max_word_bits == 250
        assert params.fresh_surfeit == 187
        assert params.surfeit(250) == 1
        assert params.surfeit(251) == 0

    def test_fresh_product_fits(self) -> None:
        # The defining condition: a product of two fresh values keeps surfeit
        for target in (MERSENNE61_MODULUS, SECP256K1_BASE_MODULUS, ED25519_BASE_MODULUS):
            params = get_params(target, BN254_FR)
            product_bits = 2 * params.limb_width + params.num_limbs.bit_length()
            assert params.surfeit(product_bits) >= 2


class TestGroupLimbs:
    """Tests for carry-chain grouping."""

    def test_small_limbs_share_a_group(self) -> None:
        groups = group_limbs([35, 0], 32, 251)
        assert len(groups) == 1
        assert groups[0][:2] == (0, 2)

    def test_wide_limbs_need_several_groups(self) -> None:
        bound = 4 << 128
        groups = group_limbs([bound] * 7, 64, 251)
        assert len(groups) > 1
        assert sum(count for _, count, _, _ in groups) == 7
        # Each group after the first receives the previous carry
        for (_, _, _, carry_bits), (_, _, carry_in, _) in zip(groups, groups[1:]):
            assert carry_in == 1 << carry_bits

    def test_limb_over_budget_raises(self) -> None:
        with pytest.raises(ValueError, match="safe"):
            group_limbs([1 << 251], 64, 251)
