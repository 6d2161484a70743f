"""Tests for native field definitions and element helpers."""

import pytest

from primitives.field import (
    BLS12_377_FR,
    BN254_FR,
    BN254_FR_MODULUS,
    NATIVE_FIELDS,
    field_bits,
    field_capacity,
    field_modulus,
    get_field,
    to_field,
    to_signed,
)


def test_registry_lookup() -> None:
    assert get_field("bn254") is BN254_FR
    assert get_field("bls12_377") is BLS12_377_FR
    assert set(NATIVE_FIELDS) == {"bn254", "bls12_377"}


def test_unknown_field_raises_key_error() -> None:
    with pytest.raises(KeyError, match="Available"):
        get_field("goldilocks")


def test_bit_lengths() -> None:
    assert field_modulus(BN254_FR) == BN254_FR_MODULUS
    assert field_bits(BN254_FR) == 254
    assert field_capacity(BN254_FR) == 253
    assert field_bits(BLS12_377_FR) == 253


def test_to_field_reduces_negative_and_large_values() -> None:
    p = field_modulus(BN254_FR)
    assert to_field(BN254_FR, -1) == BN254_FR(p - 1)
    assert to_field(BN254_FR, p + 5) == BN254_FR(5)
    assert to_field(BN254_FR, BN254_FR(7)) == BN254_FR(7)


def test_to_signed() -> None:
    p = field_modulus(BN254_FR)
    assert to_signed(BN254_FR(3)) == 3
    assert to_signed(BN254_FR(p - 3)) == -3
    assert to_signed(BN254_FR(0)) == 0


def test_field_arithmetic_is_modular() -> None:
    p = field_modulus(BN254_FR)
    a = BN254_FR(p - 1)
    assert a + BN254_FR(2) == BN254_FR(1)
    assert BN254_FR(3) * BN254_FR(3) ** -1 == BN254_FR(1)
