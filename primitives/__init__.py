"""Primitives - native fields and big-integer limb helpers."""

from primitives.field import (
    BLS12_377_FR,
    BN254_FR,
    ED25519_BASE_MODULUS,
    MERSENNE61_MODULUS,
    NATIVE_FIELDS,
    SECP256K1_BASE_MODULUS,
    field_bits,
    field_capacity,
    field_modulus,
    get_field,
    to_field,
    to_signed,
)
from primitives.limbs import (
    bits_le,
    ceil_log2,
    convolve,
    from_limbs,
    limb_widths,
    to_limbs,
    zero_multiple_limbs,
)

__all__ = [
    # Field
    "BN254_FR",
    "BLS12_377_FR",
    "NATIVE_FIELDS",
    "get_field",
    "field_modulus",
    "field_bits",
    "field_capacity",
    "to_field",
    "to_signed",
    # Target moduli
    "MERSENNE61_MODULUS",
    "ED25519_BASE_MODULUS",
    "SECP256K1_BASE_MODULUS",
    # Limbs
    "ceil_log2",
    "limb_widths",
    "to_limbs",
    "from_limbs",
    "bits_le",
    "convolve",
    "zero_multiple_limbs",
]
