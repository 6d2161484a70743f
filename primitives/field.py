"""Native scalar fields and target moduli for constraint synthesis.

Uses galois for all native field arithmetic. Each native field is a prime
field GF(p) whose characteristic is the scalar-field order of a pairing-friendly
curve; constraint systems are built over one of these fields.

Large prime fields are constructed with an explicit multiplicative generator
and ``verify=False``: galois would otherwise factor p - 1 to find a primitive
element, which takes seconds for 253/254-bit primes.

Target moduli (the fields emulated by non-native arithmetic) are plain ints;
non-native gadgets only need the modulus, never a galois field class.
"""

from typing import Dict

import galois

# --- Native Fields ---

BN254_FR_MODULUS = 0x30644E72E131A029B85045B68181585D2833E84879B9709143E1F593F0000001
BLS12_377_FR_MODULUS = 0x12AB655E9A2CA55660B44D1E5C37B00159AA76FED00000010A11800000000001

BN254_FR = galois.GF(BN254_FR_MODULUS, primitive_element=5, verify=False)
"""Scalar field of BN254 (254 bits)."""

BLS12_377_FR = galois.GF(BLS12_377_FR_MODULUS, primitive_element=22, verify=False)
"""Scalar field of BLS12-377 (253 bits)."""

# Registry mapping field names to galois field classes
NATIVE_FIELDS: Dict[str, type] = {
    "bn254": BN254_FR,
    "bls12_377": BLS12_377_FR,
}


def get_field(name: str) -> type:
    """Get a native field class by name.

    Args:
        name: Registered field name (e.g., 'bn254', 'bls12_377')

    Returns:
        galois FieldArray subclass for the field

    Raises:
        KeyError: If no field is registered under the name
    """
    if name in NATIVE_FIELDS:
        return NATIVE_FIELDS[name]
    raise KeyError(
        f"No native field '{name}'. "
        f"Available: {list(NATIVE_FIELDS.keys())}"
    )


# --- Target Moduli ---

MERSENNE61_MODULUS = (1 << 61) - 1
ED25519_BASE_MODULUS = (1 << 255) - 19
SECP256K1_BASE_MODULUS = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F


# --- Element Helpers ---


def field_modulus(field: type) -> int:
    """Return the characteristic p of a prime field."""
    return int(field.characteristic)


def field_bits(field: type) -> int:
    """Return the bit length of the field modulus."""
    return field_modulus(field).bit_length()


def field_capacity(field: type) -> int:
    """Number of bits every value of which is a distinct field element.

    Any integer in [0, 2^capacity) is below p, so it survives a round trip
    through the field unchanged.
    """
    return field_bits(field) - 1


def to_field(field: type, value) -> galois.FieldArray:
    """Convert an int (possibly negative or >= p) or element into ``field``."""
    return field(int(value) % field_modulus(field))


def to_signed(element) -> int:
    """Interpret a field element as a signed integer in (-p/2, p/2]."""
    p = field_modulus(type(element))
    v = int(element)
    return v - p if v > p // 2 else v
