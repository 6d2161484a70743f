"""Gadgets - reusable constraint-emitting building blocks.

Every gadget holds the ConstraintSystem it was created in and works unchanged
in setup and proving mode:

- boolean: constant and allocated bits, logic, comparisons against constants
- uint: range checks and fixed-width unsigned integers
- fp: native field elements
- nonnative: target-field elements emulated with native limbs
"""

from .boolean import Boolean
from .fp import FpVar
from .nonnative import NonNativeFieldVar, NonNativeParams, get_params
from .uint import UInt, pack_bits, range_check

__all__ = [
    "Boolean",
    "UInt",
    "range_check",
    "pack_bits",
    "FpVar",
    "NonNativeFieldVar",
    "NonNativeParams",
    "get_params",
]
