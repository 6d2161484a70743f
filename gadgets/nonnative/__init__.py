"""Non-native field arithmetic.

Emulates a target field F_t inside a constraint system over a different native
field F_n using bounded limbs and deferred reduction. get_params() picks the
limb layout for a (target, native) pair; NonNativeFieldVar implements the
arithmetic.
"""

from .carry import enforce_equal_when_carried, group_limbs
from .field_var import NonNativeFieldVar
from .params import DEFAULT_MAX_LIMB_WIDTH, NonNativeParams, get_params

__all__ = [
    "NonNativeFieldVar",
    "NonNativeParams",
    "get_params",
    "DEFAULT_MAX_LIMB_WIDTH",
    "enforce_equal_when_carried",
    "group_limbs",
]
