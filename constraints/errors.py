"""Errors raised while synthesizing a circuit.

Every failure to allocate a variable or to meet a structural precondition is a
SynthesisError and propagates unchanged to whoever is assembling the circuit.
Range violations are not errors: they show up as unsatisfied constraints.
"""


class SynthesisError(Exception):
    """Base class for circuit synthesis failures."""


class AssignmentMissing(SynthesisError):
    """A witness value was required but is not available.

    Raised when a witness provider has no value to give, and when satisfaction
    is queried on a constraint system synthesized in setup mode.
    """


class DivisionByZero(SynthesisError):
    """A witness provider was asked to invert zero."""


class Unsatisfiable(SynthesisError):
    """A witness precondition cannot be met by any assignment."""


class ReductionRequired(SynthesisError):
    """A non-native operation needs a reduced operand.

    Raised when an operand must be in canonical (fresh) form, or when the result
    of an operation would exhaust the representation's surfeit.
    """
