"""Constraint-system core.

This module provides the dual-mode rank-1 constraint system every gadget is
written against. A ConstraintSystem in setup mode records only the circuit
shape; in proving mode it also records witness values. Gadgets call the same
allocate/enforce/eval methods in both modes and never branch on the mode.

The finished system is read by a backend through ConstraintSystem.to_matrices()
and ConstraintSystem.assignment().
"""

from .errors import (
    AssignmentMissing,
    DivisionByZero,
    ReductionRequired,
    SynthesisError,
    Unsatisfiable,
)
from .matrices import ConstraintMatrices
from .system import Constraint, ConstraintSystem, Mode, Scope
from .variable import ONE, LinearCombination, Variable, VariableKind

__all__ = [
    "ConstraintSystem",
    "Constraint",
    "ConstraintMatrices",
    "Mode",
    "Scope",
    "Variable",
    "VariableKind",
    "LinearCombination",
    "ONE",
    "SynthesisError",
    "AssignmentMissing",
    "DivisionByZero",
    "Unsatisfiable",
    "ReductionRequired",
]
