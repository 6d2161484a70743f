"""Dual-mode rank-1 constraint system.

One ConstraintSystem type serves both synthesis modes. Gadgets are written
once against it and never branch on the mode themselves:

- Setup mode: witness providers are never called; allocations store a
  placeholder and value queries return None. Only the circuit shape is built.
- Proving mode: every witness provider is called at allocation time and the
  resulting field elements are stored next to the constraints.

The constraint list is identical in both modes, so key material derived from a
setup run lines up index-for-index with the assignment of a proving run.

Example:
    cs = ConstraintSystem.proving(BN254_FR)
    x = cs.allocate(lambda: 3)
    y = cs.allocate(lambda: 9)
    cs.enforce(x, x, y)
    assert cs.is_satisfied()
"""

import itertools
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional

import galois

from primitives.field import to_field
from .errors import AssignmentMissing
from .variable import (
    ONE,
    LinearCombination,
    LinearCombinationLike,
    Variable,
    VariableKind,
)

logger = logging.getLogger(__name__)

_OWNER_IDS = itertools.count(1)

WitnessFn = Callable[[], object]


class Mode(Enum):
    """Synthesis mode of a constraint system."""
    SETUP = "setup"
    PROVING = "proving"


@dataclass(frozen=True)
class Constraint:
    """A rank-1 constraint ``a · b = c`` with the namespace path that emitted it."""
    a: LinearCombination
    b: LinearCombination
    c: LinearCombination
    name: str

    def shape(self) -> tuple:
        return (self.a.shape(), self.b.shape(), self.c.shape())


class Scope:
    """Counters for the variables and constraints allocated inside a namespace."""

    def __init__(self, cs: "ConstraintSystem", path: str):
        self.cs = cs
        self.path = path
        self._start = cs._counters()
        self._end: Optional[tuple] = None

    def _close(self) -> None:
        self._end = self.cs._counters()

    def _delta(self, i: int) -> int:
        end = self._end if self._end is not None else self.cs._counters()
        return end[i] - self._start[i]

    @property
    def num_constraints_in_scope(self) -> int:
        return self._delta(0)

    @property
    def num_witness_in_scope(self) -> int:
        return self._delta(1)

    @property
    def num_instance_in_scope(self) -> int:
        return self._delta(2)

    def constraints(self) -> List[Constraint]:
        """Constraints emitted inside this scope."""
        start = self._start[0]
        return self.cs.constraints[start:start + self.num_constraints_in_scope]

    def is_satisfied(self) -> bool:
        """Check only the constraints emitted inside this scope."""
        return all(self.cs._check(c) for c in self.constraints())


class ConstraintSystem:
    """Mutable constraint system for one circuit synthesis.

    Attributes:
        field: galois prime field the constraints are defined over
        mode: Mode.SETUP or Mode.PROVING
        instance_assignment: Public input values; index 0 is the constant ONE
        witness_assignment: Private variable values (None placeholders in setup)
        constraints: Constraints in emission order
    """

    def __init__(self, field: type, mode: Mode = Mode.PROVING):
        self.field = field
        self.mode = mode
        self.instance_assignment: List[Optional[galois.FieldArray]] = [field(1)]
        self.witness_assignment: List[Optional[galois.FieldArray]] = []
        self.constraints: List[Constraint] = []
        self._namespace: List[str] = []
        self._owner = next(_OWNER_IDS)

    @classmethod
    def setup(cls, field: type) -> "ConstraintSystem":
        """Constraint system for key generation (no witnesses)."""
        return cls(field, Mode.SETUP)

    @classmethod
    def proving(cls, field: type) -> "ConstraintSystem":
        """Constraint system for proof generation (witnesses required)."""
        return cls(field, Mode.PROVING)

    @property
    def is_setup(self) -> bool:
        return self.mode is Mode.SETUP

    @property
    def num_instance_variables(self) -> int:
        """Number of instance slots, including ONE."""
        return len(self.instance_assignment)

    @property
    def num_witness_variables(self) -> int:
        return len(self.witness_assignment)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    def _counters(self) -> tuple:
        return (self.num_constraints, self.num_witness_variables, self.num_instance_variables)

    # --- Allocation ---

    def _witness(self, witness_fn: WitnessFn) -> Optional[galois.FieldArray]:
        if self.is_setup:
            return None
        value = witness_fn()
        if value is None:
            raise AssignmentMissing(f"No witness value at {self.current_path() or '<root>'}")
        return to_field(self.field, value)

    def allocate(self, witness_fn: WitnessFn) -> Variable:
        """Allocate a private witness variable.

        Args:
            witness_fn: Zero-argument provider of the value (int or field element).
                Called only in proving mode; errors it raises propagate.

        Returns:
            Handle to the new witness slot
        """
        value = self._witness(witness_fn)
        self.witness_assignment.append(value)
        return Variable(VariableKind.WITNESS, len(self.witness_assignment) - 1, self._owner)

    def allocate_input(self, witness_fn: WitnessFn) -> Variable:
        """Allocate a public input variable (same contract as allocate)."""
        value = self._witness(witness_fn)
        self.instance_assignment.append(value)
        return Variable(VariableKind.INSTANCE, len(self.instance_assignment) - 1, self._owner)

    def allocate_constant(self, value) -> Variable:
        """Wrap a fixed value; consumes no slot and emits nothing."""
        return Variable(VariableKind.CONSTANT, owner=self._owner, value=int(to_field(self.field, value)))

    # --- Linear combinations ---

    def lc(self, value: LinearCombinationLike = 0) -> LinearCombination:
        """Coerce a Variable, int or element into a LinearCombination over this field."""
        lc = LinearCombination.coerce(self.field, value)
        self._check_owned(lc)
        return lc

    @property
    def one(self) -> LinearCombination:
        return LinearCombination.from_variable(self.field, ONE)

    def _check_owned(self, lc: LinearCombination) -> None:
        if lc.field is not self.field:
            raise ValueError("Linear combination is over a different field")
        for var in lc.variables():
            if var.kind is not VariableKind.ONE and var.owner != self._owner:
                raise ValueError(f"{var} belongs to a different constraint system")

    # --- Constraints ---

    def enforce(
        self,
        a: LinearCombinationLike,
        b: LinearCombinationLike,
        c: LinearCombinationLike,
        label: Optional[str] = None,
    ) -> None:
        """Append the constraint ``a · b = c``."""
        a, b, c = self.lc(a), self.lc(b), self.lc(c)
        name = self.current_path()
        suffix = label if label is not None else f"#{len(self.constraints)}"
        name = f"{name}/{suffix}" if name else suffix
        self.constraints.append(Constraint(a, b, c, name))

    # --- Values ---

    def value_of(self, var: Variable) -> Optional[galois.FieldArray]:
        """Concrete value of a variable, or None in setup mode."""
        if self.is_setup:
            return None
        if var.kind is VariableKind.ONE:
            return self.field(1)
        if var.kind is VariableKind.CONSTANT:
            return to_field(self.field, var.value)
        if var.owner != self._owner:
            raise ValueError(f"{var} belongs to a different constraint system")
        if var.kind is VariableKind.INSTANCE:
            return self.instance_assignment[var.index]
        return self.witness_assignment[var.index]

    def eval(self, lc: LinearCombinationLike) -> Optional[galois.FieldArray]:
        """Evaluate a linear combination, or None in setup mode."""
        if self.is_setup:
            return None
        lc = self.lc(lc)
        acc = self.field(0)
        for var, coeff in lc:
            acc = acc + coeff * self.value_of(var)
        return acc

    # --- Namespaces ---

    def current_path(self) -> str:
        return "/".join(self._namespace)

    @contextmanager
    def namespace(self, name: str) -> Iterator[Scope]:
        """Scope allocations and constraints under ``name`` for diagnostics.

        Yields:
            Scope with per-namespace counters (valid after the block exits too)
        """
        self._namespace.append(name)
        scope = Scope(self, self.current_path())
        logger.debug("Entering namespace %s", scope.path)
        try:
            yield scope
        finally:
            scope._close()
            self._namespace.pop()

    # --- Satisfaction ---

    def _check(self, constraint: Constraint) -> bool:
        return self.eval(constraint.a) * self.eval(constraint.b) == self.eval(constraint.c)

    def which_is_unsatisfied(self) -> Optional[str]:
        """Name of the first unsatisfied constraint, or None if all hold.

        Raises:
            AssignmentMissing: In setup mode, where there is nothing to check
        """
        if self.is_setup:
            raise AssignmentMissing("Satisfaction can only be checked in proving mode")
        for constraint in self.constraints:
            if not self._check(constraint):
                logger.debug("Unsatisfied constraint %s", constraint.name)
                return constraint.name
        return None

    def is_satisfied(self) -> bool:
        """Check every constraint against the current assignment (debug aid)."""
        return self.which_is_unsatisfied() is None

    # --- Backend view ---

    def assignment(self) -> galois.FieldArray:
        """Full assignment vector z = [1, instances..., witnesses...].

        Raises:
            AssignmentMissing: In setup mode
        """
        if self.is_setup:
            raise AssignmentMissing("Setup-mode constraint systems have no assignment")
        values = self.instance_assignment + self.witness_assignment
        return self.field([int(v) for v in values])

    def to_matrices(self):
        """Export the constraints as sparse A, B, C matrices."""
        from .matrices import ConstraintMatrices

        return ConstraintMatrices.from_constraint_system(self)
