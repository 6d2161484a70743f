"""Sparse R1CS matrices: the read-only view a proving backend consumes.

Column layout of the assignment vector z:
    [ONE, instance_1, ..., instance_k, witness_0, ..., witness_m]

Each matrix row is stored as a pair (column indices, coefficients) so that the
row's value on an assignment is one gather and one field dot product:

    row(z) = Σ coeffs[j] · z[cols[j]]

All arithmetic uses galois broadcasting, so evaluating a whole matrix over an
assignment is a handful of vectorized operations per row.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Tuple

import galois
import numpy as np

from .variable import LinearCombination, VariableKind

if TYPE_CHECKING:
    from .system import ConstraintSystem

Row = Tuple[np.ndarray, galois.FieldArray]


@dataclass
class ConstraintMatrices:
    """A, B, C matrices of a constraint system in row-sparse form.

    Attributes:
        field: galois prime field of the coefficients
        num_instance_variables: Instance columns, including ONE
        num_witness_variables: Witness columns
        a, b, c: One (cols, coeffs) row per constraint
        names: Namespace path of each row
    """
    field: type
    num_instance_variables: int
    num_witness_variables: int
    a: List[Row] = field(default_factory=list)
    b: List[Row] = field(default_factory=list)
    c: List[Row] = field(default_factory=list)
    names: List[str] = field(default_factory=list)

    @property
    def num_constraints(self) -> int:
        return len(self.a)

    @property
    def num_columns(self) -> int:
        return self.num_instance_variables + self.num_witness_variables

    @classmethod
    def from_constraint_system(cls, cs: "ConstraintSystem") -> "ConstraintMatrices":
        matrices = cls(
            field=cs.field,
            num_instance_variables=cs.num_instance_variables,
            num_witness_variables=cs.num_witness_variables,
        )
        for constraint in cs.constraints:
            matrices.a.append(matrices._row(constraint.a))
            matrices.b.append(matrices._row(constraint.b))
            matrices.c.append(matrices._row(constraint.c))
            matrices.names.append(constraint.name)
        return matrices

    def _column(self, kind: VariableKind, index: int) -> int:
        if kind is VariableKind.ONE:
            return 0
        if kind is VariableKind.INSTANCE:
            return index
        return self.num_instance_variables + index

    def _row(self, lc: LinearCombination) -> Row:
        cols = np.array(
            [self._column(var.kind, var.index) for var in lc.variables()], dtype=np.int64
        )
        if not len(lc):
            return cols, self.field.Zeros(0)
        coeffs = self.field([int(c) for _, c in lc])
        return cols, coeffs

    def _evaluate(self, rows: List[Row], z: galois.FieldArray) -> galois.FieldArray:
        out = self.field.Zeros(len(rows))
        for i, (cols, coeffs) in enumerate(rows):
            if len(cols):
                out[i] = np.sum(coeffs * z[cols])
        return out

    def evaluate(self, z: galois.FieldArray) -> Tuple[galois.FieldArray, ...]:
        """Compute (A·z, B·z, C·z)."""
        assert len(z) == self.num_columns, (
            f"Assignment has {len(z)} entries, expected {self.num_columns}"
        )
        return self._evaluate(self.a, z), self._evaluate(self.b, z), self._evaluate(self.c, z)

    def is_satisfied(self, z: galois.FieldArray) -> bool:
        """Check (A·z) ∘ (B·z) == C·z row by row."""
        az, bz, cz = self.evaluate(z)
        return bool(np.array_equal(az * bz, cz))

    def same_shape(self, other: "ConstraintMatrices") -> bool:
        """True if both matrices describe the same circuit (witnesses aside)."""
        if (self.num_instance_variables, self.num_witness_variables, self.num_constraints) != (
            other.num_instance_variables, other.num_witness_variables, other.num_constraints
        ):
            return False
        for mine, theirs in ((self.a, other.a), (self.b, other.b), (self.c, other.c)):
            for (c1, k1), (c2, k2) in zip(mine, theirs):
                if not (np.array_equal(c1, c2) and np.array_equal(k1, k2)):
                    return False
        return True
