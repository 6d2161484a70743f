"""Tests for sparse matrix export."""

import numpy as np

from constraints import ConstraintSystem
from primitives.field import BN254_FR


def _cubic(cs: ConstraintSystem, x_value: int) -> None:
    """x^3 + x + 5 == out, the classic toy circuit."""
    x = cs.allocate(lambda: x_value)
    out = cs.allocate_input(lambda: x_value ** 3 + x_value + 5)
    x2 = cs.allocate(lambda: x_value ** 2)
    x3 = cs.allocate(lambda: x_value ** 3)
    cs.enforce(x, x, x2)
    cs.enforce(x2, x, x3)
    cs.enforce(cs.lc(x3) + x + 5, 1, out)


def test_column_layout(cs) -> None:
    _cubic(cs, 3)
    m = cs.to_matrices()
    assert m.num_constraints == 3
    assert m.num_columns == 2 + 3
    # x is witness 0, which lands right after ONE and the single input
    cols, coeffs = m.a[0]
    assert list(cols) == [2]
    assert [int(c) for c in coeffs] == [1]
    # x3 + x + 5: witness 2, witness 0, ONE
    cols, coeffs = m.a[2]
    assert list(cols) == [4, 2, 0]
    assert [int(c) for c in coeffs] == [1, 1, 5]
    assert m.names == ["#0", "#1", "#2"]


def test_agrees_with_constraint_system(cs) -> None:
    _cubic(cs, 3)
    m = cs.to_matrices()
    z = cs.assignment()
    assert cs.is_satisfied()
    assert m.is_satisfied(z)

    cs.witness_assignment[2] = cs.field(28)
    assert not cs.is_satisfied()
    assert not m.is_satisfied(cs.assignment())


def test_evaluate(cs) -> None:
    _cubic(cs, 2)
    az, bz, cz = cs.to_matrices().evaluate(cs.assignment())
    assert np.array_equal(az * bz, cz)
    assert [int(v) for v in cz] == [4, 8, 15]


def test_setup_and_proving_have_the_same_shape() -> None:
    setup = ConstraintSystem.setup(BN254_FR)
    proving = ConstraintSystem.proving(BN254_FR)
    _cubic(setup, 0)
    _cubic(proving, 4)
    assert setup.to_matrices().same_shape(proving.to_matrices())


def test_different_circuits_differ() -> None:
    a = ConstraintSystem.setup(BN254_FR)
    b = ConstraintSystem.setup(BN254_FR)
    _cubic(a, 0)
    _cubic(b, 0)
    b.enforce(b.lc(1), 1, 1)
    assert not a.to_matrices().same_shape(b.to_matrices())
