"""Tests for the Boolean gadget."""

import itertools

import pytest

from constraints import Unsatisfiable
from gadgets import Boolean


def _alloc_bits(cs, value: int, width: int):
    return [Boolean.alloc(cs, lambda i=i: (value >> i) & 1) for i in range(width)]


class TestAllocation:
    """Tests for allocating bits."""

    @pytest.mark.parametrize("bit", [False, True])
    def test_alloc(self, cs, bit: bool) -> None:
        b = Boolean.alloc(cs, lambda: bit)
        assert b.value() is bit
        assert cs.num_constraints == 1
        assert cs.is_satisfied()

    def test_non_boolean_witness_is_caught(self, cs) -> None:
        Boolean.alloc(cs, lambda: 1)
        cs.witness_assignment[0] = cs.field(2)
        assert cs.which_is_unsatisfied() == "boolean"

    def test_setup_value_is_none(self, setup_cs) -> None:
        b = Boolean.alloc(setup_cs, lambda: True)
        assert b.value() is None
        assert b.not_().value() is None


class TestLogic:
    """Truth tables for the binary operations."""

    @pytest.mark.parametrize("a,b", list(itertools.product([False, True], repeat=2)))
    def test_truth_tables(self, cs, a: bool, b: bool) -> None:
        x = Boolean.alloc(cs, lambda: a)
        y = Boolean.alloc(cs, lambda: b)
        assert (x & y).value() is (a and b)
        assert (x | y).value() is (a or b)
        assert (x ^ y).value() is (a != b)
        assert (~x).value() is (not a)
        assert cs.is_satisfied()

    @pytest.mark.parametrize("const", [False, True])
    def test_constants_fold_without_constraints(self, cs, const: bool) -> None:
        x = Boolean.alloc(cs, lambda: True)
        before = cs.num_constraints
        k = Boolean.constant(const)
        results = [x & k, k & x, x | k, x ^ k, k ^ x]
        assert cs.num_constraints == before
        assert [r.value() for r in results] == [const, const, True, not const, not const]

    def test_kary_operations(self, cs) -> None:
        bits = _alloc_bits(cs, 0b1011, 4)
        assert Boolean.kary_and(bits).value() is False
        assert Boolean.kary_and(bits[:2]).value() is True
        assert Boolean.kary_or(bits).value() is True
        assert cs.is_satisfied()

    def test_forged_and_result_is_caught(self, cs) -> None:
        x = Boolean.alloc(cs, lambda: True)
        y = Boolean.alloc(cs, lambda: False)
        x & y
        cs.witness_assignment[-1] = cs.field(1)
        assert cs.which_is_unsatisfied() == "and"


class TestEnforcement:
    """Tests for equality and nand constraints."""

    def test_enforce_equal(self, cs) -> None:
        x = Boolean.alloc(cs, lambda: True)
        y = Boolean.alloc(cs, lambda: False)
        x.enforce_equal(Boolean.constant(True))
        assert cs.is_satisfied()
        y.enforce_equal(x)
        assert not cs.is_satisfied()

    def test_differing_constants_raise(self) -> None:
        with pytest.raises(Unsatisfiable):
            Boolean.constant(True).enforce_equal(Boolean.constant(False))

    def test_kary_nand(self, cs) -> None:
        Boolean.enforce_kary_nand(_alloc_bits(cs, 0b011, 3))
        assert cs.is_satisfied()
        Boolean.enforce_kary_nand(_alloc_bits(cs, 0b111, 3))
        assert not cs.is_satisfied()


class TestSelect:
    """Tests for conditional_select."""

    @pytest.mark.parametrize("c,a,b", list(itertools.product([False, True], repeat=3)))
    def test_select(self, cs, c: bool, a: bool, b: bool) -> None:
        cond = Boolean.alloc(cs, lambda: c)
        x = Boolean.alloc(cs, lambda: a)
        y = Boolean.alloc(cs, lambda: b)
        assert Boolean.conditional_select(cond, x, y).value() is (a if c else b)
        assert cs.is_satisfied()

    def test_select_between_constants(self, cs) -> None:
        cond = Boolean.alloc(cs, lambda: False)
        before = cs.num_constraints
        picked = Boolean.conditional_select(cond, Boolean.constant(True), Boolean.constant(False))
        assert picked.value() is False
        assert cs.num_constraints == before


class TestSmallerOrEqual:
    """Tests for comparing a bit vector against a constant."""

    @pytest.mark.parametrize("value", range(16))
    def test_against_ten(self, cs, value: int) -> None:
        Boolean.enforce_smaller_or_equal_than_le(_alloc_bits(cs, value, 4), 10)
        assert cs.is_satisfied() == (value <= 10)

    @pytest.mark.parametrize("value", [5, 6, 7, 8, 15])
    def test_extra_high_bits_must_be_zero(self, cs, value: int) -> None:
        Boolean.enforce_smaller_or_equal_than_le(_alloc_bits(cs, value, 4), 6)
        assert cs.is_satisfied() == (value <= 6)

    def test_fewer_bits_than_constant(self, cs) -> None:
        before = cs.num_constraints
        Boolean.enforce_smaller_or_equal_than_le(_alloc_bits(cs, 3, 2), 10)
        assert cs.num_constraints == before + 2
        assert cs.is_satisfied()
