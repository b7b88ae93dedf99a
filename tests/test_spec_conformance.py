"""Spec conformance tests.

These tests are *driven by* ``spec.build_spec``: they iterate over
every postcondition, error condition, and algebraic property it
defines and verify each algorithm satisfies them.

A predicate added to ``build_spec`` is covered here automatically.
"""
from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis.strategies import integers

from bounds import INT32, NONNEGATIVE_INT32, TINY
from isqrt import Algorithm, IntegerSquareRoot, PreconditionMode
from spec import (
    CONTRACT_SAMPLE,
    KNOWN_VALUES,
    build_spec,
    lower_bound_holds,
    upper_bound_holds,
)

SPEC = build_spec()
TINY_SPEC = build_spec(TINY)
FAST = [Algorithm.BINARY, Algorithm.NEWTON]
nonnegative = integers(min_value=0, max_value=INT32.hi)


# ===================================================================
# POSTCONDITIONS
# ===================================================================

class TestPostconditions:
    """Every postcondition in the contract holds."""

    @pytest.mark.parametrize("x", CONTRACT_SAMPLE)
    def test_contract_sample(self, root, x):
        result = root(x)
        for post in SPEC.operation.postconditions:
            assert post.check(x, result), (
                f"Postcondition '{post.name}' failed: sqrt({x}) = {result}"
            )

    @pytest.mark.parametrize("algorithm", FAST, ids=lambda a: a.value)
    @given(x=nonnegative)
    @settings(max_examples=300)
    def test_random_inputs(self, algorithm, x):
        root = IntegerSquareRoot(algorithm=algorithm)
        result = root(x)
        for post in SPEC.operation.postconditions:
            assert post.check(x, result), (
                f"Postcondition '{post.name}' failed: sqrt({x}) = {result}"
            )

    @given(x=integers(min_value=0, max_value=5_000_000))
    @settings(max_examples=50)
    def test_random_inputs_linear(self, x):
        root = IntegerSquareRoot(algorithm=Algorithm.LINEAR)
        result = root(x)
        for post in SPEC.operation.postconditions:
            assert post.check(x, result)

    def test_postconditions_reject_wrong_results(self):
        """The predicates themselves catch off-by-one results."""
        assert not lower_bound_holds(24, 5)
        assert not upper_bound_holds(24, 3)
        assert lower_bound_holds(24, 4) and upper_bound_holds(24, 4)

    def test_postconditions_reject_out_of_int32_result(self):
        assert not lower_bound_holds(INT32.hi, INT32.hi + 1)


# ===================================================================
# ERROR CONDITIONS
# ===================================================================

class TestErrorConditions:
    """Every error condition in the contract triggers correctly."""

    @pytest.mark.parametrize("x", [-1, -2, -100, INT32.lo, 256, 1_000])
    def test_tiny_error_conditions(self, tiny_root, x):
        triggered = [ec for ec in TINY_SPEC.operation.error_conditions if ec.trigger(x)]
        assert triggered, f"no error condition covers {x}"
        for ec in triggered:
            with pytest.raises(ec.exception):
                tiny_root(x)

    def test_trust_mode_has_no_error_conditions(self):
        spec = build_spec(NONNEGATIVE_INT32, PreconditionMode.TRUST)
        assert spec.operation.error_conditions == []

    def test_check_mode_error_condition_names(self):
        names = [ec.name for ec in SPEC.operation.error_conditions]
        assert names == ["negative_input", "outside_domain"]


# ===================================================================
# PRECONDITIONS
# ===================================================================

class TestPreconditionPredicates:

    def test_valid_input_meets_all(self):
        assert all(pre.check(16) for pre in TINY_SPEC.operation.preconditions)

    def test_negative_input_fails_nonnegative(self):
        failing = [
            pre.name for pre in TINY_SPEC.operation.preconditions
            if not pre.check(-1)
        ]
        assert "nonnegative" in failing

    def test_bool_fails_is_integer(self):
        is_integer = TINY_SPEC.operation.preconditions[0]
        assert is_integer.name == "is_integer"
        assert not is_integer.check(True)
        assert is_integer.check(3)


# ===================================================================
# ALGEBRAIC PROPERTIES: property-based
# ===================================================================

class TestAlgebraicProperties:
    """Every algebraic property in the contract holds for random inputs."""

    @pytest.mark.parametrize("algorithm", FAST, ids=lambda a: a.value)
    @given(a=nonnegative, b=nonnegative)
    @settings(max_examples=200)
    def test_binary_properties(self, algorithm, a, b):
        root = IntegerSquareRoot(algorithm=algorithm)
        for prop in SPEC.all_properties:
            if prop.arity != 2:
                continue
            assert prop.check(root, a, b), (
                f"Property '{prop.name}' failed for ({a}, {b})"
            )

    @pytest.mark.parametrize("algorithm", FAST, ids=lambda a: a.value)
    @given(a=nonnegative)
    @settings(max_examples=200)
    def test_unary_properties(self, algorithm, a):
        root = IntegerSquareRoot(algorithm=algorithm)
        for prop in SPEC.all_properties:
            if prop.arity != 1:
                continue
            assert prop.check(root, a), f"Property '{prop.name}' failed for {a}"

    @given(r=integers(min_value=0, max_value=46_340))
    def test_exact_on_squares(self, r):
        prop = next(p for p in SPEC.all_properties if p.name == "exact_on_squares")
        assert prop.check(IntegerSquareRoot(algorithm=Algorithm.NEWTON), r)


# ===================================================================
# EXHAUSTIVE VERIFICATION: small domain
# ===================================================================

class TestExhaustive:
    """For TINY, check *every* input against every postcondition."""

    def test_all_values(self, tiny_root):
        checked = 0
        for x in TINY.all_values():
            result = tiny_root(x)
            for post in TINY_SPEC.operation.postconditions:
                assert post.check(x, result)
            checked += 1
        assert checked == TINY.width

    def test_all_adjacent_pairs_monotone(self, tiny_root):
        prop = next(p for p in TINY_SPEC.all_properties if p.name == "monotonicity")
        for x in range(TINY.lo, TINY.hi):
            assert prop.check(tiny_root, x, x + 1)

    def test_known_values_are_in_sample(self):
        for x, _ in KNOWN_VALUES:
            assert x in CONTRACT_SAMPLE
