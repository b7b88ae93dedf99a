"""Formal specification for the integer square root.

The operation is specified as a collection of:
- preconditions: what the input must satisfy before the call
- postconditions: what the output must satisfy given valid input
- error conditions: what inputs must cause specific exceptions
- algebraic properties: relationships between results that must hold

The contract is machine-readable.  The factory and the validation tools
iterate over it to verify implementations and search for
counterexamples, whichever algorithm the implementation uses.

Layers
------
OperationSpec   contract for ``sqrt`` (pre/post/error/properties)
BranchSpec      every decision point that white-box tests must cover
SqrtSpec        the full contract for a configured implementation
build_spec()    constructs a SqrtSpec for a given configuration
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from bounds import INT32, NONNEGATIVE_INT32, Bounds, wide_square, widen
from isqrt import PreconditionMode


# ---------------------------------------------------------------------------
# Spec building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Precondition:
    name: str
    description: str
    check: Callable[..., bool]


@dataclass(frozen=True)
class Postcondition:
    name: str
    description: str
    check: Callable[..., bool]


@dataclass(frozen=True)
class ErrorCondition:
    name: str
    description: str
    trigger: Callable[..., bool]
    exception: type


@dataclass(frozen=True)
class AlgebraicProperty:
    name: str
    description: str
    arity: int          # how many free input values the check needs
    check: Callable[..., bool]


@dataclass(frozen=True)
class OperationSpec:
    name: str
    preconditions: list[Precondition]
    postconditions: list[Postcondition]
    error_conditions: list[ErrorCondition]
    properties: list[AlgebraicProperty]


@dataclass(frozen=True)
class BranchSpec:
    """A decision point in the implementation that must be exercised."""

    id: str
    description: str
    condition: str      # human-readable boolean expression
    operation: str      # which function this belongs to


@dataclass(frozen=True)
class SqrtSpec:
    """Complete contract for a configured square root implementation."""

    domain: Bounds
    precondition_mode: PreconditionMode
    operation: OperationSpec
    branches: list[BranchSpec]

    @property
    def all_properties(self) -> list[AlgebraicProperty]:
        return list(self.operation.properties)

    def branch_ids(self, operation: str | None = None) -> list[str]:
        return [
            b.id for b in self.branches
            if operation is None or b.operation == operation
        ]


# ---------------------------------------------------------------------------
# Contract samples
# ---------------------------------------------------------------------------

CONTRACT_SAMPLE: tuple[int, ...] = (
    0, 1, 2, 3, 4, 8, 9, 15, 16, 24, 25, 2_147_483_647,
)

# Concrete scenarios, including the overflow-sensitive top of INT32.
KNOWN_VALUES: tuple[tuple[int, int], ...] = (
    (0, 0),
    (1, 1),
    (3, 1),
    (4, 2),
    (24, 4),
    (2_147_483_647, 46_340),
)


# ---------------------------------------------------------------------------
# Helpers used inside the contract predicates
# ---------------------------------------------------------------------------

def lower_bound_holds(x: int, result: int) -> bool:
    """``result**2 <= x`` in widened arithmetic."""
    try:
        return wide_square(widen(result)) <= widen(x)
    except OverflowError:
        return False


def upper_bound_holds(x: int, result: int) -> bool:
    """``(result + 1)**2 > x`` in widened arithmetic."""
    try:
        return wide_square(widen(result) + 1) > widen(x)
    except OverflowError:
        return False


def _is_int(x) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


# ---------------------------------------------------------------------------
# Spec builder
# ---------------------------------------------------------------------------

def build_spec(
    domain: Bounds = NONNEGATIVE_INT32,
    precondition_mode: PreconditionMode = PreconditionMode.CHECK,
) -> SqrtSpec:
    """Construct the full square root specification for a configuration."""

    checking = precondition_mode == PreconditionMode.CHECK

    error_conditions: list[ErrorCondition] = []
    if checking:
        error_conditions = [
            ErrorCondition(
                "negative_input",
                "ValueError when x < 0",
                lambda x: x < 0,
                ValueError,
            ),
            ErrorCondition(
                "outside_domain",
                "ValueError when x >= 0 but outside the domain",
                lambda x: x >= 0 and not domain.contains(x),
                ValueError,
            ),
        ]

    sqrt_spec = OperationSpec(
        name="sqrt",
        preconditions=[
            Precondition(
                "is_integer",
                "x is an int (not a bool)",
                _is_int,
            ),
            Precondition(
                "nonnegative",
                "x >= 0",
                lambda x: x >= 0,
            ),
            Precondition(
                "in_domain",
                "x lies within the configured domain",
                lambda x: domain.contains(x),
            ),
        ],
        postconditions=[
            Postcondition(
                "nonnegative_result",
                "result >= 0",
                lambda x, result: result >= 0,
            ),
            Postcondition(
                "lower_bound",
                "result * result <= x (64-bit)",
                lower_bound_holds,
            ),
            Postcondition(
                "upper_bound",
                "(result + 1) * (result + 1) > x (64-bit)",
                upper_bound_holds,
            ),
            Postcondition(
                "result_is_int32",
                "result is a 32-bit signed int",
                lambda x, result: _is_int(result) and INT32.contains(result),
            ),
            Postcondition(
                "matches_reference",
                "result == math.isqrt(x)",
                lambda x, result: result == math.isqrt(x),
            ),
        ],
        error_conditions=error_conditions,
        properties=[
            AlgebraicProperty(
                "determinism", "sqrt(x) == sqrt(x)", 1,
                lambda fn, x: fn(x) == fn(x),
            ),
            AlgebraicProperty(
                "monotonicity", "x <= y implies sqrt(x) <= sqrt(y)", 2,
                lambda fn, x, y: (
                    fn(x) <= fn(y) if x <= y else fn(y) <= fn(x)
                ),
            ),
            AlgebraicProperty(
                "unit_step",
                "sqrt(x + 1) - sqrt(x) is 0 or 1 when x + 1 in domain", 1,
                lambda fn, x: (
                    fn(x + 1) - fn(x) in (0, 1)
                    if domain.contains(x + 1) else True
                ),
            ),
            AlgebraicProperty(
                "exact_on_squares",
                "sqrt(r * r) == r when r * r in domain", 1,
                lambda fn, r: (
                    fn(r * r) == r if domain.contains(r * r) else True
                ),
            ),
        ],
    )

    # -------------------------------------------------------------- branches
    branches = [
        # Precondition handling (IntegerSquareRoot)
        BranchSpec(
            "PRE-VALID",
            "Input accepted",
            "isinstance(x, int) and domain.contains(x)",
            "validation",
        ),
        BranchSpec(
            "PRE-NOT-INT",
            "TypeError for non-int input",
            "not isinstance(x, int) or isinstance(x, bool)",
            "validation",
        ),
        BranchSpec(
            "PRE-NEGATIVE",
            "ValueError for negative input",
            "x < 0",
            "validation",
        ),
        BranchSpec(
            "PRE-OUT-OF-DOMAIN",
            "ValueError for input above the domain",
            "x >= 0 and not domain.contains(x)",
            "validation",
        ),
        BranchSpec(
            "PRE-TRUSTED",
            "Validation skipped",
            "precondition_mode == TRUST",
            "validation",
        ),
        # Linear search
        BranchSpec(
            "LIN-STEP",
            "Candidate square still <= x, keep counting",
            "candidate**2 <= x",
            "linear",
        ),
        BranchSpec(
            "LIN-STOP",
            "Candidate square exceeds x, return candidate - 1",
            "candidate**2 > x",
            "linear",
        ),
        # Binary search
        BranchSpec(
            "BIN-LOWER",
            "Midpoint square <= x, raise lower end",
            "mid**2 <= x",
            "binary",
        ),
        BranchSpec(
            "BIN-UPPER",
            "Midpoint square > x, lower upper end",
            "mid**2 > x",
            "binary",
        ),
        # Newton iteration
        BranchSpec(
            "NEWTON-SMALL",
            "x is 0 or 1 and is its own root",
            "x < 2",
            "newton",
        ),
        BranchSpec(
            "NEWTON-STEP",
            "Next estimate is smaller, keep iterating",
            "y < r",
            "newton",
        ),
    ]

    return SqrtSpec(
        domain=domain,
        precondition_mode=precondition_mode,
        operation=sqrt_spec,
        branches=branches,
    )
