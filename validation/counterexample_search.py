"""Counterexample search: discovers gaps in implementations or tests.

This module runs independently of the test suite.  For every algorithm
it systematically searches for:

1. Postcondition violations: inputs where the result breaks the
   contract (or disagrees with ``math.isqrt``).
2. Error condition violations: invalid inputs that should raise but
   don't (or raise the wrong exception).
3. Property violations: relationships between results that fail for
   some input combination.

Small domains are swept exhaustively; the full 32-bit domain is swept
around its edges and around every perfect square near the top.

Run directly::

    python -m validation.counterexample_search
"""
from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import Iterable

sys.path.insert(0, ".")

from bounds import MAX_ROOT, NONNEGATIVE_INT32, TINY, Bounds
from isqrt import Algorithm, IntegerSquareRoot, PreconditionMode
from spec import SqrtSpec, build_spec


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class Counterexample:
    category: str
    algorithm: str
    inputs: tuple
    expected: str
    actual: str
    description: str


@dataclass
class SearchReport:
    counterexamples: list[Counterexample] = field(default_factory=list)
    checks_run: int = 0

    @property
    def passed(self) -> bool:
        return len(self.counterexamples) == 0

    def summary(self) -> str:
        lines = [
            "Counterexample Search Report",
            "=" * 40,
            f"Total checks: {self.checks_run}",
            f"Counterexamples found: {len(self.counterexamples)}",
        ]
        if self.counterexamples:
            lines.append("")
            for i, cx in enumerate(self.counterexamples, 1):
                lines.append(f"  [{i}] {cx.category} / {cx.algorithm}")
                lines.append(f"      Inputs:   {cx.inputs}")
                lines.append(f"      Expected: {cx.expected}")
                lines.append(f"      Actual:   {cx.actual}")
                lines.append(f"      {cx.description}")
        else:
            lines.append("\nNo counterexamples found, all checks passed.")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Input selection
# ---------------------------------------------------------------------------

def search_inputs(domain: Bounds, window: int = 64) -> Iterable[int]:
    """Every value of a small domain, or edges plus square neighbourhoods."""
    if domain.width <= 4096:
        return domain.all_values()

    values: set[int] = set()
    values.update(range(domain.lo, domain.lo + window))
    values.update(range(domain.hi - window + 1, domain.hi + 1))
    top = min(MAX_ROOT, math.isqrt(domain.hi) + 1)
    for r in range(max(0, top - window), top + 1):
        values.update({r * r - 1, r * r, r * r + 1})
    return sorted(v for v in values if domain.contains(v))


# ---------------------------------------------------------------------------
# Search functions
# ---------------------------------------------------------------------------

def search_postcondition_violations(
    root: IntegerSquareRoot,
    spec: SqrtSpec,
    inputs: list[int],
) -> tuple[list[Counterexample], int]:
    """Verify every postcondition for every selected input."""
    cxs: list[Counterexample] = []
    checks = 0
    name = root.algorithm.value

    for x in inputs:
        checks += 1
        try:
            result = root(x)
        except Exception as e:
            cxs.append(Counterexample(
                category="unexpected_error",
                algorithm=name,
                inputs=(x,),
                expected="no error",
                actual=f"{type(e).__name__}: {e}",
                description="Operation raised an unexpected exception",
            ))
            continue

        for post in spec.operation.postconditions:
            if not post.check(x, result):
                cxs.append(Counterexample(
                    category="postcondition_violation",
                    algorithm=name,
                    inputs=(x,),
                    expected=post.description,
                    actual=f"result={result}",
                    description=f"Postcondition '{post.name}' violated",
                ))

    return cxs, checks


def search_error_condition_violations(
    root: IntegerSquareRoot,
    spec: SqrtSpec,
) -> tuple[list[Counterexample], int]:
    """Verify every error condition triggers the right exception."""
    cxs: list[Counterexample] = []
    checks = 0
    name = root.algorithm.value
    probes = list(range(-16, 0)) + [-(2**31), spec.domain.hi + 1, 2**31]

    for x in probes:
        for ec in spec.operation.error_conditions:
            if not ec.trigger(x):
                continue
            checks += 1
            try:
                result = root(x)
                cxs.append(Counterexample(
                    category="missing_error",
                    algorithm=name,
                    inputs=(x,),
                    expected=f"{ec.exception.__name__}",
                    actual=f"result={result}",
                    description=(
                        f"Error condition '{ec.name}' should have "
                        f"triggered but didn't"
                    ),
                ))
            except ec.exception:
                pass  # expected
            except Exception as e:
                cxs.append(Counterexample(
                    category="wrong_error",
                    algorithm=name,
                    inputs=(x,),
                    expected=f"{ec.exception.__name__}",
                    actual=f"{type(e).__name__}: {e}",
                    description=f"Wrong exception type for '{ec.name}'",
                ))

    return cxs, checks


def search_property_violations(
    root: IntegerSquareRoot,
    spec: SqrtSpec,
    inputs: list[int],
) -> tuple[list[Counterexample], int]:
    """Check every property; binary ones on adjacent input pairs."""
    cxs: list[Counterexample] = []
    checks = 0
    name = root.algorithm.value

    for prop in spec.all_properties:
        if prop.arity == 1:
            combos = [(x,) for x in inputs]
        else:
            combos = list(zip(inputs, inputs[1:]))
        for combo in combos:
            checks += 1
            try:
                ok = prop.check(root, *combo)
            except (OverflowError, ValueError):
                ok = False
            if not ok:
                cxs.append(Counterexample(
                    category="property_violation",
                    algorithm=name,
                    inputs=combo,
                    expected=prop.description,
                    actual="property does not hold",
                    description=f"Property '{prop.name}' violated",
                ))

    return cxs, checks


# ---------------------------------------------------------------------------
# Top-level runner
# ---------------------------------------------------------------------------

def run_search(
    algorithm: Algorithm,
    domain: Bounds = NONNEGATIVE_INT32,
    precondition_mode: PreconditionMode = PreconditionMode.CHECK,
    window: int = 64,
) -> SearchReport:
    """Run complete counterexample search for one configuration."""
    root = IntegerSquareRoot(domain, algorithm, precondition_mode)
    spec = build_spec(domain, precondition_mode)
    inputs = list(search_inputs(domain, window))
    report = SearchReport()

    for cxs, checks in (
        search_postcondition_violations(root, spec, inputs),
        search_error_condition_violations(root, spec),
        search_property_violations(root, spec, inputs),
    ):
        report.counterexamples.extend(cxs)
        report.checks_run += checks

    return report


def main() -> None:
    """Run counterexample search across every algorithm and domain."""
    configs = [
        (f"{algorithm.value:<6} [{domain.lo}, {domain.hi}]", algorithm, domain)
        for algorithm in Algorithm
        for domain in (TINY, NONNEGATIVE_INT32)
    ]

    all_passed = True
    for name, algorithm, domain in configs:
        print(f"\n--- Configuration: {name} ---")
        report = run_search(algorithm, domain)
        print(report.summary())
        if not report.passed:
            all_passed = False

    print("\n" + "=" * 40)
    if all_passed:
        print("ALL CONFIGURATIONS PASSED")
    else:
        print("SOME CONFIGURATIONS HAD COUNTEREXAMPLES")
        sys.exit(1)


if __name__ == "__main__":
    main()
