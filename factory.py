"""
The Dark Factory.

The factory does NOT just construct square root implementations - it
*verifies* them against the contract before releasing them.

Flow:
  1. Caller requests an implementation for an algorithm and domain.
  2. Factory builds the IntegerSquareRoot.
  3. Factory checks every postcondition, error condition and
     algebraic property of ``build_spec`` against it.
  4. If verification passes  -> return the implementation.
     If verification fails   -> raise, never hand out a broken instance.

"Dark" because the consumer never sees the verification step.  Which
algorithm sits behind the contract is equally invisible to them.
"""

from __future__ import annotations

import itertools
import logging
import math
import random
from dataclasses import dataclass, field
from typing import Callable, Iterable

from bounds import INT32, MAX_ROOT, NONNEGATIVE_INT32, Bounds
from isqrt import Algorithm, IntegerSquareRoot, PreconditionMode
from spec import AlgebraicProperty, SqrtSpec, build_spec

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    """Outcome of verifying one check."""

    name: str
    passed: bool
    counterexample: tuple | None = None
    tests_run: int = 0
    detail: str = ""
    # None for fixed input sets, where sampling does not apply
    exhaustive: bool | None = None

    def __repr__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        mode = {True: ", exhaustive", False: ", sampled"}.get(self.exhaustive, "")
        ce = f"  counterexample={self.counterexample}" if self.counterexample else ""
        return f"[{status}] {self.name} ({self.tests_run} tests{mode}){ce}"


@dataclass
class VerificationReport:
    """Aggregate result of verifying an implementation."""

    algorithm: str
    results: list[VerificationResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failures(self) -> list[VerificationResult]:
        return [r for r in self.results if not r.passed]

    @property
    def tests_run(self) -> int:
        return sum(r.tests_run for r in self.results)

    @property
    def exhaustive(self) -> bool:
        """True when every enumerable check covered all its inputs."""
        flags = [r.exhaustive for r in self.results if r.exhaustive is not None]
        return bool(flags) and all(flags)

    def summary(self) -> str:
        mode = "exhaustive" if self.exhaustive else "sampled"
        lines = [f"--- sqrt[{self.algorithm}] ({mode}) ---"]
        for r in self.results:
            lines.append(f"  {r}")
        status = "ALL PASSED" if self.passed else "FAILED"
        lines.append(f"  => {status}")
        return "\n".join(lines)


class VerificationError(Exception):
    """Raised when an implementation fails its contract."""

    def __init__(self, report: VerificationReport):
        self.report = report
        super().__init__(f"Verification failed:\n{report.summary()}")


# ---------------------------------------------------------------------------
# The factory
# ---------------------------------------------------------------------------

class DarkFactory:
    """
    Produces IntegerSquareRoot instances that are proven correct.

    When ``domain.width ** arity`` is small enough the factory checks
    every input combination.  Otherwise it samples: domain edges and
    the neighbourhood of perfect squares always, random values to fill.
    Sampling is seeded so a failing run can be replayed.
    """

    EXHAUSTIVE_LIMIT = 70_000   # max input combinations for brute force
    DEFAULT_SAMPLES = 64
    DEFAULT_SEED = 0

    @classmethod
    def create(
        cls,
        algorithm: Algorithm = Algorithm.LINEAR,
        domain: Bounds = NONNEGATIVE_INT32,
        precondition_mode: PreconditionMode = PreconditionMode.CHECK,
        *,
        samples: int | None = None,
        seed: int | None = None,
    ) -> IntegerSquareRoot:
        """Build, verify, and return an IntegerSquareRoot."""
        root = IntegerSquareRoot(
            domain=domain,
            algorithm=algorithm,
            precondition_mode=precondition_mode,
        )
        report = cls.verify(root, samples=samples, seed=seed)
        if not report.passed:
            raise VerificationError(report)
        return root

    @classmethod
    def verify(
        cls,
        root: Callable[[int], int],
        *,
        domain: Bounds | None = None,
        precondition_mode: PreconditionMode | None = None,
        samples: int | None = None,
        seed: int | None = None,
    ) -> VerificationReport:
        """Check ``root`` against the contract and return the report.

        ``root`` is usually an IntegerSquareRoot, whose own domain and
        mode are used; any other callable needs ``domain`` (and, for
        error conditions, ``precondition_mode``) passed in.
        """
        if domain is None:
            domain = getattr(root, "domain", NONNEGATIVE_INT32)
        if precondition_mode is None:
            precondition_mode = getattr(
                root, "precondition_mode", PreconditionMode.TRUST
            )
        algorithm = getattr(root, "algorithm", None)
        name = algorithm.value if algorithm is not None else getattr(
            root, "__name__", "custom"
        )

        spec = build_spec(domain, precondition_mode)
        sampler = _Sampler(
            domain,
            cls.DEFAULT_SAMPLES if samples is None else samples,
            cls.DEFAULT_SEED if seed is None else seed,
        )
        report = VerificationReport(algorithm=name)

        report.results.append(cls._verify_postconditions(root, spec, sampler))
        if spec.operation.error_conditions:
            report.results.append(cls._verify_error_conditions(root, spec))
        for prop in spec.all_properties:
            report.results.append(cls._verify_property(prop, root, sampler))

        if report.passed:
            logger.info(
                "sqrt[%s] verified over [%d, %d] (%d tests)",
                name, domain.lo, domain.hi, report.tests_run,
            )
        else:
            for failure in report.failures:
                logger.warning(
                    "sqrt[%s] failed %s at %s",
                    name, failure.name, failure.counterexample,
                )
        return report

    # -- internal ---------------------------------------------------------

    @classmethod
    def _exhaustive(cls, domain: Bounds, arity: int) -> bool:
        return domain.width ** arity <= cls.EXHAUSTIVE_LIMIT

    @classmethod
    def _inputs(cls, sampler: "_Sampler", arity: int) -> Iterable[tuple[int, ...]]:
        domain = sampler.domain
        if cls._exhaustive(domain, arity):
            return itertools.product(domain.all_values(), repeat=arity)
        logger.debug(
            "sampling %d-ary inputs over [%d, %d]", arity, domain.lo, domain.hi
        )
        return sampler.combos(arity)

    @classmethod
    def _verify_postconditions(
        cls, root: Callable[[int], int], spec: SqrtSpec, sampler: "_Sampler"
    ) -> VerificationResult:
        exhaustive = cls._exhaustive(sampler.domain, 1)
        tests_run = 0
        for (x,) in cls._inputs(sampler, 1):
            tests_run += 1
            try:
                result = root(x)
            except Exception as e:
                return VerificationResult(
                    name="postconditions",
                    passed=False,
                    counterexample=(x,),
                    tests_run=tests_run,
                    detail=f"raised {type(e).__name__}: {e}",
                    exhaustive=exhaustive,
                )
            for post in spec.operation.postconditions:
                try:
                    ok = post.check(x, result)
                except Exception as e:
                    ok = False
                    logger.debug("%s raised %s on result %r", post.name, e, result)
                if not ok:
                    return VerificationResult(
                        name="postconditions",
                        passed=False,
                        counterexample=(x,),
                        tests_run=tests_run,
                        detail=f"{post.name}: result={result!r}",
                        exhaustive=exhaustive,
                    )
        return VerificationResult(
            name="postconditions",
            passed=True,
            tests_run=tests_run,
            exhaustive=exhaustive,
        )

    @classmethod
    def _verify_error_conditions(
        cls, root: Callable[[int], int], spec: SqrtSpec
    ) -> VerificationResult:
        domain = spec.domain
        probes = [-1, -2, INT32.lo, domain.hi + 1]
        tests_run = 0
        for x in probes:
            for ec in spec.operation.error_conditions:
                if not ec.trigger(x):
                    continue
                tests_run += 1
                try:
                    result = root(x)
                except ec.exception:
                    continue
                except Exception as e:
                    return VerificationResult(
                        name="error_conditions",
                        passed=False,
                        counterexample=(x,),
                        tests_run=tests_run,
                        detail=f"{ec.name}: raised {type(e).__name__}",
                    )
                return VerificationResult(
                    name="error_conditions",
                    passed=False,
                    counterexample=(x,),
                    tests_run=tests_run,
                    detail=f"{ec.name}: returned {result}",
                )
        return VerificationResult(
            name="error_conditions", passed=True, tests_run=tests_run
        )

    @classmethod
    def _verify_property(
        cls,
        prop: AlgebraicProperty,
        root: Callable[[int], int],
        sampler: "_Sampler",
    ) -> VerificationResult:
        exhaustive = cls._exhaustive(sampler.domain, prop.arity)
        tests_run = 0
        for combo in cls._inputs(sampler, prop.arity):
            tests_run += 1
            detail = ""
            try:
                ok = prop.check(root, *combo)
            except Exception as e:
                ok = False
                detail = f"raised {type(e).__name__}: {e}"
            if not ok:
                return VerificationResult(
                    name=prop.name,
                    passed=False,
                    counterexample=combo,
                    tests_run=tests_run,
                    detail=detail,
                    exhaustive=exhaustive,
                )
        return VerificationResult(
            name=prop.name,
            passed=True,
            tests_run=tests_run,
            exhaustive=exhaustive,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _Sampler:
    """Edge-case plus seeded random inputs for domains too big to enumerate."""

    def __init__(self, domain: Bounds, count: int, seed: int) -> None:
        self.domain = domain
        self.count = count
        self.seed = seed

    def edge_values(self) -> list[int]:
        lo, hi = self.domain.lo, self.domain.hi
        candidates = {lo, lo + 1, 0, 1, 2, 3, 4, 15, 16, 24, 25, hi - 1, hi}
        # Square neighbourhoods at the top of the domain and of INT32
        for r in (math.isqrt(hi), MAX_ROOT):
            candidates.update({r * r - 1, r * r, r * r + 1})
        return sorted(v for v in candidates if self.domain.contains(v))

    def combos(self, arity: int) -> list[tuple[int, ...]]:
        rng = random.Random(self.seed)
        edges = self.edge_values()
        combos: list[tuple[int, ...]]
        if arity == 1:
            combos = [(v,) for v in edges]
        else:
            # Adjacent edge pairs, not the full cross product
            combos = [
                tuple(edges[min(i + k, len(edges) - 1)] for k in range(arity))
                for i in range(len(edges))
            ]
        target = len(combos) + self.count
        while len(combos) < target:
            combos.append(tuple(
                rng.randint(self.domain.lo, self.domain.hi) for _ in range(arity)
            ))
        return combos
