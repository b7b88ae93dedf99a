"""FastAPI REST endpoints for verified integer square roots.

Routes
------
GET    /sqrt/algorithms    List algorithms and their verification status
GET    /sqrt/{x}           Square root of one value
POST   /sqrt/batch         Square roots of many values
POST   /sqrt/verify        Verify one algorithm against the contract
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from factory import DarkFactory
from isqrt import Algorithm, IntegerSquareRoot
from models import (
    AlgorithmInfo,
    BatchRequest,
    BatchResponse,
    CheckOutcome,
    ContractCheck,
    SqrtResult,
    VerificationSummary,
    VerifyRequest,
)
from spec import lower_bound_holds, upper_bound_holds

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sqrt", tags=["sqrt"])

# Implementations are injected by the app factory (see app.py).
_roots: dict[Algorithm, IntegerSquareRoot] = {}
_verified: set[Algorithm] = set()
_default: Algorithm = Algorithm.BINARY

DESCRIPTIONS = {
    Algorithm.LINEAR: "Reference linear search upward from 0",
    Algorithm.BINARY: "Binary search over [0, 46341)",
    Algorithm.NEWTON: "Integer Newton iteration",
}


def set_roots(
    roots: dict[Algorithm, IntegerSquareRoot],
    default: Algorithm,
    verified: set[Algorithm] | None = None,
) -> None:
    """Inject the implementations. Called once at app startup."""
    global _default
    _roots.clear()
    _roots.update(roots)
    _verified.clear()
    _verified.update(verified or set())
    _default = default


def get_root(algorithm: Algorithm | None = None) -> IntegerSquareRoot:
    assert _roots, "Implementations not initialized"
    return _roots[algorithm or _default]


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

def _invalid_argument(e: Exception) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


def _compute(root: IntegerSquareRoot, x: int) -> SqrtResult:
    result = root(x)
    contract = ContractCheck(
        nonnegative=result >= 0,
        lower_bound=lower_bound_holds(x, result),
        upper_bound=upper_bound_holds(x, result),
    )
    if not contract.holds:
        logger.error(
            "sqrt[%s](%d) = %d breaks the contract", root.algorithm.value, x, result
        )
    return SqrtResult(x=x, result=result, algorithm=root.algorithm, contract=contract)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/algorithms", response_model=list[AlgorithmInfo])
def list_algorithms() -> list[AlgorithmInfo]:
    """List the available algorithms."""
    return [
        AlgorithmInfo(
            name=algorithm,
            description=DESCRIPTIONS[algorithm],
            verified=algorithm in _verified,
            default=algorithm == _default,
        )
        for algorithm in _roots
    ]


@router.get("/{x}", response_model=SqrtResult)
def compute_sqrt(
    x: int,
    algorithm: Algorithm | None = Query(
        default=None, description="Algorithm to use; server default if omitted"
    ),
) -> SqrtResult:
    """Compute floor(sqrt(x))."""
    root = get_root(algorithm)
    try:
        return _compute(root, x)
    except (ValueError, TypeError) as e:
        raise _invalid_argument(e) from e


@router.post("/batch", response_model=BatchResponse)
def compute_batch(payload: BatchRequest) -> BatchResponse:
    """Compute floor(sqrt(x)) for every value; all or nothing."""
    root = get_root(payload.algorithm)
    try:
        items = [_compute(root, x) for x in payload.values]
    except (ValueError, TypeError) as e:
        raise _invalid_argument(e) from e
    return BatchResponse(items=items, total=len(items))


@router.post(
    "/verify",
    response_model=VerificationSummary,
    description=(
        "Verify one algorithm against the contract in the request thread. "
        "Each sample feeds every check, so cost grows with `samples`; "
        "linear verification is slow and capped at 64 samples."
    ),
)
def verify_algorithm(payload: VerifyRequest) -> VerificationSummary:
    """Run the factory's contract verification on one algorithm."""
    root = get_root(payload.algorithm)
    report = DarkFactory.verify(root, samples=payload.samples, seed=payload.seed)
    if report.passed:
        _verified.add(payload.algorithm)
    else:
        _verified.discard(payload.algorithm)
        logger.warning("verification of %s failed", payload.algorithm.value)
    return VerificationSummary(
        algorithm=payload.algorithm,
        passed=report.passed,
        exhaustive=report.exhaustive,
        tests_run=report.tests_run,
        checks=[
            CheckOutcome(
                name=r.name,
                passed=r.passed,
                tests_run=r.tests_run,
                counterexample=list(r.counterexample) if r.counterexample else None,
                detail=r.detail,
                exhaustive=r.exhaustive,
            )
            for r in report.results
        ],
    )
