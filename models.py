"""Request and response models for the square root API.

These are wire models only.  The contract lives in spec.py and the
arithmetic in isqrt.py; nothing here computes a root.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from isqrt import Algorithm


# ---------------------------------------------------------------------------
# Single result
# ---------------------------------------------------------------------------

class ContractCheck(BaseModel):
    """Postconditions re-checked on the value being returned."""

    nonnegative: bool
    lower_bound: bool = Field(..., description="result**2 <= x (64-bit)")
    upper_bound: bool = Field(..., description="(result + 1)**2 > x (64-bit)")

    @property
    def holds(self) -> bool:
        return self.nonnegative and self.lower_bound and self.upper_bound


class SqrtResult(BaseModel):
    x: int
    result: int
    algorithm: Algorithm
    contract: ContractCheck


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------

class BatchRequest(BaseModel):
    values: list[int] = Field(..., min_length=1, max_length=1000)
    algorithm: Algorithm | None = None

    @field_validator("values", mode="before")
    @classmethod
    def reject_non_integers(cls, values: list) -> list:
        # pydantic would coerce 2.0 or "4" to int; the contract takes ints only
        if not isinstance(values, list):
            return values
        for v in values:
            if isinstance(v, bool) or not isinstance(v, int):
                raise ValueError(f"expected an integer, got {v!r}")
        return values


class BatchResponse(BaseModel):
    items: list[SqrtResult]
    total: int


# ---------------------------------------------------------------------------
# Algorithms and verification
# ---------------------------------------------------------------------------

class AlgorithmInfo(BaseModel):
    name: Algorithm
    description: str
    verified: bool
    default: bool = False


# Linear search takes up to ~46k steps per call near the top of INT32, and
# each sample feeds several checks, so it gets a tighter cap.
LINEAR_SAMPLE_LIMIT = 64


class VerifyRequest(BaseModel):
    algorithm: Algorithm
    samples: int = Field(default=64, ge=0, le=500)
    seed: int = 0

    @model_validator(mode="after")
    def cap_linear_samples(self) -> "VerifyRequest":
        if self.algorithm == Algorithm.LINEAR and self.samples > LINEAR_SAMPLE_LIMIT:
            raise ValueError(
                f"linear verification is limited to {LINEAR_SAMPLE_LIMIT} samples"
            )
        return self


class CheckOutcome(BaseModel):
    name: str
    passed: bool
    tests_run: int
    counterexample: list[int] | None = None
    detail: str = ""
    exhaustive: bool | None = None


class VerificationSummary(BaseModel):
    algorithm: Algorithm
    passed: bool
    exhaustive: bool
    tests_run: int
    checks: list[CheckOutcome]
