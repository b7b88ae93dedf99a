"""Integer square root behind an algorithm-hiding contract.

Callers depend only on the contract documented on :func:`square_root`;
the concrete algorithm is interchangeable.  Decision branches are
annotated with their branch ids (see spec.py ``BranchSpec``) so
white-box tests can trace coverage back to the contract.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable

from bounds import INT32, MAX_ROOT, NONNEGATIVE_INT32, Bounds, wide_square


class Algorithm(str, Enum):
    LINEAR = "linear"
    BINARY = "binary"
    NEWTON = "newton"


class PreconditionMode(Enum):
    CHECK = auto()      # reject invalid input with an exception
    TRUST = auto()      # caller is responsible; behaviour unspecified


# ---------------------------------------------------------------------------
# Algorithms
# ---------------------------------------------------------------------------

def linear_sqrt(x: int) -> int:
    """Reference algorithm: count upward until the square first exceeds x.

    Branches: LIN-STEP, LIN-STOP
    """
    candidate = 0
    while wide_square(candidate) <= x:                        # LIN-STEP
        candidate += 1
    return candidate - 1                                      # LIN-STOP


def binary_sqrt(x: int) -> int:
    """Binary search keeping ``lo**2 <= x < hi**2``.

    Branches: BIN-LOWER, BIN-UPPER
    """
    lo, hi = 0, min(x, MAX_ROOT) + 1
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if wide_square(mid) <= x:                             # BIN-LOWER
            lo = mid
        else:                                                 # BIN-UPPER
            hi = mid
    return lo


def newton_sqrt(x: int) -> int:
    """Integer Newton iteration from an initial guess above the root.

    Branches: NEWTON-SMALL, NEWTON-STEP
    """
    if x < 2:                                                 # NEWTON-SMALL
        return x

    r = 1 << ((x.bit_length() + 1) // 2)
    y = (r + x // r) // 2
    while y < r:                                              # NEWTON-STEP
        r = y
        y = (r + x // r) // 2
    return r


ALGORITHMS: dict[Algorithm, Callable[[int], int]] = {
    Algorithm.LINEAR: linear_sqrt,
    Algorithm.BINARY: binary_sqrt,
    Algorithm.NEWTON: newton_sqrt,
}


# ---------------------------------------------------------------------------
# Contracted implementation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class IntegerSquareRoot:
    """Floor square root over a nonnegative 32-bit domain."""

    domain: Bounds = NONNEGATIVE_INT32
    algorithm: Algorithm = Algorithm.LINEAR
    precondition_mode: PreconditionMode = PreconditionMode.CHECK

    def __post_init__(self) -> None:
        if self.domain.lo < 0 or self.domain.hi > INT32.hi:
            raise ValueError(
                f"domain [{self.domain.lo}, {self.domain.hi}] must lie "
                f"within [0, {INT32.hi}]"
            )

    # -- internal helpers ---------------------------------------------------

    def _validate(self, x: int) -> None:
        """Reject input that violates the precondition.

        Branches: PRE-VALID, PRE-NOT-INT, PRE-NEGATIVE, PRE-OUT-OF-DOMAIN
        """
        if isinstance(x, bool) or not isinstance(x, int):     # PRE-NOT-INT
            raise TypeError(f"expected an int, got {type(x).__name__}")
        if x < 0:                                             # PRE-NEGATIVE
            raise ValueError(f"invalid argument: {x} is negative")
        self.domain.require(x, "x")                           # PRE-OUT-OF-DOMAIN
        # (falls through) PRE-VALID

    # -- public operation ---------------------------------------------------

    def __call__(self, x: int) -> int:
        """Return floor(sqrt(x)).

        Branches: PRE-TRUSTED (TRUST mode skips validation)
        """
        if self.precondition_mode == PreconditionMode.CHECK:
            self._validate(x)
        return ALGORITHMS[self.algorithm](x)


_DEFAULT = IntegerSquareRoot()


def square_root(x: int) -> int:
    """Compute the integer square root of ``x``.

    Precondition:
        ``x`` is an int with ``0 <= x <= 2**31 - 1``.

    Postconditions, for the returned ``result``:
        - ``result >= 0``
        - ``result * result <= x``
        - ``(result + 1) * (result + 1) > x``

    Both squares are taken in 64-bit arithmetic, so the contract holds
    for ``x = 2**31 - 1`` too.  Callers must not rely on which algorithm
    produces the result.

    Raises:
        TypeError: ``x`` is not an int.
        ValueError: ``x`` is negative or larger than ``2**31 - 1``.
    """
    return _DEFAULT(x)
