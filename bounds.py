"""
Bounds layer for the square root contract.

Bounds define the *domain* within which an implementation is guaranteed
to satisfy its contract.  Outside the bounds, behaviour is explicitly
undefined unless the caller asks for precondition checking.

This module also provides the widened (64-bit) arithmetic used to state
the postconditions without overflow.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Bounds:
    """An inclusive integer domain [lo, hi]."""

    lo: int
    hi: int

    def __post_init__(self):
        if self.lo > self.hi:
            raise ValueError(f"lo ({self.lo}) must be <= hi ({self.hi})")

    @property
    def width(self) -> int:
        """Total number of representable values."""
        return self.hi - self.lo + 1

    def contains(self, value: int) -> bool:
        return self.lo <= value <= self.hi

    def all_values(self) -> range:
        return range(self.lo, self.hi + 1)

    def require(self, value: int, name: str = "value") -> int:
        """Return ``value`` unchanged, or raise if it is outside the bounds."""
        if not self.contains(value):
            raise ValueError(
                f"{name} {value} is outside bounds [{self.lo}, {self.hi}]"
            )
        return value


# ---------------------------------------------------------------------------
# Common bounds presets
# ---------------------------------------------------------------------------

INT32 = Bounds(lo=-(2**31), hi=2**31 - 1)
INT64 = Bounds(lo=-(2**63), hi=2**63 - 1)
NONNEGATIVE_INT32 = Bounds(lo=0, hi=INT32.hi)

# Small bounds useful for exhaustive verification
TINY = Bounds(lo=0, hi=255)
SMALL = Bounds(lo=0, hi=65_535)

# floor(sqrt(INT32.hi)); 46340**2 == 2147395600, 46341**2 == 2147488281
MAX_ROOT = 46_340


# ---------------------------------------------------------------------------
# Widened arithmetic
# ---------------------------------------------------------------------------

def widen(value: int) -> int:
    """Lift a 32-bit value into 64-bit arithmetic.

    Python ints never overflow, so widening is a range check: it rejects
    anything a 32-bit signed slot could not have held.
    """
    if not INT32.contains(value):
        raise OverflowError(f"{value} is not a 32-bit signed integer")
    return value


def wide_square(value: int) -> int:
    """Square a widened value, failing if the square escapes 64 bits."""
    square = value * value
    if square > INT64.hi:
        raise OverflowError(f"{value}**2 does not fit in 64 bits")
    return square
