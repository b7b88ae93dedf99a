"""Shared fixtures for square root tests."""
from __future__ import annotations

import pytest

from bounds import TINY
from isqrt import Algorithm, IntegerSquareRoot, PreconditionMode


@pytest.fixture(params=list(Algorithm), ids=lambda a: a.value)
def algorithm(request) -> Algorithm:
    return request.param


@pytest.fixture
def root(algorithm) -> IntegerSquareRoot:
    """A checking implementation over the full nonnegative 32-bit domain."""
    return IntegerSquareRoot(algorithm=algorithm)


@pytest.fixture
def tiny_root(algorithm) -> IntegerSquareRoot:
    return IntegerSquareRoot(domain=TINY, algorithm=algorithm)


@pytest.fixture
def trusting_root(algorithm) -> IntegerSquareRoot:
    return IntegerSquareRoot(
        algorithm=algorithm, precondition_mode=PreconditionMode.TRUST
    )
