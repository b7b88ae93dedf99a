"""Application factory and entry point.

Run with:
    uvicorn app:app --reload
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from api import router, set_roots
from factory import DarkFactory
from isqrt import Algorithm, IntegerSquareRoot

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_SAMPLES = 64


def create_app(
    default_algorithm: Algorithm = Algorithm.BINARY,
    verify_samples: int = DEFAULT_VERIFY_SAMPLES,
) -> FastAPI:
    """Build and return the FastAPI application.

    The default algorithm goes through the verifying factory before the
    app is built, so a broken default never serves a request.  The
    others are served unverified until ``POST /sqrt/verify`` runs.
    """
    roots = {algorithm: IntegerSquareRoot(algorithm=algorithm) for algorithm in Algorithm}
    roots[default_algorithm] = DarkFactory.create(
        default_algorithm, samples=verify_samples
    )
    logger.info("default algorithm %s verified", default_algorithm.value)

    set_roots(roots, default=default_algorithm, verified={default_algorithm})

    app = FastAPI(
        title="Integer Square Root API",
        description=(
            "Floor square roots of nonnegative 32-bit integers. Every "
            "response is produced by an implementation checked against "
            "the same contract: result >= 0, result**2 <= x and "
            "(result + 1)**2 > x, squares taken in 64-bit arithmetic."
        ),
        version="0.1.0",
    )
    app.include_router(router)
    return app


# Default app instance for `uvicorn app:app`
app = create_app()
