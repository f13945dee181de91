from __future__ import annotations

import logging
import os
import platform

from mpmath import libmp

from .checks import check_in_set

log = logging.getLogger(__name__)

STRATEGIES = ("reference", "fixed")


def _select_strategy() -> str:
    override = os.getenv("ARBENGINE_STRATEGY")
    if override:
        check_in_set(override, STRATEGIES, "ARBENGINE_STRATEGY")
        return override
    # integer fixed point only pays off when big ints are gmpy mpz
    return "fixed" if libmp.BACKEND == "gmpy" else "reference"


_STRATEGY = _select_strategy()
log.debug("kernel strategy %s (mpmath backend %s)", _STRATEGY, libmp.BACKEND)


def strategy() -> str:
    """Chebyshev kernel strategy chosen for this process."""
    return _STRATEGY


def capabilities() -> dict[str, str]:
    return {
        "backend": libmp.BACKEND,
        "machine": platform.machine(),
        "python": platform.python_version(),
        "strategy": _STRATEGY,
    }


__all__ = ["STRATEGIES", "strategy", "capabilities"]
