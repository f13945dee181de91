from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from math import ceil

from .mpfloat import MPFloat
from .precision import GUARD_BITS

log = logging.getLogger(__name__)


class ConvergenceError(ArithmeticError):
    """A series loop hit its iteration cap before its terms became negligible."""

    def __init__(self, label: str, iterations: int, working_prec: int):
        self.label = label
        self.iterations = iterations
        self.working_prec = working_prec
        super().__init__(f"{label}: no convergence after {iterations} iterations at {working_prec} bits")


@dataclass(frozen=True)
class ConvergencePolicy:
    """Working-precision inflation and stopping rule for one top-level call.

    ``working_prec = target_prec + guard_bits``. A term is negligible once
    ``|term| < 2**-(working_prec + tail_bits)``, taken relative to the running
    total when ``relative`` is set. ``max_iterations`` is a ceiling, not a
    stopping rule: reaching it raises :class:`ConvergenceError`.
    """

    label: str
    target_prec: int
    guard_bits: int = GUARD_BITS
    max_iterations: int = 1000
    tail_bits: int = 0
    relative: bool = False

    @classmethod
    def for_call(
        cls,
        label: str,
        target_prec: int,
        *,
        guard_bits: int = GUARD_BITS,
        max_iterations: int = 1000,
        iterations_per_bit: float = 0.0,
        tail_bits: int = 0,
        relative: bool = False,
    ) -> "ConvergencePolicy":
        cap = max(max_iterations, int(ceil(iterations_per_bit * (target_prec + guard_bits))))
        return cls(label, target_prec, guard_bits, cap, tail_bits, relative)

    @property
    def working_prec(self) -> int:
        return self.target_prec + self.guard_bits

    @property
    def threshold_bits(self) -> int:
        return self.working_prec + self.tail_bits

    def threshold(self) -> MPFloat:
        return MPFloat.one(self.working_prec).ldexp(-self.threshold_bits)

    def widened(self, extra_bits: int, label: str | None = None) -> "ConvergencePolicy":
        return replace(self, guard_bits=self.guard_bits + max(0, int(extra_bits)), label=label or self.label)

    def steps(self, start: int = 1) -> range:
        return range(start, start + self.max_iterations)

    def converged(self, term: MPFloat, total: MPFloat | None = None) -> bool:
        if term.is_zero():
            return True
        if not term.is_finite():
            return False
        if self.relative and total is not None and total.is_finite() and not total.is_zero():
            return term.mag() <= total.mag() - 1 - self.threshold_bits
        return term.mag() <= -self.threshold_bits

    def exhausted(self) -> None:
        log.warning(
            "%s: iteration cap %d reached at %d working bits", self.label, self.max_iterations, self.working_prec
        )
        raise ConvergenceError(self.label, self.max_iterations, self.working_prec)


__all__ = ["ConvergenceError", "ConvergencePolicy"]
