from __future__ import annotations

from dataclasses import dataclass
from math import ceil, log2

from .mpfloat import MPFloat, as_working, round_nearest
from .precision import resolve_prec_bits


def ulp(x, prec_bits: int = 0) -> MPFloat:
    """2**(mag(x) - prec_bits): the spacing of prec_bits-bit values near x; 0 for x == 0."""
    prec = resolve_prec_bits(prec_bits)
    x = as_working(x, prec)
    if x.is_nan() or x.is_inf():
        return MPFloat.nan(prec)
    if x.is_zero():
        return MPFloat.zero(prec)
    return MPFloat.one(prec).ldexp(x.mag() - prec)


def _rounding_ulps(rnd: str) -> float:
    # half an ulp to nearest, a whole ulp for directed modes
    return 0.5 if rnd == round_nearest else 1.0


@dataclass(frozen=True)
class ErrorBound:
    value: MPFloat
    is_ulp: bool

    @classmethod
    def ulps(cls, n, prec_bits: int = 0) -> "ErrorBound":
        return cls(MPFloat(n, resolve_prec_bits(prec_bits)), True)

    @classmethod
    def absolute(cls, value, prec_bits: int = 0) -> "ErrorBound":
        return cls(MPFloat(value, resolve_prec_bits(prec_bits)), False)

    def to_abs(self, x, prec_bits: int = 0) -> MPFloat:
        """Absolute size of this bound for a result near ``x``."""
        prec = resolve_prec_bits(prec_bits)
        if not self.is_ulp:
            return self.value.with_prec(prec)
        return (as_working(self.value, prec) * ulp(x, prec)).with_prec(prec)

    def to_ulps(self, x, prec_bits: int = 0) -> MPFloat:
        prec = resolve_prec_bits(prec_bits)
        if self.is_ulp:
            return self.value.with_prec(prec)
        return (as_working(self.value, prec) / ulp(x, prec)).with_prec(prec)


def add_error_bounds(e1: ErrorBound, e2: ErrorBound, x, prec_bits: int = 0) -> ErrorBound:
    """Sum of two independent bounds; kept in ulps only when both are in ulps."""
    prec = resolve_prec_bits(prec_bits)
    if e1.is_ulp and e2.is_ulp:
        return ErrorBound((as_working(e1.value, prec) + e2.value).with_prec(prec), True)
    total = e1.to_abs(x, prec) + e2.to_abs(x, prec)
    return ErrorBound(total.with_prec(prec), False)


def propagate_error_add(
    x, y, z, err_x: ErrorBound, err_y: ErrorBound, prec_bits: int = 0, rnd: str = round_nearest
) -> ErrorBound:
    """Absolute error bound of z = x + y: the input errors plus the rounding of z."""
    prec = resolve_prec_bits(prec_bits)
    total = err_x.to_abs(x, prec) + err_y.to_abs(y, prec)
    total = total + ErrorBound.ulps(_rounding_ulps(rnd), prec).to_abs(z, prec)
    return ErrorBound(total.with_prec(prec), False)


def propagate_error_mul(
    x, y, z, err_x: ErrorBound, err_y: ErrorBound, prec_bits: int = 0, rnd: str = round_nearest
) -> ErrorBound:
    """Error bound of z = x * y in ulps of z.

    Relative errors add under multiplication and one ulp is about 2**-prec of
    relative error, so the ulp counts of the inputs add as well.
    """
    prec = resolve_prec_bits(prec_bits)
    total = err_x.to_ulps(x, prec) + err_y.to_ulps(y, prec) + _rounding_ulps(rnd)
    return ErrorBound(total.with_prec(prec), True)


def required_precision(target_prec: int, error_ulps: float) -> int:
    """Working precision that leaves ``target_prec`` good bits after ``error_ulps`` of error."""
    if error_ulps <= 1.0:
        return target_prec + 2
    return target_prec + int(ceil(log2(error_ulps))) + 5


__all__ = [
    "ulp",
    "ErrorBound",
    "add_error_bounds",
    "propagate_error_add",
    "propagate_error_mul",
    "required_precision",
]
