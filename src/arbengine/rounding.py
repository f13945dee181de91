"""Compute wide, round once.

Every ``*_rounded`` function returns ``(value, ternary)`` where ``ternary`` is
-1 when ``value`` lies below the quantity it was rounded from, +1 when above
and 0 when the rounding was exact.
"""

from __future__ import annotations

from typing import Callable

from mpmath.libmp import mpf_add, mpf_cmp, mpf_div, mpf_mul, mpf_pos, mpf_sqrt

from .checks import check_in_set
from .elementary import exp, log
from .mpfloat import ROUNDING_MODES, MPFloat, as_working, round_nearest
from .precision import GUARD_BITS, resolve_prec_bits
from .trig import cos, sin


def _finish(raw, exact, prec: int, rnd: str) -> tuple[MPFloat, int]:
    value = MPFloat._make(raw, prec, rnd)
    if value.is_nan():
        return value, 0
    return value, mpf_cmp(raw, exact)


def round_to(x, prec_bits: int = 0, rnd: str = round_nearest) -> tuple[MPFloat, int]:
    check_in_set(rnd, ROUNDING_MODES, "rnd")
    prec = resolve_prec_bits(prec_bits)
    raw = as_working(x, prec)._mpf_
    return _finish(mpf_pos(raw, prec, rnd), raw, prec, rnd)


def evaluate_rounded(fn: Callable[..., MPFloat], *args, prec_bits: int = 0, rnd: str = round_nearest, **kwargs):
    """Run ``fn`` with ``GUARD_BITS`` extra bits and round its result once.

    The ternary is taken against the wide result, which stands in for the
    exact value.
    """
    prec = resolve_prec_bits(prec_bits)
    wide = fn(*args, prec_bits=prec + GUARD_BITS, **kwargs)
    return round_to(wide, prec, rnd)


def sqrt_rounded(x, prec_bits: int = 0, rnd: str = round_nearest) -> tuple[MPFloat, int]:
    check_in_set(rnd, ROUNDING_MODES, "rnd")
    prec = resolve_prec_bits(prec_bits)
    x = as_working(x, prec)
    if x.is_nan() or x < 0:
        return MPFloat.nan(prec), 0
    raw = mpf_sqrt(x._mpf_, prec, rnd)
    value = MPFloat._make(raw, prec, rnd)
    if not value.is_finite() or value.is_zero():
        return value, 0
    # compare squares exactly
    return value, mpf_cmp(mpf_mul(raw, raw), x._mpf_)


def add_rounded(a, b, prec_bits: int = 0, rnd: str = round_nearest) -> tuple[MPFloat, int]:
    check_in_set(rnd, ROUNDING_MODES, "rnd")
    prec = resolve_prec_bits(prec_bits)
    exact = mpf_add(as_working(a, prec)._mpf_, as_working(b, prec)._mpf_)
    return _finish(mpf_pos(exact, prec, rnd), exact, prec, rnd)


def div_rounded(a, b, prec_bits: int = 0, rnd: str = round_nearest) -> tuple[MPFloat, int]:
    check_in_set(rnd, ROUNDING_MODES, "rnd")
    prec = resolve_prec_bits(prec_bits)
    a = as_working(a, prec)
    b = as_working(b, prec)
    if not (a.is_finite() and b.is_finite()) or b.is_zero():
        return a.with_rounding(rnd) / b, 0
    raw = mpf_div(a._mpf_, b._mpf_, prec, rnd)
    # q > a/b  <=>  q*b > a when b > 0
    c = mpf_cmp(mpf_mul(raw, b._mpf_), a._mpf_)
    return MPFloat._make(raw, prec, rnd), c if b > 0 else -c


def exp_rounded(x, prec_bits: int = 0, rnd: str = round_nearest) -> tuple[MPFloat, int]:
    return evaluate_rounded(exp, x, prec_bits=prec_bits, rnd=rnd)


def log_rounded(x, prec_bits: int = 0, rnd: str = round_nearest) -> tuple[MPFloat, int]:
    return evaluate_rounded(log, x, prec_bits=prec_bits, rnd=rnd)


def sin_rounded(x, prec_bits: int = 0, rnd: str = round_nearest) -> tuple[MPFloat, int]:
    return evaluate_rounded(sin, x, prec_bits=prec_bits, rnd=rnd)


def cos_rounded(x, prec_bits: int = 0, rnd: str = round_nearest) -> tuple[MPFloat, int]:
    return evaluate_rounded(cos, x, prec_bits=prec_bits, rnd=rnd)


__all__ = [
    "round_to",
    "evaluate_rounded",
    "sqrt_rounded",
    "add_rounded",
    "div_rounded",
    "exp_rounded",
    "log_rounded",
    "sin_rounded",
    "cos_rounded",
]
