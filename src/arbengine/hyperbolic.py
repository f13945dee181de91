from __future__ import annotations

from .elementary import _exp, _expm1, _log1p
from .mpfloat import MPFloat, as_working, rounding_of
from .precision import GUARD_BITS, resolve_prec_bits


def _prepare(x, prec_bits: int) -> tuple[MPFloat, int, int, str]:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    return as_working(x, wp), prec, wp, rounding_of(x)


def sinh(x, prec_bits: int = 0) -> MPFloat:
    x, prec, wp, rnd = _prepare(x, prec_bits)
    if x.is_nan() or x.is_inf() or x.is_zero():
        return x.with_prec(prec)
    a = abs(x)
    # (e^a - e^-a)/2 written through expm1 so small arguments do not cancel
    em1 = _expm1(a, wp)
    out = (em1 + em1 / (em1 + 1)).ldexp(-1)
    return (out * x.sign()).with_prec(prec, rnd)


def cosh(x, prec_bits: int = 0) -> MPFloat:
    x, prec, wp, rnd = _prepare(x, prec_bits)
    if x.is_nan():
        return MPFloat.nan(prec)
    if x.is_inf():
        return MPFloat.inf(prec)
    if x.is_zero():
        return MPFloat.one(prec)
    ex = _exp(abs(x), wp)
    return (ex + 1 / ex).ldexp(-1).with_prec(prec, rnd)


def tanh(x, prec_bits: int = 0) -> MPFloat:
    x, prec, wp, rnd = _prepare(x, prec_bits)
    if x.is_nan() or x.is_zero():
        return x.with_prec(prec)
    if x.is_inf():
        return MPFloat(x.sign(), prec)
    em1 = _expm1(abs(x).ldexp(1), wp)
    return (em1 / (em1 + 2) * x.sign()).with_prec(prec, rnd)


def asinh(x, prec_bits: int = 0) -> MPFloat:
    x, prec, wp, rnd = _prepare(x, prec_bits)
    if x.is_nan() or x.is_inf() or x.is_zero():
        return x.with_prec(prec)
    a = abs(x)
    # ln(a + sqrt(a^2 + 1)) = log1p(a + a^2 / (1 + sqrt(1 + a^2)))
    a2 = a * a
    arg = a + a2 / (1 + (1 + a2).sqrt())
    return (_log1p(arg, wp) * x.sign()).with_prec(prec, rnd)


def acosh(x, prec_bits: int = 0) -> MPFloat:
    x, prec, wp, rnd = _prepare(x, prec_bits)
    if x.is_nan() or x < 1:
        return MPFloat.nan(prec)
    if x.is_inf():
        return MPFloat.inf(prec)
    if x == 1:
        return MPFloat.zero(prec)
    t = x - 1
    return _log1p(t + (t * (x + 1)).sqrt(), wp).with_prec(prec, rnd)


def atanh(x, prec_bits: int = 0) -> MPFloat:
    x, prec, wp, rnd = _prepare(x, prec_bits)
    if x.is_nan() or abs(x) > 1:
        return MPFloat.nan(prec)
    if x.is_zero():
        return MPFloat.zero(prec)
    if abs(x) == 1:
        return MPFloat.inf(prec, x.sign())
    a = abs(x)
    out = _log1p(a.ldexp(1) / (1 - a), wp).ldexp(-1)
    return (out * x.sign()).with_prec(prec, rnd)


__all__ = ["sinh", "cosh", "tanh", "asinh", "acosh", "atanh"]
