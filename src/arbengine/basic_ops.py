from __future__ import annotations

from typing import Sequence

from mpmath.libmp import mpf_abs, mpf_add, mpf_cmp, mpf_mod, mpf_mul, mpf_pos, mpf_shift, mpf_sub, mpf_sum

from .checks import _debug_check
from .mpfloat import MPFloat, as_working, rounding_of
from .precision import resolve_prec_bits


def _integral(x, prec_bits: int, how: str) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    rnd = rounding_of(x)
    x = as_working(x, prec)
    return getattr(x, how)().with_prec(prec, rnd)


def floor(x, prec_bits: int = 0) -> MPFloat:
    return _integral(x, prec_bits, "floor")


def ceil(x, prec_bits: int = 0) -> MPFloat:
    return _integral(x, prec_bits, "ceil")


def trunc(x, prec_bits: int = 0) -> MPFloat:
    return _integral(x, prec_bits, "trunc")


def _special_mod(x: MPFloat, y: MPFloat, prec: int) -> MPFloat | None:
    if x.is_nan() or y.is_nan() or x.is_inf():
        return MPFloat.nan(prec)
    if y.is_zero():
        return MPFloat.zero(prec)
    if y.is_inf():
        return x.with_prec(prec)
    return None


def mod(x, y, prec_bits: int = 0) -> MPFloat:
    """x - y * floor(x / y), with the sign of y; 0 when y == 0."""
    prec = resolve_prec_bits(prec_bits)
    rnd = rounding_of(x)
    x = as_working(x, prec)
    y = as_working(y, prec)
    special = _special_mod(x, y, prec)
    if special is not None:
        return special
    return MPFloat._make(mpf_mod(x._mpf_, y._mpf_, prec, rnd), prec, rnd)


def rem(x, y, prec_bits: int = 0) -> MPFloat:
    """IEEE remainder x - y * n, n the integer nearest x / y (ties to even)."""
    prec = resolve_prec_bits(prec_bits)
    rnd = rounding_of(x)
    x = as_working(x, prec)
    y = as_working(y, prec)
    special = _special_mod(x, y, prec)
    if special is not None:
        return special
    # r2 = x mod 2|y| lies in [0, 2|y|); quotient parity decides the tie cases
    a = mpf_abs(y._mpf_)
    exact = max(1, y.mag() + 2 - min(x._mpf_[2], y._mpf_[2]))
    r2 = mpf_mod(x._mpf_, mpf_shift(a, 1), exact)
    half = mpf_shift(a, -1)
    if mpf_cmp(r2, half) <= 0:
        r = r2
    elif mpf_cmp(r2, mpf_add(a, half)) < 0:
        r = mpf_sub(r2, a)
    else:
        r = mpf_sub(r2, mpf_shift(a, 1))
    return MPFloat._make(mpf_pos(r, prec, rnd), prec, rnd)


def fma(a, b, c, prec_bits: int = 0) -> MPFloat:
    """a * b + c with a single rounding."""
    prec = resolve_prec_bits(prec_bits)
    rnd = rounding_of(a)
    raw = [as_working(v, prec)._mpf_ for v in (a, b, c)]
    return MPFloat._make(mpf_add(mpf_mul(raw[0], raw[1]), raw[2], prec, rnd), prec, rnd)


def dot(u: Sequence, v: Sequence, prec_bits: int = 0) -> MPFloat:
    """Sum of u[i] * v[i] with exact products and a single final rounding."""
    _debug_check(len(u) == len(v), "dot: length mismatch {} != {}", len(u), len(v))
    prec = resolve_prec_bits(prec_bits)
    rnd = rounding_of(u[0]) if len(u) else "n"
    products = [mpf_mul(as_working(a, prec)._mpf_, as_working(b, prec)._mpf_) for a, b in zip(u, v)]
    return MPFloat._make(mpf_sum(products, prec, rnd), prec, rnd)


__all__ = ["floor", "ceil", "trunc", "mod", "rem", "fma", "dot"]
