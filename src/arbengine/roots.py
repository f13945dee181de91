from __future__ import annotations

import math

from .convergence import ConvergencePolicy
from .elementary import _exp, _log, _pow_int
from .mpfloat import MPFloat, as_working, rounding_of
from .precision import GUARD_BITS, resolve_prec_bits

# Newton stops once a step is this many bits above the working ulp; the
# following iterate would only repeat rounding noise.
_NEWTON_SLACK_BITS = 8
_NEWTON_MAX_ITERATIONS = 100


def _seed(a: MPFloat, n: int, wp: int) -> MPFloat:
    """Machine-double estimate of a**(1/n), valid for any exponent range."""
    e = a.mag()
    log2_a = (e - 1) + math.log2(float(a.ldexp(1 - e)))
    q = log2_a / n
    k = math.floor(q)
    return MPFloat(2.0 ** (q - k), wp).ldexp(k)


def _root_positive(a: MPFloat, n: int, wp: int, label: str) -> MPFloat:
    """a**(1/n) for finite a > 0 and integer n >= 2, by Newton-Raphson."""
    policy = ConvergencePolicy.for_call(
        label, wp - _NEWTON_SLACK_BITS, guard_bits=0, max_iterations=_NEWTON_MAX_ITERATIONS, relative=True
    )
    y = _seed(a, n, wp)
    for _ in policy.steps():
        # y <- ((n - 1) y + a / y^(n-1)) / n
        nxt = (y * (n - 1) + a / _pow_int(y, n - 1, wp)) / n
        delta = nxt - y
        y = nxt
        if policy.converged(delta, y):
            break
    else:
        policy.exhausted()
    return y


def cbrt(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan() or x.is_zero() or x.is_inf():
        return x.with_prec(prec)
    out = _root_positive(abs(x), 3, wp, "cbrt")
    return (out * x.sign()).with_prec(prec, rnd)


def nth_root(n, x, prec_bits: int = 0) -> MPFloat:
    """Real ``n``-th root of ``x``.

    Odd integer roots of negative numbers are real and negative; even or
    non-integer roots of negative numbers, and any ``n <= 0``, give NaN.
    """
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    n = as_working(n, wp)
    if x.is_nan() or n.is_nan() or n <= 0:
        return MPFloat.nan(prec)
    integral = n.is_integer()
    odd = integral and int(n) & 1
    if x < 0 and not odd:
        return MPFloat.nan(prec)
    if n == 1:
        return x.with_prec(prec, rnd)
    if x.is_zero() or x.is_inf():
        return x.with_prec(prec)
    if n.is_inf():
        return MPFloat.one(prec) if x > 0 else MPFloat(-1, prec)
    a = abs(x)
    if integral:
        k = int(n)
        out = a.sqrt() if k == 2 else _root_positive(a, k, wp, "nth_root")
    else:
        out = _exp(_log(a, wp) / n, wp)
    return (out * x.sign()).with_prec(prec, rnd)


__all__ = ["cbrt", "nth_root"]
