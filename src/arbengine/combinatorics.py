from __future__ import annotations

from math import comb

from .checks import check_integer
from .hypgeom import _gamma
from .mpfloat import MPFloat
from .precision import GUARD_BITS, resolve_prec_bits

# Up to here products fit comfortably in a couple of machine words.
_DIRECT_LIMIT = 20


def factorial(n, prec_bits: int = 0) -> MPFloat:
    """n! for integer n; NaN for n < 0."""
    n = check_integer(n, "factorial argument")
    prec = resolve_prec_bits(prec_bits)
    if n < 0:
        return MPFloat.nan(prec)
    if n <= _DIRECT_LIMIT:
        result = 1
        for i in range(2, n + 1):
            result *= i
        return MPFloat(result, prec)
    wp = prec + GUARD_BITS
    return _gamma(MPFloat(n + 1, wp), wp).with_prec(prec)


def binomial(n, k, prec_bits: int = 0) -> MPFloat:
    """C(n, k) for integers.

    Zero for k < 0 or 0 <= n < k. Negative n gives the generalized value
    (-1)^k C(k - n - 1, k).
    """
    n = check_integer(n, "binomial n")
    k = check_integer(k, "binomial k")
    prec = resolve_prec_bits(prec_bits)
    if k < 0 or 0 <= n < k:
        return MPFloat.zero(prec)
    if n < 0:
        magnitude = binomial(k - n - 1, k, prec_bits=prec)
        return -magnitude if k & 1 else magnitude
    if k == 0 or k == n:
        return MPFloat.one(prec)
    k = min(k, n - k)
    if n <= _DIRECT_LIMIT:
        return MPFloat(comb(n, k), prec)
    # k roundings, absorbed by k.bit_length() extra bits
    wp = prec + GUARD_BITS + k.bit_length()
    result = MPFloat.one(wp)
    for i in range(k):
        result = result * (MPFloat(n - i, wp) / (k - i))
    return result.with_prec(prec)


__all__ = ["factorial", "binomial"]
