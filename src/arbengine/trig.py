from __future__ import annotations

from .constants import constant
from .convergence import ConvergencePolicy
from .mpfloat import MPFloat, as_working, rounding_of
from .precision import GUARD_BITS, resolve_prec_bits

# Largest double below pi/4; arguments under it need no reduction.
_QUARTER_PI_BELOW = 0.7853981633974483
_REDUCTION_ROUNDS = 4
_ATAN_HALVING_LIMIT = 0.125
_ATAN_MAX_HALVINGS = 10


def _series_policy(label: str, wp: int) -> ConvergencePolicy:
    return ConvergencePolicy.for_call(label, wp, guard_bits=0, iterations_per_bit=0.5, relative=True)


def _reduce_quadrant(x: MPFloat, wp: int) -> tuple[int, MPFloat]:
    """Return (q, r) with x = r + n*pi/2, q = n mod 4 and |r| <= pi/4.

    The nearest multiple is used. The reduction precision grows until the
    remainder keeps ``wp`` significant bits after cancellation.
    """
    if abs(x) < _QUARTER_PI_BELOW:
        return 0, x
    xmag = max(0, x.mag())
    extra = xmag + 8
    for _ in range(_REDUCTION_ROUNDS):
        p = wp + extra
        half_pi = constant("pi", p).ldexp(-1)
        xp = as_working(x, p)
        n = (xp / half_pi).nint()
        r = xp - half_pi * n
        if r.is_zero():
            extra *= 2
            continue
        needed = max(0, x.mag() - r.mag()) + 8
        if needed <= extra:
            break
        extra = needed + 16
    return int(n) % 4, r.with_prec(wp)


def _sin_series(r: MPFloat, wp: int) -> MPFloat:
    if r.is_zero():
        return r
    policy = _series_policy("sin", wp)
    r2 = r * r
    term = r
    total = r
    for n in policy.steps():
        term = -term * r2 / ((2 * n) * (2 * n + 1))
        total = total + term
        if policy.converged(term, total):
            break
    else:
        policy.exhausted()
    return total


def _cos_series(r: MPFloat, wp: int) -> MPFloat:
    if r.is_zero():
        return MPFloat.one(wp)
    policy = _series_policy("cos", wp)
    r2 = r * r
    term = MPFloat.one(wp)
    total = MPFloat.one(wp)
    for n in policy.steps():
        term = -term * r2 / ((2 * n - 1) * (2 * n))
        total = total + term
        if policy.converged(term, total):
            break
    else:
        policy.exhausted()
    return total


def _sin_cos(x: MPFloat, wp: int) -> tuple[MPFloat, MPFloat]:
    q, r = _reduce_quadrant(x, wp)
    s = _sin_series(r, wp)
    c = _cos_series(r, wp)
    if q == 0:
        return s, c
    if q == 1:
        return c, -s
    if q == 2:
        return -s, -c
    return -c, s


def _sin(x: MPFloat, wp: int) -> MPFloat:
    q, r = _reduce_quadrant(x, wp)
    if q == 0:
        return _sin_series(r, wp)
    if q == 1:
        return _cos_series(r, wp)
    if q == 2:
        return -_sin_series(r, wp)
    return -_cos_series(r, wp)


def _cos(x: MPFloat, wp: int) -> MPFloat:
    q, r = _reduce_quadrant(x, wp)
    if q == 0:
        return _cos_series(r, wp)
    if q == 1:
        return -_sin_series(r, wp)
    if q == 2:
        return -_cos_series(r, wp)
    return _sin_series(r, wp)


def _atan(x: MPFloat, wp: int) -> MPFloat:
    """atan of a finite x at ``wp`` bits."""
    if x.is_zero():
        return x
    if x < 0:
        return -_atan(-x, wp)
    if x == 1:
        return constant("pi", wp).ldexp(-2)
    if x > 1:
        return constant("pi", wp).ldexp(-1) - _atan(1 / x, wp)
    halvings = 0
    while x > _ATAN_HALVING_LIMIT and halvings < _ATAN_MAX_HALVINGS:
        x = x / (1 + (1 + x * x).sqrt())
        halvings += 1
    policy = _series_policy("atan", wp)
    x2 = x * x
    power = x
    total = x
    for n in policy.steps():
        power = -power * x2
        term = power / (2 * n + 1)
        total = total + term
        if policy.converged(term, total):
            break
    else:
        policy.exhausted()
    return total.ldexp(halvings)


def _asin(x: MPFloat, wp: int) -> MPFloat:
    if x.is_zero():
        return x
    if abs(x) == 1:
        return constant("pi", wp).ldexp(-1) * x.sign()
    return _atan(x / ((1 - x) * (1 + x)).sqrt(), wp)


def sin(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if not x.is_finite():
        return MPFloat.nan(prec)
    if x.is_zero():
        return MPFloat.zero(prec)
    return _sin(x, wp).with_prec(prec, rnd)


def cos(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if not x.is_finite():
        return MPFloat.nan(prec)
    if x.is_zero():
        return MPFloat.one(prec)
    return _cos(x, wp).with_prec(prec, rnd)


def tan(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if not x.is_finite():
        return MPFloat.nan(prec)
    if x.is_zero():
        return MPFloat.zero(prec)
    s, c = _sin_cos(x, wp)
    return (s / c).with_prec(prec, rnd)


def asin(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan() or abs(x) > 1:
        return MPFloat.nan(prec)
    return _asin(x, wp).with_prec(prec, rnd)


def acos(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan() or abs(x) > 1:
        return MPFloat.nan(prec)
    if x == 1:
        return MPFloat.zero(prec)
    if x == -1:
        return constant("pi", prec)
    # 2 atan(sqrt((1-x)/(1+x))) keeps full relative accuracy near x = 1
    return _atan(((1 - x) / (1 + x)).sqrt(), wp).ldexp(1).with_prec(prec, rnd)


def atan(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan():
        return MPFloat.nan(prec)
    if x.is_inf():
        return (constant("pi", wp).ldexp(-1) * x.sign()).with_prec(prec, rnd)
    return _atan(x, wp).with_prec(prec, rnd)


def _atan2(y: MPFloat, x: MPFloat, wp: int) -> MPFloat:
    pi = constant("pi", wp)
    if y.is_zero() and x.is_zero():
        return MPFloat.zero(wp)
    if x.is_zero():
        return pi.ldexp(-1) * y.sign()
    if y.is_zero():
        return MPFloat.zero(wp) if x > 0 else pi
    if y.is_inf() and x.is_inf():
        quarter = pi.ldexp(-2) if x > 0 else pi.ldexp(-2) * 3
        return quarter * y.sign()
    if x.is_inf():
        return MPFloat.zero(wp) if x > 0 else pi * y.sign()
    if y.is_inf():
        return pi.ldexp(-1) * y.sign()
    base = _atan(y / x, wp)
    if x > 0:
        return base
    return base + pi if y > 0 else base - pi


def atan2(y, x, prec_bits: int = 0) -> MPFloat:
    """Angle of the point (x, y), in (-pi, pi]."""
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(y)
    y = as_working(y, wp)
    x = as_working(x, wp)
    if y.is_nan() or x.is_nan():
        return MPFloat.nan(prec)
    return _atan2(y, x, wp).with_prec(prec, rnd)


__all__ = ["sin", "cos", "tan", "asin", "acos", "atan", "atan2"]
