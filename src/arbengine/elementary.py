from __future__ import annotations

from .constants import constant
from .convergence import ConvergencePolicy
from .mpfloat import MPFloat, as_working, rounding_of
from .precision import GUARD_BITS, resolve_prec_bits

_SQRT_HALF = 0.7071067811865476
_POW_INT_LIMIT = 10**6


def _series_policy(label: str, wp: int, relative: bool = True, per_bit: float = 0.25) -> ConvergencePolicy:
    return ConvergencePolicy.for_call(label, wp, guard_bits=0, iterations_per_bit=per_bit, relative=relative)


def _exp(x: MPFloat, wp: int) -> MPFloat:
    """exp of a finite x at ``wp`` bits: ln2 reduction, halving, Taylor, squaring."""
    if x.is_zero():
        return MPFloat.one(wp)
    p = wp + max(0, x.mag()) + 8
    ln2 = constant("ln2", p)
    xp = as_working(x, p)
    k = int((xp / ln2).nint())
    r = (xp - ln2 * k).with_prec(wp)
    total = MPFloat.one(wp)
    if not r.is_zero():
        shift = max(0, r.mag() + 14)
        u = r.ldexp(-shift)
        policy = _series_policy("exp", wp)
        term = MPFloat.one(wp)
        for n in policy.steps():
            term = term * u / n
            total = total + term
            if policy.converged(term, total):
                break
        else:
            policy.exhausted()
        for _ in range(shift):
            total = total * total
    return total.ldexp(k)


def _atanh_series(u: MPFloat, wp: int, label: str) -> MPFloat:
    """sum u^(2n+1) / (2n+1), for |u| well inside the unit disk."""
    policy = _series_policy(label, wp)
    u2 = u * u
    power = u
    total = u
    for n in policy.steps():
        power = power * u2
        term = power / (2 * n + 1)
        total = total + term
        if policy.converged(term, total):
            break
    else:
        policy.exhausted()
    return total


def _log(x: MPFloat, wp: int) -> MPFloat:
    """Natural log of a finite x > 0 at ``wp`` bits."""
    m, k = x.frexp()
    if m < _SQRT_HALF:
        m = m.ldexp(1)
        k -= 1
    # exact: m and 1 share the low end of m's significand
    d = as_working(m, m.bit_length() + 2) - 1
    if d.is_zero():
        ln_m = MPFloat.zero(wp)
    else:
        halvings = max(0, d.mag() + 14)
        if halvings:
            p = wp + halvings + 18
            y = as_working(m, p)
            for _ in range(halvings):
                y = y.sqrt()
            u = ((y - 1) / (y + 1)).with_prec(wp)
        else:
            u = as_working(d, wp) / (as_working(m, wp) + 1)
        ln_m = _atanh_series(u, wp, "log").ldexp(halvings + 1)
    if k == 0:
        return ln_m
    ln2 = constant("ln2", wp + abs(k).bit_length())
    return ln_m + ln2 * k


def _expm1(x: MPFloat, wp: int) -> MPFloat:
    if abs(x) < 0.1:
        policy = _series_policy("expm1", wp)
        term = x
        total = x
        for n in policy.steps(start=2):
            term = term * x / n
            total = total + term
            if policy.converged(term, total):
                break
        else:
            policy.exhausted()
        return total
    return _exp(x, wp) - 1


def _log1p(x: MPFloat, wp: int) -> MPFloat:
    if abs(x) < 0.1:
        u = x / (x + 2)
        return _atanh_series(u, wp, "log1p").ldexp(1)
    return _log(x + 1, wp)


def exp(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan():
        return MPFloat.nan(prec)
    if x.is_inf():
        return MPFloat.inf(prec) if x.sign() > 0 else MPFloat.zero(prec)
    return _exp(x, wp).with_prec(prec, rnd)


def log(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan() or x < 0:
        return MPFloat.nan(prec)
    if x.is_zero():
        return MPFloat.inf(prec, -1)
    if x.is_inf():
        return MPFloat.inf(prec)
    return _log(x, wp).with_prec(prec, rnd)


def sqrt(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    rnd = rounding_of(x)
    x = as_working(x, prec)
    if x.is_nan() or x < 0:
        return MPFloat.nan(prec)
    return x.with_rounding(rnd).sqrt()


def expm1(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan():
        return MPFloat.nan(prec)
    if x.is_inf():
        return MPFloat.inf(prec) if x.sign() > 0 else MPFloat(-1, prec)
    if x.is_zero():
        return MPFloat.zero(prec)
    return _expm1(x, wp).with_prec(prec, rnd)


def log1p(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan() or x < -1:
        return MPFloat.nan(prec)
    if x == -1:
        return MPFloat.inf(prec, -1)
    if x.is_inf():
        return MPFloat.inf(prec)
    if x.is_zero():
        return MPFloat.zero(prec)
    return _log1p(x, wp).with_prec(prec, rnd)


def log10(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    lx = log(x, prec_bits=wp)
    if not lx.is_finite():
        return lx.with_prec(prec)
    return (lx / constant("ln10", wp)).with_prec(prec, rounding_of(x))


def logb(x, base, prec_bits: int = 0) -> MPFloat:
    """Logarithm of ``x`` to an arbitrary ``base``; NaN for base <= 0 or base == 1."""
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    b = as_working(base, wp)
    if b.is_nan() or b <= 0 or b == 1:
        return MPFloat.nan(prec)
    lx = log(x, prec_bits=wp)
    lb = log(b, prec_bits=wp)
    if lx.is_nan():
        return MPFloat.nan(prec)
    return (lx / lb).with_prec(prec, rounding_of(x))


def _pow_int(x: MPFloat, n: int, wp: int) -> MPFloat:
    p = wp + abs(n).bit_length() + 4
    base = as_working(x, p)
    result = MPFloat.one(p)
    m = abs(n)
    while m:
        if m & 1:
            result = result * base
        m >>= 1
        if m:
            base = base * base
    if n < 0:
        result = 1 / result
    return result


def pow(x, y, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    y = as_working(y, wp)
    if y.is_zero() or x == 1:
        return MPFloat.one(prec)
    if x.is_nan() or y.is_nan():
        return MPFloat.nan(prec)
    if y == 1:
        return x.with_prec(prec, rnd)
    if y.is_integer() and abs(y) <= _POW_INT_LIMIT:
        return _pow_int(x, int(y), wp).with_prec(prec, rnd)
    if x < 0:
        return MPFloat.nan(prec)
    if y.is_inf():
        grows = (abs(x) > 1) == (y.sign() > 0)
        return MPFloat.inf(prec) if grows else MPFloat.zero(prec)
    if x.is_zero():
        return MPFloat.zero(prec) if y > 0 else MPFloat.inf(prec)
    if x.is_inf():
        return MPFloat.inf(prec) if y > 0 else MPFloat.zero(prec)
    t = y * _log(x, wp)
    if not t.is_zero() and t.mag() > 0:
        p = wp + t.mag()
        t = as_working(y, p) * _log(as_working(x, p), p)
    return _exp(t, wp).with_prec(prec, rnd)


__all__ = [
    "exp",
    "log",
    "sqrt",
    "expm1",
    "log1p",
    "log10",
    "logb",
    "pow",
]
