from __future__ import annotations

from .constants import constant
from .mpfloat import MPFloat, as_working, rounding_of
from .precision import GUARD_BITS, resolve_prec_bits


def _prepare(x, prec_bits: int):
    prec = resolve_prec_bits(prec_bits)
    x = as_working(x, prec)
    # enough bits that subtracting a multiple of the period is exact
    p = max(prec, x.bit_length()) + GUARD_BITS
    if x.is_finite() and not x.is_zero():
        p += max(0, x.mag())
    return as_working(x, p), prec, p


def _fold_floor(x: MPFloat, period: MPFloat) -> MPFloat:
    """x - period * floor(x / period), corrected once into [0, period)."""
    r = x - period * (x / period).floor()
    if r < 0:
        r = r + period
    elif r >= period:
        r = r - period
    return r


def deg_norm(x, prec_bits: int = 0) -> MPFloat:
    """Angle in degrees mapped to [0, 360)."""
    rnd = rounding_of(x)
    x, prec, p = _prepare(x, prec_bits)
    if not x.is_finite():
        return MPFloat.nan(prec)
    if 0 <= x < 360:
        return x.with_prec(prec, rnd)
    r = _fold_floor(x, MPFloat(360, p)).with_prec(prec, rnd)
    return MPFloat.zero(prec) if r >= 360 else r


def rad_norm(x, prec_bits: int = 0) -> MPFloat:
    """Angle in radians mapped to [-pi, pi], by the nearest multiple of 2 pi."""
    rnd = rounding_of(x)
    x, prec, p = _prepare(x, prec_bits)
    if not x.is_finite():
        return MPFloat.nan(prec)
    pi = constant("pi", p)
    # results are rounded, so accept up to pi rounded up at the target precision
    pi_up = pi.with_prec(prec, "c")
    if -pi_up <= x <= pi_up:
        return x.with_prec(prec, rnd)
    two_pi = pi.ldexp(1)
    r = x - two_pi * (x / two_pi).nint()
    if r > pi:
        r = r - two_pi
    elif r < -pi:
        r = r + two_pi
    return r.with_prec(prec, rnd)


def rad_norm_02pi(x, prec_bits: int = 0) -> MPFloat:
    """Angle in radians mapped to [0, 2 pi)."""
    rnd = rounding_of(x)
    x, prec, p = _prepare(x, prec_bits)
    if not x.is_finite():
        return MPFloat.nan(prec)
    two_pi = constant("pi", p).ldexp(1)
    if 0 <= x < two_pi:
        return x.with_prec(prec, rnd)
    r = _fold_floor(x, two_pi).with_prec(prec, rnd)
    return MPFloat.zero(prec) if r >= two_pi else r


__all__ = ["deg_norm", "rad_norm", "rad_norm_02pi"]
