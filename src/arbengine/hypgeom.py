from __future__ import annotations

from math import ceil, e as _E, factorial as _int_factorial

from .checks import check_integer
from .constants import constant
from .convergence import ConvergencePolicy
from .elementary import _exp, _log
from .mpfloat import MPFloat, as_working, rounding_of
from .precision import GUARD_BITS, resolve_prec_bits
from .trig import _sin, _sin_cos

_LOG2E = 1.4426950408889634

# Lanczos approximation, g = 7, nine terms.
_LANCZOS_G = 7
_LANCZOS_COEFFS = (
    "0.99999999999980993",
    "676.5203681218851",
    "-1259.1392167224028",
    "771.32342877765313",
    "-176.61502916214059",
    "12.507343278686905",
    "-0.13857109526572012",
    "9.9843695780195716e-6",
    "1.5056327351493116e-7",
)
_GAMMA_EXACT_LIMIT = 3000
# Beyond this many unit steps the Lanczos sum is evaluated at x directly.
_GAMMA_REDUCTION_LIMIT = 100000

_ERF_SERIES_LIMIT = 0.8
_ERF_TAIL_BITS = 15


def _extra_bits(x: MPFloat, scale: float) -> int:
    return int(scale * abs(float(x)) * _LOG2E) + 8


# ---------------------------------------------------------------- gamma


def _sin_pi(x: MPFloat, wp: int) -> MPFloat:
    """sin(pi x) with the period removed exactly before multiplying by pi."""
    n = x.ldexp(-1).nint()
    r = as_working(x, max(wp, x.bit_length()) + 2) - n.ldexp(1)
    if r.is_zero():
        return MPFloat.zero(wp)
    return _sin(constant("pi", wp) * as_working(r, wp), wp)


def _lanczos(z: MPFloat, wp: int) -> MPFloat:
    """Gamma(z) for z >= 0.5 from the Lanczos sum."""
    coeffs = [MPFloat(c, wp) for c in _LANCZOS_COEFFS]
    series = coeffs[0]
    for k in range(1, len(coeffs)):
        series = series + coeffs[k] / (z + (k - 1))
    t = z + (_LANCZOS_G - 0.5)
    root_two_pi = constant("pi", wp).ldexp(1).sqrt()
    power = _exp((z - 0.5) * _log(t, wp) - t, wp)
    return root_two_pi * power * series


def _gamma(x: MPFloat, wp: int) -> MPFloat:
    """Gamma of a finite x that is not a non-positive integer."""
    if x.is_integer() and x <= _GAMMA_EXACT_LIMIT:
        return MPFloat(_int_factorial(int(x) - 1), wp)
    if x < 0.5:
        # reflection recurses at most once: 1 - x > 0.5
        return constant("pi", wp) / (_gamma(1 - x, wp) * _sin_pi(x, wp))
    reduction = int((x - 0.5).floor())
    if reduction > _GAMMA_REDUCTION_LIMIT:
        return _lanczos(x, wp)
    z = x - reduction
    result = _lanczos(z, wp)
    for i in range(reduction):
        result = result * (z + i)
    return result


def gamma(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan():
        return MPFloat.nan(prec)
    if x.is_inf():
        return MPFloat.inf(prec) if x > 0 else MPFloat.nan(prec)
    if x.is_integer() and x <= 0:
        return MPFloat.inf(prec)
    return _gamma(x, wp).with_prec(prec, rnd)


# ---------------------------------------------------------------- erf / erfc


def _erf_series(x: MPFloat, wp: int) -> MPFloat:
    """erf(x) from its Maclaurin series, with precision inflated for cancellation."""
    p = wp + _extra_bits(x * x, 2.0)
    policy = ConvergencePolicy.for_call(
        "erf", p, guard_bits=0, tail_bits=_ERF_TAIL_BITS, iterations_per_bit=2.0, relative=True
    )
    xp = as_working(x, p)
    x2 = xp * xp
    power = xp
    total = xp
    for n in policy.steps():
        power = -power * x2 / n
        term = power / (2 * n + 1)
        total = total + term
        if policy.converged(term, total):
            break
    else:
        policy.exhausted()
    return (total * 2 / constant("pi", p).sqrt()).with_prec(wp)


def _erfc_continued_fraction(x: MPFloat, wp: int) -> MPFloat:
    """erfc(x), x > 0, from the continued fraction of the asymptotic expansion.

    erfc(x) = exp(-x^2) / sqrt(pi) / (x + (1/2) / (x + 1 / (x + (3/2) / (x + ...))))
    evaluated with the modified Lentz algorithm.
    """
    policy = ConvergencePolicy.for_call(
        "erfc", wp, guard_bits=0, tail_bits=_ERF_TAIL_BITS, iterations_per_bit=8.0
    )
    # rounding noise in delta must sit below the stopping threshold
    p = policy.threshold_bits + 8
    x2 = as_working(x, 2 * x.bit_length() + 1) * x
    x = as_working(x, p)
    f = x
    c = x
    d = MPFloat.zero(p)
    for n in policy.steps():
        a = MPFloat(n, p).ldexp(-1)
        d = 1 / (x + a * d)
        c = x + a / c
        delta = c * d
        f = f * delta
        if policy.converged(delta - 1):
            break
    else:
        policy.exhausted()
    return (_exp(-x2, wp) / (f * constant("pi", p).sqrt())).with_prec(wp)


def _use_continued_fraction(a: MPFloat, wp: int) -> bool:
    a2 = float(a) ** 2
    return a2 >= max(4.0, wp / 12.0)


def _erfc_positive(a: MPFloat, wp: int) -> MPFloat:
    """erfc(a) for a > 0.

    Between the Maclaurin limit and the continued-fraction boundary there is no
    asymptotic branch: 1 - erf(a) is taken from the Maclaurin series at a
    precision raised by the a^2 log2(e) bits the subtraction cancels.
    """
    if a < _ERF_SERIES_LIMIT:
        return 1 - _erf_series(a, wp)
    if _use_continued_fraction(a, wp):
        return _erfc_continued_fraction(a, wp)
    # 1 - erf(a) cancels about a^2 log2(e) bits
    p = wp + _extra_bits(a * a, 1.0)
    return (1 - _erf_series(a, p)).with_prec(wp)


def _erf_positive(a: MPFloat, wp: int) -> MPFloat:
    if a < _ERF_SERIES_LIMIT or not _use_continued_fraction(a, wp):
        return _erf_series(a, wp)
    return 1 - _erfc_continued_fraction(a, wp)


def erf(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan() or x.is_zero():
        return x.with_prec(prec)
    if x.is_inf():
        return MPFloat(x.sign(), prec)
    out = _erf_positive(abs(x), wp)
    return (out * x.sign()).with_prec(prec, rnd)


def erfc(x, prec_bits: int = 0) -> MPFloat:
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan():
        return MPFloat.nan(prec)
    if x.is_inf():
        return MPFloat.zero(prec) if x > 0 else MPFloat(2, prec)
    if x.is_zero():
        return MPFloat.one(prec)
    if x < 0:
        # erfc(-a) = 2 - erfc(a) = 1 + erf(a)
        return (1 + _erf_positive(-x, wp)).with_prec(prec, rnd)
    return _erfc_positive(x, wp).with_prec(prec, rnd)


# ---------------------------------------------------------------- Bessel


def _hankel_applies(n: int, x: MPFloat, wp: int) -> bool:
    # terms decrease from the start once x > n^2/2; the smallest term is ~exp(-2x)
    return float(x) > 0.5 * n * n + 0.4 * wp + 10


def _hankel(n: int, x: MPFloat, wp: int) -> tuple[MPFloat, MPFloat]:
    """Return (J_n(x), Y_n(x)) for large positive x from Hankel's expansion."""
    policy = ConvergencePolicy.for_call("bessel_hankel", wp, guard_bits=0, iterations_per_bit=1.0)
    mu = 4 * n * n
    eight_x = x.ldexp(3)
    term = MPFloat.one(wp)
    p_sum = MPFloat.one(wp)
    q_sum = MPFloat.zero(wp)
    for k in policy.steps():
        term = term * (mu - (2 * k - 1) ** 2) / (eight_x * k)
        if k & 1:
            q_sum = q_sum + (term if (k // 2) % 2 == 0 else -term)
        else:
            p_sum = p_sum + (term if (k // 2) % 2 == 0 else -term)
        if policy.converged(term):
            break
    else:
        policy.exhausted()
    # chi = x - (2n+1) pi/4; cos/sin of the (2n+1) pi/4 shift are +-sqrt(2)/2
    s, c = _sin_cos(x, wp)
    half_root2 = constant("sqrt2", wp).ldexp(-1)
    m = (2 * n + 1) % 8
    cos_phi = half_root2 if m in (1, 7) else -half_root2
    sin_phi = half_root2 if m in (1, 3) else -half_root2
    cos_chi = c * cos_phi + s * sin_phi
    sin_chi = s * cos_phi - c * sin_phi
    scale = (2 / (constant("pi", wp) * x)).sqrt()
    j = scale * (p_sum * cos_chi - q_sum * sin_chi)
    y = scale * (p_sum * sin_chi + q_sum * cos_chi)
    return j, y


def _series_cap(x: MPFloat, p: int) -> int:
    # past k = e*x/2 successive terms shrink by more than e^2
    return int(ceil(_E * abs(float(x)) / 2)) + p


def _bessel_j_series(n: int, x: MPFloat, wp: int) -> MPFloat:
    p = wp + _extra_bits(x, 1.0)
    policy = ConvergencePolicy.for_call(
        "bessel_j", p, guard_bits=0, max_iterations=_series_cap(x, p), iterations_per_bit=1.0, relative=True
    )
    h = as_working(x, p).ldexp(-1)
    h2 = h * h
    term = MPFloat.one(p)
    for i in range(1, n + 1):
        term = term * h / i
    total = term
    for k in policy.steps():
        term = -term * h2 / (k * (n + k))
        total = total + term
        if policy.converged(term, total):
            break
    else:
        policy.exhausted()
    return total.with_prec(wp)


def _bessel_j(n: int, x: MPFloat, wp: int) -> MPFloat:
    """J_n(x) for n >= 0 and finite nonzero x."""
    sign = 1
    if x < 0:
        x = -x
        sign = -1 if n & 1 else 1
    if _hankel_applies(n, x, wp):
        out = _hankel(n, x, wp)[0]
    else:
        out = _bessel_j_series(n, x, wp)
    return out if sign > 0 else -out


def _bessel_y01_series(x: MPFloat, wp: int) -> tuple[MPFloat, MPFloat]:
    p = wp + _extra_bits(x, 1.0)
    policy = ConvergencePolicy.for_call(
        "bessel_y", p, guard_bits=0, max_iterations=_series_cap(x, p), iterations_per_bit=1.0
    )
    h = as_working(x, p).ldexp(-1)
    h2 = h * h
    # order 0: t_k = (-h^2)^k / (k!)^2
    t0 = MPFloat.one(p)
    j0 = t0
    s0 = MPFloat.zero(p)
    # order 1: u_k = (-1)^k h^(2k+1) / (k! (k+1)!)
    u1 = h
    j1 = h
    s1 = h
    harmonic = MPFloat.zero(p)
    for k in policy.steps():
        harmonic = harmonic + MPFloat.one(p) / k
        t0 = -t0 * h2 / (k * k)
        u1 = -u1 * h2 / (k * (k + 1))
        j0 = j0 + t0
        s0 = s0 - harmonic * t0
        j1 = j1 + u1
        s1 = s1 + (harmonic.ldexp(1) + MPFloat.one(p) / (k + 1)) * u1
        if policy.converged(harmonic * t0) and policy.converged(harmonic * u1):
            break
    else:
        policy.exhausted()
    pi = constant("pi", p)
    lead = _log(h, p) + constant("euler", p)
    y0 = (lead * j0 + s0).ldexp(1) / pi
    y1 = (lead * j1).ldexp(1) / pi - s1 / pi - 2 / (pi * as_working(x, p))
    return y0.with_prec(wp), y1.with_prec(wp)


def _bessel_y(n: int, x: MPFloat, wp: int) -> MPFloat:
    """Y_n(x) for n >= 0 and finite x > 0."""
    if _hankel_applies(n, x, wp):
        return _hankel(n, x, wp)[1]
    if _hankel_applies(1, x, wp):
        y_prev = _hankel(0, x, wp)[1]
        y_cur = _hankel(1, x, wp)[1]
    else:
        y_prev, y_cur = _bessel_y01_series(x, wp)
    if n == 0:
        return y_prev
    # upward recurrence is stable for Y: Y_{k+1} = (2k/x) Y_k - Y_{k-1}
    for k in range(1, n):
        y_prev, y_cur = y_cur, y_cur * (2 * k) / x - y_prev
    return y_cur


def bessel_j(n, x, prec_bits: int = 0) -> MPFloat:
    """Bessel function of the first kind of integer order ``n``."""
    n = check_integer(n, "bessel_j order")
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan():
        return MPFloat.nan(prec)
    if x.is_inf():
        return MPFloat.zero(prec)
    if x.is_zero():
        return MPFloat.one(prec) if n == 0 else MPFloat.zero(prec)
    out = _bessel_j(abs(n), x, wp)
    if n < 0 and n & 1:
        out = -out
    return out.with_prec(prec, rnd)


def bessel_y(n, x, prec_bits: int = 0) -> MPFloat:
    """Bessel function of the second kind of integer order ``n``; NaN for x <= 0."""
    n = check_integer(n, "bessel_y order")
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    rnd = rounding_of(x)
    x = as_working(x, wp)
    if x.is_nan() or x <= 0:
        return MPFloat.nan(prec)
    if x.is_inf():
        return MPFloat.zero(prec)
    out = _bessel_y(abs(n), x, wp)
    if n < 0 and n & 1:
        out = -out
    return out.with_prec(prec, rnd)


__all__ = ["gamma", "erf", "erfc", "bessel_j", "bessel_y"]
