from __future__ import annotations

import logging
import threading
from math import ceil, log as _flog
from typing import Callable

from . import precision
from .checks import check_in_set
from .convergence import ConvergencePolicy
from .mpfloat import MPFloat

log = logging.getLogger(__name__)

_CACHE: dict[tuple[str, int], MPFloat] = {}
_KEY_LOCKS: dict[tuple[str, int], threading.Lock] = {}
_KEY_LOCKS_GUARD = threading.Lock()

# Chudnovsky series: each term adds about 47.11 bits.
_CHUD_A = 13591409
_CHUD_B = 545140134
_CHUD_C3_OVER_24 = 10939058860032000
_CHUD_SCALE = 426880
_CHUD_SQRT_ARG = 10005
_CHUD_BITS_PER_TERM = 47


def _binary_split(a: int, b: int) -> tuple[int, int, int]:
    if b - a == 1:
        if a == 0:
            return 1, 1, _CHUD_A
        p = (6 * a - 5) * (2 * a - 1) * (6 * a - 1)
        q = a * a * a * _CHUD_C3_OVER_24
        t = p * (_CHUD_A + _CHUD_B * a)
        if a & 1:
            t = -t
        return p, q, t
    m = (a + b) // 2
    p1, q1, t1 = _binary_split(a, m)
    p2, q2, t2 = _binary_split(m, b)
    return p1 * p2, q1 * q2, q2 * t1 + p1 * t2


def _compute_pi(wp: int) -> MPFloat:
    terms = wp // _CHUD_BITS_PER_TERM + 2
    _, q, t = _binary_split(0, terms)
    root = MPFloat(_CHUD_SQRT_ARG, wp).sqrt()
    return MPFloat(q * _CHUD_SCALE, wp) * root / MPFloat(t, wp)


def _compute_e(wp: int) -> MPFloat:
    policy = ConvergencePolicy.for_call("const_e", wp, guard_bits=0, iterations_per_bit=1.0)
    term = MPFloat.one(wp)
    total = MPFloat(2, wp)
    for k in policy.steps(start=2):
        term = term / k
        total = total + term
        if policy.converged(term):
            break
    else:
        policy.exhausted()
    return total


def _compute_ln2(wp: int) -> MPFloat:
    # ln 2 = 2 atanh(1/3)
    policy = ConvergencePolicy.for_call("const_ln2", wp, guard_bits=0, iterations_per_bit=0.5)
    power = MPFloat(1, wp) / 3
    total = power
    for n in policy.steps():
        power = power / 9
        term = power / (2 * n + 1)
        total = total + term
        if policy.converged(term):
            break
    else:
        policy.exhausted()
    return total.ldexp(1)


def _compute_ln10(wp: int) -> MPFloat:
    from .elementary import log

    return log(MPFloat(10, wp), prec_bits=wp)


def _compute_euler(wp: int) -> MPFloat:
    """Euler-Mascheroni constant by the Brent-McMillan algorithm.

    With ``B_k = (n^k/k!)^2`` and ``A_k = B_k (H_k - ln n)``, gamma is
    ``sum(A_k) / sum(B_k)`` up to an error below ``pi * exp(-4n)``.
    """
    from .elementary import log

    n = int(ceil(wp * _flog(2) / 4)) + 1
    policy = ConvergencePolicy.for_call(
        "const_euler", wp, guard_bits=16, iterations_per_bit=2.0, relative=True
    )
    p = policy.working_prec
    n2 = n * n
    a = -log(MPFloat(n, p), prec_bits=p)
    b = MPFloat.one(p)
    u = a
    v = b
    for k in policy.steps():
        b = b * n2 / (k * k)
        a = (a * n2 / k + b) / k
        u = u + a
        v = v + b
        if k > n and policy.converged(b, v) and policy.converged(a, v):
            break
    else:
        policy.exhausted()
    return u / v


def _compute_catalan(wp: int) -> MPFloat:
    """Catalan's constant from Ramanujan's accelerated series.

    G = pi/8 * ln(2 + sqrt 3) + 3/8 * sum_k 1 / ((2k+1)^2 binomial(2k, k))
    """
    from .elementary import log

    policy = ConvergencePolicy.for_call("const_catalan", wp, guard_bits=8, iterations_per_bit=1.0)
    p = policy.working_prec
    ratio = MPFloat.one(p)
    total = MPFloat.one(p)
    for k in policy.steps():
        ratio = ratio * k / (2 * (2 * k - 1))
        term = ratio / ((2 * k + 1) * (2 * k + 1))
        total = total + term
        if policy.converged(term):
            break
    else:
        policy.exhausted()
    head = constant("pi", p).ldexp(-3) * log(2 + constant("sqrt3", p), prec_bits=p)
    return head + total * 3 / 8


def _compute_sqrt2(wp: int) -> MPFloat:
    return MPFloat(2, wp).sqrt()


def _compute_sqrt3(wp: int) -> MPFloat:
    return MPFloat(3, wp).sqrt()


def _compute_phi(wp: int) -> MPFloat:
    return (MPFloat(5, wp).sqrt() + 1).ldexp(-1)


_COMPUTE: dict[str, Callable[[int], MPFloat]] = {
    "pi": _compute_pi,
    "e": _compute_e,
    "ln2": _compute_ln2,
    "ln10": _compute_ln10,
    "euler": _compute_euler,
    "catalan": _compute_catalan,
    "sqrt2": _compute_sqrt2,
    "sqrt3": _compute_sqrt3,
    "phi": _compute_phi,
}

CONSTANT_NAMES = tuple(_COMPUTE)


def _key_lock(key: tuple[str, int]) -> threading.Lock:
    with _KEY_LOCKS_GUARD:
        lock = _KEY_LOCKS.get(key)
        if lock is None:
            lock = _KEY_LOCKS[key] = threading.Lock()
        return lock


def constant(name: str, prec_bits: int = 0) -> MPFloat:
    """Return the named constant rounded to ``prec_bits`` bits.

    Each (name, prec_bits) pair is computed exactly once per process and the
    same object is returned on every later lookup. Population of one key holds
    only that key's lock, so other names and precisions are never blocked.
    """
    check_in_set(name, CONSTANT_NAMES, "constant")
    prec = precision.resolve_prec_bits(prec_bits)
    key = (name, prec)
    value = _CACHE.get(key)
    if value is not None:
        return value
    with _key_lock(key):
        value = _CACHE.get(key)
        if value is None:
            log.debug("computing constant %s at %d bits", name, prec)
            value = _COMPUTE[name](prec + precision.GUARD_BITS).with_prec(prec)
            _CACHE[key] = value
    return value


def cached_keys() -> list[tuple[str, int]]:
    return sorted(_CACHE)


def clear_cache() -> None:
    with _KEY_LOCKS_GUARD:
        _CACHE.clear()
        _KEY_LOCKS.clear()


def pi(prec_bits: int = 0) -> MPFloat:
    return constant("pi", prec_bits)


def e(prec_bits: int = 0) -> MPFloat:
    return constant("e", prec_bits)


def ln2(prec_bits: int = 0) -> MPFloat:
    return constant("ln2", prec_bits)


def ln10(prec_bits: int = 0) -> MPFloat:
    return constant("ln10", prec_bits)


def euler(prec_bits: int = 0) -> MPFloat:
    return constant("euler", prec_bits)


def catalan(prec_bits: int = 0) -> MPFloat:
    return constant("catalan", prec_bits)


def sqrt2(prec_bits: int = 0) -> MPFloat:
    return constant("sqrt2", prec_bits)


def sqrt3(prec_bits: int = 0) -> MPFloat:
    return constant("sqrt3", prec_bits)


def phi(prec_bits: int = 0) -> MPFloat:
    return constant("phi", prec_bits)


__all__ = [
    "CONSTANT_NAMES",
    "constant",
    "cached_keys",
    "clear_cache",
    "pi",
    "e",
    "ln2",
    "ln10",
    "euler",
    "catalan",
    "sqrt2",
    "sqrt3",
    "phi",
]
