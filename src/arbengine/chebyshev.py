from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Sequence

import jax
import jax.numpy as jnp
import numpy as np

from . import runtime
from .checks import check_in_set, check_multiple_of, check_n_used, _debug_check
from .mpfloat import MPFloat, as_working, rounding_of
from .precision import GUARD_BITS, resolve_prec_bits

jax.config.update("jax_enable_x64", True)

# Fraction bits kept below the working precision in the fixed-point kernel.
_FIXED_SLACK_BITS = 8


class StateVector(NamedTuple):
    x: MPFloat
    y: MPFloat
    z: MPFloat
    vx: MPFloat
    vy: MPFloat
    vz: MPFloat


@dataclass(frozen=True)
class ChebyshevSegment:
    """Coefficient blocks for X, Y and Z, stored one after another, over [start, end]."""

    coeffs: tuple
    start: MPFloat
    end: MPFloat
    n_used: int = 0

    def __post_init__(self):
        object.__setattr__(self, "coeffs", tuple(self.coeffs))
        check_multiple_of(self.coeffs, 3, "ChebyshevSegment.coeffs")
        _debug_check(self.start != self.end, "ChebyshevSegment: degenerate window [{}, {}]", self.start, self.end)
        check_n_used(self.n_used, self.block_size, "ChebyshevSegment.n_used")

    @classmethod
    def from_floats(cls, coeffs, start, end, n_used: int = 0, prec_bits: int = 0) -> "ChebyshevSegment":
        prec = resolve_prec_bits(prec_bits)
        return cls(coeffs_from_floats(coeffs, prec), MPFloat(start, prec), MPFloat(end, prec), n_used)

    @property
    def block_size(self) -> int:
        return len(self.coeffs) // 3

    def blocks(self) -> tuple[tuple, tuple, tuple]:
        n = self.block_size
        return self.coeffs[:n], self.coeffs[n : 2 * n], self.coeffs[2 * n :]


def coeffs_from_floats(values, prec_bits: int = 0) -> tuple[MPFloat, ...]:
    prec = resolve_prec_bits(prec_bits)
    arr = np.asarray(values, dtype=np.float64).ravel()
    return tuple(MPFloat(float(v), prec) for v in arr)


# ---------------------------------------------------------------- reference kernels


def _clenshaw_reference(t: MPFloat, coeffs: Sequence, n: int, wp: int) -> MPFloat:
    two_t = as_working(t, wp).ldexp(1)
    b0 = MPFloat.zero(wp)
    b1 = MPFloat.zero(wp)
    b2 = MPFloat.zero(wp)
    for i in range(n - 1, -1, -1):
        b2 = b1
        b1 = b0
        b0 = two_t * b1 - b2 + as_working(coeffs[i], wp)
    return (b0 - b2).ldexp(-1) + as_working(coeffs[0], wp).ldexp(-1)


def _clenshaw_derivative_reference(t: MPFloat, coeffs: Sequence, n: int, wp: int) -> MPFloat:
    two_t = as_working(t, wp).ldexp(1)
    b0 = MPFloat.zero(wp)
    b1 = MPFloat.zero(wp)
    for i in range(n - 1, 0, -1):
        b2 = b1
        b1 = b0
        b0 = two_t * b1 - b2 + as_working(coeffs[i], wp) * i
    return b0


# ---------------------------------------------------------------- fixed-point kernels


def _fixed_scales(coeffs: Sequence, n: int, wp: int) -> tuple[int, int] | None:
    """Fraction bits for the coefficients and for t, or None when all coefficients vanish."""
    mags = [c.mag() for c in coeffs[:n] if not c.is_zero()]
    if not mags:
        return None
    growth = 2 * n.bit_length() + _FIXED_SLACK_BITS
    return wp - max(mags) + growth, wp + growth


def _clenshaw_fixed(t: MPFloat, coeffs: Sequence, n: int, wp: int) -> MPFloat:
    scales = _fixed_scales(coeffs, n, wp)
    if scales is None:
        return MPFloat.zero(wp)
    frac, tfrac = scales
    tf = t.to_fixed(tfrac)
    b0 = b1 = b2 = 0
    for i in range(n - 1, -1, -1):
        b2 = b1
        b1 = b0
        b0 = ((tf * b1) >> (tfrac - 1)) - b2 + coeffs[i].to_fixed(frac)
    return MPFloat.from_man_exp(b0 - b2 + coeffs[0].to_fixed(frac), -frac - 1, wp)


def _clenshaw_derivative_fixed(t: MPFloat, coeffs: Sequence, n: int, wp: int) -> MPFloat:
    scales = _fixed_scales(coeffs, n, wp)
    if scales is None:
        return MPFloat.zero(wp)
    frac, tfrac = scales
    tf = t.to_fixed(tfrac)
    b0 = b1 = 0
    for i in range(n - 1, 0, -1):
        b2 = b1
        b1 = b0
        b0 = ((tf * b1) >> (tfrac - 1)) - b2 + coeffs[i].to_fixed(frac) * i
    return MPFloat.from_man_exp(b0, -frac, wp)


_KERNELS = {
    "reference": (_clenshaw_reference, _clenshaw_derivative_reference),
    "fixed": (_clenshaw_fixed, _clenshaw_derivative_fixed),
}


def _kernel(strategy: str | None, derivative: bool):
    name = runtime.strategy() if strategy is None else strategy
    check_in_set(name, runtime.STRATEGIES, "strategy")
    return _KERNELS[name][1 if derivative else 0]


def _evaluate(t: MPFloat, coeffs: Sequence, n: int, wp: int, strategy: str | None, derivative: bool) -> MPFloat:
    if n == 0:
        return MPFloat.zero(wp)
    if t.is_nan():
        return MPFloat.nan(wp)
    coeffs = [as_working(c, wp) for c in coeffs[:n]]
    if not t.is_finite() or not all(c.is_finite() for c in coeffs):
        # inf and nan only flow through the MPFloat recurrence
        strategy = "reference"
    return _kernel(strategy, derivative)(t, coeffs, n, wp)


def chebyshev_eval(t, coeffs: Sequence, n_used: int = 0, prec_bits: int = 0, strategy: str | None = None) -> MPFloat:
    """Sum of coeffs[i] * T_i(t) over the first ``n_used`` coefficients (Clenshaw).

    ``n_used=0`` uses every coefficient. ``strategy`` overrides the process-wide
    kernel choice from :mod:`arbengine.runtime`.
    """
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    n = check_n_used(n_used, len(coeffs), "chebyshev_eval")
    out = _evaluate(as_working(t, wp), coeffs, n, wp, strategy, derivative=False)
    return out.with_prec(prec, rounding_of(t))


def chebyshev_eval_derivative(
    t, coeffs: Sequence, n_used: int = 0, prec_bits: int = 0, strategy: str | None = None
) -> MPFloat:
    """d/dt of the Chebyshev sum, as the U-series sum of i * coeffs[i] * U_{i-1}(t)."""
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    n = check_n_used(n_used, len(coeffs), "chebyshev_eval_derivative")
    out = _evaluate(as_working(t, wp), coeffs, n, wp, strategy, derivative=True)
    return out.with_prec(prec, rounding_of(t))


def evaluate_segment(tjd, segment: ChebyshevSegment, prec_bits: int = 0, strategy: str | None = None) -> StateVector:
    """Position and velocity at ``tjd`` from one ephemeris segment.

    Time is mapped to t = 2 (tjd - start) / (end - start) - 1; velocities are
    the t-derivatives scaled by 2 / (end - start).
    """
    prec = resolve_prec_bits(prec_bits)
    wp = prec + GUARD_BITS
    n = check_n_used(segment.n_used, segment.block_size, "evaluate_segment")
    size = as_working(segment.end, wp) - segment.start
    t = (as_working(tjd, wp) - segment.start).ldexp(1) / size - 1
    scale = MPFloat(2, wp) / size
    pos = []
    vel = []
    for block in segment.blocks():
        pos.append(_evaluate(t, block, n, wp, strategy, derivative=False).with_prec(prec))
        vel.append((_evaluate(t, block, n, wp, strategy, derivative=True) * scale).with_prec(prec))
    return StateVector(*pos, *vel)


# ---------------------------------------------------------------- float64 batch kernels


def chebyshev_eval_batch(t: jax.Array, coeffs: jax.Array, n_used: int = 0) -> jax.Array:
    """float64 Clenshaw over many t; ``coeffs`` is (n,) or (..., n), broadcast against ``t``."""
    t = jnp.asarray(t, dtype=jnp.float64)
    c = jnp.asarray(coeffs, dtype=jnp.float64)
    if n_used:
        c = c[..., :n_used]
    two_t = 2.0 * t
    zeros = jnp.zeros(jnp.broadcast_shapes(t.shape, c.shape[:-1]), dtype=jnp.float64)

    def body(carry, ci):
        b1, b2 = carry
        return (two_t * b1 - b2 + ci, b1), None

    (b0, b1), _ = jax.lax.scan(body, (zeros, zeros), jnp.moveaxis(c, -1, 0)[::-1])
    # b0 - t b1 equals (b0 - b2)/2 + c0/2 once c0 has entered the recurrence
    return b0 - t * b1


def chebyshev_eval_derivative_batch(t: jax.Array, coeffs: jax.Array, n_used: int = 0) -> jax.Array:
    t = jnp.asarray(t, dtype=jnp.float64)
    c = jnp.asarray(coeffs, dtype=jnp.float64)
    if n_used:
        c = c[..., :n_used]
    n = c.shape[-1]
    two_t = 2.0 * t
    zeros = jnp.zeros(jnp.broadcast_shapes(t.shape, c.shape[:-1]), dtype=jnp.float64)
    if n < 2:
        return zeros

    def body(carry, xs):
        i, ci = xs
        b1, b2 = carry
        return (two_t * b1 - b2 + i * ci, b1), None

    idx = jnp.arange(n - 1, 0, -1, dtype=jnp.float64)
    rev = jnp.moveaxis(c, -1, 0)[:0:-1]
    (b0, _), _ = jax.lax.scan(body, (zeros, zeros), (idx, rev))
    return b0


def segment_eval_batch(
    tjd: jax.Array, coeffs: jax.Array, start: float, end: float, n_used: int = 0
) -> jax.Array:
    """(..., 6) float64 states [x, y, z, vx, vy, vz] for an array of epochs."""
    tjd = jnp.asarray(tjd, dtype=jnp.float64)
    c = jnp.asarray(coeffs, dtype=jnp.float64)
    c3 = c.reshape(c.shape[:-1] + (3, c.shape[-1] // 3))
    size = end - start
    t = (2.0 * (tjd - start) / size - 1.0)[..., None]
    pos = chebyshev_eval_batch(t, c3, n_used)
    vel = chebyshev_eval_derivative_batch(t, c3, n_used) * (2.0 / size)
    return jnp.concatenate([pos, vel], axis=-1)


chebyshev_eval_batch_jit = jax.jit(chebyshev_eval_batch, static_argnames=("n_used",))
chebyshev_eval_derivative_batch_jit = jax.jit(chebyshev_eval_derivative_batch, static_argnames=("n_used",))
segment_eval_batch_jit = jax.jit(segment_eval_batch, static_argnames=("n_used",))


__all__ = [
    "StateVector",
    "ChebyshevSegment",
    "coeffs_from_floats",
    "chebyshev_eval",
    "chebyshev_eval_derivative",
    "evaluate_segment",
    "chebyshev_eval_batch",
    "chebyshev_eval_derivative_batch",
    "segment_eval_batch",
    "chebyshev_eval_batch_jit",
    "chebyshev_eval_derivative_batch_jit",
    "segment_eval_batch_jit",
]
