from __future__ import annotations

import os
from contextlib import contextmanager
from math import ceil, log10

import jax.numpy as jnp

from .checks import check_prec_bits

DEFAULT_PREC_BITS = 256

# Bits carried above the target by the "compute wide, round once" pattern.
GUARD_BITS = 32


def dps_to_bits(dps: int) -> int:
    return int(ceil(dps * log10(10) / log10(2)))


def bits_to_dps(prec_bits: int) -> int:
    return int(ceil(prec_bits * log10(2) / log10(10)))


def _initial_prec_bits() -> int:
    raw = os.getenv("ARBENGINE_PREC_BITS")
    if not raw:
        return DEFAULT_PREC_BITS
    return check_prec_bits(int(raw), "ARBENGINE_PREC_BITS", allow_default=False)


_PREC_BITS = _initial_prec_bits()
_DPS = bits_to_dps(_PREC_BITS)


def set_dps(dps: int) -> None:
    global _DPS, _PREC_BITS
    _DPS = int(dps)
    _PREC_BITS = dps_to_bits(_DPS)


def set_prec_bits(prec_bits: int) -> None:
    global _DPS, _PREC_BITS
    _PREC_BITS = check_prec_bits(prec_bits, "prec_bits", allow_default=False)
    _DPS = bits_to_dps(_PREC_BITS)


def get_dps() -> int:
    return _DPS


def get_prec_bits() -> int:
    return _PREC_BITS


def resolve_prec_bits(prec_bits: int = 0) -> int:
    """Map ``prec_bits=0`` to the configured default, validating anything else."""
    prec_bits = check_prec_bits(prec_bits, "prec_bits")
    return prec_bits or _PREC_BITS


@contextmanager
def workdps(dps: int):
    old = _PREC_BITS
    set_dps(dps)
    try:
        yield
    finally:
        set_prec_bits(old)


@contextmanager
def workprec(prec_bits: int):
    old = _PREC_BITS
    set_prec_bits(prec_bits)
    try:
        yield
    finally:
        set_prec_bits(old)


def eps_from_bits(prec_bits: int | None = None) -> jnp.ndarray:
    bits = _PREC_BITS if prec_bits is None else int(prec_bits)
    return jnp.exp2(-jnp.float64(bits))


__all__ = [
    "DEFAULT_PREC_BITS",
    "GUARD_BITS",
    "dps_to_bits",
    "bits_to_dps",
    "set_dps",
    "set_prec_bits",
    "get_dps",
    "get_prec_bits",
    "resolve_prec_bits",
    "workdps",
    "workprec",
    "eps_from_bits",
]
