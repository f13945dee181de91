from __future__ import annotations

from collections.abc import Sequence


def _debug_check(cond, msg: str, *args) -> None:
    if not bool(cond):
        raise ValueError(msg.format(*args))


def check_prec_bits(prec_bits: int, label: str, allow_default: bool = True) -> int:
    _debug_check(
        isinstance(prec_bits, int) and not isinstance(prec_bits, bool),
        "{}: expected an integer bit count, got {!r}",
        label,
        prec_bits,
    )
    lower = 0 if allow_default else 1
    _debug_check(prec_bits >= lower, "{}: expected >= {}, got {}", label, lower, prec_bits)
    return prec_bits


def check_integer(value, label: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    ok = hasattr(value, "is_integer") and value.is_integer()
    _debug_check(ok, "{}: expected an integer, got {!r}", label, value)
    return int(value)


def check_in_set(val: str, allowed: tuple[str, ...], label: str) -> None:
    _debug_check(val in allowed, "{}: expected one of {}, got {!r}", label, allowed, val)


def check_n_used(n_used: int, available: int, label: str) -> int:
    if n_used is None or n_used == 0:
        return available
    _debug_check(0 < n_used <= available, "{}: expected 0 < n_used <= {}, got {}", label, available, n_used)
    return int(n_used)


def check_multiple_of(seq: Sequence, k: int, label: str) -> None:
    _debug_check(len(seq) > 0 and len(seq) % k == 0, "{}: expected a non-empty length divisible by {}, got {}", label, k, len(seq))


__all__ = [
    "check_prec_bits",
    "check_integer",
    "check_in_set",
    "check_n_used",
    "check_multiple_of",
]
