from __future__ import annotations

from mpmath.libmp import (
    ComplexResult,
    finf,
    fnan,
    fninf,
    fone,
    fzero,
    from_float,
    from_int,
    from_man_exp,
    from_str,
    mpf_abs,
    mpf_add,
    mpf_ceil,
    mpf_cmp,
    mpf_div,
    mpf_eq,
    mpf_floor,
    mpf_hash,
    mpf_mul,
    mpf_neg,
    mpf_nint,
    mpf_pos,
    mpf_shift,
    mpf_sqrt,
    mpf_sub,
    prec_to_dps,
    round_ceiling,
    round_down,
    round_floor,
    round_nearest,
    round_up,
    to_float,
    to_fixed,
    to_int,
    to_str,
)

ROUNDING_MODES = (round_nearest, round_down, round_up, round_floor, round_ceiling)


def _check_rnd(rnd: str) -> str:
    if rnd not in ROUNDING_MODES:
        raise ValueError(f"rounding mode: expected one of {ROUNDING_MODES}, got {rnd!r}")
    return rnd


def _raw(value, prec: int, rnd: str):
    if isinstance(value, MPFloat):
        return value._mpf_
    if isinstance(value, bool):
        return from_int(int(value))
    if isinstance(value, int):
        return from_int(value)
    if isinstance(value, float):
        return from_float(value)
    if isinstance(value, str):
        return from_str(value, prec, rnd)
    if hasattr(value, "_mpf_"):
        return value._mpf_
    if isinstance(value, tuple) and len(value) == 4:
        return value
    raise TypeError(f"cannot create MPFloat from {type(value).__name__}")


class MPFloat:
    """Immutable binary floating-point value with an explicit precision.

    The value is a raw ``mpmath.libmp`` tuple ``(sign, man, exp, bc)``; every
    arithmetic result is rounded to ``max(self.prec, other.prec)`` bits using
    the left operand's rounding mode. Python ints take part exactly. Unlike the
    ``mpmath.mp`` context nothing here is global, so values computed at
    different precisions can be mixed freely across threads.
    """

    __slots__ = ("_mpf_", "prec", "rnd")

    def __init__(self, value=0, prec: int = 53, rnd: str = round_nearest):
        prec = int(prec)
        if prec < 1:
            raise ValueError(f"prec: expected a positive bit count, got {prec}")
        _check_rnd(rnd)
        raw = _raw(value, prec, rnd)
        object.__setattr__(self, "_mpf_", mpf_pos(raw, prec, rnd))
        object.__setattr__(self, "prec", prec)
        object.__setattr__(self, "rnd", rnd)

    @classmethod
    def _make(cls, raw, prec: int, rnd: str = round_nearest) -> "MPFloat":
        out = object.__new__(cls)
        object.__setattr__(out, "_mpf_", raw)
        object.__setattr__(out, "prec", prec)
        object.__setattr__(out, "rnd", rnd)
        return out

    @classmethod
    def from_man_exp(cls, man: int, exp: int, prec: int, rnd: str = round_nearest) -> "MPFloat":
        return cls._make(from_man_exp(man, exp, prec, rnd), prec, rnd)

    @classmethod
    def nan(cls, prec: int) -> "MPFloat":
        return cls._make(fnan, prec)

    @classmethod
    def inf(cls, prec: int, sign: int = 1) -> "MPFloat":
        return cls._make(finf if sign >= 0 else fninf, prec)

    @classmethod
    def zero(cls, prec: int) -> "MPFloat":
        return cls._make(fzero, prec)

    @classmethod
    def one(cls, prec: int) -> "MPFloat":
        return cls._make(fone, prec)

    def __setattr__(self, name, value):
        raise AttributeError("MPFloat is immutable")

    def __reduce__(self):
        return (MPFloat._make, (self._mpf_, self.prec, self.rnd))

    # precision-aware copies

    def with_prec(self, prec: int, rnd: str | None = None) -> "MPFloat":
        rnd = self.rnd if rnd is None else _check_rnd(rnd)
        return MPFloat._make(mpf_pos(self._mpf_, prec, rnd), prec, rnd)

    def with_rounding(self, rnd: str) -> "MPFloat":
        return MPFloat._make(self._mpf_, self.prec, _check_rnd(rnd))

    # predicates

    def is_zero(self) -> bool:
        return self._mpf_ == fzero

    def is_nan(self) -> bool:
        return self._mpf_ == fnan

    def is_inf(self) -> bool:
        return self._mpf_ in (finf, fninf)

    def is_finite(self) -> bool:
        return bool(self._mpf_[1]) or self._mpf_ == fzero

    def is_integer(self) -> bool:
        sign, man, exp, bc = self._mpf_
        if not man:
            return self._mpf_ == fzero
        return exp >= 0

    def sign(self) -> int:
        if self.is_nan():
            raise ValueError("sign of nan is undefined")
        if self.is_zero():
            return 0
        return -1 if self._mpf_[0] else 1

    # exact structure access

    def man_exp(self) -> tuple[int, int]:
        sign, man, exp, bc = self._mpf_
        if not man and exp:
            raise ValueError("significand and exponent are undefined for inf/nan")
        return (-int(man) if sign else int(man)), int(exp)

    def mag(self) -> int:
        """Return e with |x| < 2**e <= 2|x| (undefined for zero, inf and nan)."""
        sign, man, exp, bc = self._mpf_
        if not man:
            raise ValueError("magnitude is undefined for zero, inf and nan")
        return int(exp + bc)

    def bit_length(self) -> int:
        """Number of significant bits actually stored (not the precision)."""
        return int(self._mpf_[3])

    def to_fixed(self, frac_bits: int) -> int:
        """Integer nearest below x * 2**frac_bits (finite x only)."""
        if not self.is_finite():
            raise ValueError("fixed-point form is undefined for inf/nan")
        return to_fixed(self._mpf_, int(frac_bits))

    def ldexp(self, k: int) -> "MPFloat":
        return MPFloat._make(mpf_shift(self._mpf_, int(k)), self.prec, self.rnd)

    def frexp(self) -> tuple["MPFloat", int]:
        if not self.is_finite():
            raise ValueError("frexp is undefined for inf/nan")
        if self.is_zero():
            return self, 0
        e = self.mag()
        return self.ldexp(-e), e

    # rounding to integers

    def floor(self) -> "MPFloat":
        return MPFloat._make(mpf_floor(self._mpf_), self.prec, self.rnd)

    def ceil(self) -> "MPFloat":
        return MPFloat._make(mpf_ceil(self._mpf_), self.prec, self.rnd)

    def trunc(self) -> "MPFloat":
        return self.ceil() if self._mpf_[0] else self.floor()

    def nint(self) -> "MPFloat":
        return MPFloat._make(mpf_nint(self._mpf_), self.prec, self.rnd)

    # arithmetic

    def _coerce(self, other):
        if isinstance(other, MPFloat):
            return other._mpf_, other.prec
        if isinstance(other, int):
            return from_int(other), 0
        if isinstance(other, float):
            return from_float(other), 53
        return NotImplemented, 0

    def __neg__(self) -> "MPFloat":
        return MPFloat._make(mpf_neg(self._mpf_), self.prec, self.rnd)

    def __pos__(self) -> "MPFloat":
        return self

    def __abs__(self) -> "MPFloat":
        return MPFloat._make(mpf_abs(self._mpf_), self.prec, self.rnd)

    def __add__(self, other):
        raw, p = self._coerce(other)
        if raw is NotImplemented:
            return NotImplemented
        prec = max(self.prec, p)
        return MPFloat._make(mpf_add(self._mpf_, raw, prec, self.rnd), prec, self.rnd)

    __radd__ = __add__

    def __sub__(self, other):
        raw, p = self._coerce(other)
        if raw is NotImplemented:
            return NotImplemented
        prec = max(self.prec, p)
        return MPFloat._make(mpf_sub(self._mpf_, raw, prec, self.rnd), prec, self.rnd)

    def __rsub__(self, other):
        raw, p = self._coerce(other)
        if raw is NotImplemented:
            return NotImplemented
        prec = max(self.prec, p)
        return MPFloat._make(mpf_sub(raw, self._mpf_, prec, self.rnd), prec, self.rnd)

    def __mul__(self, other):
        raw, p = self._coerce(other)
        if raw is NotImplemented:
            return NotImplemented
        prec = max(self.prec, p)
        return MPFloat._make(mpf_mul(self._mpf_, raw, prec, self.rnd), prec, self.rnd)

    __rmul__ = __mul__

    def __truediv__(self, other):
        raw, p = self._coerce(other)
        if raw is NotImplemented:
            return NotImplemented
        prec = max(self.prec, p)
        return MPFloat._make(_div(self._mpf_, raw, prec, self.rnd), prec, self.rnd)

    def __rtruediv__(self, other):
        raw, p = self._coerce(other)
        if raw is NotImplemented:
            return NotImplemented
        prec = max(self.prec, p)
        return MPFloat._make(_div(raw, self._mpf_, prec, self.rnd), prec, self.rnd)

    def sqrt(self) -> "MPFloat":
        if self.is_nan():
            return self
        try:
            raw = mpf_sqrt(self._mpf_, self.prec, self.rnd)
        except ComplexResult:
            raw = fnan
        return MPFloat._make(raw, self.prec, self.rnd)

    def square(self) -> "MPFloat":
        return self * self

    # comparison

    def _cmp(self, other):
        raw, _ = self._coerce(other)
        if raw is NotImplemented:
            return NotImplemented
        if self._mpf_ == fnan or raw == fnan:
            return None
        return mpf_cmp(self._mpf_, raw)

    def __eq__(self, other):
        raw, _ = self._coerce(other)
        if raw is NotImplemented:
            return NotImplemented
        return mpf_eq(self._mpf_, raw)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other):
        c = self._cmp(other)
        if c is NotImplemented:
            return c
        return c is not None and c < 0

    def __le__(self, other):
        c = self._cmp(other)
        if c is NotImplemented:
            return c
        return c is not None and c <= 0

    def __gt__(self, other):
        c = self._cmp(other)
        if c is NotImplemented:
            return c
        return c is not None and c > 0

    def __ge__(self, other):
        c = self._cmp(other)
        if c is NotImplemented:
            return c
        return c is not None and c >= 0

    def __hash__(self):
        return mpf_hash(self._mpf_)

    # conversion

    def __float__(self) -> float:
        return to_float(self._mpf_, rnd=round_nearest)

    def __int__(self) -> int:
        return int(to_int(self._mpf_))

    def __bool__(self) -> bool:
        return self._mpf_ != fzero

    def to_mpmath(self):
        import mpmath

        return mpmath.mpf(self._mpf_, prec=max(self.prec, self.bit_length()))

    def __str__(self) -> str:
        return to_str(self._mpf_, prec_to_dps(self.prec))

    def __repr__(self) -> str:
        return f"MPFloat('{self}', prec={self.prec})"


def _div(s, t, prec: int, rnd: str):
    if t == fzero:
        if s == fzero or s == fnan:
            return fnan
        return finf if not s[0] else fninf
    return mpf_div(s, t, prec, rnd)


def mpfloat(value, prec: int = 53, rnd: str = round_nearest) -> MPFloat:
    if isinstance(value, MPFloat) and value.prec == prec and value.rnd == rnd:
        return value
    return MPFloat(value, prec, rnd)


def as_working(value, prec: int) -> MPFloat:
    """Return ``value`` with arithmetic rounding to ``prec`` bits, without rounding the value itself."""
    if isinstance(value, MPFloat):
        return MPFloat._make(value._mpf_, prec)
    return MPFloat._make(_raw(value, prec, round_nearest), prec)


def rounding_of(value) -> str:
    return value.rnd if isinstance(value, MPFloat) else round_nearest


__all__ = [
    "MPFloat",
    "mpfloat",
    "as_working",
    "rounding_of",
    "ROUNDING_MODES",
    "round_nearest",
    "round_down",
    "round_up",
    "round_floor",
    "round_ceiling",
]
