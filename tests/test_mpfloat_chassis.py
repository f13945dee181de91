import math
import pickle

import mpmath
import pytest

from arbengine.mpfloat import MPFloat, as_working, mpfloat, rounding_of

from tests._test_checks import _check


@pytest.mark.parametrize("text", ["0.1", "0.7", "-0.3", "2.675", "1e-5", "123456.789"])
def test_float_conversion_rounds_to_nearest(text):
    _check(float(MPFloat(text, 100)) == float(text), text)


def test_construction_and_precision():
    x = MPFloat("0.1", 100)
    _check(x.prec == 100)
    _check(x.rnd == "n")
    _check(float(x) == 0.1)
    _check(MPFloat(3, 2) == 3)
    _check(MPFloat(5, 2) == 4)
    _check(MPFloat(mpmath.mpf(2.5), 53) == 2.5)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        MPFloat(1, 0)
    with pytest.raises(ValueError):
        MPFloat(1, 53, "x")
    with pytest.raises(TypeError):
        MPFloat([1], 53)


def test_immutable():
    x = MPFloat(1, 53)
    with pytest.raises(AttributeError):
        x.prec = 10
    y = x + 1
    _check(x == 1 and y == 2)


def test_arithmetic_rounds_to_wider_operand():
    a = MPFloat(1, 200)
    b = MPFloat(3, 20)
    q = a / b
    _check(q.prec == 200)
    _check(abs(q * 3 - 1) < MPFloat(2, 200).ldexp(-200))
    _check((1 / MPFloat(3, 53)) == 1 / 3.0)
    _check((2 - MPFloat(0.5, 53)) == 1.5)


def test_ints_take_part_exactly():
    big = 2**300 + 1
    x = MPFloat(0, 400) + big
    _check(int(x) == big)


def test_division_by_zero_and_nan():
    one = MPFloat(1, 53)
    zero = MPFloat.zero(53)
    _check((one / zero).is_inf() and (one / zero) > 0)
    _check((-one / zero) < 0)
    _check((zero / zero).is_nan())
    _check(MPFloat(-4, 53).sqrt().is_nan())
    nan = MPFloat.nan(53)
    _check(not (nan < 1) and not (nan > 1) and not (nan == nan))
    _check(nan != nan)
    with pytest.raises(ValueError):
        nan.sign()


def test_predicates():
    _check(MPFloat(0, 53).is_zero())
    _check(MPFloat.inf(53, -1).is_inf() and not MPFloat.inf(53).is_finite())
    _check(MPFloat(7, 53).is_integer())
    _check(not MPFloat(7.5, 53).is_integer())
    _check(MPFloat(-2, 53).sign() == -1 and MPFloat(0, 53).sign() == 0)


def test_exact_structure():
    x = MPFloat(12.0, 53)
    man, exp = x.man_exp()
    _check(man * 2**exp == 12)
    _check(MPFloat.from_man_exp(man, exp, 53) == x)
    m, e = x.frexp()
    _check(m == 0.75 and e == 4)
    _check(x.mag() == 4)
    _check(x.ldexp(-2) == 3)
    _check(MPFloat(0.75, 53).mag() == 0)


def test_to_fixed():
    _check(MPFloat(1.5, 53).to_fixed(4) == 24)
    _check(MPFloat(-1.5, 53).to_fixed(1) == -3)
    with pytest.raises(ValueError):
        MPFloat.nan(53).to_fixed(4)


def test_integer_rounding():
    x = MPFloat(-2.5, 53)
    _check(x.floor() == -3)
    _check(x.ceil() == -2)
    _check(x.trunc() == -2)
    _check(x.nint() == -2)
    _check(MPFloat(3.5, 53).nint() == 4)


def test_rounding_modes():
    third_down = MPFloat(1, 10, "d") / 3
    third_up = MPFloat(1, 10, "u") / 3
    _check(third_down < third_up)
    _check(third_up.rnd == "u")
    _check(MPFloat("0.1", 10, "f") < MPFloat("0.1", 10, "c"))


def test_working_copies_keep_value():
    x = MPFloat("0.1", 200)
    w = as_working(x, 20)
    _check(w == x)
    _check(w.prec == 20)
    _check(x.with_prec(20) != x)
    _check(rounding_of(MPFloat(1, 53, "d")) == "d")
    _check(rounding_of(1.0) == "n")
    _check(mpfloat(x, 200) is x)


def test_conversions_and_pickle():
    x = MPFloat("1.25", 80)
    _check(str(x).startswith("1.25"))
    _check(repr(x).startswith("MPFloat("))
    _check(math.isclose(float(x.to_mpmath()), 1.25))
    _check(int(MPFloat(-7.9, 53)) == -7)
    _check(not MPFloat.zero(53))
    _check(pickle.loads(pickle.dumps(x)) == x)
    _check(hash(MPFloat(2, 53)) == hash(MPFloat(2, 100)))
