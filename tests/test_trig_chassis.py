import mpmath
import pytest

from arbengine import constants, trig
from arbengine.mpfloat import MPFloat

from tests._test_checks import _check, _close, _rel_close, _ref

PREC = 160
POINTS = ["0.1", "-0.7", "0.78539816", "1", "2.5", "-3.14159", "10", "1e-20", "123.456"]


def test_sin_cos_special_points():
    half_pi = constants.pi(256).ldexp(-1)
    _check(_close(trig.sin(half_pi, prec_bits=256), 1, 240))
    _check(_close(trig.cos(constants.pi(256), prec_bits=256), -1, 240))
    _check(trig.sin(0).is_zero())
    _check(trig.cos(0) == 1)
    _check(trig.sin(MPFloat.inf(53)).is_nan())
    _check(trig.tan(MPFloat.nan(53)).is_nan())


@pytest.mark.parametrize("x", POINTS)
def test_sin_cos_tan_match_mpmath(x):
    xv = MPFloat(x, PREC)
    _check(_close(trig.sin(xv, prec_bits=PREC), _ref(mpmath.sin, xv), PREC - 4), x)
    _check(_close(trig.cos(xv, prec_bits=PREC), _ref(mpmath.cos, xv), PREC - 4), x)
    _check(_close(trig.tan(xv, prec_bits=PREC), _ref(mpmath.tan, xv), PREC - 6), x)


@pytest.mark.parametrize("x", ["0.3", "1.7", "-5.5", "1000.25"])
def test_pythagorean_identity(x):
    s = trig.sin(MPFloat(x, 256), prec_bits=256)
    c = trig.cos(MPFloat(x, 256), prec_bits=256)
    _check(_close(s * s + c * c, 1, 250), x)


@pytest.mark.parametrize("x", ["1e22", "-6.0e15", "355", "103993"])
def test_large_argument_reduction(x):
    xv = MPFloat(x, PREC)
    _check(_close(trig.sin(xv, prec_bits=PREC), _ref(mpmath.sin, xv), PREC - 4), x)
    _check(_close(trig.cos(xv, prec_bits=PREC), _ref(mpmath.cos, xv), PREC - 4), x)


def test_sin_keeps_relative_accuracy_near_multiple_of_pi():
    # 355/113 is a close rational approximation to pi
    xv = MPFloat(355, PREC) / 113
    _check(_rel_close(trig.sin(xv, prec_bits=PREC), _ref(mpmath.sin, xv), PREC - 6))


@pytest.mark.parametrize("x", ["-1", "-0.5", "0", "0.25", "0.999", "1"])
def test_inverse_functions(x):
    xv = MPFloat(x, PREC)
    _check(_close(trig.asin(xv, prec_bits=PREC), _ref(mpmath.asin, xv), PREC - 4), x)
    _check(_close(trig.acos(xv, prec_bits=PREC), _ref(mpmath.acos, xv), PREC - 4), x)
    _check(_close(trig.atan(xv, prec_bits=PREC), _ref(mpmath.atan, xv), PREC - 4), x)


def test_inverse_domain_and_limits():
    _check(trig.asin(1.5).is_nan())
    _check(trig.acos(-1.0001).is_nan())
    _check(trig.acos(1).is_zero())
    _check(_close(trig.atan(MPFloat.inf(53), prec_bits=PREC), _ref(lambda: mpmath.pi / 2), PREC - 2))
    _check(_close(trig.atan(1e30, prec_bits=PREC), _ref(mpmath.atan, 1e30), PREC - 4))


def test_acos_near_one_is_relatively_accurate():
    xv = MPFloat(1, PREC) - MPFloat(1, PREC).ldexp(-60)
    _check(_rel_close(trig.acos(xv, prec_bits=PREC), _ref(mpmath.acos, xv), PREC - 6))


@pytest.mark.parametrize(
    "y, x",
    [(1, 1), (1, -1), (-1, -1), (-1, 1), (0.5, -3), (-2, 0.25), (1, 0), (-1, 0)],
)
def test_atan2_quadrants(y, x):
    got = trig.atan2(y, x, prec_bits=PREC)
    _check(_close(got, _ref(mpmath.atan2, float(y), float(x)), PREC - 4), f"{y},{x}")


def test_atan2_special_values():
    pi = constants.pi(PREC)
    _check(trig.atan2(0, 0).is_zero())
    _check(trig.atan2(0, -1, prec_bits=PREC) == pi)
    _check(_close(trig.atan2(MPFloat.inf(53), MPFloat.inf(53, -1), prec_bits=PREC), _ref(lambda: 3 * mpmath.pi / 4), PREC - 2))
    _check(trig.atan2(-1, MPFloat.inf(53, -1), prec_bits=PREC) == -pi)
    _check(trig.atan2(MPFloat.nan(53), 1).is_nan())
