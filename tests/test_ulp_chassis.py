from arbengine import ulp
from arbengine.mpfloat import MPFloat

from tests._test_checks import _check


def test_ulp_values():
    _check(ulp.ulp(1, 53) == MPFloat(1, 53).ldexp(-52))
    _check(ulp.ulp(1024, 53) == MPFloat(1, 53).ldexp(-42))
    _check(ulp.ulp(-0.75, 10) == MPFloat(1, 53).ldexp(-10))
    _check(ulp.ulp(0).is_zero())
    _check(ulp.ulp(MPFloat.inf(53)).is_nan())


def test_error_bound_conversions():
    e = ulp.ErrorBound.ulps(2, 53)
    _check(e.is_ulp)
    _check(e.to_abs(1, 53) == MPFloat(1, 53).ldexp(-51))
    a = ulp.ErrorBound.absolute(MPFloat(1, 53).ldexp(-50), 53)
    _check(not a.is_ulp)
    _check(a.to_ulps(1, 53) == 4)
    _check(a.to_abs(1, 53) == MPFloat(1, 53).ldexp(-50))


def test_add_error_bounds():
    both = ulp.add_error_bounds(ulp.ErrorBound.ulps(1, 53), ulp.ErrorBound.ulps(2, 53), 1, 53)
    _check(both.is_ulp and both.value == 3)
    mixed = ulp.add_error_bounds(ulp.ErrorBound.ulps(1, 53), ulp.ErrorBound.absolute(MPFloat(1, 53).ldexp(-52), 53), 1, 53)
    _check(not mixed.is_ulp)
    _check(mixed.value == MPFloat(1, 53).ldexp(-51))


def test_propagation():
    one_ulp = ulp.ErrorBound.ulps(1, 53)
    s = ulp.propagate_error_add(1, 1, 2, one_ulp, one_ulp, 53)
    _check(not s.is_ulp)
    _check(s.value == MPFloat(3, 53).ldexp(-52))
    directed = ulp.propagate_error_add(1, 1, 2, one_ulp, one_ulp, 53, "d")
    _check(directed.value == MPFloat(1, 53).ldexp(-50))
    m = ulp.propagate_error_mul(3, 5, 15, one_ulp, one_ulp, 53)
    _check(m.is_ulp and m.value == 2.5)


def test_required_precision():
    _check(ulp.required_precision(100, 1) == 102)
    _check(ulp.required_precision(100, 8) == 108)
    _check(ulp.required_precision(53, 1000) == 53 + 10 + 5)
