import math

import mpmath
import pytest

from arbengine import combinatorics

from tests._test_checks import _check, _rel_close, _ref


def test_factorial_small_and_invalid():
    _check(combinatorics.factorial(5) == 120)
    _check(combinatorics.factorial(0) == 1)
    _check(combinatorics.factorial(-1).is_nan())
    with pytest.raises(ValueError):
        combinatorics.factorial(2.5)


@pytest.mark.parametrize("n", [21, 25, 100, 170])
def test_factorial_exact_while_it_fits(n):
    _check(int(combinatorics.factorial(n, prec_bits=2048)) == math.factorial(n), str(n))


def test_factorial_rounds_to_precision():
    got = combinatorics.factorial(100, prec_bits=64)
    _check(got.prec == 64)
    _check(_rel_close(got, math.factorial(100), 63))


def test_factorial_past_exact_table():
    got = combinatorics.factorial(5000, prec_bits=128)
    _check(_rel_close(got, _ref(mpmath.factorial, 5000), 36))


def test_binomial_edges():
    _check(combinatorics.binomial(10, 0) == 1)
    _check(combinatorics.binomial(10, 10) == 1)
    _check(combinatorics.binomial(10, 11).is_zero())
    _check(combinatorics.binomial(10, -1).is_zero())
    _check(combinatorics.binomial(6, 2) == 15)
    with pytest.raises(ValueError):
        combinatorics.binomial(5.5, 2)


@pytest.mark.parametrize("n, k", [(50, 25), (64, 3), (100, 97), (300, 150)])
def test_binomial_matches_math_comb(n, k):
    got = combinatorics.binomial(n, k, prec_bits=512)
    _check(int(got) == math.comb(n, k), f"{n},{k}")


@pytest.mark.parametrize("n, k, expected", [(-1, 4, 1), (-1, 5, -1), (-5, 3, -35), (-3, 0, 1), (-30, 6, 1623160)])
def test_binomial_negative_upper_index(n, k, expected):
    _check(combinatorics.binomial(n, k, prec_bits=128) == expected, f"{n},{k}")


def test_binomial_symmetry():
    _check(combinatorics.binomial(40, 7) == combinatorics.binomial(40, 33))
