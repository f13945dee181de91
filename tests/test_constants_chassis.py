import threading

import mpmath
import pytest

from arbengine import constants

from tests._test_checks import _check, _close, _ref

# 20 significant digits of each constant.
REFERENCE = {
    "pi": "3.1415926535897932385",
    "e": "2.7182818284590452354",
    "ln2": "0.69314718055994530942",
    "ln10": "2.3025850929940456840",
    "euler": "0.57721566490153286061",
    "catalan": "0.91596559417721901505",
    "sqrt2": "1.4142135623730950488",
    "sqrt3": "1.7320508075688772935",
    "phi": "1.6180339887498948482",
}

MPMATH = {
    "pi": lambda: +mpmath.pi,
    "e": lambda: +mpmath.e,
    "ln2": lambda: +mpmath.ln2,
    "ln10": lambda: +mpmath.ln10,
    "euler": lambda: +mpmath.euler,
    "catalan": lambda: +mpmath.catalan,
    "sqrt2": lambda: mpmath.sqrt(2),
    "sqrt3": lambda: mpmath.sqrt(3),
    "phi": lambda: +mpmath.phi,
}


@pytest.mark.parametrize("name", sorted(REFERENCE))
def test_constant_matches_reference_digits(name):
    value = constants.constant(name, 192)
    _check(value.prec == 192)
    _check(_close(value, REFERENCE[name], 60), name)
    _check(_close(value, _ref(MPMATH[name]), 190), name)


@pytest.mark.parametrize(
    "name, fn",
    [
        ("pi", lambda: mpmath.pi),
        ("euler", lambda: mpmath.euler),
        ("catalan", lambda: mpmath.catalan),
        ("ln10", lambda: mpmath.ln10),
    ],
)
def test_constant_high_precision(name, fn):
    value = constants.constant(name, 1000)
    _check(_close(value, _ref(lambda: +fn()), 995), name)


def test_cache_identity_and_precision_keys():
    first = constants.pi(150)
    second = constants.constant("pi", 150)
    _check(first is second)
    other = constants.pi(151)
    _check(other is not first)
    _check(("pi", 150) in constants.cached_keys())
    _check(("pi", 151) in constants.cached_keys())


def test_named_accessors_and_default_precision():
    _check(constants.e(100) is constants.constant("e", 100))
    _check(constants.sqrt2(80) * constants.sqrt2(80) - 2 < 1e-20)
    _check(constants.phi().prec == constants.constant("phi").prec)


def test_unknown_constant_rejected():
    with pytest.raises(ValueError):
        constants.constant("tau", 64)


def test_concurrent_population_is_exactly_once():
    constants.clear_cache()
    results = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        results.append(constants.constant("euler", 333))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    _check(len(results) == 8)
    _check(all(r is results[0] for r in results))


def test_clear_cache():
    constants.ln2(77)
    constants.clear_cache()
    _check(("ln2", 77) not in constants.cached_keys())
