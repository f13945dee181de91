import mpmath
import numpy as np
import pytest

from arbengine import hypgeom, validation
from arbengine.mpfloat import MPFloat

from tests._test_checks import _check, _close, _rel_close, _ref

pytestmark = pytest.mark.parity
if not validation.parity_enabled():
    pytest.skip("Parity tests disabled. Set ARBENGINE_RUN_PARITY=1 to enable.", allow_module_level=True)

PRECS = [64, 200, 400]


def _samples(lo, hi, n=30, seed=0):
    rng = np.random.default_rng(seed)
    return rng.uniform(lo, hi, size=n)


@pytest.mark.parametrize("prec", PRECS)
def test_erf_erfc_sweep(prec):
    for x in _samples(-12.0, 12.0):
        xv = MPFloat(float(x), prec)
        _check(_close(hypgeom.erf(xv, prec_bits=prec), _ref(mpmath.erf, xv), prec - 6), f"erf({x})")
        _check(_rel_close(hypgeom.erfc(xv, prec_bits=prec), _ref(mpmath.erfc, xv), prec - 8), f"erfc({x})")


def test_gamma_sweep():
    # the Lanczos sum limits gamma to about double precision
    for x in _samples(-30.0, 170.0, n=60, seed=3):
        xv = MPFloat(float(x), 128)
        _check(_rel_close(hypgeom.gamma(xv, prec_bits=128), _ref(mpmath.gamma, xv), 36), f"gamma({x})")


@pytest.mark.parametrize("prec", PRECS)
@pytest.mark.parametrize("n", [0, 1, 3, 8])
def test_bessel_sweep(n, prec):
    for x in _samples(0.05, 150.0, n=15, seed=n):
        xv = MPFloat(float(x), prec)
        _check(_close(hypgeom.bessel_j(n, xv, prec_bits=prec), _ref(mpmath.besselj, n, xv), prec - 10), f"J{n}({x})")
        _check(_close(hypgeom.bessel_y(n, xv, prec_bits=prec), _ref(mpmath.bessely, n, xv), prec - 10), f"Y{n}({x})")
