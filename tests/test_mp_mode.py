from arbengine import elementary, hypgeom, mp_mode, precision, trig

from tests._test_checks import _check


def test_mp_mode_uses_dps() -> None:
    x = 1.25
    with precision.workdps(30):
        expected = elementary.exp(x, prec_bits=precision.dps_to_bits(30))
        got = mp_mode.exp_mp(x, dps=30)
    _check(got == expected)
    _check(got.prec == precision.dps_to_bits(30))


def test_mp_mode_prec_bits_wins_over_dps() -> None:
    got = mp_mode.sin_mp(0.5, dps=10, prec_bits=200)
    _check(got.prec == 200)
    _check(got == trig.sin(0.5, prec_bits=200))


def test_mp_mode_defaults_to_global_precision() -> None:
    with precision.workprec(96):
        got = mp_mode.gamma_mp(0.5)
    _check(got.prec == 96)
    _check(got == hypgeom.gamma(0.5, prec_bits=96))


def test_mp_mode_registry() -> None:
    names = set(mp_mode.__all__)
    for name in ("exp_mp", "bessel_j_mp", "chebyshev_eval_mp", "rad_norm_mp", "sqrt_rounded_mp", "factorial_mp"):
        _check(name in names, name)
    _check("chebyshev_eval_batch_mp" not in names)
    _check("parity_enabled_mp" not in names)
    _check(mp_mode.bessel_j_mp.__name__ == "bessel_j")
