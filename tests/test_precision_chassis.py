import pytest

from arbengine import checks, precision, validation

from tests._test_checks import _check


def test_dps_bits_conversion():
    _check(precision.dps_to_bits(15) == 50)
    _check(precision.bits_to_dps(53) == 16)
    _check(precision.bits_to_dps(precision.dps_to_bits(30)) >= 30)


def test_resolve_default_and_override():
    default = precision.get_prec_bits()
    _check(precision.resolve_prec_bits(0) == default)
    _check(precision.resolve_prec_bits(77) == 77)
    with pytest.raises(ValueError):
        precision.resolve_prec_bits(-1)
    with pytest.raises(ValueError):
        precision.resolve_prec_bits(1.5)


def test_workprec_and_workdps_restore():
    before = precision.get_prec_bits()
    with precision.workprec(100):
        _check(precision.resolve_prec_bits(0) == 100)
        with precision.workdps(50):
            _check(precision.get_prec_bits() == precision.dps_to_bits(50))
        _check(precision.get_prec_bits() == 100)
    _check(precision.get_prec_bits() == before)


def test_eps_from_bits():
    _check(abs(float(precision.eps_from_bits(10)) - 2.0**-10) < 1e-15)


def test_checks_raise_value_error():
    with pytest.raises(ValueError):
        checks.check_in_set("x", ("a", "b"), "mode")
    with pytest.raises(ValueError):
        checks.check_multiple_of([1, 2], 3, "coeffs")
    with pytest.raises(ValueError):
        checks.check_n_used(5, 4, "n_used")
    with pytest.raises(ValueError):
        checks.check_integer(2.5, "n")
    _check(checks.check_n_used(0, 4, "n_used") == 4)
    _check(checks.check_integer(3.0, "n") == 3)


def test_parity_switch(monkeypatch):
    monkeypatch.setenv("ARBENGINE_RUN_PARITY", "1")
    _check(validation.parity_enabled())
    monkeypatch.setenv("ARBENGINE_RUN_PARITY", "0")
    _check(not validation.parity_enabled())
