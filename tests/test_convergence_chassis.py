import logging

import pytest

from arbengine import elementary
from arbengine.convergence import ConvergenceError, ConvergencePolicy
from arbengine.mpfloat import MPFloat

from tests._test_checks import _check


def test_policy_working_precision_and_cap():
    policy = ConvergencePolicy.for_call("series", 100, guard_bits=20, iterations_per_bit=2.0)
    _check(policy.working_prec == 120)
    _check(policy.max_iterations == 1000)
    wide = ConvergencePolicy.for_call("series", 1000, guard_bits=0, iterations_per_bit=2.0)
    _check(wide.max_iterations == 2000)
    _check(len(wide.steps()) == 2000)
    _check(policy.widened(8).working_prec == 128)


def test_absolute_and_relative_predicates():
    policy = ConvergencePolicy("abs", 50, guard_bits=0)
    _check(policy.converged(MPFloat(1, 53).ldexp(-60)))
    _check(not policy.converged(MPFloat(1, 53).ldexp(-40)))
    _check(policy.converged(MPFloat.zero(53)))
    _check(not policy.converged(MPFloat.nan(53)))
    rel = ConvergencePolicy("rel", 50, guard_bits=0, relative=True)
    total = MPFloat(1, 53).ldexp(100)
    _check(rel.converged(MPFloat(1, 53).ldexp(40), total))
    _check(not rel.converged(MPFloat(1, 53).ldexp(60), total))
    _check(policy.threshold() == MPFloat(1, 53).ldexp(-50))


def test_exhaustion_raises_and_logs(caplog):
    policy = ConvergencePolicy("stuck", 64, guard_bits=0, max_iterations=3)
    with caplog.at_level(logging.WARNING, logger="arbengine.convergence"):
        with pytest.raises(ConvergenceError) as info:
            for _ in policy.steps():
                if policy.converged(MPFloat(1, 53)):
                    break
            else:
                policy.exhausted()
    _check(info.value.label == "stuck")
    _check(info.value.iterations == 3)
    _check(info.value.working_prec == 64)
    _check(isinstance(info.value, ArithmeticError))
    _check("stuck" in caplog.text)


def test_engine_loop_surfaces_exhaustion(monkeypatch):
    def tight(label, wp, relative=True, per_bit=0.25):
        return ConvergencePolicy(label, wp, guard_bits=0, max_iterations=2, relative=relative)

    monkeypatch.setattr(elementary, "_series_policy", tight)
    with pytest.raises(ConvergenceError):
        elementary.exp(MPFloat("0.3", 128), prec_bits=128)
