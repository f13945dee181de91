import pytest
from mpmath import libmp

from arbengine import runtime

from tests._test_checks import _check


def test_strategy_is_known():
    _check(runtime.strategy() in runtime.STRATEGIES)


def test_capabilities_report():
    caps = runtime.capabilities()
    _check(set(caps) == {"backend", "machine", "python", "strategy"})
    _check(caps["backend"] == libmp.BACKEND)
    _check(caps["strategy"] == runtime.strategy())


def test_strategy_override(monkeypatch):
    monkeypatch.setenv("ARBENGINE_STRATEGY", "fixed")
    _check(runtime._select_strategy() == "fixed")
    monkeypatch.setenv("ARBENGINE_STRATEGY", "reference")
    _check(runtime._select_strategy() == "reference")
    monkeypatch.setenv("ARBENGINE_STRATEGY", "vector")
    with pytest.raises(ValueError):
        runtime._select_strategy()


def test_default_follows_backend(monkeypatch):
    monkeypatch.delenv("ARBENGINE_STRATEGY", raising=False)
    expected = "fixed" if libmp.BACKEND == "gmpy" else "reference"
    _check(runtime._select_strategy() == expected)
