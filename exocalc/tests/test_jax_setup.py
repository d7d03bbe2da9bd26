"""Tests for JAX configuration."""

import sys
from types import SimpleNamespace

import jax
import pytest

from exocalc.utils import jax_setup
from exocalc.utils.jax_setup import ensure_jax_x64, get_device_preference, is_jax_configured


@pytest.fixture
def recorded_config(monkeypatch):
    """Fresh, unconfigured state with ``jax.config.update`` calls recorded."""
    calls = []
    fake_jax = SimpleNamespace(
        config=SimpleNamespace(update=lambda key, value: calls.append((key, value)))
    )
    monkeypatch.setitem(sys.modules, "jax", fake_jax)
    monkeypatch.setattr(jax_setup, "_jax_configured", False)
    return calls


def test_importing_measurements_enables_x64():
    import exocalc.model.measurement  # noqa: F401

    assert is_jax_configured()
    assert jax.numpy.asarray(1.0).dtype == jax.numpy.float64


def test_ensure_is_idempotent():
    assert ensure_jax_x64()
    assert ensure_jax_x64()


def test_float64_gradients():
    grad = jax.grad(lambda x: x ** 2)(1.0 + 1e-12)
    assert grad.dtype == jax.numpy.float64


def test_device_preference(monkeypatch):
    monkeypatch.delenv("EXOCALC_DEVICE", raising=False)
    assert get_device_preference() is None
    monkeypatch.setenv("EXOCALC_DEVICE", " GPU ")
    assert get_device_preference() == "gpu"


def test_platform_left_alone_without_device(monkeypatch, recorded_config):
    monkeypatch.delenv("EXOCALC_DEVICE", raising=False)
    assert ensure_jax_x64()
    assert recorded_config == [("jax_enable_x64", True)]


def test_platform_selected_from_environment(monkeypatch, recorded_config):
    monkeypatch.setenv("EXOCALC_DEVICE", "cpu")
    assert ensure_jax_x64()
    assert recorded_config == [("jax_enable_x64", True), ("jax_platforms", "cpu")]


def test_configuration_happens_once(monkeypatch, recorded_config):
    monkeypatch.delenv("EXOCALC_DEVICE", raising=False)
    ensure_jax_x64()
    ensure_jax_x64()
    assert len(recorded_config) == 1
