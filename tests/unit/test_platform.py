import pytest

from src.adapters.platform_info import DEFAULT_SDK_VERSION, StaticPlatform, create_platform


def test_static_platform():
    assert StaticPlatform(28).sdk_version() == 28


def test_factory_explicit_wins(monkeypatch):
    monkeypatch.setenv("PLATFORM_SDK_VERSION", "30")
    assert create_platform(26).sdk_version() == 26


def test_factory_env(monkeypatch):
    monkeypatch.setenv("PLATFORM_SDK_VERSION", "30")
    assert create_platform().sdk_version() == 30


def test_factory_default(monkeypatch):
    monkeypatch.delenv("PLATFORM_SDK_VERSION", raising=False)
    assert create_platform().sdk_version() == DEFAULT_SDK_VERSION
    assert create_platform(default=21).sdk_version() == 21


def test_factory_bad_env(monkeypatch):
    monkeypatch.setenv("PLATFORM_SDK_VERSION", "tiramisu")
    with pytest.raises(ValueError):
        create_platform()
