import pytest

from config import get_settings_module


@pytest.mark.parametrize(
    "env, expected",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("testing", "config.testing"),
        ("development", "config.development"),
        ("staging", "config.development"),
    ],
)
def test_settings_module_from_app_env(monkeypatch, env, expected):
    monkeypatch.delenv("APP_SETTINGS_MODULE", raising=False)
    monkeypatch.setenv("APP_ENV", env)

    assert get_settings_module() == expected


def test_explicit_settings_module_wins(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("APP_SETTINGS_MODULE", "config.production")

    assert get_settings_module() == "config.production"
