import pytest

from api import create_app
from api.config import ConfigError, DevelopmentConfig, ProductionConfig, TestingConfig, get_config


@pytest.mark.parametrize(
    "name,expected",
    [("prod", ProductionConfig), ("Production", ProductionConfig), ("testing", TestingConfig), ("dev", DevelopmentConfig)],
)
def test_get_config(name, expected):
    assert get_config(name) is expected


def test_get_config_defaults_to_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "test")
    assert get_config(None) is TestingConfig


def test_production_refuses_default_secrets(monkeypatch):
    monkeypatch.setattr(ProductionConfig, "ACCESS_TOKEN_SECRET", "dev-access-secret-change-me")
    with pytest.raises(ConfigError):
        ProductionConfig.validate()


def test_production_refuses_shared_secret(monkeypatch):
    monkeypatch.setattr(ProductionConfig, "ACCESS_TOKEN_SECRET", "s" * 40)
    monkeypatch.setattr(ProductionConfig, "REFRESH_TOKEN_SECRET", "s" * 40)
    with pytest.raises(ConfigError):
        ProductionConfig.validate()


def test_create_app_wires_configured_ttls():
    from datetime import timedelta

    app = create_app("testing", ACCESS_TOKEN_EXPIRES=timedelta(minutes=5))
    assert app.extensions["token_authority"].access_ttl == timedelta(minutes=5)
    assert app.extensions["session_service"].tokens is app.extensions["token_authority"]
