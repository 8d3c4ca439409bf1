"""Unit tests for environment-driven configuration."""

from __future__ import annotations

import pytest
from when_committed.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    get_config,
)


@pytest.mark.parametrize("raw", ["1", "true", "YES", " on "])
def test_env_bool_truthy(monkeypatch, raw):
    monkeypatch.setenv("WHEN_COMMITTED_FLAG", raw)

    assert env_bool("WHEN_COMMITTED_FLAG") is True


def test_env_bool_default_when_missing(monkeypatch):
    monkeypatch.delenv("WHEN_COMMITTED_FLAG", raising=False)

    assert env_bool("WHEN_COMMITTED_FLAG", True) is True
    assert env_bool("WHEN_COMMITTED_FLAG") is False


@pytest.mark.parametrize(
    ("env", "expected"),
    [
        ("testing", TestingConfig),
        ("production", ProductionConfig),
        ("unknown", DevelopmentConfig),
    ],
)
def test_get_config_follows_app_env(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)

    assert get_config() is expected


def test_registration_outside_transaction_is_an_error_by_default():
    assert TestingConfig.WHEN_COMMITTED_RUN_NOW_IF_NO_TRANSACTION is False
