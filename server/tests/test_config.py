"""Tests for configuration loading and process bootstrap."""

import logging

import pytest

from trackfusion import server
from trackfusion.config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_MS,
    ClientConfig,
    ConfigError,
    configure_logging,
    load_config,
)


def test_defaults():
    config = load_config({"TRACKFUSION_API_KEY": "tf_key"})
    assert config.api_key == "tf_key"
    assert config.base_url == DEFAULT_BASE_URL
    assert config.timeout_ms == DEFAULT_TIMEOUT_MS == 30000


def test_overrides():
    config = load_config(
        {
            "TRACKFUSION_API_KEY": "tf_key",
            "TRACKFUSION_API_URL": "http://localhost:5001/api/",
            "TRACKFUSION_TIMEOUT_MS": "1500",
        }
    )
    assert config.base_url == "http://localhost:5001/api"
    assert config.timeout_ms == 1500
    assert config.timeout_seconds == 1.5


def test_missing_api_key():
    with pytest.raises(ConfigError, match="TRACKFUSION_API_KEY"):
        load_config({})


def test_invalid_timeout():
    with pytest.raises(ConfigError, match="TRACKFUSION_TIMEOUT_MS"):
        load_config({"TRACKFUSION_API_KEY": "k", "TRACKFUSION_TIMEOUT_MS": "soon"})


@pytest.mark.parametrize("timeout_ms", [0, -5])
def test_timeout_must_be_positive(timeout_ms):
    with pytest.raises(ConfigError):
        ClientConfig(api_key="k", base_url="https://x", timeout_ms=timeout_ms)


def test_empty_api_key_rejected():
    with pytest.raises(ConfigError):
        ClientConfig(api_key="", base_url="https://x")


def test_only_one_trailing_slash_stripped():
    assert ClientConfig(api_key="k", base_url="https://x/").base_url == "https://x"
    assert ClientConfig(api_key="k", base_url="https://x//").base_url == "https://x/"


def test_config_is_immutable():
    config = ClientConfig(api_key="k", base_url="https://x")
    with pytest.raises(AttributeError):
        config.api_key = "other"


@pytest.mark.parametrize(
    "raw, expected",
    [("debug", "DEBUG"), ("verbose", "INFO"), ("", "INFO")],
)
def test_configure_logging_level(monkeypatch, raw, expected):
    captured = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

    configure_logging({"TRACKFUSION_LOG_LEVEL": raw})

    assert captured["level"] == expected


def test_main_exits_without_api_key(monkeypatch, capsys):
    monkeypatch.delenv("TRACKFUSION_API_KEY", raising=False)

    with pytest.raises(SystemExit) as exc_info:
        server.main()

    assert exc_info.value.code == 1
    assert "TRACKFUSION_API_KEY" in capsys.readouterr().err
