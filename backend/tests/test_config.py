import json
import logging

import pytest
from pydantic import ValidationError

from quote_gateway.core.config import DEFAULT_USER_AGENT, Settings, get_settings, normalize_redirect_url
from quote_gateway.core.logging_config import JsonFormatter, build_logging_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CACHE_TTL", "ROOT_REDIRECT_URL", "USER_AGENT", "CACHE_BACKEND"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = get_settings()
    assert settings.cache_ttl == 300
    assert settings.root_redirect_url is None
    assert settings.redirect_location is None
    assert settings.user_agent == DEFAULT_USER_AGENT
    assert settings.cache_backend == "memory"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("CACHE_TTL", "600")
    monkeypatch.setenv("USER_AGENT", "quote-bot/1.0")
    monkeypatch.setenv("CACHE_BACKEND", "Redis")

    settings = get_settings()

    assert settings.cache_ttl == 600
    assert settings.user_agent == "quote-bot/1.0"
    assert settings.cache_backend == "redis"


@pytest.mark.parametrize("value", ["abc", "-5", "12.5", ""])
def test_unusable_cache_ttl_falls_back_to_default(monkeypatch, value):
    monkeypatch.setenv("CACHE_TTL", value)
    assert get_settings().cache_ttl == 300


def test_settings_are_immutable():
    settings = get_settings()
    with pytest.raises(ValidationError):
        settings.cache_ttl = 1


@pytest.mark.parametrize(
    "value,expected",
    [
        ("https://example.com", "https://example.com/"),
        ("HTTPS://example.com/path?x=1", "https://example.com/path?x=1"),
        ("http://localhost:8080", "http://localhost:8080/"),
        ("not-a-valid-url", None),
        ("ftp://example.com", None),
        ("https://", None),
        (None, None),
    ],
)
def test_normalize_redirect_url(value, expected):
    assert normalize_redirect_url(value) == expected


def test_logging_config_formats():
    text = build_logging_config("debug", "text")
    assert text["loggers"]["quote_gateway"]["level"] == "DEBUG"
    assert "format" in text["formatters"]["default"]

    as_json = build_logging_config("INFO", "json")
    assert as_json["formatters"]["default"]["()"] is JsonFormatter


def test_json_formatter_output():
    record = logging.LogRecord("quote_gateway.test", logging.WARNING, __file__, 1, "probe failed: %s", ("boom",), None)
    line = json.loads(JsonFormatter().format(record))
    assert line["level"] == "WARNING"
    assert line["logger"] == "quote_gateway.test"
    assert line["message"] == "probe failed: boom"


def test_explicit_values_override_environment(monkeypatch):
    monkeypatch.setenv("CACHE_TTL", "600")
    assert Settings(cache_ttl=120).cache_ttl == 120
