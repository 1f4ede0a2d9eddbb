import logging

import pytest

from vendor_discovery.config import Config, load_config


def test_defaults(monkeypatch):
    monkeypatch.delenv("MAX_RESULTS", raising=False)
    config = Config(anthropic_api_key="a", google_places_api_key="g")
    assert config.max_results == 20
    assert config.search_timeout == 5.0
    assert config.enhance_timeout == 30.0
    assert config.validate_keys() == []


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("MAX_RESULTS", "8")
    monkeypatch.setenv("SEARCH_TIMEOUT", "2.5")
    monkeypatch.setenv("MODEL", "claude-haiku")
    config = Config()
    assert config.result_limit == 8
    assert config.search_timeout == 2.5
    assert config.model == "claude-haiku"


def test_result_limit_is_capped():
    assert Config(max_results=100).result_limit == 20
    assert Config(max_results=0).result_limit == 1


def test_validate_keys_lists_missing():
    config = Config(anthropic_api_key="", google_places_api_key="")
    assert config.validate_keys() == ["GOOGLE_PLACES_API_KEY", "ANTHROPIC_API_KEY"]


@pytest.mark.parametrize(
    "name, raw, attr, expected",
    [
        ("MAX_RESULTS", "lots", "max_results", 20),
        ("MAX_RESULTS", "7.5", "max_results", 20),
        ("SEARCH_TIMEOUT", "fast", "search_timeout", 5.0),
        ("ENHANCE_TIMEOUT", "", "enhance_timeout", 30.0),
    ],
)
def test_malformed_numbers_use_defaults(monkeypatch, caplog, name, raw, attr, expected):
    monkeypatch.setenv(name, raw)
    with caplog.at_level(logging.WARNING, logger="vendor_discovery.config"):
        config = load_config()
    assert getattr(config, attr) == expected
    if raw:
        assert name in caplog.text
