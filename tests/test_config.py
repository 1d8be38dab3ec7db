"""Tests for Settings."""

import pytest
from pydantic import ValidationError

from webutils.config import DEFAULT_REQUEST_URI, Settings


def test_defaults(settings):
    assert settings.default_request_uri == DEFAULT_REQUEST_URI
    assert settings.body_methods == ["POST", "PUT"]
    assert settings.max_nesting_level == 64
    assert settings.timezone == "UTC"
    assert settings.date_format == "Y-m-d H:i:s"
    assert settings.language == "en"


def test_body_methods_are_normalized():
    assert Settings(body_methods=["post", " patch ", ""]).body_methods == ["POST", "PATCH"]


def test_unknown_timezone():
    with pytest.raises(ValidationError):
        Settings(timezone="Mars/Olympus")


def test_nesting_level_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(max_nesting_level=0)


def test_from_env():
    settings = Settings.from_env(
        {
            "WEBUTILS_TIMEZONE": "Europe/Berlin",
            "WEBUTILS_LANGUAGE": "de",
            "WEBUTILS_BODY_METHODS": "POST,PATCH",
            "WEBUTILS_MAX_NESTING_LEVEL": "3",
            "OTHER": "ignored",
        }
    )
    assert settings.timezone == "Europe/Berlin"
    assert settings.language == "de"
    assert settings.body_methods == ["POST", "PATCH"]
    assert settings.max_nesting_level == 3
    assert settings.date_format == "Y-m-d H:i:s"


def test_from_empty_env():
    assert Settings.from_env({}) == Settings()


def test_from_process_env(monkeypatch):
    monkeypatch.setenv("WEBUTILS_DEFAULT_REQUEST_URI", "/cli")
    assert Settings.from_env().default_request_uri == "/cli"
