"""Pytest configuration and shared fixtures."""

import pytest

from webutils.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def berlin_settings() -> Settings:
    return Settings(timezone="Europe/Berlin", language="de")
