"""Shared test fixtures and configuration."""

import os

import pytest

from inverted_search.config import reset_settings_cache


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop INVERTED_SEARCH_* variables so every test starts from default settings."""
    for key in list(os.environ):
        if key.upper().startswith("INVERTED_SEARCH_"):
            monkeypatch.delenv(key)
    reset_settings_cache()
    yield
    reset_settings_cache()
