from __future__ import annotations

import pytest
import streamlit as st
from pydantic import ValidationError

from config.settings import DEFAULT_OPENAI_MODEL, Settings, get_ai_settings, get_settings


def test_defaults():
    settings = get_settings()

    assert settings.forecast_days == 90
    assert settings.window_end_offset == 91
    assert settings.discretionary_lookback_days == 182
    assert settings is get_settings()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FORECAST_FORECAST_DAYS", "30")
    monkeypatch.setenv("FORECAST_SPLIT_MAX_GAP_DAYS", "3")

    settings = Settings()

    assert settings.forecast_days == 30
    assert settings.split_max_gap_days == 3
    assert settings.window_end_offset == 31


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        Settings(forecast_days=0)


def test_settings_are_frozen():
    settings = Settings()

    with pytest.raises(ValidationError):
        settings.forecast_days = 10


def test_ai_settings_read_streamlit_secrets(monkeypatch):
    monkeypatch.setattr(
        st,
        "secrets",
        {"openai": {"api_key": "sk-test", "api_base": "https://example.invalid/v1"}},
        raising=False,
    )
    get_ai_settings.cache_clear()

    settings = get_ai_settings()

    assert settings.openai_model == DEFAULT_OPENAI_MODEL
    assert settings.openai_client_kwargs == {"api_key": "sk-test", "base_url": "https://example.invalid/v1"}


def test_ai_settings_ignore_unrelated_secret_tables(monkeypatch):
    monkeypatch.delenv("OPENAI_OPENAI_API_KEY", raising=False)
    monkeypatch.setattr(st, "secrets", {"database": {"url": "sqlite://"}}, raising=False)
    get_ai_settings.cache_clear()

    settings = get_ai_settings()

    assert settings.openai_api_key is None
    assert settings.openai_client_kwargs == {}
