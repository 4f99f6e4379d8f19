"""Centralised configuration handling for the forecaster."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Mapping

import streamlit as st
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from config.patterns import NEVER_RECURRING_PATTERNS, SUBSCRIPTION_PATTERNS

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


def _secrets_table(name: str) -> Mapping[str, Any] | None:
    """Return the ``[name]`` table of ``.streamlit/secrets.toml`` when one is configured."""

    try:
        table = st.secrets.get(name) if hasattr(st, "secrets") else None
    except Exception:  # pragma: no cover - st.secrets raises when no secrets.toml is found
        return None
    if table is None:
        return None
    return table if isinstance(table, Mapping) else dict(table)


class Settings(BaseSettings):
    """Tuning knobs for the forecasting pipeline, sourced from ``FORECAST_*`` env vars."""

    forecast_days: int = Field(default=90, ge=1)
    window_slack_days: int = Field(default=1, ge=0)

    split_max_gap_days: int = Field(default=5, ge=0)
    split_max_span_days: int = Field(default=10, ge=0)
    split_identical_min_amount: float = Field(default=250.0, ge=0)

    discretionary_lookback_days: int = Field(default=182, ge=7)
    variable_income_lookback_days: int = Field(default=90, ge=7)
    variable_income_min_amount: float = Field(default=50.0, ge=0)
    recent_transactions_limit: int = Field(default=60, ge=0)

    never_recurring_patterns: tuple[str, ...] = NEVER_RECURRING_PATTERNS
    subscription_patterns: tuple[str, ...] = SUBSCRIPTION_PATTERNS

    model_config = SettingsConfigDict(env_prefix="FORECAST_", extra="ignore", frozen=True)

    @property
    def window_end_offset(self) -> int:
        """Days after the analysis date that the forecast window may reach."""

        return self.forecast_days + self.window_slack_days


class AISettings(BaseSettings):
    """Text-generation settings sourced from env vars and Streamlit secrets."""

    openai_api_key: str | None = None
    openai_base_url: str | None = None
    openai_model: str = DEFAULT_OPENAI_MODEL

    model_config = SettingsConfigDict(env_prefix="OPENAI_", extra="ignore")

    @property
    def openai_client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.openai_api_key:
            kwargs["api_key"] = self.openai_api_key
        if self.openai_base_url:
            kwargs["base_url"] = self.openai_base_url
        return kwargs


@lru_cache
def get_settings() -> Settings:
    """Load and cache pipeline settings."""

    return Settings()


@lru_cache
def get_ai_settings() -> AISettings:
    """Load and cache text-generation settings."""

    overrides: dict[str, Any] = {}
    secrets_section = _secrets_table("openai")
    if secrets_section:
        overrides = {
            "openai_api_key": secrets_section.get("api_key")
            or secrets_section.get("OPENAI_API_KEY"),
            "openai_base_url": secrets_section.get("api_base"),
            "openai_model": secrets_section.get("model", DEFAULT_OPENAI_MODEL),
        }

    return AISettings(**{k: v for k, v in overrides.items() if v is not None})
