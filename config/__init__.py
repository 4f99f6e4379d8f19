"""Application configuration utilities."""

from .settings import DEFAULT_OPENAI_MODEL, AISettings, Settings, get_ai_settings, get_settings

__all__ = [
    "DEFAULT_OPENAI_MODEL",
    "AISettings",
    "Settings",
    "get_ai_settings",
    "get_settings",
]
