"""Prompt templates and loaders for the forecaster's AI features."""

from .base import PromptTemplate, available_prompts, get_prompt_text, load_prompt

__all__ = ["PromptTemplate", "available_prompts", "get_prompt_text", "load_prompt"]
