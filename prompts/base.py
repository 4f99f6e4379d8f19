"""Prompt loading utilities for forecast commentary."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

__all__ = ["PromptTemplate", "available_prompts", "get_prompt_text", "load_prompt"]

PROMPTS_DIR = Path(__file__).resolve().parent


@dataclass(frozen=True)
class PromptTemplate:
    """A system prompt shipped with the package."""

    name: str
    content: str

    @property
    def line_count(self) -> int:
        return len(self.content.splitlines())


def available_prompts() -> tuple[str, ...]:
    """Stems of every ``*.txt`` template in the prompts directory."""

    return tuple(sorted(path.stem for path in PROMPTS_DIR.glob("*.txt")))


@lru_cache(maxsize=8)
def load_prompt(name: str) -> PromptTemplate:
    """Load a prompt by stem name; missing or empty templates are errors."""

    path = PROMPTS_DIR / f"{name}.txt"
    if not path.is_file():
        raise FileNotFoundError(f"Prompt template not found: {path}")

    content = path.read_text(encoding="utf-8").strip()
    if not content:
        raise ValueError(f"Prompt template is empty: {path}")
    return PromptTemplate(name=name, content=content)


def get_prompt_text(name: str) -> str:
    return load_prompt(name).content
