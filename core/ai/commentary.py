"""AI-assisted commentary on a financial profile."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

import pandas as pd
from openai import APIError, OpenAI

from analytics.validation import validate_forecast
from config.settings import Settings, get_ai_settings
from core.models import FinancialProfile, Forecast
from prompts.base import get_prompt_text

PROMPT_COMMENTARY = "commentary"
PROMPT_CLARIFICATION = "clarification"
MAX_OUTPUT_TOKENS = 400
MAX_RECURRING_ITEMS = 12
MAX_CLARIFICATION_ITEMS = 25

__all__ = [
    "AICommentaryError",
    "AICommentaryRequest",
    "build_commentary_request",
    "generate_clarification_questions",
    "generate_forecast_commentary",
    "parse_model_forecast",
]

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


class AICommentaryError(RuntimeError):
    """Raised when AI commentary cannot be generated or parsed."""


@dataclass(frozen=True, slots=True)
class AICommentaryRequest:
    payload: Mapping[str, Any]
    analysis_date: str
    model: str
    mode: str


def _resolve_openai_client() -> OpenAI:
    settings = get_ai_settings()
    if not settings.openai_api_key:
        raise AICommentaryError(
            "Missing OpenAI API key. Add it to .streamlit/secrets.toml under [openai]."
        )
    return OpenAI(**settings.openai_client_kwargs)


def _coerce_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _summarise_recurring(entries: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    for entry in entries:
        items.append(
            {
                "merchant": str(entry.get("merchant", "")),
                "type": str(entry.get("type", "")),
                "cadence": str(entry.get("cadence", "")),
                "amount": _coerce_float(entry.get("recent_amount", entry.get("typical_amount", 0.0))),
                "fixed": bool(entry.get("amount_is_fixed", False)),
                "trend": _coerce_float(entry.get("amount_trend", 0.0)),
                "last_seen": str(entry.get("last_occurrence", "")),
                "confidence": str(entry.get("confidence", "")),
            }
        )
    return items[:MAX_RECURRING_ITEMS]


def _summarise_discretionary(entries: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    for entry in entries:
        weekly = _coerce_float(entry.get("avg_weekly_count", 0.0))
        amount = _coerce_float(entry.get("recent_avg_amount", 0.0))
        items.append(
            {
                "category": str(entry.get("category", "")),
                "per_week": round(weekly, 2),
                "typical_amount": round(amount, 2),
                "weekly_spend": round(weekly * amount, 2),
                "merchants": list(entry.get("typical_merchants", []))[:3],
            }
        )
    return items


def _clarification_candidates(profile: FinancialProfile) -> list[dict[str, Any]]:
    """Recent rows whose category gives little away about what they were."""

    candidates: list[dict[str, Any]] = []
    for row in profile.get("recent_transactions", []):
        if row["category"] in {"Other", "Transfer", "Shopping"} or row["merchant"] == "Unknown":
            candidates.append(dict(row))
    return candidates[-MAX_CLARIFICATION_ITEMS:]


def build_commentary_request(profile: FinancialProfile, mode: str = PROMPT_COMMENTARY) -> AICommentaryRequest:
    safe_mode = mode if mode in {PROMPT_COMMENTARY, PROMPT_CLARIFICATION} else PROMPT_COMMENTARY

    window = {
        "analysis_date": profile["analysis_date"],
        "forecast_start": profile["forecast_start"],
        "forecast_end": profile["forecast_end"],
        "history_span_days": int(profile.get("history_span_days", 0)),
        "transactions_analyzed": int(profile.get("total_transactions_analyzed", 0)),
    }

    if safe_mode == PROMPT_CLARIFICATION:
        payload = {
            "window": window,
            "known_recurring": [entry["merchant"] for entry in profile.get("recurring_series", [])],
            "ambiguous_transactions": _clarification_candidates(profile),
        }
    else:
        payload = {
            "window": window,
            "monthly_medians": dict(profile.get("monthly_medians", {})),
            "recurring": _summarise_recurring(profile.get("recurring_series", [])),
            "discretionary": _summarise_discretionary(profile.get("discretionary_patterns", [])),
            "variable_income": profile.get("variable_income"),
        }

    return AICommentaryRequest(
        payload=payload,
        analysis_date=profile["analysis_date"],
        model=get_ai_settings().openai_model,
        mode=safe_mode,
    )


def _default_client_factory() -> OpenAI:
    return _resolve_openai_client()


def _complete(request: AICommentaryRequest, guidance: str, client_factory: Callable[[], OpenAI] | None) -> str:
    client = (client_factory or _default_client_factory)()
    system_prompt = get_prompt_text(request.mode)
    user_message = (
        f"Financial profile as of {request.analysis_date}.\n"
        f"Guidance: {guidance}\n\n"
        "Data (JSON):\n"
        f"{_format_payload(request.payload)}"
    )

    try:
        response = client.chat.completions.create(
            model=request.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            max_tokens=MAX_OUTPUT_TOKENS,
            temperature=0.2,
        )
    except APIError as exc:
        raise AICommentaryError(f"OpenAI API error: {exc}") from exc

    try:
        return response.choices[0].message.content or ""
    except (AttributeError, IndexError) as exc:  # pragma: no cover - unexpected SDK output
        raise AICommentaryError("Unexpected response format from OpenAI API") from exc


def generate_forecast_commentary(
    profile: FinancialProfile,
    *,
    client_factory: Callable[[], OpenAI] | None = None,
) -> list[str]:
    """Return short bullet points describing the upcoming 90 days."""

    request = build_commentary_request(profile, mode=PROMPT_COMMENTARY)
    text = _complete(request, "Summarise what the next 90 days look like.", client_factory)
    bullets = _normalise_output(text)
    if not bullets:
        raise AICommentaryError("OpenAI response was empty")
    return bullets


def generate_clarification_questions(
    profile: FinancialProfile,
    *,
    client_factory: Callable[[], OpenAI] | None = None,
) -> list[str]:
    """Return questions about transactions the engine could not classify confidently.

    Profiles with nothing ambiguous return an empty list without calling the model.
    """

    request = build_commentary_request(profile, mode=PROMPT_CLARIFICATION)
    if not request.payload["ambiguous_transactions"]:
        return []
    text = _complete(request, "Ask about the ambiguous transactions only.", client_factory)
    return _normalise_output(text)


def parse_model_forecast(
    text: str,
    today: pd.Timestamp,
    *,
    settings: Settings | None = None,
) -> Forecast:
    """Parse a model-written forecast and hold it to the engine's output rules.

    Accepts bare JSON or JSON inside a Markdown code fence.
    """

    match = _FENCE_PATTERN.search(text or "")
    body = match.group(1) if match else (text or "")
    try:
        raw = json.loads(body)
    except json.JSONDecodeError as exc:
        raise AICommentaryError("Model forecast is not valid JSON") from exc
    if not isinstance(raw, Mapping):
        raise AICommentaryError("Model forecast must be a JSON object")

    forecast = validate_forecast(raw, today, settings=settings)
    logger.debug("Parsed %d predicted transactions from model output", len(forecast["predicted_transactions"]))
    return forecast


def _format_payload(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _normalise_output(response_text: str) -> list[str]:
    normalized: list[str] = []
    for line in response_text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("- ") or stripped.startswith("• "):
            stripped = stripped[2:].strip()
        normalized.append(stripped)
    return normalized
