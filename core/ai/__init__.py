"""AI-focused helpers for the forecaster."""

from .commentary import (
    AICommentaryError,
    AICommentaryRequest,
    build_commentary_request,
    generate_clarification_questions,
    generate_forecast_commentary,
    parse_model_forecast,
)

__all__ = [
    "AICommentaryError",
    "AICommentaryRequest",
    "build_commentary_request",
    "generate_clarification_questions",
    "generate_forecast_commentary",
    "parse_model_forecast",
]
