"""Core domain package for the transaction forecaster.

The orchestration lives in :mod:`core.forecast_service`; import it from the
submodule, since the analytics stages depend on :mod:`core.models`.
"""

from .models import (
    CleanTransaction,
    DiscretionaryPattern,
    FinancialProfile,
    Forecast,
    PredictedTransaction,
    RecurringSeries,
    VariableIncomePattern,
)

__all__ = [
    "CleanTransaction",
    "DiscretionaryPattern",
    "FinancialProfile",
    "Forecast",
    "PredictedTransaction",
    "RecurringSeries",
    "VariableIncomePattern",
]
