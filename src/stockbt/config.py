"""
Configuration constants for the stockbt project.

This module centralises configuration values that are used across the
application.  New values should be added here deliberately.  Values
that may be overridden at runtime are read from environment variables
through the small helpers at the bottom of the module; command-line
options take precedence over the environment.
"""

import os
from typing import Final

PROJECT_NAME: Final[str] = "stockbt"

# Exact header expected at the top of every price CSV file.  The layout
# follows the flat-file minute aggregate format: one row per ticker and
# time window, ``window_start`` given in milliseconds since epoch.
CSV_HEADER: Final[list[str]] = [
    "ticker",
    "volume",
    "open",
    "close",
    "high",
    "low",
    "window_start",
    "transactions",
]

# Starting cash of a simulated exchange when nothing else is configured.
DEFAULT_INITIAL_BUDGET: Final[float] = 1_000_000_000.0

# Parameters of the sample threshold strategy.
DEFAULT_BUY_THRESHOLD: Final[float] = 100.0
DEFAULT_PERFORMANCE_THRESHOLD: Final[float] = 0.05
DEFAULT_ORDER_SIZE: Final[int] = 100

# Environment variables.
LOG_LEVEL_ENV: Final[str] = "STOCKBT_LOG_LEVEL"
BUDGET_ENV: Final[str] = "STOCKBT_BUDGET"

DEFAULT_LOG_LEVEL: Final[str] = "WARNING"


def get_log_level() -> str:
    """Return the configured log level name (upper case)."""
    return os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL


def get_default_budget() -> float:
    """Return the initial budget from the environment or the default.

    Raises
    ------
    ValueError
        If ``STOCKBT_BUDGET`` is set but is not a positive number.
    """
    raw = os.getenv(BUDGET_ENV)
    if raw is None or not raw.strip():
        return DEFAULT_INITIAL_BUDGET
    budget = float(raw)
    if budget <= 0:
        raise ValueError(f"{BUDGET_ENV} must be positive, got {raw!r}")
    return budget


__all__ = [
    "PROJECT_NAME",
    "CSV_HEADER",
    "DEFAULT_INITIAL_BUDGET",
    "DEFAULT_BUY_THRESHOLD",
    "DEFAULT_PERFORMANCE_THRESHOLD",
    "DEFAULT_ORDER_SIZE",
    "LOG_LEVEL_ENV",
    "BUDGET_ENV",
    "DEFAULT_LOG_LEVEL",
    "get_log_level",
    "get_default_budget",
]
