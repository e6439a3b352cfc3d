"""Exception types raised by stockbt.

Rejected orders are not exceptions: the exchange reports them through
its return value so that strategies can react.  The classes below
cover the failures that abort a run.
"""

from __future__ import annotations


class StockbtError(Exception):
    """Base class for all stockbt errors."""


class MissingDataError(StockbtError, ValueError):
    """Price data is absent, malformed or inconsistent across tickers."""


class EmptySeriesError(StockbtError, ValueError):
    """A statistic was requested over a series without any samples."""


__all__ = ["StockbtError", "MissingDataError", "EmptySeriesError"]
