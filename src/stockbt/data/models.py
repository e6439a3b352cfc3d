"""Pydantic models for price observations.

A :class:`PriceRecord` is the canonical representation of one row of
price data: the OHLCV aggregate of a single ticker over one time
window.  Records are created by the ingest layer and never mutated
afterwards.

The engine itself only ever reads the ticker, the opening price and
the window start of a record.  :class:`PricePoint` captures exactly
that surface so that strategies and tests can feed lighter objects
into the exchange.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field


@runtime_checkable
class PricePoint(Protocol):
    """Minimal view of a price observation consumed by the engine."""

    @property
    def ticker(self) -> str: ...

    @property
    def open(self) -> float: ...

    @property
    def window_start(self) -> int: ...


class PriceRecord(BaseModel):
    """Represents a single OHLCV aggregate for one ticker.

    Attributes:
        ticker: The stock symbol (e.g. "AAPL").
        volume: The traded volume within the window.
        open: The opening price.
        close: The closing price.
        high: The highest price.
        low: The lowest price.
        window_start: Start of the aggregation window in milliseconds
            since the epoch.
        transactions: Number of trades within the window.
    """

    ticker: str = Field(..., min_length=1)
    volume: int
    open: float
    close: float
    high: float
    low: float
    window_start: int
    transactions: int

    model_config = {"frozen": True}

    @property
    def timestamp(self) -> int:
        """Alias for ``window_start`` (milliseconds since epoch)."""
        return self.window_start


__all__ = ["PricePoint", "PriceRecord"]
