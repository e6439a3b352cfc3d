"""Top-level package for stockbt.

This package provides an event-driven backtesting engine for stock
trading strategies.  Price data is loaded via :mod:`stockbt.data`,
replayed against a simulated exchange in :mod:`stockbt.backtest` and
reported through the command-line interface in :mod:`stockbt.cli`.
"""

__all__ = [
    "backtest",
    "cli",
    "config",
    "data",
    "errors",
]
