"""Backtesting package for stockbt.

This package implements a deterministic, event-driven backtesting
engine for stock strategies.  A strategy reacts to every price of a
replayed stream and trades on a simulated exchange that books whole
shares into FIFO lots, keeps the cash account and accumulates the
realized performance of the run.

Submodules:

* ``lots`` – FIFO lot queues and signed net amounts per ticker.
* ``exchange`` – Order execution, position flips and valuation.
* ``result`` – Realized P&L, drawdown and volatility accounting.
* ``strategy`` – Strategy interface and a sample threshold strategy.
* ``engine`` – The driver replaying a price stream into a strategy.
* ``io`` – Writing backtest artifacts (transactions, series, summary).
"""

from .engine import Backtest, format_result  # noqa: F401
from .exchange import Exchange, OrderStatus, StockExchange  # noqa: F401
from .lots import Lot, LotBook  # noqa: F401
from .result import Result  # noqa: F401
from .strategy import Strategy, ThresholdStrategy  # noqa: F401
