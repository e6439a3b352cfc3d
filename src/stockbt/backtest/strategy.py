"""Strategy interface and a sample threshold strategy.

Strategies receive every price observation of a backtest through
:meth:`Strategy.handle_new_price`.  They hold a reference to the
exchange they trade on and submit orders to it directly from inside
the handler; the handler itself returns nothing.  Strategies own their
state and must not rely on tickers of one row arriving in a fixed
order.
"""

from __future__ import annotations

import logging

from ..config import (
    DEFAULT_BUY_THRESHOLD,
    DEFAULT_ORDER_SIZE,
    DEFAULT_PERFORMANCE_THRESHOLD,
)
from ..data.models import PricePoint
from .exchange import OrderStatus, StockExchange

logger = logging.getLogger(__name__)


class Strategy:
    """Abstract base class for strategies.

    Strategies must implement the ``handle_new_price`` method.  The
    driver calls it once per ticker and row, after the exchange has
    recorded the price as current.
    """

    def handle_new_price(self, price: PricePoint) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class ThresholdStrategy(Strategy):
    """Buy below a fixed price, exit at a performance target or on a loss.

    For each observation the strategy opens a long position of
    ``order_size`` shares when the opening price is below
    ``buy_threshold`` and the ticker is flat.  An open position is
    cleared as soon as the relative change of the opening price
    against the oldest lot price reaches ``performance_threshold`` or
    turns negative.

    Parameters
    ----------
    exchange : StockExchange
        Exchange the orders are sent to.
    buy_threshold : float
        Opening price below which a position is opened.
    performance_threshold : float
        Relative gain at which the position is taken off (0.05 = 5%).
    order_size : int
        Number of shares bought per entry.
    """

    def __init__(
        self,
        exchange: StockExchange,
        buy_threshold: float = DEFAULT_BUY_THRESHOLD,
        performance_threshold: float = DEFAULT_PERFORMANCE_THRESHOLD,
        order_size: int = DEFAULT_ORDER_SIZE,
    ) -> None:
        if order_size <= 0:
            raise ValueError(f"order_size must be positive, got {order_size}")
        self.exchange = exchange
        self.buy_threshold = buy_threshold
        self.performance_threshold = performance_threshold
        self.order_size = order_size
        self.rejections = 0

    def handle_new_price(self, price: PricePoint) -> None:
        ticker = price.ticker
        if price.open < self.buy_threshold and self.exchange.net_position(ticker) == 0:
            status = self.exchange.market_order(
                ticker, self.order_size, price.open, price.window_start
            )
            if status is OrderStatus.REJECTED:
                self.rejections += 1
                logger.warning(
                    "Order rejected: %s %d @ %s (t=%d)",
                    ticker, self.order_size, price.open, price.window_start,
                )
            return

        lots = self.exchange.open_positions().get(ticker)
        if not lots:
            return
        buy_in = lots[0].price
        change = (price.open - buy_in) / buy_in
        if change >= self.performance_threshold or change < 0:
            if self.exchange.market_clear(ticker) is OrderStatus.REJECTED:
                self.rejections += 1
                logger.warning("Clearing %s was rejected", ticker)


__all__ = ["Strategy", "ThresholdStrategy"]
