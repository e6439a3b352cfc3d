"""Simulated exchanges for backtesting.

An exchange owns the cash account and the open book of a strategy.
Strategies call :meth:`StockExchange.market_order` and
:meth:`StockExchange.market_clear` from inside their price handler; the
driver keeps the exchange's view of current prices up to date and
samples its equity between rows.

Order execution in :class:`StockExchange` is immediate and complete:
every order is filled at the given price with no fees or slippage.
Orders are matched against the open lots of a ticker in FIFO order.
An order in the direction of the open position (or against a flat
book) opens a new lot.  An opposite order consumes the oldest lots,
realizing P&L at their cost basis, and once the book is exhausted any
remainder opens a fresh lot on the other side.  Cash moves by
``-amount * price`` for every fill, so a reducing fill returns the
principal of the consumed shares together with their realized P&L.

The only check performed before execution is the budget check:
``remaining_budget - amount * price`` must not become negative.
Short sales raise cash and therefore always pass.  A rejected order
leaves every piece of state untouched.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional

from ..data.models import PricePoint
from ..data.stream import PriceStream
from .lots import Lot, LotBook, sign
from .result import Result

logger = logging.getLogger(__name__)

# Relative tolerance for the cash identity checked after each operation.
_CASH_TOLERANCE = 1e-9


class OrderStatus(str, Enum):
    """Outcome of an order submitted to an exchange."""

    OK = "OK"
    REJECTED = "REJECTED"


class Exchange(ABC):
    """Base class for exchanges driven by :class:`~stockbt.backtest.engine.Backtest`.

    The exchange keeps a reference to the price stream it is replayed
    from and the most recent price observed for every ticker.
    """

    def __init__(self, initial_budget: float, stream: Optional[PriceStream] = None) -> None:
        if initial_budget <= 0:
            raise ValueError(f"initial_budget must be positive, got {initial_budget}")
        self._initial_budget = float(initial_budget)
        self.stream = stream
        self.current_prices: Dict[str, PricePoint] = {}

    @property
    def initial_budget(self) -> float:
        return self._initial_budget

    def update_price(self, price: PricePoint) -> None:
        """Record ``price`` as the latest observation for its ticker."""
        self.current_prices[price.ticker] = price

    def current_price(self, ticker: str) -> Optional[PricePoint]:
        return self.current_prices.get(ticker)

    @property
    @abstractmethod
    def result(self) -> Result:
        """Performance record of this exchange."""

    @abstractmethod
    def current_equity(self) -> float:
        """Cash plus the market value of all open positions."""

    def sample_performance(self) -> float:
        """Append the current relative equity return to the result series."""
        value = (self.current_equity() - self.initial_budget) / self.initial_budget
        self.result.sample(value)
        return value

    def finalize(self) -> Result:
        """Close the run and compute end-of-run statistics."""
        return self.result.finalize()


class StockExchange(Exchange):
    """Exchange for whole-share stock trading with FIFO lot matching.

    Parameters
    ----------
    initial_budget : float
        Starting cash; also the base for relative performance.
    stream : PriceStream, optional
        Price data the exchange is replayed against.
    """

    def __init__(self, initial_budget: float, stream: Optional[PriceStream] = None) -> None:
        super().__init__(initial_budget, stream)
        self._remaining_budget = self._initial_budget
        self.book = LotBook()
        # Running sum of lot.amount * lot.price over the open book.
        self._cost_basis = 0.0
        self.transactions: List[Lot] = []
        self._result = Result(initial_budget=self._initial_budget)

    @property
    def remaining_budget(self) -> float:
        return self._remaining_budget

    @property
    def result(self) -> Result:
        return self._result

    def market_order(self, ticker: str, amount: int, price: float, timestamp: int) -> OrderStatus:
        """Execute a market order of ``amount`` shares at ``price``.

        A positive amount buys, a negative amount sells.  Returns
        :attr:`OrderStatus.REJECTED` without changing any state when the
        order would overdraw the cash account.
        """
        if amount == 0:
            raise ValueError("Order amount must be non-zero")
        if int(amount) != amount:
            raise ValueError(f"Order amount must be a whole number of shares, got {amount}")
        amount = int(amount)
        price = float(price)
        if self._remaining_budget - amount * price < 0:
            logger.debug(
                "Rejected %s %d @ %.4f: cost exceeds remaining budget %.2f",
                ticker, amount, price, self._remaining_budget,
            )
            return OrderStatus.REJECTED

        remaining = amount
        while remaining != 0:
            pos_sign = sign(self.book.net(ticker))
            if pos_sign == 0 or sign(remaining) == pos_sign:
                self.book.push_lot(ticker, Lot(ticker, remaining, price, timestamp))
                self._remaining_budget -= remaining * price
                self._cost_basis += remaining * price
                remaining = 0
            else:
                remaining = self._reduce_oldest(ticker, remaining, price)

        self.transactions.append(Lot(ticker, amount, price, timestamp))
        logger.debug(
            "Filled %s %d @ %.4f; net=%d cash=%.2f",
            ticker, amount, price, self.book.net(ticker), self._remaining_budget,
        )
        assert self.check_invariants(ticker)
        return OrderStatus.OK

    def _reduce_oldest(self, ticker: str, remaining: int, price: float) -> int:
        """Consume shares of the oldest lot against an opposite order.

        Returns the part of ``remaining`` that is still unfilled.
        """
        oldest = self.book.peek_oldest(ticker)
        lot_sign = sign(oldest.amount)
        consumable = min(abs(oldest.amount), abs(remaining))
        if oldest.is_long:
            realized = consumable * (price - oldest.price)
        else:
            realized = consumable * (oldest.price - price)

        # The fill closes ``consumable`` shares, i.e. trades -lot_sign * consumable.
        self._remaining_budget += lot_sign * consumable * price
        self._cost_basis -= lot_sign * consumable * oldest.price
        self._result.record_fill(realized)

        if consumable == abs(oldest.amount):
            self.book.pop_oldest(ticker)
            return remaining + lot_sign * consumable
        self.book.replace_oldest(ticker, oldest.amount - lot_sign * consumable)
        return 0

    def buy(self, ticker: str, amount: int, price: float, timestamp: int = 0) -> OrderStatus:
        return self.market_order(ticker, abs(amount), price, timestamp)

    def sell(self, ticker: str, amount: int, price: float, timestamp: int = 0) -> OrderStatus:
        return self.market_order(ticker, -abs(amount), price, timestamp)

    def market_clear(self, ticker: str) -> OrderStatus:
        """Flatten the position in ``ticker`` at its current opening price.

        A flat book is a no-op.  Clearing a ticker without an observed
        price is rejected.
        """
        net = self.book.net(ticker)
        if net == 0:
            return OrderStatus.OK
        current = self.current_prices.get(ticker)
        if current is None:
            logger.debug("Rejected clear of %s: no current price", ticker)
            return OrderStatus.REJECTED
        return self.market_order(ticker, -net, current.open, current.window_start)

    def open_positions(self) -> Dict[str, List[Lot]]:
        """Return the open lots per ticker, oldest first."""
        return self.book.snapshot()

    def net_position(self, ticker: str) -> int:
        return self.book.net(ticker)

    def current_portfolio_value(self) -> float:
        """Unrealized P&L of the open book at the latest opening prices.

        Tickers without an observed price are skipped.  Cash is not
        included.
        """
        value = 0.0
        for ticker in self.book.tickers():
            current = self.current_prices.get(ticker)
            if current is None:
                continue
            for lot in self.book.lots(ticker):
                value += lot.amount * (current.open - lot.price)
        return value

    def current_equity(self) -> float:
        """Cash plus open lots marked at the latest opening price.

        Lots of tickers without an observed price are marked at their
        cost basis.
        """
        equity = self._remaining_budget
        for ticker in self.book.tickers():
            current = self.current_prices.get(ticker)
            for lot in self.book.lots(ticker):
                mark = current.open if current is not None else lot.price
                equity += lot.amount * mark
        return equity

    def check_invariants(self, ticker: Optional[str] = None) -> bool:
        """Verify book consistency, the cash identity and the drawdown bound.

        With ``ticker`` only that ticker's lots are checked and the cash
        identity uses the running cost basis, so the per-order check
        does not grow with the size of the book.  Without it every lot
        is walked and the running cost basis is verified as well.
        """
        expected = self._initial_budget + self._result.abs_performance
        tolerance = _CASH_TOLERANCE * max(1.0, abs(expected))
        self.book.check_invariants(ticker)
        if ticker is None:
            cost_basis = sum(
                lot.amount * lot.price
                for name in self.book.tickers()
                for lot in self.book.lots(name)
            )
            if abs(cost_basis - self._cost_basis) > tolerance:
                raise AssertionError(
                    f"Running cost basis {self._cost_basis} != {cost_basis}"
                )
        actual = self._remaining_budget + self._cost_basis
        if abs(actual - expected) > tolerance:
            raise AssertionError(
                f"Cash identity violated: {actual} != {expected}"
            )
        if self._result.max_drawdown > 0:
            raise AssertionError("max_drawdown must not be positive")
        return True


__all__ = ["OrderStatus", "Exchange", "StockExchange"]
