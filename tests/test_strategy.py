"""Tests for the sample threshold strategy.

Each price is registered on the exchange before it is handed to the
strategy, exactly as the driver does.
"""

import logging

import pytest

from stockbt.backtest.exchange import StockExchange
from stockbt.backtest.strategy import ThresholdStrategy
from stockbt.data.models import PriceRecord


def _tick(strategy: ThresholdStrategy, ticker: str, open_: float, ts: int) -> None:
    """Register ``open_`` as the current price and notify the strategy."""
    record = PriceRecord(
        ticker=ticker, volume=1, open=open_, close=open_, high=open_, low=open_,
        window_start=ts, transactions=1,
    )
    strategy.exchange.update_price(record)
    strategy.handle_new_price(record)


def test_enters_below_threshold_and_takes_profit():
    ex = StockExchange(1_000_000.0)
    strat = ThresholdStrategy(ex, buy_threshold=100.0, performance_threshold=0.05, order_size=100)
    _tick(strat, "AAPL", 90.0, 1)
    assert ex.net_position("AAPL") == 100
    _tick(strat, "AAPL", 92.0, 2)
    assert ex.net_position("AAPL") == 100
    _tick(strat, "AAPL", 95.0, 3)
    assert ex.net_position("AAPL") == 0
    assert ex.result.abs_performance == pytest.approx(500.0)


def test_exits_on_any_loss():
    ex = StockExchange(1_000_000.0)
    strat = ThresholdStrategy(ex, buy_threshold=100.0, performance_threshold=0.05, order_size=100)
    _tick(strat, "AAPL", 90.0, 1)
    _tick(strat, "AAPL", 85.0, 2)
    assert ex.net_position("AAPL") == 0
    assert ex.result.abs_performance == pytest.approx(-500.0)
    assert ex.result.max_drawdown == pytest.approx(-500.0)


def test_does_not_enter_above_threshold():
    ex = StockExchange(1_000_000.0)
    strat = ThresholdStrategy(ex, buy_threshold=50.0)
    _tick(strat, "MSFT", 300.0, 1)
    assert ex.transactions == []


def test_tickers_are_traded_independently():
    ex = StockExchange(1_000_000.0)
    strat = ThresholdStrategy(ex, buy_threshold=100.0, performance_threshold=0.1, order_size=10)
    _tick(strat, "MSFT", 50.0, 1)
    _tick(strat, "AAPL", 20.0, 1)
    _tick(strat, "AAPL", 23.0, 2)
    assert ex.net_position("AAPL") == 0
    assert ex.net_position("MSFT") == 10


def test_rejected_order_is_logged(caplog):
    ex = StockExchange(1_000.0)
    strat = ThresholdStrategy(ex, buy_threshold=100.0, order_size=100)
    with caplog.at_level(logging.WARNING, logger="stockbt.backtest.strategy"):
        _tick(strat, "AAPL", 50.0, 1)
    assert strat.rejections == 1
    assert ex.net_position("AAPL") == 0
    assert "rejected" in caplog.text


def test_order_size_must_be_positive():
    with pytest.raises(ValueError):
        ThresholdStrategy(StockExchange(1.0), order_size=0)
