"""Tests for the backtest driver.

The driver samples relative performance before each row pull, marks
every record as the current price before handing it to the strategy
and finalizes volatility after the stream ends.  A scripted strategy
makes the trades deterministic.
"""

import math

import pytest

from stockbt.backtest.engine import Backtest, format_result
from stockbt.backtest.exchange import StockExchange
from stockbt.backtest.strategy import Strategy
from stockbt.data.models import PriceRecord
from stockbt.data.stream import PriceStream


def _records(ticker: str, opens: list[float]) -> list[PriceRecord]:
    return [
        PriceRecord(
            ticker=ticker,
            volume=1,
            open=o,
            close=o,
            high=o,
            low=o,
            window_start=1_000 * (i + 1),
            transactions=1,
        )
        for i, o in enumerate(opens)
    ]


class _BuyFirstTick(Strategy):
    """Buys a fixed size on the very first observation, records the rest."""

    def __init__(self, exchange: StockExchange, size: int) -> None:
        self.exchange = exchange
        self.size = size
        self.seen: list[tuple[str, float, float]] = []

    def handle_new_price(self, price) -> None:
        current = self.exchange.current_price(price.ticker)
        self.seen.append((price.ticker, price.open, current.open))
        if len(self.seen) == 1:
            self.exchange.market_order(price.ticker, self.size, price.open, price.window_start)


def test_run_samples_equity_and_computes_volatility():
    stream = PriceStream({"AAPL": _records("AAPL", [10.0, 12.0, 8.0])})
    exchange = StockExchange(1_000.0, stream)
    strategy = _BuyFirstTick(exchange, 10)
    result = Backtest(strategy, exchange).run()
    # One sample per row plus the terminal sample
    assert result.performance_series == pytest.approx([0.0, 0.0, 0.02, -0.02])
    assert result.volatility == pytest.approx(math.sqrt(0.0002))
    # Nothing was closed, so no realized performance
    assert result.abs_performance == 0.0
    assert exchange.net_position("AAPL") == 10


def test_strategy_sees_price_registered_as_current():
    stream = PriceStream({"AAPL": _records("AAPL", [1.0, 2.0]), "MSFT": _records("MSFT", [5.0, 6.0])})
    exchange = StockExchange(1_000.0, stream)
    strategy = _BuyFirstTick(exchange, 1)
    bt = Backtest(strategy, exchange)
    bt.run()
    assert bt.rows == 2
    assert len(strategy.seen) == 4
    assert all(open_ == current for _, open_, current in strategy.seen)


def test_empty_stream_finishes_with_single_sample():
    exchange = StockExchange(1_000.0, PriceStream({}))
    result = Backtest(_BuyFirstTick(exchange, 1), exchange).run()
    assert result.performance_series == [0.0]
    assert result.volatility == 0.0
    assert result.abs_performance == 0.0


def test_unequal_lengths_stop_at_first_exhausted_ticker():
    stream = PriceStream({"AAPL": _records("AAPL", [1.0, 2.0, 3.0]), "MSFT": _records("MSFT", [5.0])})
    exchange = StockExchange(1_000.0, stream)
    bt = Backtest(_BuyFirstTick(exchange, 1), exchange)
    bt.run()
    assert bt.rows == 1


def test_missing_stream_is_an_error():
    exchange = StockExchange(1_000.0)
    with pytest.raises(ValueError):
        Backtest(_BuyFirstTick(exchange, 1), exchange).run()


def test_format_result_prints_metrics_in_order():
    exchange = StockExchange(1_000.0, PriceStream({}))
    result = Backtest(_BuyFirstTick(exchange, 1), exchange).run()
    text = format_result(result)
    keys = ["Relative Performance", "Absolute Performance", "Max Drawdown", "Volatility"]
    positions = [text.index(k + ":") for k in keys]
    assert positions == sorted(positions)
