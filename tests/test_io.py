"""Tests for backtest artifact writers."""

import csv
import json

from stockbt.backtest.exchange import StockExchange
from stockbt.backtest.io import (
    write_open_positions_csv,
    write_performance_series_csv,
    write_summary_json,
    write_transactions_csv,
)


def _exchange_with_trades() -> StockExchange:
    ex = StockExchange(10_000.0)
    ex.buy("AAPL", 10, 100.0, timestamp=1)
    ex.sell("AAPL", 4, 110.0, timestamp=2)
    ex.sell("MSFT", 3, 50.0, timestamp=2)
    ex.result.sample(0.0)
    ex.result.sample(0.004)
    ex.finalize()
    return ex


def test_transactions_and_positions_csv(tmp_path):
    ex = _exchange_with_trades()
    tx_path = tmp_path / "out" / "transactions.csv"
    pos_path = tmp_path / "out" / "open_positions.csv"
    write_transactions_csv(ex.transactions, str(tx_path))
    write_open_positions_csv(ex.open_positions(), str(pos_path))

    with open(tx_path, newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["amount"] for r in rows] == ["10", "-4", "-3"]
    assert rows[0].keys() == {"ticker", "amount", "price", "timestamp"}

    with open(pos_path, newline="") as f:
        rows = list(csv.DictReader(f))
    assert [(r["ticker"], r["amount"]) for r in rows] == [("AAPL", "6"), ("MSFT", "-3")]


def test_empty_transactions_still_write_header(tmp_path):
    path = tmp_path / "transactions.csv"
    write_transactions_csv([], str(path))
    assert path.read_text().strip() == "ticker,amount,price,timestamp"


def test_performance_series_and_summary(tmp_path):
    ex = _exchange_with_trades()
    series_path = tmp_path / "performance_series.csv"
    summary_path = tmp_path / "summary.json"
    write_performance_series_csv(ex.result.performance_series, str(series_path))
    write_summary_json(ex.result, str(summary_path), source_id="src", params={"budget": 10_000.0})

    with open(series_path, newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["step"] for r in rows] == ["0", "1"]

    data = json.loads(summary_path.read_text())
    assert data["source_id"] == "src"
    assert data["params"]["budget"] == 10_000.0
    assert data["metrics"]["abs_performance"] == 40.0
    assert data["metrics"]["samples"] == 2
