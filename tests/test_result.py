"""Tests for the performance accumulator.

Realized fills update absolute and relative P&L as well as the worst
single-fill loss.  Volatility is the population standard deviation of
the sampled series and requires at least one sample.
"""

import math

import pytest

from stockbt.backtest.result import Result, equity_drawdown, volatility
from stockbt.errors import EmptySeriesError


def test_record_fill_updates_performance_and_drawdown():
    r = Result(initial_budget=1_000.0)
    r.record_fill(50.0)
    r.record_fill(-20.0)
    r.record_fill(-5.0)
    assert r.abs_performance == pytest.approx(25.0)
    assert r.rel_performance == pytest.approx(0.025)
    assert r.max_drawdown == pytest.approx(-20.0)
    assert r.fills == 3


def test_drawdown_stays_zero_without_losses():
    r = Result(initial_budget=1_000.0)
    r.record_fill(10.0)
    assert r.max_drawdown == 0.0


def test_volatility_is_population_standard_deviation():
    values = [0.0, 0.0, 0.02, -0.02]
    assert volatility(values) == pytest.approx(math.sqrt(0.0002))
    assert volatility([0.3]) == 0.0


def test_volatility_of_empty_series_is_an_error():
    with pytest.raises(EmptySeriesError):
        volatility([])
    with pytest.raises(EmptySeriesError):
        Result(initial_budget=1.0).finalize()


def test_finalize_sets_volatility_and_equity_drawdown():
    r = Result(initial_budget=100.0)
    for v in (0.0, 0.1, -0.12, 0.05):
        r.sample(v)
    r.finalize()
    assert r.volatility == pytest.approx(volatility([0.0, 0.1, -0.12, 0.05]))
    # Peak 1.1, trough 0.88
    assert r.equity_drawdown == pytest.approx((0.88 - 1.1) / 1.1)


def test_equity_drawdown_of_rising_series_is_zero():
    assert equity_drawdown([0.0, 0.01, 0.02]) == 0.0


def test_merge_weights_relative_performance_by_budget():
    a = Result(initial_budget=1_000.0)
    a.record_fill(100.0)
    a.performance_series.extend([0.0, 0.1, 0.05])
    b = Result(initial_budget=3_000.0)
    b.record_fill(-40.0)
    b.performance_series.extend([0.0, -0.01])

    merged = Result.merge(a, b)
    assert merged.initial_budget == 4_000.0
    assert merged.abs_performance == pytest.approx(60.0)
    assert merged.rel_performance == pytest.approx(60.0 / 4_000.0)
    assert merged.max_drawdown == pytest.approx(-40.0)
    assert merged.performance_series == pytest.approx([0.0, 0.09])
    assert merged.volatility == pytest.approx(0.045)
    assert merged.fills == 2


def test_to_dict_contains_reported_metrics():
    r = Result(initial_budget=10.0)
    r.sample(0.0)
    r.finalize()
    d = r.to_dict()
    for key in ("abs_performance", "rel_performance", "max_drawdown", "volatility"):
        assert key in d
    assert d["samples"] == 1


def test_non_positive_budget_is_rejected():
    with pytest.raises(ValueError):
        Result(initial_budget=0.0)
