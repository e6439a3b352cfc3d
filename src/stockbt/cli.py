"""Command-line interface for stockbt.

This module uses the :mod:`click` library to expose commands for
running the sample threshold strategy over CSV price data and for
checking that a data source is well formed.

Results are printed to standard output; diagnostics go through the
standard :mod:`logging` module to standard error.  The log level is
taken from ``--log-level`` or, when absent, from the
``STOCKBT_LOG_LEVEL`` environment variable.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import click

from .backtest.engine import Backtest, format_result
from .backtest.exchange import StockExchange
from .backtest.io import (
    write_open_positions_csv,
    write_performance_series_csv,
    write_summary_json,
    write_transactions_csv,
)
from .backtest.result import Result
from .backtest.strategy import ThresholdStrategy
from .config import (
    DEFAULT_BUY_THRESHOLD,
    DEFAULT_ORDER_SIZE,
    DEFAULT_PERFORMANCE_THRESHOLD,
    get_default_budget,
    get_log_level,
)
from .data.csv_source import CSVPriceSource
from .errors import StockbtError


def _configure_logging(level: Optional[str]) -> None:
    name = (level or get_log_level()).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        raise click.UsageError(f"Unknown log level: {name}")
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _load_source(path: str) -> CSVPriceSource:
    try:
        return CSVPriceSource.from_paths(path, source_id=Path(path).name)
    except StockbtError as exc:
        raise click.ClickException(str(exc))


@click.group()
def cli() -> None:
    """stockbt command-line interface."""
    pass


@cli.command()
@click.option(
    "--data",
    "data_paths",
    required=True,
    multiple=True,
    type=click.Path(exists=True),
    help="CSV file or directory of CSV files. Repeat to run several exchanges.",
)
@click.option(
    "--budget",
    type=float,
    default=None,
    help="Initial budget per exchange (default: $STOCKBT_BUDGET or 1e9).",
)
@click.option(
    "--buy-threshold",
    type=float,
    default=DEFAULT_BUY_THRESHOLD,
    show_default=True,
    help="Open a position when the opening price is below this value.",
)
@click.option(
    "--performance-threshold",
    type=float,
    default=DEFAULT_PERFORMANCE_THRESHOLD,
    show_default=True,
    help="Relative gain at which an open position is cleared.",
)
@click.option(
    "--order-size",
    type=int,
    default=DEFAULT_ORDER_SIZE,
    show_default=True,
    help="Shares bought per entry.",
)
@click.option(
    "--out-dir",
    type=str,
    default=None,
    help="Directory to write artifacts (transactions, series, positions, summary).",
)
@click.option(
    "--log-level",
    type=str,
    default=None,
    help="Logging level (default: $STOCKBT_LOG_LEVEL or WARNING).",
)
def run(
    data_paths: Tuple[str, ...],
    budget: Optional[float],
    buy_threshold: float,
    performance_threshold: float,
    order_size: int,
    out_dir: Optional[str],
    log_level: Optional[str],
) -> None:
    """Run the threshold strategy over one or more price data sources.

    Each ``--data`` source is replayed on its own exchange with its own
    budget.  When several sources are given their results are merged
    before printing.
    """
    _configure_logging(log_level)
    if budget is None:
        try:
            budget = get_default_budget()
        except ValueError as exc:
            raise click.UsageError(str(exc))
    if budget <= 0:
        raise click.UsageError("--budget must be positive")
    if order_size <= 0:
        raise click.UsageError("--order-size must be positive")

    params = {
        "budget": budget,
        "buy_threshold": buy_threshold,
        "performance_threshold": performance_threshold,
        "order_size": order_size,
    }
    results: List[Result] = []
    for index, path in enumerate(data_paths):
        source = _load_source(path)
        exchange = StockExchange(budget, source.stream())
        strategy = ThresholdStrategy(
            exchange,
            buy_threshold=buy_threshold,
            performance_threshold=performance_threshold,
            order_size=order_size,
        )
        try:
            result = Backtest(strategy, exchange).run()
        except StockbtError as exc:
            raise click.ClickException(str(exc))
        results.append(result)
        if out_dir:
            target = Path(out_dir)
            if len(data_paths) > 1:
                target = target / f"{index:02d}_{source.source_id}"
            target.mkdir(parents=True, exist_ok=True)
            write_transactions_csv(exchange.transactions, str(target / "transactions.csv"))
            write_open_positions_csv(exchange.open_positions(), str(target / "open_positions.csv"))
            write_performance_series_csv(
                result.performance_series, str(target / "performance_series.csv")
            )
            write_summary_json(result, str(target / "summary.json"), source.source_id, params)

    combined = results[0]
    for other in results[1:]:
        combined = Result.merge(combined, other)

    click.echo("")
    click.echo(format_result(combined))
    click.echo("")
    if out_dir:
        click.echo(f"Artifacts written to {out_dir}")


@cli.command(name="data-check")
@click.option(
    "--data",
    "data_path",
    required=True,
    type=click.Path(exists=True),
    help="CSV file or directory of CSV files to validate.",
)
def data_check(data_path: str) -> None:
    """Load a price data source and report tickers and rows per ticker."""
    source = _load_source(data_path)
    click.echo(f"Source: {source.source_id}")
    click.echo(f"Files: {len(source.files)}")
    click.echo(f"Tickers: {len(source.tickers)}")
    click.echo(f"Rows per ticker: {source.size}")
    for ticker in sorted(source.tickers):
        click.echo(f"  {ticker}")
