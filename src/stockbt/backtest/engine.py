"""Event-driven backtest driver.

The driver pumps a price stream through a strategy.  On every step it
first samples the exchange's relative performance, then pulls the next
row from the stream.  The first exhausted ticker ends the run.
Otherwise each record of the row is registered as the ticker's current
price and handed to the strategy, which may trade on the exchange from
inside the handler.  After the last row the exchange computes the
end-of-run statistics.

It is possible to replay several tickers at once as long as every
ticker has the same number of rows.  Within one row no order of
tickers is guaranteed.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from ..data.stream import PriceStream, is_end_of_stream
from .exchange import Exchange
from .result import Result
from .strategy import Strategy

logger = logging.getLogger(__name__)


class Backtest:
    """Combines a strategy with an exchange and replays the exchange's data.

    Parameters
    ----------
    strategy : Strategy
        Receives every price observation.
    exchange : Exchange
        The simulated exchange the strategy trades on.
    stream : PriceStream, optional
        Data to replay; defaults to ``exchange.stream``.
    """

    def __init__(
        self,
        strategy: Strategy,
        exchange: Exchange,
        stream: Optional[PriceStream] = None,
    ) -> None:
        self.strategy = strategy
        self.exchange = exchange
        self.stream = stream if stream is not None else exchange.stream
        self.rows = 0
        self.result: Optional[Result] = None

    def run(self) -> Result:
        """Replay the stream and return the finalized result.

        Raises
        ------
        ValueError
            If neither the backtest nor the exchange holds a stream.
        """
        if self.stream is None:
            raise ValueError("No price stream was provided to the backtest")
        logger.info(
            "Starting backtest over %d tickers with budget %.2f",
            len(self.stream.tickers), self.exchange.initial_budget,
        )
        started = time.perf_counter()
        while True:
            self.exchange.sample_performance()
            row = self.stream.next()
            if is_end_of_stream(row):
                break
            for record in row.values():
                self.exchange.update_price(record)
                self.strategy.handle_new_price(record)
            self.rows += 1

        self.result = self.exchange.finalize()
        logger.info(
            "Backtest finished: %d rows in %.2fs, abs=%.2f rel=%.6f",
            self.rows, time.perf_counter() - started,
            self.result.abs_performance, self.result.rel_performance,
        )
        return self.result


def format_result(result: Result) -> str:
    """Render ``result`` as the human-readable block printed by the CLI."""
    lines = [
        "Results of the Backtest",
        "-----------------------",
        f"Relative Performance: {result.rel_performance}",
        f"Absolute Performance: {result.abs_performance}",
        f"Max Drawdown: {result.max_drawdown}",
        f"Volatility: {result.volatility}",
    ]
    return "\n".join(lines)


__all__ = ["Backtest", "format_result"]
