"""Performance accounting for a backtest run.

The :class:`Result` container is updated in two ways.  The exchange
records every realized closing fill through :meth:`Result.record_fill`,
which maintains the absolute and relative P&L and the largest single
realized loss.  The driver appends one relative-performance sample per
replayed row through :meth:`Result.sample`; at the end of the run
:meth:`Result.finalize` computes the volatility of that series.

Statistics are population statistics.  A single sample therefore has
zero volatility, while an empty series is an error.
"""

from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..errors import EmptySeriesError


def volatility(values: Sequence[float]) -> float:
    """Return the population standard deviation of ``values``.

    Raises
    ------
    EmptySeriesError
        If ``values`` is empty.
    """
    if not values:
        raise EmptySeriesError("Cannot compute volatility of an empty series")
    return statistics.pstdev(values)


def equity_drawdown(values: Sequence[float]) -> float:
    """Return the deepest peak-to-trough decline of a relative-return series.

    Each sample ``r`` is interpreted as equity ``1 + r`` relative to the
    starting capital.  The result is a fraction of the running peak and
    is zero or negative.
    """
    worst = 0.0
    peak: Optional[float] = None
    for r in values:
        eq = 1.0 + r
        if peak is None or eq > peak:
            peak = eq
        if peak > 0:
            dd = (eq - peak) / peak
            if dd < worst:
                worst = dd
    return worst


@dataclass
class Result:
    """Running and final performance indicators of one exchange.

    Attributes
    ----------
    initial_budget : float
        Starting cash the relative figures are measured against.
    abs_performance : float
        Realized P&L in account currency.
    rel_performance : float
        ``abs_performance / initial_budget``.
    max_drawdown : float
        Most negative realized P&L of any single closing fill, 0.0 if
        no fill has lost money.
    performance_series : list of float
        Relative performance sampled once per replayed row.
    volatility : float or None
        Population standard deviation of ``performance_series``; set by
        :meth:`finalize`.
    equity_drawdown : float or None
        Peak-to-trough decline of the sampled series; set by
        :meth:`finalize`.
    fills : int
        Number of realized closing fills.
    """

    initial_budget: float
    abs_performance: float = 0.0
    rel_performance: float = 0.0
    max_drawdown: float = 0.0
    performance_series: List[float] = field(default_factory=list)
    volatility: Optional[float] = None
    equity_drawdown: Optional[float] = None
    fills: int = 0

    def __post_init__(self) -> None:
        if self.initial_budget <= 0:
            raise ValueError(f"initial_budget must be positive, got {self.initial_budget}")

    def record_fill(self, realized: float) -> None:
        """Account for the realized P&L of one closing fill."""
        self.abs_performance += realized
        self.rel_performance = self.abs_performance / self.initial_budget
        if realized < self.max_drawdown:
            self.max_drawdown = realized
        self.fills += 1

    def sample(self, value: float) -> None:
        self.performance_series.append(value)

    def finalize(self) -> "Result":
        """Compute the end-of-run statistics and return ``self``."""
        self.volatility = volatility(self.performance_series)
        self.equity_drawdown = equity_drawdown(self.performance_series)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "initial_budget": self.initial_budget,
            "abs_performance": self.abs_performance,
            "rel_performance": self.rel_performance,
            "max_drawdown": self.max_drawdown,
            "volatility": self.volatility,
            "equity_drawdown": self.equity_drawdown,
            "fills": self.fills,
            "samples": len(self.performance_series),
        }

    @classmethod
    def merge(cls, first: "Result", second: "Result") -> "Result":
        """Combine the results of two exchanges into one.

        Absolute P&L and budgets add up, so the merged relative figure
        is weighted by budget.  The performance series are summed
        element-wise over their common length and the volatility is
        recomputed when that overlap is non-empty.
        """
        budget = first.initial_budget + second.initial_budget
        merged = cls(
            initial_budget=budget,
            abs_performance=first.abs_performance + second.abs_performance,
            max_drawdown=min(first.max_drawdown, second.max_drawdown),
            performance_series=[
                a + b for a, b in zip(first.performance_series, second.performance_series)
            ],
            fills=first.fills + second.fills,
        )
        merged.rel_performance = merged.abs_performance / budget
        if merged.performance_series:
            merged.finalize()
        return merged


__all__ = ["Result", "volatility", "equity_drawdown"]
