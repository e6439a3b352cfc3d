"""FIFO lot accounting per ticker.

A :class:`Lot` is one open position entry: a signed share amount and
its cost-basis price.  Positive amounts are long, negative amounts are
short.  The :class:`LotBook` keeps one double-ended queue per ticker
with the newest lot on the left and the oldest on the right, plus the
signed net amount per ticker so that the direction of a position can
be looked up without summing the queue.

Within one queue every lot has the same sign.  Reducing orders consume
the oldest lot first, so realized P&L is attributed at the cost basis
of the earliest surviving entry.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, replace
from typing import Deque, Dict, List, Optional


@dataclass(frozen=True)
class Lot:
    """One open position entry (or one executed order in the audit log).

    Attributes
    ----------
    ticker : str
        Symbol the lot belongs to.
    amount : int
        Signed number of shares; positive for long, negative for short.
    price : float
        Price per share at which the lot was opened.
    timestamp : int
        Milliseconds since epoch of the price that triggered the order.
    """

    ticker: str
    amount: int
    price: float
    timestamp: int

    @property
    def is_long(self) -> bool:
        return self.amount > 0


def sign(value: int) -> int:
    """Return -1, 0 or 1 according to the sign of ``value``."""
    return (value > 0) - (value < 0)


class LotBook:
    """Per-ticker FIFO queues of open lots with signed net amounts."""

    def __init__(self) -> None:
        self._queues: Dict[str, Deque[Lot]] = {}
        self._net: Dict[str, int] = {}

    def push_lot(self, ticker: str, lot: Lot) -> None:
        """Append ``lot`` as the newest entry for ``ticker``."""
        if lot.amount == 0:
            raise ValueError("Cannot book a lot with zero amount")
        self._queues.setdefault(ticker, deque()).appendleft(lot)
        self._net[ticker] = self._net.get(ticker, 0) + lot.amount

    def peek_oldest(self, ticker: str) -> Lot:
        queue = self._queues.get(ticker)
        if not queue:
            raise KeyError(f"No open lots for {ticker}")
        return queue[-1]

    def pop_oldest(self, ticker: str) -> Lot:
        """Remove and return the oldest lot for ``ticker``."""
        queue = self._queues.get(ticker)
        if not queue:
            raise KeyError(f"No open lots for {ticker}")
        lot = queue.pop()
        self._net[ticker] -= lot.amount
        if not queue:
            # An empty queue and a missing entry mean the same thing.
            del self._queues[ticker]
            del self._net[ticker]
        return lot

    def replace_oldest(self, ticker: str, new_amount: int) -> Lot:
        """Rewrite the amount of the oldest lot and return the new lot.

        The new amount must be non-zero and keep the sign of the lot it
        replaces; a full consumption is expressed with :meth:`pop_oldest`.
        """
        oldest = self.peek_oldest(ticker)
        if new_amount == 0 or sign(new_amount) != sign(oldest.amount):
            raise ValueError(
                f"Replacement amount {new_amount} must keep the sign of {oldest.amount}"
            )
        updated = replace(oldest, amount=new_amount)
        self._queues[ticker][-1] = updated
        self._net[ticker] += new_amount - oldest.amount
        return updated

    def net(self, ticker: str) -> int:
        return self._net.get(ticker, 0)

    def is_empty(self, ticker: str) -> bool:
        return not self._queues.get(ticker)

    def lots(self, ticker: str) -> List[Lot]:
        """Return the open lots of ``ticker`` ordered oldest first."""
        return list(reversed(self._queues.get(ticker, ())))

    def tickers(self) -> List[str]:
        return list(self._queues.keys())

    def snapshot(self) -> Dict[str, List[Lot]]:
        """Return a copy of the book: ticker -> lots, oldest first."""
        return {ticker: self.lots(ticker) for ticker in self._queues}

    def __len__(self) -> int:
        return sum(len(q) for q in self._queues.values())

    def check_invariants(self, ticker: Optional[str] = None) -> bool:
        """Return True if sign uniformity and net consistency hold.

        Parameters
        ----------
        ticker : str, optional
            Restrict the check to one ticker; all tickers by default.

        Raises
        ------
        AssertionError
            Describing the first violated invariant.
        """
        if ticker is None:
            if set(self._queues) != set(self._net):
                raise AssertionError("Lot queues and net amounts track different tickers")
            names = list(self._queues)
        else:
            if (ticker in self._queues) != (ticker in self._net):
                raise AssertionError(f"Lot queue and net amount disagree for {ticker}")
            names = [ticker] if ticker in self._queues else []
        for name in names:
            queue = self._queues[name]
            net = self._net[name]
            if not queue or net == 0:
                raise AssertionError(f"Empty position kept for {name}")
            if any(sign(lot.amount) != sign(net) for lot in queue):
                raise AssertionError(f"Mixed-sign lots for {name}")
            if sum(lot.amount for lot in queue) != net:
                raise AssertionError(f"Net amount out of sync for {name}")
        return True


__all__ = ["Lot", "LotBook", "sign"]
