"""Row-synchronised replay of per-ticker price sequences.

The stream joins several per-ticker sequences by row index.  Each call
to :meth:`PriceStream.next` returns one record for every ticker known
to the stream, or ``None`` for a ticker whose sequence is exhausted.
The driver treats the first ``None`` as the end of the data.

The stream is single-pass: iterators are created lazily on the first
call and are never rewound.  No guarantee is made about the order of
tickers within one row.
"""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Sequence

from .models import PriceRecord


class PriceStream:
    """Lazy, finite cross-ticker join of price sequences."""

    def __init__(self, values: Mapping[str, Sequence[PriceRecord]]) -> None:
        self._values = values
        self._iterators: Optional[Dict[str, Iterator[PriceRecord]]] = None
        self.rows_emitted = 0

    @property
    def tickers(self) -> list[str]:
        return list(self._values.keys())

    def next(self) -> Dict[str, Optional[PriceRecord]]:
        """Return the next row as a mapping of ticker to record.

        Exhausted tickers map to ``None``.  A stream without tickers
        returns an empty mapping on every call.
        """
        if self._iterators is None:
            self._iterators = {t: iter(seq) for t, seq in self._values.items()}
        row: Dict[str, Optional[PriceRecord]] = {}
        for ticker, it in self._iterators.items():
            row[ticker] = next(it, None)
        if row and all(rec is not None for rec in row.values()):
            self.rows_emitted += 1
        return row

    def __iter__(self) -> Iterator[Dict[str, PriceRecord]]:
        """Yield complete rows until the first exhausted ticker."""
        while True:
            row = self.next()
            if is_end_of_stream(row):
                return
            yield row  # type: ignore[misc]


def is_end_of_stream(row: Mapping[str, Optional[PriceRecord]]) -> bool:
    """Return True if ``row`` signals that the stream is finished."""
    return not row or any(rec is None for rec in row.values())


__all__ = ["PriceStream", "is_end_of_stream"]
