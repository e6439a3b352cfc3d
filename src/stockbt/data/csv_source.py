"""CSV ingest for minute-aggregate price files.

Price files follow the flat-file aggregate layout with the header
``ticker,volume,open,close,high,low,window_start,transactions``.  Each
ticker appears on many rows; rows are kept in file order.  A source may
be built from individual files, from directories (walked recursively,
every ``*.csv`` file in sorted path order) or from a mix of both.
Records from several files are appended per ticker in the order the
files are read.

The engine replays tickers row by row, so every ticker must end up
with the same number of records.  Any deviation is reported as a
:class:`~stockbt.errors.MissingDataError` before a backtest starts.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd

from ..config import CSV_HEADER
from ..errors import MissingDataError
from .models import PriceRecord
from .stream import PriceStream

PathLike = Union[str, Path]

_DTYPES = {
    "ticker": str,
    "volume": "int64",
    "open": "float64",
    "close": "float64",
    "high": "float64",
    "low": "float64",
    "window_start": "int64",
    "transactions": "int64",
}


def _expand_paths(paths: Iterable[PathLike]) -> List[Path]:
    """Resolve files and directories into an ordered list of CSV files."""
    files: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            files.append(path)
        elif path.is_dir():
            files.extend(p for p in sorted(path.rglob("*.csv")) if p.is_file())
        else:
            raise MissingDataError(f"Price data source not found: {path}")
    return files


def read_price_file(path: PathLike) -> Dict[str, List[PriceRecord]]:
    """Parse a single CSV file into per-ticker record lists.

    Parameters
    ----------
    path : str or Path
        Location of the CSV file.

    Returns
    -------
    dict
        Mapping from ticker to records in file order.

    Raises
    ------
    MissingDataError
        If the file cannot be read, the header does not match
        :data:`~stockbt.config.CSV_HEADER` or a value cannot be parsed.
    """
    path = Path(path)
    try:
        header = pd.read_csv(path, nrows=0).columns.tolist()
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise MissingDataError(f"Could not read {path}: {exc}") from exc
    if header != CSV_HEADER:
        raise MissingDataError(
            f"Unexpected header in {path}: {header}; expected {CSV_HEADER}"
        )
    try:
        # Only empty cells count as missing; tickers such as NA stay strings.
        frame = pd.read_csv(path, dtype=_DTYPES, keep_default_na=False, na_values=[""])
    except (ValueError, TypeError, pd.errors.ParserError) as exc:
        raise MissingDataError(f"Malformed row in {path}: {exc}") from exc
    if frame.isna().any().any():
        raise MissingDataError(f"Missing values in {path}")

    parsed: Dict[str, List[PriceRecord]] = {}
    for row in frame.itertuples(index=False):
        record = PriceRecord(
            ticker=row.ticker,
            volume=int(row.volume),
            open=float(row.open),
            close=float(row.close),
            high=float(row.high),
            low=float(row.low),
            window_start=int(row.window_start),
            transactions=int(row.transactions),
        )
        parsed.setdefault(record.ticker, []).append(record)
    return parsed


class CSVPriceSource:
    """In-memory price data loaded from one or more CSV files.

    Attributes:
        source_id: Identifier of the source, e.g. the collection date.
        values: Mapping from ticker to its ordered list of records.
        files: The files that were read, in read order.
    """

    def __init__(self, source_id: Optional[str] = None) -> None:
        self.source_id = source_id or f"csv-{int(time.time() * 1000)}"
        self.values: Dict[str, List[PriceRecord]] = {}
        self.files: List[Path] = []

    @classmethod
    def from_paths(
        cls, *paths: PathLike, source_id: Optional[str] = None
    ) -> "CSVPriceSource":
        """Build and load a source from files and/or directories."""
        source = cls(source_id)
        source.load(*paths)
        return source

    def load(self, *paths: PathLike) -> "CSVPriceSource":
        """Read every CSV file under ``paths`` and validate row counts."""
        if not paths:
            raise MissingDataError("No price data source was provided")
        files = _expand_paths(paths)
        if not files:
            raise MissingDataError(
                f"No price files found under: {', '.join(str(p) for p in paths)}"
            )
        for file in files:
            self._extend(read_price_file(file))
            self.files.append(file)
        self._check_row_counts()
        return self

    def _extend(self, parsed: Dict[str, List[PriceRecord]]) -> None:
        for ticker, records in parsed.items():
            self.values.setdefault(ticker, []).extend(records)

    def _check_row_counts(self) -> None:
        counts = {ticker: len(records) for ticker, records in self.values.items()}
        if len(set(counts.values())) > 1:
            raise MissingDataError(
                f"Tickers have different numbers of rows: {counts}"
            )

    @property
    def tickers(self) -> List[str]:
        return list(self.values.keys())

    @property
    def size(self) -> int:
        """Number of rows per ticker (0 for an empty source)."""
        for records in self.values.values():
            return len(records)
        return 0

    def stream(self) -> PriceStream:
        """Return a fresh single-pass stream over the loaded values."""
        return PriceStream(self.values)


__all__ = ["CSVPriceSource", "read_price_file"]
