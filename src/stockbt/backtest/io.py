"""I/O helpers for writing backtest artifacts.

This module centralizes writing of CSV and JSON artifacts produced by
a backtest run.  All functions here are deterministic: they write data
in a consistent column order and include the project name and source
identifier to aid downstream consumers.  Directories are created if
they do not already exist.
"""

from __future__ import annotations

import csv
import json
import os
from dataclasses import fields
from typing import Any, Dict, List, Optional, Sequence

from ..config import PROJECT_NAME
from .lots import Lot
from .result import Result

_LOT_HEADER = [f.name for f in fields(Lot)]


def _ensure_dir(path: str) -> None:
    """Ensure that a directory exists."""
    if path:
        os.makedirs(path, exist_ok=True)


def write_transactions_csv(transactions: Sequence[Lot], out_path: str) -> None:
    """Write the executed orders to a CSV file.

    A header row is written even when no order was executed so that
    the expected columns are documented.
    """
    _ensure_dir(os.path.dirname(out_path))
    with open(out_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(_LOT_HEADER)
        for lot in transactions:
            writer.writerow([getattr(lot, col) for col in _LOT_HEADER])


def write_open_positions_csv(positions: Dict[str, List[Lot]], out_path: str) -> None:
    """Write the lots still open at the end of a run, oldest first per ticker."""
    _ensure_dir(os.path.dirname(out_path))
    with open(out_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(_LOT_HEADER)
        for ticker in sorted(positions):
            for lot in positions[ticker]:
                writer.writerow([getattr(lot, col) for col in _LOT_HEADER])


def write_performance_series_csv(series: Sequence[float], out_path: str) -> None:
    """Write the sampled relative-performance series to a CSV file."""
    _ensure_dir(os.path.dirname(out_path))
    with open(out_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["step", "performance"])
        writer.writeheader()
        for step, value in enumerate(series):
            writer.writerow({"step": step, "performance": value})


def write_summary_json(
    result: Result,
    out_path: str,
    source_id: Optional[str] = None,
    params: Optional[Dict[str, Any]] = None,
) -> None:
    """Write the backtest result and run parameters to a JSON file."""
    _ensure_dir(os.path.dirname(out_path))
    out = {
        "project": PROJECT_NAME,
        "source_id": source_id,
        "params": params or {},
        "metrics": result.to_dict(),
    }
    with open(out_path, "w") as f:
        json.dump(out, f, indent=2)


__all__ = [
    "write_transactions_csv",
    "write_open_positions_csv",
    "write_performance_series_csv",
    "write_summary_json",
]
