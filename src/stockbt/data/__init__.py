"""Price data models, ingest and replay.

Submodules:

* ``models`` – Immutable price record and the minimal price protocol.
* ``csv_source`` – Loading price CSV files and directories.
* ``stream`` – Row-synchronised replay of per-ticker sequences.
"""

from .csv_source import CSVPriceSource, read_price_file
from .models import PricePoint, PriceRecord
from .stream import PriceStream, is_end_of_stream

__all__ = [
    "CSVPriceSource",
    "read_price_file",
    "PricePoint",
    "PriceRecord",
    "PriceStream",
    "is_end_of_stream",
]
