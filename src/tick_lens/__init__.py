"""Tick Lens - Bounded, resumable range scans over a sparse tick bitmap."""

from tick_lens.bitmap import TickBitmap
from tick_lens.decoder import decode_tick, iter_set_bits, tick_position
from tick_lens.lens import (
    TickLens,
    collect_populated_ticks,
    iter_pages,
    populated_ticks_in_range,
)
from tick_lens.ledger import TickLedger
from tick_lens.protocols import BitmapLoader, RecordFetcher, WordRangeResolver
from tick_lens.storage import LedgerStorage
from tick_lens.table import TickTable
from tick_lens.types import (
    DEFAULT_MAX_TICKS,
    MAX_TICK,
    MIN_TICK,
    WORD_BITS,
    InvalidQueryError,
    ScanError,
    ScanResult,
    TickNotPopulatedError,
    TickOverflowError,
    TickRecord,
)

__all__ = [
    # Main API
    "TickLens",
    "populated_ticks_in_range",
    "iter_pages",
    "collect_populated_ticks",
    "ScanResult",
    # Bitmap arithmetic
    "decode_tick",
    "tick_position",
    "iter_set_bits",
    # Collaborators
    "WordRangeResolver",
    "BitmapLoader",
    "RecordFetcher",
    "TickBitmap",
    "TickLedger",
    # Storage
    "TickRecord",
    "TickTable",
    "LedgerStorage",
    # Errors
    "InvalidQueryError",
    "ScanError",
    "TickNotPopulatedError",
    "TickOverflowError",
    # Constants
    "DEFAULT_MAX_TICKS",
    "MAX_TICK",
    "MIN_TICK",
    "WORD_BITS",
]

__version__ = "0.1.0"
