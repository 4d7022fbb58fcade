"""Tick ledger: a tick bitmap paired with a record store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from tick_lens.bitmap import TickBitmap
from tick_lens.storage import LedgerStorage
from tick_lens.types import MAX_TICK, MIN_TICK, TickNotPopulatedError, TickRecord

logger = logging.getLogger(__name__)


class TickLedger:
    """Populated ticks and their records.

    The ledger keeps records either in memory or in a ``LedgerStorage``.
    It implements the word-range resolver, bitmap loader and record fetcher
    interfaces, so it can be handed to ``TickLens`` directly.
    """

    def __init__(self, tick_spacing: int, storage: LedgerStorage | None = None) -> None:
        """Initialize a ledger.

        Args:
            tick_spacing: Interval between valid ticks.
            storage: Optional persisted storage. Its live rows are loaded into
                the bitmap; records stay on disk and are read on fetch.
        """
        if storage is not None and storage.tick_spacing != tick_spacing:
            raise ValueError(
                f"Storage tick spacing {storage.tick_spacing} does not match {tick_spacing}"
            )
        self.bitmap = TickBitmap(tick_spacing)
        self.storage = storage
        self._records: dict[int, TickRecord] = {}
        self._rows: dict[int, int] = {}  # tick → row index in storage

        if storage is not None:
            self._load_rows(storage)

    @classmethod
    def open(cls, data_dir: Path, tick_spacing: int | None = None) -> TickLedger:
        """Open (or create) a persisted ledger in ``data_dir``."""
        storage = LedgerStorage(data_dir, tick_spacing)
        return cls(storage.tick_spacing, storage)

    def _load_rows(self, storage: LedgerStorage) -> None:
        for index, record in storage.ticks.iter_live():
            if record.tick in self._rows:
                raise ValueError(f"Duplicate rows for tick {record.tick} in {storage.data_dir}")
            self.bitmap.flip_tick(record.tick)
            self._rows[record.tick] = index
        logger.debug("loaded %d populated ticks from %s", len(self._rows), storage.data_dir)

    @property
    def tick_spacing(self) -> int:
        return self.bitmap.tick_spacing

    @property
    def populated_count(self) -> int:
        """Return the number of populated ticks."""
        return self.bitmap.populated_count

    def _check_tick(self, tick: int) -> None:
        if not MIN_TICK <= tick <= MAX_TICK:
            raise ValueError(f"Tick {tick} out of range [{MIN_TICK}, {MAX_TICK}]")
        if tick % self.tick_spacing != 0:
            raise ValueError(
                f"Tick {tick} is not a multiple of the tick spacing {self.tick_spacing}"
            )

    def is_populated(self, tick: int) -> bool:
        """Return whether ``tick`` has a record."""
        return self.bitmap.is_populated(tick)

    def set_tick(self, record: TickRecord) -> bool:
        """Store ``record``, populating its tick if needed.

        Returns:
            True if the tick was newly populated, False if an existing record
            was replaced.
        """
        self._check_tick(record.tick)
        is_new = not self.bitmap.is_populated(record.tick)

        if self.storage is None:
            self._records[record.tick] = record
        elif is_new:
            self._rows[record.tick] = self.storage.ticks.insert(record)
        else:
            self.storage.ticks.update(self._rows[record.tick], record)

        if is_new:
            self.bitmap.flip_tick(record.tick)
        return is_new

    def clear_tick(self, tick: int) -> TickRecord:
        """Remove ``tick`` from the ledger and return its last record."""
        record = self.fetch_record(tick)
        if self.storage is None:
            del self._records[tick]
        else:
            self.storage.ticks.delete(self._rows.pop(tick))
        self.bitmap.flip_tick(tick)
        return record

    def fetch_record(self, tick: int) -> TickRecord:
        """Return the record of a populated tick.

        Raises:
            TickNotPopulatedError: If the tick's bit is not set.
        """
        if not self.bitmap.is_populated(tick):
            raise TickNotPopulatedError(tick)
        if self.storage is None:
            return self._records[tick]
        return self.storage.ticks.get(self._rows[tick])

    def resolve_word_range(
        self, tick_lower: int, tick_upper: int, tick_spacing: int
    ) -> tuple[int, int]:
        return self.bitmap.resolve_word_range(tick_lower, tick_upper, tick_spacing)

    def load_bitmap_and_count(self, word_lower: int, word_upper: int) -> tuple[list[int], int]:
        return self.bitmap.load_bitmap_and_count(word_lower, word_upper)

    def close(self) -> None:
        """Close the underlying storage, if any."""
        if self.storage is not None:
            self.storage.close()

    def __enter__(self) -> TickLedger:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
