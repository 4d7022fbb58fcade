"""Storage manager for tick ledgers."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from tick_lens.table import TickTable

logger = logging.getLogger(__name__)

FORMAT_VERSION = 2


def load_metadata(data_dir: Path) -> dict[str, Any]:
    """Load ledger metadata from a data directory.

    Raises:
        FileNotFoundError: If the directory holds no metadata file.
        ValueError: If the metadata is not a supported ledger format.
    """
    metadata_path = data_dir / LedgerStorage.METADATA_FILE
    if not metadata_path.exists():
        raise FileNotFoundError(f"No ledger metadata found at {metadata_path}")

    with open(metadata_path) as f:
        metadata = json.load(f)

    if metadata.get("format") != FORMAT_VERSION:
        raise ValueError(f"Unsupported ledger format: {metadata.get('format')!r}")
    tick_spacing = metadata.get("tick_spacing")
    if not isinstance(tick_spacing, int) or tick_spacing <= 0:
        raise ValueError(f"Invalid tick spacing in metadata: {tick_spacing!r}")
    return metadata


class LedgerStorage:
    """Manages the files of a persisted tick ledger."""

    METADATA_FILE = "_metadata.json"
    TICKS_FILE = "ticks.bin"

    def __init__(self, data_dir: Path, tick_spacing: int | None = None) -> None:
        """Open or create ledger storage.

        Args:
            data_dir: Directory to store ledger files.
            tick_spacing: Spacing for a new ledger. For an existing ledger it
                may be omitted, and must match the stored spacing if given.
        """
        self.data_dir = data_dir
        metadata_path = data_dir / self.METADATA_FILE

        if metadata_path.exists():
            stored = load_metadata(data_dir)["tick_spacing"]
            if tick_spacing is not None and tick_spacing != stored:
                raise ValueError(
                    f"Ledger at {data_dir} has tick spacing {stored}, not {tick_spacing}"
                )
            self.tick_spacing: int = stored
            logger.info("opened ledger %s (tick spacing %d)", data_dir, stored)
        else:
            if tick_spacing is None:
                raise ValueError(f"Tick spacing required to create a ledger at {data_dir}")
            if tick_spacing <= 0:
                raise ValueError(f"Tick spacing must be positive, got {tick_spacing}")
            self.tick_spacing = tick_spacing
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self._save_metadata()
            logger.info("created ledger %s (tick spacing %d)", data_dir, tick_spacing)

        self._ticks: TickTable | None = TickTable(self.data_dir / self.TICKS_FILE)

    def _save_metadata(self) -> None:
        """Save ledger metadata to disk."""
        metadata = {
            "format": FORMAT_VERSION,
            "tick_spacing": self.tick_spacing,
        }
        with open(self.data_dir / self.METADATA_FILE, "w") as f:
            json.dump(metadata, f, indent=2)

    @property
    def ticks(self) -> TickTable:
        """Return the tick record table."""
        if self._ticks is None:
            raise ValueError(f"Ledger storage {self.data_dir} is closed")
        return self._ticks

    def close(self) -> None:
        """Close all tables."""
        if self._ticks is not None:
            self._ticks.close()
            self._ticks = None

    def __enter__(self) -> LedgerStorage:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
