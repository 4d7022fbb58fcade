"""Memory-mapped storage for tick records."""

from __future__ import annotations

import logging
import mmap
import struct
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from tick_lens.types import TickRecord

logger = logging.getLogger(__name__)


class TickTable:
    """Append-only file of fixed-size tick rows, accessed through mmap.

    File layout: an 8-byte little-endian row count followed by rows of
    ``ROW_SIZE`` bytes. Every row starts with a status byte, so a deleted
    row can never be confused with record data:

    - status: uint8 (``ROW_LIVE`` or ``ROW_DELETED``)
    - tick: int32
    - liquidity_gross: uint128
    - liquidity_net: int128
    - fee_growth_outside_0_x128: uint256
    - fee_growth_outside_1_x128: uint256
    """

    INITIAL_SIZE = 4096
    GROWTH_FACTOR = 2

    ROW_LIVE = 0x01
    ROW_DELETED = 0x00

    _HEADER = struct.Struct("<Q")
    _ROW_HEAD = struct.Struct("<Bi")
    PAYLOAD_SIZE = 16 + 16 + 32 + 32
    ROW_SIZE = _ROW_HEAD.size + PAYLOAD_SIZE

    def __init__(self, file_path: Path) -> None:
        self.file_path = file_path
        if not file_path.exists():
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, "wb") as f:
                f.truncate(self.INITIAL_SIZE)
            logger.debug("created tick table %s", file_path)
        elif file_path.stat().st_size < self._HEADER.size:
            raise ValueError(f"Corrupt tick table {file_path}: file shorter than its header")

        self._file: Any = open(file_path, "r+b")
        self._mmap: mmap.mmap | None = mmap.mmap(self._file.fileno(), 0)
        (self._count,) = self._HEADER.unpack_from(self._mmap, 0)

        if self._count > self._capacity:
            capacity = self._capacity
            self.close()
            raise ValueError(
                f"Corrupt tick table {file_path}: header claims {self._count} rows, "
                f"file holds {capacity}"
            )

    @property
    def _mapped(self) -> mmap.mmap:
        if self._mmap is None:
            raise ValueError(f"Tick table {self.file_path} is closed")
        return self._mmap

    @property
    def _capacity(self) -> int:
        return (len(self._mapped) - self._HEADER.size) // self.ROW_SIZE

    @property
    def count(self) -> int:
        """Return the number of rows in the table, deleted rows included."""
        return self._count

    def _offset(self, index: int) -> int:
        return self._HEADER.size + index * self.ROW_SIZE

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= self._count:
            raise IndexError(f"Index {index} out of range [0, {self._count})")

    def _grow(self) -> None:
        new_size = len(self._mapped) * self.GROWTH_FACTOR
        self._mapped.close()
        self._file.truncate(new_size)
        self._mmap = mmap.mmap(self._file.fileno(), 0)
        logger.debug("grew tick table %s to %d bytes", self.file_path, new_size)

    def _status(self, index: int) -> int:
        return self._mapped[self._offset(index)]

    def _write_row(self, index: int, record: TickRecord) -> None:
        offset = self._offset(index)
        self._mapped[offset:offset + self.ROW_SIZE] = self._encode(record)

    def insert(self, record: TickRecord) -> int:
        """Append a record and return its index."""
        if self._count >= self._capacity:
            self._grow()

        index = self._count
        self._write_row(index, record)
        self._count += 1
        self._HEADER.pack_into(self._mapped, 0, self._count)
        self._mapped.flush()
        return index

    def get(self, index: int) -> TickRecord:
        """Get a record by index.

        Raises:
            IndexError: If the index is out of range.
            KeyError: If the row has been deleted.
        """
        self._check_index(index)
        status = self._status(index)
        if status == self.ROW_DELETED:
            raise KeyError(f"Row {index} has been deleted")
        if status != self.ROW_LIVE:
            raise ValueError(f"Corrupt tick table {self.file_path}: row {index} status {status:#x}")
        return self._decode(index)

    def update(self, index: int, record: TickRecord) -> None:
        """Overwrite the row at the given index with a live record."""
        self._check_index(index)
        self._write_row(index, record)
        self._mapped.flush()

    def delete(self, index: int) -> None:
        """Mark a row as deleted.

        Rows are never removed, so the indices of other rows stay valid.
        """
        self._check_index(index)
        self._mapped[self._offset(index)] = self.ROW_DELETED
        self._mapped.flush()

    def is_deleted(self, index: int) -> bool:
        """Check if the row at the given index has been deleted."""
        self._check_index(index)
        return self._status(index) == self.ROW_DELETED

    def iter_live(self) -> Iterator[tuple[int, TickRecord]]:
        """Yield (index, record) for every row that has not been deleted."""
        for index in range(self._count):
            if self._status(index) == self.ROW_LIVE:
                yield index, self._decode(index)

    def _encode(self, record: TickRecord) -> bytes:
        return b"".join([
            self._ROW_HEAD.pack(self.ROW_LIVE, record.tick),
            record.liquidity_gross.to_bytes(16, "little"),
            record.liquidity_net.to_bytes(16, "little", signed=True),
            record.fee_growth_outside_0_x128.to_bytes(32, "little"),
            record.fee_growth_outside_1_x128.to_bytes(32, "little"),
        ])

    def _decode(self, index: int) -> TickRecord:
        offset = self._offset(index)
        _, tick = self._ROW_HEAD.unpack_from(self._mapped, offset)
        start = offset + self._ROW_HEAD.size
        payload = self._mapped[start:start + self.PAYLOAD_SIZE]
        return TickRecord(
            tick=tick,
            liquidity_gross=int.from_bytes(payload[0:16], "little"),
            liquidity_net=int.from_bytes(payload[16:32], "little", signed=True),
            fee_growth_outside_0_x128=int.from_bytes(payload[32:64], "little"),
            fee_growth_outside_1_x128=int.from_bytes(payload[64:96], "little"),
        )

    def close(self) -> None:
        """Flush and close the table file."""
        if self._mmap is not None:
            self._mmap.flush()
            self._mmap.close()
            self._mmap = None
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> TickTable:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
