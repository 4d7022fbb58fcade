"""Collaborator interfaces the range scan depends on."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class WordRangeResolver(Protocol):
    """Maps a tick range onto the bitmap words that may hold it."""

    @property
    def tick_spacing(self) -> int: ...

    def resolve_word_range(
        self, tick_lower: int, tick_upper: int, tick_spacing: int
    ) -> tuple[int, int]: ...


@runtime_checkable
class BitmapLoader(Protocol):
    """Loads the masks of an inclusive word range and their total popcount."""

    def load_bitmap_and_count(
        self, word_lower: int, word_upper: int
    ) -> tuple[Sequence[int], int]: ...


@runtime_checkable
class RecordFetcher(Protocol):
    """Returns the record of a populated tick."""

    def fetch_record(self, tick: int) -> Any: ...
