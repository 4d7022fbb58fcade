"""Bounded range scans over a tick bitmap.

A scan resolves the requested tick range to a word range, loads those words
and their total popcount, and then takes one of two paths:

- full scan, when every candidate fits within ``max_ticks``: every set bit of
  every loaded word is returned;
- batched scan, otherwise: ticks are visited in increasing order, filtered to
  the exact range, and the scan stops at ``max_ticks`` records with a resume
  tick for the next call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Any

from tick_lens.decoder import decode_tick, iter_set_bits
from tick_lens.protocols import BitmapLoader, RecordFetcher, WordRangeResolver
from tick_lens.types import DEFAULT_MAX_TICKS, InvalidQueryError, ScanError, ScanResult

logger = logging.getLogger(__name__)


class _ResultBuilder:
    """Fixed-capacity record buffer, trimmed to its filled length on build."""

    def __init__(self, capacity: int) -> None:
        self._records: list[Any] = [None] * capacity
        self._length = 0

    @property
    def length(self) -> int:
        return self._length

    def append(self, record: Any) -> None:
        if self._length >= len(self._records):
            raise ScanError(
                f"Bitmap loader reported {len(self._records)} populated ticks "
                f"but more bits are set"
            )
        self._records[self._length] = record
        self._length += 1

    def build(self, tick_spacing: int, has_more: bool = False, resume_tick: int = 0) -> ScanResult:
        del self._records[self._length:]
        return ScanResult(
            records=self._records,
            tick_spacing=tick_spacing,
            has_more=has_more,
            resume_tick=resume_tick if has_more else 0,
        )


def _iter_ticks(masks: Sequence[int], word_lower: int, tick_spacing: int) -> Iterator[int]:
    """Yield the tick of every set bit, words then bits in increasing order."""
    for offset, mask in enumerate(masks):
        word_pos = word_lower + offset
        for bit_pos in iter_set_bits(mask):
            yield decode_tick(word_pos, bit_pos, tick_spacing)


def _validate(tick_lower: int, tick_upper: int, max_ticks: int) -> None:
    if tick_lower > tick_upper:
        raise InvalidQueryError(
            f"Lower tick {tick_lower} is greater than upper tick {tick_upper}"
        )
    if isinstance(max_ticks, bool) or not isinstance(max_ticks, int):
        raise InvalidQueryError(f"max_ticks must be an integer, got {max_ticks!r}")
    if max_ticks <= 0:
        raise InvalidQueryError(f"max_ticks must be positive, got {max_ticks}")


class TickLens:
    """Runs bounded range scans against injected collaborators.

    A single object implementing all three collaborator interfaces (such as
    a ``TickLedger``) can be passed as ``resolver`` alone.
    """

    def __init__(
        self,
        resolver: WordRangeResolver,
        loader: BitmapLoader | None = None,
        fetcher: RecordFetcher | None = None,
    ) -> None:
        self.resolver = resolver
        self.loader: BitmapLoader = loader if loader is not None else resolver  # type: ignore[assignment]
        self.fetcher: RecordFetcher = fetcher if fetcher is not None else resolver  # type: ignore[assignment]

    def populated_ticks_in_range(
        self,
        tick_lower: int,
        tick_upper: int,
        max_ticks: int = DEFAULT_MAX_TICKS,
        exact_bounds: bool = False,
    ) -> ScanResult:
        """Return at most ``max_ticks`` populated ticks in [tick_lower, tick_upper].

        Args:
            tick_lower: Inclusive lower bound; pass the previous
                ``resume_tick`` to continue a paginated scan.
            tick_upper: Inclusive upper bound.
            max_ticks: Maximum number of records to return.
            exact_bounds: Also filter the full-scan path to the exact range.
                By default the full scan returns every populated tick of the
                boundary words, which may lie outside the range.

        Raises:
            InvalidQueryError: If the range is inverted or ``max_ticks`` is
                not a positive integer.
        """
        _validate(tick_lower, tick_upper, max_ticks)

        tick_spacing = self.resolver.tick_spacing
        word_lower, word_upper = self.resolver.resolve_word_range(
            tick_lower, tick_upper, tick_spacing
        )
        masks, total = self.loader.load_bitmap_and_count(word_lower, word_upper)

        if total <= max_ticks:
            logger.debug(
                "full scan of words [%d, %d]: %d candidates, limit %d",
                word_lower, word_upper, total, max_ticks,
            )
            result = self._full_scan(
                masks, word_lower, tick_spacing, total,
                (tick_lower, tick_upper) if exact_bounds else None,
            )
        else:
            logger.debug(
                "batched scan of words [%d, %d]: %d candidates, limit %d",
                word_lower, word_upper, total, max_ticks,
            )
            result = self._batched_scan(
                masks, word_lower, tick_spacing, tick_lower, tick_upper, max_ticks
            )

        logger.debug(
            "scan [%d, %d] returned %d records (has_more=%s, resume_tick=%d)",
            tick_lower, tick_upper, len(result.records), result.has_more, result.resume_tick,
        )
        return result

    def _full_scan(
        self,
        masks: Sequence[int],
        word_lower: int,
        tick_spacing: int,
        total: int,
        bounds: tuple[int, int] | None,
    ) -> ScanResult:
        builder = _ResultBuilder(total)
        for tick in _iter_ticks(masks, word_lower, tick_spacing):
            if bounds is not None:
                if tick < bounds[0]:
                    continue
                if tick > bounds[1]:
                    break
            builder.append(self.fetcher.fetch_record(tick))
        return builder.build(tick_spacing)

    def _batched_scan(
        self,
        masks: Sequence[int],
        word_lower: int,
        tick_spacing: int,
        tick_lower: int,
        tick_upper: int,
        max_ticks: int,
    ) -> ScanResult:
        builder = _ResultBuilder(max_ticks)
        for tick in _iter_ticks(masks, word_lower, tick_spacing):
            if tick < tick_lower:
                continue
            if tick > tick_upper:
                return builder.build(tick_spacing)
            if builder.length == max_ticks:
                # This tick is not consumed; the next call starts from it.
                return builder.build(tick_spacing, has_more=True, resume_tick=tick)
            builder.append(self.fetcher.fetch_record(tick))
        return builder.build(tick_spacing)


def _as_lens(source: Any) -> TickLens:
    return source if isinstance(source, TickLens) else TickLens(source)


def populated_ticks_in_range(
    source: Any,
    tick_lower: int,
    tick_upper: int,
    max_ticks: int = DEFAULT_MAX_TICKS,
    exact_bounds: bool = False,
) -> ScanResult:
    """Scan ``source`` (a ``TickLens`` or an object implementing all collaborators)."""
    return _as_lens(source).populated_ticks_in_range(
        tick_lower, tick_upper, max_ticks, exact_bounds
    )


def iter_pages(
    source: Any,
    tick_lower: int,
    tick_upper: int,
    max_ticks: int = DEFAULT_MAX_TICKS,
    exact_bounds: bool = True,
) -> Iterator[ScanResult]:
    """Yield successive pages of a range scan until no more ticks remain.

    Each page is an independent call whose lower bound is the previous
    page's ``resume_tick``. Exact bounds are applied by default so a page
    served by the full-scan path cannot repeat ticks below its lower bound.
    """
    lens = _as_lens(source)
    lower = tick_lower
    while True:
        page = lens.populated_ticks_in_range(lower, tick_upper, max_ticks, exact_bounds)
        yield page
        if not page.has_more:
            return
        lower = page.resume_tick


def collect_populated_ticks(
    source: Any,
    tick_lower: int,
    tick_upper: int,
    max_ticks: int = DEFAULT_MAX_TICKS,
    exact_bounds: bool = True,
) -> list[Any]:
    """Return every populated tick record in the range, paging ``max_ticks`` at a time."""
    records: list[Any] = []
    for page in iter_pages(source, tick_lower, tick_upper, max_ticks, exact_bounds):
        records.extend(page.records)
    return records
