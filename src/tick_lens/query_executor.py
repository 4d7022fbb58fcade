"""Query executor for the tick lens query language."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from tick_lens.decoder import iter_set_bits
from tick_lens.lens import TickLens, collect_populated_ticks
from tick_lens.ledger import TickLedger
from tick_lens.parsing.query_parser import (
    ClearTickQuery,
    CollectQuery,
    GetTickQuery,
    Query,
    ScanQuery,
    SetTickQuery,
    ShowBitmapQuery,
    ShowInfoQuery,
)
from tick_lens.types import (
    DEFAULT_MAX_TICKS,
    InvalidQueryError,
    TickNotPopulatedError,
    TickOverflowError,
    TickRecord,
)

logger = logging.getLogger(__name__)

RECORD_COLUMNS = [
    "tick",
    "liquidity_gross",
    "liquidity_net",
    "fee_growth_outside_0_x128",
    "fee_growth_outside_1_x128",
]


@dataclass
class QueryResult:
    """Result of a query execution."""

    columns: list[str]
    rows: list[dict[str, Any]]
    message: str | None = None


@dataclass
class ScanQueryResult(QueryResult):
    """Result of a SCAN or COLLECT query."""

    tick_spacing: int = 1
    has_more: bool = False
    resume_tick: int = 0


@dataclass
class UpdateResult(QueryResult):
    """Result of a SET TICK or CLEAR TICK query."""

    tick: int = 0


class LensExecutor:
    """Executes tick lens queries against a ledger."""

    def __init__(self, ledger: TickLedger, default_limit: int = DEFAULT_MAX_TICKS) -> None:
        self.ledger = ledger
        self.lens = TickLens(ledger)
        self.default_limit = default_limit

    def execute(self, query: Query) -> QueryResult:
        """Execute a query and return results.

        Input errors are reported through ``message``; storage failures
        propagate.
        """
        try:
            if isinstance(query, ScanQuery):
                return self._execute_scan(query)
            elif isinstance(query, CollectQuery):
                return self._execute_collect(query)
            elif isinstance(query, SetTickQuery):
                return self._execute_set_tick(query)
            elif isinstance(query, ClearTickQuery):
                return self._execute_clear_tick(query)
            elif isinstance(query, GetTickQuery):
                return self._execute_get_tick(query)
            elif isinstance(query, ShowBitmapQuery):
                return self._execute_show_bitmap(query)
            elif isinstance(query, ShowInfoQuery):
                return self._execute_show_info()
            else:
                raise ValueError(f"Unknown query type: {type(query)}")
        except (InvalidQueryError, TickNotPopulatedError, TickOverflowError) as e:
            return QueryResult(columns=[], rows=[], message=str(e))

    def _record_rows(self, records: list[TickRecord]) -> list[dict[str, Any]]:
        return [record.to_dict() for record in records]

    def _execute_scan(self, query: ScanQuery) -> ScanQueryResult:
        limit = query.limit if query.limit is not None else self.default_limit
        result = self.lens.populated_ticks_in_range(
            query.tick_lower, query.tick_upper, limit, exact_bounds=query.exact
        )
        return ScanQueryResult(
            columns=RECORD_COLUMNS,
            rows=self._record_rows(result.records),
            tick_spacing=result.tick_spacing,
            has_more=result.has_more,
            resume_tick=result.resume_tick,
        )

    def _execute_collect(self, query: CollectQuery) -> ScanQueryResult:
        limit = query.limit if query.limit is not None else self.default_limit
        records = collect_populated_ticks(
            self.lens, query.tick_lower, query.tick_upper, limit, exact_bounds=query.exact
        )
        return ScanQueryResult(
            columns=RECORD_COLUMNS,
            rows=self._record_rows(records),
            tick_spacing=self.ledger.tick_spacing,
        )

    def _execute_set_tick(self, query: SetTickQuery) -> QueryResult:
        try:
            record = TickRecord(
                tick=query.tick,
                liquidity_gross=query.liquidity_gross,
                liquidity_net=query.liquidity_net,
                fee_growth_outside_0_x128=query.fee_growth_outside_0_x128,
                fee_growth_outside_1_x128=query.fee_growth_outside_1_x128,
            )
            is_new = self.ledger.set_tick(record)
        except ValueError as e:
            return QueryResult(columns=[], rows=[], message=str(e))

        action = "Populated" if is_new else "Updated"
        logger.debug("%s tick %d", action.lower(), query.tick)
        return UpdateResult(columns=[], rows=[], message=f"{action} tick {query.tick}", tick=query.tick)

    def _execute_clear_tick(self, query: ClearTickQuery) -> QueryResult:
        self.ledger.clear_tick(query.tick)
        return UpdateResult(columns=[], rows=[], message=f"Cleared tick {query.tick}", tick=query.tick)

    def _execute_get_tick(self, query: GetTickQuery) -> QueryResult:
        record = self.ledger.fetch_record(query.tick)
        return QueryResult(columns=RECORD_COLUMNS, rows=[record.to_dict()])

    def _execute_show_bitmap(self, query: ShowBitmapQuery) -> QueryResult:
        spacing = self.ledger.tick_spacing
        if query.tick_lower is None:
            words = list(self.ledger.bitmap.words())
        else:
            if query.tick_lower > query.tick_upper:  # type: ignore[operator]
                raise InvalidQueryError(
                    f"Lower tick {query.tick_lower} is greater than upper tick {query.tick_upper}"
                )
            word_lower, word_upper = self.ledger.resolve_word_range(
                query.tick_lower, query.tick_upper, spacing  # type: ignore[arg-type]
            )
            masks, _ = self.ledger.load_bitmap_and_count(word_lower, word_upper)
            words = [(word_lower + i, mask) for i, mask in enumerate(masks) if mask]

        rows = [
            {
                "word": word_pos,
                "populated": mask.bit_count(),
                "bits": ",".join(str(bit) for bit in iter_set_bits(mask)),
            }
            for word_pos, mask in words
        ]
        return QueryResult(columns=["word", "populated", "bits"], rows=rows)

    def _execute_show_info(self) -> QueryResult:
        storage = self.ledger.storage
        rows = [
            {"property": "tick_spacing", "value": self.ledger.tick_spacing},
            {"property": "populated_ticks", "value": self.ledger.populated_count},
            {"property": "storage", "value": str(storage.data_dir) if storage else "memory"},
        ]
        return QueryResult(columns=["property", "value"], rows=rows)
