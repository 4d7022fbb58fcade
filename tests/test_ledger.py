"""Tests for the tick ledger."""

import pytest

from tick_lens.lens import collect_populated_ticks, populated_ticks_in_range
from tick_lens.ledger import TickLedger
from tick_lens.types import (
    MAX_TICK,
    MIN_TICK,
    UINT128_MAX,
    UINT256_MAX,
    TickNotPopulatedError,
    TickRecord,
)


def _record(tick, gross=1):
    return TickRecord(tick=tick, liquidity_gross=gross, liquidity_net=gross)


class TestMemoryLedger:
    """Tests for a ledger without storage."""

    def test_set_and_fetch(self):
        ledger = TickLedger(60)
        assert ledger.set_tick(_record(120)) is True

        assert ledger.is_populated(120)
        assert ledger.fetch_record(120) == _record(120)
        assert ledger.populated_count == 1

    def test_set_existing_replaces(self):
        ledger = TickLedger(60)
        ledger.set_tick(_record(120, gross=1))
        assert ledger.set_tick(_record(120, gross=9)) is False

        assert ledger.fetch_record(120).liquidity_gross == 9
        assert ledger.populated_count == 1

    def test_clear(self):
        ledger = TickLedger(60)
        ledger.set_tick(_record(120))

        cleared = ledger.clear_tick(120)

        assert cleared.tick == 120
        assert not ledger.is_populated(120)
        with pytest.raises(TickNotPopulatedError):
            ledger.fetch_record(120)

    def test_clear_missing(self):
        with pytest.raises(KeyError):
            TickLedger(60).clear_tick(60)

    def test_rejects_off_lattice_tick(self):
        with pytest.raises(ValueError):
            TickLedger(60).set_tick(_record(90))

    def test_rejects_tick_out_of_bounds(self):
        ledger = TickLedger(1)
        with pytest.raises(ValueError):
            ledger.set_tick(_record(MAX_TICK + 1))
        with pytest.raises(ValueError):
            ledger.set_tick(_record(MIN_TICK - 1))

    def test_extreme_ticks_scannable(self):
        ledger = TickLedger(1)
        ledger.set_tick(_record(MIN_TICK))
        ledger.set_tick(_record(MAX_TICK))

        result = populated_ticks_in_range(ledger, MIN_TICK, MAX_TICK, 10)

        assert result.ticks == [MIN_TICK, MAX_TICK]


class TestPersistedLedger:
    """Tests for a ledger backed by LedgerStorage."""

    def test_round_trip(self, tmp_path):
        with TickLedger.open(tmp_path, tick_spacing=60) as ledger:
            for tick in (-120, -60, 0, 60, 120):
                ledger.set_tick(_record(tick, gross=abs(tick)))
            ledger.set_tick(_record(0, gross=42))
            ledger.clear_tick(-60)

        with TickLedger.open(tmp_path) as ledger:
            assert ledger.tick_spacing == 60
            assert ledger.populated_count == 4
            assert ledger.fetch_record(0).liquidity_gross == 42
            assert not ledger.is_populated(-60)

            result = populated_ticks_in_range(ledger, -120, 120, 2)
            assert result.ticks == [-120, 0]
            assert result.resume_tick == 60

    def test_all_ones_record_persists(self, tmp_path):
        # Every data byte of this row is 0xFF
        record = TickRecord(
            tick=-1,
            liquidity_gross=UINT128_MAX,
            liquidity_net=-1,
            fee_growth_outside_0_x128=UINT256_MAX,
            fee_growth_outside_1_x128=UINT256_MAX,
        )
        with TickLedger.open(tmp_path, tick_spacing=1) as ledger:
            assert ledger.set_tick(record) is True
            assert ledger.fetch_record(-1) == record

        with TickLedger.open(tmp_path) as ledger:
            assert ledger.is_populated(-1)
            assert ledger.populated_count == 1
            assert ledger.fetch_record(-1) == record

    def test_repopulate_after_clear(self, tmp_path):
        with TickLedger.open(tmp_path, tick_spacing=10) as ledger:
            ledger.set_tick(_record(10))
            ledger.clear_tick(10)
            ledger.set_tick(_record(10, gross=3))

        with TickLedger.open(tmp_path) as ledger:
            assert ledger.fetch_record(10).liquidity_gross == 3
            assert ledger.populated_count == 1

    def test_many_ticks_paged(self, tmp_path):
        ticks = list(range(-3000, 3000, 30))
        with TickLedger.open(tmp_path, tick_spacing=30) as ledger:
            for tick in ticks:
                ledger.set_tick(_record(tick))

            records = collect_populated_ticks(ledger, -3000, 2970, 37)

        assert [r.tick for r in records] == ticks

    def test_spacing_mismatch(self, tmp_path):
        with TickLedger.open(tmp_path, tick_spacing=10):
            pass
        with pytest.raises(ValueError):
            TickLedger.open(tmp_path, tick_spacing=20)
