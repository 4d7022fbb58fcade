"""Example usage of the tick_lens library."""

from pathlib import Path

from tick_lens import TickLedger, TickRecord, iter_pages, populated_ticks_in_range

# Create a data directory for storage
data_dir = Path("./example_ledger")

with TickLedger.open(data_dir, tick_spacing=60) as ledger:
    # Populate a handful of ticks around the current price
    for tick, liquidity in [(-120, 500), (-60, 250), (0, 1000), (60, -250), (120, -500)]:
        ledger.set_tick(
            TickRecord(tick=tick, liquidity_gross=abs(liquidity), liquidity_net=liquidity)
        )

    # A single bounded call: at most two records, plus where to resume
    result = populated_ticks_in_range(ledger, -120, 120, max_ticks=2)
    print(f"First page: {result.ticks}")
    if result.has_more:
        print(f"Resume from tick {result.resume_tick}")

    # Let the helper drive the pagination
    for number, page in enumerate(iter_pages(ledger, -120, 120, max_ticks=2)):
        for record in page.records:
            print(f"page {number}: tick {record.tick:>5}  net {record.liquidity_net:>6}")

print(f"\nData stored in: {data_dir.absolute()}")
