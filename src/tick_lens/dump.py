"""Dump utility for inspecting tick ledgers."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from tick_lens.lens import iter_pages
from tick_lens.ledger import TickLedger
from tick_lens.query_executor import RECORD_COLUMNS
from tick_lens.storage import load_metadata
from tick_lens.types import DEFAULT_MAX_TICKS, MAX_TICK, MIN_TICK, InvalidQueryError

logger = logging.getLogger(__name__)


def dump_ticks(
    ledger: TickLedger,
    tick_lower: int = MIN_TICK,
    tick_upper: int = MAX_TICK,
    page_size: int = DEFAULT_MAX_TICKS,
) -> None:
    """Print every populated tick in the range as an aligned table."""
    print(f"Tick spacing: {ledger.tick_spacing}")
    print(f"Range: [{tick_lower}, {tick_upper}]")
    print()

    header = " | ".join(f"{col:>12}" if i == 0 else col for i, col in enumerate(RECORD_COLUMNS))
    print(header)
    print("-" * len(header))

    total = 0
    for page_number, page in enumerate(iter_pages(ledger, tick_lower, tick_upper, page_size)):
        logger.debug("page %d: %d ticks", page_number, len(page.records))
        for record in page.records:
            values = record.to_dict()
            print(" | ".join(
                f"{values[col]:>12}" if i == 0 else str(values[col])
                for i, col in enumerate(RECORD_COLUMNS)
            ))
        total += len(page.records)

    print(f"\n({total} populated tick{'s' if total != 1 else ''})")


def dump_ticks_json(
    ledger: TickLedger,
    tick_lower: int = MIN_TICK,
    tick_upper: int = MAX_TICK,
    page_size: int = DEFAULT_MAX_TICKS,
) -> None:
    """Print every populated tick in the range as a JSON document."""
    records = []
    for page in iter_pages(ledger, tick_lower, tick_upper, page_size):
        records.extend(record.to_dict() for record in page.records)

    output = {
        "tick_spacing": ledger.tick_spacing,
        "tick_lower": tick_lower,
        "tick_upper": tick_upper,
        "ticks": records,
    }
    print(json.dumps(output, indent=2))


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Dump the populated ticks of a ledger to the console"
    )
    parser.add_argument(
        "data_dir",
        type=Path,
        help="Path to the ledger directory",
    )
    parser.add_argument(
        "--lower",
        type=int,
        default=MIN_TICK,
        help=f"Lowest tick to dump (default {MIN_TICK})",
    )
    parser.add_argument(
        "--upper",
        type=int,
        default=MAX_TICK,
        help=f"Highest tick to dump (default {MAX_TICK})",
    )
    parser.add_argument(
        "-j", "--json",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "-n", "--page-size",
        type=int,
        default=DEFAULT_MAX_TICKS,
        help=f"Number of ticks fetched per scan (default {DEFAULT_MAX_TICKS})",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default WARNING)",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    if not args.data_dir.exists():
        print(f"Error: Data directory not found: {args.data_dir}", file=sys.stderr)
        return 1

    try:
        load_metadata(args.data_dir)
        ledger = TickLedger.open(args.data_dir)
    except (OSError, ValueError) as e:
        print(f"Error loading ledger: {e}", file=sys.stderr)
        return 1

    try:
        if args.json:
            dump_ticks_json(ledger, args.lower, args.upper, args.page_size)
        else:
            dump_ticks(ledger, args.lower, args.upper, args.page_size)
    except InvalidQueryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        ledger.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
