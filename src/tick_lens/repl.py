"""Interactive REPL for the tick lens query language."""

from __future__ import annotations

import argparse
import logging
import re
import readline  # noqa: F401 - enables line editing in input()
import sys
from pathlib import Path
from typing import Any

from tick_lens.ledger import TickLedger
from tick_lens.parsing.query_parser import QueryParser
from tick_lens.query_executor import LensExecutor, QueryResult, ScanQueryResult, UpdateResult
from tick_lens.types import DEFAULT_MAX_TICKS

logger = logging.getLogger(__name__)

COMMENT_PATTERN = re.compile(r"--[^\n]*")


def format_value(value: Any, max_width: int = 40) -> str:
    """Format a cell value for display."""
    if value is None:
        return "NULL"
    s = str(value)
    if len(s) > max_width:
        return s[:max_width - 3] + "..."
    return s


def print_result(result: QueryResult, max_width: int = 80) -> None:
    """Print query results in a formatted table."""
    if isinstance(result, UpdateResult):
        if result.message:
            print(result.message)
        return
    elif result.message:
        print(f"Error: {result.message}")
        return

    if not result.rows:
        print("(no results)")
    else:
        # Calculate column widths
        col_widths = {col: len(col) for col in result.columns}
        for row in result.rows:
            for col in result.columns:
                col_widths[col] = max(col_widths[col], len(format_value(row.get(col))))

        header = " | ".join(col.ljust(col_widths[col]) for col in result.columns)
        print(header)
        print("-" * min(len(header), max_width))

        for row in result.rows:
            print(" | ".join(format_value(row.get(col)).ljust(col_widths[col]) for col in result.columns))

        print(f"\n({len(result.rows)} row{'s' if len(result.rows) != 1 else ''})")

    if isinstance(result, ScanQueryResult) and result.has_more:
        print(f"More ticks remain; resume with lower tick {result.resume_tick}")


def print_help() -> None:
    """Print help text."""
    print("""
Queries (terminate with ';'):
  scan L to U [limit N] [exact]     One page of populated ticks in [L, U]
  collect L to U [limit N] [exact]  Every populated tick in [L, U], paging N at a time
  set tick T gross G net N [fee0 F] [fee1 F]
                                    Populate or update tick T
  clear tick T                      Remove tick T
  get tick T                        Show the record of tick T
  show bitmap [L to U]              Show non-empty bitmap words
  show info                         Show ledger properties

'exact' filters every page to the exact range instead of whole boundary words.

Commands:
  help    Show this help
  exit    Leave the REPL
""")


def open_ledger(data_dir: Path, tick_spacing: int | None) -> TickLedger:
    """Open the ledger in ``data_dir``, creating it when ``tick_spacing`` is given."""
    return TickLedger.open(data_dir, tick_spacing)


def run_statements(executor: LensExecutor, text: str, verbose: bool = False) -> int:
    """Parse and execute every statement in ``text``.

    Returns:
        0 on success, 1 on a syntax error or failed query.
    """
    parser = QueryParser()
    try:
        queries = parser.parse_program(text)
    except SyntaxError as e:
        print(f"Syntax error: {e}", file=sys.stderr)
        return 1

    status = 0
    for query in queries:
        if verbose:
            print(f"> {query}")
        result = executor.execute(query)
        print_result(result)
        if result.message and not isinstance(result, UpdateResult):
            status = 1
    return status


def is_statement_complete(text: str) -> bool:
    """Return whether ``text`` needs no continuation line in the REPL."""
    code = COMMENT_PATTERN.sub("", text).strip()
    return not code or code.endswith(";")


def execute_line(parser: QueryParser, executor: LensExecutor, line: str) -> None:
    """Parse and execute every statement of one REPL entry, printing each result."""
    try:
        queries = parser.parse_program(line)
    except SyntaxError as e:
        print(f"Syntax error: {e}")
        return

    for query in queries:
        try:
            print_result(executor.execute(query))
        except Exception as e:
            print(f"Error: {e}")


def run_file(
    file_path: Path,
    data_dir: Path,
    tick_spacing: int | None,
    verbose: bool = False,
    default_limit: int = DEFAULT_MAX_TICKS,
) -> int:
    """Execute queries from a file.

    Returns:
        0 on success, 1 on error
    """
    try:
        content = file_path.read_text()
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    with open_ledger(data_dir, tick_spacing) as ledger:
        return run_statements(LensExecutor(ledger, default_limit), content, verbose)


def run_repl(data_dir: Path, tick_spacing: int | None, default_limit: int = DEFAULT_MAX_TICKS) -> int:
    """Run the interactive REPL."""
    try:
        ledger = open_ledger(data_dir, tick_spacing)
    except (OSError, ValueError) as e:
        print(f"Error loading ledger: {e}", file=sys.stderr)
        return 1

    print("Tick lens REPL")
    print(f"Ledger: {data_dir} (tick spacing {ledger.tick_spacing})")
    print("Type 'help' for commands, 'exit' to quit.\n")

    executor = LensExecutor(ledger, default_limit)
    parser = QueryParser()

    # Command history
    history_file = Path.home() / ".tick_lens_history"
    try:
        readline.read_history_file(history_file)
    except (FileNotFoundError, OSError):
        pass

    try:
        while True:
            try:
                line = input("ticks> ").strip()
            except EOFError:
                print()
                break

            if not line:
                continue

            if line.lower() in ("exit", "quit"):
                break
            elif line.lower() == "help":
                print_help()
                continue

            # Multi-line queries continue until a semicolon
            while not is_statement_complete(line):
                try:
                    continuation = input("...> ").strip()
                except EOFError:
                    break
                if not continuation:
                    # Empty line ends the statement
                    break
                line += "\n" + continuation

            if not COMMENT_PATTERN.sub("", line).strip():
                continue

            execute_line(parser, executor, line)
            print()
    except KeyboardInterrupt:
        print()
    finally:
        try:
            readline.write_history_file(history_file)
        except OSError:
            pass
        ledger.close()

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Interactive REPL for querying a tick ledger"
    )
    arg_parser.add_argument(
        "data_dir",
        type=Path,
        help="Path to the ledger directory (created when --spacing is given)",
    )
    arg_parser.add_argument(
        "-s", "--spacing",
        type=int,
        default=None,
        help="Tick spacing of a new ledger (must match for an existing one)",
    )
    arg_parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute the given statements and exit",
    )
    arg_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Execute queries from a file and exit",
    )
    arg_parser.add_argument(
        "-n", "--limit",
        type=int,
        default=DEFAULT_MAX_TICKS,
        help=f"Default page size for scan and collect (default {DEFAULT_MAX_TICKS})",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print each query before executing (for -c/-f)",
    )
    arg_parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default WARNING)",
    )

    args = arg_parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    if args.limit <= 0:
        print("Error: --limit must be positive", file=sys.stderr)
        return 1

    if not args.data_dir.exists() and args.spacing is None:
        print(f"Error: Ledger not found: {args.data_dir} (pass --spacing to create it)", file=sys.stderr)
        return 1

    if args.file:
        if not args.file.exists():
            print(f"Error: File not found: {args.file}", file=sys.stderr)
            return 1
        try:
            return run_file(args.file, args.data_dir, args.spacing, args.verbose, args.limit)
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    if args.command:
        try:
            with open_ledger(args.data_dir, args.spacing) as ledger:
                return run_statements(LensExecutor(ledger, args.limit), args.command, args.verbose)
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    return run_repl(args.data_dir, args.spacing, args.limit)


if __name__ == "__main__":
    sys.exit(main())
