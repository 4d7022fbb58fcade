"""Core types for the tick_lens library."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Number of lattice positions covered by one bitmap word
WORD_BITS = 256

# Effective ranges: ticks are signed 24-bit, word positions signed 16-bit
TICK_MIN_INT24 = -(1 << 23)
TICK_MAX_INT24 = (1 << 23) - 1
WORD_POS_MIN = -(1 << 15)
WORD_POS_MAX = (1 << 15) - 1

# Bounds accepted when writing ticks into a ledger
MIN_TICK = -887272
MAX_TICK = 887272

DEFAULT_MAX_TICKS = 100

UINT128_MAX = (1 << 128) - 1
INT128_MIN = -(1 << 127)
INT128_MAX = (1 << 127) - 1
UINT256_MAX = (1 << 256) - 1


class InvalidQueryError(ValueError):
    """Raised when a scan is requested with a bad range or limit."""


class TickOverflowError(OverflowError):
    """Raised when a decoded tick does not fit in a signed 24-bit integer."""


class ScanError(RuntimeError):
    """Raised when a bitmap loader reports a count that disagrees with its masks."""


class TickNotPopulatedError(KeyError):
    """Raised when a tick without a set bit is fetched or cleared."""

    def __init__(self, tick: int) -> None:
        super().__init__(tick)
        self.tick = tick

    def __str__(self) -> str:
        return f"Tick {self.tick} is not populated"


@dataclass(frozen=True)
class TickRecord:
    """State stored for a populated tick.

    Liquidity values follow the usual concentrated-liquidity conventions:
    ``liquidity_gross`` is the total liquidity referencing the tick and
    ``liquidity_net`` is the signed amount added when the tick is crossed
    left to right.
    """

    tick: int
    liquidity_gross: int = 0
    liquidity_net: int = 0
    fee_growth_outside_0_x128: int = 0
    fee_growth_outside_1_x128: int = 0

    def __post_init__(self) -> None:
        if not TICK_MIN_INT24 <= self.tick <= TICK_MAX_INT24:
            raise ValueError(f"Tick {self.tick} out of int24 range")
        if not 0 <= self.liquidity_gross <= UINT128_MAX:
            raise ValueError(f"liquidity_gross {self.liquidity_gross} out of uint128 range")
        if not INT128_MIN <= self.liquidity_net <= INT128_MAX:
            raise ValueError(f"liquidity_net {self.liquidity_net} out of int128 range")
        for name in ("fee_growth_outside_0_x128", "fee_growth_outside_1_x128"):
            value = getattr(self, name)
            if not 0 <= value <= UINT256_MAX:
                raise ValueError(f"{name} {value} out of uint256 range")

    def to_dict(self) -> dict[str, Any]:
        """Return the record as a plain dict."""
        return {
            "tick": self.tick,
            "liquidity_gross": self.liquidity_gross,
            "liquidity_net": self.liquidity_net,
            "fee_growth_outside_0_x128": self.fee_growth_outside_0_x128,
            "fee_growth_outside_1_x128": self.fee_growth_outside_1_x128,
        }


@dataclass
class ScanResult:
    """Output of one range scan.

    ``resume_tick`` is only meaningful when ``has_more`` is set; it is the
    first in-range tick not included in ``records`` and the lower bound to
    pass to the next call.
    """

    records: list[Any] = field(default_factory=list)
    tick_spacing: int = 1
    has_more: bool = False
    resume_tick: int = 0

    @property
    def ticks(self) -> list[int]:
        """Return the tick of every record, in order."""
        return [record.tick for record in self.records]

    def __len__(self) -> int:
        return len(self.records)
