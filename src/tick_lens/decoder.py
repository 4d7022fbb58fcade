"""Conversion between ticks and bitmap (word, bit) positions."""

from __future__ import annotations

from collections.abc import Iterator

from tick_lens.types import (
    TICK_MAX_INT24,
    TICK_MIN_INT24,
    WORD_BITS,
    WORD_POS_MAX,
    WORD_POS_MIN,
    TickOverflowError,
)


def _check_spacing(tick_spacing: int) -> None:
    if tick_spacing <= 0:
        raise ValueError(f"Tick spacing must be positive, got {tick_spacing}")


def decode_tick(word_pos: int, bit_pos: int, tick_spacing: int) -> int:
    """Return the tick addressed by bit ``bit_pos`` of word ``word_pos``.

    Raises:
        ValueError: If the word or bit position is out of range, or the
            spacing is not positive.
        TickOverflowError: If the tick does not fit in a signed 24-bit integer.
    """
    _check_spacing(tick_spacing)
    if not WORD_POS_MIN <= word_pos <= WORD_POS_MAX:
        raise ValueError(f"Word position {word_pos} out of range [{WORD_POS_MIN}, {WORD_POS_MAX}]")
    if not 0 <= bit_pos < WORD_BITS:
        raise ValueError(f"Bit position {bit_pos} out of range [0, {WORD_BITS})")

    tick = tick_spacing * (word_pos * WORD_BITS + bit_pos)
    if not TICK_MIN_INT24 <= tick <= TICK_MAX_INT24:
        raise TickOverflowError(
            f"Tick {tick} (word {word_pos}, bit {bit_pos}, spacing {tick_spacing}) "
            f"overflows int24"
        )
    return tick


def tick_position(tick: int, tick_spacing: int) -> tuple[int, int]:
    """Return the (word_pos, bit_pos) holding ``tick``.

    The tick is compressed with floor division, so ticks that are not a
    multiple of the spacing map to the lattice point below them.
    """
    _check_spacing(tick_spacing)
    compressed = tick // tick_spacing
    return compressed >> 8, compressed & 0xFF


def iter_set_bits(mask: int) -> Iterator[int]:
    """Yield the positions of the set bits of ``mask`` in increasing order."""
    while mask:
        low = mask & -mask
        yield low.bit_length() - 1
        mask ^= low
