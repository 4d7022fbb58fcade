"""Sparse tick bitmap."""

from __future__ import annotations

from collections.abc import Iterator

from tick_lens.decoder import tick_position
from tick_lens.types import TICK_MAX_INT24, TICK_MIN_INT24, WORD_POS_MAX, WORD_POS_MIN


class TickBitmap:
    """Sparse bitmap of populated ticks, one 256-bit word per word position.

    Only non-empty words are stored. A tick is populated when the bit at
    ``tick_position(tick, tick_spacing)`` is set.
    """

    def __init__(self, tick_spacing: int) -> None:
        if tick_spacing <= 0:
            raise ValueError(f"Tick spacing must be positive, got {tick_spacing}")
        self._tick_spacing = tick_spacing
        self._words: dict[int, int] = {}
        self._populated = 0

    @property
    def tick_spacing(self) -> int:
        return self._tick_spacing

    @property
    def populated_count(self) -> int:
        """Return the number of set bits across all words."""
        return self._populated

    def _position(self, tick: int) -> tuple[int, int]:
        if not TICK_MIN_INT24 <= tick <= TICK_MAX_INT24:
            raise ValueError(f"Tick {tick} does not fit in a signed 24-bit integer")
        if tick % self._tick_spacing != 0:
            raise ValueError(
                f"Tick {tick} is not a multiple of the tick spacing {self._tick_spacing}"
            )
        word_pos, bit_pos = tick_position(tick, self._tick_spacing)
        if not WORD_POS_MIN <= word_pos <= WORD_POS_MAX:
            raise ValueError(f"Tick {tick} maps outside the word range")
        return word_pos, bit_pos

    def flip_tick(self, tick: int) -> bool:
        """Toggle the bit for ``tick`` and return whether it is now set."""
        word_pos, bit_pos = self._position(tick)
        mask = self._words.get(word_pos, 0) ^ (1 << bit_pos)
        if mask:
            self._words[word_pos] = mask
        else:
            self._words.pop(word_pos, None)

        now_set = bool(mask >> bit_pos & 1)
        self._populated += 1 if now_set else -1
        return now_set

    def is_populated(self, tick: int) -> bool:
        """Return whether the bit for ``tick`` is set."""
        if tick % self._tick_spacing != 0:
            return False
        word_pos, bit_pos = tick_position(tick, self._tick_spacing)
        return bool(self._words.get(word_pos, 0) >> bit_pos & 1)

    def word(self, word_pos: int) -> int:
        """Return the mask stored for ``word_pos`` (0 when empty)."""
        return self._words.get(word_pos, 0)

    def words(self) -> Iterator[tuple[int, int]]:
        """Yield (word_pos, mask) for every non-empty word, in increasing order."""
        for word_pos in sorted(self._words):
            yield word_pos, self._words[word_pos]

    def resolve_word_range(
        self, tick_lower: int, tick_upper: int, tick_spacing: int
    ) -> tuple[int, int]:
        """Return the inclusive word range covering [tick_lower, tick_upper].

        The range is clamped to the valid word positions; a range lying
        entirely outside them resolves to an empty range (lower > upper).
        """
        if tick_spacing != self._tick_spacing:
            raise ValueError(
                f"Tick spacing {tick_spacing} does not match bitmap spacing {self._tick_spacing}"
            )
        word_lower, _ = tick_position(tick_lower, tick_spacing)
        word_upper, _ = tick_position(tick_upper, tick_spacing)
        return max(word_lower, WORD_POS_MIN), min(word_upper, WORD_POS_MAX)

    def load_bitmap_and_count(self, word_lower: int, word_upper: int) -> tuple[list[int], int]:
        """Return the masks for every word in [word_lower, word_upper] and their popcount.

        Absent words are reported as 0, so ``masks[i]`` is the word at
        ``word_lower + i``.
        """
        masks = [self._words.get(word_pos, 0) for word_pos in range(word_lower, word_upper + 1)]
        return masks, sum(mask.bit_count() for mask in masks)
