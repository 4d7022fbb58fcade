"""Tests for tick/bit position arithmetic."""

import pytest

from tick_lens.decoder import decode_tick, iter_set_bits, tick_position
from tick_lens.types import TICK_MAX_INT24, TickOverflowError


class TestDecodeTick:
    """Tests for decode_tick."""

    def test_origin(self):
        assert decode_tick(0, 0, 60) == 0

    def test_positive_word(self):
        assert decode_tick(1, 3, 10) == 10 * (256 + 3)

    def test_negative_word(self):
        """Bits of word -1 map to the ticks just below zero."""
        assert decode_tick(-1, 255, 60) == -60
        assert decode_tick(-1, 254, 60) == -120
        assert decode_tick(-1, 0, 1) == -256

    def test_bit_out_of_range(self):
        with pytest.raises(ValueError):
            decode_tick(0, 256, 1)
        with pytest.raises(ValueError):
            decode_tick(0, -1, 1)

    def test_word_out_of_int16_range(self):
        with pytest.raises(ValueError):
            decode_tick(1 << 15, 0, 1)

    def test_non_positive_spacing(self):
        with pytest.raises(ValueError):
            decode_tick(0, 0, 0)

    def test_overflow_is_an_error(self):
        """A tick past the int24 range raises instead of wrapping."""
        with pytest.raises(TickOverflowError):
            decode_tick(1000, 0, 60)

    def test_largest_int24_tick(self):
        word_pos, bit_pos = tick_position(TICK_MAX_INT24, 1)
        assert decode_tick(word_pos, bit_pos, 1) == TICK_MAX_INT24


class TestTickPosition:
    """Tests for tick_position."""

    def test_round_trip_on_lattice(self):
        for tick in (-887220, -120, -60, 0, 60, 15360, 887220):
            word_pos, bit_pos = tick_position(tick, 60)
            assert decode_tick(word_pos, bit_pos, 60) == tick

    def test_negative_ticks_floor(self):
        """Off-lattice negative ticks compress toward negative infinity."""
        assert tick_position(-1, 60) == (-1, 255)
        assert tick_position(-61, 60) == (-1, 254)

    def test_off_lattice_positive(self):
        assert tick_position(59, 60) == (0, 0)
        assert tick_position(60 * 256, 60) == (1, 0)


class TestIterSetBits:
    """Tests for iter_set_bits."""

    def test_empty(self):
        assert list(iter_set_bits(0)) == []

    def test_increasing_order(self):
        mask = (1 << 200) | (1 << 3) | (1 << 255) | 1
        assert list(iter_set_bits(mask)) == [0, 3, 200, 255]

    def test_full_word(self):
        assert list(iter_set_bits((1 << 256) - 1)) == list(range(256))
