"""Tests for the sparse tick bitmap."""

import pytest

from tick_lens.bitmap import TickBitmap


class TestTickBitmap:
    """Tests for TickBitmap."""

    def test_flip_sets_and_clears(self):
        bitmap = TickBitmap(60)
        assert bitmap.flip_tick(120) is True
        assert bitmap.is_populated(120)
        assert bitmap.populated_count == 1

        assert bitmap.flip_tick(120) is False
        assert not bitmap.is_populated(120)
        assert bitmap.populated_count == 0
        assert list(bitmap.words()) == []

    def test_flip_rejects_off_lattice_tick(self):
        bitmap = TickBitmap(60)
        with pytest.raises(ValueError):
            bitmap.flip_tick(30)

    def test_off_lattice_is_never_populated(self):
        bitmap = TickBitmap(60)
        bitmap.flip_tick(0)
        assert not bitmap.is_populated(30)

    def test_words_sorted(self):
        bitmap = TickBitmap(1)
        for tick in (600, -300, 5):
            bitmap.flip_tick(tick)

        assert [word_pos for word_pos, _ in bitmap.words()] == [-2, 0, 2]
        assert bitmap.word(0) == 1 << 5

    def test_resolve_word_range(self):
        bitmap = TickBitmap(60)
        assert bitmap.resolve_word_range(-120, 120, 60) == (-1, 0)
        assert bitmap.resolve_word_range(0, 60 * 256, 60) == (0, 1)

    def test_resolve_word_range_clamped(self):
        bitmap = TickBitmap(1)
        assert bitmap.resolve_word_range(-(10**9), 10**9, 1) == (-(1 << 15), (1 << 15) - 1)

        word_lower, word_upper = bitmap.resolve_word_range(10**9, 2 * 10**9, 1)
        assert word_lower > word_upper
        assert bitmap.load_bitmap_and_count(word_lower, word_upper) == ([], 0)

    def test_resolve_word_range_spacing_mismatch(self):
        bitmap = TickBitmap(60)
        with pytest.raises(ValueError):
            bitmap.resolve_word_range(0, 60, 10)

    def test_load_bitmap_and_count(self):
        bitmap = TickBitmap(1)
        for tick in (-1, 0, 1, 512):
            bitmap.flip_tick(tick)

        masks, total = bitmap.load_bitmap_and_count(-1, 2)

        assert total == 4
        assert len(masks) == 4
        assert masks[0] == 1 << 255
        assert masks[1] == 0b11
        assert masks[2] == 0
        assert masks[3] == 1

    def test_invalid_spacing(self):
        with pytest.raises(ValueError):
            TickBitmap(0)

    def test_flip_rejects_tick_beyond_int24(self):
        # 200 * 41944 lands in word 163, but the tick is past the int24 range
        bitmap = TickBitmap(200)
        with pytest.raises(ValueError):
            bitmap.flip_tick(200 * 41944)
        with pytest.raises(ValueError):
            bitmap.flip_tick(-200 * 41944)
        assert bitmap.populated_count == 0
