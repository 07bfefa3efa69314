"""Tests for keyboard geometry and hit-testing."""

import pytest

from vpiano.core.keyboard_layout import (
    BLACK_KEY_HEIGHT,
    WHITE_KEY_HEIGHT,
    WHITE_KEY_WIDTH,
    build_layout,
    hit_test,
    layout_size,
    note_name,
)


@pytest.fixture
def keys():
    return build_layout(48, 3)


class TestBuildLayout:
    def test_key_counts(self, keys):
        assert sum(k.is_black for k in keys) == 15
        assert sum(not k.is_black for k in keys) == 21

    def test_covers_three_octaves(self, keys):
        assert sorted(k.pitch for k in keys) == list(range(48, 84))

    def test_black_keys_listed_first(self, keys):
        flags = [k.is_black for k in keys]
        assert flags == sorted(flags, reverse=True)

    def test_size(self, keys):
        assert layout_size(keys) == (21 * WHITE_KEY_WIDTH, WHITE_KEY_HEIGHT)

    def test_empty_size(self):
        assert layout_size([]) == (0.0, 0.0)


class TestHitTest:
    def test_white_key_below_black(self, keys):
        # Lower half of the first white key is C3
        assert hit_test(keys, 5, WHITE_KEY_HEIGHT - 5) == 48

    def test_black_key_wins_overlap(self, keys):
        # C#3 straddles the C/D boundary at x = 40
        assert hit_test(keys, WHITE_KEY_WIDTH, 10) == 49

    def test_same_x_below_black_key_is_white(self, keys):
        assert hit_test(keys, WHITE_KEY_WIDTH + 5, BLACK_KEY_HEIGHT + 10) == 50

    def test_no_black_between_e_and_f(self, keys):
        assert hit_test(keys, 3 * WHITE_KEY_WIDTH, 10) == 53

    def test_outside(self, keys):
        assert hit_test(keys, -1, 10) is None
        assert hit_test(keys, 10, WHITE_KEY_HEIGHT + 1) is None


class TestNoteName:
    @pytest.mark.parametrize("note,name", [(60, "C4"), (69, "A4"), (61, "C#4"), (48, "C3"), (0, "C-1")])
    def test_names(self, note, name):
        assert note_name(note) == name
