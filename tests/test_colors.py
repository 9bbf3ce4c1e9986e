"""Tests for the color enum and mixing table."""

import itertools

import pytest

from light_cycle.model.colors import Color, blend, mix_colors


def test_red_blue_makes_purple_in_either_order():
    assert mix_colors(Color.RED, Color.BLUE) == Color.PURPLE
    assert mix_colors(Color.BLUE, Color.RED) == Color.PURPLE


def test_mixing_is_commutative_for_every_pair():
    for a, b in itertools.product(Color, repeat=2):
        assert mix_colors(a, b) == mix_colors(b, a)


def test_unmapped_pair_has_no_mix():
    assert mix_colors(Color.GREEN, Color.PINK) is None
    assert mix_colors(Color.RED, Color.RED) is None


def test_blend_keeps_first_color_when_unmapped():
    assert blend(Color.GREEN, Color.PINK) == Color.GREEN
    assert blend(Color.PINK, Color.GREEN) == Color.PINK
    assert blend(Color.CYAN, Color.MAGENTA) == Color.WHITE


def test_parse_color_names():
    assert Color.parse("Red") == Color.RED
    assert Color.parse(" cyan ") == Color.CYAN
    with pytest.raises(ValueError):
        Color.parse("ultraviolet")
