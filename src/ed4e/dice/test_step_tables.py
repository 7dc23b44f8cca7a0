"""Tests for the step table and dice expression parsing."""

import pytest

from src.ed4e.dice import dice_for_step, get_dice, parse_dice


@pytest.mark.parametrize(
    "step, expected",
    [
        (1, "1d4-2"),
        (3, "1d4"),
        (8, "2d6"),
        (9, "1d8+1d6"),
        (18, "1d12+1d10+1d8"),
        (19, "1d20+2d6"),
        (30, "2d20+2d6"),
    ],
)
def test_get_dice(step, expected):
    assert get_dice(step) == expected


def test_steps_above_eighteen_add_a_d20():
    sizes, modifier = dice_for_step(25)
    assert sizes == [20, 12, 12]
    assert modifier == 0


def test_step_below_one_is_rejected():
    with pytest.raises(ValueError):
        get_dice(0)


def test_parse_dice():
    assert parse_dice("2d6 + 1d8 - 1") == ([(2, 6), (1, 8)], -1)
    assert parse_dice("1d4-2") == ([(1, 4)], -2)
    assert parse_dice(get_dice(30)) == ([(2, 20), (2, 6)], 0)


@pytest.mark.parametrize("expression", ["", "abc", "2d6+", "-1d6", "2d6x"])
def test_parse_dice_rejects_invalid_expressions(expression):
    with pytest.raises(ValueError):
        parse_dice(expression)
