"""
Step table: translates a step number into the dice that are rolled for it.

Steps 1-18 are listed explicitly. Every step above 18 adds a d20 to the dice
of the step eleven below it, so step 19 is 1d20+2d6, step 30 is 2d20+2d6.
"""

import re
from collections import Counter

# step -> (die sizes, flat modifier)
_BASE_STEPS: dict[int, tuple[tuple[int, ...], int]] = {
    1: ((4,), -2),
    2: ((4,), -1),
    3: ((4,), 0),
    4: ((6,), 0),
    5: ((8,), 0),
    6: ((10,), 0),
    7: ((12,), 0),
    8: ((6, 6), 0),
    9: ((8, 6), 0),
    10: ((8, 8), 0),
    11: ((10, 8), 0),
    12: ((10, 10), 0),
    13: ((12, 10), 0),
    14: ((12, 12), 0),
    15: ((12, 6, 6), 0),
    16: ((12, 8, 6), 0),
    17: ((12, 8, 8), 0),
    18: ((12, 10, 8), 0),
}

_CYCLE = 11
_TERM_PATTERN = re.compile(r"([+-]?)\s*(?:(\d+)d(\d+)|(\d+))")


def dice_for_step(step: int) -> tuple[list[int], int]:
    """Return the die sizes and flat modifier rolled for ``step``."""
    if step < 1:
        raise ValueError(f"Steps start at 1, got {step}")
    if step in _BASE_STEPS:
        sizes, modifier = _BASE_STEPS[step]
        return list(sizes), modifier
    sizes, modifier = dice_for_step(step - _CYCLE)
    return [20, *sizes], modifier


def get_dice(step: int) -> str:
    """Dice expression for a step, e.g. ``get_dice(9) == "1d8+1d6"``."""
    sizes, modifier = dice_for_step(step)
    counts = Counter(sizes)
    terms = [f"{counts[size]}d{size}" for size in sorted(counts, reverse=True)]
    expression = "+".join(terms)
    if modifier:
        expression += f"{modifier:+d}"
    return expression


def parse_dice(expression: str) -> tuple[list[tuple[int, int]], int]:
    """
    Split a dice expression into ``[(count, sides), ...]`` and a flat modifier.

    Accepts the expressions produced by :func:`get_dice` and simple
    hand-written ones like ``"2d6 + 1d8 - 1"``.
    """
    text = expression.replace(" ", "")
    if not text:
        raise ValueError("Empty dice expression")

    dice: list[tuple[int, int]] = []
    modifier = 0
    position = 0
    for match in _TERM_PATTERN.finditer(text):
        if match.start() != position:
            raise ValueError(f"Invalid dice expression: {expression}")
        position = match.end()

        sign = -1 if match.group(1) == "-" else 1
        if match.group(2):
            count, sides = int(match.group(2)), int(match.group(3))
            if sign < 0:
                raise ValueError(f"Cannot subtract dice in: {expression}")
            dice.append((count, sides))
        else:
            modifier += sign * int(match.group(4))

    if position != len(text):
        raise ValueError(f"Invalid dice expression: {expression}")
    return dice, modifier
