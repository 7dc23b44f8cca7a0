import random

from src.ed4e.dice import dice_for_step
from src.ed4e.models import DieResult, Roll, RollOptions

# ============================================================
# STEP DICE EVALUATOR
# ============================================================

# Safety cap on a single die's explosion chain
MAX_EXPLOSIONS = 20


class StepDiceEvaluator:
    """
    Central logic for throwing step dice.

    Every die explodes: a die showing its maximum is rolled again and
    added. Karma and devotion each add one die of their own step when
    points are spent on them.
    """
    def __init__(self, seed: int | None = None, rng: random.Random | None = None):
        self._rng = rng or random.Random(seed)

    async def evaluate(self, options: RollOptions) -> Roll:
        return self.roll(options)

    def roll(self, options: RollOptions) -> Roll:
        step = max(options.step.total, 1)
        sizes, modifier = dice_for_step(step)
        results = [self.roll_die(sides, "step") for sides in sizes]

        for source, resource in (("karma", options.karma), ("devotion", options.devotion)):
            if resource.points_used > 0:
                resource_sizes, resource_modifier = dice_for_step(resource.step)
                for _ in range(resource.points_used):
                    results.extend(self.roll_die(sides, source) for sides in resource_sizes)
                    modifier += resource_modifier

        for label, count in options.extra_dice.items():
            results.extend(self.roll_die(6, label) for _ in range(count))

        total = max(sum(result.total for result in results) + modifier, 0)
        return Roll(
            options=options,
            formula=self.formula(options),
            evaluated=True,
            results=results,
            modifier=modifier,
            total=total,
        )

    def roll_die(self, sides: int, source: str = "step") -> DieResult:
        rolls = [self._rng.randint(1, sides)]
        while rolls[-1] == sides and len(rolls) <= MAX_EXPLOSIONS:
            rolls.append(self._rng.randint(1, sides))
        return DieResult(sides=sides, rolls=rolls, source=source)

    @staticmethod
    def formula(options: RollOptions) -> str:
        parts = [f"Step {max(options.step.total, 1)}"]
        if options.karma.points_used:
            parts.append(f"Karma {options.karma.dice}")
        if options.devotion.points_used:
            parts.append(f"Devotion {options.devotion.dice}")
        for label, count in options.extra_dice.items():
            parts.append(f"{label} {count}d6")
        return " + ".join(parts)


class FixedEvaluator:
    """Evaluator returning preset totals in order. Useful for scripted scenes."""
    def __init__(self, *totals: int):
        self._totals = list(totals)

    async def evaluate(self, options: RollOptions) -> Roll:
        if not self._totals:
            raise RuntimeError("FixedEvaluator ran out of totals")
        return Roll(options=options, formula=f"Step {options.step.total}", evaluated=True, total=self._totals.pop(0))
