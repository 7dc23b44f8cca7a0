from src.ed4e.dice.step_tables import dice_for_step, get_dice, parse_dice

__all__ = ["dice_for_step", "get_dice", "parse_dice"]
