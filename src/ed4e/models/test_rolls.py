"""Tests for RollOptions arithmetic and the typed options built from an actor."""

import asyncio

import pytest

from src.ed4e.models import (
    AbilityRollOptions,
    AstralSpacePollution,
    AttackRollOptions,
    AttributeRollOptions,
    JumpUpRollOptions,
    KnockdownRollOptions,
    RawMagicDamageRollOptions,
    RecoveryRollOptions,
    Roll,
    RollOptions,
    RollType,
    WarpingRollOptions,
)


# =============================================================================
# TOTALS
# =============================================================================

def test_update_source_recomputes_step_total():
    options = RollOptions(step={"base": 5, "modifiers": {"Wounds": -1}})
    assert options.step.total == 4

    returned = options.update_source({"step": {"modifiers": {"Aid another": 2}}})

    assert returned is options
    assert options.step.modifiers == {"Wounds": -1, "Aid another": 2}
    assert options.step.total == 6


def test_update_source_with_no_changes_keeps_totals():
    options = RollOptions(
        step={"base": 7, "modifiers": {"Aid": 2}},
        target={"base": 5, "modifiers": {"Cover": 2}},
        strain={"base": 1},
    )
    before = options.model_dump()

    options.update_source({})
    options.update_source()

    assert options.model_dump() == before


def test_stored_totals_are_never_trusted():
    options = RollOptions(step={"base": 5, "total": 99}, target={"base": 6, "total": 1})
    assert options.step.total == 5
    assert options.target.total == 6


def test_totals_follow_direct_modifier_edits():
    options = RollOptions(step={"base": 5}, target={"base": 4}, minimum_difficulty=2)

    options.step.modifiers["Aid"] = 3
    options.target.modifiers["Darkness"] = -6

    assert options.step.total == 8
    assert options.target.total == 2
    assert options.model_dump()["step"]["total"] == 8
    assert "minimum" not in options.model_dump()["target"]


@pytest.mark.parametrize(
    "base, modifiers, expected",
    [
        (0, {}, 2),
        (1, {"Darkness": -4}, 2),
        (2, {}, 2),
        (5, {"Cover": -2}, 3),
        (8, {"Cover": 2}, 10),
    ],
)
def test_target_total_is_floored_at_minimum_difficulty(base, modifiers, expected):
    options = RollOptions(target={"base": base, "modifiers": modifiers}, minimum_difficulty=2)
    assert options.target.total == expected


def test_dotted_keys_update_nested_values():
    options = RollOptions()
    options.update_source({"karma.step": 6, "karma.points_used": 1})
    assert options.karma.step == 6
    assert options.karma.dice == "1d10"
    assert options.karma.points_used == 1


def test_bonus_resources_get_dice_from_their_step():
    options = RollOptions(karma={"step": 4}, devotion={"step": 3})
    assert options.karma.dice == "1d6"
    assert options.devotion.dice == "1d4"


def test_negative_points_are_rejected():
    with pytest.raises(ValueError):
        RollOptions(karma={"points_used": -1})


def test_get_modifier_sum():
    options = RollOptions(step={"base": 5, "modifiers": {"a": 2, "b": -3}})
    assert options.get_modifier_sum("step") == -1
    assert options.get_modifier_sum("target") == 0


def test_typed_options_carry_their_roll_type():
    assert RollOptions().roll_type == RollType.ARBITRARY
    assert RollOptions().test_type == "arbitrary"
    assert JumpUpRollOptions().roll_type == RollType.JUMP_UP
    assert JumpUpRollOptions().test_type == "action"
    assert RecoveryRollOptions().test_type == "effect"


# =============================================================================
# FROM ACTOR
# =============================================================================

def test_from_actor_requires_an_actor():
    with pytest.raises(ValueError):
        RollOptions.from_actor({}, None)


def test_from_actor_seeds_karma_and_devotion(actor):
    options = RollOptions.from_actor({}, actor)
    assert options.rolling_actor_id == "actor_aelin"
    assert options.karma.available == 10
    assert options.karma.points_used == 0
    assert options.karma.step == 4
    assert options.devotion.points_used == 0

    required = RollOptions.from_actor({"devotion_required": True}, actor)
    assert required.devotion.points_used == 1


def test_from_actor_uses_karma_when_always_on(actor):
    asyncio.run(actor.write({"karma.use_always": True}))
    assert RollOptions.from_actor({}, actor).karma.points_used == 1


def test_from_actor_accepts_overdrawn_pools(actor):
    asyncio.run(actor.write({"karma.value": -2}))
    assert RollOptions.from_actor({}, actor).karma.available == 0


def test_attribute_options_add_global_bonuses(actor):
    assert AttributeRollOptions.from_actor({"attribute": "per"}, actor).step.total == 7

    asyncio.run(actor.write({"global_bonuses": {"allTests": 1}}))
    options = AttributeRollOptions.from_actor({"attribute": "per"}, actor)
    assert options.step.base == 7
    assert options.step.total == 8


def test_ability_options_roll_the_ability_or_its_substitute(actor):
    options = AbilityRollOptions.from_actor({"ability_id": "ability_acrobatics", "difficulty": 6}, actor)
    assert options.step.total == 6 + 2
    assert options.strain.total == 1
    assert options.target.total == 6

    asyncio.run(actor.write({"global_bonuses": {"allActions": 2}}))
    options = AbilityRollOptions.from_actor({"attribute": "str", "substitute": "Swimming"}, actor)
    assert options.step.total == 5 + 2
    assert options.target is None
    assert options.chat_flavor == "Aelin Vey rolls STR (step 5) in place of Swimming."


def test_jump_up_options_use_settings(actor, settings):
    options = JumpUpRollOptions.from_actor({}, actor, settings=settings)
    assert options.step.base == 6
    assert options.strain.total == settings.jump_up_strain_cost
    assert options.target.total == settings.jump_up_base_difficulty

    with_ability = JumpUpRollOptions.from_actor({"ability_id": "ability_acrobatics"}, actor, settings=settings)
    assert with_ability.step.base == 8
    assert with_ability.strain.total == 1


def test_knockdown_options_default_to_minimum_difficulty(actor, settings):
    options = KnockdownRollOptions.from_actor({}, actor, settings=settings)
    assert options.step.total == 5
    assert options.target.total == settings.minimum_difficulty

    harder = KnockdownRollOptions.from_actor({"difficulty": 9}, actor, settings=settings)
    assert harder.target.total == 9


def test_recover_stun_adds_willpower(actor):
    options = RecoveryRollOptions.from_actor({"recovery_mode": "recoverStun"}, actor)
    assert options.step.modifiers == {"Willpower": 6}
    assert options.step.total == 12


def test_attack_options_target_highest_physical_defense(actor, opponent):
    options = AttackRollOptions.from_actor({"targets": [opponent.system]}, actor)
    assert options.target.total == 7
    assert options.target.public is False
    assert options.target.tokens == {"actor_ork"}


def test_raw_magic_options_follow_pollution(actor):
    fireball = actor.get_item("spell_fire_ball")

    warping = WarpingRollOptions.for_spell(actor, fireball, AstralSpacePollution.OPEN)
    assert warping.step.total == 3 + 5
    assert warping.target.total == 10
    assert warping.roll_type == RollType.WARPING

    damage = RawMagicDamageRollOptions.for_spell(actor, fireball, AstralSpacePollution.SAFE)
    assert damage.step.total == 3 + 4
    assert damage.roll_type == RollType.DAMAGE
    assert damage.armor_type == "mystical"


# =============================================================================
# ROLL
# =============================================================================

def test_roll_success_and_extra_successes():
    options = RollOptions(target={"base": 6})
    assert Roll(options=options, evaluated=True, total=16).extra_successes == 2
    assert Roll(options=options, evaluated=True, total=10).extra_successes == 0
    assert Roll(options=options, evaluated=True, total=5).is_failure is True


def test_roll_without_target_is_neither_success_nor_failure():
    roll = Roll(options=RollOptions(), evaluated=True, total=12)
    assert roll.is_success is None
    assert roll.is_failure is None
    assert roll.extra_successes == 0
