"""Tests for attribute, half-magic, attack, knockdown, jump-up and recovery workflows."""

import asyncio

import pytest

from src.ed4e.core import FixedEvaluator
from src.ed4e.models import DISMISSED, ItemStatus, PromptKind, RollType
from src.ed4e.workflows import (
    AttackWorkflow,
    AttributeWorkflow,
    HalfMagicWorkflow,
    JumpUpWorkflow,
    KnockdownWorkflow,
    RecoveryWorkflow,
    WorkflowStatus,
)


def run(workflow):
    return asyncio.run(workflow.execute())


# =============================================================================
# ATTRIBUTE / HALF-MAGIC
# =============================================================================

def test_attribute_test(actor, context):
    context.evaluator = FixedEvaluator(8)
    roll = run(AttributeWorkflow(actor, context, attribute="per"))
    assert roll.total == 8
    assert roll.options.step.total == 7
    assert roll.options.roll_type == RollType.ATTRIBUTE


def test_unknown_attribute(actor, context):
    with pytest.raises(ValueError):
        AttributeWorkflow(actor, context, attribute="luck")


def test_half_magic_uses_only_discipline(actor, context, prompt):
    context.evaluator = FixedEvaluator(11)
    roll = run(HalfMagicWorkflow(actor, context))
    assert roll.options.step.total == 7 + 3
    assert roll.options.roll_type == RollType.HALF_MAGIC
    assert prompt.asked_kinds() == [PromptKind.ROLL]


def test_half_magic_without_discipline(opponent, context, log):
    workflow = HalfMagicWorkflow(opponent, context)
    assert run(workflow) is None
    assert workflow.status is WorkflowStatus.INTERRUPTED
    assert len(log.notifications("warning")) == 1


# =============================================================================
# ATTACK
# =============================================================================

def test_weapon_attack_draws_a_weapon(actor, opponent, context, prompt):
    context.evaluator = FixedEvaluator(10)
    prompt.queue("weapon_staff")

    roll = run(AttackWorkflow(actor, context, targets=[opponent]))

    assert actor.get_item("weapon_staff").item_status is ItemStatus.TWO_HANDS
    assert roll.options.step.total == 6 + 2
    assert roll.options.target.total == 7
    assert roll.options.target.public is False
    assert roll.is_success is True


def test_wielded_weapon_is_used_without_prompt(actor, opponent, context, prompt):
    asyncio.run(actor.update_item("weapon_dagger", {"item_status": "mainHand"}))
    context.evaluator = FixedEvaluator(4)

    workflow = AttackWorkflow(actor, context, targets=[opponent])
    roll = run(workflow)

    assert workflow.weapon.id == "weapon_dagger"
    assert roll.is_failure is True
    assert prompt.asked_kinds() == [PromptKind.ROLL]


def test_unarmed_attack(actor, opponent, context):
    context.evaluator = FixedEvaluator(9)
    roll = run(AttackWorkflow(actor, context, attack_type="unarmed", targets=[opponent]))
    assert roll.options.step.total == 6 + 1
    assert roll.options.ability_id == "ability_unarmed"


def test_tail_attack_without_tail(actor, context, log):
    workflow = AttackWorkflow(actor, context, attack_type="tail")
    assert run(workflow) is None
    assert workflow.status is WorkflowStatus.INTERRUPTED
    assert "no weapon" in log.notifications("warning")[0].content


def test_dismissed_draw_cancels(actor, context, prompt):
    prompt.queue(DISMISSED)
    workflow = AttackWorkflow(actor, context)
    assert run(workflow) is None
    assert workflow.status is WorkflowStatus.CANCELED
    assert actor.get_item("weapon_staff").item_status is ItemStatus.CARRIED


# =============================================================================
# KNOCKDOWN
# =============================================================================

def test_failed_knockdown_test(actor, context):
    context.evaluator = FixedEvaluator(3)
    roll = run(KnockdownWorkflow(actor, context, difficulty=9))
    assert roll.options.target.total == 9
    assert actor.has_condition("knocked_down") is True


def test_knockdown_immune(actor, context, prompt, log):
    asyncio.run(actor.write({"knockdown.immune": True}))
    workflow = KnockdownWorkflow(actor, context, difficulty=9)
    assert run(workflow) is None
    assert workflow.canceled is True
    assert prompt.asked == []
    assert len(log.notifications("info")) == 1


# =============================================================================
# JUMP UP
# =============================================================================

def test_jump_up_with_dexterity(actor, context, prompt, log, settings):
    asyncio.run(actor.toggle_condition("knocked_down", True))
    prompt.queue("none")
    context.evaluator = FixedEvaluator(8)

    roll = run(JumpUpWorkflow(actor, context))

    assert roll.options.target.base == settings.jump_up_base_difficulty
    assert roll.options.step.total == 6
    assert actor.has_condition("knocked_down") is False
    assert actor.system.health.damage.standard == settings.jump_up_strain_cost
    assert len(log.rolls) == 1


def test_jump_up_with_ability(actor, context, prompt):
    asyncio.run(actor.toggle_condition("knocked_down", True))
    prompt.queue("ability_acrobatics")
    context.evaluator = FixedEvaluator(4)

    roll = run(JumpUpWorkflow(actor, context))

    assert roll.options.step.total == 8
    assert actor.has_condition("knocked_down") is True
    assert actor.system.health.damage.standard == 1


def test_jump_up_when_standing(actor, context, prompt, log):
    workflow = JumpUpWorkflow(actor, context)
    assert run(workflow) is None
    assert workflow.canceled is True
    assert prompt.asked == []
    assert len(log.notifications("warning")) == 1


def test_jump_up_ability_prompt_dismissed(actor, context, prompt):
    asyncio.run(actor.toggle_condition("knocked_down", True))
    prompt.queue(DISMISSED)
    workflow = JumpUpWorkflow(actor, context)
    assert run(workflow) is None
    assert workflow.status is WorkflowStatus.CANCELED
    assert actor.system.health.damage.standard == 0


# =============================================================================
# RECOVERY
# =============================================================================

def test_recovery_without_damage_does_nothing(actor, context, prompt):
    workflow = RecoveryWorkflow(actor, context)
    assert run(workflow) is None
    assert workflow.canceled is True
    assert workflow.roll_options is None
    assert prompt.asked == []
    assert actor.system.recovery_tests.value == 2


def test_recovery_heals(actor, context):
    asyncio.run(actor.write({"health.damage.standard": 10}))
    context.evaluator = FixedEvaluator(7)

    roll = run(RecoveryWorkflow(actor, context))

    assert roll.options.step.total == 6
    assert actor.system.health.damage.standard == 3
    assert actor.system.recovery_tests.value == 1


def test_recovery_without_tests_left(actor, context, log):
    asyncio.run(actor.write({"health.damage.standard": 5, "recovery_tests.value": 0}))
    workflow = RecoveryWorkflow(actor, context)
    assert run(workflow) is None
    assert workflow.canceled is True
    assert len(log.notifications("warning")) == 1


def test_unknown_recovery_mode(actor, context):
    workflow = RecoveryWorkflow(actor, context, recovery_mode="nap")
    assert workflow.mode is None
    assert run(workflow) is None
    assert workflow.status is WorkflowStatus.INTERRUPTED


def test_recover_stun(actor, context):
    asyncio.run(actor.write({"health.damage.stun": 8}))
    context.evaluator = FixedEvaluator(5)

    roll = run(RecoveryWorkflow(actor, context, recovery_mode="recoverStun"))

    assert roll.options.step.total == 12
    assert actor.system.health.damage.stun == 3
    assert actor.system.recovery_tests.stun_recovery_available is False


def test_full_rest_heals_a_wound_without_rolling(actor, context, prompt):
    asyncio.run(actor.write({"health.wounds": 1, "recovery_tests.value": 0}))

    workflow = RecoveryWorkflow(actor, context, recovery_mode="fullRest")

    assert run(workflow) is True
    assert actor.system.health.wounds == 0
    assert actor.system.recovery_tests.value == 1
    assert prompt.asked == []


def test_full_rest_when_rested(actor, context):
    workflow = RecoveryWorkflow(actor, context, recovery_mode="fullRest")
    assert run(workflow) is None
    assert workflow.canceled is True
