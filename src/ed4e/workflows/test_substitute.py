"""Tests for rolling an attribute in place of an ability."""

import asyncio

import pytest

from src.ed4e.core import FixedEvaluator
from src.ed4e.models import DISMISSED, PromptKind, RollType
from src.ed4e.workflows import SubstituteWorkflow, WorkflowStatus


def run(workflow):
    return asyncio.run(workflow.execute())


def test_preselected_ability_substitute(actor, context, prompt, log):
    context.evaluator = FixedEvaluator(7)

    roll = run(SubstituteWorkflow(actor, context, attribute="dex", mode="climbing"))

    assert roll.options.step.total == 6
    assert roll.options.roll_type == RollType.ABILITY
    assert roll.options.substitute == "Climbing"
    assert "in place of Climbing" in roll.options.chat_flavor
    assert prompt.asked_kinds() == [PromptKind.ROLL]
    # Published by the workflow, not a second time by the roll processor
    assert len(log.rolls) == 1


def test_substitute_chosen_by_prompt(actor, context, prompt):
    context.evaluator = FixedEvaluator(5)
    prompt.queue("greatLeap")

    roll = run(SubstituteWorkflow(actor, context, attribute="str"))

    assert roll.options.step.total == 5
    assert [action.action for action in prompt.asked[0].actions] == ["greatLeap", "swimming"]
    assert prompt.asked_kinds() == [PromptKind.CHOICE, PromptKind.ROLL]


def test_substitute_against_difficulty(actor, context):
    context.evaluator = FixedEvaluator(6)
    roll = run(SubstituteWorkflow(actor, context, attribute="per", mode="awareness", difficulty=9))
    assert roll.options.target.total == 9
    assert roll.is_failure is True


def test_tail_attack_needs_a_tail_weapon(actor, context):
    assert "tailAttack" not in SubstituteWorkflow(actor, context, attribute="dex").available_modes()

    asyncio.run(actor.update_item("weapon_dagger", {"item_status": "tail"}))

    assert "tailAttack" in SubstituteWorkflow(actor, context, attribute="dex").available_modes()


def test_attack_substitute_hands_over_to_attack(actor, opponent, context, prompt):
    context.evaluator = FixedEvaluator(9)
    prompt.queue("unarmedAttack")
    workflow = SubstituteWorkflow(actor, context, attribute="dex", targets=[opponent])

    assert run(workflow) is None
    assert workflow.status is WorkflowStatus.CANCELED
    assert workflow.roll is None

    attack = workflow.attack_workflow
    assert attack.status is WorkflowStatus.COMPLETED
    assert attack.roll.options.roll_type == RollType.ATTACK
    assert attack.roll.options.step.total == 6 + 1
    assert attack.roll.options.target.total == 7
    assert prompt.asked_kinds() == [PromptKind.CHOICE, PromptKind.ROLL]


def test_dismissed_substitute_choice(actor, context, prompt):
    prompt.queue(DISMISSED)
    workflow = SubstituteWorkflow(actor, context, attribute="cha")
    assert run(workflow) is None
    assert workflow.status is WorkflowStatus.CANCELED
    assert workflow.attack_workflow is None


def test_mode_of_another_attribute(actor, context, log):
    workflow = SubstituteWorkflow(actor, context, attribute="dex", mode="swimming")
    assert run(workflow) is None
    assert workflow.status is WorkflowStatus.INTERRUPTED
    assert len(log.notifications("warning")) == 1


def test_attribute_without_substitutes(actor, context):
    workflow = SubstituteWorkflow(actor, context, attribute="tou")
    assert run(workflow) is None
    assert workflow.status is WorkflowStatus.INTERRUPTED


def test_unknown_attribute(actor, context):
    with pytest.raises(ValueError):
        SubstituteWorkflow(actor, context, attribute="luck")
