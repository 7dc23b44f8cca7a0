"""Tests for researching the history of a thread item."""

import asyncio

import pytest

from src.ed4e.core import FixedEvaluator
from src.ed4e.models import PromptKind, RollType
from src.ed4e.workflows import ItemHistoryWorkflow, WorkflowStatus
from src.ed4e.workflows.item_history import KnowledgeLimit

KEY_KNOWLEDGES = [
    "Who forged the ring?",
    "Which spirit was bound into the ring?",
    "Where did the ring's first bearer die?",
]


def run(workflow):
    return asyncio.run(workflow.execute())


def history(actor, context, **options):
    return ItemHistoryWorkflow(actor, context, item_id="thread_ring", **options)


def test_successes_reveal_key_knowledges_up_to_rank(actor, context, log):
    # 14 against 8: one extra success, two key knowledges
    context.evaluator = FixedEvaluator(14)
    workflow = history(actor, context)

    assert run(workflow) == KEY_KNOWLEDGES[:2]
    assert workflow.roll.options.roll_type == RollType.ABILITY
    assert workflow.roll.options.step.total == 7 + 2
    assert workflow.roll.options.target.total == 8
    assert workflow.limit is KnowledgeLimit.MAX_RANK

    pattern = actor.get_item("thread_ring").true_pattern
    assert pattern.known_levels == 2
    assert pattern.known_to_player is True
    assert len(log.rolls) == 1
    assert "2 of 2 key knowledges learned (limited by rank)" in log.rolls[0].options.chat_flavor


def test_limited_by_unknown_levels(actor, context):
    asyncio.run(actor.update_item("thread_ring", {"true_pattern.known_levels": 2}))
    context.evaluator = FixedEvaluator(20)
    workflow = history(actor, context)

    assert run(workflow) == KEY_KNOWLEDGES[2:]
    assert workflow.max_knowledge == 1
    assert workflow.limit is KnowledgeLimit.UNKNOWN_LEVELS
    assert actor.get_item("thread_ring").true_pattern.known_levels == 3


def test_limited_by_thread_item_levels(actor, context):
    asyncio.run(actor.update_item("ability_item_history", {"rank": 5}))
    context.evaluator = FixedEvaluator(30)
    workflow = history(actor, context)

    assert run(workflow) == KEY_KNOWLEDGES
    assert workflow.obtained == 3
    assert workflow.limit is KnowledgeLimit.THREAD_ITEM_LEVELS


def test_failure_reveals_nothing(actor, context):
    context.evaluator = FixedEvaluator(5)
    workflow = history(actor, context)

    assert run(workflow) == []
    pattern = actor.get_item("thread_ring").true_pattern
    assert pattern.known_levels == 0
    assert pattern.known_to_player is False


def test_everything_already_known(actor, context, prompt, log):
    asyncio.run(actor.update_item("thread_ring", {"true_pattern.known_levels": 3}))
    workflow = history(actor, context)

    assert run(workflow) is None
    assert workflow.status is WorkflowStatus.CANCELED
    assert prompt.asked == []
    assert len(log.notifications("info")) == 1


def test_untrained_research_on_another_actors_item(actor, opponent, context, prompt):
    context.evaluator = FixedEvaluator(9)
    prompt.queue(True)
    workflow = ItemHistoryWorkflow(opponent, context, item_id="thread_ring", owner=actor)

    assert run(workflow) == KEY_KNOWLEDGES[:1]
    assert workflow.roll.options.step.total == 4
    assert prompt.asked_kinds() == [PromptKind.CONFIRM, PromptKind.ROLL]
    assert actor.get_item("thread_ring").true_pattern.known_levels == 1


def test_untrained_research_declined(opponent, actor, context, prompt):
    prompt.queue(False)
    workflow = ItemHistoryWorkflow(opponent, context, item_id="thread_ring", owner=actor)
    assert run(workflow) is None
    assert workflow.status is WorkflowStatus.CANCELED


def test_item_without_true_pattern(actor, context):
    with pytest.raises(ValueError):
        ItemHistoryWorkflow(actor, context, item_id="weapon_dagger")
