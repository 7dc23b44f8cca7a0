"""Tests for step execution, cancellation and interruption."""

import asyncio

import pytest

from src.ed4e.workflows import ActorWorkflow, ItemWorkflow, Workflow, WorkflowInterruptError, WorkflowStatus

BOOM = KeyError("boom")


class ScriptedWorkflow(Workflow):
    """Runs one step per behaviour, recording which steps ran."""
    def __init__(self, context, behaviours):
        super().__init__(context)
        self.ran = []
        for index, behaviour in enumerate(behaviours):
            self._add_step(self._make_step(index, behaviour))

    def _make_step(self, index, behaviour):
        async def step():
            self.ran.append(index)
            match behaviour:
                case "cancel":
                    self.cancel()
                    self.ran.append("after cancel")
                case "interrupt":
                    raise WorkflowInterruptError(self, "stop here")
                case "fail":
                    raise BOOM
                case "result":
                    self._result = "done"
                case "add":
                    self._add_step(self._make_step(99, None))
        step.__name__ = f"step_{index}"
        return step


def run(workflow):
    return asyncio.run(workflow.execute())


def test_steps_run_in_order(context):
    workflow = ScriptedWorkflow(context, [None, None, "result"])

    assert run(workflow) == "done"
    assert workflow.ran == [0, 1, 2]
    assert workflow.status is WorkflowStatus.COMPLETED
    assert workflow.current_step == 3


def test_cancel_skips_remaining_steps(context, log):
    workflow = ScriptedWorkflow(context, [None, "cancel", "result"])

    assert run(workflow) is None
    # The canceling step runs to its end
    assert workflow.ran == [0, 1, "after cancel"]
    assert workflow.canceled is True
    assert workflow.status is WorkflowStatus.CANCELED
    assert workflow.current_step == 2
    assert log.messages == []


def test_interrupt_skips_remaining_steps_and_warns(context, log):
    workflow = ScriptedWorkflow(context, [None, "interrupt", "result"])

    assert run(workflow) is None
    assert workflow.ran == [0, 1]
    assert workflow.status is WorkflowStatus.INTERRUPTED
    warnings = log.notifications("warning")
    assert len(warnings) == 1
    assert warnings[0].content == "stop here"


def test_other_errors_propagate_unchanged(context):
    workflow = ScriptedWorkflow(context, [None, "fail", "result"])

    with pytest.raises(KeyError) as excinfo:
        run(workflow)

    assert excinfo.value is BOOM
    assert workflow.ran == [0, 1]
    assert workflow.status is WorkflowStatus.FAULTED


def test_workflow_runs_once(context):
    workflow = ScriptedWorkflow(context, [None])
    run(workflow)
    with pytest.raises(RuntimeError):
        run(workflow)


def test_steps_are_fixed_once_running(context):
    with pytest.raises(RuntimeError):
        run(ScriptedWorkflow(context, ["add"]))


def test_empty_workflow_completes(context):
    workflow = Workflow(context)
    assert run(workflow) is None
    assert workflow.status is WorkflowStatus.COMPLETED


def test_interrupt_default_message(context):
    workflow = Workflow(context, name="Test Workflow")
    assert WorkflowInterruptError(workflow).message == "Test Workflow interrupted"
    assert Workflow(context).name == "Workflow"


def test_actor_and_item_are_required(context, actor):
    with pytest.raises(TypeError):
        ActorWorkflow(None, context)
    with pytest.raises(TypeError):
        ItemWorkflow(None, actor, context)


def test_item_workflow_sees_fresh_item(context, actor):
    workflow = ItemWorkflow(actor.get_item("spell_fire_ball"), actor, context)
    asyncio.run(actor.update_item("spell_fire_ball", {"threads_woven": 1}))
    assert workflow.item.threads_woven == 1
