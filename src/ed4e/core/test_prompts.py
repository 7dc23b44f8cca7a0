"""Tests for the scripted and console prompt boundaries."""

import asyncio

import pytest

from src.ed4e.core import ConsolePrompt, PromptDismissedError, ScriptedPrompt
from src.ed4e.models import DISMISSED, PromptAction, PromptDescriptor, PromptKind, RollOptions


def choice(**kwargs):
    return PromptDescriptor(
        kind=PromptKind.CHOICE,
        title="Pick one",
        actions=[PromptAction(action="a", label="A", default=True), PromptAction(action="b", label="B")],
        **kwargs,
    )


def console(*lines):
    answers = list(lines)
    output = []
    return ConsolePrompt(input_func=lambda label: answers.pop(0), output_func=output.append), output


def test_scripted_answers_in_order():
    prompt = ScriptedPrompt(["b", lambda descriptor: descriptor.default_action])
    assert asyncio.run(prompt.prompt(choice())) == "b"
    assert asyncio.run(prompt.prompt(choice())) == "a"
    assert prompt.remaining == 0
    assert prompt.asked_kinds() == [PromptKind.CHOICE, PromptKind.CHOICE]


def test_scripted_roll_prompts_use_their_own_queue():
    prompt = ScriptedPrompt(["a"])
    roll = PromptDescriptor(kind=PromptKind.ROLL, title="Roll", roll_options=RollOptions())
    assert asyncio.run(prompt.prompt(roll)) == {}
    assert prompt.remaining == 1

    prompt.queue_rolls({"step": {"modifiers": {"Aid": 2}}})
    assert asyncio.run(prompt.prompt(roll)) == {"step": {"modifiers": {"Aid": 2}}}


def test_scripted_prompt_runs_out():
    with pytest.raises(RuntimeError):
        asyncio.run(ScriptedPrompt().prompt(choice()))


def test_dismissal():
    prompt = ScriptedPrompt([DISMISSED, DISMISSED])
    assert asyncio.run(prompt.prompt(choice())) is DISMISSED
    with pytest.raises(PromptDismissedError):
        asyncio.run(prompt.prompt(choice(reject_close=True)))


def test_console_choice_by_number_or_name():
    prompt, output = console("2", "a", "")
    assert asyncio.run(prompt.prompt(choice())) == "b"
    assert asyncio.run(prompt.prompt(choice())) == "a"
    assert asyncio.run(prompt.prompt(choice())) is DISMISSED
    assert any("=== Pick one ===" in line for line in output)


def test_console_confirm():
    prompt, _ = console("y", "no")
    descriptor = PromptDescriptor(kind=PromptKind.CONFIRM, title="Sure?")
    assert asyncio.run(prompt.prompt(descriptor)) is True
    assert asyncio.run(prompt.prompt(descriptor)) is False


def test_console_form_casts_to_default_type():
    prompt, _ = console("3", "", "yes", '{"matrix_2": ["spell_fire_ball"]}')
    descriptor = PromptDescriptor(
        kind=PromptKind.FORM,
        title="Form",
        form={"count": 1, "name": "x", "on_the_fly": False, "matrices": {"matrix_2": []}},
    )
    assert asyncio.run(prompt.prompt(descriptor)) == {
        "count": 3,
        "name": "x",
        "on_the_fly": True,
        "matrices": {"matrix_2": ["spell_fire_ball"]},
    }


def test_console_roll_modifiers():
    prompt, output = console("Aid=2", "Cover=x", "")
    descriptor = PromptDescriptor(kind=PromptKind.ROLL, title="Roll", roll_options=RollOptions(step={"base": 5}))
    assert asyncio.run(prompt.prompt(descriptor)) == {"step": {"modifiers": {"Aid": 2}}}
    assert "Not a number: x" in output
