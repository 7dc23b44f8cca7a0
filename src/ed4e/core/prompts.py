import json
import logging
from collections import deque
from typing import Any, Callable, Iterable

from src.ed4e.core.boundaries import PromptDismissedError
from src.ed4e.models import DISMISSED, PromptDescriptor, PromptKind

logger = logging.getLogger(__name__)


def _dismiss(descriptor: PromptDescriptor) -> Any:
    if descriptor.reject_close:
        raise PromptDismissedError(descriptor.title)
    return DISMISSED


class ScriptedPrompt:
    """
    Prompt boundary answering from a queue of prepared answers.

    An answer may be ``DISMISSED``, a plain value, or a callable receiving the
    descriptor. ``ROLL`` prompts draw from their own queue, ``roll_answers``,
    and accept the options unchanged once it is empty. Every descriptor
    asked is kept in ``asked``.
    """
    def __init__(self, answers: Iterable[Any] = (), roll_answers: Iterable[Any] = ()):
        self._answers = deque(answers)
        self._roll_answers = deque(roll_answers)
        self.asked: list[PromptDescriptor] = []

    def queue(self, *answers: Any) -> None:
        self._answers.extend(answers)

    def queue_rolls(self, *answers: Any) -> None:
        self._roll_answers.extend(answers)

    @property
    def remaining(self) -> int:
        return len(self._answers)

    def asked_kinds(self) -> list[PromptKind]:
        return [descriptor.kind for descriptor in self.asked]

    async def prompt(self, descriptor: PromptDescriptor) -> Any:
        self.asked.append(descriptor)
        if descriptor.kind is PromptKind.ROLL:
            answer = self._roll_answers.popleft() if self._roll_answers else {}
        elif self._answers:
            answer = self._answers.popleft()
        else:
            raise RuntimeError(f"No scripted answer for prompt '{descriptor.title}'")

        if callable(answer):
            answer = answer(descriptor)
        if answer is DISMISSED:
            return _dismiss(descriptor)
        return answer


class ConsolePrompt:
    """Prompt boundary reading answers from the terminal."""
    def __init__(self, input_func: Callable[[str], str] = input, output_func: Callable[[str], None] = print):
        self._input = input_func
        self._output = output_func

    async def prompt(self, descriptor: PromptDescriptor) -> Any:
        self._output(f"\n=== {descriptor.title} ===")
        if descriptor.content:
            self._output(descriptor.content)

        match descriptor.kind:
            case PromptKind.CHOICE:
                return self._choose(descriptor)
            case PromptKind.CONFIRM:
                answer = self._read("[y/n] > ").lower()
                if not answer:
                    return _dismiss(descriptor)
                return answer.startswith("y")
            case PromptKind.FORM:
                return self._fill_form(descriptor)
            case PromptKind.ROLL:
                return self._edit_roll(descriptor)

    def _read(self, label: str) -> str:
        try:
            return self._input(label).strip()
        except EOFError:
            return ""

    def _choose(self, descriptor: PromptDescriptor) -> Any:
        for index, action in enumerate(descriptor.actions, start=1):
            marker = "*" if action.default else " "
            self._output(f" {marker}{index}. {action.label}")
        answer = self._read("> ")
        if not answer:
            return _dismiss(descriptor)
        if answer.isdigit() and 1 <= int(answer) <= len(descriptor.actions):
            return descriptor.actions[int(answer) - 1].action
        for action in descriptor.actions:
            if answer == action.action:
                return action.action
        logger.warning(f"Unrecognized choice '{answer}'")
        return _dismiss(descriptor)

    def _fill_form(self, descriptor: PromptDescriptor) -> Any:
        values: dict[str, Any] = {}
        for name, default in descriptor.form.items():
            answer = self._read(f"{name} [{default}] > ")
            if answer.lower() == "q":
                return _dismiss(descriptor)
            values[name] = self._convert(answer, default) if answer else default
        return values

    @staticmethod
    def _convert(answer: str, default: Any) -> Any:
        if isinstance(default, bool):
            return answer.lower() in ("y", "yes", "true", "1")
        if isinstance(default, (dict, list)):
            return json.loads(answer)
        if default is None:
            return answer
        return type(default)(answer)

    def _edit_roll(self, descriptor: PromptDescriptor) -> Any:
        """Let the user add modifiers as ``label=value`` pairs. Blank line rolls."""
        options = descriptor.roll_options
        if options is not None:
            self._output(f"Step {options.step.total} {options.step.modifiers or ''}")
            if options.target is not None and options.target.public:
                self._output(f"Target {options.target.total}")
        modifiers: dict[str, int] = {}
        while True:
            answer = self._read("modifier (label=value, blank to roll, q to cancel) > ")
            if not answer:
                break
            if answer.lower() == "q":
                return _dismiss(descriptor)
            label, _, value = answer.partition("=")
            try:
                modifiers[label.strip()] = int(value)
            except ValueError:
                self._output(f"Not a number: {value}")
        return {"step": {"modifiers": modifiers}} if modifiers else {}
