"""
Collaborator boundaries consumed by workflows.

Workflows never reach for a global: the prompt, the roll evaluator, the
log and the settings travel together in a ``WorkflowContext``.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from src.ed4e.config.settings import Settings, settings as default_settings
from src.ed4e.models import PromptDescriptor, Roll, RollOptions


class PromptDismissedError(Exception):
    """Raised instead of returning DISMISSED when a prompt sets ``reject_close``."""


@runtime_checkable
class PromptBoundary(Protocol):
    async def prompt(self, descriptor: PromptDescriptor) -> Any:
        """Return the user's answer, or ``DISMISSED``."""
        ...


@runtime_checkable
class RollEvaluator(Protocol):
    async def evaluate(self, options: RollOptions) -> Roll:
        ...


@runtime_checkable
class LogBoundary(Protocol):
    def publish(self, roll: Roll, flavor: str = "") -> None:
        ...

    def notify(self, level: str, message: str) -> None:
        """``level`` is one of info, warning or error."""
        ...


@dataclass
class WorkflowContext:
    prompt: PromptBoundary
    evaluator: RollEvaluator
    log: LogBoundary
    settings: Settings = field(default_factory=lambda: default_settings)
