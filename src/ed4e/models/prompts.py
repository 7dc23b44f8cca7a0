from enum import Enum
from typing import Any, List

from pydantic import BaseModel, Field, SerializeAsAny

from src.ed4e.models.rolls import RollOptions


class PromptKind(str, Enum):
    CHOICE = "choice"           # Pick one of ``actions``
    CONFIRM = "confirm"         # Yes or no
    FORM = "form"               # Fill in ``form`` fields
    ROLL = "roll"               # Review and edit ``roll_options`` before rolling


class PromptAction(BaseModel):
    action: str                 # Value returned when chosen
    label: str
    default: bool = False


class PromptDescriptor(BaseModel):
    """Everything a prompt boundary needs to ask the user one question."""
    kind: PromptKind
    title: str
    content: str = ""
    actor_id: str | None = None
    actions: List[PromptAction] = Field(default_factory=list)
    form: dict[str, Any] = Field(default_factory=dict)     # Field name -> default value
    roll_options: SerializeAsAny[RollOptions] | None = None
    reject_close: bool = False  # Closing raises PromptDismissedError instead of returning DISMISSED

    @property
    def default_action(self) -> str | None:
        for action in self.actions:
            if action.default:
                return action.action
        return self.actions[0].action if self.actions else None


class _Dismissed:
    """Returned by a prompt boundary when the user closes the prompt without answering."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "DISMISSED"


DISMISSED = _Dismissed()
