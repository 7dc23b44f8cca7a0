from src.ed4e.core.boundaries import (
    LogBoundary,
    PromptBoundary,
    PromptDismissedError,
    RollEvaluator,
    WorkflowContext,
)
from src.ed4e.core.state_manager import StateManager
from src.ed4e.core.actor_document import ActorDocument, DamageResult
from src.ed4e.core.rules_engine import FixedEvaluator, StepDiceEvaluator
from src.ed4e.core.roll_processor import RollProcessor
from src.ed4e.core.chat_log import ChatLog, ChatMessage
from src.ed4e.core.prompts import ConsolePrompt, ScriptedPrompt

__all__ = [
    "LogBoundary",
    "PromptBoundary",
    "PromptDismissedError",
    "RollEvaluator",
    "WorkflowContext",
    "StateManager",
    "ActorDocument",
    "DamageResult",
    "FixedEvaluator",
    "StepDiceEvaluator",
    "RollProcessor",
    "ChatLog",
    "ChatMessage",
    "ConsolePrompt",
    "ScriptedPrompt",
]
