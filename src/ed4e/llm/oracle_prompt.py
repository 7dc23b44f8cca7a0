import logging
from typing import Any

from pydantic import BaseModel

from src.ed4e.core.boundaries import PromptDismissedError
from src.ed4e.llm.client import OllamaClient
from src.ed4e.llm.exceptions import OracleAnswerError, UnknownChoiceError
from src.ed4e.llm.prompts import OraclePrompts
from src.ed4e.models import DISMISSED, PromptDescriptor, PromptKind

logger = logging.getLogger(__name__)


class OracleChoice(BaseModel):
    action: str
    reason: str = ""


class OracleConfirmation(BaseModel):
    confirm: bool
    reason: str = ""


class OraclePrompt:
    """
    Prompt boundary for NPC-controlled actors: an LLM answers in their place.

    Roll prompts are accepted as they are and forms keep their defaults. An
    answer the oracle cannot give is logged and treated as a dismissal.
    """
    def __init__(self, llm_client: OllamaClient, actor_name: str, actor_type: str = "npc"):
        self.llm = llm_client
        self.system = OraclePrompts.SYSTEM.format(actor_name=actor_name, actor_type=actor_type)

    async def prompt(self, descriptor: PromptDescriptor) -> Any:
        try:
            match descriptor.kind:
                case PromptKind.CHOICE:
                    return await self._choose(descriptor)
                case PromptKind.CONFIRM:
                    return await self._confirm(descriptor)
                case PromptKind.FORM:
                    return dict(descriptor.form)
                case PromptKind.ROLL:
                    return {}
        except OracleAnswerError as e:
            logger.warning(f"Oracle could not answer '{descriptor.title}': {e}")
            if descriptor.reject_close:
                raise PromptDismissedError(descriptor.title) from e
            return DISMISSED

    async def _choose(self, descriptor: PromptDescriptor) -> str:
        keys = [action.action for action in descriptor.actions]
        prompt = OraclePrompts.CHOOSE_ACTION.format(
            title=descriptor.title,
            content=descriptor.content,
            options="\n".join(f"- {action.action}: {action.label}" for action in descriptor.actions),
        )
        answer = await self.llm.agenerate(prompt, system=self.system, response_format=OracleChoice)
        if answer.action not in keys:
            raise UnknownChoiceError(f"'{answer.action}' is not one of {keys}")
        logger.info(f"Oracle chose '{answer.action}' for '{descriptor.title}': {answer.reason}")
        return answer.action

    async def _confirm(self, descriptor: PromptDescriptor) -> bool:
        prompt = OraclePrompts.CONFIRM.format(title=descriptor.title, content=descriptor.content)
        answer = await self.llm.agenerate(prompt, system=self.system, response_format=OracleConfirmation)
        logger.info(f"Oracle {'confirmed' if answer.confirm else 'declined'} '{descriptor.title}': {answer.reason}")
        return answer.confirm
