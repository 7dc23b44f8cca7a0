import logging
from typing import Any

from src.ed4e.core.roll_processor import RollProcessor
from src.ed4e.models import DISMISSED, PromptDescriptor, PromptKind, Roll, RollOptions

logger = logging.getLogger(__name__)


class Rollable:
    """
    Mixin giving an ``ActorWorkflow`` the standard dice test tail.

    Mix it in before the workflow base (``class X(Rollable, ActorWorkflow)``)
    and call ``_init_rollable_steps()`` once from ``__init__``. Concrete
    workflows override ``_prepare_roll_options``.

    Options:
        roll: a roll made elsewhere; skips the roll prompt.
        roll_options: prepared options; ``_prepare_roll_options`` keeps them.
        roll_to_message: publish the roll from the workflow instead of the processor.
        roll_prompt_title: title of the roll prompt.
    """
    def __init__(self, *args: Any, **options: Any):
        self._roll: Roll | None = options.pop("roll", None)
        self._roll_options: RollOptions | None = options.pop("roll_options", None)
        if self._roll_options is None and self._roll is not None:
            self._roll_options = self._roll.options
        self._roll_to_message: bool = options.pop("roll_to_message", False)
        self._roll_prompt_title: str | None = options.pop("roll_prompt_title", None)
        self._rollable_initialized = False
        super().__init__(*args, **options)

    @property
    def roll(self) -> Roll | None:
        return self._roll

    @property
    def roll_options(self) -> RollOptions | None:
        return self._roll_options

    def _init_rollable_steps(self) -> None:
        if self._rollable_initialized:
            raise RuntimeError(f"{self.name}: rollable steps already added")
        self._rollable_initialized = True
        self._add_step(self._prepare_roll_options)
        self._add_step(self._create_roll)
        self._add_step(self._evaluate_result_roll)
        self._add_step(self._process_roll)
        if self._roll_to_message:
            self._add_step(self._roll_to_chat)

    async def _prepare_roll_options(self) -> None:
        if self._roll_options is None:
            self._roll_options = RollOptions()

    async def _create_roll(self) -> None:
        if self._roll_options is None:
            raise RuntimeError(f"{self.name}: no roll options prepared")
        if self._roll is not None:
            return

        changes = await self._prompt_roll(self._roll_options, self._roll_prompt_title)
        if changes is DISMISSED:
            self.cancel()
            return
        self._roll = Roll(options=self._roll_options)

    async def _evaluate_result_roll(self) -> None:
        if self._roll is None:
            return
        if not self._roll.evaluated:
            self._roll = await self.context.evaluator.evaluate(self._roll.options)
        self._result = self._roll

    async def _process_roll(self) -> None:
        await RollProcessor(self.context).process(
            self._roll, self.actor, roll_to_message=not self._roll_to_message
        )

    async def _roll_to_chat(self) -> None:
        if self._roll is None:
            return
        self.context.log.publish(self._roll, self._roll.options.chat_flavor)

    # =========================================================================
    # SHARED HELPERS
    # =========================================================================
    async def _prompt_roll(self, options: RollOptions, title: str | None = None) -> Any:
        """Let the user edit ``options`` in place. Returns the answer or ``DISMISSED``."""
        answer = await self.context.prompt.prompt(PromptDescriptor(
            kind=PromptKind.ROLL,
            title=title or options.chat_flavor or self.name,
            actor_id=self.actor.id,
            roll_options=options,
        ))
        if answer is DISMISSED:
            return DISMISSED
        if isinstance(answer, dict) and answer:
            options.update_source(answer)
        return answer

    async def _roll_test(self, options: RollOptions, *, prompt: bool = True, actor=None) -> Roll | None:
        """
        Roll an extra test outside the tail: prompt, evaluate and process it.

        Returns ``None`` if the user dismissed the roll prompt.
        """
        if prompt and await self._prompt_roll(options) is DISMISSED:
            return None
        roll = await self.context.evaluator.evaluate(options)
        await RollProcessor(self.context).process(roll, actor or self.actor)
        return roll
