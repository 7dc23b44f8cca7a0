from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import (
    DISMISSED,
    JumpUpRollOptions,
    PromptAction,
    PromptDescriptor,
    PromptKind,
)
from src.ed4e.workflows.rollable import Rollable
from src.ed4e.workflows.workflow import ActorWorkflow

NO_ABILITY = "none"


class JumpUpWorkflow(Rollable, ActorWorkflow):
    """
    Get back on your feet: a DEX-based test against a fixed difficulty,
    paid for with strain. Success clears the knocked-down condition.
    """
    def __init__(self, actor, context: WorkflowContext, *, ability_id: str | None = None, **options):
        super().__init__(actor, context, **options)
        self._ability_id = ability_id
        self._ability_chosen = ability_id is not None
        self._add_step(self._validate_knocked_down)
        self._add_step(self._choose_ability)
        self._init_rollable_steps()

    async def _validate_knocked_down(self) -> None:
        if not await self.actor.read("conditions.knocked_down"):
            self.notify("warning", f"{self.actor.name} is not knocked down.")
            self.cancel()

    async def _choose_ability(self) -> None:
        if self._ability_chosen:
            return

        abilities = [
            ability for ability in self.actor.items_of_type("talent") + self.actor.items_of_type("skill")
            if ability.attribute == "dex"
        ]
        answer = await self.context.prompt.prompt(PromptDescriptor(
            kind=PromptKind.CHOICE,
            title="Jump up",
            content="Choose an ability to jump up with.",
            actor_id=self.actor.id,
            actions=[
                *(PromptAction(action=ability.id, label=ability.name) for ability in abilities),
                PromptAction(action=NO_ABILITY, label="Dexterity only", default=True),
            ],
        ))
        if answer is DISMISSED:
            self.cancel()
            return
        self._ability_id = None if answer == NO_ABILITY else answer
        self._ability_chosen = True

    async def _prepare_roll_options(self) -> None:
        if self._roll_options is not None:
            return
        self._roll_options = JumpUpRollOptions.from_actor(
            {"ability_id": self._ability_id},
            self.actor,
            settings=self.settings,
        )
