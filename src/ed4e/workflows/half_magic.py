from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import (
    DISMISSED,
    HalfMagicRollOptions,
    PromptAction,
    PromptDescriptor,
    PromptKind,
)
from src.ed4e.workflows.errors import WorkflowInterruptError
from src.ed4e.workflows.rollable import Rollable
from src.ed4e.workflows.workflow import ActorWorkflow


class HalfMagicWorkflow(Rollable, ActorWorkflow):
    """Half-magic test: attribute step plus the circle of one of the actor's disciplines."""
    def __init__(self, actor, context: WorkflowContext, *, attribute: str = "per", discipline_id: str | None = None, **options):
        super().__init__(actor, context, **options)
        self._attribute = attribute
        self._discipline_id = discipline_id
        self._add_step(self._choose_discipline)
        self._init_rollable_steps()

    async def _choose_discipline(self) -> None:
        if self._discipline_id is not None:
            return

        disciplines = self.actor.items_of_type("discipline")
        if not disciplines:
            raise WorkflowInterruptError(self, f"{self.actor.name} has no discipline to use half-magic with")
        if len(disciplines) == 1:
            self._discipline_id = disciplines[0].id
            return

        answer = await self.context.prompt.prompt(PromptDescriptor(
            kind=PromptKind.CHOICE,
            title="Choose a discipline",
            actor_id=self.actor.id,
            actions=[
                PromptAction(action=discipline.id, label=f"{discipline.name} ({discipline.level})")
                for discipline in disciplines
            ],
        ))
        if answer is DISMISSED:
            self.cancel()
            return
        self._discipline_id = answer

    async def _prepare_roll_options(self) -> None:
        if self._roll_options is not None:
            return
        self._roll_options = HalfMagicRollOptions.from_actor(
            {"attribute": self._attribute, "discipline_id": self._discipline_id},
            self.actor,
            settings=self.settings,
        )
