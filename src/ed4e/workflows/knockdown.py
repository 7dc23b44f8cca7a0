from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import KnockdownRollOptions
from src.ed4e.workflows.rollable import Rollable
from src.ed4e.workflows.workflow import ActorWorkflow


class KnockdownWorkflow(Rollable, ActorWorkflow):
    """Knockdown test after a heavy hit. A failure knocks the actor down."""
    def __init__(self, actor, context: WorkflowContext, *, difficulty: int | None = None, ability_id: str | None = None, **options):
        super().__init__(actor, context, **options)
        self._difficulty = difficulty
        self._ability_id = ability_id
        self._add_step(self._check_immunity)
        self._init_rollable_steps()

    async def _check_immunity(self) -> None:
        if self.actor.system.knockdown.immune:
            self.notify("info", f"{self.actor.name} cannot be knocked down.")
            self.cancel()

    async def _prepare_roll_options(self) -> None:
        if self._roll_options is not None:
            return
        self._roll_options = KnockdownRollOptions.from_actor(
            {
                "difficulty": self._difficulty or self.settings.minimum_difficulty,
                "ability_id": self._ability_id,
            },
            self.actor,
            settings=self.settings,
        )
