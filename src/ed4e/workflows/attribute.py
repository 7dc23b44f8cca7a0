from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import ATTRIBUTE_IDS, AttributeRollOptions
from src.ed4e.workflows.rollable import Rollable
from src.ed4e.workflows.workflow import ActorWorkflow


class AttributeWorkflow(Rollable, ActorWorkflow):
    """A plain attribute test, e.g. a DEX test to catch a falling cup."""
    def __init__(self, actor, context: WorkflowContext, *, attribute: str, **options):
        if attribute not in ATTRIBUTE_IDS:
            raise ValueError(f"Unknown attribute: {attribute}")
        super().__init__(actor, context, **options)
        self._attribute = attribute
        self._init_rollable_steps()

    async def _prepare_roll_options(self) -> None:
        if self._roll_options is not None:
            return
        self._roll_options = AttributeRollOptions.from_actor(
            {"attribute": self._attribute, **self._options},
            self.actor,
            settings=self.settings,
        )
