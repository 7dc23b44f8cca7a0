from src.ed4e.workflows.base_casting import BaseCastingWorkflow
from src.ed4e.workflows.errors import WorkflowInterruptError


class MatrixCastingWorkflow(BaseCastingWorkflow):
    """Casting a spell held in one of the actor's matrices."""

    async def _pre_weave(self) -> None:
        if self.actor.get_attuned_matrix(self.item.id) is None:
            raise WorkflowInterruptError(self, f"{self.item.name} is not attuned to a matrix")
