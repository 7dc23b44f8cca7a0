from src.ed4e.workflows.base_casting import BaseCastingWorkflow
from src.ed4e.workflows.errors import WorkflowInterruptError


class GrimoireCastingWorkflow(BaseCastingWorkflow):
    """
    Casting straight from a grimoire.

    A grimoire not attuned to the spell needs one extra thread; another
    magician's grimoire gives -2 to weaving and casting.
    """

    async def _pre_weave(self) -> None:
        grimoires = self.actor.grimoires_with_spell(self.item.id)
        if not grimoires:
            raise WorkflowInterruptError(self, f"{self.item.name} is not in any grimoire")

        # Prefer an attuned grimoire, then one of the actor's own
        grimoires.sort(key=lambda g: (g.attuned_spell != self.item.id, not self.actor.owns_grimoire(g)))
        grimoire = grimoires[0]
        self._grimoire_penalty = not self.actor.owns_grimoire(grimoire)
        self._extra_threads = 0 if grimoire.attuned_spell == self.item.id else 1
