import logging
from typing import Any

from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import (
    DISMISSED,
    AttuningRollOptions,
    AttuningType,
    PromptDescriptor,
    PromptKind,
)
from src.ed4e.workflows.errors import WorkflowInterruptError
from src.ed4e.workflows.rollable import Rollable
from src.ed4e.workflows.workflow import ActorWorkflow

logger = logging.getLogger(__name__)

CONCENTRATION_SOURCE = "attune-matrix"


class AttuneMatrixWorkflow(Rollable, ActorWorkflow):
    """
    Put spells into the actor's matrices.

    Attuning at rest always works. Attuning on the fly needs a thread weaving
    test against the highest weaving difficulty of the new spells; a failure
    leaves the actor concentrating on the attunement, which the next run may
    cancel with ``cancel_reattuning``.

    ``matrices`` maps matrix IDs to the spell IDs they should hold. When not
    given, the user fills it in through a form prompt.
    """
    def __init__(
        self,
        actor,
        context: WorkflowContext,
        *,
        matrices: dict[str, list[str]] | None = None,
        on_the_fly: bool = False,
        cancel_reattuning: bool = False,
        **options,
    ):
        super().__init__(actor, context, **options)
        self._matrices = matrices
        self._on_the_fly = on_the_fly
        self._cancel_reattuning = cancel_reattuning

        self._add_step(self._prompt_configuration)
        self._add_step(self._check_on_the_fly)
        self._add_step(self._cancel_reattuning_step)
        self._add_step(self._attune_on_the_fly)
        self._add_step(self._handle_failure)
        self._add_step(self._attune_spells)

    @property
    def changed_matrices(self) -> dict[str, list[str]]:
        """Matrices whose spells differ from what they hold now."""
        current = {matrix.id: matrix.spells for matrix in self.actor.matrices}
        return {
            matrix_id: spells for matrix_id, spells in (self._matrices or {}).items()
            if current.get(matrix_id) != spells
        }

    def _validated_changes(self) -> dict[str, list[str]]:
        changed = self.changed_matrices
        for matrix_id, spells in changed.items():
            matrix = self.actor.get_item(matrix_id)
            if matrix is None or matrix.type != "matrix":
                raise WorkflowInterruptError(self, f"{self.actor.name} has no matrix {matrix_id}")
            if len(spells) > matrix.max_spells:
                raise WorkflowInterruptError(self, f"{matrix.name} holds at most {matrix.max_spells} spells")
        return changed

    async def _prompt_configuration(self) -> None:
        if self._matrices is not None or self._cancel_reattuning:
            return

        answer = await self.context.prompt.prompt(PromptDescriptor(
            kind=PromptKind.FORM,
            title="Attune matrices",
            actor_id=self.actor.id,
            form={
                "matrices": {matrix.id: list(matrix.spells) for matrix in self.actor.matrices},
                "on_the_fly": self._on_the_fly,
                "cancel_reattuning": False,
            },
        ))
        if answer is DISMISSED:
            self.cancel()
            return
        self._matrices = answer.get("matrices", {})
        self._on_the_fly = answer.get("on_the_fly", self._on_the_fly)
        self._cancel_reattuning = answer.get("cancel_reattuning", False)

    async def _check_on_the_fly(self) -> None:
        # A failed attempt leaves the actor attuning on the fly until it is retried or dropped
        if self.actor.has_condition("attuning_on_the_fly"):
            self._on_the_fly = True

    async def _cancel_reattuning_step(self) -> None:
        if not self._cancel_reattuning:
            return
        await self.actor.write({
            "conditions.attuning_on_the_fly": False,
            "concentration_source": None,
        })
        await self.actor.empty_all_matrices()
        self.notify("info", f"{self.actor.name} stops attuning; all matrices are empty.")
        self._result = False
        self.cancel()

    async def _attune_on_the_fly(self) -> None:
        if not self._on_the_fly:
            return

        changed = self._validated_changes()
        new_spells = sorted({spell for spells in changed.values() for spell in spells})
        if not new_spells:
            return

        ability = self.actor.get_single_item_by_edid(self.settings.edid_thread_weaving)
        self._roll_options = AttuningRollOptions.from_actor(
            {
                "attuning_type": AttuningType.MATRIX_ON_THE_FLY,
                "ability_id": ability.id if ability else None,
                "spells_to_attune": new_spells,
                "items_to_attune_to": list(changed),
                "chat_flavor": f"{self.actor.name} attunes matrices on the fly.",
            },
            self.actor,
            settings=self.settings,
        )
        self._roll = await self._roll_test(self._roll_options)
        if self._roll is None:
            self.cancel()

    async def _handle_failure(self) -> None:
        if self._roll is None or not self._roll.is_failure:
            return
        await self.actor.write({
            "conditions.attuning_on_the_fly": True,
            "concentration_source": CONCENTRATION_SOURCE,
        })
        self.notify("info", f"{self.actor.name} fails to attune and keeps concentrating.")
        self._result = False
        self.cancel()

    async def _attune_spells(self) -> None:
        changed = self._validated_changes()
        patch: dict[str, Any] = {
            f"items.{matrix_id}.spells": list(spells) for matrix_id, spells in changed.items()
        }
        if self.actor.has_condition("attuning_on_the_fly"):
            patch["conditions.attuning_on_the_fly"] = False
            patch["concentration_source"] = None
        if patch:
            await self.actor.write(patch)
        logger.info(f"{self.actor.name} attuned {len(changed)} matrices")
        self._result = bool(changed)
