"""
Spellcasting: picks how a spell is cast, makes sure it can be, then hands
the actual casting to the matching casting workflow.
"""

import logging
from typing import Any, List, Mapping

from src.ed4e.core.boundaries import PromptDismissedError, WorkflowContext
from src.ed4e.models import (
    DISMISSED,
    CastingMethod,
    PromptAction,
    PromptDescriptor,
    PromptKind,
)
from src.ed4e.models.magic import RAW_CASTER_TYPES
from src.ed4e.workflows.attune_grimoire import AttuneGrimoireWorkflow
from src.ed4e.workflows.attune_matrix import AttuneMatrixWorkflow
from src.ed4e.workflows.base_casting import BaseCastingWorkflow
from src.ed4e.workflows.errors import WorkflowInterruptError
from src.ed4e.workflows.grimoire_casting import GrimoireCastingWorkflow
from src.ed4e.workflows.matrix_casting import MatrixCastingWorkflow
from src.ed4e.workflows.raw_casting import RawCastingWorkflow
from src.ed4e.workflows.workflow import ItemWorkflow, WorkflowStatus

logger = logging.getLogger(__name__)

CASTING_WORKFLOWS: Mapping[CastingMethod, type[BaseCastingWorkflow]] = {
    CastingMethod.MATRIX: MatrixCastingWorkflow,
    CastingMethod.GRIMOIRE: GrimoireCastingWorkflow,
    CastingMethod.RAW: RawCastingWorkflow,
}


class SpellcastingWorkflow(ItemWorkflow):
    def __init__(
        self,
        spell,
        actor,
        context: WorkflowContext,
        *,
        casting_method: str | None = None,
        targets: List[Any] = (),
        stop_on_weaving: bool = False,
        astral_space_pollution: str | None = None,
        casting_workflows: Mapping[CastingMethod, type[BaseCastingWorkflow]] | None = None,
        **options,
    ):
        super().__init__(spell, actor, context, **options)
        self._casting_method = CastingMethod(casting_method) if casting_method else None
        self._targets = list(targets)
        self._stop_on_weaving = stop_on_weaving
        self._astral_space_pollution = astral_space_pollution
        self._casting_workflows = dict(casting_workflows or CASTING_WORKFLOWS)
        for method in self._casting_workflows:
            if not isinstance(method, CastingMethod):
                raise TypeError(f"Casting workflows are keyed by CastingMethod, got {method!r}")
        self._casting_workflow: BaseCastingWorkflow | None = None

        self._add_step(self._choose_casting_method)
        self._add_step(self._attune_spell)
        self._add_step(self._create_casting_workflow)
        self._add_step(self._finalize_result)

    @property
    def casting_method(self) -> CastingMethod | None:
        return self._casting_method

    @property
    def casting_workflow(self) -> BaseCastingWorkflow | None:
        return self._casting_workflow

    def available_methods(self) -> List[CastingMethod]:
        spell = self.item
        methods = []
        if spell.learned and self.actor.matrices:
            methods.append(CastingMethod.MATRIX)
        if self.actor.grimoires_with_spell(spell.id):
            methods.append(CastingMethod.GRIMOIRE)
        methods.append(CastingMethod.RAW)
        return methods

    async def _choose_casting_method(self) -> None:
        if self.actor.type.value in RAW_CASTER_TYPES:
            self._casting_method = CastingMethod.RAW
            return
        if self._casting_method is not None:
            return

        methods = self.available_methods()
        answer = await self.context.prompt.prompt(PromptDescriptor(
            kind=PromptKind.CHOICE,
            title=f"Cast {self.item.name}",
            content="Choose how to cast the spell.",
            actor_id=self.actor.id,
            actions=[
                PromptAction(action=method.value, label=method.value.capitalize(), default=index == 0)
                for index, method in enumerate(methods)
            ],
        ))
        if answer is DISMISSED:
            self.cancel()
            return
        self._casting_method = CastingMethod(answer)

    async def _attune_spell(self) -> None:
        spell = self.item
        if self._casting_method is CastingMethod.MATRIX:
            if self.actor.get_attuned_matrix(spell.id) is not None:
                return
            if not self.actor.matrices:
                raise WorkflowInterruptError(self, f"{self.actor.name} has no matrix")
            matrices = {matrix.id: list(matrix.spells) for matrix in self.actor.matrices}
            free = next((m for m in self.actor.matrices if len(m.spells) < m.max_spells), None)
            if free is not None:
                matrices[free.id].append(spell.id)
            else:
                # Every matrix is full: replace the spells of the first one
                matrices[self.actor.matrices[0].id] = [spell.id]

            attune = AttuneMatrixWorkflow(self.actor, self.context, matrices=matrices, on_the_fly=True)
            await attune.execute()
            if attune.status is not WorkflowStatus.COMPLETED:
                self.cancel()
                return
            if self.actor.get_attuned_matrix(spell.id) is None:
                raise WorkflowInterruptError(self, f"{spell.name} could not be attuned to a matrix")

        elif self._casting_method is CastingMethod.GRIMOIRE:
            if any(g.attuned_spell == spell.id for g in self.actor.grimoires_with_spell(spell.id)):
                return
            try:
                confirmed = await self.context.prompt.prompt(PromptDescriptor(
                    kind=PromptKind.CONFIRM,
                    title="Attune grimoire",
                    content=f"Attune a grimoire to {spell.name} before casting?",
                    actor_id=self.actor.id,
                    reject_close=True,
                ))
            except PromptDismissedError:
                self.cancel()
                return
            if confirmed is DISMISSED:
                self.cancel()
                return
            if confirmed:
                grimoire = self.actor.grimoires_with_spell(spell.id)[0]
                attune = AttuneGrimoireWorkflow(
                    self.actor, self.context, grimoire_id=grimoire.id, spell_id=spell.id
                )
                await attune.execute()
                if attune.status is not WorkflowStatus.COMPLETED:
                    self.cancel()

    async def _create_casting_workflow(self) -> None:
        if self._casting_method is None:
            raise WorkflowInterruptError(self, "No casting method chosen")

        workflow_class = self._casting_workflows[self._casting_method]
        options: dict[str, Any] = {
            "targets": self._targets,
            "stop_on_weaving": self._stop_on_weaving,
        }
        if self._casting_method is CastingMethod.RAW:
            options["astral_space_pollution"] = self._astral_space_pollution
        self._casting_workflow = workflow_class(self.item, self.actor, self.context, **options)

        await self._casting_workflow.execute()
        if self._casting_workflow.status is not WorkflowStatus.COMPLETED:
            # The casting workflow already reported its interruption
            logger.info(f"{self.name}: {self._casting_workflow.name} {self._casting_workflow.status.value}")
            self.cancel()

    async def _finalize_result(self) -> None:
        roll = self._casting_workflow.result
        self._result = {
            "spell_id": self.item.id,
            "casting_method": self._casting_method,
            "roll": roll,
            "success": bool(roll and roll.is_success),
            "extra_successes": roll.extra_successes if roll else 0,
        }
