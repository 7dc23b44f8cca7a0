from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import (
    DISMISSED,
    AttuningRollOptions,
    AttuningType,
    PromptAction,
    PromptDescriptor,
    PromptKind,
)
from src.ed4e.workflows.errors import WorkflowInterruptError
from src.ed4e.workflows.rollable import Rollable
from src.ed4e.workflows.workflow import ActorWorkflow


class AttuneGrimoireWorkflow(Rollable, ActorWorkflow):
    """
    Attune a grimoire to one of its spells with a patterncraft test.
    Another magician's grimoire is harder to read.
    """
    def __init__(
        self,
        actor,
        context: WorkflowContext,
        *,
        grimoire_id: str | None = None,
        spell_id: str | None = None,
        **options,
    ):
        super().__init__(actor, context, **options)
        self._grimoire_id = grimoire_id
        self._spell_id = spell_id
        self._patterncraft = None

        self._add_step(self._select_grimoire)
        self._add_step(self._select_spell)
        self._add_step(self._find_patterncraft)
        self._init_rollable_steps()
        self._add_step(self._set_active_spell)

    @property
    def grimoire(self):
        return self.actor.get_item(self._grimoire_id)

    async def _select_grimoire(self) -> None:
        if self._grimoire_id is not None:
            return
        grimoires = self.actor.grimoires
        if not grimoires:
            self.notify("info", f"{self.actor.name} has no grimoire.")
            self.cancel()
            return
        if len(grimoires) == 1:
            self._grimoire_id = grimoires[0].id
            return

        answer = await self.context.prompt.prompt(PromptDescriptor(
            kind=PromptKind.CHOICE,
            title="Choose a grimoire",
            actor_id=self.actor.id,
            actions=[PromptAction(action=grimoire.id, label=grimoire.name) for grimoire in grimoires],
        ))
        if answer is DISMISSED:
            self.cancel()
            return
        self._grimoire_id = answer

    async def _select_spell(self) -> None:
        grimoire = self.grimoire
        if grimoire is None or grimoire.type != "grimoire":
            raise WorkflowInterruptError(self, f"{self.actor.name} has no grimoire {self._grimoire_id}")
        if not grimoire.spells:
            raise WorkflowInterruptError(self, f"{grimoire.name} holds no spells")

        if self._spell_id is None:
            answer = await self.context.prompt.prompt(PromptDescriptor(
                kind=PromptKind.CHOICE,
                title=f"Attune {grimoire.name}",
                actor_id=self.actor.id,
                actions=[
                    PromptAction(action=spell_id, label=getattr(self.actor.get_item(spell_id), "name", spell_id))
                    for spell_id in grimoire.spells
                ],
            ))
            if answer is DISMISSED:
                self.cancel()
                return
            self._spell_id = answer

        if self._spell_id not in grimoire.spells:
            raise WorkflowInterruptError(self, f"{grimoire.name} does not hold that spell")
        if grimoire.attuned_spell == self._spell_id:
            self.notify("warning", f"{grimoire.name} is already attuned to that spell.")
            self.cancel()

    async def _find_patterncraft(self) -> None:
        self._patterncraft = self.actor.get_single_item_by_edid(self.settings.edid_patterncraft)
        if self._patterncraft is None:
            raise WorkflowInterruptError(self, f"{self.actor.name} does not know patterncraft")

    async def _prepare_roll_options(self) -> None:
        if self._roll_options is not None:
            return
        grimoire = self.grimoire
        self._roll_options = AttuningRollOptions.from_actor(
            {
                "attuning_type": AttuningType.GRIMOIRE,
                "ability_id": self._patterncraft.id,
                "spells_to_attune": [self._spell_id],
                "items_to_attune_to": [grimoire.id],
                "grimoire_penalty": not self.actor.owns_grimoire(grimoire),
                "chat_flavor": f"{self.actor.name} attunes {grimoire.name}.",
            },
            self.actor,
            settings=self.settings,
        )

    async def _set_active_spell(self) -> None:
        if self._roll is None or not self._roll.is_success:
            self._result = False
            return
        await self.actor.update_item(self._grimoire_id, {"attuned_spell": self._spell_id})
        self._result = True
