import logging
from typing import Any, List

from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import SpellcastingRollOptions, ThreadWeavingRollOptions
from src.ed4e.workflows.rollable import Rollable
from src.ed4e.workflows.workflow import ItemWorkflow

logger = logging.getLogger(__name__)


class BaseCastingWorkflow(Rollable, ItemWorkflow):
    """
    Shared casting sequence: weave threads, then roll spellcasting.

    One thread weaving test is made per run. While threads are missing the
    workflow stops after weaving and the progress stays on the spell, so the
    next run picks up where this one left off.

    Subclasses hook into ``_pre_weave``, ``_pre_cast`` and ``_post_cast``.
    """
    def __init__(
        self,
        spell,
        actor,
        context: WorkflowContext,
        *,
        targets: List[Any] = (),
        stop_on_weaving: bool = False,
        **options,
    ):
        super().__init__(spell, actor, context, **options)
        self._targets = list(targets)
        self._stop_on_weaving = stop_on_weaving
        self._grimoire_penalty = False
        self._extra_threads = 0
        self._weaving_roll = None

        self._add_step(self._pre_weave)
        self._add_step(self._weave_threads)
        self._add_step(self._pre_cast)
        self._init_rollable_steps()
        self._add_step(self._post_cast)
        self._add_step(self._set_result)

    @property
    def threads_required(self) -> int:
        return self.item.threads_required + self._extra_threads

    async def _pre_weave(self) -> None:
        pass

    async def _weave_threads(self) -> None:
        spell = self.item
        if spell.threads_woven < self.threads_required:
            ability = self.actor.get_single_item_by_edid(self.settings.edid_thread_weaving)
            options = ThreadWeavingRollOptions.from_actor(
                {
                    "spell_id": spell.id,
                    "ability_id": ability.id if ability else None,
                    "grimoire_penalty": self._grimoire_penalty,
                },
                self.actor,
                settings=self.settings,
            )
            self._weaving_roll = await self._roll_test(options)
            if self._weaving_roll is None:
                self.cancel()
                return
            if self._weaving_roll.is_success:
                woven = min(spell.threads_woven + 1 + self._weaving_roll.extra_successes, self.threads_required)
                await self.actor.update_item(spell.id, {"threads_woven": woven})
                logger.info(f"{self.actor.name} has woven {woven}/{self.threads_required} threads into {spell.name}")

        if self._stop_on_weaving or self.item.threads_woven < self.threads_required:
            self.cancel()

    async def _pre_cast(self) -> None:
        pass

    async def _prepare_roll_options(self) -> None:
        if self._roll_options is not None:
            return
        ability = self.actor.get_single_item_by_edid(self.settings.edid_spellcasting)
        options = SpellcastingRollOptions.from_actor(
            {
                "spell_id": self.item.id,
                "ability_id": ability.id if ability else None,
                "targets": [getattr(target, "system", target) for target in self._targets],
            },
            self.actor,
            settings=self.settings,
        )
        if self._grimoire_penalty:
            options.update_source({"step": {"modifiers": {"Foreign grimoire": -2}}})
        self._roll_options = options

    async def _post_cast(self) -> None:
        # Casting releases the woven threads
        await self.actor.update_item(self.item.id, {"threads_woven": 0})

    async def _set_result(self) -> None:
        self._result = self._roll
