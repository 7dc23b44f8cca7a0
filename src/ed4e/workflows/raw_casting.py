import logging
from typing import Any

from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import (
    DISMISSED,
    RAW_MAGIC,
    AstralSpacePollution,
    HorrorMarkRollOptions,
    PromptAction,
    PromptDescriptor,
    PromptKind,
    RawMagicDamageRollOptions,
    WarpingRollOptions,
)
from src.ed4e.models.magic import RAW_IMMUNE_TYPES
from src.ed4e.workflows.base_casting import BaseCastingWorkflow
from src.ed4e.workflows.knockdown import KnockdownWorkflow

logger = logging.getLogger(__name__)


class RawCastingWorkflow(BaseCastingWorkflow):
    """
    Casting without a matrix or grimoire.

    After the spell the astral space strikes back: a warping test against
    the caster's mystic defense, then raw magic damage if it succeeds and a
    horror mark test unless the astral space is safe. Heavy raw magic damage
    calls for a knockdown test. Horrors and spirits are spared all of it.
    """
    def __init__(self, spell, actor, context: WorkflowContext, *, astral_space_pollution: str | None = None, **options):
        super().__init__(spell, actor, context, **options)
        self._pollution = AstralSpacePollution(astral_space_pollution) if astral_space_pollution else None
        self._aftermath: dict[str, Any] = {}

    @property
    def aftermath(self) -> dict[str, Any]:
        return dict(self._aftermath)

    async def _post_cast(self) -> None:
        await super()._post_cast()
        if self.actor.type.value in RAW_IMMUNE_TYPES:
            return

        if self._pollution is None:
            answer = await self.context.prompt.prompt(PromptDescriptor(
                kind=PromptKind.CHOICE,
                title="Astral space",
                content="How polluted is the astral space here?",
                actor_id=self.actor.id,
                actions=[
                    PromptAction(
                        action=pollution.value,
                        label=RAW_MAGIC[pollution].label,
                        default=pollution is AstralSpacePollution.SAFE,
                    )
                    for pollution in AstralSpacePollution
                ],
            ))
            if answer is DISMISSED:
                self.cancel()
                return
            self._pollution = AstralSpacePollution(answer)
        self._aftermath["astral_space_pollution"] = self._pollution

        spell = self.item
        warping = await self._roll_test(
            WarpingRollOptions.for_spell(self.actor, spell, self._pollution), prompt=False
        )
        self._aftermath["warping"] = warping
        if warping.is_success:
            damage = await self._roll_test(
                RawMagicDamageRollOptions.for_spell(self.actor, spell, self._pollution), prompt=False
            )
            result = await self.actor.take_damage(
                damage.total,
                damage_type=damage.options.damage_type,
                armor_type=damage.options.armor_type,
            )
            self._aftermath["damage"] = result.damage_taken
            if result.knockdown_test:
                knockdown = KnockdownWorkflow(self.actor, self.context, difficulty=result.damage_taken)
                await knockdown.execute()
                self._aftermath["knockdown"] = knockdown.roll

        if RAW_MAGIC[self._pollution].horror_mark is not None:
            horror_mark = await self._roll_test(
                HorrorMarkRollOptions.for_spell(self.actor, spell, self._pollution), prompt=False
            )
            self._aftermath["horror_mark"] = horror_mark
            if horror_mark.is_success:
                self.notify("warning", f"{self.actor.name} has been marked by a Horror.")
