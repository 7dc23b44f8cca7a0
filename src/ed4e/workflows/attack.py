import logging
from typing import Any, List

from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import (
    DISMISSED,
    AttackRollOptions,
    ItemStatus,
    PromptAction,
    PromptDescriptor,
    PromptKind,
    Weapon,
)
from src.ed4e.workflows.errors import WorkflowInterruptError
from src.ed4e.workflows.rollable import Rollable
from src.ed4e.workflows.workflow import ActorWorkflow

logger = logging.getLogger(__name__)

ATTACK_TYPES = ("weapon", "unarmed", "tail")
WIELDED = (ItemStatus.MAIN_HAND, ItemStatus.OFF_HAND, ItemStatus.TWO_HANDS)


class AttackWorkflow(Rollable, ActorWorkflow):
    """
    Attack test against the highest physical defense among ``targets``.

    Weapon attacks use the wielded weapon. If nothing is wielded the user is
    asked to draw one of the carried weapons.
    """
    def __init__(
        self,
        actor,
        context: WorkflowContext,
        *,
        attack_type: str = "weapon",
        weapon_id: str | None = None,
        targets: List[Any] = (),
        **options,
    ):
        if attack_type not in ATTACK_TYPES:
            raise ValueError(f"Unknown attack type: {attack_type}")
        super().__init__(actor, context, **options)
        self._attack_type = attack_type
        self._weapon_id = weapon_id
        self._targets = list(targets)
        self._ability = None

        self._add_step(self._set_weapon)
        self._add_step(self._set_ability)
        self._init_rollable_steps()

    @property
    def weapon(self) -> Weapon | None:
        return self.actor.get_item(self._weapon_id)

    async def _set_weapon(self) -> None:
        if self._attack_type == "unarmed" or self._weapon_id is not None:
            return

        weapons = self.actor.items_of_type("weapon")
        if self._attack_type == "tail":
            statuses = (ItemStatus.TAIL,)
        else:
            statuses = WIELDED
        equipped = [weapon for weapon in weapons if weapon.item_status in statuses]
        if equipped:
            self._weapon_id = equipped[0].id
            return

        carried = [weapon for weapon in weapons if weapon.item_status is ItemStatus.CARRIED]
        if self._attack_type == "weapon" and carried:
            await self._draw_weapon(carried)
            if self.canceled:
                return

        if self._weapon_id is None:
            raise WorkflowInterruptError(self, f"{self.actor.name} has no weapon to attack with")

    async def _draw_weapon(self, carried: List[Weapon]) -> None:
        answer = await self.context.prompt.prompt(PromptDescriptor(
            kind=PromptKind.CHOICE,
            title="Draw a weapon",
            content=f"{self.actor.name} has no weapon in hand.",
            actor_id=self.actor.id,
            actions=[PromptAction(action=weapon.id, label=weapon.name) for weapon in carried],
        ))
        if answer is DISMISSED:
            self.cancel()
            return

        weapon = self.actor.get_item(answer)
        await self.actor.update_item(weapon.id, {"item_status": weapon.wielding_type})
        logger.info(f"{self.actor.name} draws {weapon.name}")
        self._weapon_id = weapon.id

    async def _set_ability(self) -> None:
        if self._attack_type in ("unarmed", "tail"):
            edid = self.settings.edid_unarmed_combat
        else:
            edid = {
                "melee": self.settings.edid_melee_weapons,
                "missile": self.settings.edid_missile_weapons,
                "thrown": self.settings.edid_throwing_weapons,
                "unarmed": self.settings.edid_unarmed_combat,
            }[self.weapon.weapon_type]
        self._ability = self.actor.get_single_item_by_edid(edid)

    async def _prepare_roll_options(self) -> None:
        if self._roll_options is not None:
            return
        weapon = self.weapon
        if weapon is not None:
            flavor = f"{self.actor.name} attacks with {weapon.name}."
        else:
            flavor = f"{self.actor.name} attacks unarmed."
        self._roll_options = AttackRollOptions.from_actor(
            {
                "weapon_type": weapon.weapon_type if weapon else "unarmed",
                "weapon_id": self._weapon_id,
                "ability_id": self._ability.id if self._ability else None,
                "targets": [getattr(target, "system", target) for target in self._targets],
                "chat_flavor": flavor,
            },
            self.actor,
            settings=self.settings,
        )
