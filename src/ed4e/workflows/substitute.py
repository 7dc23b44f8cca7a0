"""
Substituting an attribute for an ability the actor does not have.

The user picks what the attribute stands in for. Ability substitutes roll
the attribute step; attack substitutes hand over to an ``AttackWorkflow``.
"""

import logging
from typing import Any, List, NamedTuple

from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import (
    ATTRIBUTE_IDS,
    DISMISSED,
    AbilityRollOptions,
    ItemStatus,
    PromptAction,
    PromptDescriptor,
    PromptKind,
)
from src.ed4e.workflows.attack import AttackWorkflow
from src.ed4e.workflows.errors import WorkflowInterruptError
from src.ed4e.workflows.rollable import Rollable
from src.ed4e.workflows.workflow import ActorWorkflow

logger = logging.getLogger(__name__)


class SubstituteMode(NamedTuple):
    label: str
    roll_type: str                  # "ability" or "attack"
    attack_type: str | None = None


SUBSTITUTE_MODES: dict[str, dict[str, SubstituteMode]] = {
    "dex": {
        "meleeAttack": SubstituteMode("Melee Weapons", "attack", "weapon"),
        "unarmedAttack": SubstituteMode("Unarmed Combat", "attack", "unarmed"),
        "tailAttack": SubstituteMode("Tail Attack", "attack", "tail"),
        "avoidBlow": SubstituteMode("Avoid Blow", "ability"),
        "climbing": SubstituteMode("Climbing", "ability"),
        "silentWalk": SubstituteMode("Silent Walk", "ability"),
    },
    "str": {
        "greatLeap": SubstituteMode("Great Leap", "ability"),
        "swimming": SubstituteMode("Swimming", "ability"),
    },
    "per": {
        "awareness": SubstituteMode("Awareness", "ability"),
        "navigation": SubstituteMode("Navigation", "ability"),
        "tracking": SubstituteMode("Tracking", "ability"),
    },
    "wil": {
        "resistTaunt": SubstituteMode("Resist Taunt", "ability"),
    },
    "cha": {
        "conversation": SubstituteMode("Conversation", "ability"),
        "haggle": SubstituteMode("Haggle", "ability"),
    },
}


class SubstituteWorkflow(Rollable, ActorWorkflow):
    """
    Roll ``attribute`` in place of an ability. ``mode`` preselects the
    substitute; otherwise the user chooses one. Rolls are published by the
    workflow itself.
    """
    def __init__(
        self,
        actor,
        context: WorkflowContext,
        *,
        attribute: str,
        mode: str | None = None,
        targets: List[Any] = (),
        **options,
    ):
        if attribute not in ATTRIBUTE_IDS:
            raise ValueError(f"Unknown attribute: {attribute}")
        options.setdefault("roll_to_message", True)
        super().__init__(actor, context, **options)
        self._attribute = attribute
        self._mode_key = mode
        self._targets = list(targets)
        self._attack_workflow: AttackWorkflow | None = None

        self._add_step(self._choose_substitute)
        self._add_step(self._choose_alternative_workflow)
        self._init_rollable_steps()

    @property
    def mode(self) -> SubstituteMode | None:
        return SUBSTITUTE_MODES.get(self._attribute, {}).get(self._mode_key)

    @property
    def attack_workflow(self) -> AttackWorkflow | None:
        return self._attack_workflow

    def available_modes(self) -> dict[str, SubstituteMode]:
        modes = dict(SUBSTITUTE_MODES.get(self._attribute, {}))
        # Only actors with a tail weapon can make tail attacks
        if "tailAttack" in modes and not any(
            weapon.item_status is ItemStatus.TAIL for weapon in self.actor.items_of_type("weapon")
        ):
            del modes["tailAttack"]
        return modes

    async def _choose_substitute(self) -> None:
        modes = self.available_modes()
        if not modes:
            raise WorkflowInterruptError(self, f"Nothing can be substituted with {self._attribute.upper()}")

        if self._mode_key is None:
            answer = await self.context.prompt.prompt(PromptDescriptor(
                kind=PromptKind.CHOICE,
                title=f"Substitute {self._attribute.upper()}",
                content=f"What does {self.actor.name} use {self._attribute.upper()} for?",
                actor_id=self.actor.id,
                actions=[PromptAction(action=key, label=mode.label) for key, mode in modes.items()],
            ))
            if answer is DISMISSED:
                self.cancel()
                return
            self._mode_key = answer

        if self._mode_key not in modes:
            raise WorkflowInterruptError(
                self, f"{self.actor.name} cannot use {self._attribute.upper()} for {self._mode_key}"
            )

    async def _choose_alternative_workflow(self) -> None:
        mode = self.mode
        if mode.roll_type != "attack":
            return
        # The attack workflow takes over from here
        self.cancel()
        logger.info(f"{self.actor.name} substitutes {self._attribute.upper()} for {mode.label}")
        self._attack_workflow = AttackWorkflow(
            self.actor, self.context, attack_type=mode.attack_type, targets=self._targets
        )
        await self._attack_workflow.execute()

    async def _prepare_roll_options(self) -> None:
        if self._roll_options is not None:
            return
        self._roll_options = AbilityRollOptions.from_actor(
            {"attribute": self._attribute, "substitute": self.mode.label, **self._options},
            self.actor,
            settings=self.settings,
        )
