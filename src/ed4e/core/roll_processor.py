"""
Roll processor: the side effects every evaluated roll has, applied once.

``process`` pays the roll's strain, spends its karma and devotion, then
hands the roll to the handler registered for its roll type, if any.
"""

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping

from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import RecoveryMode, Roll, RollType

if TYPE_CHECKING:
    from src.ed4e.core.actor_document import ActorDocument

logger = logging.getLogger(__name__)

Handler = Callable[[Roll, "ActorDocument", bool], Awaitable[Any]]


class RollProcessor:
    def __init__(self, context: WorkflowContext, handlers: Mapping[Any, Handler] | None = None):
        self.context = context
        table: dict[RollType, Handler] = {
            RollType.JUMP_UP: self._process_jump_up,
            RollType.KNOCKDOWN: self._process_knockdown,
            RollType.RECOVERY: self._process_recovery,
            RollType.INITIATIVE: self._process_initiative,
        }
        for roll_type, handler in (handlers or {}).items():
            if not isinstance(roll_type, RollType):
                raise TypeError(f"Roll handlers are keyed by RollType, got {roll_type!r}")
            table[roll_type] = handler
        self._handlers = table

    @property
    def handlers(self) -> Mapping[RollType, Handler]:
        return dict(self._handlers)

    async def process(
        self,
        roll: Roll | None,
        actor: "ActorDocument",
        *,
        skip_strain: bool = False,
        skip_resources: bool = False,
        roll_to_message: bool = True,
    ) -> Any:
        if roll is None:
            return None
        if not roll.evaluated:
            roll = await self.context.evaluator.evaluate(roll.options)

        options = roll.options
        if not skip_strain and options.strain is not None and options.strain.total:
            await actor.take_damage(
                options.strain.total,
                is_strain=True,
                damage_type="standard",
                ignore_armor=True,
            )
        if not skip_resources:
            await self.deduct_resources(roll, actor)

        handler = self._handlers.get(options.roll_type)
        if handler is not None:
            return await handler(roll, actor, roll_to_message)

        if roll_to_message:
            self.context.log.publish(roll, options.chat_flavor)
        return roll

    async def deduct_resources(self, roll: Roll, actor: "ActorDocument") -> bool:
        """
        Spend the karma and devotion used on ``roll``.

        Points are deducted even when the pool cannot cover them, leaving it
        negative. Returns whether both pools had enough.
        """
        enough = True
        patch: dict[str, int] = {}
        for resource in ("karma", "devotion"):
            points_used = getattr(roll.options, resource).points_used
            if points_used <= 0:
                continue
            available = await actor.read(f"{resource}.value")
            if available < points_used:
                enough = False
                self.context.log.notify(
                    "warning",
                    f"{actor.name} does not have enough {resource} ({available} < {points_used})",
                )
            patch[f"{resource}.value"] = available - points_used
        if patch:
            await actor.write(patch)
        return enough

    # =========================================================================
    # HANDLERS
    # =========================================================================
    async def _process_jump_up(self, roll: Roll, actor: "ActorDocument", roll_to_message: bool) -> Roll:
        if roll.is_success:
            await actor.toggle_condition("knocked_down", False)
        if roll_to_message:
            self.context.log.publish(roll, roll.options.chat_flavor)
        return roll

    async def _process_knockdown(self, roll: Roll, actor: "ActorDocument", roll_to_message: bool) -> Roll:
        if roll.is_failure:
            await actor.toggle_condition("knocked_down", True)
        if roll_to_message:
            self.context.log.publish(roll, roll.options.chat_flavor)
        return roll

    async def _process_recovery(self, roll: Roll, actor: "ActorDocument", roll_to_message: bool) -> Roll:
        """
        Heal standard damage first and the rest as stun, then spend a recovery test.

        A full rest refreshes the day's recovery tests before spending one.
        """
        mode = getattr(roll.options, "recovery_mode", RecoveryMode.RECOVERY)
        system = actor.system
        damage = system.health.damage
        tests = system.recovery_tests
        healing = roll.total or 0
        tests_left = tests.value

        patch: dict[str, Any] = {}
        if mode is RecoveryMode.FULL_REST:
            tests_left = tests.max
            patch["recovery_tests.stun_recovery_available"] = True
        if mode is RecoveryMode.RECOVER_STUN:
            patch["health.damage.stun"] = max(damage.stun - healing, 0)
            patch["recovery_tests.stun_recovery_available"] = False
        else:
            standard_healed = min(damage.standard, healing)
            patch["health.damage.standard"] = damage.standard - standard_healed
            patch["health.damage.stun"] = max(damage.stun - (healing - standard_healed), 0)
        patch["recovery_tests.value"] = tests_left - 1
        await actor.write(patch)

        if roll_to_message:
            self.context.log.publish(roll, roll.options.chat_flavor)
        return roll

    async def _process_initiative(self, roll: Roll, actor: "ActorDocument", roll_to_message: bool) -> Roll:
        if roll_to_message:
            self.context.log.publish(roll, roll.options.chat_flavor)
        return roll
