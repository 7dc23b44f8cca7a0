import logging

from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import RecoveryMode, RecoveryRollOptions
from src.ed4e.workflows.errors import WorkflowInterruptError
from src.ed4e.workflows.rollable import Rollable
from src.ed4e.workflows.workflow import ActorWorkflow

logger = logging.getLogger(__name__)


def _coerce_mode(mode) -> RecoveryMode | None:
    try:
        return RecoveryMode(mode)
    except ValueError:
        return None


class RecoveryWorkflow(Rollable, ActorWorkflow):
    """
    Recovery test in one of three modes.

    recovery      heal standard damage, then stun, with one recovery test
    recoverStun   heal stun damage only, adding willpower once per day
    fullRest      refresh the day's recovery tests, then heal

    A full rest with no damage to heal skips the roll entirely: the tests
    are refreshed and one wound is healed.
    """
    def __init__(self, actor, context: WorkflowContext, *, recovery_mode: str = "recovery", **options):
        super().__init__(actor, context, **options)
        self._requested_mode = recovery_mode
        self._mode = _coerce_mode(recovery_mode)

        self._add_step(self._validate)
        if self._mode is RecoveryMode.FULL_REST and not actor.has_damage("standard") and not actor.has_damage("stun"):
            self._add_step(self._rest_without_roll)
        elif self._mode is not None:
            self._init_rollable_steps()

    @property
    def mode(self) -> RecoveryMode | None:
        return self._mode

    async def _validate(self) -> None:
        actor = self.actor
        if self._mode is None:
            raise WorkflowInterruptError(self, f"Unknown recovery mode: {self._requested_mode}")

        if self._mode is RecoveryMode.RECOVERY and not actor.has_damage("standard"):
            self.notify("info", f"{actor.name} has no damage to recover from.")
            self.cancel()
            return
        if self._mode is RecoveryMode.RECOVER_STUN and not actor.has_damage("stun"):
            self.notify("info", f"{actor.name} has no stun damage to recover from.")
            self.cancel()
            return
        if self._mode is RecoveryMode.FULL_REST:
            if not actor.has_damage("standard") and not actor.has_damage("stun") and not actor.has_wounds():
                self.notify("info", f"{actor.name} is fully rested already.")
                self.cancel()
            return

        if await actor.read("recovery_tests.value") < 1:
            self.notify("warning", f"{actor.name} has no recovery tests left today.")
            self.cancel()

    async def _rest_without_roll(self) -> None:
        tests = self.actor.system.recovery_tests
        patch = {
            "recovery_tests.value": tests.max,
            "recovery_tests.stun_recovery_available": True,
        }
        if self.actor.has_wounds() and tests.max > 0:
            patch["health.wounds"] = self.actor.system.health.wounds - 1
            patch["recovery_tests.value"] = tests.max - 1
        await self.actor.write(patch)
        logger.info(f"{self.actor.name} rests: {patch}")
        self._result = True

    async def _prepare_roll_options(self) -> None:
        if self._roll_options is not None:
            return
        self._roll_options = RecoveryRollOptions.from_actor(
            {"recovery_mode": self._mode},
            self.actor,
            settings=self.settings,
        )
