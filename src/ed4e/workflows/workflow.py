"""
Workflow engine.

A workflow is an ordered list of zero-argument coroutine steps run one
after the other by ``execute``. A step may:

* call ``cancel()`` and return: the remaining steps are skipped and
  ``execute`` returns ``None``;
* raise ``WorkflowInterruptError``: the remaining steps are skipped, the
  message is sent to the log as a warning and ``execute`` returns ``None``;
* raise anything else: the error propagates to the caller unchanged.

Cancellation is only observed between steps. A step that awaits a prompt
runs until the prompt resolves.
"""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, List

from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.workflows.errors import WorkflowInterruptError

logger = logging.getLogger(__name__)

Step = Callable[[], Awaitable[None]]


class WorkflowStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELED = "canceled"
    INTERRUPTED = "interrupted"
    FAULTED = "faulted"


class Workflow:
    def __init__(self, context: WorkflowContext, *, name: str | None = None):
        self.context = context
        self._name = name or type(self).__name__
        self._steps: List[Step] = []
        self._current_step = 0
        self._canceled = False
        self._status = WorkflowStatus.IDLE
        self._result: Any = None

    def __repr__(self) -> str:
        return f"<{self._name} step {self._current_step}/{len(self._steps)} {self._status.value}>"

    @property
    def name(self) -> str:
        return self._name

    @property
    def steps(self) -> tuple[Step, ...]:
        return tuple(self._steps)

    @property
    def current_step(self) -> int:
        return self._current_step

    @property
    def canceled(self) -> bool:
        return self._canceled

    @property
    def result(self) -> Any:
        return self._result

    @property
    def status(self) -> WorkflowStatus:
        return self._status

    @property
    def settings(self):
        return self.context.settings

    def _add_step(self, step: Step) -> None:
        if self._status is not WorkflowStatus.IDLE:
            raise RuntimeError(f"{self._name}: steps are fixed once execution starts")
        self._steps.append(step)

    def cancel(self) -> None:
        """Stop after the current step returns."""
        self._canceled = True

    def notify(self, level: str, message: str) -> None:
        self.context.log.notify(level, message)

    async def execute(self) -> Any:
        if self._status is not WorkflowStatus.IDLE:
            raise RuntimeError(f"{self._name} has already been executed")
        self._status = WorkflowStatus.RUNNING
        logger.debug(f"{self._name}: starting with {len(self._steps)} steps")

        try:
            while self._current_step < len(self._steps):
                step = self._steps[self._current_step]
                logger.debug(f"{self._name}: step {self._current_step} {getattr(step, '__name__', step)}")
                await step()
                self._current_step += 1
                if self._canceled:
                    logger.info(f"{self._name}: canceled after step {self._current_step}")
                    self._status = WorkflowStatus.CANCELED
                    return None
        except WorkflowInterruptError as error:
            self._status = WorkflowStatus.INTERRUPTED
            logger.warning(f"{self._name}: interrupted: {error.message}")
            self.notify("warning", error.message)
            return None
        except Exception:
            self._status = WorkflowStatus.FAULTED
            raise

        self._status = WorkflowStatus.COMPLETED
        return self._result


class ActorWorkflow(Workflow):
    """A workflow acting on behalf of one actor."""
    def __init__(self, actor, context: WorkflowContext, **options: Any):
        if actor is None:
            raise TypeError(f"{type(self).__name__} requires an actor")
        super().__init__(context, name=options.pop("name", None))
        self._actor = actor
        self._options = options

    @property
    def actor(self):
        return self._actor


class ItemWorkflow(ActorWorkflow):
    """A workflow started from an item owned by an actor."""
    def __init__(self, item, actor, context: WorkflowContext, **options: Any):
        if item is None:
            raise TypeError(f"{type(self).__name__} requires an item")
        super().__init__(actor, context, **options)
        self._item = item

    @property
    def item(self):
        """The current snapshot of the item; earlier steps may have written to it."""
        return self._actor.get_item(self._item.id) or self._item
