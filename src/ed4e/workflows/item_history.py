"""
Item history: researching a pattern item to learn its key knowledges.

Each success of the item history test reveals the next unknown key
knowledge, up to the ability's rank and never more than the levels left.
"""

import logging
from enum import Enum
from typing import List

from src.ed4e.core.boundaries import WorkflowContext
from src.ed4e.models import AbilityRollOptions, PromptDescriptor, PromptKind
from src.ed4e.workflows.rollable import Rollable
from src.ed4e.workflows.workflow import ActorWorkflow

logger = logging.getLogger(__name__)


class KnowledgeLimit(str, Enum):
    """What capped the key knowledges obtainable from one test."""
    MAX_RANK = "rank"
    UNKNOWN_LEVELS = "unknown levels"
    THREAD_ITEM_LEVELS = "thread item levels"


class ItemHistoryWorkflow(Rollable, ActorWorkflow):
    """
    Item history test against the mystic defense of a thread item's true
    pattern. The item belongs to ``owner``, the rolling actor by default.

    Returns the key knowledges revealed by this test.
    """
    def __init__(
        self,
        actor,
        context: WorkflowContext,
        *,
        item_id: str,
        owner=None,
        ability_id: str | None = None,
        **options,
    ):
        options.setdefault("roll_to_message", True)
        options.setdefault("roll_prompt_title", "Item history")
        super().__init__(actor, context, **options)
        self._owner = owner or actor
        target = self._owner.get_item(item_id)
        if target is None or target.type != "thread":
            raise ValueError(f"{item_id} is not a thread item of {self._owner.name}")
        self._item_id = item_id
        self._ability_id = ability_id
        self._max_knowledge = 0
        self._limit: KnowledgeLimit | None = None
        self._obtained = 0

        self._add_step(self._find_ability)
        self._add_step(self._determine_max_knowledge)
        self._init_rollable_steps()
        self._add_step(self._reveal_key_knowledge)

    @property
    def target(self):
        return self._owner.get_item(self._item_id)

    @property
    def max_knowledge(self) -> int:
        return self._max_knowledge

    @property
    def limit(self) -> KnowledgeLimit | None:
        return self._limit

    @property
    def obtained(self) -> int:
        return self._obtained

    async def _find_ability(self) -> None:
        if self._ability_id is not None:
            return
        ability = self.actor.get_single_item_by_edid(self.settings.edid_item_history)
        if ability is not None:
            self._ability_id = ability.id
            return

        answer = await self.context.prompt.prompt(PromptDescriptor(
            kind=PromptKind.CONFIRM,
            title="Missing item history",
            content=f"{self.actor.name} does not know Item History. Roll Perception instead?",
            actor_id=self.actor.id,
        ))
        if answer is not True:
            self.cancel()

    async def _determine_max_knowledge(self) -> None:
        ability = self.actor.get_item(self._ability_id)
        # Untrained research still uncovers a single key knowledge
        self._max_knowledge = ability.rank if ability else 1
        self._limit = KnowledgeLimit.MAX_RANK

        pattern = self.target.true_pattern
        if not pattern.number_of_levels:
            return
        if pattern.known_levels == 0 and pattern.number_of_levels < self._max_knowledge:
            self._max_knowledge = pattern.number_of_levels
            self._limit = KnowledgeLimit.THREAD_ITEM_LEVELS
        elif pattern.number_of_unknown_levels < self._max_knowledge:
            self._max_knowledge = pattern.number_of_unknown_levels
            self._limit = KnowledgeLimit.UNKNOWN_LEVELS

        if self._max_knowledge == 0:
            self.notify("info", f"Every key knowledge of {self.target.name} is already known.")
            self.cancel()

    async def _prepare_roll_options(self) -> None:
        if self._roll_options is not None:
            return
        target = self.target
        self._roll_options = AbilityRollOptions.from_actor(
            {
                "ability_id": self._ability_id,
                "attribute": "per",
                "substitute": "Item History",
                "difficulty": target.true_pattern.mystic_defense,
                "chat_flavor": f"{self.actor.name} researches the history of {target.name}.",
            },
            self.actor,
            settings=self.settings,
        )

    async def _evaluate_result_roll(self) -> None:
        await super()._evaluate_result_roll()
        if self._roll is None:
            return
        successes = 1 + self._roll.extra_successes if self._roll.is_success else 0
        self._obtained = min(successes, self._max_knowledge)

    async def _process_roll(self) -> None:
        if self._roll is None:
            return
        self._roll.options.chat_flavor += (
            f" {self._obtained} of {self._max_knowledge} key knowledges learned (limited by {self._limit.value})."
        )
        await super()._process_roll()

    async def _reveal_key_knowledge(self) -> None:
        pattern = self.target.true_pattern
        if self._obtained <= 0:
            self._result = []
            return

        known = pattern.known_levels + self._obtained
        await self._owner.update_item(
            self._item_id,
            {"true_pattern.known_to_player": True, "true_pattern.known_levels": known},
        )
        revealed: List[str] = pattern.key_knowledges[pattern.known_levels:known]
        logger.info(f"{self.actor.name} learns {len(revealed)} key knowledges of {self.target.name}")
        self._result = revealed
