import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List

from src.ed4e.models import Ability, Actor, ActorType, Grimoire, Matrix, Spell

if TYPE_CHECKING:
    from src.ed4e.core.state_manager import StateManager

logger = logging.getLogger(__name__)


@dataclass
class DamageResult:
    damage_taken: int
    wound_inflicted: bool = False
    knockdown_test: bool = False


class ActorDocument:
    """
    A handle on one actor held by a ``StateManager``.

    Reads go through ``system``, the current snapshot. Every mutation goes
    through ``write`` so it is validated and persisted in one step.
    """
    def __init__(self, actor_id: str, state: "StateManager"):
        self.id = actor_id
        self._state = state

    def __repr__(self) -> str:
        return f"ActorDocument({self.id!r})"

    @property
    def system(self) -> Actor:
        actor = self._state.get_actor(self.id)
        if actor is None:
            raise KeyError(f"Unknown actor: {self.id}")
        return actor

    @property
    def name(self) -> str:
        return self.system.name

    @property
    def type(self) -> ActorType:
        return self.system.type

    async def read(self, path: str) -> Any:
        return await self._state.read(self.id, path)

    async def write(self, patch: dict[str, Any]) -> bool:
        return await self._state.write(self.id, patch)

    # =========================================================================
    # QUERIES
    # =========================================================================
    def attribute_step(self, attribute: str) -> int:
        score = self.system.attributes.get(attribute)
        if score is None:
            raise ValueError(f"Unknown attribute: {attribute}")
        return score.step

    def ability_step(self, ability: Ability) -> int:
        """Rank plus the step of the ability's attribute, if it has one."""
        if ability.attribute is None:
            return ability.rank
        return self.attribute_step(ability.attribute) + ability.rank

    def get_item(self, item_id: str | None) -> Any:
        return self.system.get_item(item_id)

    def items_of_type(self, item_type: str) -> List[Any]:
        return self.system.items_of_type(item_type)

    def get_single_item_by_edid(self, edid: str) -> Any:
        return self.system.get_single_item_by_edid(edid)

    def has_damage(self, damage_type: str = "standard") -> bool:
        return getattr(self.system.health.damage, damage_type) > 0

    def has_wounds(self) -> bool:
        return self.system.health.wounds > 0

    def has_condition(self, condition: str) -> bool:
        return getattr(self.system.conditions, condition)

    @property
    def matrices(self) -> List[Matrix]:
        return self.items_of_type("matrix")

    @property
    def grimoires(self) -> List[Grimoire]:
        return self.items_of_type("grimoire")

    @property
    def spells(self) -> List[Spell]:
        return self.items_of_type("spell")

    def get_attuned_matrix(self, spell_id: str) -> Matrix | None:
        return next((matrix for matrix in self.matrices if spell_id in matrix.spells), None)

    def grimoires_with_spell(self, spell_id: str) -> List[Grimoire]:
        return [grimoire for grimoire in self.grimoires if spell_id in grimoire.spells]

    def owns_grimoire(self, grimoire: Grimoire) -> bool:
        return grimoire.owner_id in (None, self.id)

    # =========================================================================
    # MUTATIONS
    # =========================================================================
    async def take_damage(
        self,
        amount: int,
        *,
        is_strain: bool = False,
        damage_type: str = "standard",
        armor_type: str | None = None,
        ignore_armor: bool = False,
    ) -> DamageResult:
        """
        Apply damage, reduced by armor unless ``ignore_armor`` or no ``armor_type``.

        Strain never inflicts wounds or forces a knockdown test. Stun damage at
        the wound threshold leaves the actor harried instead of wounded.
        """
        system = self.system
        armor = 0 if ignore_armor or armor_type is None else getattr(system.armor, armor_type)
        damage_taken = max(amount - armor, 0)

        health = system.health
        patch: dict[str, Any] = {
            f"health.damage.{damage_type}": getattr(health.damage, damage_type) + damage_taken,
        }
        over_threshold = not is_strain and damage_taken >= health.wound_threshold
        wound = over_threshold and damage_type == "standard"
        if wound:
            patch["health.wounds"] = health.wounds + 1
        elif over_threshold:
            patch["conditions.harried"] = True
        await self.write(patch)

        knockdown_test = (
            not is_strain
            and damage_taken >= health.wound_threshold + 5
            and not system.conditions.knocked_down
            and not system.knockdown.immune
        )
        logger.info(f"{self.name} takes {damage_taken} {damage_type} damage{' (strain)' if is_strain else ''}")
        return DamageResult(damage_taken=damage_taken, wound_inflicted=wound, knockdown_test=knockdown_test)

    async def toggle_condition(self, condition: str, active: bool | None = None) -> bool:
        """Flip a condition flag, or force it to ``active``. Returns the new value."""
        value = (not self.has_condition(condition)) if active is None else active
        await self.write({f"conditions.{condition}": value})
        return value

    async def update_item(self, item_id: str, patch: dict[str, Any]) -> bool:
        if self.get_item(item_id) is None:
            raise KeyError(f"{self.name} has no item {item_id}")
        return await self.write({f"items.{item_id}.{path}": value for path, value in patch.items()})

    async def empty_all_matrices(self) -> bool:
        return await self.write({f"items.{matrix.id}.spells": [] for matrix in self.matrices})
