# src/ed4e/core/state_manager.py

import logging
from typing import Any, Iterable, List

from src.ed4e.models import Actor, StateChange
from src.ed4e.storage import Database

logger = logging.getLogger(__name__)


class StateManager:
    """
    Central controller for accessing and mutating actor state.
    Ensures all state changes are centralized, logged, and valid.

    A ``write`` is all-or-nothing: the patch is applied to a copy of the actor,
    the copy is re-validated and only then replaces the stored actor.
    """
    def __init__(self, actors: Iterable[Actor] = (), database: Database | None = None):
        self._actors: dict[str, Actor] = {actor.id: actor for actor in actors}
        self._database = database

    @classmethod
    def from_database(cls, database: Database) -> "StateManager":
        """Load every stored actor."""
        actors = [Actor.model_validate(data) for data in database.load_actors()]
        logger.info(f"Loaded {len(actors)} actors from {database.db_path}")
        return cls(actors, database=database)

    def add_actor(self, actor: Actor) -> None:
        self._actors[actor.id] = actor
        self._persist(actor)

    def get_actor(self, actor_id: str) -> Actor | None:
        """Return the current snapshot of an actor."""
        return self._actors.get(actor_id)

    def list_actors(self) -> List[Actor]:
        return list(self._actors.values())

    def document(self, actor_id: str):
        """Wrap an actor in an ``ActorDocument``."""
        from src.ed4e.core.actor_document import ActorDocument

        if actor_id not in self._actors:
            raise KeyError(f"Unknown actor: {actor_id}")
        return ActorDocument(actor_id, self)

    # =========================================================================
    # DURABLE STATE BOUNDARY
    # =========================================================================
    async def read(self, actor_id: str, path: str) -> Any:
        """Read a dotted path such as ``"karma.value"`` from an actor."""
        actor = self._require(actor_id)
        parent, final_key = self._resolve(actor, path)
        return self._get(parent, final_key)

    async def write(self, actor_id: str, patch: dict[str, Any]) -> bool:
        """Set every ``path: value`` pair of ``patch`` in one step."""
        changes = [
            StateChange(target_id=actor_id, attribute=path, operation="set", value=value)
            for path, value in patch.items()
        ]
        return self.apply_changes(changes)

    # =========================================================================
    # STATE CHANGES
    # =========================================================================
    def apply_change(self, change: StateChange) -> bool:
        return self.apply_changes([change])

    def apply_changes(self, changes: List[StateChange]) -> bool:
        """
        Executes state changes on actor state.

        Handles:
        - Nested attributes (e.g. "health.damage.standard")
        - Embedded items by ID (e.g. "items.spell_1.threads_woven")
        - Numeric operations (add/remove)
        - List operations (append/remove)
        - Direct sets
        """
        staged: dict[str, Actor] = {}
        for change in changes:
            if change.target_id not in staged:
                staged[change.target_id] = self._require(change.target_id).model_copy(deep=True)
            try:
                self._mutate_target(staged[change.target_id], change)
            except Exception as e:
                logger.error(f"Error applying state change to {change.target_id}: {str(e)}")
                raise e

        for actor_id, actor in staged.items():
            # Enum fields hold raw values until re-validation coerces them
            validated = Actor.model_validate(actor.model_dump(warnings=False))
            self._actors[actor_id] = validated
            self._persist(validated)

        for change in changes:
            logger.debug(f"State applied: {change.target_id}.{change.attribute} {change.operation} {change.value}")
        return True

    def _require(self, actor_id: str) -> Actor:
        actor = self._actors.get(actor_id)
        if actor is None:
            logger.error(f"Failed to access state: Actor {actor_id} not found.")
            raise KeyError(f"Unknown actor: {actor_id}")
        return actor

    def _persist(self, actor: Actor) -> None:
        if self._database is None:
            return
        self._database.save_actor(actor.id, actor.name, actor.type.value, actor.model_dump(mode="json"))

    @staticmethod
    def _get(parent: Any, key: str) -> Any:
        if isinstance(parent, dict):
            return parent.get(key)
        if isinstance(parent, list):
            return next((entry for entry in parent if getattr(entry, "id", None) == key), None)
        return getattr(parent, key)

    def _resolve(self, target: Any, path: str) -> tuple[Any, str]:
        """Walk ``path`` down to the parent of its last element."""
        attr_path = path.split('.')
        parent = target

        for key in attr_path[:-1]:
            parent = self._get(parent, key)
            if parent is None:
                raise AttributeError(f"Path '{path}' broken at '{key}' on {target.id}")

        return parent, attr_path[-1]

    def _mutate_target(self, target: Any, change: StateChange) -> None:
        """Internal helper to perform the mutation logic."""
        parent, final_key = self._resolve(target, change.attribute)
        current_value = self._get(parent, final_key)

        new_value = current_value

        match change.operation:
            case "set":
                new_value = change.value

            case "add":
                if isinstance(current_value, (int, float)):
                    new_value = current_value + change.value
                else:
                    raise ValueError(f"Cannot 'add' to non-numeric type {type(current_value)}")

            case "remove":
                # Numeric subtraction OR List removal
                if isinstance(current_value, (int, float)):
                    new_value = current_value - change.value
                elif isinstance(current_value, list):
                    if change.value in current_value:
                        current_value.remove(change.value)
                    new_value = current_value
                else:
                    raise ValueError(f"Cannot 'remove' from type {type(current_value)}")

            case "append":
                if isinstance(current_value, list):
                    current_value.append(change.value)
                    new_value = current_value
                else:
                    raise ValueError(f"Cannot 'append' to non-list type {type(current_value)}")

            case _:
                raise ValueError(f"Unknown operation: {change.operation}")

        if isinstance(parent, dict):
            parent[final_key] = new_value
        elif isinstance(parent, list):
            raise ValueError(f"Cannot replace embedded item '{final_key}' through '{change.attribute}'")
        else:
            setattr(parent, final_key, new_value)
