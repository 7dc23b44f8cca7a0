import logging
from dataclasses import dataclass
from typing import List

from src.ed4e.models import Roll
from src.ed4e.storage import Database

logger = logging.getLogger(__name__)

_LEVELS = {
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class ChatMessage:
    level: str                  # roll, info, warning or error
    content: str
    flavor: str = ""
    roll: Roll | None = None


class ChatLog:
    """
    Log boundary keeping published rolls and notifications in memory.

    Every entry also goes to the module logger, and to the ``chat_messages``
    table when a database is given.
    """
    def __init__(self, database: Database | None = None):
        self.messages: List[ChatMessage] = []
        self._database = database

    @property
    def rolls(self) -> List[Roll]:
        return [message.roll for message in self.messages if message.roll is not None]

    def notifications(self, level: str | None = None) -> List[ChatMessage]:
        return [
            message for message in self.messages
            if message.level != "roll" and (level is None or message.level == level)
        ]

    def publish(self, roll: Roll, flavor: str = "") -> None:
        flavor = flavor or roll.flavor
        content = self.describe(roll)
        self.messages.append(ChatMessage(level="roll", content=content, flavor=flavor, roll=roll))
        logger.info(f"{flavor} {content}".strip())

        if self._database is not None:
            self._database.add_chat_message(
                content,
                level="roll",
                actor_id=roll.options.rolling_actor_id,
                flavor=flavor,
                roll_type=roll.options.roll_type.value if roll.options.roll_type else None,
                total=roll.total,
                success=roll.is_success,
                data=roll.model_dump(mode="json"),
            )

    def notify(self, level: str, message: str) -> None:
        if level not in _LEVELS:
            raise ValueError(f"Unknown notification level: {level}")
        self.messages.append(ChatMessage(level=level, content=message))
        logger.log(_LEVELS[level], message)

        if self._database is not None:
            self._database.add_chat_message(message, level=level)

    @staticmethod
    def describe(roll: Roll) -> str:
        text = f"[{roll.formula}] = {roll.total}"
        if roll.has_target:
            outcome = "success" if roll.is_success else "failure"
            if roll.extra_successes:
                outcome += f" ({roll.extra_successes} extra)"
            target = roll.options.target.total if roll.options.target.public else "?"
            text += f" vs {target}: {outcome}"
        return text
