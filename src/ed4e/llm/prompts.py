from enum import Enum


class OraclePrompts(str, Enum):
    SYSTEM = """You play {actor_name}, a {actor_type} in an Earthdawn game.
Answer every question the way {actor_name} would, briefly and in JSON."""
    CHOOSE_ACTION = """{title}
{content}

OPTIONS:
{options}

Choose exactly one option by its key.

Respond in the following JSON format:
{{
    "action": "<option key>",
    "reason": "one short sentence"
}}
"""
    CONFIRM = """{title}
{content}

Do you agree?

Respond in the following JSON format:
{{
    "confirm": true/false,
    "reason": "one short sentence"
}}
"""
