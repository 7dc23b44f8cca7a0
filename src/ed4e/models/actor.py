from enum import Enum
from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, Field


# Enum Classes
class ActorType(str, Enum):
    CHARACTER = "character"
    NPC = "npc"
    CREATURE = "creature"
    SPIRIT = "spirit"
    HORROR = "horror"
    DRAGON = "dragon"


class DamageType(str, Enum):
    STANDARD = "standard"
    STUN = "stun"


class ArmorType(str, Enum):
    PHYSICAL = "physical"
    MYSTICAL = "mystical"


class ItemStatus(str, Enum):            # Where a physical item currently is
    CARRIED = "carried"
    MAIN_HAND = "mainHand"
    OFF_HAND = "offHand"
    TWO_HANDS = "twoHands"
    TAIL = "tail"
    OWNED = "owned"


ATTRIBUTE_IDS = ("dex", "str", "tou", "per", "wil", "cha")


# ========================================================================================
# ACTOR CHARACTERISTICS
# ========================================================================================
class AttributeScore(BaseModel):
    value: int = 10
    step: int = 5


class BonusPool(BaseModel):
    """Karma or devotion points. ``value`` may drop below zero on overdraw."""
    value: int = 0
    max: int = 0
    step: int = 4
    use_always: bool = False


class Damage(BaseModel):
    standard: int = 0
    stun: int = 0


class Health(BaseModel):
    damage: Damage = Field(default_factory=Damage)
    wounds: int = 0
    wound_threshold: int = 8
    unconscious: int = 30
    death: int = 36


class ArmorValues(BaseModel):
    physical: int = 0
    mystical: int = 0


class Defenses(BaseModel):
    physical: int = 5
    mystical: int = 5
    social: int = 5


class RecoveryTests(BaseModel):
    value: int = 2                          # Tests left today
    max: int = 2
    step: int = 5                           # Usually the toughness step
    stun_recovery_available: bool = True


class Knockdown(BaseModel):
    step: int = 5
    immune: bool = False


class Conditions(BaseModel):
    """Boolean condition flags toggled by workflows and the roll processor."""
    knocked_down: bool = False
    harried: bool = False
    attuning_on_the_fly: bool = False


# ========================================================================================
# ITEMS: embedded in an actor, discriminated by ``type``
# ========================================================================================
class ItemBase(BaseModel):
    id: str
    name: str
    edid: str | None = None                 # Stable identifier shared by all copies of an ability
    description: str = ""


class Ability(ItemBase):
    type: Literal["talent", "skill", "devotion"] = "talent"
    attribute: str | None = None            # One of ATTRIBUTE_IDS
    rank: int = 0
    strain: int = 0


class Discipline(ItemBase):
    type: Literal["discipline"] = "discipline"
    level: int = 1                          # Circle


class Weapon(ItemBase):
    type: Literal["weapon"] = "weapon"
    weapon_type: Literal["melee", "missile", "thrown", "unarmed"] = "melee"
    item_status: ItemStatus = ItemStatus.CARRIED
    wielding_type: ItemStatus = ItemStatus.MAIN_HAND
    damage_step: int = 0


class Spell(ItemBase):
    type: Literal["spell"] = "spell"
    circle: int = 1
    spellcasting_type: str = "elementalism"
    threads_required: int = 0
    threads_woven: int = 0
    weaving_difficulty: int = 5
    casting_difficulty: int | None = None   # None: target's mystic defense
    learned: bool = True

    @property
    def is_weaving_complete(self) -> bool:
        return self.threads_woven >= self.threads_required


class Matrix(ItemBase):
    type: Literal["matrix"] = "matrix"
    rank: int = 1
    max_spells: int = 1
    spells: List[str] = Field(default_factory=list)   # Spell IDs


class Grimoire(ItemBase):
    type: Literal["grimoire"] = "grimoire"
    owner_id: str | None = None
    spells: List[str] = Field(default_factory=list)
    attuned_spell: str | None = None


class TruePattern(BaseModel):
    """What can be learned about a pattern item: one key knowledge per thread item level."""
    mystic_defense: int = 5
    key_knowledges: List[str] = Field(default_factory=list)
    known_levels: int = 0
    known_to_player: bool = False

    @property
    def number_of_levels(self) -> int:
        return len(self.key_knowledges)

    @property
    def number_of_unknown_levels(self) -> int:
        return max(self.number_of_levels - self.known_levels, 0)

    @property
    def known_key_knowledges(self) -> List[str]:
        return self.key_knowledges[:self.known_levels]


class ThreadItem(ItemBase):
    type: Literal["thread"] = "thread"
    true_pattern: TruePattern = Field(default_factory=TruePattern)


Item = Annotated[
    Union[Ability, Discipline, Weapon, Spell, Matrix, Grimoire, ThreadItem],
    Field(discriminator="type"),
]


# ========================================================================================
# ACTOR
# ========================================================================================
class Actor(BaseModel):
    """The durable state of a single actor."""
    id: str
    name: str
    type: ActorType = ActorType.CHARACTER

    attributes: dict[str, AttributeScore] = Field(
        default_factory=lambda: {attr: AttributeScore() for attr in ATTRIBUTE_IDS}
    )
    karma: BonusPool = Field(default_factory=BonusPool)
    devotion: BonusPool = Field(default_factory=lambda: BonusPool(step=3))
    health: Health = Field(default_factory=Health)
    armor: ArmorValues = Field(default_factory=ArmorValues)
    defenses: Defenses = Field(default_factory=Defenses)
    recovery_tests: RecoveryTests = Field(default_factory=RecoveryTests)
    knockdown: Knockdown = Field(default_factory=Knockdown)
    conditions: Conditions = Field(default_factory=Conditions)

    global_bonuses: dict[str, int] = Field(default_factory=dict)   # e.g. "allTests": 1
    concentration_source: str | None = None
    items: List[Item] = Field(default_factory=list)

    def get_item(self, item_id: str | None) -> Any:
        if item_id is None:
            return None
        return next((item for item in self.items if item.id == item_id), None)

    def items_of_type(self, item_type: str) -> list[Any]:
        return [item for item in self.items if item.type == item_type]

    def get_single_item_by_edid(self, edid: str) -> Any:
        return next((item for item in self.items if item.edid == edid), None)


# ========================================================================================
# STATE CHANGES
# ========================================================================================
class StateChange(BaseModel):
    """A discrete change to an actor's durable state"""
    target_id: str                          # Actor being changed
    attribute: str                          # Dotted path ("karma.value", "items.spell_1.threads_woven")
    operation: Literal["set", "add", "remove", "append"] = "set"
    value: Any = None
