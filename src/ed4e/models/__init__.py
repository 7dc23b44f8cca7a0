from src.ed4e.models.actor import (
    ATTRIBUTE_IDS,
    Ability,
    Actor,
    ActorType,
    ArmorType,
    DamageType,
    Discipline,
    Grimoire,
    Item,
    ItemStatus,
    Matrix,
    Spell,
    StateChange,
    ThreadItem,
    TruePattern,
    Weapon,
)
from src.ed4e.models.magic import (
    RAW_MAGIC,
    AstralSpacePollution,
    AttuningType,
    CastingMethod,
)
from src.ed4e.models.prompts import DISMISSED, PromptAction, PromptDescriptor, PromptKind
from src.ed4e.models.roll import DieResult, Roll
from src.ed4e.models.rolls import (
    AbilityRollOptions,
    AttackRollOptions,
    AttributeRollOptions,
    AttuningRollOptions,
    DamageRollOptions,
    HalfMagicRollOptions,
    HorrorMarkRollOptions,
    JumpUpRollOptions,
    KnockdownRollOptions,
    RawMagicDamageRollOptions,
    RecoveryMode,
    RecoveryRollOptions,
    RollOptions,
    RollType,
    SpellcastingRollOptions,
    TestType,
    ThreadWeavingRollOptions,
    WarpingRollOptions,
)

__all__ = [
    "ATTRIBUTE_IDS",
    "Ability",
    "Actor",
    "ActorType",
    "ArmorType",
    "DamageType",
    "Discipline",
    "Grimoire",
    "Item",
    "ItemStatus",
    "Matrix",
    "Spell",
    "StateChange",
    "ThreadItem",
    "TruePattern",
    "Weapon",
    "RAW_MAGIC",
    "AstralSpacePollution",
    "AttuningType",
    "CastingMethod",
    "DISMISSED",
    "PromptAction",
    "PromptDescriptor",
    "PromptKind",
    "DieResult",
    "Roll",
    "AbilityRollOptions",
    "AttackRollOptions",
    "AttributeRollOptions",
    "AttuningRollOptions",
    "DamageRollOptions",
    "HalfMagicRollOptions",
    "HorrorMarkRollOptions",
    "JumpUpRollOptions",
    "KnockdownRollOptions",
    "RawMagicDamageRollOptions",
    "RecoveryMode",
    "RecoveryRollOptions",
    "RollOptions",
    "RollType",
    "SpellcastingRollOptions",
    "TestType",
    "ThreadWeavingRollOptions",
    "WarpingRollOptions",
]
