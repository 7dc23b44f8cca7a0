"""
Roll options: the arithmetic of a single dice test.

A ``RollOptions`` holds the step rolled, an optional target number, an
optional strain cost and the two bonus resources (karma and devotion).
Totals are computed from ``base`` and ``modifiers`` whenever they are read;
a total passed in by a caller is ignored.
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Self

from pydantic import BaseModel, Field, computed_field, model_validator

from src.ed4e.config.settings import Settings, settings as default_settings
from src.ed4e.dice import get_dice
from src.ed4e.models.magic import RAW_MAGIC, AstralSpacePollution, AttuningType

if TYPE_CHECKING:
    from src.ed4e.core.actor_document import ActorDocument


# Enum Classes
class TestType(str, Enum):
    ARBITRARY = "arbitrary"
    ACTION = "action"           # Tests against a target number
    EFFECT = "effect"           # Tests whose total is the effect (damage, recovery)


class RollType(str, Enum):
    ARBITRARY = "arbitrary"
    ABILITY = "ability"
    ATTACK = "attack"
    ATTRIBUTE = "attribute"
    ATTUNING = "attuning"
    DAMAGE = "damage"
    EFFECT = "effect"
    HALF_MAGIC = "halfmagic"
    HORROR_MARK = "horrorMark"
    INITIATIVE = "initiative"
    JUMP_UP = "jumpUp"
    KNOCKDOWN = "knockdown"
    REACTION = "reaction"
    RECOVERY = "recovery"
    SPELLCASTING = "spellcasting"
    THREAD_WEAVING = "threadWeaving"
    WARPING = "warping"


class RecoveryMode(str, Enum):
    RECOVERY = "recovery"
    FULL_REST = "fullRest"
    RECOVER_STUN = "recoverStun"


# ========================================================================================
# COMPONENTS
# ========================================================================================
class RollStep(BaseModel):
    base: int = 1
    modifiers: dict[str, int] = Field(default_factory=dict)

    @computed_field
    @property
    def total(self) -> int:
        return self.compute_total()

    def modifier_sum(self) -> int:
        return sum(self.modifiers.values())

    def compute_total(self) -> int:
        return self.base + self.modifier_sum()


class RollTarget(RollStep):
    base: int = 0
    public: bool = True
    tokens: set[str] = Field(default_factory=set)     # Targeted actor IDs
    minimum: int = Field(0, exclude=True)             # Copied from the options' minimum_difficulty

    def compute_total(self) -> int:
        return max(super().compute_total(), self.minimum)


class RollStrain(RollStep):
    base: int = 0


class BonusResource(BaseModel):
    """Karma or devotion as spent on one roll."""
    points_used: int = Field(0, ge=0)
    available: int = Field(0, ge=0)
    step: int = Field(4, ge=1)
    dice: str = ""


def _expand_dotted(changes: dict[str, Any]) -> dict[str, Any]:
    """Turn ``{"karma.step": 5}`` into ``{"karma": {"step": 5}}``."""
    expanded: dict[str, Any] = {}
    for key, value in changes.items():
        if isinstance(value, dict):
            value = _expand_dotted(value)
        parts = key.split(".")
        node = expanded
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        if isinstance(value, dict) and isinstance(node.get(parts[-1]), dict):
            node[parts[-1]] = _deep_merge(node[parts[-1]], value)
        else:
            node[parts[-1]] = value
    return expanded


def _deep_merge(original: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    merged = dict(original)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# ========================================================================================
# ROLL OPTIONS
# ========================================================================================
class RollOptions(BaseModel):
    TEST_TYPE: ClassVar[TestType] = TestType.ARBITRARY
    ROLL_TYPE: ClassVar[RollType] = RollType.ARBITRARY

    step: RollStep = Field(default_factory=RollStep)
    target: RollTarget | None = None
    strain: RollStrain | None = None
    karma: BonusResource = Field(
        default_factory=lambda: BonusResource(step=default_settings.karma_default_step)
    )
    devotion: BonusResource = Field(
        default_factory=lambda: BonusResource(step=default_settings.devotion_default_step)
    )
    extra_dice: dict[str, int] = Field(default_factory=dict)

    test_type: TestType | None = None
    roll_type: RollType | None = None
    roll_sub_type: str | None = None
    chat_flavor: str = ""
    rolling_actor_id: str | None = None
    minimum_difficulty: int = Field(
        default_factory=lambda: default_settings.minimum_difficulty, ge=0
    )

    @model_validator(mode="after")
    def _derive_defaults(self) -> Self:
        if self.test_type is None:
            self.test_type = self.TEST_TYPE
        if self.roll_type is None:
            self.roll_type = self.ROLL_TYPE

        if self.target is not None:
            self.target.minimum = self.minimum_difficulty
        self.karma.dice = get_dice(self.karma.step)
        self.devotion.dice = get_dice(self.devotion.step)
        return self

    def get_modifier_sum(self, field: str) -> int:
        component = getattr(self, field, None)
        if not isinstance(component, RollStep):
            return 0
        return component.modifier_sum()

    def update_source(self, changes: dict[str, Any] | None = None) -> Self:
        """
        Merge ``changes`` into these options and recompute every derived value.

        Nested dicts are merged key by key, so ``{"step": {"modifiers": {"Aid": 2}}}``
        adds a modifier without dropping the existing ones. Dotted keys are
        accepted as well. The instance is updated in place and returned.
        """
        merged = _deep_merge(self.model_dump(), _expand_dotted(copy.deepcopy(changes or {})))
        updated = type(self).model_validate(merged)
        for name in type(self).model_fields:
            setattr(self, name, getattr(updated, name))
        return self

    @classmethod
    def from_actor(
        cls,
        data: dict[str, Any],
        actor: ActorDocument | None,
        *,
        settings: Settings | None = None,
    ) -> Self:
        """Build options for a test rolled by ``actor``, seeding its karma and devotion."""
        if actor is None:
            raise ValueError(f"{cls.__name__}.from_actor requires an actor")
        settings = settings or default_settings
        system = actor.system

        data = dict(data)
        devotion_required = data.pop("devotion_required", False)
        data.setdefault("minimum_difficulty", settings.minimum_difficulty)
        data["karma"] = {
            "points_used": 1 if system.karma.use_always else 0,
            "available": max(system.karma.value, 0),
            "step": system.karma.step or settings.karma_default_step,
        }
        data["devotion"] = {
            "points_used": 1 if devotion_required else 0,
            "available": max(system.devotion.value, 0),
            "step": system.devotion.step or settings.devotion_default_step,
        }
        data["rolling_actor_id"] = actor.id
        return cls.model_validate(cls._prepare_data(data, actor, settings))

    @classmethod
    def _prepare_data(
        cls, data: dict[str, Any], actor: ActorDocument, settings: Settings
    ) -> dict[str, Any]:
        """Seed step, target and strain from the actor. Values already in ``data`` win."""
        return data


def _seed(
    data: dict[str, Any],
    field: str,
    base: int,
    modifiers: dict[str, int] | None = None,
    **extra: Any,
) -> None:
    """Set ``data[field]["base"]`` unless the caller already provided one.

    Modifiers are merged, the caller's labels taking precedence.
    """
    component = dict(data.get(field) or {})
    component.setdefault("base", base)
    if modifiers:
        component["modifiers"] = {**modifiers, **component.get("modifiers", {})}
    for key, value in extra.items():
        component.setdefault(key, value)
    data[field] = component


# ========================================================================================
# TYPED OPTIONS
# ========================================================================================
class AttributeRollOptions(RollOptions):
    TEST_TYPE = TestType.ACTION
    ROLL_TYPE = RollType.ATTRIBUTE

    attribute: str = "dex"

    @classmethod
    def _prepare_data(cls, data, actor, settings):
        attribute = data.get("attribute", "dex")
        modifiers: dict[str, int] = {}
        for bonus in ("allTests", "allActions"):
            if actor.system.global_bonuses.get(bonus):
                modifiers[bonus] = actor.system.global_bonuses[bonus]
        _seed(data, "step", actor.attribute_step(attribute), modifiers=modifiers)
        data.setdefault("chat_flavor", f"{actor.name} makes a {attribute.upper()} test.")
        return data


class AbilityRollOptions(RollOptions):
    """
    A talent or skill test. Without ``ability_id`` the ``attribute`` is rolled
    in its place and ``substitute`` names the ability it stands in for.
    """
    TEST_TYPE = TestType.ACTION
    ROLL_TYPE = RollType.ABILITY

    ability_id: str | None = None
    attribute: str | None = None
    substitute: str | None = None

    @classmethod
    def _prepare_data(cls, data, actor, settings):
        ability = actor.get_item(data.get("ability_id"))
        modifiers: dict[str, int] = {}
        for bonus in ("allTests", "allActions"):
            if actor.system.global_bonuses.get(bonus):
                modifiers[bonus] = actor.system.global_bonuses[bonus]

        if ability is not None:
            _seed(data, "step", actor.ability_step(ability), modifiers=modifiers)
            if ability.strain:
                _seed(data, "strain", ability.strain)
            data.setdefault("chat_flavor", f"{actor.name} uses {ability.name}.")
        else:
            attribute = data.setdefault("attribute", "per")
            step = actor.attribute_step(attribute)
            _seed(data, "step", step, modifiers=modifiers)
            substitute = data.get("substitute") or "an ability"
            data.setdefault(
                "chat_flavor", f"{actor.name} rolls {attribute.upper()} (step {step}) in place of {substitute}."
            )

        difficulty = data.pop("difficulty", None)
        if difficulty is not None:
            _seed(data, "target", difficulty)
        return data


class HalfMagicRollOptions(RollOptions):
    TEST_TYPE = TestType.ACTION
    ROLL_TYPE = RollType.HALF_MAGIC

    attribute: str = "per"
    discipline_id: str | None = None

    @classmethod
    def _prepare_data(cls, data, actor, settings):
        attribute = data.get("attribute", "per")
        discipline = actor.get_item(data.get("discipline_id"))
        level = discipline.level if discipline else 0
        _seed(data, "step", actor.attribute_step(attribute) + level)
        if discipline is not None:
            data.setdefault("chat_flavor", f"{actor.name} uses {discipline.name} half-magic.")
        return data


class AttackRollOptions(RollOptions):
    TEST_TYPE = TestType.ACTION
    ROLL_TYPE = RollType.ATTACK

    weapon_type: str = "unarmed"
    weapon_id: str | None = None
    ability_id: str | None = None

    @classmethod
    def _prepare_data(cls, data, actor, settings):
        ability = actor.get_item(data.get("ability_id"))
        step = actor.ability_step(ability) if ability else actor.attribute_step("dex")
        _seed(data, "step", step)
        targets = data.pop("targets", [])
        difficulty = max((target.defenses.physical for target in targets), default=0)
        _seed(data, "target", difficulty, public=False, tokens={target.id for target in targets})
        if ability is not None:
            _seed(data, "strain", ability.strain)
        return data


class JumpUpRollOptions(RollOptions):
    TEST_TYPE = TestType.ACTION
    ROLL_TYPE = RollType.JUMP_UP

    ability_id: str | None = None

    @classmethod
    def _prepare_data(cls, data, actor, settings):
        ability = actor.get_item(data.get("ability_id"))
        step = actor.ability_step(ability) if ability else actor.attribute_step("dex")
        strain = ability.strain if ability and ability.strain else settings.jump_up_strain_cost
        _seed(data, "step", step)
        _seed(data, "strain", strain)
        _seed(data, "target", settings.jump_up_base_difficulty)
        data.setdefault("chat_flavor", f"{actor.name} tries to jump up.")
        return data


class KnockdownRollOptions(RollOptions):
    TEST_TYPE = TestType.ACTION
    ROLL_TYPE = RollType.KNOCKDOWN

    ability_id: str | None = None

    @classmethod
    def _prepare_data(cls, data, actor, settings):
        ability = actor.get_item(data.get("ability_id"))
        step = actor.ability_step(ability) if ability else actor.system.knockdown.step
        modifiers: dict[str, int] = {}
        bonus = actor.system.global_bonuses.get("allKnockdownTests")
        if bonus:
            modifiers["allKnockdownTests"] = bonus
        _seed(data, "step", step, modifiers=modifiers)
        _seed(data, "target", data.pop("difficulty", None) or settings.minimum_difficulty)
        if ability is not None:
            _seed(data, "strain", ability.strain)
        data.setdefault("chat_flavor", f"{actor.name} resists being knocked down.")
        return data


class RecoveryRollOptions(RollOptions):
    TEST_TYPE = TestType.EFFECT
    ROLL_TYPE = RollType.RECOVERY

    recovery_mode: RecoveryMode = RecoveryMode.RECOVERY

    @classmethod
    def _prepare_data(cls, data, actor, settings):
        mode = RecoveryMode(data.get("recovery_mode", RecoveryMode.RECOVERY))
        modifiers: dict[str, int] = {}
        tests = actor.system.recovery_tests
        if mode is RecoveryMode.RECOVER_STUN and tests.stun_recovery_available:
            modifiers["Willpower"] = actor.attribute_step("wil")
        _seed(data, "step", tests.step, modifiers=modifiers)
        data.setdefault("chat_flavor", f"{actor.name} makes a recovery test.")
        return data


class AttuningRollOptions(RollOptions):
    TEST_TYPE = TestType.ACTION
    ROLL_TYPE = RollType.ATTUNING

    attuning_type: AttuningType = AttuningType.MATRIX_ON_THE_FLY
    ability_id: str | None = None
    spells_to_attune: list[str] = Field(default_factory=list)
    items_to_attune_to: list[str] = Field(default_factory=list)
    grimoire_penalty: bool = False

    @classmethod
    def _prepare_data(cls, data, actor, settings):
        ability = actor.get_item(data.get("ability_id"))
        step = actor.ability_step(ability) if ability else actor.attribute_step("per")
        modifiers: dict[str, int] = {}
        if data.get("grimoire_penalty"):
            modifiers["Foreign grimoire"] = -2
        spells = [actor.get_item(spell_id) for spell_id in data.get("spells_to_attune", [])]
        difficulty = max((spell.weaving_difficulty for spell in spells if spell), default=0)
        _seed(data, "step", step, modifiers=modifiers)
        _seed(data, "target", difficulty)
        if ability is not None:
            _seed(data, "strain", ability.strain)
        return data


class ThreadWeavingRollOptions(RollOptions):
    TEST_TYPE = TestType.ACTION
    ROLL_TYPE = RollType.THREAD_WEAVING

    spell_id: str | None = None
    ability_id: str | None = None
    grimoire_penalty: bool = False

    @classmethod
    def _prepare_data(cls, data, actor, settings):
        spell = actor.get_item(data.get("spell_id"))
        ability = actor.get_item(data.get("ability_id"))
        step = actor.ability_step(ability) if ability else actor.attribute_step("per")
        modifiers: dict[str, int] = {}
        if data.get("grimoire_penalty"):
            modifiers["Foreign grimoire"] = -2
        _seed(data, "step", step, modifiers=modifiers)
        _seed(data, "target", spell.weaving_difficulty if spell else 0)
        if ability is not None:
            _seed(data, "strain", ability.strain)
        if spell is not None:
            data.setdefault("chat_flavor", f"{actor.name} weaves a thread into {spell.name}.")
        return data


class SpellcastingRollOptions(RollOptions):
    TEST_TYPE = TestType.ACTION
    ROLL_TYPE = RollType.SPELLCASTING

    spell_id: str | None = None
    ability_id: str | None = None

    @classmethod
    def _prepare_data(cls, data, actor, settings):
        spell = actor.get_item(data.get("spell_id"))
        ability = actor.get_item(data.get("ability_id"))
        step = actor.ability_step(ability) if ability else actor.attribute_step("per")
        targets = data.pop("targets", [])
        if spell is not None and spell.casting_difficulty is not None:
            difficulty = spell.casting_difficulty
        else:
            difficulty = max((target.defenses.mystical for target in targets), default=0)
        _seed(data, "step", step)
        _seed(data, "target", difficulty, tokens={target.id for target in targets})
        if ability is not None:
            _seed(data, "strain", ability.strain)
        if spell is not None:
            data.setdefault("chat_flavor", f"{actor.name} casts {spell.name}.")
        return data


class DamageRollOptions(RollOptions):
    TEST_TYPE = TestType.EFFECT
    ROLL_TYPE = RollType.DAMAGE

    damage_type: str = "standard"
    armor_type: str | None = "physical"
    ignore_armor: bool = False
    damage_source: str = ""


class _RawMagicRollOptions(RollOptions):
    """Tests the astral space makes against a raw caster. No actor rolls these."""
    astral_space_pollution: AstralSpacePollution = AstralSpacePollution.SAFE
    caster_id: str | None = None
    spell_id: str | None = None


class WarpingRollOptions(_RawMagicRollOptions):
    TEST_TYPE = TestType.ACTION
    ROLL_TYPE = RollType.WARPING

    @classmethod
    def for_spell(cls, caster: ActorDocument, spell: Any, pollution: AstralSpacePollution) -> Self:
        modifiers = RAW_MAGIC[pollution]
        return cls(
            step={"base": spell.circle, "modifiers": {modifiers.label: modifiers.warping}},
            target={"base": caster.system.defenses.mystical, "tokens": {caster.id}},
            astral_space_pollution=pollution,
            caster_id=caster.id,
            spell_id=spell.id,
            chat_flavor=f"The astral space warps {caster.name}'s {spell.name}.",
        )


class RawMagicDamageRollOptions(DamageRollOptions, _RawMagicRollOptions):
    damage_type: str = "standard"
    armor_type: str | None = "mystical"
    damage_source: str = "Raw magic"

    @classmethod
    def for_spell(cls, caster: ActorDocument, spell: Any, pollution: AstralSpacePollution) -> Self:
        modifiers = RAW_MAGIC[pollution]
        return cls(
            step={"base": spell.circle, "modifiers": {modifiers.label: modifiers.damage}},
            astral_space_pollution=pollution,
            caster_id=caster.id,
            spell_id=spell.id,
            chat_flavor=f"Raw magic burns {caster.name}.",
        )


class HorrorMarkRollOptions(_RawMagicRollOptions):
    TEST_TYPE = TestType.ACTION
    ROLL_TYPE = RollType.HORROR_MARK

    @classmethod
    def for_spell(cls, caster: ActorDocument, spell: Any, pollution: AstralSpacePollution) -> Self:
        modifiers = RAW_MAGIC[pollution]
        return cls(
            step={"base": spell.circle, "modifiers": {modifiers.label: modifiers.horror_mark or 0}},
            target={"base": caster.system.defenses.mystical, "tokens": {caster.id}},
            astral_space_pollution=pollution,
            caster_id=caster.id,
            spell_id=spell.id,
            chat_flavor=f"A Horror notices {caster.name}'s raw magic.",
        )
