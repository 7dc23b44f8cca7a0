from enum import Enum

from pydantic import BaseModel


class CastingMethod(str, Enum):
    MATRIX = "matrix"
    GRIMOIRE = "grimoire"
    RAW = "raw"


class AttuningType(str, Enum):
    MATRIX_STANDARD = "matrixStandard"
    MATRIX_ON_THE_FLY = "matrixOnTheFly"
    GRIMOIRE = "grimoire"


class AstralSpacePollution(str, Enum):
    SAFE = "safe"
    OPEN = "open"
    TAINTED = "tainted"
    CORRUPT = "corrupt"


class RawMagicModifiers(BaseModel):
    """Step modifiers applied to the raw magic aftermath tests."""
    label: str
    warping: int
    damage: int
    horror_mark: int | None                 # None: no horror mark test


RAW_MAGIC: dict[AstralSpacePollution, RawMagicModifiers] = {
    AstralSpacePollution.SAFE: RawMagicModifiers(
        label="Safe astral space", warping=0, damage=4, horror_mark=None,
    ),
    AstralSpacePollution.OPEN: RawMagicModifiers(
        label="Open astral space", warping=5, damage=8, horror_mark=2,
    ),
    AstralSpacePollution.TAINTED: RawMagicModifiers(
        label="Tainted astral space", warping=10, damage=12, horror_mark=5,
    ),
    AstralSpacePollution.CORRUPT: RawMagicModifiers(
        label="Corrupt astral space", warping=15, damage=16, horror_mark=10,
    ),
}

# Actor types that always cast raw and those spared its consequences
RAW_CASTER_TYPES = ("dragon", "horror", "spirit")
RAW_IMMUNE_TYPES = ("horror", "spirit")
