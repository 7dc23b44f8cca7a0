from typing import List

from pydantic import BaseModel, Field, SerializeAsAny

from src.ed4e.models.rolls import RollOptions


class DieResult(BaseModel):
    """One rolled die, with every explosion it chained into."""
    sides: int
    rolls: List[int] = Field(default_factory=list)
    source: str = "step"                    # step, karma, devotion or an extra dice label

    @property
    def total(self) -> int:
        return sum(self.rolls)


class Roll(BaseModel):
    """A dice test built from ``options``; ``evaluated`` once the dice are thrown."""
    options: SerializeAsAny[RollOptions]
    formula: str = ""
    evaluated: bool = False
    results: List[DieResult] = Field(default_factory=list)
    modifier: int = 0
    total: int | None = None

    @property
    def has_target(self) -> bool:
        return self.options.target is not None

    @property
    def is_success(self) -> bool | None:
        if not self.evaluated or not self.has_target:
            return None
        return self.total >= self.options.target.total

    @property
    def is_failure(self) -> bool | None:
        if not self.evaluated or not self.has_target:
            return None
        return not self.is_success

    @property
    def extra_successes(self) -> int:
        if not self.is_success:
            return 0
        return (self.total - self.options.target.total) // 5

    @property
    def flavor(self) -> str:
        return self.options.chat_flavor
