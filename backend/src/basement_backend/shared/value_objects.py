"""Immutable value objects shared across the domain layer."""

from __future__ import annotations

import math
from collections.abc import Iterable  # noqa: TC003
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


class EffectTarget(StrEnum):
    """Closed set of quantities an effect bundle may modify."""

    ATTENDANCE = "attendance"
    CAPACITY = "capacity"
    REVENUE = "revenue"
    REPUTATION = "reputation"
    FANS = "fans"
    STRESS = "stress"
    INCIDENT_PROBABILITY = "incident_probability"


def clamp(value: float, lower: float, upper: float) -> float:
    """Return *value* limited to the inclusive ``[lower, upper]`` range."""
    if lower > upper:
        msg = f"Invalid clamp bounds: {lower} > {upper}."
        raise ValueError(msg)
    return max(lower, min(upper, value))


class EffectBundle(BaseModel):
    """Composable record of multipliers and additive deltas keyed by target.

    Multipliers from every source are multiplied together before any additive
    delta is applied; additive deltas are summed. Because both operations are
    commutative, the order in which sources are combined never changes the
    resolved value.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    multipliers: dict[EffectTarget, float] = Field(default_factory=dict)
    additives: dict[EffectTarget, float] = Field(default_factory=dict)
    source: str | None = None

    @field_validator("multipliers")
    @classmethod
    def _validate_multipliers(
        cls, value: dict[EffectTarget, float]
    ) -> dict[EffectTarget, float]:
        for target, factor in value.items():
            if not math.isfinite(factor) or factor < 0:
                msg = f"Multiplier for {target} must be finite and non-negative."
                raise ValueError(msg)
        return value

    @field_validator("additives")
    @classmethod
    def _validate_additives(
        cls, value: dict[EffectTarget, float]
    ) -> dict[EffectTarget, float]:
        for target, delta in value.items():
            if not math.isfinite(delta):
                msg = f"Additive delta for {target} must be finite."
                raise ValueError(msg)
        return value

    @classmethod
    def neutral(cls, source: str | None = None) -> EffectBundle:
        """Return a bundle that leaves every quantity unchanged."""
        return cls(source=source)

    def multiplier(self, target: EffectTarget) -> float:
        """Return the multiplier for *target*, defaulting to ``1.0``."""
        return self.multipliers.get(target, 1.0)

    def additive(self, target: EffectTarget) -> float:
        """Return the additive delta for *target*, defaulting to ``0.0``."""
        return self.additives.get(target, 0.0)

    def is_neutral(self) -> bool:
        """Whether applying this bundle changes nothing."""
        return all(factor == 1.0 for factor in self.multipliers.values()) and all(
            delta == 0.0 for delta in self.additives.values()
        )

    def scale(self, target: EffectTarget, factor: float) -> EffectBundle:
        """Return a copy with *factor* multiplied into *target*'s multiplier."""
        multipliers = dict(self.multipliers)
        multipliers[target] = self.multiplier(target) * factor
        return self.model_copy(update={"multipliers": multipliers})

    def add(self, target: EffectTarget, delta: float) -> EffectBundle:
        """Return a copy with *delta* summed into *target*'s additive."""
        additives = dict(self.additives)
        additives[target] = self.additive(target) + delta
        return self.model_copy(update={"additives": additives})

    def combine(self, other: EffectBundle) -> EffectBundle:
        """Return the composition of this bundle with *other*."""
        multipliers = dict(self.multipliers)
        for target, factor in other.multipliers.items():
            multipliers[target] = multipliers.get(target, 1.0) * factor
        additives = dict(self.additives)
        for target, delta in other.additives.items():
            additives[target] = additives.get(target, 0.0) + delta
        return EffectBundle(multipliers=multipliers, additives=additives)

    @classmethod
    def compose(cls, bundles: Iterable[EffectBundle]) -> EffectBundle:
        """Fold *bundles* into a single bundle."""
        result = cls.neutral()
        for bundle in bundles:
            result = result.combine(bundle)
        return result

    def apply(
        self,
        target: EffectTarget,
        base: float,
        *,
        lower: float | None = None,
        upper: float | None = None,
    ) -> float:
        """Resolve ``base * multiplier + additive`` for *target* and clamp it."""
        value = base * self.multiplier(target) + self.additive(target)
        if lower is not None:
            value = max(lower, value)
        if upper is not None:
            value = min(upper, value)
        return value


__all__ = ["EffectBundle", "EffectTarget", "clamp"]
