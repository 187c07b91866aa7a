"""Scene-centric state containers used by the game logic layer."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

from basement_backend.shared.enums import (
    EquipmentCategory,
    Genre,
    PerformerStat,
    VenueAmenity,
    VenueStat,
    VenueType,
)
from basement_backend.shared.value_objects import clamp

STAT_MIN = 0
STAT_MAX = 100
MAX_STRESS = 100


class PerformerTrait(BaseModel):
    """Tagged personality trait that nudges a performer's stats."""

    model_config = ConfigDict(frozen=True)

    tag: str = Field(..., min_length=1)
    name: str = ""
    stat_modifiers: dict[PerformerStat, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _normalize_tag(self) -> PerformerTrait:
        """Store trait tags lowercase so lookups are case-insensitive."""
        object.__setattr__(self, "tag", self.tag.lower())
        if not self.name:
            object.__setattr__(self, "name", self.tag.replace("_", " ").title())
        return self


class TechnicalRequirement(BaseModel):
    """Gear a performer insists on before playing a venue."""

    model_config = ConfigDict(frozen=True)

    category: EquipmentCategory
    min_quality: int = Field(default=1, ge=1, le=5)


class Performer(BaseModel):
    """A band on the player's roster."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    genre: Genre
    popularity: int = Field(..., ge=STAT_MIN, le=STAT_MAX)
    authenticity: int = Field(..., ge=STAT_MIN, le=STAT_MAX)
    energy: int = Field(..., ge=STAT_MIN, le=STAT_MAX)
    technical_skill: int = Field(..., ge=STAT_MIN, le=STAT_MAX)
    traits: tuple[PerformerTrait, ...] = Field(default_factory=tuple)
    technical_requirements: tuple[TechnicalRequirement, ...] = Field(
        default_factory=tuple
    )
    hometown: str | None = None

    def base_stat(self, axis: PerformerStat) -> int:
        """Return the unmodified value of *axis*."""
        return getattr(self, axis.value)

    def stat(self, axis: PerformerStat) -> float:
        """Return *axis* after trait modifiers, clamped to the stat domain."""
        value = self.base_stat(axis) + sum(
            trait.stat_modifiers.get(axis, 0) for trait in self.traits
        )
        return clamp(value, STAT_MIN, STAT_MAX)

    def has_trait(self, tag: str) -> bool:
        """Whether the performer carries the trait *tag*."""
        wanted = tag.lower()
        return any(trait.tag == wanted for trait in self.traits)

    @property
    def trait_tags(self) -> tuple[str, ...]:
        """Return the ordered trait tags."""
        return tuple(trait.tag for trait in self.traits)


class VenueLocation(BaseModel):
    """District a venue sits in."""

    model_config = ConfigDict(frozen=True)

    district_id: str = Field(..., min_length=1)
    name: str = ""
    scene_strength: int = Field(default=50, ge=0, le=100)
    police_presence: int = Field(default=20, ge=0, le=100)
    gentrification_level: int = Field(default=0, ge=0, le=100)
    rent_multiplier: float = Field(default=1.0, ge=0)


class Venue(BaseModel):
    """A room the player can book shows into."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    venue_type: VenueType
    capacity: int = Field(..., ge=1)
    acoustics: int = Field(..., ge=STAT_MIN, le=STAT_MAX)
    atmosphere: int = Field(..., ge=STAT_MIN, le=STAT_MAX)
    authenticity: int = Field(..., ge=STAT_MIN, le=STAT_MAX)
    location: VenueLocation
    rent: int = Field(default=0, ge=0)
    has_bar: bool = False
    has_security: bool = False
    all_ages: bool = False

    def stat(self, axis: VenueStat) -> int:
        """Return the value of quality *axis*."""
        return getattr(self, axis.value)

    def has_amenity(self, amenity: VenueAmenity) -> bool:
        """Whether the venue offers *amenity*."""
        flags = {
            VenueAmenity.BAR: self.has_bar,
            VenueAmenity.SECURITY: self.has_security,
            VenueAmenity.ALL_AGES: self.all_ages,
        }
        return flags[amenity]


class ScheduledPerformance(BaseModel):
    """A booked show waiting for its turn."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1)
    performer_ids: tuple[str, ...] = Field(..., min_length=1)
    venue_id: str = Field(..., min_length=1)
    ticket_price: int = Field(..., ge=0)
    turns_until_show: int = Field(..., ge=0)
    hype: int = Field(default=0, ge=0, le=100)
    expected_attendance: int = Field(default=0, ge=0)

    @property
    def headliner_id(self) -> str:
        """Return the first-billed performer."""
        return self.performer_ids[0]


class PlayerResources(BaseModel):
    """Resource totals owned by the player."""

    model_config = ConfigDict(frozen=True)

    money: int = 0
    reputation: int = Field(default=0, ge=0)
    fans: int = Field(default=0, ge=0)
    stress: int = Field(default=0, ge=0, le=MAX_STRESS)
    connections: int = Field(default=0, ge=0)

    def adjust(
        self,
        *,
        money: int = 0,
        reputation: int = 0,
        fans: int = 0,
        stress: int = 0,
        connections: int = 0,
    ) -> PlayerResources:
        """Return a copy with deltas applied and domains enforced.

        Money is the only total allowed to go negative.
        """
        return PlayerResources(
            money=self.money + money,
            reputation=max(0, self.reputation + reputation),
            fans=max(0, self.fans + fans),
            stress=int(clamp(self.stress + stress, 0, MAX_STRESS)),
            connections=max(0, self.connections + connections),
        )


__all__ = [
    "MAX_STRESS",
    "STAT_MAX",
    "STAT_MIN",
    "Performer",
    "PerformerTrait",
    "PlayerResources",
    "ScheduledPerformance",
    "TechnicalRequirement",
    "Venue",
    "VenueLocation",
]
