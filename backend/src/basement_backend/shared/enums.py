"""Enumerations shared across the scene simulation."""

from __future__ import annotations

from enum import StrEnum


class Genre(StrEnum):
    """Musical genre tag carried by every performer."""

    PUNK = "punk"
    METAL = "metal"
    HARDCORE = "hardcore"
    GRUNGE = "grunge"
    INDIE = "indie"
    EXPERIMENTAL = "experimental"
    NOISE = "noise"
    DOOM = "doom"
    SLUDGE = "sludge"
    POWERVIOLENCE = "powerviolence"


class VenueType(StrEnum):
    """Kind of room a performance takes place in."""

    BASEMENT = "basement"
    GARAGE = "garage"
    HOUSE_SHOW = "house_show"
    DIY_SPACE = "diy_space"
    DIVE_BAR = "dive_bar"
    PUNK_CLUB = "punk_club"
    METAL_VENUE = "metal_venue"
    WAREHOUSE = "warehouse"
    UNDERGROUND = "underground"
    THEATER = "theater"
    CONCERT_HALL = "concert_hall"
    ARENA = "arena"
    FESTIVAL_GROUNDS = "festival_grounds"


class PerformerStat(StrEnum):
    """The four 0-100 stat axes of a performer."""

    POPULARITY = "popularity"
    AUTHENTICITY = "authenticity"
    ENERGY = "energy"
    TECHNICAL_SKILL = "technical_skill"


class VenueStat(StrEnum):
    """The three 0-100 quality axes of a venue."""

    ACOUSTICS = "acoustics"
    ATMOSPHERE = "atmosphere"
    AUTHENTICITY = "authenticity"


class VenueAmenity(StrEnum):
    """Boolean amenity flags a venue may offer."""

    BAR = "bar"
    SECURITY = "security"
    ALL_AGES = "all_ages"


class EquipmentCategory(StrEnum):
    """Broad category of a piece of gear."""

    PA_SYSTEM = "pa_system"
    LIGHTING = "lighting"
    STAGE = "stage"
    BACKLINE = "backline"
    RECORDING = "recording"


class IncidentCategory(StrEnum):
    """Category of a random show incident."""

    EQUIPMENT_FAILURE = "equipment_failure"
    POLICE_SHUTDOWN = "police_shutdown"
    BAND_DRAMA = "band_drama"
    CROWD_INCIDENT = "crowd_incident"
    VENUE_ISSUE = "venue_issue"
    RIVAL_SABOTAGE = "rival_sabotage"
    NO_SHOW = "no_show"


class SynergyTier(StrEnum):
    """Rarity tier of a combo rule."""

    COMMON = "common"
    RARE = "rare"
    LEGENDARY = "legendary"
    MYTHIC = "mythic"

    @property
    def rank(self) -> int:
        """Return the sort rank, higher meaning rarer."""
        return _TIER_RANKS[self]


_TIER_RANKS: dict[SynergyTier, int] = {
    SynergyTier.COMMON: 0,
    SynergyTier.RARE: 1,
    SynergyTier.LEGENDARY: 2,
    SynergyTier.MYTHIC: 3,
}


__all__ = [
    "EquipmentCategory",
    "Genre",
    "IncidentCategory",
    "PerformerStat",
    "SynergyTier",
    "VenueAmenity",
    "VenueStat",
    "VenueType",
]
