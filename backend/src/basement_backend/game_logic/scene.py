"""Starter districts, venues and bands for a new session."""

from __future__ import annotations

from basement_backend.game_logic.state import (
    Performer,
    PerformerTrait,
    Venue,
    VenueLocation,
)
from basement_backend.shared.enums import Genre, PerformerStat, VenueType

EASTSIDE = VenueLocation(
    district_id="eastside",
    name="Eastside",
    scene_strength=80,
    gentrification_level=30,
    police_presence=20,
    rent_multiplier=1.0,
)
DOWNTOWN = VenueLocation(
    district_id="downtown",
    name="Downtown",
    scene_strength=60,
    gentrification_level=70,
    police_presence=50,
    rent_multiplier=1.5,
)
INDUSTRIAL = VenueLocation(
    district_id="industrial",
    name="Industrial",
    scene_strength=70,
    gentrification_level=20,
    police_presence=60,
    rent_multiplier=0.8,
)
UNIVERSITY = VenueLocation(
    district_id="university",
    name="University",
    scene_strength=50,
    gentrification_level=40,
    police_presence=30,
    rent_multiplier=1.2,
)

STARTER_VENUES: tuple[Venue, ...] = (
    Venue(
        identifier="v1",
        name="Mom's Basement",
        venue_type=VenueType.BASEMENT,
        capacity=30,
        acoustics=45,
        atmosphere=85,
        authenticity=100,
        location=EASTSIDE,
        all_ages=True,
    ),
    Venue(
        identifier="v2",
        name="The Broken Bottle",
        venue_type=VenueType.DIVE_BAR,
        capacity=80,
        acoustics=60,
        atmosphere=70,
        authenticity=75,
        location=DOWNTOWN,
        rent=150,
        has_bar=True,
        has_security=True,
    ),
    Venue(
        identifier="v3",
        name="Warehouse 23",
        venue_type=VenueType.WAREHOUSE,
        capacity=150,
        acoustics=50,
        atmosphere=95,
        authenticity=90,
        location=INDUSTRIAL,
        rent=300,
        all_ages=True,
    ),
    Venue(
        identifier="v4",
        name="Sarah's Garage",
        venue_type=VenueType.GARAGE,
        capacity=45,
        acoustics=40,
        atmosphere=80,
        authenticity=95,
        location=EASTSIDE,
        rent=25,
        all_ages=True,
    ),
)

STARTER_PERFORMERS: tuple[Performer, ...] = (
    Performer(
        identifier="b1",
        name="Basement Dwellers",
        genre=Genre.PUNK,
        popularity=15,
        authenticity=95,
        energy=85,
        technical_skill=60,
        traits=(
            PerformerTrait(
                tag="diy_ethics",
                stat_modifiers={PerformerStat.AUTHENTICITY: 10},
            ),
            PerformerTrait(
                tag="chaotic",
                name="Chaotic Live Shows",
                stat_modifiers={PerformerStat.POPULARITY: 5},
            ),
        ),
        hometown="eastside",
    ),
    Performer(
        identifier="b2",
        name="Death Magnetic",
        genre=Genre.METAL,
        popularity=45,
        authenticity=75,
        energy=70,
        technical_skill=85,
        traits=(
            PerformerTrait(
                tag="technical",
                name="Technical Masters",
                stat_modifiers={PerformerStat.POPULARITY: 10},
            ),
            PerformerTrait(tag="scene_veterans"),
        ),
    ),
    Performer(
        identifier="b3",
        name="Riot Grrrl Revival",
        genre=Genre.PUNK,
        popularity=35,
        authenticity=90,
        energy=95,
        technical_skill=50,
        traits=(
            PerformerTrait(
                tag="political",
                name="Political Message",
                stat_modifiers={PerformerStat.AUTHENTICITY: 15},
            ),
            PerformerTrait(tag="all_ages_champion"),
        ),
        hometown="university",
    ),
    Performer(
        identifier="b4",
        name="Blackened Skies",
        genre=Genre.METAL,
        popularity=25,
        authenticity=85,
        energy=60,
        technical_skill=90,
        traits=(
            PerformerTrait(
                tag="corpse_paint",
                stat_modifiers={PerformerStat.POPULARITY: 10},
            ),
            PerformerTrait(
                tag="underground_legends",
                stat_modifiers={PerformerStat.AUTHENTICITY: 20},
            ),
        ),
    ),
)


__all__ = [
    "DOWNTOWN",
    "EASTSIDE",
    "INDUSTRIAL",
    "STARTER_PERFORMERS",
    "STARTER_VENUES",
    "UNIVERSITY",
]
