"""Factories and test doubles shared by the backend test suite."""

from __future__ import annotations

from typing import Any

from basement_backend.game_logic.state import (
    Performer,
    PerformerTrait,
    Venue,
    VenueLocation,
)
from basement_backend.shared.enums import Genre, VenueType
from basement_backend.shared.rng import DeterministicRandomService


def make_performer(
    identifier: str = "band-1",
    *,
    traits: tuple[str, ...] = (),
    **overrides: Any,
) -> Performer:
    """Build a middle-of-the-road punk band with optional overrides."""
    base: dict[str, Any] = {
        "identifier": identifier,
        "name": identifier.replace("-", " ").title(),
        "genre": Genre.PUNK,
        "popularity": 50,
        "authenticity": 50,
        "energy": 50,
        "technical_skill": 50,
        "traits": tuple(PerformerTrait(tag=tag) for tag in traits),
    }
    base.update(overrides)
    return Performer(**base)


def make_venue(
    identifier: str = "venue-1",
    *,
    district: str = "eastside",
    police_presence: int = 20,
    rent_multiplier: float = 1.0,
    **overrides: Any,
) -> Venue:
    """Build a 100-capacity dive bar with optional overrides."""
    base: dict[str, Any] = {
        "identifier": identifier,
        "name": identifier.replace("-", " ").title(),
        "venue_type": VenueType.DIVE_BAR,
        "capacity": 100,
        "acoustics": 50,
        "atmosphere": 50,
        "authenticity": 50,
        "location": VenueLocation(
            district_id=district,
            police_presence=police_presence,
            rent_multiplier=rent_multiplier,
        ),
    }
    base.update(overrides)
    return Venue(**base)


class ScriptedRandom(DeterministicRandomService):
    """Random service with pinned draws for exact arithmetic in tests.

    ``uniform`` returns the midpoint of its range unless *uniform_value* is
    given, and ``roll`` answers with *roll_result*. Choices and weighted
    choices still use the seeded generator.
    """

    def __init__(
        self,
        *,
        roll_result: bool = False,
        uniform_value: float | None = None,
        seed: int = 0,
    ) -> None:
        super().__init__(seed)
        self.roll_result = roll_result
        self.uniform_value = uniform_value
        self.rolled: list[float] = []

    def uniform(self, lower: float, upper: float) -> float:
        if self.uniform_value is not None:
            return self.uniform_value
        return (lower + upper) / 2

    def roll(self, probability: float) -> bool:
        self.rolled.append(probability)
        return self.roll_result


__all__ = ["ScriptedRandom", "make_performer", "make_venue"]
