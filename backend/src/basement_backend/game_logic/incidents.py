"""Random incidents that can derail a show."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from basement_backend.shared.enums import IncidentCategory, PerformerStat
from basement_backend.shared.value_objects import EffectBundle, EffectTarget, clamp

if TYPE_CHECKING:
    from basement_backend.game_logic.state import Performer, Venue
    from basement_backend.shared.rng import DeterministicRandomService

logger = logging.getLogger(__name__)

BASE_INCIDENT_PROBABILITY = 0.15
SECURITY_REDUCTION = 0.05
CHAOTIC_TRAIT_BONUS = 0.10
HIGH_REPUTATION_REDUCTION = 0.02
HIGH_STRESS_BONUS = 0.10
SECOND_INCIDENT_PROBABILITY = 0.05
CHAOTIC_TRAIT_TAG = "chaotic"


class Incident(BaseModel):
    """A concrete incident variant and its numeric effects."""

    model_config = ConfigDict(frozen=True)

    category: IncidentCategory
    description: str = Field(..., min_length=1)
    attendance_change: float = Field(default=0.0, ge=-100, le=100)
    reputation_change: int = 0
    money_change: int = 0
    stress_change: int = 0
    preventable: bool = False
    prevention_cost: int | None = Field(default=None, ge=0)


def _incident(
    category: IncidentCategory, description: str, **effects: object
) -> Incident:
    return Incident(category=category, description=description, **effects)


INCIDENT_CATALOG: dict[IncidentCategory, tuple[Incident, ...]] = {
    IncidentCategory.EQUIPMENT_FAILURE: (
        _incident(
            IncidentCategory.EQUIPMENT_FAILURE,
            "The PA system blows out mid-set!",
            attendance_change=-20,
            reputation_change=-5,
            preventable=True,
            prevention_cost=100,
        ),
        _incident(
            IncidentCategory.EQUIPMENT_FAILURE,
            "Guitar amp catches fire during the show!",
            attendance_change=-30,
            reputation_change=-10,
            stress_change=15,
            preventable=True,
            prevention_cost=150,
        ),
    ),
    IncidentCategory.POLICE_SHUTDOWN: (
        _incident(
            IncidentCategory.POLICE_SHUTDOWN,
            "Cops shut down the show for noise complaints!",
            attendance_change=-100,
            reputation_change=5,
            money_change=-200,
        ),
        _incident(
            IncidentCategory.POLICE_SHUTDOWN,
            "Police raid - everyone scattered!",
            attendance_change=-100,
            reputation_change=10,
            stress_change=20,
        ),
    ),
    IncidentCategory.BAND_DRAMA: (
        _incident(
            IncidentCategory.BAND_DRAMA,
            "{band} get in a fistfight on stage!",
            reputation_change=-15,
            stress_change=25,
        ),
        _incident(
            IncidentCategory.BAND_DRAMA,
            "The singer of {band} storms off mid-set!",
            attendance_change=-50,
            reputation_change=-20,
        ),
    ),
    IncidentCategory.CROWD_INCIDENT: (
        _incident(
            IncidentCategory.CROWD_INCIDENT,
            "Mosh pit gets out of control!",
            attendance_change=-10,
            reputation_change=5,
            stress_change=10,
            preventable=True,
            prevention_cost=50,
        ),
        _incident(
            IncidentCategory.CROWD_INCIDENT,
            "Stage diving accident - someone got hurt!",
            attendance_change=-25,
            reputation_change=-10,
            money_change=-100,
            preventable=True,
            prevention_cost=75,
        ),
    ),
    IncidentCategory.VENUE_ISSUE: (
        _incident(
            IncidentCategory.VENUE_ISSUE,
            "{venue} double-booked the night!",
            attendance_change=-50,
            reputation_change=-5,
        ),
        _incident(
            IncidentCategory.VENUE_ISSUE,
            "Power outage hits {venue}!",
            attendance_change=-40,
            money_change=-100,
        ),
    ),
    IncidentCategory.RIVAL_SABOTAGE: (
        _incident(
            IncidentCategory.RIVAL_SABOTAGE,
            "Rival band spreads rumors about cancellation!",
            attendance_change=-30,
            reputation_change=-5,
        ),
        _incident(
            IncidentCategory.RIVAL_SABOTAGE,
            "Someone slashed the van tires!",
            money_change=-150,
            stress_change=15,
        ),
    ),
}

NO_SHOW_INCIDENT = Incident(
    category=IncidentCategory.NO_SHOW,
    description="Show could not be executed",
)


class IncidentContext(BaseModel):
    """Player and show state the incident roll depends on."""

    model_config = ConfigDict(frozen=True)

    reputation: int = Field(default=0, ge=0)
    stress: int = Field(default=0, ge=0, le=100)
    attendance: float = Field(default=0.0, ge=0)
    modifiers: EffectBundle = Field(default_factory=EffectBundle.neutral)


def incident_probability(
    performer: Performer, venue: Venue, context: IncidentContext
) -> float:
    """Return the chance that at least one incident fires at this show."""
    probability = BASE_INCIDENT_PROBABILITY
    if venue.has_security:
        probability -= SECURITY_REDUCTION
    if performer.has_trait(CHAOTIC_TRAIT_TAG):
        probability += CHAOTIC_TRAIT_BONUS
    if context.reputation > 50:
        probability -= HIGH_REPUTATION_REDUCTION
    if context.stress > 50:
        probability += HIGH_STRESS_BONUS
    return clamp(
        context.modifiers.apply(EffectTarget.INCIDENT_PROBABILITY, probability),
        0.0,
        1.0,
    )


def category_weights(
    performer: Performer, venue: Venue, context: IncidentContext
) -> dict[IncidentCategory, float]:
    """Return the relative likelihood of each incident category."""
    return {
        IncidentCategory.EQUIPMENT_FAILURE: 3.0 if venue.capacity > 100 else 1.0,
        IncidentCategory.POLICE_SHUTDOWN: venue.location.police_presence / 20,
        IncidentCategory.BAND_DRAMA: 2.0 if context.stress > 30 else 0.5,
        IncidentCategory.CROWD_INCIDENT: (
            2.0 if performer.stat(PerformerStat.ENERGY) > 80 else 1.0
        ),
        IncidentCategory.VENUE_ISSUE: 1.0,
        IncidentCategory.RIVAL_SABOTAGE: 2.0 if context.reputation < 30 else 0.5,
    }


class IncidentGenerator:
    """Roll incidents for a show using the session's random service."""

    def __init__(
        self,
        rng: DeterministicRandomService,
        catalog: dict[IncidentCategory, tuple[Incident, ...]] | None = None,
    ) -> None:
        self._rng = rng
        self._catalog = catalog if catalog is not None else INCIDENT_CATALOG

    def roll_incidents(
        self, performer: Performer, venue: Venue, context: IncidentContext
    ) -> list[Incident]:
        """Return zero, one or two incidents for the show, in firing order."""
        incidents: list[Incident] = []
        if self._rng.roll(incident_probability(performer, venue, context)):
            first = self.select_incident(performer, venue, context)
            if first is not None:
                incidents.append(first)

        if incidents and self._rng.roll(SECOND_INCIDENT_PROBABILITY):
            second = self.select_incident(
                performer, venue, context, exclude=incidents[0].category
            )
            if second is not None:
                incidents.append(second)

        if incidents:
            logger.debug(
                "Incidents for %s at %s: %s",
                performer.identifier,
                venue.identifier,
                [incident.category.value for incident in incidents],
            )
        return incidents

    def select_incident(
        self,
        performer: Performer,
        venue: Venue,
        context: IncidentContext,
        *,
        exclude: IncidentCategory | None = None,
    ) -> Incident | None:
        """Pick a category by weight, then a variant of it uniformly."""
        weights = category_weights(performer, venue, context)
        if exclude is not None:
            weights.pop(exclude, None)
        weights = {
            category: weight
            for category, weight in weights.items()
            if self._catalog.get(category)
        }
        category = self._rng.weighted_choice(weights)
        if category is None:
            return None
        return self._rng.choice(self._catalog[category])


def describe(incident: Incident, performer: Performer, venue: Venue) -> str:
    """Return the incident description with names filled in."""
    return incident.description.replace("{band}", performer.name).replace(
        "{venue}", venue.name
    )


def can_prevent(incident: Incident, money: int) -> bool:
    """Whether the player could pay to stop *incident* from happening."""
    if not incident.preventable:
        return False
    if not incident.prevention_cost:
        return True
    return money >= incident.prevention_cost


__all__ = [
    "INCIDENT_CATALOG",
    "NO_SHOW_INCIDENT",
    "Incident",
    "IncidentContext",
    "IncidentGenerator",
    "can_prevent",
    "category_weights",
    "describe",
    "incident_probability",
]
