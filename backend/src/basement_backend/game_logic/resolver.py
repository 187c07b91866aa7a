"""Turn a booked show into attendance, money, reputation and fans.

The resolver reads every modifier source, composes their effect bundles and
only then commits state changes (combo counters, faction standings and gear
wear) so a resolution is either fully applied or not at all.
"""

from __future__ import annotations

import logging
import math
from statistics import fmean
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from basement_backend.game_logic.configuration import SimulationConfiguration
from basement_backend.game_logic.difficulty import DifficultyFactors
from basement_backend.game_logic.difficulty import show_modifiers as difficulty_bundle
from basement_backend.game_logic.factions import FactionEvent
from basement_backend.game_logic.incidents import (
    NO_SHOW_INCIDENT,
    Incident,
    IncidentContext,
    describe,
)
from basement_backend.game_logic.synergies import SynergyActivation, SynergyContext
from basement_backend.shared.enums import EquipmentCategory, PerformerStat, VenueType
from basement_backend.shared.value_objects import EffectBundle, EffectTarget, clamp

if TYPE_CHECKING:
    from collections.abc import Sequence

    from basement_backend.game_logic.equipment import EquipmentInventory
    from basement_backend.game_logic.factions import FactionGraph
    from basement_backend.game_logic.incidents import IncidentGenerator
    from basement_backend.game_logic.state import Performer, Venue
    from basement_backend.game_logic.synergies import SynergyEngine
    from basement_backend.shared.rng import DeterministicRandomService

logger = logging.getLogger(__name__)

ATTENDANCE_VARIANCE = (0.8, 1.2)
AUTHENTICITY_MATCH_RANGE = 20
AUTHENTICITY_MATCH_BONUS = 1.2
AUTHENTICITY_MISMATCH_PENALTY = 0.8
MISSING_GEAR_ATTENDANCE = 0.7
MISSING_GEAR_STRESS = 20
MISSING_GEAR_REPUTATION = -3
FAN_CONVERSION_RATE = 0.1
BASE_SHOW_STRESS = 5
INCIDENT_STRESS = 10
UNDERSKILLED_STRESS = 5

VENUE_FAN_BONUS: dict[VenueType, float] = {
    VenueType.BASEMENT: 0.5,
    VenueType.GARAGE: 0.6,
    VenueType.HOUSE_SHOW: 0.7,
    VenueType.DIY_SPACE: 0.8,
    VenueType.DIVE_BAR: 0.9,
    VenueType.PUNK_CLUB: 1.0,
    VenueType.METAL_VENUE: 1.0,
    VenueType.WAREHOUSE: 1.1,
    VenueType.UNDERGROUND: 0.8,
    VenueType.THEATER: 1.2,
    VenueType.CONCERT_HALL: 1.3,
    VenueType.ARENA: 1.5,
    VenueType.FESTIVAL_GROUNDS: 2.0,
}

REPUTATION_TIERS: tuple[tuple[float, int], ...] = (
    (0.9, 10),
    (0.7, 5),
    (0.5, 2),
    (0.3, 0),
)
LOW_TURNOUT_REPUTATION = -5


class ResolutionContext(BaseModel):
    """Player state the resolver reads; it never mutates it."""

    model_config = ConfigDict(frozen=True)

    turn: int = Field(default=0, ge=0)
    reputation: int = Field(default=0, ge=0)
    stress: int = Field(default=0, ge=0, le=100)
    hype: int = Field(default=0, ge=0, le=100)
    difficulty: DifficultyFactors


class PerformanceOutcome(BaseModel):
    """Resolved result of one show."""

    model_config = ConfigDict(frozen=True)

    performance_id: str
    venue_id: str
    performer_ids: tuple[str, ...]
    success: bool
    attendance: int = Field(..., ge=0)
    effective_capacity: int = Field(..., ge=0)
    ticket_revenue: int = Field(default=0, ge=0)
    bar_revenue: int = Field(default=0, ge=0)
    revenue: int = Field(default=0, ge=0)
    money_change: int = 0
    reputation_change: int = 0
    fans_gained: int = Field(default=0, ge=0)
    stress_change: int = 0
    incidents: tuple[Incident, ...] = Field(default_factory=tuple)
    synergies: tuple[SynergyActivation, ...] = Field(default_factory=tuple)
    new_discoveries: tuple[str, ...] = Field(default_factory=tuple)
    missing_equipment: tuple[EquipmentCategory, ...] = Field(default_factory=tuple)
    faction_events: tuple[FactionEvent, ...] = Field(default_factory=tuple)
    failed: bool = False
    failure_reason: str | None = None


class PerformanceResolver:
    """Apply the full modifier stack to a show in a fixed order."""

    def __init__(
        self,
        *,
        synergies: SynergyEngine,
        factions: FactionGraph,
        equipment: EquipmentInventory,
        incidents: IncidentGenerator,
        rng: DeterministicRandomService,
        configuration: SimulationConfiguration | None = None,
    ) -> None:
        self._synergies = synergies
        self._factions = factions
        self._equipment = equipment
        self._incidents = incidents
        self._rng = rng
        self._config = configuration or SimulationConfiguration()

    def resolve(
        self,
        lineup: Sequence[Performer],
        venue: Venue,
        ticket_price: int,
        context: ResolutionContext,
        *,
        performance_id: str = "adhoc",
    ) -> PerformanceOutcome:
        """Resolve a show and commit its side effects.

        Order: base attendance, bundle gathering, effective capacity,
        composed attendance, incidents, revenue, reputation/fans/stress,
        faction standings, equipment wear. Values stay fractional until the
        outcome is built.
        """
        if not lineup:
            msg = "A show needs at least one performer."
            raise ValueError(msg)
        headliner = lineup[0]

        # 1. base attendance
        base_attendance = self._base_attendance(lineup, venue) * self._rng.uniform(
            *ATTENDANCE_VARIANCE
        )

        # 2. gather bundles
        activations = self._synergies.evaluate(
            lineup,
            venue,
            SynergyContext(turn=context.turn, reputation=context.reputation),
            record=False,
        )
        missing = self._equipment.missing_requirements(headliner, venue)
        combined = self._compose(lineup, venue, ticket_price, context, activations)
        if missing:
            combined = combined.combine(_missing_gear_bundle())

        # 3. effective capacity
        effective_capacity = combined.apply(
            EffectTarget.CAPACITY, venue.capacity, lower=0
        )

        # 4. attendance
        attendance = combined.apply(
            EffectTarget.ATTENDANCE,
            base_attendance,
            lower=0,
            upper=effective_capacity,
        )

        # 5. incidents
        incidents = self._incidents.roll_incidents(
            headliner,
            venue,
            IncidentContext(
                reputation=context.reputation,
                stress=context.stress,
                attendance=attendance,
                modifiers=combined,
            ),
        )
        incident_reputation = 0
        incident_money = 0
        incident_stress = 0
        for incident in incidents:
            attendance = clamp(
                attendance * (1 + incident.attendance_change / 100),
                0,
                effective_capacity,
            )
            incident_reputation += incident.reputation_change
            incident_money += incident.money_change
            incident_stress += incident.stress_change

        # 6. revenue
        ticket_revenue = combined.apply(
            EffectTarget.REVENUE, attendance * ticket_price, lower=0
        )
        bar_revenue = (
            attendance * self._config.bar_spend_per_head if venue.has_bar else 0.0
        )

        # 7. reputation, fans, stress
        success = attendance >= self._config.success_threshold * venue.capacity
        reputation = (
            combined.apply(
                EffectTarget.REPUTATION,
                self._base_reputation(lineup, attendance / venue.capacity),
            )
            + incident_reputation
        )
        fans = combined.apply(
            EffectTarget.FANS,
            self._base_fans(headliner, venue, attendance),
            lower=0,
        )
        stress = (
            combined.apply(
                EffectTarget.STRESS,
                self._base_stress(headliner, venue, has_incident=bool(incidents)),
                lower=0,
            )
            + incident_stress
        )

        # 8. faction standings, together with the other commits
        discoveries = self._synergies.record_triggers(activations)
        faction_events = self._factions.update_standings_from_show(
            headliner, venue, success=success
        )

        # 9. equipment wear
        self._equipment.degrade(
            venue.identifier,
            installed_wear=self._config.installed_wear_per_show,
            storage_wear=self._config.storage_wear_per_show,
        )

        revenue = math.floor(ticket_revenue) + math.floor(bar_revenue)
        outcome = PerformanceOutcome(
            performance_id=performance_id,
            venue_id=venue.identifier,
            performer_ids=tuple(performer.identifier for performer in lineup),
            success=success,
            attendance=math.floor(attendance),
            effective_capacity=math.floor(effective_capacity),
            ticket_revenue=math.floor(ticket_revenue),
            bar_revenue=math.floor(bar_revenue),
            revenue=revenue,
            money_change=revenue + incident_money,
            reputation_change=math.floor(reputation),
            fans_gained=math.floor(fans),
            stress_change=math.floor(stress),
            incidents=tuple(
                incident.model_copy(
                    update={"description": describe(incident, headliner, venue)}
                )
                for incident in incidents
            ),
            synergies=tuple(activations),
            new_discoveries=tuple(discoveries),
            missing_equipment=tuple(missing),
            faction_events=tuple(faction_events),
        )
        logger.info(
            "Resolved %s at %s: attendance=%s revenue=%s success=%s",
            performance_id,
            venue.identifier,
            outcome.attendance,
            outcome.revenue,
            outcome.success,
        )
        return outcome

    def preview(
        self,
        lineup: Sequence[Performer],
        venue: Venue,
        ticket_price: int,
        context: ResolutionContext,
    ) -> int:
        """Return the expected attendance without rolling dice or committing."""
        if not lineup:
            return 0
        activations = self._synergies.evaluate(
            lineup,
            venue,
            SynergyContext(turn=context.turn, reputation=context.reputation),
            record=False,
        )
        combined = self._compose(lineup, venue, ticket_price, context, activations)
        if self._equipment.missing_requirements(lineup[0], venue):
            combined = combined.combine(_missing_gear_bundle())
        effective_capacity = combined.apply(
            EffectTarget.CAPACITY, venue.capacity, lower=0
        )
        expected = combined.apply(
            EffectTarget.ATTENDANCE,
            self._base_attendance(lineup, venue),
            lower=0,
            upper=effective_capacity,
        )
        return math.floor(expected)

    def failed_outcome(
        self,
        performance_id: str,
        *,
        venue_id: str,
        performer_ids: Sequence[str],
        reason: str,
    ) -> PerformanceOutcome:
        """Return the outcome of a show that could not take place."""
        logger.warning("Show %s failed: %s", performance_id, reason)
        return PerformanceOutcome(
            performance_id=performance_id,
            venue_id=venue_id,
            performer_ids=tuple(performer_ids),
            success=False,
            attendance=0,
            effective_capacity=0,
            reputation_change=-self._config.failed_show_reputation_penalty,
            incidents=(NO_SHOW_INCIDENT,),
            failed=True,
            failure_reason=reason,
        )

    def _compose(
        self,
        lineup: Sequence[Performer],
        venue: Venue,
        ticket_price: int,
        context: ResolutionContext,
        activations: Sequence[SynergyActivation],
    ) -> EffectBundle:
        bundles = [
            self._synergies.to_bundle(activations),
            self._factions.show_modifiers(lineup[0], venue),
            self._equipment.effect_bundle(venue.identifier),
            difficulty_bundle(context.difficulty, ticket_price),
        ]
        if context.hype:
            bundles.append(
                EffectBundle(
                    multipliers={EffectTarget.ATTENDANCE: 1 + context.hype / 200},
                    source="promotion",
                )
            )
        return EffectBundle.compose(bundles)

    @staticmethod
    def _base_attendance(lineup: Sequence[Performer], venue: Venue) -> float:
        popularity = fmean(p.stat(PerformerStat.POPULARITY) for p in lineup)
        authenticity = fmean(p.stat(PerformerStat.AUTHENTICITY) for p in lineup)
        match = (
            AUTHENTICITY_MATCH_BONUS
            if abs(authenticity - venue.authenticity) < AUTHENTICITY_MATCH_RANGE
            else AUTHENTICITY_MISMATCH_PENALTY
        )
        draw = (popularity / 100 + venue.atmosphere / 100) / 2 * match
        return venue.capacity * draw

    @staticmethod
    def _base_reputation(lineup: Sequence[Performer], ratio: float) -> float:
        gain: float = LOW_TURNOUT_REPUTATION
        for threshold, value in REPUTATION_TIERS:
            if ratio >= threshold:
                gain = value
                break
        authenticity = fmean(p.stat(PerformerStat.AUTHENTICITY) for p in lineup)
        if authenticity > 80 and gain > 0:
            gain *= 1.5
        return gain

    def _base_fans(
        self, headliner: Performer, venue: Venue, attendance: float
    ) -> float:
        energy = headliner.stat(PerformerStat.ENERGY) / 100
        bonus = VENUE_FAN_BONUS.get(venue.venue_type, 1.0)
        variance = self._rng.uniform(*ATTENDANCE_VARIANCE)
        return attendance * FAN_CONVERSION_RATE * energy * bonus * variance

    @staticmethod
    def _base_stress(
        headliner: Performer, venue: Venue, *, has_incident: bool
    ) -> float:
        stress = BASE_SHOW_STRESS
        if has_incident:
            stress += INCIDENT_STRESS
        if headliner.stat(PerformerStat.TECHNICAL_SKILL) < 70 and venue.capacity > 100:
            stress += UNDERSKILLED_STRESS
        return stress


def _missing_gear_bundle() -> EffectBundle:
    return EffectBundle(
        multipliers={EffectTarget.ATTENDANCE: MISSING_GEAR_ATTENDANCE},
        additives={
            EffectTarget.STRESS: MISSING_GEAR_STRESS,
            EffectTarget.REPUTATION: MISSING_GEAR_REPUTATION,
        },
        source="missing_equipment",
    )


__all__ = [
    "VENUE_FAN_BONUS",
    "PerformanceOutcome",
    "PerformanceResolver",
    "ResolutionContext",
]
