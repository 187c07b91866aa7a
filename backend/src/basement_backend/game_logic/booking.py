"""Validation of show bookings before they enter the schedule."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from basement_backend.game_logic.difficulty import scaled_cost
from basement_backend.game_logic.state import ScheduledPerformance
from basement_backend.shared.enums import PerformerStat

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from basement_backend.game_logic.configuration import SimulationConfiguration
    from basement_backend.game_logic.difficulty import DifficultyFactors
    from basement_backend.game_logic.equipment import EquipmentInventory
    from basement_backend.game_logic.state import Performer, PlayerResources, Venue

logger = logging.getLogger(__name__)

YOUTH_CREW_TRAIT = "youth_crew"


class BookingRejection(StrEnum):
    """Reasons a booking request can be turned down."""

    INSUFFICIENT_FUNDS = "insufficient_funds"
    MISSING_REQUIREMENT = "missing_requirement"
    CULTURE_MISMATCH = "culture_mismatch"
    ALL_AGES_CONFLICT = "all_ages_conflict"
    SLOT_TAKEN = "slot_taken"
    UNKNOWN_REFERENCE = "unknown_reference"
    INVALID_REQUEST = "invalid_request"


class BookingRequest(BaseModel):
    """Player input for a new show."""

    model_config = ConfigDict(frozen=True)

    performer_ids: tuple[str, ...]
    venue_id: str
    ticket_price: int
    lead_time: int


class BookingResult(BaseModel):
    """Either the scheduled performance or the reason it was refused."""

    model_config = ConfigDict(frozen=True)

    accepted: bool
    performance: ScheduledPerformance | None = None
    cost: int = Field(default=0, ge=0)
    reason: BookingRejection | None = None
    message: str

    @classmethod
    def rejected(cls, reason: BookingRejection, message: str) -> BookingResult:
        """Build a refusal."""
        logger.info("Booking rejected (%s): %s", reason, message)
        return cls(accepted=False, reason=reason, message=message)


def booking_cost(
    lineup: Sequence[Performer],
    factors: DifficultyFactors,
    configuration: SimulationConfiguration,
) -> int:
    """Return the up-front fee for booking *lineup*."""
    return sum(
        scaled_cost(
            configuration.booking_fee_per_performer,
            factors.booking_cost_multiplier,
        )
        for _ in lineup
    )


def validate_booking(  # noqa: PLR0911
    request: BookingRequest,
    *,
    performance_id: str,
    resources: PlayerResources,
    performers: Mapping[str, Performer],
    venues: Mapping[str, Venue],
    schedule: Iterable[ScheduledPerformance],
    equipment: EquipmentInventory,
    factors: DifficultyFactors,
    configuration: SimulationConfiguration,
) -> BookingResult:
    """Check a booking request and, if it passes, build the performance.

    Failures are returned, never raised. The caller charges ``result.cost``
    and fills in the expected attendance.
    """
    if not request.performer_ids:
        return BookingResult.rejected(
            BookingRejection.INVALID_REQUEST, "A show needs at least one performer."
        )
    if len(set(request.performer_ids)) != len(request.performer_ids):
        return BookingResult.rejected(
            BookingRejection.INVALID_REQUEST, "A performer can only play once per bill."
        )
    if request.ticket_price < 0:
        return BookingResult.rejected(
            BookingRejection.INVALID_REQUEST, "Ticket price cannot be negative."
        )
    lead_times = range(configuration.min_lead_time, configuration.max_lead_time + 1)
    if request.lead_time not in lead_times:
        return BookingResult.rejected(
            BookingRejection.INVALID_REQUEST,
            f"Shows must be booked {configuration.min_lead_time} to "
            f"{configuration.max_lead_time} turns ahead.",
        )

    venue = venues.get(request.venue_id)
    if venue is None:
        return BookingResult.rejected(
            BookingRejection.UNKNOWN_REFERENCE, f"Unknown venue '{request.venue_id}'."
        )
    lineup: list[Performer] = []
    for performer_id in request.performer_ids:
        performer = performers.get(performer_id)
        if performer is None:
            return BookingResult.rejected(
                BookingRejection.UNKNOWN_REFERENCE,
                f"Unknown performer '{performer_id}'.",
            )
        lineup.append(performer)

    if any(
        existing.venue_id == venue.identifier
        and existing.turns_until_show == request.lead_time
        for existing in schedule
    ):
        return BookingResult.rejected(
            BookingRejection.SLOT_TAKEN,
            f"{venue.name} already has a show that turn.",
        )

    cost = booking_cost(lineup, factors, configuration)
    if resources.money < cost:
        return BookingResult.rejected(
            BookingRejection.INSUFFICIENT_FUNDS,
            f"Need ${cost} to book {venue.name}.",
        )

    for performer in lineup:
        if not venue.all_ages and performer.has_trait(YOUTH_CREW_TRAIT):
            return BookingResult.rejected(
                BookingRejection.ALL_AGES_CONFLICT,
                f"{venue.name} doesn't allow all-ages shows.",
            )
        for requirement in performer.technical_requirements:
            if not equipment.meets_requirement(venue.identifier, requirement):
                return BookingResult.rejected(
                    BookingRejection.MISSING_REQUIREMENT,
                    f"{venue.name} lacks required {requirement.category} "
                    f"for {performer.name}.",
                )
        gap = abs(performer.stat(PerformerStat.AUTHENTICITY) - venue.authenticity)
        if gap > configuration.culture_mismatch_threshold:
            return BookingResult.rejected(
                BookingRejection.CULTURE_MISMATCH,
                f"{performer.name} and {venue.name} are too different culturally.",
            )

    performance = ScheduledPerformance(
        identifier=performance_id,
        performer_ids=request.performer_ids,
        venue_id=venue.identifier,
        ticket_price=request.ticket_price,
        turns_until_show=request.lead_time,
    )
    return BookingResult(
        accepted=True,
        performance=performance,
        cost=cost,
        message=f"Booked {lineup[0].name} at {venue.name}!",
    )


__all__ = [
    "YOUTH_CREW_TRAIT",
    "BookingRejection",
    "BookingRequest",
    "BookingResult",
    "booking_cost",
    "validate_booking",
]
