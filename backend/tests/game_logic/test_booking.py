"""Tests for booking validation."""

from __future__ import annotations

from typing import Any

import pytest

from basement_backend.game_logic.booking import (
    BookingRejection,
    BookingRequest,
    BookingResult,
    booking_cost,
    validate_booking,
)
from basement_backend.game_logic.configuration import SimulationConfiguration
from basement_backend.game_logic.difficulty import difficulty
from basement_backend.game_logic.equipment import EquipmentInventory
from basement_backend.game_logic.state import (
    PlayerResources,
    ScheduledPerformance,
    TechnicalRequirement,
)
from basement_backend.shared.enums import EquipmentCategory
from scene_factories import make_performer, make_venue


def _request(**overrides: Any) -> BookingRequest:
    base: dict[str, Any] = {
        "performer_ids": ("band-1",),
        "venue_id": "venue-1",
        "ticket_price": 10,
        "lead_time": 2,
    }
    base.update(overrides)
    return BookingRequest(**base)


def _validate(request: BookingRequest, **overrides: Any) -> BookingResult:
    performers = overrides.pop("performers", [make_performer()])
    venues = overrides.pop("venues", [make_venue()])
    arguments: dict[str, Any] = {
        "performance_id": "show-1",
        "resources": PlayerResources(money=1_000),
        "performers": {performer.identifier: performer for performer in performers},
        "venues": {venue.identifier: venue for venue in venues},
        "schedule": (),
        "equipment": EquipmentInventory(),
        "factors": difficulty(0, 0, 0),
        "configuration": SimulationConfiguration(),
    }
    arguments.update(overrides)
    return validate_booking(request, **arguments)


def test_valid_booking_is_accepted() -> None:
    result = _validate(_request())

    assert result.accepted
    assert result.cost == 50
    assert result.reason is None
    assert result.performance is not None
    assert result.performance.identifier == "show-1"
    assert result.performance.turns_until_show == 2
    assert result.performance.hype == 0


@pytest.mark.parametrize(
    "request_overrides",
    [
        {"performer_ids": ()},
        {"performer_ids": ("band-1", "band-1")},
        {"ticket_price": -1},
        {"lead_time": 0},
        {"lead_time": 6},
    ],
)
def test_malformed_requests_are_invalid(request_overrides: dict[str, Any]) -> None:
    result = _validate(_request(**request_overrides))

    assert not result.accepted
    assert result.reason is BookingRejection.INVALID_REQUEST
    assert result.performance is None


def test_unknown_references_are_rejected() -> None:
    unknown_venue = _validate(_request(venue_id="nowhere"))
    unknown_band = _validate(_request(performer_ids=("band-1", "ghosts")))

    assert unknown_venue.reason is BookingRejection.UNKNOWN_REFERENCE
    assert unknown_band.reason is BookingRejection.UNKNOWN_REFERENCE
    assert "ghosts" in unknown_band.message


def test_slot_is_one_show_per_venue_per_turn() -> None:
    booked = ScheduledPerformance(
        identifier="show-0",
        performer_ids=("band-1",),
        venue_id="venue-1",
        ticket_price=5,
        turns_until_show=2,
    )

    clash = _validate(_request(lead_time=2), schedule=[booked])
    later = _validate(_request(lead_time=3), schedule=[booked])

    assert clash.reason is BookingRejection.SLOT_TAKEN
    assert later.accepted


def test_booking_needs_enough_money() -> None:
    result = _validate(_request(), resources=PlayerResources(money=49))

    assert result.reason is BookingRejection.INSUFFICIENT_FUNDS


def test_youth_crew_needs_all_ages_venue() -> None:
    kids = [make_performer(traits=("youth_crew",))]

    bar = _validate(_request(), performers=kids)
    hall = _validate(_request(), performers=kids, venues=[make_venue(all_ages=True)])

    assert bar.reason is BookingRejection.ALL_AGES_CONFLICT
    assert hall.accepted


def test_technical_requirements_need_gear_at_venue() -> None:
    picky = [
        make_performer(
            technical_requirements=(
                TechnicalRequirement(category=EquipmentCategory.LIGHTING),
            )
        )
    ]
    equipment = EquipmentInventory()

    before = _validate(_request(), performers=picky, equipment=equipment)
    equipment.rent("lights-basic", "venue-1")
    after = _validate(_request(), performers=picky, equipment=equipment)

    assert before.reason is BookingRejection.MISSING_REQUIREMENT
    assert after.accepted


def test_culture_gap_above_threshold_is_rejected() -> None:
    purist = [make_performer(authenticity=100)]

    too_far = _validate(
        _request(), performers=purist, venues=[make_venue(authenticity=40)]
    )
    on_edge = _validate(
        _request(), performers=purist, venues=[make_venue(authenticity=50)]
    )

    assert too_far.reason is BookingRejection.CULTURE_MISMATCH
    assert on_edge.accepted


def test_booking_cost_scales_with_difficulty() -> None:
    lineup = [make_performer("a"), make_performer("b")]
    config = SimulationConfiguration()

    assert booking_cost(lineup, difficulty(0, 0, 0), config) == 100
    assert booking_cost(lineup, difficulty(50, 300, 200), config) == 140
