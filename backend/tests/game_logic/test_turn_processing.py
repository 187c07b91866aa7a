"""Tests for the game session and its turn pipeline."""

from __future__ import annotations

from typing import Any

import pytest

from basement_backend.game_logic.booking import BookingRejection
from basement_backend.game_logic.day_jobs import DayJobType
from basement_backend.game_logic.factions import (
    FactionEventKind,
    FactionEventResolvedError,
    FactionGraph,
)
from basement_backend.game_logic.phases import TURN_PHASE_SEQUENCE, TurnPhase
from basement_backend.game_logic.resolver import ResolutionContext
from basement_backend.game_logic.session import GameSession, MissingReferenceError
from basement_backend.game_logic.state import PlayerResources
from basement_backend.game_logic.synergies import SynergyEngine
from basement_backend.shared.rng import DeterministicRandomService
from scene_factories import ScriptedRandom, make_performer, make_venue


def _session(**overrides: Any) -> GameSession:
    base: dict[str, Any] = {
        "performers": [make_performer()],
        "venues": [make_venue()],
        "rng": ScriptedRandom(),
    }
    base.update(overrides)
    return GameSession(**base)


def test_new_session_starts_at_turn_one_with_configured_money() -> None:
    session = _session()

    assert session.turn == 1
    assert session.resources.money == 1_000
    assert session.schedule == []


def test_booking_charges_fee_and_previews_attendance() -> None:
    session = _session()

    result = session.schedule_performance(["band-1"], "venue-1", 10, 2)

    assert result.accepted
    assert session.resources.money == 950
    (performance,) = session.schedule
    assert performance.identifier == "show-1"
    assert performance.expected_attendance > 0
    assert result.performance == performance


def test_rejected_booking_costs_nothing() -> None:
    session = _session()

    result = session.schedule_performance(["band-1"], "venue-1", 10, 0)

    assert result.reason is BookingRejection.INVALID_REQUEST
    assert session.resources.money == 1_000
    assert session.schedule == []


def test_turn_without_shows_still_charges_rent_and_decay() -> None:
    session = _session(
        venues=[make_venue(rent=100)],
        turn=50,
        resources=PlayerResources(money=1_000, reputation=10),
    )

    report = session.process_turn()

    assert report.outcomes == []
    assert report.recurring_costs.rent == 150
    assert report.reputation_decay == 2
    assert session.resources.money == 850
    assert session.resources.reputation == 8
    assert session.turn == 51


def test_show_resolves_only_when_due() -> None:
    session = _session()
    session.schedule_performance(["band-1"], "venue-1", 10, 2)

    first = session.process_turn()

    assert first.outcomes == []
    assert session.schedule[0].turns_until_show == 1

    money_before = session.resources.money
    second = session.process_turn()

    (outcome,) = second.outcomes
    assert outcome.performance_id == "show-1"
    assert outcome.attendance > 0
    assert session.schedule == []
    assert session.resources.money == money_before + outcome.money_change
    assert second.total_revenue == outcome.revenue


def test_waiting_shows_are_previewed_for_the_upcoming_turn(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    session = _session()
    session.schedule_performance(["band-1"], "venue-1", 10, 3)
    previewed: list[ResolutionContext] = []
    preview = session._resolver.preview

    def recording_preview(
        lineup: Any, venue: Any, ticket_price: int, context: ResolutionContext
    ) -> int:
        previewed.append(context)
        return preview(lineup, venue, ticket_price, context)

    monkeypatch.setattr(session._resolver, "preview", recording_preview)

    report = session.process_turn()

    (context,) = previewed
    assert context.turn == 2
    assert context.reputation == report.resources.reputation
    assert context.stress == report.resources.stress
    assert session.schedule[0].expected_attendance > 0


def test_deleted_venue_fails_the_show_but_not_the_turn() -> None:
    session = _session(
        performers=[make_performer(), make_performer("band-2")],
        venues=[make_venue(), make_venue("venue-2")],
        resources=PlayerResources(money=1_000, reputation=20),
    )
    session.schedule_performance(["band-1"], "venue-1", 10, 1)
    session.schedule_performance(["band-2"], "venue-2", 10, 1)
    session.remove_venue("venue-1")
    money_before = session.resources.money

    report = session.process_turn()

    broken, intact = report.outcomes
    assert broken.failed
    assert broken.failure_reason == "Booked venue no longer exists"
    assert broken.money_change == 0
    assert intact.performance_id == "show-2"
    assert not intact.failed
    assert intact.attendance > 0
    assert intact.money_change > 0
    assert session.resources.money == (
        money_before + intact.money_change - report.recurring_costs.total
    )
    assert session.resources.reputation == 10 + intact.reputation_change
    assert session.schedule == []
    assert session.turn == 2


def test_later_show_sees_standing_changed_by_an_earlier_one() -> None:
    purists = [
        make_performer(
            identifier,
            authenticity=100,
            technical_skill=30,
            popularity=40,
            traits=("authentic", "anti-commercial"),
        )
        for identifier in ("purists-1", "purists-2")
    ]
    factions = FactionGraph(standings={"diy-purists": 48})
    session = _session(
        performers=purists,
        venues=[
            make_venue(identifier, authenticity=100, atmosphere=100)
            for identifier in ("venue-1", "venue-2")
        ],
        factions=factions,
        synergies=SynergyEngine([]),
    )
    session.schedule_performance(["purists-1"], "venue-1", 10, 1)
    session.schedule_performance(["purists-2"], "venue-2", 10, 1)

    first, second = session.process_turn().outcomes

    assert first.success
    assert second.success
    assert factions.standing("diy-purists") == 58
    assert second.attendance == first.attendance
    assert second.ticket_revenue == pytest.approx(first.ticket_revenue * 0.85, abs=1)
    assert second.reputation_change > first.reputation_change


def test_removed_performer_fails_the_show() -> None:
    session = _session(performers=[make_performer(), make_performer("band-2")])
    session.schedule_performance(["band-1", "band-2"], "venue-1", 10, 1)
    session.remove_performer("band-2")

    (outcome,) = session.process_turn().outcomes

    assert outcome.failed
    assert outcome.failure_reason == "Booked performer no longer exists"


def test_removing_unknown_references_raises() -> None:
    session = _session()

    with pytest.raises(MissingReferenceError):
        session.remove_venue("nowhere")
    with pytest.raises(MissingReferenceError):
        session.remove_performer("nobody")


def test_phases_run_in_fixed_order() -> None:
    session = _session()
    session.schedule_performance(["band-1"], "venue-1", 10, 1)

    report = session.process_turn()

    phases = [entry.phase for entry in report.journal]
    order = [TURN_PHASE_SEQUENCE.index(phase) for phase in phases]
    assert order == sorted(order)
    assert set(phases) == set(TurnPhase)
    assert session.action_journal == report.journal


def test_run_phase_outside_a_turn_is_rejected() -> None:
    session = _session()

    with pytest.raises(RuntimeError):
        session.run_phase(TurnPhase.RESOLVE)


def test_milestone_is_reported_on_its_turn() -> None:
    session = _session(turn=10)

    report = session.process_turn()

    assert report.milestone is not None
    assert session.process_turn().milestone is None


def test_promotion_buys_capped_hype() -> None:
    session = _session(resources=PlayerResources(money=5_000))
    session.schedule_performance(["band-1"], "venue-1", 10, 3)
    baseline = session.schedule[0].expected_attendance

    first = session.promote_performance("show-1", 30)
    second = session.promote_performance("show-1", 100)
    third = session.promote_performance("show-1", 1)

    assert first.cost == 300
    assert first.performance is not None
    assert first.performance.expected_attendance >= baseline
    assert second.cost == 700
    assert session.schedule[0].hype == 100
    assert third.error == "Show is already fully hyped"
    assert session.resources.money == 5_000 - 50 - 300 - 700


def test_promotion_needs_money_and_a_known_show() -> None:
    session = _session(resources=PlayerResources(money=100))
    session.schedule_performance(["band-1"], "venue-1", 10, 3)

    assert session.promote_performance("show-1", 10).error == "Insufficient funds"
    with pytest.raises(MissingReferenceError):
        session.promote_performance("show-99", 10)


def test_cancel_removes_show_without_refund() -> None:
    session = _session()
    session.schedule_performance(["band-1"], "venue-1", 10, 3)

    cancelled = session.cancel_performance("show-1")

    assert cancelled.identifier == "show-1"
    assert session.schedule == []
    assert session.resources.money == 950


def test_day_job_pays_every_turn() -> None:
    session = _session()

    assert not session.take_day_job(DayJobType.SOUND_TECH)
    assert session.take_day_job(DayJobType.VENUE_STAFF)

    report = session.process_turn()

    assert report.day_job is not None
    assert report.day_job.money == 80
    assert session.resources.money == 1_080
    assert session.resources.stress == 8


def test_breakdown_drops_the_day_job() -> None:
    session = _session(resources=PlayerResources(money=1_000, stress=100))
    session.take_day_job(DayJobType.OFFICE_DRONE)

    report = session.process_turn()

    assert report.day_job is not None
    assert report.day_job.breakdown
    assert session.day_job is None
    assert session.resources.stress == 70


def test_quitting_a_job_relieves_stress() -> None:
    session = _session(resources=PlayerResources(money=1_000, stress=20))
    session.take_day_job(DayJobType.VENUE_STAFF)

    session.quit_day_job()

    assert session.day_job is None
    assert session.resources.stress == 15


def test_faction_choice_applies_resources_once() -> None:
    session = _session(factions=FactionGraph(standings={"diy-purists": 80}))

    report = session.process_turn()

    (event,) = report.faction_events
    assert event.kind is FactionEventKind.ALLIANCE
    session.apply_faction_choice(event.identifier, "accept")
    assert session.resources.reputation == 10
    assert session.resources.stress == 5
    with pytest.raises(FactionEventResolvedError):
        session.apply_faction_choice(event.identifier, "accept")
    assert session.resources.reputation == 10


def test_equipment_actions_charge_the_player() -> None:
    session = _session()

    bought = session.purchase_equipment("pa-basic")
    installed = session.install_equipment("pa-basic", "venue-1")
    too_expensive = session.purchase_equipment("recording-studio")

    assert bought.success
    assert installed.success
    assert not too_expensive.success
    assert session.resources.money == 500
    with pytest.raises(MissingReferenceError):
        session.rent_equipment("lights-basic", "nowhere")


def test_installed_gear_is_charged_upkeep() -> None:
    session = _session()
    session.purchase_equipment("pa-basic")

    report = session.process_turn()

    assert report.recurring_costs.upkeep == 10
    assert session.resources.money == 490


def test_same_seed_plays_out_identically() -> None:
    def play() -> tuple[PlayerResources, list[int]]:
        session = _session(
            performers=[make_performer(), make_performer("band-2", genre="metal")],
            rng=DeterministicRandomService(seed=99),
        )
        session.schedule_performance(["band-1"], "venue-1", 8, 1)
        session.schedule_performance(["band-2"], "venue-1", 12, 2)
        attendances: list[int] = []
        for _ in range(3):
            report = session.process_turn()
            attendances.extend(outcome.attendance for outcome in report.outcomes)
        return session.resources, attendances

    assert play() == play()


def test_snapshot_round_trip_preserves_state() -> None:
    session = _session(factions=FactionGraph(standings={"old-guard": 75}))
    session.schedule_performance(["band-1"], "venue-1", 10, 3)
    session.purchase_equipment("pa-basic")
    session.install_equipment("pa-basic", "venue-1")
    session.take_day_job(DayJobType.NON_PROFIT)
    session.process_turn()

    snapshot = session.snapshot()
    restored = GameSession.from_snapshot(snapshot)

    assert restored.snapshot() == snapshot
    assert restored.turn == 2
    assert restored.day_job is not None
    assert restored.factions.pending_events()
