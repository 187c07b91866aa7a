"""Tests for the session orchestrator."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import pytest

from basement_backend.game_logic.configuration import SessionOverrides
from basement_backend.game_logic.orchestration import (
    SessionNotInitializedError,
    SessionOrchestrator,
)
from basement_backend.game_logic.persistence import InMemorySnapshotStore
from scene_factories import make_performer, make_venue

if TYPE_CHECKING:
    from basement_backend.game_logic.booking import BookingResult
    from basement_backend.game_logic.session import TurnAccumulator


def _orchestrator_with_session(
    store: InMemorySnapshotStore | None = None,
) -> tuple[SessionOrchestrator, str]:
    orchestrator = SessionOrchestrator(snapshot_store=store)
    session_id = orchestrator.create_session(
        performers=[make_performer()],
        venues=[make_venue()],
    )
    return orchestrator, session_id


def test_create_session_registers_and_stores_snapshot() -> None:
    store = InMemorySnapshotStore()
    orchestrator, session_id = _orchestrator_with_session(store)

    assert orchestrator.session_ids() == (session_id,)
    assert orchestrator.get_session(session_id).turn == 1
    stored = store.load_snapshot(session_id)
    assert stored is not None
    assert stored.turn == 1


def test_overrides_and_controlled_venues_are_applied() -> None:
    orchestrator = SessionOrchestrator()

    session_id = orchestrator.create_session(
        venues=[make_venue()],
        controlled_venues={"diy-purists": ["venue-1"], "ghosts": ["venue-1"]},
        overrides=SessionOverrides(starting_money=5_000),
    )

    session = orchestrator.get_session(session_id)
    assert session.resources.money == 5_000
    assert session.factions.controls_venue("diy-purists", "venue-1")
    assert session.configuration.rng_seed == 1234


def test_process_turn_persists_snapshot_and_report() -> None:
    store = InMemorySnapshotStore()
    orchestrator, session_id = _orchestrator_with_session(store)

    report = orchestrator.process_turn(session_id)

    assert report.turn == 1
    assert orchestrator.reports(session_id) == (report,)
    stored = store.load_snapshot(session_id)
    assert stored is not None
    assert stored.turn == 2


def test_unknown_sessions_raise() -> None:
    orchestrator = SessionOrchestrator()

    with pytest.raises(SessionNotInitializedError):
        orchestrator.get_session("missing")
    with pytest.raises(SessionNotInitializedError):
        orchestrator.process_turn("missing")
    with pytest.raises(SessionNotInitializedError):
        orchestrator.restore_session("missing")
    with pytest.raises(SessionNotInitializedError):
        orchestrator.close_session("missing")


def test_export_then_import_creates_an_independent_session() -> None:
    orchestrator, session_id = _orchestrator_with_session()
    orchestrator.process_turn(session_id)

    payload = orchestrator.export_snapshot(session_id).model_dump(mode="json")
    copy_id = orchestrator.import_snapshot(payload)
    orchestrator.process_turn(copy_id)

    assert copy_id != session_id
    assert orchestrator.get_session(copy_id).turn == 3
    assert orchestrator.get_session(session_id).turn == 2


def test_closed_session_can_be_restored_from_its_snapshot() -> None:
    orchestrator, session_id = _orchestrator_with_session()
    orchestrator.process_turn(session_id)

    orchestrator.close_session(session_id)
    with pytest.raises(SessionNotInitializedError):
        orchestrator.get_session(session_id)

    restored = orchestrator.restore_session(session_id)

    assert restored.turn == 2
    assert orchestrator.process_turn(session_id).turn == 2


def test_player_actions_wait_for_a_turn_in_progress(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    orchestrator, session_id = _orchestrator_with_session()
    session = orchestrator.get_session(session_id)
    charging = threading.Event()
    resume = threading.Event()
    charge_recurring_costs = session._charge_recurring_costs

    def slow_charge(acc: TurnAccumulator) -> None:
        charging.set()
        resume.wait(timeout=5)
        charge_recurring_costs(acc)

    monkeypatch.setattr(session, "_charge_recurring_costs", slow_charge)
    booked: list[BookingResult] = []

    def book() -> None:
        with orchestrator.locked_session(session_id) as locked:
            booked.append(
                locked.schedule_performance(["band-1"], "venue-1", 10, 2)
            )

    turn = threading.Thread(target=orchestrator.process_turn, args=(session_id,))
    turn.start()
    assert charging.wait(timeout=5)
    booking = threading.Thread(target=book)
    booking.start()
    booking.join(timeout=0.2)

    assert booking.is_alive()
    assert booked == []

    resume.set()
    turn.join(timeout=5)
    booking.join(timeout=5)

    (report,) = orchestrator.reports(session_id)
    (result,) = booked
    assert result.accepted
    assert result.cost > 0
    assert session.resources.money == report.resources.money - result.cost
    assert [show.identifier for show in session.schedule] == ["show-1"]


def test_locked_session_rejects_unknown_sessions() -> None:
    orchestrator = SessionOrchestrator()

    with (
        pytest.raises(SessionNotInitializedError),
        orchestrator.locked_session("missing"),
    ):
        pass
