"""High-level orchestration helpers connecting game sessions to external callers.

This module exposes a thin façade that the API layer can use to manage game
sessions. It owns the live sessions, serialises turns and player actions per
session and keeps the snapshot and report stores up to date.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Mapping  # noqa: TC003
from contextlib import contextmanager
from typing import Any
from uuid import uuid4

from basement_backend.game_logic.configuration import (
    SessionOverrides,
    build_session_configuration,
)
from basement_backend.game_logic.factions import DEFAULT_FACTIONS, FactionGraph
from basement_backend.game_logic.persistence import (
    GameStateSnapshot,
    InMemorySnapshotStore,
    InMemoryTurnReportStore,
    SnapshotStore,
    TurnReportStore,
)
from basement_backend.game_logic.phases import TurnReport  # noqa: TC001
from basement_backend.game_logic.session import GameSession, session_from_payload
from basement_backend.game_logic.state import Performer, Venue  # noqa: TC001

logger = logging.getLogger(__name__)


class SessionNotInitializedError(RuntimeError):
    """Raised when orchestration is requested for an unknown session."""


class SessionOrchestrator:
    """Coordinate game sessions for the API layer.

    API-facing code can create a session, look it up to perform player
    actions, advance it one turn and move it in and out of snapshots without
    touching the stores directly.
    """

    def __init__(
        self,
        snapshot_store: SnapshotStore | None = None,
        report_store: TurnReportStore | None = None,
    ) -> None:
        self._snapshot_store = snapshot_store or InMemorySnapshotStore()
        self._report_store = report_store or InMemoryTurnReportStore()
        self._sessions: dict[str, GameSession] = {}
        self._locks: dict[str, threading.Lock] = {}

    def create_session(
        self,
        *,
        performers: Iterable[Performer] = (),
        venues: Iterable[Venue] = (),
        controlled_venues: Mapping[str, Iterable[str]] | None = None,
        overrides: SessionOverrides | None = None,
    ) -> str:
        """Start a new session and return its identifier."""
        known = {faction.identifier for faction in DEFAULT_FACTIONS}
        factions = FactionGraph(
            controlled_venues={
                faction_id: venue_ids
                for faction_id, venue_ids in (controlled_venues or {}).items()
                if faction_id in known
            }
        )
        session = GameSession(
            build_session_configuration(overrides),
            performers=performers,
            venues=venues,
            factions=factions,
        )
        return self._register(session)

    def get_session(self, session_id: str) -> GameSession:
        """Return the live session called *session_id*."""
        session = self._sessions.get(session_id)
        if session is None:
            msg = f"Session '{session_id}' has not been initialized."
            raise SessionNotInitializedError(msg)
        return session

    def session_ids(self) -> tuple[str, ...]:
        """Return the identifiers of all live sessions."""
        return tuple(self._sessions)

    @contextmanager
    def locked_session(self, session_id: str) -> Iterator[GameSession]:
        """Hold the session's lock while the caller reads or mutates it.

        Player actions go through here so they never interleave with a turn
        being processed.
        """
        session = self.get_session(session_id)
        with self._locks[session_id]:
            yield session

    def process_turn(self, session_id: str) -> TurnReport:
        """Advance *session_id* by one turn and persist the result."""
        session = self.get_session(session_id)
        with self._locks[session_id]:
            report = session.process_turn()
            self._snapshot_store.save_snapshot(session_id, session.snapshot())
            self._report_store.append_report(session_id, report)
        return report

    def reports(self, session_id: str) -> tuple[TurnReport, ...]:
        """Return every stored turn report for *session_id*."""
        self.get_session(session_id)
        return self._report_store.fetch_reports(session_id)

    def export_snapshot(self, session_id: str) -> GameStateSnapshot:
        """Capture and store the current state of *session_id*."""
        session = self.get_session(session_id)
        with self._locks[session_id]:
            snapshot = session.snapshot()
            self._snapshot_store.save_snapshot(session_id, snapshot)
        return snapshot

    def import_snapshot(self, payload: Mapping[str, Any]) -> str:
        """Load a snapshot payload into a new session and return its id."""
        return self._register(session_from_payload(payload))

    def restore_session(self, session_id: str) -> GameSession:
        """Rebuild *session_id* from its last stored snapshot."""
        snapshot = self._snapshot_store.load_snapshot(session_id)
        if snapshot is None:
            msg = f"Session '{session_id}' has not been initialized."
            raise SessionNotInitializedError(msg)
        session = GameSession.from_snapshot(snapshot)
        self._sessions[session_id] = session
        self._locks.setdefault(session_id, threading.Lock())
        return session

    def close_session(self, session_id: str) -> None:
        """Forget the live session; stored snapshots are kept."""
        self.get_session(session_id)
        del self._sessions[session_id]
        self._locks.pop(session_id, None)

    def _register(self, session: GameSession) -> str:
        session_id = uuid4().hex
        self._sessions[session_id] = session
        self._locks[session_id] = threading.Lock()
        self._snapshot_store.save_snapshot(session_id, session.snapshot())
        logger.info("Session %s started at turn %s", session_id, session.turn)
        return session_id


__all__ = ["SessionNotInitializedError", "SessionOrchestrator"]
