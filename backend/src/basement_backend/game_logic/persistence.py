"""Persistence abstractions for game state snapshots and turn reports.

Snapshots are versioned. Loading a snapshot written by another version logs a
warning and keeps going: every section that no longer validates is dropped
back to its default instead of failing the whole load.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping  # noqa: TC003
from typing import Any, Protocol

from pydantic import BaseModel, Field, ValidationError
from pydantic.config import ConfigDict

from basement_backend.game_logic.configuration import SimulationConfiguration
from basement_backend.game_logic.day_jobs import DayJobType  # noqa: TC001
from basement_backend.game_logic.factions import FactionEvent  # noqa: TC001
from basement_backend.game_logic.phases import TurnReport  # noqa: TC001
from basement_backend.game_logic.state import (
    Performer,
    PlayerResources,
    ScheduledPerformance,
    Venue,
)

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0.0"


class GameStateSnapshot(BaseModel):
    """Immutable snapshot representing the state of a running game session."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    version: str = SNAPSHOT_VERSION
    turn: int = Field(default=1, ge=1)
    configuration: SimulationConfiguration = Field(
        default_factory=SimulationConfiguration
    )
    resources: PlayerResources = Field(default_factory=PlayerResources)
    performers: tuple[Performer, ...] = Field(default_factory=tuple)
    venues: tuple[Venue, ...] = Field(default_factory=tuple)
    schedule: tuple[ScheduledPerformance, ...] = Field(default_factory=tuple)
    faction_standings: dict[str, int] = Field(default_factory=dict)
    controlled_venues: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    faction_events: tuple[FactionEvent, ...] = Field(default_factory=tuple)
    synergy_trigger_counts: dict[str, int] = Field(default_factory=dict)
    unlocked_content: tuple[str, ...] = Field(default_factory=tuple)
    equipment_conditions: dict[str, float] = Field(default_factory=dict)
    equipment_installations: dict[str, str] = Field(default_factory=dict)
    day_job: DayJobType | None = None
    turns_worked: int = Field(default=0, ge=0)
    performance_counter: int = Field(default=0, ge=0)


def load_snapshot_payload(payload: Mapping[str, Any]) -> GameStateSnapshot:
    """Validate a raw snapshot payload section by section.

    Sections that fail validation fall back to their defaults; unknown keys
    are ignored. The returned snapshot always carries the current version.
    """
    version = payload.get("version")
    if version != SNAPSHOT_VERSION:
        logger.warning(
            "Snapshot version %r does not match %s; loading what validates",
            version,
            SNAPSHOT_VERSION,
        )

    sections: dict[str, Any] = {}
    for name in GameStateSnapshot.model_fields:
        if name == "version" or name not in payload:
            continue
        try:
            candidate = GameStateSnapshot.model_validate({name: payload[name]})
        except ValidationError as exc:
            logger.warning(
                "Dropping invalid snapshot section '%s': %s",
                name,
                exc.error_count(),
            )
            continue
        sections[name] = getattr(candidate, name)
    return GameStateSnapshot(**sections)


class SnapshotStore(Protocol):
    """Protocol describing how game state snapshots are persisted."""

    def save_snapshot(self, session_id: str, snapshot: GameStateSnapshot) -> None:
        """Persist *snapshot* for *session_id*, replacing any previous value."""

    def load_snapshot(self, session_id: str) -> GameStateSnapshot | None:
        """Return the latest stored snapshot for *session_id* or ``None``."""


class TurnReportStore(Protocol):
    """Protocol describing how turn reports are persisted."""

    def append_report(self, session_id: str, report: TurnReport) -> None:
        """Persist *report* alongside existing reports for *session_id*."""

    def fetch_reports(self, session_id: str) -> tuple[TurnReport, ...]:
        """Return all stored reports for *session_id* ordered by turn."""


class InMemorySnapshotStore:
    """Trivial in-memory implementation of :class:`SnapshotStore`."""

    def __init__(self) -> None:
        self._snapshots: dict[str, GameStateSnapshot] = {}

    def save_snapshot(self, session_id: str, snapshot: GameStateSnapshot) -> None:
        """Store *snapshot* keyed by *session_id*."""
        self._snapshots[session_id] = snapshot

    def load_snapshot(self, session_id: str) -> GameStateSnapshot | None:
        """Return the stored snapshot for *session_id* if available."""
        return self._snapshots.get(session_id)


class InMemoryTurnReportStore:
    """Trivial in-memory implementation of :class:`TurnReportStore`."""

    def __init__(self) -> None:
        self._reports: dict[str, list[TurnReport]] = {}

    def append_report(self, session_id: str, report: TurnReport) -> None:
        """Append *report* to the stored sequence for *session_id*."""
        self._reports.setdefault(session_id, []).append(report)

    def fetch_reports(self, session_id: str) -> tuple[TurnReport, ...]:
        """Return all reports stored for *session_id*."""
        return tuple(self._reports.get(session_id, ()))


__all__ = [
    "SNAPSHOT_VERSION",
    "GameStateSnapshot",
    "InMemorySnapshotStore",
    "InMemoryTurnReportStore",
    "SnapshotStore",
    "TurnReportStore",
    "load_snapshot_payload",
]
