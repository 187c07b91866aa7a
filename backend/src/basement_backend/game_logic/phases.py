"""Turn phase definitions and the report returned after every turn."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from basement_backend.game_logic.day_jobs import DayJobResult
from basement_backend.game_logic.factions import FactionEvent
from basement_backend.game_logic.resolver import PerformanceOutcome
from basement_backend.game_logic.state import PlayerResources
from basement_backend.shared.events import LoggedEvent


class TurnPhase(StrEnum):
    """Enumeration of the strict phases of a turn."""

    COLLECT_DUE = "collect_due"
    RESOLVE = "resolve"
    RECURRING_COSTS = "recurring_costs"
    PASSIVE_DECAY = "passive_decay"
    ADVANCE = "advance"
    REPORT = "report"


TURN_PHASE_SEQUENCE: tuple[TurnPhase, ...] = (
    TurnPhase.COLLECT_DUE,
    TurnPhase.RESOLVE,
    TurnPhase.RECURRING_COSTS,
    TurnPhase.PASSIVE_DECAY,
    TurnPhase.ADVANCE,
    TurnPhase.REPORT,
)


class PhaseJournalEntry(BaseModel):
    """Structured action log entry for a phase."""

    turn: int
    phase: TurnPhase
    message: str
    payload: dict[str, Any] = Field(default_factory=dict)


class RecurringCosts(BaseModel):
    """Per-turn bills charged whether or not any show happened."""

    rent: int = Field(default=0, ge=0)
    upkeep: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        """Return the full amount charged."""
        return self.rent + self.upkeep


class TurnReport(BaseModel):
    """Result payload published once a turn finishes."""

    turn: int
    completed_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    outcomes: list[PerformanceOutcome] = Field(default_factory=list)
    recurring_costs: RecurringCosts = Field(default_factory=RecurringCosts)
    reputation_decay: int = 0
    passive_events: list[LoggedEvent] = Field(default_factory=list)
    day_job: DayJobResult | None = None
    milestone: str | None = None
    faction_events: list[FactionEvent] = Field(default_factory=list)
    discoveries: list[str] = Field(default_factory=list)
    resources: PlayerResources
    journal: list[PhaseJournalEntry] = Field(default_factory=list)

    @property
    def total_revenue(self) -> int:
        """Return the money brought in by this turn's shows."""
        return sum(outcome.revenue for outcome in self.outcomes)


__all__ = [
    "TURN_PHASE_SEQUENCE",
    "PhaseJournalEntry",
    "RecurringCosts",
    "TurnPhase",
    "TurnReport",
]
