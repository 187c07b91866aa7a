"""Pydantic models for the gameplay HTTP contract."""

# ruff: noqa: TC001

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from basement_backend.game_logic.booking import BookingRejection
from basement_backend.game_logic.configuration import SessionOverrides
from basement_backend.game_logic.day_jobs import DayJobType
from basement_backend.game_logic.factions import FactionChoice, FactionEvent
from basement_backend.game_logic.state import (
    Performer,
    PlayerResources,
    ScheduledPerformance,
    Venue,
)
from basement_backend.game_logic.synergies import CodexEntry
from basement_backend.shared.enums import SynergyTier


class CreateSessionRequest(BaseModel):
    """Start a session; an empty roster or venue list uses the starter scene."""

    performers: list[Performer] = Field(default_factory=list)
    venues: list[Venue] = Field(default_factory=list)
    controlled_venues: dict[str, list[str]] = Field(default_factory=dict)
    overrides: SessionOverrides | None = None


class SessionCreatedResponse(BaseModel):
    """Identifier of a freshly created or imported session."""

    session_id: str
    turn: int


class SessionStateResponse(BaseModel):
    """Current player-facing state of a session."""

    session_id: str
    turn: int
    resources: PlayerResources
    performers: list[Performer]
    venues: list[Venue]
    schedule: list[ScheduledPerformance]
    day_job: DayJobType | None = None


class BookShowRequest(BaseModel):
    """Request to schedule a show."""

    performer_ids: list[str] = Field(..., min_length=1)
    venue_id: str
    ticket_price: int
    lead_time: int


class BookShowResponse(BaseModel):
    """Result of a booking request."""

    accepted: bool
    performance: ScheduledPerformance | None = None
    cost: int = 0
    reason: BookingRejection | None = None
    message: str


class PromoteShowRequest(BaseModel):
    """Request to buy hype for a booked show."""

    hype: int = Field(..., gt=0, le=100)


class PromoteShowResponse(BaseModel):
    """Result of a promotion request."""

    success: bool
    performance: ScheduledPerformance | None = None
    cost: int = 0
    error: str | None = None


class FactionChoiceRequest(BaseModel):
    """Choice picked by the player for a pending faction event."""

    choice_id: str


class FactionChoiceResponse(BaseModel):
    """Applied choice plus the resulting resources."""

    choice: FactionChoice
    resources: PlayerResources


class FactionEventsResponse(BaseModel):
    """Pending faction events waiting for a decision."""

    events: list[FactionEvent]


class FactionsResponse(BaseModel):
    """Read-only faction overview."""

    factions: list[dict[str, Any]]


class CodexResponse(BaseModel):
    """Discovered synergies and collection progress."""

    discovered: list[CodexEntry]
    undiscovered_count: int
    progress: dict[SynergyTier, tuple[int, int]]
    unlocked_content: list[str]


class ErrorResponse(BaseModel):
    """Error payload returned for failed requests."""

    detail: str


__all__ = [
    "BookShowRequest",
    "BookShowResponse",
    "CodexResponse",
    "CreateSessionRequest",
    "ErrorResponse",
    "FactionChoiceRequest",
    "FactionChoiceResponse",
    "FactionEventsResponse",
    "FactionsResponse",
    "PromoteShowRequest",
    "PromoteShowResponse",
    "SessionCreatedResponse",
    "SessionStateResponse",
]
