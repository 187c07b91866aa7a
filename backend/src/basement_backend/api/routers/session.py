"""HTTP endpoints for single-player game sessions."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from basement_backend.api.dependencies import get_game_session, get_orchestrator
from basement_backend.api.models import (
    BookShowRequest,
    BookShowResponse,
    CodexResponse,
    CreateSessionRequest,
    ErrorResponse,
    FactionChoiceRequest,
    FactionChoiceResponse,
    FactionEventsResponse,
    FactionsResponse,
    PromoteShowRequest,
    PromoteShowResponse,
    SessionCreatedResponse,
    SessionStateResponse,
)
from basement_backend.game_logic.factions import (
    FactionEventResolvedError,
    UnknownFactionChoiceError,
    UnknownFactionEventError,
)
from basement_backend.game_logic.orchestration import (  # noqa: TC001
    SessionNotInitializedError,
    SessionOrchestrator,
)
from basement_backend.game_logic.persistence import GameStateSnapshot  # noqa: TC001
from basement_backend.game_logic.phases import TurnReport  # noqa: TC001
from basement_backend.game_logic.scene import STARTER_PERFORMERS, STARTER_VENUES
from basement_backend.game_logic.session import (  # noqa: TC001
    GameSession,
    MissingReferenceError,
)

router = APIRouter(
    prefix="/sessions",
    tags=["session"],
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)


def _state_response(session_id: str, session: GameSession) -> SessionStateResponse:
    return SessionStateResponse(
        session_id=session_id,
        turn=session.turn,
        resources=session.resources,
        performers=list(session.performers.values()),
        venues=list(session.venues.values()),
        schedule=session.schedule,
        day_job=session.day_job.job_type if session.day_job else None,
    )


@router.post(
    "",
    response_model=SessionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_session(
    payload: CreateSessionRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> SessionCreatedResponse:
    """Start a new session."""
    session_id = orchestrator.create_session(
        performers=payload.performers or STARTER_PERFORMERS,
        venues=payload.venues or STARTER_VENUES,
        controlled_venues=payload.controlled_venues,
        overrides=payload.overrides,
    )
    return SessionCreatedResponse(
        session_id=session_id, turn=orchestrator.get_session(session_id).turn
    )


@router.post(
    "/import",
    response_model=SessionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def import_session(
    payload: dict[str, Any] = Body(...),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> SessionCreatedResponse:
    """Load a snapshot payload into a new session."""
    session_id = orchestrator.import_snapshot(payload)
    return SessionCreatedResponse(
        session_id=session_id, turn=orchestrator.get_session(session_id).turn
    )


@router.get("/{session_id}", response_model=SessionStateResponse)
def get_state(
    session_id: str,
    session: GameSession = Depends(get_game_session),
) -> SessionStateResponse:
    """Return the player's resources, roster, venues and schedule."""
    return _state_response(session_id, session)


@router.post("/{session_id}/shows", response_model=BookShowResponse)
def book_show(
    payload: BookShowRequest,
    session: GameSession = Depends(get_game_session),
) -> BookShowResponse:
    """Schedule a show; refusals come back with ``accepted`` set to false."""
    result = session.schedule_performance(
        payload.performer_ids,
        payload.venue_id,
        payload.ticket_price,
        payload.lead_time,
    )
    return BookShowResponse.model_validate(result.model_dump())


@router.post(
    "/{session_id}/shows/{performance_id}/promote",
    response_model=PromoteShowResponse,
)
def promote_show(
    performance_id: str,
    payload: PromoteShowRequest,
    session: GameSession = Depends(get_game_session),
) -> PromoteShowResponse:
    """Spend money on hype for a booked show."""
    try:
        result = session.promote_performance(performance_id, payload.hype)
    except MissingReferenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Performance not found"
        ) from exc
    return PromoteShowResponse.model_validate(result.model_dump())


@router.post("/{session_id}/turns", response_model=TurnReport)
def process_turn(
    session_id: str,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> TurnReport:
    """Advance the session by one turn."""
    try:
        return orchestrator.process_turn(session_id)
    except SessionNotInitializedError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        ) from exc


@router.get("/{session_id}/turns", response_model=list[TurnReport])
def list_turns(
    session_id: str,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> list[TurnReport]:
    """Return every processed turn report."""
    try:
        return list(orchestrator.reports(session_id))
    except SessionNotInitializedError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        ) from exc


@router.get("/{session_id}/factions", response_model=FactionsResponse)
def list_factions(
    session: GameSession = Depends(get_game_session),
) -> FactionsResponse:
    """Return factions with standings, members and relationships."""
    return FactionsResponse(factions=session.factions.all_faction_data())


@router.get("/{session_id}/factions/events", response_model=FactionEventsResponse)
def list_faction_events(
    session: GameSession = Depends(get_game_session),
) -> FactionEventsResponse:
    """Return faction events still waiting for a decision."""
    return FactionEventsResponse(events=session.factions.pending_events())


@router.post(
    "/{session_id}/factions/events/{event_id}/choices",
    response_model=FactionChoiceResponse,
)
def choose_faction_option(
    event_id: str,
    payload: FactionChoiceRequest,
    session: GameSession = Depends(get_game_session),
) -> FactionChoiceResponse:
    """Resolve a faction event with the chosen option."""
    try:
        choice = session.apply_faction_choice(event_id, payload.choice_id)
    except FactionEventResolvedError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Event already resolved"
        ) from exc
    except UnknownFactionEventError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Event not found"
        ) from exc
    except UnknownFactionChoiceError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Choice not found"
        ) from exc
    return FactionChoiceResponse(choice=choice, resources=session.resources)


@router.get("/{session_id}/codex", response_model=CodexResponse)
def get_codex(
    session: GameSession = Depends(get_game_session),
) -> CodexResponse:
    """Return discovered synergies and collection progress."""
    engine = session.synergies
    return CodexResponse(
        discovered=engine.discovered_synergies(),
        undiscovered_count=engine.undiscovered_count(),
        progress=engine.codex_progress(),
        unlocked_content=list(engine.unlocked_content),
    )


@router.get("/{session_id}/snapshot", response_model=GameStateSnapshot)
def export_snapshot(
    session_id: str,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> GameStateSnapshot:
    """Return a versioned snapshot of the session."""
    try:
        return orchestrator.export_snapshot(session_id)
    except SessionNotInitializedError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        ) from exc


__all__ = ["router"]
