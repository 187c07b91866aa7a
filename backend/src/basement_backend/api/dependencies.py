"""Dependency providers for FastAPI routers."""

from __future__ import annotations

from collections.abc import Iterator  # noqa: TC003

from fastapi import Depends, HTTPException, status

from basement_backend.game_logic.orchestration import (
    SessionNotInitializedError,
    SessionOrchestrator,
)
from basement_backend.game_logic.session import GameSession  # noqa: TC001

_orchestrator = SessionOrchestrator()


def get_orchestrator() -> SessionOrchestrator:
    """Return the shared :class:`SessionOrchestrator` instance."""
    return _orchestrator


def get_game_session(
    session_id: str,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> Iterator[GameSession]:
    """Yield the live session named in the path, locked for the whole request."""
    try:
        with orchestrator.locked_session(session_id) as session:
            yield session
    except SessionNotInitializedError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        ) from exc


__all__ = ["get_game_session", "get_orchestrator"]
