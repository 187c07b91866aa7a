"""Event logging primitives shared across the backend."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class LoggedEvent(BaseModel):
    """Represents a single immutable log entry produced while processing a turn."""

    model_config = ConfigDict(frozen=True)

    turn: int = Field(..., ge=0)
    event_type: str = Field(..., min_length=1)
    message: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


__all__ = ["LoggedEvent"]
