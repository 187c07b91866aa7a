"""Models used for API request and response payloads."""

from basement_backend.api.models.session import (
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
