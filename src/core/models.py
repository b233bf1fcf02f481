"""
Pydantic v2 request / response models used across the API layer.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class ChatRole(StrEnum):
    """Author of a chat message."""

    user = "user"
    model = "model"


class HistoryEntry(BaseModel):
    """One trimmed history item sent alongside the audio upload."""

    role: ChatRole
    text: str = ""


class ChatResponse(BaseModel):
    """POST /api/chat success body."""

    text: str


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    error: str
