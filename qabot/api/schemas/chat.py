"""Pydantic v2 schemas for the Chat API."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel


class ChatResponse(BaseModel):
    """Resolved utterance. Optional fields are omitted when the tier has no value
    for them; ``context`` is always present (null when no context is active)."""

    answer: str
    intent: Optional[str] = None
    score: Optional[float] = None
    source: str
    context: Optional[str] = None
    language: str
    entities: Optional[Dict[str, str]] = None


class ErrorResponse(BaseModel):
    error: str
    code: str


class HistoryTurnSchema(BaseModel):
    user: str
    bot: str

    model_config = {"from_attributes": True}


class SessionHistoryResponse(BaseModel):
    session_id: str
    context: Optional[str] = None
    history: List[HistoryTurnSchema]
