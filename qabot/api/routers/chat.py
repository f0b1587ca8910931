"""Chat router: resolve utterances, inspect and forget sessions."""

import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from slowapi import Limiter
from slowapi.util import get_remote_address

from qabot.api.dependencies import get_engine
from qabot.api.schemas.chat import (
    ChatResponse,
    ErrorResponse,
    HistoryTurnSchema,
    SessionHistoryResponse,
)
from qabot.core.exceptions import SessionNotFoundError
from qabot.dialogue.engine import DialogueEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/chat", tags=["chat"])
limiter = Limiter(key_func=get_remote_address)

_CHAT_RATE_LIMIT = os.environ.get("CHAT_RATE_LIMIT", "30/minute")


@router.get(
    "",
    response_model=ChatResponse,
    response_model_exclude_unset=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(_CHAT_RATE_LIMIT)
async def chat(
    request: Request,
    q: Optional[str] = Query(default=None, description="User utterance"),
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
    engine: DialogueEngine = Depends(get_engine),
):
    # Missing parameters are reported by the engine as ClientInputError (400).
    result = await engine.respond(q, session_id)
    return ChatResponse(**result.to_dict())


@router.get("/sessions/{session_id}", response_model=SessionHistoryResponse)
async def get_session_history(
    session_id: str,
    engine: DialogueEngine = Depends(get_engine),
):
    session = engine.sessions.get(session_id)
    if session is None:
        raise SessionNotFoundError(f"Session {session_id!r} not found")
    return SessionHistoryResponse(
        session_id=session.session_id,
        context=session.context_id,
        history=[HistoryTurnSchema.model_validate(turn) for turn in list(session.history)],
    )


@router.delete("/sessions/{session_id}", status_code=204)
async def forget_session(
    session_id: str,
    engine: DialogueEngine = Depends(get_engine),
):
    if not engine.sessions.drop(session_id):
        raise SessionNotFoundError(f"Session {session_id!r} not found")
    logger.info("chat: session %s forgotten", session_id)
    return Response(status_code=204)
