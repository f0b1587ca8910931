"""FastAPI dependency providers."""
from __future__ import annotations

from fastapi import HTTPException, Request, status

from qabot.dialogue.engine import DialogueEngine


def get_engine(request: Request) -> DialogueEngine:
    """The DialogueEngine built at startup and kept on app.state."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dialogue engine not initialised. Check server startup logs.",
        )
    return engine
