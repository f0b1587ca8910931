"""qabot FastAPI application entry point.

Start with:
    uvicorn qabot.api.main:app --reload --host 0.0.0.0 --port 8000

The knowledge base is loaded once at startup (QABOT_KB_PATH, default data.xml).
A knowledge base that fails to load or validate aborts startup.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from qabot.api.routers import chat
from qabot.config import AppConfig, load_app_config
from qabot.core.exceptions import GENERIC_SERVER_MESSAGE, ChatbotError
from qabot.core.logger import configure
from qabot.dialogue.engine import DialogueEngine
from qabot.services import DialogueService

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[AppConfig] = None,
    engine: Optional[DialogueEngine] = None,
) -> FastAPI:
    """Build the application. An injected *engine* skips knowledge base loading."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ── Startup ──────────────────────────────────────────────────
        configure()
        http_client: Optional[httpx.AsyncClient] = None
        if engine is not None:
            app.state.engine = engine
            logger.info("API: using injected dialogue engine")
        else:
            app_config = config or load_app_config()
            http_client = httpx.AsyncClient()
            try:
                app.state.engine = DialogueService.build(app_config, http_client=http_client)
            except ChatbotError as exc:
                await http_client.aclose()
                logger.critical("API: cannot start without a knowledge base: %s", exc.to_dict())
                raise
            logger.info("API: knowledge base loaded from %s", app_config.kb_path)

        yield

        # ── Shutdown ─────────────────────────────────────────────────
        if http_client is not None:
            await http_client.aclose()
            logger.info("API: HTTP client closed")

    app = FastAPI(
        title="qabot API",
        version="1.0.0",
        description="Single-turn dialogue resolution over a local knowledge base.",
        lifespan=lifespan,
    )
    app.state.engine = None

    # Rate limiter: per-route limit is configurable via CHAT_RATE_LIMIT (default 30/minute)
    app.state.limiter = chat.limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    origins = (config or load_app_config()).cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ChatbotError)
    async def chatbot_error_handler(request: Request, exc: ChatbotError):
        if not exc.is_client_error:
            logger.error("API: %s on %s: %s", exc.code, request.url.path, exc.to_dict())
        return JSONResponse(status_code=exc.http_status, content=exc.public_body())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("API: unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": GENERIC_SERVER_MESSAGE, "code": "INTERNAL_ERROR"},
        )

    app.include_router(chat.router, prefix="/api/v1")

    @app.get("/health", tags=["health"])
    async def health(request: Request):
        current = getattr(request.app.state, "engine", None)
        if current is None:
            return {"status": "starting"}
        return {"status": "ok", "knowledge_base": current.knowledge_base.stats()}

    return app


app = create_app()
