"""DialogueService: build a fully-wired DialogueEngine from the app config."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from qabot.config import AppConfig
from qabot.dialogue.engine import DialogueEngine
from qabot.dialogue.sessions import SessionManager
from qabot.knowledge.loader import load_knowledge_base

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)


class DialogueService:
    """Factory that loads the knowledge base and constructs a ready-to-use
    ``DialogueEngine``. Any ConfigLoadError propagates: the caller must not
    start serving without a knowledge base.
    """

    @staticmethod
    def build(
        config: AppConfig,
        *,
        http_client: Optional["httpx.AsyncClient"] = None,
    ) -> DialogueEngine:
        kb = load_knowledge_base(config.kb_path)
        sessions = SessionManager(
            max_sessions=config.max_sessions,
            ttl_seconds=config.session_ttl_seconds,
            max_history=config.max_history,
        )
        engine = DialogueEngine(kb, sessions, http_client=http_client)

        logger.info(
            "DialogueService: engine ready with %d Q&A items, %d contexts, "
            "languages=%s, tokenizer=%s, api_fallback=%s",
            len(kb.qa_items),
            len(kb.contexts),
            sorted(kb.languages),
            kb.tokenizer.kind.value,
            kb.settings.api_fallback is not None,
        )
        return engine
