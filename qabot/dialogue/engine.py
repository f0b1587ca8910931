"""DialogueEngine: resolves one utterance for one session.

Resolution order:
  1. ContextResolver: only the active context's items, relaxed search cut-off
  2. IntentClassifier + AnswerRanker: the language's full index, only when
     the context produced no candidate
  3. The chosen candidate must score under its item threshold (or the
     knowledge base default); otherwise FallbackChain: external API, static
     fallback item, unresolved answer
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from qabot.core.exceptions import ChatbotError, ClientInputError, PipelineError
from qabot.dialogue.composer import ResponseComposer
from qabot.dialogue.context_resolver import ContextResolver
from qabot.dialogue.entities import EntityRecognizer
from qabot.dialogue.fallback import FallbackChain
from qabot.dialogue.language import LanguageDetector
from qabot.dialogue.ranking import AnswerRanker, IntentClassifier, is_accepted
from qabot.dialogue.sessions import Session, SessionManager
from qabot.dialogue.types import DialogueResult, Entities, RankedMatch, ResponseSource
from qabot.knowledge.base import KnowledgeBase

logger = logging.getLogger(__name__)


class DialogueEngine:
    """Orchestrates the pipeline around an immutable knowledge base.

    Collaborators are built from the knowledge base unless injected. The
    engine keeps no per-request state; everything conversational lives in
    the ``SessionManager``.
    """

    def __init__(
        self,
        kb: KnowledgeBase,
        sessions: SessionManager,
        *,
        detector: Optional[LanguageDetector] = None,
        composer: Optional[ResponseComposer] = None,
        fallback: Optional[FallbackChain] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._kb = kb
        self._sessions = sessions
        self._detector = detector or LanguageDetector(kb.settings, kb.languages)
        self._composer = composer or ResponseComposer()
        self._recognizer = EntityRecognizer(kb.entities)
        self._context_resolver = ContextResolver(kb.contexts)
        self._classifier = IntentClassifier(kb.intents, threshold=kb.settings.default_threshold)
        self._ranker = AnswerRanker(kb)
        self._fallback = fallback or FallbackChain.for_knowledge_base(
            kb, self._composer, client=http_client,
        )

    @property
    def knowledge_base(self) -> KnowledgeBase:
        return self._kb

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    async def respond(self, utterance: Optional[str], session_id: Optional[str]) -> DialogueResult:
        """Resolve *utterance* for *session_id*.

        Raises ClientInputError (before any session is touched) when either
        argument is missing or blank, and PipelineError for unexpected failures.
        """
        if not utterance or not utterance.strip() or not session_id or not session_id.strip():
            raise ClientInputError(
                "Parameters 'q' (utterance) and 'sessionId' are required.",
                details={"q": bool(utterance and utterance.strip()),
                         "sessionId": bool(session_id and session_id.strip())},
            )
        utterance, session_id = utterance.strip(), session_id.strip()
        try:
            return await self._respond(utterance, session_id)
        except ChatbotError:
            raise
        except Exception as exc:
            logger.error(
                "DialogueEngine: pipeline failure: %s", exc,
                exc_info=True, extra={"session_id": session_id},
            )
            raise PipelineError("Failed to resolve the utterance", cause=exc) from exc

    async def _respond(self, utterance: str, session_id: str) -> DialogueResult:
        language = self._detector.detect(utterance)
        tokens = self._kb.tokenizer.tokenize(utterance)
        entities = self._recognizer.recognize(tokens)

        async with self._sessions.lease(session_id) as session:
            match = self._match(utterance, language, session)
            if match is not None and is_accepted(match, self._kb.settings.default_threshold):
                return self._answer_locally(session, utterance, language, match, entities)
            if match is not None:
                logger.debug(
                    "DialogueEngine: best candidate %s rejected (score %.4f)", match.item.id, match.score,
                    extra={"session_id": session_id},
                )
            return await self._answer_fallback(session, utterance, language)

    def _match(self, utterance: str, language: str, session: Session) -> Optional[RankedMatch]:
        # A context hit replaces general search, even when it is later rejected.
        context_match = self._context_resolver.resolve(utterance, session.context_id)
        if context_match is not None:
            return context_match
        intent = self._classifier.classify(utterance)
        return self._ranker.rank(utterance, language, intent)

    def _answer_locally(
        self,
        session: Session,
        utterance: str,
        language: str,
        match: RankedMatch,
        entities: Entities,
    ) -> DialogueResult:
        answer = self._composer.compose(match.item, entities)
        self._sessions.set_context(session, match.item.next_context_id)
        self._sessions.append_history(session, utterance, answer)
        logger.debug(
            "DialogueEngine: answered by %s", match.item.id,
            extra={"session_id": session.session_id, "source": ResponseSource.LOCAL_QA.value,
                   "language": language, "intent": match.item.intent, "score": match.score},
        )
        return DialogueResult(
            answer=answer,
            source=ResponseSource.LOCAL_QA,
            language=language,
            context=session.context_id,
            intent=match.item.intent,
            score=match.score,
            entities=entities,
        )

    async def _answer_fallback(self, session: Session, utterance: str, language: str) -> DialogueResult:
        fallback = await self._fallback.resolve(utterance, language)
        self._sessions.set_context(session, None)
        self._sessions.append_history(session, utterance, fallback.answer)
        logger.info(
            "DialogueEngine: answered by %s", fallback.source.value,
            extra={"session_id": session.session_id, "source": fallback.source.value,
                   "language": language},
        )
        return DialogueResult(
            answer=fallback.answer,
            source=fallback.source,
            language=language,
            context=None,
            intent=fallback.intent,
        )
