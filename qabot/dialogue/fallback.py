"""FallbackChain: what to answer when no local item is accepted.

Tiers, in fixed order:
  1. ApiFallback: one bounded GET to the configured endpoint
  2. StaticFallback: the knowledge base item with intent "fallback" for the language
  3. unresolved: the configured terminal answer; always succeeds
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import httpx

from qabot.core.exceptions import ExternalFallbackError
from qabot.dialogue.composer import ResponseComposer
from qabot.dialogue.types import FallbackAnswer, ResponseSource
from qabot.knowledge.base import FALLBACK_INTENT, KnowledgeBase
from qabot.knowledge.schema import ApiFallbackSettings

logger = logging.getLogger(__name__)


class FallbackStrategy(ABC):
    name: str = "fallback"

    @abstractmethod
    async def try_answer(self, utterance: str, language: str) -> Optional[FallbackAnswer]:
        """Return an answer, or None to hand over to the next tier."""


class ApiFallback(FallbackStrategy):
    """Asks an external endpoint: ``GET <url>?q=<utterance>`` -> ``{"answer": "..."}``.

    Single attempt, bounded by ``timeout_seconds``. Failures are logged and
    never reach the caller.
    """

    name = "api_fallback"

    def __init__(
        self,
        settings: ApiFallbackSettings,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._url = settings.url
        self._timeout = settings.timeout_seconds
        self._default_answer = settings.default_answer
        self._client = client

    async def fetch(self, utterance: str) -> str:
        """Call the endpoint once. Raises ExternalFallbackError on any failure."""
        try:
            if self._client is not None:
                response = await self._client.get(
                    self._url, params={"q": utterance}, timeout=self._timeout,
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(self._url, params={"q": utterance})
        except httpx.TimeoutException as exc:
            raise ExternalFallbackError(
                f"Fallback API timed out after {self._timeout}s", cause=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise ExternalFallbackError(f"Fallback API request failed: {exc}", cause=exc) from exc

        if not response.is_success:
            raise ExternalFallbackError(
                f"Fallback API answered HTTP {response.status_code}",
                details={"status_code": response.status_code},
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise ExternalFallbackError("Fallback API answered non-JSON", cause=exc) from exc
        if not isinstance(body, dict):
            raise ExternalFallbackError("Fallback API answer is not a JSON object")

        answer = body.get("answer")
        if answer is None or answer == "":
            return self._default_answer
        if not isinstance(answer, str):
            raise ExternalFallbackError(
                "Fallback API 'answer' is not a string",
                details={"type": type(answer).__name__},
            )
        return answer

    async def try_answer(self, utterance: str, language: str) -> Optional[FallbackAnswer]:
        logger.info("ApiFallback: no local answer, asking %s", self._url)
        try:
            answer = await self.fetch(utterance)
        except ExternalFallbackError as exc:
            logger.warning("ApiFallback: %s", exc, extra={"source": self.name})
            return None
        return FallbackAnswer(answer=answer, source=ResponseSource.API_FALLBACK)


class StaticFallback(FallbackStrategy):
    name = "local_fallback"

    def __init__(self, kb: KnowledgeBase, composer: ResponseComposer) -> None:
        self._kb = kb
        self._composer = composer

    async def try_answer(self, utterance: str, language: str) -> Optional[FallbackAnswer]:
        item = self._kb.fallback_item(language)
        if item is None:
            logger.info("StaticFallback: no fallback item for language %r", language)
            return None
        return FallbackAnswer(
            answer=self._composer.select_answer(item),
            source=ResponseSource.LOCAL_FALLBACK,
            intent=FALLBACK_INTENT,
        )


class FallbackChain:
    def __init__(self, strategies: Sequence[FallbackStrategy], *, unresolved_answer: str) -> None:
        self._strategies: List[FallbackStrategy] = list(strategies)
        self._unresolved_answer = unresolved_answer

    @classmethod
    def for_knowledge_base(
        cls,
        kb: KnowledgeBase,
        composer: ResponseComposer,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "FallbackChain":
        strategies: List[FallbackStrategy] = []
        if kb.settings.api_fallback is not None:
            strategies.append(ApiFallback(kb.settings.api_fallback, client=client))
        strategies.append(StaticFallback(kb, composer))
        return cls(strategies, unresolved_answer=kb.settings.unresolved_answer)

    async def resolve(self, utterance: str, language: str) -> FallbackAnswer:
        for strategy in self._strategies:
            answer = await strategy.try_answer(utterance, language)
            if answer is not None:
                return answer
        logger.warning("FallbackChain: every tier failed for language %r, answering unresolved", language)
        return FallbackAnswer(answer=self._unresolved_answer, source=ResponseSource.UNRESOLVED)
