"""Intent classification and Q&A re-ranking for general (context-free) search."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from qabot.dialogue.matching import Candidate, FuzzyIndex, top
from qabot.dialogue.types import UNKNOWN_INTENT, RankedMatch
from qabot.knowledge.base import KnowledgeBase
from qabot.knowledge.schema import Intent, QAItem

logger = logging.getLogger(__name__)


class IntentClassifier:
    """Labels an utterance with the intent whose keywords match it best."""

    def __init__(self, intents: Iterable[Intent], *, threshold: float) -> None:
        self._index: FuzzyIndex[Intent] = FuzzyIndex(
            ((intent, intent.keywords) for intent in intents), threshold=threshold,
        )

    def classify(self, utterance: str) -> str:
        best = top(self._index.search(utterance))
        if best is None:
            return UNKNOWN_INTENT
        logger.debug("IntentClassifier: %s (score %.4f, keyword %r)", best.entry.name, best.score, best.phrase)
        return best.entry.name


class AnswerRanker:
    """Picks the best Q&A candidate from the language's index.

    Candidates agreeing with the detected intent are preferred and ordered by
    ``score / relevance_weight``; when none agree, the plain top result is
    used. Intent agreement is a preference, never a filter.
    """

    def __init__(self, kb: KnowledgeBase) -> None:
        self._kb = kb

    def candidates(self, utterance: str, language: str) -> List[Candidate[QAItem]]:
        index = self._kb.qa_index(language)
        if index is None:
            logger.debug("AnswerRanker: no items for language %r", language)
            return []
        return index.search(utterance)

    @staticmethod
    def rerank(
        candidates: Sequence[Candidate[QAItem]], intent: str,
    ) -> Optional[Candidate[QAItem]]:
        agreeing = [c for c in candidates if c.entry.intent == intent]
        if agreeing:
            # sorted() is stable: equal weighted scores keep search order.
            return sorted(agreeing, key=lambda c: c.score / c.entry.relevance_weight)[0]
        return top(candidates)

    def rank(self, utterance: str, language: str, intent: str) -> Optional[RankedMatch]:
        chosen = self.rerank(self.candidates(utterance, language), intent)
        if chosen is None:
            return None
        return RankedMatch(item=chosen.entry, score=chosen.score)


def effective_threshold(item: QAItem, default_threshold: float) -> float:
    return item.threshold if item.threshold is not None else default_threshold


def is_accepted(match: RankedMatch, default_threshold: float) -> bool:
    """Strictly below the effective threshold; a tie is a rejection."""
    return match.score < effective_threshold(match.item, default_threshold)
