"""ContextResolver: search restricted to the session's active sub-dialogue."""
from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from qabot.dialogue.matching import FuzzyIndex, top
from qabot.dialogue.types import RankedMatch
from qabot.knowledge.schema import Context, QAItem

logger = logging.getLogger(__name__)

CONTEXT_MATCH_THRESHOLD = 0.5
"""Search cut-off for context items, independent of the knowledge base settings.

A hit still has to pass the item (or default) threshold before it is answered.
"""


class ContextResolver:
    """Matches an utterance against the items of one context only.

    A candidate found here replaces intent classification and general search.
    Returns None when there is no active context, when the id no longer
    resolves, or when no item scores under the cut-off; the caller then runs
    general search.
    """

    def __init__(
        self,
        contexts: Mapping[str, Context],
        *,
        threshold: float = CONTEXT_MATCH_THRESHOLD,
    ) -> None:
        self._threshold = threshold
        self._indices: Dict[str, FuzzyIndex[QAItem]] = {
            ctx_id: FuzzyIndex(
                ((item, item.questions) for item in ctx.items), threshold=threshold,
            )
            for ctx_id, ctx in contexts.items()
        }

    def resolve(self, utterance: str, context_id: Optional[str]) -> Optional[RankedMatch]:
        if context_id is None:
            return None
        index = self._indices.get(context_id)
        if index is None:
            logger.debug("ContextResolver: context %r not found, ignoring", context_id)
            return None

        best = top(index.search(utterance))
        if best is None or best.score >= self._threshold:
            logger.debug("ContextResolver: no match in context %r", context_id)
            return None
        logger.debug(
            "ContextResolver: %s matched in context %r (score %.4f)",
            best.entry.id, context_id, best.score,
        )
        return RankedMatch(item=best.entry, score=best.score)
