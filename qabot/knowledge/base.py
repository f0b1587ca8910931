"""KnowledgeBase: the immutable, indexed view of a validated source document."""
from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from qabot.core.exceptions import ConfigLoadError
from qabot.dialogue.matching import FuzzyIndex
from qabot.dialogue.tokenizer import Tokenizer
from qabot.knowledge.schema import (
    Context,
    Entity,
    Intent,
    KnowledgeBaseSource,
    QAItem,
    Settings,
)

logger = logging.getLogger(__name__)

FALLBACK_INTENT = "fallback"


class KnowledgeBase:
    """Read-only after construction; safe to share across concurrent requests.

    Built once at startup: assigns missing item ids, resolves the tokenizer
    strategy and partitions the Q&A search indices by language (standalone and
    context items together).
    """

    def __init__(self, source: KnowledgeBaseSource) -> None:
        self.settings: Settings = source.settings
        self.intents: Tuple[Intent, ...] = source.intents
        self.entities: Tuple[Entity, ...] = source.entities
        self.qa_items: Tuple[QAItem, ...] = tuple(
            _with_id(item, f"qa-{n}") for n, item in enumerate(source.qa_items, 1)
        )
        self._contexts: Dict[str, Context] = {}
        for ctx in source.contexts:
            items = tuple(
                _with_id(item, f"{ctx.id}-{n}", context_id=ctx.id)
                for n, item in enumerate(ctx.items, 1)
            )
            self._contexts[ctx.id] = ctx.model_copy(update={"items": items})

        self._check_item_ids()
        self._warn_dangling_contexts()

        self.tokenizer = Tokenizer(self.settings.tokenizer)
        self._qa_indices: Dict[str, FuzzyIndex[QAItem]] = self._build_qa_indices()

    # ── Lookups ─────────────────────────────────────────────────────

    @property
    def contexts(self) -> Mapping[str, Context]:
        return dict(self._contexts)

    @property
    def languages(self) -> FrozenSet[str]:
        return frozenset(self._qa_indices)

    def all_items(self) -> Iterable[QAItem]:
        yield from self.qa_items
        for ctx in self._contexts.values():
            yield from ctx.items

    def context(self, context_id: Optional[str]) -> Optional[Context]:
        if context_id is None:
            return None
        return self._contexts.get(context_id)

    def qa_index(self, language: str) -> Optional[FuzzyIndex[QAItem]]:
        return self._qa_indices.get(language)

    def fallback_item(self, language: str) -> Optional[QAItem]:
        """First standalone item reserved as the static fallback for *language*."""
        for item in self.qa_items:
            if item.intent == FALLBACK_INTENT and item.lang == language:
                return item
        return None

    def stats(self) -> Dict[str, int]:
        return {
            "intents": len(self.intents),
            "entities": len(self.entities),
            "qa_items": len(self.qa_items),
            "contexts": len(self._contexts),
            "languages": len(self._qa_indices),
        }

    # ── Build helpers ───────────────────────────────────────────────

    def _build_qa_indices(self) -> Dict[str, FuzzyIndex[QAItem]]:
        by_lang: Dict[str, List[QAItem]] = {}
        for item in self.all_items():
            by_lang.setdefault(item.lang, []).append(item)

        indices: Dict[str, FuzzyIndex[QAItem]] = {}
        # Item overrides only decide acceptance; they never widen the candidate set.
        cutoff = self.settings.default_threshold
        for lang, items in by_lang.items():
            indices[lang] = FuzzyIndex(
                ((item, item.questions) for item in items), threshold=cutoff,
            )
            logger.debug("KnowledgeBase: %s index with %d items (cutoff %.2f)", lang, len(items), cutoff)
        return indices

    def _check_item_ids(self) -> None:
        seen: set[str] = set()
        for item in self.all_items():
            if item.id in seen:
                raise ConfigLoadError(
                    f"Duplicate Q&A item id {item.id!r}", details={"id": item.id},
                )
            seen.add(item.id)  # type: ignore[arg-type]

    def _warn_dangling_contexts(self) -> None:
        for item in self.all_items():
            if item.next_context_id and item.next_context_id not in self._contexts:
                logger.warning(
                    "KnowledgeBase: item %s points to unknown context %r; "
                    "it will behave as no context",
                    item.id, item.next_context_id,
                )


def _with_id(item: QAItem, default_id: str, *, context_id: Optional[str] = None) -> QAItem:
    update: Dict[str, Optional[str]] = {"context_id": context_id}
    if item.id is None:
        update["id"] = default_id
    return item.model_copy(update=update)
