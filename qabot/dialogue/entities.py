"""Entity recognition by exact, case-insensitive token lookup."""
from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Tuple

from qabot.dialogue.types import Entities
from qabot.knowledge.schema import Entity


class EntityRecognizer:
    """Matches tokens against each entity's value table.

    Entities are scanned in declaration order and, for each, every token in
    utterance order; the last matching token wins for that entity. Single
    tokens only: no fuzzy or multi-word values.
    """

    def __init__(self, entities: Iterable[Entity]) -> None:
        self._tables: List[Tuple[str, FrozenSet[str]]] = [
            (entity.name, frozenset(v.lower() for v in entity.values))
            for entity in entities
        ]

    def recognize(self, tokens: Iterable[str]) -> Entities:
        tokens = list(tokens)
        found: Dict[str, str] = {}
        for name, values in self._tables:
            for token in tokens:
                if token.lower() in values:
                    found[name] = token
        return found
