"""Approximate phrase matching with lower-is-better dissimilarity scores.

Scores live in [0, 1]: 0 means the query contains the phrase verbatim, 1 means
nothing in common. The ranking arithmetic downstream (``score / weight``)
depends on this direction.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Generic, Iterable, List, Sequence, Tuple, TypeVar

T = TypeVar("T")

_WORD_RE = re.compile(r"\w+")


def normalize(text: str) -> str:
    """Lower-case and collapse *text* to single-space separated words."""
    return " ".join(_WORD_RE.findall(text.lower()))


def dissimilarity(query: str, phrase: str) -> float:
    """Score a normalized *query* against a normalized *phrase*.

    Besides the whole query, every contiguous window of query words as long as
    the phrase is compared, so a short phrase inside a longer utterance still
    scores well.
    """
    if not query or not phrase:
        return 1.0
    best = SequenceMatcher(None, query, phrase).ratio()
    words = query.split()
    width = len(phrase.split())
    if width < len(words):
        for start in range(len(words) - width + 1):
            if best == 1.0:
                break
            window = " ".join(words[start:start + width])
            best = max(best, SequenceMatcher(None, window, phrase).ratio())
    return round(1.0 - best, 4)


@dataclass(frozen=True)
class Candidate(Generic[T]):
    """One search hit: the indexed entry, its score and the phrase that scored it."""

    entry: T
    score: float
    phrase: str = ""


class FuzzyIndex(Generic[T]):
    """Immutable index of entries, each searchable through a set of phrases.

    ``search`` returns the entries whose best phrase scores ``<= threshold``,
    best first; equal scores keep insertion order.
    """

    def __init__(
        self,
        entries: Iterable[Tuple[T, Iterable[str]]],
        *,
        threshold: float,
    ) -> None:
        self._threshold = threshold
        self._entries: List[Tuple[T, Tuple[str, ...]]] = []
        for entry, phrases in entries:
            normalized = tuple(p for p in (normalize(x) for x in phrases) if p)
            self._entries.append((entry, normalized))

    @property
    def threshold(self) -> float:
        return self._threshold

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, query: str) -> List[Candidate[T]]:
        q = normalize(query)
        if not q:
            return []
        hits: List[Tuple[float, int, Candidate[T]]] = []
        for position, (entry, phrases) in enumerate(self._entries):
            best_score, best_phrase = 1.0, ""
            for phrase in phrases:
                score = dissimilarity(q, phrase)
                if score < best_score:
                    best_score, best_phrase = score, phrase
                    if score == 0.0:
                        break
            if best_score <= self._threshold:
                hits.append((best_score, position, Candidate(entry, best_score, best_phrase)))
        hits.sort(key=lambda h: (h[0], h[1]))
        return [c for _, _, c in hits]


def top(candidates: Sequence[Candidate[T]]) -> Candidate[T] | None:
    return candidates[0] if candidates else None
