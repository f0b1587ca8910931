"""Core data structures for the dialogue pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from qabot.knowledge.schema import QAItem

UNKNOWN_INTENT = "unknown"

Entities = Dict[str, str]
"""Recognized entities: entity name -> matched token."""


class ResponseSource(str, Enum):
    """Which tier of the pipeline produced the answer."""
    LOCAL_QA = "local_qa"
    API_FALLBACK = "api_fallback"
    LOCAL_FALLBACK = "local_fallback"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class RankedMatch:
    """A Q&A item selected by the context or general search, with its raw score."""

    item: QAItem
    score: float


@dataclass(frozen=True)
class FallbackAnswer:
    """Output of one fallback tier."""

    answer: str
    source: ResponseSource
    intent: Optional[str] = None


@dataclass
class DialogueResult:
    """Final output of one resolved utterance."""

    answer: str
    source: ResponseSource
    language: str
    context: Optional[str] = None
    intent: Optional[str] = None
    score: Optional[float] = None
    entities: Optional[Entities] = None

    def to_dict(self) -> Dict[str, Any]:
        """Response body: ``context`` is always present, the rest only when known."""
        out: Dict[str, Any] = {
            "answer": self.answer,
            "source": self.source.value,
            "context": self.context,
            "language": self.language,
        }
        if self.intent is not None:
            out["intent"] = self.intent
        if self.score is not None:
            out["score"] = self.score
        if self.entities is not None:
            out["entities"] = dict(self.entities)
        return out
