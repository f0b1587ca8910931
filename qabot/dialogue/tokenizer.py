"""Tokenizer strategies, selected once when the knowledge base is built."""
from __future__ import annotations

import re
from enum import Enum
from typing import Dict, List, Pattern


class TokenizerKind(str, Enum):
    """Tokenizer names accepted in the knowledge base ``<tokenizer>`` setting."""
    WORD = "WordTokenizer"
    WORD_PUNCT = "WordPunctTokenizer"
    WHITESPACE = "WhitespaceTokenizer"


_PATTERNS: Dict[TokenizerKind, Pattern[str]] = {
    TokenizerKind.WORD: re.compile(r"\w+"),
    TokenizerKind.WORD_PUNCT: re.compile(r"\w+|[^\w\s]+"),
    TokenizerKind.WHITESPACE: re.compile(r"\S+"),
}


class Tokenizer:
    """Lower-cases and splits an utterance according to one ``TokenizerKind``."""

    def __init__(self, kind: TokenizerKind = TokenizerKind.WORD) -> None:
        self.kind = TokenizerKind(kind)
        self._pattern = _PATTERNS[self.kind]

    def tokenize(self, text: str) -> List[str]:
        return self._pattern.findall(text.lower())

    def __repr__(self) -> str:
        return f"Tokenizer(kind={self.kind.value!r})"
