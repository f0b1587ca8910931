"""Tokenizer strategies and exact-token entity recognition."""
from __future__ import annotations

import unittest

from qabot.dialogue.entities import EntityRecognizer
from qabot.dialogue.tokenizer import Tokenizer, TokenizerKind
from qabot.knowledge.schema import Entity


class TestTokenizer(unittest.TestCase):
    def test_word_tokenizer_drops_punctuation(self) -> None:
        tok = Tokenizer(TokenizerKind.WORD)
        self.assertEqual(tok.tokenize("Cuaca di Jakarta?"), ["cuaca", "di", "jakarta"])

    def test_word_punct_tokenizer_keeps_punctuation_runs(self) -> None:
        tok = Tokenizer(TokenizerKind.WORD_PUNCT)
        self.assertEqual(tok.tokenize("Halo!! apa?"), ["halo", "!!", "apa", "?"])

    def test_whitespace_tokenizer(self) -> None:
        tok = Tokenizer(TokenizerKind.WHITESPACE)
        self.assertEqual(tok.tokenize("Halo,  dunia!"), ["halo,", "dunia!"])

    def test_kind_from_configured_name(self) -> None:
        self.assertIs(Tokenizer("WordPunctTokenizer").kind, TokenizerKind.WORD_PUNCT)

    def test_unknown_kind_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Tokenizer("TreebankTokenizer")


class TestEntityRecognizer(unittest.TestCase):
    def setUp(self) -> None:
        self.recognizer = EntityRecognizer([
            Entity(name="city", values=("Jakarta", "Bandung")),
            Entity(name="size", values=("besar", "kecil")),
        ])

    def test_case_insensitive_lookup(self) -> None:
        found = self.recognizer.recognize(["cuaca", "JAKARTA"])
        self.assertEqual(found, {"city": "JAKARTA"})

    def test_multiple_entities(self) -> None:
        found = self.recognizer.recognize(["pizza", "besar", "ke", "bandung"])
        self.assertEqual(found, {"city": "bandung", "size": "besar"})

    def test_last_matching_token_wins(self) -> None:
        found = self.recognizer.recognize(["jakarta", "atau", "bandung"])
        self.assertEqual(found, {"city": "bandung"})

    def test_no_match(self) -> None:
        self.assertEqual(self.recognizer.recognize(["halo"]), {})

    def test_single_tokens_only(self) -> None:
        recognizer = EntityRecognizer([Entity(name="city", values=("new york",))])
        self.assertEqual(recognizer.recognize(["new", "york"]), {})


if __name__ == "__main__":
    unittest.main()
