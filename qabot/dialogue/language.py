"""Language identification adapter around ``langdetect``."""
from __future__ import annotations

import logging
from typing import Any, Callable, Collection, Optional, Sequence

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException

from qabot.knowledge.schema import Settings

logger = logging.getLogger(__name__)

# langdetect is randomized unless seeded.
DetectorFactory.seed = 0

DetectFn = Callable[[str], Sequence[Any]]
"""Returns guesses with ``.lang`` and ``.prob``, most probable first."""


class LanguageDetector:
    """Maps an utterance to one of the knowledge base languages.

    Returns ``settings.default_language`` when auto-detection is off (without
    calling the detector), or when the detector is not confident: no guess,
    probability under ``language_min_confidence``, a language the knowledge
    base has no items for, or a detector error.
    """

    def __init__(
        self,
        settings: Settings,
        known_languages: Collection[str],
        *,
        detect_fn: Optional[DetectFn] = None,
    ) -> None:
        self._enabled = settings.auto_detect_language
        self._default = settings.default_language
        self._min_confidence = settings.language_min_confidence
        self._known = frozenset(known_languages)
        self._detect_fn: DetectFn = detect_fn or detect_langs

    @property
    def default_language(self) -> str:
        return self._default

    def detect(self, utterance: str) -> str:
        if not self._enabled:
            return self._default
        try:
            guesses = self._detect_fn(utterance)
        except LangDetectException as exc:
            logger.debug("LanguageDetector: no features in %r (%s)", utterance[:60], exc)
            return self._default
        if not guesses:
            return self._default

        best = guesses[0]
        lang = str(best.lang).lower()
        if best.prob < self._min_confidence or lang not in self._known:
            logger.debug(
                "LanguageDetector: ignoring guess %s (p=%.2f), using %s",
                lang, best.prob, self._default,
            )
            return self._default
        return lang
