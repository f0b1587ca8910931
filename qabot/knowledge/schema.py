"""Pydantic v2 schema of the knowledge base source document.

The loader flattens the XML (or JSON) document into a plain tree once; this
schema validates and coerces it. Everything downstream works on these frozen
models and never on raw document shapes.
"""
from __future__ import annotations

from typing import Annotated, Any, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from qabot.dialogue.tokenizer import TokenizerKind

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

DEFAULT_THRESHOLD = 0.4
DEFAULT_LANGUAGE = "id"
DEFAULT_API_ANSWER = "Maaf, API eksternal juga bingung."
DEFAULT_UNRESOLVED_ANSWER = "Maaf, saya belum bisa menjawab pertanyaan itu."


class _SourceModel(BaseModel):
    """camelCase in the document, snake_case in code; immutable once built."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


class ApiFallbackSettings(_SourceModel):
    url: NonEmptyStr
    timeout_seconds: float = Field(default=5.0, gt=0, le=60)
    default_answer: NonEmptyStr = DEFAULT_API_ANSWER

    @field_validator("url")
    @classmethod
    def _http_url(cls, v: str) -> str:
        if not (v.startswith("http://") or v.startswith("https://")):
            raise ValueError("apiFallback url must start with http:// or https://")
        return v


class Settings(_SourceModel):
    default_threshold: float = Field(default=DEFAULT_THRESHOLD, gt=0, le=1)
    auto_detect_language: bool = False
    tokenizer: TokenizerKind = TokenizerKind.WORD
    api_fallback: Optional[ApiFallbackSettings] = None
    default_language: NonEmptyStr = DEFAULT_LANGUAGE
    language_min_confidence: float = Field(default=0.5, ge=0, le=1)
    unresolved_answer: NonEmptyStr = DEFAULT_UNRESOLVED_ANSWER

    @model_validator(mode="before")
    @classmethod
    def _drop_empty(cls, data: Any) -> Any:
        """Empty elements (``<tokenizer/>``, ``<apiFallback/>``) mean "not set"."""
        if not isinstance(data, dict):
            return data
        data = {k: v for k, v in data.items() if v is not None and v != ""}
        for key in ("apiFallback", "api_fallback"):
            fallback = data.get(key)
            if isinstance(fallback, dict) and not str(fallback.get("url") or "").strip():
                data.pop(key)
        return data

    @field_validator("default_language")
    @classmethod
    def _lower_language(cls, v: str) -> str:
        return v.lower()


class Intent(_SourceModel):
    name: NonEmptyStr
    keywords: Tuple[NonEmptyStr, ...] = Field(min_length=1)


class Entity(_SourceModel):
    name: NonEmptyStr
    values: Tuple[NonEmptyStr, ...] = Field(min_length=1)

    @field_validator("values")
    @classmethod
    def _casefold(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(value.lower() for value in v)


class QAItem(_SourceModel):
    """A question/answer entry, standalone or scoped to a context."""

    id: Optional[NonEmptyStr] = None
    lang: NonEmptyStr
    intent: NonEmptyStr
    questions: Tuple[NonEmptyStr, ...] = Field(min_length=1)
    answers: Tuple[NonEmptyStr, ...] = Field(min_length=1)
    relevance_weight: float = Field(default=1.0, gt=0)
    threshold: Optional[float] = Field(default=None, gt=0, le=1)
    next_context_id: Optional[NonEmptyStr] = None
    context_id: Optional[str] = Field(default=None, exclude=True)
    """Set by the knowledge base for items nested in a context."""

    @field_validator("lang")
    @classmethod
    def _lower_lang(cls, v: str) -> str:
        return v.lower()

    @model_validator(mode="before")
    @classmethod
    def _drop_empty(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None and v != ""}
        return data


class Context(_SourceModel):
    id: NonEmptyStr
    items: Tuple[QAItem, ...] = ()


class KnowledgeBaseSource(_SourceModel):
    """Root of the document. All sections but ``contexts`` are required."""

    settings: Settings
    intents: Tuple[Intent, ...]
    entities: Tuple[Entity, ...]
    qa_items: Tuple[QAItem, ...]
    contexts: Tuple[Context, ...] = ()

    @model_validator(mode="after")
    def _unique_names(self) -> "KnowledgeBaseSource":
        for label, names in (
            ("intent name", [i.name for i in self.intents]),
            ("entity name", [e.name for e in self.entities]),
            ("context id", [c.id for c in self.contexts]),
        ):
            seen: set[str] = set()
            for name in names:
                if name in seen:
                    raise ValueError(f"duplicate {label}: {name!r}")
                seen.add(name)
        return self
