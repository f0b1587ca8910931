"""Knowledge base loader: XML or JSON file -> validated ``KnowledgeBase``.

XML layout::

    <chatbotConfig>
      <settings>
        <defaultThreshold>0.4</defaultThreshold>
        <autoDetectLanguage>true</autoDetectLanguage>
        <tokenizer>WordTokenizer</tokenizer>
        <apiFallback url="https://example.org/ask"/>
      </settings>
      <intents>
        <intent name="greeting"><keywords><k>halo</k></keywords></intent>
      </intents>
      <entities>
        <entity name="city"><values><v>jakarta</v></values></entity>
      </entities>
      <qaItems>
        <item lang="id" intent="greeting" relevanceWeight="1.5" nextContextId="menu">
          <questions><q>halo</q></questions>
          <answers><a>Halo juga!</a></answers>
        </item>
      </qaItems>
      <contexts>
        <context id="menu"><item lang="id" intent="order">...</item></context>
      </contexts>
    </chatbotConfig>

Scalar fields may be written as attributes or as child elements, but never
twice. JSON files use the same tree with ``qaItems`` etc. as keys.
"""
from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from pydantic import ValidationError

from qabot.core.exceptions import ConfigLoadError
from qabot.knowledge.base import KnowledgeBase
from qabot.knowledge.schema import KnowledgeBaseSource

logger = logging.getLogger(__name__)

_ROOT_TAG = "chatbotConfig"
_REQUIRED_SECTIONS = ("settings", "intents", "entities", "qaItems")

_INTENT_LISTS = {"keywords": "keywords"}
_ENTITY_LISTS = {"values": "values"}
_ITEM_LISTS = {"questions": "questions", "answers": "answers"}


def load_knowledge_base(path: Union[str, Path]) -> KnowledgeBase:
    """Read, validate and build the knowledge base at *path*.

    Raises ConfigLoadError for unreadable files, malformed documents, missing
    sections and schema violations. The caller must not start serving then.
    """
    path = Path(path)
    logger.info("Loader: reading knowledge base from %s", path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(
            f"Cannot read knowledge base file {path}", cause=exc,
        ) from exc

    if path.suffix.lower() == ".json":
        tree = parse_json(text)
    else:
        tree = parse_xml(text)
    kb = build_knowledge_base(tree)
    logger.info("Loader: knowledge base ready %s", kb.stats())
    return kb


def build_knowledge_base(tree: Mapping[str, Any]) -> KnowledgeBase:
    """Validate an already-flattened document tree and build the knowledge base."""
    try:
        source = KnowledgeBaseSource.model_validate(tree)
    except ValidationError as exc:
        raise ConfigLoadError(
            f"Knowledge base failed validation ({exc.error_count()} errors)",
            details={"errors": exc.errors(include_url=False, include_context=False)},
            cause=exc,
        ) from exc
    return KnowledgeBase(source)


def parse_json(text: str) -> Dict[str, Any]:
    try:
        tree = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigLoadError("Knowledge base is not valid JSON", cause=exc) from exc
    if not isinstance(tree, dict):
        raise ConfigLoadError("Knowledge base JSON must be an object")
    tree = tree.get(_ROOT_TAG, tree)
    _require_sections(tree)
    return tree


def parse_xml(text: str) -> Dict[str, Any]:
    """Flatten a ``<chatbotConfig>`` document into the schema's tree."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ConfigLoadError("Knowledge base is not well-formed XML", cause=exc) from exc
    if root.tag != _ROOT_TAG:
        raise ConfigLoadError(
            f"Knowledge base root element must be <{_ROOT_TAG}>, got <{root.tag}>",
        )

    sections: Dict[str, ET.Element] = {}
    for child in root:
        if child.tag in sections:
            raise ConfigLoadError(
                f"<{_ROOT_TAG}> declares <{child.tag}> more than once",
                details={"section": child.tag},
            )
        sections[child.tag] = child
    _require_sections(sections)

    tree: Dict[str, Any] = {
        "settings": _record(sections["settings"]),
        "intents": [_record(el, _INTENT_LISTS) for el in sections["intents"].findall("intent")],
        "entities": [_record(el, _ENTITY_LISTS) for el in sections["entities"].findall("entity")],
        "qaItems": [_record(el, _ITEM_LISTS) for el in sections["qaItems"].findall("item")],
        "contexts": [],
    }
    contexts = sections.get("contexts")
    if contexts is not None:
        for ctx in contexts.findall("context"):
            node = _record(ctx, skip=("item",))
            node["items"] = [_record(el, _ITEM_LISTS) for el in ctx.findall("item")]
            tree["contexts"].append(node)
    return tree


# ── Helpers ────────────────────────────────────────────────────────


def _require_sections(sections: Mapping[str, Any]) -> None:
    missing = [name for name in _REQUIRED_SECTIONS if name not in sections]
    if missing:
        raise ConfigLoadError(
            f"Knowledge base is missing required sections: {', '.join(missing)}",
            details={"missing": missing},
        )


def _record(
    el: ET.Element,
    lists: Mapping[str, str] | None = None,
    *,
    skip: tuple[str, ...] = (),
) -> Dict[str, Any]:
    """Attributes plus child elements of *el* as one flat dict.

    Children named in *lists* become lists of their children's text. A field
    declared twice (attribute + element, or two elements) is rejected.
    """
    lists = lists or {}
    out: Dict[str, Any] = dict(el.attrib)
    for child in el:
        if child.tag in skip:
            continue
        key = lists.get(child.tag, child.tag)
        if key in out:
            raise ConfigLoadError(
                f"<{el.tag}> declares '{key}' more than once",
                details={"element": el.tag, "field": key},
            )
        if child.tag in lists:
            out[key] = _texts(child)
        else:
            out[key] = _leaf(child)
    return out


def _leaf(el: ET.Element) -> Any:
    if len(el) or el.attrib:
        out = _record(el)
        text = (el.text or "").strip()
        if text:
            out.setdefault("value", text)
        return out
    return (el.text or "").strip()


def _texts(el: ET.Element) -> List[str]:
    return [(child.text or "").strip() for child in el]
