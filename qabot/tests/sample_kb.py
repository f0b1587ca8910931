"""Shared knowledge base fixture for the dialogue tests."""
from __future__ import annotations

import copy
from typing import Any, Dict, Optional

from qabot.knowledge.base import KnowledgeBase
from qabot.knowledge.loader import build_knowledge_base

SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<chatbotConfig>
  <settings>
    <defaultThreshold>0.4</defaultThreshold>
    <autoDetectLanguage>false</autoDetectLanguage>
    <tokenizer>WordTokenizer</tokenizer>
  </settings>
  <intents>
    <intent name="greeting"><keywords><k>halo</k><k>hai</k></keywords></intent>
    <intent name="weather"><keywords><k>cuaca</k><k>hujan</k></keywords></intent>
    <intent name="order"><keywords><k>pesan</k><k>order</k></keywords></intent>
  </intents>
  <entities>
    <entity name="city"><values><v>Jakarta</v><v>Bandung</v></values></entity>
  </entities>
  <qaItems>
    <item lang="id" intent="greeting">
      <questions><q>halo</q></questions>
      <answers><a>Halo juga!</a></answers>
    </item>
    <item lang="id" intent="weather">
      <questions><q>bagaimana cuaca hari ini</q></questions>
      <answers><a>Cuaca di {city} cerah</a></answers>
    </item>
    <item id="order-pizza" lang="id" intent="order" nextContextId="pizza_size">
      <questions><q>saya mau pesan pizza</q></questions>
      <answers><a>Mau ukuran apa?</a></answers>
    </item>
    <item lang="id" intent="fallback">
      <questions><q>__fallback__</q></questions>
      <answers><a>Maaf, saya tidak mengerti.</a></answers>
    </item>
    <item lang="en" intent="greeting">
      <questions><q>hello</q></questions>
      <answers><a>Hello there!</a></answers>
    </item>
  </qaItems>
  <contexts>
    <context id="pizza_size">
      <item lang="id" intent="order">
        <questions><q>besar</q></questions>
        <answers><a>Pizza besar dipesan.</a></answers>
      </item>
      <item lang="id" intent="order">
        <questions><q>kecil</q></questions>
        <answers><a>Pizza kecil dipesan.</a></answers>
      </item>
    </context>
  </contexts>
</chatbotConfig>
"""

SAMPLE_TREE: Dict[str, Any] = {
    "settings": {"defaultThreshold": 0.4, "autoDetectLanguage": False},
    "intents": [
        {"name": "greeting", "keywords": ["halo", "hai"]},
        {"name": "weather", "keywords": ["cuaca", "hujan"]},
        {"name": "order", "keywords": ["pesan", "order"]},
    ],
    "entities": [{"name": "city", "values": ["Jakarta", "Bandung"]}],
    "qaItems": [
        {"lang": "id", "intent": "greeting", "questions": ["halo"], "answers": ["Halo juga!"]},
        {
            "lang": "id", "intent": "weather",
            "questions": ["bagaimana cuaca hari ini"], "answers": ["Cuaca di {city} cerah"],
        },
        {
            "id": "order-pizza", "lang": "id", "intent": "order", "nextContextId": "pizza_size",
            "questions": ["saya mau pesan pizza"], "answers": ["Mau ukuran apa?"],
        },
        {
            "lang": "id", "intent": "fallback",
            "questions": ["__fallback__"], "answers": ["Maaf, saya tidak mengerti."],
        },
        {"lang": "en", "intent": "greeting", "questions": ["hello"], "answers": ["Hello there!"]},
    ],
    "contexts": [
        {
            "id": "pizza_size",
            "items": [
                {"lang": "id", "intent": "order", "questions": ["besar"], "answers": ["Pizza besar dipesan."]},
                {"lang": "id", "intent": "order", "questions": ["kecil"], "answers": ["Pizza kecil dipesan."]},
            ],
        },
    ],
}


def sample_tree(
    *,
    settings: Optional[Dict[str, Any]] = None,
    without_fallback_item: bool = False,
) -> Dict[str, Any]:
    """Deep copy of SAMPLE_TREE with *settings* merged in."""
    tree = copy.deepcopy(SAMPLE_TREE)
    if settings:
        tree["settings"].update(settings)
    if without_fallback_item:
        tree["qaItems"] = [i for i in tree["qaItems"] if i["intent"] != "fallback"]
    return tree


def sample_kb(**kwargs: Any) -> KnowledgeBase:
    return build_knowledge_base(sample_tree(**kwargs))
