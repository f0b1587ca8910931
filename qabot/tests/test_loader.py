"""Knowledge base loading: XML/JSON flattening, schema validation, build-time checks."""
from __future__ import annotations

import json
import os
import tempfile
import unittest

from qabot.core.exceptions import ConfigLoadError
from qabot.dialogue.tokenizer import TokenizerKind
from qabot.knowledge.loader import (
    build_knowledge_base,
    load_knowledge_base,
    parse_json,
    parse_xml,
)
from qabot.knowledge.schema import DEFAULT_THRESHOLD
from qabot.tests.sample_kb import SAMPLE_TREE, SAMPLE_XML, sample_tree


_GREETING_ITEM = (
    '<item lang="id" intent="greeting">'
    "<questions><q>halo</q></questions><answers><a>Hai</a></answers></item>"
)


def _xml(settings: str = "", items: str = _GREETING_ITEM) -> str:
    return f"""<chatbotConfig>
      <settings>{settings}</settings>
      <intents><intent name="greeting"><keywords><k>halo</k></keywords></intent></intents>
      <entities/>
      <qaItems>{items}</qaItems>
    </chatbotConfig>"""


class TestParseXml(unittest.TestCase):
    def test_sample_document(self) -> None:
        kb = build_knowledge_base(parse_xml(SAMPLE_XML))
        self.assertEqual(kb.stats(), {
            "intents": 3, "entities": 1, "qa_items": 5, "contexts": 1, "languages": 2,
        })
        self.assertEqual(kb.settings.tokenizer, TokenizerKind.WORD)
        self.assertEqual(kb.entities[0].values, ("jakarta", "bandung"))

    def test_attributes_and_elements_are_equivalent(self) -> None:
        as_attr = parse_xml(_xml(items=(
            '<item lang="id" intent="greeting" relevanceWeight="2.5" threshold="0.3">'
            "<questions><q>halo</q></questions><answers><a>Hai</a></answers></item>"
        )))
        as_elem = parse_xml(_xml(items=(
            "<item><lang>id</lang><intent>greeting</intent>"
            "<relevanceWeight>2.5</relevanceWeight><threshold>0.3</threshold>"
            "<questions><q>halo</q></questions><answers><a>Hai</a></answers></item>"
        )))
        a = build_knowledge_base(as_attr).qa_items[0]
        b = build_knowledge_base(as_elem).qa_items[0]
        self.assertEqual((a.relevance_weight, a.threshold), (2.5, 0.3))
        self.assertEqual(a, b)

    def test_duplicate_field_rejected(self) -> None:
        with self.assertRaises(ConfigLoadError) as ctx:
            parse_xml(_xml(items=(
                '<item lang="id" intent="greeting"><intent>order</intent>'
                "<questions><q>halo</q></questions><answers><a>Hai</a></answers></item>"
            )))
        self.assertEqual(ctx.exception.details["field"], "intent")

    def test_duplicate_section_rejected(self) -> None:
        doc = _xml().replace("<entities/>", "<entities/><qaItems/>")
        with self.assertRaises(ConfigLoadError) as ctx:
            parse_xml(doc)
        self.assertEqual(ctx.exception.details["section"], "qaItems")

    def test_empty_settings_mean_defaults(self) -> None:
        kb = build_knowledge_base(parse_xml(_xml(settings=(
            "<defaultThreshold/><tokenizer></tokenizer><apiFallback/>"
        ))))
        self.assertEqual(kb.settings.default_threshold, DEFAULT_THRESHOLD)
        self.assertEqual(kb.settings.tokenizer, TokenizerKind.WORD)
        self.assertIsNone(kb.settings.api_fallback)

    def test_api_fallback_settings(self) -> None:
        kb = build_knowledge_base(parse_xml(_xml(settings=(
            '<apiFallback url="https://api.example.org/ask" timeoutSeconds="2.5"/>'
        ))))
        self.assertEqual(kb.settings.api_fallback.url, "https://api.example.org/ask")
        self.assertEqual(kb.settings.api_fallback.timeout_seconds, 2.5)

    def test_malformed_xml(self) -> None:
        with self.assertRaises(ConfigLoadError):
            parse_xml("<chatbotConfig><settings></chatbotConfig>")

    def test_wrong_root(self) -> None:
        with self.assertRaises(ConfigLoadError):
            parse_xml("<config/>")

    def test_missing_section(self) -> None:
        with self.assertRaises(ConfigLoadError) as ctx:
            parse_xml("<chatbotConfig><settings/><intents/></chatbotConfig>")
        self.assertEqual(ctx.exception.details["missing"], ["entities", "qaItems"])


class TestParseJson(unittest.TestCase):
    def test_tree_and_wrapped_tree(self) -> None:
        plain = parse_json(json.dumps(SAMPLE_TREE))
        wrapped = parse_json(json.dumps({"chatbotConfig": SAMPLE_TREE}))
        self.assertEqual(plain, wrapped)

    def test_not_json(self) -> None:
        with self.assertRaises(ConfigLoadError):
            parse_json("{nope")

    def test_not_an_object(self) -> None:
        with self.assertRaises(ConfigLoadError):
            parse_json("[]")

    def test_missing_section(self) -> None:
        with self.assertRaises(ConfigLoadError):
            parse_json(json.dumps({"settings": {}}))


class TestSchemaValidation(unittest.TestCase):
    def _invalid(self, tree) -> ConfigLoadError:
        with self.assertRaises(ConfigLoadError) as ctx:
            build_knowledge_base(tree)
        return ctx.exception

    def test_unknown_tokenizer(self) -> None:
        err = self._invalid(sample_tree(settings={"tokenizer": "TreebankTokenizer"}))
        self.assertTrue(err.details["errors"])

    def test_threshold_out_of_range(self) -> None:
        self._invalid(sample_tree(settings={"defaultThreshold": 1.5}))

    def test_item_without_answers(self) -> None:
        tree = sample_tree()
        tree["qaItems"][0]["answers"] = []
        self._invalid(tree)

    def test_non_positive_weight(self) -> None:
        tree = sample_tree()
        tree["qaItems"][0]["relevanceWeight"] = 0
        self._invalid(tree)

    def test_non_http_fallback_url(self) -> None:
        self._invalid(sample_tree(settings={"apiFallback": {"url": "ftp://x"}}))

    def test_duplicate_intent_names(self) -> None:
        tree = sample_tree()
        tree["intents"].append({"name": "greeting", "keywords": ["hai"]})
        self._invalid(tree)

    def test_duplicate_item_ids(self) -> None:
        tree = sample_tree()
        tree["qaItems"][0]["id"] = "order-pizza"
        with self.assertRaises(ConfigLoadError) as ctx:
            build_knowledge_base(tree)
        self.assertEqual(ctx.exception.details["id"], "order-pizza")


class TestKnowledgeBase(unittest.TestCase):
    def test_generated_ids(self) -> None:
        kb = build_knowledge_base(sample_tree())
        self.assertEqual([i.id for i in kb.qa_items], ["qa-1", "qa-2", "order-pizza", "qa-4", "qa-5"])
        ctx = kb.context("pizza_size")
        self.assertEqual([i.id for i in ctx.items], ["pizza_size-1", "pizza_size-2"])
        self.assertTrue(all(i.context_id == "pizza_size" for i in ctx.items))

    def test_lookups(self) -> None:
        kb = build_knowledge_base(sample_tree())
        self.assertEqual(kb.languages, frozenset({"id", "en"}))
        self.assertIsNone(kb.context(None))
        self.assertIsNone(kb.context("missing"))
        self.assertEqual(kb.fallback_item("id").id, "qa-4")
        self.assertIsNone(kb.fallback_item("en"))
        self.assertEqual(len(list(kb.all_items())), 7)

    def test_index_cutoff_ignores_item_overrides(self) -> None:
        tree = sample_tree()
        tree["qaItems"][0]["threshold"] = 0.7
        kb = build_knowledge_base(tree)
        self.assertEqual(kb.qa_index("id").threshold, DEFAULT_THRESHOLD)
        self.assertEqual(kb.qa_index("en").threshold, DEFAULT_THRESHOLD)

    def test_dangling_next_context_is_only_a_warning(self) -> None:
        tree = sample_tree()
        tree["qaItems"][0]["nextContextId"] = "nowhere"
        with self.assertLogs("qabot.knowledge.base", level="WARNING"):
            build_knowledge_base(tree)


class TestLoadFile(unittest.TestCase):
    def test_xml_and_json_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            xml_path = os.path.join(tmp, "data.xml")
            json_path = os.path.join(tmp, "data.json")
            with open(xml_path, "w", encoding="utf-8") as fh:
                fh.write(SAMPLE_XML)
            with open(json_path, "w", encoding="utf-8") as fh:
                json.dump(SAMPLE_TREE, fh)
            self.assertEqual(load_knowledge_base(xml_path).stats(), load_knowledge_base(json_path).stats())

    def test_missing_file(self) -> None:
        with self.assertRaises(ConfigLoadError):
            load_knowledge_base("/nonexistent/data.xml")


if __name__ == "__main__":
    unittest.main()
