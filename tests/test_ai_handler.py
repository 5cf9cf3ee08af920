from __future__ import annotations

import unittest

import ai_handler
from config import (
    AI_UNAVAILABLE_TEXT, CHAT_UNAVAILABLE_TEXT, SCENARIO_DEFAULT_CONFIDENCE,
    SCENARIO_EMPTY_TEXT, SCENARIO_FAILED_TEXT, SCENARIO_UNAVAILABLE_TEXT,
)
from factories import ItemType, make_item


class MissingKeyTests(unittest.TestCase):
    """Without an API key no SDK call is attempted"""

    def test_analysis_without_key(self) -> None:
        success, summary = ai_handler.analyze_file_content(make_item("a"), "General", None)
        self.assertFalse(success)
        self.assertEqual(summary, AI_UNAVAILABLE_TEXT)

    def test_scenario_without_key(self) -> None:
        self.assertEqual(ai_handler.generate_case_scenario("Alpha", [], ""),
                         (SCENARIO_UNAVAILABLE_TEXT, 0))

    def test_chat_without_key(self) -> None:
        self.assertEqual(ai_handler.chat_with_case([], "hi", "Alpha", None), CHAT_UNAVAILABLE_TEXT)


class ParseScenarioTests(unittest.TestCase):
    def test_valid_json(self) -> None:
        self.assertEqual(ai_handler.parse_scenario_response('{"scenario": "story", "confidence": 81}'),
                         ("story", 81.0))

    def test_missing_fields_use_defaults(self) -> None:
        self.assertEqual(ai_handler.parse_scenario_response("{}"),
                         (SCENARIO_EMPTY_TEXT, SCENARIO_DEFAULT_CONFIDENCE))

    def test_confidence_is_clamped(self) -> None:
        self.assertEqual(ai_handler.parse_scenario_response('{"scenario": "s", "confidence": 250}')[1], 100)
        self.assertEqual(ai_handler.parse_scenario_response('{"scenario": "s", "confidence": -4}')[1], 0)

    def test_invalid_json(self) -> None:
        self.assertEqual(ai_handler.parse_scenario_response("not json"), (SCENARIO_FAILED_TEXT, 0))
        self.assertEqual(ai_handler.parse_scenario_response("[1, 2]"), (SCENARIO_FAILED_TEXT, 0))


class PromptTests(unittest.TestCase):
    def test_analysis_prompt_mentions_file_and_context(self) -> None:
        item = make_item("a", name="invoice.pdf", mime_type="application/pdf")
        prompt = ai_handler.build_analysis_prompt(item, "Case: Alpha, Category: Billing")
        self.assertIn('"invoice.pdf"', prompt)
        self.assertIn("application/pdf", prompt)
        self.assertIn("Case: Alpha, Category: Billing", prompt)

    def test_scenario_prompt_lists_evidence(self) -> None:
        evidence = [make_item("1", name="contract.pdf"), make_item("2", name="memo", item_type=ItemType.NOTE)]
        prompt = ai_handler.build_scenario_prompt("Alpha", evidence)
        self.assertIn("Case Name: Alpha", prompt)
        self.assertIn("- contract.pdf (FILE)", prompt)
        self.assertIn("- memo (NOTE)", prompt)

    def test_history_conversion(self) -> None:
        history = [{"role": "user", "text": "hi"}, {"role": "model", "text": "hello"}]
        self.assertEqual(ai_handler.to_gemini_history(history),
                         [{"role": "user", "parts": ["hi"]}, {"role": "model", "parts": ["hello"]}])


if __name__ == "__main__":
    unittest.main()
