from __future__ import annotations

import unittest

from analysis_bridge import run_inline
from case_intelligence import CaseIntelligence
from config import CHAT_FAILED_TEXT, SCENARIO_FAILED_TEXT
from factories import ItemType, case_folder, folder, make_item, store_with


class CaseIntelligenceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = store_with(
            case_folder("case", name="Alpha"),
            make_item("contract", "case"),
            folder("mail", "case"),
            make_item("email", "mail"),
            make_item("memo", "case", ItemType.NOTE),
        )
        self.scenario_calls = []
        self.chat_calls = []
        self.intel = CaseIntelligence(self.store, self.fake_scenario, self.fake_chat, runner=run_inline)

    def fake_scenario(self, case_name, evidence):
        self.scenario_calls.append((case_name, sorted(e.id for e in evidence)))
        return "a story", 72

    def fake_chat(self, history, message, case_name):
        self.chat_calls.append((list(history), message, case_name))
        return f"echo: {message}"

    def test_regenerate_scenario_updates_case(self) -> None:
        done = []
        self.assertTrue(self.intel.regenerate_scenario("case", on_done=lambda: done.append(True)))
        case = self.store.get_case("case")
        self.assertEqual(case.scenario, "a story")
        self.assertEqual(case.confidence_score, 72)
        self.assertEqual(self.scenario_calls, [("Alpha", ["contract", "email", "memo"])])
        self.assertEqual(done, [True])
        self.assertEqual(self.intel.busy, set())

    def test_regenerate_for_plain_folder_is_refused(self) -> None:
        self.assertFalse(self.intel.regenerate_scenario("mail"))
        self.assertEqual(self.scenario_calls, [])

    def test_send_message_appends_user_then_model(self) -> None:
        self.assertTrue(self.intel.send_message("case", "  who signed?  "))
        history = self.store.get_case("case").chat_history
        self.assertEqual([(m.role, m.text) for m in history],
                         [("user", "who signed?"), ("model", "echo: who signed?")])
        self.assertEqual(self.chat_calls, [([], "who signed?", "Alpha")])

    def test_history_sent_excludes_new_message(self) -> None:
        self.intel.send_message("case", "first")
        self.intel.send_message("case", "second")
        history, message, _ = self.chat_calls[1]
        self.assertEqual(history, [{"role": "user", "text": "first"},
                                   {"role": "model", "text": "echo: first"}])
        self.assertEqual(message, "second")

    def test_blank_message_is_ignored(self) -> None:
        self.assertFalse(self.intel.send_message("case", "   "))
        self.assertEqual(self.store.get_case("case").chat_history, ())

    def test_user_message_visible_before_reply(self) -> None:
        pending = []
        intel = CaseIntelligence(self.store, self.fake_scenario, self.fake_chat, runner=pending.append)
        intel.send_message("case", "hello")
        self.assertEqual([m.role for m in self.store.get_case("case").chat_history], ["user"])
        self.assertIn("case", intel.busy)
        pending[0]()
        self.assertEqual([m.role for m in self.store.get_case("case").chat_history], ["user", "model"])

    def test_reply_for_deleted_case_is_dropped(self) -> None:
        pending = []
        intel = CaseIntelligence(self.store, self.fake_scenario, self.fake_chat, runner=pending.append)
        intel.send_message("case", "hello")
        self.store.delete({"case"})
        pending[0]()
        self.assertIsNone(self.store.get_case("case"))

    def test_raising_collaborators_use_fallbacks(self) -> None:
        def explode(*args):
            raise RuntimeError("boom")

        intel = CaseIntelligence(self.store, explode, explode, runner=run_inline)
        intel.regenerate_scenario("case")
        self.assertEqual(self.store.get_case("case").scenario, SCENARIO_FAILED_TEXT)
        intel.send_message("case", "hi")
        self.assertEqual(self.store.get_case("case").chat_history[-1].text, CHAT_FAILED_TEXT)


if __name__ == "__main__":
    unittest.main()
