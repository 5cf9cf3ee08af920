"""
case_intelligence.py - Case Scenario and Chat

Glue between smart-folder case records and the scenario/chat AI calls.
The slow call runs through a runner (background thread in the app) and the
result is written back via dispatch, just like AnalysisBridge. If the case
was deleted while the call was running, the write is a no-op.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from config import SCENARIO_FAILED_TEXT, CHAT_FAILED_TEXT
from item_store import ItemStore, Item, CaseData, ChatMessage
from utils import generate_item_id, now_ms
from analysis_bridge import start_in_thread

logger = logging.getLogger(__name__)

# generate(case_name, evidence) -> (scenario, confidence)
ScenarioFn = Callable[[str, Sequence[Item]], Tuple[str, float]]
# chat(history, new_message, case_name) -> reply
ChatFn = Callable[[Sequence[Dict], str, str], str]


def history_payload(case: CaseData) -> List[Dict]:
    return [{"role": m.role, "text": m.text} for m in case.chat_history]


class CaseIntelligence:

    def __init__(self, store: ItemStore, generate_scenario: ScenarioFn, chat: ChatFn,
                 runner: Callable[[Callable[[], None]], None] = start_in_thread,
                 dispatch: Optional[Callable[[Callable[[], None]], None]] = None):
        self.store = store
        self.generate_scenario = generate_scenario
        self.chat = chat
        self.runner = runner
        self.dispatch = dispatch or (lambda fn: fn())
        self.busy = set()  # case ids with a call in progress

    def regenerate_scenario(self, case_id: str, on_done: Callable[[], None] = None) -> bool:
        """Rebuild the narrative and confidence from the case's evidence"""
        folder = self.store.get(case_id)
        if folder is None or self.store.get_case(case_id) is None:
            return False
        evidence = self.store.case_evidence(case_id)
        self.busy.add(case_id)

        def work():
            try:
                scenario, confidence = self.generate_scenario(folder.name, evidence)
            except Exception as e:
                logger.error(f"Scenario collaborator raised for {case_id}: {e}")
                scenario, confidence = SCENARIO_FAILED_TEXT, 0

            def apply():
                self.busy.discard(case_id)
                self.store.update_case(case_id, scenario=scenario, confidence_score=confidence)
                if on_done:
                    on_done()

            self.dispatch(apply)

        self.runner(work)
        return True

    def send_message(self, case_id: str, text: str, on_done: Callable[[], None] = None) -> bool:
        """
        Append the user's message right away, then the model's reply when it
        arrives. Blank messages are ignored.
        """
        text = (text or "").strip()
        folder = self.store.get(case_id)
        case = self.store.get_case(case_id)
        if not text or folder is None or case is None:
            return False

        history = history_payload(case)
        self.store.append_chat_message(case_id, ChatMessage(
            id=generate_item_id(), role="user", text=text, timestamp=now_ms()))
        self.busy.add(case_id)

        def work():
            try:
                reply = self.chat(history, text, folder.name)
            except Exception as e:
                logger.error(f"Chat collaborator raised for {case_id}: {e}")
                reply = CHAT_FAILED_TEXT

            def apply():
                self.busy.discard(case_id)
                self.store.append_chat_message(case_id, ChatMessage(
                    id=generate_item_id(), role="model", text=reply, timestamp=now_ms()))
                if on_done:
                    on_done()

            self.dispatch(apply)

        self.runner(work)
        return True
