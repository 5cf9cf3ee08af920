from __future__ import annotations

import base64
import unittest

from analysis_bridge import AnalysisBridge, UploadedFile, analysis_context, decode_upload, run_inline
from config import ANALYSIS_FAILED_TEXT
from factories import AnalysisStatus, Position, case_folder, folder, make_item, store_with
from item_store import ItemStore


class ManualRunner:
    """Collects background work so tests decide when it runs"""

    def __init__(self) -> None:
        self.pending = []

    def __call__(self, work) -> None:
        self.pending.append(work)

    def run_all(self) -> None:
        while self.pending:
            self.pending.pop(0)()


class DecodeUploadTests(unittest.TestCase):
    def test_text_types_are_decoded(self) -> None:
        self.assertEqual(decode_upload(UploadedFile("a.txt", b"hello", "text/plain")), "hello")
        self.assertEqual(decode_upload(UploadedFile("a.json", b"{}", "application/json")), "{}")
        self.assertEqual(decode_upload(UploadedFile("README.md", b"# hi")), "# hi")

    def test_binary_becomes_data_uri(self) -> None:
        data = b"\x89PNG\r\n"
        content = decode_upload(UploadedFile("pic.png", data, "image/png"))
        self.assertEqual(content, "data:image/png;base64," + base64.b64encode(data).decode("ascii"))

    def test_unknown_mime_defaults_to_octet_stream(self) -> None:
        content = decode_upload(UploadedFile("blob.bin", b"\x00"))
        self.assertTrue(content.startswith("data:application/octet-stream;base64,"))


class AnalysisContextTests(unittest.TestCase):
    def test_context_by_location(self) -> None:
        store = store_with(
            make_item("top"),
            folder("plain", name="Invoices"),
            make_item("in_plain", "plain"),
            case_folder("case", name="Alpha"),
            folder("mail", "case", name="Emails"),
            make_item("in_mail", "mail"),
            make_item("in_case", "case"),
        )
        self.assertEqual(analysis_context(store, store.get("top")), "General")
        self.assertEqual(analysis_context(store, store.get("in_plain")), "Invoices")
        self.assertEqual(analysis_context(store, store.get("in_mail")), "Case: Alpha, Category: Emails")
        self.assertEqual(analysis_context(store, store.get("in_case")), "Case: Alpha, Category: Alpha")


class AnalysisBridgeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = ItemStore()
        self.runner = ManualRunner()
        self.calls = []
        self.bridge = AnalysisBridge(self.store, self.fake_analyze, runner=self.runner)

    def fake_analyze(self, item, context):
        self.calls.append((item.name, context))
        return True, f"summary of {item.name}"

    def test_ingest_creates_analyzing_items_with_cascade(self) -> None:
        ids = self.bridge.ingest([UploadedFile("a.txt", b"x" * 2048, "text/plain"),
                                  UploadedFile("b.pdf", b"%PDF", "application/pdf")], None)
        self.assertEqual(len(ids), 2)
        first, second = (self.store.get(i) for i in ids)
        self.assertEqual(first.analysis_status, AnalysisStatus.ANALYZING)
        self.assertEqual(first.position, Position(50, 50))
        self.assertEqual(second.position, Position(70, 70))
        self.assertEqual(first.size, "2.00 KB")
        self.assertEqual(first.content, "x" * 2048)
        self.assertEqual(self.bridge.in_flight, set(ids))

    def test_items_are_created_pending_before_analysis_starts(self) -> None:
        seen = []
        self.store.add_listener(lambda: seen.append([i.analysis_status for i in self.store.items()]))
        self.bridge.ingest([UploadedFile("a.txt", b"x", "text/plain")], None)
        self.runner.run_all()
        self.assertEqual(seen[0], [AnalysisStatus.PENDING])
        self.assertEqual(seen[1], [AnalysisStatus.ANALYZING])
        self.assertEqual(seen[-1], [AnalysisStatus.COMPLETED])
        self.assertEqual(len(seen), 3)

    def test_completion_marks_completed_with_summary(self) -> None:
        (item_id,) = self.bridge.ingest([UploadedFile("a.txt", b"x", "text/plain")], None)
        self.runner.run_all()
        item = self.store.get(item_id)
        self.assertEqual(item.analysis_status, AnalysisStatus.COMPLETED)
        self.assertEqual(item.ai_summary, "summary of a.txt")
        self.assertEqual(self.calls, [("a.txt", "General")])
        self.assertEqual(self.bridge.in_flight, set())

    def test_failure_marks_failed(self) -> None:
        self.bridge.analyze = lambda item, context: (False, "nope")
        (item_id,) = self.bridge.ingest([UploadedFile("a.txt", b"x")], None)
        self.runner.run_all()
        item = self.store.get(item_id)
        self.assertEqual(item.analysis_status, AnalysisStatus.FAILED)
        self.assertEqual(item.ai_summary, "nope")

    def test_raising_collaborator_marks_failed(self) -> None:
        def explode(item, context):
            raise RuntimeError("boom")

        self.bridge.analyze = explode
        (item_id,) = self.bridge.ingest([UploadedFile("a.txt", b"x")], None)
        self.runner.run_all()
        item = self.store.get(item_id)
        self.assertEqual(item.analysis_status, AnalysisStatus.FAILED)
        self.assertEqual(item.ai_summary, ANALYSIS_FAILED_TEXT)

    def test_completion_after_delete_is_noop(self) -> None:
        (item_id,) = self.bridge.ingest([UploadedFile("a.txt", b"x")], None)
        self.store.delete({item_id})
        self.runner.run_all()
        self.assertIsNone(self.store.get(item_id))
        self.assertEqual(len(self.store), 0)

    def test_ingest_into_folder_uses_its_context(self) -> None:
        self.store.create(case_folder("case", name="Alpha"))
        self.bridge.ingest([UploadedFile("a.txt", b"x")], "case")
        self.runner.run_all()
        self.assertEqual(self.calls, [("a.txt", "Case: Alpha, Category: Alpha")])

    def test_dispatch_receives_completion(self) -> None:
        scheduled = []
        bridge = AnalysisBridge(self.store, self.fake_analyze, runner=run_inline,
                                dispatch=scheduled.append)
        (item_id,) = bridge.ingest([UploadedFile("a.txt", b"x")], None)
        self.assertEqual(self.store.get(item_id).analysis_status, AnalysisStatus.ANALYZING)
        scheduled[0]()
        self.assertEqual(self.store.get(item_id).analysis_status, AnalysisStatus.COMPLETED)

    def test_submit_unknown_item_returns_false(self) -> None:
        self.assertFalse(self.bridge.submit("ghost"))


if __name__ == "__main__":
    unittest.main()
