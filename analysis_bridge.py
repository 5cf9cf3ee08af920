"""
analysis_bridge.py - Upload Ingestion and Background Analysis

Turns uploaded files into FILE items and runs one AI analysis per file in
the background. Each item moves PENDING -> ANALYZING -> COMPLETED / FAILED.

Analyses are fire-and-forget: there is no timeout and no explicit cancel.
A completion for an item that was deleted in the meantime is dropped
because ItemStore.update ignores unknown ids.
"""

import base64
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Set, Tuple

from config import UPLOAD_ORIGIN, UPLOAD_CASCADE, TEXT_MIME_TYPES, TEXT_EXTENSIONS, ANALYSIS_FAILED_TEXT
from item_store import ItemStore, Item, ItemType, AnalysisStatus, Position
from utils import generate_item_id, now_ms, format_size

logger = logging.getLogger(__name__)

# analyze(item, context) -> (success, summary)
AnalyzeFn = Callable[[Item, str], Tuple[bool, str]]


@dataclass(frozen=True)
class UploadedFile:
    """Raw upload as handed over by the file dialog or a drop"""
    name: str
    data: bytes
    mime_type: str = ""


# -------------------------
# Upload Decoding
# -------------------------

def is_text_upload(name: str, mime_type: str) -> bool:
    if mime_type.startswith("text/") or mime_type in TEXT_MIME_TYPES:
        return True
    return any(name.lower().endswith(ext) for ext in TEXT_EXTENSIONS)


def decode_upload(upload: UploadedFile) -> str:
    """Text files become their text, everything else a base64 data URI"""
    if is_text_upload(upload.name, upload.mime_type):
        return upload.data.decode("utf-8", errors="replace")
    mime = upload.mime_type or "application/octet-stream"
    return f"data:{mime};base64,{base64.b64encode(upload.data).decode('ascii')}"


def analysis_context(store: ItemStore, item: Item) -> str:
    """
    Describe where an item sits for the analysis prompt: 'General' on the
    desktop, the parent folder's name otherwise, prefixed with the case name
    when the item is inside a smart folder.
    """
    parent = store.get(item.parent_id)
    if parent is None:
        return "General"
    context = parent.name
    for folder in [parent] + store.ancestors_of(parent.id):
        if folder.type is ItemType.SMART_FOLDER:
            return f"Case: {folder.name}, Category: {context}"
    return context


# -------------------------
# Runners
# -------------------------

def start_in_thread(work: Callable[[], None]):
    """Run work on a daemon thread"""
    thread = threading.Thread(target=work, daemon=True)
    thread.start()


def run_inline(work: Callable[[], None]):
    work()


class AnalysisBridge:
    """
    Args:
        store: ItemStore the items live in
        analyze: the AI collaborator, called off the UI thread
        runner: starts a unit of background work (thread by default)
        dispatch: schedules a callback back on the UI thread; with Tk this
            is ``lambda fn: root.after(0, fn)``. Defaults to calling directly.
    """

    def __init__(self, store: ItemStore, analyze: AnalyzeFn,
                 runner: Callable[[Callable[[], None]], None] = start_in_thread,
                 dispatch: Optional[Callable[[Callable[[], None]], None]] = None):
        self.store = store
        self.analyze = analyze
        self.runner = runner
        self.dispatch = dispatch or (lambda fn: fn())
        self.in_flight: Set[str] = set()

    def ingest(self, uploads: Iterable[UploadedFile], folder_id: Optional[str]) -> List[str]:
        """Create one PENDING item per upload in folder_id, then analyse each"""
        created_at = now_ms()
        entries = []
        for index, upload in enumerate(uploads):
            offset = index * UPLOAD_CASCADE
            item = Item(
                id=generate_item_id(),
                parent_id=folder_id,
                name=upload.name,
                type=ItemType.FILE,
                position=Position(*UPLOAD_ORIGIN).offset(offset, offset),
                created_at=created_at,
                content=decode_upload(upload),
                mime_type=upload.mime_type,
                size=format_size(len(upload.data)),
                analysis_status=AnalysisStatus.PENDING,
            )
            entries.append((item, None))

        created = self.store.create_many(entries)
        logger.info(f"Ingested {len(created)} upload(s)")
        for item in created:
            self.submit(item.id)
        return [item.id for item in created]

    def submit(self, item_id: str) -> bool:
        """Mark the item ANALYZING and hand it to the collaborator"""
        item = self.store.update(item_id, analysis_status=AnalysisStatus.ANALYZING)
        if item is None:
            return False
        context = analysis_context(self.store, item)
        self.in_flight.add(item_id)

        def work():
            try:
                success, summary = self.analyze(item, context)
            except Exception as e:
                logger.error(f"Analysis collaborator raised for {item_id}: {e}")
                success, summary = False, ANALYSIS_FAILED_TEXT
            self.dispatch(lambda: self.complete(item_id, success, summary))

        self.runner(work)
        return True

    def complete(self, item_id: str, success: bool, summary: str) -> Optional[Item]:
        """Apply a terminal result; no-op if the item has been deleted"""
        self.in_flight.discard(item_id)
        status = AnalysisStatus.COMPLETED if success else AnalysisStatus.FAILED
        updated = self.store.update(item_id, analysis_status=status, ai_summary=summary)
        if updated is None:
            logger.debug(f"Analysis finished for deleted item {item_id}, ignoring")
        else:
            logger.debug(f"Analysis {status.value} for '{updated.name}'")
        return updated
