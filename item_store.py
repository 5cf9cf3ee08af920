"""
item_store.py - Desktop Item Store and Case Registry

The single source of truth for everything shown on the desktop. Items form a
forest through their parent_id references (None = the desktop itself).
Smart folders own a CaseData record that lives and dies with the item.

Every mutation replaces the internal collection with a new one, so a tuple
returned by items() is a consistent snapshot that later edits never touch.
Controllers never modify Item objects directly: items are frozen and all
changes go through create / update / update_many / reparent / delete.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from config import CASE_INITIALIZED_TEXT

logger = logging.getLogger(__name__)

ROOT = None  # parent_id of items that sit directly on the desktop


# ============================================================================
# ITEM TYPES
# ============================================================================

class ItemType(Enum):
    FILE = 'FILE'
    FOLDER = 'FOLDER'
    SMART_FOLDER = 'SMART_FOLDER'
    NOTE = 'NOTE'

    def is_container(self) -> bool:
        """Folders and smart folders hold children, accept drops and can be entered"""
        if self is ItemType.FOLDER or self is ItemType.SMART_FOLDER:
            return True
        if self is ItemType.FILE or self is ItemType.NOTE:
            return False
        raise ValueError(f"Unhandled item type: {self}")

    def is_navigable(self) -> bool:
        return self.is_container()

    def is_drop_target(self) -> bool:
        return self.is_container()

    def is_evidence(self) -> bool:
        """Files and notes count as case evidence"""
        return not self.is_container()

    def is_editable(self) -> bool:
        """Only notes are edited in place; text files are editable through the preview"""
        if self is ItemType.NOTE:
            return True
        if self is ItemType.FILE or self is ItemType.FOLDER or self is ItemType.SMART_FOLDER:
            return False
        raise ValueError(f"Unhandled item type: {self}")


class AnalysisStatus(Enum):
    PENDING = 'PENDING'
    ANALYZING = 'ANALYZING'
    COMPLETED = 'COMPLETED'
    FAILED = 'FAILED'

    def is_terminal(self) -> bool:
        return self in (AnalysisStatus.COMPLETED, AnalysisStatus.FAILED)


# ============================================================================
# RECORDS
# ============================================================================

@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def offset(self, dx: float, dy: float) -> 'Position':
        return Position(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Item:
    """A node on the desktop: file, folder, smart folder (case) or note"""
    id: str
    parent_id: Optional[str]
    name: str
    type: ItemType
    position: Position
    created_at: int
    content: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[str] = None
    analysis_status: AnalysisStatus = AnalysisStatus.COMPLETED
    ai_summary: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class ChatMessage:
    id: str
    role: str  # 'user' or 'model'
    text: str
    timestamp: int


@dataclass(frozen=True)
class CaseData:
    """Extended record for a smart folder; id equals the owning item's id"""
    id: str
    scenario: str
    confidence_score: float = 0
    pending_questions: Tuple[str, ...] = ()
    chat_history: Tuple[ChatMessage, ...] = field(default_factory=tuple)


# Fields fixed at creation time
IMMUTABLE_ITEM_FIELDS = {'id', 'type', 'created_at', 'mime_type', 'size'}
IMMUTABLE_CASE_FIELDS = {'id'}


# ============================================================================
# CASE REGISTRY
# ============================================================================

class CaseRegistry:
    """
    Mapping from smart-folder id to its CaseData.

    Only ItemStore adds and removes records, which keeps the registry in
    lockstep with the smart folders in the store.
    """

    def __init__(self):
        self._cases: Dict[str, CaseData] = {}

    def get(self, case_id: str) -> Optional[CaseData]:
        return self._cases.get(case_id)

    def __contains__(self, case_id) -> bool:
        return case_id in self._cases

    def __len__(self) -> int:
        return len(self._cases)

    def _put(self, case: CaseData):
        self._cases = {**self._cases, case.id: case}

    def _remove(self, case_ids: Set[str]):
        if case_ids & self._cases.keys():
            self._cases = {cid: c for cid, c in self._cases.items() if cid not in case_ids}

    def update(self, case_id: str, **fields) -> Optional[CaseData]:
        """Replace fields on a case record; unknown ids are a no-op"""
        bad = IMMUTABLE_CASE_FIELDS & fields.keys()
        if bad:
            raise ValueError(f"Cannot change immutable case field(s): {', '.join(sorted(bad))}")
        case = self._cases.get(case_id)
        if case is None:
            return None
        if 'pending_questions' in fields:
            fields['pending_questions'] = tuple(fields['pending_questions'])
        if 'chat_history' in fields:
            fields['chat_history'] = tuple(fields['chat_history'])
        updated = replace(case, **fields)
        self._put(updated)
        return updated

    def append_chat_message(self, case_id: str, message: ChatMessage) -> Optional[CaseData]:
        case = self._cases.get(case_id)
        if case is None:
            return None
        updated = replace(case, chat_history=case.chat_history + (message,))
        self._put(updated)
        return updated


# ============================================================================
# ITEM STORE
# ============================================================================

class ItemStore:
    """
    Canonical id -> Item mapping plus the case registry.

    Iteration order is insertion order; drag hit-testing relies on it for
    its tie-break.
    """

    def __init__(self):
        self._items: Dict[str, Item] = {}
        self.cases = CaseRegistry()
        self._listeners: List[Callable[[], None]] = []

    # ========== LISTENERS ==========

    def add_listener(self, callback: Callable[[], None]):
        """Register a callback fired after every successful mutation"""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self):
        for callback in list(self._listeners):
            callback()

    # ========== QUERIES ==========

    def __contains__(self, item_id) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: Optional[str]) -> Optional[Item]:
        if item_id is None:
            return None
        return self._items.get(item_id)

    def items(self) -> Tuple[Item, ...]:
        """Snapshot of every item in store order"""
        return tuple(self._items.values())

    def children_of(self, parent_id: Optional[str]) -> List[Item]:
        return [item for item in self._items.values() if item.parent_id == parent_id]

    def child_ids(self, parent_id: Optional[str]) -> List[str]:
        return [item.id for item in self._items.values() if item.parent_id == parent_id]

    def closure(self, seed_ids: Iterable[str]) -> Set[str]:
        """
        Seed ids plus every transitive descendant.

        Grows the set by adding any item whose parent is already in it until
        a pass adds nothing, so depth is bounded by the loop, not the stack.
        """
        accumulated = set(seed_ids)
        while True:
            grown = {item.id for item in self._items.values()
                     if item.parent_id is not None and item.parent_id in accumulated}
            if grown <= accumulated:
                return accumulated
            accumulated |= grown

    def descendants_of(self, item_id: str) -> Set[str]:
        """All transitive descendants of item_id, never item_id itself"""
        return self.closure({item_id}) - {item_id}

    def ancestors_of(self, item_id: Optional[str]) -> List[Item]:
        """Parent chain from the nearest parent up to a root item"""
        chain = []
        seen = {item_id}
        current = self.get(item_id)
        while current is not None and current.parent_id is not None:
            if current.parent_id in seen:
                logger.warning(f"Parent cycle detected above item {item_id}")
                break
            seen.add(current.parent_id)
            current = self.get(current.parent_id)
            if current is not None:
                chain.append(current)
        return chain

    def path_to(self, folder_id: Optional[str]) -> List[Item]:
        """Folders from the desktop down to folder_id (inclusive)"""
        folder = self.get(folder_id)
        if folder is None:
            return []
        return list(reversed(self.ancestors_of(folder_id))) + [folder]

    def smart_context_id(self, folder_id: Optional[str]) -> Optional[str]:
        """Nearest smart folder at or above folder_id, or None outside any case"""
        for folder in reversed(self.path_to(folder_id)):
            if folder.type is ItemType.SMART_FOLDER:
                return folder.id
        return None

    def case_evidence(self, case_id: str) -> List[Item]:
        """
        Files and notes belonging to a case.

        Recurses through plain folders but stops at nested smart folders,
        which are cases of their own.
        """
        evidence = []
        frontier = [case_id]
        visited = set()
        while frontier:
            folder_id = frontier.pop(0)
            if folder_id in visited:
                continue
            visited.add(folder_id)
            children = self.children_of(folder_id)
            evidence.extend(c for c in children if c.type.is_evidence())
            frontier.extend(c.id for c in children if c.type is ItemType.FOLDER)
        return evidence

    # ========== MUTATIONS ==========

    def create(self, item: Item, case: Optional[CaseData] = None) -> Item:
        """
        Add a new item.

        Smart folders get their case record in the same step; pass one to
        clone an existing case, otherwise an empty record is created.
        """
        if item.id in self._items:
            raise ValueError(f"Item id already exists: {item.id}")
        if item.parent_id is not None and item.parent_id not in self._items:
            logger.warning(f"Creating item {item.id} under unknown parent {item.parent_id}")

        self._items = {**self._items, item.id: item}
        if item.type is ItemType.SMART_FOLDER:
            if case is None:
                case = CaseData(id=item.id, scenario=CASE_INITIALIZED_TEXT)
            elif case.id != item.id:
                case = replace(case, id=item.id)
            self.cases._put(case)

        logger.debug(f"Created {item.type.value} '{item.name}' ({item.id}) in {item.parent_id or 'desktop'}")
        self._notify()
        return item

    def create_many(self, entries: Iterable[Tuple[Item, Optional[CaseData]]]) -> List[Item]:
        """Create several items as one change (one listener notification)"""
        entries = list(entries)
        new_items = dict(self._items)
        new_cases = []
        for item, case in entries:
            if item.id in new_items:
                raise ValueError(f"Item id already exists: {item.id}")
            new_items[item.id] = item
            if item.type is ItemType.SMART_FOLDER:
                if case is None:
                    case = CaseData(id=item.id, scenario=CASE_INITIALIZED_TEXT)
                new_cases.append(replace(case, id=item.id))

        self._items = new_items
        for case in new_cases:
            self.cases._put(case)
        if entries:
            logger.debug(f"Created {len(entries)} item(s)")
            self._notify()
        return [item for item, _ in entries]

    def update(self, item_id: str, **fields) -> Optional[Item]:
        """
        Replace fields on one item.

        Returns the updated item, or None if the id no longer exists (late
        analysis completions rely on this being a silent no-op).
        """
        updated = self.update_many({item_id: fields})
        return updated.get(item_id)

    def update_many(self, changes: Dict[str, dict]) -> Dict[str, Item]:
        """Apply per-item field changes in one step; unknown ids are skipped"""
        for fields in changes.values():
            bad = IMMUTABLE_ITEM_FIELDS & fields.keys()
            if bad:
                raise ValueError(f"Cannot change immutable field(s): {', '.join(sorted(bad))}")

        updated = {}
        for item_id, fields in changes.items():
            item = self._items.get(item_id)
            if item is None:
                continue
            updated[item_id] = replace(item, **fields)

        if updated:
            self._items = {iid: updated.get(iid, item) for iid, item in self._items.items()}
            self._notify()
        return updated

    def reparent(self, item_ids: Iterable[str], target_id: Optional[str],
                 position: Optional[Position] = None) -> List[str]:
        """
        Move items under target_id (None = desktop).

        An item cannot be moved into itself or any of its own descendants;
        such items are skipped so the parent graph stays a forest.
        Returns the ids that were actually moved.
        """
        if target_id is not None:
            target = self._items.get(target_id)
            if target is None or not target.type.is_drop_target():
                logger.debug(f"Reparent target {target_id} is not a folder, ignoring")
                return []

        changes = {}
        for item_id in item_ids:
            if item_id not in self._items:
                continue
            if target_id is not None and (target_id == item_id or target_id in self.descendants_of(item_id)):
                logger.warning(f"Refusing to move {item_id} into itself or its own descendant {target_id}")
                continue
            fields = {'parent_id': target_id}
            if position is not None:
                fields['position'] = position
            changes[item_id] = fields

        return list(self.update_many(changes).keys())

    def delete(self, item_ids: Iterable[str]) -> Set[str]:
        """
        Delete items and, transitively, everything inside them.

        Case records of deleted smart folders go with them. Ids that do not
        exist are ignored. Returns the set of ids actually removed.
        """
        requested = {iid for iid in item_ids if iid in self._items}
        if not requested:
            return set()

        doomed = self.closure(requested)
        doomed_cases = {iid for iid in doomed if self._items[iid].type is ItemType.SMART_FOLDER}

        self._items = {iid: item for iid, item in self._items.items() if iid not in doomed}
        self.cases._remove(doomed_cases)

        logger.debug(f"Deleted {len(doomed)} item(s) ({len(doomed_cases)} case record(s))")
        self._notify()
        return doomed

    # ========== CASE RECORDS ==========

    def get_case(self, case_id: str) -> Optional[CaseData]:
        return self.cases.get(case_id)

    def update_case(self, case_id: str, **fields) -> Optional[CaseData]:
        updated = self.cases.update(case_id, **fields)
        if updated is not None:
            self._notify()
        return updated

    def append_chat_message(self, case_id: str, message: ChatMessage) -> Optional[CaseData]:
        updated = self.cases.append_chat_message(case_id, message)
        if updated is not None:
            self._notify()
        return updated
