"""
clipboard.py - Copy / Paste of Desktop Items

Copy takes a snapshot of the selected items (and everything inside them).
Paste creates fresh copies with new ids in the current folder, shifting each
top-level copy a little further than the previous one so they do not stack
exactly on top of the originals.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from config import ICON_SIZE, PASTE_OFFSET, COPY_SUFFIX
from item_store import ItemStore, Item, CaseData, Position
from selection import SelectionController
from utils import clamp, generate_item_id, now_ms

logger = logging.getLogger(__name__)


class ClipboardController:

    def __init__(self, store: ItemStore, selection: SelectionController,
                 offset: float = PASTE_OFFSET, icon_size: float = ICON_SIZE):
        self.store = store
        self.selection = selection
        self.offset = offset
        self.icon_size = icon_size
        self._top_level: Tuple[Item, ...] = ()
        self._nested: Tuple[Item, ...] = ()
        self._cases: Dict[str, CaseData] = {}

    @property
    def is_empty(self) -> bool:
        return not self._top_level

    def copy(self, item_ids: Iterable[str]) -> int:
        """
        Snapshot items as they are now; ids are not remapped until paste.
        Returns the number of top-level items copied.
        """
        selected = [self.store.get(i) for i in item_ids]
        selected = [item for item in selected if item is not None]
        if not selected:
            return 0

        subtree = self.store.closure(item.id for item in selected)
        top_ids = {item.id for item in selected if item.parent_id not in subtree}

        self._top_level = tuple(item for item in selected if item.id in top_ids)
        self._nested = tuple(item for item in self.store.items()
                             if item.id in subtree and item.id not in top_ids)
        self._cases = {}
        for item in self._top_level + self._nested:
            case = self.store.get_case(item.id)
            if case is not None:
                self._cases[item.id] = case

        logger.debug(f"Copied {len(self._top_level)} item(s) ({len(self._nested)} nested)")
        return len(self._top_level)

    def clear(self):
        self._top_level = ()
        self._nested = ()
        self._cases = {}

    def paste(self, target_folder_id: Optional[str], container_size: Tuple[float, float]) -> List[str]:
        """
        Create copies of the clipboard in target_folder_id.

        Copies pasted back into the folder they came from get the copy
        suffix; pasted elsewhere they keep their names. The selection becomes
        exactly the new top-level copies. Empty clipboard: no-op.
        """
        if self.is_empty:
            return []

        width, height = container_size
        created_at = now_ms()
        id_map = {item.id: generate_item_id() for item in self._top_level + self._nested}
        entries = []

        for index, item in enumerate(self._top_level):
            shift = self.offset * (index + 1)
            position = Position(
                clamp(item.position.x + shift, 0, width - self.icon_size),
                clamp(item.position.y + shift, 0, height - self.icon_size),
            )
            name = item.name
            if item.parent_id == target_folder_id:
                name = f"{item.name} {COPY_SUFFIX}"
            entries.append(self._clone(item, id_map, target_folder_id, position, name, created_at))

        for item in self._nested:
            entries.append(self._clone(item, id_map, id_map[item.parent_id], item.position,
                                       item.name, created_at))

        self.store.create_many(entries)
        new_ids = [id_map[item.id] for item in self._top_level]
        self.selection.replace(new_ids)
        logger.debug(f"Pasted {len(entries)} item(s) into {target_folder_id or 'desktop'}")
        return new_ids

    def _clone(self, item: Item, id_map: Dict[str, str], parent_id: Optional[str],
               position: Position, name: str, created_at: int) -> Tuple[Item, Optional[CaseData]]:
        new_id = id_map[item.id]
        clone = replace(item, id=new_id, parent_id=parent_id, position=position,
                        name=name, created_at=created_at)
        case = self._cases.get(item.id)
        if case is not None:
            case = replace(case, id=new_id)
        return clone, case
