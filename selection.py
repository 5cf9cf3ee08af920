"""
selection.py - Selection State

Ordered set of selected item ids. The selection always belongs to the folder
currently on screen: navigation clears it and select_all only looks at one
folder.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from item_store import ItemStore

logger = logging.getLogger(__name__)


class SelectionController:

    def __init__(self, store: ItemStore):
        self.store = store
        self._selected: List[str] = []

    # ========== QUERIES ==========

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(self._selected)

    def __contains__(self, item_id) -> bool:
        return item_id in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    def is_empty(self) -> bool:
        return not self._selected

    def single(self) -> Optional[str]:
        """The selected id if exactly one item is selected"""
        if len(self._selected) == 1:
            return self._selected[0]
        return None

    # ========== MUTATIONS ==========

    def replace(self, item_ids: Iterable[str]):
        ordered = []
        for item_id in item_ids:
            if item_id not in ordered:
                ordered.append(item_id)
        self._selected = ordered

    def clear(self):
        self._selected = []

    def toggle(self, item_id: str):
        if item_id in self._selected:
            self._selected = [i for i in self._selected if i != item_id]
        else:
            self._selected = self._selected + [item_id]

    def select_all(self, folder_id: Optional[str]):
        self._selected = self.store.child_ids(folder_id)

    def prune(self):
        """Forget ids that no longer exist in the store"""
        self._selected = [i for i in self._selected if i in self.store]

    # ========== POINTER RULES ==========

    def press_item(self, item_id: str, modifier: bool = False) -> bool:
        """
        Apply the selection rules for a primary press on an item.

        Modifier presses toggle membership and never start a drag. A plain
        press on an unselected item selects just that item. A plain press on
        an already-selected item leaves the selection alone so the whole group
        can be dragged; if no drag follows, click_item() narrows it.

        Returns True if a drag may start from this press.
        """
        if modifier:
            self.toggle(item_id)
            return False
        if item_id not in self._selected:
            self.replace([item_id])
        return True

    def click_item(self, item_id: str, modifier: bool = False):
        """A press/release on an item without movement"""
        if not modifier:
            self.replace([item_id])

    def click_canvas(self, modifier: bool = False):
        """A press on empty background; a held modifier keeps the selection"""
        if not modifier:
            self.clear()
