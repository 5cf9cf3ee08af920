"""
navigation.py - Current Folder Tracking

Keeps track of which folder the desktop is showing and which way the last
transition went (the view uses the direction to pick its animation).
"""

import logging
from enum import Enum
from typing import List, Optional

from item_store import ItemStore, Item, ROOT
from selection import SelectionController

logger = logging.getLogger(__name__)


class Direction(Enum):
    FORWARD = 1  # into a folder
    BACKWARD = -1  # up towards the desktop
    NONE = 0


class NavigationController:
    """Owns current_path; every transition clears the selection"""

    def __init__(self, store: ItemStore, selection: SelectionController):
        self.store = store
        self.selection = selection
        self.current_path: Optional[str] = ROOT
        self.direction = Direction.NONE

    @property
    def at_root(self) -> bool:
        return self.current_path is ROOT

    def current_folder(self) -> Optional[Item]:
        return self.store.get(self.current_path)

    def open_item(self, item_id: str) -> Optional[Item]:
        """
        Handle a double-click on an item.

        Folders and smart folders are entered and None is returned. Files and
        notes are not navigable; the item is returned so the caller can hand
        it to the preview.
        """
        item = self.store.get(item_id)
        if item is None:
            return None
        if item.type.is_navigable():
            self.enter(item.id)
            return None
        return item

    def enter(self, folder_id: str) -> bool:
        folder = self.store.get(folder_id)
        if folder is None or not folder.type.is_navigable():
            return False
        self.current_path = folder.id
        self.direction = Direction.FORWARD
        self.selection.clear()
        logger.debug(f"Entered folder '{folder.name}' ({folder.id})")
        return True

    def navigate_up(self) -> bool:
        """Go to the parent of the current folder; no-op on the desktop"""
        if self.at_root:
            return False
        folder = self.current_folder()
        self.current_path = folder.parent_id if folder is not None else ROOT
        self.direction = Direction.BACKWARD
        self.selection.clear()
        logger.debug(f"Navigated up to {self.current_path or 'desktop'}")
        return True

    def navigate_to(self, folder_id: Optional[str]) -> bool:
        """Jump to a breadcrumb entry (None = desktop)"""
        if folder_id == self.current_path:
            return False
        if folder_id is not ROOT:
            folder = self.store.get(folder_id)
            if folder is None or not folder.type.is_navigable():
                return False
        ancestors = {a.id for a in self.store.ancestors_of(self.current_path)}
        self.direction = Direction.BACKWARD if (folder_id is ROOT or folder_id in ancestors) else Direction.FORWARD
        self.current_path = folder_id
        self.selection.clear()
        return True

    def breadcrumbs(self) -> List[Item]:
        """Folders from the desktop down to the current folder"""
        return self.store.path_to(self.current_path)

    def smart_context_id(self) -> Optional[str]:
        return self.store.smart_context_id(self.current_path)

    def ensure_valid(self) -> bool:
        """
        Fall back to the desktop if the current folder was deleted.
        Returns True if the path changed.
        """
        if self.at_root or self.current_path in self.store:
            return False
        self.current_path = ROOT
        self.direction = Direction.BACKWARD
        self.selection.clear()
        return True
