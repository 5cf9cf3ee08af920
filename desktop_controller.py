"""
desktop_controller.py - Event Routing for the Desktop

The view forwards raw pointer and keyboard events here. Depending on the
current mode each event goes to exactly one of the drag controller, the box
selector, the selection controller, navigation or the clipboard. All of them
change state only through the shared ItemStore.
"""

import logging
import random
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from config import (
    DEFAULT_CONTAINER_SIZE, DEFAULT_FOLDER_NAME, DEFAULT_CASE_NAME, DEFAULT_NOTE_NAME,
    NOTE_COLORS, CASE_INITIALIZED_TEXT, ICON_SIZE,
)
from item_store import ItemStore, Item, ItemType, AnalysisStatus, CaseData, Position
from selection import SelectionController
from navigation import NavigationController
from box_selector import BoxSelector
from drag_controller import DragController, DropResult
from clipboard import ClipboardController
from layout_engine import SortMethod, arrange
from analysis_bridge import AnalysisBridge, UploadedFile
from utils import generate_item_id, now_ms, clamp

logger = logging.getLogger(__name__)


class Mode(Enum):
    IDLE = 'idle'
    DRAG = 'drag'
    BOX = 'box'


class DesktopController:

    def __init__(self, store: ItemStore, bridge: Optional[AnalysisBridge] = None,
                 container_size: Tuple[float, float] = DEFAULT_CONTAINER_SIZE,
                 rng: random.Random = None):
        self.store = store
        self.selection = SelectionController(store)
        self.navigation = NavigationController(store, self.selection)
        self.box = BoxSelector(store, self.selection)
        self.drag = DragController(store, self.selection)
        self.clipboard = ClipboardController(store, self.selection)
        self.bridge = bridge
        self.container_size = container_size
        self.rng = rng or random.Random()

        self.mode = Mode.IDLE
        self.renaming_id: Optional[str] = None
        self._press_modifier = False

    # ========== QUERIES ==========

    @property
    def current_path(self) -> Optional[str]:
        return self.navigation.current_path

    @property
    def session_active(self) -> bool:
        """True while a drag or box-select needs global move/release events"""
        return self.mode is not Mode.IDLE

    @property
    def drop_target_id(self) -> Optional[str]:
        return self.drag.drop_target_id

    def visible_items(self) -> List[Item]:
        return self.store.children_of(self.current_path)

    def can_create_smart_folder(self) -> bool:
        """Cases cannot be nested: no new smart folder inside a smart context"""
        return self.navigation.smart_context_id() is None

    def set_container_size(self, width: float, height: float):
        if width > 1 and height > 1:
            self.container_size = (width, height)

    # ========== POINTER EVENTS ==========

    def press_item(self, item_id: str, point: Position, modifier: bool = False) -> Mode:
        """Primary press on an item: may start a drag session"""
        if self.session_active:
            return self.mode
        if self.renaming_id is not None:
            return self.mode
        if item_id not in self.store:
            return self.mode

        self._press_modifier = modifier
        if not self.selection.press_item(item_id, modifier):
            return self.mode

        if self.drag.press(item_id, point, self.current_path) is not None:
            self.mode = Mode.DRAG
        return self.mode

    def press_canvas(self, point: Position, modifier: bool = False) -> Mode:
        """Primary press on empty background: starts a box-select session"""
        if self.session_active:
            return self.mode
        self.renaming_id = None
        self.selection.click_canvas(modifier)
        self.box.begin(point, self.current_path)
        self.mode = Mode.BOX
        return self.mode

    def pointer_move(self, point: Position):
        if self.mode is Mode.DRAG:
            self.drag.move(point, self.container_size)
        elif self.mode is Mode.BOX:
            self.box.move(point)

    def pointer_release(self) -> Optional[DropResult]:
        """End whichever session is active; returns the drop result for drags"""
        result = None
        if self.mode is Mode.DRAG:
            result = self.drag.release()
            if result is not None and result.was_click:
                self.selection.click_item(result.primary_id, self._press_modifier)
        elif self.mode is Mode.BOX:
            self.box.end()
        self.mode = Mode.IDLE
        self._press_modifier = False
        return result

    def cancel_session(self):
        if self.mode is Mode.DRAG:
            self.drag.cancel()
        elif self.mode is Mode.BOX:
            self.box.end()
        self.mode = Mode.IDLE

    def double_click(self, item_id: str) -> Optional[Item]:
        """Enter folders; returns files/notes for the preview instead"""
        if self.session_active:
            self.cancel_session()
        return self.navigation.open_item(item_id)

    # ========== NAVIGATION ==========

    def navigate_up(self) -> bool:
        return self.navigation.navigate_up()

    def navigate_to(self, folder_id: Optional[str]) -> bool:
        return self.navigation.navigate_to(folder_id)

    # ========== SELECTION / CLIPBOARD ==========

    def select_all(self):
        self.selection.select_all(self.current_path)

    def copy(self) -> int:
        return self.clipboard.copy(self.selection.ids)

    def paste(self) -> List[str]:
        return self.clipboard.paste(self.current_path, self.container_size)

    # ========== ITEM OPERATIONS ==========

    def create_item(self, item_type: ItemType, position: Position = None) -> Optional[Item]:
        """
        New folder, smart folder or note in the current folder.

        The new item is put into rename mode. Smart folders are refused
        inside an existing case.
        """
        if item_type is ItemType.FILE:
            raise ValueError("Files are created by upload, not create_item")
        if item_type is ItemType.SMART_FOLDER and not self.can_create_smart_folder():
            logger.debug("Smart folder creation refused inside a case")
            return None

        if position is None:
            position = Position(100, 100)
        width, height = self.container_size
        position = Position(clamp(position.x, 0, width - ICON_SIZE), clamp(position.y, 0, height - ICON_SIZE))

        case = None
        if item_type is ItemType.FOLDER:
            name = DEFAULT_FOLDER_NAME
        elif item_type is ItemType.SMART_FOLDER:
            name = DEFAULT_CASE_NAME
        else:
            name = DEFAULT_NOTE_NAME

        item = Item(
            id=generate_item_id(),
            parent_id=self.current_path,
            name=name,
            type=item_type,
            position=position,
            created_at=now_ms(),
            analysis_status=AnalysisStatus.COMPLETED,
            content="" if item_type is ItemType.NOTE else None,
            color=self.rng.choice(NOTE_COLORS) if item_type is ItemType.NOTE else None,
        )
        if item_type is ItemType.SMART_FOLDER:
            case = CaseData(id=item.id, scenario=CASE_INITIALIZED_TEXT, confidence_score=0)

        self.store.create(item, case)
        self.selection.replace([item.id])
        self.renaming_id = item.id
        return item

    def begin_rename(self, item_id: Optional[str] = None) -> Optional[str]:
        """Enter rename mode for item_id, or the single selected item"""
        item_id = item_id or self.selection.single()
        if item_id is None or item_id not in self.store:
            return None
        self.renaming_id = item_id
        return item_id

    def rename(self, item_id: str, new_name: str) -> Optional[Item]:
        """Empty or whitespace-only names are ignored"""
        self.renaming_id = None
        new_name = (new_name or "").strip()
        if not new_name:
            return None
        return self.store.update(item_id, name=new_name)

    def cancel_rename(self):
        self.renaming_id = None

    def update_content(self, item_id: str, content: str) -> Optional[Item]:
        return self.store.update(item_id, content=content)

    def delete_selected(self) -> int:
        return len(self.delete(self.selection.ids))

    def delete(self, item_ids: Iterable[str]):
        removed = self.store.delete(item_ids)
        self.selection.prune()
        if self.renaming_id in removed:
            self.renaming_id = None
        self.navigation.ensure_valid()
        return removed

    def auto_arrange(self, method: SortMethod, width: float = None):
        if width is None:
            width = self.container_size[0]
        positions = arrange(self.visible_items(), method, width)
        self.store.update_many({item_id: {'position': p} for item_id, p in positions.items()})

    def upload(self, uploads: Iterable[UploadedFile]) -> List[str]:
        if self.bridge is None:
            raise RuntimeError("No analysis bridge configured")
        return self.bridge.ingest(uploads, self.current_path)
