"""
drag_controller.py - Moving and Re-Parenting Items With the Pointer

A drag starts on a primary press over an item. The dragged set is either the
whole selection (when the pressed item is part of it) or just the pressed
item. Each move repositions every dragged item relative to the pointer and
looks for a folder under the pressed ("primary") item. Releasing over a
folder moves the dragged items into it; releasing anywhere else just leaves
them where they were dragged.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from config import ICON_SIZE, DROP_PROXIMITY, DROP_ANCHOR, DRAG_START_THRESHOLD
from item_store import ItemStore, Position
from selection import SelectionController
from utils import clamp

logger = logging.getLogger(__name__)


@dataclass
class DragSession:
    primary_id: str
    item_ids: Tuple[str, ...]
    folder_id: Optional[str]
    offsets: Dict[str, Position]  # pointer - item position, fixed at press time
    start_positions: Dict[str, Position]
    drop_target_id: Optional[str] = None


@dataclass(frozen=True)
class DropResult:
    item_ids: Tuple[str, ...]
    primary_id: str
    target_id: Optional[str] = None  # folder the items were moved into
    moved: bool = False  # False means the press/release was really a click
    reparented: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def was_click(self) -> bool:
        return not self.moved


class DragController:

    def __init__(self, store: ItemStore, selection: SelectionController,
                 icon_size: float = ICON_SIZE, proximity: float = DROP_PROXIMITY,
                 drop_anchor: Tuple[float, float] = DROP_ANCHOR,
                 start_threshold: float = DRAG_START_THRESHOLD):
        self.store = store
        self.selection = selection
        self.icon_size = icon_size
        self.proximity = proximity
        self.drop_anchor = Position(*drop_anchor)
        self.start_threshold = start_threshold
        self.session: Optional[DragSession] = None

    @property
    def active(self) -> bool:
        return self.session is not None

    @property
    def drop_target_id(self) -> Optional[str]:
        return self.session.drop_target_id if self.session else None

    # ========== SESSION ==========

    def press(self, item_id: str, pointer: Position, folder_id: Optional[str]) -> Optional[DragSession]:
        """Start a session on item_id; returns None if the item is gone"""
        item = self.store.get(item_id)
        if item is None:
            return None

        if item_id in self.selection:
            dragged = [i for i in self.selection.ids
                       if self.store.get(i) is not None and self.store.get(i).parent_id == item.parent_id]
        else:
            self.selection.replace([item_id])
            dragged = [item_id]

        offsets = {}
        start_positions = {}
        for dragged_id in dragged:
            position = self.store.get(dragged_id).position
            offsets[dragged_id] = Position(pointer.x - position.x, pointer.y - position.y)
            start_positions[dragged_id] = position

        self.session = DragSession(
            primary_id=item_id,
            item_ids=tuple(dragged),
            folder_id=folder_id,
            offsets=offsets,
            start_positions=start_positions,
        )
        logger.debug(f"Drag started on {item_id} with {len(dragged)} item(s)")
        return self.session

    def move(self, pointer: Position, container_size: Tuple[float, float]) -> Optional[str]:
        """
        Reposition the dragged items and recompute the drop target.

        Positions are clamped so the whole icon stays inside the container.
        Returns the current drop-target id (or None).
        """
        session = self.session
        if session is None:
            return None

        width, height = container_size
        changes = {}
        for item_id in session.item_ids:
            offset = session.offsets[item_id]
            x = clamp(pointer.x - offset.x, 0, width - self.icon_size)
            y = clamp(pointer.y - offset.y, 0, height - self.icon_size)
            changes[item_id] = {'position': Position(x, y)}
        self.store.update_many(changes)

        primary = self.store.get(session.primary_id)
        session.drop_target_id = self.find_drop_target(primary.position) if primary else None
        return session.drop_target_id

    def find_drop_target(self, position: Position) -> Optional[str]:
        """First non-dragged folder in the session folder close to position"""
        session = self.session
        for candidate in self.store.children_of(session.folder_id):
            if candidate.id in session.item_ids:
                continue
            if not candidate.type.is_drop_target():
                continue
            if (abs(candidate.position.x - position.x) < self.proximity and
                    abs(candidate.position.y - position.y) < self.proximity):
                return candidate.id
        return None

    def release(self) -> Optional[DropResult]:
        """
        End the session.

        The press counts as a click when the primary item ends up where it
        started (within the start threshold), even if the pointer wandered
        in between or the item was held at the container edge.

        With a drop target, every dragged item is moved into it and placed
        at the drop anchor; the selection is left as it was. Without one the
        items keep their dragged positions.
        """
        session = self.session
        if session is None:
            return None
        self.session = None

        if not self._primary_moved(session):
            # A click: anything else that shifted while the primary was pinned goes back
            restore = {}
            for item_id, start in session.start_positions.items():
                item = self.store.get(item_id)
                if item is not None and item.position != start:
                    restore[item_id] = {'position': start}
            self.store.update_many(restore)
            return DropResult(item_ids=session.item_ids, primary_id=session.primary_id, moved=False)

        reparented = ()
        if session.drop_target_id is not None:
            reparented = tuple(self.store.reparent(session.item_ids, session.drop_target_id,
                                                   position=self.drop_anchor))
            logger.debug(f"Dropped {len(reparented)} item(s) into {session.drop_target_id}")

        return DropResult(
            item_ids=session.item_ids,
            primary_id=session.primary_id,
            target_id=session.drop_target_id,
            moved=True,
            reparented=reparented,
        )

    def _primary_moved(self, session: DragSession) -> bool:
        primary = self.store.get(session.primary_id)
        if primary is None:
            return False
        start = session.start_positions[session.primary_id]
        return (abs(primary.position.x - start.x) > self.start_threshold or
                abs(primary.position.y - start.y) > self.start_threshold)

    def cancel(self):
        """Abort the session and put items back where they started"""
        session = self.session
        if session is None:
            return
        self.session = None
        self.store.update_many({item_id: {'position': position}
                                for item_id, position in session.start_positions.items()})
