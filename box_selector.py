"""
box_selector.py - Rubber-Band Selection

A box-select session starts with a primary press on empty canvas and ends on
release. Every pointer move recomputes the rectangle and replaces the
selection with the items whose icon box intersects it.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from config import ICON_SIZE
from item_store import ItemStore, Position
from selection import SelectionController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    right: float
    bottom: float

    @staticmethod
    def from_points(a: Position, b: Position) -> 'Rect':
        """Axis-aligned rectangle spanning two corners in any order"""
        return Rect(min(a.x, b.x), min(a.y, b.y), max(a.x, b.x), max(a.y, b.y))

    @staticmethod
    def around(position: Position, size: float) -> 'Rect':
        """Square footprint anchored at an item's top-left position"""
        return Rect(position.x, position.y, position.x + size, position.y + size)


def rects_overlap(a: Rect, b: Rect) -> bool:
    """Strict overlap: touching edges do not count"""
    return (a.left < b.right and b.left < a.right and
            a.top < b.bottom and b.top < a.bottom)


class BoxSelector:

    def __init__(self, store: ItemStore, selection: SelectionController, icon_size: float = ICON_SIZE):
        self.store = store
        self.selection = selection
        self.icon_size = icon_size
        self.start: Optional[Position] = None
        self.current: Optional[Position] = None
        self.folder_id: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.start is not None

    @property
    def rect(self) -> Optional[Rect]:
        if not self.active:
            return None
        return Rect.from_points(self.start, self.current)

    def begin(self, point: Position, folder_id: Optional[str]):
        self.start = point
        self.current = point
        self.folder_id = folder_id
        logger.debug(f"Box select started at ({point.x}, {point.y})")

    def hits(self, rect: Rect) -> List[str]:
        """Ids of items in the session's folder whose footprint overlaps rect"""
        return [item.id for item in self.store.children_of(self.folder_id)
                if rects_overlap(rect, Rect.around(item.position, self.icon_size))]

    def move(self, point: Position) -> List[str]:
        if not self.active:
            return []
        self.current = point
        hit_ids = self.hits(self.rect)
        self.selection.replace(hit_ids)
        return hit_ids

    def end(self):
        self.start = None
        self.current = None
        self.folder_id = None
