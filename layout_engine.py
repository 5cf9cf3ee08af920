"""
layout_engine.py - Auto Arrange

Re-flows a folder's items onto a regular grid in name, date or "tidy"
(keep the current reading order) order.
"""

import math
from enum import Enum
from typing import Dict, Iterable, List

from config import GRID_PADDING, GRID_CELL_WIDTH, GRID_CELL_HEIGHT, TIDY_ROW_TOLERANCE
from item_store import Item, Position


class SortMethod(Enum):
    NAME = 'name'
    DATE = 'date'
    TIDY = 'tidy'


def grid_columns(width: float, padding: float = GRID_PADDING, cell_width: float = GRID_CELL_WIDTH) -> int:
    """How many grid columns fit in a container of the given width (at least 1)"""
    return max(1, int(math.floor((width - padding) / cell_width)))


def _row_bucket(y: float, tolerance: float) -> int:
    # Half-up rounding so y = 10 with tolerance 20 lands in bucket 1
    return int(math.floor(y / tolerance + 0.5))


def order_items(items: Iterable[Item], method: SortMethod,
                row_tolerance: float = TIDY_ROW_TOLERANCE) -> List[Item]:
    items = list(items)
    if method is SortMethod.NAME:
        return sorted(items, key=lambda i: (i.name.casefold(), i.name))
    if method is SortMethod.DATE:
        return sorted(items, key=lambda i: i.created_at, reverse=True)
    if method is SortMethod.TIDY:
        return sorted(items, key=lambda i: (_row_bucket(i.position.y, row_tolerance),
                                            i.position.x, i.position.y))
    raise ValueError(f"Unknown sort method: {method}")


def arrange(items: Iterable[Item], method: SortMethod, width: float,
            padding: float = GRID_PADDING, cell_width: float = GRID_CELL_WIDTH,
            cell_height: float = GRID_CELL_HEIGHT,
            row_tolerance: float = TIDY_ROW_TOLERANCE) -> Dict[str, Position]:
    """
    Compute new positions for items, row-major on the grid.

    Only the items passed in get a position; the caller decides which
    folder they come from.
    """
    columns = grid_columns(width, padding, cell_width)
    positions = {}
    for index, item in enumerate(order_items(items, method, row_tolerance)):
        col = index % columns
        row = index // columns
        positions[item.id] = Position(padding + col * cell_width, padding + row * cell_height)
    return positions
