"""
utils.py - General Utility Functions
Helper functions used throughout the application
"""

import os
import json
import itertools
import time


_id_counter = itertools.count(1)


def generate_item_id() -> str:
    """
    Mint a process-unique item identifier.

    Millisecond timestamps alone collide when several items are created in
    the same event handler, so a monotonic counter is appended.
    """
    return f"{int(time.time() * 1000)}-{next(_id_counter)}"


def now_ms() -> int:
    """Current time in milliseconds since the epoch"""
    return int(time.time() * 1000)


def format_size(bytes_size: int) -> str:
    """Convert bytes to the KB display string used for uploaded items"""
    return f"{bytes_size / 1024:.2f} KB"


def get_extension(filename: str) -> str:
    """Lower-case extension without the dot ('' if none)"""
    if '.' not in filename:
        return ''
    return filename.rsplit('.', 1)[1].lower()


def is_url_or_data(content: str) -> bool:
    """True if content is an external reference rather than inline text"""
    if not content:
        return False
    return content.startswith('http') or content.startswith('data:') or content.startswith('blob:')


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]; low wins if the range is empty"""
    return max(low, min(value, high))


def save_json_atomic(path: str, data):
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    os.replace(tmp, path)
