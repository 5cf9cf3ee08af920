"""
icons.py - Emoji Icons and Status Colours for Desktop Items
"""

from item_store import Item, ItemType, AnalysisStatus
from utils import get_extension

IMAGE_EXTENSIONS = ['jpg', 'jpeg', 'png', 'tiff', 'tif', 'bmp', 'heic', 'gif', 'webp']
VIDEO_EXTENSIONS = ['mp4', 'avi', 'mov', 'mkv', 'webm']
AUDIO_EXTENSIONS = ['mp3', 'wav', 'm4a', 'flac']
SHEET_EXTENSIONS = ['xls', 'xlsx', 'csv', 'tsv']
ARCHIVE_EXTENSIONS = ['zip', 'rar', '7z']
CODE_EXTENSIONS = ['html', 'json', 'xml', 'js', 'ts']
DATABASE_EXTENSIONS = ['mdb', 'sqlite', 'dat']
MAIL_EXTENSIONS = ['eml', 'msg']
DOCUMENT_EXTENSIONS = ['pdf', 'doc', 'docx', 'rtf', 'odt', 'txt', 'md']

_EXTENSION_ICONS = [
    (IMAGE_EXTENSIONS, "🖼️"),
    (VIDEO_EXTENSIONS, "🎞️"),
    (AUDIO_EXTENSIONS, "🎵"),
    (SHEET_EXTENSIONS, "📊"),
    (ARCHIVE_EXTENSIONS, "🗜️"),
    (CODE_EXTENSIONS, "🧾"),
    (DATABASE_EXTENSIONS, "🗄️"),
    (MAIL_EXTENSIONS, "✉️"),
    (DOCUMENT_EXTENSIONS, "📄"),
]

STATUS_COLORS = {
    AnalysisStatus.PENDING: "#9ca3af",
    AnalysisStatus.ANALYZING: "#facc15",
    AnalysisStatus.COMPLETED: "#4ade80",
    AnalysisStatus.FAILED: "#f87171",
}


def get_icon(item: Item) -> str:
    if item.type is ItemType.FOLDER:
        return "📁"
    if item.type is ItemType.SMART_FOLDER:
        return "💼"
    if item.type is ItemType.NOTE:
        return "🗒️"
    if item.type is ItemType.FILE:
        ext = get_extension(item.name)
        for extensions, icon in _EXTENSION_ICONS:
            if ext in extensions:
                return icon
        return "📃"
    raise ValueError(f"Unhandled item type: {item.type}")


def status_color(item: Item):
    """Badge colour for files; None means no badge"""
    if item.type is not ItemType.FILE:
        return None
    return STATUS_COLORS[item.analysis_status]
