"""
preview_dialog.py

Read-only preview of files, with in-place editing for notes and text files.
Edits are handed back through the on_save callback (the controller's
update_content), never written to the item directly.

Usage:
    from preview_dialog import PreviewDialog

    PreviewDialog(root, item, on_save=controller.update_content)
"""

import base64
import binascii
import io
import logging
import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional

from PIL import Image, ImageTk, UnidentifiedImageError

from icons import get_icon, IMAGE_EXTENSIONS
from item_store import Item, ItemType
from utils import get_extension, is_url_or_data

logger = logging.getLogger(__name__)

TEXT_PREVIEW_EXTENSIONS = ['txt', 'md', 'json', 'xml', 'csv', 'tsv', 'js', 'ts', 'tsx', 'css', 'sql', 'html', 'htm']
MAX_IMAGE_SIZE = (760, 480)


def is_text_editable(item: Item) -> bool:
    if item.type.is_editable():
        return True
    if item.type is not ItemType.FILE or is_url_or_data(item.content or ""):
        return False
    mime = item.mime_type or ""
    return mime.startswith("text/") or get_extension(item.name) in TEXT_PREVIEW_EXTENSIONS


def decode_data_uri(content: str) -> Optional[bytes]:
    """Bytes of a base64 data URI, or None"""
    if not content.startswith("data:") or ";base64," not in content:
        return None
    try:
        return base64.b64decode(content.split(";base64,", 1)[1])
    except (binascii.Error, ValueError):
        return None


def is_image(item: Item) -> bool:
    mime = item.mime_type or ""
    return mime.startswith("image/") or get_extension(item.name) in IMAGE_EXTENSIONS


class PreviewDialog:

    def __init__(self, parent, item: Item, on_save: Callable[[str, str], object] = None):
        self.item = item
        self.on_save = on_save
        self._photo = None  # keep a reference or Tk drops the image

        self.dialog = tk.Toplevel(parent)
        self.dialog.title(f"{get_icon(item)} {item.name}")
        self.dialog.geometry("820x620")
        self.dialog.transient(parent)

        self.dialog.update_idletasks()
        x = parent.winfo_x() + (parent.winfo_width() - 820) // 2
        y = parent.winfo_y() + (parent.winfo_height() - 620) // 2
        self.dialog.geometry(f"+{max(0, x)}+{max(0, y)}")

        self._create_widgets()
        self.dialog.bind('<Escape>', lambda e: self.dialog.destroy())

    def _create_widgets(self):
        main_frame = ttk.Frame(self.dialog, padding=12)
        main_frame.pack(fill=tk.BOTH, expand=True)

        header = ttk.Frame(main_frame)
        header.pack(fill=tk.X, pady=(0, 8))
        ttk.Label(header, text=f"{get_icon(self.item)} {self.item.name}",
                  font=('Arial', 12, 'bold')).pack(side=tk.LEFT)
        meta = " · ".join(m for m in (self.item.mime_type, self.item.size) if m)
        if meta:
            ttk.Label(header, text=meta, foreground='gray').pack(side=tk.LEFT, padx=10)

        body = ttk.Frame(main_frame)
        body.pack(fill=tk.BOTH, expand=True)

        if is_text_editable(self.item):
            self._create_text_editor(body)
        elif is_image(self.item) and self._create_image_view(body):
            pass
        else:
            self._create_unsupported(body)

        if self.item.ai_summary:
            summary_frame = ttk.LabelFrame(main_frame, text="AI Summary", padding=6)
            summary_frame.pack(fill=tk.X, pady=(8, 0))
            ttk.Label(summary_frame, text=self.item.ai_summary, wraplength=760).pack(anchor=tk.W)

    def _create_text_editor(self, parent):
        self.text_area = tk.Text(parent, wrap=tk.WORD, font=('Consolas', 10), undo=True,
                                 bg=self.item.color or '#FFFEF0')
        scrollbar = ttk.Scrollbar(parent, command=self.text_area.yview)
        self.text_area.config(yscrollcommand=scrollbar.set)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)
        self.text_area.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        self.text_area.insert('1.0', self.item.content or "")
        self.text_area.focus_set()

        buttons = ttk.Frame(self.dialog, padding=(12, 0, 12, 12))
        buttons.pack(fill=tk.X)
        ttk.Button(buttons, text="💾 Save", command=self._save).pack(side=tk.RIGHT)
        ttk.Label(buttons, text="Editable", foreground='gray').pack(side=tk.LEFT)
        self.dialog.bind('<Control-s>', lambda e: self._save())

    def _create_image_view(self, parent) -> bool:
        data = decode_data_uri(self.item.content or "")
        if data is None:
            return False
        try:
            image = Image.open(io.BytesIO(data))
            image.thumbnail(MAX_IMAGE_SIZE)
            self._photo = ImageTk.PhotoImage(image)
        except (UnidentifiedImageError, OSError) as e:
            logger.debug(f"Image preview failed for '{self.item.name}': {e}")
            return False
        ttk.Label(parent, image=self._photo).pack(expand=True)
        return True

    def _create_unsupported(self, parent):
        ttk.Label(parent, text="⚠️", font=('Arial', 40)).pack(pady=(80, 10))
        ttk.Label(parent, text="Preview not supported", font=('Arial', 12, 'bold')).pack()
        ttk.Label(parent, text=self.item.name, foreground='gray').pack(pady=(4, 0))

    def _save(self):
        content = self.text_area.get('1.0', 'end-1c')
        if self.on_save:
            self.on_save(self.item.id, content)
        self.dialog.destroy()
