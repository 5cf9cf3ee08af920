"""
desktop_ui.py - Spatial Desktop View

Tkinter canvas that draws the current folder and forwards pointer and
keyboard events to DesktopController. The view holds no desktop state of
its own beyond widget handles: after every store change it redraws from the
controller.

Features:
- Drag items (single or whole selection), drop onto folders to move them
- Rubber-band box selection on empty canvas
- Double-click to open folders / preview files
- Keyboard shortcuts (Ctrl+A/C/V, Delete, F2, BackSpace, Escape)
- Right-click context menu with create / upload / arrange actions
- Files dropped in from the OS are uploaded (tkinterdnd2)
- Case panel for smart folders
"""

import logging
import mimetypes
import os
import tkinter as tk
from tkinter import ttk, filedialog, messagebox
from typing import Optional

from tkinterdnd2 import DND_FILES

from analysis_bridge import UploadedFile
from box_selector import Rect
from case_intelligence import CaseIntelligence
from case_panel import CasePanel
from config import ICON_SIZE
from desktop_controller import DesktopController
from icons import get_icon, status_color
from item_store import Item, ItemType, AnalysisStatus, Position
from layout_engine import SortMethod
from preview_dialog import PreviewDialog

logger = logging.getLogger(__name__)

# Event.state bits
SHIFT_MASK = 0x0001
CONTROL_MASK = 0x0004

CANVAS_BG = '#1f2430'
SELECTED_FILL = '#2f4f7f'
DROP_TARGET_FILL = '#3f6f3f'
LABEL_COLOR = '#f3f4f6'


def has_modifier(event) -> bool:
    return bool(event.state & (SHIFT_MASK | CONTROL_MASK))


class DesktopUI:
    """
    Desktop view component.

    Args:
        parent: Parent tkinter window
        controller: DesktopController that owns all desktop state
        intelligence: CaseIntelligence used by the case panel
    """

    def __init__(self, parent, controller: DesktopController,
                 intelligence: Optional[CaseIntelligence] = None):
        self.parent = parent
        self.controller = controller
        self.store = controller.store
        self.intelligence = intelligence

        # Widget state
        self.rename_entry = None
        self.case_panel: Optional[CasePanel] = None
        self._redraw_pending = False
        self._last_context_point = Position(100, 100)

        self.create_ui()
        self.store.add_listener(self.schedule_redraw)
        self.redraw()

    def create_ui(self):
        """Create the UI components"""
        self.main_frame = ttk.Frame(self.parent)
        self.main_frame.pack(fill=tk.BOTH, expand=True)

        self.create_header()

        self.body = ttk.Frame(self.main_frame)
        self.body.pack(fill=tk.BOTH, expand=True)

        self.create_canvas()
        self.create_status_bar()

        self.setup_pointer_handlers()
        self.setup_keyboard_shortcuts()
        self.setup_context_menu()
        self.setup_file_drop()

    def create_header(self):
        """Back button, breadcrumbs and case toggle"""
        header = ttk.Frame(self.main_frame)
        header.pack(fill=tk.X, padx=8, pady=4)

        self.btn_back = ttk.Button(header, text="◀", width=3, command=self.navigate_up)
        self.btn_back.pack(side=tk.LEFT)

        self.breadcrumb_frame = ttk.Frame(header)
        self.breadcrumb_frame.pack(side=tk.LEFT, padx=8)

        self.btn_case = ttk.Button(header, text="💼 Case", command=self.toggle_case_panel)

    def create_canvas(self):
        self.canvas = tk.Canvas(self.body, bg=CANVAS_BG, highlightthickness=0)
        self.canvas.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        self.canvas.bind('<Configure>', self.on_canvas_configure, add='+')

    def create_status_bar(self):
        self.status_var = tk.StringVar()
        ttk.Label(self.main_frame, textvariable=self.status_var, anchor=tk.W,
                  foreground='gray').pack(fill=tk.X, padx=8, pady=(0, 4))

    def setup_pointer_handlers(self):
        """
        Press and double-click are always bound. Motion/release handlers are
        bound only while a drag or box-select session is running.
        """
        self.canvas.bind('<ButtonPress-1>', self.on_press, add='+')
        self.canvas.bind('<Double-Button-1>', self.on_double_click, add='+')

    def setup_keyboard_shortcuts(self):
        """Setup keyboard shortcuts"""
        bindings = {
            '<Control-a>': lambda e: self.select_all(),
            '<Control-c>': lambda e: self.copy_selected(),
            '<Control-v>': lambda e: self.paste(),
            '<Delete>': lambda e: self.delete_selected(),
            '<F2>': lambda e: self.rename_selected(),
            '<BackSpace>': lambda e: self.navigate_up(),
            '<Alt-Up>': lambda e: self.navigate_up(),
            '<Return>': lambda e: self.open_selected(),
            '<Escape>': lambda e: self.cancel_session(),
        }
        for sequence, handler in bindings.items():
            self.canvas.bind(sequence, handler, add='+')

    def setup_context_menu(self):
        """Setup right-click context menu"""
        self.context_menu = tk.Menu(self.parent, tearoff=0)
        self.canvas.bind('<Button-3>', self.show_context_menu, add='+')

    # ========== SESSION LISTENERS ==========

    def _attach_session_handlers(self):
        self.canvas.bind('<B1-Motion>', self.on_pointer_move)
        self.canvas.bind('<ButtonRelease-1>', self.on_release)

    def _detach_session_handlers(self):
        self.canvas.unbind('<B1-Motion>')
        self.canvas.unbind('<ButtonRelease-1>')

    # ========== DRAWING ==========

    def schedule_redraw(self):
        """Coalesce many store changes (e.g. during a drag) into one redraw"""
        if not self._redraw_pending:
            self._redraw_pending = True
            self.canvas.after_idle(self.redraw)

    def redraw(self):
        self._redraw_pending = False
        self.canvas.delete('item', 'box')

        for item in self.controller.visible_items():
            if item.id == self.controller.renaming_id and self.rename_entry is not None:
                continue
            self.draw_item(item)

        rect = self.controller.box.rect
        if rect is not None:
            self.canvas.create_rectangle(rect.left, rect.top, rect.right, rect.bottom,
                                         outline='#60a5fa', dash=(4, 2), tags=('box',))

        self.update_header()
        self.update_status()
        if self.case_panel is not None:
            self.case_panel.refresh()

    def draw_item(self, item: Item):
        x, y = item.position.x, item.position.y
        tags = ('item', f'item:{item.id}')

        fill = ''
        if item.id == self.controller.drop_target_id:
            fill = DROP_TARGET_FILL
        elif item.id in self.controller.selection:
            fill = SELECTED_FILL
        elif item.type is ItemType.NOTE and item.color:
            fill = item.color

        self.canvas.create_rectangle(x, y, x + ICON_SIZE, y + ICON_SIZE, fill=fill,
                                     outline=fill or '', width=1, tags=tags)
        self.canvas.create_text(x + ICON_SIZE / 2, y + ICON_SIZE / 2 - 10, text=get_icon(item),
                                font=('Segoe UI Emoji', 26), tags=tags)

        name = item.name if len(item.name) <= 14 else item.name[:12] + "…"
        label_color = '#111827' if (item.type is ItemType.NOTE and fill == item.color) else LABEL_COLOR
        self.canvas.create_text(x + ICON_SIZE / 2, y + ICON_SIZE - 12, text=name,
                                fill=label_color, font=('Arial', 9), tags=tags)

        badge = status_color(item)
        if badge:
            self.canvas.create_oval(x + ICON_SIZE - 14, y + 4, x + ICON_SIZE - 4, y + 14,
                                    fill=badge, outline='', tags=tags)
        if item.analysis_status is AnalysisStatus.ANALYZING:
            self.canvas.create_rectangle(x + 10, y + ICON_SIZE - 4, x + ICON_SIZE - 10, y + ICON_SIZE - 2,
                                         fill='#60a5fa', outline='', tags=tags)

    def update_header(self):
        for widget in self.breadcrumb_frame.winfo_children():
            widget.destroy()

        ttk.Button(self.breadcrumb_frame, text="🖥️ Desktop",
                   command=lambda: self.navigate_to(None)).pack(side=tk.LEFT)
        for folder in self.controller.navigation.breadcrumbs():
            ttk.Label(self.breadcrumb_frame, text="›").pack(side=tk.LEFT)
            ttk.Button(self.breadcrumb_frame, text=f"{get_icon(folder)} {folder.name}",
                       command=lambda fid=folder.id: self.navigate_to(fid)).pack(side=tk.LEFT)

        self.btn_back.config(state=tk.DISABLED if self.controller.navigation.at_root else tk.NORMAL)

        if self.controller.navigation.smart_context_id() and self.intelligence is not None:
            self.btn_case.pack(side=tk.RIGHT)
        else:
            self.btn_case.pack_forget()
            self.close_case_panel()

    def update_status(self):
        count = len(self.controller.visible_items())
        selected = len(self.controller.selection)
        status = f"{count} item(s)"
        if selected:
            status += f" · {selected} selected"
        analyzing = sum(1 for i in self.store.items() if i.analysis_status is AnalysisStatus.ANALYZING)
        if analyzing:
            status += f" · analysing {analyzing} file(s)"
        self.status_var.set(status)

    # ========== HIT TESTING ==========

    def item_at(self, point: Position) -> Optional[Item]:
        """Topmost visible item whose footprint contains point"""
        for item in reversed(self.controller.visible_items()):
            box = Rect.around(item.position, ICON_SIZE)
            if box.left <= point.x <= box.right and box.top <= point.y <= box.bottom:
                return item
        return None

    # ========== POINTER HANDLERS ==========

    def on_canvas_configure(self, event):
        self.controller.set_container_size(event.width, event.height)

    def on_press(self, event):
        self.canvas.focus_set()
        if self.rename_entry is not None:
            self.commit_rename()
        point = Position(event.x, event.y)
        item = self.item_at(point)
        if item is not None:
            self.controller.press_item(item.id, point, modifier=has_modifier(event))
        else:
            self.controller.press_canvas(point, modifier=has_modifier(event))

        if self.controller.session_active:
            self._attach_session_handlers()
        self.redraw()

    def on_pointer_move(self, event):
        self.controller.pointer_move(Position(event.x, event.y))
        self.schedule_redraw()

    def on_release(self, event):
        self._detach_session_handlers()
        result = self.controller.pointer_release()
        if result is not None and result.target_id and result.reparented:
            target = self.store.get(result.target_id)
            self.status_var.set(f"Moved {len(result.reparented)} item(s) to '{target.name if target else ''}'")
        self.redraw()

    def cancel_session(self):
        if self.rename_entry is not None:
            self.cancel_rename()
            return
        if self.controller.session_active:
            self._detach_session_handlers()
            self.controller.cancel_session()
            self.redraw()

    def on_double_click(self, event):
        self._detach_session_handlers()
        item = self.item_at(Position(event.x, event.y))
        if item is None:
            return
        self.open_item(item.id)

    def open_item(self, item_id: str):
        previewable = self.controller.double_click(item_id)
        if previewable is not None:
            PreviewDialog(self.parent, previewable, on_save=self.controller.update_content)
        self.redraw()

    def open_selected(self):
        item_id = self.controller.selection.single()
        if item_id:
            self.open_item(item_id)

    # ========== NAVIGATION ==========

    def navigate_up(self):
        if self.controller.navigate_up():
            self.redraw()

    def navigate_to(self, folder_id):
        if self.controller.navigate_to(folder_id):
            self.redraw()

    # ========== COMMANDS ==========

    def select_all(self):
        self.controller.select_all()
        self.redraw()
        return 'break'

    def copy_selected(self):
        count = self.controller.copy()
        if count:
            self.status_var.set(f"Copied {count} item(s)")

    def paste(self):
        self.controller.paste()
        self.redraw()

    def delete_selected(self):
        count = len(self.controller.selection)
        if not count:
            return
        if not messagebox.askyesno("Delete", f"Delete {count} item(s) and everything inside them?",
                                   parent=self.parent):
            return
        self.controller.delete_selected()
        self.redraw()

    def create_item(self, item_type: ItemType):
        item = self.controller.create_item(item_type, self._last_context_point)
        if item is not None:
            self.start_rename(item.id)

    def upload_files(self):
        paths = filedialog.askopenfilenames(parent=self.parent, title="Add Files")
        if paths:
            self.upload_paths(paths)

    def upload_paths(self, paths):
        """Read files from disk and hand them to the controller as uploads"""
        uploads = []
        for path in paths:
            if not os.path.isfile(path):
                logger.debug(f"Skipping non-file upload path: {path}")
                continue
            try:
                with open(path, 'rb') as f:
                    data = f.read()
            except OSError as e:
                messagebox.showerror("Add Files", f"Could not read {os.path.basename(path)}:\n{e}",
                                     parent=self.parent)
                continue
            mime_type, _ = mimetypes.guess_type(path)
            uploads.append(UploadedFile(name=os.path.basename(path), data=data, mime_type=mime_type or ""))
        if uploads:
            self.controller.upload(uploads)

    # ========== FILE DROPS ==========

    def setup_file_drop(self):
        """Accept files dragged in from the OS when the root is a TkinterDnD window"""
        if getattr(self.canvas.winfo_toplevel(), "TkdndVersion", None) is None:
            logger.info("tkdnd not loaded in this window - file drops disabled")
            return

        self.canvas.drop_target_register(DND_FILES)
        self.canvas.dnd_bind('<<Drop>>', self.on_file_drop)

    def on_file_drop(self, event):
        # Paths with spaces arrive wrapped in braces; splitlist undoes that
        paths = self.canvas.tk.splitlist(event.data)
        logger.debug(f"Dropped {len(paths)} path(s) onto the desktop")
        self.upload_paths(paths)
        return event.action

    def auto_arrange(self, method: SortMethod):
        self.controller.auto_arrange(method, self.canvas.winfo_width())

    # ========== RENAME ==========

    def rename_selected(self):
        item_id = self.controller.begin_rename()
        if item_id:
            self.start_rename(item_id)

    def start_rename(self, item_id: str):
        item = self.store.get(item_id)
        if item is None:
            return
        self.controller.begin_rename(item_id)
        self.rename_entry = ttk.Entry(self.canvas, width=14)
        self.rename_entry.insert(0, item.name)
        self.rename_entry.select_range(0, tk.END)
        self.rename_entry.bind('<Return>', lambda e: self.commit_rename())
        self.rename_entry.bind('<Escape>', lambda e: self.cancel_rename())
        self.canvas.create_window(item.position.x + ICON_SIZE / 2, item.position.y + ICON_SIZE - 12,
                                  window=self.rename_entry, tags=('rename',))
        self.rename_entry.focus_set()
        self.redraw()

    def commit_rename(self):
        if self.rename_entry is None:
            return
        new_name = self.rename_entry.get()
        item_id = self.controller.renaming_id
        self._destroy_rename_entry()
        if item_id:
            self.controller.rename(item_id, new_name)
        self.redraw()

    def cancel_rename(self):
        self._destroy_rename_entry()
        self.controller.cancel_rename()
        self.redraw()

    def _destroy_rename_entry(self):
        self.canvas.delete('rename')
        if self.rename_entry is not None:
            self.rename_entry.destroy()
            self.rename_entry = None
        self.canvas.focus_set()

    # ========== CASE PANEL ==========

    def toggle_case_panel(self):
        if self.case_panel is not None:
            self.close_case_panel()
            return
        case_id = self.controller.navigation.smart_context_id()
        if case_id is None or self.intelligence is None:
            return
        self.case_panel = CasePanel(self.body, self.store, self.intelligence, case_id,
                                    on_close=self.close_case_panel)
        self.case_panel.frame.pack(side=tk.RIGHT, fill=tk.Y)

    def close_case_panel(self):
        if self.case_panel is not None:
            panel = self.case_panel
            self.case_panel = None
            panel.destroy()

    # ========== CONTEXT MENU ==========

    def show_context_menu(self, event):
        """Rebuild and show the context menu at the pointer"""
        point = Position(event.x, event.y)
        self._last_context_point = point
        item = self.item_at(point)
        if item is not None and item.id not in self.controller.selection:
            self.controller.selection.replace([item.id])
            self.redraw()

        menu = self.context_menu
        menu.delete(0, tk.END)
        menu.add_command(label="📁 New Folder", command=lambda: self.create_item(ItemType.FOLDER))
        menu.add_command(label="💼 New Smart Case", command=lambda: self.create_item(ItemType.SMART_FOLDER),
                         state=tk.NORMAL if self.controller.can_create_smart_folder() else tk.DISABLED)
        menu.add_command(label="🗒️ New Note", command=lambda: self.create_item(ItemType.NOTE))
        menu.add_separator()
        menu.add_command(label="⬆️ Add Files...", command=self.upload_files,
                         state=tk.NORMAL if self.controller.bridge else tk.DISABLED)

        arrange_menu = tk.Menu(menu, tearoff=0)
        arrange_menu.add_command(label="By Name", command=lambda: self.auto_arrange(SortMethod.NAME))
        arrange_menu.add_command(label="By Date Added", command=lambda: self.auto_arrange(SortMethod.DATE))
        arrange_menu.add_command(label="Tidy Up (As Is)", command=lambda: self.auto_arrange(SortMethod.TIDY))
        menu.add_cascade(label="Auto Arrange", menu=arrange_menu)
        menu.add_separator()

        has_single = self.controller.selection.single() is not None
        has_selection = not self.controller.selection.is_empty()
        menu.add_command(label="✏️ Rename", command=self.rename_selected,
                         state=tk.NORMAL if has_single else tk.DISABLED)
        menu.add_command(label="📋 Copy", command=self.copy_selected,
                         state=tk.NORMAL if has_selection else tk.DISABLED)
        menu.add_command(label="📌 Paste", command=self.paste,
                         state=tk.DISABLED if self.controller.clipboard.is_empty else tk.NORMAL)
        menu.add_command(label="🗑️ Delete", command=self.delete_selected,
                         state=tk.NORMAL if has_selection else tk.DISABLED)

        try:
            menu.tk_popup(event.x_root, event.y_root)
        finally:
            menu.grab_release()
