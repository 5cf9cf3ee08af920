"""
case_panel.py - Case Intelligence Side Panel

Shown beside the desktop while the user is inside a smart folder. Two tabs:
the AI assistant chat and the scenario narrative with its confidence score.
"""

import logging
import tkinter as tk
from tkinter import ttk
from typing import Callable

from case_intelligence import CaseIntelligence
from item_store import ItemStore

logger = logging.getLogger(__name__)


class CasePanel:

    def __init__(self, parent, store: ItemStore, intelligence: CaseIntelligence,
                 case_id: str, on_close: Callable[[], None] = None):
        self.store = store
        self.intelligence = intelligence
        self.case_id = case_id
        self.on_close = on_close
        self.closed = False

        self.frame = ttk.Frame(parent, padding=8, width=340)
        self._create_widgets()
        self.refresh()

    def _create_widgets(self):
        header = ttk.Frame(self.frame)
        header.pack(fill=tk.X)
        self.title_label = ttk.Label(header, text="Case Intelligence", font=('Arial', 11, 'bold'))
        self.title_label.pack(side=tk.LEFT)
        ttk.Button(header, text="✕", width=3, command=self._close).pack(side=tk.RIGHT)

        self.notebook = ttk.Notebook(self.frame)
        self.notebook.pack(fill=tk.BOTH, expand=True, pady=(6, 0))

        # Chat tab
        chat_tab = ttk.Frame(self.notebook, padding=4)
        self.notebook.add(chat_tab, text="AI Assistant")

        self.chat_log = tk.Text(chat_tab, wrap=tk.WORD, state=tk.DISABLED, font=('Arial', 10), height=20)
        self.chat_log.tag_configure('user', foreground='#2563eb')
        self.chat_log.tag_configure('model', foreground='#7c3aed')
        self.chat_log.pack(fill=tk.BOTH, expand=True)

        entry_row = ttk.Frame(chat_tab)
        entry_row.pack(fill=tk.X, pady=(6, 0))
        self.message_var = tk.StringVar()
        entry = ttk.Entry(entry_row, textvariable=self.message_var)
        entry.pack(side=tk.LEFT, fill=tk.X, expand=True)
        entry.bind('<Return>', lambda e: self._send())
        self.send_button = ttk.Button(entry_row, text="Send", command=self._send)
        self.send_button.pack(side=tk.LEFT, padx=(4, 0))

        # Scenario tab
        scenario_tab = ttk.Frame(self.notebook, padding=4)
        self.notebook.add(scenario_tab, text="Scenario Analysis")

        self.confidence_label = ttk.Label(scenario_tab, text="Logic Confidence: 0%")
        self.confidence_label.pack(anchor=tk.W)
        self.confidence_bar = ttk.Progressbar(scenario_tab, maximum=100)
        self.confidence_bar.pack(fill=tk.X, pady=(2, 6))

        self.scenario_text = tk.Text(scenario_tab, wrap=tk.WORD, font=('Arial', 10), height=16)
        self.scenario_text.pack(fill=tk.BOTH, expand=True)

        scenario_buttons = ttk.Frame(scenario_tab)
        scenario_buttons.pack(fill=tk.X, pady=(6, 0))
        ttk.Button(scenario_buttons, text="💾 Save Edits", command=self._save_scenario).pack(side=tk.LEFT)
        self.regenerate_button = ttk.Button(scenario_buttons, text="⟳ Regenerate",
                                            command=self._regenerate)
        self.regenerate_button.pack(side=tk.RIGHT)

    # ========== REFRESH ==========

    def refresh(self):
        """Redraw from the case record; called by the desktop after every store change"""
        if self.closed:
            return
        case = self.store.get_case(self.case_id)
        folder = self.store.get(self.case_id)
        if case is None or folder is None:
            self._close()
            return

        self.title_label.config(text=f"💼 {folder.name}")
        busy = self.case_id in self.intelligence.busy
        self.send_button.config(state=tk.DISABLED if busy else tk.NORMAL)
        self.regenerate_button.config(state=tk.DISABLED if busy else tk.NORMAL)

        self.chat_log.config(state=tk.NORMAL)
        self.chat_log.delete('1.0', tk.END)
        if not case.chat_history:
            self.chat_log.insert(tk.END, "Ask me anything about the evidence...\n")
        for message in case.chat_history:
            speaker = "You" if message.role == "user" else "Assistant"
            self.chat_log.insert(tk.END, f"{speaker}: ", message.role)
            self.chat_log.insert(tk.END, f"{message.text}\n\n")
        if busy:
            self.chat_log.insert(tk.END, "…\n")
        self.chat_log.config(state=tk.DISABLED)
        self.chat_log.see(tk.END)

        self.confidence_label.config(text=f"Logic Confidence: {case.confidence_score:.0f}%")
        self.confidence_bar['value'] = case.confidence_score
        # Don't clobber text the user is typing
        if self.scenario_text.focus_get() is not self.scenario_text:
            self.scenario_text.delete('1.0', tk.END)
            self.scenario_text.insert('1.0', case.scenario)

    # ========== ACTIONS ==========

    def _send(self):
        if self.intelligence.send_message(self.case_id, self.message_var.get()):
            self.message_var.set("")
        self.refresh()

    def _regenerate(self):
        self.intelligence.regenerate_scenario(self.case_id)
        self.refresh()

    def _save_scenario(self):
        self.store.update_case(self.case_id, scenario=self.scenario_text.get('1.0', 'end-1c'))

    def destroy(self):
        """Tear down the widgets; later refreshes are ignored"""
        self.closed = True
        self.frame.destroy()

    def _close(self):
        if self.on_close:
            self.on_close()
