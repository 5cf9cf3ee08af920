"""
Main.py - CaseDesk entry point

Builds the item store, controllers and AI bridges, then runs the Tk main
loop. Background AI work runs on daemon threads; results are handed back
to the Tk thread with root.after(0, ...).
"""

import os
import sys
import logging
import tkinter as tk

from config import LOG_DIR
from version import get_window_title


def setup_logging():
    """Log to a file when running as a bundled exe, to the console otherwise"""
    if getattr(sys, 'frozen', False):
        os.makedirs(LOG_DIR, exist_ok=True)
        logging.basicConfig(
            filename=os.path.join(LOG_DIR, 'casedesk.log'),
            level=logging.DEBUG,
            format='%(asctime)s - %(levelname)s - %(name)s - %(message)s'
        )
        logging.info(f"CaseDesk starting - exe location: {sys.executable}")
    else:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(levelname)s %(name)s: %(message)s'
        )


def build_app(root: tk.Tk, cfg: dict):
    """Wire store, controllers, AI bridges and the view together"""
    import ai_handler
    from analysis_bridge import AnalysisBridge
    from case_intelligence import CaseIntelligence
    from config_manager import get_api_key, get_model
    from desktop_controller import DesktopController
    from desktop_ui import DesktopUI
    from item_store import ItemStore
    from seed_data import seed_desktop

    api_key = get_api_key(cfg)
    if not api_key:
        logging.warning("No Gemini API key configured; AI features will show placeholders")

    def dispatch(fn):
        root.after(0, fn)

    store = ItemStore()
    if cfg.get("seed_desktop", True):
        seed_desktop(store)

    bridge = AnalysisBridge(
        store,
        analyze=lambda item, context: ai_handler.analyze_file_content(
            item, context, api_key, get_model(cfg, "analysis")),
        dispatch=dispatch,
    )
    intelligence = CaseIntelligence(
        store,
        generate_scenario=lambda name, evidence: ai_handler.generate_case_scenario(
            name, evidence, api_key, get_model(cfg, "scenario")),
        chat=lambda history, message, name: ai_handler.chat_with_case(
            history, message, name, api_key, get_model(cfg, "chat")),
        dispatch=dispatch,
    )
    controller = DesktopController(store, bridge=bridge)
    return DesktopUI(root, controller, intelligence=intelligence)


def create_root() -> tk.Tk:
    """TkinterDnD root so files can be dropped onto the desktop"""
    from tkinterdnd2 import TkinterDnD

    try:
        root = TkinterDnD.Tk()
        logging.info("Using TkinterDnD - file drag-and-drop enabled")
    except (RuntimeError, tk.TclError) as e:
        # tkdnd native library missing for this platform
        logging.warning(f"TkinterDnD unavailable ({e}), using standard Tk")
        root = tk.Tk()
    return root


def main():
    setup_logging()
    from config_manager import load_config, save_config

    cfg = load_config()

    root = create_root()
    root.title(get_window_title())
    root.geometry(cfg.get("window_geometry") or "1200x800")

    def on_close():
        cfg["window_geometry"] = root.geometry()
        try:
            save_config(cfg)
        except OSError as e:
            logging.error(f"Could not save config: {e}")
        root.destroy()

    root.protocol("WM_DELETE_WINDOW", on_close)
    build_app(root, cfg)
    root.mainloop()


if __name__ == "__main__":
    main()
