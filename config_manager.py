"""
config_manager.py - Configuration Management
Loads and saves config.json in the user data directory. Desktop contents are
never written here, only settings.
"""

import copy
import json
import logging
import os
from typing import Dict, Optional

from config import CONFIG_PATH, DEFAULT_CONFIG, API_KEY_ENV_VARS
from utils import save_json_atomic

logger = logging.getLogger(__name__)


# -------------------------
# Configuration Management
# -------------------------

def ensure_config(path: str = CONFIG_PATH):
    """Ensure config file exists with default values"""
    if not os.path.exists(path):
        os.makedirs(os.path.dirname(path), exist_ok=True)
        save_json_atomic(path, DEFAULT_CONFIG)


def load_config(path: str = CONFIG_PATH) -> Dict:
    """
    Load configuration from disk with migration support

    Missing keys (including nested model names) are filled from
    DEFAULT_CONFIG and written back. A corrupt file is replaced by defaults.

    Returns:
        Configuration dictionary
    """
    try:
        ensure_config(path)
        with open(path, "r", encoding="utf-8") as f:
            cfg = json.load(f)

        updated = False

        # Ensure all top-level keys exist
        for k, v in DEFAULT_CONFIG.items():
            if k not in cfg:
                cfg[k] = copy.deepcopy(v)
                updated = True

        # Migration: add any new model roles
        for role, model in DEFAULT_CONFIG["models"].items():
            if role not in cfg["models"]:
                cfg["models"][role] = model
                updated = True

        if updated:
            save_config(cfg, path)

        return cfg
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Config unreadable ({e}), resetting to defaults")
        try:
            save_json_atomic(path, DEFAULT_CONFIG)
        except OSError as write_error:
            logger.error(f"Could not write default config: {write_error}")
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(cfg: Dict, path: str = CONFIG_PATH):
    """
    Save configuration to disk

    Args:
        cfg: Configuration dictionary to save
    """
    save_json_atomic(path, cfg)


def get_api_key(cfg: Dict) -> Optional[str]:
    """Gemini API key from config, falling back to the environment"""
    key = (cfg.get("api_key") or "").strip()
    if key:
        return key
    for var in API_KEY_ENV_VARS:
        value = os.getenv(var, "").strip()
        if value:
            return value
    return None


def get_model(cfg: Dict, role: str) -> str:
    """Model name for 'analysis', 'scenario' or 'chat'"""
    return cfg.get("models", {}).get(role) or DEFAULT_CONFIG["models"][role]
