"""
config.py - Configuration and Constants
All application settings, geometry constants, defaults, and paths in one place
"""

import os
import sys

from version import APP_INTERNAL_NAME

# -------------------------
# Application Info
# -------------------------
APP_NAME = APP_INTERNAL_NAME


# -------------------------
# Directory Setup
# -------------------------
def get_data_dir(app_name=APP_NAME, create: bool = False) -> str:
    """Get platform-specific data directory"""
    home = os.path.expanduser("~")
    if sys.platform.startswith("win"):
        base = os.getenv("APPDATA") or home
        path = os.path.join(base, app_name)
    elif sys.platform == "darwin":
        path = os.path.join(home, "Library", "Application Support", app_name)
    else:
        path = os.path.join(home, f".{app_name.lower()}")
    if create:
        os.makedirs(path, exist_ok=True)
    return path

DATA_DIR = get_data_dir(APP_NAME)
CONFIG_PATH = os.path.join(DATA_DIR, "config.json")
LOG_DIR = os.path.join(DATA_DIR, "logs")

# -------------------------
# Desktop Geometry
# -------------------------
ICON_SIZE = 80  # Footprint (width and height) of an item icon, in pixels
DROP_PROXIMITY = 50  # Max axis distance between dragged item and folder for a drop
DROP_ANCHOR = (50, 50)  # Where dropped items land inside their new folder
DRAG_START_THRESHOLD = 0  # Net movement (px) above which a press becomes a drag

# -------------------------
# Auto Arrange
# -------------------------
GRID_PADDING = 50
GRID_CELL_WIDTH = 120
GRID_CELL_HEIGHT = 120
TIDY_ROW_TOLERANCE = 20  # Items whose y rounds to the same bucket share a row

# -------------------------
# Paste / Upload Placement
# -------------------------
PASTE_OFFSET = 20  # Each pasted item is shifted a further 20px on both axes
COPY_SUFFIX = "Copy"
UPLOAD_ORIGIN = (50, 50)
UPLOAD_CASCADE = 20

# Fallback container size when the canvas has not been laid out yet
DEFAULT_CONTAINER_SIZE = (1200, 800)

# -------------------------
# Item Defaults
# -------------------------
DEFAULT_FOLDER_NAME = "New Folder"
DEFAULT_CASE_NAME = "New Smart Case"
DEFAULT_NOTE_NAME = "New Note"

NOTE_COLORS = ["#fef08a", "#bbf7d0", "#bfdbfe", "#fbcfe8", "#fed7aa", "#ddd6fe"]

CASE_INITIALIZED_TEXT = "Case initialized. Waiting for evidence..."

INITIAL_SCENARIO = (
    "Based on the initial intake of documents, this case appears to involve a "
    "contractual dispute regarding the \"Project Alpha\" construction timeline. "
    "The evidence suggests a disagreement over force majeure clauses invoked "
    "during the supply chain disruption of 2023."
)

SUPPORTED_EXTENSIONS = [
    'PDF', 'DOC', 'DOCX', 'TXT', 'RTF', 'ODT', 'XLS', 'XLSX', 'CSV', 'TSV',
    'JPG', 'JPEG', 'PNG', 'TIFF', 'TIF', 'BMP', 'HEIC', 'MP3', 'WAV', 'M4A',
    'MP4', 'AVI', 'MOV', 'MKV', 'EML', 'MSG', 'HTML', 'JSON', 'ZIP', 'RAR',
    '7Z', 'DAT', 'OPT', 'LFP', 'XML', 'MDB', 'SQLITE'
]

# Uploads with these MIME types / extensions are decoded as text, everything
# else is kept as an opaque data URI
TEXT_MIME_TYPES = ["application/json"]
TEXT_EXTENSIONS = [".md", ".ts", ".tsx"]

# -------------------------
# AI Collaborators
# -------------------------
DEFAULT_ANALYSIS_MODEL = "gemini-2.5-flash"
DEFAULT_SCENARIO_MODEL = "gemini-2.5-pro"
DEFAULT_CHAT_MODEL = "gemini-2.5-flash"

API_KEY_ENV_VARS = ["GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"]

# Fixed strings shown in place of an AI result when the collaborator fails
AI_UNAVAILABLE_TEXT = "AI Service Unavailable (Missing Key)"
ANALYSIS_FAILED_TEXT = "Analysis failed due to error."
ANALYSIS_EMPTY_TEXT = "No analysis available."
SCENARIO_UNAVAILABLE_TEXT = "AI Unavailable. Please check API Key."
SCENARIO_FAILED_TEXT = "Error generating scenario."
SCENARIO_EMPTY_TEXT = "Could not generate scenario."
SCENARIO_DEFAULT_CONFIDENCE = 50
CHAT_UNAVAILABLE_TEXT = "AI Not Initialized"
CHAT_FAILED_TEXT = "Error in chat processing."
CHAT_EMPTY_TEXT = "No response generated."

# -------------------------
# Default Configuration
# -------------------------
DEFAULT_CONFIG = {
    "api_key": "",
    "models": {
        "analysis": DEFAULT_ANALYSIS_MODEL,
        "scenario": DEFAULT_SCENARIO_MODEL,
        "chat": DEFAULT_CHAT_MODEL,
    },
    "window_geometry": "1200x800",
    "seed_desktop": True,  # Populate the desktop with sample items on startup
}
