"""
version.py - Application Version Information
Central location for version tracking
"""

# -------------------------
# Version Information
# -------------------------
VERSION = "0.3.0"
VERSION_TUPLE = (0, 3, 0)  # For programmatic comparison
BUILD_DATE = "2026-10-19"
RELEASE_TYPE = "beta"  # "alpha", "beta", "stable"

# Application metadata
APP_DISPLAY_NAME = "CaseDesk"
APP_INTERNAL_NAME = "CaseDesk"  # Used for data folders
APP_DESCRIPTION = "Spatial case desktop with AI-assisted evidence analysis"


# -------------------------
# Version Utilities
# -------------------------

def get_version_string() -> str:
    """Get formatted version string for display"""
    if RELEASE_TYPE == "stable":
        return f"v{VERSION}"
    else:
        return f"v{VERSION} ({RELEASE_TYPE})"


def get_window_title() -> str:
    return f"{APP_DISPLAY_NAME} {get_version_string()}"
