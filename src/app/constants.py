"""
Application Constants.
Stores default values for UI configuration and settings keys.
"""

# Window Configuration
WINDOW_TITLE = "Grant Tracker"
DEFAULT_WINDOW_WIDTH = 1280
DEFAULT_WINDOW_HEIGHT = 720
WINDOW_SETTINGS_KEY = "GrantTracker"
WINDOW_SETTINGS_APP = "GrantTracker"

# QSettings keys
SETTINGS_ZOOM_MODE_KEY = "timeline/zoom_mode"
SETTINGS_GEOMETRY_KEY = "geometry"

# Environment variables read by AppConfig
ENV_VIEWER = "GRANT_TRACKER_VIEWER"
ENV_BOARD = "GRANT_TRACKER_BOARD"
ENV_SEED = "GRANT_TRACKER_SEED"
ENV_DEBUG = "GRANT_TRACKER_DEBUG"
ENV_ZOOM = "GRANT_TRACKER_ZOOM"

DEFAULT_BOARD_ID = "default"

# Status / dialog messages
STATUS_ERROR_PREFIX = "Error: "
DELETE_CONFIRM_TITLE = "Delete Grant"
DELETE_CONFIRM_TEXT = (
    "Are you sure you want to delete '{name}'? Its milestones will be deleted too."
)
DELETE_FAILED_TITLE = "Delete Failed"
EDIT_FAILED_TITLE = "Update Failed"
PROGRESS_FAILED_STATUS = "Could not save progress for '{name}': {error}"
