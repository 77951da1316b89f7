"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_MINUTES = 60 * 24
DEFAULT_HISTORY_LIMIT = 3
DEFAULT_SIGNED_URL_SECONDS = 60 * 60
DEFAULT_INVITE_SECONDS = 60 * 60 * 24

# QR scanning
QR_REARM_SECONDS = 3.0
QR_MAX_SCANS_PER_SECOND = 5

VIDEO_EXTENSIONS = {"mp4", "mov", "webm", "m4v"}
