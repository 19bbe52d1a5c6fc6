"""
Constants and configuration values for chromium-fetcher.

This module contains all hardcoded values, URLs, timeouts, and other constants
used throughout the application.
"""

APP_NAME = "chromium-fetcher"

# Remote endpoints
CHROMIUM_DASH_BASE = "https://chromiumdash.appspot.com"
CHROMIUM_RELEASES_URL = f"{CHROMIUM_DASH_BASE}/fetch_releases"
CHROMIUM_VERSION_URL = f"{CHROMIUM_DASH_BASE}/fetch_version"
SNAPSHOT_BUCKET_URL = (
    "https://www.googleapis.com/storage/v1/b/chromium-browser-snapshots/o"
)
SNAPSHOT_LISTING_FIELDS = (
    "items(kind,mediaLink,metadata,name,size,updated),kind,prefixes,nextPageToken"
)

# Network timeouts (in seconds)
API_TIMEOUT = 10
RELEASES_PER_REQUEST = 1000

# Download and retry settings
DEFAULT_CONNECT_RETRIES = 5
DEFAULT_BACKOFF_FACTOR = 0.3
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_CHUNK_SIZE = 8192

# Negative-hit store
LOCAL_STORE_FILE = "localstore.json"
STORE_OS_ARCHS = {
    "linux": ("x64", "x86"),
    "mac": ("arm", "x64"),
    "win": ("x64", "x86"),
}
STORE_JSON_INDENT = 4

# Supported operating systems and their aliases
OS_ALIASES = {
    "linux": "linux",
    "win": "win",
    "win32": "win",
    "mac": "mac",
    "darwin": "mac",
}
OS_TO_PLATFORM = {
    "linux": "Linux",
    "mac": "Mac",
    "win": "Windows",
}

VALID_CHANNELS = {
    "Android": {"Canary", "Dev", "Beta", "Stable"},
    "FuchsiaWebEngine": {"Dev", "Beta", "Stable", "Extended"},
    "iOS": {"Canary", "Dev", "Beta", "Stable"},
    "Lacros": {"Canary", "Dev", "Beta", "Stable"},
    "Linux": {"Dev", "Beta", "Stable"},
    "Mac": {"Canary", "Dev", "Beta", "Stable", "Extended"},
    "Windows": {"Canary", "Dev", "Beta", "Stable", "Extended"},
}

# Default configuration values
DEFAULT_CHANNEL = "Stable"
DEFAULT_MIN_VERSION = "0"
DEFAULT_MAX_VERSION = "10000"
DEFAULT_MAX_RESULTS = 10

# File extensions
ZIP_EXTENSION = ".zip"

# User-facing notices
MSG_ALL_DISABLED = (
    "All versions in the range are disabled, try a different range and amount!"
)
MSG_NOT_DOWNLOADING = "Not downloading binary."
MSG_AUTO_SEARCH = "Auto-searching with version {version}"
MSG_CONTINUE_HIGHER = 'Continue with next higher version "{version}"'
MSG_CONTINUE_LOWER = 'Continue with next lower version "{version}"'
MSG_NO_SELECTABLE_VERSION = "No selectable version found."
MSG_SELECT_VERSION = "Select a version"
MSG_NO_BINARY_LABEL = "(no binary)"

# Logging configuration
LOGGER_NAME = "chromium_fetcher"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_NAME = "chromium-fetcher.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Configuration file names
CONFIG_FILE_NAME = "chromium-fetcher.yaml"

# Environment variable names
LOG_LEVEL_ENV_VAR = "CHROMIUM_FETCHER_LOG_LEVEL"
