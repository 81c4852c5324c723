"""Constants for logbook-store."""

# Blob layout
DATA_ROOT = "data"
DOCUMENT_EXTENSION = ".json"
SHOP_INDEX_FILE = "shops.json"
TEMPLATES_DIR = "templates"
ENTRIES_DIR = "entries"
CLEANING_DIR = "cleaning"

# Bootstrap shop
DEFAULT_SHOP_ID = "shop_default"

# Cache policy (seconds)
DEFAULT_CACHE_TTL = 5.0
DEFAULT_NOT_FOUND_TTL = 1.0

# Write policy
DEFAULT_MAX_WRITE_ATTEMPTS = 3

# Remote client policy
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_BRANCH = "main"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_MAX_REQUEST_ATTEMPTS = 4
DEFAULT_BACKOFF_INITIAL = 0.5
DEFAULT_BACKOFF_MAX = 8.0

# Configuration file looked up in the working directory
CONFIG_FILE = "logbook-store.yaml"
CONFIG_ENV_VAR = "LOGBOOK_STORE_CONFIG"

# Version
STORE_VERSION = "0.1.0"
USER_AGENT = f"logbook-store/{STORE_VERSION}"
