import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

STORE_CONFIG = {
    "base_url": os.getenv("STORE_BASE_URL", "https://jsonblob.com/api/jsonBlob"),
    "document_id": os.getenv("STORE_DOCUMENT_ID", ""),
    "timeout": float(os.getenv("STORE_TIMEOUT", "10")),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Background refresh of sessions/attendance from the shared document (0 disables)
POLL_INTERVAL_SECONDS = float(os.getenv("POLL_INTERVAL_SECONDS", "5"))

# Subtract 850m from readings in (800, 900]; set to 0 to measure raw distance
APPLY_DISTANCE_CORRECTION = bool(int(os.getenv("APPLY_DISTANCE_CORRECTION", "1")))

# If enabled and STORE_DOCUMENT_ID is empty, a new document is created on startup
AUTO_INIT_STORE = bool(int(os.getenv("AUTO_INIT_STORE", "1")))
# Optional: also seed demo accounts on startup
AUTO_SEED_STORE = bool(int(os.getenv("AUTO_SEED_STORE", "0")))
