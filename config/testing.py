import os

SECRET_KEY = "test-secret"

STORE_CONFIG = {
    "base_url": os.getenv("STORE_BASE_URL", "http://localhost:9999/api/jsonBlob"),
    "document_id": os.getenv("STORE_DOCUMENT_ID", "test-document"),
    "timeout": 2.0,
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

POLL_INTERVAL_SECONDS = 0

APPLY_DISTANCE_CORRECTION = True

AUTO_INIT_STORE = False
AUTO_SEED_STORE = False
