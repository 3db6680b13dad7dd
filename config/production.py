import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

STORE_CONFIG = {
    "base_url": os.getenv("STORE_BASE_URL", "https://jsonblob.com/api/jsonBlob"),
    "document_id": os.getenv("STORE_DOCUMENT_ID", ""),
    "timeout": float(os.getenv("STORE_TIMEOUT", "10")),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

POLL_INTERVAL_SECONDS = float(os.getenv("POLL_INTERVAL_SECONDS", "5"))

APPLY_DISTANCE_CORRECTION = bool(int(os.getenv("APPLY_DISTANCE_CORRECTION", "1")))

AUTO_INIT_STORE = bool(int(os.getenv("AUTO_INIT_STORE", "0")))
AUTO_SEED_STORE = bool(int(os.getenv("AUTO_SEED_STORE", "0")))
