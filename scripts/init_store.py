from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.geo_attendance.geo_attendance.store.bootstrap import create_document
from src.geo_attendance.geo_attendance.store.connection import StoreConfig, StoreConnection
from src.geo_attendance.geo_attendance.store.jsonblob_store import JsonBlobStore


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    config = StoreConfig.from_dict(dict(settings.STORE_CONFIG))

    store = JsonBlobStore(StoreConnection(config))
    document_id = create_document(store)
    print(f"OK: Created empty document at {config.base_url}/{document_id}")
    print(f"Set STORE_DOCUMENT_ID={document_id} in your .env")


if __name__ == "__main__":
    main()
