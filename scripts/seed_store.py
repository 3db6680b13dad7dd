from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.geo_attendance.geo_attendance.store.bootstrap import ensure_demo_users
from src.geo_attendance.geo_attendance.store.connection import StoreConfig, StoreConnection
from src.geo_attendance.geo_attendance.store.jsonblob_store import JsonBlobStore


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    config = StoreConfig.from_dict(dict(settings.STORE_CONFIG))
    if not config.document_id:
        raise SystemExit("STORE_DOCUMENT_ID is not set. Run scripts/init_store.py first.")

    store = JsonBlobStore(StoreConnection(config))
    added = ensure_demo_users(store, config.document_id)

    print(f"OK: Seeded {added} demo users -> {config.base_url}/{config.document_id}")


if __name__ == "__main__":
    main()
