"""Backup the shared document.

Note: Writes the cleaned document (null entries dropped) as pretty-printed JSON
under `backups/`.
"""

from __future__ import annotations

import importlib
import json
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.geo_attendance.geo_attendance.core.exceptions import StoreUnavailable
from src.geo_attendance.geo_attendance.store.connection import StoreConfig, StoreConnection
from src.geo_attendance.geo_attendance.store.jsonblob_store import JsonBlobStore


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    config = StoreConfig.from_dict(dict(settings.STORE_CONFIG))
    if not config.document_id:
        raise SystemExit("STORE_DOCUMENT_ID is not set.")

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"attendance_{config.document_id}_{ts}.json"

    try:
        document = JsonBlobStore(StoreConnection(config)).fetch_document(config.document_id)
    except StoreUnavailable as e:
        raise SystemExit(f"Could not read the store: {e}")

    out_file.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
