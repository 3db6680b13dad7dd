from __future__ import annotations

import logging
from typing import Any

from werkzeug.security import generate_password_hash

from ..core.constants import STORE_COLLECTIONS
from .repository import DocumentStore

logger = logging.getLogger(__name__)

DEMO_USERS = (
    {
        "id": "demo-teacher",
        "email": "teacher@example.com",
        "name": "Demo Teacher",
        "role": "teacher",
        "teacherId": "T-0001",
        "password": "teacher123",
    },
    {
        "id": "demo-student",
        "email": "student@example.com",
        "name": "Demo Student",
        "role": "student",
        "studentId": "S-0001",
        "password": "student123",
    },
)


def empty_document() -> dict[str, Any]:
    return {name: [] for name in STORE_COLLECTIONS}


def create_document(store: DocumentStore) -> str:
    """Create an empty shared document and return its id."""
    return store.create_document(empty_document())


def ensure_demo_users(store: DocumentStore, document_id: str) -> int:
    """Add the demo accounts whose email is not taken yet. Returns how many were added."""

    document = store.fetch_document(document_id)
    taken = {str(u.get("email", "")).lower() for u in document["users"] if isinstance(u, dict)}

    missing = []
    for demo in DEMO_USERS:
        if demo["email"] in taken:
            continue
        entry = {k: v for k, v in demo.items() if k != "password"}
        entry["passwordHash"] = generate_password_hash(demo["password"])
        missing.append(entry)

    if missing:
        store.merge_write(document_id, {"users": missing})
        logger.info("Seeded %d demo users into %s", len(missing), document_id)
    return len(missing)
