from __future__ import annotations

import logging
from typing import Optional

from ..store.repository import DocumentStore
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class StoreUserRepository(UserRepository):
    """Users kept in the `users` collection of the shared document."""

    def __init__(self, store: DocumentStore, document_id: str):
        self._store = store
        self._document_id = document_id

    def _load_all(self) -> list[User]:
        document = self._store.fetch_document(self._document_id)
        users = []
        for raw in document["users"]:
            try:
                users.append(User.from_dict(raw))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed user entry: %r", raw)
        return users

    def get_by_id(self, user_id: str) -> Optional[User]:
        for u in self._load_all():
            if u.user_id == str(user_id):
                return u
        return None

    def find_by_email(self, email: str) -> Optional[User]:
        needle = (email or "").strip().lower()
        for u in self._load_all():
            if u.email.strip().lower() == needle:
                return u
        return None

    def create_user(self, user: User) -> None:
        self._store.merge_write(self._document_id, {"users": [user.to_dict()]})
        logger.info("Created %s account %s", user.role.value, user.user_id)
