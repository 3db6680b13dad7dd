from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..core.exceptions import StoreUnavailable
from .connection import StoreConnection
from .http_base import expect_ok, read_json, store_call
from .merge import MergeByIdPolicy, clean_document
from .repository import DocumentStore

logger = logging.getLogger(__name__)


class JsonBlobStore(DocumentStore):
    """Document store backed by a JSONBlob-style HTTP API.

    GET /{id} reads, PUT /{id} replaces the whole document, POST / creates one
    and answers with its location. There is no PATCH, so every merge happens
    here before the PUT.
    """

    def __init__(self, connection: StoreConnection, *, policy: Optional[MergeByIdPolicy] = None):
        self._connection = connection
        self._policy = policy or MergeByIdPolicy()

    def fetch_document(self, document_id: str) -> dict[str, Any]:
        action = f"fetch document {document_id}"
        with store_call(action):
            response = self._connection.session().get(
                self._connection.url(document_id),
                timeout=self._connection.config.timeout,
            )
        expect_ok(response, action)
        return clean_document(read_json(response, action), self._policy.collections)

    def merge_write(self, document_id: str, partial: Mapping[str, Any]) -> dict[str, Any]:
        existing = self.fetch_document(document_id)
        merged = self._policy.merge(existing, partial)

        action = f"update document {document_id}"
        with store_call(action):
            response = self._connection.session().put(
                self._connection.url(document_id),
                json=merged,
                timeout=self._connection.config.timeout,
            )
        expect_ok(response, action)
        logger.debug(
            "Merged %s into document %s",
            {name: len(partial.get(name) or []) for name in self._policy.collections},
            document_id,
        )
        return merged

    def create_document(self, initial: Mapping[str, Any]) -> str:
        action = "create document"
        with store_call(action):
            response = self._connection.session().post(
                self._connection.url(),
                json=dict(initial),
                timeout=self._connection.config.timeout,
            )
        expect_ok(response, action)

        location = response.headers.get("Location") or ""
        document_id = location.rstrip("/").rsplit("/", 1)[-1]
        if not document_id:
            raise StoreUnavailable("Failed to create document: response has no Location header")
        logger.info("Created document %s", document_id)
        return document_id