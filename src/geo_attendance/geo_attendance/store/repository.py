from __future__ import annotations

from typing import Any, Mapping, Protocol


class DocumentStore(Protocol):
    """Storage port for the shared JSON document.

    Note (DIP): the engine and the user repository depend on this interface,
    never on a concrete HTTP client.
    """

    def fetch_document(self, document_id: str) -> dict[str, Any]:
        """Return the document with null collection entries removed."""
        raise NotImplementedError

    def merge_write(self, document_id: str, partial: Mapping[str, Any]) -> dict[str, Any]:
        """Read, merge `partial` by entity id, replace the document; return what was written."""
        raise NotImplementedError

    def create_document(self, initial: Mapping[str, Any]) -> str:
        """Create a new document and return its id."""
        raise NotImplementedError
