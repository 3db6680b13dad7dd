"""Merge-by-id policy for the shared JSON document.

The remote document has no transactions or locking; consistency across
writers relies entirely on every writer applying this merge before it
replaces the document.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from ..core.constants import STORE_COLLECTIONS


def _entity_id(entry: Any) -> Any:
    if isinstance(entry, Mapping):
        return entry.get("id")
    return None


def dedupe_by_id(entries: Iterable[Any]) -> list[Any]:
    """Keep the last occurrence of each id, in order of last occurrence.

    Entries without an id are kept untouched.
    """

    items = list(entries)
    last_index: dict[Any, int] = {}
    for i, entry in enumerate(items):
        key = _entity_id(entry)
        if key is not None:
            last_index[key] = i

    out = []
    for i, entry in enumerate(items):
        key = _entity_id(entry)
        if key is None or last_index[key] == i:
            out.append(entry)
    return out


def clean_document(raw: Any, collections: Iterable[str] = STORE_COLLECTIONS) -> dict[str, Any]:
    """Drop null entries from the entity collections.

    Missing or non-list collections become empty lists; every other top-level
    key is returned unchanged.
    """

    document = dict(raw) if isinstance(raw, Mapping) else {}
    for name in collections:
        value = document.get(name)
        if isinstance(value, list):
            document[name] = [entry for entry in value if entry is not None]
        else:
            document[name] = []
    return document


@dataclass(frozen=True)
class MergeByIdPolicy:
    collections: tuple[str, ...] = STORE_COLLECTIONS

    def merge_collection(self, existing: Any, incoming: Any) -> list[Any]:
        incoming_list = list(incoming or [])
        if not isinstance(existing, list):
            return dedupe_by_id(incoming_list)

        incoming_ids = {_entity_id(e) for e in incoming_list} - {None}
        kept = [e for e in existing if _entity_id(e) not in incoming_ids]
        return dedupe_by_id(kept + incoming_list)

    def merge(self, existing: Mapping[str, Any], partial: Mapping[str, Any]) -> dict[str, Any]:
        merged = dict(existing)
        for name in self.collections:
            merged[name] = self.merge_collection(existing.get(name), partial.get(name))
        return merged
