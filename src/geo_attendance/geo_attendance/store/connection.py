from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests

from ..core.constants import DEFAULT_STORE_BASE_URL, DEFAULT_STORE_TIMEOUT_SECONDS


@dataclass
class StoreConfig:
    base_url: str
    document_id: str
    timeout: float = DEFAULT_STORE_TIMEOUT_SECONDS

    @classmethod
    def from_dict(cls, store_config: dict) -> "StoreConfig":
        return cls(
            base_url=str(store_config.get("base_url") or DEFAULT_STORE_BASE_URL).rstrip("/"),
            document_id=str(store_config.get("document_id") or ""),
            timeout=float(store_config.get("timeout", DEFAULT_STORE_TIMEOUT_SECONDS)),
        )


class StoreConnection:
    """Singleton-like HTTP session factory for the document store.

    Note: One `requests.Session` is reused so keep-alive connections are pooled.
    """

    _instance: Optional["StoreConnection"] = None

    HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}

    def __init__(self, config: StoreConfig, *, session: Optional[requests.Session] = None):
        self._config = config
        self._session = session

    @classmethod
    def get_instance(cls, config: StoreConfig) -> "StoreConnection":
        if cls._instance is None:
            cls._instance = StoreConnection(config)
        return cls._instance

    @property
    def config(self) -> StoreConfig:
        return self._config

    def url(self, document_id: Optional[str] = None) -> str:
        if document_id is None:
            return self._config.base_url
        return f"{self._config.base_url}/{document_id}"

    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(self.HEADERS)
        return self._session
