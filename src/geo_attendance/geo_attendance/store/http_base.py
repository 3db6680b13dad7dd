from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

import requests

from ..core.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


@contextmanager
def store_call(action: str) -> Iterator[None]:
    """Translate transport failures into StoreUnavailable."""
    try:
        yield
    except requests.RequestException as e:
        logger.error("Store %s failed: %s", action, e)
        raise StoreUnavailable(f"Failed to {action}: {e}") from e


def expect_ok(response: Any, action: str) -> Any:
    if not response.ok:
        logger.error("Store %s failed with HTTP %s", action, response.status_code)
        raise StoreUnavailable(f"Failed to {action} (HTTP {response.status_code})")
    return response


def read_json(response: Any, action: str) -> Any:
    try:
        return response.json()
    except ValueError as e:
        logger.error("Store %s returned a non-JSON body", action)
        raise StoreUnavailable(f"Failed to {action}: invalid JSON") from e
