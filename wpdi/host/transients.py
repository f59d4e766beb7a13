"""Expiring key-value cache persisted to transients.json."""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Optional

from wpdi.host.json_store import JsonFileStore

logger = logging.getLogger(__name__)


class JsonTransientCache:
    """Key-value cache whose entries expire after a TTL in seconds.

    Entries are stored as ``{"value": ..., "expires": <unix time>}``.
    """

    def __init__(self, cache_file: Optional[Path], clock: Callable[[], float] = time.time):
        self._store = JsonFileStore(cache_file)
        self._clock = clock

    def get(self, key: str) -> Optional[Any]:
        entry = self._store.data.get(key)
        if not isinstance(entry, dict):
            return None

        if entry.get("expires", 0) <= self._clock():
            logger.debug(f"Transient expired: {key}")
            del self._store.data[key]
            self._store.save()
            return None

        return entry.get("value")

    def set(self, key: str, value: Any, ttl: int) -> None:
        self._store.data[key] = {"value": value, "expires": self._clock() + ttl}
        self._store.save()
