"""Dismissed notice tracking persisted to dismissals.json."""

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from wpdi.host.json_store import JsonFileStore

logger = logging.getLogger(__name__)

DAY_IN_SECONDS = 24 * 60 * 60


class JsonDismissalTracker:
    """Remembers until when each dismissed notice stays hidden."""

    def __init__(self, dismissals_file: Optional[Path], clock: Callable[[], float] = time.time):
        self._store = JsonFileStore(dismissals_file)
        self._clock = clock

    def is_notice_active(self, dismiss_key: str) -> bool:
        """A notice is active unless it was dismissed and the dismissal has not expired."""
        hidden_until = self._store.data.get(dismiss_key)
        if hidden_until is None:
            return True
        return float(hidden_until) <= self._clock()

    def dismiss(self, dismiss_key: str, days: int) -> None:
        self._store.data[dismiss_key] = self._clock() + days * DAY_IN_SECONDS
        self._store.save()
        logger.info(f"Dismissed notice {dismiss_key} for {days} day(s)")
