"""JSON file persistence shared by the host stores."""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Keeps a dict in memory and mirrors it to a JSON file.

    With no file the store lives in memory only.
    """

    def __init__(self, path: Optional[Path], default: Callable[[], Dict[str, Any]] = dict):
        self.path = Path(path) if path else None
        self._default = default
        self.data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        """Load data from file, falling back to defaults if missing or broken."""
        if self.path is not None and self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
                logger.error(f"Ignoring {self.path}: top level is not an object")
            except (json.JSONDecodeError, IOError) as e:
                logger.error(f"Error loading {self.path}: {e}")

        return self._default()

    def save(self) -> None:
        """Save data to file."""
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.data, f, indent=2, ensure_ascii=False)
        logger.debug(f"Saved {self.path}")

    def reload(self) -> None:
        """Reload data from disk."""
        self.data = self._load()
