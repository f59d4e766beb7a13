"""Plugin activation state - manages plugin_state.json.

Format:
{
    "active": ["akismet/akismet.php"],
    "network_active": ["query-monitor/query-monitor.php"]
}
"""

import logging
from pathlib import Path
from typing import Optional

from wpdi.host.json_store import JsonFileStore

logger = logging.getLogger(__name__)


class PluginStateStore:
    """Records which plugins are active on the site or the whole network."""

    def __init__(self, state_file: Optional[Path]):
        self._store = JsonFileStore(state_file, default=lambda: {"active": [], "network_active": []})

    def is_active(self, slug: str) -> bool:
        """Check if a plugin is active on the site or network-wide."""
        data = self._store.data
        return slug in data.get("active", []) or slug in data.get("network_active", [])

    def is_network_active(self, slug: str) -> bool:
        """Check if a plugin is active on every site of the network."""
        return slug in self._store.data.get("network_active", [])

    def activate(self, slug: str, network_wide: bool = False) -> None:
        """Mark a plugin active."""
        key = "network_active" if network_wide else "active"
        active = self._store.data.setdefault(key, [])
        if slug not in active:
            active.append(slug)
            self._store.save()
            logger.info(f"Activated plugin: {slug}{' (network)' if network_wide else ''}")

    def reload(self) -> None:
        self._store.reload()
