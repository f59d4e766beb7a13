"""Installed plugin inventory backed by the plugins directory."""

import logging
from pathlib import Path
from typing import Optional, Set

from wpdi.host.state_store import PluginStateStore

logger = logging.getLogger(__name__)


class FilesystemInventory:
    """Answers installed/active questions for the host site.

    A plugin is installed when ``<plugins_dir>/<slug>`` is a file. The
    listing is cached until ``refresh()`` is called.
    """

    def __init__(self, plugins_dir: Path, state_store: PluginStateStore):
        self.plugins_dir = Path(plugins_dir)
        self.state_store = state_store
        self._installed: Optional[Set[str]] = None

    def installed_plugins(self) -> Set[str]:
        """Slugs of all plugin files found one level below the plugins directory."""
        if self._installed is None:
            installed = set()
            if self.plugins_dir.exists():
                for item in self.plugins_dir.iterdir():
                    if item.is_file() and item.suffix == ".php":
                        installed.add(item.name)
                    elif item.is_dir():
                        for plugin_file in item.glob("*.php"):
                            installed.add(f"{item.name}/{plugin_file.name}")
            self._installed = installed
            logger.debug(f"Found {len(installed)} installed plugin(s) in {self.plugins_dir}")
        return self._installed

    def is_installed(self, slug: str) -> bool:
        return slug in self.installed_plugins()

    def is_active(self, slug: str) -> bool:
        return self.is_installed(slug) and self.state_store.is_active(slug)

    def refresh(self) -> None:
        self._installed = None
        self.state_store.reload()
