"""Plugin activator recording activation in the plugin state store."""

import logging
from pathlib import Path

from wpdi.host.state_store import PluginStateStore
from wpdi.installer.collaborators import OperationResult

logger = logging.getLogger(__name__)


class StateStoreActivator:
    """Activates installed plugins on the site or network-wide."""

    def __init__(self, plugins_dir: Path, state_store: PluginStateStore):
        self.plugins_dir = Path(plugins_dir)
        self.state_store = state_store

    def activate(self, slug: str, network_wide: bool = False) -> OperationResult:
        plugin_file = self.plugins_dir / slug
        if not plugin_file.is_file():
            logger.error(f"Cannot activate {slug}: {plugin_file} does not exist")
            return OperationResult(success=False, message="Plugin file does not exist.")

        self.state_store.activate(slug, network_wide=network_wide)
        return OperationResult(success=True)
