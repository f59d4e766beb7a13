"""Host services backing the installer: plugins directory, state files and HTTP."""

from .activator import StateStoreActivator
from .archive_installer import ZipArchiveInstaller
from .directory import WordPressOrgDirectory
from .dismissals import JsonDismissalTracker
from .inventory import FilesystemInventory
from .permissions import StaticPermissionCheck
from .state_store import PluginStateStore
from .transients import JsonTransientCache

__all__ = [
    "StateStoreActivator",
    "ZipArchiveInstaller",
    "WordPressOrgDirectory",
    "JsonDismissalTracker",
    "FilesystemInventory",
    "StaticPermissionCheck",
    "PluginStateStore",
    "JsonTransientCache",
]
