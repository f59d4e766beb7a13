"""Installer context - wires the registry, resolver and lifecycle together.

One context is built per request (or CLI invocation) and passed around
explicitly; the registry it holds is rebuilt from the manifests every time.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from wpdi.constants import InstallerSettings
from wpdi.host import (
    FilesystemInventory,
    JsonDismissalTracker,
    JsonTransientCache,
    PluginStateStore,
    StateStoreActivator,
    StaticPermissionCheck,
    WordPressOrgDirectory,
    ZipArchiveInstaller,
)
from wpdi.installer.collaborators import DismissalTracker, TransientCache
from wpdi.installer.lifecycle import DismissTimeoutFilter, LifecycleController
from wpdi.installer.registry import DependencyRegistry
from wpdi.installer.resolver import DownloadLinkFilter, DownloadLinkResolver

logger = logging.getLogger(__name__)


@dataclass
class InstallerContext:
    settings: InstallerSettings
    registry: DependencyRegistry
    resolver: DownloadLinkResolver
    inventory: FilesystemInventory
    permissions: StaticPermissionCheck
    dismissals: DismissalTracker
    controller: LifecycleController

    def timeout_for(self, source: str) -> int:
        return self.controller.dismiss_timeout(source)


def build_context(
    settings: InstallerSettings,
    network_admin: bool = False,
    cache: Optional[TransientCache] = None,
    dismissals: Optional[DismissalTracker] = None,
    download_link_filter: Optional[DownloadLinkFilter] = None,
    dismiss_timeout_filter: Optional[DismissTimeoutFilter] = None,
) -> InstallerContext:
    """Build a context and register every manifest found in the configured paths.

    Args:
        settings: Installer settings
        network_admin: Whether the request comes from network admin pages
        cache: Download link cache; a file-backed one is created if omitted
        dismissals: Dismissal tracker; a file-backed one is created if omitted
        download_link_filter: Optional ``(link, declaration) -> link`` hook
        dismiss_timeout_filter: Optional ``(days, source) -> days`` hook

    Returns:
        The wired context
    """
    registry = DependencyRegistry()
    for plugin_path in settings.manifest_paths:
        registry.run(plugin_path)

    cache = cache if cache is not None else JsonTransientCache(settings.transients_file)
    dismissals = dismissals if dismissals is not None else JsonDismissalTracker(settings.dismissals_file)

    state_store = PluginStateStore(settings.state_file)
    inventory = FilesystemInventory(settings.plugins_dir, state_store)
    permissions = StaticPermissionCheck(settings.can_manage_plugins)
    resolver = DownloadLinkResolver(
        directory=WordPressOrgDirectory(settings.directory_api, timeout=settings.http_timeout),
        cache=cache,
        link_filter=download_link_filter,
    )
    controller = LifecycleController(
        registry=registry,
        resolver=resolver,
        inventory=inventory,
        installer=ZipArchiveInstaller(settings.plugins_dir, timeout=settings.http_timeout),
        activator=StateStoreActivator(settings.plugins_dir, state_store),
        permissions=permissions,
        dismissals=dismissals,
        network_admin=network_admin,
        dismiss_timeout_filter=dismiss_timeout_filter,
        default_dismiss_days=settings.dismiss_days,
    )

    logger.debug(f"Built installer context with {registry.count()} dependencies")
    return InstallerContext(
        settings=settings,
        registry=registry,
        resolver=resolver,
        inventory=inventory,
        permissions=permissions,
        dismissals=dismissals,
        controller=controller,
    )
