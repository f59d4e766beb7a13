"""Interfaces of the host services the installer relies on."""

from dataclasses import dataclass
from typing import Any, Optional, Protocol


@dataclass
class OperationResult:
    """Outcome reported by the host installer or activator."""

    success: bool
    message: Optional[str] = None


class PluginInventory(Protocol):
    def is_installed(self, slug: str) -> bool: ...

    def is_active(self, slug: str) -> bool: ...

    def refresh(self) -> None:
        """Forget any cached plugin listing."""
        ...


class ArtifactInstaller(Protocol):
    async def install(self, download_link: str, slug: str) -> Optional[OperationResult]:
        """Download, unpack and move an artifact into place as ``slug``'s directory."""
        ...


class PluginActivator(Protocol):
    def activate(self, slug: str, network_wide: bool = False) -> OperationResult: ...


class DirectoryLookup(Protocol):
    async def fetch_latest_download_link(self, slug: str) -> Optional[str]: ...


class TransientCache(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, ttl: int) -> None: ...


class PermissionCheck(Protocol):
    def current_user_can_manage_plugins(self) -> bool: ...


class DismissalTracker(Protocol):
    def is_notice_active(self, dismiss_key: str) -> bool: ...

    def dismiss(self, dismiss_key: str, days: int) -> None: ...
