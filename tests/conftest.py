"""Shared fakes for the installer tests."""

from typing import Dict, List, Optional, Set, Tuple

import pytest

from wpdi.installer.collaborators import OperationResult
from wpdi.installer.lifecycle import LifecycleController
from wpdi.installer.manifest import DependencyDeclaration
from wpdi.installer.registry import DependencyRegistry
from wpdi.installer.resolver import DownloadLinkResolver


class FakeInventory:
    def __init__(self, installed: Optional[Set[str]] = None, active: Optional[Set[str]] = None):
        self.installed = set(installed or ())
        self.active = set(active or ())
        self.refresh_calls = 0

    def is_installed(self, slug: str) -> bool:
        return slug in self.installed

    def is_active(self, slug: str) -> bool:
        return slug in self.active

    def refresh(self) -> None:
        self.refresh_calls += 1


class FakeInstaller:
    """Records installs and marks the slug installed on success."""

    def __init__(self, inventory: FakeInventory, result: Optional[OperationResult] = None):
        self.inventory = inventory
        self.result = result if result is not None else OperationResult(success=True)
        self.calls: List[Tuple[str, str]] = []

    async def install(self, download_link: str, slug: str) -> Optional[OperationResult]:
        self.calls.append((download_link, slug))
        if self.result is not None and self.result.success:
            self.inventory.installed.add(slug)
        return self.result


class FakeActivator:
    def __init__(self, inventory: FakeInventory, result: Optional[OperationResult] = None):
        self.inventory = inventory
        self.result = result if result is not None else OperationResult(success=True)
        self.calls: List[Tuple[str, bool]] = []

    def activate(self, slug: str, network_wide: bool = False) -> OperationResult:
        self.calls.append((slug, network_wide))
        if self.result.success:
            self.inventory.active.add(slug)
        return self.result


class FakePermissions:
    def __init__(self, allowed: bool = True):
        self.allowed = allowed

    def current_user_can_manage_plugins(self) -> bool:
        return self.allowed


class FakeDismissals:
    def __init__(self):
        self.dismissed: Dict[str, int] = {}

    def is_notice_active(self, dismiss_key: str) -> bool:
        return dismiss_key not in self.dismissed

    def dismiss(self, dismiss_key: str, days: int) -> None:
        self.dismissed[dismiss_key] = days


class FakeDirectory:
    def __init__(self, link: Optional[str] = None, error: Optional[Exception] = None):
        self.link = link
        self.error = error
        self.calls: List[str] = []

    async def fetch_latest_download_link(self, slug: str) -> Optional[str]:
        self.calls.append(slug)
        if self.error is not None:
            raise self.error
        return self.link


class MemoryCache:
    def __init__(self):
        self.data: Dict[str, object] = {}
        self.ttls: Dict[str, int] = {}

    def get(self, key: str):
        return self.data.get(key)

    def set(self, key: str, value, ttl: int) -> None:
        self.data[key] = value
        self.ttls[key] = ttl


def make_declaration(**overrides) -> DependencyDeclaration:
    data = {
        "slug": "widget/widget.php",
        "name": "Widget",
        "uri": "https://github.com/acme/widget",
        "host": "github",
        "branch": "main",
    }
    data.update(overrides)
    return DependencyDeclaration(**data)


class ControllerHarness:
    """A controller wired to fakes, exposed for assertions."""

    def __init__(self, installed=None, active=None, allowed=True, network_admin=False, timeout_filter=None):
        self.registry = DependencyRegistry()
        self.inventory = FakeInventory(installed, active)
        self.installer = FakeInstaller(self.inventory)
        self.activator = FakeActivator(self.inventory)
        self.permissions = FakePermissions(allowed)
        self.dismissals = FakeDismissals()
        self.directory = FakeDirectory()
        self.cache = MemoryCache()
        self.resolver = DownloadLinkResolver(self.directory, self.cache)
        self.controller = LifecycleController(
            registry=self.registry,
            resolver=self.resolver,
            inventory=self.inventory,
            installer=self.installer,
            activator=self.activator,
            permissions=self.permissions,
            dismissals=self.dismissals,
            network_admin=network_admin,
            dismiss_timeout_filter=timeout_filter,
        )

    def declare(self, source: str = "my-plugin", **overrides) -> DependencyDeclaration:
        declaration = make_declaration(**overrides)
        self.registry.register([declaration], source)
        return declaration


@pytest.fixture
def harness():
    return ControllerHarness()
