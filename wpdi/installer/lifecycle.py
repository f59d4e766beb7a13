"""Dependency lifecycle - drives install/activate and produces notices."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Set

from wpdi.installer.collaborators import (
    ArtifactInstaller,
    DismissalTracker,
    OperationResult,
    PermissionCheck,
    PluginActivator,
    PluginInventory,
)
from wpdi.installer.errors import ActivationError, InstallError, InstallerPermissionError
from wpdi.installer.manifest import DependencyDeclaration
from wpdi.installer.notices import DEFAULT_DISMISS_DAYS, dismiss_key
from wpdi.installer.registry import DependencyRegistry
from wpdi.installer.resolver import DownloadLinkResolver

logger = logging.getLogger(__name__)

DismissTimeoutFilter = Callable[[int, str], int]


class DependencyState(str, Enum):
    """Installation state of a dependency on the host."""

    NOT_INSTALLED = "not_installed"
    INSTALLED_INACTIVE = "installed_inactive"
    ACTIVE = "active"


class Action(str, Enum):
    """Actions a user may trigger from a notice."""

    INSTALL = "install"
    ACTIVATE = "activate"
    DISMISS = "dismiss"


class NoticeStatus(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ActionResult:
    """Outcome of install, activate or dismiss."""

    status: NoticeStatus
    message: str
    slug: Optional[str] = None
    source: str = ""


@dataclass
class Notice:
    """A status message about one dependency, regenerated on every pass."""

    status: NoticeStatus
    slug: str
    message: str
    action: Optional[Action] = None
    source: str = ""

    @classmethod
    def from_result(cls, result: ActionResult, declaration: DependencyDeclaration) -> "Notice":
        return cls(
            status=result.status,
            slug=declaration.slug,
            message=result.message,
            source=declaration.source,
        )

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "slug": self.slug,
            "message": self.message,
            "action": self.action.value if self.action else None,
            "source": self.source,
        }


@dataclass
class EvaluationReport:
    """Result of one evaluation pass."""

    notices: List[Notice] = field(default_factory=list)
    protected_slugs: Set[str] = field(default_factory=set)


class LifecycleController:
    """Moves each dependency through not installed -> installed -> active.

    Required dependencies are installed and activated automatically;
    optional ones only get a notice offering the action.
    """

    def __init__(
        self,
        registry: DependencyRegistry,
        resolver: DownloadLinkResolver,
        inventory: PluginInventory,
        installer: ArtifactInstaller,
        activator: PluginActivator,
        permissions: PermissionCheck,
        dismissals: DismissalTracker,
        network_admin: bool = False,
        dismiss_timeout_filter: Optional[DismissTimeoutFilter] = None,
        default_dismiss_days: int = DEFAULT_DISMISS_DAYS,
    ):
        self.registry = registry
        self.resolver = resolver
        self.inventory = inventory
        self.installer = installer
        self.activator = activator
        self.permissions = permissions
        self.dismissals = dismissals
        self.network_admin = network_admin
        self.dismiss_timeout_filter = dismiss_timeout_filter
        self.default_dismiss_days = default_dismiss_days

    def state_of(self, slug: str) -> DependencyState:
        if self.inventory.is_active(slug):
            return DependencyState.ACTIVE
        if self.inventory.is_installed(slug):
            return DependencyState.INSTALLED_INACTIVE
        return DependencyState.NOT_INSTALLED

    def dismiss_timeout(self, source: str) -> int:
        """Days a dismissed notice stays hidden for dependencies of ``source``."""
        days = self.default_dismiss_days
        if self.dismiss_timeout_filter is not None:
            days = int(self.dismiss_timeout_filter(days, source))
        return days

    async def evaluate(self) -> EvaluationReport:
        """Run one evaluation pass over all registered dependencies.

        A failure on one dependency becomes an error notice and does not
        stop the pass.
        """
        report = EvaluationReport()
        for declaration in self.registry.all():
            if declaration.required:
                report.protected_slugs.add(declaration.slug)
            try:
                declaration.download_link = await self.resolver.resolve_download_link(declaration)
                notice = await self._evaluate_one(declaration)
            except Exception as e:
                logger.error(f"[Lifecycle] Evaluating {declaration.slug} failed: {e}", exc_info=True)
                notice = Notice(
                    status=NoticeStatus.ERROR,
                    slug=declaration.slug,
                    message=str(e),
                    source=declaration.source,
                )
            if notice is not None:
                report.notices.append(notice)

        logger.info(
            f"[Lifecycle] Evaluated {self.registry.count()} dependencies, "
            f"{len(report.notices)} notice(s)"
        )
        return report

    async def _evaluate_one(self, declaration: DependencyDeclaration) -> Optional[Notice]:
        slug = declaration.slug
        name = declaration.display_name
        state = self.state_of(slug)

        if state == DependencyState.ACTIVE:
            return None

        if state == DependencyState.INSTALLED_INACTIVE:
            if declaration.required:
                result = self.activate(slug)
                if result is not None:
                    return Notice.from_result(result, declaration)
            return Notice(
                status=NoticeStatus.INFO,
                slug=slug,
                message=f"Please activate the {name} plugin.",
                action=Action.ACTIVATE,
                source=declaration.source,
            )

        if declaration.required:
            result = await self.install(slug)
            if result is not None:
                return Notice.from_result(result, declaration)
            message = f"The {name} plugin is required."
        else:
            message = f"The {name} plugin is optional."

        return Notice(
            status=NoticeStatus.INFO,
            slug=slug,
            message=message,
            action=Action.INSTALL,
            source=declaration.source,
        )

    def _ensure_can_manage(self, action: Action, slug: str) -> None:
        if not self.permissions.current_user_can_manage_plugins():
            raise InstallerPermissionError(f"Not allowed to {action.value} {slug}")

    async def install(self, slug: str) -> Optional[ActionResult]:
        """Install a dependency, activating it too when it is required.

        Returns:
            None when the slug is unknown, already installed or the user
            may not install plugins; otherwise the outcome
        """
        declaration = self.registry.get(slug)
        if declaration is None:
            logger.warning(f"[Lifecycle] Install requested for unknown dependency {slug}")
            return None

        if self.inventory.is_installed(slug):
            return None

        try:
            self._ensure_can_manage(Action.INSTALL, slug)
        except InstallerPermissionError as e:
            logger.warning(f"[Lifecycle] {e}")
            return None

        link = await self.resolver.resolve_download_link(declaration)
        declaration.download_link = link
        if not link:
            return self._error(declaration, f"Download failed. No download link for {declaration.display_name}.")

        logger.info(f"[Lifecycle] Installing {slug} from {link}")
        try:
            result: Optional[OperationResult] = await self.installer.install(link, slug)
        except (InstallError, OSError) as e:
            logger.error(f"[Lifecycle] Installing {slug} failed: {e}")
            return self._error(declaration, str(e))

        if result is None or not result.success:
            message = result.message if result is not None and result.message else "Download failed."
            return self._error(declaration, message)

        self.inventory.refresh()

        if declaration.required:
            activated = self.activate(slug)
            if activated is None or activated.status == NoticeStatus.ERROR:
                return activated
            return self._success(declaration, f"{declaration.display_name} has been installed and activated.")

        return self._success(declaration, f"{declaration.display_name} has been installed.")

    def activate(self, slug: str) -> Optional[ActionResult]:
        """Activate an installed dependency, network-wide on network admin pages."""
        declaration = self.registry.get(slug)
        if declaration is None:
            logger.warning(f"[Lifecycle] Activation requested for unknown dependency {slug}")
            return None

        try:
            self._ensure_can_manage(Action.ACTIVATE, slug)
        except InstallerPermissionError as e:
            logger.warning(f"[Lifecycle] {e}")
            return None

        try:
            result = self.activator.activate(slug, network_wide=self.network_admin)
        except ActivationError as e:
            return self._error(declaration, str(e))

        if not result.success:
            return self._error(declaration, result.message or f"{declaration.display_name} could not be activated.")

        logger.info(f"[Lifecycle] Activated {slug}{' network-wide' if self.network_admin else ''}")
        return self._success(declaration, f"{declaration.display_name} has been activated.")

    def dismiss(self, slug: str) -> ActionResult:
        """Hide the notice of a dependency for the configured number of days."""
        declaration = self.registry.get(slug)
        source = declaration.source if declaration else ""
        days = self.dismiss_timeout(source)
        self.dismissals.dismiss(dismiss_key(slug, days), days)
        return ActionResult(status=NoticeStatus.SUCCESS, message="", slug=slug, source=source)

    async def dispatch(self, method: str, slug: str) -> Optional[str]:
        """Run an action requested remotely.

        Only ``install``, ``activate`` and ``dismiss`` are accepted; any
        other method is ignored.

        Returns:
            The result message, or None when nothing was done
        """
        try:
            action = Action(method)
        except ValueError:
            logger.warning(f"[Lifecycle] Ignoring unknown action {method!r} for {slug}")
            return None

        if action == Action.INSTALL:
            result = await self.install(slug)
        elif action == Action.ACTIVATE:
            result = self.activate(slug)
        elif action == Action.DISMISS:
            result = self.dismiss(slug)
        else:
            return None

        return result.message if result is not None else None

    @staticmethod
    def _error(declaration: DependencyDeclaration, message: str) -> ActionResult:
        logger.error(f"[Lifecycle] {declaration.slug}: {message}")
        return ActionResult(
            status=NoticeStatus.ERROR,
            message=message,
            slug=declaration.slug,
            source=declaration.source,
        )

    @staticmethod
    def _success(declaration: DependencyDeclaration, message: str) -> ActionResult:
        return ActionResult(
            status=NoticeStatus.SUCCESS,
            message=message,
            slug=declaration.slug,
            source=declaration.source,
        )
