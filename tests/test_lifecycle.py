"""Tests for the install/activate lifecycle."""

import pytest

from conftest import ControllerHarness
from wpdi.installer.collaborators import OperationResult
from wpdi.installer.errors import ActivationError, InstallError
from wpdi.installer.lifecycle import Action, DependencyState, NoticeStatus

SLUG = "widget/widget.php"


class TestEvaluate:
    """Tests for LifecycleController.evaluate."""

    @pytest.mark.asyncio
    async def test_required_missing_is_installed_then_activated(self):
        h = ControllerHarness()
        h.declare(required=True)

        report = await h.controller.evaluate()

        assert h.installer.calls == [("https://api.github.com/repos/acme/widget/zipball/main", SLUG)]
        assert h.activator.calls == [(SLUG, False)]
        assert len(report.notices) == 1
        notice = report.notices[0]
        assert notice.status == NoticeStatus.SUCCESS
        assert notice.message == "Widget has been installed and activated."
        assert notice.source == "my-plugin"

    @pytest.mark.asyncio
    async def test_required_install_failure_is_error_notice(self):
        h = ControllerHarness()
        h.installer.result = OperationResult(success=False, message="Could not unpack")
        h.declare(required=True)

        report = await h.controller.evaluate()

        assert h.activator.calls == []
        assert [n.status for n in report.notices] == [NoticeStatus.ERROR]
        assert report.notices[0].message == "Could not unpack"

    @pytest.mark.asyncio
    async def test_required_inactive_is_activated(self):
        h = ControllerHarness(installed={SLUG})
        h.declare(optional=False)

        report = await h.controller.evaluate()

        assert h.installer.calls == []
        assert h.activator.calls == [(SLUG, False)]
        assert report.notices[0].message == "Widget has been activated."

    @pytest.mark.asyncio
    async def test_optional_inactive_offers_activation(self):
        h = ControllerHarness(installed={SLUG})
        h.declare()

        report = await h.controller.evaluate()

        assert h.activator.calls == []
        assert len(report.notices) == 1
        notice = report.notices[0]
        assert notice.action == Action.ACTIVATE
        assert notice.message == "Please activate the Widget plugin."

    @pytest.mark.asyncio
    async def test_optional_missing_offers_install(self):
        h = ControllerHarness()
        h.declare()

        report = await h.controller.evaluate()

        assert h.installer.calls == []
        assert report.notices[0].action == Action.INSTALL
        assert report.notices[0].message == "The Widget plugin is optional."

    @pytest.mark.asyncio
    async def test_active_dependency_has_no_notice(self):
        h = ControllerHarness(installed={SLUG}, active={SLUG})
        h.declare(required=True)

        report = await h.controller.evaluate()

        assert report.notices == []
        assert report.protected_slugs == {SLUG}

    @pytest.mark.asyncio
    async def test_only_required_are_protected(self):
        h = ControllerHarness(installed={SLUG, "other/other.php"}, active={SLUG, "other/other.php"})
        h.declare(required=True)
        h.declare(slug="other/other.php")

        report = await h.controller.evaluate()

        assert report.protected_slugs == {SLUG}

    @pytest.mark.asyncio
    async def test_required_without_permission_gets_install_notice(self):
        h = ControllerHarness(allowed=False)
        h.declare(required=True)

        report = await h.controller.evaluate()

        assert h.installer.calls == []
        assert report.notices[0].action == Action.INSTALL
        assert report.notices[0].message == "The Widget plugin is required."

    @pytest.mark.asyncio
    async def test_failure_does_not_block_other_dependencies(self):
        h = ControllerHarness(installed={"other/other.php"})

        def explode(slug, network_wide=False):
            raise RuntimeError("database gone")

        h.activator.activate = explode
        h.declare(slug="other/other.php", required=True)
        h.declare(slug="third/third.php")

        report = await h.controller.evaluate()

        assert [n.status for n in report.notices] == [NoticeStatus.ERROR, NoticeStatus.INFO]
        assert report.notices[0].message == "database gone"

    @pytest.mark.asyncio
    async def test_malformed_uri_does_not_block_other_dependencies(self):
        h = ControllerHarness()
        h.declare(slug="bad/bad.php", name="Bad", uri="https://[broken/acme/widget", required=True)
        h.declare(slug="good/good.php", name="Good")

        report = await h.controller.evaluate()

        assert [n.message for n in report.notices] == [
            "Download failed. No download link for Bad.",
            "The Good plugin is optional.",
        ]
        assert h.installer.calls == []

    @pytest.mark.asyncio
    async def test_network_admin_activates_network_wide(self):
        h = ControllerHarness(installed={SLUG}, network_admin=True)
        h.declare(required=True)

        await h.controller.evaluate()

        assert h.activator.calls == [(SLUG, True)]


class TestInstall:
    """Tests for LifecycleController.install."""

    @pytest.mark.asyncio
    async def test_already_installed_is_noop(self):
        h = ControllerHarness(installed={SLUG})
        h.declare()

        assert await h.controller.install(SLUG) is None
        assert h.installer.calls == []

    @pytest.mark.asyncio
    async def test_without_permission_is_noop(self):
        h = ControllerHarness(allowed=False)
        h.declare()

        assert await h.controller.install(SLUG) is None
        assert h.installer.calls == []

    @pytest.mark.asyncio
    async def test_unknown_slug_is_noop(self, harness):
        assert await harness.controller.install("nope/nope.php") is None

    @pytest.mark.asyncio
    async def test_optional_install_does_not_activate(self):
        h = ControllerHarness()
        h.declare()

        result = await h.controller.install(SLUG)

        assert result.status == NoticeStatus.SUCCESS
        assert result.message == "Widget has been installed."
        assert h.activator.calls == []
        assert h.inventory.refresh_calls == 1

    @pytest.mark.asyncio
    async def test_empty_installer_result_is_generic_failure(self):
        h = ControllerHarness()
        h.installer.result = None
        h.declare()

        result = await h.controller.install(SLUG)

        assert result.status == NoticeStatus.ERROR
        assert result.message == "Download failed."

    @pytest.mark.asyncio
    async def test_install_error_carries_message(self):
        h = ControllerHarness()

        async def broken(link, slug):
            raise InstallError("Destination folder already exists.")

        h.installer.install = broken
        h.declare()

        result = await h.controller.install(SLUG)

        assert result.status == NoticeStatus.ERROR
        assert result.message == "Destination folder already exists."

    @pytest.mark.asyncio
    async def test_link_is_always_resolved(self):
        h = ControllerHarness()
        h.resolver.link_filter = lambda link, declaration: f"{link}#filtered"
        d = h.declare()
        d.download_link = "http://elsewhere.example/x.zip"

        await h.controller.dispatch("install", SLUG)

        assert h.installer.calls == [("https://api.github.com/repos/acme/widget/zipball/main#filtered", SLUG)]

    @pytest.mark.asyncio
    async def test_filesystem_error_is_result(self):
        h = ControllerHarness()

        async def read_only(link, slug):
            raise PermissionError(13, "Permission denied", "/plugins")

        h.installer.install = read_only
        h.declare()

        result = await h.controller.install(SLUG)

        assert result.status == NoticeStatus.ERROR
        assert "Permission denied" in result.message

    @pytest.mark.asyncio
    async def test_unresolvable_link_is_failure(self):
        h = ControllerHarness()
        h.declare(host="direct", uri="nonsense")

        result = await h.controller.install(SLUG)

        assert result.status == NoticeStatus.ERROR
        assert h.installer.calls == []

    @pytest.mark.asyncio
    async def test_required_activation_failure_is_reported(self):
        h = ControllerHarness()
        h.activator.result = OperationResult(success=False, message="Plugin file does not exist.")
        h.declare(required=True)

        result = await h.controller.install(SLUG)

        assert result.status == NoticeStatus.ERROR
        assert result.message == "Plugin file does not exist."


class TestActivate:
    """Tests for LifecycleController.activate."""

    def test_activation_error_is_result(self):
        h = ControllerHarness(installed={SLUG})

        def refuse(slug, network_wide=False):
            raise ActivationError("Plugin has a fatal error.")

        h.activator.activate = refuse
        h.declare()

        result = h.controller.activate(SLUG)

        assert result.status == NoticeStatus.ERROR
        assert result.message == "Plugin has a fatal error."

    def test_state_follows_inventory(self):
        h = ControllerHarness(installed={SLUG})
        h.declare()

        assert h.controller.state_of(SLUG) == DependencyState.INSTALLED_INACTIVE
        h.controller.activate(SLUG)
        assert h.controller.state_of(SLUG) == DependencyState.ACTIVE


class TestDismissAndDispatch:
    """Tests for dismiss and the action router."""

    def test_dismiss_records_default_timeout(self):
        h = ControllerHarness()
        h.declare()

        result = h.controller.dismiss(SLUG)

        assert result.status == NoticeStatus.SUCCESS
        assert result.message == ""
        assert h.dismissals.dismissed == {"dependency-installer-widget-7": 7}

    def test_dismiss_timeout_filter_per_source(self):
        h = ControllerHarness(timeout_filter=lambda days, source: 30 if source == "my-plugin" else days)
        h.declare()

        h.controller.dismiss(SLUG)

        assert h.dismissals.dismissed == {"dependency-installer-widget-30": 30}

    @pytest.mark.asyncio
    async def test_dispatch_install(self):
        h = ControllerHarness()
        h.declare()

        message = await h.controller.dispatch("install", SLUG)

        assert message == "Widget has been installed."

    @pytest.mark.asyncio
    async def test_dispatch_activate(self):
        h = ControllerHarness(installed={SLUG})
        h.declare()

        assert await h.controller.dispatch("activate", SLUG) == "Widget has been activated."

    @pytest.mark.asyncio
    async def test_dispatch_dismiss_returns_empty_message(self):
        h = ControllerHarness()
        h.declare()

        assert await h.controller.dispatch("dismiss", SLUG) == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["delete", "__init__", "evaluate", "INSTALL", ""])
    async def test_dispatch_rejects_other_methods(self, method):
        h = ControllerHarness(installed={SLUG})
        h.declare(required=True)

        assert await h.controller.dispatch(method, SLUG) is None
        assert h.installer.calls == []
        assert h.activator.calls == []
        assert h.dismissals.dismissed == {}

    @pytest.mark.asyncio
    async def test_dispatch_noop_install_returns_none(self):
        h = ControllerHarness(installed={SLUG})
        h.declare()

        assert await h.controller.dispatch("install", SLUG) is None
