"""Notice presentation - HTML for admin notices and plugin row links."""

import html
import logging
import posixpath
from typing import TYPE_CHECKING, Callable, Dict, Iterable, Optional

if TYPE_CHECKING:
    from wpdi.installer.collaborators import DismissalTracker
    from wpdi.installer.lifecycle import Notice

logger = logging.getLogger(__name__)

DEFAULT_DISMISS_DAYS = 7

# Row links a required dependency must not offer.
PROTECTED_ACTION_LINKS = ("edit", "delete", "deactivate")

STATUS_CLASSES = {
    "info": "notice-info",
    "success": "updated",
    "error": "error",
}


def dismiss_key(slug: str, days: int) -> str:
    """Dismissal key of a dependency notice, e.g. ``dependency-installer-akismet-7``."""
    directory = posixpath.dirname(slug) or slug
    return f"dependency-installer-{directory}-{days}"


def filter_action_links(actions: Dict[str, str]) -> Dict[str, str]:
    """Strip the links that would let a user remove a required dependency."""
    kept = {k: v for k, v in actions.items() if k not in PROTECTED_ACTION_LINKS}
    return {"required-plugin": '<span class="network_active">Plugin dependency</span>', **kept}


def render_notice(notice: "Notice", dismissible: str) -> str:
    """Render one notice as an admin notice block."""
    message = html.escape(notice.message)
    if notice.action is not None:
        action = html.escape(notice.action.value)
        message += (
            f' <a href="javascript:;" class="wpdi-button" data-action="{action}" '
            f'data-slug="{html.escape(notice.slug)}">{action.capitalize()} Now &raquo;</a>'
        )

    css_class = STATUS_CLASSES.get(notice.status.value, "updated")
    return (
        f'<div data-dismissible="{html.escape(dismissible)}" '
        f'class="{css_class} notice is-dismissible dependency-installer">'
        f"<p><strong>[Dependency]</strong> {message}</p></div>"
    )


def render_notices(
    notices: Iterable["Notice"],
    can_manage_plugins: bool,
    dismissals: Optional["DismissalTracker"] = None,
    timeout_for: Optional[Callable[[str], int]] = None,
) -> str:
    """Render every notice that has not been dismissed.

    Args:
        notices: Notices of the current evaluation pass
        can_manage_plugins: Nothing is rendered for users who cannot manage plugins
        dismissals: Tracker deciding whether a dismissed notice is still hidden
        timeout_for: Maps a notice source to its dismissal timeout in days

    Returns:
        HTML fragment
    """
    if not can_manage_plugins:
        return ""

    blocks = []
    for notice in notices:
        days = timeout_for(notice.source) if timeout_for else DEFAULT_DISMISS_DAYS
        key = dismiss_key(notice.slug, days)
        if dismissals is not None and not dismissals.is_notice_active(key):
            logger.debug(f"[Notices] Skipping dismissed notice {key}")
            continue
        blocks.append(render_notice(notice, key))

    return "\n".join(blocks)
