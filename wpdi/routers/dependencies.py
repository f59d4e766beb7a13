"""Dependency installer REST API endpoints."""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from wpdi.context import InstallerContext, build_context
from wpdi.installer.notices import filter_action_links, render_notices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dependencies", tags=["dependencies"])


class ActionRequest(BaseModel):
    """Request body sent by a notice button."""

    method: str = Field(..., description="install | activate | dismiss")
    slug: str = Field(..., description="Plugin slug the action applies to")
    network_admin: bool = Field(default=False, description="Request comes from network admin pages")


class ActionLinksRequest(BaseModel):
    """Row links the host is about to show for one plugin."""

    slug: str = Field(..., description="Plugin slug of the row")
    actions: Dict[str, str] = Field(default_factory=dict, description="Link key -> HTML")


def get_context(request: Request, network_admin: bool = False) -> InstallerContext:
    """Build a fresh installer context for this request."""
    state = request.app.state
    return build_context(
        state.settings,
        network_admin=network_admin,
        cache=state.cache,
        dismissals=state.dismissals,
        download_link_filter=getattr(state, "download_link_filter", None),
        dismiss_timeout_filter=getattr(state, "dismiss_timeout_filter", None),
    )


@router.get("/")
async def list_dependencies(context: InstallerContext = Depends(get_context)):
    """List all declared dependencies with their resolved link and state."""
    await context.resolver.apply_config(context.registry)
    controller = context.controller
    return {
        "dependencies": [
            {
                **d.to_dict(),
                "state": controller.state_of(d.slug).value,
                "network_active": context.inventory.state_store.is_network_active(d.slug),
            }
            for d in context.registry.all()
        ]
    }


@router.get("/notices")
async def get_notices(
    request: Request,
    network_admin: bool = Query(False, description="Evaluate as network admin"),
):
    """Run one evaluation pass and return the resulting notices."""
    context = get_context(request, network_admin=network_admin)
    report = await context.controller.evaluate()
    can_manage = context.permissions.current_user_can_manage_plugins()
    return {
        "notices": [n.to_dict() for n in report.notices],
        "html": render_notices(report.notices, can_manage, context.dismissals, context.timeout_for),
        "protected": sorted(report.protected_slugs),
    }


@router.post("/action", response_class=PlainTextResponse)
async def run_action(body: ActionRequest, request: Request):
    """Install, activate or dismiss a dependency. Unknown methods do nothing."""
    context = get_context(request, network_admin=body.network_admin)
    message = await context.controller.dispatch(body.method, body.slug)
    return message or ""


@router.post("/action-links")
async def action_links(body: ActionLinksRequest, context: InstallerContext = Depends(get_context)):
    """Filter plugin row links so required dependencies cannot be removed."""
    declaration = context.registry.get(body.slug)
    if declaration is None or not declaration.required:
        return {"actions": body.actions}
    return {"actions": filter_action_links(body.actions)}


@router.get("/{slug:path}")
async def get_dependency(slug: str, context: InstallerContext = Depends(get_context)):
    """Get one declared dependency."""
    declaration = context.registry.get(slug)
    if not declaration:
        raise HTTPException(status_code=404, detail=f"Dependency '{slug}' not found")
    declaration.download_link = await context.resolver.resolve_download_link(declaration)
    return {
        **declaration.to_dict(),
        "state": context.controller.state_of(slug).value,
    }
