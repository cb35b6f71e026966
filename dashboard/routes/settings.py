"""
Settings routes.
Organization, profile, languages, team, subscription and support screens.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query

from dashboard.core.exceptions import NotFoundError
from dashboard.dependencies import DashboardContext, require_auth
from dashboard.schemas import (
    ExtensionRequest,
    ExtensionRequestForm,
    Language,
    LanguageForm,
    Organization,
    OrganizationForm,
    ProfileForm,
    SupportTicket,
    SupportTicketForm,
    TeamMemberForm,
    ToastResponse,
)
from dashboard.services.auth import AuthService
from dashboard.services.subscriptions import subscription_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["Settings"])


def _organization_id(ctx: DashboardContext) -> int:
    if ctx.session.organization is None:
        raise NotFoundError("No organization is linked to this account", status_code=404)
    return ctx.session.organization.id


async def load_organization(ctx: DashboardContext) -> Organization:
    org_id = _organization_id(ctx)
    return await ctx.query.fetch(
        ("organization", org_id),
        lambda: ctx.api.organizations.get(org_id),
        response_type=Organization,
    )


# =============================================================================
# ORGANIZATION / PROFILE
# =============================================================================

@router.get("/organization", response_model=Organization)
async def get_organization(ctx: DashboardContext = Depends(require_auth)) -> Organization:
    return await load_organization(ctx)


@router.patch("/organization", response_model=ToastResponse)
async def update_organization(form: OrganizationForm, ctx: DashboardContext = Depends(require_auth)) -> ToastResponse:
    org_id = _organization_id(ctx)
    organization = await ctx.api.organizations.update(org_id, form.to_payload())
    ctx.session.set_organization(organization)
    await ctx.save()
    await ctx.query.invalidate(("organization",))
    return ctx.toast("organization.updated", organization)


@router.patch("/profile", response_model=ToastResponse)
async def update_profile(form: ProfileForm, ctx: DashboardContext = Depends(require_auth)) -> ToastResponse:
    user = await ctx.api.users.update(ctx.session.user.id, form.to_payload())
    ctx.session.set_user(user)
    await ctx.save()
    return ctx.toast("profile.updated", user)


# =============================================================================
# LANGUAGES
# =============================================================================

@router.get("/languages")
async def list_languages(ctx: DashboardContext = Depends(require_auth)) -> dict[str, Any]:
    """All languages the platform knows and the ones the organization enabled."""
    org_id = _organization_id(ctx)
    available = await ctx.query.fetch(("languages", "all"), ctx.api.languages.list_all, response_type=list[Language])
    enabled = await ctx.query.fetch(
        ("languages", "organization", org_id),
        lambda: ctx.api.organizations.languages(org_id),
        response_type=list[Language],
    )
    return {
        "available": [lang.model_dump(mode="json") for lang in available],
        "organization": [lang.model_dump(mode="json") for lang in enabled],
    }


@router.post("/languages", response_model=ToastResponse)
async def create_language(form: LanguageForm, ctx: DashboardContext = Depends(require_auth)) -> ToastResponse:
    language = await ctx.api.languages.create(form)
    await ctx.query.invalidate(("languages",))
    return ctx.toast("language.created", language)


@router.post("/languages/{language_id}", response_model=ToastResponse)
async def add_language(language_id: int, ctx: DashboardContext = Depends(require_auth)) -> ToastResponse:
    await ctx.api.organizations.add_language(_organization_id(ctx), language_id)
    await ctx.query.invalidate_many(("languages",), ("organization",))
    return ctx.toast("language.added")


@router.delete("/languages/{language_id}", response_model=ToastResponse)
async def remove_language(language_id: int, ctx: DashboardContext = Depends(require_auth)) -> ToastResponse:
    await ctx.api.organizations.remove_language(_organization_id(ctx), language_id)
    await ctx.query.invalidate_many(("languages",), ("organization",))
    return ctx.toast("language.removed")


# =============================================================================
# TEAM
# =============================================================================

@router.get("/team")
async def list_team(ctx: DashboardContext = Depends(require_auth)) -> list[dict[str, Any]]:
    organization = await load_organization(ctx)
    return [
        {**member.model_dump(mode="json"), "is_owner": member.id == organization.admin_id}
        for member in organization.users
    ]


@router.post("/team", response_model=ToastResponse)
async def add_team_member(form: TeamMemberForm, ctx: DashboardContext = Depends(require_auth)) -> ToastResponse:
    """Create the staff account, then attach it to the organization."""
    org_id = _organization_id(ctx)
    payload = form.to_payload()
    payload.setdefault("company", ctx.session.organization.name)
    user = await ctx.api.users.create(payload)
    await ctx.api.organizations.add_user(org_id, user.id)
    logger.info(f"User {user.email} added to organization #{org_id}")
    await ctx.query.invalidate(("organization",))
    return ctx.toast("team.added", user)


@router.delete("/team/{user_id}", response_model=ToastResponse)
async def remove_team_member(user_id: int, ctx: DashboardContext = Depends(require_auth)) -> ToastResponse:
    await ctx.api.organizations.remove_user(_organization_id(ctx), user_id)
    await ctx.query.invalidate(("organization",))
    return ctx.toast("team.removed")


# =============================================================================
# SUBSCRIPTION
# =============================================================================

@router.get("/subscription")
async def get_subscription(ctx: DashboardContext = Depends(require_auth)) -> dict[str, Any]:
    """Active subscription with progress, plus this user's extension requests."""
    await AuthService(ctx.api).fetch_active_subscription(ctx.session)
    await ctx.save()
    subscription = ctx.session.active_subscription
    requests = await ctx.query.fetch(
        ("extension_requests", "mine"), ctx.api.extension_requests.list_mine, response_type=list[ExtensionRequest]
    )
    return {
        "subscription": subscription.model_dump(mode="json") if subscription else None,
        "status": subscription_status(subscription).model_dump(mode="json") if subscription else None,
        "error": ctx.session.subscription_error,
        "extension_requests": [r.model_dump(mode="json") for r in requests],
    }


@router.post("/subscription/extension-requests", response_model=ToastResponse)
async def request_extension(form: ExtensionRequestForm, ctx: DashboardContext = Depends(require_auth)) -> ToastResponse:
    request = await ctx.api.extension_requests.create(form)
    logger.info(f"Extension request {request.id} created")
    await ctx.query.invalidate(("extension_requests",))
    return ctx.toast("subscription.request_sent", request)


# =============================================================================
# SUPPORT
# =============================================================================

@router.get("/support")
async def list_support_tickets(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    ctx: DashboardContext = Depends(require_auth),
) -> dict[str, Any]:
    result = await ctx.api.support.list_mine(page, page_size)
    return {**result.model_dump(mode="json"), "total_pages": result.total_pages}


@router.get("/support/{ticket_id}", response_model=SupportTicket)
async def get_support_ticket(ticket_id: int, ctx: DashboardContext = Depends(require_auth)) -> SupportTicket:
    return await ctx.api.support.get(ticket_id)


@router.post("/support", response_model=ToastResponse)
async def create_support_ticket(form: SupportTicketForm, ctx: DashboardContext = Depends(require_auth)) -> ToastResponse:
    ticket = await ctx.api.support.create(form)
    logger.info(f"Support ticket {ticket.id} created")
    return ctx.toast("support.created", ticket)
