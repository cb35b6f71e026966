"""
Platform admin routes.
Statistics, users, organizations, dish moderation, audit logs, support
tickets, extension requests and subscriptions. Admin role required.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from dashboard.dependencies import DashboardContext, require_admin
from dashboard.schemas import (
    AdminStats,
    ExtensionRequestStatus,
    Page,
    Subscription,
    SubscriptionForm,
    SupportTicketStatus,
    ToastResponse,
    UserRole,
)
from dashboard.services.subscriptions import subscription_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


class UserStatusChange(BaseModel):
    is_active: bool


class UserRoleChange(BaseModel):
    role: UserRole


class TicketStatusChange(BaseModel):
    status: SupportTicketStatus


class ExtensionDecision(BaseModel):
    status: ExtensionRequestStatus
    admin_comment: Optional[str] = None


class SubscriptionExtension(BaseModel):
    period: int = Field(..., ge=1)


def page_payload(page: Page) -> dict[str, Any]:
    return {**page.model_dump(mode="json"), "total_pages": page.total_pages}


# =============================================================================
# STATS / LOGS
# =============================================================================

@router.get("/stats", response_model=AdminStats)
async def get_stats(ctx: DashboardContext = Depends(require_admin)) -> AdminStats:
    return await ctx.query.fetch(("admin", "stats"), ctx.api.admin.stats, response_type=AdminStats)


@router.get("/logs")
async def list_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    mine: bool = Query(False),
    ctx: DashboardContext = Depends(require_admin),
) -> dict[str, Any]:
    if mine:
        return page_payload(await ctx.api.admin.my_logs(page, page_size))
    return page_payload(await ctx.api.admin.logs(page, page_size))


# =============================================================================
# USERS
# =============================================================================

@router.get("/users")
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    ctx: DashboardContext = Depends(require_admin),
) -> dict[str, Any]:
    return page_payload(await ctx.api.admin.users(page, page_size))


@router.get("/users/{user_id}")
async def get_user(user_id: int, ctx: DashboardContext = Depends(require_admin)) -> dict[str, Any]:
    return (await ctx.api.admin.get_user(user_id)).model_dump(mode="json")


@router.patch("/users/{user_id}/status", response_model=ToastResponse)
async def set_user_status(
    user_id: int,
    change: UserStatusChange,
    ctx: DashboardContext = Depends(require_admin),
) -> ToastResponse:
    await ctx.api.admin.set_user_status(user_id, change.is_active)
    logger.info(f"Admin: user {user_id} active={change.is_active}")
    await ctx.query.invalidate(("admin",))
    return ctx.toast("admin.user_updated")


@router.patch("/users/{user_id}/role", response_model=ToastResponse)
async def set_user_role(
    user_id: int,
    change: UserRoleChange,
    ctx: DashboardContext = Depends(require_admin),
) -> ToastResponse:
    await ctx.api.admin.set_user_role(user_id, change.role)
    logger.info(f"Admin: user {user_id} role={change.role.value}")
    await ctx.query.invalidate(("admin",))
    return ctx.toast("admin.user_updated")


@router.delete("/users/{user_id}", response_model=ToastResponse)
async def delete_user(user_id: int, ctx: DashboardContext = Depends(require_admin)) -> ToastResponse:
    await ctx.api.admin.delete_user(user_id)
    logger.info(f"Admin: user {user_id} deleted")
    await ctx.query.invalidate(("admin",))
    return ctx.toast("admin.user_deleted")


# =============================================================================
# ORGANIZATIONS / DISHES
# =============================================================================

@router.get("/organizations")
async def list_organizations(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    ctx: DashboardContext = Depends(require_admin),
) -> dict[str, Any]:
    return page_payload(await ctx.api.admin.organizations(page, page_size))


@router.get("/organizations/{organization_id}")
async def get_organization(organization_id: int, ctx: DashboardContext = Depends(require_admin)) -> dict[str, Any]:
    organization = await ctx.api.admin.get_organization(organization_id)
    subscriptions = await ctx.api.subscriptions.list_by_organization(organization_id)
    return {
        **organization.model_dump(mode="json"),
        "subscriptions": [s.model_dump(mode="json") for s in subscriptions],
    }


@router.delete("/organizations/{organization_id}", response_model=ToastResponse)
async def delete_organization(organization_id: int, ctx: DashboardContext = Depends(require_admin)) -> ToastResponse:
    await ctx.api.admin.delete_organization(organization_id)
    logger.info(f"Admin: organization {organization_id} deleted")
    await ctx.query.invalidate(("admin",))
    return ctx.toast("admin.organization_deleted")


@router.get("/dishes")
async def list_dishes(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    ctx: DashboardContext = Depends(require_admin),
) -> dict[str, Any]:
    return page_payload(await ctx.api.admin.dishes(page, page_size))


@router.delete("/dishes/{dish_id}", response_model=ToastResponse)
async def delete_dish(dish_id: int, ctx: DashboardContext = Depends(require_admin)) -> ToastResponse:
    await ctx.api.admin.delete_dish(dish_id)
    await ctx.query.invalidate_many(("admin",), ("dishes",), ("dish_groups",))
    return ctx.toast("admin.dish_deleted")


# =============================================================================
# SUPPORT / EXTENSION REQUESTS
# =============================================================================

@router.get("/support")
async def list_support_tickets(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    status: Optional[SupportTicketStatus] = Query(None),
    ctx: DashboardContext = Depends(require_admin),
) -> dict[str, Any]:
    return page_payload(await ctx.api.admin.support_tickets(page, page_size, status))


@router.patch("/support/{ticket_id}/status", response_model=ToastResponse)
async def set_support_ticket_status(
    ticket_id: int,
    change: TicketStatusChange,
    ctx: DashboardContext = Depends(require_admin),
) -> ToastResponse:
    ticket = await ctx.api.admin.set_support_ticket_status(ticket_id, change.status)
    return ctx.toast("support.status_changed", ticket)


@router.get("/extension-requests")
async def list_extension_requests(
    status: Optional[ExtensionRequestStatus] = Query(None),
    ctx: DashboardContext = Depends(require_admin),
) -> list[dict[str, Any]]:
    if status:
        requests = await ctx.api.extension_requests.list_by_status(status)
    else:
        requests = await ctx.api.extension_requests.list_all()
    return [r.model_dump(mode="json") for r in requests]


@router.patch("/extension-requests/{request_id}", response_model=ToastResponse)
async def decide_extension_request(
    request_id: int,
    decision: ExtensionDecision,
    ctx: DashboardContext = Depends(require_admin),
) -> ToastResponse:
    request = await ctx.api.extension_requests.update_status(
        request_id, decision.status, decision.admin_comment
    )
    logger.info(f"Admin: extension request {request_id} -> {decision.status.value}")
    await ctx.query.invalidate(("extension_requests",))
    return ctx.toast("admin.request_updated", request)


# =============================================================================
# SUBSCRIPTIONS
# =============================================================================

def subscription_payload(subscription: Subscription) -> dict[str, Any]:
    return {
        **subscription.model_dump(mode="json"),
        "status": subscription_status(subscription).model_dump(mode="json"),
    }


@router.get("/subscriptions")
async def list_subscriptions(ctx: DashboardContext = Depends(require_admin)) -> list[dict[str, Any]]:
    return [subscription_payload(s) for s in await ctx.api.subscriptions.list_all()]


@router.post("/subscriptions", response_model=ToastResponse)
async def create_subscription(form: SubscriptionForm, ctx: DashboardContext = Depends(require_admin)) -> ToastResponse:
    subscription = await ctx.api.subscriptions.create(form)
    logger.info(f"Admin: subscription {subscription.id} created for organization #{form.organization_id}")
    return ctx.toast("admin.subscription_saved", subscription_payload(subscription))


@router.put("/subscriptions/{subscription_id}", response_model=ToastResponse)
async def update_subscription(
    subscription_id: int,
    form: SubscriptionForm,
    ctx: DashboardContext = Depends(require_admin),
) -> ToastResponse:
    subscription = await ctx.api.subscriptions.update(subscription_id, form)
    return ctx.toast("admin.subscription_saved", subscription_payload(subscription))


@router.post("/subscriptions/{subscription_id}/extend", response_model=ToastResponse)
async def extend_subscription(
    subscription_id: int,
    extension: SubscriptionExtension,
    ctx: DashboardContext = Depends(require_admin),
) -> ToastResponse:
    subscription = await ctx.api.subscriptions.extend(subscription_id, extension.period)
    return ctx.toast("admin.subscription_saved", subscription_payload(subscription))


@router.post("/subscriptions/{subscription_id}/deactivate", response_model=ToastResponse)
async def deactivate_subscription(subscription_id: int, ctx: DashboardContext = Depends(require_admin)) -> ToastResponse:
    await ctx.api.subscriptions.deactivate(subscription_id)
    return ctx.toast("admin.subscription_saved")


@router.delete("/subscriptions/{subscription_id}", response_model=ToastResponse)
async def delete_subscription(subscription_id: int, ctx: DashboardContext = Depends(require_admin)) -> ToastResponse:
    await ctx.api.subscriptions.delete(subscription_id)
    return ctx.toast("admin.subscription_saved")
