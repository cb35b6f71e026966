"""
Analytics routes.
Home page overview and the reservation / chat analytics screens.
"""

from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Depends, Query

from dashboard.dependencies import DashboardContext, require_restaurant
from dashboard.routes.menu import load_dishes
from dashboard.routes.tables import load_reservations, load_tables
from dashboard.schemas import ChatSession
from dashboard.services.analytics import chat_analytics, filter_period, overview, reservation_stats

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


async def load_sessions(ctx: DashboardContext, restaurant_id: int) -> list[ChatSession]:
    return await ctx.query.fetch(
        ("chat_sessions", restaurant_id),
        lambda: ctx.api.chat.restaurant_sessions(restaurant_id),
        response_type=list[ChatSession],
    )


@router.get("/overview")
async def get_overview(
    period: int = Query(7, ge=1, le=365),
    ctx: DashboardContext = Depends(require_restaurant),
) -> dict[str, Any]:
    restaurant_id = ctx.session.restaurant_id
    result = overview(
        reservations=await load_reservations(ctx, restaurant_id),
        sessions=await load_sessions(ctx, restaurant_id),
        tables=await load_tables(ctx, restaurant_id),
        dishes=await load_dishes(ctx, restaurant_id),
        now=datetime.now(),
        period_days=period,
    )
    return result.model_dump(mode="json")


@router.get("/reservations")
async def get_reservation_stats(
    period: int = Query(30, ge=1, le=365),
    ctx: DashboardContext = Depends(require_restaurant),
) -> dict[str, Any]:
    reservations = await load_reservations(ctx, ctx.session.restaurant_id)
    stats = reservation_stats(filter_period(reservations, period, date.today()), ctx.language)
    return stats.model_dump(mode="json")


@router.get("/chats")
async def get_chat_stats(ctx: DashboardContext = Depends(require_restaurant)) -> dict[str, Any]:
    sessions = await load_sessions(ctx, ctx.session.restaurant_id)
    return chat_analytics(sessions).model_dump(mode="json")
