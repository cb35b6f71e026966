"""
Table routes.
Tables of the selected restaurant with their live status, and table CRUD.
"""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends

from dashboard.dependencies import DashboardContext, require_restaurant
from dashboard.schemas import Reservation, Table, TableForm, ToastResponse
from dashboard.services.reservations import table_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tables", tags=["Tables"])


async def load_tables(ctx: DashboardContext, restaurant_id: int) -> list[Table]:
    return await ctx.query.fetch(
        ("tables", restaurant_id),
        lambda: ctx.api.tables.list_by_restaurant(restaurant_id),
        response_type=list[Table],
    )


async def load_reservations(ctx: DashboardContext, restaurant_id: int) -> list[Reservation]:
    return await ctx.query.fetch(
        ("reservations", restaurant_id),
        lambda: ctx.api.reservations.list_by_restaurant(restaurant_id),
        response_type=list[Reservation],
    )


@router.get("")
async def list_tables(ctx: DashboardContext = Depends(require_restaurant)) -> list[dict[str, Any]]:
    """Tables with their current free / reserved / occupied status."""
    restaurant_id = ctx.session.restaurant_id
    tables = await load_tables(ctx, restaurant_id)
    reservations = await load_reservations(ctx, restaurant_id)
    now = datetime.now()
    return [
        {
            **table.model_dump(mode="json"),
            "status": table_status(table.id, reservations, now, ctx.language).model_dump(mode="json"),
        }
        for table in tables
    ]


@router.post("", response_model=ToastResponse)
async def create_table(form: TableForm, ctx: DashboardContext = Depends(require_restaurant)) -> ToastResponse:
    if form.restaurant_id is None:
        form.restaurant_id = ctx.session.restaurant_id
    table = await ctx.api.tables.create(form)
    logger.info(f"Table {table.id} '{table.name}' created")
    await ctx.query.invalidate(("tables",))
    return ctx.toast("table.created", table)


@router.put("/{table_id}", response_model=ToastResponse)
async def update_table(
    table_id: int,
    form: TableForm,
    ctx: DashboardContext = Depends(require_restaurant),
) -> ToastResponse:
    if form.restaurant_id is None:
        form.restaurant_id = ctx.session.restaurant_id
    table = await ctx.api.tables.update(table_id, form)
    await ctx.query.invalidate(("tables",))
    return ctx.toast("table.updated", table)


@router.delete("/{table_id}", response_model=ToastResponse)
async def delete_table(table_id: int, ctx: DashboardContext = Depends(require_restaurant)) -> ToastResponse:
    await ctx.api.tables.delete(table_id)
    await ctx.query.invalidate(("tables",))
    return ctx.toast("table.deleted")
