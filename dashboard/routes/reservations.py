"""
Reservation routes.
Reservation list with filters and status actions, weekly calendar, free
slots, CRUD and the spreadsheet export.
"""

import logging
from datetime import date
from typing import Any, Optional

from celery.result import EagerResult
from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool

from dashboard.core.exceptions import ServerError
from dashboard.dependencies import DashboardContext, require_restaurant
from dashboard.routes.tables import load_reservations, load_tables
from dashboard.schemas import (
    Availability,
    Reservation,
    ReservationForm,
    ReservationStatus,
    ReservationUpdateForm,
    ToastResponse,
)
from dashboard.services.reservations import (
    ALL_STATUSES,
    ReservationAction,
    allowed_actions,
    build_calendar,
    filter_reservations,
    group_slots_by_table,
    next_status,
    slots_for_guests,
)
from dashboard.tasks import clear_reservation_export, export_reservations_to_excel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reservations", tags=["Reservations"])


def with_actions(reservation: Reservation) -> dict[str, Any]:
    return {
        **reservation.model_dump(mode="json"),
        "actions": [a.value for a in allowed_actions(reservation.status)],
    }


async def _invalidate(ctx: DashboardContext) -> None:
    await ctx.query.invalidate_many(("reservations",), ("availability",))


@router.get("")
async def list_reservations(
    search: str = Query(""),
    status: str = Query(ALL_STATUSES),
    on_date: Optional[date] = Query(None, alias="date"),
    ctx: DashboardContext = Depends(require_restaurant),
) -> list[dict[str, Any]]:
    """Filtered reservations, newest first, each with the actions it allows."""
    reservations = await load_reservations(ctx, ctx.session.restaurant_id)
    filtered = filter_reservations(reservations, search=search, status=status, on_date=on_date)
    filtered.sort(key=lambda r: (r.reservation_date, r.start_time), reverse=True)
    return [with_actions(r) for r in filtered]


@router.get("/calendar")
async def calendar(
    anchor: Optional[date] = Query(None),
    status: str = Query(ALL_STATUSES),
    ctx: DashboardContext = Depends(require_restaurant),
) -> dict[str, Any]:
    restaurant_id = ctx.session.restaurant_id
    tables = await load_tables(ctx, restaurant_id)
    reservations = await load_reservations(ctx, restaurant_id)
    grid = build_calendar(
        tables, reservations, anchor or date.today(), status=status, language=ctx.language
    )
    return grid.model_dump(mode="json")


@router.get("/available")
async def available_slots(
    on_date: date = Query(..., alias="date"),
    guest_count: Optional[int] = Query(None, ge=1),
    ctx: DashboardContext = Depends(require_restaurant),
) -> dict[str, Any]:
    """Free slots for a day, optionally only tables seating ``guest_count``."""
    restaurant_id = ctx.session.restaurant_id
    availability = await ctx.query.fetch(
        ("availability", restaurant_id, on_date.isoformat(), guest_count or 0),
        lambda: ctx.api.reservations.available_slots(restaurant_id, on_date, guest_count),
        response_type=Availability,
    )
    slots = availability.slots
    if guest_count:
        slots = slots_for_guests(slots, guest_count)
    return {
        **availability.model_dump(mode="json", exclude={"slots"}),
        "slots": [s.model_dump(mode="json") for s in slots],
        "by_table": {
            str(table_id): [s.model_dump(mode="json") for s in table_slots]
            for table_id, table_slots in group_slots_by_table(slots).items()
        },
    }


@router.get("/{reservation_id}")
async def get_reservation(reservation_id: int, ctx: DashboardContext = Depends(require_restaurant)) -> dict[str, Any]:
    return with_actions(await ctx.api.reservations.get(reservation_id))


@router.post("", response_model=ToastResponse)
async def create_reservation(
    form: ReservationForm,
    ctx: DashboardContext = Depends(require_restaurant),
) -> ToastResponse:
    if form.restaurant_id is None:
        form.restaurant_id = ctx.session.restaurant_id
    reservation = await ctx.api.reservations.create(form)
    logger.info(f"Reservation {reservation.id} created for {reservation.reservation_date} {reservation.start_time}")
    await _invalidate(ctx)
    return ctx.toast("reservation.created", with_actions(reservation))


@router.patch("/{reservation_id}", response_model=ToastResponse)
async def update_reservation(
    reservation_id: int,
    form: ReservationUpdateForm,
    ctx: DashboardContext = Depends(require_restaurant),
) -> ToastResponse:
    reservation = await ctx.api.reservations.update(reservation_id, form.to_payload())
    await _invalidate(ctx)
    return ctx.toast("reservation.updated", with_actions(reservation))


@router.post("/{reservation_id}/actions/{action}", response_model=ToastResponse)
async def apply_action(
    reservation_id: int,
    action: ReservationAction,
    ctx: DashboardContext = Depends(require_restaurant),
) -> ToastResponse:
    """
    Confirm, complete or cancel a reservation.

    Raises:
        InvalidTransitionError: The action is not offered for the current status
    """
    current = await ctx.api.reservations.get(reservation_id)
    target = next_status(current.status, action)
    if target == ReservationStatus.CANCELLED:
        reservation = await ctx.api.reservations.cancel(reservation_id)
        key = "reservation.cancelled"
    else:
        reservation = await ctx.api.reservations.update(reservation_id, {"status": target.value})
        key = "reservation.status_changed"
    logger.info(f"Reservation {reservation_id}: {current.status.value} -> {target.value}")
    await _invalidate(ctx)
    return ctx.toast(key, with_actions(reservation))


@router.delete("/export", response_model=ToastResponse)
async def clear_export(ctx: DashboardContext = Depends(require_restaurant)) -> ToastResponse:
    """Remove the selected restaurant's export workbook."""
    async_result = await run_in_threadpool(clear_reservation_export.delay, ctx.session.restaurant_id)
    if not isinstance(async_result, EagerResult):
        return ctx.toast("reservation.export_cleared", {"task_id": async_result.id})

    result = async_result.get()
    if not result["success"]:
        raise ServerError(result["message"], status_code=500)
    return ctx.toast("reservation.export_cleared")


@router.delete("/{reservation_id}", response_model=ToastResponse)
async def delete_reservation(reservation_id: int, ctx: DashboardContext = Depends(require_restaurant)) -> ToastResponse:
    await ctx.api.reservations.delete(reservation_id)
    await _invalidate(ctx)
    return ctx.toast("reservation.deleted")


@router.post("/export", response_model=ToastResponse)
async def export_reservations(ctx: DashboardContext = Depends(require_restaurant)) -> ToastResponse:
    """
    Queue the spreadsheet export of the selected restaurant's reservations.

    In development Celery runs the task inline and the export result is
    returned directly; otherwise the task id is returned.
    """
    restaurant_id = ctx.session.restaurant_id
    reservations = await ctx.api.reservations.list_by_restaurant(restaurant_id)
    payload = [r.model_dump(mode="json") for r in reservations]

    # eager mode runs the workbook write and lock wait inside delay()
    async_result = await run_in_threadpool(export_reservations_to_excel.delay, restaurant_id, payload)
    if isinstance(async_result, EagerResult):
        result = async_result.get()
        if not result.get("success"):
            raise ServerError(result.get("message", "Export failed"), status_code=500)
        return ctx.toast("reservation.exported", result)

    logger.info(f"Export task {async_result.id} queued for restaurant #{restaurant_id}")
    return ctx.toast("reservation.exported", {"task_id": async_result.id, "count": len(payload)})
