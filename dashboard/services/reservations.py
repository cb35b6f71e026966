"""
Reservation Screens Logic

Pure helpers behind the reservation list, the weekly calendar grid and the
table floor view:

    - week navigation (weeks start on Monday)
    - calendar grid: one row per table, one cell per day
    - table status at a given moment (free / reserved / occupied)
    - status transitions offered by the list screen
    - free-slot helpers over the backend availability answer

Version: 1.0.0
"""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from dashboard.core.exceptions import InvalidTransitionError
from dashboard.i18n import DEFAULT_LANGUAGE, translate
from dashboard.schemas import AvailableSlot, Reservation, ReservationStatus, Table

ALL_STATUSES = "all"
END_OF_DAY = "23:59"

# Tailwind classes used by the calendar legend and cells
STATUS_COLORS: dict[ReservationStatus, str] = {
    ReservationStatus.PENDING: "bg-yellow-500",
    ReservationStatus.CONFIRMED: "bg-blue-500",
    ReservationStatus.CANCELLED: "bg-red-500",
    ReservationStatus.COMPLETED: "bg-green-500",
    ReservationStatus.NO_SHOW: "bg-gray-500",
}


class ReservationAction(str, Enum):
    CONFIRM = "confirm"
    CANCEL = "cancel"
    COMPLETE = "complete"


ACTION_TARGETS: dict[ReservationAction, ReservationStatus] = {
    ReservationAction.CONFIRM: ReservationStatus.CONFIRMED,
    ReservationAction.CANCEL: ReservationStatus.CANCELLED,
    ReservationAction.COMPLETE: ReservationStatus.COMPLETED,
}

ALLOWED_ACTIONS: dict[ReservationStatus, list[ReservationAction]] = {
    ReservationStatus.PENDING: [ReservationAction.CONFIRM, ReservationAction.CANCEL],
    ReservationStatus.CONFIRMED: [ReservationAction.COMPLETE, ReservationAction.CANCEL],
}


# =============================================================================
# WEEK NAVIGATION
# =============================================================================

def week_start(anchor: date) -> date:
    return anchor - timedelta(days=anchor.weekday())


def week_days(anchor: date) -> list[date]:
    """The seven days (Monday first) of the week containing ``anchor``."""
    start = week_start(anchor)
    return [start + timedelta(days=i) for i in range(7)]


def shift_week(anchor: date, weeks: int) -> date:
    return anchor + timedelta(weeks=weeks)


# =============================================================================
# FILTERS
# =============================================================================

def filter_by_status(reservations: list[Reservation], status: str = ALL_STATUSES) -> list[Reservation]:
    if not status or status == ALL_STATUSES:
        return list(reservations)
    return [r for r in reservations if r.status.value == status]


def filter_reservations(
    reservations: list[Reservation],
    search: str = "",
    status: str = ALL_STATUSES,
    on_date: Optional[date] = None,
) -> list[Reservation]:
    """
    Filter the reservation list screen.

    Args:
        search: Case-insensitive customer name match or phone substring
        status: Status value or "all"
        on_date: Keep only reservations on this date
    """
    needle = (search or "").strip()
    result = []
    for reservation in filter_by_status(reservations, status):
        if needle and not (
            needle.lower() in reservation.customer_name.lower()
            or needle in reservation.customer_phone
        ):
            continue
        if on_date is not None and reservation.reservation_date != on_date:
            continue
        result.append(reservation)
    return result


# =============================================================================
# CALENDAR GRID
# =============================================================================

class CalendarCell(BaseModel):
    day: date
    is_today: bool = False
    reservations: list[Reservation] = []


class CalendarRow(BaseModel):
    table_id: int
    table_name: str
    capacity: int
    cells: list[CalendarCell]


class LegendItem(BaseModel):
    status: ReservationStatus
    label: str
    color: str


class CalendarDay(BaseModel):
    day: date
    weekday: str
    is_today: bool = False


class CalendarGrid(BaseModel):
    week_start: date
    week_end: date
    status: str = ALL_STATUSES
    days: list[CalendarDay]
    rows: list[CalendarRow]
    legend: list[LegendItem]


def status_legend(language: str = DEFAULT_LANGUAGE) -> list[LegendItem]:
    return [
        LegendItem(status=status, label=translate(f"status.{status.value}", language), color=color)
        for status, color in STATUS_COLORS.items()
    ]


def build_calendar(
    tables: list[Table],
    reservations: list[Reservation],
    anchor: date,
    status: str = ALL_STATUSES,
    today: Optional[date] = None,
    language: str = DEFAULT_LANGUAGE,
) -> CalendarGrid:
    """
    Build the weekly calendar: a row per table and a cell per day.

    A cell holds the reservations dated that day for that row's table,
    ordered by start time. Reservations without a table appear nowhere.
    """
    today = today or date.today()
    days = week_days(anchor)
    weekday_names = translate("weekday.short", language)
    visible = filter_by_status(reservations, status)

    by_cell: dict[tuple[int, date], list[Reservation]] = {}
    for reservation in visible:
        if reservation.table_id is None:
            continue
        by_cell.setdefault((reservation.table_id, reservation.reservation_date), []).append(reservation)

    rows = []
    for table in tables:
        cells = [
            CalendarCell(
                day=day,
                is_today=day == today,
                reservations=sorted(by_cell.get((table.id, day), []), key=lambda r: r.start_time),
            )
            for day in days
        ]
        rows.append(CalendarRow(
            table_id=table.id,
            table_name=table.name,
            capacity=table.guest_count,
            cells=cells,
        ))

    return CalendarGrid(
        week_start=days[0],
        week_end=days[-1],
        status=status or ALL_STATUSES,
        # isoweekday() % 7 maps Sunday to 0, matching the Sun..Sat labels
        days=[
            CalendarDay(day=day, weekday=weekday_names[day.isoweekday() % 7], is_today=day == today)
            for day in days
        ],
        rows=rows,
        legend=status_legend(language),
    )


# =============================================================================
# TABLE STATUS
# =============================================================================

class TableState(str, Enum):
    FREE = "free"
    RESERVED = "reserved"
    OCCUPIED = "occupied"


class TableStatus(BaseModel):
    table_id: int
    state: TableState
    label: str
    reservation_id: Optional[int] = None
    time: Optional[str] = None


def table_status(
    table_id: int,
    reservations: list[Reservation],
    now: Optional[datetime] = None,
    language: str = DEFAULT_LANGUAGE,
) -> TableStatus:
    """
    Status of one table at ``now``.

    Only the table's non-cancelled reservations dated today count. A
    reservation in progress makes the table occupied; otherwise the
    earliest later reservation makes it reserved; otherwise it is free.
    """
    now = now or datetime.now()
    current_time = now.strftime("%H:%M")
    todays = [
        r for r in reservations
        if r.table_id == table_id
        and r.reservation_date == now.date()
        and r.status != ReservationStatus.CANCELLED
    ]

    for reservation in todays:
        if reservation.start_time <= current_time < (reservation.end_time or END_OF_DAY):
            return TableStatus(
                table_id=table_id,
                state=TableState.OCCUPIED,
                label=translate("table_status.occupied", language),
                reservation_id=reservation.id,
                time=reservation.start_time,
            )

    upcoming = sorted((r for r in todays if r.start_time > current_time), key=lambda r: r.start_time)
    if upcoming:
        nxt = upcoming[0]
        return TableStatus(
            table_id=table_id,
            state=TableState.RESERVED,
            label=f"{translate('table_status.reserved', language)} {nxt.start_time}",
            reservation_id=nxt.id,
            time=nxt.start_time,
        )

    return TableStatus(
        table_id=table_id,
        state=TableState.FREE,
        label=translate("table_status.free", language),
    )


def table_statuses(
    tables: list[Table],
    reservations: list[Reservation],
    now: Optional[datetime] = None,
    language: str = DEFAULT_LANGUAGE,
) -> list[TableStatus]:
    now = now or datetime.now()
    return [table_status(t.id, reservations, now, language) for t in tables]


# =============================================================================
# STATUS TRANSITIONS
# =============================================================================

def allowed_actions(status: ReservationStatus) -> list[ReservationAction]:
    """Actions the list screen offers for a reservation in ``status``."""
    return list(ALLOWED_ACTIONS.get(ReservationStatus(status), []))


def next_status(status: ReservationStatus, action: ReservationAction) -> ReservationStatus:
    """
    Raises:
        InvalidTransitionError: ``action`` is not offered for ``status``
    """
    status = ReservationStatus(status)
    action = ReservationAction(action)
    if action not in ALLOWED_ACTIONS.get(status, []):
        raise InvalidTransitionError(f"Cannot {action.value} a {status.value} reservation")
    return ACTION_TARGETS[action]


# =============================================================================
# FREE SLOTS
# =============================================================================

def slots_for_guests(slots: list[AvailableSlot], guest_count: int) -> list[AvailableSlot]:
    """Slots whose table seats at least ``guest_count`` guests."""
    return [s for s in slots if s.capacity >= guest_count]


def group_slots_by_table(slots: list[AvailableSlot]) -> dict[int, list[AvailableSlot]]:
    grouped: dict[int, list[AvailableSlot]] = {}
    for slot in sorted(slots, key=lambda s: (s.table_id, s.start_time)):
        grouped.setdefault(slot.table_id, []).append(slot)
    return grouped
