"""
Tests for the calendar grid, table status and reservation transitions.
"""

from datetime import date, datetime

import pytest

from dashboard.core.exceptions import InvalidTransitionError
from dashboard.schemas import AvailableSlot, Reservation, ReservationStatus, Table
from dashboard.services.reservations import (
    ReservationAction,
    TableState,
    allowed_actions,
    build_calendar,
    filter_reservations,
    group_slots_by_table,
    next_status,
    shift_week,
    slots_for_guests,
    table_status,
    week_days,
)

WEDNESDAY = date(2024, 6, 5)


def make_reservation(id, table_id, day, start, status="confirmed", end=None, name="Ivan Petrov", phone="+79001112233"):
    return Reservation(
        id=id,
        table_id=table_id,
        reservation_date=day,
        start_time=start,
        end_time=end,
        status=status,
        customer_name=name,
        customer_phone=phone,
    )


@pytest.fixture
def tables():
    return [Table(id=1, name="Table 1", guest_count=2), Table(id=2, name="Table 2", guest_count=4)]


class TestWeekNavigation:

    def test_week_starts_on_monday(self):
        days = week_days(WEDNESDAY)
        assert days[0] == date(2024, 6, 3)
        assert days[-1] == date(2024, 6, 9)
        assert len(days) == 7

    def test_shift_week(self):
        assert shift_week(WEDNESDAY, 1) == date(2024, 6, 12)
        assert shift_week(WEDNESDAY, -1) == date(2024, 5, 29)


class TestCalendar:
    """Weekly grid: a row per table, a cell per day."""

    def test_reservation_lands_in_its_cell(self, tables):
        reservations = [
            make_reservation(1, 2, WEDNESDAY, "19:00"),
            make_reservation(2, 2, WEDNESDAY, "12:00"),
        ]
        grid = build_calendar(tables, reservations, WEDNESDAY, today=WEDNESDAY, language="en")

        assert [row.table_id for row in grid.rows] == [1, 2]
        assert all(len(row.cells) == 7 for row in grid.rows)
        cell = grid.rows[1].cells[2]
        assert cell.day == WEDNESDAY
        assert cell.is_today
        assert [r.id for r in cell.reservations] == [2, 1]
        assert all(not c.reservations for c in grid.rows[0].cells)

    def test_tableless_and_other_weeks_excluded(self, tables):
        reservations = [
            make_reservation(1, None, WEDNESDAY, "19:00"),
            make_reservation(2, 1, date(2024, 6, 12), "19:00"),
        ]
        grid = build_calendar(tables, reservations, WEDNESDAY)
        assert all(not cell.reservations for row in grid.rows for cell in row.cells)

    def test_status_filter(self, tables):
        reservations = [
            make_reservation(1, 1, WEDNESDAY, "12:00", status="pending"),
            make_reservation(2, 1, WEDNESDAY, "13:00", status="confirmed"),
        ]
        grid = build_calendar(tables, reservations, WEDNESDAY, status="pending")
        assert [r.id for r in grid.rows[0].cells[2].reservations] == [1]
        assert grid.status == "pending"

    def test_day_headers_and_legend(self, tables):
        grid = build_calendar(tables, [], WEDNESDAY, language="en")
        assert [d.weekday for d in grid.days] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert {item.status for item in grid.legend} == set(ReservationStatus)


class TestTableStatus:
    """Free / reserved / occupied at a fixed moment."""

    NOW = datetime(2024, 6, 5, 13, 30)

    def test_occupied_during_reservation(self):
        reservations = [make_reservation(1, 1, WEDNESDAY, "13:00", end="15:00")]
        status = table_status(1, reservations, now=self.NOW, language="en")
        assert status.state == TableState.OCCUPIED
        assert status.reservation_id == 1

    def test_reserved_by_next_reservation(self):
        reservations = [
            make_reservation(1, 1, WEDNESDAY, "20:00", end="22:00"),
            make_reservation(2, 1, WEDNESDAY, "18:00", end="20:00"),
            make_reservation(3, 1, WEDNESDAY, "10:00", end="12:00"),
        ]
        status = table_status(1, reservations, now=self.NOW, language="en")
        assert status.state == TableState.RESERVED
        assert status.reservation_id == 2
        assert status.label == "Reserved 18:00"

    def test_cancelled_and_other_days_ignored(self):
        reservations = [
            make_reservation(1, 1, WEDNESDAY, "13:00", end="15:00", status="cancelled"),
            make_reservation(2, 1, date(2024, 6, 6), "13:00", end="15:00"),
            make_reservation(3, 2, WEDNESDAY, "13:00", end="15:00"),
        ]
        status = table_status(1, reservations, now=self.NOW, language="en")
        assert status.state == TableState.FREE
        assert status.label == "Free"

    def test_missing_end_time_runs_to_end_of_day(self):
        reservations = [make_reservation(1, 1, WEDNESDAY, "09:00")]
        assert table_status(1, reservations, now=self.NOW).state == TableState.OCCUPIED


class TestTransitions:

    def test_allowed_actions(self):
        assert allowed_actions(ReservationStatus.PENDING) == [ReservationAction.CONFIRM, ReservationAction.CANCEL]
        assert allowed_actions(ReservationStatus.CONFIRMED) == [ReservationAction.COMPLETE, ReservationAction.CANCEL]
        assert allowed_actions(ReservationStatus.COMPLETED) == []

    def test_confirm_pending(self):
        assert next_status(ReservationStatus.PENDING, ReservationAction.CONFIRM) == ReservationStatus.CONFIRMED

    @pytest.mark.parametrize(
        "status,action",
        [
            ("pending", "complete"),
            ("confirmed", "confirm"),
            ("cancelled", "confirm"),
            ("no_show", "complete"),
        ],
    )
    def test_rejected_transitions(self, status, action):
        with pytest.raises(InvalidTransitionError):
            next_status(status, action)


class TestFiltersAndSlots:

    def test_search_by_name_or_phone(self):
        reservations = [
            make_reservation(1, 1, WEDNESDAY, "12:00", name="Ivan Petrov", phone="+79001112233"),
            make_reservation(2, 1, WEDNESDAY, "13:00", name="Maria", phone="+79005556677"),
        ]
        assert [r.id for r in filter_reservations(reservations, search="ivan")] == [1]
        assert [r.id for r in filter_reservations(reservations, search="555")] == [2]
        assert filter_reservations(reservations, on_date=date(2024, 6, 6)) == []

    def test_slots(self):
        slots = [
            AvailableSlot(table_id=2, capacity=4, start_time="19:00", end_time="21:00"),
            AvailableSlot(table_id=1, capacity=2, start_time="18:00", end_time="20:00"),
            AvailableSlot(table_id=2, capacity=4, start_time="12:00", end_time="14:00"),
        ]
        assert [s.table_id for s in slots_for_guests(slots, 3)] == [2, 2]
        grouped = group_slots_by_table(slots)
        assert list(grouped) == [1, 2]
        assert [s.start_time for s in grouped[2]] == ["12:00", "19:00"]
