"""
Tests for dashboard overview and analytics aggregations.
"""

from datetime import date, datetime

import pytest

from dashboard.schemas import ChatSession, Reservation, Table
from dashboard.services.analytics import (
    chat_analytics,
    filter_period,
    overview,
    percent_change,
    reservation_stats,
    round_half_up,
)

NOW = datetime(2024, 6, 5, 13, 30)
TODAY = NOW.date()
YESTERDAY = date(2024, 6, 4)


@pytest.fixture
def reservations():
    return [
        Reservation(id=1, table_id=1, reservation_date=TODAY, start_time="13:00", end_time="15:00",
                    status="confirmed", guest_count=2, customer_name="Ivan", customer_phone="+7001"),
        Reservation(id=2, table_id=2, reservation_date=TODAY, start_time="19:00", end_time="21:00",
                    status="pending", guest_count=4, customer_name="Maria", customer_phone="+7002"),
        Reservation(id=3, table_id=1, reservation_date=YESTERDAY, start_time="19:30", end_time="21:30",
                    status="completed", guest_count=3, customer_name="Ivan", customer_phone="+7001"),
        Reservation(id=4, table_id=2, reservation_date=TODAY, start_time="12:00", end_time="14:00",
                    status="cancelled", guest_count=3, customer_name="Oleg", customer_phone="+7003"),
    ]


@pytest.fixture
def tables():
    return [Table(id=1, name="Table 1", guest_count=2), Table(id=2, name="Table 2", guest_count=4)]


class TestPercentChange:

    @pytest.mark.parametrize(
        "current,previous,expected",
        [(0, 0, 0), (5, 0, 100), (3, 6, -50), (3, 1, 200), (9, 8, 13), (1, 8, -87)],
    )
    def test_values(self, current, previous, expected):
        assert percent_change(current, previous) == expected

    @pytest.mark.parametrize("value,expected", [(2.5, 3), (12.5, 13), (-2.5, -2), (-87.5, -87), (2.4, 2), (2.6, 3)])
    def test_halves_round_up(self, value, expected):
        assert round_half_up(value) == expected


class TestOverview:
    """Home page figures."""

    def test_counts(self, reservations, tables):
        sessions = [ChatSession(id=1, active=True), ChatSession(id=2, active=False)]
        result = overview(reservations, sessions, tables, dishes=[], now=NOW)

        assert result.reservations_today == 3
        assert result.reservations_yesterday == 1
        assert result.change_percent == 200
        assert result.active_chats == 1
        assert result.total_tables == 2
        assert result.occupied_tables == 1
        assert result.dishes_count == 0
        assert result.total_reservations == 4

    def test_status_breakdown(self, reservations, tables):
        result = overview(reservations, [], tables, [], now=NOW)
        assert result.status_counts == {
            "pending": 1, "confirmed": 1, "cancelled": 1, "completed": 1, "no_show": 0,
        }
        assert result.cancellation_rate == 25

    def test_cancellation_rate_half_rounds_up(self, tables):
        """One cancelled out of eight is 12.5%, shown as 13."""
        rows = [
            Reservation(id=n, reservation_date=TODAY, start_time="18:00",
                        status="cancelled" if n == 1 else "confirmed", guest_count=2)
            for n in range(1, 9)
        ]
        assert overview(rows, [], tables, [], now=NOW).cancellation_rate == 13

    def test_daily_series_ends_today(self, reservations, tables):
        result = overview(reservations, [], tables, [], now=NOW)
        assert len(result.daily) == 7
        assert result.daily[-1].date == TODAY
        assert result.daily[-1].count == 3
        assert result.daily[-2].count == 1
        assert result.daily[0].count == 0

    def test_recent_newest_first(self, reservations, tables):
        result = overview(reservations, [], tables, [], now=NOW)
        assert [r.id for r in result.recent_reservations] == [2, 1, 4, 3]

    def test_empty_lists(self):
        result = overview([], [], [], [], now=NOW)
        assert result.reservations_today == 0
        assert result.cancellation_rate == 0
        assert result.change_percent == 0


class TestReservationStats:

    def test_distributions(self, reservations):
        stats = reservation_stats(reservations, language="en")
        assert stats.total == 4
        assert stats.average_guests == 3
        assert stats.peak_hour == "19:00"
        assert {h.time: h.count for h in stats.by_hour} == {"12:00": 1, "13:00": 1, "19:00": 2}
        by_day = {d.day: d.count for d in stats.by_weekday}
        assert by_day["Wed"] == 3
        assert by_day["Tue"] == 1
        assert by_day["Sun"] == 0

    def test_top_guests_keyed_by_phone(self, reservations):
        stats = reservation_stats(reservations)
        assert stats.top_guests[0].phone == "+7001"
        assert stats.top_guests[0].visits == 2
        assert len(stats.top_guests) == 3

    def test_average_guests_half_rounds_up(self):
        rows = [
            Reservation(id=1, reservation_date=TODAY, start_time="18:00", guest_count=2),
            Reservation(id=2, reservation_date=TODAY, start_time="19:00", guest_count=3),
        ]
        assert reservation_stats(rows).average_guests == 3

    def test_empty(self):
        stats = reservation_stats([], language="en")
        assert stats.total == 0
        assert stats.peak_hour is None
        assert len(stats.by_weekday) == 7


class TestChatsAndPeriods:

    def test_chat_analytics(self):
        sessions = [
            ChatSession(id=1, table={"id": 1, "name": "Table 1"}, active=True),
            ChatSession(id=2, active=True),
            ChatSession(id=3, active=False),
        ]
        result = chat_analytics(sessions)
        assert result.total_sessions == 3
        assert result.table_sessions == 1
        assert result.restaurant_sessions == 2
        assert result.active_sessions == 2

    def test_filter_period_includes_today(self, reservations):
        assert {r.id for r in filter_period(reservations, 1, today=TODAY)} == {1, 2, 4}
        assert len(filter_period(reservations, 2, today=TODAY)) == 4
