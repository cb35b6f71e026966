"""
Analytics Aggregations

Numbers behind the dashboard home page and the analytics screens, computed
with pandas over the reservation and chat lists fetched from the backend.

Version: 1.0.0
"""

import logging
import math
from datetime import date, datetime, timedelta
from typing import Optional

import pandas as pd
from pydantic import BaseModel

from dashboard.i18n import DEFAULT_LANGUAGE, translate
from dashboard.schemas import ChatSession, Dish, Reservation, ReservationStatus, Table
from dashboard.services.reservations import TableState, table_statuses

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5
TOP_GUESTS_LIMIT = 5

RESERVATION_COLUMNS = ["id", "date", "time", "status", "guest_count", "name", "phone"]


def reservations_frame(reservations: list[Reservation]) -> pd.DataFrame:
    """Flatten reservations into a DataFrame (one row per reservation)."""
    rows = [
        {
            "id": r.id,
            "date": pd.Timestamp(r.reservation_date),
            "time": r.start_time,
            "status": r.status.value,
            "guest_count": r.guest_count or 0,
            "name": r.customer_name,
            "phone": r.customer_phone or "",
        }
        for r in reservations
    ]
    return pd.DataFrame(rows, columns=RESERVATION_COLUMNS)


# =============================================================================
# OVERVIEW
# =============================================================================

class DailyCount(BaseModel):
    date: date
    count: int


class Overview(BaseModel):
    reservations_today: int
    reservations_yesterday: int
    change_percent: int
    active_chats: int
    occupied_tables: int
    total_tables: int
    dishes_count: int
    total_reservations: int
    status_counts: dict[str, int]
    cancellation_rate: int
    daily: list[DailyCount]
    recent_reservations: list[Reservation]


def round_half_up(value: float) -> int:
    """Nearest integer, halves rounded towards +infinity (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def percent_change(current: int, previous: int) -> int:
    """Whole-percent change from ``previous`` to ``current``."""
    if previous == 0:
        return 100 if current > 0 else 0
    return round_half_up((current - previous) / previous * 100)


def overview(
    reservations: list[Reservation],
    sessions: list[ChatSession],
    tables: list[Table],
    dishes: list[Dish],
    now: Optional[datetime] = None,
    period_days: int = 7,
) -> Overview:
    """
    Home page and overview screen figures.

    Args:
        period_days: Length of the daily series ending today
    """
    now = now or datetime.now()
    today = pd.Timestamp(now.date())
    df = reservations_frame(reservations)

    per_day = df.groupby("date").size() if not df.empty else pd.Series(dtype="int64")
    today_count = int(per_day.get(today, 0))
    yesterday_count = int(per_day.get(today - pd.Timedelta(days=1), 0))

    status_counts = {status.value: 0 for status in ReservationStatus}
    for status, count in df["status"].value_counts().items():
        status_counts[str(status)] = int(count)
    total = len(df)
    cancellation_rate = round_half_up(status_counts["cancelled"] / total * 100) if total else 0

    daily = []
    for offset in range(period_days - 1, -1, -1):
        day = today - pd.Timedelta(days=offset)
        daily.append(DailyCount(date=day.date(), count=int(per_day.get(day, 0))))

    recent = sorted(
        reservations,
        key=lambda r: (r.reservation_date, r.start_time),
        reverse=True,
    )[:RECENT_LIMIT]

    statuses = table_statuses(tables, reservations, now)
    occupied = sum(1 for s in statuses if s.state == TableState.OCCUPIED)

    return Overview(
        reservations_today=today_count,
        reservations_yesterday=yesterday_count,
        change_percent=percent_change(today_count, yesterday_count),
        active_chats=sum(1 for s in sessions if s.active),
        occupied_tables=occupied,
        total_tables=len(tables),
        dishes_count=len(dishes),
        total_reservations=total,
        status_counts=status_counts,
        cancellation_rate=cancellation_rate,
        daily=daily,
        recent_reservations=recent,
    )


# =============================================================================
# RESERVATIONS
# =============================================================================

class HourCount(BaseModel):
    time: str
    count: int


class WeekdayCount(BaseModel):
    day: str
    count: int


class GuestVisits(BaseModel):
    name: str
    phone: str
    visits: int


class ReservationStats(BaseModel):
    total: int
    average_guests: int
    peak_hour: Optional[str] = None
    by_hour: list[HourCount]
    by_weekday: list[WeekdayCount]
    top_guests: list[GuestVisits]


def reservation_stats(
    reservations: list[Reservation],
    language: str = DEFAULT_LANGUAGE,
) -> ReservationStats:
    """
    Reservation analytics: average party size, hourly and weekday
    distributions and the most frequent guests (keyed by phone).
    """
    df = reservations_frame(reservations)
    weekday_names = translate("weekday.short", language)

    if df.empty:
        return ReservationStats(
            total=0,
            average_guests=0,
            by_hour=[],
            by_weekday=[WeekdayCount(day=name, count=0) for name in weekday_names],
            top_guests=[],
        )

    average_guests = round_half_up(df["guest_count"].mean())

    hours = df["time"].str.split(":").str[0] + ":00"
    by_hour_series = hours.value_counts().sort_index()
    by_hour = [HourCount(time=str(hour), count=int(count)) for hour, count in by_hour_series.items()]
    peak_hour = str(by_hour_series.idxmax()) if not by_hour_series.empty else None

    # pandas dayofweek is Monday=0; the labels start on Sunday
    weekday_index = (df["date"].dt.dayofweek + 1) % 7
    weekday_counts = weekday_index.value_counts()
    by_weekday = [
        WeekdayCount(day=name, count=int(weekday_counts.get(index, 0)))
        for index, name in enumerate(weekday_names)
    ]

    guests = (
        df.groupby("phone", sort=False)
        .agg(name=("name", "first"), visits=("id", "count"))
        .reset_index()
        .sort_values("visits", ascending=False, kind="stable")
        .head(TOP_GUESTS_LIMIT)
    )
    top_guests = [
        GuestVisits(name=row.name, phone=row.phone, visits=int(row.visits))
        for row in guests.itertuples(index=False)
    ]

    return ReservationStats(
        total=len(df),
        average_guests=average_guests,
        peak_hour=peak_hour,
        by_hour=by_hour,
        by_weekday=by_weekday,
        top_guests=top_guests,
    )


# =============================================================================
# CHATS
# =============================================================================

class ChatAnalytics(BaseModel):
    total_sessions: int
    table_sessions: int
    restaurant_sessions: int
    active_sessions: int
    total_messages: int


def chat_analytics(sessions: list[ChatSession]) -> ChatAnalytics:
    table_sessions = sum(1 for s in sessions if s.is_table_session)
    return ChatAnalytics(
        total_sessions=len(sessions),
        table_sessions=table_sessions,
        restaurant_sessions=len(sessions) - table_sessions,
        active_sessions=sum(1 for s in sessions if s.active),
        total_messages=sum(len(s.messages) for s in sessions),
    )


def filter_period(reservations: list[Reservation], days: int, today: Optional[date] = None) -> list[Reservation]:
    """Reservations dated within the last ``days`` days, today included."""
    today = today or date.today()
    start = today - timedelta(days=days - 1)
    return [r for r in reservations if start <= r.reservation_date <= today]
