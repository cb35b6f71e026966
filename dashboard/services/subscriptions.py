"""
Subscription progress shown in the dashboard header and settings screen.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel

from dashboard.schemas import Subscription

DEFAULT_TOTAL_DAYS = 365


class SubscriptionStatus(BaseModel):
    days_left: int
    total_days: int
    progress: float
    is_active: bool


def subscription_status(subscription: Subscription, today: Optional[date] = None) -> SubscriptionStatus:
    """
    Remaining days and elapsed share of a subscription.

    ``progress`` is the percentage of the period already used, clamped to
    0..100. Missing dates fall back to the backend's ``days_left`` and a
    365 day period.
    """
    today = today or date.today()

    if subscription.end_date is not None:
        days_left = max((subscription.end_date - today).days, 0)
    else:
        days_left = max(subscription.days_left, 0)

    if subscription.start_date is not None and subscription.end_date is not None:
        total_days = (subscription.end_date - subscription.start_date).days
    else:
        total_days = DEFAULT_TOTAL_DAYS

    if total_days > 0:
        progress = (total_days - days_left) / total_days * 100
    else:
        progress = 100.0
    progress = min(max(progress, 0.0), 100.0)

    return SubscriptionStatus(
        days_left=days_left,
        total_days=total_days,
        progress=round(progress, 1),
        is_active=subscription.is_active and days_left > 0,
    )
