"""
Tests for subscription progress.
"""

from datetime import date

from dashboard.schemas import Subscription
from dashboard.services.subscriptions import subscription_status

TODAY = date(2024, 6, 1)


class TestSubscriptionStatus:

    def test_progress_through_period(self):
        sub = Subscription(id=1, start_date=date(2024, 1, 1), end_date=date(2024, 12, 31), is_active=True)
        status = subscription_status(sub, today=TODAY)
        assert status.total_days == 365
        assert status.days_left == 213
        assert status.progress == 41.6
        assert status.is_active

    def test_expired_is_clamped(self):
        sub = Subscription(id=1, start_date=date(2023, 1, 1), end_date=date(2023, 12, 31), is_active=True)
        status = subscription_status(sub, today=TODAY)
        assert status.days_left == 0
        assert status.progress == 100.0
        assert not status.is_active

    def test_not_started_yet(self):
        sub = Subscription(id=1, start_date=date(2024, 7, 1), end_date=date(2024, 12, 31), is_active=True)
        assert subscription_status(sub, today=TODAY).progress == 0.0

    def test_missing_dates_use_days_left(self):
        sub = Subscription(id=1, days_left=73, is_active=True)
        status = subscription_status(sub, today=TODAY)
        assert status.days_left == 73
        assert status.total_days == 365
        assert status.progress == 80.0

    def test_inactive_flag_respected(self):
        sub = Subscription(id=1, start_date=date(2024, 1, 1), end_date=date(2024, 12, 31), is_active=False)
        assert not subscription_status(sub, today=TODAY).is_active
