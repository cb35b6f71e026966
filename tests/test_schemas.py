"""
Tests for record parsing, form validation and translations.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from dashboard.i18n import author_label, normalize_language, quick_replies, translate
from dashboard.schemas import (
    ChatSession,
    Page,
    RegisterForm,
    Reservation,
    ReservationForm,
    RestaurantForm,
    Subscription,
    Table,
    TableForm,
)


class TestRecords:
    """Backend records accept camelCase and snake_case."""

    def test_table_guest_count_aliases(self):
        assert Table.model_validate({"id": 1, "name": "T1", "guestCount": 4}).guest_count == 4
        assert Table.model_validate({"id": 1, "name": "T1", "guest_count": 6}).guest_count == 6

    def test_reservation_date_parsed(self):
        reservation = Reservation.model_validate(
            {"id": 7, "reservation_date": "2024-06-01", "start_time": "19:00", "status": "no_show"}
        )
        assert reservation.reservation_date == date(2024, 6, 1)
        assert reservation.status.value == "no_show"

    def test_subscription_camel_case(self):
        sub = Subscription.model_validate(
            {"id": 1, "startDate": "2024-01-01", "endDate": "2024-12-31", "isActive": True, "daysLeft": 12}
        )
        assert sub.start_date == date(2024, 1, 1)
        assert sub.is_active is True
        assert sub.days_left == 12

    def test_table_session_flag(self):
        assert ChatSession.model_validate({"id": 1, "table": {"id": 2, "name": "T2"}}).is_table_session
        assert not ChatSession.model_validate({"id": 1}).is_table_session

    def test_page_total_pages(self):
        assert Page[int](items=[1], total_count=21, page=1, page_size=10).total_pages == 3
        assert Page[int](total_count=0, page_size=10).total_pages == 0


class TestForms:
    """Client-side validation before anything reaches the backend."""

    def test_register_password_mismatch(self):
        with pytest.raises(ValidationError):
            RegisterForm(
                company="Cafe", name="Ann", email="ann@example.com",
                password="password123", confirmPassword="password124",
            )

    def test_register_payload_drops_confirmation(self):
        form = RegisterForm(
            company="Cafe", name="Ann", email="ann@example.com",
            password="password123", confirmPassword="password123",
        )
        payload = form.to_payload()
        assert "confirmPassword" not in payload
        assert "terms" not in payload
        assert payload["company"] == "Cafe"

    def test_reservation_time_normalized(self):
        form = ReservationForm(
            table_id=1, customer_name="Ivan", customer_phone="+7900",
            reservation_date="2024-06-01", start_time="19:30:00", customer_email="",
        )
        assert form.start_time == "19:30"
        assert form.customer_email is None

    def test_reservation_rejects_bad_time(self):
        with pytest.raises(ValidationError):
            ReservationForm(
                table_id=1, customer_name="Ivan", customer_phone="+7900",
                reservation_date="2024-06-01", start_time="25:00",
            )

    def test_table_needs_a_guest(self):
        with pytest.raises(ValidationError):
            TableForm(name="T1", guestCount=0)

    def test_table_payload_uses_camel_case(self):
        assert TableForm(name="T1", guestCount=4, restaurantId=2).to_payload() == {
            "name": "T1", "guestCount": 4, "restaurantId": 2,
        }

    def test_restaurant_closed_days_not_sent(self):
        """Default hours close Sunday, so six days are sent."""
        form = RestaurantForm(name="Cafe", address="Main st 1", phone="+7900")
        days = [h["day_of_week"] for h in form.to_payload()["working_hours"]]
        assert days == [1, 2, 3, 4, 5, 6]


class TestTranslations:

    def test_english_lookup(self):
        assert translate("auth.login_failed", "en") == "Invalid email or password"

    def test_unknown_language_falls_back_to_russian(self):
        assert normalize_language("de") == "ru"
        assert translate("auth.login", "de") == translate("auth.login", "ru")

    def test_unknown_key_returns_key(self):
        assert translate("no.such.key", "en") == "no.such.key"

    def test_author_labels(self):
        assert author_label("bot", "en") == translate("author.bot", "en")
        assert author_label("robot", "en") == translate("author.system", "en")

    def test_quick_replies_per_language(self):
        assert quick_replies("en") != quick_replies("ru")
        assert len(quick_replies("en")) > 0
