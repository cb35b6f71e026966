"""
Tests for dashboard session persistence and the authentication service.
"""

import pytest

from dashboard.schemas import LoginForm, Restaurant, Subscription
from dashboard.services.api import BackendApi
from dashboard.services.auth import SUBSCRIPTION_ERROR, AuthService
from dashboard.services.cache import MemoryCacheStore
from dashboard.state import DashboardSession, SessionStore

from tests.conftest import ADMIN, MANAGER


class TestDashboardSession:

    def test_first_restaurant_selected(self):
        session = DashboardSession()
        session.set_restaurants([Restaurant(id=1, name="A"), Restaurant(id=2, name="B")])
        assert session.restaurant_id == 1

    def test_selection_kept_when_still_present(self):
        session = DashboardSession()
        session.set_selected_restaurant(Restaurant(id=2, name="B"))
        session.set_restaurants([Restaurant(id=1, name="A"), Restaurant(id=2, name="B (renamed)")])
        assert session.restaurant_id == 2
        assert session.selected_restaurant.name == "B (renamed)"

    def test_selection_dropped_when_gone(self):
        session = DashboardSession()
        session.set_selected_restaurant(Restaurant(id=9, name="Closed"))
        session.set_restaurants([])
        assert session.selected_restaurant is None

    def test_logout_keeps_language(self):
        session = DashboardSession(token="t", is_authenticated=True)
        session.set_language("en")
        session.handoff(1).staff_replied()
        session.logout()
        assert session.language == "en"
        assert not session.is_authenticated
        assert session.chat_handoffs == {}

    def test_unknown_language_normalized(self):
        session = DashboardSession()
        session.set_language("de")
        assert session.language == "ru"


class TestSessionStore:

    @pytest.mark.asyncio
    async def test_round_trip(self):
        store = SessionStore(MemoryCacheStore(), ttl_seconds=60)
        session = store.new()
        session.set_language("en")
        session.set_subscription(Subscription(id=1, is_active=True))
        session.handoff(4).staff_replied()
        await store.save(session)

        loaded = await store.load(session.id)
        assert loaded.language == "en"
        assert loaded.active_subscription.id == 1
        assert loaded.chat_handoffs[4].ai_enabled is False

    @pytest.mark.asyncio
    async def test_missing_and_deleted(self):
        store = SessionStore(MemoryCacheStore(), ttl_seconds=60)
        assert await store.load(None) is None
        assert await store.load("nope") is None

        session = store.new()
        await store.save(session)
        await store.delete(session.id)
        assert await store.load(session.id) is None


@pytest.fixture
def auth_service(api_client):
    return AuthService(BackendApi(api_client))


class TestAuthService:
    """Sign-in flow against the in-memory backend."""

    @pytest.mark.asyncio
    async def test_login_loads_restaurants(self, auth_service):
        session = await auth_service.login(DashboardSession(), LoginForm(**MANAGER))
        assert session.is_authenticated
        assert not session.is_admin
        assert session.organization.id == 1
        assert [r.id for r in session.restaurants] == [1, 2]
        assert session.restaurant_id == 1

    @pytest.mark.asyncio
    async def test_admin_without_restaurants(self, auth_service):
        session = await auth_service.login(DashboardSession(), LoginForm(**ADMIN))
        assert session.is_admin
        assert session.restaurants == []
        assert session.restaurant_id is None

    @pytest.mark.asyncio
    async def test_active_subscription(self, auth_service):
        session = await auth_service.login(DashboardSession(), LoginForm(**MANAGER))
        await auth_service.fetch_active_subscription(session)
        assert session.active_subscription.id == 1
        assert session.subscription_error is None

    @pytest.mark.asyncio
    async def test_missing_subscription_is_not_an_error(self, auth_service):
        """A 404 means the organization simply has no subscription."""
        session = await auth_service.login(DashboardSession(), LoginForm(**ADMIN))
        await auth_service.fetch_active_subscription(session)
        assert session.active_subscription is None
        assert session.subscription_error is None

    @pytest.mark.asyncio
    async def test_subscription_failure_recorded(self, auth_service, standalone_backend):
        session = await auth_service.login(DashboardSession(), LoginForm(**MANAGER))
        standalone_backend.fail("GET", "/subscriptions/organization/1/active", 500)
        await auth_service.fetch_active_subscription(session)
        assert session.active_subscription is None
        assert session.subscription_error == SUBSCRIPTION_ERROR

    @pytest.mark.asyncio
    async def test_check_auth(self, auth_service, standalone_backend):
        session = await auth_service.login(DashboardSession(), LoginForm(**MANAGER))
        assert await auth_service.check_auth(session) is True

        standalone_backend.fail("GET", "/auth/chek", 401)
        assert await auth_service.check_auth(session) is False
        assert session.token is None
        assert not session.is_authenticated

    @pytest.mark.asyncio
    async def test_check_auth_without_token(self, auth_service):
        assert await auth_service.check_auth(DashboardSession()) is False
