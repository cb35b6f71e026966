"""
Authentication Service

Session-level operations that need the backend: sign-in, registration,
token verification, restaurant loading and the active subscription
snapshot. Each call mutates the given DashboardSession; saving it is the
caller's job.

Version: 1.0.0
"""

import logging

from dashboard.core.exceptions import ApiError, NotFoundError
from dashboard.schemas import LoginForm, RegisterForm, Restaurant
from dashboard.services.api import BackendApi
from dashboard.state import DashboardSession

logger = logging.getLogger(__name__)

SUBSCRIPTION_ERROR = "Failed to fetch subscription"


class AuthService:
    """
    Attributes:
        api: Backend facade (unbound; bound per call to the session token)
    """

    def __init__(self, api: BackendApi):
        self.api = api

    def _api(self, session: DashboardSession) -> BackendApi:
        return self.api.for_token(session.token)

    async def login(self, session: DashboardSession, form: LoginForm) -> DashboardSession:
        """
        Sign in and store token, user and organization.

        Raises:
            ApiError: Backend rejected the credentials
        """
        result = await self.api.for_token(None).auth.login(form)
        session.login(result)
        logger.info(f"User {result.user.email} signed in (admin={session.is_admin})")
        await self.load_restaurants(session)
        return session

    async def register(self, session: DashboardSession, form: RegisterForm) -> DashboardSession:
        result = await self.api.for_token(None).auth.register(form)
        session.login(result)
        logger.info(f"User {result.user.email} registered organization '{form.company}'")
        await self.load_restaurants(session)
        return session

    def logout(self, session: DashboardSession) -> None:
        if session.user:
            logger.info(f"User {session.user.email} signed out")
        session.logout()

    async def check_auth(self, session: DashboardSession) -> bool:
        """
        Verify the stored token with the backend.

        No token means unauthenticated. A rejected token signs the session out.
        """
        if not session.token:
            session.is_authenticated = False
            return False
        try:
            await self._api(session).auth.check_token()
            return True
        except ApiError as exc:
            logger.info(f"Stored token rejected ({exc.error_type.value}); signing out")
            session.logout()
            return False

    async def load_restaurants(self, session: DashboardSession) -> list[Restaurant]:
        """Fetch the organization's restaurants and auto-select the first one."""
        api = self._api(session)
        if session.organization:
            restaurants = await api.restaurants.list_by_organization(session.organization.id)
        else:
            restaurants = await api.restaurants.list_all()
        session.set_restaurants(restaurants)
        return restaurants

    async def fetch_active_subscription(self, session: DashboardSession) -> None:
        """Refresh the subscription snapshot; failures leave an error string."""
        if not session.organization:
            session.clear_subscription()
            return
        try:
            subscription = await self._api(session).subscriptions.get_active(session.organization.id)
            session.set_subscription(subscription)
        except NotFoundError:
            session.set_subscription(None)
        except ApiError as exc:
            logger.warning(f"Active subscription unavailable: {exc}")
            session.set_subscription(None, SUBSCRIPTION_ERROR)
