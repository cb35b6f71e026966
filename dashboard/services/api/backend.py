"""
Backend API Facade

Groups every resource wrapper behind one object bound to a single bearer
token. Route handlers receive a ``BackendApi`` for the current dashboard
session and never build requests themselves.

Usage:
    api = get_backend_api().for_token(session.token)
    tables = await api.tables.list_by_restaurant(restaurant_id)

Version: 1.0.0
"""

import logging
from typing import Optional

from dashboard.core.exceptions import ApiError
from dashboard.services.api.admin import AdminApi, SupportApi
from dashboard.services.api.auth import AuthApi, UsersApi
from dashboard.services.api.chat import ChatApi
from dashboard.services.api.client import ApiClient
from dashboard.services.api.media import QrCodesApi, UploadsApi, get_image_url
from dashboard.services.api.menu import CategoriesApi, DishesApi
from dashboard.services.api.organizations import LanguagesApi, OrganizationsApi
from dashboard.services.api.questions import QuestionsApi
from dashboard.services.api.reservations import ReservationsApi
from dashboard.services.api.restaurants import RestaurantsApi, TablesApi
from dashboard.services.api.subscriptions import ExtensionRequestsApi, SubscriptionsApi

logger = logging.getLogger(__name__)


class BackendApi:
    """
    Typed access to the restaurant backend.

    Attributes:
        client: Underlying ApiClient (shared connection pool, bound token)
        provider_name: "mock" for the in-memory backend, "http" otherwise
    """

    def __init__(self, client: ApiClient, provider_name: str = "http"):
        self.client = client
        self.provider_name = provider_name

        self.auth = AuthApi(client)
        self.users = UsersApi(client)
        self.organizations = OrganizationsApi(client)
        self.languages = LanguagesApi(client)
        self.restaurants = RestaurantsApi(client)
        self.tables = TablesApi(client)
        self.categories = CategoriesApi(client)
        self.dishes = DishesApi(client)
        self.reservations = ReservationsApi(client)
        self.chat = ChatApi(client)
        self.questions = QuestionsApi(client)
        self.qrcodes = QrCodesApi(client)
        self.subscriptions = SubscriptionsApi(client)
        self.extension_requests = ExtensionRequestsApi(client)
        self.uploads = UploadsApi(client)
        self.admin = AdminApi(client)
        self.support = SupportApi(client)

    @property
    def token(self) -> Optional[str]:
        return self.client.token

    def for_token(self, token: Optional[str]) -> "BackendApi":
        """Bind to another session's token, sharing the connection pool."""
        return BackendApi(self.client.for_token(token), self.provider_name)

    def image_url(self, path: Optional[str]) -> str:
        return get_image_url(path, self.client.base_url)

    async def health_check(self) -> bool:
        """
        Check whether the backend answers at all.

        Any HTTP answer (even 401/404) counts as reachable; only transport
        failures count as down.
        """
        try:
            await self.client.send("GET", "/languages", authenticated=False)
            return True
        except ApiError as exc:
            logger.warning(f"Backend health check failed: {exc}")
            return False

    async def aclose(self) -> None:
        await self.client.http.aclose()
