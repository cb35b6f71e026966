"""
Dashboard Session State

Everything the dashboard remembers about one browser: the backend token,
the signed-in user and organization, the selected restaurant, the UI
language, the active subscription snapshot and per-chat AI/staff flags.

Sessions are stored as JSON in the cache store (memory or Redis) under a
random id carried by the session cookie.

Version: 1.0.0
"""

import logging
import secrets
from typing import Optional

from pydantic import BaseModel, Field

from dashboard.core.config import get_settings
from dashboard.i18n import normalize_language
from dashboard.schemas import AuthResult, Organization, Restaurant, Subscription, User, UserRole
from dashboard.services.cache.base import BaseCacheStore
from dashboard.services.chat import ChatHandoff

logger = logging.getLogger(__name__)


class DashboardSession(BaseModel):
    """
    Per-browser dashboard state.

    Attributes:
        id: Session id (cookie value)
        token: Backend bearer token
        is_admin: Whether the user has the platform admin role
        selected_restaurant: Restaurant the screens operate on
        restaurants: Restaurants known to the session
        chat_handoffs: AI/staff flag per chat session id
    """
    id: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    token: Optional[str] = None
    user: Optional[User] = None
    organization: Optional[Organization] = None
    is_authenticated: bool = False
    is_admin: bool = False

    selected_restaurant: Optional[Restaurant] = None
    restaurants: list[Restaurant] = Field(default_factory=list)

    language: str = Field(default_factory=lambda: get_settings().default_language)

    active_subscription: Optional[Subscription] = None
    subscription_error: Optional[str] = None

    chat_handoffs: dict[int, ChatHandoff] = Field(default_factory=dict)

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    def login(self, result: AuthResult) -> None:
        """Store the outcome of login/register."""
        self.token = result.token
        self.user = result.user
        self.organization = result.organization
        self.is_authenticated = True
        self.is_admin = result.user.role == UserRole.ADMIN

    def logout(self) -> None:
        """Forget everything tied to the signed-in user (language is kept)."""
        self.token = None
        self.user = None
        self.organization = None
        self.is_authenticated = False
        self.is_admin = False
        self.selected_restaurant = None
        self.restaurants = []
        self.active_subscription = None
        self.subscription_error = None
        self.chat_handoffs = {}

    def set_user(self, user: User) -> None:
        self.user = user
        self.is_admin = user.role == UserRole.ADMIN

    def set_organization(self, organization: Organization) -> None:
        self.organization = organization

    # -------------------------------------------------------------------------
    # Restaurants
    # -------------------------------------------------------------------------

    def set_selected_restaurant(self, restaurant: Optional[Restaurant]) -> None:
        self.selected_restaurant = restaurant

    def set_restaurants(self, restaurants: list[Restaurant]) -> None:
        """
        Replace the known restaurants.

        The first restaurant is selected when nothing is selected or the
        selected one no longer exists.
        """
        self.restaurants = list(restaurants)
        known_ids = {r.id for r in self.restaurants}
        if self.selected_restaurant is None or self.selected_restaurant.id not in known_ids:
            self.selected_restaurant = self.restaurants[0] if self.restaurants else None
        else:
            self.selected_restaurant = next(
                r for r in self.restaurants if r.id == self.selected_restaurant.id
            )

    def clear_selected_restaurant(self) -> None:
        self.selected_restaurant = None

    @property
    def restaurant_id(self) -> Optional[int]:
        return self.selected_restaurant.id if self.selected_restaurant else None

    # -------------------------------------------------------------------------
    # Language / subscription / chats
    # -------------------------------------------------------------------------

    def set_language(self, language: str) -> None:
        self.language = normalize_language(language)

    def set_subscription(self, subscription: Optional[Subscription], error: Optional[str] = None) -> None:
        self.active_subscription = subscription
        self.subscription_error = error

    def clear_subscription(self) -> None:
        self.active_subscription = None
        self.subscription_error = None

    def handoff(self, chat_session_id: int) -> ChatHandoff:
        """AI/staff flag for a chat session (created on first use)."""
        if chat_session_id not in self.chat_handoffs:
            self.chat_handoffs[chat_session_id] = ChatHandoff()
        return self.chat_handoffs[chat_session_id]

    @property
    def query_namespace(self) -> str:
        return str(self.user.id) if self.user else "anonymous"


class SessionStore:
    """
    Persists DashboardSession objects in a cache store.

    Attributes:
        store: Underlying key/value store
        ttl_seconds: Session lifetime, refreshed on every save
    """

    KEY_PREFIX = "session:"

    def __init__(self, store: BaseCacheStore, ttl_seconds: Optional[int] = None):
        self.store = store
        self.ttl_seconds = ttl_seconds or get_settings().session_ttl_seconds

    def _key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}{session_id}"

    def new(self) -> DashboardSession:
        return DashboardSession()

    async def load(self, session_id: Optional[str]) -> Optional[DashboardSession]:
        if not session_id:
            return None
        raw = await self.store.get(self._key(session_id))
        if raw is None:
            return None
        return DashboardSession.model_validate_json(raw)

    async def save(self, session: DashboardSession) -> None:
        await self.store.set(self._key(session.id), session.model_dump_json(), self.ttl_seconds)

    async def delete(self, session_id: str) -> None:
        await self.store.delete(self._key(session_id))
        logger.debug(f"Session {session_id[:8]}... deleted")
