"""
Request Dependencies

FastAPI dependencies shared by every dashboard route:

    - get_context: loads (or starts) the dashboard session from its cookie
      and binds the backend API and query cache to it
    - require_auth / require_restaurant / require_admin: access guards

Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Depends, Request, Response

from dashboard.core.config import get_settings
from dashboard.core.exceptions import ForbiddenError, RestaurantRequiredError, UnauthorizedError
from dashboard.i18n import translate
from dashboard.schemas import ToastResponse
from dashboard.services.api import BackendApi, get_backend_api
from dashboard.services.cache import get_cache_store
from dashboard.services.query import QueryClient
from dashboard.state import DashboardSession, SessionStore

logger = logging.getLogger(__name__)


def get_session_store() -> SessionStore:
    return SessionStore(get_cache_store())


def set_session_cookie(response: Response, session_id: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=get_settings().session_cookie_name, path="/")


@dataclass
class DashboardContext:
    """
    Everything a route needs for the current browser session.

    Attributes:
        session: Dashboard session state
        api: Backend facade bound to the session token
        query: Query cache namespaced to the signed-in user
        store: Session persistence
    """
    session: DashboardSession
    api: BackendApi
    query: QueryClient
    store: SessionStore

    @property
    def language(self) -> str:
        return self.session.language

    def t(self, key: str) -> str:
        return translate(key, self.session.language)

    def toast(self, key: str, data: Any = None) -> ToastResponse:
        return ToastResponse(success=True, message=self.t(key), data=data)

    def rebind(self) -> None:
        """Re-bind api and query after the token or user changed."""
        self.api = get_backend_api().for_token(self.session.token)
        self.query = QueryClient(self.query.store, namespace=self.session.query_namespace)

    async def save(self) -> None:
        await self.store.save(self.session)

    async def reload(self) -> bool:
        """
        Replace ``session`` with the stored copy.

        Requests that await the backend call this before reading or saving
        the session.

        Returns:
            bool: False once the stored session is gone, signed out or
            bound to another token
        """
        stored = await self.store.load(self.session.id)
        if stored is None or not stored.is_authenticated or stored.token != self.session.token:
            return False
        self.session = stored
        return True


async def get_context(request: Request, response: Response) -> DashboardContext:
    settings = get_settings()
    store = get_session_store()

    session_id: Optional[str] = request.cookies.get(settings.session_cookie_name)
    session = await store.load(session_id)
    if session is None:
        session = store.new()
        await store.save(session)
        logger.debug(f"New dashboard session {session.id[:8]}...")
    set_session_cookie(response, session.id)

    return DashboardContext(
        session=session,
        api=get_backend_api().for_token(session.token),
        query=QueryClient(get_cache_store(), namespace=session.query_namespace),
        store=store,
    )


async def require_auth(ctx: DashboardContext = Depends(get_context)) -> DashboardContext:
    """
    Raises:
        UnauthorizedError: The session is not signed in
    """
    if not ctx.session.is_authenticated or not ctx.session.token:
        raise UnauthorizedError(translate("auth.session_expired", ctx.language), status_code=401)
    return ctx


async def require_restaurant(ctx: DashboardContext = Depends(require_auth)) -> DashboardContext:
    """
    Raises:
        RestaurantRequiredError: No restaurant is selected
    """
    if ctx.session.restaurant_id is None:
        raise RestaurantRequiredError(translate("restaurant.required", ctx.language))
    return ctx


async def require_admin(ctx: DashboardContext = Depends(require_auth)) -> DashboardContext:
    if not ctx.session.is_admin:
        raise ForbiddenError("Admin access required", status_code=403)
    return ctx
