"""
Authentication routes.
Sign-in, registration, password reset/change, session info and UI language.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dashboard.core.exceptions import UnauthorizedError
from dashboard.dependencies import DashboardContext, get_context, require_auth
from dashboard.i18n import SUPPORTED_LANGUAGES
from dashboard.schemas import (
    ChangePasswordForm,
    LoginForm,
    PasswordResetForm,
    PasswordResetRequestForm,
    RegisterForm,
    ToastResponse,
)
from dashboard.services.auth import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


class LanguageChoice(BaseModel):
    language: str


def session_snapshot(ctx: DashboardContext) -> dict[str, Any]:
    session = ctx.session
    return {
        "is_authenticated": session.is_authenticated,
        "is_admin": session.is_admin,
        "user": session.user.model_dump(mode="json") if session.user else None,
        "organization": session.organization.model_dump(mode="json") if session.organization else None,
        "selected_restaurant_id": session.restaurant_id,
        "restaurants": [r.model_dump(mode="json") for r in session.restaurants],
        "language": session.language,
        "languages": list(SUPPORTED_LANGUAGES),
        "subscription": (
            session.active_subscription.model_dump(mode="json") if session.active_subscription else None
        ),
        "subscription_error": session.subscription_error,
    }


async def _start_session(ctx: DashboardContext) -> None:
    ctx.rebind()
    await ctx.query.clear()
    await AuthService(ctx.api).fetch_active_subscription(ctx.session)
    await ctx.save()


@router.post("/login", response_model=ToastResponse)
async def login(form: LoginForm, ctx: DashboardContext = Depends(get_context)) -> ToastResponse:
    """Sign in with email and password."""
    try:
        await AuthService(ctx.api).login(ctx.session, form)
    except UnauthorizedError as exc:
        # bad credentials, not an expired session
        raise UnauthorizedError(ctx.t("auth.login_failed"), status_code=401) from exc
    await _start_session(ctx)
    return ctx.toast("auth.login_success", {**session_snapshot(ctx), "redirect": "/dashboard"})


@router.post("/register", response_model=ToastResponse)
async def register(form: RegisterForm, ctx: DashboardContext = Depends(get_context)) -> ToastResponse:
    """Create an account plus its organization and sign in."""
    await AuthService(ctx.api).register(ctx.session, form)
    await _start_session(ctx)
    return ctx.toast("auth.register_success", {**session_snapshot(ctx), "redirect": "/dashboard"})


@router.post("/logout", response_model=ToastResponse)
async def logout(ctx: DashboardContext = Depends(get_context)) -> ToastResponse:
    await ctx.query.clear()
    AuthService(ctx.api).logout(ctx.session)
    await ctx.save()
    return ToastResponse(success=True, message="", data={"redirect": "/login"})


@router.get("/me")
async def me(ctx: DashboardContext = Depends(get_context)) -> dict[str, Any]:
    """
    Verify the stored token and return the session snapshot.

    A rejected token signs the session out; the snapshot then reports
    ``is_authenticated: false``.
    """
    service = AuthService(ctx.api)
    if await service.check_auth(ctx.session):
        await service.fetch_active_subscription(ctx.session)
    await ctx.save()
    return session_snapshot(ctx)


@router.post("/password-reset/request", response_model=ToastResponse)
async def request_password_reset(
    form: PasswordResetRequestForm,
    ctx: DashboardContext = Depends(get_context),
) -> ToastResponse:
    await ctx.api.auth.request_password_reset(form.email)
    return ctx.toast("auth.reset_sent")


@router.post("/password-reset/verify", response_model=ToastResponse)
async def verify_password_reset(
    form: PasswordResetForm,
    ctx: DashboardContext = Depends(get_context),
) -> ToastResponse:
    await ctx.api.auth.verify_password_reset(form)
    return ToastResponse(success=True, message=ctx.t("auth.reset_success"), data={"redirect": "/login"})


@router.post("/change-password", response_model=ToastResponse)
async def change_password(
    form: ChangePasswordForm,
    ctx: DashboardContext = Depends(require_auth),
) -> ToastResponse:
    await ctx.api.auth.change_password(form)
    logger.info(f"Password changed for {ctx.session.user.email if ctx.session.user else 'unknown user'}")
    return ctx.toast("auth.password_changed")


@router.put("/language", response_model=ToastResponse)
async def set_language(choice: LanguageChoice, ctx: DashboardContext = Depends(get_context)) -> ToastResponse:
    ctx.session.set_language(choice.language)
    await ctx.save()
    return ToastResponse(success=True, data={"language": ctx.session.language})
