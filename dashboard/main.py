"""
FastAPI Application Entry Point

Restaurant Management Dashboard - backend-for-frontend
Sits between the browser and the restaurant REST API: keeps the dashboard
session, caches screen data, validates forms and turns backend failures into
toast-ready JSON.

Endpoints:
    - /auth/*: Sign-in, registration, password reset, language
    - /api/*: Screen data and mutations (restaurants, tables, menu,
      reservations, chats, questions, settings, analytics, admin, uploads)
    - /api/qrcode/*: QR code proxy
    - GET /login, /dashboard, /dashboard/reservations/calendar: HTML pages
    - GET /health: System health check

Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from dashboard.core.config import get_settings, setup_logging
from dashboard.core.exceptions import (
    ApiError,
    ErrorType,
    InvalidTransitionError,
    RestaurantRequiredError,
    UnauthorizedError,
    extract_payload_message,
)
from dashboard.dependencies import DashboardContext, clear_session_cookie, get_context, get_session_store
from dashboard.i18n import DEFAULT_LANGUAGE, translate
from dashboard.routes import ROUTERS
from dashboard.routes.analytics import load_sessions
from dashboard.routes.menu import load_dishes
from dashboard.routes.tables import load_reservations, load_tables
from dashboard.schemas import HealthResponse
from dashboard.services.analytics import overview
from dashboard.services.api import close_backend_api, get_backend_api
from dashboard.services.cache import get_cache_store, reset_cache_store
from dashboard.services.reservations import ALL_STATUSES, STATUS_COLORS, build_calendar, shift_week
from dashboard.services.subscriptions import subscription_status

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.globals["t"] = translate

STATUS_BY_ERROR_TYPE: dict[ErrorType, int] = {
    ErrorType.NETWORK: 502,
    ErrorType.UNAUTHORIZED: 401,
    ErrorType.FORBIDDEN: 403,
    ErrorType.NOT_FOUND: 404,
    ErrorType.VALIDATION: 422,
    ErrorType.SERVER: 500,
    ErrorType.UNKNOWN: 500,
}


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire the backend client and cache store on startup; close them on shutdown."""
    logger.info("=" * 60)
    logger.info(f"{settings.app_name} v{settings.app_version} ({settings.env_mode.value}, debug={settings.debug})")
    logger.info(f"Backend URL: {settings.backend_api_url}")
    logger.info("=" * 60)

    backend = get_backend_api()
    cache = get_cache_store()
    logger.info(f"Backend API: {backend.provider_name}")
    logger.info(f"Cache Store: {cache.provider_name}")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"Missing production config: {missing}")

    logger.info("Application ready")

    yield

    logger.info("Closing backend client and cache store")
    await close_backend_api()
    await get_cache_store().close()
    reset_cache_store()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Restaurant management dashboard: reservations, guest chats, menu, "
        "tables and organization settings over the restaurant REST API."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in ROUTERS:
    app.include_router(router)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def wants_html(request: Request) -> bool:
    path = request.url.path
    if path.startswith("/api/") or path.startswith("/auth/"):
        return False
    return "text/html" in request.headers.get("accept", "")


async def request_language(request: Request) -> str:
    session = await get_session_store().load(request.cookies.get(settings.session_cookie_name))
    return session.language if session else DEFAULT_LANGUAGE


def error_body(error_type: str, message: str, **extra: Any) -> dict[str, Any]:
    return {"success": False, "error_type": error_type, "message": message, **extra}


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", include_in_schema=False)
async def root() -> RedirectResponse:
    return RedirectResponse("/dashboard")


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check() -> HealthResponse:
    """Verify the backend API and the cache store are reachable."""
    backend_status = "healthy" if await get_backend_api().health_check() else "unhealthy"
    cache_status = "healthy" if await get_cache_store().health_check() else "unhealthy"

    overall = "operational" if backend_status == cache_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall,
        backend=backend_status,
        cache=cache_status,
        environment=settings.env_mode.value,
        timestamp=datetime.now(),
    )


# =============================================================================
# HTML PAGES
# =============================================================================

@app.get("/login", response_class=HTMLResponse, tags=["Pages"])
async def login_page(request: Request, ctx: DashboardContext = Depends(get_context)) -> Response:
    if ctx.session.is_authenticated:
        return RedirectResponse("/dashboard")
    return templates.TemplateResponse(
        request, "login.html", {"language": ctx.language, "session": ctx.session}
    )


@app.get("/dashboard", response_class=HTMLResponse, tags=["Pages"])
async def dashboard_page(request: Request, ctx: DashboardContext = Depends(get_context)) -> Response:
    """Home page: today's numbers for the selected restaurant."""
    if not ctx.session.is_authenticated:
        return RedirectResponse("/login")

    summary = None
    restaurant_id = ctx.session.restaurant_id
    if restaurant_id is not None:
        summary = overview(
            reservations=await load_reservations(ctx, restaurant_id),
            sessions=await load_sessions(ctx, restaurant_id),
            tables=await load_tables(ctx, restaurant_id),
            dishes=await load_dishes(ctx, restaurant_id),
        )

    subscription = ctx.session.active_subscription
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "language": ctx.language,
            "session": ctx.session,
            "overview": summary,
            "subscription": subscription_status(subscription) if subscription else None,
        },
    )


@app.get("/dashboard/reservations/calendar", response_class=HTMLResponse, tags=["Pages"])
async def calendar_page(
    request: Request,
    anchor: Optional[date] = Query(None),
    status: str = Query(ALL_STATUSES),
    ctx: DashboardContext = Depends(get_context),
) -> Response:
    """Weekly reservation grid, one row per table."""
    if not ctx.session.is_authenticated:
        return RedirectResponse("/login")

    anchor = anchor or date.today()
    grid = None
    restaurant_id = ctx.session.restaurant_id
    if restaurant_id is not None:
        grid = build_calendar(
            await load_tables(ctx, restaurant_id),
            await load_reservations(ctx, restaurant_id),
            anchor,
            status=status,
            language=ctx.language,
        )

    return templates.TemplateResponse(
        request,
        "calendar.html",
        {
            "language": ctx.language,
            "session": ctx.session,
            "grid": grid,
            "status": status,
            "status_colors": STATUS_COLORS,
            "previous_week": shift_week(anchor, -1),
            "next_week": shift_week(anchor, 1),
        },
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError) -> Response:
    """A rejected or missing token ends the dashboard session."""
    session_id = request.cookies.get(settings.session_cookie_name)
    if session_id:
        await get_session_store().delete(session_id)
    logger.info(f"Unauthorized on {request.url.path}; session cleared")

    if wants_html(request):
        response: Response = RedirectResponse("/login")
    else:
        message = extract_payload_message(exc.payload) or str(exc)
        response = JSONResponse(
            status_code=401,
            content=error_body(ErrorType.UNAUTHORIZED.value, message, redirect="/login"),
        )
    clear_session_cookie(response)
    return response


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    status_code = exc.status_code or STATUS_BY_ERROR_TYPE[exc.error_type]
    message = extract_payload_message(exc.payload) or str(exc)
    if status_code >= 500:
        logger.error(f"Backend error on {request.url.path}: {status_code} {message}")
    else:
        logger.warning(f"Backend rejected {request.method} {request.url.path}: {status_code} {message}")
    return JSONResponse(status_code=status_code, content=error_body(exc.error_type.value, message))


@app.exception_handler(RestaurantRequiredError)
async def restaurant_required_handler(request: Request, exc: RestaurantRequiredError) -> JSONResponse:
    return JSONResponse(status_code=400, content=error_body("restaurant_required", str(exc)))


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError) -> JSONResponse:
    return JSONResponse(status_code=409, content=error_body("invalid_transition", str(exc)))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Form validation failures as a 422 toast listing each field."""
    language = await request_language(request)
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": str(error.get("msg", "")).removeprefix("Value error, "),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=error_body(ErrorType.VALIDATION.value, translate("error.validation", language), errors=errors),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    language = await request_language(request)
    message = str(exc) if settings.debug else translate("error.generic", language)
    return JSONResponse(status_code=500, content=error_body(ErrorType.UNKNOWN.value, message))


def run() -> None:
    """Console entry point: serve the dashboard with uvicorn."""
    import uvicorn

    uvicorn.run(
        "dashboard.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    run()
