"""
Tests for the dashboard HTTP surface: sessions, toasts, error payloads,
cache invalidation and the screen routes.
"""

import json

import httpx
import pytest

from dashboard.core.config import get_settings
from dashboard.dependencies import DashboardContext, get_session_store
from dashboard.i18n import translate
from dashboard.routes.chats import ChatScope, stream_messages, stream_sessions
from dashboard.services.api import ApiClient, BackendApi, get_backend_api
from dashboard.services.cache import get_cache_store
from dashboard.services.query import QueryClient

from tests.conftest import MANAGER


# =============================================================================
# AUTH / SESSION
# =============================================================================

class TestAuth:
    """Sign-in and session lifecycle."""

    def test_login_returns_session_snapshot(self, client):
        response = client.post("/auth/login", json=MANAGER)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == translate("auth.login_success", "ru")
        assert body["data"]["redirect"] == "/dashboard"
        assert body["data"]["is_authenticated"] is True
        assert body["data"]["selected_restaurant_id"] == 1
        assert body["data"]["subscription"]["id"] == 1

    def test_login_failure_is_localized_401(self, client):
        response = client.post("/auth/login", json={"email": "manager@example.com", "password": "wrongpass1"})
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error_type"] == "unauthorized"
        assert body["message"] == translate("auth.login_failed", "ru")
        assert body["redirect"] == "/login"

    def test_me_reports_signed_in_user(self, manager_client):
        body = manager_client.get("/auth/me").json()
        assert body["is_authenticated"] is True
        assert body["user"]["email"] == MANAGER["email"]
        assert [r["id"] for r in body["restaurants"]] == [1, 2]

    def test_logout_ends_session(self, manager_client):
        response = manager_client.post("/auth/logout")
        assert response.json()["data"]["redirect"] == "/login"
        assert manager_client.get("/api/tables").status_code == 401

    def test_language_switch(self, manager_client):
        response = manager_client.put("/auth/language", json={"language": "en"})
        assert response.json()["data"]["language"] == "en"
        created = manager_client.post("/api/tables", json={"name": "Patio", "guestCount": 2})
        assert created.json()["message"] == translate("table.created", "en")


class TestAccessGuards:

    def test_api_without_session_is_401_with_redirect(self, client):
        response = client.get("/api/tables")
        assert response.status_code == 401
        body = response.json()
        assert body["error_type"] == "unauthorized"
        assert body["redirect"] == "/login"

    def test_html_page_redirects_to_login(self, client):
        response = client.get("/dashboard", headers={"accept": "text/html"}, follow_redirects=False)
        assert response.status_code in (302, 307)
        assert response.headers["location"] == "/login"

    def test_admin_routes_forbidden_for_managers(self, manager_client):
        response = manager_client.get("/api/admin/stats")
        assert response.status_code == 403
        assert response.json()["error_type"] == "forbidden"

    def test_admin_routes_for_admins(self, admin_client):
        response = admin_client.get("/api/admin/stats")
        assert response.status_code == 200
        assert response.json()["total_restaurants"] == 2

    def test_restaurant_screens_need_a_selection(self, admin_client):
        """The platform organization has no restaurants to select."""
        response = admin_client.get("/api/tables")
        assert response.status_code == 400
        assert response.json()["error_type"] == "restaurant_required"

    def test_backend_token_rejection_clears_session(self, manager_client, mock_backend):
        mock_backend.fail("GET", "/tables/restaurant/1", 401)
        assert manager_client.get("/api/tables").status_code == 401
        assert manager_client.get("/auth/me").json()["is_authenticated"] is False


# =============================================================================
# PAGES / HEALTH
# =============================================================================

class TestPages:

    def test_dashboard_renders(self, manager_client):
        response = manager_client.get("/dashboard")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Bella Vista" in response.text

    def test_calendar_renders(self, manager_client):
        response = manager_client.get("/dashboard/reservations/calendar")
        assert response.status_code == 200
        assert "Table 1" in response.text

    def test_login_page(self, client):
        response = client.get("/login")
        assert response.status_code == 200
        assert "/auth/login" in response.text

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "operational"
        assert body["backend"] == "healthy"
        assert body["cache"] == "healthy"
        assert body["environment"] == "development"


# =============================================================================
# SCREEN DATA / MUTATIONS
# =============================================================================

class TestTables:

    def test_tables_with_status(self, manager_client):
        tables = manager_client.get("/api/tables").json()
        assert [t["id"] for t in tables] == [1, 2, 3, 4]
        assert {t["status"]["state"] for t in tables} <= {"free", "reserved", "occupied"}

    def test_create_invalidates_cached_list(self, manager_client):
        assert len(manager_client.get("/api/tables").json()) == 4
        response = manager_client.post("/api/tables", json={"name": "Patio", "guestCount": 6})
        assert response.status_code == 200
        assert response.json()["message"] == translate("table.created", "ru")
        names = [t["name"] for t in manager_client.get("/api/tables").json()]
        assert "Patio" in names

    def test_validation_errors_list_fields(self, manager_client):
        response = manager_client.post("/api/tables", json={"name": "", "guestCount": 0})
        assert response.status_code == 422
        body = response.json()
        assert body["error_type"] == "validation"
        assert {e["field"] for e in body["errors"]} == {"name", "guestCount"}


class TestReservations:

    def test_list_carries_actions(self, manager_client):
        reservations = {r["id"]: r for r in manager_client.get("/api/reservations").json()}
        assert set(reservations) == {1, 2, 3, 4, 5}
        assert reservations[2]["actions"] == ["confirm", "cancel"]
        assert reservations[1]["actions"] == ["complete", "cancel"]
        assert reservations[4]["actions"] == []

    def test_filter_by_status(self, manager_client):
        pending = manager_client.get("/api/reservations", params={"status": "pending"}).json()
        assert {r["id"] for r in pending} == {2, 3}

    def test_confirm_pending(self, manager_client):
        response = manager_client.post("/api/reservations/2/actions/confirm")
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "confirmed"
        listed = {r["id"]: r for r in manager_client.get("/api/reservations").json()}
        assert listed[2]["status"] == "confirmed"

    def test_cancel(self, manager_client):
        response = manager_client.post("/api/reservations/3/actions/cancel")
        assert response.json()["data"]["status"] == "cancelled"

    def test_invalid_transition_is_409(self, manager_client):
        response = manager_client.post("/api/reservations/2/actions/complete")
        assert response.status_code == 409
        assert response.json()["error_type"] == "invalid_transition"

    def test_unknown_reservation_is_404(self, manager_client):
        response = manager_client.get("/api/reservations/999")
        assert response.status_code == 404
        assert response.json()["error_type"] == "not_found"

    def test_calendar_json(self, manager_client):
        grid = manager_client.get("/api/reservations/calendar").json()
        assert [row["table_id"] for row in grid["rows"]] == [1, 2, 3, 4]
        assert len(grid["days"]) == 7


class TestMenu:

    def test_reorder_categories(self, manager_client):
        response = manager_client.post("/api/menu/categories/reorder", json={"from_index": 0, "to_index": 2})
        assert response.status_code == 200
        assert response.json()["data"] == [
            {"id": 2, "sort_order": 1},
            {"id": 3, "sort_order": 2},
            {"id": 1, "sort_order": 3},
        ]
        categories = manager_client.get("/api/menu/categories").json()
        assert [c["id"] for c in categories] == [2, 3, 1]

    def test_reorder_out_of_range(self, manager_client):
        response = manager_client.post("/api/menu/categories/reorder", json={"from_index": 0, "to_index": 5})
        assert response.status_code == 422
        assert response.json()["error_type"] == "validation"

    def test_delete_category_with_dishes_rejected(self, manager_client):
        response = manager_client.delete("/api/menu/categories/1")
        assert response.status_code == 422


class TestQuestions:

    def test_grouped_by_chat_type(self, manager_client):
        groups = manager_client.get("/api/questions", params={"language": "en"}).json()
        assert [q["id"] for q in groups["menu"]] == [1, 2]
        assert [q["id"] for q in groups["reservation"]] == [3]

    def test_reorder_within_group(self, manager_client):
        response = manager_client.post(
            "/api/questions/reorder/menu", params={"language": "en"}, json={"from_index": 1, "to_index": 0}
        )
        assert response.json()["data"] == [2, 1]


class TestChats:
    """AI/staff handoff as seen through the chat screens."""

    def test_staff_message_means_staff_responder(self, manager_client):
        body = manager_client.get("/api/chats/sessions/2/messages").json()
        assert body["ai_enabled"] is False
        assert body["responder"] == "staff"
        assert body["stats"]["staff_messages"] == 1

    def test_bot_only_session_stays_ai(self, manager_client):
        body = manager_client.get("/api/chats/sessions/1/messages").json()
        assert body["ai_enabled"] is True
        assert body["messages"][1]["author_label"] == translate("author.bot", "ru")

    def test_return_to_ai_sticks(self, manager_client):
        manager_client.get("/api/chats/sessions/2/messages")
        response = manager_client.post("/api/chats/sessions/2/return-to-ai")
        assert response.json()["data"]["ai_enabled"] is True
        assert manager_client.get("/api/chats/sessions/2/messages").json()["ai_enabled"] is True

    def test_staff_reply_switches_to_staff(self, manager_client):
        response = manager_client.post("/api/chats/sessions/1/messages", json={"content": "Hello from the hall"})
        assert response.status_code == 200
        body = manager_client.get("/api/chats/sessions/1/messages").json()
        assert body["ai_enabled"] is False
        assert body["messages"][-1]["content"] == "Hello from the hall"

    def test_reply_to_closed_session_rejected(self, manager_client):
        response = manager_client.post("/api/chats/sessions/4/messages", json={"content": "Hi"})
        assert response.status_code == 422

    def test_sessions_split(self, manager_client):
        body = manager_client.get("/api/chats/sessions").json()
        assert {s["id"] for s in body["active"]} == {1, 2, 3}
        assert [s["id"] for s in body["history"]] == [4]
        assert body["table_sessions"] == 2


class ConnectedRequest:
    """Stand-in for a browser that keeps the event stream open."""

    async def is_disconnected(self) -> bool:
        return False


def parse_event(raw: str) -> tuple[str, dict]:
    lines = dict(line.split(": ", 1) for line in raw.strip().splitlines())
    return lines["event"], json.loads(lines["data"])


async def stream_context(client) -> DashboardContext:
    """The context a stream request would get for the client's cookie."""
    store = get_session_store()
    session = await store.load(client.cookies.get(get_settings().session_cookie_name))
    return DashboardContext(
        session=session,
        api=get_backend_api().for_token(session.token),
        query=QueryClient(get_cache_store(), namespace=session.query_namespace),
        store=store,
    )


@pytest.fixture
def fast_polling(monkeypatch):
    monkeypatch.setenv("CHAT_MESSAGES_POLL_SECONDS", "0.01")
    monkeypatch.setenv("CHAT_SESSIONS_POLL_SECONDS", "0.01")
    get_settings.cache_clear()


class TestChatStreams:
    """Server-sent-event streams that replace chat polling."""

    @pytest.mark.asyncio
    async def test_message_stream_sends_changes(self, manager_client, mock_backend, fast_polling):
        ctx = await stream_context(manager_client)
        response = await stream_messages(3, ConnectedRequest(), scope=ChatScope.RESTAURANT, ctx=ctx)
        assert response.media_type == "text/event-stream"
        events = response.body_iterator

        name, first = parse_event(await events.__anext__())
        assert name == "update"
        count = first["stats"]["total_messages"]

        mock_backend.add_message(3, "user", "Is the terrace open?")
        name, second = parse_event(await events.__anext__())
        assert name == "update"
        assert second["stats"]["total_messages"] == count + 1
        assert second["messages"][-1]["content"] == "Is the terrace open?"
        await events.aclose()

    @pytest.mark.asyncio
    async def test_sign_out_ends_message_stream(self, manager_client, mock_backend, fast_polling):
        """An open stream does not bring a signed-out session back."""
        ctx = await stream_context(manager_client)
        response = await stream_messages(3, ConnectedRequest(), scope=ChatScope.RESTAURANT, ctx=ctx)
        events = response.body_iterator
        await events.__anext__()

        manager_client.post("/auth/logout")
        mock_backend.add_message(3, "user", "Hello?")
        name, data = parse_event(await events.__anext__())
        assert name == "signed_out"
        assert data == {"redirect": "/login"}
        await events.aclose()

        assert manager_client.get("/auth/me").json()["is_authenticated"] is False
        assert manager_client.get("/api/tables").status_code == 401

    @pytest.mark.asyncio
    async def test_return_to_ai_survives_open_stream(self, manager_client, mock_backend, fast_polling):
        manager_client.post("/api/chats/sessions/2/messages", json={"content": "The waiter is coming"})
        ctx = await stream_context(manager_client)
        response = await stream_messages(2, ConnectedRequest(), scope=ChatScope.RESTAURANT, ctx=ctx)
        events = response.body_iterator
        _, first = parse_event(await events.__anext__())
        assert first["ai_enabled"] is False

        manager_client.post("/api/chats/sessions/2/return-to-ai")
        for n in range(6):
            mock_backend.add_message(2, "user", f"Question {n}")
        _, data = parse_event(await events.__anext__())
        assert data["ai_enabled"] is True
        assert data["responder"] == "ai"
        await events.aclose()

        assert manager_client.get("/api/chats/sessions/2/messages").json()["ai_enabled"] is True

    @pytest.mark.asyncio
    async def test_session_stream_shows_stored_responder(self, manager_client, mock_backend, fast_polling):
        """Session lists never move the AI/staff flag; they only report it."""
        manager_client.get("/api/chats/sessions/2/messages")
        ctx = await stream_context(manager_client)
        response = await stream_sessions(ConnectedRequest(), ctx=ctx)
        events = response.body_iterator

        _, first = parse_event(await events.__anext__())
        responders = {s["id"]: s["responder"] for s in first["active"]}
        assert responders[2] == "staff"
        assert responders[1] == "ai"

        manager_client.post("/api/chats/sessions/2/return-to-ai")
        mock_backend.add_message(1, "user", "One more question")
        _, data = parse_event(await events.__anext__())
        assert {s["id"]: s["responder"] for s in data["active"]}[2] == "ai"
        await events.aclose()


class TestQrProxy:

    def test_image_passes_through(self, client):
        response = client.get("/api/qrcode/restaurant/1")
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    def test_download_is_attachment(self, client):
        response = client.get("/api/qrcode/restaurant/1/table/2/download")
        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="qr-table-2.png"'

    def test_backend_error_becomes_json(self, client):
        response = client.get("/api/qrcode/restaurant/1/table/5")
        assert response.status_code == 404
        assert response.json() == {"error": "Failed to fetch QR code"}

    def test_unreachable_backend(self, client, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        down = BackendApi(ApiClient(httpx.AsyncClient(base_url="http://backend.test", transport=httpx.MockTransport(handler))))
        monkeypatch.setattr("dashboard.routes.qrcodes.get_backend_api", lambda: down)
        response = client.get("/api/qrcode/restaurant/1")
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestAnalytics:

    def test_overview(self, manager_client):
        body = manager_client.get("/api/analytics/overview").json()
        assert body["total_tables"] == 4
        assert body["total_reservations"] == 5
        assert body["reservations_today"] == 3
