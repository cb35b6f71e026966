"""
Tests for the backend HTTP client: envelope decoding, bearer tokens and
error classification.
"""

import httpx
import pytest

from dashboard.core.exceptions import (
    ApiValidationError,
    ErrorType,
    NetworkError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
    UnknownApiError,
)
from dashboard.schemas import ApiResponse, Language, User
from dashboard.services.api import ApiClient, BackendApi, get_image_url
from dashboard.services.api.client import to_envelope, unwrap_list, unwrap_page


def client_for(handler) -> ApiClient:
    http = httpx.AsyncClient(base_url="http://backend.test", transport=httpx.MockTransport(handler))
    return ApiClient(http)


class TestEnvelope:
    """Decoding of the {code, messages, data, meta} envelope."""

    @pytest.mark.asyncio
    async def test_data_is_unwrapped(self, api_client, standalone_backend):
        """GET returns the envelope's data field."""
        token = standalone_backend.issue_token(2)
        data = await api_client.for_token(token).get("/languages")
        languages = unwrap_list(data, "languages", Language)
        assert [lang.code for lang in languages] == ["ru", "en"]

    def test_bare_body_becomes_data(self):
        """A body without envelope keys is wrapped as data."""
        envelope = to_envelope([1, 2, 3], 200)
        assert envelope.code == 200
        assert envelope.data == [1, 2, 3]

    def test_page_totals_from_payload(self):
        """Totals come from camelCase keys in the payload."""
        envelope = ApiResponse(data={"users": [{"id": 1, "email": "a@b.c"}], "totalCount": 41, "page": 3, "pageSize": 20})
        page = unwrap_page(envelope, "users", User, page=1, page_size=10)
        assert page.total_count == 41
        assert page.page == 3
        assert page.page_size == 20
        assert page.total_pages == 3

    def test_page_totals_fall_back_to_item_count(self):
        """Without totals the item count is used."""
        envelope = ApiResponse(data={"users": [{"id": 1, "email": "a@b.c"}, {"id": 2, "email": "d@e.f"}]})
        page = unwrap_page(envelope, "users", User, page=1, page_size=10)
        assert page.total_count == 2


class TestAuthorization:
    """Bearer token handling."""

    @pytest.mark.asyncio
    async def test_bearer_header_attached(self):
        """A bound token is sent as Authorization: Bearer."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["authorization"] = request.headers.get("authorization")
            return httpx.Response(200, json={"code": 200, "data": {}})

        await client_for(handler).for_token("abc").get("/anything")
        assert seen["authorization"] == "Bearer abc"

    @pytest.mark.asyncio
    async def test_no_header_without_token(self):
        """No token means no Authorization header."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["authorization"] = request.headers.get("authorization")
            return httpx.Response(200, json={"code": 200, "data": {}})

        await client_for(handler).get("/anything")
        assert seen["authorization"] is None

    @pytest.mark.asyncio
    async def test_missing_token_is_unauthorized(self, api_client):
        """Protected backend routes answer 401 without a token."""
        with pytest.raises(UnauthorizedError) as exc_info:
            await api_client.get("/restaurants")
        assert exc_info.value.status_code == 401
        assert exc_info.value.error_type == ErrorType.UNAUTHORIZED


class TestErrorClassification:
    """Non-2xx answers and transport failures."""

    @pytest.mark.asyncio
    async def test_transport_failure_is_network_error(self):
        """No response at all raises NetworkError without a status."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError) as exc_info:
            await client_for(handler).get("/restaurants")
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_not_found(self, api_client, standalone_backend):
        token = standalone_backend.issue_token(2)
        with pytest.raises(NotFoundError) as exc_info:
            await api_client.for_token(token).get("/restaurants/999")
        assert exc_info.value.messages == ["Restaurant not found"]

    @pytest.mark.asyncio
    async def test_plain_text_error_body_is_the_message(self, api_client, standalone_backend):
        """A text body becomes the error message."""
        standalone_backend.fail("GET", "/languages", 503, body="Maintenance", content_type="text/plain")
        with pytest.raises(ServerError) as exc_info:
            await api_client.get("/languages")
        assert str(exc_info.value) == "Maintenance"
        assert exc_info.value.payload == "Maintenance"

    @pytest.mark.asyncio
    async def test_envelope_code_overrides_http_status(self, api_client, standalone_backend):
        """An HTTP 200 whose envelope code is 422 is a validation error."""
        standalone_backend.fail("GET", "/languages", 200, body={"code": 422, "messages": ["Bad input"], "data": None})
        with pytest.raises(ApiValidationError) as exc_info:
            await api_client.get("/languages")
        assert str(exc_info.value) == "Bad input"

    @pytest.mark.asyncio
    async def test_unlisted_status_is_unknown(self, api_client, standalone_backend):
        standalone_backend.fail("GET", "/languages", 418, body={"message": "Teapot"})
        with pytest.raises(UnknownApiError):
            await api_client.get("/languages")


class TestBackendApi:
    """Resource wrappers over the mock backend."""

    @pytest.mark.asyncio
    async def test_reservations_for_restaurant(self, api_client, standalone_backend):
        api = BackendApi(api_client.for_token(standalone_backend.issue_token(2)))
        reservations = await api.reservations.list_by_restaurant(1)
        assert {r.id for r in reservations} == {1, 2, 3, 4, 5}
        assert all(r.restaurant_id == 1 for r in reservations)

    @pytest.mark.asyncio
    async def test_health_check_counts_any_answer(self, api_client):
        """A 401 still means the backend is reachable."""
        assert await BackendApi(api_client).health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_fails_on_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        assert await BackendApi(client_for(handler)).health_check() is False

    @pytest.mark.asyncio
    async def test_upload_rejects_non_images(self, api_client):
        api = BackendApi(api_client)
        with pytest.raises(ApiValidationError):
            await api.uploads.upload_image("notes.txt", b"hello", "text/plain")


class TestImageUrl:

    def test_relative_path_joined_to_base(self):
        assert get_image_url("/uploads/a.png", "http://api.test/") == "http://api.test/uploads/a.png"
        assert get_image_url("uploads/a.png", "http://api.test") == "http://api.test/uploads/a.png"

    def test_absolute_url_passes_through(self):
        assert get_image_url("https://cdn.test/a.png", "http://api.test") == "https://cdn.test/a.png"

    def test_empty_path(self):
        assert get_image_url(None) == ""
        assert get_image_url("") == ""
