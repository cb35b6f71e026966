"""
Restaurant Backend HTTP Client

Thin wrapper around a shared ``httpx.AsyncClient``. Every call:
    - attaches ``Authorization: Bearer <token>`` when a token is bound
    - decodes the ``{code, messages, data, meta}`` envelope
    - raises the classified ApiError subclass for non-2xx responses and for
      envelopes whose ``code`` is >= 400
    - raises NetworkError when no response was received

The shared client is bound to a token per dashboard session with
``for_token()``; binding is cheap and never opens a new connection pool.

Version: 1.0.0
"""

import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel

from dashboard.core.exceptions import NetworkError, error_for_status
from dashboard.schemas import ApiResponse, Page

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiClient:
    """
    Backend client bound to an optional bearer token.

    Attributes:
        http: Shared httpx.AsyncClient (base URL and timeout preconfigured)
        token: Bearer token of the current dashboard session
    """

    def __init__(self, http: httpx.AsyncClient, token: Optional[str] = None):
        self.http = http
        self.token = token

    def for_token(self, token: Optional[str]) -> "ApiClient":
        """Return a client sharing the same connection pool with another token."""
        return ApiClient(self.http, token)

    @property
    def base_url(self) -> str:
        return str(self.http.base_url).rstrip("/")

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
        files: Any = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        """
        Issue a raw request; only transport failures are translated.

        Raises:
            NetworkError: If no response was received
        """
        headers = self._headers() if authenticated else {}
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        logger.debug(f"Backend request: {method} {path} params={params}")
        try:
            return await self.http.request(
                method,
                path,
                params=params,
                json=json,
                files=files,
                headers=headers,
            )
        except httpx.TransportError as exc:
            logger.warning(f"Backend unreachable: {method} {path} ({exc.__class__.__name__}: {exc})")
            raise NetworkError(status_code=None) from exc

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
        files: Any = None,
    ) -> ApiResponse:
        """
        Issue a request and unwrap the response envelope.

        Args:
            method: HTTP method
            path: Backend path (joined to the base URL)
            params: Query parameters (None values are dropped)
            json: JSON body
            files: Multipart files

        Returns:
            ApiResponse: Decoded envelope

        Raises:
            ApiError: Classified by status code
        """
        response = await self.send(method, path, params=params, json=json, files=files)
        payload = decode_body(response)

        if response.status_code >= 400:
            error = error_for_status(response.status_code, payload)
            logger.warning(
                f"Backend error: {method} {path} -> {response.status_code} "
                f"({error.error_type.value}): {error}"
            )
            raise error

        envelope = to_envelope(payload, response.status_code)
        if envelope.code >= 400:
            error = error_for_status(envelope.code, payload)
            logger.warning(f"Backend envelope error: {method} {path} -> code {envelope.code}: {error}")
            raise error

        return envelope

    async def get(self, path: str, **kwargs) -> Any:
        return (await self.request("GET", path, **kwargs)).data

    async def post(self, path: str, **kwargs) -> Any:
        return (await self.request("POST", path, **kwargs)).data

    async def put(self, path: str, **kwargs) -> Any:
        return (await self.request("PUT", path, **kwargs)).data

    async def patch(self, path: str, **kwargs) -> Any:
        return (await self.request("PATCH", path, **kwargs)).data

    async def delete(self, path: str, **kwargs) -> Any:
        return (await self.request("DELETE", path, **kwargs)).data


# =============================================================================
# DECODING HELPERS
# =============================================================================

def decode_body(response: httpx.Response) -> Any:
    """Decode a JSON body, falling back to text (None when empty)."""
    if not response.content:
        return None
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text


def to_envelope(payload: Any, status_code: int) -> ApiResponse:
    """Wrap a decoded body into an ApiResponse (bare bodies become ``data``)."""
    if isinstance(payload, dict) and ("data" in payload or "code" in payload):
        return ApiResponse.model_validate(payload)
    return ApiResponse(code=status_code, data=payload)


def unwrap_list(data: Any, key: str, model: type[ModelT]) -> list[ModelT]:
    """
    Extract a collection from ``{key: [...]}`` or a bare list.

    Args:
        data: Envelope ``data``
        key: Collection key (e.g. ``"restaurants"``)
        model: Record model for each item

    Returns:
        list: Validated records
    """
    if isinstance(data, dict):
        data = data.get(key)
    if not isinstance(data, list):
        return []
    return [model.model_validate(item) for item in data]


def unwrap_one(data: Any, model: type[ModelT], key: Optional[str] = None) -> ModelT:
    """Validate a single record, optionally nested under ``key``."""
    if key and isinstance(data, dict) and isinstance(data.get(key), dict):
        data = data[key]
    return model.model_validate(data)


def unwrap_page(
    envelope: ApiResponse,
    key: str,
    model: type[ModelT],
    page: int,
    page_size: int,
) -> Page[ModelT]:
    """
    Build a Page from a paginated answer.

    Totals are read from the payload (``totalCount`` / ``total_count``) and
    fall back to ``meta``, then to the number of items.
    """
    data = envelope.data
    items = unwrap_list(data, key, model)
    meta = envelope.meta

    total = None
    if isinstance(data, dict):
        total = data.get("totalCount", data.get("total_count"))
        page = data.get("page", page)
        page_size = data.get("pageSize", data.get("page_size", page_size))
    if total is None and meta is not None:
        total = meta.total_count
        page = meta.page or page
        page_size = meta.page_size or page_size
    if total is None:
        total = len(items)

    return Page[model](items=items, total_count=total, page=page, page_size=page_size)


class Resource:
    """Base for per-resource wrappers."""

    def __init__(self, client: ApiClient):
        self.client = client
