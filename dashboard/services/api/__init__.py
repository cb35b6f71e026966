"""
Backend API Factory

Provides a single entry point for obtaining the backend API facade.
The factory pattern keeps routes agnostic about whether they talk to the
in-memory mock backend or the real restaurant API.

Usage:
    from dashboard.services.api import get_backend_api

    api = get_backend_api().for_token(token)
    restaurants = await api.restaurants.list_all()

Environment Switching:
    - ENV_MODE=development -> MockBackend via httpx.MockTransport
    - ENV_MODE=staging     -> real backend at BACKEND_API_URL
    - ENV_MODE=production  -> real backend at BACKEND_API_URL

Version: 1.0.0
"""

import logging
from functools import lru_cache
from typing import Optional

import httpx

from dashboard.core.config import get_settings
from dashboard.services.api.backend import BackendApi
from dashboard.services.api.client import ApiClient
from dashboard.services.api.media import get_image_url
from dashboard.services.api.mock import MockBackend

logger = logging.getLogger(__name__)


def build_backend_api(mock_backend: Optional[MockBackend] = None) -> BackendApi:
    """
    Build a BackendApi over a fresh httpx.AsyncClient.

    Args:
        mock_backend: Serve requests from this in-memory backend instead of
            the network

    Returns:
        BackendApi: Facade with no token bound
    """
    settings = get_settings()
    timeout = httpx.Timeout(settings.backend_timeout_seconds)

    if mock_backend is not None:
        http = httpx.AsyncClient(
            base_url=settings.backend_api_url,
            transport=httpx.MockTransport(mock_backend.handle),
            timeout=timeout,
        )
        return BackendApi(ApiClient(http), provider_name=mock_backend.provider_name)

    http = httpx.AsyncClient(base_url=settings.backend_api_url, timeout=timeout)
    return BackendApi(ApiClient(http), provider_name="http")


@lru_cache()
def get_mock_backend() -> MockBackend:
    """Shared in-memory backend for development mode."""
    settings = get_settings()
    return MockBackend(
        min_latency=settings.mock_min_latency,
        max_latency=settings.mock_max_latency,
    )


@lru_cache()
def get_backend_api() -> BackendApi:
    """
    Get the configured backend API instance.

    The instance is cached so that every request shares one connection pool.

    Returns:
        BackendApi: Facade bound to no token
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Backend API: Using MockBackend (development mode)")
        return build_backend_api(get_mock_backend())

    logger.info(
        f"Backend API: Using {settings.backend_api_url} "
        f"({settings.env_mode.value} mode)"
    )
    return build_backend_api()


async def close_backend_api() -> None:
    """Close the shared HTTP client and clear the cached instance."""
    if get_backend_api.cache_info().currsize:
        await get_backend_api().aclose()
    reset_backend_api()


def reset_backend_api() -> None:
    """
    Clear the cached backend API (and mock backend) instances.

    Useful for testing or when configuration changes at runtime.
    """
    get_backend_api.cache_clear()
    get_mock_backend.cache_clear()
    logger.debug("Backend API cache cleared")


__all__ = [
    "get_backend_api",
    "get_mock_backend",
    "build_backend_api",
    "close_backend_api",
    "reset_backend_api",
    "get_image_url",
    "ApiClient",
    "BackendApi",
    "MockBackend",
]
