"""Outbound HTTP with fixed timeouts.

Every call to a third party (DeepL, search-engine pings, API-key checks)
goes through an httpx client built here, so a slow remote can only ever
cost a bounded amount of request time.
"""

import asyncio
import builtins
from typing import Any

import httpx

from toursite.core.exceptions import ExternalServiceError, TimeoutError
from toursite.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(connect=5.0, read=30.0, write=10.0, pool=5.0)

# One batch of strings for one content field
TRANSLATION_TIMEOUT = httpx.Timeout(connect=5.0, read=15.0, write=10.0, pool=5.0)

# Pings and key checks; the answer only matters if it is quick
PROBE_TIMEOUT = httpx.Timeout(connect=2.0, read=5.0, write=2.0, pool=2.0)


def create_http_client(
    timeout: httpx.Timeout | None = None, **kwargs: Any
) -> httpx.AsyncClient:
    """Async client with our default timeouts and redirects followed.

    Usage:
        async with create_http_client(timeout=TRANSLATION_TIMEOUT) as client:
            response = await client.post(url, json=payload)
    """
    return httpx.AsyncClient(
        timeout=timeout or DEFAULT_TIMEOUT, follow_redirects=True, **kwargs
    )


async def fetch_with_timeout(
    url: str,
    method: str = "GET",
    timeout_seconds: float = 30.0,
    service_name: str = "external service",
    timeout: httpx.Timeout | None = None,
    **kwargs: Any,
) -> httpx.Response:
    """One request with a hard overall deadline on top of httpx's timeouts.

    HTTP error statuses are returned, not raised; callers decide what a
    4xx means for them.

    Raises:
        TimeoutError: The deadline passed
        ExternalServiceError: Connection or protocol failure
    """
    try:
        async with create_http_client(timeout=timeout) as client:
            return await asyncio.wait_for(
                client.request(method, url, **kwargs), timeout=timeout_seconds
            )
    except builtins.TimeoutError as err:
        logger.warning("http_request_timeout", service=service_name, timeout=timeout_seconds)
        raise TimeoutError(f"Request to {service_name}", timeout_seconds) from err
    except httpx.RequestError as e:
        logger.warning("http_request_failed", service=service_name, error=str(e))
        raise ExternalServiceError(service_name, str(e)) from e


async def ping(url: str, timeout_seconds: float = 10.0) -> bool:
    """GET ``url`` and report whether it answered 2xx. Never raises."""
    try:
        response = await fetch_with_timeout(
            url,
            timeout_seconds=timeout_seconds,
            service_name=httpx.URL(url).host,
            timeout=PROBE_TIMEOUT,
        )
    except (TimeoutError, ExternalServiceError):
        return False
    logger.debug("ping_answered", url=url, status=response.status_code)
    return response.is_success
