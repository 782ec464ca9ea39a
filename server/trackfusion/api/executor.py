"""
Request executor for the Trackfusion API.

Sends one authenticated JSON request and retries it at most once:
  - HTTP 503 (cold start): wait RETRY_DELAY_SECONDS, try again
  - transport failure (connection refused, DNS, ...): same delay, try again
  - timeout: never retried
  - any other non-2xx: fails immediately

Errors are normalized to the body's ``error`` field, or to
``HTTP <status>: <reason>`` when the body has none or is not JSON. A body that
cannot be content-decoded counts as not JSON. Any other httpx request
failure (redirect loops, ...) is raised as TrackfusionError without a retry.
"""

import asyncio
import json
import logging
from typing import Any, Mapping
from urllib.parse import quote

import httpx

from ..config import ClientConfig
from .base import (
    ApiError,
    JSONValue,
    NetworkError,
    RequestDescriptor,
    RequestTimeoutError,
    TrackfusionError,
)

logger = logging.getLogger(__name__)

RETRY_DELAY_SECONDS = 2.0
MAX_RETRIES = 1
# Characters encodeURIComponent leaves unescaped besides A-Z a-z 0-9 - _ . ~
QUERY_SAFE = "!'()*"


def build_query(params: Mapping[str, Any]) -> str:
    """Build a query string, skipping only parameters whose value is None.

    Keys keep call-site order. Falsy values ("", 0, False) are sent; booleans
    are rendered as ``true``/``false``.
    """
    parts = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        parts.append(f"{quote(str(key), safe=QUERY_SAFE)}={quote(str(value), safe=QUERY_SAFE)}")
    return "?" + "&".join(parts) if parts else ""


def _error_message(response: httpx.Response, body: bytes | None) -> str:
    try:
        data = json.loads(body) if body else {}
    except ValueError:
        data = {}
    error = data.get("error") if isinstance(data, dict) else None
    if error:
        return error if isinstance(error, str) else json.dumps(error)
    return f"HTTP {response.status_code}: {response.reason_phrase}"


class RequestExecutor:
    """Authenticated HTTP calls with timeout and a single retry."""

    def __init__(
        self,
        config: ClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_delay: float = RETRY_DELAY_SECONDS,
    ):
        self.config = config
        self.retry_delay = retry_delay
        self._transport = transport

    def _headers(self, extra: Mapping[str, str] | None) -> httpx.Headers:
        headers = httpx.Headers(
            {
                "Authorization": f"Bearer {self.config.api_key}",
                "Content-Type": "application/json",
            }
        )
        if extra:
            # Caller headers win, compared case-insensitively
            for key, value in extra.items():
                headers[key] = value
        return headers

    async def _sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    async def _fetch(
        self, client: httpx.AsyncClient, request: httpx.Request
    ) -> tuple[httpx.Response, bytes | None]:
        """Send and read the body. The body is None when it cannot be decoded."""
        response = await client.send(request, stream=True)
        try:
            body = await response.aread()
        except httpx.DecodingError as e:
            logger.debug("Undecodable body (HTTP %d): %s", response.status_code, e)
            body = None
        finally:
            await response.aclose()
        return response, body

    async def _send(
        self,
        client: httpx.AsyncClient,
        descriptor: RequestDescriptor,
        url: str,
        headers: httpx.Headers,
    ) -> tuple[httpx.Response, bytes | None]:
        content = None
        if descriptor.body is not None:
            content = json.dumps(descriptor.body)
        request = client.build_request(descriptor.method, url, headers=headers, content=content)
        try:
            return await asyncio.wait_for(
                self._fetch(client, request),
                timeout=self.config.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise RequestTimeoutError(
                f"Request timed out after {self.config.timeout_ms}ms: "
                f"{descriptor.method} {descriptor.path}"
            ) from e

    async def execute(self, descriptor: RequestDescriptor) -> JSONValue:
        """Run the request and return the parsed JSON body (None if empty)."""
        url = f"{self.config.base_url}{descriptor.path}"
        headers = self._headers(descriptor.headers)

        async with httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        ) as client:
            for attempt in range(MAX_RETRIES + 1):
                last_attempt = attempt == MAX_RETRIES
                try:
                    response, body = await self._send(client, descriptor, url, headers)
                except httpx.TransportError as e:
                    if last_attempt:
                        raise NetworkError(str(e) or type(e).__name__) from e
                    logger.debug(
                        "Transport error on %s %s (%s), retrying in %.1fs",
                        descriptor.method,
                        descriptor.path,
                        e,
                        self.retry_delay,
                    )
                    await self._sleep(self.retry_delay)
                    continue
                except httpx.RequestError as e:
                    # Redirect loops and other client-side failures: not retried
                    raise TrackfusionError(str(e) or type(e).__name__) from e

                if response.status_code == 503 and not last_attempt:
                    logger.debug(
                        "503 on %s %s, retrying in %.1fs",
                        descriptor.method,
                        descriptor.path,
                        self.retry_delay,
                    )
                    await self._sleep(self.retry_delay)
                    continue

                if not response.is_success:
                    raise ApiError(_error_message(response, body), response.status_code)

                if body is None:
                    raise TrackfusionError(
                        f"Undecodable response body for {descriptor.method} {descriptor.path}"
                    )
                if not body:
                    return None
                try:
                    return json.loads(body)
                except ValueError as e:
                    raise TrackfusionError(
                        f"Invalid JSON in response to {descriptor.method} {descriptor.path}"
                    ) from e

        # The loop always returns or raises
        raise TrackfusionError("Request failed")
