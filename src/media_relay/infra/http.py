"""HTTP helpers shared by the upstream services."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from media_relay.core.config import Settings
from media_relay.domain.errors import UpstreamServiceError

logger: logging.Logger = logging.getLogger(__name__)


def build_client(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create the async client used for every upstream request.

    Parameters
    ----------
    settings: Settings
        Provides the request timeout and the User-Agent header.
    transport: Optional[httpx.AsyncBaseTransport]
        Replacement transport, e.g. ``httpx.MockTransport`` in tests.

    Notes
    -----
    - The timeout is the only guard on upstream latency; there are no retries.
    - The caller owns the client and must close it (``await client.aclose()``).
    """

    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
        follow_redirects=True,
        transport=transport,
    )


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    params: Mapping[str, Any],
    *,
    upstream: str,
) -> Any:
    """GET ``url`` and decode the JSON body.

    Raises
    ------
    UpstreamServiceError
        On transport errors (including timeouts), non-2xx statuses, and bodies
        that are not JSON. The message names only the upstream and the status.
    """

    try:
        response: httpx.Response = await client.get(url, params=params)
    except httpx.HTTPError as ex:
        raise UpstreamServiceError(f"{upstream} request failed") from ex

    if not response.is_success:
        logger.warning(
            "Upstream returned an error status",
            extra={"upstream": upstream, "status_code": response.status_code},
        )
        raise UpstreamServiceError(f"{upstream} API error: {response.status_code}")

    try:
        return response.json()
    except ValueError as ex:
        raise UpstreamServiceError(f"{upstream} returned a non-JSON body") from ex
