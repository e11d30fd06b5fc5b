"""Composition root wiring settings, logging and the upstream services."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Optional

import httpx

from media_relay.core.config import Settings, get_settings
from media_relay.core.logging_cfg import setup_logging
from media_relay.infra.http import build_client
from media_relay.services.catalog import CatalogService
from media_relay.services.youtube import YouTubeService

logger: logging.Logger = logging.getLogger(__name__)


@dataclass
class Gateway:
    """Both upstream services sharing one HTTP client.

    Use as ``async with create_gateway() as gateway:`` so the client is closed.
    """

    settings: Settings
    client: httpx.AsyncClient
    catalog: CatalogService
    youtube: YouTubeService

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "Gateway":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()


def create_gateway(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Gateway:
    """Create the services for one process.

    Notes
    -----
    - Settings default to the cached ``get_settings()`` instance.
    - Logging is configured up front from ``settings.debug``.
    - ``transport`` replaces the network layer of the shared client (tests).

    Returns
    -------
    Gateway
        The wired services; the caller owns the shared client.
    """

    resolved: Settings = settings if settings is not None else get_settings()
    setup_logging(resolved.debug)

    client: httpx.AsyncClient = build_client(resolved, transport=transport)
    gateway: Gateway = Gateway(
        settings=resolved,
        client=client,
        catalog=CatalogService(resolved, client=client),
        youtube=YouTubeService(resolved, client=client),
    )
    logger.info("%s ready", resolved.app_name)
    return gateway
