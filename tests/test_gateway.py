"""Tests for the composition root."""
from __future__ import annotations

import unittest
from unittest.mock import MagicMock, patch

import httpx

from media_relay.core.config import Settings
from media_relay.domain.catalog import SongSearchResult
from media_relay.main import Gateway, create_gateway


def _handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"total": 0, "start": 1, "results": []})


class TestGateway(unittest.IsolatedAsyncioTestCase):
    """create_gateway wires both services onto one client."""

    def setUp(self) -> None:
        self.settings: Settings = Settings(_env_file=None, youtube_api_key="k", debug=True)

    @patch("media_relay.main.setup_logging")
    async def test_services_share_client_and_close_it(self, setup_mock: MagicMock) -> None:
        gateway: Gateway
        async with create_gateway(self.settings, transport=httpx.MockTransport(_handler)) as gateway:
            self.assertIs(gateway.catalog._client, gateway.client)
            self.assertIs(gateway.youtube._client, gateway.client)
            result: SongSearchResult = await gateway.catalog.search_songs("anything")
            self.assertEqual(result.results, [])
        self.assertTrue(gateway.client.is_closed)
        setup_mock.assert_called_once_with(True)

    @patch("media_relay.main.setup_logging")
    async def test_shared_client_is_not_closed_by_services(self, _: MagicMock) -> None:
        gateway: Gateway = create_gateway(self.settings, transport=httpx.MockTransport(_handler))
        await gateway.catalog.aclose()
        await gateway.youtube.aclose()
        self.assertFalse(gateway.client.is_closed)
        await gateway.aclose()
        self.assertTrue(gateway.client.is_closed)


if __name__ == "__main__":
    unittest.main()
