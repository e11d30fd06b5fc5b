"""Tests for the catalog service against a mocked ``api.php``."""
from __future__ import annotations

import base64
import unittest
from typing import Any, Callable

import httpx
from Crypto.Cipher import DES
from Crypto.Util.Padding import pad

from media_relay.core.config import Settings
from media_relay.domain.catalog import Album, Song, SongSearchResult
from media_relay.domain.errors import NotFoundError, UpstreamServiceError
from media_relay.infra.http import build_client
from media_relay.services.catalog import CatalogService, build_image_links

MEDIA_URL: str = "https://aac.saavncdn.com/815/3b1c4f4a_96.mp4"


def encrypt(url: str) -> str:
    cipher = DES.new(b"38346591", DES.MODE_ECB)
    return base64.b64encode(cipher.encrypt(pad(url.encode(), DES.block_size))).decode("ascii")


def song_payload(song_id: str = "3IoDK8qI", **more_info: Any) -> dict[str, Any]:
    """A song as returned by ``song.getDetails`` (api_version 4)."""
    info: dict[str, Any] = {
        "music": "Pritam",
        "album_id": "1142502",
        "album": "Jab Harry Met Sejal",
        "label": "Sony Music Entertainment India Pvt. Ltd.",
        "origin": "album",
        "320kbps": "true",
        "encrypted_media_url": encrypt(MEDIA_URL),
        "album_url": "https://www.jiosaavn.com/album/jab-harry-met-sejal/xe6Gx7Sg12U_",
        "duration": "252",
        "has_lyrics": "false",
        "lyrics_id": None,
        "copyright_text": "&copy; 2017 Sony Music",
        "release_date": "2017-07-20",
        "artistMap": {
            "primary_artists": [
                {
                    "id": "459320",
                    "name": "Arijit Singh",
                    "role": "singer",
                    "image": "http://c.saavncdn.com/artists/Arijit_Singh_150x150.jpg",
                    "type": "artist",
                    "perma_url": "https://www.jiosaavn.com/artist/arijit-singh-songs/LlRWpHzy3Hk_",
                }
            ],
            "featured_artists": [],
            "artists": [],
        },
    }
    info.update(more_info)
    return {
        "id": song_id,
        "title": "Hawayein &quot;Reprise&quot;",
        "subtitle": "Arijit Singh - Jab Harry Met Sejal",
        "type": "song",
        "perma_url": "https://www.jiosaavn.com/song/hawayein/OgwhbhtDRwM",
        "image": "http://c.saavncdn.com/258/Jab-Harry-Met-Sejal-Hindi-2017-150x150.jpg",
        "language": "hindi",
        "year": "2017",
        "play_count": "157623437",
        "explicit_content": "0",
        "list_count": "0",
        "more_info": info,
    }


class _Upstream:
    """Serve canned ``api.php`` payloads keyed by ``__call``."""

    def __init__(self, payloads: dict[str, Any], status_code: int = 200) -> None:
        self.payloads = payloads
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="unavailable")
        return httpx.Response(200, json=self.payloads.get(request.url.params["__call"], {}))


class TestCatalogService(unittest.IsolatedAsyncioTestCase):
    """Async tests for song, search and album lookups."""

    def setUp(self) -> None:
        self.settings: Settings = Settings(_env_file=None)

    def make_service(self, handler: Callable[[httpx.Request], httpx.Response]) -> CatalogService:
        client: httpx.AsyncClient = build_client(self.settings, transport=httpx.MockTransport(handler))
        self.addAsyncCleanup(client.aclose)
        return CatalogService(self.settings, client=client)

    async def test_get_song_by_id_normalizes_fields(self) -> None:
        upstream = _Upstream({"song.getDetails": {"songs": [song_payload()]}})
        service: CatalogService = self.make_service(upstream)

        song: Song = await service.get_song_by_id("3IoDK8qI")

        self.assertEqual(song.id, "3IoDK8qI")
        self.assertEqual(song.name, 'Hawayein "Reprise"')
        self.assertEqual(song.year, 2017)
        self.assertEqual(song.duration, 252)
        self.assertEqual(song.playCount, 157623437)
        self.assertFalse(song.explicitContent)
        self.assertFalse(song.hasLyrics)
        self.assertIsNone(song.lyricsId)
        self.assertEqual(song.copyright, "© 2017 Sony Music")
        self.assertEqual(song.album.id, "1142502")
        self.assertEqual(song.album.name, "Jab Harry Met Sejal")
        self.assertEqual([a.name for a in song.artists.primary], ["Arijit Singh"])
        self.assertEqual(song.artists.primary[0].image[2].url, "https://c.saavncdn.com/artists/Arijit_Singh_500x500.jpg")

        self.assertEqual(
            [link.quality for link in song.downloadUrl],
            ["12kbps", "48kbps", "96kbps", "160kbps", "320kbps"],
        )
        self.assertEqual(song.downloadUrl[-1].url, "https://aac.saavncdn.com/815/3b1c4f4a_320.mp4")
        self.assertEqual([img.quality for img in song.image], ["50x50", "150x150", "500x500"])

        params = upstream.requests[0].url.params
        self.assertEqual(params["__call"], "song.getDetails")
        self.assertEqual(params["pids"], "3IoDK8qI")
        self.assertEqual(params["api_version"], "4")
        self.assertEqual(params["_format"], "json")

    async def test_song_without_token_has_no_links(self) -> None:
        upstream = _Upstream({"song.getDetails": {"songs": [song_payload(encrypted_media_url="")]}})
        service: CatalogService = self.make_service(upstream)
        song: Song = await service.get_song_by_id("3IoDK8qI")
        self.assertEqual(song.downloadUrl, [])

    async def test_bad_token_is_logged_without_failing_the_song(self) -> None:
        upstream = _Upstream({"song.getDetails": {"songs": [song_payload(encrypted_media_url="%%%")]}})
        service: CatalogService = self.make_service(upstream)

        with self.assertLogs("media_relay.services.catalog", level="WARNING") as logs:
            song: Song = await service.get_song_by_id("3IoDK8qI")

        self.assertEqual(song.downloadUrl, [])
        self.assertIn("Could not produce download links", logs.output[0])

    async def test_get_song_by_id_not_found(self) -> None:
        service: CatalogService = self.make_service(_Upstream({"song.getDetails": {"songs": []}}))
        with self.assertRaises(NotFoundError):
            await service.get_song_by_id("nope")

    async def test_get_songs_by_ids_joins_and_skips_blank(self) -> None:
        upstream = _Upstream({"song.getDetails": {"songs": [song_payload("a"), song_payload("b")]}})
        service: CatalogService = self.make_service(upstream)

        songs: list[Song] = await service.get_songs_by_ids(["a", " ", "b"])

        self.assertEqual([s.id for s in songs], ["a", "b"])
        self.assertEqual(upstream.requests[0].url.params["pids"], "a,b")

    async def test_get_songs_by_ids_without_ids_sends_nothing(self) -> None:
        upstream = _Upstream({})
        service: CatalogService = self.make_service(upstream)
        self.assertEqual(await service.get_songs_by_ids([]), [])
        self.assertEqual(upstream.requests, [])

    async def test_error_status_raises_generic_error(self) -> None:
        service: CatalogService = self.make_service(_Upstream({}, status_code=503))
        with self.assertLogs("media_relay.services.catalog", level="ERROR"):
            with self.assertRaises(UpstreamServiceError) as ctx:
                await service.get_song_by_id("3IoDK8qI")
        self.assertEqual(str(ctx.exception), "Failed to fetch song details")

    async def test_search_songs(self) -> None:
        upstream = _Upstream(
            {"search.getResults": {"total": 120, "start": 11, "results": [song_payload("a")]}}
        )
        service: CatalogService = self.make_service(upstream)

        result: SongSearchResult = await service.search_songs("hawayein", page=1, limit=10)

        self.assertEqual(result.total, 120)
        self.assertEqual(result.start, 11)
        self.assertEqual([s.id for s in result.results], ["a"])
        params = upstream.requests[0].url.params
        self.assertEqual(params["q"], "hawayein")
        self.assertEqual(params["p"], "1")
        self.assertEqual(params["n"], "10")

    async def test_search_rejects_malformed_payload(self) -> None:
        service: CatalogService = self.make_service(_Upstream({"search.getResults": {"results": [{"id": 1}]}}))
        with self.assertLogs("media_relay.services.catalog", level="ERROR"):
            with self.assertRaises(UpstreamServiceError):
                await service.search_songs("x")

    async def test_get_album_by_id(self) -> None:
        album_payload: dict[str, Any] = {
            "id": "1142502",
            "title": "Jab Harry Met Sejal",
            "header_desc": "Hindi album",
            "type": "album",
            "perma_url": "https://www.jiosaavn.com/album/jab-harry-met-sejal/xe6Gx7Sg12U_",
            "image": "https://c.saavncdn.com/258/Jab-Harry-Met-Sejal-Hindi-2017-150x150.jpg",
            "language": "hindi",
            "year": "2017",
            "play_count": "",
            "explicit_content": "1",
            "list": [song_payload("a"), song_payload("b")],
            "more_info": {"song_count": "2", "artistMap": {"primary_artists": []}},
        }
        upstream = _Upstream({"content.getAlbumDetails": album_payload})
        service: CatalogService = self.make_service(upstream)

        album: Album = await service.get_album_by_id("1142502")

        self.assertEqual(album.name, "Jab Harry Met Sejal")
        self.assertEqual(album.songCount, 2)
        self.assertIsNone(album.playCount)
        self.assertTrue(album.explicitContent)
        self.assertEqual([s.id for s in album.songs], ["a", "b"])
        self.assertEqual(len(album.songs[0].downloadUrl), 5)
        self.assertEqual(upstream.requests[0].url.params["albumid"], "1142502")

    async def test_album_with_empty_song_list(self) -> None:
        service: CatalogService = self.make_service(
            _Upstream({"content.getAlbumDetails": {"id": "9", "title": "Empty", "list": ""}})
        )
        album: Album = await service.get_album_by_id("9")
        self.assertEqual(album.songs, [])

    async def test_album_not_found(self) -> None:
        service: CatalogService = self.make_service(_Upstream({"content.getAlbumDetails": []}))
        with self.assertRaises(NotFoundError):
            await service.get_album_by_id("missing")


class TestBuildImageLinks(unittest.TestCase):
    def test_variants_and_https(self) -> None:
        links = build_image_links("http://c.saavncdn.com/258/cover-150x150.jpg")
        self.assertEqual(
            [(link.quality, link.url) for link in links],
            [
                ("50x50", "https://c.saavncdn.com/258/cover-50x50.jpg"),
                ("150x150", "https://c.saavncdn.com/258/cover-150x150.jpg"),
                ("500x500", "https://c.saavncdn.com/258/cover-500x500.jpg"),
            ],
        )

    def test_empty_url(self) -> None:
        self.assertEqual(build_image_links(""), [])
        self.assertEqual(build_image_links(None), [])


if __name__ == "__main__":
    unittest.main()
