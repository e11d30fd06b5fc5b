"""Music catalog service backed by the catalog's ``api.php`` endpoint.

Every call goes to the same URL and is selected by the ``__call`` parameter.
Payloads are validated into the ``Catalog*APIResponse`` models and then
normalized into ``Song``/``Album`` records with derived download links.
"""
from __future__ import annotations

import html
import logging
import re
from typing import Any, Final, Iterable, Optional

import httpx
from pydantic import ValidationError

from media_relay.core.config import Settings
from media_relay.domain.catalog import (
    Album,
    AlbumRef,
    ArtistRef,
    Artists,
    CatalogAlbumAPIResponse,
    CatalogArtistAPIResponse,
    CatalogArtistMap,
    CatalogSearchAPIResponse,
    CatalogSongAPIResponse,
    CatalogSongDetailsAPIResponse,
    Song,
    SongSearchResult,
)
from media_relay.domain.errors import LinkDerivationError, NotFoundError, UpstreamServiceError
from media_relay.domain.links import BITRATE_TIERS, DownloadLink, ImageLink
from media_relay.infra.http import build_client, fetch_json
from media_relay.services.links import LinkCipher, LinkDeriver
from media_relay.services.normalize import parse_flag, parse_int

logger: logging.Logger = logging.getLogger(__name__)

UPSTREAM: Final[str] = "catalog"
IMAGE_SIZES: Final[tuple[str, ...]] = ("50x50", "150x150", "500x500")
_IMAGE_SIZE_RE: Final[re.Pattern[str]] = re.compile(r"150x150|50x50|500x500")
_BASE_PARAMS: Final[dict[str, str]] = {
    "_format": "json",
    "_marker": "0",
    "api_version": "4",
    "ctx": "web6dot0",
}


def _text(value: Optional[str]) -> Optional[str]:
    return html.unescape(value) if value else None


def build_image_links(url: Optional[str]) -> list[ImageLink]:
    """Expand a catalog image URL into its 50x50, 150x150 and 500x500 variants.

    Notes
    -----
    - The catalog serves every size from the same path with a different size
      segment, so variants are produced by substitution, without requests.
    - ``http://`` is upgraded to ``https://``.
    """

    if not url:
        return []
    secure: str = re.sub(r"^http://", "https://", url)
    return [ImageLink(quality=size, url=_IMAGE_SIZE_RE.sub(size, secure, count=1)) for size in IMAGE_SIZES]


def transform_artist(artist: CatalogArtistAPIResponse) -> ArtistRef:
    return ArtistRef(
        id=artist.id,
        name=html.unescape(artist.name),
        role=artist.role,
        type=artist.type,
        image=build_image_links(artist.image),
        url=artist.perma_url,
    )


def transform_artist_map(artist_map: CatalogArtistMap) -> Artists:
    return Artists(
        primary=[transform_artist(a) for a in artist_map.primary_artists],
        featured=[transform_artist(a) for a in artist_map.featured_artists],
        all=[transform_artist(a) for a in artist_map.artists],
    )


def _download_links(deriver: LinkDeriver, song_id: str, token: str) -> list[DownloadLink]:
    if not token:
        return []
    try:
        return deriver.derive(token, BITRATE_TIERS)
    except LinkDerivationError:
        # The cause may describe the cipher; keep it out of the log line
        logger.warning("Could not produce download links", extra={"upstream": UPSTREAM, "item_id": song_id})
        return []


def transform_song(song: CatalogSongAPIResponse, deriver: LinkDeriver) -> Song:
    """Normalize a catalog song payload, deriving download links for every tier."""

    info = song.more_info
    return Song(
        id=song.id,
        name=html.unescape(song.title),
        type=song.type,
        year=parse_int(song.year),
        releaseDate=info.release_date or None,
        duration=parse_int(info.duration),
        label=_text(info.label),
        explicitContent=parse_flag(song.explicit_content),
        playCount=parse_int(song.play_count),
        language=song.language,
        hasLyrics=parse_flag(info.has_lyrics),
        lyricsId=info.lyrics_id or None,
        url=song.perma_url,
        copyright=_text(info.copyright_text),
        album=AlbumRef(id=info.album_id or None, name=_text(info.album), url=info.album_url or None),
        artists=transform_artist_map(info.artistMap),
        image=build_image_links(song.image),
        downloadUrl=_download_links(deriver, song.id, info.encrypted_media_url),
    )


def transform_album(album: CatalogAlbumAPIResponse, deriver: LinkDeriver) -> Album:
    songs: list[CatalogSongAPIResponse] = album.songs if isinstance(album.songs, list) else []
    return Album(
        id=album.id,
        name=html.unescape(album.title),
        description=html.unescape(album.header_desc),
        year=parse_int(album.year),
        type=album.type,
        playCount=parse_int(album.play_count),
        language=album.language,
        explicitContent=parse_flag(album.explicit_content),
        artists=transform_artist_map(album.more_info.artistMap),
        songCount=parse_int(album.more_info.song_count),
        url=album.perma_url,
        image=build_image_links(album.image),
        songs=[transform_song(s, deriver) for s in songs],
    )


class CatalogService:
    """Look up songs and albums in the music catalog.

    Parameters
    ----------
    settings: Settings
        Supplies the endpoint, timeout and link cipher constants.
    client: Optional[httpx.AsyncClient]
        Shared client. When omitted the service builds and owns one.
    deriver: Optional[LinkDeriver]
        Link deriver; built from ``settings`` when omitted.
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
        deriver: Optional[LinkDeriver] = None,
    ) -> None:
        self.settings: Settings = settings
        self.deriver: LinkDeriver = deriver if deriver is not None else LinkDeriver(LinkCipher.from_settings(settings))
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client if client is not None else build_client(settings)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _call(self, call: str, **params: str) -> Any:
        query: dict[str, str] = {**_BASE_PARAMS, "__call": call, **params}
        return await fetch_json(self._client, self.settings.catalog_api_url, query, upstream=UPSTREAM)

    async def get_songs_by_ids(self, song_ids: Iterable[str]) -> list[Song]:
        """Fetch several songs in one request; blank ids are skipped.

        Raises
        ------
        UpstreamServiceError
            ``"Failed to fetch song details"`` on any upstream or payload failure.
        """

        valid_ids: list[str] = [sid.strip() for sid in song_ids if sid and sid.strip()]
        if not valid_ids:
            return []

        try:
            data: Any = await self._call("song.getDetails", pids=",".join(valid_ids))
            payload: CatalogSongDetailsAPIResponse = CatalogSongDetailsAPIResponse.model_validate(data or {})
        except (UpstreamServiceError, ValidationError) as ex:
            logger.exception("Failed to get song details", extra={"upstream": UPSTREAM})
            raise UpstreamServiceError("Failed to fetch song details") from ex
        return [transform_song(song, self.deriver) for song in payload.songs]

    async def get_song_by_id(self, song_id: str) -> Song:
        songs: list[Song] = await self.get_songs_by_ids([song_id])
        if not songs:
            raise NotFoundError("Song not found")
        return songs[0]

    async def search_songs(self, query: str, page: int = 0, limit: int = 10) -> SongSearchResult:
        """Search songs by keyword.

        Notes
        -----
        - ``page`` is passed through as the catalog's ``p`` parameter and
          ``limit`` as ``n``; the catalog reports ``start`` 1-based.
        """

        try:
            data: Any = await self._call("search.getResults", q=query, p=str(page), n=str(limit))
            payload: CatalogSearchAPIResponse = CatalogSearchAPIResponse.model_validate(data or {})
        except (UpstreamServiceError, ValidationError) as ex:
            logger.exception("Catalog search error", extra={"upstream": UPSTREAM})
            raise UpstreamServiceError("Failed to search songs") from ex
        return SongSearchResult(
            total=payload.total,
            start=payload.start,
            results=[transform_song(song, self.deriver) for song in payload.results],
        )

    async def get_album_by_id(self, album_id: str) -> Album:
        """Fetch an album with its songs.

        Raises
        ------
        NotFoundError
            When the catalog answers with an empty payload for ``album_id``.
        UpstreamServiceError
            ``"Failed to fetch album details"`` on other failures.
        """

        try:
            data: Any = await self._call("content.getAlbumDetails", albumid=album_id)
            payload: Optional[CatalogAlbumAPIResponse] = (
                CatalogAlbumAPIResponse.model_validate(data) if data else None
            )
        except (UpstreamServiceError, ValidationError) as ex:
            logger.exception("Failed to get album details", extra={"upstream": UPSTREAM, "item_id": album_id})
            raise UpstreamServiceError("Failed to fetch album details") from ex
        if payload is None or not payload.id:
            raise NotFoundError("Album not found")
        return transform_album(payload, self.deriver)
