"""Domain models for the music catalog.

The ``Catalog*APIResponse`` models describe what the catalog's ``api.php``
returns (api_version 4). The catalog encodes most scalars as text and omits
keys freely, so nearly every upstream field is optional and loosely typed.
The remaining models are the normalized records handed to callers.
"""
from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from media_relay.domain.links import DownloadLink, ImageLink

LooseScalar = Union[str, int, bool, None]


class _Upstream(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CatalogArtistAPIResponse(_Upstream):
    id: str
    name: str
    role: str = ""
    type: str = "artist"
    image: str = ""
    perma_url: str = ""


class CatalogArtistMap(_Upstream):
    primary_artists: list[CatalogArtistAPIResponse] = Field(default_factory=list)
    featured_artists: list[CatalogArtistAPIResponse] = Field(default_factory=list)
    artists: list[CatalogArtistAPIResponse] = Field(default_factory=list)


class CatalogSongMoreInfo(_Upstream):
    """Nested ``more_info`` of a song payload; holds the encrypted media URL."""

    album_id: str = ""
    album: str = ""
    album_url: str = ""
    label: str = ""
    duration: LooseScalar = None
    encrypted_media_url: str = ""
    has_lyrics: LooseScalar = None
    lyrics_id: Optional[str] = None
    copyright_text: str = ""
    release_date: Optional[str] = None
    artistMap: CatalogArtistMap = Field(default_factory=CatalogArtistMap)


class CatalogSongAPIResponse(_Upstream):
    id: str
    title: str
    type: str = "song"
    perma_url: str = ""
    image: str = ""
    language: str = ""
    year: LooseScalar = None
    play_count: LooseScalar = None
    explicit_content: LooseScalar = None
    more_info: CatalogSongMoreInfo = Field(default_factory=CatalogSongMoreInfo)


class CatalogSongDetailsAPIResponse(_Upstream):
    songs: list[CatalogSongAPIResponse] = Field(default_factory=list)


class CatalogSearchAPIResponse(_Upstream):
    total: int = 0
    start: int = 0
    results: list[CatalogSongAPIResponse] = Field(default_factory=list)


class CatalogAlbumMoreInfo(_Upstream):
    song_count: LooseScalar = None
    artistMap: CatalogArtistMap = Field(default_factory=CatalogArtistMap)


class CatalogAlbumAPIResponse(_Upstream):
    id: str = ""
    title: str = ""
    header_desc: str = ""
    type: str = "album"
    perma_url: str = ""
    image: str = ""
    language: str = ""
    year: LooseScalar = None
    play_count: LooseScalar = None
    explicit_content: LooseScalar = None
    # The catalog sends an empty string instead of an empty list
    songs: Union[list[CatalogSongAPIResponse], str] = Field(default_factory=list, alias="list")
    more_info: CatalogAlbumMoreInfo = Field(default_factory=CatalogAlbumMoreInfo)


class ArtistRef(BaseModel):
    id: str
    name: str
    role: str
    type: str
    image: list[ImageLink] = Field(default_factory=list)
    url: str


class Artists(BaseModel):
    primary: list[ArtistRef] = Field(default_factory=list)
    featured: list[ArtistRef] = Field(default_factory=list)
    all: list[ArtistRef] = Field(default_factory=list)


class AlbumRef(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    url: Optional[str] = None


class Song(BaseModel):
    """Normalized song record.

    Notes
    -----
    - ``downloadUrl`` is empty when the catalog withheld the media token or the
      token could not be turned into links.
    """

    id: str
    name: str
    type: str
    year: Optional[int] = None
    releaseDate: Optional[str] = None
    duration: Optional[int] = Field(default=None, description="Duration in seconds if known")
    label: Optional[str] = None
    explicitContent: bool = False
    playCount: Optional[int] = None
    language: str = ""
    hasLyrics: bool = False
    lyricsId: Optional[str] = None
    url: str = ""
    copyright: Optional[str] = None
    album: AlbumRef = Field(default_factory=AlbumRef)
    artists: Artists = Field(default_factory=Artists)
    image: list[ImageLink] = Field(default_factory=list)
    downloadUrl: list[DownloadLink] = Field(default_factory=list)


class Album(BaseModel):
    id: str
    name: str
    description: str = ""
    year: Optional[int] = None
    type: str = "album"
    playCount: Optional[int] = None
    language: str = ""
    explicitContent: bool = False
    artists: Artists = Field(default_factory=Artists)
    songCount: Optional[int] = None
    url: str = ""
    image: list[ImageLink] = Field(default_factory=list)
    songs: list[Song] = Field(default_factory=list)


class SongSearchResult(BaseModel):
    total: int = 0
    start: int = 0
    results: list[Song] = Field(default_factory=list)
