"""Domain models for the video platform.

``VideoAPIResponse`` is the intermediate shape assembled from a YouTube
``videos`` item; ``Video`` is the normalized record handed to callers.
"""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from media_relay.domain.links import ImageLink


class Thumbnail(BaseModel):
    """A single thumbnail as reported upstream."""

    model_config = ConfigDict(extra="ignore")

    url: str = Field(description="Thumbnail URL")
    width: int = Field(description="Pixel width")
    height: int = Field(description="Pixel height")


class ThumbnailSet(BaseModel):
    thumbnails: list[Thumbnail] = Field(default_factory=list)


class VideoAPIResponse(BaseModel):
    """Loosely typed video fields collected from the YouTube Data API.

    Notes
    -----
    - ``viewCount`` and ``lengthText`` stay text here; they are normalized by
      ``services.normalize`` during transformation.
    """

    id: str
    title: str
    thumbnail: ThumbnailSet
    channelTitle: str
    channelId: str
    description: str = ""
    viewCount: Optional[str] = None
    publishDate: Optional[str] = None
    publishedText: Optional[str] = None
    lengthText: Optional[str] = None
    isLive: Optional[bool] = None


class YouTubeSearchItemId(BaseModel):
    model_config = ConfigDict(extra="ignore")

    videoId: Optional[str] = None


class YouTubeSearchItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: YouTubeSearchItemId = Field(default_factory=YouTubeSearchItemId)


class YouTubeSearchAPIResponse(BaseModel):
    """Payload of ``GET /search``; only video ids and the page token are used."""

    model_config = ConfigDict(extra="ignore")

    items: list[YouTubeSearchItem] = Field(default_factory=list)
    nextPageToken: Optional[str] = None


class YouTubeSnippet(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    channelTitle: str
    channelId: str
    description: str = ""
    publishedAt: Optional[str] = None
    liveBroadcastContent: Optional[str] = None
    thumbnails: dict[str, Thumbnail] = Field(default_factory=dict)


class YouTubeContentDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    duration: str = ""


class YouTubeStatistics(BaseModel):
    model_config = ConfigDict(extra="ignore")

    viewCount: Optional[str] = None


class YouTubeVideoItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    snippet: YouTubeSnippet
    contentDetails: YouTubeContentDetails = Field(default_factory=YouTubeContentDetails)
    statistics: Optional[YouTubeStatistics] = None


class YouTubeVideosAPIResponse(BaseModel):
    """Payload of ``GET /videos`` with ``snippet,contentDetails,statistics`` parts."""

    model_config = ConfigDict(extra="ignore")

    items: list[YouTubeVideoItem] = Field(default_factory=list)


class Channel(BaseModel):
    id: str = Field(description="Channel identifier")
    name: str = Field(description="Channel title")


class Video(BaseModel):
    """Normalized video record."""

    id: str = Field(description="Video identifier")
    name: str = Field(description="Video title")
    type: Literal["youtube"] = "youtube"
    duration: Optional[int] = Field(default=None, description="Duration in seconds if known")
    url: str = Field(description="Canonical watch URL")
    image: list[ImageLink] = Field(default_factory=list, description="Thumbnail variants")
    channel: Channel
    description: str = ""
    publishDate: Optional[str] = Field(default=None, description="Publication timestamp if known")
    viewCount: Optional[int] = Field(default=None, description="View count if known")
    isLive: bool = False


class VideoSearchResult(BaseModel):
    videos: list[Video] = Field(default_factory=list)
    nextPageToken: Optional[str] = Field(default=None, description="Token for the next result page")
