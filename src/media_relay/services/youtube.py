"""Video platform service backed by the YouTube Data API v3."""
from __future__ import annotations

import logging
from typing import Any, Final, Iterable, Optional

import httpx
from pydantic import ValidationError

from media_relay.core.config import Settings
from media_relay.domain.errors import NotFoundError, UpstreamServiceError
from media_relay.domain.links import ImageLink
from media_relay.domain.video import (
    Channel,
    Thumbnail,
    ThumbnailSet,
    Video,
    VideoAPIResponse,
    VideoSearchResult,
    YouTubeSearchAPIResponse,
    YouTubeVideoItem,
    YouTubeVideosAPIResponse,
)
from media_relay.infra.http import build_client, fetch_json
from media_relay.services.normalize import (
    classify_image_width,
    parse_duration_text,
    parse_iso8601_duration,
    parse_view_count_text,
)

logger: logging.Logger = logging.getLogger(__name__)

UPSTREAM: Final[str] = "youtube"
WATCH_URL: Final[str] = "https://www.youtube.com/watch?v={video_id}"


def transform_video(video: VideoAPIResponse) -> Video:
    """Build the normalized ``Video`` record from collected upstream fields.

    Notes
    -----
    - Thumbnails keep upstream order and are labelled by width.
    - Unparseable duration or view count become ``None``.
    """

    images: list[ImageLink] = [
        ImageLink(quality=classify_image_width(thumb.width), url=thumb.url)
        for thumb in video.thumbnail.thumbnails
    ]
    return Video(
        id=video.id,
        name=video.title,
        duration=parse_duration_text(video.lengthText),
        url=WATCH_URL.format(video_id=video.id),
        image=images,
        channel=Channel(id=video.channelId, name=video.channelTitle),
        description=video.description or "",
        publishDate=video.publishDate or None,
        viewCount=parse_view_count_text(video.viewCount),
        isLive=video.isLive or False,
    )


def _to_api_response(item: YouTubeVideoItem) -> VideoAPIResponse:
    snippet = item.snippet
    thumbnails: list[Thumbnail] = list(snippet.thumbnails.values())
    return VideoAPIResponse(
        id=item.id,
        title=snippet.title,
        thumbnail=ThumbnailSet(thumbnails=thumbnails),
        channelTitle=snippet.channelTitle,
        channelId=snippet.channelId,
        description=snippet.description,
        viewCount=item.statistics.viewCount if item.statistics else None,
        publishDate=snippet.publishedAt,
        lengthText=parse_iso8601_duration(item.contentDetails.duration),
        isLive=snippet.liveBroadcastContent == "live",
    )


def _video_ids(payload: YouTubeSearchAPIResponse) -> list[str]:
    return [item.id.videoId for item in payload.items if item.id.videoId]


class YouTubeService:
    """Search and look up videos, returning normalized records.

    Parameters
    ----------
    settings: Settings
        Supplies the API key, base URL and timeout.
    client: Optional[httpx.AsyncClient]
        Shared client. When omitted the service builds and owns one.

    Notes
    -----
    - Without an API key the service still constructs; upstream calls then fail
      with the upstream's own error status, surfaced as ``UpstreamServiceError``.
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> None:
        self.settings: Settings = settings
        self.api_key: str = settings.youtube_api_key or ""
        if not self.api_key:
            logger.warning("YouTube API key not set - YouTube features will not work", extra={"upstream": UPSTREAM})
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client if client is not None else build_client(settings)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, resource: str, params: dict[str, Any]) -> Any:
        url: str = f"{self.settings.youtube_api_base_url.rstrip('/')}/{resource}"
        return await fetch_json(self._client, url, {**params, "key": self.api_key}, upstream=UPSTREAM)

    async def search_videos(self, query: str, limit: int = 10) -> VideoSearchResult:
        """Search videos by keyword and return full details for each hit.

        Raises
        ------
        UpstreamServiceError
            ``"Failed to search YouTube videos"`` on any upstream or payload failure.
        """

        try:
            data: Any = await self._get(
                "search",
                {"part": "snippet", "q": query, "maxResults": str(limit), "type": "video"},
            )
            payload: YouTubeSearchAPIResponse = YouTubeSearchAPIResponse.model_validate(data)
            if not payload.items:
                return VideoSearchResult()

            video_ids: list[str] = _video_ids(payload)
            if not video_ids:
                return VideoSearchResult(nextPageToken=payload.nextPageToken)

            videos: list[Video] = await self.get_videos_by_ids(video_ids)
            return VideoSearchResult(videos=videos, nextPageToken=payload.nextPageToken)
        except (UpstreamServiceError, ValidationError) as ex:
            logger.exception("YouTube search error", extra={"upstream": UPSTREAM})
            raise UpstreamServiceError("Failed to search YouTube videos") from ex

    async def get_videos_by_ids(self, video_ids: Iterable[str]) -> list[Video]:
        """Fetch details for several videos in one request; blank ids are skipped."""

        valid_ids: list[str] = [vid for vid in video_ids if vid and vid.strip()]
        if not valid_ids:
            return []

        try:
            data: Any = await self._get(
                "videos",
                {"part": "snippet,contentDetails,statistics", "id": ",".join(valid_ids)},
            )
            payload: YouTubeVideosAPIResponse = YouTubeVideosAPIResponse.model_validate(data)
            return [transform_video(_to_api_response(item)) for item in payload.items]
        except (UpstreamServiceError, ValidationError) as ex:
            logger.exception("Failed to get video details", extra={"upstream": UPSTREAM})
            raise UpstreamServiceError("Failed to fetch video details") from ex

    async def get_video_by_id(self, video_id: str) -> Video:
        """Fetch a single video.

        Raises
        ------
        NotFoundError
            When the upstream knows no video with this id.
        UpstreamServiceError
            ``"Failed to fetch YouTube video details"`` on other failures.
        """

        try:
            videos: list[Video] = await self.get_videos_by_ids([video_id])
        except UpstreamServiceError as ex:
            logger.error("Failed to get video", extra={"upstream": UPSTREAM, "item_id": video_id})
            raise UpstreamServiceError("Failed to fetch YouTube video details") from ex
        if not videos:
            raise NotFoundError("Video not found")
        return videos[0]

    async def get_suggestions(self, video_id: str, limit: int = 10) -> list[Video]:
        """Return videos related to ``video_id``; an empty list on any failure."""

        try:
            data: Any = await self._get(
                "search",
                {
                    "part": "snippet",
                    "relatedToVideoId": video_id,
                    "type": "video",
                    "maxResults": str(limit),
                },
            )
            payload: YouTubeSearchAPIResponse = YouTubeSearchAPIResponse.model_validate(data)
            return await self.get_videos_by_ids(_video_ids(payload))
        except (UpstreamServiceError, ValidationError):
            logger.exception("Failed to get suggestions", extra={"upstream": UPSTREAM, "item_id": video_id})
            return []
