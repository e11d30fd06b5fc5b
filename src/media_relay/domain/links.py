"""Link records shared by catalog and video records."""
from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, Field

# Audio bitrates (kbps) the catalog serves for every track.
BITRATE_TIERS: Final[tuple[int, ...]] = (12, 48, 96, 160, 320)


class ImageLink(BaseModel):
    """An image variant labelled by its quality (``WIDTHxHEIGHT``)."""

    model_config = ConfigDict(frozen=True)

    quality: str = Field(description="Quality label, e.g. 1280x720")
    url: str = Field(description="Image URL")


class DownloadLink(BaseModel):
    """A fetch URL for one bitrate tier.

    Notes
    -----
    - Lives only as long as the response that embeds it; catalog media URLs
      expire upstream, so links are never cached.
    """

    model_config = ConfigDict(frozen=True)

    tier: int = Field(exclude=True, description="Bitrate in kbps")
    quality: str = Field(description="Bitrate label, e.g. 320kbps")
    url: str = Field(description="Media URL for this bitrate")

    @classmethod
    def for_tier(cls, tier: int, url: str) -> "DownloadLink":
        return cls(tier=tier, quality=f"{tier}kbps", url=url)
