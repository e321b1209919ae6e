import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict

REDDIT_URL = "https://www.reddit.com"


class ListingCategory(str, enum.Enum):
    hot = "hot"
    new = "new"
    top = "top"
    rising = "rising"

    @classmethod
    def resolve(cls, value: str | None) -> "ListingCategory":
        """Map a route segment to a category, falling back to hot."""
        try:
            return cls(value)
        except ValueError:
            return cls.hot


class OEmbed(BaseModel):
    model_config = ConfigDict(extra="ignore")

    html: str | None = None
    url: str | None = None


class Media(BaseModel):
    model_config = ConfigDict(extra="ignore")

    oembed: OEmbed | None = None


class RawPost(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    name: str | None = None
    permalink: str | None = None
    title: str | None = None
    url: str | None = None
    thumbnail: str | None = None
    created_utc: float | None = None
    score: int | None = None
    selftext: str | None = None
    author: str | None = None
    link_flair_text: str | None = None
    media: Media | None = None

    @property
    def created_at(self) -> datetime | None:
        if self.created_utc is None:
            return None
        return datetime.fromtimestamp(self.created_utc, tz=timezone.utc)

    @property
    def permalink_url(self) -> str | None:
        if not self.permalink:
            return None
        return f"{REDDIT_URL}{self.permalink}"


class ListingChild(BaseModel):
    model_config = ConfigDict(extra="ignore")

    kind: str | None = None
    data: Any = None


class ListingData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    children: list[Any]


class Listing(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: ListingData


@dataclass(frozen=True)
class VideoEmbed:
    video_id: str | None = None
    start: int = 0
    end: int = 0


@dataclass(frozen=True)
class FeedEntry:
    id: str
    title: str
    updated: datetime
    author: str
    link: str
    summary: str
    category: str | None = None


@dataclass(frozen=True)
class VideoEntry:
    title: str
    thumbnail: str | None
    date: datetime
    url: str
