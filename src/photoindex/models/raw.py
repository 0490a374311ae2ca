"""Raw upstream payloads — One tagged variant per source.

Parsing a raw dict through these models is where shape validation
happens. A payload that does not match (e.g. an Instagram caption that is
a bare string instead of an object) raises ``pydantic.ValidationError``
and the importer skips that single item.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from photoindex.models.photo import FlickrPhoto, InstagramPhoto
from photoindex.models.profile import ProfileType

# ── Instagram ──


class _Count(BaseModel):
    count: int = 0


class _Caption(BaseModel):
    text: str


class _InstagramUser(BaseModel):
    username: str


class _ImageVersion(BaseModel):
    url: str


class _Images(BaseModel):
    thumbnail: _ImageVersion


class InstagramMedia(BaseModel):
    """One item of ``/users/{id}/media/recent``."""

    source: Literal["instagram"] = "instagram"

    id: str
    user: _InstagramUser
    tags: list[str] = Field(default_factory=list)
    caption: _Caption | None = None
    created_time: int
    likes: _Count = Field(default_factory=_Count)
    comments: _Count = Field(default_factory=_Count)
    link: str
    images: _Images

    @field_validator("created_time")
    @classmethod
    def _check_created_time(cls, v: int) -> int:
        try:
            datetime.fromtimestamp(v, tz=UTC)
        except (OSError, OverflowError, ValueError) as e:
            raise ValueError(f"created_time {v} is not a valid timestamp") from e
        return v

    def to_photo(self, owner_id: str) -> InstagramPhoto:
        return InstagramPhoto(
            id=self.id,
            owner=owner_id,
            username=self.user.username,
            tags=self.tags,
            caption=self.caption.text if self.caption else "",
            taken_at=datetime.fromtimestamp(self.created_time, tz=UTC).date(),
            popularity=self.likes.count + self.comments.count,
            url=self.link,
            thumbnail_url=self.images.thumbnail.url,
        )


# ── Flickr ──


class _FlickrContent(BaseModel):
    content: str = Field(default="", alias="_content")


class FlickrMedia(BaseModel):
    """One photo from ``flickr.people.getPublicPhotos`` / ``flickr.groups.pools.getPhotos``.

    Only the ``extras`` requested by :class:`~photoindex.sources.flickr.FlickrAdapter`
    are modelled here.
    """

    source: Literal["flickr"] = "flickr"

    id: str
    owner: str
    title: str = ""
    description: _FlickrContent = Field(default_factory=_FlickrContent)
    datetaken: str
    views: int = 0
    tags: str = ""
    url_q: str

    @field_validator("datetaken")
    @classmethod
    def _check_datetaken(cls, v: str) -> str:
        date.fromisoformat(v[:10])
        return v

    def to_photo(self, owner_id: str, profile_type: ProfileType) -> FlickrPhoto:
        return FlickrPhoto(
            id=self.id,
            owner=owner_id,
            profile_type=profile_type,
            title=self.title,
            description=self.description.content,
            tags=self.tags.split(),
            taken_at=date.fromisoformat(self.datetaken[:10]),
            popularity=self.views,
            url=f"https://www.flickr.com/photos/{self.owner}/{self.id}/",
            thumbnail_url=self.url_q,
        )
