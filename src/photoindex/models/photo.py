"""Canonical photo records.

Every source maps its native payload to one of the ``Photo`` subclasses
below. The subclass decides which index the record lives in and which
text field carries its human-readable title.
"""

from __future__ import annotations

from datetime import date
from typing import Any, ClassVar

from pydantic import BaseModel, Field, model_validator

from photoindex.models.profile import ProfileType, SourceType


class Photo(BaseModel):
    """Fields common to every indexed photo, regardless of source.

    ``id`` is the source-native identifier and is immutable once stored.
    ``popularity`` is derived from engagement signals at import time and
    is only ever written by the import pipeline.
    """

    source_type: ClassVar[SourceType]
    doc_type: ClassVar[str]
    title_field: ClassVar[str] = "title"

    id: str = Field(min_length=1, description="Source-native photo identifier")
    owner: str = Field(min_length=1, description="Owning profile id")
    tags: list[str] = Field(default_factory=list, description="Ordered tag labels")
    taken_at: date = Field(description="Date the photo was taken or posted")
    popularity: int = Field(default=0, ge=0, description="Derived engagement score")
    url: str = Field(description="Link to the photo page")
    thumbnail_url: str = Field(description="Link to a small rendition")
    album: str = Field(default="", description="Album grouping key")

    @property
    def title_or_caption(self) -> str:
        return getattr(self, self.title_field)

    def to_document(self) -> dict[str, Any]:
        """Serialize for indexing. ``id`` is carried as the document id."""
        body = self.model_dump(mode="json", exclude={"id"})
        body["source_type"] = self.doc_type
        return body

    @classmethod
    def from_document(cls, doc_id: str, source: dict[str, Any]) -> Photo:
        return cls.model_validate({**source, "id": doc_id})


class InstagramPhoto(Photo):
    source_type: ClassVar[SourceType] = SourceType.INSTAGRAM
    doc_type: ClassVar[str] = "instagram_photo"
    title_field: ClassVar[str] = "caption"

    username: str = Field(min_length=1, description="Instagram username of the owner")
    caption: str = Field(default="", description="Caption text")


class FlickrPhoto(Photo):
    source_type: ClassVar[SourceType] = SourceType.FLICKR
    doc_type: ClassVar[str] = "flickr_photo"

    profile_type: ProfileType = Field(description="Whether owner is a user or a group pool")
    title: str = Field(min_length=1, description="Photo title")
    description: str = Field(default="", description="Photo description")

    @model_validator(mode="after")
    def _default_album(self) -> FlickrPhoto:
        if not self.album:
            self.album = self.generate_album_name()
        return self

    def generate_album_name(self) -> str:
        return ":".join([self.owner, self.taken_at.isoformat(), self.id])


_PHOTO_CLASSES: dict[SourceType, type[Photo]] = {
    SourceType.INSTAGRAM: InstagramPhoto,
    SourceType.FLICKR: FlickrPhoto,
}


def photo_class_for(source: SourceType | str) -> type[Photo]:
    """Return the canonical photo class for a source."""
    return _PHOTO_CLASSES[SourceType(source)]
