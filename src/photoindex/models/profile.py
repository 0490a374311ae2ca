"""Profile model — An upstream account or group whose photos are imported."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class SourceType(StrEnum):
    """Upstream photo services we import from."""

    INSTAGRAM = "instagram"
    FLICKR = "flickr"


class ProfileType(StrEnum):
    USER = "user"
    GROUP = "group"


class Profile(BaseModel):
    """A source-scoped owner of photos.

    The ``id`` is the upstream identifier (e.g. a Flickr NSID such as
    ``61913304@N07``) and never changes once the profile is stored.
    ``name`` and ``profile_type`` may be updated by re-registration.
    """

    id: str = Field(min_length=1, description="Source-scoped profile identifier")
    name: str = Field(min_length=1, description="Display name or username")
    profile_type: ProfileType = Field(default=ProfileType.USER, description="User account or group pool")
    source: SourceType = Field(description="Upstream service this profile belongs to")

    @property
    def doc_type(self) -> str:
        return f"{self.source.value}_profile"

    def to_document(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "profile_type": self.profile_type.value,
            "source": self.source.value,
        }
