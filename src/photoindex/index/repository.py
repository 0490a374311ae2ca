"""Record repositories — Profile and photo persistence on top of ``SearchIndex``."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from pydantic import ValidationError

from photoindex.index.client import SearchIndex
from photoindex.models.photo import Photo
from photoindex.models.profile import Profile, SourceType

logger = logging.getLogger(__name__)


class ProfileStore:
    """Known profiles, one index per source."""

    def __init__(self, index: SearchIndex) -> None:
        self._index = index

    @staticmethod
    def _doc_type(source: SourceType | str) -> str:
        return f"{SourceType(source).value}_profile"

    async def register(self, profile: Profile) -> None:
        """Store a profile, updating name and type if the id is already known."""
        await self._index.upsert(profile.doc_type, profile.id, profile.to_document())

    async def ensure(self, profile: Profile) -> bool:
        """Store a profile unless one with the same id exists. Returns True if created."""
        return await self._index.create(profile.doc_type, profile.id, profile.to_document())

    async def get(self, source: SourceType | str, profile_id: str) -> Profile | None:
        doc = await self._index.get(self._doc_type(source), profile_id)
        if doc is None:
            return None
        return Profile.model_validate({**doc, "id": profile_id, "source": SourceType(source)})

    async def iter_profiles(self, source: SourceType | str) -> AsyncIterator[Profile]:
        """Stream all profiles of a source.

        A stored document that no longer validates is logged and skipped so
        one bad record cannot stop a sweep.
        """
        async for hit in self._index.scan(self._doc_type(source)):
            try:
                yield Profile.model_validate(
                    {**hit.get("_source", {}), "id": hit.get("_id"), "source": SourceType(source)}
                )
            except ValidationError as e:
                logger.warning("Skipping unreadable %s profile %s: %s", source, hit.get("_id"), e)

    async def list_profiles(self, source: SourceType | str) -> list[Profile]:
        """All profiles of a source, ordered by name."""
        profiles = [p async for p in self.iter_profiles(source)]
        return sorted(profiles, key=lambda p: p.name)


class PhotoRepository:
    """Canonical photos. Writes are insert-if-absent: a stored photo always wins."""

    def __init__(self, index: SearchIndex) -> None:
        self._index = index

    async def exists(self, photo_cls: type[Photo], photo_id: str) -> bool:
        return await self._index.exists(photo_cls.doc_type, photo_id)

    async def find(self, photo_cls: type[Photo], photo_id: str) -> Photo | None:
        doc = await self._index.get(photo_cls.doc_type, photo_id)
        return photo_cls.from_document(photo_id, doc) if doc is not None else None

    async def create(self, photo: Photo) -> bool:
        """Insert ``photo`` unless its id is already stored. Returns True if written."""
        return await self._index.create(photo.doc_type, photo.id, photo.to_document())
