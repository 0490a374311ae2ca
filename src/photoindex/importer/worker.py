"""Photo importer — Fetch, map and store one owner's recent photos.

``PhotoImporter.perform`` is the unit of work behind every import job.
Failure handling is layered:

- the upstream fetch failing abandons the whole batch (logged, left to
  the job queue's retry policy and the next scheduled sweep);
- an item that is already indexed is skipped silently;
- an item that fails validation or storage is logged and skipped, the
  rest of the batch carries on.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from photoindex.index.exceptions import SearchIndexError
from photoindex.index.repository import PhotoRepository, ProfileStore
from photoindex.models.photo import Photo, photo_class_for
from photoindex.models.profile import Profile, ProfileType
from photoindex.sources.base import SourceAdapter
from photoindex.sources.exceptions import MalformedItemError

logger = logging.getLogger(__name__)


class ImportReport(BaseModel):
    """Counters from one ``perform`` call, for logging and retry decisions."""

    model_config = {"arbitrary_types_allowed": True}

    owner_id: str
    source: str
    fetched: int = 0
    created: int = 0
    skipped: int = 0
    failed: int = 0
    fetch_error: Exception | None = Field(default=None, exclude=True)

    @property
    def fetch_failed(self) -> bool:
        return self.fetch_error is not None

    @property
    def retryable(self) -> bool:
        """True when the fetch failed in a way worth retrying (network, upstream 5xx)."""
        return bool(getattr(self.fetch_error, "transient", False))


def since_from_days_ago(days_ago: int | None, now: datetime | None = None) -> datetime | None:
    """Convert a day-count lookback into the instant to fetch from."""
    if days_ago is None:
        return None
    return (now or datetime.now(UTC)) - timedelta(days=days_ago)


class PhotoImporter:
    """Imports one owner's recent photos from a single source.

    Args:
        adapter: Initialized source adapter.
        photos: Repository the canonical photos are written to.
        profiles: Profile store; the owner's profile is created on the first
            successful import if it was never registered.
    """

    def __init__(self, adapter: SourceAdapter, photos: PhotoRepository, profiles: ProfileStore | None = None) -> None:
        self._adapter = adapter
        self._photos = photos
        self._profiles = profiles
        self._photo_cls: type[Photo] = photo_class_for(adapter.source_type)

    async def perform(self, owner_id: str, days_ago: int | None = None, **options: Any) -> ImportReport:
        """Import the most recent photos of ``owner_id``.

        Never raises for upstream or per-item problems; the index state is
        the result that matters.

        Args:
            owner_id: Source-scoped profile id.
            days_ago: Only fetch photos from the last ``days_ago`` days.
                ``None`` fetches the largest single page available.
            **options: Source-specific options (e.g. Flickr ``profile_type``).
        """
        report = ImportReport(owner_id=owner_id, source=self._adapter.name)
        since = since_from_days_ago(days_ago)

        try:
            items = await self._adapter.fetch_recent(owner_id, since=since, **options)
        except Exception as e:
            logger.warning("Failed to fetch %s photos for %s: %s", self._adapter.name, owner_id, e)
            report.fetch_error = e
            return report

        report.fetched = len(items)
        first_photo: Photo | None = None

        for raw in items:
            item_id = self._adapter.item_id(raw)
            try:
                if item_id and await self._photos.exists(self._photo_cls, item_id):
                    report.skipped += 1
                    continue

                photo = self._adapter.to_photo(raw, owner_id, **options)
                if await self._photos.create(photo):
                    report.created += 1
                    first_photo = first_photo or photo
                else:
                    report.skipped += 1
            except (MalformedItemError, ValidationError, SearchIndexError) as e:
                report.failed += 1
                logger.warning(
                    "Skipping %s photo %s of %s: %s",
                    self._adapter.name,
                    item_id or "<no id>",
                    owner_id,
                    e,
                )
            except Exception:
                report.failed += 1
                logger.warning(
                    "Unexpected error importing %s photo %s of %s",
                    self._adapter.name,
                    item_id or "<no id>",
                    owner_id,
                    exc_info=True,
                )

        if first_photo is not None:
            await self._ensure_profile(owner_id, first_photo, options)

        logger.info(
            "Imported %s photos for %s: fetched=%d created=%d skipped=%d failed=%d",
            self._adapter.name,
            owner_id,
            report.fetched,
            report.created,
            report.skipped,
            report.failed,
        )
        return report

    async def _ensure_profile(self, owner_id: str, photo: Photo, options: dict[str, Any]) -> None:
        if self._profiles is None:
            return
        profile = Profile(
            id=owner_id,
            name=getattr(photo, "username", None) or owner_id,
            profile_type=ProfileType(options.get("profile_type") or ProfileType.USER),
            source=self._adapter.source_type,
        )
        try:
            await self._profiles.ensure(profile)
        except SearchIndexError as e:
            logger.warning("Could not record %s profile %s: %s", self._adapter.name, owner_id, e)
