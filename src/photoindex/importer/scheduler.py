"""Refresh scheduler — Periodic fan-out of import jobs over known profiles."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from photoindex.index.repository import ProfileStore
from photoindex.models.profile import Profile, SourceType

if TYPE_CHECKING:
    from photoindex.queue.jobs import JobQueue

logger = logging.getLogger(__name__)

# Lookback for routine sweeps; wide enough to overlap the previous sweep.
DAYS_BACK_TO_CHECK_FOR_UPDATES = 7


class RefreshScheduler:
    """Enqueues one import job per known profile of a source.

    Profiles are streamed from the index, so a sweep never holds the whole
    profile set in memory. Enqueueing is fire-and-forget; the queue's
    per-owner uniqueness keeps overlapping sweeps from piling up jobs.

    Args:
        profiles: Profile store to enumerate.
        queue: Job queue import jobs are sent to.
    """

    def __init__(self, profiles: ProfileStore, queue: JobQueue) -> None:
        self._profiles = profiles
        self._queue = queue

    async def refresh(self, source: SourceType | str) -> int:
        """Enqueue a bounded-lookback import for every profile of ``source``.

        Returns:
            Number of jobs actually enqueued (duplicates of jobs already
            queued or running are not counted).
        """
        source = SourceType(source)
        enqueued = 0
        seen = 0
        async for profile in self._profiles.iter_profiles(source):
            seen += 1
            try:
                if await self._queue.enqueue_import(
                    source,
                    profile.id,
                    days_ago=DAYS_BACK_TO_CHECK_FOR_UPDATES,
                    profile_type=profile.profile_type,
                ):
                    enqueued += 1
            except Exception:
                logger.warning("Failed to enqueue %s refresh for %s", source, profile.id, exc_info=True)

        logger.info("Refresh sweep for %s: %d profiles, %d jobs enqueued", source, seen, enqueued)
        return enqueued

    async def register_profile(self, profile: Profile) -> bool:
        """Store a profile and enqueue a full import of its photos.

        Returns:
            True if the import job was enqueued, False if one was already pending.
        """
        await self._profiles.register(profile)
        return await self._queue.enqueue_import(profile.source, profile.id, profile_type=profile.profile_type)
