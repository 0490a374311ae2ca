"""Job definitions and enqueueing for import work.

Uniqueness and retry are explicit configuration rather than decorators:

- every import job gets the id ``import:<source>:<owner_id>``; arq refuses
  to enqueue a job whose id is already queued or running, so one owner is
  never imported by two workers at once;
- transient fetch failures are retried up to ``JobPolicy.max_tries`` times
  with exponential backoff (see ``photoindex.queue.worker.import_photos``).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from arq import ArqRedis, create_pool
from arq.connections import RedisSettings
from pydantic import BaseModel, Field

from photoindex.models.profile import ProfileType, SourceType

if TYPE_CHECKING:
    from photoindex.config.settings import QueueSettings

logger = logging.getLogger(__name__)

IMPORT_TASK = "import_photos"
REFRESH_TASK = "refresh_source"


def import_job_id(source: SourceType | str, owner_id: str) -> str:
    """Uniqueness key for an owner's import job."""
    return f"import:{SourceType(source).value}:{owner_id}"


def refresh_job_id(source: SourceType | str) -> str:
    return f"refresh:{SourceType(source).value}"


class JobPolicy(BaseModel):
    """Retry and timeout policy attached to import jobs."""

    max_tries: int = Field(default=5, ge=1, description="Attempts per job, including the first")
    backoff_base: float = Field(default=30.0, gt=0, description="Delay before the first retry in seconds")
    backoff_max: float = Field(default=3600.0, gt=0, description="Upper bound for any retry delay in seconds")
    timeout: int = Field(default=600, gt=0, description="Hard timeout per job in seconds")

    @classmethod
    def from_settings(cls, settings: QueueSettings) -> JobPolicy:
        return cls(
            max_tries=settings.max_tries,
            backoff_base=settings.backoff_base,
            backoff_max=settings.backoff_max,
            timeout=settings.job_timeout,
        )

    def backoff(self, job_try: int) -> float:
        """Delay before retrying after attempt number ``job_try`` (1-based)."""
        return min(self.backoff_base * 2 ** (job_try - 1), self.backoff_max)

    def should_retry(self, job_try: int) -> bool:
        return job_try < self.max_tries


class JobQueue:
    """Enqueues import and refresh jobs on an arq Redis pool.

    Args:
        redis: Connected ``ArqRedis`` pool.
    """

    def __init__(self, redis: ArqRedis) -> None:
        self._redis = redis

    @classmethod
    async def connect(cls, settings: QueueSettings) -> JobQueue:
        return cls(await create_pool(RedisSettings.from_dsn(settings.redis_url)))

    async def close(self) -> None:
        await self._redis.aclose()

    async def enqueue_import(
        self,
        source: SourceType | str,
        owner_id: str,
        days_ago: int | None = None,
        profile_type: ProfileType | str | None = None,
    ) -> bool:
        """Enqueue an import for one owner.

        Returns:
            True if enqueued, False if a job for this owner is already
            queued or running.
        """
        source = SourceType(source)
        job = await self._redis.enqueue_job(
            IMPORT_TASK,
            source.value,
            owner_id,
            days_ago,
            ProfileType(profile_type).value if profile_type else None,
            _job_id=import_job_id(source, owner_id),
        )
        if job is None:
            logger.debug("Import for %s %s already pending, not enqueued", source, owner_id)
            return False
        return True

    async def enqueue_refresh(self, source: SourceType | str) -> bool:
        job = await self._redis.enqueue_job(REFRESH_TASK, SourceType(source).value, _job_id=refresh_job_id(source))
        return job is not None
