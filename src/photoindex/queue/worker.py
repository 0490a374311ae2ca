"""arq worker — Task functions and worker settings.

Run with::

    arq photoindex.queue.worker.WorkerSettings

Startup builds one :class:`AppContext` (search index client, source
adapters, repositories, queue) and shutdown closes it; tasks receive it
through the arq ``ctx`` dict instead of module-level globals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from arq import Retry, cron, func
from arq.connections import RedisSettings

from photoindex.config.settings import Settings
from photoindex.importer.scheduler import RefreshScheduler
from photoindex.importer.worker import PhotoImporter
from photoindex.index.client import SearchIndex
from photoindex.index.repository import PhotoRepository, ProfileStore
from photoindex.index.schema import IndexSchema
from photoindex.observability.logging import setup_logging
from photoindex.queue.jobs import JobPolicy, JobQueue
from photoindex.sources.registry import SourceRegistry

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-wide collaborators shared by all tasks in a worker."""

    settings: Settings
    index: SearchIndex
    sources: SourceRegistry
    photos: PhotoRepository
    profiles: ProfileStore
    queue: JobQueue
    policy: JobPolicy

    def scheduler(self) -> RefreshScheduler:
        return RefreshScheduler(self.profiles, self.queue)


async def startup(ctx: dict[str, Any]) -> None:
    """Build the application context. A missing synonym file aborts startup."""
    settings: Settings = ctx.get("settings") or Settings()
    setup_logging(settings.observability)

    schema = IndexSchema(settings.index.synonyms_path)
    index = SearchIndex(
        schema,
        hosts=settings.index.hosts,
        prefix=settings.index.prefix,
        username=settings.index.username,
        password=settings.index.password,
        verify_certs=settings.index.verify_certs,
    )
    await index.initialize()

    sources = SourceRegistry.from_settings(settings.sources)
    await sources.initialize_all()

    ctx["app"] = AppContext(
        settings=settings,
        index=index,
        sources=sources,
        photos=PhotoRepository(index),
        profiles=ProfileStore(index),
        queue=JobQueue(ctx["redis"]),
        policy=JobPolicy.from_settings(settings.queue),
    )
    logger.info("Worker ready (sources: %s)", ", ".join(s.value for s in sources.sources) or "none")


async def shutdown(ctx: dict[str, Any]) -> None:
    app: AppContext | None = ctx.pop("app", None)
    if app is None:
        return
    await app.sources.shutdown_all()
    await app.index.shutdown()
    logger.info("Worker shutdown complete")


async def import_photos(
    ctx: dict[str, Any],
    source: str,
    owner_id: str,
    days_ago: int | None = None,
    profile_type: str | None = None,
) -> dict[str, Any]:
    """Import one owner's recent photos.

    A transient upstream failure is retried with exponential backoff until
    ``JobPolicy.max_tries`` is reached. Item-level failures never cause a
    retry; the next sweep covers them.
    """
    app: AppContext = ctx["app"]
    importer = PhotoImporter(app.sources.get(source), app.photos, app.profiles)
    options = {"profile_type": profile_type} if profile_type else {}

    report = await importer.perform(owner_id, days_ago, **options)

    if report.retryable:
        job_try = ctx.get("job_try", 1)
        if app.policy.should_retry(job_try):
            delay = app.policy.backoff(job_try)
            logger.info("Retrying %s import for %s in %.0fs (attempt %d)", source, owner_id, delay, job_try)
            raise Retry(defer=delay)
        logger.warning("Giving up %s import for %s after %d attempts", source, owner_id, job_try)

    return report.model_dump()


async def refresh_source(ctx: dict[str, Any], source: str) -> int:
    """Sweep all known profiles of one source."""
    app: AppContext = ctx["app"]
    return await app.scheduler().refresh(source)


async def refresh_all(ctx: dict[str, Any]) -> None:
    """Cron entry: sweep every configured source."""
    app: AppContext = ctx["app"]
    for source in app.sources.sources:
        try:
            await app.scheduler().refresh(source)
        except Exception:
            logger.warning("Refresh sweep for %s failed", source, exc_info=True)


def worker_settings(settings: Settings | None = None) -> dict[str, Any]:
    """arq worker configuration built from ``Settings``.

    The settings object travels to ``startup`` through ``ctx``; tasks only
    ever read the :class:`AppContext` built there.
    """
    settings = settings or Settings()
    policy = JobPolicy.from_settings(settings.queue)
    return {
        "functions": [
            func(import_photos, max_tries=policy.max_tries, timeout=policy.timeout, keep_result=0),
            func(refresh_source, max_tries=1, keep_result=0),
        ],
        "cron_jobs": [cron(refresh_all, hour=settings.queue.refresh_hours, minute=0, unique=True)],
        "on_startup": startup,
        "on_shutdown": shutdown,
        "redis_settings": RedisSettings.from_dsn(settings.queue.redis_url),
        "ctx": {"settings": settings},
        "keep_result": 0,
    }


WorkerSettings = worker_settings()
