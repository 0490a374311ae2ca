"""Tests for the refresh scheduler fan-out."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from photoindex.importer.scheduler import DAYS_BACK_TO_CHECK_FOR_UPDATES, RefreshScheduler
from photoindex.index.repository import ProfileStore
from photoindex.models.profile import Profile, ProfileType, SourceType


@pytest.fixture
def scheduler(profiles: ProfileStore, recording_queue: Any) -> RefreshScheduler:
    return RefreshScheduler(profiles, recording_queue)


class TestRefresh:
    async def test_enqueues_one_job_per_profile(
        self, scheduler: RefreshScheduler, profiles: ProfileStore, recording_queue: Any
    ) -> None:
        await profiles.register(Profile(id="123", name="a", source=SourceType.INSTAGRAM))
        await profiles.register(Profile(id="456", name="b", source=SourceType.INSTAGRAM))

        count = await scheduler.refresh(SourceType.INSTAGRAM)

        assert count == 2
        assert sorted(job["owner_id"] for job in recording_queue.jobs) == ["123", "456"]
        assert all(job["days_ago"] == DAYS_BACK_TO_CHECK_FOR_UPDATES for job in recording_queue.jobs)
        assert all(job["source"] == "instagram" for job in recording_queue.jobs)

    async def test_only_profiles_of_the_source(
        self, scheduler: RefreshScheduler, profiles: ProfileStore, recording_queue: Any
    ) -> None:
        await profiles.register(Profile(id="123", name="a", source=SourceType.INSTAGRAM))
        await profiles.register(Profile(id="61913304@N07", name="commercegov", source=SourceType.FLICKR))

        await scheduler.refresh("flickr")

        assert [job["owner_id"] for job in recording_queue.jobs] == ["61913304@N07"]
        assert recording_queue.jobs[0]["profile_type"] == ProfileType.USER

    async def test_overlapping_sweep_does_not_pile_up(
        self, scheduler: RefreshScheduler, profiles: ProfileStore, recording_queue: Any
    ) -> None:
        await profiles.register(Profile(id="123", name="a", source=SourceType.INSTAGRAM))

        assert await scheduler.refresh(SourceType.INSTAGRAM) == 1
        assert await scheduler.refresh(SourceType.INSTAGRAM) == 0
        assert len(recording_queue.jobs) == 1

    async def test_enqueue_failure_does_not_abort_sweep(
        self, profiles: ProfileStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        class FailingQueue:
            def __init__(self) -> None:
                self.owners: list[str] = []

            async def enqueue_import(self, source: Any, owner_id: str, **kwargs: Any) -> bool:
                if owner_id == "bad":
                    raise ConnectionError("redis went away")
                self.owners.append(owner_id)
                return True

        queue = FailingQueue()
        for pid in ("bad", "good"):
            await profiles.register(Profile(id=pid, name=pid, source=SourceType.INSTAGRAM))

        with caplog.at_level(logging.WARNING):
            count = await RefreshScheduler(profiles, queue).refresh(SourceType.INSTAGRAM)  # type: ignore[arg-type]

        assert count == 1
        assert queue.owners == ["good"]
        assert any("bad" in r.getMessage() for r in caplog.records)

    async def test_unreadable_profile_is_skipped(
        self, scheduler: RefreshScheduler, memory_index: Any, profiles: ProfileStore, recording_queue: Any
    ) -> None:
        memory_index.docs["instagram_profile"]["broken"] = {"name": "", "profile_type": "robot"}
        await profiles.register(Profile(id="123", name="a", source=SourceType.INSTAGRAM))

        assert await scheduler.refresh(SourceType.INSTAGRAM) == 1
        assert [job["owner_id"] for job in recording_queue.jobs] == ["123"]


class TestRegisterProfile:
    async def test_stores_profile_and_enqueues_full_import(
        self, scheduler: RefreshScheduler, profiles: ProfileStore, recording_queue: Any
    ) -> None:
        profile = Profile(
            id="61913304@N07", name="commercegov", profile_type=ProfileType.USER, source=SourceType.FLICKR
        )

        assert await scheduler.register_profile(profile)

        assert await profiles.get(SourceType.FLICKR, "61913304@N07") == profile
        assert recording_queue.jobs == [
            {"source": "flickr", "owner_id": "61913304@N07", "days_ago": None, "profile_type": ProfileType.USER}
        ]

    async def test_reregistering_updates_name(self, scheduler: RefreshScheduler, profiles: ProfileStore) -> None:
        await scheduler.register_profile(Profile(id="1", name="old", source=SourceType.FLICKR))
        await scheduler.register_profile(
            Profile(id="1", name="new", profile_type=ProfileType.GROUP, source=SourceType.FLICKR)
        )

        stored = await profiles.get(SourceType.FLICKR, "1")
        assert stored is not None
        assert stored.name == "new"
        assert stored.profile_type == ProfileType.GROUP
