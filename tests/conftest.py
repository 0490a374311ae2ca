"""Shared test fixtures and configuration."""

from __future__ import annotations

import copy
from collections import defaultdict
from collections.abc import AsyncIterator
from typing import Any

import pytest

from photoindex.config.settings import Settings
from photoindex.index.repository import PhotoRepository, ProfileStore


class InMemorySearchIndex:
    """Stand-in for ``SearchIndex`` keeping documents in dicts, keyed by doc type."""

    def __init__(self) -> None:
        self.docs: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)

    async def exists(self, doc_type: str, doc_id: str) -> bool:
        return doc_id in self.docs[doc_type]

    async def get(self, doc_type: str, doc_id: str) -> dict[str, Any] | None:
        doc = self.docs[doc_type].get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def create(self, doc_type: str, doc_id: str, body: dict[str, Any]) -> bool:
        if doc_id in self.docs[doc_type]:
            return False
        self.docs[doc_type][doc_id] = copy.deepcopy(body)
        return True

    async def upsert(self, doc_type: str, doc_id: str, body: dict[str, Any]) -> None:
        self.docs[doc_type][doc_id] = copy.deepcopy(body)

    async def scan(self, doc_type: str, query: dict[str, Any] | None = None) -> AsyncIterator[dict[str, Any]]:
        for doc_id, source in list(self.docs[doc_type].items()):
            yield {"_id": doc_id, "_source": copy.deepcopy(source)}


class RecordingQueue:
    """Stand-in for ``JobQueue`` that records enqueues and dedups by owner."""

    def __init__(self) -> None:
        self.jobs: list[dict[str, Any]] = []
        self.pending: set[tuple[str, str]] = set()

    async def enqueue_import(
        self,
        source: Any,
        owner_id: str,
        days_ago: int | None = None,
        profile_type: Any = None,
    ) -> bool:
        key = (str(source), owner_id)
        if key in self.pending:
            return False
        self.pending.add(key)
        self.jobs.append(
            {"source": str(source), "owner_id": owner_id, "days_ago": days_ago, "profile_type": profile_type}
        )
        return True


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        sources={"instagram": {"access_token": "test-token"}, "flickr": {"api_key": "test-key"}},
    )


@pytest.fixture
def memory_index() -> InMemorySearchIndex:
    return InMemorySearchIndex()


@pytest.fixture
def photos(memory_index: InMemorySearchIndex) -> PhotoRepository:
    return PhotoRepository(memory_index)  # type: ignore[arg-type]


@pytest.fixture
def profiles(memory_index: InMemorySearchIndex) -> ProfileStore:
    return ProfileStore(memory_index)  # type: ignore[arg-type]


@pytest.fixture
def recording_queue() -> RecordingQueue:
    return RecordingQueue()


# ── Raw upstream payloads ──


def instagram_media(
    media_id: str,
    username: str,
    tags: list[str],
    caption: Any,
    created_time: str,
    likes: int,
    comments: int,
    link: str,
    thumbnail: str,
) -> dict[str, Any]:
    return {
        "id": media_id,
        "user": {"username": username},
        "tags": tags,
        "caption": caption,
        "created_time": created_time,
        "likes": {"count": likes},
        "comments": {"count": comments},
        "link": link,
        "images": {"thumbnail": {"url": thumbnail}},
    }


@pytest.fixture
def make_instagram_media() -> Any:
    return instagram_media


@pytest.fixture
def instagram_items() -> list[dict[str, Any]]:
    """Two well-formed Instagram media items."""
    return [
        instagram_media(
            media_id="123456",
            username="user1",
            tags=["tag1", "tag2"],
            caption={"text": "first photo"},
            created_time="1404920005",
            likes=3000,
            comments=300,
            link="http://photo1",
            thumbnail="http://photo_thumbnail1",
        ),
        instagram_media(
            media_id="7890",
            username="user2",
            tags=["other", "stuff"],
            caption={"text": "second photo"},
            created_time="1406008375",
            likes=2000,
            comments=200,
            link="http://photo2",
            thumbnail="http://photo_thumbnail2",
        ),
    ]


@pytest.fixture
def flickr_item() -> dict[str, Any]:
    """One photo as returned by flickr.people.getPublicPhotos with our extras."""
    return {
        "id": "14582947236",
        "owner": "61913304@N07",
        "secret": "c4c7a4a2b1",
        "server": "3915",
        "farm": 4,
        "title": "Fourth of July fireworks",
        "ispublic": 1,
        "description": {"_content": "Fireworks over the National Mall"},
        "dateupload": "1404920005",
        "datetaken": "2014-07-04 21:15:02",
        "datetakengranularity": "0",
        "ownername": "commercegov",
        "views": "1234",
        "tags": "fireworks independenceday dc",
        "url_q": "https://farm4.staticflickr.com/3915/14582947236_c4c7a4a2b1_q.jpg",
    }
