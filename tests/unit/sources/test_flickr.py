"""Tests for the Flickr source adapter."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any

import httpx
import pytest

from photoindex.models.photo import FlickrPhoto
from photoindex.models.profile import ProfileType
from photoindex.sources.exceptions import (
    AuthenticationError,
    MalformedItemError,
    MalformedResponseError,
    SourceError,
    TransportError,
)
from photoindex.sources.flickr import MAXIMUM_PAGE, FlickrAdapter


def _ok(photos: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "photos": {"page": 1, "pages": 1, "perpage": MAXIMUM_PAGE, "total": len(photos), "photo": photos},
        "stat": "ok",
    }


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


async def _adapter(payload: dict[str, Any], seen: list[httpx.Request]) -> FlickrAdapter:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=payload)

    adapter = FlickrAdapter(api_key="test-key", transport=httpx.MockTransport(handler))
    await adapter.initialize()
    return adapter


class TestFlickrFetch:
    async def test_user_photostream(self, flickr_item: dict[str, Any], requests_seen: list[httpx.Request]) -> None:
        adapter = await _adapter(_ok([flickr_item]), requests_seen)

        items = await adapter.fetch_recent("61913304@N07")

        assert [i["id"] for i in items] == ["14582947236"]
        params = requests_seen[0].url.params
        assert params["method"] == "flickr.people.getPublicPhotos"
        assert params["user_id"] == "61913304@N07"
        assert params["per_page"] == str(MAXIMUM_PAGE)
        assert params["api_key"] == "test-key"
        assert "min_upload_date" not in params

    async def test_group_pool_with_since(self, requests_seen: list[httpx.Request]) -> None:
        adapter = await _adapter(_ok([]), requests_seen)

        await adapter.fetch_recent("1058319@N21", since=datetime(2014, 7, 1, tzinfo=UTC), profile_type="group")

        params = requests_seen[0].url.params
        assert params["method"] == "flickr.groups.pools.getPhotos"
        assert params["group_id"] == "1058319@N21"
        assert params["min_upload_date"] == "1404172800"

    async def test_invalid_key_is_authentication_failure(self, requests_seen: list[httpx.Request]) -> None:
        adapter = await _adapter({"stat": "fail", "code": 100, "message": "Invalid API Key"}, requests_seen)
        with pytest.raises(AuthenticationError):
            await adapter.fetch_recent("61913304@N07")

    async def test_unavailable_is_transient(self, requests_seen: list[httpx.Request]) -> None:
        adapter = await _adapter({"stat": "fail", "code": 105, "message": "Service unavailable"}, requests_seen)
        with pytest.raises(TransportError):
            await adapter.fetch_recent("61913304@N07")

    async def test_unknown_user_is_source_error(self, requests_seen: list[httpx.Request]) -> None:
        adapter = await _adapter({"stat": "fail", "code": 1, "message": "User not found"}, requests_seen)
        with pytest.raises(SourceError, match="User not found"):
            await adapter.fetch_recent("nobody")

    async def test_missing_photo_list_is_malformed(self, requests_seen: list[httpx.Request]) -> None:
        adapter = await _adapter({"stat": "ok"}, requests_seen)
        with pytest.raises(MalformedResponseError):
            await adapter.fetch_recent("61913304@N07")


class TestFlickrMapping:
    def test_to_photo(self, flickr_item: dict[str, Any]) -> None:
        photo = FlickrAdapter(api_key="k").to_photo(flickr_item, "61913304@N07", profile_type="user")
        assert isinstance(photo, FlickrPhoto)
        assert photo.title == "Fourth of July fireworks"
        assert photo.description == "Fireworks over the National Mall"
        assert photo.tags == ["fireworks", "independenceday", "dc"]
        assert photo.taken_at == date(2014, 7, 4)
        assert photo.popularity == 1234
        assert photo.profile_type == ProfileType.USER
        assert photo.url == "https://www.flickr.com/photos/61913304@N07/14582947236/"
        assert photo.thumbnail_url.endswith("_q.jpg")

    def test_untitled_photo_is_malformed(self, flickr_item: dict[str, Any]) -> None:
        flickr_item["title"] = ""
        with pytest.raises(MalformedItemError):
            FlickrAdapter(api_key="k").to_photo(flickr_item, "61913304@N07")

    def test_bad_date_is_malformed(self, flickr_item: dict[str, Any]) -> None:
        flickr_item["datetaken"] = "sometime in July"
        with pytest.raises(MalformedItemError):
            FlickrAdapter(api_key="k").to_photo(flickr_item, "61913304@N07")
