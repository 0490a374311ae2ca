"""Flickr adapter — Public photos of a user or a group pool via the Flickr REST API.

API reference:
  GET /services/rest
    ?method=flickr.people.getPublicPhotos   (user_id=<nsid>)
    ?method=flickr.groups.pools.getPhotos   (group_id=<nsid>)
    &per_page=500&extras=...&min_upload_date=<unix>
    &format=json&nojsoncallback=1

Flickr answers HTTP 200 even on failure and signals errors through
``stat``/``code`` in the body.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ValidationError

from photoindex.models.photo import FlickrPhoto
from photoindex.models.profile import ProfileType, SourceType
from photoindex.models.raw import FlickrMedia
from photoindex.sources.base import SourceAdapter
from photoindex.sources.exceptions import (
    AuthenticationError,
    ConfigurationError,
    MalformedItemError,
    MalformedResponseError,
    SourceError,
    TransportError,
)

MAXIMUM_PAGE = 500
EXTRAS = "description,date_upload,date_taken,owner_name,tags,views,url_q"

_METHODS: dict[ProfileType, tuple[str, str]] = {
    ProfileType.USER: ("flickr.people.getPublicPhotos", "user_id"),
    ProfileType.GROUP: ("flickr.groups.pools.getPhotos", "group_id"),
}

# 98 invalid auth token, 99 insufficient permissions, 100 invalid API key
_AUTH_ERROR_CODES = {98, 99, 100}
# 105 service currently unavailable
_TRANSIENT_ERROR_CODES = {105}


class FlickrAdapter(SourceAdapter):
    """Source adapter for Flickr photostreams and group pools.

    Args:
        api_key: Flickr API key.
        base_url: Flickr REST endpoint.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.flickr.com/services/rest",
        timeout: float = 30.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url, timeout=timeout, **kwargs)
        self._api_key = api_key

    @property
    def name(self) -> str:
        return "flickr"

    @property
    def source_type(self) -> SourceType:
        return SourceType.FLICKR

    def _check_config(self) -> None:
        if not self._api_key:
            raise ConfigurationError("Flickr API key is required. Set PHOTOINDEX_SOURCES__FLICKR__API_KEY.")

    async def fetch_recent(self, owner_id: str, since: datetime | None = None, **options: Any) -> list[dict[str, Any]]:
        profile_type = ProfileType(options.get("profile_type") or ProfileType.USER)
        method, owner_param = _METHODS[profile_type]

        params: dict[str, Any] = {
            "method": method,
            "api_key": self._api_key,
            owner_param: owner_id,
            "per_page": MAXIMUM_PAGE,
            "extras": EXTRAS,
            "format": "json",
            "nojsoncallback": 1,
        }
        if since is not None:
            params["min_upload_date"] = int(since.timestamp())

        payload = await self._get_json("", params)
        if not isinstance(payload, dict):
            raise MalformedResponseError("Flickr response is not an object")
        if payload.get("stat") != "ok":
            raise self._error_from_payload(payload)

        photos = payload.get("photos", {}).get("photo") if isinstance(payload.get("photos"), dict) else None
        if not isinstance(photos, list):
            raise MalformedResponseError("Flickr response has no 'photos.photo' list")
        return photos

    def to_photo(self, raw: dict[str, Any], owner_id: str, **options: Any) -> FlickrPhoto:
        profile_type = ProfileType(options.get("profile_type") or ProfileType.USER)
        try:
            return FlickrMedia.model_validate(raw).to_photo(owner_id, profile_type)
        except ValidationError as e:
            raise MalformedItemError(self.item_id(raw), str(e)) from e

    @staticmethod
    def _error_from_payload(payload: dict[str, Any]) -> SourceError:
        code = payload.get("code")
        message = payload.get("message", "unknown error")
        if code in _AUTH_ERROR_CODES:
            return AuthenticationError(f"Flickr rejected credentials: {message}")
        if code in _TRANSIENT_ERROR_CODES:
            return TransportError(f"Flickr unavailable: {message}")
        return SourceError(f"Flickr error {code}: {message}")
