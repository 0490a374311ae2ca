"""Instagram adapter — Recent media for a user via the Instagram API.

API reference:
  GET /users/<user-id>/media/recent
    ?access_token=<token>
    &count=<n>            (-1 asks for the largest page the API allows)
    &min_timestamp=<unix>
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError

from photoindex.models.photo import InstagramPhoto
from photoindex.models.profile import SourceType
from photoindex.models.raw import InstagramMedia
from photoindex.sources.base import SourceAdapter
from photoindex.sources.exceptions import (
    AuthenticationError,
    ConfigurationError,
    MalformedItemError,
    MalformedResponseError,
    SourceError,
)

MAXIMUM_PAGE = -1


class InstagramAdapter(SourceAdapter):
    """Source adapter for Instagram user media.

    Args:
        access_token: OAuth access token.
        base_url: Instagram API base URL.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        access_token: str = "",
        base_url: str = "https://api.instagram.com/v1",
        timeout: float = 30.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url, timeout=timeout, **kwargs)
        self._access_token = access_token

    @property
    def name(self) -> str:
        return "instagram"

    @property
    def source_type(self) -> SourceType:
        return SourceType.INSTAGRAM

    def _check_config(self) -> None:
        if not self._access_token:
            raise ConfigurationError(
                "Instagram access token is required. Set PHOTOINDEX_SOURCES__INSTAGRAM__ACCESS_TOKEN."
            )

    async def fetch_recent(self, owner_id: str, since: datetime | None = None, **options: Any) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"access_token": self._access_token, "count": MAXIMUM_PAGE}
        if since is not None:
            params["min_timestamp"] = int(since.timestamp())

        payload = await self._get_json(f"/users/{owner_id}/media/recent", params)
        self._raise_for_meta(payload)

        items = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise MalformedResponseError("Instagram response has no 'data' list")
        return items

    def to_photo(self, raw: dict[str, Any], owner_id: str, **options: Any) -> InstagramPhoto:
        try:
            return InstagramMedia.model_validate(raw).to_photo(owner_id)
        except ValidationError as e:
            raise MalformedItemError(self.item_id(raw), str(e)) from e

    def _error_from_response(self, response: httpx.Response) -> SourceError:
        # Instagram reports OAuth failures as HTTP 400 with an error_type in meta
        try:
            self._raise_for_meta(response.json())
        except ValueError:
            pass
        return super()._error_from_response(response)

    @staticmethod
    def _raise_for_meta(payload: Any) -> None:
        meta = payload.get("meta") if isinstance(payload, dict) else None
        if not isinstance(meta, dict) or meta.get("code", 200) == 200:
            return
        error_type = str(meta.get("error_type", ""))
        message = meta.get("error_message") or error_type or "unknown error"
        if error_type.startswith("OAuth"):
            raise AuthenticationError(f"Instagram rejected credentials: {message}")
        raise SourceError(f"Instagram error {meta.get('code')}: {message}")
