"""Base source adapter — Abstract interface for upstream photo APIs.

Every upstream service must implement this interface to feed the import
pipeline. The adapter is responsible for:
  1. Fetching one maximal page of recent items for an owner
  2. Validating a raw item and mapping it to a canonical ``Photo``

Adapters fail the whole fetch on transport or auth problems. Recovering
from a single bad item is the importer's job, not the adapter's.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

import httpx

from photoindex.models.photo import Photo
from photoindex.models.profile import SourceType
from photoindex.sources.exceptions import (
    AuthenticationError,
    ConfigurationError,
    MalformedResponseError,
    SourceError,
    TransportError,
)

logger = logging.getLogger(__name__)


class SourceAdapter(ABC):
    """Abstract base class for upstream photo API connectors.

    All adapters must implement:
      - fetch_recent(): Return the most recent raw items for an owner
      - to_photo(): Validate and map one raw item to a canonical record

    The HTTP client is created in ``initialize()`` and closed in
    ``shutdown()``; both are driven by the worker's startup sequence.

    Args:
        base_url: API base URL.
        timeout: HTTP request timeout in seconds.
        **client_kwargs: Extra keyword arguments forwarded to ``httpx.AsyncClient``.
    """

    def __init__(self, base_url: str, timeout: float = 30.0, **client_kwargs: Any) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client_kwargs = client_kwargs
        self._client: httpx.AsyncClient | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique adapter name (e.g., 'instagram', 'flickr')."""

    @property
    @abstractmethod
    def source_type(self) -> SourceType:
        """The source this adapter imports from."""

    async def initialize(self) -> None:
        """Validate configuration and open the HTTP client."""
        self._check_config()
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
            **self._client_kwargs,
        )
        logger.info("%s adapter initialized (%s)", self.name, self._base_url)

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @abstractmethod
    async def fetch_recent(self, owner_id: str, since: datetime | None = None, **options: Any) -> list[dict[str, Any]]:
        """Fetch one maximal page of recent raw items for an owner.

        Args:
            owner_id: Source-scoped profile id.
            since: Only return items newer than this instant. ``None``
                requests the unfiltered maximum batch.
            **options: Source-specific options (e.g. Flickr ``profile_type``).

        Returns:
            Raw item dicts, newest first as the upstream returns them.

        Raises:
            TransportError: Network failure, timeout or upstream 5xx.
            AuthenticationError: Credentials rejected.
            MalformedResponseError: The response envelope was not understood.
        """

    @abstractmethod
    def to_photo(self, raw: dict[str, Any], owner_id: str, **options: Any) -> Photo:
        """Validate one raw item and map it to a canonical record.

        Raises:
            MalformedItemError: The item does not have the expected shape.
        """

    def item_id(self, raw: dict[str, Any]) -> str | None:
        """Return the source-native id of a raw item without full validation."""
        value = raw.get("id") if isinstance(raw, dict) else None
        return str(value) if value not in (None, "") else None

    def _check_config(self) -> None:
        """Raise ``ConfigurationError`` if required credentials are missing."""

    def _error_from_response(self, response: httpx.Response) -> SourceError:
        """Build the exception for a 4xx response not covered by the generic checks."""
        return SourceError(f"{self.name} request failed with HTTP {response.status_code}")

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        """GET ``path`` and decode the JSON body, classifying failures."""
        if self._client is None:
            raise ConfigurationError(f"{self.name} client not initialized.")

        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"{self.name} request failed: {e}") from e

        if response.status_code in (401, 403):
            raise AuthenticationError(f"{self.name} rejected credentials (HTTP {response.status_code})")
        if response.status_code == 429 or response.status_code >= 500:
            raise TransportError(f"{self.name} unavailable (HTTP {response.status_code})")
        if response.is_error:
            raise self._error_from_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"{self.name} returned a non-JSON body") from e
