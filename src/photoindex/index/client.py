"""Search index client — Async OpenSearch access for every document type.

One ``SearchIndex`` is built during worker startup and passed to the
components that need it. Each document type lives in its own index named
``<prefix>-<doc_type>`` (e.g. ``photoindex-flickr_photo``).
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable
from typing import Any

from opensearchpy import AsyncOpenSearch
from opensearchpy.exceptions import ConflictError, NotFoundError
from opensearchpy.helpers import async_scan

from photoindex.index.exceptions import IndexConnectionError, QueryError
from photoindex.index.schema import IndexSchema

logger = logging.getLogger(__name__)


class SearchIndex:
    """Thin async wrapper over ``AsyncOpenSearch``.

    Provides the four engine operations the pipeline relies on: index
    creation from :class:`IndexSchema`, insert-if-absent by id,
    existence/find by id, and raw search. A forward-only ``scan`` streams
    large result sets without loading them into memory.

    Args:
        schema: Index schema used by ``create_index``.
        hosts: List of search engine node URLs.
        prefix: Prefix for every index name.
        username: Optional HTTP basic-auth username.
        password: Optional HTTP basic-auth password.
        verify_certs: Whether to verify TLS certificates.
        client: Pre-built client (mainly for tests); skips connection setup.
        **kwargs: Additional keyword arguments forwarded to ``AsyncOpenSearch``.
    """

    def __init__(
        self,
        schema: IndexSchema,
        hosts: list[str] | None = None,
        prefix: str = "photoindex",
        username: str | None = None,
        password: str | None = None,
        verify_certs: bool = True,
        client: Any = None,
        **kwargs: Any,
    ) -> None:
        self.schema = schema
        self._hosts = hosts or ["http://localhost:9200"]
        self._prefix = prefix
        self._username = username
        self._password = password
        self._verify_certs = verify_certs
        self._extra_kwargs = kwargs
        self._client: Any = client

    async def initialize(self) -> None:
        """Create and verify the ``AsyncOpenSearch`` client."""
        if self._client is not None:
            return

        client_kwargs: dict[str, Any] = {
            "hosts": self._hosts,
            "verify_certs": self._verify_certs,
            "ssl_show_warn": False,
        }
        if self._username and self._password:
            client_kwargs["http_auth"] = (self._username, self._password)
        client_kwargs.update(self._extra_kwargs)

        try:
            self._client = AsyncOpenSearch(**client_kwargs)
            info = await self._client.info()
            version = info.get("version", {}).get("number", "unknown")
            cluster = info.get("cluster_name", "unknown")
            logger.info("Connected to search cluster: %s (v%s)", cluster, version)
        except Exception as e:
            raise IndexConnectionError(f"Failed to connect to search engine: {e}") from e

    async def shutdown(self) -> None:
        """Close the client."""
        if self._client:
            await self._client.close()
            self._client = None

    def index_name(self, doc_type: str) -> str:
        return f"{self._prefix}-{doc_type}"

    @property
    def client(self) -> Any:
        if self._client is None:
            raise IndexConnectionError("Search index client not initialized.")
        return self._client

    # ── Index management ─────────────────────────────────────────────────

    async def create_index(self, doc_type: str) -> bool:
        """Create the index for ``doc_type`` with the full schema.

        Returns:
            True if the index was created, False if it already existed.
        """
        name = self.index_name(doc_type)
        body = self.schema.body(doc_type)
        try:
            if await self.client.indices.exists(index=name):
                return False
            await self.client.indices.create(index=name, body=body)
        except Exception as e:
            raise QueryError(f"Failed to create index {name}: {e}") from e
        logger.info("Created index %s", name)
        return True

    async def delete_index(self, doc_type: str) -> None:
        name = self.index_name(doc_type)
        try:
            await self.client.indices.delete(index=name, ignore_unavailable=True)
        except Exception as e:
            raise QueryError(f"Failed to delete index {name}: {e}") from e

    async def refresh(self, doc_type: str) -> None:
        """Make recent writes visible to search."""
        try:
            await self.client.indices.refresh(index=self.index_name(doc_type))
        except Exception as e:
            raise QueryError(f"Failed to refresh index: {e}") from e

    # ── Documents ────────────────────────────────────────────────────────

    async def exists(self, doc_type: str, doc_id: str) -> bool:
        try:
            return bool(await self.client.exists(index=self.index_name(doc_type), id=doc_id))
        except Exception as e:
            raise QueryError(f"Failed to check document {doc_id}: {e}") from e

    async def get(self, doc_type: str, doc_id: str) -> dict[str, Any] | None:
        """Return the stored ``_source`` of a document, or None if absent."""
        try:
            response = await self.client.get(index=self.index_name(doc_type), id=doc_id)
        except NotFoundError:
            return None
        except Exception as e:
            raise QueryError(f"Failed to fetch document {doc_id}: {e}") from e
        return dict(response.get("_source", {}))

    async def create(self, doc_type: str, doc_id: str, body: dict[str, Any]) -> bool:
        """Insert a document only if no document with ``doc_id`` exists.

        Returns:
            True if written, False if a document with this id was already
            stored. The stored document is never modified.
        """
        try:
            await self.client.create(index=self.index_name(doc_type), id=doc_id, body=body)
        except ConflictError:
            return False
        except Exception as e:
            raise QueryError(f"Failed to create document {doc_id}: {e}") from e
        return True

    async def upsert(self, doc_type: str, doc_id: str, body: dict[str, Any]) -> None:
        """Write a document, replacing any previous version."""
        try:
            await self.client.index(index=self.index_name(doc_type), id=doc_id, body=body)
        except Exception as e:
            raise QueryError(f"Failed to index document {doc_id}: {e}") from e

    # ── Search ───────────────────────────────────────────────────────────

    async def search(self, doc_types: Iterable[str], body: dict[str, Any]) -> dict[str, Any]:
        """Run a raw query over one or more document types."""
        index = ",".join(self.index_name(t) for t in doc_types)
        try:
            return dict(await self.client.search(index=index, body=body))
        except Exception as e:
            raise QueryError(f"Search failed: {e}") from e

    async def scan(self, doc_type: str, query: dict[str, Any] | None = None) -> AsyncIterator[dict[str, Any]]:
        """Stream every matching hit with a scroll cursor."""
        async for hit in async_scan(
            self.client,
            index=self.index_name(doc_type),
            query=query or {"query": {"match_all": {}}},
        ):
            yield hit
