"""Source Registry — Holds the initialized adapter for each upstream service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from photoindex.models.profile import SourceType
from photoindex.sources.base import SourceAdapter

if TYPE_CHECKING:
    from photoindex.config.settings import SourceSettings

logger = logging.getLogger(__name__)


class SourceNotFoundError(Exception):
    """Raised when no adapter is registered for a source."""


class SourceRegistry:
    """Registry mapping each ``SourceType`` to its adapter instance.

    Example:
        >>> registry = SourceRegistry()
        >>> registry.register(FlickrAdapter(api_key="..."))
        >>> await registry.initialize_all()
        >>> adapter = registry.get(SourceType.FLICKR)
    """

    def __init__(self) -> None:
        self._adapters: dict[SourceType, SourceAdapter] = {}

    @classmethod
    def from_settings(cls, settings: SourceSettings) -> SourceRegistry:
        """Build a registry with every adapter that has credentials configured."""
        from photoindex.sources.flickr import FlickrAdapter
        from photoindex.sources.instagram import InstagramAdapter

        registry = cls()
        if settings.instagram.access_token:
            registry.register(
                InstagramAdapter(
                    access_token=settings.instagram.access_token,
                    base_url=settings.instagram.base_url,
                    timeout=settings.timeout,
                )
            )
        if settings.flickr.api_key:
            registry.register(
                FlickrAdapter(
                    api_key=settings.flickr.api_key,
                    base_url=settings.flickr.base_url,
                    timeout=settings.timeout,
                )
            )
        return registry

    def register(self, adapter: SourceAdapter) -> None:
        if adapter.source_type in self._adapters:
            logger.warning("Overwriting existing source adapter: %s", adapter.source_type)
        self._adapters[adapter.source_type] = adapter
        logger.info("Registered source adapter: %s", adapter.name)

    def get(self, source: SourceType | str) -> SourceAdapter:
        """Get the adapter for a source.

        Raises:
            SourceNotFoundError: If no adapter is registered for the source.
        """
        try:
            return self._adapters[SourceType(source)]
        except (KeyError, ValueError) as e:
            raise SourceNotFoundError(
                f"No source adapter registered for '{source}'. "
                f"Available sources: {[s.value for s in self._adapters]}"
            ) from e

    async def initialize_all(self) -> None:
        for adapter in self._adapters.values():
            await adapter.initialize()

    async def shutdown_all(self) -> None:
        """Gracefully shut down all adapters."""
        for source, adapter in self._adapters.items():
            try:
                await adapter.shutdown()
                logger.info("Shut down source adapter: %s", source)
            except Exception:
                logger.warning("Error shutting down source adapter: %s", source, exc_info=True)

    @property
    def sources(self) -> list[SourceType]:
        return list(self._adapters)
