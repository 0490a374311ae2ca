"""Source adapters — One connector per upstream photo API.

Built-in adapters:
  - instagram: Instagram recent-media API
  - flickr: Flickr REST API (user photostreams and group pools)

Implement ``SourceAdapter`` to import from another service.
"""

from photoindex.sources.base import SourceAdapter
from photoindex.sources.registry import SourceRegistry

__all__ = ["SourceAdapter", "SourceRegistry"]
