"""Search index layer — Schema, engine client and record repositories."""

from photoindex.index.client import SearchIndex
from photoindex.index.repository import PhotoRepository, ProfileStore
from photoindex.index.schema import IndexSchema

__all__ = ["IndexSchema", "PhotoRepository", "ProfileStore", "SearchIndex"]
