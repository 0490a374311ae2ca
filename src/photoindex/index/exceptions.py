"""Search index exceptions."""


class SearchIndexError(Exception):
    """Base exception for search engine errors."""


class IndexConnectionError(SearchIndexError):
    """Raised when the search engine cannot be reached."""


class QueryError(SearchIndexError):
    """Raised when a read, write or search request fails."""


class SchemaError(SearchIndexError):
    """Raised when the index schema cannot be built (e.g. synonym file missing)."""
