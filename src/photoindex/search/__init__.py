"""Query path — Photo search and translation of raw engine responses."""

from photoindex.search.query import PhotoSearch
from photoindex.search.results import SearchResult, SearchResultSet, Suggestion, translate

__all__ = ["PhotoSearch", "SearchResult", "SearchResultSet", "Suggestion", "translate"]
