"""photoindex — Social photo import pipeline and relevance search index."""

__version__ = "0.1.0"
