"""Index schema — Text analysis and field mappings applied at index creation.

Three analyzer pipelines serve three query intents:

- ``case_insensitive_keyword_analyzer``: structured fields (owner id,
  profile type) become one lowercased, ASCII-folded token so filters match
  exactly regardless of case or stray apostrophes.
- ``en_analyzer``: prose (titles, captions, descriptions) is tokenized,
  folded, stopword-filtered, stemmed with ``minimal_english`` and then
  expanded with synonyms. Synonyms run last so the stemmed forms are the
  matching keys.
- ``bigram_analyzer``: the same prose is copied to ``bigram`` and
  shingled into adjacent-token pairs, without stemming or synonyms, for
  phrase boosting and "did you mean" suggestions.

Tags use ``tag_analyzer``: spaces are stripped and the label is folded,
never stemmed.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any

from photoindex.index.exceptions import SchemaError

logger = logging.getLogger(__name__)

# fmt: off
ENGLISH_STOPWORDS: tuple[str, ...] = (
    "a", "an", "and", "are", "as", "at", "be", "but", "by", "for", "if", "in", "into", "is",
    "no", "not", "of", "on", "or", "s", "such", "t", "that", "the", "their", "then", "there",
    "these", "they", "this", "to", "was", "with",
)
# fmt: on

# ── Field mappings ──

KEYWORD: dict[str, Any] = {"type": "text", "analyzer": "case_insensitive_keyword_analyzer"}
TAG: dict[str, Any] = {"type": "text", "analyzer": "tag_analyzer"}
EN_TEXT: dict[str, Any] = {"type": "text", "analyzer": "en_analyzer", "copy_to": "bigram"}
BIGRAM: dict[str, Any] = {"type": "text", "analyzer": "bigram_analyzer"}
LINK: dict[str, Any] = {"type": "keyword", "index": False}

_PHOTO_PROPERTIES: dict[str, Any] = {
    "owner": KEYWORD,
    "source_type": {"type": "keyword"},
    "tags": TAG,
    "taken_at": {"type": "date"},
    "popularity": {"type": "integer"},
    "url": LINK,
    "thumbnail_url": LINK,
    "album": KEYWORD,
    "bigram": BIGRAM,
}

_PROFILE_PROPERTIES: dict[str, Any] = {
    "id": {"type": "keyword"},
    "name": KEYWORD,
    "profile_type": KEYWORD,
    "source": {"type": "keyword"},
}

MAPPINGS: dict[str, dict[str, Any]] = {
    "instagram_photo": {**_PHOTO_PROPERTIES, "username": KEYWORD, "caption": EN_TEXT},
    "flickr_photo": {**_PHOTO_PROPERTIES, "profile_type": KEYWORD, "title": EN_TEXT, "description": EN_TEXT},
    "instagram_profile": _PROFILE_PROPERTIES,
    "flickr_profile": _PROFILE_PROPERTIES,
}


def load_synonyms(path: str | Path | None = None) -> list[str]:
    """Read synonym rules, one per line, skipping blanks and ``#`` comments.

    Args:
        path: Synonym file. ``None`` reads the bundled English list.

    Raises:
        SchemaError: If the file is missing or unreadable.
    """
    try:
        if path is None:
            text = resources.files("photoindex.resources").joinpath("en_synonyms.txt").read_text(encoding="utf-8")
        else:
            text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaError(f"Cannot read synonym file {path or 'en_synonyms.txt'}: {e}") from e

    rules = [line.strip() for line in text.splitlines()]
    return [rule for rule in rules if rule and not rule.startswith("#")]


def analysis_settings(synonyms: list[str]) -> dict[str, Any]:
    """Build the ``index.analysis`` block shared by every index."""
    return {
        "char_filter": {
            "ignore_chars": {"type": "mapping", "mappings": ["'=>", "’=>", "`=>"]},
            "strip_whitespace": {"type": "mapping", "mappings": ["\\u0020=>"]},
        },
        "filter": {
            "bigram_filter": {"type": "shingle"},
            "en_stop_filter": {"type": "stop", "stopwords": list(ENGLISH_STOPWORDS)},
            "en_synonym": {"type": "synonym", "synonyms": synonyms},
            "en_stem_filter": {"type": "stemmer", "name": "minimal_english"},
        },
        "analyzer": {
            "en_analyzer": {
                "type": "custom",
                "tokenizer": "standard",
                "char_filter": ["ignore_chars"],
                "filter": ["asciifolding", "lowercase", "en_stop_filter", "en_stem_filter", "en_synonym"],
            },
            "bigram_analyzer": {
                "type": "custom",
                "tokenizer": "standard",
                "char_filter": ["ignore_chars"],
                "filter": ["asciifolding", "lowercase", "bigram_filter"],
            },
            "tag_analyzer": {
                "type": "custom",
                "tokenizer": "standard",
                "char_filter": ["strip_whitespace"],
                "filter": ["asciifolding", "lowercase"],
            },
            "case_insensitive_keyword_analyzer": {
                "type": "custom",
                "tokenizer": "keyword",
                "char_filter": ["ignore_chars"],
                "filter": ["asciifolding", "lowercase"],
            },
        },
    }


class IndexSchema:
    """Index-creation bodies for every document type.

    The synonym file is read once, when the schema is constructed, so a
    missing file fails the worker at startup instead of at the first
    ``create_index`` call.

    Args:
        synonyms_path: Synonym file. ``None`` uses the bundled list.
    """

    def __init__(self, synonyms_path: str | Path | None = None) -> None:
        self.synonyms = load_synonyms(synonyms_path)
        logger.info("Loaded %d synonym rules", len(self.synonyms))

    def settings(self) -> dict[str, Any]:
        return {"index": {"analysis": analysis_settings(self.synonyms)}}

    def body(self, doc_type: str) -> dict[str, Any]:
        """Full ``indices.create`` body for a document type.

        Raises:
            SchemaError: If the document type has no mapping.
        """
        if doc_type not in MAPPINGS:
            raise SchemaError(f"No mapping defined for document type '{doc_type}'")
        return {
            "settings": self.settings(),
            "mappings": {"properties": MAPPINGS[doc_type]},
        }
