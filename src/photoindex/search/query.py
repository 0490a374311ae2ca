"""Photo search — Builds relevance queries and translates the responses."""

from __future__ import annotations

from typing import Any

from photoindex.index.client import SearchIndex
from photoindex.models.photo import FlickrPhoto, InstagramPhoto, Photo
from photoindex.search.results import SUGGESTION_NAME, SearchResultSet, translate

DEFAULT_PHOTO_TYPES: tuple[type[Photo], ...] = (FlickrPhoto, InstagramPhoto)

# Stemmed prose fields plus tags; tags weigh more since they are curated labels.
TEXT_FIELDS = ["title^2", "caption^2", "description", "tags^3"]


def build_query(text: str, offset: int = 0, size: int = 10) -> dict[str, Any]:
    """Build the search body for a free-text photo query.

    Matches on the stemmed, synonym-expanded fields, boosts adjacent-word
    matches through the ``bigram`` field, slightly favours popular photos
    and asks for a phrase suggestion on the same field.
    """
    return {
        "from": offset,
        "size": size,
        "query": {
            "function_score": {
                "query": {
                    "bool": {
                        "must": [
                            {
                                "multi_match": {
                                    "query": text,
                                    "fields": TEXT_FIELDS,
                                    "type": "most_fields",
                                }
                            }
                        ],
                        "should": [{"match": {"bigram": {"query": text, "boost": 2}}}],
                    }
                },
                "field_value_factor": {"field": "popularity", "modifier": "log1p", "missing": 0},
                "boost_mode": "sum",
            }
        },
        "suggest": {
            "text": text,
            SUGGESTION_NAME: {
                "phrase": {
                    "field": "bigram",
                    "size": 1,
                    "highlight": {"pre_tag": "<strong>", "post_tag": "</strong>"},
                }
            },
        },
    }


class PhotoSearch:
    """Query path over the photo indexes.

    Args:
        index: Initialized search index client.
        photo_types: Photo classes whose indexes are searched.
    """

    def __init__(self, index: SearchIndex, photo_types: tuple[type[Photo], ...] = DEFAULT_PHOTO_TYPES) -> None:
        self._index = index
        self._doc_types = [cls.doc_type for cls in photo_types]

    async def search(self, text: str, offset: int = 0, size: int = 10) -> SearchResultSet:
        response = await self._index.search(self._doc_types, build_query(text, offset, size))
        results = translate(response)
        results.offset = offset
        return results
