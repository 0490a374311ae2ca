"""Tests for the photo search query path."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from photoindex.search.query import PhotoSearch, build_query


class TestBuildQuery:
    def test_paging(self) -> None:
        body = build_query("fireworks", offset=20, size=10)
        assert body["from"] == 20
        assert body["size"] == 10

    def test_bigram_boost_and_suggester(self) -> None:
        body = build_query("washington monument")
        bool_query = body["query"]["function_score"]["query"]["bool"]
        assert bool_query["should"][0]["match"]["bigram"]["query"] == "washington monument"
        assert bool_query["must"][0]["multi_match"]["query"] == "washington monument"
        assert body["suggest"]["text"] == "washington monument"
        assert body["suggest"]["suggestion"]["phrase"]["field"] == "bigram"


class TestPhotoSearch:
    async def test_search_translates_response(self) -> None:
        index = MagicMock()
        index.search = AsyncMock(
            return_value={
                "hits": {
                    "total": {"value": 1},
                    "hits": [
                        {
                            "_index": "photoindex-flickr_photo",
                            "_id": "1",
                            "_source": {
                                "source_type": "flickr_photo",
                                "title": "Fireworks",
                                "url": "u",
                                "thumbnail_url": "t",
                                "taken_at": "2014-07-04",
                            },
                        }
                    ],
                },
            }
        )

        results = await PhotoSearch(index).search("fireworks", offset=10)

        doc_types, body = index.search.call_args.args
        assert doc_types == ["flickr_photo", "instagram_photo"]
        assert body["from"] == 10
        assert results.total == 1
        assert results.offset == 10
        assert results.results[0].title == "Fireworks"
        assert results.suggestion is None
