"""Search results — Typed result sets built from raw engine responses.

The translator never fails because of the suggestion block: a missing,
empty or oddly shaped ``suggest`` section simply yields no suggestion.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

SUGGESTION_NAME = "suggestion"

# Display type -> ``_source`` field holding the title. Types not listed use ``title``.
TITLE_FIELDS: dict[str, str] = {
    "InstagramPhoto": "caption",
}
DEFAULT_TITLE_FIELD = "title"


class SearchResult(BaseModel):
    """One photo in a result set."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(description="Display type, e.g. 'FlickrPhoto'")
    title: str | None = Field(default=None, description="Title, or caption for Instagram photos")
    url: str | None = Field(default=None, description="Link to the photo page")
    thumbnail_url: str | None = Field(default=None, description="Link to a small rendition")
    taken_at: date | None = Field(default=None, description="Date the photo was taken")

    @field_validator("taken_at", mode="before")
    @classmethod
    def _coerce_taken_at(cls, v: Any) -> date | None:
        """Accept dates, datetimes and ISO strings; anything unreadable becomes None."""
        if v is None or isinstance(v, date) and not isinstance(v, datetime):
            return v
        if isinstance(v, datetime):
            return v.date()
        try:
            return date.fromisoformat(str(v)[:10])
        except ValueError:
            return None


class Suggestion(BaseModel):
    """A "did you mean" correction, minus its relevance score."""

    model_config = ConfigDict(extra="allow", frozen=True)

    text: str = Field(description="Corrected query text")
    highlighted: str | None = Field(default=None, description="Corrected text with changed terms marked up")


class SearchResultSet(BaseModel):
    """Result page returned to callers of the query path."""

    total: int = Field(default=0, description="Total number of matching photos")
    offset: int = Field(default=0, description="Offset of the first result")
    results: list[SearchResult] = Field(default_factory=list, description="Ordered results")
    suggestion: Suggestion | None = Field(default=None, description="Optional query correction")

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> SearchResultSet:
        hits = response.get("hits") or {}
        return cls(
            total=_extract_total(hits.get("total")),
            offset=hits.get("offset") or 0,
            results=_extract_results(hits.get("hits") or []),
            suggestion=extract_suggestion(response.get("suggest")),
        )

    def override_suggestion(self, suggestion: Suggestion | dict[str, Any] | None) -> None:
        """Replace the computed suggestion, e.g. with an externally chosen one."""
        self.suggestion = Suggestion.model_validate(suggestion) if isinstance(suggestion, dict) else suggestion


def translate(response: dict[str, Any]) -> SearchResultSet:
    """Convert a raw search response into a :class:`SearchResultSet`."""
    return SearchResultSet.from_response(response)


def display_type(hit: dict[str, Any]) -> str:
    """Camelize the hit's document type: ``instagram_photo`` -> ``InstagramPhoto``.

    Uses ``_type`` when the engine still reports a real one, otherwise the
    ``source_type`` stored with the document.
    """
    raw_type = hit.get("_type")
    if not raw_type or raw_type == "_doc":
        raw_type = (hit.get("_source") or {}).get("source_type", "")
    return "".join(part.capitalize() for part in str(raw_type).split("_"))


def extract_suggestion(suggest: Any) -> Suggestion | None:
    """First option of the first ``suggestion`` entry, without its score."""
    if not suggest:
        return None
    try:
        option = dict(suggest[SUGGESTION_NAME][0]["options"][0])
        option.pop("score", None)
        return Suggestion.model_validate(option)
    except (KeyError, IndexError, TypeError, ValueError):
        logger.debug("Ignoring malformed suggestion block: %r", suggest)
        return None


def _extract_total(total: Any) -> int:
    # Elasticsearch 7+ and OpenSearch report {"value": n, "relation": "eq"}
    if isinstance(total, dict):
        total = total.get("value")
    try:
        return int(total or 0)
    except (TypeError, ValueError):
        logger.debug("Ignoring unreadable hit total: %r", total)
        return 0


def _extract_results(hits: list[Any]) -> list[SearchResult]:
    results = []
    for hit in hits:
        try:
            results.append(_extract_result(hit))
        except (AttributeError, TypeError, ValidationError):
            logger.warning("Dropping unreadable search hit %r", hit.get("_id") if isinstance(hit, dict) else hit)
    return results


def _extract_result(hit: dict[str, Any]) -> SearchResult:
    source = hit.get("_source") or {}
    result_type = display_type(hit)
    return SearchResult(
        type=result_type,
        title=source.get(TITLE_FIELDS.get(result_type, DEFAULT_TITLE_FIELD)),
        url=source.get("url"),
        thumbnail_url=source.get("thumbnail_url"),
        taken_at=source.get("taken_at"),
    )
