"""Facets and the analysis result.

These dataclasses are the contract between the processors (which produce
facets) and callers of ``QueryAnalyzer.analyze`` (which consume the result).
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .errors import AnalysisError
from .modifiers import Comparator

MONTH_TO_SECOND_FORMAT = "%m-%dT%H:%M:%SZ"


class FacetKind(str, Enum):
    """Result category that claimed a word."""

    WHAT = "what"
    WHEN = "when"
    WHERE = "where"


def format_instant(value: datetime | None) -> str | None:
    """Format a datetime as an ISO-8601 UTC string (None stays None)."""
    if value is None:
        return None
    value = value.astimezone(timezone.utc)
    # %Y is not zero-padded below year 1000 on every platform
    return f"{value.year:04d}-{value.strftime(MONTH_TO_SECOND_FORMAT)}"


@dataclass
class Word:
    """One token of the normalized query.

    Attributes:
        text: Normalized surface form
        position: Zero-based index in the token sequence
        consumed: Whether a processor claimed this word
        facet: Category that claimed the word
        error: Error code of a failed pattern anchored on this word
    """

    text: str
    position: int
    consumed: bool = False
    facet: FacetKind | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "word": self.text,
            "position": self.position,
            "processed": self.consumed,
            "facet": self.facet.value if self.facet else None,
            "error": self.error,
        }


@dataclass
class KeywordFacet:
    """Presence (or absence) of a keyword.

    Attributes:
        keyword: Canonical keyword value
        type: Keyword category (e.g., "landuse", "platform") or None
        negated: True for "without <keyword>"
        positions: Word positions that produced the facet
    """

    keyword: str
    type: str | None = None
    negated: bool = False
    positions: list[int] = field(default_factory=list)

    @classmethod
    def from_tag(cls, tag: str, negated: bool = False, positions: list[int] | None = None) -> "KeywordFacet":
        """Build from a dictionary tag of the form 'type:value' or 'value'."""
        if ":" in tag:
            keyword_type, keyword = tag.split(":", 1)
        else:
            keyword_type, keyword = None, tag
        return cls(keyword=keyword, type=keyword_type, negated=negated, positions=positions or [])

    @property
    def search_term(self) -> str:
        """OpenSearch-style term, e.g. 'landuse:forest' or '-clouds'."""
        term = f"{self.type}:{self.keyword}" if self.type else self.keyword
        return f"-{term}" if self.negated else term

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "keyword": self.keyword,
            "type": self.type,
            "negated": self.negated,
            "searchTerms": self.search_term,
            "positions": list(self.positions),
        }


@dataclass
class QuantityFacet:
    """Numeric constraint on a quantity.

    Attributes:
        quantity: Canonical quantity name (e.g., "cloud cover")
        comparator: LT, GT or EQ
        value: Numeric value
        unit: Canonical unit, or None for the with/without shorthand
        positions: Word positions that produced the facet
    """

    quantity: str
    comparator: Comparator
    value: int | float
    unit: str | None = None
    positions: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "quantity": self.quantity,
            "comparator": self.comparator.value,
            "value": self.value,
            "unit": self.unit,
            "positions": list(self.positions),
        }


@dataclass
class TimeFacet:
    """Temporal constraint; a None bound is unbounded.

    Attributes:
        start: Start instant (inclusive) or None
        end: End instant (inclusive) or None
        positions: Word positions that produced the facet
    """

    start: datetime | None
    end: datetime | None
    positions: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "time:start": format_instant(self.start),
            "time:end": format_instant(self.end),
            "positions": list(self.positions),
        }


@dataclass
class LocationFacet:
    """Resolved location.

    Attributes:
        name: Canonical place name from the gazetteer
        geometry: Place geometry as returned by the gazetteer
        query: Phrase that was resolved
        positions: Word positions that produced the facet
    """

    name: str
    geometry: Any = None
    query: str = ""
    positions: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "geometry": self.geometry,
            "query": self.query,
            "positions": list(self.positions),
        }


WhatFacet = KeywordFacet | QuantityFacet


@dataclass
class AnalysisResult:
    """Structured understanding of one search query.

    Attributes:
        query: Original query
        language: Dictionary language
        words: Token sequence with final consumption state
        what: Keyword and quantity facets, in extraction order
        when: Temporal facets, in extraction order
        where: Location facets (empty without a gazetteer)
        errors: Accumulated analysis errors
        processing_time_s: Time spent analyzing
    """

    query: str
    language: str
    words: list[Word] = field(default_factory=list)
    what: list[WhatFacet] = field(default_factory=list)
    when: list[TimeFacet] = field(default_factory=list)
    where: list[LocationFacet] = field(default_factory=list)
    errors: list[AnalysisError] = field(default_factory=list)
    processing_time_s: float = 0.0

    @property
    def remaining_words(self) -> list[str]:
        """Words that no processor consumed."""
        return [w.text for w in self.words if not w.consumed]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "query": self.query,
            "language": self.language,
            "words": [w.to_dict() for w in self.words],
            "what": [f.to_dict() for f in self.what],
            "when": [f.to_dict() for f in self.when],
            "where": [f.to_dict() for f in self.where],
            "errors": [e.to_dict() for e in self.errors],
            "processing_time_s": self.processing_time_s,
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def __repr__(self) -> str:
        """Compact representation for debugging."""
        parts = []
        if self.what:
            parts.append(f"what={len(self.what)}")
        if self.when:
            parts.append(f"when={len(self.when)}")
        if self.where:
            parts.append(f"where={len(self.where)}")
        if self.errors:
            parts.append(f"errors={[e.code.value for e in self.errors]}")
        return f"AnalysisResult({self.query!r}, {', '.join(parts)})"
