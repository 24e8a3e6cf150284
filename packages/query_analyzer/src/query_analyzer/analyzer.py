"""Search query analyzer.

Converts a free-text search phrase into structured facets:

    "spot5 images with forest in france between march 2012 and may 2012"

    what:  platform:SPOT5, landuse:forest
    when:  2012-03-01T00:00:00Z .. 2012-05-31T23:59:59Z
    where: France

Analysis runs in two passes over the word stream:

1. Sentence pass: for each processor in turn (What, When, Where), every
   unconsumed word that is one of the processor's modifiers anchors a
   pattern ("between ... and ...", "cloud cover lesser than 10 %").
2. Word pass: in the same order, every word still unconsumed is tried as a
   bare keyword, date or toponym.

A word claimed by one processor is never seen by the next, so What has
priority over When and When over Where.
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone

from .dictionary import Dictionary, DictionaryCategory, default_dictionary
from .errors import MissingQueryError
from .gazetteer import Gazetteer
from .processors import Processor, WhatProcessor, WhenProcessor, WhereProcessor
from .processors.where import MAX_LOCATION_WORDS
from .result import AnalysisResult
from .words import QueryManager

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QueryAnalyzer:
    """Dictionary-driven analyzer of free-text search queries.

    The analyzer holds no per-query state: every call to ``analyze`` builds a
    fresh word stream and fresh processors.

    Args:
        dictionary: Localized word lookups
        gazetteer: Place-name resolver; location analysis is disabled without one
        clock: Returns the instant relative dates are anchored on
        max_location_words: Longest phrase sent to the gazetteer
    """

    def __init__(
        self,
        dictionary: Dictionary,
        gazetteer: Gazetteer | None = None,
        clock: Callable[[], datetime] | None = None,
        max_location_words: int = MAX_LOCATION_WORDS,
    ) -> None:
        self.dictionary = dictionary
        self.gazetteer = gazetteer
        self.clock = clock or utc_now
        self.max_location_words = max_location_words

    @property
    def location_enabled(self) -> bool:
        return self.gazetteer is not None

    def _processors(self, query_manager: QueryManager, now: datetime) -> list[tuple[Processor, DictionaryCategory]]:
        """Processors with their modifier category, in priority order."""
        processors: list[tuple[Processor, DictionaryCategory]] = [
            (WhatProcessor(query_manager), DictionaryCategory.QUANTITY_MODIFIER),
            (WhenProcessor(query_manager, now), DictionaryCategory.TIME_MODIFIER),
        ]
        if self.location_enabled:
            processors.append(
                (
                    WhereProcessor(query_manager, self.gazetteer, self.max_location_words),
                    DictionaryCategory.LOCATION_MODIFIER,
                )
            )
        return processors

    def analyze(self, query: str | None, now: datetime | None = None) -> AnalysisResult:
        """Analyze a search query.

        Args:
            query: Free-text search phrase
            now: Anchor for relative dates (defaults to the analyzer clock)

        Returns:
            AnalysisResult with facets, word states and accumulated errors

        Raises:
            MissingQueryError: If query is None or blank
        """
        if query is None or not query.strip():
            raise MissingQueryError()

        start_time = time.perf_counter()
        now = (now or self.clock()).astimezone(timezone.utc)

        query_manager = QueryManager(self.dictionary)
        query_manager.set_query(query)
        processors = self._processors(query_manager, now)

        # Sentence pass
        for processor, category in processors:
            for position in range(query_manager.length):
                tag = query_manager.lookup(category, position)
                if tag is not None:
                    processor.process_modifier(tag, position)

        # Word pass
        for processor, _ in processors:
            for position in range(query_manager.length):
                if query_manager.is_valid_position(position):
                    processor.process_word(position)

        what, when = processors[0][0].result, processors[1][0].result
        where = processors[2][0].result if self.location_enabled else []

        result = AnalysisResult(
            query=query,
            language=self.dictionary.language,
            words=query_manager.words,
            what=what,
            when=when,
            where=where,
            errors=query_manager.errors,
            processing_time_s=time.perf_counter() - start_time,
        )
        logger.debug(f"Analyzed {query!r} in {result.processing_time_s * 1000:.1f}ms: {result!r}")
        return result


def analyze_query(
    query: str,
    language: str = "en",
    gazetteer: Gazetteer | None = None,
    now: datetime | None = None,
) -> AnalysisResult:
    """Analyze a query with the packaged dictionary of a language."""
    return QueryAnalyzer(default_dictionary(language), gazetteer=gazetteer).analyze(query, now=now)
