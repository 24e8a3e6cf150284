"""Where processor: toponyms resolved through a gazetteer.

Detected patterns:

    <in> "toponym"
    "toponym"

A toponym is the longest run of unclaimed words (up to ``max_words``) that
the gazetteer resolves, e.g. "in united kingdom" tries "united kingdom" then
"united".
"""

import logging

from ..errors import ErrorCode
from ..gazetteer import Gazetteer, Toponym
from ..modifiers import LocationModifier
from ..result import FacetKind, LocationFacet
from ..words import QueryManager
from .base import Processor

logger = logging.getLogger(__name__)

MAX_LOCATION_WORDS = 4


class WhereProcessor(Processor):
    """Extracts location facets."""

    facet_kind = FacetKind.WHERE
    modifier_enum = LocationModifier

    def __init__(
        self,
        query_manager: QueryManager,
        gazetteer: Gazetteer,
        max_words: int = MAX_LOCATION_WORDS,
    ) -> None:
        self.gazetteer = gazetteer
        self.max_words = max_words
        super().__init__(query_manager)

    def handlers(self):
        return {LocationModifier.IN: self.process_in}

    def _resolve_from(self, position: int) -> tuple[Toponym, int] | None:
        """Resolve the longest phrase starting at position.

        Returns the toponym and the position of the last word of the phrase.
        """
        qm = self.query_manager
        end = position
        while end + 1 < qm.length and end + 1 - position < self.max_words and qm.is_valid_position(end + 1):
            end += 1

        for last in range(end, position - 1, -1):
            if last > position and qm.is_stop_word(last):
                continue
            phrase = qm.phrase(position, last)
            toponym = self.gazetteer.resolve(phrase)
            if toponym is not None:
                logger.debug(f"Resolved '{phrase}' to {toponym.name}")
                return toponym, last
        return None

    def _emit(self, toponym: Toponym, first: int, argument: int, last: int) -> bool:
        facet = LocationFacet(
            name=toponym.name,
            geometry=toponym.geometry,
            query=self.query_manager.phrase(argument, last),
        )
        return self.emit(facet, first, last)

    def process_in(self, position: int) -> bool:
        qm = self.query_manager
        argument = qm.next_position(position)
        if argument is None:
            qm.record_error(ErrorCode.MISSING_ARGUMENT, position)
            return False

        resolved = self._resolve_from(argument)
        if resolved is None:
            qm.record_error(ErrorCode.LOCATION_NOT_FOUND, argument)
            return False
        toponym, last = resolved
        return self._emit(toponym, position, argument, last)

    def process_word(self, position: int) -> bool:
        """Bare toponym; unresolved words are left alone."""
        qm = self.query_manager
        if qm.is_stop_word(position) or qm.is_modifier(position) or qm.number_at(position) is not None:
            return False
        resolved = self._resolve_from(position)
        if resolved is None:
            return False
        toponym, last = resolved
        return self._emit(toponym, position, position, last)
