"""Shared machinery of the What, When and Where processors."""

from collections.abc import Callable
from enum import Enum

from ..dictionary import DictionaryCategory
from ..modifiers import Connector, check_handlers, parse_modifier
from ..result import FacetKind
from ..words import QueryManager

# Longest dictionary phrase tried for keywords, quantities and units
MAX_PHRASE_WORDS = 3


class Processor:
    """Base class of the pattern processors.

    Subclasses set ``facet_kind`` and ``modifier_enum`` and implement
    ``handlers`` (sentence mode) and ``process_word`` (word mode). Facets are
    accumulated in ``result`` in extraction order.
    """

    facet_kind: FacetKind
    modifier_enum: type[Enum]

    def __init__(self, query_manager: QueryManager) -> None:
        self.query_manager = query_manager
        self.result: list = []
        self._handlers = self.handlers()
        check_handlers(self.modifier_enum, self._handlers)

    def handlers(self) -> dict[Enum, Callable[[int], bool]]:
        raise NotImplementedError

    def process_modifier(self, tag: str | None, position: int) -> bool:
        """Run the handler of a modifier anchored at position.

        Args:
            tag: Canonical modifier tag from the dictionary (may be None)
            position: Position of the modifier word

        Returns:
            True if a pattern matched and a facet was emitted
        """
        modifier = parse_modifier(self.modifier_enum, tag)
        if modifier is None:
            return False
        return self._handlers[modifier](position)

    def process_word(self, position: int) -> bool:
        raise NotImplementedError

    def connector_at(self, position: int | None) -> Connector | None:
        return parse_modifier(Connector, self.query_manager.lookup(DictionaryCategory.CONNECTOR, position))

    def emit(self, facet, start: int, end: int) -> bool:
        """Consume [start, end] and record the facet.

        Returns False (and records nothing) if any position is already claimed.
        """
        if not self.query_manager.consume_span(start, end, self.facet_kind):
            return False
        facet.positions = list(range(start, end + 1))
        self.result.append(facet)
        return True
