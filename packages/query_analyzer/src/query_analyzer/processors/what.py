"""What processor: keyword facets and quantity comparisons.

Detected patterns:

    <with> "keyword"
    <with> "quantity"      equivalent to "quantity" <greater> (than) 0
    <without> "keyword"
    <without> "quantity"   equivalent to "quantity" <equal> (to) 0

    "quantity" <lesser|greater|equal> (than|to) "numeric" "unit"
    <lesser|greater|equal> (than|to) "numeric" "unit" (of) "quantity"

In word mode a bare keyword (or an explicit ``type=value`` word) becomes a
keyword facet.
"""

from functools import partial

from ..dictionary import DictionaryCategory
from ..errors import ErrorCode
from ..modifiers import Comparator, Connector, QuantityModifier
from ..result import FacetKind, KeywordFacet, QuantityFacet
from .base import MAX_PHRASE_WORDS, Processor


class WhatProcessor(Processor):
    """Extracts keyword and quantity facets."""

    facet_kind = FacetKind.WHAT
    modifier_enum = QuantityModifier

    def handlers(self):
        return {
            QuantityModifier.WITH: self.process_with,
            QuantityModifier.WITHOUT: self.process_without,
            QuantityModifier.LESSER: partial(self.process_comparison, Comparator.LT),
            QuantityModifier.GREATER: partial(self.process_comparison, Comparator.GT),
            QuantityModifier.EQUAL: partial(self.process_comparison, Comparator.EQ),
        }

    def process_with(self, position: int) -> bool:
        return self._process_presence(position, negated=False)

    def process_without(self, position: int) -> bool:
        return self._process_presence(position, negated=True)

    def _process_presence(self, position: int, negated: bool) -> bool:
        qm = self.query_manager
        argument = qm.next_position(position)
        if argument is None:
            qm.record_error(ErrorCode.MISSING_ARGUMENT, position)
            return False

        quantity = qm.lookup_span(DictionaryCategory.QUANTITY, argument, MAX_PHRASE_WORDS)
        keyword = qm.lookup_span(DictionaryCategory.KEYWORD, argument, MAX_PHRASE_WORDS)

        # Longest phrase wins, quantity on ties
        if quantity and (keyword is None or quantity.end >= keyword.end):
            comparator = Comparator.EQ if negated else Comparator.GT
            facet = QuantityFacet(quantity=quantity.tag, comparator=comparator, value=0)
            return self.emit(facet, position, quantity.end)

        if keyword:
            return self.emit(KeywordFacet.from_tag(keyword.tag, negated=negated), position, keyword.end)

        qm.record_error(ErrorCode.NOT_UNDERSTOOD, position, argument)
        return False

    def process_comparison(self, comparator: Comparator, position: int) -> bool:
        """Handle lesser/greater/equal in both word orders.

        Checks, in order: argument present, numeric value, unit present and
        known, quantity before the modifier, then quantity after the unit.
        """
        qm = self.query_manager

        cursor = qm.next_position(position)
        if self.connector_at(cursor) in (Connector.THAN, Connector.TO, Connector.OF):
            cursor = qm.next_position(cursor)
        if cursor is None:
            qm.record_error(ErrorCode.MISSING_ARGUMENT, position)
            return False

        value = qm.number_at(cursor)
        if value is None:
            qm.record_error(ErrorCode.NOT_UNDERSTOOD, position, cursor)
            return False

        unit_position = qm.next_position(cursor)
        if unit_position is None or qm.is_modifier(unit_position):
            qm.record_error(ErrorCode.MISSING_UNIT, cursor)
            return False

        unit = qm.lookup_span(DictionaryCategory.UNIT, unit_position, 2)
        if unit is None:
            qm.record_error(ErrorCode.INVALID_UNIT, unit_position)
            return False

        # "quantity" <modifier> ...
        before = qm.previous_position(position)
        quantity = (
            qm.lookup_span(DictionaryCategory.QUANTITY, before, MAX_PHRASE_WORDS, backwards=True)
            if before is not None
            else None
        )
        if quantity:
            start, end = quantity.start, unit.end
        else:
            # <modifier> ... "unit" (of) "quantity"
            after = qm.next_position(unit.end)
            if self.connector_at(after) == Connector.OF:
                after = qm.next_position(after)
            quantity = (
                qm.lookup_span(DictionaryCategory.QUANTITY, after, MAX_PHRASE_WORDS)
                if after is not None
                else None
            )
            if quantity is None:
                qm.record_error(ErrorCode.NOT_UNDERSTOOD, position, unit.end)
                return False
            start, end = position, quantity.end

        facet = QuantityFacet(quantity=quantity.tag, comparator=comparator, value=value, unit=unit.tag)
        return self.emit(facet, start, end)

    def process_word(self, position: int) -> bool:
        """Match a bare keyword (or a type=value word) at position."""
        qm = self.query_manager
        text = qm.text_at(position)

        key, sep, value = text.partition("=")
        if sep and key and value:
            return self.emit(KeywordFacet(keyword=value, type=key), position, position)

        keyword = qm.lookup_span(DictionaryCategory.KEYWORD, position, MAX_PHRASE_WORDS)
        if keyword is None:
            return False
        return self.emit(KeywordFacet.from_tag(keyword.tag), position, keyword.end)
