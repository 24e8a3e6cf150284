"""Tests for the word stream: tokenization, navigation and consumption."""

import logging

import pytest

from query_analyzer.dictionary import DictionaryCategory
from query_analyzer.errors import ErrorCode
from query_analyzer.result import FacetKind
from query_analyzer.words import parse_number


class TestTokenize:
    """Tests for QueryManager.tokenize."""

    def test_lowercase_and_accents(self, make_manager):
        """Words are lowercased and accent-stripped."""
        manager = make_manager("Forêt ÉTÉ Spot5")
        assert [w.text for w in manager.words] == ["foret", "ete", "spot5"]

    def test_separators_become_spaces(self, make_manager):
        """Apostrophes, commas and semicolons split words."""
        manager = make_manager("forest,desert;l'eau")
        assert [w.text for w in manager.words] == ["forest", "desert", "l", "eau"]

    def test_percent_split(self, make_manager):
        """'50%' becomes two words."""
        manager = make_manager("50%")
        assert [w.text for w in manager.words] == ["50", "%"]

    def test_percent_split_with_remainder(self, make_manager):
        """Text glued after '%' becomes a third word."""
        manager = make_manager("10%cloud")
        assert [w.text for w in manager.words] == ["10", "%", "cloud"]

    def test_empty_tokens_dropped(self, make_manager):
        """Runs of whitespace and separators produce no empty words."""
        manager = make_manager("  forest ,, ;  desert ")
        assert [w.text for w in manager.words] == ["forest", "desert"]

    def test_positions(self, make_manager):
        """Positions are zero-based and in query order."""
        manager = make_manager("a b c")
        assert [w.position for w in manager.words] == [0, 1, 2]

    def test_set_query_resets_state(self, make_manager):
        """set_query clears consumption and errors."""
        manager = make_manager("forest desert")
        manager.try_consume(0, FacetKind.WHAT)
        manager.record_error(ErrorCode.NOT_UNDERSTOOD, 1)

        manager.set_query("forest desert")

        assert not any(w.consumed for w in manager.words)
        assert manager.errors == []


class TestParseNumber:
    """Tests for numeric literal parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("10", 10),
        ("-3", -3),
        ("2.5", 2.5),
        ("10.0", 10),
        (".5", 0.5),
    ])
    def test_numbers(self, text, expected):
        """Numeric literals are parsed, integral values stay int."""
        value = parse_number(text)
        assert value == expected
        assert type(value) is type(expected)

    @pytest.mark.parametrize("text", ["ten", "10a", "", "1.2.3", "%"])
    def test_not_numbers(self, text):
        """Anything else is not a number."""
        assert parse_number(text) is None


class TestNavigation:
    """Tests for next_position / previous_position."""

    def test_skips_stop_words(self, make_manager):
        """Stop words are skipped in both directions."""
        manager = make_manager("forest for the desert")
        assert manager.next_position(0) == 3
        assert manager.previous_position(3) == 0

    def test_boundaries(self, make_manager):
        """None past either end of the query."""
        manager = make_manager("forest desert")
        assert manager.next_position(1) is None
        assert manager.previous_position(0) is None

    def test_stops_at_consumed_word(self, make_manager):
        """A consumed word blocks navigation."""
        manager = make_manager("forest desert urban")
        manager.try_consume(1, FacetKind.WHAT)
        assert manager.next_position(0) is None
        assert manager.previous_position(2) is None

    def test_only_stop_words_after(self, make_manager):
        """Trailing stop words yield None."""
        manager = make_manager("forest for the")
        assert manager.next_position(0) is None


class TestConsumption:
    """Tests for atomic claims."""

    def test_try_consume_once(self, make_manager):
        """A position can be claimed only once."""
        manager = make_manager("forest desert")
        assert manager.try_consume(0, FacetKind.WHAT) is True
        assert manager.try_consume(0, FacetKind.WHEN) is False
        assert manager.word_at(0).facet == FacetKind.WHAT

    def test_try_consume_out_of_range(self, make_manager):
        """Invalid positions cannot be claimed."""
        manager = make_manager("forest")
        assert manager.try_consume(-1, FacetKind.WHAT) is False
        assert manager.try_consume(1, FacetKind.WHAT) is False

    def test_consume_span_all_or_nothing(self, make_manager):
        """A span with one claimed word claims nothing."""
        manager = make_manager("a b c d")
        manager.try_consume(2, FacetKind.WHEN)

        assert manager.consume_span(0, 3, FacetKind.WHAT) is False
        assert [w.consumed for w in manager.words] == [False, False, True, False]

    def test_consume_span(self, make_manager):
        """Every position of a free span is claimed."""
        manager = make_manager("a b c d")
        assert manager.consume_span(1, 2, FacetKind.WHERE) is True
        assert [w.facet for w in manager.words] == [None, FacetKind.WHERE, FacetKind.WHERE, None]


class TestLookups:
    """Tests for dictionary lookups through the word stream."""

    def test_lookup_span_longest_match(self, make_manager):
        """The longest dictionary phrase wins."""
        manager = make_manager("cloud cover lesser")
        match = manager.lookup_span(DictionaryCategory.QUANTITY, 0)
        assert (match.tag, match.start, match.end) == ("cloud cover", 0, 1)

    def test_lookup_span_backwards(self, make_manager):
        """Backwards lookups end at the position."""
        manager = make_manager("cloud cover lesser")
        match = manager.lookup_span(DictionaryCategory.QUANTITY, 1, backwards=True)
        assert (match.start, match.end) == (0, 1)

    def test_lookup_span_ignores_consumed(self, make_manager):
        """Phrases never cover consumed words."""
        manager = make_manager("cloud cover")
        manager.try_consume(1, FacetKind.WHEN)
        match = manager.lookup_span(DictionaryCategory.QUANTITY, 0)
        assert (match.tag, match.end) == ("cloud cover", 0)

    def test_lookup_consumed_word(self, make_manager):
        """Consumed words have no dictionary tag."""
        manager = make_manager("forest")
        manager.try_consume(0, FacetKind.WHAT)
        assert manager.lookup(DictionaryCategory.KEYWORD, 0) is None

    def test_number_at(self, make_manager):
        """Literals and number words are numbers."""
        manager = make_manager("12 two forest")
        assert manager.number_at(0) == 12
        assert manager.number_at(1) == 2
        assert manager.number_at(2) is None

    def test_is_modifier(self, make_manager):
        """Modifiers and connectors of any category are modifiers."""
        manager = make_manager("with since in than forest")
        assert [manager.is_modifier(i) for i in range(5)] == [True, True, True, True, False]


class TestRecordError:
    """Tests for error accumulation."""

    def test_error_context_is_span(self, make_manager):
        """Context is the text of the span."""
        manager = make_manager("after foo bar")
        manager.record_error(ErrorCode.NOT_UNDERSTOOD, 0, 1)

        error = manager.errors[0]
        assert error.code == ErrorCode.NOT_UNDERSTOOD
        assert error.position == 0
        assert error.context == "after foo"
        assert manager.word_at(0).error == "NOT_UNDERSTOOD"

    def test_error_does_not_consume(self, make_manager):
        """Recording an error leaves the word free."""
        manager = make_manager("meelers")
        manager.record_error(ErrorCode.INVALID_UNIT, 0)
        assert manager.is_valid_position(0)

    def test_error_logged_at_debug(self, make_manager, caplog):
        """Errors are logged at DEBUG level."""
        manager = make_manager("meelers")
        with caplog.at_level(logging.DEBUG, logger="query_analyzer.words"):
            manager.record_error(ErrorCode.INVALID_UNIT, 0)
        assert "INVALID_UNIT" in caplog.text
