"""Tests for the analyzer orchestrator and the analysis result."""

import json
import logging
from datetime import datetime, timedelta, timezone

import pytest

from query_analyzer import analyze_query
from query_analyzer.analyzer import QueryAnalyzer
from query_analyzer.dictionary import DictionaryCategory, StaticDictionary, default_dictionary
from query_analyzer.errors import MissingQueryError
from query_analyzer.gazetteer import StaticGazetteer, Toponym
from query_analyzer.result import FacetKind, KeywordFacet, format_instant

FULL_QUERY = "spot5 images with forest in france between march 2012 and may 2012"


def all_positions(result) -> list[int]:
    facets = [*result.what, *result.when, *result.where]
    return [p for facet in facets for p in facet.positions]


class TestFullQuery:
    """End-to-end analysis of a query with every facet kind."""

    def test_facets(self, geo_analyzer):
        """What, when and where are all extracted."""
        result = geo_analyzer.analyze(FULL_QUERY)

        assert [f.search_term for f in result.what] == ["landuse:forest", "platform:SPOT5"]
        assert len(result.when) == 1
        assert format_instant(result.when[0].start) == "2012-03-01T00:00:00Z"
        assert format_instant(result.when[0].end) == "2012-05-31T23:59:59Z"
        assert [f.name for f in result.where] == ["France"]
        assert result.errors == []
        assert result.remaining_words == ["images"]

    def test_consumption_is_exclusive(self, geo_analyzer):
        """No position belongs to two facets."""
        result = geo_analyzer.analyze(FULL_QUERY + " without clouds last 3 days")

        positions = all_positions(result)
        assert len(positions) == len(set(positions))
        assert sorted(positions) == [w.position for w in result.words if w.consumed]

    def test_idempotent(self, geo_analyzer):
        """Analyzing twice gives equal results."""
        first = geo_analyzer.analyze(FULL_QUERY).to_dict()
        second = geo_analyzer.analyze(FULL_QUERY).to_dict()
        first.pop("processing_time_s")
        second.pop("processing_time_s")
        assert first == second


class TestPriority:
    """Tests for What > When > Where."""

    def test_what_before_when(self):
        """A word that is both keyword and season is a keyword."""
        dictionary = StaticDictionary(
            "en",
            {
                DictionaryCategory.KEYWORD: {"spring": "water:spring"},
                DictionaryCategory.SEASON: {"spring": "spring"},
            },
        )
        result = QueryAnalyzer(dictionary).analyze("spring")

        assert result.what == [KeywordFacet(keyword="spring", type="water", positions=[0])]
        assert result.when == []

    def test_when_before_where(self, dictionary):
        """A month that is also a place name is a month."""
        gazetteer = StaticGazetteer({"june": Toponym(name="June Lake")})
        result = QueryAnalyzer(dictionary, gazetteer=gazetteer).analyze("june")

        assert len(result.when) == 1
        assert result.where == []
        assert result.words[0].facet == FacetKind.WHEN


class TestAnalyze:
    """Tests for analyze() arguments and result shape."""

    @pytest.mark.parametrize("query", [None, "", "   "])
    def test_missing_query(self, analyzer, query):
        """A missing or blank query raises."""
        with pytest.raises(MissingQueryError, match="Missing mandatory searchTerms"):
            analyzer.analyze(query)

    def test_missing_query_is_value_error(self, analyzer):
        """MissingQueryError can be caught as ValueError."""
        with pytest.raises(ValueError):
            analyzer.analyze("")

    def test_clock(self, dictionary):
        """The clock anchors relative dates."""
        def clock():
            return datetime(2020, 1, 15, tzinfo=timezone.utc)

        result = QueryAnalyzer(dictionary, clock=clock).analyze("today")
        assert format_instant(result.when[0].start) == "2020-01-15T00:00:00Z"

    def test_now_overrides_clock(self, analyzer):
        """An explicit now wins over the clock."""
        result = analyzer.analyze("yesterday", now=datetime(2021, 3, 1, tzinfo=timezone.utc))
        assert format_instant(result.when[0].start) == "2021-02-28T00:00:00Z"

    def test_now_converted_to_utc(self, analyzer):
        """Non-UTC anchors are converted to UTC."""
        paris = timezone(timedelta(hours=2))
        result = analyzer.analyze("today", now=datetime(2021, 3, 1, 1, 0, tzinfo=paris))
        assert format_instant(result.when[0].start) == "2021-02-28T00:00:00Z"

    def test_to_dict_keys(self, analyzer):
        """The serialized result has a stable shape."""
        data = analyzer.analyze("forest since 2010").to_dict()

        assert list(data) == [
            "query",
            "language",
            "words",
            "what",
            "when",
            "where",
            "errors",
            "processing_time_s",
        ]
        assert data["words"][0] == {
            "word": "forest",
            "position": 0,
            "processed": True,
            "facet": "what",
            "error": None,
        }
        assert data["when"][0]["time:start"] == "2010-01-01T00:00:00Z"
        assert data["when"][0]["time:end"] is None

    def test_to_json(self, analyzer):
        """to_json is valid JSON."""
        data = json.loads(analyzer.analyze("without clouds").to_json())
        assert data["what"][0]["searchTerms"] == "-clouds"

    def test_errors_serialized(self, analyzer):
        """Errors carry code, position and context."""
        data = analyzer.analyze("depth greater than 5 meelers").to_dict()
        assert data["errors"] == [{"code": "INVALID_UNIT", "position": 4, "context": "meelers"}]
        assert data["words"][4]["error"] == "INVALID_UNIT"

    def test_processing_time(self, analyzer):
        """Processing time is measured."""
        assert analyzer.analyze("forest").processing_time_s >= 0

    def test_repr(self, analyzer):
        """repr summarizes the result."""
        assert repr(analyzer.analyze("forest 2010")) == "AnalysisResult('forest 2010', what=1, when=1)"

    def test_logs_analysis(self, analyzer, caplog):
        """Each analysis is logged at DEBUG level."""
        with caplog.at_level(logging.DEBUG, logger="query_analyzer.analyzer"):
            analyzer.analyze("forest")
        assert "Analyzed 'forest'" in caplog.text


class TestLanguages:
    """Tests for the packaged dictionaries."""

    def test_french(self, now):
        """French queries use the French dictionary."""
        analyzer = QueryAnalyzer(default_dictionary("fr"), clock=lambda: now)
        result = analyzer.analyze("images sans nuages entre janvier et mars 2012")

        assert result.language == "fr"
        assert [f.search_term for f in result.what] == ["-clouds"]
        assert format_instant(result.when[0].start) == "2012-01-01T00:00:00Z"
        assert format_instant(result.when[0].end) == "2012-03-31T23:59:59Z"

    def test_french_accents(self, now):
        """Accented words match their dictionary entries."""
        analyzer = QueryAnalyzer(default_dictionary("fr"), clock=lambda: now)
        result = analyzer.analyze("forêt en été 2011")

        assert [f.search_term for f in result.what] == ["landuse:forest"]
        assert format_instant(result.when[0].start) == "2011-06-21T00:00:00Z"

    def test_analyze_query(self, now):
        """analyze_query uses the packaged dictionary."""
        result = analyze_query("depuis 2 ans", language="fr", now=now)
        assert result.when[0].start == datetime(2024, 10, 19, 12, tzinfo=timezone.utc)
