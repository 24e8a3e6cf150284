"""Shared fixtures for query analyzer tests."""

from datetime import datetime, timezone

import pytest

from query_analyzer.analyzer import QueryAnalyzer
from query_analyzer.dictionary import StaticDictionary, default_dictionary
from query_analyzer.gazetteer import StaticGazetteer, Toponym
from query_analyzer.words import QueryManager

# Anchor of every relative date in the tests
NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)

FRANCE = Toponym(name="France", geometry="POLYGON((-5.1 41.3, 9.6 41.3, 9.6 51.1, -5.1 51.1, -5.1 41.3))")
UNITED_KINGDOM = Toponym(name="United Kingdom", geometry="POLYGON((-8.6 49.9, 1.8 49.9, 1.8 60.9, -8.6 60.9, -8.6 49.9))")


@pytest.fixture(scope="session")
def dictionary() -> StaticDictionary:
    return default_dictionary("en")


@pytest.fixture
def gazetteer() -> StaticGazetteer:
    return StaticGazetteer({"france": FRANCE, "united kingdom": UNITED_KINGDOM})


@pytest.fixture
def analyzer(dictionary) -> QueryAnalyzer:
    """Analyzer without gazetteer, anchored on NOW."""
    return QueryAnalyzer(dictionary, clock=lambda: NOW)


@pytest.fixture
def geo_analyzer(dictionary, gazetteer) -> QueryAnalyzer:
    """Analyzer with the test gazetteer, anchored on NOW."""
    return QueryAnalyzer(dictionary, gazetteer=gazetteer, clock=lambda: NOW)


@pytest.fixture
def make_manager(dictionary):
    """Build a QueryManager already loaded with a query."""

    def _make(query: str) -> QueryManager:
        manager = QueryManager(dictionary)
        manager.set_query(query)
        return manager

    return _make


@pytest.fixture
def now() -> datetime:
    return NOW
