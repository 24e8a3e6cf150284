"""Free-text search query analyzer.

Extracts what (keywords, quantities), when (time ranges) and where
(toponyms) facets from a search phrase.
"""

__version__ = "0.1.0"

from query_analyzer.analyzer import QueryAnalyzer, analyze_query
from query_analyzer.dictionary import StaticDictionary, default_dictionary, load_dictionary
from query_analyzer.errors import (
    AnalysisError,
    DictionaryLoadError,
    ErrorCode,
    GazetteerLoadError,
    MissingQueryError,
    QueryAnalyzerError,
)
from query_analyzer.gazetteer import HttpGazetteer, StaticGazetteer, Toponym, load_gazetteer
from query_analyzer.result import (
    AnalysisResult,
    KeywordFacet,
    LocationFacet,
    QuantityFacet,
    TimeFacet,
)

__all__ = [
    "AnalysisError",
    "AnalysisResult",
    "DictionaryLoadError",
    "ErrorCode",
    "GazetteerLoadError",
    "HttpGazetteer",
    "KeywordFacet",
    "LocationFacet",
    "MissingQueryError",
    "QuantityFacet",
    "QueryAnalyzer",
    "QueryAnalyzerError",
    "StaticDictionary",
    "StaticGazetteer",
    "TimeFacet",
    "Toponym",
    "analyze_query",
    "default_dictionary",
    "load_dictionary",
    "load_gazetteer",
]
