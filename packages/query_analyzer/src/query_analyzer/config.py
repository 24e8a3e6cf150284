"""Analyzer configuration from environment variables."""

import logging
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .analyzer import QueryAnalyzer
from .dictionary import default_dictionary, load_dictionary
from .gazetteer import Gazetteer, HttpGazetteer, load_gazetteer

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Analyzer settings.

    Every field can be set with a ``QUERY_ANALYZER_`` prefixed environment
    variable (e.g. ``QUERY_ANALYZER_GAZETTEER_URL``) or in a ``.env`` file.
    """

    # Dictionary
    language: str = "en"
    dictionary_path: Path | None = None

    # Gazetteer (a file takes precedence over a URL)
    gazetteer_path: Path | None = None
    gazetteer_url: str | None = None
    gazetteer_timeout_s: float = 5.0
    gazetteer_cache_size: int = 1024
    max_location_words: int = 4

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="QUERY_ANALYZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def build_gazetteer(settings: Settings) -> Gazetteer | None:
    if settings.gazetteer_path:
        return load_gazetteer(settings.gazetteer_path)
    if settings.gazetteer_url:
        return HttpGazetteer(
            settings.gazetteer_url,
            timeout_s=settings.gazetteer_timeout_s,
            cache_size=settings.gazetteer_cache_size,
        )
    return None


def build_analyzer(settings: Settings | None = None) -> QueryAnalyzer:
    """Wire a QueryAnalyzer from settings.

    Raises:
        DictionaryLoadError: If the dictionary file cannot be loaded
        GazetteerLoadError: If the gazetteer file cannot be loaded
    """
    settings = settings or Settings()
    if settings.dictionary_path:
        dictionary = load_dictionary(settings.dictionary_path)
    else:
        dictionary = default_dictionary(settings.language)

    gazetteer = build_gazetteer(settings)
    if gazetteer is None:
        logger.info("No gazetteer configured, location analysis disabled")

    return QueryAnalyzer(
        dictionary,
        gazetteer=gazetteer,
        max_location_words=settings.max_location_words,
    )
