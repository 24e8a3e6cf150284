"""Localized dictionary lookups used by the query analyzer.

The dictionary maps surface words (and short multi-word phrases) of one
language to canonical tags. The analyzer only depends on the ``Dictionary``
protocol; ``StaticDictionary`` is an in-memory implementation loaded from YAML.

Dictionary YAML format:
    language: en
    time_modifier:
      since: since
      from: since
    month:
      march: "3"
    keyword:
      forest: landuse:forest
    stop_word:
      the: the

Keys of each category mapping are surface words, values are canonical tags.
"""

import logging
import unicodedata
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any, Protocol

import yaml

from .errors import DictionaryLoadError

logger = logging.getLogger(__name__)


class DictionaryCategory(str, Enum):
    """Lookup tables of a dictionary."""

    QUANTITY_MODIFIER = "quantity_modifier"
    TIME_MODIFIER = "time_modifier"
    LOCATION_MODIFIER = "location_modifier"
    CONNECTOR = "connector"
    UNIT = "unit"
    QUANTITY = "quantity"
    KEYWORD = "keyword"
    MONTH = "month"
    SEASON = "season"
    TIME_UNIT = "time_unit"
    NUMBER = "number"
    STOP_WORD = "stop_word"


MODIFIER_CATEGORIES: tuple[DictionaryCategory, ...] = (
    DictionaryCategory.QUANTITY_MODIFIER,
    DictionaryCategory.TIME_MODIFIER,
    DictionaryCategory.LOCATION_MODIFIER,
    DictionaryCategory.CONNECTOR,
)

SUPPORTED_LANGUAGES = ("en", "fr")


def strip_diacritics(s: str) -> str:
    """Remove diacritical marks from a string.

    E.g., "février" -> "fevrier", "été" -> "ete"
    """
    normalized = unicodedata.normalize("NFD", s)
    return "".join(c for c in normalized if not unicodedata.combining(c))


def normalize_text(text: str) -> str:
    """Lowercase and accent-strip text."""
    return strip_diacritics(text).lower()


class Dictionary(Protocol):
    """Interface consumed by the analyzer."""

    language: str

    def normalize(self, text: str) -> str:
        """Return text in lowercase without accents."""
        ...

    def lookup(self, category: DictionaryCategory, phrase: str) -> str | None:
        """Return the canonical tag of a normalized word or phrase, if any."""
        ...


class StaticDictionary:
    """In-memory dictionary built from category mappings.

    Keys are normalized at construction so lookups on normalized query words
    match accented or capitalized dictionary entries.
    """

    def __init__(
        self,
        language: str,
        entries: dict[DictionaryCategory, dict[str, str]] | None = None,
    ) -> None:
        self.language = language
        self._tables: dict[DictionaryCategory, dict[str, str]] = {
            category: {} for category in DictionaryCategory
        }
        for category, table in (entries or {}).items():
            for word, tag in table.items():
                self.add(category, word, tag)

    def normalize(self, text: str) -> str:
        return normalize_text(text)

    def add(self, category: DictionaryCategory, word: str, tag: str) -> None:
        """Add (or replace) one entry."""
        key = " ".join(self.normalize(word).split())
        self._tables[DictionaryCategory(category)][key] = str(tag)

    def lookup(self, category: DictionaryCategory, phrase: str) -> str | None:
        return self._tables[category].get(phrase)

    def words(self, category: DictionaryCategory) -> list[str]:
        """List the surface words of a category, sorted."""
        return sorted(self._tables[category])

    def __len__(self) -> int:
        return sum(len(table) for table in self._tables.values())

    def __repr__(self) -> str:
        return f"StaticDictionary(language={self.language!r}, entries={len(self)})"


def parse_dictionary(data: dict[str, Any], file_path: Path | None = None) -> StaticDictionary:
    """Build a dictionary from parsed YAML data.

    Args:
        data: Mapping with a 'language' key and one mapping per category
        file_path: Path to source file for error messages

    Returns:
        Populated StaticDictionary

    Raises:
        DictionaryLoadError: If the data is malformed
    """
    language = data.get("language")
    if not isinstance(language, str) or not language:
        raise DictionaryLoadError("Missing 'language'", file_path=file_path, field_name="language")

    dictionary = StaticDictionary(language)
    for key, table in data.items():
        if key == "language":
            continue
        try:
            category = DictionaryCategory(key)
        except ValueError:
            raise DictionaryLoadError(
                f"Unknown category '{key}'. Must be one of: "
                f"{sorted(c.value for c in DictionaryCategory)}",
                file_path=file_path,
                field_name=key,
            ) from None
        if not isinstance(table, dict):
            raise DictionaryLoadError(
                f"Expected mapping, got {type(table).__name__}",
                file_path=file_path,
                field_name=key,
            )
        for word, tag in table.items():
            if tag is None:
                raise DictionaryLoadError(
                    f"Empty tag for '{word}'", file_path=file_path, field_name=key
                )
            dictionary.add(category, str(word), str(tag))

    logger.debug(f"Loaded {len(dictionary)} dictionary entries for '{language}'")
    return dictionary


def load_dictionary(file_path: Path) -> StaticDictionary:
    """Load a dictionary from a YAML file.

    Raises:
        DictionaryLoadError: If file cannot be read or parsed
    """
    try:
        content = Path(file_path).read_text(encoding="utf-8")
    except OSError as e:
        raise DictionaryLoadError(f"Cannot read file: {e}", file_path=file_path) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise DictionaryLoadError(f"Invalid YAML: {e}", file_path=file_path) from e

    if not isinstance(data, dict):
        raise DictionaryLoadError(
            f"Expected dict at root, got {type(data).__name__}", file_path=file_path
        )
    return parse_dictionary(data, file_path)


def default_dictionary(language: str = "en") -> StaticDictionary:
    """Load one of the dictionaries packaged with the analyzer.

    Raises:
        DictionaryLoadError: If no packaged dictionary exists for the language
    """
    if language not in SUPPORTED_LANGUAGES:
        raise DictionaryLoadError(
            f"No packaged dictionary for '{language}'. Supported: {list(SUPPORTED_LANGUAGES)}"
        )
    resource = resources.files("query_analyzer") / "data" / f"dictionary_{language}.yaml"
    with resources.as_file(resource) as path:
        return load_dictionary(path)
