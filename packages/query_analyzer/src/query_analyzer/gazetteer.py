"""Place-name resolution for the Where processor.

The analyzer only depends on the ``Gazetteer`` protocol. Two implementations
are provided:

- ``StaticGazetteer``: in-memory table of place phrases, loadable from YAML
- ``HttpGazetteer``: client for a remote gazetteer service

Gazetteer YAML format:
    france:
      name: France
      geometry: POLYGON((-5.1 41.3, 9.6 41.3, 9.6 51.1, -5.1 51.1, -5.1 41.3))
    united kingdom:
      name: United Kingdom
      geometry: POLYGON((...))
"""

import logging
from dataclasses import asdict, dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

import httpx
import yaml

from .dictionary import normalize_text
from .errors import GazetteerLoadError
from .words import SEPARATORS

logger = logging.getLogger(__name__)

GAZETTEER_TIMEOUT_S = 5.0
GAZETTEER_CACHE_SIZE = 1024


@dataclass(frozen=True)
class Toponym:
    """A resolved place.

    Attributes:
        name: Canonical place name
        geometry: Place geometry (WKT or GeoJSON)
    """

    name: str
    geometry: Any = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


class Gazetteer(Protocol):
    """Interface consumed by the Where processor."""

    def resolve(self, phrase: str) -> Toponym | None:
        """Resolve a normalized place phrase, or return None."""
        ...


class StaticGazetteer:
    """In-memory gazetteer keyed by normalized place phrase."""

    def __init__(self, entries: dict[str, Toponym] | None = None) -> None:
        self._entries: dict[str, Toponym] = {}
        for phrase, toponym in (entries or {}).items():
            self.add(phrase, toponym)

    def add(self, phrase: str, toponym: Toponym) -> None:
        """Add (or replace) one place.

        The phrase is split the way queries are, so "Côte d'Ivoire" is stored
        as "cote d ivoire".
        """
        for char in SEPARATORS:
            phrase = phrase.replace(char, " ")
        self._entries[" ".join(normalize_text(phrase).split())] = toponym

    def resolve(self, phrase: str) -> Toponym | None:
        return self._entries.get(phrase)

    def __len__(self) -> int:
        return len(self._entries)


def load_gazetteer(file_path: Path) -> StaticGazetteer:
    """Load a gazetteer from a YAML file.

    Raises:
        GazetteerLoadError: If file cannot be read or parsed
    """
    try:
        content = Path(file_path).read_text(encoding="utf-8")
    except OSError as e:
        raise GazetteerLoadError(f"Cannot read file: {e}", file_path=file_path) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise GazetteerLoadError(f"Invalid YAML: {e}", file_path=file_path) from e

    if not isinstance(data, dict):
        raise GazetteerLoadError(
            f"Expected dict at root, got {type(data).__name__}", file_path=file_path
        )

    gazetteer = StaticGazetteer()
    for phrase, entry in data.items():
        if isinstance(entry, str):
            entry = {"name": entry}
        if not isinstance(entry, dict) or not entry.get("name"):
            raise GazetteerLoadError(
                "Entry must be a name or a mapping with a 'name'",
                file_path=file_path,
                field_name=str(phrase),
            )
        gazetteer.add(str(phrase), Toponym(name=str(entry["name"]), geometry=entry.get("geometry")))

    logger.debug(f"Loaded {len(gazetteer)} toponyms from {file_path}")
    return gazetteer


class HttpGazetteer:
    """Client for a remote gazetteer service.

    Sends ``GET <url>?q=<phrase>`` and expects a JSON body of the form
    ``{"results": [{"name": ..., "geometry": ...}, ...]}``; the first result
    wins. Service failures are logged and resolve to None so a broken
    gazetteer never aborts an analysis.

    Resolutions are memoized per instance; the cache is safe for concurrent
    readers.
    """

    def __init__(
        self,
        url: str,
        timeout_s: float = GAZETTEER_TIMEOUT_S,
        cache_size: int = GAZETTEER_CACHE_SIZE,
    ) -> None:
        self.url = url
        self.timeout_s = timeout_s
        self._cached_fetch = lru_cache(maxsize=cache_size)(self._fetch)

    def resolve(self, phrase: str) -> Toponym | None:
        return self._cached_fetch(phrase)

    def _fetch(self, phrase: str) -> Toponym | None:
        try:
            response = httpx.get(self.url, params={"q": phrase}, timeout=self.timeout_s)
        except httpx.TimeoutException:
            logger.warning(f"Gazetteer timeout after {self.timeout_s}s for '{phrase}'")
            return None
        except httpx.RequestError as e:
            logger.warning(f"Gazetteer request error: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Gazetteer error: HTTP {response.status_code}")
            return None

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"Gazetteer response not valid JSON: {response.text[:100]}")
            return None

        results = data.get("results", []) if isinstance(data, dict) else []
        if not isinstance(results, list) or (results and not isinstance(results[0], dict)):
            logger.warning(f"Gazetteer response has unexpected shape: {str(data)[:100]}")
            return None
        if not results or not results[0].get("name"):
            return None

        top = results[0]
        return Toponym(name=top["name"], geometry=top.get("geometry"))
