"""Error codes and exceptions for the query analyzer.

Two kinds of failure exist:

- Analysis errors are accumulated while scanning a query. They never abort the
  analysis and are returned with the result (see ``ErrorCode``).
- Exceptions are raised for caller mistakes (missing query) or broken
  collaborator data (unreadable dictionary or gazetteer files).
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ErrorCode(str, Enum):
    """Non-fatal errors recorded against word positions."""

    NOT_UNDERSTOOD = "NOT_UNDERSTOOD"
    MISSING_ARGUMENT = "MISSING_ARGUMENT"
    MISSING_UNIT = "MISSING_UNIT"
    INVALID_UNIT = "INVALID_UNIT"
    LOCATION_NOT_FOUND = "LOCATION_NOT_FOUND"


@dataclass
class AnalysisError:
    """An error recorded during analysis.

    Attributes:
        code: Error code
        position: Position of the first word involved
        context: Text of the word(s) involved
    """

    code: ErrorCode
    position: int
    context: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"code": self.code.value, "position": self.position, "context": self.context}


class QueryAnalyzerError(Exception):
    """Base class for query analyzer exceptions."""


class MissingQueryError(QueryAnalyzerError, ValueError):
    """Raised when analyze() is called without a query."""

    def __init__(self, message: str = "Missing mandatory searchTerms") -> None:
        super().__init__(message)


class DataLoadError(QueryAnalyzerError):
    """Raised when a dictionary or gazetteer file cannot be loaded.

    Attributes:
        file_path: Path to the file that failed
        field_name: Entry that caused the error (if applicable)
        message: Human-readable error description
    """

    def __init__(
        self,
        message: str,
        file_path: str | Path | None = None,
        field_name: str | None = None,
    ) -> None:
        self.file_path = str(file_path) if file_path else None
        self.field_name = field_name
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context."""
        parts = []
        if self.file_path:
            parts.append(f"[{self.file_path}]")
        if self.field_name:
            parts.append(f"field '{self.field_name}':")
        parts.append(self.message)
        return " ".join(parts)


class DictionaryLoadError(DataLoadError):
    """Raised when a dictionary file is unreadable or malformed."""


class GazetteerLoadError(DataLoadError):
    """Raised when a gazetteer file is unreadable or malformed."""
