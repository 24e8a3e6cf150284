"""Word stream shared by the What, When and Where processors.

The QueryManager tokenizes a query and keeps one state record per word
position. Processors read words through position-indexed accessors and claim
them with ``try_consume``/``consume_span``; a claimed position can never be
claimed again. Failed patterns are reported with ``record_error``, which
accumulates errors without consuming anything.
"""

import logging
import re
from dataclasses import dataclass

from .dictionary import MODIFIER_CATEGORIES, Dictionary, DictionaryCategory
from .errors import AnalysisError, ErrorCode
from .result import FacetKind, Word

logger = logging.getLogger(__name__)

# Characters replaced by a space before splitting
SEPARATORS = ("'", "’", ",", ";")

NUMERIC_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")
# "50%" -> "50", "%"
PERCENT_PATTERN = re.compile(r"^([+-]?\d+(?:\.\d+)?)%(.*)$")


def parse_number(text: str) -> int | float | None:
    """Parse a numeric literal, keeping integers as int."""
    if not NUMERIC_PATTERN.match(text):
        return None
    value = float(text)
    return int(value) if value.is_integer() else value


@dataclass(frozen=True)
class SpanMatch:
    """Dictionary match over the inclusive word span [start, end]."""

    tag: str
    start: int
    end: int


class QueryManager:
    """Token sequence and consumption state of one query."""

    def __init__(self, dictionary: Dictionary) -> None:
        self.dictionary = dictionary
        self.words: list[Word] = []
        self.errors: list[AnalysisError] = []

    @property
    def length(self) -> int:
        return len(self.words)

    def tokenize(self, query: str) -> list[Word]:
        """Split a query into normalized words.

        In order:
          - replace ' , and ; characters by a space
          - normalize (lowercase, no accents)
          - split on whitespace, dropping empty tokens
          - split a number glued to '%' into two tokens
        """
        text = query
        for char in SEPARATORS:
            text = text.replace(char, " ")
        text = self.dictionary.normalize(text)

        tokens: list[str] = []
        for raw in text.split():
            match = PERCENT_PATTERN.match(raw)
            if match:
                tokens.append(match.group(1))
                tokens.append("%")
                if match.group(2):
                    tokens.append(match.group(2))
            else:
                tokens.append(raw)
        return [Word(text=token, position=i) for i, token in enumerate(tokens)]

    def set_query(self, query: str) -> None:
        """Reset state for a new query."""
        self.words = self.tokenize(query)
        self.errors = []

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def is_valid_position(self, position: int | None) -> bool:
        """True if the position exists and is not consumed."""
        if position is None or position < 0 or position >= self.length:
            return False
        return not self.words[position].consumed

    def word_at(self, position: int) -> Word:
        return self.words[position]

    def text_at(self, position: int) -> str:
        return self.words[position].text

    def phrase(self, start: int, end: int) -> str:
        """Text of the inclusive span [start, end]."""
        return " ".join(w.text for w in self.words[start : end + 1])

    def lookup(self, category: DictionaryCategory, position: int | None) -> str | None:
        """Dictionary tag of a single unconsumed word."""
        if not self.is_valid_position(position):
            return None
        return self.dictionary.lookup(category, self.words[position].text)

    def lookup_span(
        self,
        category: DictionaryCategory,
        position: int | None,
        max_words: int = 3,
        backwards: bool = False,
    ) -> SpanMatch | None:
        """Greedy longest-match lookup of a multi-word phrase.

        The span starts at ``position`` (or ends there when ``backwards``) and
        only covers unconsumed words.
        """
        if not self.is_valid_position(position):
            return None
        for size in range(max_words, 0, -1):
            if backwards:
                start, end = position - size + 1, position
            else:
                start, end = position, position + size - 1
            if start < 0 or end >= self.length:
                continue
            if any(w.consumed for w in self.words[start : end + 1]):
                continue
            tag = self.dictionary.lookup(category, self.phrase(start, end))
            if tag is not None:
                return SpanMatch(tag=tag, start=start, end=end)
        return None

    def number_at(self, position: int | None) -> int | float | None:
        """Numeric value of a word: a literal or a dictionary number word."""
        if not self.is_valid_position(position):
            return None
        text = self.words[position].text
        value = parse_number(text)
        if value is not None:
            return value
        tag = self.dictionary.lookup(DictionaryCategory.NUMBER, text)
        return parse_number(tag) if tag is not None else None

    def is_stop_word(self, position: int) -> bool:
        return self.dictionary.lookup(DictionaryCategory.STOP_WORD, self.words[position].text) is not None

    def is_modifier(self, position: int) -> bool:
        """True if the word is a modifier or connector of any category."""
        text = self.words[position].text
        return any(self.dictionary.lookup(c, text) is not None for c in MODIFIER_CATEGORIES)

    def next_position(self, position: int) -> int | None:
        """Next unconsumed, non-stop word after position.

        Returns None at the end of the query or when a consumed word is met.
        """
        i = position + 1
        while i < self.length:
            if self.words[i].consumed:
                return None
            if not self.is_stop_word(i):
                return i
            i += 1
        return None

    def previous_position(self, position: int) -> int | None:
        """Previous unconsumed, non-stop word before position."""
        i = position - 1
        while i >= 0:
            if self.words[i].consumed:
                return None
            if not self.is_stop_word(i):
                return i
            i -= 1
        return None

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def try_consume(self, position: int, facet: FacetKind) -> bool:
        """Claim one position. Returns False if it is already claimed."""
        if not self.is_valid_position(position):
            return False
        word = self.words[position]
        word.consumed = True
        word.facet = facet
        return True

    def consume_span(self, start: int, end: int, facet: FacetKind) -> bool:
        """Claim every position of [start, end], or none of them."""
        if start > end or not all(self.is_valid_position(i) for i in range(start, end + 1)):
            return False
        for i in range(start, end + 1):
            self.try_consume(i, facet)
        return True

    def record_error(self, code: ErrorCode, position: int, end: int | None = None) -> None:
        """Record a non-fatal error on a word (or span of words)."""
        end = position if end is None else min(end, self.length - 1)
        context = self.phrase(position, end)
        self.errors.append(AnalysisError(code=code, position=position, context=context))
        self.words[position].error = code.value
        logger.debug(f"{code.value} at position {position}: '{context}'")
