"""Canonical modifier tags returned by the dictionary.

A modifier is a word that changes how the following (or preceding) words are
interpreted. Localized surface words ("avec", "with", "having") all map to one
canonical value, and each processor dispatches on these closed enums.

Note: adding a member here requires adding a handler in the matching processor.
Each processor checks its handler table against these enums when it is built.
"""

from enum import Enum


class QuantityModifier(str, Enum):
    """Modifiers handled by the What processor."""

    WITH = "with"
    WITHOUT = "without"
    LESSER = "lesser"
    GREATER = "greater"
    EQUAL = "equal"


class TimeModifier(str, Enum):
    """Modifiers handled by the When processor."""

    TODAY = "today"
    TOMORROW = "tomorrow"
    YESTERDAY = "yesterday"
    AFTER = "after"
    BEFORE = "before"
    BETWEEN = "between"
    IN = "in"
    LAST = "last"
    NEXT = "next"
    SINCE = "since"
    AGO = "ago"


class LocationModifier(str, Enum):
    """Modifiers handled by the Where processor."""

    IN = "in"


class Connector(str, Enum):
    """Auxiliary words used inside modifier phrases."""

    AND = "and"
    THAN = "than"
    TO = "to"
    OF = "of"


class Comparator(str, Enum):
    """Comparison operators of a quantity facet."""

    LT = "LT"
    GT = "GT"
    EQ = "EQ"


def parse_modifier(enum_cls: type[Enum], tag: str | None) -> Enum | None:
    """Convert a dictionary tag to a modifier enum member.

    Args:
        enum_cls: Modifier enum to convert to
        tag: Canonical tag from the dictionary (may be None)

    Returns:
        Enum member, or None if the tag is missing or unknown
    """
    if tag is None:
        return None
    try:
        return enum_cls(tag.lower())
    except ValueError:
        return None


def check_handlers(enum_cls: type[Enum], handlers: dict) -> None:
    """Ensure a dispatch table covers every member of a modifier enum.

    Raises:
        TypeError: If any member has no handler
    """
    missing = [member.value for member in enum_cls if member not in handlers]
    if missing:
        raise TypeError(f"No handler for {enum_cls.__name__} members: {sorted(missing)}")
