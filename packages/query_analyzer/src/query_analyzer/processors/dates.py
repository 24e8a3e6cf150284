"""Date grammar shared by the When processor.

Detected date formats:

    ISO8601                   2010-10-23, 2010-10, 2010-10-23T10:00:00Z
    <day> <month> <year>      10 may 2010
    <year> <month> <day>      2010 may 10
    <month> <year>            may 2010
    <year> <month>            2010 may
    <year>                    2010

Month names come from the dictionary, so "10 mai 2010" works with a French
dictionary. Every date covers an interval whose end is inclusive to the
second (e.g. 2010 -> 2010-01-01T00:00:00Z .. 2010-12-31T23:59:59Z).
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta

from ..dictionary import DictionaryCategory
from ..words import QueryManager, parse_number

ISO_DATE_PATTERN = re.compile(
    r"^(\d{4})-(\d{2})(?:-(\d{2})(?:t(\d{2}):(\d{2})(?::(\d{2}))?(?:\.\d+)?z?)?)?$"
)
YEAR_PATTERN = re.compile(r"^\d{4}$")

# Season -> ((start month, start day), (end month, end day), start year offset)
SEASONS: dict[str, tuple[tuple[int, int], tuple[int, int], int]] = {
    "spring": ((3, 21), (6, 20), 0),
    "summer": ((6, 21), (9, 22), 0),
    "autumn": ((9, 23), (12, 20), 0),
    "winter": ((12, 21), (3, 20), -1),
}

TIME_UNITS = ("year", "month", "week", "day")


@dataclass(frozen=True)
class DateMatch:
    """A date found in the word stream.

    Attributes:
        start: First instant covered
        end: Last instant covered
        granularity: year, month, day, season or instant
        first: Position of the first word of the date
        last: Position of the last word of the date
    """

    start: datetime
    end: datetime
    granularity: str
    first: int
    last: int


def day_start(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def day_end(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, 23, 59, 59, tzinfo=timezone.utc)


def year_range(year: int) -> tuple[datetime, datetime]:
    return day_start(date(year, 1, 1)), day_end(date(year, 12, 31))


def month_range(year: int, month: int) -> tuple[datetime, datetime]:
    last_day = calendar.monthrange(year, month)[1]
    return day_start(date(year, month, 1)), day_end(date(year, month, last_day))


def day_range(day: date) -> tuple[datetime, datetime]:
    return day_start(day), day_end(day)


def season_range(season: str, year: int) -> tuple[datetime, datetime]:
    """Northern hemisphere season of a year; winter starts the previous December."""
    (start_month, start_day), (end_month, end_day), offset = SEASONS[season]
    return (
        day_start(date(year + offset, start_month, start_day)),
        day_end(date(year, end_month, end_day)),
    )


def shift(instant: datetime, unit: str, count: int) -> datetime:
    """Move an instant by a whole number of calendar units.

    Month and year shifts clamp to the end of the month (e.g. March 31 minus
    one month is February 28/29).
    """
    if unit not in TIME_UNITS:
        raise ValueError(f"Unknown time unit '{unit}'. Must be one of: {list(TIME_UNITS)}")
    return instant + relativedelta(**{f"{unit}s": count})


def year_at(qm: QueryManager, position: int | None) -> int | None:
    """Four-digit year at position."""
    if not qm.is_valid_position(position):
        return None
    text = qm.text_at(position)
    return int(text) if YEAR_PATTERN.match(text) else None


def month_at(qm: QueryManager, position: int | None) -> int | None:
    tag = qm.lookup(DictionaryCategory.MONTH, position)
    if tag is None:
        return None
    month = parse_number(tag)
    return month if isinstance(month, int) and 1 <= month <= 12 else None


def day_at(qm: QueryManager, position: int | None) -> int | None:
    """Day of month (a literal 1..31) at position."""
    if not qm.is_valid_position(position):
        return None
    value = parse_number(qm.text_at(position))
    return value if isinstance(value, int) and 1 <= value <= 31 else None


def season_at(qm: QueryManager, position: int | None) -> str | None:
    tag = qm.lookup(DictionaryCategory.SEASON, position)
    return tag if tag in SEASONS else None


def time_unit_at(qm: QueryManager, position: int | None) -> str | None:
    tag = qm.lookup(DictionaryCategory.TIME_UNIT, position)
    return tag if tag in TIME_UNITS else None


def _iso_date(qm: QueryManager, position: int) -> DateMatch | None:
    match = ISO_DATE_PATTERN.match(qm.text_at(position))
    if not match:
        return None
    year, month, day, hour, minute, second = (int(g) if g else None for g in match.groups())
    try:
        if hour is not None:
            instant = datetime(year, month, day, hour, minute, second or 0, tzinfo=timezone.utc)
            return DateMatch(instant, instant, "instant", position, position)
        if day is not None:
            start, end = day_range(date(year, month, day))
            return DateMatch(start, end, "day", position, position)
        start, end = month_range(year, month)
    except ValueError:
        return None
    return DateMatch(start, end, "month", position, position)


def _full_date(year: int, month: int, day: int, first: int, last: int) -> DateMatch | None:
    try:
        start, end = day_range(date(year, month, day))
    except ValueError:
        return None
    return DateMatch(start, end, "day", first, last)


def extract_date(qm: QueryManager, position: int | None) -> DateMatch | None:
    """Find a date starting at position, longest format first.

    Words of a date may be separated by stop words but never by consumed words.
    """
    if not qm.is_valid_position(position):
        return None

    iso = _iso_date(qm, position)
    if iso:
        return iso

    second = qm.next_position(position)
    third = qm.next_position(second) if second is not None else None

    # <day> <month> <year>
    day, month, year = day_at(qm, position), month_at(qm, second), year_at(qm, third)
    if day and month and year:
        found = _full_date(year, month, day, position, third)
        if found:
            return found

    # <year> <month> <day>
    year, month, day = year_at(qm, position), month_at(qm, second), day_at(qm, third)
    if year and month and day:
        found = _full_date(year, month, day, position, third)
        if found:
            return found

    # <month> <year>
    month, year = month_at(qm, position), year_at(qm, second)
    if month and year:
        start, end = month_range(year, month)
        return DateMatch(start, end, "month", position, second)

    # <year> <month>
    year, month = year_at(qm, position), month_at(qm, second)
    if year and month:
        start, end = month_range(year, month)
        return DateMatch(start, end, "month", position, second)

    # <year>
    year = year_at(qm, position)
    if year:
        start, end = year_range(year)
        return DateMatch(start, end, "year", position, position)

    return None


def extract_period(qm: QueryManager, position: int | None, now: datetime) -> DateMatch | None:
    """Find a date, a season (with optional year) or a bare month at position.

    Bare months and seasons fall in the year of ``now``.
    """
    found = extract_date(qm, position)
    if found:
        return found

    season = season_at(qm, position)
    if season:
        following = qm.next_position(position)
        year = year_at(qm, following)
        try:
            start, end = season_range(season, year or now.year)
        except ValueError:
            return None
        return DateMatch(start, end, "season", position, following if year else position)

    month = month_at(qm, position)
    if month:
        start, end = month_range(now.year, month)
        return DateMatch(start, end, "month", position, position)

    return None


def today_range(now: datetime, delta_days: int = 0) -> tuple[datetime, datetime]:
    return day_range((now + timedelta(days=delta_days)).date())
