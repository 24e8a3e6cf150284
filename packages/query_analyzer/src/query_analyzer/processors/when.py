"""When processor: temporal expressions.

Detected patterns:

    <today>
    <tomorrow>
    <yesterday>

    <after> "date"
    <before> "date"

    <between> "date" <and> "date"
    <between> "month" <and> "month" (year)
    <between> "day" <and> "day" (month) (year)

    <in> "date"

    <last> "(year|month|day)"
    <last> "numeric" "(year|month|day)"
    "numeric" <last> "(year|month|day)"
    ("numeric") "(year|month|day)" <last>

    <next> ... (same shapes as <last>)

    <since> "numeric" "(year|month|day)"
    <since> "month" "year"
    <since> "date"
    <since> "numeric" <last> "(year|month|day)"
    <since> <last> "numeric" "(year|month|day)"
    <since> <last> "(year|month|day)"
    <since> "(year|month|day)" <last>

    "numeric" "(year|month|day)" <ago>

    "month"
    "season" (year)

All relative patterns are anchored on the ``now`` instant given at
construction. A "week" unit is accepted wherever "day" is.
"""

from datetime import datetime
from functools import partial

from ..dictionary import DictionaryCategory
from ..errors import ErrorCode
from ..modifiers import Connector, TimeModifier, parse_modifier
from ..result import FacetKind, TimeFacet
from ..words import QueryManager
from .base import Processor
from .dates import (
    day_at,
    day_range,
    extract_date,
    extract_period,
    month_at,
    month_range,
    shift,
    time_unit_at,
    today_range,
    year_at,
)


class WhenProcessor(Processor):
    """Extracts temporal facets."""

    facet_kind = FacetKind.WHEN
    modifier_enum = TimeModifier

    def __init__(self, query_manager: QueryManager, now: datetime) -> None:
        self.now = now
        super().__init__(query_manager)

    def handlers(self):
        return {
            TimeModifier.TODAY: partial(self.process_day, 0),
            TimeModifier.TOMORROW: partial(self.process_day, 1),
            TimeModifier.YESTERDAY: partial(self.process_day, -1),
            TimeModifier.AFTER: self.process_after,
            TimeModifier.BEFORE: self.process_before,
            TimeModifier.BETWEEN: self.process_between,
            TimeModifier.IN: self.process_in,
            TimeModifier.LAST: partial(self.process_relative, -1),
            TimeModifier.NEXT: partial(self.process_relative, 1),
            TimeModifier.SINCE: self.process_since,
            TimeModifier.AGO: self.process_ago,
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _add(self, start: datetime | None, end: datetime | None, first: int, last: int) -> bool:
        return self.emit(TimeFacet(start=start, end=end), first, last)

    def _time_modifier_at(self, position: int | None) -> TimeModifier | None:
        return parse_modifier(TimeModifier, self.query_manager.lookup(DictionaryCategory.TIME_MODIFIER, position))

    def _count_at(self, position: int | None) -> int | None:
        """Non-negative whole number at position."""
        value = self.query_manager.number_at(position)
        if isinstance(value, int) and value >= 0:
            return value
        return None

    def _count_before(self, position: int) -> int | None:
        """Position of a whole number right before position.

        The word immediately before is checked first so number words that are
        also stop words ("a year ago") are found.
        """
        if self._count_at(position - 1) is not None:
            return position - 1
        previous = self.query_manager.previous_position(position)
        if previous is not None and self._count_at(previous) is not None:
            return previous
        return None

    def _missing_argument(self, position: int) -> int | None:
        argument = self.query_manager.next_position(position)
        if argument is None:
            self.query_manager.record_error(ErrorCode.MISSING_ARGUMENT, position)
        return argument

    def _not_understood(self, position: int, end: int | None = None) -> bool:
        self.query_manager.record_error(ErrorCode.NOT_UNDERSTOOD, position, end)
        return False

    def _shifted(self, unit: str, count: int) -> datetime | None:
        """now moved by count units, or None outside the datetime range."""
        try:
            return shift(self.now, unit, count)
        except (ValueError, OverflowError):
            return None

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def process_day(self, delta_days: int, position: int) -> bool:
        """today / tomorrow / yesterday."""
        start, end = today_range(self.now, delta_days)
        return self._add(start, end, position, position)

    def process_after(self, position: int) -> bool:
        argument = self._missing_argument(position)
        if argument is None:
            return False
        period = extract_period(self.query_manager, argument, self.now)
        if period is None:
            return self._not_understood(position, argument)
        return self._add(period.start, None, position, period.last)

    def process_before(self, position: int) -> bool:
        argument = self._missing_argument(position)
        if argument is None:
            return False
        period = extract_period(self.query_manager, argument, self.now)
        if period is None:
            return self._not_understood(position, argument)
        return self._add(None, period.start, position, period.last)

    def process_between(self, position: int) -> bool:
        qm = self.query_manager
        argument = self._missing_argument(position)
        if argument is None:
            return False

        # <between> "date" <and> "date"
        first_date = extract_date(qm, argument)
        if first_date:
            conjunction = qm.next_position(first_date.last)
            if self.connector_at(conjunction) == Connector.AND:
                second_date = extract_date(qm, qm.next_position(conjunction))
                if second_date and second_date.end >= first_date.start:
                    return self._add(first_date.start, second_date.end, position, second_date.last)

        # <between> "month" <and> "month" (year)
        first_month = month_at(qm, argument)
        if first_month:
            conjunction = qm.next_position(argument)
            if self.connector_at(conjunction) == Connector.AND:
                second_position = qm.next_position(conjunction)
                second_month = month_at(qm, second_position)
                if second_month:
                    year_position = qm.next_position(second_position)
                    year = year_at(qm, year_position)
                    last = year_position if year else second_position
                    year = year or self.now.year
                    # "between november and february 2013" starts in 2012
                    first_year = year - 1 if first_month > second_month else year
                    if first_year < 1:
                        return self._not_understood(position, last)
                    start, _ = month_range(first_year, first_month)
                    _, end = month_range(year, second_month)
                    return self._add(start, end, position, last)

        # <between> "day" <and> "day" (month) (year)
        first_day = day_at(qm, argument)
        if first_day:
            conjunction = qm.next_position(argument)
            if self.connector_at(conjunction) == Connector.AND:
                second_position = qm.next_position(conjunction)
                second_day = day_at(qm, second_position)
                if second_day:
                    return self._process_day_interval(position, first_day, second_day, second_position)

        return self._not_understood(position, argument)

    def _process_day_interval(self, position: int, first_day: int, second_day: int, last: int) -> bool:
        qm = self.query_manager
        month, year = self.now.month, self.now.year

        month_position = qm.next_position(last)
        found_month = month_at(qm, month_position)
        if found_month:
            month, last = found_month, month_position
            year_position = qm.next_position(month_position)
            found_year = year_at(qm, year_position)
            if found_year:
                year, last = found_year, year_position

        if first_day > second_day:
            return self._not_understood(position, last)
        try:
            start, _ = day_range(datetime(year, month, first_day).date())
            _, end = day_range(datetime(year, month, second_day).date())
        except ValueError:
            return self._not_understood(position, last)
        return self._add(start, end, position, last)

    def process_in(self, position: int) -> bool:
        """in <date|month|season>.

        A non-temporal argument is left untouched without error so the Where
        processor can claim it ("in france").
        """
        argument = self.query_manager.next_position(position)
        if argument is None:
            # a trailing "in" is left to the Where processor, if any
            return False
        return self._process_period(position, argument)

    def _process_period(self, first: int, argument: int) -> bool:
        period = extract_period(self.query_manager, argument, self.now)
        if period is None:
            return False
        return self._add(period.start, period.end, first, period.last)

    def process_relative(self, direction: int, position: int) -> bool:
        """last / next, with the count before or after the modifier."""
        qm = self.query_manager
        after = qm.next_position(position)

        # <last> "numeric" "unit"
        count = self._count_at(after)
        if count is not None:
            unit_position = qm.next_position(after)
            unit = time_unit_at(qm, unit_position)
            if unit:
                return self._add_relative(direction, count, unit, position, unit_position)

        # "numeric" <last> "unit"  /  <last> "unit"
        unit = time_unit_at(qm, after)
        if unit:
            count_position = self._count_before(position)
            # "2012 last year" keeps 2012 as a date
            if count_position is not None and year_at(qm, count_position) is None:
                return self._add_relative(direction, self._count_at(count_position), unit, count_position, after)
            return self._add_relative(direction, 1, unit, position, after)

        # ("numeric") "unit" <last>
        before = qm.previous_position(position)
        unit = time_unit_at(qm, before)
        if unit:
            count_position = self._count_before(before)
            if count_position is not None:
                return self._add_relative(direction, self._count_at(count_position), unit, count_position, position)
            return self._add_relative(direction, 1, unit, before, position)

        return self._not_understood(position)

    def _add_relative(self, direction: int, count: int, unit: str, first: int, last: int) -> bool:
        shifted = self._shifted(unit, direction * count)
        if shifted is None:
            return self._not_understood(first, last)
        if direction < 0:
            return self._add(shifted, self.now, first, last)
        return self._add(self.now, shifted, first, last)

    def process_since(self, position: int) -> bool:
        qm = self.query_manager
        argument = self._missing_argument(position)
        if argument is None:
            return False

        # <since> "date" / "month" ("year")
        period = extract_period(qm, argument, self.now)
        if period:
            return self._add(period.start, None, position, period.last)

        duration = self._duration_at(argument)
        if duration:
            count, unit, last = duration
            start = self._shifted(unit, -count)
            if start is None:
                return self._not_understood(position, last)
            return self._add(start, None, position, last)

        return self._not_understood(position, argument)

    def _duration_at(self, position: int) -> tuple[int, str, int] | None:
        """Parse a duration starting at position.

        Returns (count, unit, position of last word) for:
            "numeric" "unit"
            "numeric" <last> "unit"
            <last> ("numeric") "unit"
            "unit" <last>
        """
        qm = self.query_manager

        count = self._count_at(position)
        if count is not None:
            following = qm.next_position(position)
            if self._time_modifier_at(following) == TimeModifier.LAST:
                following = qm.next_position(following)
            unit = time_unit_at(qm, following)
            return (count, unit, following) if unit else None

        if self._time_modifier_at(position) == TimeModifier.LAST:
            following = qm.next_position(position)
            count = self._count_at(following)
            if count is not None:
                following = qm.next_position(following)
            unit = time_unit_at(qm, following)
            return (1 if count is None else count, unit, following) if unit else None

        unit = time_unit_at(qm, position)
        if unit:
            following = qm.next_position(position)
            if self._time_modifier_at(following) == TimeModifier.LAST:
                return (1, unit, following)

        return None

    def process_ago(self, position: int) -> bool:
        """"numeric" "unit" <ago>; the count defaults to 1."""
        qm = self.query_manager
        unit_position = qm.previous_position(position)
        unit = time_unit_at(qm, unit_position)
        if unit is None:
            return self._not_understood(position)

        count_position = self._count_before(unit_position)
        count = 1 if count_position is None else self._count_at(count_position)
        first = unit_position if count_position is None else count_position

        instant = self._shifted(unit, -count)
        if instant is None:
            return self._not_understood(first, position)
        return self._add(instant, instant, first, position)

    def process_word(self, position: int) -> bool:
        """Bare date, month or season."""
        return self._process_period(position, position)
