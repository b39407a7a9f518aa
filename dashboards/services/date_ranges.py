"""
Date-range resolution for analytics filters.

Turns a named preset or an explicit ``start_date``/``end_date`` pair into an
inclusive ``(start, end)`` pair of timezone-aware datetimes in the current
time zone. A preset wins over explicit dates. An explicit start snaps to the
first instant of its day, an explicit end to the last instant of its day.
"""

from datetime import date, datetime, time, timedelta
from typing import NamedTuple, Optional

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .exceptions import InvalidDateFormat


class DateRange(NamedTuple):
    start: Optional[datetime]
    end: Optional[datetime]

    def filter_kwargs(self, field='created_at'):
        """Queryset filter kwargs for this range on ``field``."""
        kwargs = {}
        if self.start is not None:
            kwargs[f'{field}__gte'] = self.start
        if self.end is not None:
            kwargs[f'{field}__lte'] = self.end
        return kwargs

    def contains(self, value: datetime) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


def start_of_day(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.min))


def end_of_day(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.max))


def _day_span(first: date, last: date) -> DateRange:
    return DateRange(start_of_day(first), end_of_day(last))


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _month_end(day: date) -> date:
    next_month = (day.replace(day=28) + timedelta(days=4)).replace(day=1)
    return next_month - timedelta(days=1)


def _today(today):
    return _day_span(today, today)


def _yesterday(today):
    yesterday = today - timedelta(days=1)
    return _day_span(yesterday, yesterday)


def _this_week(today):
    monday = today - timedelta(days=today.weekday())
    return _day_span(monday, monday + timedelta(days=6))


def _last_week(today):
    monday = today - timedelta(days=today.weekday() + 7)
    return _day_span(monday, monday + timedelta(days=6))


def _this_month(today):
    return _day_span(_month_start(today), _month_end(today))


def _last_month(today):
    last_day_prev = _month_start(today) - timedelta(days=1)
    return _day_span(_month_start(last_day_prev), last_day_prev)


def _this_quarter(today):
    first_month = 3 * ((today.month - 1) // 3) + 1
    first = date(today.year, first_month, 1)
    last = _month_end(date(today.year, first_month + 2, 1))
    return _day_span(first, last)


def _this_year(today):
    return _day_span(date(today.year, 1, 1), date(today.year, 12, 31))


def _last_year(today):
    return _day_span(date(today.year - 1, 1, 1), date(today.year - 1, 12, 31))


PRESETS = {
    'today': _today,
    'yesterday': _yesterday,
    'thisWeek': _this_week,
    'lastWeek': _last_week,
    'thisMonth': _this_month,
    'lastMonth': _last_month,
    'thisQuarter': _this_quarter,
    'thisYear': _this_year,
    'lastYear': _last_year,
}

PRESET_CHOICES = list(PRESETS)


def parse_day(value: str, field: str) -> date:
    """
    Parse an ISO date (``2024-03-15``) or datetime string to a calendar day.

    Datetimes are converted to the current time zone before the day is taken.
    """
    text = str(value).strip()
    try:
        parsed = parse_date(text)
        if parsed is not None:
            return parsed
        moment = parse_datetime(text)
    except ValueError:
        # Well formed but impossible, e.g. 2024-02-30
        raise InvalidDateFormat(field, value)
    if moment is None:
        raise InvalidDateFormat(field, value)
    if timezone.is_aware(moment):
        moment = timezone.localtime(moment)
    return moment.date()


def resolve_date_range(preset=None, start_date=None, end_date=None,
                       today: Optional[date] = None) -> Optional[DateRange]:
    """
    Resolve analytics date filters.

    Returns None when nothing is supplied, so callers apply no date filter.
    With only one explicit bound the other side of the range stays open.

    Raises:
        InvalidDateFormat: unknown preset, or an unparsable start/end date.
    """
    if preset:
        builder = PRESETS.get(preset)
        if builder is None:
            raise InvalidDateFormat(
                'preset', preset,
                message=f"Unknown date preset {preset!r}. "
                        f"Valid presets: {', '.join(PRESET_CHOICES)}"
            )
        if today is None:
            today = timezone.localdate()
        return builder(today)

    if not start_date and not end_date:
        return None

    start = start_of_day(parse_day(start_date, 'start_date')) if start_date else None
    end = end_of_day(parse_day(end_date, 'end_date')) if end_date else None
    return DateRange(start, end)


def year_range(year: int) -> DateRange:
    """Full calendar year as an inclusive range."""
    return _day_span(date(year, 1, 1), date(year, 12, 31))
