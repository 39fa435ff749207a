"""Calendar-day arithmetic

All helpers work on ``datetime.date`` values. Datetimes are reduced to their
own calendar fields (no timezone conversion), so a value never shifts to a
neighbouring day because of the host's offset.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, List, Optional, Union

from domain.exceptions import InvalidRangeError

DateLike = Union[date, datetime, str]

DATE_KEY_FORMAT = "%Y-%m-%d"


def normalize_date(value: DateLike) -> date:
    """Reduce a date, datetime or ``YYYY-MM-DD`` key to a calendar date"""
    if isinstance(value, datetime):
        return date(value.year, value.month, value.day)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_date_key(value)
    raise TypeError(f"Unsupported date value: {value!r}")


def today() -> date:
    return date.today()


def to_date_key(value: DateLike) -> str:
    """Canonical ``YYYY-MM-DD`` key built from the calendar fields"""
    d = normalize_date(value)
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_date_key(key: str) -> date:
    try:
        return datetime.strptime(key.strip(), DATE_KEY_FORMAT).date()
    except ValueError:
        raise ValueError(f"Invalid date key {key!r}, expected YYYY-MM-DD")


def add_days(value: DateLike, days: int) -> date:
    return normalize_date(value) + timedelta(days=days)


def days_between(a: DateLike, b: DateLike) -> int:
    """Signed number of calendar days from ``a`` to ``b``"""
    return (normalize_date(b) - normalize_date(a)).days


def is_past_date(value: DateLike, reference_today: Optional[DateLike] = None) -> bool:
    """True if the calendar day lies strictly before today"""
    ref = normalize_date(reference_today) if reference_today is not None else today()
    return normalize_date(value) < ref


def is_same_day(a: DateLike, b: DateLike) -> bool:
    return normalize_date(a) == normalize_date(b)


class DaySpan:
    """Half-open, ascending run of calendar days ``[start, end)``

    Iterating never consumes the span, so it can be walked any number of times.
    """

    def __init__(self, start: DateLike, end: DateLike):
        self.start = normalize_date(start)
        self.end = normalize_date(end)
        if self.end < self.start:
            raise InvalidRangeError(self.start, self.end)

    def __iter__(self) -> Iterator[date]:
        current = self.start
        while current < self.end:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, (date, str)):
            return False
        d = normalize_date(value)
        return self.start <= d < self.end

    def keys(self) -> Iterator[str]:
        for d in self:
            yield to_date_key(d)

    def __repr__(self) -> str:
        return f"DaySpan({self.start.isoformat()}, {self.end.isoformat()})"


def enumerate_days(start: DateLike, end: DateLike) -> DaySpan:
    """Days from ``start`` up to but excluding ``end``

    Raises ``InvalidRangeError`` when ``end`` is before ``start``; an empty
    span (``start == end``) is allowed.
    """
    return DaySpan(start, end)


def date_keys(dates) -> List[str]:
    """Canonical keys for a collection of dates or keys, sorted and de-duplicated"""
    return sorted({to_date_key(d) for d in dates})


def utc_now() -> datetime:
    """Current UTC time as a timezone-aware datetime"""
    return datetime.now(timezone.utc)
