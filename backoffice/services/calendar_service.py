"""
Back Office Reporting - Calendar Service

Bucket sequences used to zero-fill aggregated series:
- Inclusive day sequences keyed "YYYY-MM-DD"
- The twelve fixed calendar months with localized labels
- Normalization of caller bounds into calendar dates of the report zone
"""

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import List, Union

from dateutil import tz
from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta


DAY_KEY_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class MonthBucket:
    """One calendar month; index 1 is always January."""
    index: int
    name: str
    short: str


# (full name, abbreviation) in calendar order
MONTH_LABELS = {
    "id": (
        ("Januari", "Jan"),
        ("Februari", "Feb"),
        ("Maret", "Mar"),
        ("April", "Apr"),
        ("Mei", "Mei"),
        ("Juni", "Jun"),
        ("Juli", "Jul"),
        ("Agustus", "Agu"),
        ("September", "Sep"),
        ("Oktober", "Okt"),
        ("November", "Nov"),
        ("Desember", "Des"),
    ),
    "en": (
        ("January", "Jan"),
        ("February", "Feb"),
        ("March", "Mar"),
        ("April", "Apr"),
        ("May", "May"),
        ("June", "Jun"),
        ("July", "Jul"),
        ("August", "Aug"),
        ("September", "Sep"),
        ("October", "Oct"),
        ("November", "Nov"),
        ("December", "Dec"),
    ),
}


def day_key(value: date) -> str:
    return value.strftime(DAY_KEY_FORMAT)


def daily_sequence(start: date, end: date) -> List[str]:
    """
    Every calendar day from start to end, both inclusive, as day keys.

    Returns a single key when start == end and an empty list when
    start is after end.
    """
    days = []
    current = start
    while current <= end:
        days.append(day_key(current))
        current = current + relativedelta(days=1)
    return days


def month_buckets(locale: str = "id") -> List[MonthBucket]:
    """The twelve calendar months labelled for the given locale."""
    try:
        labels = MONTH_LABELS[locale]
    except KeyError:
        raise ValueError(
            f"Unsupported month locale '{locale}'. Expected one of: {', '.join(MONTH_LABELS)}"
        )
    return [
        MonthBucket(index=index, name=name, short=short)
        for index, (name, short) in enumerate(labels, start=1)
    ]


def report_zone(timezone: Union[str, tzinfo]) -> tzinfo:
    """The tzinfo of a report zone; raises ValueError for unknown names."""
    if isinstance(timezone, tzinfo):
        return timezone
    zone = tz.gettz(timezone)
    if zone is None:
        raise ValueError(f"Unknown time zone '{timezone}'")
    return zone


def to_report_date(value: Union[date, datetime, str], timezone: Union[str, tzinfo]) -> date:
    """
    Normalize a caller bound to a calendar date in the report zone.

    Plain dates and date-only strings are already calendar dates and are
    returned unchanged. Datetimes are converted into the zone first; a
    naive datetime is taken to be UTC, like the stored timestamps.
    Raises ValueError for strings that are not ISO-8601.
    """
    if isinstance(value, str):
        text = value.strip()
        parsed = isoparse(text)
        if len(text) <= 10:
            return parsed.date()
        value = parsed

    if not isinstance(value, datetime):
        return value

    zone = report_zone(timezone)
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz.UTC)
    return value.astimezone(zone).date()
