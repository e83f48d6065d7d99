"""
Calendar day labels anchored to one fixed time zone.

A day label is an ISO date string (``YYYY-MM-DD``). Labels are produced by
converting an instant into the configured zone and taking its date, so all
users and devices agree on when a day starts. Stepping between labels is
done on ``datetime.date`` values, which have no time of day and therefore
no DST shifts to trip over.
"""
import datetime

import tracker_config


def _zone(tz):
    return tz if tz is not None else tracker_config.TIMEZONE


def parse_day(label):
    """Return the ``date`` for a day label. Raises ValueError if malformed."""
    if not isinstance(label, str) or len(label) != 10:
        raise ValueError(f'invalid day label: {label!r}')
    return datetime.date.fromisoformat(label)


def day_label(instant, tz=None):
    """Map an instant to its day label in the fixed zone.

    Naive datetimes are taken to be UTC, which is what the store writes.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=datetime.timezone.utc)
    return instant.astimezone(_zone(tz)).date().isoformat()


def today_label(tz=None):
    return day_label(datetime.datetime.now(datetime.timezone.utc), tz)


def day_start(label, tz=None):
    """The instant a labelled day begins, as an aware datetime."""
    d = parse_day(label)
    return datetime.datetime(d.year, d.month, d.day, tzinfo=_zone(tz))


def previous_day(label):
    return (parse_day(label) - datetime.timedelta(days=1)).isoformat()


def next_day(label):
    return (parse_day(label) + datetime.timedelta(days=1)).isoformat()


def days_between(start, end):
    """Whole days from ``start`` to ``end`` (negative if end is earlier)."""
    return (parse_day(end) - parse_day(start)).days


def iter_days_back(today, start):
    """Yield every label from ``today`` down to ``start``, both inclusive."""
    current = parse_day(today)
    first = parse_day(start)
    one_day = datetime.timedelta(days=1)
    while current >= first:
        yield current.isoformat()
        current -= one_day
