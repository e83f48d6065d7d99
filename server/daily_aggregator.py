"""
Fold events into per-day counts.

Events are dicts with at least ``occurred_on`` (a day label) and ``trich``
(the kind, 1 or 2). Anything else in the row is ignored, as are rows whose
kind is not one of ``KINDS``.
"""
import calendar_clock

# trich value -> bucket field
KINDS = {1: 't1', 2: 't2'}


def parse_kind(value):
    """Return the trich value for ``value`` (1, 2, '1', 't1', 'T2', ...) or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value in KINDS else None
    if isinstance(value, str):
        v = value.strip().lower()
        for kind, field in KINDS.items():
            if v in (field, str(kind)):
                return kind
    return None


def _empty_counts():
    return {field: 0 for field in KINDS.values()}


def count_by_day(events):
    """Return ``{day: {'t1': n, 't2': m}}`` for the given events."""
    by_day = {}
    for e in events:
        kind = parse_kind(e.get('trich'))
        if kind is None:
            continue
        day = e.get('occurred_on')
        if not day:
            continue
        counts = by_day.get(day)
        if counts is None:
            counts = by_day[day] = _empty_counts()
        counts[KINDS[kind]] += 1
    return by_day


def aggregate(events, start_day, today):
    """Build the daily series from ``today`` back to ``start_day``.

    Every day in the range gets exactly one bucket, zero-filled when no
    event fell on it. Events outside the range are not counted.
    """
    by_day = count_by_day(events)
    series = []
    for day in calendar_clock.iter_days_back(today, start_day):
        counts = by_day.get(day) or _empty_counts()
        series.append({'day': day, **counts})
    return series


def totals_for(series, day):
    """Per-kind totals of one day in a series, zero if the day is absent."""
    for bucket in series:
        if bucket['day'] == day:
            return {field: bucket[field] for field in KINDS.values()}
    return _empty_counts()
