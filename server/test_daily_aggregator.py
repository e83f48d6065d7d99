import random

import calendar_clock
import daily_aggregator


def _ev(day, kind):
    return {'occurred_on': day, 'trich': kind}


def test_scenario_three_days():
    events = [_ev('2026-01-10', 1), _ev('2026-01-10', 1), _ev('2026-01-11', 2)]
    series = daily_aggregator.aggregate(events, '2026-01-10', '2026-01-12')
    assert series == [
        {'day': '2026-01-12', 't1': 0, 't2': 0},
        {'day': '2026-01-11', 't1': 0, 't2': 1},
        {'day': '2026-01-10', 't1': 2, 't2': 0},
    ]
    assert daily_aggregator.totals_for(series, '2026-01-12') == {'t1': 0, 't2': 0}


def test_series_is_contiguous_across_year_end():
    series = daily_aggregator.aggregate([], '2025-12-20', '2026-01-15')
    days = [b['day'] for b in series]
    assert len(days) == calendar_clock.days_between('2025-12-20', '2026-01-15') + 1
    assert len(set(days)) == len(days)
    for newer, older in zip(days, days[1:]):
        assert calendar_clock.previous_day(newer) == older


def test_totals_match_event_count_in_range():
    rng = random.Random(7)
    days = list(calendar_clock.iter_days_back('2026-02-10', '2026-01-01'))
    events = [_ev(rng.choice(days), rng.choice([1, 2])) for _ in range(500)]
    events += [_ev('2025-12-31', 1), _ev('2026-02-11', 2)]
    series = daily_aggregator.aggregate(events, '2026-01-05', '2026-02-10')
    in_range = [e for e in events if '2026-01-05' <= e['occurred_on'] <= '2026-02-10']
    assert sum(b['t1'] + b['t2'] for b in series) == len(in_range)


def test_order_independent_and_idempotent():
    rng = random.Random(3)
    events = [_ev(f'2026-01-{rng.randint(10, 20)}', rng.choice([1, 2])) for _ in range(100)]
    first = daily_aggregator.aggregate(events, '2026-01-10', '2026-01-20')
    shuffled = list(events)
    rng.shuffle(shuffled)
    assert daily_aggregator.aggregate(shuffled, '2026-01-10', '2026-01-20') == first
    assert daily_aggregator.aggregate(events, '2026-01-10', '2026-01-20') == first


def test_unknown_kinds_are_ignored():
    events = [_ev('2026-01-10', 3), _ev('2026-01-10', None), _ev('2026-01-10', 'x'), _ev('2026-01-10', 2)]
    series = daily_aggregator.aggregate(events, '2026-01-10', '2026-01-10')
    assert series == [{'day': '2026-01-10', 't1': 0, 't2': 1}]


def test_today_before_start_gives_empty_series():
    assert daily_aggregator.aggregate([_ev('2026-01-10', 1)], '2026-01-10', '2026-01-09') == []


def test_parse_kind():
    assert daily_aggregator.parse_kind(1) == 1
    assert daily_aggregator.parse_kind('2') == 2
    assert daily_aggregator.parse_kind('T1') == 1
    assert daily_aggregator.parse_kind(' t2 ') == 2
    assert daily_aggregator.parse_kind(3) is None
    assert daily_aggregator.parse_kind(True) is None
    assert daily_aggregator.parse_kind(None) is None
