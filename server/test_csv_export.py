import csv
import io

import pytest

import csv_export

NO_TIMESTAMP = ('id', 'user_id', 'trich', 'occurred_on')


@pytest.mark.parametrize('value', ['a,b', 'say "hi"', 'line1\nline2', '",\n', 'crlf\r\nend', ''])
def test_csv_escape_round_trips_through_csv_reader(value):
    line = ','.join([csv_export.csv_escape(value), 'x'])
    parsed = next(csv.reader(io.StringIO(line, newline='')))
    assert parsed == [value, 'x']


def test_csv_escape_leaves_plain_fields_alone():
    assert csv_export.csv_escape('2026-01-10') == '2026-01-10'
    assert csv_export.csv_escape(2) == '2'
    assert csv_export.csv_escape(None) == ''


def test_export_with_timestamp_column(store, seed):
    seed(('u1', '2026-01-11', 2), ('u1', '2026-01-10', 1), ('u2', '2026-01-10', 1))
    text = csv_export.export('u1')
    lines = text.splitlines()
    assert lines == [
        'occurred_on,trich,timestamp',
        '2026-01-10,1,2026-01-10T12:00:00Z',
        '2026-01-11,2,2026-01-11T12:00:00Z',
    ]


def test_export_without_any_timestamp_column(store, seed, monkeypatch):
    seed(('u1', '2026-01-10', 1), ('u1', '2026-01-11', 2))
    monkeypatch.setattr(store, 'EVENT_COLUMNS', NO_TIMESTAMP)
    text = csv_export.export('u1')
    lines = text.splitlines()
    assert lines[0].startswith('#')
    assert lines[1] == 'occurred_on,trich,timestamp'
    rows = list(csv.reader(io.StringIO('\n'.join(lines[1:]))))
    assert len(rows) == 3
    assert all(r[2] == '' for r in rows[1:])


def test_probe_moves_to_next_candidate(store, monkeypatch):
    monkeypatch.setattr(store, 'EVENT_COLUMNS', NO_TIMESTAMP + ('logged_at',))
    assert csv_export.probe_timestamp_column('u1') == 'logged_at'


def test_probe_stops_on_other_errors(store, monkeypatch):
    calls = []

    def flaky(user_id, **kwargs):
        calls.append(kwargs['columns'])
        raise store.StoreError('permission denied')

    monkeypatch.setattr(store, 'query_page', flaky)
    assert csv_export.probe_timestamp_column('u1') is None
    assert len(calls) == 1


def test_probe_failure_degrades_but_fetch_failure_raises(store, seed, monkeypatch):
    seed(('u1', '2026-01-10', 1))
    real = store.query_page

    def timestamp_lookup_fails(user_id, **kwargs):
        if kwargs.get('limit') == 1:
            raise store.StoreError('permission denied')
        return real(user_id, **kwargs)

    monkeypatch.setattr(store, 'query_page', timestamp_lookup_fails)
    text = csv_export.export('u1')
    assert text.splitlines()[0].startswith('#')
    assert text.splitlines()[2] == '2026-01-10,1,'

    def all_fail(user_id, **kwargs):
        raise store.StoreError('connection reset')

    monkeypatch.setattr(store, 'query_page', all_fail)
    with pytest.raises(store.StoreError):
        csv_export.export('u1')


def test_export_escapes_awkward_values(store, seed):
    db = store.load_db()
    db['events'].append({'id': 'x', 'user_id': 'u1', 'trich': 1, 'occurred_on': '2026-01-10',
                         'created_at': 'Jan 10, "noon"'})
    store.save_db(db)
    text = csv_export.export('u1')
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[1] == ['2026-01-10', '1', 'Jan 10, "noon"']


def test_export_filename():
    assert csv_export.export_filename('2026-01-12') == 'events-2026-01-12.csv'
