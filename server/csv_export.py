"""
CSV export of a user's full event history.

The export reads the store on its own rather than reusing the tracker's
rows because it wants an extra column: the time each event was submitted.
Not every deployment's events table has that column, or it may go by
another name, so the exporter first probes the candidates in
``tracker_config.TIMESTAMP_CANDIDATES`` with a one-row query each. If none
exists the export still succeeds, with an empty timestamp field and a
leading ``#`` line saying so.
"""
import logging

import event_reader
import event_store
import tracker_config

logger = logging.getLogger(__name__)

HEADER = ('occurred_on', 'trich', 'timestamp')


def csv_escape(value):
    """Quote a field if it contains a comma, quote or line break."""
    if value is None:
        return ''
    text = str(value)
    if any(ch in text for ch in (',', '"', '\n', '\r')):
        return '"' + text.replace('"', '""') + '"'
    return text


def export_filename(today):
    return tracker_config.EXPORT_FILENAME_PATTERN.format(today=today)


def probe_timestamp_column(user_id, candidates=None):
    """Return the first candidate column the events table has, or None.

    A missing column moves on to the next candidate. Any other store error
    ends probing; the export then runs without timestamps.
    """
    if candidates is None:
        candidates = tracker_config.TIMESTAMP_CANDIDATES

    for name in candidates:
        try:
            event_store.query_page(user_id, offset=0, limit=1, columns=('id', name))
        except event_store.UndefinedColumnError:
            logger.info(f"Timestamp column '{name}' not present")
            continue
        except event_store.StoreError as e:
            logger.warning(f"Timestamp probe stopped at '{name}': {e}")
            return None
        logger.info(f"Using timestamp column '{name}'")
        return name
    return None


def export(user_id, candidates=None, page_size=None, max_offset=None):
    """Return the user's history as CSV text. Store errors propagate."""
    if candidates is None:
        candidates = tracker_config.TIMESTAMP_CANDIDATES

    ts_column = probe_timestamp_column(user_id, candidates)
    columns = ('occurred_on', 'trich')
    if ts_column is not None:
        columns += (ts_column,)

    rows = event_reader.fetch_since(
        user_id,
        None,
        columns=columns,
        page_size=page_size,
        max_offset=max_offset,
        descending=False,
    )

    lines = []
    if ts_column is None:
        logger.warning(f"Exporting {len(rows)} events for {user_id} without timestamps")
        lines.append('# timestamp column not found (tried ' + ' / '.join(candidates) + '); timestamps left empty')
    lines.append(','.join(HEADER))
    for r in rows:
        ts = r.get(ts_column) if ts_column is not None else None
        lines.append(','.join(csv_escape(v) for v in (r.get('occurred_on'), r.get('trich'), ts)))

    logger.info(f"Exported {len(rows)} events for {user_id}")
    return '\n'.join(lines) + '\n'
