"""Paged reads over a user's event log."""
import logging

import event_store
import tracker_config

logger = logging.getLogger(__name__)


def fetch_since(user_id, start_day, columns=('occurred_on', 'trich'), page_size=None, max_offset=None,
                descending=True, until=None):
    """Read every event of ``user_id`` on or after ``start_day``
    (and on or before ``until``, when given).

    Pages of ``page_size`` rows are requested until one comes back short.
    The page count is bounded: once the offset passes ``max_offset`` the
    read stops and whatever was fetched is returned, with a warning logged.
    Store errors propagate and nothing fetched so far is kept.
    """
    if page_size is None:
        page_size = tracker_config.PAGE_SIZE
    if max_offset is None:
        max_offset = tracker_config.MAX_OFFSET
    if page_size <= 0:
        raise ValueError('page_size must be positive')

    rows = []
    offset = 0
    while True:
        page = event_store.query_page(
            user_id,
            since=start_day,
            offset=offset,
            limit=page_size,
            columns=columns,
            descending=descending,
            until=until,
        )
        rows.extend(page)

        if len(page) < page_size:
            break
        offset += page_size

        if offset > max_offset:
            logger.warning(
                f"Safety valve tripped for user {user_id}: stopped at offset {offset} "
                f"with {len(rows)} rows, older events are not counted"
            )
            break

    logger.debug(f"Fetched {len(rows)} events for {user_id} since {start_day}")
    return rows
