"""
Per-identity tracker sessions.

A Tracker owns the display state of one user: the current day label, the
running totals for that day, and the daily series. Logging an event bumps
the matching total straight away, writes to the store, and then replaces
the bumped value with a fresh aggregate. If the write fails the bump is
undone and the error is put in the state instead.

The store calls are made without holding the tracker's lock; the lock only
guards the state transition itself. Two overlapping ``log`` calls can both
have writes in flight, and whichever reconciliation finishes last decides
what is shown.
"""
import logging
import threading

import calendar_clock
import csv_export
import daily_aggregator
import event_reader
import event_store
import tracker_config
import tracker_state

logger = logging.getLogger(__name__)


def _message(exc, fallback):
    return str(exc) or fallback


class Tracker:
    def __init__(self, user_id, today_fn=None, start_date=None):
        self.user_id = user_id
        self._today_fn = today_fn
        self.start_date = start_date or tracker_config.START_DATE
        self._lock = threading.Lock()
        self._state = tracker_state.initial_state(self._today())

    def _today(self):
        if self._today_fn is not None:
            return self._today_fn()
        return calendar_clock.today_label()

    def dispatch(self, action):
        with self._lock:
            self._state = tracker_state.reduce(self._state, action)
            return self._state

    def snapshot(self):
        return self._state

    def load(self):
        """Recompute the daily series from the store."""
        today = self._state['today']
        self.dispatch({'type': 'load_started'})
        try:
            events = event_reader.fetch_since(self.user_id, self.start_date)
        except event_store.StoreError as e:
            logger.error(f"Failed to load events for {self.user_id}: {e}")
            return self.dispatch({'type': 'load_failed', 'error': _message(e, 'Failed to load data.')})

        daily = daily_aggregator.aggregate(events, self.start_date, today)
        return self.dispatch({'type': 'load_succeeded', 'today': today, 'daily': daily})

    def log(self, kind):
        """Record one event of ``kind`` for today."""
        day = self._today()
        started = self.dispatch({'type': 'log_started', 'kind': kind, 'day': day})
        # log_started bumps only when its day was the displayed one
        bumped = started['today'] == day
        try:
            event_store.insert_one(self.user_id, kind, day)
        except event_store.StoreError as e:
            logger.warning(f"Write failed for {self.user_id}, rolling back trich={kind} on {day}: {e}")
            return self.dispatch({
                'type': 'log_failed',
                'kind': kind,
                'day': day,
                'bumped': bumped,
                'error': _message(e, 'Failed to save event.'),
            })
        return self.load()

    def delete(self, event_id):
        """Delete one event. Returns ``(deleted, state)``."""
        self.dispatch({'type': 'delete_started'})
        try:
            deleted = event_store.delete_one(self.user_id, event_id)
        except event_store.StoreError as e:
            logger.warning(f"Delete of {event_id} failed for {self.user_id}: {e}")
            return False, self.dispatch({'type': 'delete_failed', 'error': _message(e, 'Failed to delete event.')})
        if not deleted:
            return False, self.dispatch({'type': 'delete_failed', 'error': 'event not found'})
        return True, self.load()

    def tick(self):
        """Advance to the current day if it rolled over. Returns True if it did."""
        today = self._today()
        if today == self._state['today']:
            return False
        logger.info(f"Day rolled over for {self.user_id}: {self._state['today']} -> {today}")
        self.dispatch({'type': 'day_changed', 'today': today})
        self.load()
        return True

    def export(self):
        """Return ``(filename, csv_text)``. Store errors are recorded and re-raised."""
        try:
            text = csv_export.export(self.user_id)
        except event_store.StoreError as e:
            logger.error(f"Export failed for {self.user_id}: {e}")
            self.dispatch({'type': 'export_failed', 'error': _message(e, 'Export failed.')})
            raise
        return csv_export.export_filename(self._state['today']), text


# One tracker per identity for the life of the process
_trackers = {}
_trackers_lock = threading.Lock()


def get_tracker(user_id):
    with _trackers_lock:
        tr = _trackers.get(user_id)
        if tr is None:
            tr = _trackers[user_id] = Tracker(user_id)
        return tr


def all_trackers():
    with _trackers_lock:
        return list(_trackers.values())


def reset_trackers():
    with _trackers_lock:
        _trackers.clear()


def tick_all():
    """Run the rollover check on every tracker. Returns how many advanced."""
    advanced = 0
    for tr in all_trackers():
        if tr.tick():
            advanced += 1
    return advanced
