"""
JSON file event store.

All data lives in a single JSON file with the following structure:

    {
        "users": [
            {"id": "...", "email": "...", "token": "..."},
            ...
        ],
        "events": [
            {
                "id": "...",
                "user_id": "...",
                "trich": 1,
                "occurred_on": "2026-01-10",
                "created_at": "2026-01-10T14:03:11Z"
            },
            ...
        ]
    }

The events table behaves like a database table: ``EVENT_COLUMNS`` is its
schema, and selecting a column outside it raises UndefinedColumnError the
way a SQL backend would. ``created_at`` is optional; deployments whose
table has no such column simply leave it out of ``EVENT_COLUMNS``.
"""
import datetime
import json
import logging
import os
import threading
import uuid

import tracker_config

logger = logging.getLogger(__name__)

DATA_FILE = tracker_config.DATA_FILE

EVENT_COLUMNS = ('id', 'user_id', 'trich', 'occurred_on', 'created_at')

# Database cache to avoid reading from disk on every request
_db_cache = None
_db_cache_mtime = None
_db_lock = threading.RLock()


class StoreError(Exception):
    """The store could not be read or written."""


class UndefinedColumnError(StoreError):
    """A query named a column the events table does not have."""

    def __init__(self, column):
        super().__init__(f'column events.{column} does not exist')
        self.column = column


def _empty_db():
    return {'users': [], 'events': []}


def load_db():
    """Load the database from disk with caching. Creates an empty db if necessary."""
    global _db_cache, _db_cache_mtime

    with _db_lock:
        if not os.path.exists(DATA_FILE):
            logger.warning(f"Database file not found at {DATA_FILE}, creating new")
            _db_cache = _empty_db()
            _db_cache_mtime = None
            return _db_cache

        current_mtime = os.path.getmtime(DATA_FILE)
        if _db_cache is not None and _db_cache_mtime == current_mtime:
            return _db_cache

        try:
            with open(DATA_FILE, 'r', encoding='utf-8') as fh:
                db = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read database {DATA_FILE}: {e}")
            _db_cache = None
            _db_cache_mtime = None
            raise StoreError(f'failed to read event store: {e}') from e

        db.setdefault('users', [])
        db.setdefault('events', [])
        _db_cache = db
        _db_cache_mtime = current_mtime
        logger.debug(f"Database loaded from disk: {len(db['users'])} users, {len(db['events'])} events")
        return _db_cache


def save_db(db):
    """Persist the database to disk and update cache."""
    global _db_cache, _db_cache_mtime

    with _db_lock:
        tmp_file = DATA_FILE + '.tmp'
        try:
            with open(tmp_file, 'w', encoding='utf-8') as fh:
                json.dump(db, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_file, DATA_FILE)
        except OSError as e:
            logger.error(f"Failed to save database: {e}")
            # Invalidate cache on error
            _db_cache = None
            _db_cache_mtime = None
            raise StoreError(f'failed to write event store: {e}') from e
        _db_cache = db
        _db_cache_mtime = os.path.getmtime(DATA_FILE)
        logger.debug("Database saved successfully")


def reset_cache():
    global _db_cache, _db_cache_mtime
    with _db_lock:
        _db_cache = None
        _db_cache_mtime = None


def _utc_now_iso():
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0).isoformat().replace('+00:00', 'Z')


def get_user_by_token(token):
    """Return the user dict matching the given token, or None."""
    if not token:
        return None
    for u in load_db()['users']:
        if u.get('token') == token:
            return u
    return None


def get_user_by_email(email):
    email = email.strip().lower()
    for u in load_db()['users']:
        if u.get('email', '').lower() == email:
            return u
    return None


def add_user(email):
    """Create a user with a fresh token. Raises ValueError if the email exists."""
    with _db_lock:
        if get_user_by_email(email) is not None:
            raise ValueError(f'user {email} already exists')
        db = load_db()
        user = {
            'id': uuid.uuid4().hex,
            'email': email.strip().lower(),
            'token': uuid.uuid4().hex,
        }
        db['users'].append(user)
        save_db(db)
    logger.info(f"User added: {user['email']}")
    return user


def insert_one(user_id, kind, day):
    """Append one event and return the stored row."""
    row = {
        'id': uuid.uuid4().hex,
        'user_id': user_id,
        'trich': kind,
        'occurred_on': day,
    }
    if 'created_at' in EVENT_COLUMNS:
        row['created_at'] = _utc_now_iso()

    with _db_lock:
        db = load_db()
        db['events'].append(row)
        try:
            save_db(db)
        except StoreError:
            # the cached dict was mutated in place; drop it so the next read comes from disk
            reset_cache()
            raise
    logger.debug(f"Event {row['id']} inserted for {user_id}: trich={kind} on {day}")
    return dict(row)


def query_page(user_id, since=None, offset=0, limit=1000, columns=('occurred_on', 'trich'), descending=True,
               until=None):
    """Return one page of the user's events.

    Rows are filtered to ``since <= occurred_on <= until`` (either bound
    may be None), sorted by ``occurred_on`` with insertion order breaking
    ties, then sliced to ``[offset, offset + limit)`` and projected onto
    ``columns``.
    """
    for col in columns:
        if col not in EVENT_COLUMNS:
            raise UndefinedColumnError(col)

    db = load_db()
    rows = [
        e for e in db['events']
        if e.get('user_id') == user_id
        and (since is None or e.get('occurred_on', '') >= since)
        and (until is None or e.get('occurred_on', '') <= until)
    ]
    # sorted() is stable, so ties keep insertion order in both directions
    rows = sorted(rows, key=lambda e: e.get('occurred_on', ''), reverse=descending)
    page = rows[offset:offset + limit]
    return [{col: e.get(col) for col in columns} for e in page]


def delete_one(user_id, event_id):
    """Delete one of the user's events. Returns False if it was not found."""
    with _db_lock:
        db = load_db()
        for i, e in enumerate(db['events']):
            if e['id'] == event_id and e.get('user_id') == user_id:
                event = db['events'].pop(i)
                break
        else:
            return False
        try:
            save_db(db)
        except StoreError:
            reset_cache()
            raise
    logger.debug(f"Event {event['id']} deleted for {user_id}")
    return True
