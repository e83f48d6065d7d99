"""
Settings for the tracker, read once from the environment.

Every value has a default so the server runs with no configuration at all.
The start date and the time zone are validated at import time: a bad value
there is a deployment mistake, not something to recover from.
"""
import datetime
import os
from zoneinfo import ZoneInfo

HERE = os.path.dirname(os.path.abspath(__file__))

# Calendar days are always computed in this zone, never the viewer's.
TIMEZONE_NAME = os.environ.get('TRACKER_TIMEZONE', 'America/New_York')
TIMEZONE = ZoneInfo(TIMEZONE_NAME)

# First day of the daily series
START_DATE = os.environ.get('TRACKER_START_DATE', '2026-01-10')
datetime.date.fromisoformat(START_DATE)

PAGE_SIZE = int(os.environ.get('TRACKER_PAGE_SIZE', '1000'))
MAX_OFFSET = int(os.environ.get('TRACKER_MAX_OFFSET', '50000'))

TICK_SECONDS = float(os.environ.get('TRACKER_TICK_SECONDS', '30'))

DATA_FILE = os.environ.get('TRACKER_DATA_FILE', os.path.join(HERE, 'db.json'))
LOG_FILE = os.environ.get('TRACKER_LOG_FILE', 'server.log')
PORT = int(os.environ.get('PORT', '8000'))

# Ranked names the optional submission timestamp column may have
TIMESTAMP_CANDIDATES = ('created_at', 'inserted_at', 'logged_at')

EXPORT_FILENAME_PATTERN = 'events-{today}.csv'
