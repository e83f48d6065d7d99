#!/usr/bin/env python3
"""
WSGI entry point for deployment behind gunicorn/uwsgi/PythonAnywhere.

Importing this module starts the day rollover ticker; it is stopped when
the interpreter exits. Each worker process keeps its own trackers and
ticker. GET /api/tracker recomputes from the store on every call, so
writes handled by one worker show up in the others. The JSON store only
locks within a process, so run a single worker (threads are fine).
"""
import atexit
import sys
import os

# Add your project directory to the sys.path
project_home = os.path.dirname(os.path.abspath(__file__))
if project_home not in sys.path:
    sys.path = [project_home] + sys.path

# Change to the project directory
os.chdir(project_home)

# Import the Flask application
from flask_server import app as application
import rollover

ticker = rollover.RolloverTicker()
ticker.start()
atexit.register(ticker.stop)
