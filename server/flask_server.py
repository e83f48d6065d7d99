#!/usr/bin/env python3
"""
Flask server for the trich tracker.

Endpoints (all require ``Authorization: Bearer <token>``):

GET /api/tracker
    Today's label, today's totals per kind, the daily series from the start
    date to today, and the status/error slot.

POST /api/refresh
    Recompute the daily series from the store.

POST /api/events
    Body: {"kind": 1 | 2 | "t1" | "t2"}
    Logs one event for today and returns the reconciled state.

DELETE /api/events/<event_id>
    Deletes one event and returns the reconciled state.

GET /api/history?date=YYYY-MM-DD
    Raw events logged on one day.

GET /api/export
    The full history as a CSV download named ``events-<today>.csv``.

Run this server with:
    python3 flask_server.py
"""
from flask import Flask, request, jsonify, make_response
from flask_cors import CORS
import logging
import sys

import calendar_clock
import daily_aggregator
import event_reader
import event_store
import rollover
import tracker
import tracker_config

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(tracker_config.LOG_FILE, encoding='utf-8')
    ]
)
logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)
CORS(app, resources={r"/api/*": {"origins": "*"}})


def get_auth_token():
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get('Authorization', '')
    if auth_header.lower().startswith('bearer '):
        return auth_header.split(' ', 1)[1].strip()
    # fallback to query parameter
    return request.args.get('token')


def current_user():
    """Resolve the request's identity. Returns ``(user, error_response)``."""
    token = get_auth_token()
    if not token:
        return None, (jsonify({'error': 'unauthorized'}), 401)
    try:
        user = event_store.get_user_by_token(token)
    except event_store.StoreError as e:
        return None, (jsonify({'error': str(e)}), 502)
    if not user:
        return None, (jsonify({'error': 'invalid token'}), 401)
    return user, None


def _state_response(state, ok_status=200):
    if state['status'] == 'error':
        return jsonify(state), 502
    return jsonify(state), ok_status


# ============================================================================
# API Routes
# ============================================================================

@app.route('/api/health', methods=['GET'])
def api_health():
    return jsonify({'ok': True, 'today': calendar_clock.today_label(), 'timezone': tracker_config.TIMEZONE_NAME})


@app.route('/api/tracker', methods=['GET'])
def api_tracker():
    """Get the current tracker state, recomputed from the store."""
    user, err = current_user()
    if err:
        return err

    logger.info(f"GET /api/tracker - User: {user['email']}")
    return _state_response(tracker.get_tracker(user['id']).load())


@app.route('/api/refresh', methods=['POST'])
def api_refresh():
    user, err = current_user()
    if err:
        return err
    logger.info(f"POST /api/refresh - User: {user['email']}")
    return _state_response(tracker.get_tracker(user['id']).load())


@app.route('/api/events', methods=['POST'])
def api_events_post():
    """Record a new event."""
    user, err = current_user()
    if err:
        return err

    data = request.get_json(silent=True) or {}
    kind = daily_aggregator.parse_kind(data.get('kind'))
    if kind is None:
        return jsonify({'error': 'kind must be 1 or 2'}), 400

    logger.info(f"POST /api/events - User {user['email']} logged trich={kind}")
    state = tracker.get_tracker(user['id']).log(kind)
    return _state_response(state)


@app.route('/api/events/<event_id>', methods=['DELETE'])
def api_events_delete(event_id):
    """Delete a single event."""
    user, err = current_user()
    if err:
        return err

    deleted, state = tracker.get_tracker(user['id']).delete(event_id)
    if not deleted and state['error'] == 'event not found':
        return jsonify(state), 404

    logger.info(f"Event deleted: {event_id} by {user['email']}")
    return _state_response(state)


@app.route('/api/history', methods=['GET'])
def api_history():
    """Get events for a specific date."""
    user, err = current_user()
    if err:
        return err

    date_str = request.args.get('date')
    if not date_str:
        return jsonify({'error': 'date parameter required'}), 400
    try:
        calendar_clock.parse_day(date_str)
    except ValueError:
        return jsonify({'error': 'invalid date format'}), 400

    try:
        rows = event_reader.fetch_since(
            user['id'], date_str, until=date_str, columns=('id', 'occurred_on', 'trich'), descending=False
        )
    except event_store.StoreError as e:
        return jsonify({'error': str(e)}), 502

    return jsonify({'date': date_str, 'events': rows})


@app.route('/api/export', methods=['GET'])
def api_export():
    """Download the full history as CSV."""
    user, err = current_user()
    if err:
        return err

    logger.info(f"GET /api/export - User: {user['email']}")
    try:
        filename, text = tracker.get_tracker(user['id']).export()
    except event_store.StoreError as e:
        return jsonify({'error': str(e)}), 502

    resp = make_response(text)
    resp.headers['Content-Type'] = 'text/csv; charset=utf-8'
    resp.headers['Content-Disposition'] = f'attachment; filename="{filename}"'
    resp.headers['Cache-Control'] = 'no-cache'
    return resp


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == '__main__':
    logger.info("=" * 60)
    logger.info("Trich Tracker Server Starting (Flask)")
    logger.info(f"Port: {tracker_config.PORT}")
    logger.info(f"Time zone: {tracker_config.TIMEZONE_NAME}, start date: {tracker_config.START_DATE}")
    logger.info(f"Database: {event_store.DATA_FILE}")
    logger.info("=" * 60)

    ticker = rollover.RolloverTicker()
    ticker.start()
    try:
        app.run(host='0.0.0.0', port=tracker_config.PORT, debug=False)
    finally:
        ticker.stop()
