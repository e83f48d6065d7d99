import json
import importlib

import pytest


def store_module_factory(tmp_path, users=(), events=()):
	tmp_db = tmp_path / 'db.json'
	with open(tmp_db, 'w', encoding='utf-8') as fh:
		json.dump({'users': list(users), 'events': list(events)}, fh)

	store = importlib.import_module('event_store')
	# patch store module to use tmp db
	store.DATA_FILE = str(tmp_db)
	store.reset_cache()

	tracker = importlib.import_module('tracker')
	tracker.reset_trackers()
	return store


USER = {'id': 'u1', 'email': 'alice@example.com', 'token': 'tok-alice'}
OTHER = {'id': 'u2', 'email': 'bob@example.com', 'token': 'tok-bob'}


@pytest.fixture
def store(tmp_path, monkeypatch):
	srv = importlib.import_module('event_store')
	monkeypatch.setattr(srv, 'DATA_FILE', srv.DATA_FILE)
	return store_module_factory(tmp_path, users=[USER, OTHER])


@pytest.fixture
def seed(store):
	"""Append events straight into the data file."""
	def _seed(*events):
		db = store.load_db()
		for i, (user_id, day, kind) in enumerate(events):
			db['events'].append({
				'id': f'seed-{len(db["events"])}-{i}',
				'user_id': user_id,
				'trich': kind,
				'occurred_on': day,
				'created_at': f'{day}T12:00:00Z',
			})
		store.save_db(db)
	return _seed
