"""
Display state for one identity and the transitions that change it.

State is a plain dict so it can be handed to ``jsonify`` as is:

    {
        "today": "2026-01-12",
        "totals": {"t1": 0, "t2": 0},
        "daily": [{"day": "2026-01-12", "t1": 0, "t2": 0}, ...],
        "status": "loading" | "idle" | "saving" | "error",
        "error": null
    }

``reduce`` never mutates its input. The timer and the request handlers
both go through it, so every change to what the user sees is one of the
actions below.
"""
from daily_aggregator import KINDS, totals_for

STATUSES = ('loading', 'idle', 'saving', 'error')


def initial_state(today):
    return {
        'today': today,
        'totals': {field: 0 for field in KINDS.values()},
        'daily': [],
        'status': 'loading',
        'error': None,
    }


def _bump(totals, kind, delta):
    field = KINDS[kind]
    out = dict(totals)
    out[field] = max(0, out[field] + delta)
    return out


def reduce(state, action):
    kind_of_action = action['type']

    if kind_of_action == 'load_started':
        return {**state, 'status': 'loading', 'error': None}

    if kind_of_action == 'load_succeeded':
        # A load computed for an older day must not drag the display back
        if action['today'] != state['today']:
            return state
        daily = list(action['daily'])
        return {
            **state,
            'daily': daily,
            'totals': totals_for(daily, state['today']),
            'status': 'idle',
            'error': None,
        }

    if kind_of_action in ('load_failed', 'delete_failed', 'export_failed'):
        return {**state, 'status': 'error', 'error': action['error']}

    if kind_of_action == 'log_started':
        totals = state['totals']
        if action['day'] == state['today']:
            totals = _bump(totals, action['kind'], +1)
        return {**state, 'totals': totals, 'status': 'saving', 'error': None}

    if kind_of_action == 'log_failed':
        totals = state['totals']
        # Undo only a bump that was applied and is still on display
        if action['bumped'] and action['day'] == state['today']:
            totals = _bump(totals, action['kind'], -1)
        return {**state, 'totals': totals, 'status': 'error', 'error': action['error']}

    if kind_of_action == 'delete_started':
        return {**state, 'status': 'saving', 'error': None}

    if kind_of_action == 'day_changed':
        if action['today'] == state['today']:
            return state
        return {
            **state,
            'today': action['today'],
            'totals': {field: 0 for field in KINDS.values()},
        }

    raise ValueError(f'unknown action: {kind_of_action}')
