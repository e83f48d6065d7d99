import add_user
import check_events


def test_add_user(store, capsys):
    assert add_user.main(['carol@example.com']) == 0
    out = capsys.readouterr().out
    token = out.strip().splitlines()[-1].split('Token: ')[1]
    assert store.get_user_by_token(token)['email'] == 'carol@example.com'
    assert add_user.main(['carol@example.com']) == 1
    assert add_user.main(['not-an-email']) == 2


def test_check_events(store, seed, capsys, monkeypatch):
    monkeypatch.setattr(check_events.calendar_clock, 'today_label', lambda tz=None: '2026-01-12')
    monkeypatch.setattr(check_events.tracker_config, 'START_DATE', '2026-01-10')
    seed(('u1', '2026-01-12', 1), ('u1', '2026-01-11', 2))
    assert check_events.main(['alice@example.com']) == 0
    out = capsys.readouterr().out
    assert 'Events counted: 2' in out
    assert 'Today: T1=1 T2=0' in out
    assert '2026-01-12  T1=   1  T2=   0 <-- TODAY' in out
    assert check_events.main(['nobody@example.com']) == 1
