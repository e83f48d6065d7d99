#!/usr/bin/env python3
"""Print the daily rollup for one user, the same numbers the API serves.

Usage: python3 check_events.py someone@example.com [days]
"""
import datetime
import sys

import calendar_clock
import daily_aggregator
import event_reader
import event_store
import tracker_config


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print('usage: check_events.py <email> [days]')
        return 2
    user = event_store.get_user_by_email(argv[0])
    if user is None:
        print(f'no user {argv[0]}')
        return 1
    days = int(argv[1]) if len(argv) > 1 else 14

    today = calendar_clock.today_label()
    now = datetime.datetime.now(tracker_config.TIMEZONE)

    print("=" * 60)
    print("DAILY ROLLUP")
    print("=" * 60)
    print(f"\nCurrent time ({tracker_config.TIMEZONE_NAME}): {now:%Y-%m-%d %H:%M:%S}")
    print(f"Today: {today}, series starts {tracker_config.START_DATE}")

    events = event_reader.fetch_since(user['id'], tracker_config.START_DATE)
    series = daily_aggregator.aggregate(events, tracker_config.START_DATE, today)
    totals = daily_aggregator.totals_for(series, today)

    print(f"\nEvents counted: {sum(b['t1'] + b['t2'] for b in series)}")
    print(f"Today: T1={totals['t1']} T2={totals['t2']}")
    print(f"\nLast {days} days:")
    print("-" * 60)
    for bucket in series[:days]:
        marker = " <-- TODAY" if bucket['day'] == today else ""
        print(f"{bucket['day']}  T1={bucket['t1']:4}  T2={bucket['t2']:4}{marker}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
