#!/usr/bin/env python3
"""Provision a tracker user and print their API token.

Usage: python3 add_user.py someone@example.com
"""
import sys

import event_store


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1 or '@' not in argv[0]:
        print('usage: add_user.py <email>')
        return 2
    try:
        user = event_store.add_user(argv[0])
    except ValueError as e:
        print(e)
        return 1
    print(f"Added {user['email']}")
    print(f"Token: {user['token']}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
