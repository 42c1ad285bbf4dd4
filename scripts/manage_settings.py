"""
Operator commands for the settings database.

Run from the project root:

    python -m scripts.manage_settings authorize
    python -m scripts.manage_settings allow alice 1234567890
    python -m scripts.manage_settings set-spreadsheet <spreadsheet id>
    python -m scripts.manage_settings show
"""

import argparse

import tweepy

from config import (
    ALLOWLIST_PREFIX,
    SPREADSHEET_ID_SETTING,
    TWITTER_API_KEY,
    TWITTER_API_KEY_SECRET,
    TWITTER_BOT_USER_ID,
)
from db.repository import Repository


def authorize(repo: Repository, pin_reader=input) -> int:
    """PIN-based OAuth1 login; stores the token only for the configured bot account."""
    if not TWITTER_API_KEY or not TWITTER_API_KEY_SECRET:
        print("✗ TWITTER_API_KEY and TWITTER_API_KEY_SECRET must be set.")
        return 1
    if not TWITTER_BOT_USER_ID:
        print("✗ TWITTER_BOT_USER_ID must be set.")
        return 1

    handler = tweepy.OAuth1UserHandler(TWITTER_API_KEY, TWITTER_API_KEY_SECRET, callback='oob')
    try:
        url = handler.get_authorization_url()
    except tweepy.TweepyException as e:
        print(f"✗ Could not start authorization: {e}")
        return 1

    print("Open this URL while logged in as the bot account:")
    print(f"\n  {url}\n")
    verifier = pin_reader("Enter the PIN code: ").strip()
    if not verifier:
        print("✗ No PIN entered. Cannot proceed.")
        return 1

    try:
        access_token, access_token_secret = handler.get_access_token(verifier)
        user = tweepy.API(handler).verify_credentials()
    except tweepy.TweepyException as e:
        print(f"✗ Token exchange failed: {e}")
        return 1

    if user.id_str != TWITTER_BOT_USER_ID:
        print(f"✗ Unauthorized user {user.id_str} (@{user.screen_name}); expected {TWITTER_BOT_USER_ID}")
        return 1

    repo.save_user_credentials(access_token, access_token_secret, user.screen_name)
    print(f"✓ Stored token for @{user.screen_name}")
    return 0


def allow(repo: Repository, handle: str, sender_id: str) -> int:
    handle = handle.lstrip('@')
    if not sender_id.isdigit():
        print(f"✗ Sender id must be numeric, got {sender_id!r}")
        return 1
    repo.set_setting(f"{ALLOWLIST_PREFIX}{handle}", sender_id)
    print(f"Allowed @{handle} ({sender_id})")
    return 0


def disallow(repo: Repository, handle: str) -> int:
    repo.delete_setting(f"{ALLOWLIST_PREFIX}{handle.lstrip('@')}")
    print(f"Removed @{handle.lstrip('@')}")
    return 0


def set_spreadsheet(repo: Repository, spreadsheet_id: str) -> int:
    repo.set_setting(SPREADSHEET_ID_SETTING, spreadsheet_id.strip())
    print(f"Spreadsheet set to {spreadsheet_id.strip()}")
    return 0


def show(repo: Repository) -> int:
    print(f"Database: {repo.db_path}")
    print(f"Spreadsheet: {repo.get_setting(SPREADSHEET_ID_SETTING) or '(not set)'}")
    creds = repo.get_user_credentials()
    if creds:
        print(f"User token: @{creds['screen_name'] or 'unknown'} (stored {creds['updated_at']})")
    else:
        print("User token: (not stored)")
    allowlist = repo.get_allowlist()
    print(f"Allow-list ({len(allowlist)}):")
    for sender_id, handle in sorted(allowlist.items(), key=lambda item: item[1]):
        print(f"  @{handle}: {sender_id}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Manage tweet saver settings")
    parser.add_argument("--db", default=None, help="Path to the settings database")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("authorize", help="Log in as the bot account and store its token")
    allow_cmd = sub.add_parser("allow", help="Allow a sender")
    allow_cmd.add_argument("handle")
    allow_cmd.add_argument("sender_id")
    disallow_cmd = sub.add_parser("disallow", help="Remove a sender")
    disallow_cmd.add_argument("handle")
    spreadsheet_cmd = sub.add_parser("set-spreadsheet", help="Set the target spreadsheet id")
    spreadsheet_cmd.add_argument("spreadsheet_id")
    sub.add_parser("show", help="Print the current settings")

    args = parser.parse_args(argv)
    repo = Repository(args.db) if args.db else Repository()

    if args.command == "authorize":
        return authorize(repo)
    if args.command == "allow":
        return allow(repo, args.handle, args.sender_id)
    if args.command == "disallow":
        return disallow(repo, args.handle)
    if args.command == "set-spreadsheet":
        return set_spreadsheet(repo, args.spreadsheet_id)
    return show(repo)


if __name__ == "__main__":
    raise SystemExit(main())
