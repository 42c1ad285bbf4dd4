from dataclasses import asdict, dataclass, field

import requests

from api.sheets_client import SheetsClient
from api.twitter_client import TwitterClient
from api.twitter_parser import parse_dm_event
from config import SPREADSHEET_ID_SETTING
from services.derived_fields import cluster_notes, tweet_fields
from services.grouping import group_messages_per_tweet, messages_by_sender, sort_messages
from services.last_known_state import last_stored_tweet_per_sender
from services.row_codec import decode_row, encode_row, serialize_record
from services.text_entities import tweet_id_from_message
from utils.errors import ConfigurationError, CredentialsError, RowDecodeError, RowEncodeError
from utils.logger import logger

APPENDED = 'appended'
UPDATED = 'updated'
UNCHANGED = 'unchanged'
SKIPPED = 'skipped'

@dataclass
class PollSummary:
    appended: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0

    def record(self, outcome):
        setattr(self, outcome, getattr(self, outcome) + 1)

@dataclass
class PollContext:
    """Everything one cycle needs to reconcile clusters; discarded after the cycle."""
    allowlist: dict
    last_known: dict
    header: list
    store: object
    twitter_client: object
    json_column: str
    updated_senders: set = field(default_factory=set)

def load_spreadsheet_id(repository):
    spreadsheet_id = repository.get_setting(SPREADSHEET_ID_SETTING)
    if not spreadsheet_id:
        raise ConfigurationError(f"fetching {SPREADSHEET_ID_SETTING}: setting is missing")
    return spreadsheet_id

def load_user_credentials(repository):
    user_credentials = repository.get_user_credentials()
    if not user_credentials:
        raise CredentialsError("failed to get user token: no delegated token is stored")
    return user_credentials

async def collect_new_messages(twitter_client, allowlist, last_known):
    """
    Pages through DM events (newest first) and keeps allow-listed messages
    down to, and including, each sender's last stored tweet link. Senders
    without a stored tweet are read to the end of the feed.
    """
    needs_confirmation = set(last_known)
    messages = []
    seen_cursors = set()
    cursor = None
    page = 0

    while True:
        events, cursor = await twitter_client.list_direct_message_events(cursor)
        page += 1
        logger.debug(f"DM page {page}: {len(events)} event(s)")

        for event in events:
            message = parse_dm_event(event)
            if message is None:
                continue
            sender = message.sender_id
            if sender not in allowlist:
                continue
            known = last_known.get(sender)
            if known and known.tweet_id and sender not in needs_confirmation:
                # Already reached the last recorded tweet for this sender
                continue
            messages.append(message)

            tweet_id = tweet_id_from_message(message)
            if known and tweet_id and tweet_id == known.tweet_id:
                needs_confirmation.discard(sender)

        if not cursor:
            break
        if cursor in seen_cursors:
            logger.warn(f"DM feed returned cursor {cursor!r} twice; stopping pagination")
            break
        seen_cursors.add(cursor)

    logger.log(f"Collected {len(messages)} new message(s) across {page} page(s)")
    return messages

def update_known_row(ctx, sender, cluster, tweet_id):
    known = ctx.last_known[sender]
    try:
        stored = decode_row(known.raw_json)
    except RowDecodeError as e:
        logger.error(f"Failed to parse JSON from the spreadsheet: {e}\nJSON: {known.raw_json!r}\nRow number: {known.row}")
        return SKIPPED

    record = {
        "sender_id": sender,
        "sender_username": ctx.allowlist[sender],
    }
    record.update(stored)
    record["notes"] = cluster_notes(cluster, tweet_id)

    try:
        row = encode_row(record, ctx.header, ctx.json_column)
    except RowEncodeError as e:
        logger.error(f"Failed to convert data for tweet {tweet_id} into a row: {e}")
        return SKIPPED

    if serialize_record(record) == known.raw_json:
        logger.debug(f"Row {known.row} for tweet {tweet_id} is already up to date")
        return UNCHANGED

    ctx.store.update_row(known.row, row)
    logger.log(f"Updated row {known.row} (tweet {tweet_id}, sender @{ctx.allowlist[sender]})")
    return UPDATED

async def append_new_row(ctx, sender, cluster, tweet_id):
    try:
        numeric_id = int(tweet_id)
    except ValueError as e:
        logger.error(f"Failed to parse tweet ID {tweet_id!r} as an integer: {e}")
        return SKIPPED

    try:
        tweet = await ctx.twitter_client.get_tweet(numeric_id)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Failed to fetch tweet {tweet_id}: {e}")
        return SKIPPED
    if not tweet:
        logger.warn(f"Skipping tweet {tweet_id}: not available")
        return SKIPPED

    record = {
        "sender_id": sender,
        "sender_username": ctx.allowlist[sender],
        "tweet": tweet,
    }
    record.update(tweet_fields(tweet))
    record["notes"] = cluster_notes(cluster, tweet_id)

    try:
        row = encode_row(record, ctx.header, ctx.json_column)
    except RowEncodeError as e:
        logger.error(f"Failed to convert data for tweet {tweet_id} into a row: {e}")
        return SKIPPED

    ctx.store.append_row(row)
    logger.log(f"Appended tweet {tweet_id} from @{ctx.allowlist[sender]}")
    return APPENDED

async def reconcile_cluster(ctx, sender, cluster):
    """
    Updates the sender's last stored row when the cluster is about the same
    tweet (once per cycle), otherwise appends a new row.
    StoreWriteError is left to propagate.
    """
    if not cluster:
        logger.error(f"Error: empty group. Sender ID: {sender}")
        return SKIPPED
    tweet_id = tweet_id_from_message(cluster[0])
    if not tweet_id:
        logger.error(f"Error: missing tweet ID in the first message. Sender ID: {sender}, first event: {cluster[0].event_id}")
        return SKIPPED

    known = ctx.last_known.get(sender)
    if known and tweet_id == known.tweet_id and sender not in ctx.updated_senders:
        ctx.updated_senders.add(sender)
        return update_known_row(ctx, sender, cluster, tweet_id)
    return await append_new_row(ctx, sender, cluster, tweet_id)

async def poll_once(app_config, repository, store_factory=SheetsClient.open, twitter_client_factory=TwitterClient):
    """
    One polling cycle: read new DMs and reconcile them into the worksheet.
    """
    logger.log("Polling DMs")

    spreadsheet_id = load_spreadsheet_id(repository)
    allowlist = repository.get_allowlist()
    user_credentials = load_user_credentials(repository)

    twitter_client = twitter_client_factory(app_config, user_credentials)
    store = store_factory(app_config, spreadsheet_id)

    last_known = last_stored_tweet_per_sender(store, allowlist, app_config.json_column)
    messages = await collect_new_messages(twitter_client, allowlist, last_known)

    ctx = PollContext(
        allowlist=allowlist,
        last_known=last_known,
        header=store.get_header(),
        store=store,
        twitter_client=twitter_client,
        json_column=app_config.json_column,
    )

    summary = PollSummary()
    for sender, sender_messages in messages_by_sender(sort_messages(messages)).items():
        for cluster in group_messages_per_tweet(sender_messages):
            summary.record(await reconcile_cluster(ctx, sender, cluster))

    logger.summary("Poll complete", asdict(summary))
    return summary
