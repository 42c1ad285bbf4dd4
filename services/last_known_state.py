import json
from dataclasses import dataclass

from config import JSON_COLUMN
from utils.errors import ConfigurationError
from utils.logger import logger

@dataclass(frozen=True)
class StoredTweetInfo:
    tweet_id: str
    row: int
    raw_json: str

def json_column_number(header, json_column=JSON_COLUMN):
    """
    1-based position of the json column. Its absence is a configuration error.
    """
    for index, name in enumerate(header):
        if name == json_column:
            return index + 1
    raise ConfigurationError(f"missing \"{json_column}\" column in the spreadsheet")

def all_senders_resolved(found, allowlist):
    return len(found) >= len(allowlist)

def scan_backward(values, done):
    """
    Yields (row_number, value) from the last value to the first, stopping
    as soon as `done()` is true. Row numbers are 1-based.
    """
    for index in range(len(values) - 1, -1, -1):
        if done():
            return
        yield index + 1, values[index]

def sender_and_tweet_id(raw_json):
    """
    Minimal decode of a stored record: (sender_id, tweet id_str).
    """
    document = json.loads(raw_json)
    if not isinstance(document, dict):
        raise ValueError("stored json is not an object")
    tweet = document.get('tweet')
    tweet_id = tweet.get('id_str') if isinstance(tweet, dict) else None
    return str(document.get('sender_id') or ''), str(tweet_id or '')

def last_stored_tweet_per_sender(store, allowlist, json_column=JSON_COLUMN):
    """
    Finds, for every allow-listed sender, the most recent row written for them.
    Returns {sender_id: StoredTweetInfo}; senders never seen are absent.
    """
    header = store.get_header()
    column = json_column_number(header, json_column)
    values = store.get_column_values(column)

    found = {}
    for row, raw_json in scan_backward(values, lambda: all_senders_resolved(found, allowlist)):
        if not raw_json.strip():
            continue
        try:
            sender_id, tweet_id = sender_and_tweet_id(raw_json)
        except ValueError as e:
            logger.error(f"Unparseable json in row {row}: {e}")
            continue
        if sender_id not in allowlist or sender_id in found:
            continue
        found[sender_id] = StoredTweetInfo(tweet_id=tweet_id, row=row, raw_json=raw_json)

    logger.debug(f"Resolved last stored tweet for {len(found)}/{len(allowlist)} sender(s)")
    return found
