from dataclasses import dataclass, field
from utils.logger import logger

MESSAGE_CREATE = 'message_create'

@dataclass(frozen=True)
class UrlEntity:
    url: str
    expanded_url: str
    start: int
    end: int

@dataclass(frozen=True)
class DirectMessage:
    sender_id: str
    created_at: str
    text: str
    urls: tuple = field(default_factory=tuple)
    event_id: str = ''

def parse_url_entities(entities):
    """
    Converts a Twitter `entities` object into UrlEntity values.
    Entries without usable indices are dropped.
    """
    parsed = []
    for raw in (entities or {}).get('urls') or []:
        indices = raw.get('indices') or []
        if len(indices) != 2:
            logger.debug(f"Skipping URL entity without indices: {raw}")
            continue
        try:
            start, end = int(indices[0]), int(indices[1])
        except (TypeError, ValueError):
            logger.debug(f"Skipping URL entity with non-numeric indices: {raw}")
            continue
        parsed.append(UrlEntity(
            url=raw.get('url') or '',
            expanded_url=raw.get('expanded_url') or raw.get('url') or '',
            start=start,
            end=end,
        ))
    return tuple(parsed)

def parse_dm_event(event):
    """
    Simplifies a raw `direct_messages/events/list` event.
    Returns None for anything that is not a created message.
    """
    if not isinstance(event, dict) or event.get('type') != MESSAGE_CREATE:
        return None

    message_create = event.get('message_create') or {}
    message_data = message_create.get('message_data') or {}
    sender_id = message_create.get('sender_id')
    if not sender_id:
        logger.debug(f"Skipping DM event {event.get('id')} without sender_id")
        return None

    return DirectMessage(
        sender_id=str(sender_id),
        created_at=str(event.get('created_timestamp') or ''),
        text=message_data.get('text') or '',
        urls=parse_url_entities(message_data.get('entities')),
        event_id=str(event.get('id') or ''),
    )

def tweet_source_text(tweet):
    """
    Prioritize full_text (extended mode), then text.
    """
    return tweet.get('full_text') or tweet.get('text') or ''

def tweet_url_entities(tweet):
    return parse_url_entities(tweet.get('entities'))
