import re

TWEET_PERMALINK_ROOT = 'https://twitter.com'
# The id may be followed by a query string or a path (?s=20, /photo/1), never by a letter.
TWEET_ID_RE = re.compile(r'^' + re.escape(TWEET_PERMALINK_ROOT) + r'/[^/]+/status/([0-9]+)([^0-9A-Za-z].*)?$')

def expand_entities(text, entities, replacement=None):
    """
    Replaces each entity span in `text` with its expansion.

    Spans are applied in ascending start order and are code point offsets
    into the original text. A span that starts before the end of the
    previously applied one, or that falls outside the text, is dropped.
    `replacement(entity)` overrides the default of `entity.expanded_url`.
    """
    if replacement is None:
        replacement = lambda entity: entity.expanded_url

    parts = []
    position = 0
    for entity in sorted(entities, key=lambda e: e.start):
        if entity.start < position or entity.end < entity.start or entity.end > len(text):
            continue
        parts.append(text[position:entity.start])
        parts.append(replacement(entity))
        position = entity.end
    parts.append(text[position:])
    return ''.join(parts)

def tweet_id_from_url(url):
    match = TWEET_ID_RE.match(url or '')
    return match.group(1) if match else ''

def tweet_id_from_urls(entities):
    """
    Returns the id of the first entity pointing at a tweet permalink, or ''.
    """
    for entity in entities:
        tweet_id = tweet_id_from_url(entity.expanded_url)
        if tweet_id:
            return tweet_id
    return ''

def tweet_id_from_message(message):
    return tweet_id_from_urls(message.urls)
