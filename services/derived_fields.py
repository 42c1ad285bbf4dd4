import re

from api.twitter_parser import tweet_source_text, tweet_url_entities
from services.text_entities import TWEET_PERMALINK_ROOT, expand_entities, tweet_id_from_url

LEADING_MENTIONS_RE = re.compile(r'^(?:@\w+(?:\s+|$))+')

def split_leading_mentions(text):
    """
    Separates a leading run of @handles (as in replies) from the rest of the text.
    Returns (mentions, remainder).
    """
    match = LEADING_MENTIONS_RE.match(text)
    if not match:
        return '', text
    return match.group(0).strip(), text[match.end():]

def tweet_permalink(tweet):
    screen_name = (tweet.get('user') or {}).get('screen_name') or ''
    tweet_id = tweet.get('id_str') or ''
    if not screen_name or not tweet_id:
        return ''
    return f"{TWEET_PERMALINK_ROOT}/{screen_name}/status/{tweet_id}"

def tweet_fields(tweet):
    """
    Computes the columns derived from a stored or freshly fetched tweet.
    """
    text = expand_entities(tweet_source_text(tweet), tweet_url_entities(tweet))
    mentions, text = split_leading_mentions(text)
    return {
        "text": text,
        "mentions": mentions,
        "url": tweet_permalink(tweet),
    }

def cluster_notes(cluster, tweet_id):
    """
    Joins the text of every message in a cluster, one line each.
    Links to the anchor tweet are removed, other links are expanded.
    """
    def replacement(entity):
        if tweet_id_from_url(entity.expanded_url) == tweet_id:
            return ''
        return entity.expanded_url

    return "\n".join(expand_entities(message.text, message.urls, replacement) for message in cluster)
