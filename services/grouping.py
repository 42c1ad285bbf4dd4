from services.text_entities import tweet_id_from_message
from utils.logger import logger

def sort_key(message):
    """
    Orders by creation timestamp: shorter timestamps first, then string order.
    """
    return (len(message.created_at), message.created_at)

def sort_messages(messages):
    return sorted(messages, key=sort_key)

def messages_by_sender(messages):
    """
    Buckets already-sorted messages per sender, keeping their order.
    """
    buckets = {}
    for message in messages:
        buckets.setdefault(message.sender_id, []).append(message)
    return buckets

def group_messages_per_tweet(messages):
    """
    Splits one sender's messages into clusters, each starting with a message
    that references a tweet. Messages before the first reference are dropped.
    """
    clusters = []
    current = []
    dropped = 0
    for message in messages:
        if tweet_id_from_message(message):
            if current:
                clusters.append(current)
            current = [message]
        elif current:
            current.append(message)
        else:
            dropped += 1
    if current:
        clusters.append(current)

    if dropped:
        logger.debug(f"Dropped {dropped} message(s) sent before any tweet link")
    return clusters
