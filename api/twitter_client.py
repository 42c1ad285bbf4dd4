import requests
import json
import asyncio
import tweepy
from utils.logger import logger
from utils.errors import ThrottledError

DM_EVENTS_PATH = '/direct_messages/events/list.json'
STATUS_SHOW_PATH = '/statuses/show.json'

async def make_http_request(options):
    """
    Helper function to make HTTP requests using requests library.
    Raises ThrottledError on 429 so callers can retry the same request.
    """
    method = options.get('method', 'GET')
    url = options.get('url')
    params = options.get('params')
    auth = options.get('auth')
    timeout = options.get('timeout', 30)

    try:
        # Run the blocking request in an executor to make it truly async
        loop = asyncio.get_event_loop()
        response = await loop.run_in_executor(
            None,
            lambda: requests.request(method, url, params=params, auth=auth, timeout=timeout)
        )
        if response.status_code == 429:
            raise ThrottledError(f"Rate limited by {url}", response=response)
        response.raise_for_status() # Raise HTTPError for bad responses (4xx or 5xx)

        try:
            parsed_data = response.json()
        except json.JSONDecodeError:
            logger.error(f"Error parsing JSON response from {url}: {response.text[:500]}...")
            raise

        return {
            "status": response.status_code,
            "statusText": response.reason,
            "headers": dict(response.headers),
            "data": parsed_data
        }
    except requests.exceptions.HTTPError as http_err:
        logger.error(f"HTTP error occurred: {http_err} - Response: {http_err.response.text[:500]}...")
        raise
    except requests.exceptions.ConnectionError as conn_err:
        logger.error(f"Connection error occurred: {conn_err}")
        raise
    except requests.exceptions.Timeout as timeout_err:
        logger.error(f"Timeout error occurred: {timeout_err}")
        raise
    except requests.exceptions.RequestException as req_err:
        logger.error(f"An unexpected error occurred: {req_err}")
        raise

async def throttled_twitter_request(request_fn, cooldown_seconds):
    """
    Runs `request_fn`, sleeping `cooldown_seconds` and repeating the same
    request for as long as Twitter answers 429.
    """
    while True:
        try:
            return await request_fn()
        except ThrottledError:
            logger.warn(f"Rate limit exceeded (429). Waiting {cooldown_seconds:g} seconds before retry...")
            await asyncio.sleep(cooldown_seconds)
            logger.log("Retrying request after rate limit cooldown...")

class TwitterClient:
    def __init__(self, app_config, user_credentials):
        if not user_credentials or not user_credentials.get('token') or not user_credentials.get('token_secret'):
            raise ValueError("A stored user token is required.")

        handler = tweepy.OAuth1UserHandler(
            app_config.twitter_api_key,
            app_config.twitter_api_key_secret,
            user_credentials['token'],
            user_credentials['token_secret'],
        )
        self.auth = handler.apply_auth()
        self.base_url = app_config.twitter_api_base_url.rstrip('/')
        self.page_size = app_config.dm_page_size
        self.cooldown_seconds = app_config.throttle_cooldown_seconds
        self.timeout = app_config.request_timeout_seconds

    def _options(self, path, params):
        return {
            'method': 'GET',
            'url': f"{self.base_url}{path}",
            'params': params,
            'auth': self.auth,
            'timeout': self.timeout
        }

    async def list_direct_message_events(self, cursor=None):
        """
        Fetches one page of DM events, newest first.
        Returns (events, next_cursor); next_cursor is None on the last page.
        """
        params = {'count': str(self.page_size)}
        if cursor:
            params['cursor'] = cursor
        options = self._options(DM_EVENTS_PATH, params)
        response = await throttled_twitter_request(lambda: make_http_request(options), self.cooldown_seconds)
        payload = response.get('data') or {}
        return payload.get('events') or [], payload.get('next_cursor') or None

    async def get_tweet(self, tweet_id):
        """
        Fetches a tweet with entities and full_text. Returns None if it does not exist.
        """
        options = self._options(STATUS_SHOW_PATH, {
            'id': str(tweet_id),
            'include_entities': 'true',
            'tweet_mode': 'extended'
        })
        try:
            response = await throttled_twitter_request(lambda: make_http_request(options), self.cooldown_seconds)
        except requests.exceptions.HTTPError as http_err:
            if http_err.response is not None and http_err.response.status_code == 404:
                logger.warn(f"Tweet {tweet_id} not found")
                return None
            raise
        return response.get('data')
