import os
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables from .env file
# Look for .env in the same directory (project root)
env_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), '.env')
load_dotenv(env_path)

# Base directory for the Python source files
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# File paths
LOGS_DIR = os.path.join(BASE_DIR, 'logs')
DB_DIR = os.path.join(BASE_DIR, 'db')
SCHEMA_SQL = os.path.join(DB_DIR, 'schema.sql')
DATABASE_FILE = os.getenv('DATABASE_FILE', os.path.join(DB_DIR, 'tweet_saver.db'))

# Twitter application credentials (the delegated user token lives in the database)
TWITTER_API_KEY = os.getenv('TWITTER_API_KEY')
TWITTER_API_KEY_SECRET = os.getenv('TWITTER_API_KEY_SECRET')
TWITTER_BOT_USER_ID = os.getenv('TWITTER_BOT_USER_ID')

TWITTER_API_BASE_URL = os.getenv('TWITTER_API_BASE_URL', 'https://api.twitter.com/1.1')
TWITTER_DM_PAGE_SIZE = int(os.getenv('TWITTER_DM_PAGE_SIZE', 50))
TWITTER_THROTTLE_COOLDOWN_SECONDS = float(os.getenv('TWITTER_THROTTLE_COOLDOWN_SECONDS', 60))
TWITTER_REQUEST_TIMEOUT_SECONDS = float(os.getenv('TWITTER_REQUEST_TIMEOUT_SECONDS', 30))

# Google Sheets
GOOGLE_SERVICE_ACCOUNT_FILE = os.getenv(
    'GOOGLE_SERVICE_ACCOUNT_FILE', os.path.join(BASE_DIR, 'service_account.json')
)
SHEET_NAME = os.getenv('SHEET_NAME', 'Tweets')
JSON_COLUMN = 'json'

# Settings keys in the database
SPREADSHEET_ID_SETTING = 'spreadsheet_id'
ALLOWLIST_PREFIX = 'whitelist/'

# Poll loop
POLL_INTERVAL_SECONDS = float(os.getenv('POLL_INTERVAL_SECONDS', 300))

# Debug mode
DEBUG_MODE = os.getenv('DEBUG_MODE', 'False').lower() == 'true'
LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG_MODE else 'INFO')


@dataclass(frozen=True)
class AppConfig:
    """Settings that stay fixed for the life of the process."""
    twitter_api_key: str
    twitter_api_key_secret: str
    twitter_api_base_url: str = TWITTER_API_BASE_URL
    dm_page_size: int = TWITTER_DM_PAGE_SIZE
    throttle_cooldown_seconds: float = TWITTER_THROTTLE_COOLDOWN_SECONDS
    request_timeout_seconds: float = TWITTER_REQUEST_TIMEOUT_SECONDS
    service_account_file: str = GOOGLE_SERVICE_ACCOUNT_FILE
    sheet_name: str = SHEET_NAME
    json_column: str = JSON_COLUMN
    poll_interval_seconds: float = POLL_INTERVAL_SECONDS


def load_app_config():
    """
    Builds the process-wide AppConfig from the environment.
    Raises ValueError when the Twitter application keys are missing.
    """
    if not TWITTER_API_KEY or not TWITTER_API_KEY_SECRET:
        raise ValueError("TWITTER_API_KEY and TWITTER_API_KEY_SECRET must be set.")
    return AppConfig(
        twitter_api_key=TWITTER_API_KEY,
        twitter_api_key_secret=TWITTER_API_KEY_SECRET,
    )
