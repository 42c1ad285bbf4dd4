import os
import tempfile

# Must run before config is imported anywhere so the global repository
# does not create its database inside the source tree.
_TEST_DIR = tempfile.mkdtemp(prefix="tweet_saver_tests_")
os.environ.setdefault("DATABASE_FILE", os.path.join(_TEST_DIR, "tweet_saver.db"))
os.environ.setdefault("TWITTER_API_KEY", "test_api_key")
os.environ.setdefault("TWITTER_API_KEY_SECRET", "test_api_key_secret")
os.environ.setdefault("TWITTER_BOT_USER_ID", "999")

import pytest

from config import AppConfig


@pytest.fixture
def app_config():
    return AppConfig(
        twitter_api_key="test_api_key",
        twitter_api_key_secret="test_api_key_secret",
        throttle_cooldown_seconds=0,
        poll_interval_seconds=3600,
    )


@pytest.fixture
def repo(tmp_path):
    from db.repository import Repository

    repository = Repository(str(tmp_path / "settings.db"))
    repository.set_setting("spreadsheet_id", "sheet-123")
    repository.set_setting("whitelist/alice", "111")
    repository.set_setting("whitelist/bob", "222")
    repository.save_user_credentials("user-token", "user-secret", "saver_bot")
    return repository
