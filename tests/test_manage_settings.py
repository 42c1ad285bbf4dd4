import pytest
import tweepy
from unittest.mock import MagicMock, patch

from scripts.manage_settings import allow, authorize, disallow, main, set_spreadsheet, show


@pytest.fixture
def mock_tweepy():
    with patch('scripts.manage_settings.tweepy') as mocked:
        mocked.TweepyException = tweepy.TweepyException
        handler = mocked.OAuth1UserHandler.return_value
        handler.get_authorization_url.return_value = "https://api.twitter.com/oauth/authorize?oauth_token=x"
        handler.get_access_token.return_value = ("new-token", "new-secret")
        yield mocked


def verified_user(mocked, id_str, screen_name):
    mocked.API.return_value.verify_credentials.return_value = MagicMock(id_str=id_str, screen_name=screen_name)


def test_authorize_stores_token_for_bot_account(repo, mock_tweepy):
    verified_user(mock_tweepy, "999", "saver_bot")

    assert authorize(repo, pin_reader=lambda prompt: " 1234 ") == 0

    mock_tweepy.OAuth1UserHandler.return_value.get_access_token.assert_called_once_with("1234")
    assert mock_tweepy.OAuth1UserHandler.call_args.kwargs["callback"] == "oob"
    creds = repo.get_user_credentials()
    assert (creds["token"], creds["token_secret"]) == ("new-token", "new-secret")


def test_authorize_rejects_other_accounts(repo, mock_tweepy, capsys):
    verified_user(mock_tweepy, "12345", "someone_else")

    assert authorize(repo, pin_reader=lambda prompt: "1234") == 1

    assert repo.get_user_credentials()["token"] == "user-token"
    assert "Unauthorized user 12345" in capsys.readouterr().out


def test_authorize_without_pin(repo, mock_tweepy):
    assert authorize(repo, pin_reader=lambda prompt: "") == 1
    mock_tweepy.OAuth1UserHandler.return_value.get_access_token.assert_not_called()


def test_authorize_token_exchange_failure(repo, mock_tweepy):
    mock_tweepy.OAuth1UserHandler.return_value.get_access_token.side_effect = tweepy.TweepyException("bad pin")
    assert authorize(repo, pin_reader=lambda prompt: "0000") == 1
    assert repo.get_user_credentials()["token"] == "user-token"


def test_allow_and_disallow(repo):
    assert allow(repo, "@carol", "333") == 0
    assert repo.get_allowlist()["333"] == "carol"

    assert disallow(repo, "carol") == 0
    assert "333" not in repo.get_allowlist()


def test_allow_rejects_non_numeric_id(repo):
    assert allow(repo, "carol", "carol") == 1
    assert "carol" not in repo.get_allowlist().values()


def test_set_spreadsheet_and_show(repo, capsys):
    assert set_spreadsheet(repo, " new-sheet ") == 0
    assert repo.get_setting("spreadsheet_id") == "new-sheet"

    assert show(repo) == 0
    out = capsys.readouterr().out
    assert "Spreadsheet: new-sheet" in out
    assert "User token: @saver_bot" in out
    assert "@alice: 111" in out
    assert "@bob: 222" in out


def test_main_uses_given_database(tmp_path, capsys):
    db_path = str(tmp_path / "cli.db")

    assert main(["--db", db_path, "allow", "dave", "444"]) == 0
    assert main(["--db", db_path, "show"]) == 0

    out = capsys.readouterr().out
    assert "Allow-list (1):" in out
    assert "@dave: 444" in out
    assert "User token: (not stored)" in out
