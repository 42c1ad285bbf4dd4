import pytest

from services.last_known_state import (
    StoredTweetInfo,
    all_senders_resolved,
    json_column_number,
    last_stored_tweet_per_sender,
    scan_backward,
)
from utils.errors import ConfigurationError
from dm_fixtures import FakeStore, stored_json

ALLOWLIST = {"111": "alice", "222": "bob"}


def json_rows(*raw_values):
    return [["", raw] for raw in raw_values]


def test_latest_row_per_sender_wins():
    rows = json_rows(
        stored_json("111", 1),
        stored_json("222", 2),
        stored_json("111", 3),
        stored_json("333", 4),
    )
    store = FakeStore(header=["url", "json"], rows=rows)

    found = last_stored_tweet_per_sender(store, ALLOWLIST)

    assert found == {
        "111": StoredTweetInfo(tweet_id="3", row=3, raw_json=rows[2][1]),
        "222": StoredTweetInfo(tweet_id="2", row=2, raw_json=rows[1][1]),
    }


def test_non_allowlisted_sender_is_never_returned():
    store = FakeStore(header=["json"], rows=[[stored_json("333", 9)]])
    assert last_stored_tweet_per_sender(store, ALLOWLIST) == {}


def test_bad_and_empty_cells_are_skipped():
    rows = [[stored_json("111", 1)], ["{broken"], [""], ["[]"], ["plain text"]]
    store = FakeStore(header=["json"], rows=rows)

    found = last_stored_tweet_per_sender(store, ALLOWLIST)

    assert found == {"111": StoredTweetInfo(tweet_id="1", row=1, raw_json=rows[0][0])}


def test_missing_json_column_is_fatal():
    store = FakeStore(header=["url", "text"], rows=[["a", "b"]])
    with pytest.raises(ConfigurationError):
        last_stored_tweet_per_sender(store, ALLOWLIST)


def test_stops_scanning_once_every_sender_is_resolved():
    # The first row is garbage; it must never be looked at.
    rows = [["{broken"], [stored_json("222", 2)], [stored_json("111", 3)]]
    store = FakeStore(header=["json"], rows=rows)

    visited = []
    found = {}
    for row, value in scan_backward(store.get_column_values(1), lambda: all_senders_resolved(found, ALLOWLIST)):
        visited.append(row)
        found[row] = value

    assert visited == [3, 2]


def test_scan_backward_without_early_exit():
    assert list(scan_backward(["a", "b", "c"], lambda: False)) == [(3, "c"), (2, "b"), (1, "a")]


def test_empty_allowlist_scans_nothing():
    store = FakeStore(header=["json"], rows=[[stored_json("111", 1)]])
    assert last_stored_tweet_per_sender(store, {}) == {}


def test_json_column_number():
    assert json_column_number(["a", "json", "b"]) == 2
    with pytest.raises(ConfigurationError):
        json_column_number(["a", "JSON"])
