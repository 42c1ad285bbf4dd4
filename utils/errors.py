"""
Error kinds raised by the poll and rebuild cycles.

Fatal kinds abort the running cycle. Row-level kinds are caught by the
orchestrators, logged, and only skip the affected cluster or row.
"""


class ConfigurationError(Exception):
    """The worksheet or settings are unusable (missing json column, missing spreadsheet id)."""


class CredentialsError(Exception):
    """No delegated user token is stored."""


class ThrottledError(Exception):
    """The Twitter API answered 429; the same request should be repeated after a cooldown."""

    def __init__(self, message, response=None):
        super().__init__(message)
        self.response = response


class RowEncodeError(ValueError):
    """A record could not be serialized to JSON."""


class RowDecodeError(ValueError):
    """A stored json cell could not be parsed back into a record."""


class StoreWriteError(Exception):
    """Writing to the worksheet failed; nothing else is written this cycle."""


class RebuildMismatchError(Exception):
    """The rebuilt region does not have the same number of rows as the original."""
