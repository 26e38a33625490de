"""Failure kinds of the leaderboard core.

Every exception carries a stable ``kind`` for the HTTP layer and a
``retryable`` hint. Only NetworkError is worth repeating; a repeated
submit may create a duplicate row.
"""


class LeaderboardError(Exception):
    kind = 'leaderboard_error'
    retryable = False


class InvalidScore(LeaderboardError, ValueError):
    kind = 'invalid_score'


class InvalidName(LeaderboardError, ValueError):
    kind = 'invalid_name'


class WriteError(LeaderboardError):
    kind = 'write_error'


class StorageUnavailable(WriteError):
    """The device-local medium cannot be read or written."""
    kind = 'storage_unavailable'


class NetworkError(WriteError):
    """Transient failure talking to the shared store."""
    kind = 'network_error'
    retryable = True


class RejectedWrite(WriteError):
    """The shared store refused the row."""
    kind = 'rejected_write'
