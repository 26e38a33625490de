"""Leaderboard ranking and persistence.

Imported by HTTP routes and CLI commands. Nothing in this package reads
ambient global state: the store handle is built once by ``init_leaderboard``
and injected into the ranking engine and submission gateway.
"""

from .classifier import ClassifiedResult, classify, rank_for_score
from .entry import Entry, NewEntry, RANK_LABELS, TIERS
from .errors import (
    InvalidName,
    InvalidScore,
    LeaderboardError,
    NetworkError,
    RejectedWrite,
    StorageUnavailable,
    WriteError,
)
from .factory import Leaderboard, get_leaderboard, init_leaderboard
from .gateway import SubmissionGateway, SubmissionResult
from .local_store import FileMedium, LocalEphemeralStore, MemoryMedium
from .ranking import RankingEngine
from .shared_store import SharedDurableStore
from .store import LeaderboardStore
