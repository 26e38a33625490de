import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from .entry import Entry, NewEntry


DEFAULT_CAPACITY = 100


class LeaderboardStore(ABC):
    """Capability set shared by the local and shared leaderboard stores.

    ``append`` assigns ``id`` and ``created_at`` and returns the stored entry.
    ``list`` returns entries in canonical order. ``count_above`` counts
    entries with a strictly greater score. After every successful append
    the store keeps only its ``capacity`` best entries.
    """

    backend = 'abstract'

    def __init__(self, capacity: int = DEFAULT_CAPACITY, logger: Optional[logging.Logger] = None):
        if capacity < 1:
            raise ValueError('capacity must be positive')
        self.capacity = capacity
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    def append(self, new_entry: NewEntry) -> Entry:
        ...

    @abstractmethod
    def list(self, limit: Optional[int] = None) -> List[Entry]:
        ...

    @abstractmethod
    def count_above(self, score: int) -> int:
        ...

    @abstractmethod
    def trim(self) -> int:
        """Drop entries ranked below ``capacity``; return how many were dropped."""
        ...
