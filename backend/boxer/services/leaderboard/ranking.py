"""Canonical ordering and rank queries shared by every store.

Canonical order is score descending, then insertion order: earlier
``created_at`` first, and for identical timestamps whichever entry was
stored first. In-process stores sort with :func:`sort_entries`; SQL stores
order with :func:`canonical_order_by`.
"""

from typing import Iterable, List

from .entry import Entry


def canonical_key(entry: Entry):
    return (-entry.score, entry.created_at)


def sort_entries(entries: Iterable[Entry]) -> List[Entry]:
    # sorted() is stable, so exact ties keep their stored (insertion) order
    return sorted(entries, key=canonical_key)


def canonical_order_by(model):
    """ORDER BY clauses for a mapped table with score/created_at/id columns."""
    return (model.score.desc(), model.created_at.asc(), model.id.asc())


class RankingEngine:
    def __init__(self, store):
        self.store = store

    def position_of(self, score: int) -> int:
        """Score-based position: equal scores share a position.

        Returns -1 when the store could not count (shared store offline).
        """
        above = self.store.count_above(score)
        if above < 0:
            return -1
        return above + 1

    def top_n(self, n: int) -> List[Entry]:
        if n <= 0:
            return []
        return list(self.store.list(limit=n))[:n]
