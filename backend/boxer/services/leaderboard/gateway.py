from dataclasses import dataclass
from typing import List

from .classifier import classify
from .entry import Entry, MAX_NAME_LENGTH, NewEntry
from .errors import InvalidName
from .ranking import RankingEngine


DEFAULT_TOP_N = 10


@dataclass(frozen=True)
class SubmissionResult:
    entry: Entry
    top: List[Entry]
    position: int

    def to_dict(self):
        return {
            'entry': self.entry.to_dict(),
            'leaderboard': [e.to_dict() for e in self.top],
            'position': self.position,
        }


def clean_name(name) -> str:
    if not isinstance(name, str):
        raise InvalidName('name is required')
    cleaned = name.strip()
    if not cleaned:
        raise InvalidName('name must not be blank')
    if len(cleaned) > MAX_NAME_LENGTH:
        raise InvalidName(f'name must be at most {MAX_NAME_LENGTH} characters')
    return cleaned


class SubmissionGateway:
    """The only write path: classify, append, then read back the updated view.

    Store failures propagate unchanged so a failed save is never mistaken
    for a successful one.
    """

    def __init__(self, store, ranking: RankingEngine = None, top_n: int = DEFAULT_TOP_N):
        self.store = store
        self.ranking = ranking or RankingEngine(store)
        self.top_n = top_n

    def submit(self, name, raw_score, raw_rank) -> SubmissionResult:
        cleaned = clean_name(name)
        result = classify(raw_score, raw_rank)
        entry = self.store.append(NewEntry(name=cleaned, score=result.score, rank=result.rank))
        return SubmissionResult(
            entry=entry,
            top=self.ranking.top_n(self.top_n),
            position=self.ranking.position_of(entry.score),
        )
