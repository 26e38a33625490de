from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


MIN_SCORE = 0
MAX_SCORE = 9999
MAX_NAME_LENGTH = 20

# Tier labels the classifier may derive, lowest band first
TIERS = ('C', 'B', 'A', 'S', 'SSS')
# KO is a UI-only override, accepted but never derived
RANK_LABELS = TIERS + ('KO',)


@dataclass(frozen=True)
class NewEntry:
    """An entry before a store has assigned its id and creation time."""
    name: str
    score: int
    rank: str


@dataclass(frozen=True)
class Entry:
    id: str
    name: str
    score: int
    rank: str
    created_at: datetime

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'score': self.score,
            'rank': self.rank,
            'created_at': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Entry':
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            score=int(data['score']),
            rank=str(data['rank']),
            created_at=as_utc(datetime.fromisoformat(data['created_at'])),
        )


def materialize(new_entry: NewEntry, entry_id: str, created_at: datetime) -> Entry:
    return Entry(
        id=entry_id,
        name=new_entry.name,
        score=new_entry.score,
        rank=new_entry.rank,
        created_at=created_at,
    )


def is_rank_label(value: Optional[str]) -> bool:
    return value in RANK_LABELS


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
