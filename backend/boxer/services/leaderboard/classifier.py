import math
from dataclasses import dataclass

from .entry import MAX_SCORE, MIN_SCORE, is_rank_label
from .errors import InvalidScore


# Inclusive upper bound of each derived tier
SCORE_BANDS = (
    (3000, 'C'),
    (6000, 'B'),
    (8500, 'A'),
    (9500, 'S'),
    (MAX_SCORE, 'SSS'),
)


@dataclass(frozen=True)
class ClassifiedResult:
    score: int
    rank: str
    # True when rank came from the score bands instead of the upstream label
    derived: bool = False


def rank_for_score(score: int) -> str:
    for upper, label in SCORE_BANDS:
        if score <= upper:
            return label
    return SCORE_BANDS[-1][1]


def _coerce_score(raw_score) -> float:
    if raw_score is None or isinstance(raw_score, bool):
        raise InvalidScore(f'score is not a number: {raw_score!r}')
    if isinstance(raw_score, (int, float)):
        value = float(raw_score)
    elif isinstance(raw_score, str):
        try:
            value = float(raw_score.strip())
        except ValueError:
            raise InvalidScore(f'score is not a number: {raw_score!r}') from None
    else:
        raise InvalidScore(f'score is not a number: {raw_score!r}')
    if not math.isfinite(value):
        raise InvalidScore(f'score is not finite: {raw_score!r}')
    return value


def classify(raw_score, raw_rank) -> ClassifiedResult:
    """Normalize an untrusted score/rank pair from the scoring collaborator.

    Out-of-range scores are clamped to [0, 9999]. A rank that is one of the
    canonical labels is kept as given; anything else (missing, malformed,
    unknown) is replaced by the band the clamped score falls into.

    Raises InvalidScore when ``raw_score`` is not a finite number.
    """
    value = _coerce_score(raw_score)
    score = min(MAX_SCORE, max(MIN_SCORE, int(round(value))))

    label = raw_rank.strip() if isinstance(raw_rank, str) else None
    if is_rank_label(label):
        return ClassifiedResult(score=score, rank=label)
    return ClassifiedResult(score=score, rank=rank_for_score(score), derived=True)
