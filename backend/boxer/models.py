from boxer import db
from boxer.services.leaderboard.entry import Entry, MAX_NAME_LENGTH, MAX_SCORE, MIN_SCORE, RANK_LABELS, as_utc


_rank_list = ', '.join(f"'{label}'" for label in RANK_LABELS)


class LeaderboardRow(db.Model):
    __tablename__ = 'leaderboard'
    __table_args__ = (
        db.CheckConstraint(f'score BETWEEN {MIN_SCORE} AND {MAX_SCORE}', name='ck_leaderboard_score_range'),
        db.CheckConstraint(f'rank IN ({_rank_list})', name='ck_leaderboard_rank_label'),
        db.CheckConstraint(f'length(name) BETWEEN 1 AND {MAX_NAME_LENGTH}', name='ck_leaderboard_name_length'),
        db.Index('ix_leaderboard_score_created_at', 'score', 'created_at'),
    )
    # Fetch id and created_at in the INSERT round trip
    __mapper_args__ = {'eager_defaults': True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(MAX_NAME_LENGTH), nullable=False)
    score = db.Column(db.Integer, nullable=False)
    rank = db.Column(db.String(3), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_entry(self) -> Entry:
        return Entry(
            id=str(self.id),
            name=self.name,
            score=self.score,
            rank=self.rank,
            created_at=as_utc(self.created_at),
        )
