"""Leaderboard shared by every client, one row per entry in a SQL table.

Ordering and trimming are expressed as SQL so the database's answer is
authoritative; results are never re-sorted client side. Atomic id and
timestamp assignment is the database's job. Each operation is a single
independent round trip with no transaction spanning calls.
"""

from typing import Callable, List, Optional

from sqlalchemy import exc as sa_exc

from .entry import Entry, NewEntry
from .errors import NetworkError, RejectedWrite
from .ranking import canonical_order_by
from .store import DEFAULT_CAPACITY, LeaderboardStore


DEFAULT_LIST_CAP = 100

# Driver failures that mean the database could not be reached in time
_TRANSIENT_ERRORS = (sa_exc.OperationalError, sa_exc.TimeoutError, sa_exc.DisconnectionError, sa_exc.InterfaceError)
# Failures that mean the database saw the row and refused it
_REJECTED_ERRORS = (sa_exc.IntegrityError, sa_exc.DataError)


def run_inline(task: Callable[[], object]) -> None:
    task()


class SharedDurableStore(LeaderboardStore):
    backend = 'shared'

    def __init__(self, session, model, capacity: int = DEFAULT_CAPACITY, list_cap: int = DEFAULT_LIST_CAP,
                 schedule: Callable[[Callable[[], object]], None] = run_inline, logger=None):
        super().__init__(capacity=capacity, logger=logger)
        self.session = session
        self.model = model
        self.list_cap = list_cap
        self._schedule = schedule

    def append(self, new_entry: NewEntry) -> Entry:
        row = self.model(name=new_entry.name, score=new_entry.score, rank=new_entry.rank)
        try:
            self.session.add(row)
            self.session.flush()
            entry = row.to_entry()
            self.session.commit()
        except _REJECTED_ERRORS as exc:
            self.session.rollback()
            self.logger.error(f"[append-rejected] store=shared name={new_entry.name!r} score={new_entry.score} rank={new_entry.rank}: {exc.orig}")
            raise RejectedWrite(f'leaderboard rejected the entry: {exc.orig}') from exc
        except _TRANSIENT_ERRORS as exc:
            self.session.rollback()
            self.logger.error(f"[append-failed] store=shared score={new_entry.score}: {exc}")
            raise NetworkError(f'leaderboard unreachable: {exc}') from exc
        except sa_exc.SQLAlchemyError as exc:
            self.session.rollback()
            self.logger.error(f"[append-failed] store=shared score={new_entry.score}: {exc}")
            raise RejectedWrite(f'leaderboard refused the write: {exc}') from exc

        self.logger.info(f"[append] store=shared id={entry.id} score={entry.score} rank={entry.rank}")
        self._schedule(self.trim)
        return entry

    def list(self, limit: Optional[int] = None) -> List[Entry]:
        if limit is None or limit > self.list_cap:
            limit = self.list_cap
        if limit <= 0:
            return []
        try:
            rows = (
                self.session.query(self.model)
                .order_by(*canonical_order_by(self.model))
                .limit(limit)
                .all()
            )
            return [row.to_entry() for row in rows]
        except sa_exc.SQLAlchemyError as exc:
            self.session.rollback()
            self.logger.warning(f"[list-failed] store=shared limit={limit}: {exc}")
            return []

    def count_above(self, score: int) -> int:
        try:
            return self.session.query(self.model).filter(self.model.score > score).count()
        except sa_exc.SQLAlchemyError as exc:
            self.session.rollback()
            self.logger.warning(f"[count-failed] store=shared score={score}: {exc}")
            return -1

    def trim(self) -> int:
        """Delete rows ranked below ``capacity``. Best effort: errors are logged."""
        try:
            surplus = [
                row_id for (row_id,) in (
                    self.session.query(self.model.id)
                    .order_by(*canonical_order_by(self.model))
                    .offset(self.capacity)
                    .all()
                )
            ]
            if not surplus:
                return 0
            self.session.query(self.model).filter(self.model.id.in_(surplus)).delete(synchronize_session=False)
            self.session.commit()
        except sa_exc.SQLAlchemyError as exc:
            self.session.rollback()
            self.logger.warning(f"[trim-failed] store=shared capacity={self.capacity}: {exc}")
            return 0
        self.logger.info(f"[trim] store=shared dropped={len(surplus)} capacity={self.capacity}")
        return len(surplus)

    def clear(self) -> None:
        self.session.query(self.model).delete(synchronize_session=False)
        self.session.commit()
