"""Device-local leaderboard kept as one JSON blob under a well-known key.

The store is synchronous. One instance may be shared by request threads,
so each read-modify-write of the blob runs under a single lock. Every
operation decodes the whole blob (at most ``capacity`` entries) and
orders it in-process.
"""

import json
import os
import re
import tempfile
import uuid
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, List, Optional

from .entry import Entry, NewEntry, materialize
from .errors import StorageUnavailable
from .ranking import sort_entries
from .store import DEFAULT_CAPACITY, LeaderboardStore


DEFAULT_KEY = 'keyboard_boxer_leaderboard'

_KEY_PATTERN = re.compile(r'^[A-Za-z0-9_.-]+$')


class MemoryMedium:
    """Key/value medium that lives only as long as the process."""

    persistent = False

    def __init__(self):
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileMedium:
    """Key/value medium backed by one file per key inside ``directory``.

    Writes go to a temp file that replaces the target, so a crash never
    leaves a half-written blob. ``quota_bytes`` bounds a single value.
    """

    persistent = True

    def __init__(self, directory: str, quota_bytes: Optional[int] = None):
        self.directory = directory
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> str:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f'invalid storage key: {key!r}')
        return os.path.join(self.directory, f'{key}.json')

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                return fh.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageUnavailable(f'cannot read {path}: {exc}') from exc

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        data = value.encode('utf-8')
        if self.quota_bytes is not None and len(data) > self.quota_bytes:
            raise StorageUnavailable(f'quota exceeded for {key}: {len(data)} > {self.quota_bytes} bytes')
        tmp_path = None
        try:
            os.makedirs(self.directory, exist_ok=True)
            with tempfile.NamedTemporaryFile('wb', dir=self.directory, prefix=f'.{key}.', delete=False) as fh:
                tmp_path = fh.name
                fh.write(data)
            os.replace(tmp_path, path)
        except OSError as exc:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageUnavailable(f'cannot write {path}: {exc}') from exc

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise StorageUnavailable(f'cannot remove {path}: {exc}') from exc


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocalEphemeralStore(LeaderboardStore):
    backend = 'local'

    def __init__(self, medium=None, key: str = DEFAULT_KEY, capacity: int = DEFAULT_CAPACITY,
                 logger=None, clock=_utcnow):
        super().__init__(capacity=capacity, logger=logger)
        self.medium = medium if medium is not None else MemoryMedium()
        self.key = key
        self._clock = clock
        self._last_created_at: Optional[datetime] = None
        self._last_read: List[Entry] = []
        self._lock = RLock()

    @property
    def persistent(self) -> bool:
        return getattr(self.medium, 'persistent', False)

    def append(self, new_entry: NewEntry) -> Entry:
        with self._lock:
            entry = self._append(new_entry)
        self.logger.info(f"[append] store=local id={entry.id} score={entry.score} rank={entry.rank}")
        return entry

    def _append(self, new_entry: NewEntry) -> Entry:
        entries = self._read()
        existing_ids = {e.id for e in entries}
        entry_id = uuid.uuid4().hex
        while entry_id in existing_ids:
            entry_id = uuid.uuid4().hex
        entry = materialize(new_entry, entry_id, self._next_timestamp(entries))

        kept = self._retain(entries + [entry])
        try:
            self._write(kept)
        except StorageUnavailable:
            self._fall_back(entries)
            raise
        return entry

    def list(self, limit: Optional[int] = None) -> List[Entry]:
        with self._lock:
            ordered = sort_entries(self._read())
        if limit is None:
            return ordered
        return ordered[:max(0, limit)]

    def count_above(self, score: int) -> int:
        with self._lock:
            return sum(1 for e in self._read() if e.score > score)

    def trim(self) -> int:
        with self._lock:
            entries = self._read()
            kept = self._retain(entries)
            dropped = len(entries) - len(kept)
            if dropped:
                try:
                    self._write(kept)
                except StorageUnavailable:
                    self._fall_back(entries)
                    raise
        return dropped

    def clear(self) -> None:
        with self._lock:
            self.medium.remove_item(self.key)
            self._last_read = []

    def _retain(self, entries: List[Entry]) -> List[Entry]:
        ordered = sort_entries(entries)
        if len(ordered) > self.capacity:
            self.logger.info(f"[trim] store=local dropped={len(ordered) - self.capacity} capacity={self.capacity}")
        return ordered[:self.capacity]

    def _next_timestamp(self, entries: List[Entry]) -> datetime:
        candidates = [self._clock()]
        if self._last_created_at is not None:
            candidates.append(self._last_created_at)
        candidates.extend(e.created_at for e in entries)
        self._last_created_at = max(candidates)
        return self._last_created_at

    def _read(self) -> List[Entry]:
        try:
            raw = self.medium.get_item(self.key)
        except StorageUnavailable:
            self._fall_back(self._last_read)
            raise
        if not raw:
            self._last_read = []
            return []
        try:
            decoded = json.loads(raw)
            if not isinstance(decoded, list):
                raise ValueError(f'expected a list, got {type(decoded).__name__}')
            entries = [Entry.from_dict(item) for item in decoded]
        except (ValueError, KeyError, TypeError) as exc:
            self.logger.warning(f"[corrupt] store=local key={self.key} treating as empty: {exc}")
            entries = []
        self._last_read = entries
        return list(entries)

    def _write(self, entries: List[Entry]) -> None:
        self.medium.set_item(self.key, json.dumps([e.to_dict() for e in entries], ensure_ascii=False))
        self._last_read = list(entries)

    def _fall_back(self, entries: List[Entry]) -> None:
        if isinstance(self.medium, MemoryMedium):
            return
        self.logger.warning(
            f"[fallback] store=local key={self.key} medium unavailable, continuing in memory with {len(entries)} entries"
        )
        memory = MemoryMedium()
        memory.set_item(self.key, json.dumps([e.to_dict() for e in entries], ensure_ascii=False))
        self.medium = memory
        self._last_read = list(entries)
