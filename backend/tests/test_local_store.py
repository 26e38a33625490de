import json
import logging
import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from boxer.services.leaderboard import (
    FileMedium,
    LocalEphemeralStore,
    MemoryMedium,
    NewEntry,
    StorageUnavailable,
)


KEY = 'keyboard_boxer_leaderboard'


def _entry(name, score, rank='C'):
    return NewEntry(name=name, score=score, rank=rank)


class FrozenClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


class BrokenMedium:
    persistent = True

    def __init__(self, fail_reads=False):
        self.fail_reads = fail_reads
        self.items = {}

    def get_item(self, key):
        if self.fail_reads:
            raise StorageUnavailable('medium disabled')
        return self.items.get(key)

    def set_item(self, key, value):
        raise StorageUnavailable('quota exceeded')

    def remove_item(self, key):
        self.items.pop(key, None)


def test_append_assigns_id_and_timestamp(local_store):
    entry = local_store.append(_entry('Alice', 4200, 'B'))
    assert entry.id
    assert entry.created_at.tzinfo is not None
    listed = local_store.list()
    assert [e.id for e in listed] == [entry.id]


def test_ids_are_unique(local_store):
    ids = {local_store.append(_entry(f'p{i}', i * 10)).id for i in range(30)}
    assert len(ids) == 30


def test_survives_reload_from_same_medium(tmp_path):
    medium = FileMedium(str(tmp_path))
    LocalEphemeralStore(medium).append(_entry('Alice', 5000, 'B'))
    reloaded = LocalEphemeralStore(FileMedium(str(tmp_path)))
    assert [e.name for e in reloaded.list()] == ['Alice']


def test_blob_is_one_json_array_under_well_known_key(tmp_path):
    store = LocalEphemeralStore(FileMedium(str(tmp_path)))
    store.append(_entry('Alice', 100))
    store.append(_entry('Bob', 900))
    blob = json.loads((tmp_path / f'{KEY}.json').read_text(encoding='utf-8'))
    assert [item['name'] for item in blob] == ['Bob', 'Alice']
    assert set(blob[0]) == {'id', 'name', 'score', 'rank', 'created_at'}


def test_equal_scores_keep_insertion_order_with_identical_timestamps():
    store = LocalEphemeralStore(MemoryMedium(), clock=FrozenClock())
    a = store.append(_entry('A', 5000, 'B'))
    b = store.append(_entry('B', 5000, 'B'))
    c = store.append(_entry('C', 6000, 'B'))
    assert [e.id for e in store.list()] == [c.id, a.id, b.id]
    assert a.created_at == b.created_at


def test_created_at_never_goes_backwards():
    clock = FrozenClock()
    store = LocalEphemeralStore(MemoryMedium(), clock=clock)
    first = store.append(_entry('A', 10))
    clock.now = clock.now - timedelta(hours=1)
    second = store.append(_entry('B', 20))
    assert second.created_at >= first.created_at


def test_capacity_keeps_top_entries(tmp_path):
    store = LocalEphemeralStore(FileMedium(str(tmp_path)), capacity=100)
    scores = [(i * 37) % 9999 for i in range(101)]
    for i, score in enumerate(scores):
        store.append(_entry(f'p{i}', score))
    listed = store.list(101)
    assert len(listed) == 100
    assert sorted(e.score for e in listed) == sorted(scores)[1:]


def test_list_limit_and_count_above(local_store):
    for score in (100, 500, 500, 900):
        local_store.append(_entry('x', score))
    assert [e.score for e in local_store.list(2)] == [900, 500]
    assert local_store.list(0) == []
    assert local_store.count_above(500) == 1
    assert local_store.count_above(99) == 4
    assert local_store.count_above(900) == 0


def test_corrupt_blob_reads_as_empty(tmp_path, caplog):
    (tmp_path / f'{KEY}.json').write_text('{not json', encoding='utf-8')
    store = LocalEphemeralStore(FileMedium(str(tmp_path)), logger=logging.getLogger('tests.corrupt'))
    with caplog.at_level(logging.WARNING, logger='tests.corrupt'):
        assert store.list() == []
    assert any('[corrupt]' in r.message for r in caplog.records)
    # The next write replaces the corrupt blob
    store.append(_entry('Alice', 10))
    assert [e.name for e in LocalEphemeralStore(FileMedium(str(tmp_path))).list()] == ['Alice']


def test_wrong_shape_blob_reads_as_empty(tmp_path):
    (tmp_path / f'{KEY}.json').write_text(json.dumps({'name': 'x'}), encoding='utf-8')
    assert LocalEphemeralStore(FileMedium(str(tmp_path))).list() == []


def test_quota_overflow_is_storage_unavailable_then_degrades_to_memory(tmp_path):
    store = LocalEphemeralStore(FileMedium(str(tmp_path), quota_bytes=400))
    store.append(_entry('Alice', 10))
    failed_name = None
    for i in range(20):
        try:
            store.append(_entry(f'player{i}', 20 + i))
        except StorageUnavailable:
            failed_name = f'player{i}'
            break
    assert failed_name is not None
    assert not store.persistent
    # The failed append is not visible, earlier entries are
    names = [e.name for e in store.list()]
    assert 'Alice' in names
    assert failed_name not in names
    # Session continues in memory
    store.append(_entry('Bob', 9000, 'S'))
    assert store.list()[0].name == 'Bob'


def test_unwritable_medium_surfaces_and_keeps_nothing():
    store = LocalEphemeralStore(BrokenMedium())
    with pytest.raises(StorageUnavailable):
        store.append(_entry('Alice', 10))
    assert store.list() == []
    assert isinstance(store.medium, MemoryMedium)


def test_unreadable_medium_surfaces_then_degrades():
    store = LocalEphemeralStore(BrokenMedium(fail_reads=True))
    with pytest.raises(StorageUnavailable):
        store.list()
    assert store.list() == []
    store.append(_entry('Alice', 10))
    assert store.count_above(0) == 1


def test_invalid_key_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        FileMedium(str(tmp_path)).get_item('../escape')


def test_clear_removes_blob(tmp_path):
    store = LocalEphemeralStore(FileMedium(str(tmp_path)))
    store.append(_entry('Alice', 10))
    store.clear()
    assert store.list() == []
    assert not (tmp_path / f'{KEY}.json').exists()


class SlowMedium(MemoryMedium):
    def get_item(self, key):
        value = super().get_item(key)
        time.sleep(0.05)
        return value


def test_concurrent_appends_are_all_kept():
    store = LocalEphemeralStore(SlowMedium())
    returned = []

    def submit(i):
        returned.append(store.append(_entry(f'p{i}', i * 100)))

    threads = [threading.Thread(target=submit, args=(i,)) for i in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(returned) == 5
    assert sorted(e.id for e in store.list()) == sorted(e.id for e in returned)
