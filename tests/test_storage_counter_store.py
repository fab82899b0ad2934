import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor

import pytest

from hits_badge.api.services import metrics
from hits_badge.api.storage import (
    CounterStore,
    StorageOperationFailed,
    StorageUnavailable,
    UserRepoCount,
)


def test_first_increment_returns_one_and_unseen_key_reads_zero(store):
    assert store.get("alice", "proj") == 0
    assert store.increment_and_get("alice", "proj") == 1
    assert store.get("alice", "proj") == 1


def test_increments_are_monotonic(store):
    seen = [store.increment_and_get("octo", "hello-world") for _ in range(5)]
    assert seen == [1, 2, 3, 4, 5]
    assert store.get("octo", "hello-world") == 5


def test_keys_are_isolated(store):
    store.increment_and_get("u1", "r1")
    store.increment_and_get("u1", "r1")
    store.increment_and_get("u1", "r2")
    store.increment_and_get("u2", "r1")

    assert store.get("u1", "r1") == 2
    assert store.get("u1", "r2") == 1
    assert store.get("u2", "r1") == 1
    assert store.get("u2", "r2") == 0


def test_initialize_is_idempotent_and_keeps_data(file_store):
    file_store.increment_and_get("bob", "zeta")
    file_store.initialize()
    assert file_store.get("bob", "zeta") == 1


def test_counts_survive_reopen(tmp_path):
    path = tmp_path / "hits.db"
    first = CounterStore(path)
    first.initialize()
    first.increment_and_get("bob", "zeta")
    first.increment_and_get("bob", "zeta")
    first.close()

    second = CounterStore(path)
    second.initialize()
    try:
        assert second.get("bob", "zeta") == 2
        assert second.increment_and_get("bob", "zeta") == 3
    finally:
        second.close()


def test_initialize_creates_parent_dir(tmp_path):
    path = tmp_path / "nested" / "dir" / "hits.db"
    s = CounterStore(path)
    s.initialize()
    try:
        assert path.exists()
    finally:
        s.close()


def test_scan_orders_by_user_then_repo(store):
    for user, repo in [("bob", "zeta"), ("alice", "mid"), ("bob", "alpha"), ("alice", "alpha")]:
        store.increment_and_get(user, repo)

    assert store.scan() == [
        UserRepoCount("alice", "alpha", 1),
        UserRepoCount("alice", "mid", 1),
        UserRepoCount("bob", "alpha", 1),
        UserRepoCount("bob", "zeta", 1),
    ]
    assert [r.repo for r in store.scan("bob")] == ["alpha", "zeta"]
    assert store.scan("nobody") == []


@pytest.mark.parametrize("workers", [2, 10, 100])
def test_concurrent_increments_do_not_lose_updates(file_store, workers):
    with ThreadPoolExecutor(max_workers=min(workers, 32)) as pool:
        results = list(pool.map(lambda _: file_store.increment_and_get("u", "r"), range(workers)))

    assert file_store.get("u", "r") == workers
    assert sorted(results) == list(range(1, workers + 1))


def test_concurrent_increments_across_connections(tmp_path):
    path = tmp_path / "shared.db"
    stores = [CounterStore(path, busy_timeout_s=10.0) for _ in range(4)]
    for s in stores:
        s.initialize()
    try:
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda i: stores[i % 4].increment_and_get("u", "r"), range(40)))
        assert stores[0].get("u", "r") == 40
    finally:
        for s in stores:
            s.close()


def test_operation_failure_is_wrapped_and_not_retried(store):
    store.increment_and_get("u", "r")
    before = metrics.get("storage_errors_total")
    store._connection().execute("DROP TABLE counts")

    with pytest.raises(StorageOperationFailed) as info:
        store.increment_and_get("u", "r")
    assert isinstance(info.value.__cause__, sqlite3.Error)

    with pytest.raises(StorageOperationFailed):
        store.get("u", "r")
    with pytest.raises(StorageOperationFailed):
        store.scan()

    assert metrics.get("storage_errors_total") == before + 3
    # la transacción fallida no queda abierta
    assert store._connection().in_transaction is False


def test_unopenable_path_raises_storage_unavailable(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    s = CounterStore(blocker / "hits.db")
    with pytest.raises(StorageUnavailable):
        s.initialize()


def test_use_before_initialize_raises(tmp_path):
    s = CounterStore(tmp_path / "hits.db")
    with pytest.raises(StorageUnavailable):
        s.increment_and_get("u", "r")
    assert s.ping() is False


def test_close_is_idempotent(store):
    assert store.ping() is True
    store.close()
    store.close()
    assert store.ping() is False


@pytest.mark.parametrize("user, repo", [("", ""), ("", "proj"), ("alice", "")])
def test_increment_rejects_empty_identifiers(store, user, repo):
    with pytest.raises(ValueError):
        store.increment_and_get(user, repo)
    assert store.scan() == []


def test_schema_rejects_empty_identifiers(store):
    with pytest.raises(sqlite3.IntegrityError):
        store._connection().execute("INSERT INTO counts (user, repo, count) VALUES ('', 'r', 1)")


def test_new_counter_is_logged_on_first_increment_only(store, caplog):
    with caplog.at_level(logging.INFO, logger="hits_badge.storage"):
        store.increment_and_get("octo", "hello-world")
        store.increment_and_get("octo", "hello-world")
        store.increment_and_get("octo", "other")

    created = [r.getMessage() for r in caplog.records if r.getMessage().startswith("user/repo not in db")]
    assert created == [
        "user/repo not in db: octo/hello-world",
        "user/repo not in db: octo/other",
    ]
