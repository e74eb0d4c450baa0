"""Tests for the state store adapters."""

from datetime import timedelta

import pytest

from outagewatch.persistence import (
    Base,
    MemoryStateStore,
    SqlStateStore,
    StoreReadError,
    StoreWriteError,
    build_engine,
    build_session_factory,
)
from outagewatch.core.normalize import compute_fingerprint

KEY = "LATEST_URSUS_OUTAGES"


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'state.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(engine):
    Base.metadata.create_all(bind=engine)
    return SqlStateStore(build_session_factory(engine))


@pytest.fixture(params=["memory", "sql"])
def store(request, sql_store):
    if request.param == "memory":
        return MemoryStateStore()
    return sql_store


def test_absent_key_reads_as_empty(store):
    assert store.get(KEY) == ""
    assert store.get_snapshot(KEY) is None


def test_put_then_get(store, fixed_now):
    store.put(KEY, "<strong>ul. Keniga</strong> (z 1 do 2)", fixed_now)

    assert store.get(KEY) == "<strong>ul. Keniga</strong> (z 1 do 2)"
    snapshot = store.get_snapshot(KEY)
    assert snapshot.key == KEY
    assert snapshot.fingerprint == compute_fingerprint(snapshot.report)
    assert snapshot.last_updated.replace(tzinfo=None) == fixed_now.replace(tzinfo=None)


def test_put_overwrites(store, fixed_now):
    store.put(KEY, "old", fixed_now)
    store.put(KEY, "new", fixed_now + timedelta(minutes=5))

    assert store.get(KEY) == "new"
    assert store.get_snapshot(KEY).last_updated.replace(tzinfo=None) == (
        fixed_now + timedelta(minutes=5)
    ).replace(tzinfo=None)


def test_keys_are_independent(store, fixed_now):
    store.put(KEY, "planned", fixed_now)
    store.put("LATEST_URSUS_EMERGENCIES", "emergency", fixed_now)

    assert store.get(KEY) == "planned"
    assert store.get("LATEST_URSUS_EMERGENCIES") == "emergency"


def test_stored_empty_report_is_distinguishable(store, fixed_now):
    store.put(KEY, "", fixed_now)

    assert store.get(KEY) == ""
    assert store.get_snapshot(KEY) is not None


def test_sql_store_lists_snapshots(sql_store, fixed_now):
    sql_store.put("B", "b", fixed_now)
    sql_store.put("A", "a", fixed_now)

    assert [s.key for s in sql_store.all_snapshots()] == ["A", "B"]


def test_sql_store_read_failure_is_wrapped(engine):
    # No tables created
    store = SqlStateStore(build_session_factory(engine))

    with pytest.raises(StoreReadError) as exc_info:
        store.get(KEY)

    assert exc_info.value.key == KEY
    assert exc_info.value.cause is not None


def test_sql_store_write_failure_is_wrapped(engine, fixed_now):
    store = SqlStateStore(build_session_factory(engine))

    with pytest.raises(StoreWriteError):
        store.put(KEY, "report", fixed_now)


def test_store_from_url_creates_schema_on_first_use(tmp_path, fixed_now):
    store = SqlStateStore.from_url(f"sqlite:///{tmp_path / 'nested' / 'state.db'}")

    assert not (tmp_path / "nested").exists()
    assert store.get(KEY) == ""

    store.put(KEY, "report", fixed_now)
    assert store.get(KEY) == "report"


def test_store_from_url_unusable_path(tmp_path, fixed_now):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")
    store = SqlStateStore.from_url(f"sqlite:///{blocker / 'state.db'}")

    with pytest.raises(StoreReadError, match="State database unavailable") as exc_info:
        store.get(KEY)
    assert exc_info.value.key == KEY

    with pytest.raises(StoreWriteError, match="State database unavailable"):
        store.put(KEY, "report", fixed_now)

    with pytest.raises(StoreReadError):
        store.all_snapshots()
