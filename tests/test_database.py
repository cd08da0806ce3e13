from __future__ import annotations

import sqlite3
from datetime import date
from pathlib import Path

import pytest

from conference_central.database import Database, Filter, InvalidQueryError
from conference_central.errors import ConflictAbort, TransientUnavailable
from conference_central.keys import CONFERENCE_KIND, PROFILE_KIND, conference_key, profile_key
from conference_central.models import Conference, Profile, TeeShirtSize


@pytest.fixture()
def database(tmp_path: Path) -> Database:
    db_path = tmp_path / "conference.sqlite3"
    db = Database(db_path)
    db.initialize()
    return db


def _conference(conference_id: int, organizer: str = "u1", **overrides: object) -> Conference:
    values = dict(
        conference_id=conference_id,
        organizer_user_id=organizer,
        name=f"Conference {conference_id}",
        city="London",
        topics=["Web Technologies"],
        start_date=date(2016, 1, 10),
        month=1,
        max_attendees=20,
        seats_available=20,
    )
    values.update(overrides)
    return Conference(**values)  # type: ignore[arg-type]


def test_put_and_get_profile(database: Database) -> None:
    profile = Profile(
        user_id="u1",
        display_name="alice",
        main_email="alice@ex.com",
        tee_shirt_size=TeeShirtSize.MEDIUM,
        conference_keys_to_attend=["k1", "k2"],
    )

    key = database.put(profile)

    assert key == profile_key("u1")
    assert database.get(key) == profile
    assert database.get(profile_key("missing")) is None


def test_put_and_get_conference(database: Database) -> None:
    conference = _conference(3, description="About the web", end_date=date(2016, 1, 12))

    database.put(conference)
    loaded = database.get(conference_key("u1", 3))

    assert loaded == conference
    assert database.get(conference_key("u2", 3)) is None


def test_put_overwrites_existing_entity(database: Database) -> None:
    conference = _conference(1)
    database.put(conference)

    conference.seats_available = 5
    conference.topics = ["Python"]
    database.put(conference)

    loaded = database.get(conference.key)
    assert isinstance(loaded, Conference)
    assert loaded.seats_available == 5
    assert loaded.topics == ["Python"]
    assert list(database.query(CONFERENCE_KIND, [Filter("topics", "=", "Web Technologies")])) == []


def test_get_multi_preserves_order_and_reports_missing(database: Database) -> None:
    first = _conference(1)
    second = _conference(2, organizer="u2")
    database.put_multi([first, second])

    keys = [second.key, conference_key("u1", 99), first.key, second.key]
    results = database.get_multi(keys)

    assert results == [second, None, first, second]
    assert database.get_multi([]) == []


def test_allocate_child_id_is_scoped_to_parent(database: Database) -> None:
    first = database.allocate_child_id(profile_key("u1"), CONFERENCE_KIND)
    second = database.allocate_child_id(profile_key("u1"), CONFERENCE_KIND)
    other = database.allocate_child_id(profile_key("u2"), CONFERENCE_KIND)

    assert (first.id, second.id, other.id) == (1, 2, 1)
    assert first.parent == profile_key("u1")
    assert first.kind == CONFERENCE_KIND


def test_query_filters_and_orders(database: Database) -> None:
    database.put_multi(
        [
            _conference(1, name="Zeta", max_attendees=15, seats_available=15),
            _conference(2, name="Alpha", max_attendees=30, seats_available=30),
            _conference(3, name="Beta", max_attendees=15, seats_available=15),
            _conference(4, name="Gamma", max_attendees=5, seats_available=5),
            _conference(5, name="Delta", city="Paris", max_attendees=50, seats_available=50),
            _conference(6, name="Epsilon", topics=["Python"], max_attendees=50, seats_available=50),
        ]
    )

    results = database.query(
        CONFERENCE_KIND,
        [
            Filter("max_attendees", ">", 10),
            Filter("city", "=", "London"),
            Filter("topics", "=", "Web Technologies"),
        ],
        ["max_attendees", "name"],
    )

    assert [conference.name for conference in results] == ["Beta", "Zeta", "Alpha"]


def test_query_supports_descending_order_and_ancestor(database: Database) -> None:
    database.put_multi(
        [
            _conference(1, name="B"),
            _conference(2, name="C"),
            _conference(1, organizer="u2", name="A"),
        ]
    )

    owned = database.query(CONFERENCE_KIND, order=["-name"], ancestor=profile_key("u1"))

    assert [conference.name for conference in owned] == ["C", "B"]


def test_query_is_lazy(database: Database) -> None:
    database.put(_conference(1))

    iterator = database.query(CONFERENCE_KIND)

    assert next(iterator).conference_id == 1
    with pytest.raises(StopIteration):
        next(iterator)


@pytest.mark.parametrize(
    "filters,order",
    [
        ([Filter("max_attendees", ">", 1), Filter("month", "<", 3)], []),
        ([Filter("max_attendees", ">", 1)], ["name"]),
        ([Filter("topics", ">", "a")], []),
        ([Filter("unknown", "=", 1)], []),
        ([Filter("city", "!=", "London")], []),
        ([], ["topics"]),
    ],
)
def test_invalid_queries_are_rejected(database: Database, filters, order) -> None:
    with pytest.raises(InvalidQueryError):
        database.query(CONFERENCE_KIND, filters, order)


def test_query_profiles_by_property(database: Database) -> None:
    database.put_multi(
        [
            Profile(user_id="u1", display_name="alice", main_email="alice@ex.com"),
            Profile(user_id="u2", display_name="bob", main_email="bob@ex.com", tee_shirt_size=TeeShirtSize.XL),
        ]
    )

    results = list(database.query(PROFILE_KIND, [Filter("tee_shirt_size", "=", "XL")]))

    assert [profile.user_id for profile in results] == ["u2"]


def test_transaction_commits_all_writes(database: Database) -> None:
    def _work(txn):
        txn.put(Profile(user_id="u1", display_name="alice", main_email="alice@ex.com"))
        txn.put(_conference(1))
        return "done"

    assert database.run_in_transaction(_work) == "done"
    assert database.get(profile_key("u1")) is not None
    assert database.get(conference_key("u1", 1)) is not None


def test_transaction_rolls_back_on_error(database: Database) -> None:
    def _work(txn):
        txn.put(Profile(user_id="u1", display_name="alice", main_email="alice@ex.com"))
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        database.run_in_transaction(_work)

    assert database.get(profile_key("u1")) is None


def test_transaction_handle_is_released_after_exit(database: Database) -> None:
    captured = []
    database.run_in_transaction(captured.append)

    with pytest.raises(RuntimeError):
        captured[0].get(profile_key("u1"))


def test_conflict_abort_is_retried(database: Database) -> None:
    calls = []

    def _work(txn):
        calls.append(1)
        if len(calls) < 3:
            raise ConflictAbort("database is locked")
        return len(calls)

    assert database.run_in_transaction(_work) == 3


def test_exhausted_retries_raise_transient_unavailable(database: Database) -> None:
    calls = []

    def _work(txn):
        calls.append(1)
        raise ConflictAbort("database is locked")

    with pytest.raises(TransientUnavailable):
        database.run_in_transaction(_work, retries=3)

    assert len(calls) == 4


def test_lock_contention_surfaces_as_transient_unavailable(tmp_path: Path) -> None:
    db_path = tmp_path / "locked.sqlite3"
    database = Database(db_path, transaction_retries=1, lock_timeout=0.05)
    database.initialize()

    blocker = sqlite3.connect(db_path, isolation_level=None)
    blocker.execute("BEGIN IMMEDIATE")
    try:
        with pytest.raises(TransientUnavailable):
            database.put(Profile(user_id="u1", display_name="alice", main_email="alice@ex.com"))
    finally:
        blocker.execute("ROLLBACK")
        blocker.close()

    database.put(Profile(user_id="u1", display_name="alice", main_email="alice@ex.com"))
    assert database.get(profile_key("u1")) is not None


def test_create_and_authenticate_api_key(database: Database) -> None:
    account, api_key = database.create_account("Owner@Example.com", user_id="u1")

    assert api_key.startswith("ccb_")
    assert account.email == "owner@example.com"
    retrieved = database.get_account_by_api_key(api_key)
    assert retrieved is not None
    assert retrieved.user_id == "u1"

    assert database.get_account_by_api_key("ccb_invalid_key") is None


def test_duplicate_accounts_are_rejected(database: Database) -> None:
    database.create_account("owner@example.com", user_id="u1")

    with pytest.raises(ValueError):
        database.create_account("owner@example.com", user_id="u2")
    with pytest.raises(ValueError):
        database.create_account("other@example.com", user_id="u1")
    with pytest.raises(ValueError):
        database.create_account("  ")


def test_rotate_api_key_invalidates_previous_key(database: Database) -> None:
    account, old_key = database.create_account("owner@example.com")

    refreshed, new_key = database.rotate_api_key(account.user_id)

    assert refreshed.user_id == account.user_id
    assert database.get_account_by_api_key(old_key) is None
    assert database.get_account_by_api_key(new_key) is not None
    assert [item.user_id for item in database.list_accounts()] == [account.user_id]

    with pytest.raises(ValueError):
        database.rotate_api_key("missing")


class _LockedCursor:
    def __iter__(self):
        raise sqlite3.OperationalError("database is locked")


class _LockedConnection:
    def __init__(self) -> None:
        self.closed = False

    def execute(self, sql, params=()):
        return _LockedCursor()

    def close(self) -> None:
        self.closed = True


def test_errors_while_reading_query_rows_are_translated(database: Database, monkeypatch) -> None:
    conn = _LockedConnection()
    monkeypatch.setattr(database, "_connect", lambda: conn)

    with pytest.raises(TransientUnavailable):
        list(database.query(CONFERENCE_KIND))

    assert conn.closed


def test_abandoned_query_iterator_releases_its_connection(database: Database, monkeypatch) -> None:
    database.put_multi([_conference(1), _conference(2)])
    opened = []
    connect = database._connect

    def _tracking_connect():
        conn = connect()
        opened.append(conn)
        return conn

    monkeypatch.setattr(database, "_connect", _tracking_connect)
    iterator = database.query(CONFERENCE_KIND)
    next(iterator)
    iterator.close()

    with pytest.raises(sqlite3.ProgrammingError):
        opened[0].execute("SELECT 1")


def test_schema_errors_are_not_reported_as_transient(tmp_path: Path) -> None:
    database = Database(tmp_path / "uninitialised.sqlite3")

    with pytest.raises(sqlite3.OperationalError, match="no such table"):
        database.get(profile_key("u1"))
    with pytest.raises(sqlite3.OperationalError, match="no such table"):
        database.put(Profile(user_id="u1", display_name="alice", main_email="alice@ex.com"))
    with pytest.raises(sqlite3.OperationalError, match="no such table"):
        list(database.query(PROFILE_KIND))
