"""SQLite-backed entity store for profiles, conferences and API accounts."""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import secrets
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple, TypeVar, Union

from .errors import ConflictAbort, TransientUnavailable
from .keys import CONFERENCE_KIND, PROFILE_KIND, Key
from .models import Account, Conference, Profile, TeeShirtSize

logger = logging.getLogger("conference_central.database")

Entity = Union[Profile, Conference]
T = TypeVar("T")

DEFAULT_TRANSACTION_RETRIES = 3
DEFAULT_LOCK_TIMEOUT = 5.0

EQUALITY_OPERATOR = "="
INEQUALITY_OPERATORS = frozenset({">", ">=", "<", "<="})

# SQLite caps the number of bound parameters per statement.
_MAX_BATCH = 400


class InvalidQueryError(ValueError):
    """Raised when a query combines filters or orderings the store cannot serve."""


class Filter(NamedTuple):
    name: str
    operator: str
    value: object


class _KindSchema(NamedTuple):
    table: str
    columns: Dict[str, str]
    key_columns: Tuple[str, ...]
    # Repeated properties, matched by membership: property -> (table, column).
    repeated: Dict[str, Tuple[str, str]]


_SCHEMAS: Dict[str, _KindSchema] = {
    PROFILE_KIND: _KindSchema(
        table="profiles",
        columns={
            "user_id": "user_id",
            "display_name": "display_name",
            "main_email": "main_email",
            "tee_shirt_size": "tee_shirt_size",
        },
        key_columns=("user_id",),
        repeated={},
    ),
    CONFERENCE_KIND: _KindSchema(
        table="conferences",
        columns={
            "conference_id": "conference_id",
            "organizer_user_id": "organizer_user_id",
            "name": "name",
            "description": "description",
            "city": "city",
            "start_date": "start_date",
            "end_date": "end_date",
            "month": "month",
            "max_attendees": "max_attendees",
            "seats_available": "seats_available",
        },
        key_columns=("organizer_user_id", "conference_id"),
        repeated={"topics": ("conference_topics", "topic")},
    ),
}


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the application database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "conference.sqlite3").resolve(strict=False)


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _serialize_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _generate_api_key() -> str:
    return "ccb_" + secrets.token_urlsafe(32)


def _hash_api_key(api_key: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", api_key.encode("utf-8"), salt, 600_000)


def _is_lock_error(exc: sqlite3.OperationalError) -> bool:
    message = str(exc).lower()
    return "locked" in message or "busy" in message


def _is_schema_error(exc: sqlite3.OperationalError) -> bool:
    message = str(exc).lower()
    return message.startswith(("no such table", "no such column", "table ")) or "syntax error" in message


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Map SQLite operational errors onto store errors.

    Lock contention becomes :class:`ConflictAbort`. Schema and SQL errors
    propagate unchanged. Other failures, such as disk I/O errors, become
    :class:`TransientUnavailable`.
    """

    try:
        yield
    except sqlite3.OperationalError as exc:
        if _is_lock_error(exc):
            raise ConflictAbort(str(exc)) from exc
        if _is_schema_error(exc):
            raise
        raise TransientUnavailable(f"Entity store unavailable: {exc}") from exc


@contextmanager
def _translate_read_errors() -> Iterator[None]:
    # Reads outside a transaction are not retried, so contention is reported as unavailable.
    try:
        with _translate_errors():
            yield
    except ConflictAbort as exc:
        raise TransientUnavailable(f"Entity store busy: {exc}") from exc


# ----------------------------------------------------------------------
# Row mapping
# ----------------------------------------------------------------------
def _row_to_profile(row: sqlite3.Row) -> Profile:
    return Profile(
        user_id=str(row["user_id"]),
        display_name=row["display_name"],
        main_email=row["main_email"],
        tee_shirt_size=TeeShirtSize(row["tee_shirt_size"]),
        conference_keys_to_attend=list(json.loads(row["conference_keys_to_attend"])),
    )


def _row_to_conference(row: sqlite3.Row) -> Conference:
    return Conference(
        conference_id=int(row["conference_id"]),
        organizer_user_id=str(row["organizer_user_id"]),
        name=str(row["name"]),
        description=row["description"],
        city=row["city"],
        topics=list(json.loads(row["topics"])),
        start_date=_parse_date(row["start_date"]),
        end_date=_parse_date(row["end_date"]),
        month=int(row["month"]),
        max_attendees=int(row["max_attendees"]),
        seats_available=int(row["seats_available"]),
    )


_LOADERS: Dict[str, Callable[[sqlite3.Row], Entity]] = {
    PROFILE_KIND: _row_to_profile,
    CONFERENCE_KIND: _row_to_conference,
}


def _schema_for(kind: str) -> _KindSchema:
    try:
        return _SCHEMAS[kind]
    except KeyError as exc:
        raise ValueError(f"Unknown entity kind '{kind}'") from exc


def _key_values(key: Key) -> Tuple[object, ...]:
    if key.kind == PROFILE_KIND and key.parent is None:
        return (key.id,)
    if key.kind == CONFERENCE_KIND and key.parent is not None and key.parent.kind == PROFILE_KIND:
        return (key.parent.id, key.id)
    raise ValueError(f"Unsupported key path: {key.pairs()!r}")


def _row_key(kind: str, row: sqlite3.Row) -> Tuple[object, ...]:
    return tuple(row[column] for column in _schema_for(kind).key_columns)


def _build_query(
    kind: str,
    filters: Sequence[Filter],
    order: Sequence[str],
    ancestor: Optional[Key],
) -> Tuple[str, List[object]]:
    schema = _schema_for(kind)
    clauses: List[str] = []
    params: List[object] = []

    if ancestor is not None:
        if ancestor.kind != PROFILE_KIND or ancestor.parent is not None:
            raise InvalidQueryError(f"Unsupported ancestor key: {ancestor.pairs()!r}")
        clauses.append(f"{schema.key_columns[0]} = ?")
        params.append(ancestor.id)

    inequality_field: Optional[str] = None
    for flt in filters:
        if flt.operator != EQUALITY_OPERATOR and flt.operator not in INEQUALITY_OPERATORS:
            raise InvalidQueryError(f"Unsupported operator '{flt.operator}'")

        if flt.name in schema.repeated:
            if flt.operator != EQUALITY_OPERATOR:
                raise InvalidQueryError(f"Only equality filters are supported on '{flt.name}'")
            repeated_table, repeated_column = schema.repeated[flt.name]
            key_match = " AND ".join(f"r.{column} = {schema.table}.{column}" for column in schema.key_columns)
            clauses.append(
                f"EXISTS (SELECT 1 FROM {repeated_table} r "
                f"WHERE {key_match} AND r.{repeated_column} = ?)"
            )
            params.append(flt.value)
            continue

        column = schema.columns.get(flt.name)
        if column is None:
            raise InvalidQueryError(f"Unknown property '{flt.name}' for kind {kind}")
        if flt.operator in INEQUALITY_OPERATORS:
            if inequality_field is not None and inequality_field != flt.name:
                raise InvalidQueryError("Inequality filter is allowed on only one property")
            inequality_field = flt.name
        clauses.append(f"{column} {flt.operator} ?")
        params.append(flt.value)

    ordering = list(order)
    if inequality_field is not None:
        if not ordering:
            ordering = [inequality_field]
        elif ordering[0].lstrip("-") != inequality_field:
            raise InvalidQueryError(
                f"The first sort property must be the inequality property '{inequality_field}'"
            )

    order_terms: List[str] = []
    for item in ordering:
        descending = item.startswith("-")
        name = item.lstrip("-")
        column = schema.columns.get(name)
        if column is None:
            raise InvalidQueryError(f"Cannot order by '{name}' for kind {kind}")
        order_terms.append(f"{column} {'DESC' if descending else 'ASC'}")
    order_terms.extend(f"{column} ASC" for column in schema.key_columns)

    sql = f"SELECT * FROM {schema.table}"
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    sql += " ORDER BY " + ", ".join(order_terms)
    return sql, params


class Transaction:
    """Entity operations bound to one open SQLite connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._active = True

    def _require_active(self) -> sqlite3.Connection:
        if not self._active:
            raise RuntimeError("Transaction is no longer active")
        return self._conn

    def close(self) -> None:
        self._active = False

    def get(self, key: Key) -> Optional[Entity]:
        return self.get_multi([key])[0]

    def get_multi(self, keys: Sequence[Key]) -> List[Optional[Entity]]:
        """Load ``keys`` in one statement per kind; missing entities come back as ``None``."""

        conn = self._require_active()
        found: Dict[Tuple[str, Tuple[object, ...]], Entity] = {}
        by_kind: Dict[str, List[Tuple[object, ...]]] = {}
        for key in keys:
            values = _key_values(key)
            bucket = by_kind.setdefault(key.kind, [])
            if values not in bucket:
                bucket.append(values)

        for kind, wanted in by_kind.items():
            schema = _schema_for(kind)
            loader = _LOADERS[kind]
            match = " AND ".join(f"{column} = ?" for column in schema.key_columns)
            for start in range(0, len(wanted), _MAX_BATCH):
                chunk = wanted[start : start + _MAX_BATCH]
                where = " OR ".join(f"({match})" for _ in chunk)
                params = [value for values in chunk for value in values]
                with _translate_errors():
                    rows = conn.execute(f"SELECT * FROM {schema.table} WHERE {where}", params).fetchall()
                for row in rows:
                    found[(kind, _row_key(kind, row))] = loader(row)

        return [found.get((key.kind, _key_values(key))) for key in keys]

    def put(self, entity: Entity) -> Key:
        conn = self._require_active()
        with _translate_errors():
            if isinstance(entity, Profile):
                self._put_profile(conn, entity)
            elif isinstance(entity, Conference):
                self._put_conference(conn, entity)
            else:
                raise TypeError(f"Cannot store {type(entity).__name__}")
        return entity.key

    def put_multi(self, entities: Iterable[Entity]) -> List[Key]:
        return [self.put(entity) for entity in entities]

    def query(
        self,
        kind: str,
        filters: Sequence[Filter] = (),
        order: Sequence[str] = (),
        *,
        ancestor: Optional[Key] = None,
    ) -> List[Entity]:
        conn = self._require_active()
        sql, params = _build_query(kind, filters, order, ancestor)
        loader = _LOADERS[kind]
        with _translate_errors():
            rows = conn.execute(sql, params).fetchall()
        return [loader(row) for row in rows]

    def allocate_id(self, parent_key: Key, kind: str) -> int:
        conn = self._require_active()
        parent_path = parent_key.urlsafe()
        with _translate_errors():
            conn.execute(
                """
                INSERT INTO id_allocations (parent_path, kind, last_id)
                VALUES (?, ?, 1)
                ON CONFLICT(parent_path, kind) DO UPDATE SET last_id = last_id + 1
                """,
                (parent_path, kind),
            )
            row = conn.execute(
                "SELECT last_id FROM id_allocations WHERE parent_path = ? AND kind = ?",
                (parent_path, kind),
            ).fetchone()
        return int(row["last_id"])

    @staticmethod
    def _put_profile(conn: sqlite3.Connection, profile: Profile) -> None:
        conn.execute(
            """
            INSERT INTO profiles (user_id, display_name, main_email, tee_shirt_size, conference_keys_to_attend)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                display_name = excluded.display_name,
                main_email = excluded.main_email,
                tee_shirt_size = excluded.tee_shirt_size,
                conference_keys_to_attend = excluded.conference_keys_to_attend
            """,
            (
                profile.user_id,
                profile.display_name,
                profile.main_email,
                TeeShirtSize(profile.tee_shirt_size).value,
                json.dumps(list(profile.conference_keys_to_attend)),
            ),
        )

    @staticmethod
    def _put_conference(conn: sqlite3.Connection, conference: Conference) -> None:
        conn.execute(
            """
            INSERT INTO conferences (
                organizer_user_id, conference_id, name, description, city, topics,
                start_date, end_date, month, max_attendees, seats_available
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(organizer_user_id, conference_id) DO UPDATE SET
                name = excluded.name,
                description = excluded.description,
                city = excluded.city,
                topics = excluded.topics,
                start_date = excluded.start_date,
                end_date = excluded.end_date,
                month = excluded.month,
                max_attendees = excluded.max_attendees,
                seats_available = excluded.seats_available
            """,
            (
                conference.organizer_user_id,
                conference.conference_id,
                conference.name,
                conference.description,
                conference.city,
                json.dumps(list(conference.topics)),
                _serialize_date(conference.start_date),
                _serialize_date(conference.end_date),
                conference.month,
                conference.max_attendees,
                conference.seats_available,
            ),
        )
        conn.execute(
            "DELETE FROM conference_topics WHERE organizer_user_id = ? AND conference_id = ?",
            (conference.organizer_user_id, conference.conference_id),
        )
        conn.executemany(
            "INSERT OR IGNORE INTO conference_topics (organizer_user_id, conference_id, topic) VALUES (?, ?, ?)",
            [(conference.organizer_user_id, conference.conference_id, topic) for topic in conference.topics],
        )


class Database:
    """Keyed entity store on top of SQLite with serializable transactions."""

    def __init__(
        self,
        path: Path,
        *,
        transaction_retries: int = DEFAULT_TRANSACTION_RETRIES,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        if transaction_retries < 0:
            raise ValueError("transaction_retries must not be negative")
        _ensure_directory(path)
        self._path = path
        self._transaction_retries = transaction_retries
        self._lock_timeout = lock_timeout

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        # isolation_level=None: transactions are opened explicitly with BEGIN IMMEDIATE.
        conn = sqlite3.connect(
            self._path,
            timeout=self._lock_timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._connection() as conn:
            conn.execute("PRAGMA journal_mode = WAL")
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS accounts (
                    user_id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    api_key_prefix TEXT NOT NULL,
                    api_key_hash TEXT NOT NULL,
                    api_key_salt TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS profiles (
                    user_id TEXT PRIMARY KEY,
                    display_name TEXT,
                    main_email TEXT,
                    tee_shirt_size TEXT NOT NULL DEFAULT 'NOT_SPECIFIED',
                    conference_keys_to_attend TEXT NOT NULL DEFAULT '[]'
                );

                CREATE TABLE IF NOT EXISTS conferences (
                    organizer_user_id TEXT NOT NULL,
                    conference_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    description TEXT,
                    city TEXT,
                    topics TEXT NOT NULL DEFAULT '[]',
                    start_date TEXT,
                    end_date TEXT,
                    month INTEGER NOT NULL DEFAULT 0,
                    max_attendees INTEGER NOT NULL DEFAULT 0,
                    seats_available INTEGER NOT NULL DEFAULT 0,
                    PRIMARY KEY (organizer_user_id, conference_id),
                    CHECK (seats_available >= 0 AND seats_available <= max_attendees)
                );

                CREATE TABLE IF NOT EXISTS conference_topics (
                    organizer_user_id TEXT NOT NULL,
                    conference_id INTEGER NOT NULL,
                    topic TEXT NOT NULL,
                    PRIMARY KEY (organizer_user_id, conference_id, topic),
                    FOREIGN KEY (organizer_user_id, conference_id)
                        REFERENCES conferences (organizer_user_id, conference_id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS id_allocations (
                    parent_path TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    last_id INTEGER NOT NULL,
                    PRIMARY KEY (parent_path, kind)
                );

                CREATE INDEX IF NOT EXISTS idx_conferences_city ON conferences(city);
                CREATE INDEX IF NOT EXISTS idx_conferences_month ON conferences(month);
                CREATE INDEX IF NOT EXISTS idx_conference_topics_topic ON conference_topics(topic);
                CREATE INDEX IF NOT EXISTS idx_accounts_api_key_prefix ON accounts(api_key_prefix);
                """
            )

    # ------------------------------------------------------------------
    # Entity store
    # ------------------------------------------------------------------
    def get(self, key: Key) -> Optional[Entity]:
        return self.get_multi([key])[0]

    def get_multi(self, keys: Sequence[Key]) -> List[Optional[Entity]]:
        if not keys:
            return []
        with self._connection() as conn, _translate_read_errors():
            txn = Transaction(conn)
            try:
                return txn.get_multi(keys)
            finally:
                txn.close()

    def put(self, entity: Entity) -> Key:
        return self.put_multi([entity])[0]

    def put_multi(self, entities: Sequence[Entity]) -> List[Key]:
        return self.run_in_transaction(lambda txn: txn.put_multi(entities))

    def allocate_child_id(self, parent_key: Key, kind: str) -> Key:
        """Reserve a fresh integer id for a ``kind`` entity under ``parent_key``."""

        _schema_for(kind)
        new_id = self.run_in_transaction(lambda txn: txn.allocate_id(parent_key, kind))
        return Key(kind, new_id, parent=parent_key)

    def query(
        self,
        kind: str,
        filters: Sequence[Filter] = (),
        order: Sequence[str] = (),
        *,
        ancestor: Optional[Key] = None,
    ) -> Iterator[Entity]:
        """Return a lazy iterator over the entities of ``kind`` matching ``filters``.

        The iterator holds a connection open until it is exhausted or closed.
        """

        sql, params = _build_query(kind, filters, order, ancestor)
        return self._iterate(kind, sql, params)

    def _iterate(self, kind: str, sql: str, params: List[object]) -> Iterator[Entity]:
        loader = _LOADERS[kind]
        with self._connection() as conn, _translate_read_errors():
            for row in conn.execute(sql, params):
                yield loader(row)

    def run_in_transaction(self, fn: Callable[[Transaction], T], *, retries: Optional[int] = None) -> T:
        """Run ``fn`` inside a serializable transaction, retrying on lock contention.

        SQLite holds one write lock for the whole database, so a transaction
        may touch any number of entity groups. ``fn`` can run more than once
        and must not have side effects outside the transaction.
        """

        budget = self._transaction_retries if retries is None else retries
        attempt = 0
        while True:
            attempt += 1
            try:
                return self._run_once(fn)
            except ConflictAbort as exc:
                if attempt > budget:
                    logger.error("Transaction aborted after %s attempts: %s", attempt, exc)
                    raise TransientUnavailable(
                        "The entity store is busy; please retry the request"
                    ) from exc
                logger.warning("Transaction attempt %s aborted on contention; retrying", attempt)

    def _run_once(self, fn: Callable[[Transaction], T]) -> T:
        with self._connection() as conn:
            with _translate_errors():
                conn.execute("BEGIN IMMEDIATE")
            txn = Transaction(conn)
            try:
                result = fn(txn)
                with _translate_errors():
                    conn.execute("COMMIT")
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            finally:
                txn.close()
        return result

    # ------------------------------------------------------------------
    # Account management
    # ------------------------------------------------------------------
    def create_account(self, email: str, *, user_id: Optional[str] = None) -> Tuple[Account, str]:
        """Create a new account and return it along with the generated API key."""

        normalized_email = email.strip().lower()
        if not normalized_email:
            raise ValueError("Email must not be empty")
        resolved_user_id = (user_id or "").strip() or uuid.uuid4().hex

        created_at = _current_timestamp()
        api_key = _generate_api_key()
        salt = secrets.token_bytes(16)
        hash_bytes = _hash_api_key(api_key, salt)
        prefix = api_key[:8]

        with self._connection() as conn:
            try:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO accounts (user_id, email, api_key_prefix, api_key_hash, api_key_salt, created_at)
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (
                            resolved_user_id,
                            normalized_email,
                            prefix,
                            base64.b64encode(hash_bytes).decode("ascii"),
                            base64.b64encode(salt).decode("ascii"),
                            _serialize_datetime(created_at),
                        ),
                    )
            except sqlite3.IntegrityError as exc:
                raise ValueError("An account with that user id or email already exists") from exc

        account = Account(
            user_id=resolved_user_id,
            email=normalized_email,
            api_key_prefix=prefix,
            created_at=created_at,
        )
        logger.info("Created account %s <%s>", account.user_id, account.email)
        return account, api_key

    def get_account(self, user_id: str) -> Optional[Account]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM accounts WHERE user_id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_account(row)

    def list_accounts(self) -> List[Account]:
        with self._connection() as conn:
            rows = conn.execute("SELECT * FROM accounts ORDER BY created_at").fetchall()
        return [self._row_to_account(row) for row in rows]

    def get_account_by_api_key(self, api_key: str) -> Optional[Account]:
        prefix = api_key[:8]
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM accounts WHERE api_key_prefix = ?",
                (prefix,),
            ).fetchall()

        for row in rows:
            salt = base64.b64decode(row["api_key_salt"])
            expected_hash = base64.b64decode(row["api_key_hash"])
            calculated = _hash_api_key(api_key, salt)
            if hmac.compare_digest(expected_hash, calculated):
                return self._row_to_account(row)
        return None

    def rotate_api_key(self, user_id: str) -> Tuple[Account, str]:
        api_key = _generate_api_key()
        salt = secrets.token_bytes(16)
        hash_bytes = _hash_api_key(api_key, salt)
        prefix = api_key[:8]

        with self._connection() as conn:
            with conn:
                cursor = conn.execute(
                    """
                    UPDATE accounts
                       SET api_key_prefix = ?, api_key_hash = ?, api_key_salt = ?
                     WHERE user_id = ?
                    """,
                    (
                        prefix,
                        base64.b64encode(hash_bytes).decode("ascii"),
                        base64.b64encode(salt).decode("ascii"),
                        user_id,
                    ),
                )
            if cursor.rowcount == 0:
                raise ValueError("Account not found")

        refreshed = self.get_account(user_id)
        if refreshed is None:
            raise ValueError("Account not found")
        return refreshed, api_key

    def _row_to_account(self, row: sqlite3.Row) -> Account:
        return Account(
            user_id=str(row["user_id"]),
            email=str(row["email"]),
            api_key_prefix=str(row["api_key_prefix"]),
            created_at=_parse_datetime(str(row["created_at"])),
        )


__all__ = [
    "Database",
    "Filter",
    "InvalidQueryError",
    "Transaction",
    "resolve_database_path",
]
