# SQLite + lock + increment atómico + lecturas ordenadas
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from threading import RLock
from typing import Any, Callable, TypeVar

from hits_badge.api.services import metrics
from hits_badge.api.storage.errors import StorageOperationFailed, StorageUnavailable

T = TypeVar("T")

MEMORY_PATH = ":memory:"

_LOGGER = logging.getLogger("hits_badge.storage")

_SCHEMA_SQL = (
    "CREATE TABLE IF NOT EXISTS counts ("
    "user TEXT NOT NULL, "
    "repo TEXT NOT NULL, "
    "count INTEGER NOT NULL, "
    "PRIMARY KEY (user, repo), "
    "CHECK (user <> '' AND repo <> ''))"
)
_UPSERT_SQL = (
    "INSERT INTO counts (user, repo, count) VALUES (?, ?, 1) "
    "ON CONFLICT (user, repo) DO UPDATE SET count = count + 1"
)
_SELECT_ONE_SQL = "SELECT count FROM counts WHERE user = ? AND repo = ?"
_SCAN_ALL_SQL = "SELECT user, repo, count FROM counts ORDER BY user, repo"
_SCAN_USER_SQL = "SELECT user, repo, count FROM counts WHERE user = ? ORDER BY user, repo"


@dataclass(frozen=True)
class RepoCount:
    repo: str
    count: int


@dataclass(frozen=True)
class UserRepoCount:
    user: str
    repo: str
    count: int


class CounterStore:
    """
    Dueño exclusivo de la tabla `counts` (user, repo) -> count.

    - Una sola conexión SQLite de larga vida, compartida entre threads y
      protegida por un RLock (sqlite3 no permite uso concurrente de la conexión).
    - `increment_and_get` toma el lock de escritura de SQLite (BEGIN IMMEDIATE)
      antes de leer nada: dos incrementos sobre la misma key nunca ven el mismo
      valor "antes".
    - Sin caché en memoria: cada lectura va a disco.
    """

    def __init__(self, db_path: str | Path, *, busy_timeout_s: float = 5.0) -> None:
        self._db_path = str(db_path)
        self._busy_timeout_s = max(0.0, busy_timeout_s)
        self._lock = RLock()
        self._conn: sqlite3.Connection | None = None

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def is_memory(self) -> bool:
        return self._db_path == MEMORY_PATH

    def initialize(self) -> None:
        """Abre la conexión y asegura el esquema. Idempotente."""
        with self._lock:
            try:
                if self._conn is None:
                    target = self._db_path
                    if not self.is_memory:
                        path = Path(self._db_path).expanduser().resolve()
                        path.parent.mkdir(parents=True, exist_ok=True)
                        target = str(path)
                    conn = sqlite3.connect(
                        target,
                        timeout=self._busy_timeout_s,
                        isolation_level=None,
                        check_same_thread=False,
                    )
                    if not self.is_memory:
                        conn.execute("PRAGMA journal_mode=WAL")
                    self._conn = conn
                self._conn.execute(_SCHEMA_SQL)
            except (sqlite3.Error, OSError) as exc:
                metrics.inc("storage_errors_total", 1)
                raise StorageUnavailable(f"cannot open counter store {self._db_path!r}: {exc}") from exc

        _LOGGER.info("counter store ready", extra={"db_path": self._db_path})

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            try:
                self._conn.close()
            finally:
                self._conn = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageUnavailable("counter store is not initialized")
        return self._conn

    def _run(self, op: str, fn: Callable[[sqlite3.Connection], T]) -> T:
        with self._lock:
            conn = self._connection()
            try:
                return fn(conn)
            except sqlite3.Error as exc:
                metrics.inc("storage_errors_total", 1)
                _LOGGER.warning("storage operation failed", extra={"op": op, "error": repr(exc)})
                raise StorageOperationFailed(f"{op} failed: {exc}") from exc

    def increment_and_get(self, user: str, repo: str) -> int:
        """Suma 1 al contador (lo crea a 1 si no existe) y devuelve el nuevo valor."""
        if not user or not repo:
            raise ValueError(f"user and repo must be non-empty, got {user!r}/{repo!r}")

        def _tx(conn: sqlite3.Connection) -> int:
            conn.execute("BEGIN IMMEDIATE")
            try:
                conn.execute(_UPSERT_SQL, (user, repo))
                row = conn.execute(_SELECT_ONE_SQL, (user, repo)).fetchone()
                if row is None:
                    raise sqlite3.IntegrityError(f"counter vanished after upsert: {user}/{repo}")
                conn.execute("COMMIT")
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            return int(row[0])

        count = self._run("increment", _tx)
        metrics.inc("counter_increments_total", 1)
        if count == 1:
            metrics.inc("counter_created_total", 1)
            _LOGGER.info("user/repo not in db: %s/%s", user, repo)
        return count

    def get(self, user: str, repo: str) -> int:
        """Lectura pura. Una key nunca incrementada vale 0."""

        def _read(conn: sqlite3.Connection) -> int:
            row = conn.execute(_SELECT_ONE_SQL, (user, repo)).fetchone()
            return 0 if row is None else int(row[0])

        return self._run("get", _read)

    def scan(self, user: str | None = None) -> list[UserRepoCount]:
        """
        Filas ordenadas por (user, repo).

        Se materializan completas antes de devolver: un fallo a mitad del
        recorrido no entrega resultados parciales.
        """

        def _read(conn: sqlite3.Connection) -> list[UserRepoCount]:
            params: tuple[Any, ...] = ()
            sql = _SCAN_ALL_SQL
            if user is not None:
                sql, params = _SCAN_USER_SQL, (user,)
            rows = conn.execute(sql, params).fetchall()
            return [UserRepoCount(user=str(u), repo=str(r), count=int(c)) for u, r, c in rows]

        return self._run("scan", _read)

    def ping(self) -> bool:
        try:
            return self._run("ping", lambda conn: conn.execute("SELECT 1").fetchone() == (1,))
        except (StorageOperationFailed, StorageUnavailable):
            return False
