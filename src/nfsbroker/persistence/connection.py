"""
Process-wide database connections.

The SQL store never opens connections itself. SQLite connections are
opened per thread and per database file, PostgreSQL pools per conninfo,
and both are owned by one ConnectionManager so that several stores on the
same database share them and tests can tear everything down at once.
"""

from __future__ import annotations

import sqlite3
import threading
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from psycopg_pool import ConnectionPool


class SingletonMeta(type):
    """
    Thread-safe metaclass for singleton pattern.

    Ensures only one instance of a class exists, even when accessed
    from multiple threads simultaneously.
    """

    _instances: dict[type, Any] = {}
    _lock: threading.Lock = threading.Lock()

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        if cls not in cls._instances:
            with cls._lock:
                # Double-check locking pattern
                if cls not in cls._instances:
                    cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]

    @classmethod
    def reset(mcs, cls: type) -> None:
        """Drop the singleton and close what it holds (for testing)."""
        with mcs._lock:
            instance = mcs._instances.pop(cls, None)
        if instance is not None and hasattr(instance, "close_all"):
            instance.close_all()


class ConnectionManager(metaclass=SingletonMeta):
    """
    Owner of every database connection in the process.

    SQLite connections are keyed by (thread, database path). They are
    opened with ``check_same_thread=False`` so that closing a database from
    one thread releases the connections every other thread opened on it.
    Each thread gets its own ":memory:" database, which is why the SQL
    store only runs on database files.

    PostgreSQL pools are keyed by conninfo and shared by all threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sqlite: dict[tuple[int, str], sqlite3.Connection] = {}
        self._pools: dict[str, ConnectionPool] = {}

    # ========== SQLite ==========

    def sqlite_connection(self, db_path: str, busy_timeout_ms: int = 30000) -> sqlite3.Connection:
        """
        Get the calling thread's connection to a SQLite database.

        File databases run in WAL mode so readers do not block the writer,
        and wait up to busy_timeout_ms for a lock before failing.

        Args:
            db_path: Database file path or ":memory:"
            busy_timeout_ms: Lock wait in milliseconds

        Returns:
            Connection returning sqlite3.Row rows
        """
        key = (threading.get_ident(), db_path)
        with self._lock:
            conn = self._sqlite.get(key)
            if conn is not None:
                return conn

            conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            if db_path != ":memory:":
                conn.execute("PRAGMA journal_mode = WAL")
                conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)}")
            self._sqlite[key] = conn
            return conn

    def close_sqlite(self, db_path: str) -> None:
        """Close every thread's connection to a SQLite database."""
        with self._lock:
            keys = [key for key in self._sqlite if key[1] == db_path]
            conns = [self._sqlite.pop(key) for key in keys]
        for conn in conns:
            conn.close()

    # ========== PostgreSQL ==========

    def postgres_pool(self, conninfo: str, min_size: int = 1, max_size: int = 10) -> ConnectionPool:
        """
        Get the shared pool for a PostgreSQL database, opening it on first use.

        Connections are checked before they are handed out, so a pool that
        outlives a database restart recovers without the caller retrying.

        Args:
            conninfo: libpq connection string
            min_size: Connections kept open
            max_size: Upper bound on open connections

        Returns:
            Open ConnectionPool returning dict rows
        """
        with self._lock:
            pool = self._pools.get(conninfo)
            if pool is not None:
                return pool

            from psycopg.rows import dict_row
            from psycopg_pool import ConnectionPool

            pool = ConnectionPool(
                conninfo,
                min_size=min_size,
                max_size=max_size,
                kwargs={"row_factory": dict_row},
                check=ConnectionPool.check_connection,
                name="nfsbroker",
                open=True,
            )
            self._pools[conninfo] = pool
            return pool

    def close_postgres(self, conninfo: str) -> None:
        """Close the pool for a PostgreSQL database, if one is open."""
        with self._lock:
            pool = self._pools.pop(conninfo, None)
        if pool is not None:
            pool.close()

    # ========== Shutdown ==========

    def close_all(self) -> None:
        """Close every SQLite connection and PostgreSQL pool."""
        with self._lock:
            conns = list(self._sqlite.values())
            pools = list(self._pools.values())
            self._sqlite.clear()
            self._pools.clear()
        for conn in conns:
            conn.close()
        for pool in pools:
            pool.close()


def get_connection_manager() -> ConnectionManager:
    """Get the singleton ConnectionManager instance."""
    return ConnectionManager()
