"""
Per-engine SQL variants.

The SQL store issues the same statements against every engine. A variant
supplies what differs between engines: how to connect, how to run a
transaction, placeholder syntax and upsert syntax.
"""

from __future__ import annotations

import os
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from nfsbroker.errors import ConfigurationError
from nfsbroker.persistence.connection import get_connection_manager

if TYPE_CHECKING:
    from psycopg_pool import ConnectionPool

    from nfsbroker.config import StoreConfig


class SqlVariant(ABC):
    """Engine flavor used by SqlStore."""

    name: str = ""

    @abstractmethod
    def connect(self) -> None:
        """Open the connection and verify it works."""
        pass

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """
        Run statements in one transaction.

        Yields a connection exposing ``execute(query, params)`` that returns
        a cursor. Commits on success, rolls back on error.
        """
        yield None

    @abstractmethod
    def flavorify(self, query: str) -> str:
        """Rewrite a query written with ``?`` placeholders for this engine."""
        pass

    @abstractmethod
    def upsert_query(self, table: str) -> str:
        """Insert-or-overwrite statement for an (id, value) table."""
        pass

    def close(self) -> None:
        """Release connections."""
        return None


class SqliteVariant(SqlVariant):
    """
    SQLite flavor.

    Uses native sqlite3 with one connection per thread from the shared
    ConnectionManager. Closing the variant closes every thread's
    connection to the database.

    The database must be a file: an in-memory database is private to the
    connection that opened it, so other threads would not see the tables.
    """

    name = "sqlite"

    def __init__(self, db_path: str, busy_timeout_ms: int = 30000) -> None:
        """
        Raises:
            ConfigurationError: If db_path is empty or ":memory:"
        """
        if not db_path or db_path == ":memory:":
            raise ConfigurationError(f"sqlite store needs a database file, got {db_path!r}")
        self.db_path = db_path
        self.busy_timeout_ms = busy_timeout_ms
        self._manager = get_connection_manager()

    @classmethod
    def from_config(cls, config: StoreConfig) -> SqliteVariant:
        """Build from store configuration; db_name is the database path."""
        return cls(db_path=config.db_name)

    def _get_connection(self) -> sqlite3.Connection:
        return self._manager.sqlite_connection(self.db_path, self.busy_timeout_ms)

    def connect(self) -> None:
        self._get_connection().execute("SELECT 1")

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_connection()
        with conn:
            yield conn

    def flavorify(self, query: str) -> str:
        return query

    def upsert_query(self, table: str) -> str:
        return f"INSERT OR REPLACE INTO {table} (id, value) VALUES (?, ?)"

    def close(self) -> None:
        self._manager.close_sqlite(self.db_path)


class PostgresVariant(SqlVariant):
    """
    PostgreSQL flavor.

    Uses psycopg 3 with a connection pool from the shared ConnectionManager.
    Rows are returned as dicts.
    """

    name = "postgres"

    def __init__(self, conninfo: str, ca_cert: str | None = None) -> None:
        """
        Args:
            conninfo: libpq connection string
            ca_cert: PEM-encoded CA certificate; enables verify-full TLS
        """
        self._ca_cert_path: str | None = None
        if ca_cert:
            from psycopg.conninfo import make_conninfo

            self._ca_cert_path = self._write_ca_cert(ca_cert)
            conninfo = make_conninfo(conninfo, sslmode="verify-full", sslrootcert=self._ca_cert_path)
        self.conninfo = conninfo
        self._manager = get_connection_manager()
        self._pool: ConnectionPool | None = None

    @classmethod
    def from_config(cls, config: StoreConfig) -> PostgresVariant:
        """Build from store configuration."""
        from psycopg.conninfo import make_conninfo

        params = {
            "host": config.db_hostname,
            "port": config.db_port,
            "user": config.db_username,
            "password": config.db_password,
            "dbname": config.db_name,
        }
        conninfo = make_conninfo(**{k: v for k, v in params.items() if v})
        return cls(conninfo, ca_cert=config.db_ca_cert or None)

    @staticmethod
    def _write_ca_cert(ca_cert: str) -> str:
        fd, path = tempfile.mkstemp(prefix="nfsbroker-ca-", suffix=".pem")
        with os.fdopen(fd, "w") as f:
            f.write(ca_cert)
        return path

    def _get_pool(self) -> ConnectionPool:
        if self._pool is None:
            self._pool = self._manager.postgres_pool(self.conninfo)
        return self._pool

    def connect(self) -> None:
        with self._get_pool().connection() as conn:
            conn.execute("SELECT 1")

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        with self._get_pool().connection() as conn:
            with conn.transaction():
                yield conn

    def flavorify(self, query: str) -> str:
        return query.replace("?", "%s")

    def upsert_query(self, table: str) -> str:
        return (
            f"INSERT INTO {table} (id, value) VALUES (%s, %s) "
            "ON CONFLICT (id) DO UPDATE SET value = EXCLUDED.value"
        )

    def close(self) -> None:
        self._manager.close_postgres(self.conninfo)
        self._pool = None
        if self._ca_cert_path is not None:
            try:
                os.remove(self._ca_cert_path)
            except FileNotFoundError:
                pass
            self._ca_cert_path = None


_VARIANTS: dict[str, type[SqliteVariant] | type[PostgresVariant]] = {
    "sqlite": SqliteVariant,
    "sqlite3": SqliteVariant,
    "postgres": PostgresVariant,
    "postgresql": PostgresVariant,
}


def variant_for(config: StoreConfig) -> SqlVariant:
    """
    Select the SQL variant named by the configured database driver.

    Raises:
        ConfigurationError: If the driver is not supported
    """
    driver = config.db_driver.lower()
    if driver not in _VARIANTS:
        raise ConfigurationError(
            f"unsupported database driver: {config.db_driver!r} "
            f"(expected one of {', '.join(sorted(_VARIANTS))})"
        )
    return _VARIANTS[driver].from_config(config)
