"""Shared pytest fixtures for parameterized backend testing."""

from collections.abc import Generator
from pathlib import Path

import pytest

from nfsbroker.config import reset_store_config
from nfsbroker.models import BindDetails, BindResource, ServiceInstance
from nfsbroker.persistence.connection import ConnectionManager, SingletonMeta
from nfsbroker.persistence.file import FileStore
from nfsbroker.persistence.redaction import ParameterHasher
from nfsbroker.persistence.sql import PostgresVariant, SqliteVariant, SqlStore
from nfsbroker.persistence.sql import queries
from nfsbroker.persistence.store import Store


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset singleton ConnectionManager and config between tests for isolation."""
    yield
    SingletonMeta.reset(ConnectionManager)
    reset_store_config()


@pytest.fixture
def hasher() -> ParameterHasher:
    """Cheapest bcrypt work factor, keeps the suite fast."""
    return ParameterHasher(rounds=4)


# =============================================================================
# Sample Records
# =============================================================================


@pytest.fixture
def instance() -> ServiceInstance:
    return ServiceInstance(
        share="nfs-server:/export/vol1",
        service_id="service_123",
        plan_id="plan_123",
        organization_guid="org_123",
        space_guid="space_123",
    )


@pytest.fixture
def binding() -> BindDetails:
    return BindDetails(
        app_guid="app_123",
        plan_id="plan_123",
        service_id="service_123",
        bind_resource=BindResource(app_guid="app_123", route="binding-route"),
        parameters={"uid": "1000", "gid": "1000", "secret": "don't tell"},
    )


# =============================================================================
# PostgreSQL Container (Session-Scoped)
# =============================================================================


@pytest.fixture(scope="session")
def postgres_url() -> Generator[str, None, None]:
    """Start PostgreSQL container once per test session, skip without Docker."""
    postgres_module = pytest.importorskip("testcontainers.postgres")
    container = postgres_module.PostgresContainer("postgres:15")
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"PostgreSQL container unavailable: {e}")
    try:
        url = container.get_connection_url()
        # testcontainers returns a SQLAlchemy style URL, libpq wants plain postgresql://
        if "+psycopg2" in url:
            url = url.replace("+psycopg2", "")
        yield str(url)
    finally:
        container.stop()


# =============================================================================
# Parameterized Backend Fixtures
# =============================================================================


@pytest.fixture(params=["file", "sqlite", pytest.param("postgres", marks=pytest.mark.postgres)])
def backend(request: pytest.FixtureRequest) -> str:
    """Parameterized backend - runs tests on the file store and both SQL engines."""
    return str(request.param)


@pytest.fixture
def store(
    backend: str,
    request: pytest.FixtureRequest,
    tmp_path: Path,
    hasher: ParameterHasher,
) -> Generator[Store, None, None]:
    """Create a store for the current backend."""
    if backend == "file":
        yield FileStore(tmp_path / "state.json", hasher=hasher)
    elif backend == "sqlite":
        sqlite_store = SqlStore(SqliteVariant(str(tmp_path / "broker.db")), hasher=hasher)
        yield sqlite_store
        sqlite_store.close()
    else:
        url = request.getfixturevalue("postgres_url")
        pg_store = SqlStore(PostgresVariant(url), hasher=hasher)
        yield pg_store
        with pg_store.variant.transaction() as conn:
            for table in queries.TABLES:
                conn.execute(f"DELETE FROM {table}")
        pg_store.close()
