"""
SQL-backed store.

Each instance and binding is one row keyed by its ID, with the full record
JSON-encoded in the value column. Every call goes to the database, so
there is no state to save or restore.
"""

from __future__ import annotations

import json
from typing import Any

from nfsbroker.errors import (
    BindingNotFoundError,
    InstanceNotFoundError,
    NotFoundError,
    SerializationError,
)
from nfsbroker.logging import get_logger
from nfsbroker.models import BindDetails, ServiceInstance
from nfsbroker.persistence.redaction import ParameterHasher, redact_binding_details
from nfsbroker.persistence.sql import queries
from nfsbroker.persistence.sql.variant import SqlVariant
from nfsbroker.persistence.store import Store

logger = get_logger(__name__)


def _encode(record: ServiceInstance | BindDetails) -> str:
    try:
        return json.dumps(record.to_dict())
    except (TypeError, ValueError) as e:
        raise SerializationError(f"failed to encode {type(record).__name__}", cause=e) from e


def _decode(value: Any) -> dict[str, Any]:
    if isinstance(value, (bytes, bytearray, memoryview)):
        value = bytes(value).decode("utf-8")
    try:
        data = json.loads(value)
    except (TypeError, ValueError) as e:
        raise SerializationError("failed to decode stored record", cause=e) from e
    if not isinstance(data, dict):
        raise SerializationError("stored record is not a JSON object")
    return data


class SqlStore(Store):
    """
    SQL implementation of Store.

    Works on any engine with a SqlVariant. Relies on the database for
    concurrency control; each create runs in its own transaction.
    """

    def __init__(
        self,
        variant: SqlVariant,
        hasher: ParameterHasher | None = None,
    ) -> None:
        """
        Connect and create the tables if they don't exist.

        The variant is closed if either step fails.

        Args:
            variant: Engine flavor to connect through
            hasher: Parameter hasher for binding redaction
        """
        super().__init__(hasher)
        self.variant = variant
        try:
            self.variant.connect()
            self._create_tables()
        except Exception:
            logger.error("sql-store-init-failed", variant=self.variant.name)
            self.variant.close()
            raise

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        with self.variant.transaction() as conn:
            for table in queries.TABLES:
                conn.execute(queries.create_table(table))
        logger.info("sql-store-ready", variant=self.variant.name)

    def _select(self, table: str, record_id: str) -> dict[str, Any] | None:
        with self.variant.transaction() as conn:
            row = conn.execute(self.variant.flavorify(queries.select_value(table)), (record_id,)).fetchone()
        if row is None:
            return None
        return _decode(row["value"])

    def _upsert(self, table: str, record_id: str, value: str) -> None:
        with self.variant.transaction() as conn:
            conn.execute(self.variant.upsert_query(table), (record_id, value))

    def _delete(self, table: str, record_id: str, not_found: type[NotFoundError]) -> None:
        with self.variant.transaction() as conn:
            cursor = conn.execute(self.variant.flavorify(queries.delete_row(table)), (record_id,))
            deleted = cursor.rowcount
        if deleted == 0:
            raise not_found(record_id)

    # ========== Durability ==========

    def restore(self, logger: Any = None) -> None:
        """Rows are durable per call; nothing to restore."""
        return None

    def save(self, logger: Any = None) -> None:
        """Rows are durable per call; nothing to save."""
        return None

    def cleanup(self) -> None:
        return None

    def close(self) -> None:
        """Release the variant's connections."""
        self.variant.close()

    def is_healthy(self) -> bool:
        """Run a trivial query against the database."""
        try:
            with self.variant.transaction() as conn:
                conn.execute("SELECT 1")
        except Exception as e:
            logger.warning("sql-store-unhealthy", variant=self.variant.name, error=str(e))
            return False
        return True

    # ========== Instance Operations ==========

    def retrieve_instance_details(self, instance_id: str) -> ServiceInstance:
        """Retrieve a service instance by ID."""
        data = self._select(queries.INSTANCES_TABLE, instance_id)
        if data is None:
            raise InstanceNotFoundError(instance_id)
        return ServiceInstance.from_dict(data)

    def create_instance_details(self, instance_id: str, details: ServiceInstance) -> None:
        """Store a service instance."""
        self._upsert(queries.INSTANCES_TABLE, instance_id, _encode(details))

    def delete_instance_details(self, instance_id: str) -> None:
        """Delete a service instance."""
        self._delete(queries.INSTANCES_TABLE, instance_id, InstanceNotFoundError)

    # ========== Binding Operations ==========

    def retrieve_binding_details(self, binding_id: str) -> BindDetails:
        """Retrieve a binding by ID."""
        data = self._select(queries.BINDINGS_TABLE, binding_id)
        if data is None:
            raise BindingNotFoundError(binding_id)
        return BindDetails.from_dict(data)

    def create_binding_details(self, binding_id: str, details: BindDetails) -> None:
        """Redact and store a binding in one transaction."""
        with self.variant.transaction() as conn:
            redacted = redact_binding_details(details, self.hasher)
            conn.execute(
                self.variant.upsert_query(queries.BINDINGS_TABLE),
                (binding_id, _encode(redacted)),
            )

    def delete_binding_details(self, binding_id: str) -> None:
        """Delete a binding."""
        self._delete(queries.BINDINGS_TABLE, binding_id, BindingNotFoundError)
