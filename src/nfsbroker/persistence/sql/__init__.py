"""SQL persistence package."""

from nfsbroker.persistence.sql.store import SqlStore
from nfsbroker.persistence.sql.variant import (
    PostgresVariant,
    SqliteVariant,
    SqlVariant,
    variant_for,
)

__all__ = [
    "SqlStore",
    "SqlVariant",
    "SqliteVariant",
    "PostgresVariant",
    "variant_for",
]
