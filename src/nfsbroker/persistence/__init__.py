"""Persistence layer for service broker state."""

from nfsbroker.persistence.factory import create_store, detect_backend
from nfsbroker.persistence.file import DynamicState, FileStore
from nfsbroker.persistence.redaction import HASH_KEY, ParameterHasher
from nfsbroker.persistence.sql import PostgresVariant, SqliteVariant, SqlStore, SqlVariant
from nfsbroker.persistence.store import Store

__all__ = [
    # Abstract interface
    "Store",
    # Implementations
    "FileStore",
    "DynamicState",
    "SqlStore",
    # SQL engine flavors
    "SqlVariant",
    "SqliteVariant",
    "PostgresVariant",
    # Redaction
    "HASH_KEY",
    "ParameterHasher",
    # Factory functions
    "create_store",
    "detect_backend",
]
