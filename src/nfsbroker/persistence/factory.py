"""
Factory functions for creating store backends.

Selects the SQL store when a database driver is configured and the file
store otherwise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nfsbroker.config import StoreConfig
    from nfsbroker.persistence.store import Store


def detect_backend(config: StoreConfig) -> str:
    """
    Detect the store backend from a configuration.

    Args:
        config: Store configuration

    Returns:
        "sql" or "file"

    Examples:
        detect_backend(StoreConfig(db_driver="postgres", db_name="broker"))  # "sql"
        detect_backend(StoreConfig(file_name="/var/vcap/store/nfsbroker/state.json"))  # "file"
    """
    if config.uses_database:
        return "sql"
    return "file"


def create_store(config: StoreConfig | None = None) -> Store:
    """
    Create a store based on the configuration.

    Args:
        config: Store configuration; loaded from the environment if omitted

    Returns:
        Store: SQL or file store instance

    Raises:
        ConfigurationError: If the configuration is invalid

    Examples:
        # File store
        store = create_store(StoreConfig(file_name="/var/vcap/store/state.json"))
        store.restore()

        # PostgreSQL
        store = create_store(
            StoreConfig(
                db_driver="postgres",
                db_hostname="db.internal",
                db_port="5432",
                db_name="nfsbroker",
                db_username="broker",
                db_password="secret",
            )
        )
    """
    from nfsbroker.config import get_store_config
    from nfsbroker.logging import get_logger
    from nfsbroker.persistence.redaction import ParameterHasher

    config = config or get_store_config()
    config.validate()
    hasher = ParameterHasher(rounds=config.hash_rounds)
    backend = detect_backend(config)

    get_logger(__name__).info("creating-store", backend=backend, driver=config.db_driver or None)

    if backend == "sql":
        from nfsbroker.persistence.sql import SqlStore, variant_for

        return SqlStore(variant_for(config), hasher=hasher)
    else:
        from nfsbroker.persistence.file import FileStore

        return FileStore(config.file_name, file_mode=config.file_mode, hasher=hasher)
