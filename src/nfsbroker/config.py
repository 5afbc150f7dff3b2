"""Store configuration.

Selects and parameterizes the store backend. A database driver selects the
SQL store; otherwise the file store is used with the configured state file.

Environment Variables:
    NFSBROKER_DB_DRIVER: Database driver (sqlite, postgres); empty selects the file store
    NFSBROKER_DB_USERNAME: Database user
    NFSBROKER_DB_PASSWORD: Database password
    NFSBROKER_DB_HOSTNAME: Database host
    NFSBROKER_DB_PORT: Database port
    NFSBROKER_DB_NAME: Database name (the database path for sqlite)
    NFSBROKER_DB_CA_CERT: PEM CA certificate for TLS connections
    NFSBROKER_STATE_FILE: Path of the file store's JSON state file
    NFSBROKER_STATE_FILE_MODE: Octal permission bits for the state file
    NFSBROKER_HASH_ROUNDS: bcrypt work factor for parameter hashes
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any

from nfsbroker.errors import ConfigurationError
from nfsbroker.persistence.file import DEFAULT_FILE_MODE
from nfsbroker.persistence.redaction import DEFAULT_HASH_ROUNDS

MIN_HASH_ROUNDS = 4
MAX_HASH_ROUNDS = 31


@dataclass
class StoreConfig:
    """Configuration for the broker state store.

    Attributes:
        db_driver: Database driver name; empty selects the file store
        db_username: Database user
        db_password: Database password
        db_hostname: Database host
        db_port: Database port
        db_name: Database name, or the database path for sqlite
        db_ca_cert: PEM CA certificate enabling verified TLS
        file_name: Path of the JSON state file for the file store
        file_mode: Permission bits used when the state file is created
        hash_rounds: bcrypt work factor for binding parameter hashes
    """

    db_driver: str = ""
    db_username: str = ""
    db_password: str = ""
    db_hostname: str = ""
    db_port: str = ""
    db_name: str = ""
    db_ca_cert: str = ""
    file_name: str = ""
    file_mode: int = DEFAULT_FILE_MODE
    hash_rounds: int = DEFAULT_HASH_ROUNDS

    @property
    def uses_database(self) -> bool:
        """True if a database driver is configured."""
        return bool(self.db_driver)

    @classmethod
    def from_env(cls) -> StoreConfig:
        """Load configuration from environment variables.

        Raises:
            ConfigurationError: If a numeric variable is malformed
        """
        return cls(
            db_driver=os.getenv("NFSBROKER_DB_DRIVER", ""),
            db_username=os.getenv("NFSBROKER_DB_USERNAME", ""),
            db_password=os.getenv("NFSBROKER_DB_PASSWORD", ""),
            db_hostname=os.getenv("NFSBROKER_DB_HOSTNAME", ""),
            db_port=os.getenv("NFSBROKER_DB_PORT", ""),
            db_name=os.getenv("NFSBROKER_DB_NAME", ""),
            db_ca_cert=os.getenv("NFSBROKER_DB_CA_CERT", ""),
            file_name=os.getenv("NFSBROKER_STATE_FILE", ""),
            file_mode=_parse_int_env("NFSBROKER_STATE_FILE_MODE", DEFAULT_FILE_MODE, base=8),
            hash_rounds=_parse_int_env("NFSBROKER_HASH_ROUNDS", DEFAULT_HASH_ROUNDS),
        )

    def apply_vcap_services(self, vcap_services: str, service_name: str) -> None:
        """Fill database settings from a bound database service.

        Args:
            vcap_services: The VCAP_SERVICES JSON document
            service_name: Service label to read credentials from

        Raises:
            ConfigurationError: If the document, service or port is invalid
        """
        try:
            services = json.loads(vcap_services)
        except ValueError as e:
            raise ConfigurationError("VCAP_SERVICES is not valid JSON", cause=e) from e

        entries = services.get(service_name) if isinstance(services, dict) else None
        if not entries or not isinstance(entries, list) or not isinstance(entries[0], dict):
            raise ConfigurationError(f"no {service_name!r} service found in VCAP_SERVICES")

        credentials: dict[str, Any] = entries[0].get("credentials") or {}
        self.db_hostname = credentials.get("host") or credentials.get("hostname") or ""
        self.db_port = _port_string(credentials.get("port"))
        self.db_name = credentials.get("db_name") or credentials.get("name") or ""
        self.db_username = credentials.get("username") or ""
        self.db_password = credentials.get("password") or ""
        if credentials.get("ca_cert"):
            self.db_ca_cert = credentials["ca_cert"]

    def validate(self) -> None:
        """Check the configuration is usable.

        Raises:
            ConfigurationError: If neither a database nor a state file is
                configured, or the hash work factor is out of range
        """
        if not self.db_driver and not self.file_name:
            raise ConfigurationError("either a state file or database parameters must be provided")
        if self.db_driver and not self.db_name:
            raise ConfigurationError("database name is required when a database driver is set")
        if not MIN_HASH_ROUNDS <= self.hash_rounds <= MAX_HASH_ROUNDS:
            raise ConfigurationError(
                f"hash rounds must be between {MIN_HASH_ROUNDS} and {MAX_HASH_ROUNDS}, got {self.hash_rounds}"
            )


def _port_string(port: Any) -> str:
    """Normalize a credentials port given as a JSON string or number."""
    if port is None:
        return ""
    if isinstance(port, bool):
        raise ConfigurationError(f"invalid database port: {port!r}")
    if isinstance(port, int):
        return str(port)
    if isinstance(port, str):
        return port
    raise ConfigurationError(f"invalid database port: {port!r}")


def _parse_int_env(name: str, default: int, base: int = 10) -> int:
    """Parse integer from environment variable.

    Raises:
        ConfigurationError: If the variable is set but not an integer
    """
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value, base)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}", cause=e) from e


_default_store_config: StoreConfig | None = None


def get_store_config() -> StoreConfig:
    """Get the default StoreConfig, loading from environment on first call."""
    global _default_store_config
    if _default_store_config is None:
        _default_store_config = StoreConfig.from_env()
    return _default_store_config


def reset_store_config() -> None:
    """Reset the store config singleton. Useful for testing."""
    global _default_store_config
    _default_store_config = None
