"""
nfsbroker - state store for an NFS service broker.

This package persists provisioned service instances and their bindings,
with support for:
- A local JSON state file or a SQLite/PostgreSQL database
- Idempotent provision and bind requests with conflict detection
- One-way hashing of binding parameters before they are persisted
"""

__version__ = "0.1.0"

from nfsbroker.config import StoreConfig
from nfsbroker.errors import (
    BindingNotFoundError,
    BrokerError,
    ConfigurationError,
    InstanceNotFoundError,
    NotFoundError,
    RedactionError,
    SerializationError,
)
from nfsbroker.models import BindDetails, BindResource, ServiceInstance
from nfsbroker.persistence import (
    HASH_KEY,
    FileStore,
    SqlStore,
    Store,
    create_store,
)

__all__ = [
    "__version__",
    # Records
    "ServiceInstance",
    "BindDetails",
    "BindResource",
    # Stores
    "Store",
    "FileStore",
    "SqlStore",
    "create_store",
    "StoreConfig",
    "HASH_KEY",
    # Errors
    "BrokerError",
    "NotFoundError",
    "InstanceNotFoundError",
    "BindingNotFoundError",
    "SerializationError",
    "RedactionError",
    "ConfigurationError",
]
