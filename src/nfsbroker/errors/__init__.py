"""Broker store error hierarchy.

All error classes are re-exported here. Import from ``nfsbroker.errors``.
"""

from nfsbroker.errors.base import BrokerBaseException, BrokerError
from nfsbroker.errors.config import ConfigurationError
from nfsbroker.errors.store import (
    BindingNotFoundError,
    InstanceNotFoundError,
    NotFoundError,
    RedactionError,
    SerializationError,
)

__all__ = [
    "BindingNotFoundError",
    "BrokerBaseException",
    "BrokerError",
    "ConfigurationError",
    "InstanceNotFoundError",
    "NotFoundError",
    "RedactionError",
    "SerializationError",
]
