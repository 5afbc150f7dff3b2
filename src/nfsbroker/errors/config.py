"""Configuration errors."""

from __future__ import annotations

from nfsbroker.error_codes import ErrorCode
from nfsbroker.errors.base import BrokerError


class ConfigurationError(BrokerError):
    """The store cannot be built from its configuration.

    Raised at startup, before any request is served: a missing state file
    and database, an unknown driver, a malformed port or environment value.
    """

    code: int = 104
    default_error_code = ErrorCode.CONFIGURATION_INVALID
