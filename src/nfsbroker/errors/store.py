"""Errors raised by Store backends."""

from __future__ import annotations

from nfsbroker.error_codes import ErrorCode
from nfsbroker.errors.base import BrokerError


class NotFoundError(BrokerError):
    """No record exists for the requested id.

    Raised by retrieve and delete. The conflict checks treat it as "no
    conflict" and never let it escape.
    """

    code: int = 200
    default_error_code = ErrorCode.NOT_FOUND
    kind: str = "record"

    def __init__(self, record_id: str, *, cause: Exception | None = None) -> None:
        super().__init__(f"{self.kind} {record_id} not found", cause=cause)
        self.record_id = record_id


class InstanceNotFoundError(NotFoundError):
    code: int = 201
    kind: str = "service instance"


class BindingNotFoundError(NotFoundError):
    code: int = 202
    kind: str = "service binding"


class SerializationError(BrokerError):
    """A record, its parameters or the state file is not valid JSON.

    Fatal for the request; nothing retries it.
    """

    code: int = 210
    default_error_code = ErrorCode.SERIALIZATION_FAILED


class RedactionError(BrokerError):
    """Binding parameters could not be hashed, so the binding was not stored."""

    code: int = 211
    default_error_code = ErrorCode.REDACTION_FAILED
