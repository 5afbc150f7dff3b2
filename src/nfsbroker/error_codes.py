"""
Semantic error codes for store failures.

The broker's HTTP layer does not care which backend failed or how; it
needs to know whether the record was missing, the request was bad or the
broker itself is broken. classify_error answers that for any exception,
including driver and I/O errors the store lets propagate unchanged.

Usage:
    from nfsbroker.error_codes import classify_error

    try:
        store.delete_binding_details(binding_id)
    except Exception as e:
        status = classify_error(e).http_status
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Semantic error codes for categorizing exceptions."""

    UNKNOWN = "UNKNOWN"
    SYSTEM_ERROR = "SYSTEM_ERROR"

    # Record lookups
    NOT_FOUND = "NOT_FOUND"

    # Encoding and hashing
    SERIALIZATION_FAILED = "SERIALIZATION_FAILED"
    REDACTION_FAILED = "REDACTION_FAILED"

    # File I/O and database drivers
    STORAGE_ERROR = "STORAGE_ERROR"

    CONFIGURATION_INVALID = "CONFIGURATION_INVALID"

    @property
    def http_status(self) -> int:
        """Suggested HTTP status for a broker API response."""
        if self is ErrorCode.NOT_FOUND:
            return 404
        if self is ErrorCode.STORAGE_ERROR:
            return 503
        return 500


# Modules whose exceptions are database driver failures
_DRIVER_MODULES = ("sqlite3", "psycopg", "psycopg_pool")


def error_chain(error: BaseException) -> list[BaseException]:
    """List an exception and its ``__cause__`` ancestors, root cause first.

    Example:
        try:
            json.loads("{")
        except ValueError as e:
            wrapped = SerializationError("bad state file", cause=e)
            wrapped.__cause__ = e
        error_chain(wrapped)  # [JSONDecodeError(...), wrapped]
    """
    chain = [error]
    seen = {id(error)}
    cause = error.__cause__
    while cause is not None and id(cause) not in seen:
        chain.append(cause)
        seen.add(id(cause))
        cause = cause.__cause__
    return chain[::-1]


def find_in_chain(error: BaseException, error_type: type[BaseException]) -> BaseException | None:
    """Return the exception closest to the root cause that is an error_type."""
    return next((exc for exc in error_chain(error) if isinstance(exc, error_type)), None)


def _classify_one(error: BaseException) -> ErrorCode | None:
    code = getattr(error, "error_code", None)
    if isinstance(code, ErrorCode):
        return code

    name = type(error).__name__.lower()
    module = (type(error).__module__ or "").lower()

    # JSONDecodeError and UnicodeDecodeError are ValueErrors, so match by name
    if "json" in name or "decode" in name or "encode" in name:
        return ErrorCode.SERIALIZATION_FAILED
    if isinstance(error, OSError) or module.startswith(_DRIVER_MODULES):
        return ErrorCode.STORAGE_ERROR
    if "config" in name or "environment" in name:
        return ErrorCode.CONFIGURATION_INVALID
    if "notfound" in name or "not_found" in name:
        return ErrorCode.NOT_FOUND
    return None


def classify_error(error: BaseException) -> ErrorCode:
    """Map any exception to an ErrorCode.

    The exception itself is classified first; if nothing about it is
    recognized, its causes are tried from the nearest outward.

    Args:
        error: The exception to classify

    Returns:
        The most specific ErrorCode found, or ErrorCode.UNKNOWN
    """
    for exc in reversed(error_chain(error)):
        code = _classify_one(exc)
        if code is not None:
            return code
    return ErrorCode.UNKNOWN
