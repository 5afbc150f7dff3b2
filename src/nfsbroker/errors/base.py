"""Base exception hierarchy for the broker state store.

Two tiers:

1. BrokerBaseException - root of everything the store raises on purpose
2. BrokerError - failures callers are expected to handle

Subclasses pick their numeric ``code`` and ``default_error_code``; an
explicit ``error_code`` passed at raise time wins over the default.
"""

from __future__ import annotations

from nfsbroker.error_codes import ErrorCode


class BrokerBaseException(Exception):  # noqa: N818 - intentional base exception name
    """Base exception for all broker store errors.

    Attributes:
        code: Numeric error code for programmatic handling
        cause: Optional original exception that caused this error
    """

    code: int = 0
    default_error_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        cause: Exception | None = None,
        error_code: ErrorCode | None = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.cause = cause
        self._error_code = error_code

    @property
    def error_code(self) -> ErrorCode:
        """Semantic error code for routing the failure."""
        return self._error_code or self.default_error_code

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.code:
            parts.append(f"(code={self.code})")
        if self.cause:
            parts.append(f"caused by: {self.cause}")
        return " ".join(parts)


class BrokerError(BrokerBaseException):
    """Standard broker store error."""

    code: int = 100
    default_error_code = ErrorCode.SYSTEM_ERROR
